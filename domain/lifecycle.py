from __future__ import annotations

from core.errors import TransitionError
from domain.models import ApplicationStatus

P, R, C = ApplicationStatus.PENDING, ApplicationStatus.PROCESSING, ApplicationStatus.COMPLETED

# operator-triggered only; nothing moves on its own
TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    P: frozenset({R, C}),
    R: frozenset({P, C}),
    C: frozenset({R}),
}

INITIAL_STATUS = P


def _value(status: ApplicationStatus | str) -> str:
    return getattr(status, "value", status)


def allowed_next(current: ApplicationStatus | str) -> list[ApplicationStatus]:
    """Statuses an operator may move ``current`` to, in lifecycle order."""
    order = list(ApplicationStatus)
    return sorted(TRANSITIONS[ApplicationStatus(current)], key=order.index)


def can_transition(current: ApplicationStatus | str, target: ApplicationStatus | str) -> bool:
    try:
        return ApplicationStatus(target) in TRANSITIONS[ApplicationStatus(current)]
    except ValueError:
        return False


def ensure_transition(
    current: ApplicationStatus | str, target: ApplicationStatus | str
) -> ApplicationStatus:
    if not can_transition(current, target):
        raise TransitionError(
            f"cannot move application from '{_value(current)}' to '{_value(target)}'"
        )
    return ApplicationStatus(target)
