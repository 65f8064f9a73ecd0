"""
Error taxonomy shared by the intake workflow, the review services and the API.

Every error carries a human-readable ``message`` that is safe to show to the
applicant or the operator.
"""

from __future__ import annotations


class IntakeError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(IntakeError):
    """Missing or malformed field/file, raised before any network effect."""

    def __init__(
        self,
        message: str,
        missing: list[str] | None = None,
        invalid: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.missing = list(missing or [])
        self.invalid = list(invalid or [])


class UploadError(IntakeError):
    """The document store rejected or failed to store a file."""


class PersistenceError(IntakeError):
    """A record insert/update/delete was rejected.

    ``written`` lists the ``(table, id)`` rows already committed for the
    current submission; they are left in place unless ``compensated`` is set.
    """

    def __init__(
        self,
        message: str,
        written: list[tuple[str, str]] | None = None,
        compensated: bool = False,
    ) -> None:
        super().__init__(message)
        self.written = list(written or [])
        self.compensated = compensated


class RecordNotFound(PersistenceError):
    pass


class NotificationError(IntakeError):
    """Non-fatal: logged, never surfaced to the applicant."""


class AuthError(IntakeError):
    """Bad credentials or no session."""


class AuthorizationError(IntakeError):
    """Authenticated, but not an admin."""


class TransitionError(IntakeError):
    """Requested status change is not in the transition table."""
