from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from core.errors import IntakeError
from domain.lifecycle import allowed_next
from domain.models import Application, ApplicationStatus, Session
from services.auth.gate import AdminSessionGate, GateState, SessionEvent
from services.review.applications import ApplicationReviewService

logger = logging.getLogger(__name__)


@dataclass
class Feedback:
    ok: bool
    message: str
    application_id: str | None = None


@dataclass
class DashboardState:
    gate: GateState = GateState.SIGNED_OUT
    applications: list[Application] = field(default_factory=list)
    selected: set[str] = field(default_factory=set)
    feedback: Optional[Feedback] = None


class DashboardController:
    """
    Admin dashboard state, independent of the UI toolkit rendering it.
    Application data is only fetched while the gate reports an admin.
    """

    def __init__(self, gate: AdminSessionGate, review: ApplicationReviewService) -> None:
        self.gate = gate
        self.review = review
        self.state = DashboardState()
        self._unsubscribe: Callable[[], None] | None = None

    def open(self) -> DashboardState:
        if self._unsubscribe is None:
            self._unsubscribe = self.gate.subscribe(self._on_session_change)
        return self.load()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_session_change(self, event: SessionEvent, session: Optional[Session]) -> None:
        logger.debug("dashboard saw %s", event.value)
        self.load()

    def _reset(self, gate: GateState) -> None:
        self.state.gate = gate
        self.state.applications = []
        self.state.selected.clear()

    def load(self) -> DashboardState:
        gate = self.gate.evaluate()
        if gate is not GateState.ADMIN:
            self._reset(gate)
            return self.state
        self.state.gate = gate
        try:
            self.state.applications = self.review.list_applications()
        except IntakeError as e:
            self.state.feedback = Feedback(False, e.message)
            return self.state
        present = {a.id for a in self.state.applications}
        self.state.selected &= present
        return self.state

    # -- session -------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> DashboardState:
        try:
            self.gate.sign_in(email, password)
        except IntakeError as e:
            self.state.feedback = Feedback(False, e.message)
            return self.state
        self.state.feedback = None
        return self.load() if self._unsubscribe is None else self.state

    def sign_out(self) -> DashboardState:
        self.gate.sign_out()
        self._reset(GateState.SIGNED_OUT)
        return self.state

    # -- selection -------------------------------------------------------------

    def toggle(self, app_id: str) -> None:
        if app_id in self.state.selected:
            self.state.selected.discard(app_id)
        else:
            self.state.selected.add(app_id)

    def select(self, ids) -> None:
        self.state.selected = set(ids)

    def clear_selection(self) -> None:
        self.state.selected.clear()

    # -- actions -------------------------------------------------------------

    def next_statuses(self, app: Application) -> list[ApplicationStatus]:
        return allowed_next(app.status)

    def change_status(self, app_id: str, target: ApplicationStatus | str) -> Feedback:
        try:
            actor = self.gate.require_admin()
            updated = self.review.change_status(app_id, target, actor=actor.email)
        except IntakeError as e:
            self.state.feedback = Feedback(False, e.message, app_id)
            self.load()
            return self.state.feedback
        self.state.applications = [
            updated if a.id == app_id else a for a in self.state.applications
        ]
        self.state.feedback = Feedback(True, f"status set to {updated.status.value}", app_id)
        return self.state.feedback

    def delete_selected(self, confirmed: bool) -> Feedback:
        ids = sorted(self.state.selected)
        if not ids:
            self.state.feedback = Feedback(False, "no applications selected")
            return self.state.feedback
        try:
            actor = self.gate.require_admin()
            deleted = self.review.bulk_delete(ids, confirmed=confirmed, actor=actor.email)
        except IntakeError as e:
            self.state.feedback = Feedback(False, e.message)
            if confirmed:
                self.state.selected.clear()
                self.load()
            return self.state.feedback
        self.state.selected.clear()
        self.load()
        self.state.feedback = Feedback(True, f"deleted {deleted} application(s)")
        return self.state.feedback
