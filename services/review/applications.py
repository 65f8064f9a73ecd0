from __future__ import annotations

import logging
from collections.abc import Iterable

from core.errors import PersistenceError, RecordNotFound, ValidationError
from domain.lifecycle import allowed_next, ensure_transition
from domain.models import Application, ApplicationStatus
from services.observability.events import record_event
from services.persistence.base import RecordStore

logger = logging.getLogger(__name__)

TABLE = "applications"


class ApplicationReviewService:
    """Operator side of the Application lifecycle: list, move status, bulk delete."""

    def __init__(self, records: RecordStore) -> None:
        self.records = records

    def list_applications(self) -> list[Application]:
        rows = self.records.select(TABLE, order_by="created_at", descending=True)
        return [Application.model_validate(r) for r in rows]

    def get(self, app_id: str) -> Application:
        rows = self.records.select(TABLE, {"id": app_id})
        if not rows:
            raise RecordNotFound(f"application {app_id} not found")
        return Application.model_validate(rows[0])

    def allowed_transitions(self, app_id: str) -> list[ApplicationStatus]:
        return allowed_next(self.get(app_id).status)

    def change_status(
        self, app_id: str, target: ApplicationStatus | str, actor: str | None = None
    ) -> Application:
        """
        Single-record, single-field update. Concurrent edits are last-writer-wins:
        the transition is checked against the status read here.
        """
        current = self.get(app_id)
        new_status = ensure_transition(current.status, target)
        count = self.records.update(TABLE, {"id": app_id}, {"status": new_status.value})
        if count == 0:
            raise RecordNotFound(f"application {app_id} not found")
        record_event(
            "status_changed",
            application_id=app_id,
            previous=current.status.value,
            status=new_status.value,
            actor=actor,
        )
        return current.model_copy(update={"status": new_status})

    def bulk_delete(
        self, ids: Iterable[str], *, confirmed: bool, actor: str | None = None
    ) -> int:
        """Irreversible; refuses to run without an explicit confirmation."""
        wanted = sorted({str(i) for i in ids})
        if not confirmed:
            raise ValidationError("bulk delete must be confirmed", missing=["confirm"])
        if not wanted:
            return 0
        deleted = self.records.delete(TABLE, {"id": wanted})
        record_event("bulk_delete", requested=len(wanted), deleted=deleted, actor=actor)
        if deleted != len(wanted):
            raise PersistenceError(
                f"deleted {deleted} of {len(wanted)} application(s); "
                "reload the list to see which remain"
            )
        return deleted
