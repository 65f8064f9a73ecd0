"""
Submission workflow: one filled-out form in, durable rows plus a best-effort
email out.

Steps run strictly in sequence because later steps need the URLs and ids
produced by earlier ones:

    validate -> upload files -> insert row(s) -> notify

Nothing is written before validation and uploads succeed. The record store
offers no multi-row transaction, so a failing child insert leaves the rows
already written for the submission in place; they are listed on the raised
``PersistenceError`` and, when ``compensate`` is on, deleted again on a
best-effort basis.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from core.errors import NotificationError, PersistenceError, UploadError
from domain.forms import ApplicationForm, CompanyForm, content_type_of, validate_submission
from domain.lifecycle import INITIAL_STATUS
from domain.models import SubmissionResult
from domain.value_objects import StoredDocument, UploadedFile
from services.notifications.email import NotificationPayload, Notifier
from services.observability.events import record_event
from services.observability.metrics import timing_metric
from services.persistence.base import RecordStore, Row
from services.storage.documents import DocumentStore, object_name

logger = logging.getLogger(__name__)

DOCUMENT_LABELS = {"passport": "passport", "bill": "proof of address", "brp": "BRP"}


class SubmissionWorkflow:
    def __init__(
        self,
        records: RecordStore,
        documents: DocumentStore,
        notifier: Notifier,
        *,
        allowed_mime: set[str] | None = None,
        max_upload_bytes: int | None = None,
        compensate: bool = False,
    ) -> None:
        self.records = records
        self.documents = documents
        self.notifier = notifier
        self.allowed_mime = allowed_mime
        self.max_upload_bytes = max_upload_bytes
        self.compensate = compensate

    # -- public operations -------------------------------------------------

    def submit_application(
        self, data: Mapping[str, Any], files: Mapping[str, UploadedFile | None]
    ) -> SubmissionResult:
        """Flat Application shape: one row carrying scalars and both document URLs."""
        form: ApplicationForm = self._validate(ApplicationForm, data, files)
        stored = self._upload_all(files)
        urls = {d.slot: d.url for d in stored}

        row = form.model_dump()
        row["passport_url"] = urls["passport"]
        row["bill_url"] = urls["bill"]
        row["status"] = INITIAL_STATUS.value

        created = self._insert("applications", row, ledger=[])
        logger.info("application %s stored for %s", created["id"], form.company_name)

        notified = self._notify(
            NotificationPayload(
                kind="application",
                company_name=form.company_name,
                full_name=form.full_name,
                email=form.email,
                phone=form.phone,
                address=form.address,
                notes=form.notes,
                documents={DOCUMENT_LABELS[d.slot]: d.url for d in stored},
            ),
            record_id=created["id"],
        )
        return SubmissionResult(
            kind="application",
            record_id=created["id"],
            documents=urls,
            notified=notified,
        )

    def submit_company(
        self, data: Mapping[str, Any], files: Mapping[str, UploadedFile | None]
    ) -> SubmissionResult:
        """Company shape: parent row first, then each director and PSC referencing it."""
        form: CompanyForm = self._validate(CompanyForm, data, files)
        stored = self._upload_all(files)
        urls = {d.slot: d.url for d in stored}

        ledger: list[tuple[str, str]] = []
        company = self._insert(
            "companies",
            {
                "company_name": form.company_name,
                "office_address": form.office_address,
                "business_activity": form.business_activity,
            },
            ledger=ledger,
        )
        company_id = company["id"]

        child_ids: list[str] = []
        for i, director in enumerate(form.directors):
            row = director.model_dump()
            row["company_id"] = company_id
            row["passport_url"] = urls.get(f"directors.{i}.passport")
            row["brp_url"] = urls.get(f"directors.{i}.brp")
            child_ids.append(self._insert("directors", row, ledger=ledger)["id"])
        for psc in form.pscs:
            row = psc.model_dump()
            row["company_id"] = company_id
            child_ids.append(self._insert("pscs", row, ledger=ledger)["id"])

        logger.info(
            "company %s stored with %d director(s), %d psc(s)",
            company_id,
            len(form.directors),
            len(form.pscs),
        )
        notified = self._notify(
            NotificationPayload(
                kind="company registration",
                company_name=form.company_name,
                address=form.office_address,
                extra={
                    "Business activity": form.business_activity,
                    "Directors": str(len(form.directors)),
                    "PSCs": ", ".join(p.name for p in form.pscs) or "-",
                },
                documents={_document_label(d.slot): d.url for d in stored},
            ),
            record_id=company_id,
        )
        return SubmissionResult(
            kind="company",
            record_id=company_id,
            child_ids=child_ids,
            documents=urls,
            notified=notified,
        )

    # -- steps -------------------------------------------------------------

    def _validate(self, form_cls, data, files):
        return validate_submission(
            form_cls,
            data,
            files,
            allowed_mime=self.allowed_mime,
            max_bytes=self.max_upload_bytes,
        )

    def _upload_all(self, files: Mapping[str, UploadedFile | None]) -> list[StoredDocument]:
        stored: list[StoredDocument] = []
        for slot, upload in files.items():
            if upload is None or upload.size == 0:
                continue
            name = object_name(upload.filename)
            with timing_metric(f"upload.{slot}"):
                try:
                    self.documents.store(name, upload.content, content_type_of(upload))
                    url = self.documents.public_url(name)
                except UploadError:
                    logger.warning("upload of %s failed, aborting submission", slot)
                    raise
                except Exception as e:  # noqa: BLE001
                    raise UploadError(f"could not upload {slot}: {e}") from e
            stored.append(StoredDocument(slot=slot, name=name, url=url))
        return stored

    def _insert(self, table: str, row: Row, *, ledger: list[tuple[str, str]]) -> Row:
        with timing_metric(f"insert.{table}"):
            try:
                created = self.records.insert(table, [row])
            except PersistenceError as e:
                self._abort(table, e, ledger)
            except Exception as e:  # noqa: BLE001
                self._abort(table, PersistenceError(f"{table}: {e}"), ledger, cause=e)
        if not created:
            self._abort(table, PersistenceError(f"{table}: insert returned no row"), ledger)
        ledger.append((table, created[0]["id"]))
        return created[0]

    def _abort(
        self,
        table: str,
        error: PersistenceError,
        ledger: list[tuple[str, str]],
        cause: BaseException | None = None,
    ):
        compensated = bool(ledger) and self.compensate and self._compensate(ledger)
        record_event(
            "submission_write_failed",
            logging.WARNING,
            table=table,
            written=ledger,
            compensated=compensated,
        )
        raise PersistenceError(
            f"could not save {table}: {error.message}",
            written=ledger,
            compensated=compensated,
        ) from (cause or error)

    def _compensate(self, ledger: list[tuple[str, str]]) -> bool:
        ok = True
        for table, row_id in reversed(ledger):
            try:
                self.records.delete(table, {"id": row_id})
            except Exception:  # noqa: BLE001
                ok = False
                logger.exception("compensating delete of %s/%s failed", table, row_id)
        return ok

    def _notify(self, payload: NotificationPayload, *, record_id: str) -> bool:
        """Best effort: a failure is recorded but never changes the outcome."""
        with timing_metric("notify"):
            try:
                self.notifier.send(payload)
                return True
            except NotificationError as e:
                record_event(
                    "notification_failed",
                    logging.WARNING,
                    record_id=record_id,
                    company_name=payload.company_name,
                    reason=e.message,
                )
            except Exception as e:  # noqa: BLE001
                logger.exception("notifier crashed for %s", record_id)
                record_event(
                    "notification_failed",
                    logging.ERROR,
                    record_id=record_id,
                    company_name=payload.company_name,
                    reason=str(e),
                )
        return False


def _document_label(slot: str) -> str:
    # "directors.0.passport" -> "director 1 passport"
    parts = slot.split(".")
    if len(parts) == 3 and parts[0] == "directors":
        return f"director {int(parts[1]) + 1} {DOCUMENT_LABELS.get(parts[2], parts[2])}"
    return DOCUMENT_LABELS.get(slot, slot)
