import pytest

from core.errors import PersistenceError, UploadError, ValidationError
from factories import RecordingNotifier, application_data, company_data, pdf
from services.intake.submission import SubmissionWorkflow
from services.persistence.memory import InMemoryRecordStore


class FlakyStore(InMemoryRecordStore):
    """Rejects inserts into one table; everything else behaves normally."""

    def __init__(self, fail_table: str, events: list | None = None) -> None:
        super().__init__()
        self.fail_table = fail_table
        self.events = events

    def insert(self, table, rows):
        if self.events is not None:
            self.events.append(("insert", table))
        if table == self.fail_table:
            raise PersistenceError(f"{table} rejected")
        return super().insert(table, rows)


class BrokenDocumentStore:
    def __init__(self) -> None:
        self.calls = 0

    def store(self, name, content, content_type=None) -> None:
        self.calls += 1
        raise UploadError("bucket unavailable")

    def public_url(self, name) -> str:
        return f"http://files.test/{name}"


def test_acme_submission_creates_one_pending_row_and_one_notification(
    workflow, records, notifier
) -> None:
    result = workflow.submit_application(
        application_data(), {"passport": pdf("p.pdf"), "bill": pdf("b.pdf")}
    )

    rows = records.select("applications")
    assert len(rows) == 1
    row = rows[0]
    assert row["status"] == "pending"
    assert row["passport_url"] and row["bill_url"]
    assert row["company_name"] == "Acme Ltd"
    assert row["phone"] is None
    assert result.status == "submitted"
    assert result.record_id == row["id"]
    assert result.notified is True

    assert len(notifier.sent) == 1
    assert notifier.sent[0].company_name == "Acme Ltd"
    assert set(notifier.sent[0].documents.values()) == {row["passport_url"], row["bill_url"]}


def test_missing_file_fails_before_any_write(workflow, records, documents, notifier) -> None:
    with pytest.raises(ValidationError) as exc:
        workflow.submit_application(application_data(), {"passport": pdf("p.pdf"), "bill": None})

    assert exc.value.missing == ["bill"]
    assert records.writes == 0
    assert not documents.root.exists()
    assert notifier.sent == []


def test_upload_failure_aborts_without_database_write(records, notifier) -> None:
    store = BrokenDocumentStore()
    wf = SubmissionWorkflow(records, store, notifier)

    with pytest.raises(UploadError):
        wf.submit_application(application_data(), {"passport": pdf("p.pdf"), "bill": pdf("b.pdf")})

    assert store.calls == 1
    assert records.writes == 0
    assert notifier.sent == []


def test_notification_happens_after_the_write(documents) -> None:
    events: list = []
    wf = SubmissionWorkflow(
        FlakyStore(fail_table="none", events=events),
        documents,
        RecordingNotifier(events=events),
    )
    wf.submit_application(application_data(), {"passport": pdf("p.pdf"), "bill": pdf("b.pdf")})
    assert events == [("insert", "applications"), ("notify", "Acme Ltd")]


def test_no_notification_when_the_write_fails(documents, notifier) -> None:
    wf = SubmissionWorkflow(FlakyStore(fail_table="applications"), documents, notifier)
    with pytest.raises(PersistenceError):
        wf.submit_application(application_data(), {"passport": pdf("p.pdf"), "bill": pdf("b.pdf")})
    assert notifier.sent == []


def test_notification_failure_does_not_change_the_outcome(records, documents, caplog) -> None:
    wf = SubmissionWorkflow(records, documents, RecordingNotifier(fail=True))
    with caplog.at_level("WARNING", logger="intake.events"):
        result = wf.submit_application(
            application_data(), {"passport": pdf("p.pdf"), "bill": pdf("b.pdf")}
        )

    assert result.status == "submitted"
    assert result.notified is False
    assert len(records.select("applications")) == 1
    assert "event=notification_failed" in caplog.text


def test_uploaded_names_are_unique_and_keep_extension(workflow) -> None:
    result = workflow.submit_application(
        application_data(), {"passport": pdf("scan.pdf"), "bill": pdf("scan.pdf")}
    )
    passport, bill = result.documents["passport"], result.documents["bill"]
    assert passport != bill
    assert passport.endswith(".pdf") and bill.endswith(".pdf")
    assert "scan" not in passport


def test_resubmission_is_not_deduplicated(workflow, records) -> None:
    files = {"passport": pdf("p.pdf"), "bill": pdf("b.pdf")}
    first = workflow.submit_application(application_data(), files)
    second = workflow.submit_application(application_data(), files)
    assert first.record_id != second.record_id
    assert len(records.select("applications")) == 2


def test_company_rows_reference_the_parent(workflow, records, notifier) -> None:
    files = {
        "directors.0.passport": pdf("p0.pdf"),
        "directors.0.brp": pdf("brp0.pdf"),
        "directors.1.passport": pdf("p1.pdf"),
    }
    result = workflow.submit_company(company_data(directors=2, pscs=1), files)

    companies = records.select("companies")
    assert [c["id"] for c in companies] == [result.record_id]
    directors = records.select("directors", {"company_id": result.record_id}, order_by="created_at")
    pscs = records.select("pscs", {"company_id": result.record_id})
    assert len(directors) == 2 and len(pscs) == 1
    assert all(d["passport_url"] for d in directors)
    assert sorted(d["brp_url"] is None for d in directors) == [False, True]
    assert len(result.child_ids) == 3
    assert len(notifier.sent) == 1
    assert notifier.sent[0].company_name == "Acme Ltd"


def test_child_failure_keeps_parent_and_earlier_siblings(documents, notifier) -> None:
    store = FlakyStore(fail_table="pscs")
    wf = SubmissionWorkflow(store, documents, notifier)
    files = {"directors.0.passport": pdf("p0.pdf"), "directors.1.passport": pdf("p1.pdf")}

    with pytest.raises(PersistenceError) as exc:
        wf.submit_company(company_data(directors=2, pscs=1), files)

    assert len(store.select("companies")) == 1
    assert len(store.select("directors")) == 2
    assert store.select("pscs") == []
    assert [t for t, _ in exc.value.written] == ["companies", "directors", "directors"]
    assert exc.value.compensated is False
    assert notifier.sent == []


def test_compensation_removes_partial_rows_when_enabled(documents, notifier) -> None:
    store = FlakyStore(fail_table="directors")
    wf = SubmissionWorkflow(store, documents, notifier, compensate=True)

    with pytest.raises(PersistenceError) as exc:
        wf.submit_company(company_data(directors=1), {"directors.0.passport": pdf("p.pdf")})

    assert exc.value.compensated is True
    assert [t for t, _ in exc.value.written] == ["companies"]
    assert store.select("companies") == []


def test_company_upload_happens_before_parent_insert(records, notifier) -> None:
    wf = SubmissionWorkflow(records, BrokenDocumentStore(), notifier)
    with pytest.raises(UploadError):
        wf.submit_company(company_data(directors=1), {"directors.0.passport": pdf("p.pdf")})
    assert records.select("companies") == []
    assert records.writes == 0


def test_caller_cannot_choose_the_initial_status(workflow, records) -> None:
    workflow.submit_application(
        application_data(status="completed"), {"passport": pdf("p.pdf"), "bill": pdf("b.pdf")}
    )
    assert records.select("applications")[0]["status"] == "pending"


def test_blank_email_and_missing_bill_fail_together(workflow, records) -> None:
    with pytest.raises(ValidationError) as exc:
        workflow.submit_application(
            application_data(email=""), {"passport": pdf("p.pdf"), "bill": None}
        )
    assert "email" in exc.value.missing
    assert "bill" in exc.value.missing
    assert records.writes == 0
