import pytest

from core.errors import PersistenceError, RecordNotFound, TransitionError, ValidationError
from domain.models import ApplicationStatus
from factories import company_data, pdf
from services.review.applications import ApplicationReviewService
from services.review.companies import CompanyDirectory


def _seed(records, n: int = 1, **extra) -> list[str]:
    rows = [
        {"full_name": f"Applicant {i}", "email": f"a{i}@x.com", "company_name": "Acme Ltd", **extra}
        for i in range(n)
    ]
    return [r["id"] for r in records.insert("applications", rows)]


def test_missing_status_reads_as_pending(records) -> None:
    (app_id,) = _seed(records)
    app = ApplicationReviewService(records).get(app_id)
    assert app.status is ApplicationStatus.PENDING


def test_forward_and_reopen_transitions(records) -> None:
    (app_id,) = _seed(records, status="pending")
    review = ApplicationReviewService(records)

    review.change_status(app_id, "processing")
    done = review.change_status(app_id, ApplicationStatus.COMPLETED)
    assert done.status is ApplicationStatus.COMPLETED
    assert records.select("applications", {"id": app_id})[0]["status"] == "completed"

    reopened = review.change_status(app_id, "processing")
    assert reopened.status is ApplicationStatus.PROCESSING
    assert review.get(app_id).status is ApplicationStatus.PROCESSING


def test_illegal_transition_leaves_status_untouched(records) -> None:
    (app_id,) = _seed(records, status="completed")
    review = ApplicationReviewService(records)
    with pytest.raises(TransitionError):
        review.change_status(app_id, "pending")
    assert review.get(app_id).status is ApplicationStatus.COMPLETED
    assert review.allowed_transitions(app_id) == [ApplicationStatus.PROCESSING]


def test_status_change_on_unknown_record_is_reported(records) -> None:
    with pytest.raises(RecordNotFound):
        ApplicationReviewService(records).change_status("nope", "processing")


def test_bulk_delete_requires_confirmation(records) -> None:
    ids = _seed(records, n=2)
    review = ApplicationReviewService(records)
    with pytest.raises(ValidationError):
        review.bulk_delete(ids, confirmed=False)
    assert len(review.list_applications()) == 2


def test_bulk_delete_removes_all_selected(records) -> None:
    ids = _seed(records, n=3)
    review = ApplicationReviewService(records)
    assert review.bulk_delete(ids[:2], confirmed=True) == 2
    assert [a.id for a in review.list_applications()] == [ids[2]]


def test_bulk_delete_partial_failure_is_one_aggregate_error(records) -> None:
    ids = _seed(records, n=1)
    review = ApplicationReviewService(records)
    with pytest.raises(PersistenceError) as exc:
        review.bulk_delete([ids[0], "already-gone"], confirmed=True)
    assert "1 of 2" in exc.value.message
    assert review.list_applications() == []


def test_company_directory_returns_children(workflow, records) -> None:
    result = workflow.submit_company(
        company_data(directors=1, pscs=2), {"directors.0.passport": pdf("p.pdf")}
    )
    directory = CompanyDirectory(records)

    assert [c.id for c in directory.list_companies()] == [result.record_id]
    detail = directory.get_company(result.record_id)
    assert detail.company.company_name == "Acme Ltd"
    assert len(detail.directors) == 1
    assert detail.directors[0].company_id == result.record_id
    assert [p.name for p in detail.pscs] == ["Owner 0", "Owner 1"]

    with pytest.raises(RecordNotFound):
        directory.get_company("missing")
