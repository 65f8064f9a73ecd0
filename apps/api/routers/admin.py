from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from apps.api.deps import get_directory, get_review, require_admin
from domain.lifecycle import allowed_next
from domain.models import Application, ApplicationStatus, Company, CompanyDetail, Identity
from services.review.applications import ApplicationReviewService
from services.review.companies import CompanyDirectory

router = APIRouter(prefix="/admin", tags=["admin"])


class ApplicationDetail(BaseModel):
    application: Application
    allowed_transitions: List[ApplicationStatus]


class StatusChange(BaseModel):
    status: ApplicationStatus


class BulkDelete(BaseModel):
    ids: List[str] = Field(min_length=1)
    confirm: bool = False


@router.get("/applications", response_model=List[Application])
def list_applications(
    admin: Identity = Depends(require_admin),
    review: ApplicationReviewService = Depends(get_review),
):
    return review.list_applications()


@router.get("/applications/{application_id}", response_model=ApplicationDetail)
def get_application(
    application_id: str,
    admin: Identity = Depends(require_admin),
    review: ApplicationReviewService = Depends(get_review),
):
    app = review.get(application_id)
    return ApplicationDetail(application=app, allowed_transitions=allowed_next(app.status))


@router.patch("/applications/{application_id}/status", response_model=Application)
def change_status(
    application_id: str,
    body: StatusChange,
    admin: Identity = Depends(require_admin),
    review: ApplicationReviewService = Depends(get_review),
):
    return review.change_status(application_id, body.status, actor=admin.email)


@router.post("/applications/bulk-delete")
def bulk_delete(
    body: BulkDelete,
    admin: Identity = Depends(require_admin),
    review: ApplicationReviewService = Depends(get_review),
):
    deleted = review.bulk_delete(body.ids, confirmed=body.confirm, actor=admin.email)
    return {"deleted": deleted}


@router.get("/companies", response_model=List[Company])
def list_companies(
    admin: Identity = Depends(require_admin),
    directory: CompanyDirectory = Depends(get_directory),
):
    return directory.list_companies()


@router.get("/companies/{company_id}", response_model=CompanyDetail)
def get_company(
    company_id: str,
    admin: Identity = Depends(require_admin),
    directory: CompanyDirectory = Depends(get_directory),
):
    return directory.get_company(company_id)
