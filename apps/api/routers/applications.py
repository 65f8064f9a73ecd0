from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from starlette.concurrency import run_in_threadpool

from apps.api.deps import get_workflow
from apps.api.routers.uploads import to_uploaded
from domain.models import SubmissionResult
from services.intake.submission import SubmissionWorkflow

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=SubmissionResult, status_code=status.HTTP_201_CREATED)
async def submit_application(
    full_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    company_name: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    passport: Optional[UploadFile] = File(None),  # noqa: B008  (FastAPI pattern)
    bill: Optional[UploadFile] = File(None),  # noqa: B008  (FastAPI pattern)
    workflow: SubmissionWorkflow = Depends(get_workflow),
):
    """Flat application form: applicant fields plus passport and proof-of-address files."""
    data = {
        "full_name": full_name,
        "email": email,
        "phone": phone,
        "address": address,
        "company_name": company_name,
        "notes": notes,
    }
    cap = workflow.max_upload_bytes
    files = {
        "passport": await to_uploaded(passport, "passport", cap),
        "bill": await to_uploaded(bill, "bill", cap),
    }
    return await run_in_threadpool(workflow.submit_application, data, files)
