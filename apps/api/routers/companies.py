import json

from fastapi import APIRouter, Depends, Request, status
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from apps.api.deps import get_workflow
from apps.api.routers.uploads import to_uploaded
from core.errors import ValidationError
from domain.models import SubmissionResult
from services.intake.submission import SubmissionWorkflow

router = APIRouter(prefix="/companies", tags=["companies"])


@router.post("", response_model=SubmissionResult, status_code=status.HTTP_201_CREATED)
async def submit_company(request: Request, workflow: SubmissionWorkflow = Depends(get_workflow)):
    """
    Multipart body: ``payload`` holds the company/directors/pscs JSON, files are
    keyed by slot (``directors.0.passport``, ``directors.0.brp``, ...).
    """
    form = await request.form()
    raw = form.get("payload")
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("missing required field(s): payload", missing=["payload"])
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"payload is not valid JSON: {e.msg}", invalid=["payload"]) from e
    if not isinstance(data, dict):
        raise ValidationError("payload must be a JSON object", invalid=["payload"])

    files = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            files[key] = await to_uploaded(value, key, workflow.max_upload_bytes)
    return await run_in_threadpool(workflow.submit_company, data, files)
