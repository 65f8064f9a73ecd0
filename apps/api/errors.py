from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.errors import (
    AuthError,
    AuthorizationError,
    IntakeError,
    PersistenceError,
    RecordNotFound,
    TransitionError,
    UploadError,
    ValidationError,
)

# most specific first; the first isinstance match wins
STATUS_CODES: list[tuple[type[IntakeError], int]] = [
    (ValidationError, 422),
    (AuthError, 401),
    (AuthorizationError, 403),
    (RecordNotFound, 404),
    (TransitionError, 409),
    (UploadError, 502),
    (PersistenceError, 500),
]


def status_for(exc: IntakeError) -> int:
    for cls, code in STATUS_CODES:
        if isinstance(exc, cls):
            return code
    return 500


async def intake_error_handler(request: Request, exc: IntakeError) -> JSONResponse:
    body = {"error": type(exc).__name__, "detail": exc.message}
    if isinstance(exc, ValidationError):
        body["missing"] = exc.missing
        body["invalid"] = exc.invalid
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=status_for(exc), content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(IntakeError, intake_error_handler)
