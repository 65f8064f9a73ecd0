from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from core.config import settings
from domain.models import Identity
from services import factory
from services.auth.gate import AdminSessionGate
from services.auth.identity import PasswordIdentityProvider
from services.intake.submission import SubmissionWorkflow
from services.persistence.base import RecordStore
from services.review.applications import ApplicationReviewService
from services.review.companies import CompanyDirectory
from services.storage.documents import LocalDocumentStore

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_records() -> RecordStore:
    return factory.get_record_store()


def get_documents() -> LocalDocumentStore:
    return factory.get_document_store()


def get_notifier():
    return factory.get_notifier()


def get_identity_provider(records: RecordStore = Depends(get_records)) -> PasswordIdentityProvider:
    return PasswordIdentityProvider(
        records, settings.SECRET_KEY, settings.ACCESS_TOKEN_EXPIRE_MIN
    )


def get_workflow(
    records=Depends(get_records),
    documents=Depends(get_documents),
    notifier=Depends(get_notifier),
) -> SubmissionWorkflow:
    return factory.build_workflow(records, documents, notifier)


def get_review(records=Depends(get_records)) -> ApplicationReviewService:
    return ApplicationReviewService(records)


def get_directory(records=Depends(get_records)) -> CompanyDirectory:
    return CompanyDirectory(records)


def get_gate(
    token: str | None = Depends(oauth2_scheme),
    provider: PasswordIdentityProvider = Depends(get_identity_provider),
) -> AdminSessionGate:
    """A per-request gate seeded with the bearer token's session."""
    return AdminSessionGate(provider, provider.get_session(token))


def require_admin(gate: AdminSessionGate = Depends(get_gate)) -> Identity:
    """Raises AuthError/AuthorizationError before any application data is read."""
    return gate.require_admin()
