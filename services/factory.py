"""Process-wide singletons built from ``core.config.settings``."""

from __future__ import annotations

from functools import lru_cache

from core.config import settings
from services.auth.identity import PasswordIdentityProvider
from services.intake.submission import SubmissionWorkflow
from services.notifications.email import EmailNotifier
from services.persistence.base import RecordStore
from services.persistence.memory import InMemoryRecordStore
from services.persistence.postgres import PostgresRecordStore
from services.storage.documents import LocalDocumentStore


@lru_cache
def get_record_store() -> RecordStore:
    if settings.RECORD_STORE == "memory":
        return InMemoryRecordStore()
    return PostgresRecordStore(settings.DATABASE_URL)


@lru_cache
def get_document_store() -> LocalDocumentStore:
    return LocalDocumentStore(settings.STORAGE_ROOT, settings.PUBLIC_BASE_URL)


@lru_cache
def get_notifier() -> EmailNotifier:
    return EmailNotifier(
        api_key=settings.RESEND_API_KEY,
        api_url=settings.RESEND_API_URL,
        sender=settings.NOTIFY_FROM,
        recipients=settings.NOTIFY_TO,
        timeout_s=settings.NOTIFY_TIMEOUT_S,
    )


@lru_cache
def get_identity_provider() -> PasswordIdentityProvider:
    return PasswordIdentityProvider(
        get_record_store(), settings.SECRET_KEY, settings.ACCESS_TOKEN_EXPIRE_MIN
    )


def build_workflow(records=None, documents=None, notifier=None) -> SubmissionWorkflow:
    return SubmissionWorkflow(
        records or get_record_store(),
        documents or get_document_store(),
        notifier or get_notifier(),
        allowed_mime=settings.ALLOWED_MIME,
        max_upload_bytes=settings.max_upload_bytes,
        compensate=settings.COMPENSATE_PARTIAL_WRITES,
    )
