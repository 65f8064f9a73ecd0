from __future__ import annotations

import pytest

from factories import RecordingNotifier
from services.intake.submission import SubmissionWorkflow
from services.persistence.memory import InMemoryRecordStore
from services.storage.documents import LocalDocumentStore


@pytest.fixture
def records() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def documents(tmp_path) -> LocalDocumentStore:
    return LocalDocumentStore(tmp_path / "docs", "http://files.test")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def workflow(records, documents, notifier) -> SubmissionWorkflow:
    return SubmissionWorkflow(
        records,
        documents,
        notifier,
        allowed_mime={"application/pdf", "image/jpeg", "image/png"},
        max_upload_bytes=1024 * 1024,
    )
