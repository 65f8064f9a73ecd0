from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from apps.api.deps import get_documents
from core.errors import UploadError
from services.storage.documents import LocalDocumentStore

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/{name}")
def download_document(name: str, documents: LocalDocumentStore = Depends(get_documents)):
    """Public, read-only retrieval address handed out at upload time."""
    try:
        path = documents.open(name)
    except (UploadError, FileNotFoundError):
        raise HTTPException(status_code=404, detail="document not found")
    return FileResponse(path)
