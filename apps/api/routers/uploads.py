from __future__ import annotations

from fastapi import UploadFile

from core.errors import ValidationError
from domain.value_objects import UploadedFile

CHUNK_BYTES = 1024 * 1024


async def to_uploaded(
    file: UploadFile | None, slot: str, max_bytes: int | None = None
) -> UploadedFile | None:
    """Read an upload in chunks, stopping as soon as it passes ``max_bytes``."""
    if file is None or not file.filename:
        return None
    content = bytearray()
    while chunk := await file.read(CHUNK_BYTES):
        content.extend(chunk)
        if max_bytes is not None and len(content) > max_bytes:
            raise ValidationError(f"file too large: {slot}", invalid=[slot])
    return UploadedFile(
        filename=file.filename.split("/")[-1],
        content=bytes(content),
        content_type=file.content_type,
    )
