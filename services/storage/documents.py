from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

from core.errors import UploadError

SAFE_EXT = re.compile(r"[^A-Za-z0-9]")
SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def store(self, name: str, content: bytes, content_type: str | None = None) -> None: ...

    def public_url(self, name: str) -> str: ...


def object_name(filename: str | None) -> str:
    """Collision-resistant storage name: random token plus the original extension."""
    base = (filename or "").rsplit("/", 1)[-1]
    ext = base.rsplit(".", 1)[-1] if "." in base else ""
    ext = SAFE_EXT.sub("", ext)[:10].lower()
    token = uuid.uuid4().hex
    return f"{token}.{ext}" if ext else token


class LocalDocumentStore:
    """
    Filesystem document store. Objects are written atomically under ``root``
    and served back through the API's /documents/{name} route.
    """

    def __init__(self, root: str | Path, public_base_url: str) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def path_for(self, name: str) -> Path:
        if not SAFE_NAME.match(name):
            raise UploadError(f"invalid document name: {name!r}")
        return self.root / name

    def store(self, name: str, content: bytes, content_type: str | None = None) -> None:
        dest = self.path_for(name)
        if dest.exists():
            raise UploadError(f"document already exists: {name}")
        tmp = dest.with_suffix(dest.suffix + ".part")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with tmp.open("wb") as f:
                f.write(content)
            tmp.replace(dest)  # atomic move
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise UploadError(f"could not store {name}: {e}") from e
        logger.debug("stored %s (%d bytes, %s)", name, len(content), content_type)

    def public_url(self, name: str) -> str:
        return f"{self.public_base_url}/documents/{quote(name)}"

    def open(self, name: str) -> Path:
        path = self.path_for(name)
        if not path.is_file():
            raise FileNotFoundError(name)
        return path
