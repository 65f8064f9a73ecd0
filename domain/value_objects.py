from dataclasses import dataclass


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class StoredDocument:
    slot: str  # form slot, e.g. "passport" or "directors.0.brp"
    name: str
    url: str
