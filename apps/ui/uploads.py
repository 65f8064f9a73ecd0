from __future__ import annotations

from domain.value_objects import UploadedFile


def to_uploaded(st_file) -> UploadedFile | None:
    """Convert a Streamlit UploadedFile into the workflow's value object."""
    if st_file is None:
        return None
    return UploadedFile(filename=st_file.name, content=st_file.getvalue(), content_type=st_file.type)
