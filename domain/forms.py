"""
Declarative intake forms.

Each form variant is one pydantic model: required fields are non-optional,
field types are ``pattern`` constraints, and file slots are declared in
``file_slots`` (slot name -> required). ``validate_submission`` is the only
routine that checks a submission; it never touches the network.
"""


import mimetypes
from collections.abc import Mapping
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError
from domain.value_objects import UploadedFile

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^\+?[0-9 ()\-]{6,20}$"

_NONE_TYPES = {"string_type", "list_type", "model_type", "dict_type"}


class SubmissionForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    file_slots: ClassVar[dict[str, bool]] = {}

    @model_validator(mode="before")
    @classmethod
    def _blank_to_none(cls, data: Any) -> Any:
        # browsers post untouched inputs as ""
        if isinstance(data, dict):
            return {
                k: (None if isinstance(v, str) and not v.strip() else v) for k, v in data.items()
            }
        return data

    @classmethod
    def declared_slots(cls, data: Mapping[str, Any]) -> list[tuple[str, bool]]:
        """File slots implied by raw, not yet validated, form data."""
        return list(cls.file_slots.items())

    def slots(self) -> list[tuple[str, bool]]:
        return list(self.file_slots.items())


class ApplicationForm(SubmissionForm):
    file_slots: ClassVar[dict[str, bool]] = {"passport": True, "bill": True}

    full_name: str = Field(min_length=1, max_length=150)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=254)
    company_name: str = Field(min_length=1, max_length=150)
    address: str = Field(min_length=1)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    notes: Optional[str] = None


class DirectorForm(SubmissionForm):
    file_slots: ClassVar[dict[str, bool]] = {"passport": True, "brp": False}

    home_address: str = Field(min_length=1)
    ni_number: str = Field(min_length=1, max_length=20)


class PSCForm(SubmissionForm):
    name: str = Field(min_length=1, max_length=150)
    address: str = Field(min_length=1)
    nature_of_control: str = Field(min_length=1)


class CompanyForm(SubmissionForm):
    company_name: str = Field(min_length=1, max_length=150)
    office_address: str = Field(min_length=1)
    business_activity: str = Field(min_length=1)
    directors: list[DirectorForm] = Field(min_length=1)
    pscs: list[PSCForm] = Field(default_factory=list)

    @classmethod
    def declared_slots(cls, data: Mapping[str, Any]) -> list[tuple[str, bool]]:
        directors = data.get("directors")
        count = len(directors) if isinstance(directors, list) else 0
        return [
            (f"directors.{i}.{name}", req)
            for i in range(count)
            for name, req in DirectorForm.file_slots.items()
        ]

    def slots(self) -> list[tuple[str, bool]]:
        out: list[tuple[str, bool]] = []
        for i, director in enumerate(self.directors):
            out.extend((f"directors.{i}.{name}", req) for name, req in director.slots())
        return out


def _loc(loc: tuple) -> str:
    return ".".join(str(p) for p in loc)


def _classify(exc: PydanticValidationError) -> tuple[list[str], list[str]]:
    missing: list[str] = []
    invalid: list[str] = []
    for err in exc.errors():
        name = _loc(err["loc"]) or "form"
        if err["type"] == "missing":
            missing.append(name)
        elif err["type"] in _NONE_TYPES and err.get("input") is None:
            missing.append(name)
        elif err["type"] == "too_short" and not err.get("input"):
            missing.append(name)
        else:
            invalid.append(name)
    return missing, invalid


def _validation_error(
    missing_fields: list[str], missing_files: list[str], invalid: list[str]
) -> ValidationError:
    parts = []
    if missing_fields:
        parts.append("missing required field(s): " + ", ".join(missing_fields))
    if missing_files:
        parts.append("missing required file(s): " + ", ".join(missing_files))
    if invalid:
        parts.append("invalid field(s): " + ", ".join(invalid))
    return ValidationError(
        "; ".join(parts) or "invalid form",
        missing=missing_fields + missing_files,
        invalid=invalid,
    )


def content_type_of(upload: UploadedFile) -> str | None:
    return upload.content_type or mimetypes.guess_type(upload.filename)[0]


def validate_submission(
    form_cls: type[SubmissionForm],
    data: Mapping[str, Any],
    files: Mapping[str, UploadedFile | None],
    *,
    allowed_mime: set[str] | None = None,
    max_bytes: int | None = None,
) -> SubmissionForm:
    """
    Parse ``data`` into ``form_cls`` and check every declared file slot.

    Missing fields and missing files are reported together in one error.
    """
    slots = form_cls.declared_slots(data)
    present = {k: f for k, f in files.items() if f is not None and f.size > 0}
    missing_files = [name for name, required in slots if required and name not in present]

    try:
        form = form_cls.model_validate(dict(data))
    except PydanticValidationError as e:
        missing, invalid = _classify(e)
        raise _validation_error(missing, missing_files, invalid) from e
    if missing_files:
        raise _validation_error([], missing_files, [])

    known = {name for name, _ in form.slots()}
    unexpected = sorted(set(present) - known)
    if unexpected:
        raise ValidationError(
            "unexpected file(s): " + ", ".join(unexpected), invalid=unexpected
        )

    bad: list[str] = []
    for name, upload in present.items():
        if allowed_mime is not None and content_type_of(upload) not in allowed_mime:
            bad.append(name)
        elif max_bytes is not None and upload.size > max_bytes:
            bad.append(name)
    if bad:
        raise ValidationError(
            "unsupported or oversized file(s): " + ", ".join(sorted(bad)), invalid=sorted(bad)
        )
    return form
