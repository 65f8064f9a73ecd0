from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"


class Role(str, Enum):
    ADMIN = "admin"


class Application(BaseModel):
    id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    company_name: Optional[str] = None
    notes: Optional[str] = None
    passport_url: Optional[str] = None
    bill_url: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    created_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value):
        # rows written before the status column existed carry NULL
        return value or ApplicationStatus.PENDING


class Company(BaseModel):
    id: str
    company_name: str
    office_address: str
    business_activity: str
    created_at: datetime


class Director(BaseModel):
    id: str
    company_id: str
    home_address: str
    ni_number: str
    passport_url: Optional[str] = None
    brp_url: Optional[str] = None
    created_at: datetime


class PSC(BaseModel):
    id: str
    company_id: str
    name: str
    address: str
    nature_of_control: str
    created_at: datetime


class CompanyDetail(BaseModel):
    company: Company
    directors: List[Director] = []
    pscs: List[PSC] = []


class Identity(BaseModel):
    user_id: str
    email: str


class Session(BaseModel):
    identity: Identity
    access_token: str
    expires_at: datetime


class SubmissionResult(BaseModel):
    """Terminal outcome of a successful submission; the caller resets its form."""

    status: str = "submitted"
    kind: str
    record_id: str
    child_ids: List[str] = []
    documents: dict[str, str] = Field(default_factory=dict)
    notified: bool = False
