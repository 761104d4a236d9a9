"""Request and response schemas for the CRM API."""

import re
from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from apps.crm.models import FollowUpType, PlanStatus

T = TypeVar("T")

PHONE_PATTERN = r"^1[3-9]\d{9}$"
ISO_DATETIME_PATTERN = r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}"


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serialize a naive-UTC timestamp as ISO-8601 with millisecond precision."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


class CamelModel(BaseModel):
    """Base model exposing camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
    """Envelope shared by every endpoint."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CustomerFields(CamelModel):
    """Optional customer fields shared by create and update."""

    company_info: Optional[str] = Field(default=None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = Field(default=None, max_length=300)

    @field_validator("company_info", "email", "phone", "address", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("email")
    @classmethod
    def _check_email_length(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) > 100:
            raise ValueError("Email address cannot exceed 100 characters")
        return value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not re.fullmatch(PHONE_PATTERN, value):
            raise ValueError("Please enter a valid mobile phone number")
        return value


class CustomerCreate(CustomerFields):
    """Body of POST /customers."""

    name: str = Field(min_length=1, max_length=100)


class CustomerUpdate(CustomerFields):
    """Body of PUT /customers/{id}; only supplied fields change."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class AttachmentIn(CamelModel):
    """Metadata of a file previously returned by POST /upload."""

    file_name: str = Field(min_length=1, max_length=255)
    file_url: AnyHttpUrl
    file_type: str = Field(min_length=1, max_length=50)
    file_size: Optional[int] = Field(default=None, ge=0)


class NextStepIn(CamelModel):
    """Reminder to schedule alongside a follow-up."""

    due_date: datetime
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("due_date", mode="before")
    @classmethod
    def _require_iso_datetime(cls, value):
        if not isinstance(value, str) or not re.match(ISO_DATETIME_PATTERN, value):
            raise ValueError("Due date must be an ISO 8601 date-time")
        return value

    @field_validator("due_date")
    @classmethod
    def _to_naive_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class FollowUpCreate(CamelModel):
    """Body of POST /customers/{id}/followups."""

    content: str = Field(min_length=1, max_length=2000)
    follow_up_type: FollowUpType
    attachments: Optional[list[AttachmentIn]] = None
    next_step: Optional[NextStepIn] = None


class SeedRequest(CamelModel):
    """Body of POST /admin/seed."""

    secret: Optional[str] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class UserSummary(CamelModel):
    id: str
    name: str
    email: str


class CustomerCounts(CamelModel):
    follow_up_records: int = 0
    next_step_plans: int = 0


class CustomerResponse(CamelModel):
    """Customer fields with the owning user."""

    id: str
    name: str
    company_info: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: str
    updated_at: str
    user: Optional[UserSummary] = None


class CustomerDetail(CustomerResponse):
    """Customer with related record counts."""

    count: CustomerCounts = Field(alias="_count")


class LatestFollowUp(CamelModel):
    id: str
    created_at: str
    content: str
    follow_up_type: FollowUpType


class CustomerListItem(CustomerDetail):
    """Customer row in the list view."""

    latest_follow_up_record: Optional[LatestFollowUp] = None


class CustomerRef(CamelModel):
    id: str
    name: str


class DeletedResponse(CamelModel):
    id: str


class AttachmentOut(CamelModel):
    id: str
    file_name: str
    file_url: str
    file_type: str
    file_size: Optional[int] = None
    created_at: str


class NextStepOut(CamelModel):
    id: str
    due_date: str
    notes: Optional[str] = None
    status: PlanStatus
    created_at: str


class FollowUpResponse(CamelModel):
    """A follow-up record with its user, attachments and plans."""

    id: str
    content: str
    follow_up_type: FollowUpType
    created_at: str
    updated_at: str
    customer_id: str
    user_id: str
    user: UserSummary
    attachments: list[AttachmentOut] = []
    next_step_plans: list[NextStepOut] = []


class UploadedFile(CamelModel):
    """Result of a successful upload."""

    id: str
    file_name: str
    file_url: str
    file_type: str
    file_size: int


class SeedResult(CamelModel):
    seeded: bool
    user_count: int = 0
    customer_count: int = 0
    follow_up_count: int = 0
