from datetime import datetime, timezone
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from app.utils.errors import ValidationError


def parse_timestamp(value: str, field: str = "date") -> datetime:
    """Parse an ISO 8601 string (trailing Z allowed) into an aware UTC datetime."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid {field}")

    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid {field}")

    return as_utc(parsed)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands datetimes back without tzinfo; everything is stored in UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class StrippedRequest(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, value):
        # length limits apply to the trimmed text
        return value.strip() if isinstance(value, str) else value


class AdCreateRequest(StrippedRequest):
    title: str = Field(min_length=3, max_length=80)
    category: str = Field(min_length=2, max_length=40)
    description: str = Field(min_length=1, max_length=1000)
    price: str = Field(min_length=1, max_length=40)
    location: str = Field(min_length=2, max_length=80)
    available_until: str


class AdUpdateRequest(StrippedRequest):
    title: Optional[str] = Field(default=None, min_length=3, max_length=80)
    category: Optional[str] = Field(default=None, min_length=2, max_length=40)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    price: Optional[str] = Field(default=None, min_length=1, max_length=40)
    location: Optional[str] = Field(default=None, min_length=2, max_length=80)
    available_until: Optional[str] = None
    status: Optional[Literal["active", "sold", "expired"]] = None


class RatingRequest(BaseModel):
    # range and length are checked by the rating service so they map to 400
    rating: int
    comment: Optional[str] = None


class ReportRequest(BaseModel):
    reason: str = ""
    description: Optional[str] = None


class ModerateReportRequest(BaseModel):
    status: Optional[str] = None
    admin_notes: Optional[str] = None


class PromotionRequest(BaseModel):
    label: Optional[str] = None
    expires_at: Optional[str] = None


class ProfileUpdateRequest(StrippedRequest):
    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    course: Optional[str] = Field(default=None, max_length=80)
    period: Optional[str] = Field(default=None, max_length=20)
    contact: Optional[str] = Field(default=None, max_length=80)
    room: Optional[str] = Field(default=None, max_length=40)


class AdminUserUpdateRequest(StrippedRequest):
    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    course: Optional[str] = Field(default=None, max_length=80)
    period: Optional[str] = Field(default=None, max_length=20)
    contact: Optional[str] = Field(default=None, max_length=80)
    room: Optional[str] = Field(default=None, max_length=40)
    role: Optional[Literal["user", "admin"]] = None
    status: Optional[Literal["active", "inactive"]] = None
