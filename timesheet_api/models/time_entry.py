"""Time entry model definitions."""
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TimeEntryStatus(str, Enum):
    """Time entry lifecycle states."""

    DRAFT = "draft"
    SUBMITTED = "submitted"  # bound to an invoice the user is still drafting
    LOCKED = "locked"  # invoice sent to an admin for review


class TimeEntryBase(BaseModel):
    """Base time entry fields."""

    date: dt.date
    client_id: str
    project_id: Optional[str] = None
    category_id: str
    hours: Decimal = Field(gt=0, le=24, decimal_places=2)
    what_did_you_do: str
    what_got_completed: Optional[str] = None


class TimeEntryCreate(TimeEntryBase):
    """Time entry creation model."""

    @field_validator("what_did_you_do")
    @classmethod
    def activity_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("what_did_you_do is required")
        return v.strip()

    @field_validator("project_id", "what_got_completed")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class TimeEntryUpdate(BaseModel):
    """Time entry update model - all fields optional."""

    date: Optional[dt.date] = None
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    category_id: Optional[str] = None
    hours: Optional[Decimal] = Field(default=None, gt=0, le=24, decimal_places=2)
    what_did_you_do: Optional[str] = None
    what_got_completed: Optional[str] = None

    @field_validator("what_did_you_do")
    @classmethod
    def activity_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("what_did_you_do cannot be blank")
        return v.strip() if v is not None else v


class TimeEntry(TimeEntryBase):
    """Full time entry model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    hours: Decimal
    status: TimeEntryStatus = TimeEntryStatus.DRAFT
    invoice_id: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = {"populate_by_name": True}
