"""Invoice model definitions."""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class InvoiceStatus(str, Enum):
    """Invoice lifecycle states."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class LineItem(BaseModel):
    """One (client, project, category) grouping within an invoice."""

    id: str
    client_id: str
    project_id: Optional[str] = None
    category_id: str
    description: str
    hours: Decimal
    rate: Decimal
    amount: Decimal

    model_config = {"frozen": True}


class InvoiceCreate(BaseModel):
    """Invoice creation model - the period to aggregate."""

    period_start: date
    period_end: date

    @model_validator(mode="after")
    def check_period(self) -> "InvoiceCreate":
        if self.period_start > self.period_end:
            raise ValueError("period_start must be on or before period_end")
        return self


class InvoiceReject(BaseModel):
    """Invoice rejection model."""

    reason: str = ""


class Invoice(BaseModel):
    """Full invoice model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    invoice_number: str
    period_start: date
    period_end: date
    status: InvoiceStatus = InvoiceStatus.DRAFT
    total_hours: Decimal
    total_amount: Decimal
    line_items: list[LineItem] = []
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by_id: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by_id: Optional[str] = None
    rejection_reason: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
