"""
schemas/billing.py
------------------
Pydantic models for bills.

Naming convention:
  BillingCreate → admin "add payment" form
  BillingUpdate → admin edit form (every field resubmitted, status optional)
  BillingRead   → outbound response body
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from portal.models.billing import BillingStatus


class BillingCreate(BaseModel):
    lease_id: str = Field(..., min_length=1)
    due_date: date
    amount: int = Field(..., ge=0, examples=[1200])
    description: str = Field(
        ...,
        min_length=10,
        max_length=2000,
        examples=["Rent payment for December 2024."],
    )

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class BillingUpdate(BillingCreate):
    status: Optional[BillingStatus] = None


class BillingRead(BaseModel):
    id: str
    lease_id: str
    amount: int
    due_date: date
    description: str
    status: str
    payment_date: Optional[datetime]
    filepath: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}
