"""
schemas/lease.py
----------------
Pydantic models for lease records.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class LeaseUpsert(BaseModel):
    start_date: date
    end_date: date
    rent_amount: int = Field(..., ge=0)
    deposit: int = Field(0, ge=0)
    maintenance_fee: int = Field(0, ge=0)
    property_description: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_term(self) -> "LeaseUpsert":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class LeaseRead(BaseModel):
    id: str
    user_id: str
    start_date: date
    end_date: date
    rent_amount: int
    deposit: int
    maintenance_fee: int
    property_description: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}
