"""
schemas/notification.py
-----------------------
Pydantic models for bill reminders.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel

ToggleAction = Literal["created", "deleted"]


class NotificationToggleResponse(BaseModel):
    success: bool = True
    action: ToggleAction


class NotificationRead(BaseModel):
    id: str
    billing_id: str
    details: str
    due_date: date
    amount: int
    created_at: datetime

    model_config = {"from_attributes": True}
