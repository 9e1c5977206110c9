"""
schemas/maintenance.py
----------------------
Pydantic models for maintenance tickets.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from portal.models.maintenance import MaintenanceStatus


def normalize_details(text: str) -> str:
    """
    Trim every line and drop blank ones.
    Returns "" when nothing meaningful is left.
    """
    lines = (line.strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


class MaintenanceCreate(BaseModel):
    details: str = Field(
        ...,
        max_length=5000,
        examples=["Leaky faucet in kitchen"],
        description="Describe the maintenance issue",
    )

    @field_validator("details")
    @classmethod
    def require_meaningful_text(cls, v: str) -> str:
        cleaned = normalize_details(v)
        if not cleaned:
            raise ValueError("Please describe the issue")
        return cleaned


class MaintenanceStatusUpdate(BaseModel):
    status: MaintenanceStatus


class MaintenanceRead(BaseModel):
    id: str
    user_id: str
    details: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class MaintenanceListResponse(BaseModel):
    total: int
    items: list[MaintenanceRead]
