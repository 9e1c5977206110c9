"""
models/maintenance.py
---------------------
Maintenance ticket submitted by a tenant.

Intended workflow is pending → inprogress → completed. Admins may set any
status at any time, so the column is not guarded by a transition table.
"""

from enum import Enum as PyEnum

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, SoftDeleteMixin, TimestampMixin, generate_uuid


class MaintenanceStatus(str, PyEnum):
    pending = "pending"
    inprogress = "inprogress"
    completed = "completed"


# Position in the intended workflow
WORKFLOW_ORDER = {
    MaintenanceStatus.pending: 0,
    MaintenanceStatus.inprogress: 1,
    MaintenanceStatus.completed: 2,
}


class Maintenance(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "maintenance"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    details: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MaintenanceStatus.pending.value, index=True
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="maintenance_requests")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Maintenance id={self.id} status={self.status}>"
