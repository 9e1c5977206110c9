"""
models/billing.py
-----------------
Billing ORM model: one payable charge against a lease.

Lifecycle:
    pending ──mark_paid──▶ paid
    (admin edit may set either status directly)
    deleted_at set ──▶ gone from every read path

status = paid always comes with payment_date; filepath points at the
optional proof-of-payment upload.
"""

from datetime import date, datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, SoftDeleteMixin, TimestampMixin, generate_uuid


class BillingStatus(str, PyEnum):
    pending = "pending"
    paid = "paid"


class Billing(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "billings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    lease_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("leases.id"),
        nullable=False,
        index=True,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BillingStatus.pending.value, index=True
    )
    payment_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    filepath: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    # Relationships
    lease: Mapped["Lease"] = relationship("Lease", back_populates="bills")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Billing id={self.id} status={self.status}>"
