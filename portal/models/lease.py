"""
models/lease.py
---------------
Lease ORM model: one tenant's contract, rent terms and property.

Each user owns at most one lease (user_id is unique). Bills hang off the
lease; a tenant reaches their bills through it.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, SoftDeleteMixin, TimestampMixin, generate_uuid


class Lease(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "leases"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        unique=True,
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    rent_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    deposit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    maintenance_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    property_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="lease")  # noqa: F821
    bills: Mapped[list["Billing"]] = relationship(  # noqa: F821
        "Billing", back_populates="lease"
    )

    def __repr__(self) -> str:
        return f"<Lease id={self.id} user_id={self.user_id}>"
