"""
models/notification.py
----------------------
Bill reminder shown to a tenant.

A notification exists or it doesn't: admins toggle it per bill. The pair
(billing_id, user_id) is unique, so two toggles racing to create the same
reminder cannot both succeed. details, due_date and amount are copied from
the bill when the reminder is created.
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from portal.db.base import Base, TimestampMixin, generate_uuid


class Notification(Base, TimestampMixin):
    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint("billing_id", "user_id", name="uq_notifications_billing_user"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    billing_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("billings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    details: Mapped[str] = mapped_column(Text, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Notification id={self.id} billing_id={self.billing_id}>"
