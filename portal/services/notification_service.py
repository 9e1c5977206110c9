"""
services/notification_service.py
--------------------------------
Bill reminders for tenants, switched on and off by admins.

toggle() never reads before it writes: a single DELETE keyed on
(billing_id, user_id) tells us whether the reminder existed. If nothing was
deleted a new row is inserted; the unique constraint on the same pair turns
a racing second insert into a ConflictError instead of a duplicate.
"""

from typing import Literal

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import ConflictError, NotFoundError
from portal.core.logging import get_logger
from portal.models.billing import Billing
from portal.models.lease import Lease
from portal.models.notification import Notification

logger = get_logger(__name__)


class NotificationService:

    @staticmethod
    async def toggle(db: AsyncSession, bill_id: str) -> Literal["created", "deleted"]:
        result = await db.execute(
            select(Billing, Lease.user_id)
            .join(Lease, Billing.lease_id == Lease.id)
            .where(Billing.id == bill_id, Billing.is_active())
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Billing", bill_id)
        bill, user_id = row

        deleted = await db.execute(
            delete(Notification).where(
                Notification.billing_id == bill.id,
                Notification.user_id == user_id,
            )
        )
        if deleted.rowcount:
            logger.info("Notification removed", bill_id=bill.id, user_id=user_id)
            return "deleted"

        db.add(
            Notification(
                user_id=user_id,
                billing_id=bill.id,
                details=bill.description,
                due_date=bill.due_date,
                amount=bill.amount,
            )
        )
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Notification for bill '{bill_id}' changed concurrently")

        logger.info("Notification created", bill_id=bill.id, user_id=user_id)
        return "created"

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: str) -> list[Notification]:
        result = await db.execute(
            select(Notification)
            .join(Billing, Notification.billing_id == Billing.id)
            .where(Notification.user_id == user_id, Billing.is_active())
            .order_by(Notification.due_date.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())
