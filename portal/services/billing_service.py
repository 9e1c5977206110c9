"""
services/billing_service.py
---------------------------
Billing lifecycle: create, admin edit, tenant payment, soft delete, and the
list views built on top of them.

State rules:
  - New bills are always pending.
  - mark_paid is a single conditional UPDATE (status = 'pending', not
    deleted, lease owned by the payer). Zero affected rows on a bill the
    payer can see means another request already paid it → ConflictError.
  - edit is the administrative override and may force any status.
  - Soft-deleted bills never come back from any query in this module.

Lists are ordered newest first by due_date (payment_date for collected
bills), ties broken by id so pages are stable.
"""

from datetime import date, datetime, timezone

from fastapi import UploadFile
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import ConflictError, NotFoundError
from portal.core.logging import get_logger
from portal.db.base import utcnow
from portal.models.billing import Billing, BillingStatus
from portal.models.lease import Lease
from portal.schemas.billing import BillingCreate, BillingUpdate
from portal.services import storage
from portal.services.lease_service import LeaseService

logger = get_logger(__name__)


def _owned_by(user_id: str):
    """Billing predicate: the bill's lease belongs to user_id."""
    owned_leases = select(Lease.id).where(Lease.user_id == user_id, Lease.is_active())
    return Billing.lease_id.in_(owned_leases)


class BillingService:

    # ── Reads ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get(db: AsyncSession, bill_id: str) -> Billing:
        result = await db.execute(Billing.active().where(Billing.id == bill_id))
        bill = result.scalar_one_or_none()
        if bill is None:
            raise NotFoundError("Billing", bill_id)
        return bill

    @staticmethod
    async def get_for_user(db: AsyncSession, bill_id: str, user_id: str) -> Billing:
        """A bill is only visible to the tenant whose lease it belongs to."""
        result = await db.execute(
            Billing.active().where(Billing.id == bill_id, _owned_by(user_id))
        )
        bill = result.scalar_one_or_none()
        if bill is None:
            raise NotFoundError("Billing", bill_id)
        return bill

    @staticmethod
    async def list_for_lease(
        db: AsyncSession, lease_id: str, status: BillingStatus | None = None
    ) -> list[Billing]:
        query = Billing.active().where(Billing.lease_id == lease_id)
        if status is not None:
            query = query.where(Billing.status == status.value)
        result = await db.execute(
            query.order_by(Billing.due_date.desc(), Billing.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_for_user(
        db: AsyncSession, user_id: str, status: BillingStatus | None = None
    ) -> list[Billing]:
        query = Billing.active().where(_owned_by(user_id))
        if status is not None:
            query = query.where(Billing.status == status.value)
        result = await db.execute(
            query.order_by(Billing.due_date.desc(), Billing.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_due(db: AsyncSession, as_of: date | None = None) -> list[Billing]:
        """Unpaid bills whose due date has passed (collections view)."""
        as_of = as_of or datetime.now(timezone.utc).date()
        result = await db.execute(
            Billing.active()
            .where(
                Billing.status == BillingStatus.pending.value,
                Billing.due_date < as_of,
            )
            .order_by(Billing.due_date.desc(), Billing.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_collected(db: AsyncSession) -> list[Billing]:
        result = await db.execute(
            Billing.active()
            .where(Billing.status == BillingStatus.paid.value)
            .order_by(Billing.payment_date.desc(), Billing.id.desc())
        )
        return list(result.scalars().all())

    # ── Writes ────────────────────────────────────────────────────────────────

    @staticmethod
    async def create(db: AsyncSession, data: BillingCreate) -> Billing:
        await LeaseService.get(db, data.lease_id)

        bill = Billing(
            lease_id=data.lease_id,
            due_date=data.due_date,
            amount=data.amount,
            description=data.description,
            status=BillingStatus.pending.value,
        )
        db.add(bill)
        await db.flush()
        await db.refresh(bill)
        logger.info("Bill created", bill_id=bill.id, lease_id=bill.lease_id, amount=bill.amount)
        return bill

    @staticmethod
    async def edit(db: AsyncSession, bill_id: str, data: BillingUpdate) -> Billing:
        """
        Administrative edit. Every field is overwritten; status is only
        changed when supplied and is not checked against the current one.
        Reopening a bill (status pending) drops its payment date and proof.
        """
        bill = await BillingService.get(db, bill_id)
        if data.lease_id != bill.lease_id:
            await LeaseService.get(db, data.lease_id)

        previous_status = bill.status
        bill.lease_id = data.lease_id
        bill.due_date = data.due_date
        bill.amount = data.amount
        bill.description = data.description
        if data.status is not None:
            bill.status = data.status.value
            if data.status is BillingStatus.paid and bill.payment_date is None:
                bill.payment_date = utcnow()
            elif data.status is BillingStatus.pending:
                bill.payment_date = None
                bill.filepath = None

        await db.flush()
        await db.refresh(bill)
        logger.info(
            "Bill edited",
            bill_id=bill.id,
            status_from=previous_status,
            status_to=bill.status,
        )
        return bill

    @staticmethod
    async def mark_paid(
        db: AsyncSession,
        bill_id: str,
        user_id: str,
        proof: UploadFile | None = None,
    ) -> Billing:
        """
        Tenant payment: pending → paid, stamping payment_date and the proof
        file path. A bill that is already paid is rejected with ConflictError.
        """
        bill = await BillingService.get_for_user(db, bill_id, user_id)
        if bill.status != BillingStatus.pending.value:
            raise ConflictError(f"Bill '{bill_id}' is already {bill.status}")

        filepath = await storage.save_proof(proof) if proof is not None else None

        try:
            result = await db.execute(
                update(Billing)
                .where(
                    Billing.id == bill_id,
                    Billing.status == BillingStatus.pending.value,
                    Billing.is_active(),
                    _owned_by(user_id),
                )
                .values(
                    status=BillingStatus.paid.value,
                    payment_date=utcnow(),
                    filepath=filepath,
                )
                .execution_options(synchronize_session=False)
            )
        except Exception:
            if filepath is not None:
                await storage.discard(filepath)
            raise
        if result.rowcount != 1:
            if filepath is not None:
                await storage.discard(filepath)
            logger.warning("Concurrent payment rejected", bill_id=bill_id, user_id=user_id)
            raise ConflictError(f"Bill '{bill_id}' was paid by another request")

        await db.refresh(bill)
        logger.info("Bill paid", bill_id=bill.id, user_id=user_id, has_proof=filepath is not None)
        return bill

    @staticmethod
    async def soft_delete(db: AsyncSession, bill_id: str) -> Billing:
        bill = await BillingService.get(db, bill_id)
        bill.deleted_at = utcnow()
        await db.flush()
        await db.refresh(bill)
        logger.info("Bill deleted", bill_id=bill.id)
        return bill
