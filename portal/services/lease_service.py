"""
services/lease_service.py
-------------------------
Lease records: one per tenant, created or replaced by the admin edit action.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFoundError
from portal.core.logging import get_logger
from portal.models.lease import Lease
from portal.models.user import User
from portal.schemas.lease import LeaseUpsert

logger = get_logger(__name__)


class LeaseService:

    @staticmethod
    async def get(db: AsyncSession, lease_id: str) -> Lease:
        result = await db.execute(Lease.active().where(Lease.id == lease_id))
        lease = result.scalar_one_or_none()
        if lease is None:
            raise NotFoundError("Lease", lease_id)
        return lease

    @staticmethod
    async def get_for_user(db: AsyncSession, user_id: str) -> Lease | None:
        result = await db.execute(Lease.active().where(Lease.user_id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def upsert_for_user(
        db: AsyncSession, user_id: str, data: LeaseUpsert
    ) -> Lease:
        """
        Create the user's lease, or overwrite its terms if one exists.
        The user must be an active account.
        """
        result = await db.execute(User.active().where(User.id == user_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError("User", user_id)

        lease = await LeaseService.get_for_user(db, user_id)
        created = lease is None
        if created:
            lease = Lease(user_id=user_id)
            db.add(lease)

        for k, v in data.model_dump().items():
            setattr(lease, k, v)

        await db.flush()
        await db.refresh(lease)
        logger.info(
            "Lease created" if created else "Lease updated",
            lease_id=lease.id,
            user_id=user_id,
        )
        return lease
