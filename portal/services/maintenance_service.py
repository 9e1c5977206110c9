"""
services/maintenance_service.py
-------------------------------
Maintenance ticket lifecycle.

Visibility is enforced here, not in the routes: tenant-facing reads always
filter on user_id, so a ticket id belonging to someone else is
indistinguishable from one that does not exist.

Status policy: admins may move a ticket to any status from any status.
Moves against the pending → inprogress → completed order are allowed but
logged.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFoundError
from portal.core.logging import get_logger
from portal.db.base import utcnow
from portal.models.maintenance import WORKFLOW_ORDER, Maintenance, MaintenanceStatus
from portal.schemas.maintenance import MaintenanceCreate

logger = get_logger(__name__)


def is_forward(current: MaintenanceStatus, new: MaintenanceStatus) -> bool:
    return WORKFLOW_ORDER[new] >= WORKFLOW_ORDER[current]


class MaintenanceService:

    @staticmethod
    async def create(db: AsyncSession, user_id: str, data: MaintenanceCreate) -> Maintenance:
        ticket = Maintenance(
            user_id=user_id,
            details=data.details,
            status=MaintenanceStatus.pending.value,
        )
        db.add(ticket)
        await db.flush()
        await db.refresh(ticket)
        logger.info("Maintenance request created", ticket_id=ticket.id, user_id=user_id)
        return ticket

    @staticmethod
    async def get(db: AsyncSession, ticket_id: str) -> Maintenance:
        result = await db.execute(Maintenance.active().where(Maintenance.id == ticket_id))
        ticket = result.scalar_one_or_none()
        if ticket is None:
            raise NotFoundError("Maintenance", ticket_id)
        return ticket

    @staticmethod
    async def get_for_user(db: AsyncSession, ticket_id: str, user_id: str) -> Maintenance:
        result = await db.execute(
            Maintenance.active().where(
                Maintenance.id == ticket_id, Maintenance.user_id == user_id
            )
        )
        ticket = result.scalar_one_or_none()
        if ticket is None:
            raise NotFoundError("Maintenance", ticket_id)
        return ticket

    @staticmethod
    async def set_status(
        db: AsyncSession, ticket_id: str, new_status: MaintenanceStatus
    ) -> Maintenance:
        ticket = await MaintenanceService.get(db, ticket_id)
        current = MaintenanceStatus(ticket.status)

        ticket.status = new_status.value
        await db.flush()
        await db.refresh(ticket)
        logger.info(
            "Maintenance status changed",
            ticket_id=ticket.id,
            status_from=current.value,
            status_to=ticket.status,
            forward=is_forward(current, new_status),
        )
        return ticket

    @staticmethod
    async def soft_delete(db: AsyncSession, ticket_id: str) -> Maintenance:
        ticket = await MaintenanceService.get(db, ticket_id)
        ticket.deleted_at = utcnow()
        await db.flush()
        await db.refresh(ticket)
        logger.info("Maintenance request deleted", ticket_id=ticket.id)
        return ticket

    @staticmethod
    async def _paginate(db: AsyncSession, query, skip: int, limit: int):
        count_result = await db.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar_one()

        result = await db.execute(
            query.order_by(Maintenance.created_at.desc(), Maintenance.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return total, list(result.scalars().all())

    @staticmethod
    async def list_for_user(
        db: AsyncSession, user_id: str, skip: int = 0, limit: int = 20
    ) -> tuple[int, list[Maintenance]]:
        """The tenant's own tickets, newest first."""
        query = Maintenance.active().where(Maintenance.user_id == user_id)
        return await MaintenanceService._paginate(db, query, skip, limit)

    @staticmethod
    async def list_all(
        db: AsyncSession,
        exclude_status: MaintenanceStatus | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[int, list[Maintenance]]:
        """Every live ticket (admin view), optionally hiding one status."""
        query = Maintenance.active()
        if exclude_status is not None:
            query = query.where(Maintenance.status != exclude_status.value)
        return await MaintenanceService._paginate(db, query, skip, limit)
