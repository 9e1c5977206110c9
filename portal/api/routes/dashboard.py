"""
api/routes/dashboard.py
-----------------------
Landing page data.

GET /admin/dashboard   — Open tickets, tenant count, due and collected bills
GET /tenants/dashboard — Own lease, pending bills, tickets and reminders
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.db.session import get_db
from portal.dependencies import AdminUser, CurrentUser
from portal.models.billing import BillingStatus
from portal.models.maintenance import MaintenanceStatus
from portal.schemas.billing import BillingRead
from portal.schemas.dashboard import AdminDashboard, TenantDashboard
from portal.schemas.lease import LeaseRead
from portal.schemas.maintenance import MaintenanceRead
from portal.schemas.notification import NotificationRead
from portal.services.billing_service import BillingService
from portal.services.lease_service import LeaseService
from portal.services.maintenance_service import MaintenanceService
from portal.services.notification_service import NotificationService
from portal.services.user_service import UserService

router = APIRouter(tags=["Dashboard"])


@router.get(
    "/admin/dashboard",
    response_model=AdminDashboard,
    summary="Admin landing page",
)
async def admin_dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: AdminUser,
) -> AdminDashboard:
    open_total, open_tickets = await MaintenanceService.list_all(
        db, exclude_status=MaintenanceStatus.completed, limit=10
    )
    tenant_total, _ = await UserService.list_tenants(db, limit=1)
    due = await BillingService.list_due(db)
    collected = await BillingService.list_collected(db)

    return AdminDashboard(
        open_maintenance=[MaintenanceRead.model_validate(t) for t in open_tickets],
        open_maintenance_total=open_total,
        tenant_total=tenant_total,
        due_payments=[BillingRead.model_validate(b) for b in due],
        collected_payments=[BillingRead.model_validate(b) for b in collected],
    )


@router.get(
    "/tenants/dashboard",
    response_model=TenantDashboard,
    summary="Tenant landing page",
)
async def tenant_dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
) -> TenantDashboard:
    lease = await LeaseService.get_for_user(db, current_user.id)
    pending = await BillingService.list_for_user(
        db, current_user.id, BillingStatus.pending
    )
    _, tickets = await MaintenanceService.list_for_user(db, current_user.id, limit=5)
    notifications = await NotificationService.list_for_user(db, current_user.id)

    return TenantDashboard(
        lease=LeaseRead.model_validate(lease) if lease else None,
        pending_bills=[BillingRead.model_validate(b) for b in pending],
        maintenance=[MaintenanceRead.model_validate(t) for t in tickets],
        notifications=[NotificationRead.model_validate(n) for n in notifications],
    )
