"""
api/routes/notifications.py
---------------------------
Bill reminder endpoints.

POST /api/notification      — Admin: ring the bell on a bill (toggle)
GET  /tenants/notifications — The signed-in tenant's reminders
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Form
from sqlalchemy.ext.asyncio import AsyncSession

from portal.db.session import get_db
from portal.dependencies import AdminUser, CurrentUser
from portal.schemas.notification import NotificationRead, NotificationToggleResponse
from portal.services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])


@router.post(
    "/api/notification",
    response_model=NotificationToggleResponse,
    summary="Admin: toggle the reminder for a bill",
)
async def toggle_notification(
    bill_id: Annotated[str, Form(alias="billId", min_length=1)],
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: AdminUser,
) -> NotificationToggleResponse:
    """
    Creates the tenant's reminder for the bill if there is none, otherwise
    removes it. Calling twice in a row restores the original state.
    """
    action = await NotificationService.toggle(db, bill_id)
    return NotificationToggleResponse(action=action)


@router.get(
    "/tenants/notifications",
    response_model=list[NotificationRead],
    summary="Reminders for the signed-in tenant",
)
async def list_my_notifications(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
) -> list[NotificationRead]:
    notifications = await NotificationService.list_for_user(db, current_user.id)
    return [NotificationRead.model_validate(n) for n in notifications]
