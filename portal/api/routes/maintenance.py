"""
api/routes/maintenance.py
-------------------------
Maintenance request endpoints.

Tenant:
  POST   /tenants/maintenance                 — Submit a request
  GET    /tenants/maintenance                 — Own requests (paginated)
  GET    /tenants/maintenance/{ticket_id}     — One own request

Admin (permission: manage-maintenance):
  GET    /admin/maintenance                   — All live requests (paginated)
  PATCH  /admin/maintenance/{ticket_id}       — Set status
  DELETE /admin/maintenance/{ticket_id}       — Soft-delete
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.session import SessionUser
from portal.db.session import get_db
from portal.dependencies import CurrentUser, require_permission
from portal.models.maintenance import MaintenanceStatus
from portal.schemas.maintenance import (
    MaintenanceCreate,
    MaintenanceListResponse,
    MaintenanceRead,
    MaintenanceStatusUpdate,
)
from portal.services.maintenance_service import MaintenanceService

router = APIRouter(tags=["Maintenance"])

MaintenanceAdmin = Annotated[SessionUser, Depends(require_permission("manage-maintenance"))]


# ── Tenant ────────────────────────────────────────────────────────────────────

@router.post(
    "/tenants/maintenance",
    response_model=MaintenanceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a maintenance request",
)
async def create_request(
    body: MaintenanceCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
) -> MaintenanceRead:
    ticket = await MaintenanceService.create(db, current_user.id, body)
    return MaintenanceRead.model_validate(ticket)


@router.get(
    "/tenants/maintenance",
    response_model=MaintenanceListResponse,
    summary="List the signed-in tenant's requests",
)
async def list_my_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    skip: int = Query(default=0, ge=0, description="Pagination offset"),
    limit: int = Query(default=20, ge=1, le=100, description="Results per page"),
) -> MaintenanceListResponse:
    total, tickets = await MaintenanceService.list_for_user(
        db, current_user.id, skip=skip, limit=limit
    )
    return MaintenanceListResponse(
        total=total,
        items=[MaintenanceRead.model_validate(t) for t in tickets],
    )


@router.get(
    "/tenants/maintenance/{ticket_id}",
    response_model=MaintenanceRead,
    summary="One of the signed-in tenant's requests",
)
async def get_my_request(
    ticket_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
) -> MaintenanceRead:
    ticket = await MaintenanceService.get_for_user(db, ticket_id, current_user.id)
    return MaintenanceRead.model_validate(ticket)


# ── Admin ─────────────────────────────────────────────────────────────────────

@router.get(
    "/admin/maintenance",
    response_model=MaintenanceListResponse,
    summary="Admin: list all live requests",
)
async def list_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: MaintenanceAdmin,
    exclude_status: Optional[MaintenanceStatus] = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> MaintenanceListResponse:
    total, tickets = await MaintenanceService.list_all(
        db, exclude_status=exclude_status, skip=skip, limit=limit
    )
    return MaintenanceListResponse(
        total=total,
        items=[MaintenanceRead.model_validate(t) for t in tickets],
    )


@router.patch(
    "/admin/maintenance/{ticket_id}",
    response_model=MaintenanceRead,
    summary="Admin: set a request's status",
)
async def set_request_status(
    ticket_id: str,
    body: MaintenanceStatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: MaintenanceAdmin,
) -> MaintenanceRead:
    ticket = await MaintenanceService.set_status(db, ticket_id, body.status)
    return MaintenanceRead.model_validate(ticket)


@router.delete(
    "/admin/maintenance/{ticket_id}",
    summary="Admin: soft-delete a request",
)
async def delete_request(
    ticket_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: MaintenanceAdmin,
) -> dict:
    await MaintenanceService.soft_delete(db, ticket_id)
    return {"ok": True}
