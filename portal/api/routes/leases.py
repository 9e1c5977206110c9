"""
api/routes/leases.py
--------------------
Tenant and lease management.

GET /admin/tenants                 — Admin: list tenant accounts
PUT /admin/tenants/{user_id}/lease — Admin: create or replace a tenant's lease
GET /tenants/lease                 — The signed-in tenant's lease
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFoundError
from portal.core.session import SessionUser
from portal.db.session import get_db
from portal.dependencies import CurrentUser, require_permission
from portal.schemas.lease import LeaseRead, LeaseUpsert
from portal.schemas.user import UserRead
from portal.services.lease_service import LeaseService
from portal.services.user_service import UserService

router = APIRouter(tags=["Leases"])

LeaseAdmin = Annotated[SessionUser, Depends(require_permission("manage-leases"))]


@router.get(
    "/admin/tenants",
    response_model=list[UserRead],
    summary="Admin: list tenant accounts",
)
async def list_tenants(
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: LeaseAdmin,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
) -> list[UserRead]:
    _, users = await UserService.list_tenants(db, skip=skip, limit=limit)
    return [UserRead.model_validate(u) for u in users]


@router.put(
    "/admin/tenants/{user_id}/lease",
    response_model=LeaseRead,
    summary="Admin: create or replace a tenant's lease",
)
async def upsert_lease(
    user_id: str,
    body: LeaseUpsert,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: LeaseAdmin,
) -> LeaseRead:
    lease = await LeaseService.upsert_for_user(db, user_id, body)
    return LeaseRead.model_validate(lease)


@router.get(
    "/tenants/lease",
    response_model=LeaseRead,
    summary="The signed-in tenant's lease",
)
async def get_my_lease(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
) -> LeaseRead:
    lease = await LeaseService.get_for_user(db, current_user.id)
    if lease is None:
        raise NotFoundError("Lease", f"user:{current_user.id}")
    return LeaseRead.model_validate(lease)
