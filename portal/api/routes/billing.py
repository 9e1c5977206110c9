"""
api/routes/billing.py
---------------------
Billing endpoints.

Admin (permission: manage-billing):
  POST   /admin/billing                    — Add a bill to a lease (pending)
  GET    /admin/billing/due                — Unpaid bills past their due date
  GET    /admin/billing/collected          — Paid bills
  GET    /admin/billing/{bill_id}          — One bill
  PUT    /admin/billing/{bill_id}          — Edit a bill (status override allowed)
  DELETE /admin/billing/{bill_id}          — Soft-delete a bill
  GET    /admin/leases/{lease_id}/billing  — Bills of one lease

Tenant:
  GET    /tenants/billing                  — Own bills
  GET    /tenants/billing/{bill_id}        — One own bill
  POST   /tenants/billing/{bill_id}/pay    — Pay now, with optional proof file
"""

from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.session import SessionUser
from portal.db.session import get_db
from portal.dependencies import CurrentUser, require_permission
from portal.models.billing import BillingStatus
from portal.schemas.billing import BillingCreate, BillingRead, BillingUpdate
from portal.services.billing_service import BillingService

router = APIRouter(tags=["Billing"])

BillingAdmin = Annotated[SessionUser, Depends(require_permission("manage-billing"))]


# ── Admin ─────────────────────────────────────────────────────────────────────

@router.post(
    "/admin/billing",
    response_model=BillingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Admin: add a bill to a lease",
)
async def create_bill(
    body: BillingCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: BillingAdmin,
) -> BillingRead:
    bill = await BillingService.create(db, body)
    return BillingRead.model_validate(bill)


@router.get(
    "/admin/billing/due",
    response_model=list[BillingRead],
    summary="Admin: unpaid bills past their due date",
)
async def list_due_bills(
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: BillingAdmin,
    as_of: Optional[date] = Query(default=None, description="Defaults to today (UTC)"),
) -> list[BillingRead]:
    bills = await BillingService.list_due(db, as_of)
    return [BillingRead.model_validate(b) for b in bills]


@router.get(
    "/admin/billing/collected",
    response_model=list[BillingRead],
    summary="Admin: paid bills, most recent payment first",
)
async def list_collected_bills(
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: BillingAdmin,
) -> list[BillingRead]:
    bills = await BillingService.list_collected(db)
    return [BillingRead.model_validate(b) for b in bills]


@router.get(
    "/admin/billing/{bill_id}",
    response_model=BillingRead,
    summary="Admin: fetch one bill",
)
async def get_bill(
    bill_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: BillingAdmin,
) -> BillingRead:
    bill = await BillingService.get(db, bill_id)
    return BillingRead.model_validate(bill)


@router.put(
    "/admin/billing/{bill_id}",
    response_model=BillingRead,
    summary="Admin: edit a bill",
)
async def edit_bill(
    bill_id: str,
    body: BillingUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: BillingAdmin,
) -> BillingRead:
    bill = await BillingService.edit(db, bill_id, body)
    return BillingRead.model_validate(bill)


@router.delete(
    "/admin/billing/{bill_id}",
    summary="Admin: soft-delete a bill",
)
async def delete_bill(
    bill_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: BillingAdmin,
) -> dict:
    await BillingService.soft_delete(db, bill_id)
    return {"ok": True}


@router.get(
    "/admin/leases/{lease_id}/billing",
    response_model=list[BillingRead],
    summary="Admin: bills of one lease",
)
async def list_lease_bills(
    lease_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: BillingAdmin,
    status_filter: Optional[BillingStatus] = Query(default=None, alias="status"),
) -> list[BillingRead]:
    bills = await BillingService.list_for_lease(db, lease_id, status_filter)
    return [BillingRead.model_validate(b) for b in bills]


# ── Tenant ────────────────────────────────────────────────────────────────────

@router.get(
    "/tenants/billing",
    response_model=list[BillingRead],
    summary="Bills on the signed-in tenant's lease",
)
async def list_my_bills(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    status_filter: Optional[BillingStatus] = Query(default=None, alias="status"),
) -> list[BillingRead]:
    bills = await BillingService.list_for_user(db, current_user.id, status_filter)
    return [BillingRead.model_validate(b) for b in bills]


@router.get(
    "/tenants/billing/{bill_id}",
    response_model=BillingRead,
    summary="One bill on the signed-in tenant's lease",
)
async def get_my_bill(
    bill_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
) -> BillingRead:
    bill = await BillingService.get_for_user(db, bill_id, current_user.id)
    return BillingRead.model_validate(bill)


@router.post(
    "/tenants/billing/{bill_id}/pay",
    response_model=BillingRead,
    summary="Pay a bill, optionally attaching proof of payment",
)
async def pay_bill(
    bill_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    proof: Optional[UploadFile] = File(default=None),
) -> BillingRead:
    """
    Marks the bill paid and stamps the payment date. Paying a bill that is
    already paid answers 409.
    """
    bill = await BillingService.mark_paid(db, bill_id, current_user.id, proof)
    return BillingRead.model_validate(bill)
