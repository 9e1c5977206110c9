"""
Billing lifecycle: creation, admin edit, tenant payment, soft delete and the
due / collected views.
"""

import io
import os
from datetime import date

import pytest
from fastapi import UploadFile
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Update

from portal.core.config import settings
from portal.core.exceptions import ConflictError, FieldValidationError, NotFoundError, field_errors
from portal.db.session import session_scope
from portal.models.billing import BillingStatus
from portal.schemas.billing import BillingCreate, BillingUpdate
from portal.services.billing_service import BillingService


def _bill(lease_id: str, **overrides) -> BillingCreate:
    data = {
        "lease_id": lease_id,
        "due_date": date(2024, 12, 1),
        "amount": 1200,
        "description": "Rent payment for December 2024.",
    }
    data.update(overrides)
    return BillingCreate(**data)


def _upload(content: bytes, filename: str = "receipt.PDF") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


# ── Create / edit ─────────────────────────────────────────────────────────────

async def test_new_bill_is_pending(db, lease):
    bill = await BillingService.create(db, _bill(lease.id))

    assert bill.status == BillingStatus.pending.value
    assert bill.payment_date is None
    assert bill.filepath is None
    assert bill.lease_id == lease.id


async def test_create_requires_existing_lease(db):
    with pytest.raises(NotFoundError):
        await BillingService.create(db, _bill("no-such-lease"))


def test_bill_form_errors_are_keyed_by_field():
    with pytest.raises(ValidationError) as exc_info:
        BillingCreate(
            lease_id="lease-1",
            due_date="not-a-date",
            amount=-5,
            description="   too short   ",
        )

    errors = field_errors(exc_info.value.errors())
    assert set(errors) == {"due_date", "amount", "description"}


def test_bill_description_is_trimmed():
    data = _bill("lease-1", description="   Water charge for Q4 2024   ")
    assert data.description == "Water charge for Q4 2024"


async def test_edit_overwrites_every_field(db, lease):
    bill = await BillingService.create(db, _bill(lease.id))

    await BillingService.edit(
        db,
        bill.id,
        BillingUpdate(
            lease_id=lease.id,
            due_date=date(2025, 1, 15),
            amount=1350,
            description="Rent payment for January 2025.",
        ),
    )
    stored = await BillingService.get(db, bill.id)

    assert stored.due_date == date(2025, 1, 15)
    assert stored.amount == 1350
    assert stored.description == "Rent payment for January 2025."
    assert stored.status == BillingStatus.pending.value


async def test_edit_status_override(db, lease):
    bill = await BillingService.create(db, _bill(lease.id))
    update = _bill(lease.id).model_dump()

    paid = await BillingService.edit(db, bill.id, BillingUpdate(**update, status="paid"))
    assert paid.status == BillingStatus.paid.value
    assert paid.payment_date is not None

    reopened = await BillingService.edit(db, bill.id, BillingUpdate(**update, status="pending"))
    assert reopened.status == BillingStatus.pending.value
    assert reopened.payment_date is None


async def test_reopening_paid_bill_drops_payment(db, tenant, lease, upload_dir):
    bill = await BillingService.create(db, _bill(lease.id))
    paid = await BillingService.mark_paid(db, bill.id, tenant.id, _upload(b"receipt"))
    assert paid.filepath is not None

    reopened = await BillingService.edit(
        db, bill.id, BillingUpdate(**_bill(lease.id).model_dump(), status="pending")
    )

    assert reopened.status == BillingStatus.pending.value
    assert reopened.payment_date is None
    assert reopened.filepath is None


# ── Payment ───────────────────────────────────────────────────────────────────

async def test_mark_paid_stamps_payment(db, tenant, lease):
    bill = await BillingService.create(db, _bill(lease.id))

    paid = await BillingService.mark_paid(db, bill.id, tenant.id)

    assert paid.status == BillingStatus.paid.value
    assert paid.payment_date is not None
    assert paid.filepath is None


async def test_second_payment_conflicts(db, tenant, lease):
    bill = await BillingService.create(db, _bill(lease.id))
    first = await BillingService.mark_paid(db, bill.id, tenant.id)
    paid_at = first.payment_date

    with pytest.raises(ConflictError):
        await BillingService.mark_paid(db, bill.id, tenant.id)

    stored = await BillingService.get(db, bill.id)
    assert stored.payment_date == paid_at


async def test_cannot_pay_someone_elses_bill(db, other_tenant, lease):
    bill = await BillingService.create(db, _bill(lease.id))

    with pytest.raises(NotFoundError):
        await BillingService.mark_paid(db, bill.id, other_tenant.id)

    stored = await BillingService.get(db, bill.id)
    assert stored.status == BillingStatus.pending.value


async def test_payment_proof_is_stored(db, tenant, lease, upload_dir):
    bill = await BillingService.create(db, _bill(lease.id))

    paid = await BillingService.mark_paid(
        db, bill.id, tenant.id, _upload(b"%PDF-1.4 bank receipt")
    )

    assert paid.filepath.endswith(".pdf")
    assert os.path.dirname(paid.filepath) == str(upload_dir)
    with open(paid.filepath, "rb") as stored:
        assert stored.read() == b"%PDF-1.4 bank receipt"


async def test_oversized_proof_is_rejected(db, tenant, lease, upload_dir, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_MAX_BYTES", 8)
    bill = await BillingService.create(db, _bill(lease.id))

    with pytest.raises(FieldValidationError) as exc_info:
        await BillingService.mark_paid(db, bill.id, tenant.id, _upload(b"0123456789abcdef"))

    assert "proof" in exc_info.value.errors
    assert list(upload_dir.iterdir()) == []
    stored = await BillingService.get(db, bill.id)
    assert stored.status == BillingStatus.pending.value


async def test_losing_concurrent_payment_conflicts(
    db, session_factory, tenant, lease, create_bill, upload_dir
):
    bill = await create_bill(lease.id)
    # This session still holds the bill as pending when the other one pays it.
    loaded = await BillingService.get_for_user(db, bill.id, tenant.id)
    assert loaded.status == BillingStatus.pending.value

    async with session_scope(session_factory) as other:
        await BillingService.mark_paid(other, bill.id, tenant.id)

    with pytest.raises(ConflictError):
        await BillingService.mark_paid(db, bill.id, tenant.id, _upload(b"late receipt"))

    assert list(upload_dir.iterdir()) == []


async def test_store_error_during_payment_discards_proof(
    db, tenant, lease, upload_dir, monkeypatch
):
    bill = await BillingService.create(db, _bill(lease.id))
    real_execute = AsyncSession.execute

    async def execute(self, statement, *args, **kwargs):
        if isinstance(statement, Update):
            raise OperationalError("UPDATE billings", {}, Exception("database is locked"))
        return await real_execute(self, statement, *args, **kwargs)

    monkeypatch.setattr(AsyncSession, "execute", execute)

    with pytest.raises(OperationalError):
        await BillingService.mark_paid(db, bill.id, tenant.id, _upload(b"receipt"))

    assert list(upload_dir.iterdir()) == []


# ── Views ─────────────────────────────────────────────────────────────────────

async def test_due_view_lists_overdue_pending_bills(db, tenant, lease):
    overdue = await BillingService.create(db, _bill(lease.id, due_date=date(2024, 11, 1)))
    older = await BillingService.create(db, _bill(lease.id, due_date=date(2024, 10, 1)))
    await BillingService.create(db, _bill(lease.id, due_date=date(2025, 2, 1)))
    settled = await BillingService.create(db, _bill(lease.id, due_date=date(2024, 9, 1)))
    await BillingService.mark_paid(db, settled.id, tenant.id)

    due = await BillingService.list_due(db, as_of=date(2025, 1, 1))

    assert [b.id for b in due] == [overdue.id, older.id]

    await BillingService.mark_paid(db, overdue.id, tenant.id)
    due = await BillingService.list_due(db, as_of=date(2025, 1, 1))
    assert [b.id for b in due] == [older.id]


async def test_bill_due_today_is_not_overdue(db, lease):
    await BillingService.create(db, _bill(lease.id, due_date=date(2025, 1, 1)))
    assert await BillingService.list_due(db, as_of=date(2025, 1, 1)) == []


async def test_collected_view_lists_paid_bills(db, tenant, lease):
    first = await BillingService.create(db, _bill(lease.id, due_date=date(2024, 10, 1)))
    second = await BillingService.create(db, _bill(lease.id, due_date=date(2024, 11, 1)))
    await BillingService.create(db, _bill(lease.id, due_date=date(2024, 12, 1)))

    await BillingService.mark_paid(db, first.id, tenant.id)
    await BillingService.mark_paid(db, second.id, tenant.id)

    collected = await BillingService.list_collected(db)
    assert {b.id for b in collected} == {first.id, second.id}
    assert all(b.status == BillingStatus.paid.value for b in collected)


async def test_tenant_list_is_scoped_and_filtered(db, tenant, lease, other_lease):
    mine_old = await BillingService.create(db, _bill(lease.id, due_date=date(2024, 10, 1)))
    mine_new = await BillingService.create(db, _bill(lease.id, due_date=date(2024, 11, 1)))
    await BillingService.create(db, _bill(other_lease.id))
    await BillingService.mark_paid(db, mine_old.id, tenant.id)

    everything = await BillingService.list_for_user(db, tenant.id)
    assert [b.id for b in everything] == [mine_new.id, mine_old.id]

    pending = await BillingService.list_for_user(db, tenant.id, BillingStatus.pending)
    assert [b.id for b in pending] == [mine_new.id]


async def test_soft_deleted_bill_disappears(db, tenant, lease):
    bill = await BillingService.create(db, _bill(lease.id))
    kept = await BillingService.create(db, _bill(lease.id, due_date=date(2024, 6, 1)))

    await BillingService.soft_delete(db, bill.id)

    with pytest.raises(NotFoundError):
        await BillingService.get(db, bill.id)
    with pytest.raises(NotFoundError):
        await BillingService.mark_paid(db, bill.id, tenant.id)
    assert [b.id for b in await BillingService.list_for_lease(db, lease.id)] == [kept.id]
    assert [b.id for b in await BillingService.list_due(db, as_of=date(2025, 1, 1))] == [kept.id]


# ── HTTP ──────────────────────────────────────────────────────────────────────

async def test_admin_creates_bill(client, sign_in, admin, lease):
    sign_in(admin, role="admin")
    response = await client.post(
        "/admin/billing",
        json={
            "lease_id": lease.id,
            "due_date": "2024-12-01",
            "amount": 1200,
            "description": "Rent payment for December 2024.",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["payment_date"] is None


async def test_admin_bill_form_errors(client, sign_in, admin, lease):
    sign_in(admin, role="admin")
    response = await client.post(
        "/admin/billing",
        json={"lease_id": lease.id, "due_date": "2024-12-01", "amount": -1, "description": "short"},
    )

    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"amount", "description"}


async def test_tenant_pays_bill_once(client, sign_in, tenant, lease, create_bill):
    bill = await create_bill(lease.id)
    sign_in(tenant)

    first = await client.post(f"/tenants/billing/{bill.id}/pay")
    assert first.status_code == 200
    assert first.json()["status"] == "paid"
    assert first.json()["payment_date"] is not None

    second = await client.post(f"/tenants/billing/{bill.id}/pay")
    assert second.status_code == 409


async def test_tenant_pays_with_proof(client, sign_in, tenant, lease, create_bill, upload_dir):
    bill = await create_bill(lease.id)
    sign_in(tenant)

    response = await client.post(
        f"/tenants/billing/{bill.id}/pay",
        files={"proof": ("transfer.png", b"\x89PNG receipt", "image/png")},
    )

    assert response.status_code == 200
    filepath = response.json()["filepath"]
    assert filepath.endswith(".png")
    assert os.path.exists(filepath)


async def test_tenant_cannot_see_other_tenants_bill(
    client, sign_in, other_tenant, lease, create_bill
):
    bill = await create_bill(lease.id)
    sign_in(other_tenant)

    response = await client.get(f"/tenants/billing/{bill.id}")
    assert response.status_code == 404
    assert response.json() == {"detail": "Not found"}

    response = await client.post(f"/tenants/billing/{bill.id}/pay")
    assert response.status_code == 404


async def test_admin_due_view_over_http(client, sign_in, admin, lease, create_bill):
    overdue = await create_bill(lease.id, due_date=date(2024, 11, 1))
    await create_bill(lease.id, due_date=date(2025, 3, 1))
    sign_in(admin, role="admin")

    response = await client.get("/admin/billing/due", params={"as_of": "2025-01-01"})

    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [overdue.id]


async def test_admin_deletes_bill(client, sign_in, admin, lease, create_bill):
    bill = await create_bill(lease.id)
    sign_in(admin, role="admin")

    response = await client.delete(f"/admin/billing/{bill.id}")
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    response = await client.get(f"/admin/billing/{bill.id}")
    assert response.status_code == 404
