"""
Lease upsert, tenant listing and the landing page payloads.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from portal.core.exceptions import NotFoundError
from portal.schemas.lease import LeaseUpsert
from portal.services.lease_service import LeaseService
from portal.services.user_service import UserService

TERMS = {
    "start_date": "2025-01-01",
    "end_date": "2025-12-31",
    "rent_amount": 1500,
    "deposit": 3000,
    "maintenance_fee": 75,
    "property_description": "Flat 2, 8 Mill Lane",
}


def test_lease_term_must_not_end_before_start():
    with pytest.raises(ValidationError):
        LeaseUpsert(**{**TERMS, "end_date": "2024-12-31"})


async def test_upsert_replaces_existing_terms(db, tenant, lease):
    updated = await LeaseService.upsert_for_user(
        db, tenant.id, LeaseUpsert(**{**TERMS, "rent_amount": 1600})
    )

    assert updated.id == lease.id
    assert updated.rent_amount == 1600
    assert updated.start_date == date(2025, 1, 1)


async def test_upsert_requires_live_user(db):
    with pytest.raises(NotFoundError):
        await LeaseService.upsert_for_user(db, "no-such-user", LeaseUpsert(**TERMS))


async def test_tenant_listing_excludes_admins(db, tenant, other_tenant, admin):
    total, users = await UserService.list_tenants(db)

    assert total == 2
    assert {u.id for u in users} == {tenant.id, other_tenant.id}


async def test_admin_sets_lease_over_http(client, sign_in, admin, tenant):
    sign_in(admin, role="admin")

    response = await client.put(f"/admin/tenants/{tenant.id}/lease", json=TERMS)
    assert response.status_code == 200
    assert response.json()["rent_amount"] == 1500

    response = await client.put(
        f"/admin/tenants/{tenant.id}/lease", json={**TERMS, "rent_amount": -1}
    )
    assert response.status_code == 422
    assert "rent_amount" in response.json()["errors"]


async def test_tenant_without_lease(client, sign_in, tenant):
    sign_in(tenant)
    response = await client.get("/tenants/lease")
    assert response.status_code == 404


async def test_tenant_dashboard(client, sign_in, tenant, lease, create_bill):
    bill = await create_bill(lease.id)
    sign_in(tenant)
    await client.post("/tenants/maintenance", json={"details": "Smoke alarm beeping"})

    response = await client.get("/tenants/dashboard")

    assert response.status_code == 200
    body = response.json()
    assert body["lease"]["id"] == lease.id
    assert [b["id"] for b in body["pending_bills"]] == [bill.id]
    assert [t["details"] for t in body["maintenance"]] == ["Smoke alarm beeping"]
    assert body["notifications"] == []


async def test_admin_dashboard_counts(client, sign_in, admin, tenant, lease, create_bill):
    overdue = await create_bill(lease.id, due_date=date(2020, 1, 1))
    sign_in(admin, role="admin")

    response = await client.get("/admin/dashboard")

    assert response.status_code == 200
    body = response.json()
    assert body["tenant_total"] == 1
    assert [b["id"] for b in body["due_payments"]] == [overdue.id]
    assert body["collected_payments"] == []
