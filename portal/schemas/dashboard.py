"""
schemas/dashboard.py
--------------------
Aggregated payloads for the admin and tenant landing pages.
"""

from typing import Optional

from pydantic import BaseModel

from portal.schemas.billing import BillingRead
from portal.schemas.lease import LeaseRead
from portal.schemas.maintenance import MaintenanceRead
from portal.schemas.notification import NotificationRead


class AdminDashboard(BaseModel):
    open_maintenance: list[MaintenanceRead]
    open_maintenance_total: int
    tenant_total: int
    due_payments: list[BillingRead]
    collected_payments: list[BillingRead]


class TenantDashboard(BaseModel):
    lease: Optional[LeaseRead]
    pending_bills: list[BillingRead]
    maintenance: list[MaintenanceRead]
    notifications: list[NotificationRead]
