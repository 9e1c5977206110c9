"""
models/__init__.py
------------------
Re-export all models so create_tables.py (and Alembic, if added) can
import Base and discover all tables via a single import:

    from portal.models import Base
"""

from portal.db.base import Base
from portal.models.role import Permission, Role, role_permissions
from portal.models.user import User, UserRole
from portal.models.lease import Lease
from portal.models.billing import Billing, BillingStatus
from portal.models.maintenance import Maintenance, MaintenanceStatus
from portal.models.notification import Notification

__all__ = [
    "Base",
    "Permission",
    "Role",
    "role_permissions",
    "User",
    "UserRole",
    "Lease",
    "Billing",
    "BillingStatus",
    "Maintenance",
    "MaintenanceStatus",
    "Notification",
]
