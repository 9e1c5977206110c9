"""
models/user.py
--------------
User ORM model.

Role design:
  - 'admin': manages leases, bills and maintenance tickets for all tenants.
  - 'user':  a tenant; sees only their own lease, bills and tickets.

Users are never hard-deleted: deleted_at marks a removed account, and any
session still pointing at it is forced to log out. hashed_password is
nullable for accounts provisioned from an external directory; plain text
is never stored and never logged.
"""

from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, SoftDeleteMixin, TimestampMixin, generate_uuid


class UserRole(str, PyEnum):
    admin = "admin"
    user = "user"


class User(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    hashed_password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("roles.id"),
        nullable=False,
        index=True,
    )

    # Relationships
    role: Mapped["Role"] = relationship("Role", back_populates="users")  # noqa: F821
    lease: Mapped[Optional["Lease"]] = relationship(  # noqa: F821
        "Lease", back_populates="user", uselist=False
    )
    maintenance_requests: Mapped[list["Maintenance"]] = relationship(  # noqa: F821
        "Maintenance", back_populates="user"
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"
