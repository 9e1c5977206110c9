"""
services/user_service.py
------------------------
Business logic for roles, registration, authentication, and tenant listing.

Soft-deleted users are excluded from every lookup: a deleted account can
neither log in nor appear in admin listings.
"""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.core.exceptions import FieldValidationError
from portal.core.logging import get_logger
from portal.core.security import hash_password, verify_password
from portal.models.role import Permission, Role
from portal.models.user import User, UserRole
from portal.schemas.user import UserRegister

logger = get_logger(__name__)

DEFAULT_ROLE_PERMISSIONS: dict[str, list[str]] = {
    UserRole.user.value: [],
    UserRole.admin.value: [
        "manage-billing",
        "manage-leases",
        "manage-maintenance",
        "view-reports",
    ],
}


class UserService:

    @staticmethod
    async def ensure_default_roles(db: AsyncSession) -> list[Role]:
        """
        Idempotently seed the 'user' and 'admin' roles and their permissions.
        Existing roles are left untouched.
        """
        roles = []
        for role_name, permission_names in DEFAULT_ROLE_PERMISSIONS.items():
            role = await UserService.get_role_by_name(db, role_name)
            if role is None:
                permissions = []
                for name in permission_names:
                    result = await db.execute(select(Permission).where(Permission.name == name))
                    permission = result.scalar_one_or_none() or Permission(name=name)
                    permissions.append(permission)
                role = Role(name=role_name, permissions=permissions)
                db.add(role)
                await db.flush()
                logger.info("Role seeded", role=role_name, permissions=permission_names)
            roles.append(role)
        return roles

    @staticmethod
    async def get_role_by_name(db: AsyncSession, name: str) -> Role | None:
        result = await db.execute(
            select(Role).options(selectinload(Role.permissions)).where(Role.name == name)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def register(db: AsyncSession, data: UserRegister) -> User:
        """
        Self-registration: creates a 'user'-role account.
        Raises FieldValidationError on duplicate email.
        """
        role = await UserService.get_role_by_name(db, UserRole.user.value)
        if role is None:
            raise RuntimeError("Default 'user' role is missing; run create_tables.py")

        if await UserService.get_user_by_email(db, data.email) is not None:
            raise FieldValidationError({"email": "A user with this email already exists"})

        user = User(
            email=data.email.lower(),
            name=f"{data.first_name} {data.last_name}",
            mobile=data.mobile,
            hashed_password=hash_password(data.password),
            role_id=role.id,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise FieldValidationError({"email": "A user with this email already exists"})
        await db.refresh(user)
        logger.info("User registered", user_id=user.id)
        return user

    @staticmethod
    async def authenticate(
        db: AsyncSession, email: str, password: str
    ) -> tuple[User, str] | None:
        """
        Verify credentials and return (user, role name) if valid, else None.
        Email lookup is case-insensitive.
        """
        result = await db.execute(
            User.active()
            .options(selectinload(User.role))
            .where(User.email == email.lower())
        )
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.hashed_password):
            return None
        return user, user.role.name

    @staticmethod
    async def list_tenants(
        db: AsyncSession, skip: int = 0, limit: int = 50
    ) -> tuple[int, list[User]]:
        """Active users holding the 'user' role, ordered by name."""
        base = (
            User.active()
            .join(Role, User.role_id == Role.id)
            .where(Role.name == UserRole.user.value)
        )

        count_result = await db.execute(
            select(func.count()).select_from(base.subquery())
        )
        total = count_result.scalar_one()

        result = await db.execute(
            base.order_by(User.name, User.id).offset(skip).limit(limit)
        )
        return total, list(result.scalars().all())
