"""
dependencies.py
---------------
FastAPI dependency injection functions for authentication and authorisation.

Flow:
  1. get_user_id reads and verifies the session cookie (no DB round-trip).
  2. require_user_id turns "no session" into a 303 to /login, carrying the
     current path as ?redirectTo= so the user lands back here afterwards.
  3. require_user loads the full user and role from the DB; a deleted user
     is logged out.
  4. require_role / require_permission layer a role or permission check on
     top of require_user. A mismatch redirects to the landing page: callers
     are never told that the resource exists.

Every request is evaluated on its own; nothing is cached between requests.
The role stored in the cookie is only a snapshot and is never used here.
"""

from typing import Annotated, Iterable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.logging import bind_user, get_logger
from portal.core.redirects import DEFAULT_REDIRECT, login_url, redirect_exception
from portal.core.session import SessionUser, get_user, get_user_id
from portal.db.session import get_db

logger = get_logger(__name__)


def _current_path(request: Request) -> str:
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return path


def can(user_permissions: Iterable[str], permission: str | Iterable[str]) -> bool:
    """True if the user holds any one of the required permissions."""
    required = {permission} if isinstance(permission, str) else set(permission)
    return any(p in required for p in user_permissions)


def require_user_id(request: Request, redirect_to: str | None = None) -> str:
    """
    Return the session's user id or abort with a redirect to the login page.
    redirect_to defaults to the path being requested.
    """
    user_id = get_user_id(request)
    if user_id is None:
        raise redirect_exception(login_url(redirect_to or _current_path(request)))
    return user_id


async def require_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionUser:
    require_user_id(request)
    session_user = await get_user(request, db)
    if session_user is None:
        raise redirect_exception(login_url(_current_path(request)))
    bind_user(session_user.id, session_user.role_name)
    return session_user


def require_role(role_name: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/admin/billing/due")
        async def due(admin: Annotated[SessionUser, Depends(require_role("admin"))]):
            ...
    """
    async def role_checker(
        current_user: Annotated[SessionUser, Depends(require_user)],
    ) -> SessionUser:
        if current_user.role_name != role_name:
            logger.warning(
                "Role check failed",
                user_id=current_user.id,
                required=role_name,
                actual=current_user.role_name,
            )
            raise redirect_exception(DEFAULT_REDIRECT)
        return current_user
    return role_checker


def require_permission(permission: str | Iterable[str]):
    """Like require_role, but checks the role's permission strings."""
    async def permission_checker(
        current_user: Annotated[SessionUser, Depends(require_user)],
    ) -> SessionUser:
        if not can(current_user.permissions, permission):
            logger.warning(
                "Permission check failed",
                user_id=current_user.id,
                required=permission if isinstance(permission, str) else sorted(permission),
            )
            raise redirect_exception(DEFAULT_REDIRECT)
        return current_user
    return permission_checker


CurrentUser = Annotated[SessionUser, Depends(require_user)]
AdminUser = Annotated[SessionUser, Depends(require_role("admin"))]
