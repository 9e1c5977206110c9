"""
core/session.py
---------------
Cookie-backed session management.

Flow:
  1. create_session() signs {userId, userRole, exp} and sets it as an
     HttpOnly, SameSite=Lax cookie on the outgoing response.
  2. get_user_id() reads the cookie and verifies the signature. Any failure
     (missing, malformed, expired, forged) yields None; callers decide
     whether that means a redirect.
  3. get_user() loads the user and role from the database. A session that
     outlives its user (missing or soft-deleted) forces a logout.
  4. destroy_session() clears the cookie.
"""

from dataclasses import dataclass, field

from fastapi import Request, Response
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.core.config import settings
from portal.core.logging import get_logger
from portal.core.redirects import DEFAULT_REDIRECT, redirect_exception
from portal.core.security import decode_session_token, encode_session_token
from portal.models.role import Role
from portal.models.user import User

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """Authenticated identity with its role resolved from the store."""

    user: User
    role_name: str
    permissions: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.user.id


def session_max_age(remember: bool) -> int:
    if remember:
        return settings.SESSION_REMEMBER_MAX_AGE_SECONDS
    return settings.SESSION_MAX_AGE_SECONDS


def create_session(response: Response, user_id: str, role: str, remember: bool) -> None:
    max_age = session_max_age(remember)
    token = encode_session_token(user_id, role, max_age)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    logger.info("Session issued", user_id=user_id, role=role, remember=remember)


def destroy_session(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    logger.info("Session cleared")


def clear_cookie_header() -> str:
    """Set-Cookie value that removes the session cookie."""
    response = Response()
    destroy_session(response)
    return response.headers["set-cookie"]


def get_user_id(request: Request) -> str | None:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    try:
        payload = decode_session_token(token)
    except JWTError as exc:
        logger.warning("Session token rejected", error=str(exc))
        return None
    user_id = payload.get("userId")
    if not user_id or not isinstance(user_id, str):
        logger.warning("Session token without user id")
        return None
    return user_id


async def load_user(db: AsyncSession, user_id: str) -> SessionUser | None:
    """Active user with role and permissions, or None."""
    result = await db.execute(
        User.active()
        .options(selectinload(User.role).selectinload(Role.permissions))
        .where(User.id == user_id)
    )
    user = result.scalar_one_or_none()
    if user is None:
        return None
    return SessionUser(
        user=user,
        role_name=user.role.name,
        permissions=[p.name for p in user.role.permissions],
    )


async def get_user(request: Request, db: AsyncSession) -> SessionUser | None:
    user_id = get_user_id(request)
    if user_id is None:
        return None

    session_user = await load_user(db, user_id)
    if session_user is None:
        logger.warning("Session user no longer exists, forcing logout", user_id=user_id)
        raise redirect_exception(DEFAULT_REDIRECT, set_cookie=clear_cookie_header())
    return session_user

