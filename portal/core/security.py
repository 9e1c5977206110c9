"""
core/security.py
----------------
Password hashing and session token signing.

Design decisions:
  - bcrypt via passlib; the work factor comes from settings so tests can
    run with a cheap factor.
  - The session token is a compact HS256 JWT. It carries the user id and a
    snapshot of the role name taken at login; authorization never trusts the
    snapshot, it re-resolves the role from the database.
  - Expiry lives inside the signed payload, so a cookie replayed after its
    Max-Age is still rejected server-side.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt
from passlib.context import CryptContext

from portal.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)


# ── Password Utilities ────────────────────────────────────────────────────────

def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the plain-text password."""
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Constant-time comparison of plain password against stored hash.
    Users created through an external directory have no local hash and
    can never log in with a password.
    """
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


# ── Session Token Utilities ───────────────────────────────────────────────────

def encode_session_token(user_id: str, role: str, max_age_seconds: int) -> str:
    """
    Sign a session payload.

    Args:
        user_id: User UUID (stored in 'userId').
        role: Role name at login time (stored in 'userRole').
        max_age_seconds: Lifetime of the token, matching the cookie Max-Age.

    Returns:
        Signed token string.
    """
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "userId": user_id,
        "userRole": role,
        "iat": now,
        "exp": now + timedelta(seconds=max_age_seconds),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a session token.

    Raises:
        JWTError: If the token is invalid, expired, or tampered with.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
