"""
auth/tokens.py -- JWT sessions, password hashing, and reset-token utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, user_name, and expiry. Verification returns None on any
       failure -- the route layer turns that into a 401.

  Passwords: bcrypt, used directly. The _DUMMY_HASH constant enables timing
       equalization in authenticate_user() so response time does not reveal
       whether a user name exists.

  Reset tokens: uuid4 strings. They are stored as-is on the user record so
       the store can look them up directly; each carries an expiry and is
       cleared on use.

  SECRET_KEY: sourced from core.config.get_settings(), which refuses to start
       in production without a key of at least 32 characters.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("gatehouse.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

COOKIE_NAME = "jwt"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt only reads the first 72 bytes and bcrypt 5.x raises on longer
    input; the API models reject passwords over 72 UTF-8 bytes up front.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the DB, or an over-long password rejected by bcrypt 4.x.
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("gatehouse_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, user_name: str, expire_seconds: int = 0) -> str:
    """Encode a signed JWT with user identity and expiry.

    Args:
        user_id:        Numeric user ID stored in the DB.
        user_name:      Stored as the JWT subject claim.
        expire_seconds: Session duration in seconds. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    expire = datetime.now(timezone.utc) + timedelta(seconds=duration)
    payload = {
        "sub": user_name,
        "user_id": user_id,
        "exp": expire,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure."""
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if "user_id" not in payload:
        return None
    return payload


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, user_name: str, password: str) -> User | None:
    """Authenticate a user_name/password login with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown user_name: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the User on success, None on any failure.
    """
    user = store.get_by_user_name(user_name)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


# ---------------------------------------------------------------------------
# Temporary password (reset token)
# ---------------------------------------------------------------------------


def generate_temp_password() -> str:
    """Return a fresh single-use reset token (uuid4, 122 bits of randomness)."""
    return str(uuid.uuid4())


def temp_password_expiry(ttl_seconds: int = 0) -> str:
    """Return the ISO 8601 UTC instant a token issued now stops being valid."""
    ttl = ttl_seconds if ttl_seconds > 0 else _settings.temp_password_ttl_seconds
    return (datetime.now(timezone.utc) + timedelta(seconds=ttl)).isoformat()


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str, expire_seconds: int = 0) -> None:
    """Write the JWT as an httpOnly session cookie on the response.

    httponly=True: JS cannot read the cookie.
    samesite="lax": not sent on cross-site POST.
    secure: only sent over HTTPS when SECURE_COOKIES=true (set in production).
    max_age: matches the JWT expiry so both expire together.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    response.set_cookie(
        COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
        max_age=duration,
    )


def clear_auth_cookie(response) -> None:
    """Expire the session cookie on the client."""
    response.delete_cookie(COOKIE_NAME, httponly=True, samesite="lax", secure=_settings.secure_cookies)
