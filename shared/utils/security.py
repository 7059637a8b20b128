"""
shared/utils/security.py
JWT creation/verification and password hashing.
"""

import hmac
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from config.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# ── JWT ───────────────────────────────────────────────────────

def create_access_token(
    user_id: str,
    role: str,
    email: str,
    remember: bool = False,
    extra: Optional[dict] = None,
) -> tuple[str, str, int]:
    """
    Create a signed JWT access token.
    Returns (token, jti, expires_in). The jti binds the token to the active session.
    """
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    if remember:
        lifetime = timedelta(days=settings.JWT_REMEMBER_EXPIRE_DAYS)
    else:
        lifetime = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    payload = {
        "sub": str(user_id),
        "role": role,
        "email": email,
        "jti": jti,
        "iat": now,
        "exp": now + lifetime,
        "type": "access",
        **(extra or {}),
    }

    token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token, jti, int(lifetime.total_seconds())


def verify_access_token(token: str) -> dict:
    """
    Decode and verify a JWT access token.
    Raises JWTError on invalid/expired token.
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
    )
    if payload.get("type") != "access":
        raise JWTError("Invalid token type")
    return payload


# ── Password ──────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def constant_time_equals(a: str, b: str) -> bool:
    """Compare configured secrets (the admin password) without timing leaks."""
    return hmac.compare_digest(a.encode(), b.encode())
