"""Password hashing, access tokens and password-reset tokens."""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from fastapi import HTTPException, status
from passlib.context import CryptContext

from app.config import get_settings
from app.services.cache import get_cache

settings = get_settings()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

_RESET_PREFIX = "auth:password_reset:"


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: Dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT access token with an expiration time."""

    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta is not None else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_user_token(user_id: int) -> str:
    return create_access_token({"sub": str(user_id)})


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode a JWT access token, mapping failures to HTTP 401."""

    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized to access this route"
        ) from exc


def _hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def issue_password_reset_token(user_id: int) -> str:
    """Create a single-use reset token; only its digest is kept in the cache."""

    token = secrets.token_hex(20)
    ttl = max(int(settings.password_reset_expire_minutes), 1) * 60
    get_cache().set(_RESET_PREFIX + _hash_reset_token(token), str(user_id), ttl)
    return token


def consume_password_reset_token(token: str) -> int | None:
    """Return the user id bound to ``token`` and invalidate it, or ``None``."""

    key = _RESET_PREFIX + _hash_reset_token(token)
    cache = get_cache()
    stored = cache.get(key)
    if stored is None:
        return None
    cache.delete(key)
    try:
        return int(stored)
    except ValueError:
        return None
