"""Merchant authentication: password hashing, JWTs and store preview tokens."""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from storefront.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 30
REFRESH_TOKEN_EXPIRE_DAYS = 7
PREVIEW_TOKEN_BYTES = 32
REFRESH_TOKEN_TYPE = "refresh"


class TokenPayload(BaseModel):
    """Claims of a merchant token. ``tenant_id`` is the store id."""

    sub: str
    tenant_id: Optional[str] = None
    roles: list[str] = []
    exp: datetime
    iat: datetime
    type: Optional[str] = None

    @property
    def is_refresh(self) -> bool:
        return self.type == REFRESH_TOKEN_TYPE


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def generate_preview_token() -> str:
    """Random 64-character hex token for store previews."""
    return secrets.token_hex(PREVIEW_TOKEN_BYTES)


def _encode(subject: str, store_id: Optional[str], lifetime: timedelta, **claims: Any) -> str:
    issued_at = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": subject,
        "tenant_id": store_id,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        **claims,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def create_access_token(
    subject: str,
    tenant_id: Optional[str],
    roles: list[str],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Short-lived token carrying the user's store and roles."""
    lifetime = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(subject, tenant_id, lifetime, roles=roles)


def create_refresh_token(subject: str, tenant_id: Optional[str]) -> str:
    return _encode(
        subject,
        tenant_id,
        timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
        type=REFRESH_TOKEN_TYPE,
    )


def decode_token(token: str) -> Optional[TokenPayload]:
    """Claims of a valid token, or None when it fails verification or lacks required claims."""
    try:
        return TokenPayload(**jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM]))
    except (JWTError, ValidationError):
        return None
