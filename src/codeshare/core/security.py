"""Admin credential helpers built on signed JWTs."""
from __future__ import annotations

import hmac
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from codeshare.core.errors import Forbidden, Unauthenticated
from codeshare.core.settings import settings

ADMIN_ROLE = "admin"


def verify_admin_password(candidate: str) -> bool:
    """Compare a submitted password to the configured admin password.

    Uses a constant-time comparison so response timing does not reveal how
    much of the password matched.
    """
    return hmac.compare_digest(
        candidate.encode("utf-8"),
        settings.admin_password.encode("utf-8"),
    )


def create_access_token(
    role: str = ADMIN_ROLE,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed bearer token asserting ``role``."""
    expire = datetime.now(UTC) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": "admin", "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_admin_token(token: str | None) -> dict[str, Any]:
    """Validate a bearer token and require the admin role.

    Args:
        token: Raw JWT string taken from the Authorization header.

    Returns:
        The decoded claims.

    Raises:
        Unauthenticated: If the token is missing, malformed, expired or signed
            with a different secret.
        Forbidden: If the token is valid but lacks the admin role.
    """
    if not token:
        raise Unauthenticated("Token not provided")
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise Unauthenticated("Invalid token") from err

    if payload.get("role") != ADMIN_ROLE:
        raise Forbidden()
    return payload
