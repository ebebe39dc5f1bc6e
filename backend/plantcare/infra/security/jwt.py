"""JWT access/refresh tokens (PyJWT)."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from plantcare.settings import settings

logger = logging.getLogger(__name__)


def _encode(data: dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    payload = data.copy()
    payload.update(
        {
            "type": token_type,
            "exp": datetime.now(timezone.utc) + expires_delta,
        }
    )
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Short-lived token sent as Bearer on API calls."""
    return _encode(
        data, "access", expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )


def create_refresh_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Long-lived token exchanged for a new pair at /auth/refresh."""
    return _encode(
        data, "refresh", expires_delta or timedelta(days=settings.refresh_token_expire_days)
    )


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """Decode and verify a token. Returns None if invalid or expired."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.PyJWTError as e:
        logger.debug("Rejected token: %s", e)
        return None
