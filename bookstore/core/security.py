"""Requester token utilities."""
import logging
import time
from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from bookstore.config import settings

logger = logging.getLogger(__name__)


def create_access_token(
    subject: str | Any,
    expires_delta: timedelta | None = None,
) -> str:
    """Create JWT access token.

    Tokens are normally issued by the auth service; this helper exists for
    tooling and tests.

    Args:
        subject: Token subject (user ID)
        expires_delta: Token expiration time

    Returns:
        str: JWT token
    """
    if expires_delta:
        delta_seconds = int(expires_delta.total_seconds())
    else:
        delta_seconds = settings.jwt_access_token_expire_minutes * 60
    # exp must be an integer unix timestamp
    exp_ts = int(time.time()) + delta_seconds
    to_encode = {"exp": exp_ts, "sub": str(subject)}
    encoded_jwt = jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    if isinstance(encoded_jwt, bytes):
        return encoded_jwt.decode("utf-8")
    return encoded_jwt


def decode_access_token(token: str) -> dict | None:
    """Decode JWT access token.

    Args:
        token: JWT token

    Returns:
        dict | None: Decoded payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None
