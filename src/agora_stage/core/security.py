"""JWT helpers for bearer authentication."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from agora_stage.core.settings import settings


def create_access_token(uid: int) -> str:
    """Create JWT access token for user authentication."""
    to_encode: dict[str, object] = {"sub": str(uid)}
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> int | None:
    """Return the uid carried by ``token``, or None when it cannot be trusted.

    Args:
        token: Encoded JWT from the Authorization header.

    Returns:
        The positive integer uid in the ``sub`` claim, or None if the token is
        invalid, expired, or carries a malformed subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        uid = int(subject)
    except (TypeError, ValueError):
        return None
    return uid if uid > 0 else None
