"""JWT creation and verification using python-jose."""
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

from jose import JWTError, jwt

from gatehouse.config import get_settings
from gatehouse.domain.errors import AuthenticationError

ACCESS_TOKEN_TYPE = "access"
CHALLENGE_TOKEN_TYPE = "two-factor"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(claims: dict[str, Any]) -> tuple[str, datetime]:
    """Sign ``claims`` as an access token.

    ``claims`` must carry ``sub``; ``jti``, ``iat``, ``exp`` and ``type`` are
    added here.

    Returns:
        (token_string, expires_at)
    """
    settings = get_settings()
    now = _utcnow()
    expires_at = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload: dict[str, Any] = {
        **claims,
        "jti": str(uuid4()),
        "iat": now,
        "exp": expires_at,
        "type": ACCESS_TOKEN_TYPE,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate any token signed with the service key. Raises JWTError."""
    settings = get_settings()
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def sign_payload(payload: dict[str, Any], expires_in_seconds: int) -> str:
    """Sign an arbitrary short-lived payload (used for signed storage URLs)."""
    settings = get_settings()
    body = {**payload, "exp": _utcnow() + timedelta(seconds=expires_in_seconds)}
    return jwt.encode(body, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_challenge_token(user_id: UUID, expires_in_seconds: int) -> str:
    """Short-lived proof that the password step of a two-factor login passed."""
    return sign_payload({"sub": str(user_id), "type": CHALLENGE_TOKEN_TYPE}, expires_in_seconds)


def get_user_id_from_challenge(token: str) -> UUID:
    try:
        payload = decode_token(token)
    except JWTError as exc:
        raise AuthenticationError("Login challenge is invalid or has expired") from exc
    if payload.get("type") != CHALLENGE_TOKEN_TYPE:
        raise AuthenticationError("Login challenge is invalid or has expired")
    return UUID(payload["sub"])


def get_user_id_from_token(token: str) -> UUID:
    """Extract the user id from a valid access token or raise AuthenticationError."""
    try:
        payload = decode_token(token)
    except JWTError as exc:
        raise AuthenticationError("Invalid or expired access token") from exc
    if payload.get("type") != ACCESS_TOKEN_TYPE or "sub" not in payload:
        raise AuthenticationError("Invalid access token")
    try:
        return UUID(payload["sub"])
    except ValueError as exc:
        raise AuthenticationError("Invalid access token") from exc
