"""Caller identity for the HTTP and real-time surfaces.

Session issuance lives with the upstream auth gateway. HTTP requests arrive
already authenticated and carry the caller in ``X-User-Id`` / ``X-User-Role``
headers; the real-time channel receives a short-lived HS256 JWT at connect
time whose ``sub`` claim is the user id.
"""

import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from fastapi import Header

from shared.exceptions import AuthorizationError

ALGORITHM = "HS256"
DEFAULT_TOKEN_EXPIRES = 3600


class Role(Enum):
    USER = "user"
    REVIEWER = "reviewer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of an operation."""

    user_id: str
    role: str = Role.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_reviewer(self) -> bool:
        return self.role in (Role.REVIEWER.value, Role.ADMIN.value)

    def require_reviewer(self) -> None:
        if not self.is_reviewer:
            raise AuthorizationError({"role": ["Reviewer or admin role required"]})

    def require_admin(self) -> None:
        if not self.is_admin:
            raise AuthorizationError({"role": ["Admin role required"]})


def current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    """FastAPI dependency resolving the caller from gateway headers."""
    if not x_user_id:
        raise AuthorizationError({"auth": ["Missing caller identity"]}, authenticated=False)

    role = (x_user_role or Role.USER.value).lower()
    if role not in {r.value for r in Role}:
        raise AuthorizationError({"role": [f"Unknown role: {role}"]})

    return Actor(user_id=x_user_id, role=role)


# ---------------------------------------------------------------------------
# Real-time channel tokens
# ---------------------------------------------------------------------------
def _get_secret() -> str:
    return os.getenv("NOTIFICATIONS_JWT_SECRET", "change-me-in-production")


def issue_connection_token(user_id: str, expires_in: int = DEFAULT_TOKEN_EXPIRES) -> str:
    """Issue a token for the real-time channel (used by the gateway and tests)."""
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "type": "realtime",
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, _get_secret(), algorithm=ALGORITHM)


def verify_connection_token(token: str | None) -> str:
    """Return the user id carried by a real-time token.

    Raises:
        AuthorizationError: missing, expired, or tampered token.
    """
    if not token:
        raise AuthorizationError({"token": ["Missing connection token"]}, authenticated=False)

    try:
        payload = jwt.decode(token, _get_secret(), algorithms=[ALGORITHM])
    except jwt.InvalidTokenError as exc:
        raise AuthorizationError({"token": [f"Invalid connection token: {exc}"]}, authenticated=False) from None

    if payload.get("type") != "realtime" or not payload.get("sub"):
        raise AuthorizationError({"token": ["Token is not valid for the real-time channel"]}, authenticated=False)

    return str(payload["sub"])
