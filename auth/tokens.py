"""
JWT access and refresh tokens (PyJWT, HS256).

Both token kinds carry the principal (`sub`, `email`, `role`, `ispId`) plus a
`type` claim, so a refresh token can never be used as an access token. Refresh
tokens are signed with JWT_REFRESH_SECRET when it is set.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from core.config import Settings
from domain.enums import UserRole
from domain.errors import UnauthorizedError
from domain.user import AuthenticatedPrincipal

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int  # access token lifetime, seconds


def _encode(
    principal: AuthenticatedPrincipal,
    token_type: str,
    secret: str,
    lifetime: timedelta,
    now: datetime,
) -> str:
    payload: Dict[str, Any] = {
        "sub": principal.user_id,
        "email": principal.email,
        "role": principal.role.value,
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
        "jti": str(uuid.uuid4()),
    }
    if principal.isp_id:
        payload["ispId"] = principal.isp_id
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def issue_token_pair(
    principal: AuthenticatedPrincipal,
    settings: Settings,
    now: Optional[datetime] = None,
) -> TokenPair:
    now = now or datetime.now(timezone.utc)
    access_lifetime = timedelta(minutes=settings.jwt_access_ttl_minutes)
    return TokenPair(
        access_token=_encode(principal, ACCESS_TOKEN_TYPE, settings.jwt_secret, access_lifetime, now),
        refresh_token=_encode(
            principal,
            REFRESH_TOKEN_TYPE,
            settings.refresh_secret,
            timedelta(days=settings.jwt_refresh_ttl_days),
            now,
        ),
        expires_in=int(access_lifetime.total_seconds()),
    )


def _decode(token: str, secret: str, expected_type: str) -> AuthenticatedPrincipal:
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "exp", "type"]},
        )
    except ExpiredSignatureError:
        raise UnauthorizedError("Token has expired") from None
    except InvalidTokenError:
        raise UnauthorizedError("Invalid or expired token") from None

    if payload.get("type") != expected_type:
        raise UnauthorizedError("Invalid token type")

    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        raise UnauthorizedError("Invalid or expired token") from None

    return AuthenticatedPrincipal(
        user_id=str(payload["sub"]),
        email=str(payload.get("email", "")),
        role=role,
        isp_id=payload.get("ispId"),
    )


def decode_access_token(token: str, settings: Settings) -> AuthenticatedPrincipal:
    """
    Verify an access token and return its principal.

    Raises:
        UnauthorizedError: bad signature, expired, malformed, or not an access token.
    """

    return _decode(token, settings.jwt_secret, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str, settings: Settings) -> AuthenticatedPrincipal:
    return _decode(token, settings.refresh_secret, REFRESH_TOKEN_TYPE)


__all__ = ["TokenPair", "issue_token_pair", "decode_access_token", "decode_refresh_token"]
