"""
Domain: platform users and the authenticated principal.

Users with role `isp` act on behalf of exactly one ISP; `isp_id` is required
for them and meaningless for every other role.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import UserRole
from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class User:
    id: str
    email: str
    password_hash: str
    role: UserRole
    is_active: bool = True
    isp_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.role is UserRole.ISP and not self.isp_id:
            raise ValueError("isp_id is required for users with role 'isp'")
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)


@dataclass(frozen=True, slots=True)
class AuthenticatedPrincipal:
    """Identity attached to a request after its bearer token was verified."""

    user_id: str
    email: str
    role: UserRole
    isp_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    @classmethod
    def for_user(cls, user: User) -> "AuthenticatedPrincipal":
        return cls(user_id=user.id, email=user.email, role=user.role, isp_id=user.isp_id)
