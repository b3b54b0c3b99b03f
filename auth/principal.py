"""
Principal checks: bearer extraction, role requirements and ISP ownership.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from domain.enums import UserRole
from domain.errors import ForbiddenError
from domain.user import AuthenticatedPrincipal

logger = logging.getLogger(__name__)


def extract_bearer_token(header: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization: Bearer <token>` header, else None."""

    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def is_admin(principal: AuthenticatedPrincipal) -> bool:
    return principal.role is UserRole.ADMIN


def owns_isp_resource(principal: AuthenticatedPrincipal, isp_id: Optional[str]) -> bool:
    """
    Admins own everything; an ISP principal owns resources of its own ISP.

    A resource without an ISP (e.g. an unassigned lead) belongs to no ISP.
    """

    if is_admin(principal):
        return True
    return (
        principal.role is UserRole.ISP
        and principal.isp_id is not None
        and isp_id is not None
        and principal.isp_id == isp_id
    )


def check_isp_ownership(principal: AuthenticatedPrincipal, isp_id: Optional[str]) -> None:
    if not owns_isp_resource(principal, isp_id):
        logger.warning(
            "Forbidden access to ISP resource",
            extra={"userId": principal.user_id, "role": principal.role.value, "resourceIspId": isp_id},
        )
        raise ForbiddenError("You do not have permission to access this resource")


def require_role(
    principal: AuthenticatedPrincipal,
    roles: Iterable[UserRole],
    require_isp_id: bool = False,
) -> None:
    allowed = frozenset(roles)
    if principal.role not in allowed:
        logger.warning(
            "Insufficient permissions",
            extra={
                "userId": principal.user_id,
                "role": principal.role.value,
                "requiredRoles": sorted(role.value for role in allowed),
            },
        )
        raise ForbiddenError("Insufficient permissions")
    if require_isp_id and not principal.isp_id:
        logger.warning("ISP ID required but not found", extra={"userId": principal.user_id})
        raise ForbiddenError("ISP ID required")


__all__ = [
    "extract_bearer_token",
    "is_admin",
    "owns_isp_resource",
    "check_isp_ownership",
    "require_role",
]
