"""
FastAPI dependencies.

Services are built once by the application lifespan and stored on
`app.state`; handlers receive them through these providers. Authentication
turns the bearer token into an AuthenticatedPrincipal.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from auth.principal import extract_bearer_token, require_role
from auth.tokens import decode_access_token
from core.config import Settings
from domain.enums import UserRole
from domain.errors import UnauthorizedError
from domain.user import AuthenticatedPrincipal
from repositories.container import RepositoryContainer
from services.auth_service import AuthService
from services.filter_service import FilterService
from services.lead_service import LeadService
from services.tariff_service import TariffService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_container(request: Request) -> RepositoryContainer:
    return request.app.state.container


def get_tariff_service(request: Request) -> TariffService:
    return request.app.state.tariff_service


def get_lead_service(request: Request) -> LeadService:
    return request.app.state.lead_service


def get_filter_service(request: Request) -> FilterService:
    return request.app.state.filter_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_current_principal(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedPrincipal:
    """
    Resolve the caller from `Authorization: Bearer <token>`.

    Raises:
        UnauthorizedError: header missing, malformed or token invalid.
    """

    token = extract_bearer_token(authorization)
    if token is None:
        raise UnauthorizedError("Missing authorization token")
    return decode_access_token(token, settings)


def require_admin(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
) -> AuthenticatedPrincipal:
    require_role(principal, (UserRole.ADMIN,))
    return principal


def require_isp(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
) -> AuthenticatedPrincipal:
    require_role(principal, (UserRole.ISP,), require_isp_id=True)
    return principal


def require_admin_or_isp(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
) -> AuthenticatedPrincipal:
    require_role(principal, (UserRole.ADMIN, UserRole.ISP))
    return principal
