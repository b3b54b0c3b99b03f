"""
Tests for `auth/` and `services/auth_service.py`.

Covers contract rules:
- Passwords: bcrypt round trip, 72-byte limit, malformed hashes never verify.
- Tokens: access and refresh tokens are not interchangeable; tampered,
  expired and foreign-signed tokens are rejected.
- Principal checks: bearer parsing, role requirements, ISP ownership.
- Login and refresh honour account state.
"""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from conftest import (
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    AZERTELECOM_EMAIL,
    INACTIVE_EMAIL,
    ISP_PASSWORD,
    TEST_JWT_SECRET,
)
from auth.passwords import hash_password, verify_password
from auth.principal import (
    check_isp_ownership,
    extract_bearer_token,
    owns_isp_resource,
    require_role,
)
from auth.tokens import decode_access_token, decode_refresh_token, issue_token_pair
from core.config import Settings
from domain.enums import UserRole
from domain.errors import ForbiddenError, UnauthorizedError
from domain.time import utc_now
from domain.user import AuthenticatedPrincipal
from repositories import seed
from services.auth_service import AuthService

ADMIN = AuthenticatedPrincipal(user_id="u-admin", email="admin@nettap.az", role=UserRole.ADMIN)
ISP_USER = AuthenticatedPrincipal(
    user_id="u-isp", email="isp@nettap.az", role=UserRole.ISP, isp_id="isp-1"
)
PLAIN_USER = AuthenticatedPrincipal(user_id="u-1", email="u@nettap.az", role=UserRole.USER)


# ============================================================================
# Passwords
# ============================================================================

def test_password_round_trip() -> None:
    hashed = hash_password("s3cret!", rounds=4)

    assert hashed.startswith("$2")
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)


def test_password_limits() -> None:
    with pytest.raises(ValueError):
        hash_password("")
    with pytest.raises(ValueError):
        hash_password("x" * 73)


def test_verify_password_with_garbage_hash() -> None:
    assert not verify_password("anything", "not-a-bcrypt-hash")
    assert not verify_password("anything", "")


# ============================================================================
# Tokens
# ============================================================================

def test_token_pair_round_trip(settings: Settings) -> None:
    tokens = issue_token_pair(ISP_USER, settings)

    assert tokens.expires_in == settings.jwt_access_ttl_minutes * 60
    assert decode_access_token(tokens.access_token, settings) == ISP_USER
    assert decode_refresh_token(tokens.refresh_token, settings) == ISP_USER


def test_refresh_token_is_not_an_access_token(settings: Settings) -> None:
    tokens = issue_token_pair(ADMIN, settings)

    with pytest.raises(UnauthorizedError):
        decode_access_token(tokens.refresh_token, settings)
    with pytest.raises(UnauthorizedError):
        decode_refresh_token(tokens.access_token, settings)


def test_expired_token_is_rejected(settings: Settings) -> None:
    tokens = issue_token_pair(ADMIN, settings, now=utc_now() - timedelta(days=1))

    with pytest.raises(UnauthorizedError):
        decode_access_token(tokens.access_token, settings)


def test_token_signed_with_other_secret_is_rejected(settings: Settings) -> None:
    other = Settings(jwt_secret="a-completely-different-secret-0123456789")
    tokens = issue_token_pair(ADMIN, other)

    with pytest.raises(UnauthorizedError):
        decode_access_token(tokens.access_token, settings)


def test_token_with_unknown_role_is_rejected(settings: Settings) -> None:
    forged = jwt.encode(
        {"sub": "x", "role": "superuser", "type": "access", "exp": utc_now() + timedelta(minutes=5)},
        TEST_JWT_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(UnauthorizedError):
        decode_access_token(forged, settings)


def test_garbage_token_is_rejected(settings: Settings) -> None:
    with pytest.raises(UnauthorizedError):
        decode_access_token("not.a.jwt", settings)


# ============================================================================
# Principal checks
# ============================================================================

@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer abc", "abc"),
        ("bearer   abc ", "abc"),
        ("Basic abc", None),
        ("Bearer", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_bearer_token(header, expected) -> None:
    assert extract_bearer_token(header) == expected


def test_ownership_rules() -> None:
    assert owns_isp_resource(ADMIN, None)
    assert owns_isp_resource(ADMIN, "isp-2")
    assert owns_isp_resource(ISP_USER, "isp-1")
    assert not owns_isp_resource(ISP_USER, "isp-2")
    assert not owns_isp_resource(ISP_USER, None)
    assert not owns_isp_resource(PLAIN_USER, "isp-1")


def test_check_isp_ownership_raises_forbidden() -> None:
    check_isp_ownership(ISP_USER, "isp-1")

    with pytest.raises(ForbiddenError) as exc_info:
        check_isp_ownership(ISP_USER, "isp-2")

    assert exc_info.value.message == "You do not have permission to access this resource"


def test_require_role() -> None:
    require_role(ADMIN, (UserRole.ADMIN,))
    require_role(ISP_USER, (UserRole.ISP,), require_isp_id=True)

    with pytest.raises(ForbiddenError):
        require_role(PLAIN_USER, (UserRole.ADMIN, UserRole.ISP))

    # Principals come from tokens, so an ISP principal may lack an ispId.
    isp_without_id = AuthenticatedPrincipal(user_id="u", email="e", role=UserRole.ISP)
    with pytest.raises(ForbiddenError) as exc_info:
        require_role(isp_without_id, (UserRole.ISP,), require_isp_id=True)
    assert exc_info.value.message == "ISP ID required"


# ============================================================================
# AuthService
# ============================================================================

def test_login_success(container, settings: Settings) -> None:
    service = AuthService(container.users, settings)

    result = service.login(ADMIN_EMAIL.upper(), ADMIN_PASSWORD)

    assert result.user.role is UserRole.ADMIN
    principal = decode_access_token(result.tokens.access_token, settings)
    assert principal.user_id == result.user.id


def test_isp_login_carries_isp_id(container, settings: Settings) -> None:
    result = AuthService(container.users, settings).login(AZERTELECOM_EMAIL, ISP_PASSWORD)

    assert decode_access_token(result.tokens.access_token, settings).isp_id == seed.AZERTELECOM_ID


@pytest.mark.parametrize(
    "email, password, message",
    [
        ("nobody@nettap.az", ADMIN_PASSWORD, "Invalid email or password"),
        (ADMIN_EMAIL, "wrong-password", "Invalid email or password"),
        (INACTIVE_EMAIL, ISP_PASSWORD, "Account is inactive"),
    ],
)
def test_login_failures(container, settings: Settings, email, password, message) -> None:
    with pytest.raises(UnauthorizedError) as exc_info:
        AuthService(container.users, settings).login(email, password)

    assert exc_info.value.message == message


def test_refresh_issues_new_pair(container, settings: Settings) -> None:
    service = AuthService(container.users, settings)
    login = service.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    tokens = service.refresh(login.tokens.refresh_token)

    assert decode_access_token(tokens.access_token, settings).email == ADMIN_EMAIL


def test_refresh_rejected_after_deactivation(container, settings: Settings) -> None:
    service = AuthService(container.users, settings)
    login = service.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    container.users.update(login.user.id, {"is_active": False})

    with pytest.raises(UnauthorizedError) as exc_info:
        service.refresh(login.tokens.refresh_token)
    assert exc_info.value.message == "User not found or inactive"
