"""
Authentication service.

Handles:
- Email/password login returning a token pair
- Token refresh (the user is re-read, so deactivation takes effect on refresh)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from auth.passwords import verify_password
from auth.tokens import TokenPair, decode_refresh_token, issue_token_pair
from core.config import Settings
from domain.errors import NotFoundError, UnauthorizedError
from domain.user import AuthenticatedPrincipal, User
from repositories.interfaces import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoginResult:
    user: User
    tokens: TokenPair


class AuthService:
    def __init__(self, users: UserRepository, settings: Settings) -> None:
        self._users = users
        self._settings = settings

    def login(self, email: str, password: str) -> LoginResult:
        """
        Raises:
            UnauthorizedError: unknown email, inactive account or wrong password.
        """

        user = self._users.find_by_email(email)
        if user is None:
            logger.warning("Login failed: user not found", extra={"email": email})
            raise UnauthorizedError("Invalid email or password")
        if not user.is_active:
            logger.warning("Login failed: user inactive", extra={"email": email})
            raise UnauthorizedError("Account is inactive")
        if not verify_password(password, user.password_hash):
            logger.warning("Login failed: invalid password", extra={"email": email})
            raise UnauthorizedError("Invalid email or password")

        tokens = issue_token_pair(AuthenticatedPrincipal.for_user(user), self._settings)
        logger.info("Login successful", extra={"userId": user.id, "role": user.role.value})
        return LoginResult(user=user, tokens=tokens)

    def refresh(self, refresh_token: str) -> TokenPair:
        principal = decode_refresh_token(refresh_token, self._settings)
        user = self._users.find_by_id(principal.user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        logger.info("Access token refreshed", extra={"userId": user.id})
        return issue_token_pair(AuthenticatedPrincipal.for_user(user), self._settings)

    def get_user(self, user_id: str) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user


__all__ = ["AuthService", "LoginResult"]
