"""Supabase user repository."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from supabase import Client  # type: ignore[import-not-found]

from domain.enums import UserRole
from domain.time import parse_optional_utc_datetime, to_iso_utc
from domain.user import User
from repositories.client import response_rows
from repositories.interfaces import UserRepository

_USERS_TABLE: str = "users"


def _row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=str(row["id"]),
        email=str(row["email"]),
        password_hash=str(row["password_hash"]),
        role=UserRole(str(row["role"])),
        isp_id=str(row["isp_id"]) if row.get("isp_id") else None,
        is_active=bool(row.get("is_active", True)),
        created_at=parse_optional_utc_datetime(row.get("created_at")),
        updated_at=parse_optional_utc_datetime(row.get("updated_at")),
    )


def _user_to_row(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email.lower(),
        "password_hash": user.password_hash,
        "role": user.role.value,
        "isp_id": user.isp_id,
        "is_active": user.is_active,
        "created_at": to_iso_utc(user.created_at),
        "updated_at": to_iso_utc(user.updated_at),
    }


class SupabaseUserRepository(UserRepository):
    def __init__(self, client: Client) -> None:
        self._client = client

    def find_by_id(self, user_id: str) -> Optional[User]:
        response = self._client.table(_USERS_TABLE).select("*").eq("id", user_id).limit(1).execute()
        rows = response_rows(response, "fetch user")
        return _row_to_user(rows[0]) if rows else None

    def find_by_email(self, email: str) -> Optional[User]:
        response = (
            self._client.table(_USERS_TABLE)
            .select("*")
            .eq("email", email.strip().lower())
            .limit(1)
            .execute()
        )
        rows = response_rows(response, "fetch user by email")
        return _row_to_user(rows[0]) if rows else None

    def create(self, user: User) -> User:
        response = self._client.table(_USERS_TABLE).insert(_user_to_row(user)).execute()
        rows = response_rows(response, "insert user")
        return _row_to_user(rows[0]) if rows else user

    def _save(self, user: User) -> User:
        payload = _user_to_row(user)
        payload.pop("id")
        payload.pop("created_at")
        response = self._client.table(_USERS_TABLE).update(payload).eq("id", user.id).execute()
        rows = response_rows(response, "update user")
        return _row_to_user(rows[0]) if rows else user


__all__ = ["SupabaseUserRepository"]
