"""
Supabase repositories for reference data (cities, districts, ISPs).

This module provides *only* persistence operations; row <-> dataclass mapping
is private to it.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from supabase import Client  # type: ignore[import-not-found]

from domain.reference import City, District, ISP
from domain.time import parse_optional_utc_datetime, to_iso_utc
from repositories.client import response_rows
from repositories.interfaces import CityRepository, DistrictRepository, ISPRepository

_CITIES_TABLE: str = "cities"
_DISTRICTS_TABLE: str = "districts"
_ISPS_TABLE: str = "isps"


def _row_to_city(row: Mapping[str, Any]) -> City:
    return City(
        id=str(row["id"]),
        name=str(row["name"]),
        name_az=str(row["name_az"]),
        name_en=str(row["name_en"]),
        is_active=bool(row.get("is_active", True)),
    )


def _city_to_row(city: City) -> dict[str, Any]:
    return {
        "id": city.id,
        "name": city.name,
        "name_az": city.name_az,
        "name_en": city.name_en,
        "is_active": city.is_active,
    }


def _row_to_district(row: Mapping[str, Any]) -> District:
    return District(
        id=str(row["id"]),
        city_id=str(row["city_id"]),
        name=str(row["name"]),
        name_az=str(row["name_az"]),
        name_en=str(row["name_en"]),
        is_active=bool(row.get("is_active", True)),
    )


def _district_to_row(district: District) -> dict[str, Any]:
    return {
        "id": district.id,
        "city_id": district.city_id,
        "name": district.name,
        "name_az": district.name_az,
        "name_en": district.name_en,
        "is_active": district.is_active,
    }


def _row_to_isp(row: Mapping[str, Any]) -> ISP:
    return ISP(
        id=str(row["id"]),
        name=str(row["name"]),
        logo=row.get("logo") or None,
        description=row.get("description") or None,
        contact_email=str(row["contact_email"]),
        contact_phone=str(row["contact_phone"]),
        website=row.get("website") or None,
        priority_score=int(row.get("priority_score") or 0),
        is_active=bool(row.get("is_active", True)),
        created_at=parse_optional_utc_datetime(row.get("created_at")),
        updated_at=parse_optional_utc_datetime(row.get("updated_at")),
    )


def _isp_to_row(isp: ISP) -> dict[str, Any]:
    return {
        "id": isp.id,
        "name": isp.name,
        "logo": isp.logo,
        "description": isp.description,
        "contact_email": isp.contact_email,
        "contact_phone": isp.contact_phone,
        "website": isp.website,
        "priority_score": isp.priority_score,
        "is_active": isp.is_active,
        "created_at": to_iso_utc(isp.created_at),
        "updated_at": to_iso_utc(isp.updated_at),
    }


class SupabaseCityRepository(CityRepository):
    def __init__(self, client: Client) -> None:
        self._client = client

    def find_by_id(self, city_id: str) -> Optional[City]:
        response = (
            self._client.table(_CITIES_TABLE).select("*").eq("id", city_id).limit(1).execute()
        )
        rows = response_rows(response, "fetch city")
        return _row_to_city(rows[0]) if rows else None

    def find_all(self) -> List[City]:
        response = self._client.table(_CITIES_TABLE).select("*").order("name").execute()
        return [_row_to_city(row) for row in response_rows(response, "fetch cities")]

    def find_active(self) -> List[City]:
        response = (
            self._client.table(_CITIES_TABLE).select("*").eq("is_active", True).order("name").execute()
        )
        return [_row_to_city(row) for row in response_rows(response, "fetch cities")]


class SupabaseDistrictRepository(DistrictRepository):
    def __init__(self, client: Client) -> None:
        self._client = client

    def find_by_id(self, district_id: str) -> Optional[District]:
        response = (
            self._client.table(_DISTRICTS_TABLE)
            .select("*")
            .eq("id", district_id)
            .limit(1)
            .execute()
        )
        rows = response_rows(response, "fetch district")
        return _row_to_district(rows[0]) if rows else None

    def find_all(self) -> List[District]:
        response = self._client.table(_DISTRICTS_TABLE).select("*").order("name").execute()
        return [_row_to_district(row) for row in response_rows(response, "fetch districts")]

    def find_by_city_id(self, city_id: str) -> List[District]:
        response = (
            self._client.table(_DISTRICTS_TABLE)
            .select("*")
            .eq("city_id", city_id)
            .order("name")
            .execute()
        )
        return [_row_to_district(row) for row in response_rows(response, "fetch districts")]


class SupabaseISPRepository(ISPRepository):
    def __init__(self, client: Client) -> None:
        self._client = client

    def find_by_id(self, isp_id: str) -> Optional[ISP]:
        response = self._client.table(_ISPS_TABLE).select("*").eq("id", isp_id).limit(1).execute()
        rows = response_rows(response, "fetch ISP")
        return _row_to_isp(rows[0]) if rows else None

    def find_all(self) -> List[ISP]:
        response = (
            self._client.table(_ISPS_TABLE).select("*").order("priority_score", desc=True).execute()
        )
        return [_row_to_isp(row) for row in response_rows(response, "fetch ISPs")]

    def find_active(self) -> List[ISP]:
        response = (
            self._client.table(_ISPS_TABLE)
            .select("*")
            .eq("is_active", True)
            .order("priority_score", desc=True)
            .execute()
        )
        return [_row_to_isp(row) for row in response_rows(response, "fetch ISPs")]

    def create(self, isp: ISP) -> ISP:
        response = self._client.table(_ISPS_TABLE).insert(_isp_to_row(isp)).execute()
        rows = response_rows(response, "insert ISP")
        return _row_to_isp(rows[0]) if rows else isp

    def _save(self, isp: ISP) -> ISP:
        payload = _isp_to_row(isp)
        payload.pop("id")
        payload.pop("created_at")
        response = self._client.table(_ISPS_TABLE).update(payload).eq("id", isp.id).execute()
        rows = response_rows(response, "update ISP")
        return _row_to_isp(rows[0]) if rows else isp


__all__ = [
    "SupabaseCityRepository",
    "SupabaseDistrictRepository",
    "SupabaseISPRepository",
]
