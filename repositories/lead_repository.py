"""
Supabase lead repository (persistence).

This module provides *only* persistence operations for the Lead entity. Status
rules live in the domain; the version check is a conditional update
(`.eq("version", expected)`) so two writers can't both win.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from supabase import Client  # type: ignore[import-not-found]

from domain.enums import LeadSource, LeadStatus
from domain.lead import Lead
from domain.time import parse_optional_utc_datetime, parse_utc_datetime, to_iso_utc, utc_now
from repositories.client import response_rows
from repositories.interfaces import LeadRepository, raise_version_conflict
from repositories.serialization import snapshot_from_dict, snapshot_to_dict

# Supabase table name for Lead records.
# Keep this aligned with database/schema.sql.
_LEADS_TABLE: str = "leads"


def _lead_to_row(lead: Lead) -> dict[str, Any]:
    """Convert a domain Lead to a Supabase row payload."""

    return {
        "id": lead.id,
        "status": lead.status.value,
        "source": lead.source.value,
        "full_name": lead.full_name,
        "phone": lead.phone,
        "email": lead.email,
        "city_id": lead.city_id,
        "district_id": lead.district_id,
        "address": lead.address,
        "tariff_snapshot": snapshot_to_dict(lead.tariff_snapshot),
        "assigned_isp_id": lead.assigned_isp_id,
        "assigned_at": to_iso_utc(lead.assigned_at),
        "notes": lead.notes,
        "outcome_notes": lead.outcome_notes,
        "created_at": to_iso_utc(lead.created_at),
        "updated_at": to_iso_utc(lead.updated_at),
        "converted_at": to_iso_utc(lead.converted_at),
        "version": lead.version,
    }


def _row_to_lead(row: Mapping[str, Any]) -> Lead:
    """Convert a Supabase row into a domain Lead."""

    def get_optional(key: str) -> str | None:
        value = row.get(key)
        return str(value) if value else None

    return Lead(
        id=str(row["id"]),
        status=LeadStatus(str(row["status"])),
        source=LeadSource(str(row["source"])),
        full_name=str(row["full_name"]),
        phone=str(row["phone"]),
        email=get_optional("email"),
        city_id=str(row["city_id"]),
        district_id=str(row["district_id"]),
        address=get_optional("address"),
        tariff_snapshot=snapshot_from_dict(row["tariff_snapshot"]),
        assigned_isp_id=get_optional("assigned_isp_id"),
        assigned_at=parse_optional_utc_datetime(row.get("assigned_at")),
        notes=get_optional("notes"),
        outcome_notes=get_optional("outcome_notes"),
        created_at=parse_utc_datetime(row["created_at"]),
        updated_at=parse_utc_datetime(row["updated_at"]),
        converted_at=parse_optional_utc_datetime(row.get("converted_at")),
        version=int(row.get("version") or 1),
    )


class SupabaseLeadRepository(LeadRepository):
    def __init__(self, client: Client) -> None:
        self._client = client

    def find_by_id(self, lead_id: str) -> Optional[Lead]:
        response = (
            self._client.table(_LEADS_TABLE).select("*").eq("id", lead_id).limit(1).execute()
        )
        rows = response_rows(response, "fetch lead")
        return _row_to_lead(rows[0]) if rows else None

    def find_all(self, limit: int = 20, offset: int = 0) -> List[Lead]:
        response = (
            self._client.table(_LEADS_TABLE)
            .select("*")
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [_row_to_lead(row) for row in response_rows(response, "fetch leads")]

    def find_by_status(self, status: LeadStatus) -> List[Lead]:
        response = (
            self._client.table(_LEADS_TABLE)
            .select("*")
            .eq("status", status.value)
            .order("created_at", desc=True)
            .execute()
        )
        return [_row_to_lead(row) for row in response_rows(response, "fetch leads by status")]

    def find_by_assigned_isp(self, isp_id: str) -> List[Lead]:
        response = (
            self._client.table(_LEADS_TABLE)
            .select("*")
            .eq("assigned_isp_id", isp_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [_row_to_lead(row) for row in response_rows(response, "fetch ISP leads")]

    def count(self) -> int:
        response = self._client.table(_LEADS_TABLE).select("id", count="exact").limit(1).execute()
        response_rows(response, "count leads")
        return int(getattr(response, "count", None) or 0)

    def create(self, lead: Lead) -> Lead:
        """
        Insert a Lead into Supabase.

        Raises:
        - RuntimeError if Supabase returns an error response.
        """

        response = self._client.table(_LEADS_TABLE).insert(_lead_to_row(lead)).execute()
        rows = response_rows(response, "insert lead")
        return _row_to_lead(rows[0]) if rows else lead

    def _write(self, lead: Lead, expected_version: int) -> Optional[Lead]:
        payload = _lead_to_row(lead)
        payload.pop("id")
        payload.pop("created_at")
        payload["updated_at"] = to_iso_utc(utc_now())
        payload["version"] = expected_version + 1

        response = (
            self._client.table(_LEADS_TABLE)
            .update(payload)
            .eq("id", lead.id)
            .eq("version", expected_version)
            .execute()
        )
        rows = response_rows(response, "update lead")
        if rows:
            return _row_to_lead(rows[0])

        # Nothing matched: either the lead is gone or someone else wrote first.
        current = self.find_by_id(lead.id)
        if current is None:
            return None
        raise_version_conflict(lead.id, expected_version, current.version)
        return None


__all__ = ["SupabaseLeadRepository"]
