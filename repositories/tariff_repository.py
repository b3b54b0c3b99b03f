"""
Supabase tariff repository.

Search filters are pushed into the PostgREST query: `overlaps` on the
`available_district_ids` array, `in_` on technology, `gte`/`lte` for the
numeric bounds and a JSON path on the campaign flags document.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Mapping, Optional

from supabase import Client  # type: ignore[import-not-found]

from domain.enums import SortBy, SortOrder, Technology
from domain.tariff import Tariff, TariffFilterCriteria, TariffSortOptions
from domain.time import parse_optional_utc_datetime, to_iso_utc
from repositories.client import response_rows
from repositories.interfaces import TariffRepository
from repositories.serialization import campaigns_from_dict, campaigns_to_dict

_TARIFFS_TABLE: str = "tariffs"

_CAMPAIGN_FLAG_KEYS = {
    "free_modem": "freeModem",
    "free_installation": "freeInstallation",
    "no_contract": "noContract",
    "limited_time": "limitedTime",
}

# Columns for explicit sorts that don't need the ISP.
_SORT_COLUMNS = {
    SortBy.PRICE: "price_monthly",
    SortBy.SPEED: "speed_mbps",
}


def _row_to_tariff(row: Mapping[str, Any]) -> Tariff:
    upload = row.get("upload_speed_mbps")
    data_limit = row.get("data_limit_gb")
    return Tariff(
        id=str(row["id"]),
        isp_id=str(row["isp_id"]),
        name=str(row["name"]),
        description=row.get("description") or None,
        technology=Technology(str(row["technology"])),
        speed_mbps=int(row["speed_mbps"]),
        upload_speed_mbps=int(upload) if upload is not None else None,
        price_monthly=Decimal(str(row["price_monthly"])),
        contract_length_months=int(row.get("contract_length_months") or 0),
        data_limit_gb=int(data_limit) if data_limit is not None else None,
        campaigns=campaigns_from_dict(row.get("campaigns")),
        available_district_ids=tuple(str(d) for d in row.get("available_district_ids") or ()),
        is_active=bool(row.get("is_active", True)),
        created_at=parse_optional_utc_datetime(row.get("created_at")),
        updated_at=parse_optional_utc_datetime(row.get("updated_at")),
    )


def _tariff_to_row(tariff: Tariff) -> dict[str, Any]:
    return {
        "id": tariff.id,
        "isp_id": tariff.isp_id,
        "name": tariff.name,
        "description": tariff.description,
        "technology": tariff.technology.value,
        "speed_mbps": tariff.speed_mbps,
        "upload_speed_mbps": tariff.upload_speed_mbps,
        "price_monthly": str(tariff.price_monthly),
        "contract_length_months": tariff.contract_length_months,
        "data_limit_gb": tariff.data_limit_gb,
        "campaigns": campaigns_to_dict(tariff.campaigns),
        "available_district_ids": list(tariff.available_district_ids),
        "is_active": tariff.is_active,
        "created_at": to_iso_utc(tariff.created_at),
        "updated_at": to_iso_utc(tariff.updated_at),
    }


class SupabaseTariffRepository(TariffRepository):
    def __init__(self, client: Client) -> None:
        self._client = client

    def find_by_id(self, tariff_id: str) -> Optional[Tariff]:
        response = (
            self._client.table(_TARIFFS_TABLE).select("*").eq("id", tariff_id).limit(1).execute()
        )
        rows = response_rows(response, "fetch tariff")
        return _row_to_tariff(rows[0]) if rows else None

    def find_by_filter(
        self,
        criteria: TariffFilterCriteria,
        sort: Optional[TariffSortOptions] = None,
    ) -> List[Tariff]:
        query = self._client.table(_TARIFFS_TABLE).select("*").eq("is_active", True)

        if criteria.district_ids:
            query = query.overlaps("available_district_ids", sorted(criteria.district_ids))
        if criteria.technologies:
            query = query.in_("technology", sorted(t.value for t in criteria.technologies))
        if criteria.min_speed_mbps is not None:
            query = query.gte("speed_mbps", criteria.min_speed_mbps)
        if criteria.max_speed_mbps is not None:
            query = query.lte("speed_mbps", criteria.max_speed_mbps)
        if criteria.min_price_monthly is not None:
            query = query.gte("price_monthly", str(criteria.min_price_monthly))
        if criteria.max_price_monthly is not None:
            query = query.lte("price_monthly", str(criteria.max_price_monthly))
        if criteria.max_contract_length is not None:
            query = query.lte("contract_length_months", criteria.max_contract_length)
        if criteria.campaign_flags is not None:
            for name in sorted(criteria.campaign_flags.requested()):
                query = query.eq(f"campaigns->>{_CAMPAIGN_FLAG_KEYS[name]}", "true")

        column = _SORT_COLUMNS.get(sort.sort_by) if sort and sort.sort_by else None
        if column is not None:
            query = query.order(column, desc=sort.sort_order is SortOrder.DESC)
        else:
            query = query.order("price_monthly")

        response = query.execute()
        return [_row_to_tariff(row) for row in response_rows(response, "search tariffs")]

    def find_by_isp_id(self, isp_id: str) -> List[Tariff]:
        response = (
            self._client.table(_TARIFFS_TABLE)
            .select("*")
            .eq("isp_id", isp_id)
            .order("price_monthly")
            .execute()
        )
        return [_row_to_tariff(row) for row in response_rows(response, "fetch ISP tariffs")]

    def create(self, tariff: Tariff) -> Tariff:
        response = self._client.table(_TARIFFS_TABLE).insert(_tariff_to_row(tariff)).execute()
        rows = response_rows(response, "insert tariff")
        return _row_to_tariff(rows[0]) if rows else tariff

    def _save(self, tariff: Tariff) -> Tariff:
        payload = _tariff_to_row(tariff)
        payload.pop("id")
        payload.pop("created_at")
        response = (
            self._client.table(_TARIFFS_TABLE).update(payload).eq("id", tariff.id).execute()
        )
        rows = response_rows(response, "update tariff")
        return _row_to_tariff(rows[0]) if rows else tariff


__all__ = ["SupabaseTariffRepository"]
