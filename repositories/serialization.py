"""
JSON shapes for values embedded in storage rows.

Campaign flags and tariff snapshots are stored as JSON documents (a `jsonb`
column in Postgres, a JSON string cell in Google Sheets). Keys are camelCase
so stored documents match the API representation.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

from domain.enums import Technology
from domain.lead import TariffSnapshot
from domain.tariff import CampaignFlags


def campaigns_to_dict(campaigns: CampaignFlags) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "freeModem": campaigns.free_modem,
        "freeInstallation": campaigns.free_installation,
        "limitedTime": campaigns.limited_time,
        "noContract": campaigns.no_contract,
    }
    if campaigns.discount_percentage is not None:
        payload["discountPercentage"] = campaigns.discount_percentage
    if campaigns.gift_included is not None:
        payload["giftIncluded"] = campaigns.gift_included
    return payload


def campaigns_from_dict(data: Mapping[str, Any] | None) -> CampaignFlags:
    data = data or {}
    discount = data.get("discountPercentage")
    return CampaignFlags(
        free_modem=bool(data.get("freeModem", False)),
        free_installation=bool(data.get("freeInstallation", False)),
        discount_percentage=float(discount) if discount is not None else None,
        gift_included=data.get("giftIncluded") or None,
        limited_time=bool(data.get("limitedTime", False)),
        no_contract=bool(data.get("noContract", False)),
    )


def snapshot_to_dict(snapshot: TariffSnapshot) -> dict[str, Any]:
    return {
        "tariffId": snapshot.tariff_id,
        "tariffName": snapshot.tariff_name,
        "ispName": snapshot.isp_name,
        "speedMbps": snapshot.speed_mbps,
        # String keeps the exact decimal value through JSON.
        "priceMonthly": str(snapshot.price_monthly),
        "technology": snapshot.technology.value,
        "campaigns": campaigns_to_dict(snapshot.campaigns),
    }


def snapshot_from_dict(data: Mapping[str, Any]) -> TariffSnapshot:
    return TariffSnapshot(
        tariff_id=str(data["tariffId"]),
        tariff_name=str(data["tariffName"]),
        isp_name=str(data["ispName"]),
        speed_mbps=int(data["speedMbps"]),
        price_monthly=Decimal(str(data["priceMonthly"])),
        technology=Technology(str(data["technology"])),
        campaigns=campaigns_from_dict(data.get("campaigns")),
    )


__all__ = [
    "campaigns_to_dict",
    "campaigns_from_dict",
    "snapshot_to_dict",
    "snapshot_from_dict",
]
