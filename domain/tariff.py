"""
Domain: Tariff catalogue entities and search criteria.

A Tariff is owned by exactly one ISP (by reference) and is sellable in a set of
districts. From the ranking engine's point of view tariffs are read-only.

`TariffFilterCriteria.matches` is the single definition of what a search
criterion means. Storage backends may push filters down for efficiency, but
the ranking engine re-applies this predicate so every backend answers the same
question.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import FrozenSet, Optional, Tuple

from .enums import SortBy, SortOrder, Technology
from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class CampaignFlags:
    """Promotional attributes of a tariff."""

    free_modem: bool = False
    free_installation: bool = False
    discount_percentage: Optional[float] = None
    gift_included: Optional[str] = None
    limited_time: bool = False
    no_contract: bool = False


@dataclass(frozen=True, slots=True)
class Tariff:
    id: str
    isp_id: str
    name: str
    technology: Technology
    speed_mbps: int
    price_monthly: Decimal
    contract_length_months: int
    campaigns: CampaignFlags
    available_district_ids: Tuple[str, ...]
    is_active: bool = True
    description: Optional[str] = None
    upload_speed_mbps: Optional[int] = None
    data_limit_gb: Optional[int] = None  # None = unlimited
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.speed_mbps <= 0:
            raise ValueError("speed_mbps must be positive")
        if self.price_monthly <= 0:
            raise ValueError("price_monthly must be positive")
        if self.contract_length_months < 0:
            raise ValueError("contract_length_months must be >= 0 (0 = no contract)")
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    def is_available_in(self, district_id: str) -> bool:
        return district_id in self.available_district_ids


@dataclass(frozen=True, slots=True)
class CampaignFlagFilter:
    """
    Partial set of campaign flags requested by a search.

    Only flags requested as True are checked; False and None both mean
    "don't care".
    """

    free_modem: Optional[bool] = None
    free_installation: Optional[bool] = None
    no_contract: Optional[bool] = None
    limited_time: Optional[bool] = None

    def requested(self) -> FrozenSet[str]:
        names = ("free_modem", "free_installation", "no_contract", "limited_time")
        return frozenset(name for name in names if getattr(self, name) is True)

    def satisfied_by(self, campaigns: CampaignFlags) -> bool:
        return all(getattr(campaigns, name) for name in self.requested())


@dataclass(frozen=True, slots=True)
class TariffFilterCriteria:
    """
    Search criteria; every field is optional and present fields are ANDed.

    `city_id` is informational for matching: it is only used by the ranking
    engine to cross-check `district_ids`.
    """

    city_id: Optional[str] = None
    district_ids: FrozenSet[str] = field(default_factory=frozenset)
    technologies: FrozenSet[Technology] = field(default_factory=frozenset)
    min_speed_mbps: Optional[float] = None
    max_speed_mbps: Optional[float] = None
    min_price_monthly: Optional[Decimal] = None
    max_price_monthly: Optional[Decimal] = None
    max_contract_length: Optional[int] = None
    campaign_flags: Optional[CampaignFlagFilter] = None

    def matches(self, tariff: Tariff) -> bool:
        if not tariff.is_active:
            return False
        if self.district_ids and not self.district_ids.intersection(tariff.available_district_ids):
            return False
        if self.technologies and tariff.technology not in self.technologies:
            return False
        if self.min_speed_mbps is not None and tariff.speed_mbps < self.min_speed_mbps:
            return False
        if self.max_speed_mbps is not None and tariff.speed_mbps > self.max_speed_mbps:
            return False
        if self.min_price_monthly is not None and tariff.price_monthly < self.min_price_monthly:
            return False
        if self.max_price_monthly is not None and tariff.price_monthly > self.max_price_monthly:
            return False
        if self.max_contract_length is not None and tariff.contract_length_months > self.max_contract_length:
            return False
        if self.campaign_flags is not None and not self.campaign_flags.satisfied_by(tariff.campaigns):
            return False
        return True


@dataclass(frozen=True, slots=True)
class TariffSortOptions:
    """Explicit ordering. `sort_by=None` selects the default composite ranking."""

    sort_by: Optional[SortBy] = None
    sort_order: SortOrder = SortOrder.ASC
