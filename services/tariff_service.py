"""
Tariff ranking and filtering engine.

Handles:
- Search over active tariffs with AND-ed filter criteria
- Enrichment with the owning ISP and two derived metrics
- Explicit single-key sorting, or the default composite ranking

The engine is a pure computation over freshly read catalogue data; nothing is
cached, since prices and campaign flags may change between requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from domain.enums import SortBy, SortOrder
from domain.errors import DataIntegrityError, ValidationError
from domain.reference import ISP
from domain.tariff import CampaignFlags, Tariff, TariffFilterCriteria, TariffSortOptions
from repositories.interfaces import DistrictRepository, ISPRepository, TariffRepository

logger = logging.getLogger(__name__)

# Campaign score weights.
FREE_MODEM_SCORE = 10.0
FREE_INSTALLATION_SCORE = 10.0
NO_CONTRACT_SCORE = 15.0
LIMITED_TIME_SCORE = 5.0


def calculate_campaign_score(campaigns: CampaignFlags) -> float:
    """
    Weighted promotional score.

    free modem +10, free installation +10, no contract +15, limited time +5,
    plus the discount percentage verbatim (a 20% discount adds 20).
    """

    score = 0.0
    if campaigns.free_modem:
        score += FREE_MODEM_SCORE
    if campaigns.free_installation:
        score += FREE_INSTALLATION_SCORE
    if campaigns.no_contract:
        score += NO_CONTRACT_SCORE
    if campaigns.limited_time:
        score += LIMITED_TIME_SCORE
    if campaigns.discount_percentage:
        score += float(campaigns.discount_percentage)
    return score


@dataclass(frozen=True, slots=True)
class EnrichedTariff:
    """A tariff joined with its ISP plus the ranking metrics."""

    tariff: Tariff
    isp: ISP
    speed_price_ratio: float
    campaign_score: float


def enrich_tariff(tariff: Tariff, isp: ISP) -> EnrichedTariff:
    return EnrichedTariff(
        tariff=tariff,
        isp=isp,
        speed_price_ratio=float(tariff.speed_mbps) / float(tariff.price_monthly),
        campaign_score=calculate_campaign_score(tariff.campaigns),
    )


_SORT_KEYS: Dict[SortBy, Callable[[EnrichedTariff], object]] = {
    SortBy.PRICE: lambda item: item.tariff.price_monthly,
    SortBy.SPEED: lambda item: item.tariff.speed_mbps,
    SortBy.SPEED_PRICE_RATIO: lambda item: item.speed_price_ratio,
    SortBy.PRIORITY: lambda item: item.isp.priority_score,
}


def _default_rank_key(item: EnrichedTariff) -> tuple:
    return (-item.campaign_score, -item.speed_price_ratio, -item.isp.priority_score)


def rank_tariffs(
    items: List[EnrichedTariff],
    sort: Optional[TariffSortOptions] = None,
) -> List[EnrichedTariff]:
    """
    Order enriched tariffs.

    Explicit `sort_by`: single-key stable sort, ascending unless `desc`.
    Otherwise: campaign score desc, then speed/price ratio desc, then ISP
    priority desc.
    """

    if sort is not None and sort.sort_by is not None:
        return sorted(
            items,
            key=_SORT_KEYS[sort.sort_by],
            reverse=sort.sort_order is SortOrder.DESC,
        )
    return sorted(items, key=_default_rank_key)


class TariffService:
    def __init__(
        self,
        tariffs: TariffRepository,
        isps: ISPRepository,
        districts: DistrictRepository,
    ) -> None:
        self._tariffs = tariffs
        self._isps = isps
        self._districts = districts

    def _check_districts_in_city(self, criteria: TariffFilterCriteria) -> None:
        if not criteria.city_id or not criteria.district_ids:
            return
        offending: List[str] = []
        for district_id in sorted(criteria.district_ids):
            district = self._districts.find_by_id(district_id)
            if district is None or not district.belongs_to(criteria.city_id):
                offending.append(district_id)
        if offending:
            raise ValidationError(
                f"Districts {', '.join(offending)} do not belong to city {criteria.city_id}",
                details={"cityId": criteria.city_id, "districtIds": offending},
            )

    def _enrich_all(self, tariffs: List[Tariff]) -> List[EnrichedTariff]:
        isp_cache: Dict[str, Optional[ISP]] = {}
        enriched: List[EnrichedTariff] = []
        for tariff in tariffs:
            if tariff.isp_id not in isp_cache:
                isp_cache[tariff.isp_id] = self._isps.find_by_id(tariff.isp_id)
            isp = isp_cache[tariff.isp_id]
            if isp is None:
                logger.error(
                    "Tariff references a missing ISP",
                    extra={"tariffId": tariff.id, "ispId": tariff.isp_id},
                )
                raise DataIntegrityError(
                    f"Tariff '{tariff.id}' references missing ISP '{tariff.isp_id}'"
                )
            enriched.append(enrich_tariff(tariff, isp))
        return enriched

    def search(
        self,
        criteria: TariffFilterCriteria,
        sort: Optional[TariffSortOptions] = None,
    ) -> List[EnrichedTariff]:
        """
        Search active tariffs.

        Args:
            criteria: Filters; every supplied criterion must hold.
            sort: Optional explicit ordering.

        Returns:
            Enriched tariffs in ranking order.

        Raises:
            ValidationError: a requested district is not in the requested city.
            DataIntegrityError: a matching tariff references a missing ISP.
        """

        self._check_districts_in_city(criteria)
        candidates = [t for t in self._tariffs.find_by_filter(criteria, sort) if criteria.matches(t)]
        results = rank_tariffs(self._enrich_all(candidates), sort)
        logger.debug("Tariff search returned %d results", len(results))
        return results

    def get_by_id(self, tariff_id: str) -> Optional[EnrichedTariff]:
        """Single lookup with enrichment and no filtering; None when absent."""

        tariff = self._tariffs.find_by_id(tariff_id)
        if tariff is None:
            return None
        return self._enrich_all([tariff])[0]

    def list_by_isp(self, isp_id: str) -> List[EnrichedTariff]:
        tariffs = [t for t in self._tariffs.find_by_isp_id(isp_id) if t.is_active]
        return rank_tariffs(self._enrich_all(tariffs))


__all__ = [
    "TariffService",
    "EnrichedTariff",
    "calculate_campaign_score",
    "enrich_tariff",
    "rank_tariffs",
]
