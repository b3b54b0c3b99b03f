"""
Tests for `services/tariff_service.py` against the demo catalogue.

Demo tariffs and their ranking inputs:
- Fiber Premium 100: 25 AZN, score 45 (modem, installation, limited, 20%), ratio 4.0
- Fiber Basic 50:    15 AZN, score 10, ratio 3.33
- VDSL 30:           12 AZN, score 10, ratio 2.5
- 4.5G Unlimited:    20 AZN, score 35 (modem, installation, no contract), ratio 2.0
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from conftest import FIBER_BASIC_ID, FIBER_PREMIUM_ID, MOBILE_ID, VDSL_ID
from domain.enums import SortBy, SortOrder, Technology
from domain.errors import DataIntegrityError, ValidationError
from domain.tariff import (
    CampaignFlagFilter,
    CampaignFlags,
    Tariff,
    TariffFilterCriteria,
    TariffSortOptions,
)
from domain.reference import ISP
from repositories import seed
from repositories.memory_repository import InMemoryISPRepository, InMemoryTariffRepository
from services.tariff_service import TariffService, calculate_campaign_score


def _ids(results) -> list:
    return [item.tariff.id for item in results]


def test_campaign_score_weights() -> None:
    assert calculate_campaign_score(CampaignFlags()) == 0
    assert calculate_campaign_score(CampaignFlags(free_modem=True)) == 10
    assert calculate_campaign_score(CampaignFlags(free_installation=True)) == 10
    assert calculate_campaign_score(CampaignFlags(no_contract=True)) == 15
    assert calculate_campaign_score(CampaignFlags(limited_time=True)) == 5
    assert calculate_campaign_score(
        CampaignFlags(free_modem=True, free_installation=True, limited_time=True, discount_percentage=20)
    ) == 45


def test_default_ranking(tariff_service: TariffService) -> None:
    results = tariff_service.search(TariffFilterCriteria())

    assert _ids(results) == [FIBER_PREMIUM_ID, MOBILE_ID, FIBER_BASIC_ID, VDSL_ID]


def test_default_ranking_is_deterministic(tariff_service: TariffService) -> None:
    first = tariff_service.search(TariffFilterCriteria())
    second = tariff_service.search(TariffFilterCriteria())

    assert _ids(first) == _ids(second)


def test_isp_priority_breaks_score_and_ratio_ties(container) -> None:
    def tariff(tariff_id: str, isp_id: str) -> Tariff:
        return Tariff(
            id=tariff_id,
            isp_id=isp_id,
            name=tariff_id,
            technology=Technology.FIBER,
            speed_mbps=50,
            price_monthly=Decimal("20"),
            contract_length_months=12,
            campaigns=CampaignFlags(free_modem=True),
            available_district_ids=(seed.NASIMI_ID,),
        )

    isps = InMemoryISPRepository(
        [
            ISP(id="isp-low", name="Low", contact_email="low@isp.az", contact_phone="0121", priority_score=1),
            ISP(id="isp-high", name="High", contact_email="high@isp.az", contact_phone="0122", priority_score=9),
        ]
    )
    tariffs = InMemoryTariffRepository([tariff("t-low", "isp-low"), tariff("t-high", "isp-high")])
    service = TariffService(tariffs, isps, container.districts)

    assert _ids(service.search(TariffFilterCriteria())) == ["t-high", "t-low"]


def test_results_are_enriched(tariff_service: TariffService) -> None:
    premium = tariff_service.search(TariffFilterCriteria())[0]

    assert premium.isp.name == "AzerTelecom"
    assert premium.speed_price_ratio == pytest.approx(4.0)
    assert premium.campaign_score == 45


def test_sort_by_price_ascending_and_descending(tariff_service: TariffService) -> None:
    ascending = tariff_service.search(TariffFilterCriteria(), TariffSortOptions(sort_by=SortBy.PRICE))
    descending = tariff_service.search(
        TariffFilterCriteria(), TariffSortOptions(sort_by=SortBy.PRICE, sort_order=SortOrder.DESC)
    )

    assert _ids(ascending) == [VDSL_ID, FIBER_BASIC_ID, MOBILE_ID, FIBER_PREMIUM_ID]
    assert _ids(descending) == list(reversed(_ids(ascending)))


def test_sort_by_speed_desc(tariff_service: TariffService) -> None:
    results = tariff_service.search(
        TariffFilterCriteria(), TariffSortOptions(sort_by=SortBy.SPEED, sort_order=SortOrder.DESC)
    )

    assert [item.tariff.speed_mbps for item in results] == [100, 50, 40, 30]


def test_sort_by_priority_desc(tariff_service: TariffService) -> None:
    results = tariff_service.search(
        TariffFilterCriteria(), TariffSortOptions(sort_by=SortBy.PRIORITY, sort_order=SortOrder.DESC)
    )

    priorities = [item.isp.priority_score for item in results]
    assert priorities == sorted(priorities, reverse=True)


def test_every_result_satisfies_the_criteria(tariff_service: TariffService) -> None:
    criteria = TariffFilterCriteria(
        district_ids=frozenset({seed.SABUNCHU_ID}),
        max_price_monthly=Decimal("20"),
    )

    results = tariff_service.search(criteria)

    assert set(_ids(results)) == {FIBER_BASIC_ID, VDSL_ID, MOBILE_ID}
    assert all(criteria.matches(item.tariff) for item in results)


def test_filter_by_district_outside_baku(tariff_service: TariffService) -> None:
    results = tariff_service.search(
        TariffFilterCriteria(city_id=seed.GANJA_ID, district_ids=frozenset({seed.KAPAZ_ID}))
    )

    assert _ids(results) == [MOBILE_ID]


def test_filter_by_technology_and_campaign(tariff_service: TariffService) -> None:
    fiber = tariff_service.search(TariffFilterCriteria(technologies=frozenset({Technology.FIBER})))
    free_modem = tariff_service.search(
        TariffFilterCriteria(campaign_flags=CampaignFlagFilter(free_modem=True))
    )

    assert set(_ids(fiber)) == {FIBER_PREMIUM_ID, FIBER_BASIC_ID}
    assert set(_ids(free_modem)) == {FIBER_PREMIUM_ID, VDSL_ID, MOBILE_ID}


def test_no_contract_filter(tariff_service: TariffService) -> None:
    results = tariff_service.search(TariffFilterCriteria(max_contract_length=0))

    assert _ids(results) == [MOBILE_ID]


def test_district_outside_city_is_rejected(tariff_service: TariffService) -> None:
    with pytest.raises(ValidationError) as exc_info:
        tariff_service.search(
            TariffFilterCriteria(city_id=seed.BAKU_ID, district_ids=frozenset({seed.KAPAZ_ID}))
        )

    assert exc_info.value.details == {"cityId": seed.BAKU_ID, "districtIds": [seed.KAPAZ_ID]}


def test_unknown_district_is_rejected_when_city_given(tariff_service: TariffService) -> None:
    with pytest.raises(ValidationError):
        tariff_service.search(
            TariffFilterCriteria(city_id=seed.BAKU_ID, district_ids=frozenset({"nowhere"}))
        )


def test_deactivated_tariff_disappears_from_search(container, tariff_service: TariffService) -> None:
    container.tariffs.update(FIBER_PREMIUM_ID, {"is_active": False})

    assert FIBER_PREMIUM_ID not in _ids(tariff_service.search(TariffFilterCriteria()))


def test_no_matches_is_an_empty_list(tariff_service: TariffService) -> None:
    assert tariff_service.search(TariffFilterCriteria(min_speed_mbps=1000)) == []


def test_get_by_id(tariff_service: TariffService) -> None:
    enriched = tariff_service.get_by_id(VDSL_ID)

    assert enriched is not None
    assert enriched.isp.name == "Baktelecom"
    assert tariff_service.get_by_id("missing") is None


def test_list_by_isp(tariff_service: TariffService) -> None:
    results = tariff_service.list_by_isp(seed.AZERTELECOM_ID)

    assert _ids(results) == [FIBER_PREMIUM_ID, FIBER_BASIC_ID]


def test_tariff_with_missing_isp_is_a_data_integrity_error(container) -> None:
    orphan = Tariff(
        id="orphan",
        isp_id="no-such-isp",
        name="Orphan",
        technology=Technology.ADSL,
        speed_mbps=10,
        price_monthly=Decimal("5"),
        contract_length_months=0,
        campaigns=CampaignFlags(),
        available_district_ids=(seed.NASIMI_ID,),
    )
    service = TariffService(InMemoryTariffRepository([orphan]), container.isps, container.districts)

    with pytest.raises(DataIntegrityError):
        service.search(TariffFilterCriteria())
