"""
Tariffs API Endpoints.

Public tariff search and lookup.
"""

from decimal import Decimal
from typing import FrozenSet, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_tariff_service
from api.models import ApiResponse, ErrorResponse, TariffData, TariffListData, TariffResponse
from domain.enums import SortBy, SortOrder, Technology
from domain.errors import NotFoundError, ValidationError
from domain.tariff import CampaignFlagFilter, TariffFilterCriteria, TariffSortOptions
from services.tariff_service import TariffService

router = APIRouter()


def _split_csv(value: Optional[str]) -> FrozenSet[str]:
    if not value:
        return frozenset()
    return frozenset(part.strip() for part in value.split(",") if part.strip())


def _parse_technologies(value: Optional[str]) -> FrozenSet[Technology]:
    technologies = set()
    for raw in _split_csv(value):
        try:
            technologies.add(Technology(raw.lower()))
        except ValueError:
            raise ValidationError(
                f"Unknown technology '{raw}'",
                details={"allowed": [t.value for t in Technology]},
            ) from None
    return frozenset(technologies)


@router.get(
    "/tariffs",
    response_model=ApiResponse[TariffListData],
    responses={400: {"model": ErrorResponse}},
    summary="Search Tariffs",
    description="Filter and rank active tariffs. All filters are optional and combined with AND.",
)
def search_tariffs(
    city_id: Optional[str] = Query(None, alias="cityId"),
    district_ids: Optional[str] = Query(None, alias="districtIds", description="Comma separated"),
    technologies: Optional[str] = Query(None, description="Comma separated, e.g. fiber,vdsl"),
    min_speed_mbps: Optional[float] = Query(None, alias="minSpeedMbps", gt=0),
    max_speed_mbps: Optional[float] = Query(None, alias="maxSpeedMbps", gt=0),
    min_price_monthly: Optional[Decimal] = Query(None, alias="minPriceMonthly", gt=0),
    max_price_monthly: Optional[Decimal] = Query(None, alias="maxPriceMonthly", gt=0),
    max_contract_length: Optional[int] = Query(None, alias="maxContractLength", ge=0),
    free_modem: Optional[bool] = Query(None, alias="freeModem"),
    free_installation: Optional[bool] = Query(None, alias="freeInstallation"),
    no_contract: Optional[bool] = Query(None, alias="noContract"),
    limited_time: Optional[bool] = Query(None, alias="limitedTime"),
    sort_by: Optional[SortBy] = Query(None, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder"),
    service: TariffService = Depends(get_tariff_service),
):
    """
    Search tariffs.

    Without `sortBy` results use the composite ranking: campaign score, then
    speed/price ratio, then ISP priority, all descending.

    **Example:**
    ```
    GET /api/v1/tariffs?cityId=...&technologies=fiber&freeModem=true&sortBy=price
    ```
    """
    flags = CampaignFlagFilter(
        free_modem=free_modem,
        free_installation=free_installation,
        no_contract=no_contract,
        limited_time=limited_time,
    )
    criteria = TariffFilterCriteria(
        city_id=city_id,
        district_ids=_split_csv(district_ids),
        technologies=_parse_technologies(technologies),
        min_speed_mbps=min_speed_mbps,
        max_speed_mbps=max_speed_mbps,
        min_price_monthly=min_price_monthly,
        max_price_monthly=max_price_monthly,
        max_contract_length=max_contract_length,
        campaign_flags=flags if flags.requested() else None,
    )
    sort = TariffSortOptions(sort_by=sort_by, sort_order=sort_order) if sort_by else None

    results = service.search(criteria, sort)
    tariffs = [TariffResponse.from_domain(item) for item in results]
    return ApiResponse(data=TariffListData(tariffs=tariffs, total=len(tariffs)))


@router.get(
    "/tariffs/{tariff_id}",
    response_model=ApiResponse[TariffData],
    responses={404: {"model": ErrorResponse}},
    summary="Get Tariff",
)
def get_tariff(tariff_id: str, service: TariffService = Depends(get_tariff_service)):
    """Return one tariff with its ISP and ranking metrics."""
    enriched = service.get_by_id(tariff_id)
    if enriched is None:
        raise NotFoundError("Tariff", tariff_id)
    return ApiResponse(data=TariffData(tariff=TariffResponse.from_domain(enriched)))
