"""
Filters API Endpoints.

Options for building the tariff search form.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_filter_service
from api.models import ApiResponse, DistrictListData, DistrictResponse, ErrorResponse, FilterOptionsData
from services.filter_service import FilterService

router = APIRouter()


@router.get(
    "/filters",
    response_model=ApiResponse[FilterOptionsData],
    summary="Available Filters",
    description="Active cities and districts, technologies, and predefined speed and price ranges.",
)
def get_filters(service: FilterService = Depends(get_filter_service)):
    return ApiResponse(data=FilterOptionsData.from_domain(service.available_filters()))


@router.get(
    "/filters/cities/{city_id}/districts",
    response_model=ApiResponse[DistrictListData],
    responses={404: {"model": ErrorResponse}},
    summary="Districts of a City",
)
def get_city_districts(city_id: str, service: FilterService = Depends(get_filter_service)):
    districts = service.districts_for_city(city_id)
    return ApiResponse(
        data=DistrictListData(districts=[DistrictResponse.from_domain(d) for d in districts])
    )
