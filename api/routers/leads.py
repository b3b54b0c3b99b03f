"""
Leads API Endpoints.

Public lead submission from the comparison page.
"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_lead_service
from api.models import ApiResponse, CreateLeadRequestModel, ErrorResponse, LeadData, LeadResponse
from services.lead_service import CreateLeadRequest, LeadService

router = APIRouter()


@router.post(
    "/leads",
    response_model=ApiResponse[LeadData],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Create Lead",
    description="Submit interest in a tariff. The tariff is snapshotted onto the lead.",
)
def create_lead(request: CreateLeadRequestModel, service: LeadService = Depends(get_lead_service)):
    """
    Create a new lead in status `new`.

    **How it works:**
    1. Validates that the district belongs to the city
    2. Validates that the tariff is sold in the district
    3. Stores the lead with a snapshot of the tariff as it is now
    4. Queues customer and admin notifications

    **Example request:**
    ```json
    {
      "fullName": "Aysel Mammadova",
      "phone": "+994501234567",
      "cityId": "550e8400-e29b-41d4-a716-446655440001",
      "districtId": "660e8400-e29b-41d4-a716-446655440001",
      "tariffId": "880e8400-e29b-41d4-a716-446655440001"
    }
    ```
    """
    lead = service.create(
        CreateLeadRequest(
            full_name=request.full_name,
            phone=request.phone,
            email=str(request.email) if request.email else None,
            city_id=request.city_id,
            district_id=request.district_id,
            address=request.address or None,
            tariff_id=request.tariff_id,
            source=request.source,
        )
    )
    return ApiResponse(data=LeadData(lead=LeadResponse.from_domain(lead)))
