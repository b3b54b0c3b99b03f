"""
ISP API Endpoints.

Leads visible to the calling ISP.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_lead_service, require_isp
from api.models import ApiResponse, ErrorResponse, LeadListData, LeadResponse, PageMeta
from domain.user import AuthenticatedPrincipal
from services.lead_service import LeadService

router = APIRouter()


@router.get(
    "/isp/leads",
    response_model=ApiResponse[LeadListData],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="List My Leads",
    description="Leads assigned to the caller's ISP, newest first.",
)
def list_isp_leads(
    service: LeadService = Depends(get_lead_service),
    principal: AuthenticatedPrincipal = Depends(require_isp),
):
    leads = service.list_by_assigned_isp(principal.isp_id)
    return ApiResponse(
        data=LeadListData(leads=[LeadResponse.from_domain(lead) for lead in leads]),
        meta=PageMeta(total=len(leads)),
    )
