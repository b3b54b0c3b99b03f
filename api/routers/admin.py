"""
Admin API Endpoints.

Lead management for administrators. Single-lead reads and status updates are
also open to the ISP the lead is assigned to.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_lead_service, require_admin, require_admin_or_isp
from api.models import (
    ApiResponse,
    AssignIspRequest,
    ErrorResponse,
    LeadData,
    LeadListData,
    LeadResponse,
    PageMeta,
    UpdateLeadStatusRequest,
)
from auth.principal import check_isp_ownership
from domain.enums import LeadStatus
from domain.user import AuthenticatedPrincipal
from services.lead_service import LeadService

router = APIRouter()

_AUTH_ERRORS = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


@router.get(
    "/admin/leads",
    response_model=ApiResponse[LeadListData],
    responses=_AUTH_ERRORS,
    summary="List Leads",
    description="Paginated lead list, newest first, optionally filtered by status.",
)
def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    lead_status: Optional[LeadStatus] = Query(None, alias="status"),
    service: LeadService = Depends(get_lead_service),
    principal: AuthenticatedPrincipal = Depends(require_admin),
):
    offset = (page - 1) * limit
    if lead_status is not None:
        matching = service.list_by_status(lead_status)
        leads = matching[offset:offset + limit]
        total = len(matching)
    else:
        leads = service.list_all(limit=limit, offset=offset)
        total = service.count_all()

    return ApiResponse(
        data=LeadListData(leads=[LeadResponse.from_domain(lead) for lead in leads]),
        meta=PageMeta(page=page, limit=limit, total=total),
    )


@router.get(
    "/admin/leads/{lead_id}",
    response_model=ApiResponse[LeadData],
    responses={**_AUTH_ERRORS, 404: {"model": ErrorResponse}},
    summary="Get Lead",
)
def get_lead(
    lead_id: str,
    service: LeadService = Depends(get_lead_service),
    principal: AuthenticatedPrincipal = Depends(require_admin_or_isp),
):
    lead = service.get_by_id(lead_id)
    check_isp_ownership(principal, lead.assigned_isp_id)
    return ApiResponse(data=LeadData(lead=LeadResponse.from_domain(lead)))


@router.patch(
    "/admin/leads/{lead_id}",
    response_model=ApiResponse[LeadData],
    responses={
        **_AUTH_ERRORS,
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update Lead Status",
    description="Move a lead along its lifecycle. Invalid transitions are rejected with 400.",
)
def update_lead_status(
    lead_id: str,
    request: UpdateLeadStatusRequest,
    service: LeadService = Depends(get_lead_service),
    principal: AuthenticatedPrincipal = Depends(require_admin_or_isp),
):
    """
    Update a lead's status.

    **Allowed transitions:**
    - new -> contacted, assigned_to_isp, rejected, cancelled
    - contacted -> qualified, assigned_to_isp, rejected, cancelled
    - qualified -> assigned_to_isp, rejected, cancelled
    - assigned_to_isp -> in_progress, rejected, cancelled
    - in_progress -> converted, rejected, cancelled

    converted, rejected and cancelled are final.
    """
    lead = service.get_by_id(lead_id)
    check_isp_ownership(principal, lead.assigned_isp_id)

    updated = service.update_status(
        lead_id,
        request.status,
        notes=request.notes,
        outcome_notes=request.outcome_notes,
    )
    return ApiResponse(data=LeadData(lead=LeadResponse.from_domain(updated)))


@router.post(
    "/admin/assign-isp",
    response_model=ApiResponse[LeadData],
    responses={**_AUTH_ERRORS, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Assign Lead to ISP",
)
def assign_lead(
    request: AssignIspRequest,
    service: LeadService = Depends(get_lead_service),
    principal: AuthenticatedPrincipal = Depends(require_admin),
):
    """
    Assign a lead to an ISP and move it to `assigned_to_isp`.

    A lead already assigned to a different ISP is rejected with 409.
    """
    lead = service.assign_to_isp(request.lead_id, request.isp_id)
    return ApiResponse(data=LeadData(lead=LeadResponse.from_domain(lead)))
