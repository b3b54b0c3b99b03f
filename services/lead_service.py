"""
Lead lifecycle manager.

Handles:
- Lead creation with an immutable tariff snapshot
- Status transitions validated against the lead state machine
- Assignment of a lead to exactly one ISP
- Read-only lead queries

Every mutation is read -> validate -> full-record write guarded by the lead's
version. Notifications are best effort: a failing notifier is logged and never
fails or rolls back the lifecycle operation.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from domain.enums import LeadSource, LeadStatus
from domain.errors import ConflictError, NotFoundError, ValidationError
from domain.lead import Lead, TariffSnapshot, validate_status_transition
from domain.time import utc_now
from repositories.interfaces import (
    CityRepository,
    DistrictRepository,
    ISPRepository,
    LeadRepository,
)
from services.tariff_service import EnrichedTariff, TariffService

logger = logging.getLogger(__name__)


class LeadNotifier(Protocol):
    def notify_lead_created(self, lead: Lead) -> None:
        ...

    def notify_lead_assigned(self, lead: Lead, isp_name: str) -> None:
        ...

    def notify_status_updated(self, lead: Lead, old_status: LeadStatus, new_status: LeadStatus) -> None:
        ...


@dataclass(frozen=True, slots=True)
class CreateLeadRequest:
    full_name: str
    phone: str
    city_id: str
    district_id: str
    tariff_id: str
    email: Optional[str] = None
    address: Optional[str] = None
    source: LeadSource = LeadSource.COMPARISON


def build_tariff_snapshot(enriched: EnrichedTariff) -> TariffSnapshot:
    tariff = enriched.tariff
    return TariffSnapshot(
        tariff_id=tariff.id,
        tariff_name=tariff.name,
        isp_name=enriched.isp.name,
        speed_mbps=tariff.speed_mbps,
        price_monthly=tariff.price_monthly,
        technology=tariff.technology,
        campaigns=tariff.campaigns,
    )


class LeadService:
    def __init__(
        self,
        leads: LeadRepository,
        cities: CityRepository,
        districts: DistrictRepository,
        isps: ISPRepository,
        tariff_service: TariffService,
        notifier: LeadNotifier,
    ) -> None:
        self._leads = leads
        self._cities = cities
        self._districts = districts
        self._isps = isps
        self._tariff_service = tariff_service
        self._notifier = notifier

    def _notify(self, event: str, lead_id: str, send: Callable[..., None], *args: object) -> None:
        try:
            send(*args)
        except Exception:
            logger.error(
                "Failed to dispatch notification",
                extra={"event": event, "leadId": lead_id},
                exc_info=True,
            )

    def create(self, request: CreateLeadRequest) -> Lead:
        """
        Create a new lead for a tariff.

        Raises:
            NotFoundError: city, district or tariff does not exist.
            ValidationError: district is not in the city, or the tariff is not
                sold in the district.
        """

        logger.info("Creating new lead", extra={"tariffId": request.tariff_id})

        if self._cities.find_by_id(request.city_id) is None:
            raise NotFoundError("City", request.city_id)

        district = self._districts.find_by_id(request.district_id)
        if district is None:
            raise NotFoundError("District", request.district_id)
        if not district.belongs_to(request.city_id):
            raise ValidationError(
                f"District '{request.district_id}' does not belong to city '{request.city_id}'",
                details={"cityId": request.city_id, "districtId": request.district_id},
            )

        enriched = self._tariff_service.get_by_id(request.tariff_id)
        if enriched is None:
            raise NotFoundError("Tariff", request.tariff_id)
        if not enriched.tariff.is_available_in(request.district_id):
            raise ValidationError(
                "Tariff is not available in selected district",
                details={"tariffId": request.tariff_id, "districtId": request.district_id},
            )

        now = utc_now()
        lead = self._leads.create(
            Lead(
                id=str(uuid.uuid4()),
                status=LeadStatus.NEW,
                source=request.source,
                full_name=request.full_name,
                phone=request.phone,
                email=request.email,
                city_id=request.city_id,
                district_id=request.district_id,
                address=request.address,
                tariff_snapshot=build_tariff_snapshot(enriched),
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Lead created", extra={"leadId": lead.id})

        self._notify("lead_created", lead.id, self._notifier.notify_lead_created, lead)
        return lead

    def update_status(
        self,
        lead_id: str,
        status: LeadStatus,
        notes: Optional[str] = None,
        outcome_notes: Optional[str] = None,
    ) -> Lead:
        """
        Move a lead to `status`.

        Raises:
            NotFoundError: the lead does not exist.
            ValidationError: the transition is not allowed.
            ConflictError: the lead was modified concurrently.
        """

        logger.info("Updating lead status", extra={"leadId": lead_id, "status": status.value})

        lead = self.get_by_id(lead_id)
        validate_status_transition(lead.status, status)

        updated = self._leads.update_status(
            lead_id, status, notes=notes, expected_version=lead.version
        )
        if updated is None:
            raise NotFoundError("Lead", lead_id)

        self._notify(
            "status_updated",
            lead_id,
            self._notifier.notify_status_updated,
            updated,
            lead.status,
            status,
        )

        if outcome_notes:
            with_notes = self._leads.update(
                lead_id, {"outcome_notes": outcome_notes}, expected_version=updated.version
            )
            if with_notes is None:
                raise NotFoundError("Lead", lead_id)
            return with_notes
        return updated

    def assign_to_isp(self, lead_id: str, isp_id: str) -> Lead:
        """
        Assign a lead to an ISP.

        Re-assigning to the ISP the lead already belongs to returns the lead
        unchanged.

        Raises:
            NotFoundError: the lead or the ISP does not exist.
            ConflictError: the lead is already assigned to a different ISP.
        """

        logger.info("Assigning lead to ISP", extra={"leadId": lead_id, "ispId": isp_id})

        lead = self.get_by_id(lead_id)
        isp = self._isps.find_by_id(isp_id)
        if isp is None:
            raise NotFoundError("ISP", isp_id)

        if lead.assigned_isp_id is not None:
            if lead.assigned_isp_id != isp_id:
                raise ConflictError(
                    "Lead is already assigned to another ISP",
                    details={"currentIspId": lead.assigned_isp_id, "newIspId": isp_id},
                )
            return lead

        updated = self._leads.assign_to_isp(lead_id, isp_id, expected_version=lead.version)
        if updated is None:
            raise NotFoundError("Lead", lead_id)

        self._notify("lead_assigned", lead_id, self._notifier.notify_lead_assigned, updated, isp.name)
        return updated

    def get_by_id(self, lead_id: str) -> Lead:
        lead = self._leads.find_by_id(lead_id)
        if lead is None:
            raise NotFoundError("Lead", lead_id)
        return lead

    def list_all(self, limit: int = 20, offset: int = 0) -> List[Lead]:
        return self._leads.find_all(limit=limit, offset=offset)

    def count_all(self) -> int:
        return self._leads.count()

    def list_by_assigned_isp(self, isp_id: str) -> List[Lead]:
        if self._isps.find_by_id(isp_id) is None:
            raise NotFoundError("ISP", isp_id)
        return self._leads.find_by_assigned_isp(isp_id)

    def list_by_status(self, status: LeadStatus) -> List[Lead]:
        return self._leads.find_by_status(status)


__all__ = ["LeadService", "LeadNotifier", "CreateLeadRequest", "build_tariff_snapshot"]
