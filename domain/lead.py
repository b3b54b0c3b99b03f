"""
Domain: Lead entity and its status state machine.

Rules implemented here:
- A Lead embeds an immutable TariffSnapshot taken at creation time; later
  changes to the live Tariff never alter what the customer was shown.
- Status changes follow LEAD_STATUS_TRANSITIONS. CONVERTED, REJECTED and
  CANCELLED are terminal; self-transitions are not transitions.
- Entering CONVERTED stamps converted_at. This is the only status-linked side
  effect on the entity.
- Assignment to an ISP is a forced move to ASSIGNED_TO_ISP; it is not checked
  against the transition table.
- Leads are never deleted; terminal leads are kept for audit.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import FrozenSet, Mapping, Optional

from .enums import LeadSource, LeadStatus, Technology
from .errors import ValidationError
from .tariff import CampaignFlags
from .time import require_utc_timestamp


LEAD_STATUS_TRANSITIONS: Mapping[LeadStatus, FrozenSet[LeadStatus]] = {
    LeadStatus.NEW: frozenset(
        {LeadStatus.CONTACTED, LeadStatus.ASSIGNED_TO_ISP, LeadStatus.REJECTED, LeadStatus.CANCELLED}
    ),
    LeadStatus.CONTACTED: frozenset(
        {LeadStatus.QUALIFIED, LeadStatus.ASSIGNED_TO_ISP, LeadStatus.REJECTED, LeadStatus.CANCELLED}
    ),
    LeadStatus.QUALIFIED: frozenset(
        {LeadStatus.ASSIGNED_TO_ISP, LeadStatus.REJECTED, LeadStatus.CANCELLED}
    ),
    LeadStatus.ASSIGNED_TO_ISP: frozenset(
        {LeadStatus.IN_PROGRESS, LeadStatus.REJECTED, LeadStatus.CANCELLED}
    ),
    LeadStatus.IN_PROGRESS: frozenset(
        {LeadStatus.CONVERTED, LeadStatus.REJECTED, LeadStatus.CANCELLED}
    ),
    LeadStatus.CONVERTED: frozenset(),
    LeadStatus.REJECTED: frozenset(),
    LeadStatus.CANCELLED: frozenset(),
}


def allowed_transitions(status: LeadStatus) -> FrozenSet[LeadStatus]:
    return LEAD_STATUS_TRANSITIONS[status]


def is_terminal(status: LeadStatus) -> bool:
    return not LEAD_STATUS_TRANSITIONS[status]


def validate_status_transition(current: LeadStatus, target: LeadStatus) -> None:
    """Raise ValidationError unless current -> target is in the transition table."""

    allowed = allowed_transitions(current)
    if target not in allowed:
        allowed_values = sorted(status.value for status in allowed)
        raise ValidationError(
            f"Invalid status transition from '{current.value}' to '{target.value}'",
            details={
                "currentStatus": current.value,
                "newStatus": target.value,
                "allowedTransitions": allowed_values,
            },
        )


@dataclass(frozen=True, slots=True)
class TariffSnapshot:
    """Copy of the tariff + ISP fields the customer saw when submitting the lead."""

    tariff_id: str
    tariff_name: str
    isp_name: str
    speed_mbps: int
    price_monthly: Decimal
    technology: Technology
    campaigns: CampaignFlags


@dataclass(frozen=True, slots=True)
class Lead:
    """
    The central mutable aggregate, modelled as a frozen value.

    Every change returns a new Lead; repositories persist the full record.
    `version` is bumped by the repository on every write and is used for
    optimistic concurrency checks.
    """

    id: str
    status: LeadStatus
    source: LeadSource
    full_name: str
    phone: str
    city_id: str
    district_id: str
    tariff_snapshot: TariffSnapshot
    created_at: datetime
    updated_at: datetime
    email: Optional[str] = None
    address: Optional[str] = None
    assigned_isp_id: Optional[str] = None
    assigned_at: Optional[datetime] = None
    notes: Optional[str] = None
    outcome_notes: Optional[str] = None
    converted_at: Optional[datetime] = None
    version: int = 1

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)
        require_utc_timestamp("updated_at", self.updated_at)
        if self.assigned_at is not None:
            require_utc_timestamp("assigned_at", self.assigned_at)
        if self.converted_at is not None:
            require_utc_timestamp("converted_at", self.converted_at)
        if self.version < 1:
            raise ValueError("version must be >= 1")

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    def with_status(self, status: LeadStatus, at: datetime, notes: Optional[str] = None) -> "Lead":
        """
        Return this lead moved to `status`.

        The transition itself is validated by the lifecycle manager; this only
        applies it.
        """

        require_utc_timestamp("at", at)
        return replace(
            self,
            status=status,
            notes=notes if notes is not None else self.notes,
            converted_at=at if status is LeadStatus.CONVERTED else self.converted_at,
        )

    def assigned_to(self, isp_id: str, at: datetime) -> "Lead":
        require_utc_timestamp("at", at)
        return replace(
            self,
            assigned_isp_id=isp_id,
            assigned_at=at,
            status=LeadStatus.ASSIGNED_TO_ISP,
        )
