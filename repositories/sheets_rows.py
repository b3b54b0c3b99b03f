"""
Row <-> dataclass mapping for the Google Sheets backend.

Every worksheet stores one entity per row, first row is the header. Cells are
strings; booleans are "TRUE"/"FALSE", timestamps ISO-8601, empty cells mean
None. The Sheets API drops trailing empty cells, so readers must tolerate
short rows.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import List, Optional, Sequence

from domain.enums import LeadSource, LeadStatus, Technology, UserRole
from domain.lead import Lead
from domain.reference import City, District, ISP
from domain.tariff import Tariff
from domain.time import parse_optional_utc_datetime, parse_utc_datetime, to_iso_utc
from domain.user import User
from repositories.serialization import (
    campaigns_from_dict,
    campaigns_to_dict,
    snapshot_from_dict,
    snapshot_to_dict,
)

# Sheet name -> last column letter of its layout.
CITY_SHEET = ("Cities", "E")
DISTRICT_SHEET = ("Districts", "F")
ISP_SHEET = ("ISPs", "K")
TARIFF_SHEET = ("Tariffs", "O")
LEAD_SHEET = ("Leads", "R")
USER_SHEET = ("Users", "H")

Row = Sequence[str]


def _cell(row: Row, index: int) -> str:
    if index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value).strip()


def _optional(row: Row, index: int) -> Optional[str]:
    return _cell(row, index) or None


def _optional_int(row: Row, index: int) -> Optional[int]:
    value = _cell(row, index)
    return int(value) if value else None


def _bool(row: Row, index: int, default: bool = False) -> bool:
    value = _cell(row, index)
    if not value:
        return default
    return value.upper() == "TRUE"


def _bool_cell(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def _text(value: Optional[object]) -> str:
    return "" if value is None else str(value)


def row_to_city(row: Row) -> City:
    return City(
        id=_cell(row, 0),
        name=_cell(row, 1),
        name_az=_cell(row, 2),
        name_en=_cell(row, 3),
        is_active=_bool(row, 4, default=True),
    )


def row_to_district(row: Row) -> District:
    return District(
        id=_cell(row, 0),
        city_id=_cell(row, 1),
        name=_cell(row, 2),
        name_az=_cell(row, 3),
        name_en=_cell(row, 4),
        is_active=_bool(row, 5, default=True),
    )


def row_to_isp(row: Row) -> ISP:
    return ISP(
        id=_cell(row, 0),
        name=_cell(row, 1),
        logo=_optional(row, 2),
        description=_optional(row, 3),
        contact_email=_cell(row, 4),
        contact_phone=_cell(row, 5),
        website=_optional(row, 6),
        priority_score=_optional_int(row, 7) or 0,
        is_active=_bool(row, 8, default=True),
        created_at=parse_optional_utc_datetime(_cell(row, 9)),
        updated_at=parse_optional_utc_datetime(_cell(row, 10)),
    )


def isp_to_row(isp: ISP) -> List[str]:
    return [
        isp.id,
        isp.name,
        _text(isp.logo),
        _text(isp.description),
        isp.contact_email,
        isp.contact_phone,
        _text(isp.website),
        str(isp.priority_score),
        _bool_cell(isp.is_active),
        _text(to_iso_utc(isp.created_at)),
        _text(to_iso_utc(isp.updated_at)),
    ]


def row_to_tariff(row: Row) -> Tariff:
    campaigns_json = _cell(row, 10)
    district_ids = _cell(row, 11)
    return Tariff(
        id=_cell(row, 0),
        isp_id=_cell(row, 1),
        name=_cell(row, 2),
        description=_optional(row, 3),
        technology=Technology(_cell(row, 4)),
        speed_mbps=int(_cell(row, 5)),
        upload_speed_mbps=_optional_int(row, 6),
        price_monthly=Decimal(_cell(row, 7)),
        contract_length_months=_optional_int(row, 8) or 0,
        data_limit_gb=_optional_int(row, 9),
        campaigns=campaigns_from_dict(json.loads(campaigns_json) if campaigns_json else None),
        available_district_ids=tuple(d.strip() for d in district_ids.split(",") if d.strip()),
        is_active=_bool(row, 12, default=True),
        created_at=parse_optional_utc_datetime(_cell(row, 13)),
        updated_at=parse_optional_utc_datetime(_cell(row, 14)),
    )


def tariff_to_row(tariff: Tariff) -> List[str]:
    return [
        tariff.id,
        tariff.isp_id,
        tariff.name,
        _text(tariff.description),
        tariff.technology.value,
        str(tariff.speed_mbps),
        _text(tariff.upload_speed_mbps),
        str(tariff.price_monthly),
        str(tariff.contract_length_months),
        _text(tariff.data_limit_gb),
        json.dumps(campaigns_to_dict(tariff.campaigns)),
        ",".join(tariff.available_district_ids),
        _bool_cell(tariff.is_active),
        _text(to_iso_utc(tariff.created_at)),
        _text(to_iso_utc(tariff.updated_at)),
    ]


def row_to_lead(row: Row) -> Lead:
    return Lead(
        id=_cell(row, 0),
        status=LeadStatus(_cell(row, 1)),
        source=LeadSource(_cell(row, 2)),
        full_name=_cell(row, 3),
        phone=_cell(row, 4),
        email=_optional(row, 5),
        city_id=_cell(row, 6),
        district_id=_cell(row, 7),
        address=_optional(row, 8),
        tariff_snapshot=snapshot_from_dict(json.loads(_cell(row, 9))),
        assigned_isp_id=_optional(row, 10),
        assigned_at=parse_optional_utc_datetime(_cell(row, 11)),
        notes=_optional(row, 12),
        outcome_notes=_optional(row, 13),
        created_at=parse_utc_datetime(_cell(row, 14)),
        updated_at=parse_utc_datetime(_cell(row, 15)),
        converted_at=parse_optional_utc_datetime(_cell(row, 16)),
        # Rows written before versioning have no version cell.
        version=_optional_int(row, 17) or 1,
    )


def lead_to_row(lead: Lead) -> List[str]:
    return [
        lead.id,
        lead.status.value,
        lead.source.value,
        lead.full_name,
        lead.phone,
        _text(lead.email),
        lead.city_id,
        lead.district_id,
        _text(lead.address),
        json.dumps(snapshot_to_dict(lead.tariff_snapshot), ensure_ascii=False),
        _text(lead.assigned_isp_id),
        _text(to_iso_utc(lead.assigned_at)),
        _text(lead.notes),
        _text(lead.outcome_notes),
        _text(to_iso_utc(lead.created_at)),
        _text(to_iso_utc(lead.updated_at)),
        _text(to_iso_utc(lead.converted_at)),
        str(lead.version),
    ]


def row_to_user(row: Row) -> User:
    return User(
        id=_cell(row, 0),
        email=_cell(row, 1),
        password_hash=_cell(row, 2),
        role=UserRole(_cell(row, 3)),
        isp_id=_optional(row, 4),
        is_active=_bool(row, 5, default=True),
        created_at=parse_optional_utc_datetime(_cell(row, 6)),
        updated_at=parse_optional_utc_datetime(_cell(row, 7)),
    )


def user_to_row(user: User) -> List[str]:
    return [
        user.id,
        user.email,
        user.password_hash,
        user.role.value,
        _text(user.isp_id),
        _bool_cell(user.is_active),
        _text(to_iso_utc(user.created_at)),
        _text(to_iso_utc(user.updated_at)),
    ]
