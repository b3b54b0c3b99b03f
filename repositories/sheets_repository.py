"""
Google Sheets repositories.

One worksheet per entity; the header row is skipped. Every query reads the
whole sheet and filters in process, which is fine for the catalogue sizes a
spreadsheet can hold.

Lead writes re-read the row and compare versions immediately before the PUT.
The Sheets API has no conditional update, so this narrows the race window but
cannot close it.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from domain.enums import LeadStatus
from domain.lead import Lead
from domain.reference import City, District, ISP
from domain.tariff import Tariff, TariffFilterCriteria, TariffSortOptions
from domain.time import utc_now
from domain.user import User
from repositories.interfaces import (
    CityRepository,
    DistrictRepository,
    ISPRepository,
    LeadRepository,
    TariffRepository,
    UserRepository,
    raise_version_conflict,
)
from repositories.sheets_client import GoogleSheetsClient
from repositories.sheets_rows import (
    CITY_SHEET,
    DISTRICT_SHEET,
    ISP_SHEET,
    LEAD_SHEET,
    TARIFF_SHEET,
    USER_SHEET,
    isp_to_row,
    lead_to_row,
    row_to_city,
    row_to_district,
    row_to_isp,
    row_to_lead,
    row_to_tariff,
    row_to_user,
    tariff_to_row,
    user_to_row,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Worksheet(Generic[T]):
    """Rows of one worksheet, addressed by the id in column A."""

    def __init__(
        self,
        client: GoogleSheetsClient,
        sheet: Tuple[str, str],
        parse: Callable[[Sequence[str]], T],
    ) -> None:
        self._client = client
        self._name, self._last_column = sheet
        self._parse = parse

    def rows(self) -> List[Sequence[str]]:
        rows = self._client.read_range(f"{self._name}!A2:{self._last_column}")
        return [row for row in rows if row and str(row[0]).strip()]

    def all(self) -> List[T]:
        return [self._parse(row) for row in self.rows()]

    def locate(self, entity_id: str) -> Optional[Tuple[int, T]]:
        """Return (sheet row number, entity) for `entity_id`."""

        for position, row in enumerate(self.rows()):
            if str(row[0]).strip() == entity_id:
                # +2: one for the header row, one for 1-based numbering.
                return position + 2, self._parse(row)
        return None

    def get(self, entity_id: str) -> Optional[T]:
        located = self.locate(entity_id)
        return located[1] if located else None

    def append(self, values: List[str]) -> None:
        self._client.append_row(self._name, values)

    def overwrite(self, row_number: int, values: List[str]) -> None:
        self._client.update_row(
            f"{self._name}!A{row_number}:{self._last_column}{row_number}", values
        )


class SheetsCityRepository(CityRepository):
    def __init__(self, client: GoogleSheetsClient) -> None:
        self._sheet = _Worksheet(client, CITY_SHEET, row_to_city)

    def find_by_id(self, city_id: str) -> Optional[City]:
        return self._sheet.get(city_id)

    def find_all(self) -> List[City]:
        return self._sheet.all()


class SheetsDistrictRepository(DistrictRepository):
    def __init__(self, client: GoogleSheetsClient) -> None:
        self._sheet = _Worksheet(client, DISTRICT_SHEET, row_to_district)

    def find_by_id(self, district_id: str) -> Optional[District]:
        return self._sheet.get(district_id)

    def find_all(self) -> List[District]:
        return self._sheet.all()


class SheetsISPRepository(ISPRepository):
    def __init__(self, client: GoogleSheetsClient) -> None:
        self._sheet = _Worksheet(client, ISP_SHEET, row_to_isp)

    def find_by_id(self, isp_id: str) -> Optional[ISP]:
        return self._sheet.get(isp_id)

    def find_all(self) -> List[ISP]:
        return self._sheet.all()

    def create(self, isp: ISP) -> ISP:
        self._sheet.append(isp_to_row(isp))
        return isp

    def _save(self, isp: ISP) -> ISP:
        located = self._sheet.locate(isp.id)
        if located is None:
            raise RuntimeError(f"ISP '{isp.id}' disappeared from the sheet")
        self._sheet.overwrite(located[0], isp_to_row(isp))
        return isp


class SheetsTariffRepository(TariffRepository):
    def __init__(self, client: GoogleSheetsClient) -> None:
        self._sheet = _Worksheet(client, TARIFF_SHEET, row_to_tariff)

    def find_by_id(self, tariff_id: str) -> Optional[Tariff]:
        return self._sheet.get(tariff_id)

    def find_by_filter(
        self,
        criteria: TariffFilterCriteria,
        sort: Optional[TariffSortOptions] = None,
    ) -> List[Tariff]:
        # Ordering is left to the ranking engine.
        return [tariff for tariff in self._sheet.all() if criteria.matches(tariff)]

    def find_by_isp_id(self, isp_id: str) -> List[Tariff]:
        return [tariff for tariff in self._sheet.all() if tariff.isp_id == isp_id]

    def create(self, tariff: Tariff) -> Tariff:
        self._sheet.append(tariff_to_row(tariff))
        return tariff

    def _save(self, tariff: Tariff) -> Tariff:
        located = self._sheet.locate(tariff.id)
        if located is None:
            raise RuntimeError(f"Tariff '{tariff.id}' disappeared from the sheet")
        self._sheet.overwrite(located[0], tariff_to_row(tariff))
        return tariff


class SheetsLeadRepository(LeadRepository):
    def __init__(self, client: GoogleSheetsClient) -> None:
        self._sheet = _Worksheet(client, LEAD_SHEET, row_to_lead)

    def _newest_first(self, leads: List[Lead]) -> List[Lead]:
        return sorted(leads, key=lambda lead: lead.created_at, reverse=True)

    def find_by_id(self, lead_id: str) -> Optional[Lead]:
        return self._sheet.get(lead_id)

    def find_all(self, limit: int = 20, offset: int = 0) -> List[Lead]:
        return self._newest_first(self._sheet.all())[offset : offset + limit]

    def find_by_status(self, status: LeadStatus) -> List[Lead]:
        return self._newest_first([lead for lead in self._sheet.all() if lead.status is status])

    def find_by_assigned_isp(self, isp_id: str) -> List[Lead]:
        return self._newest_first(
            [lead for lead in self._sheet.all() if lead.assigned_isp_id == isp_id]
        )

    def count(self) -> int:
        return len(self._sheet.rows())

    def create(self, lead: Lead) -> Lead:
        self._sheet.append(lead_to_row(lead))
        return lead

    def _write(self, lead: Lead, expected_version: int) -> Optional[Lead]:
        located = self._sheet.locate(lead.id)
        if located is None:
            return None
        row_number, stored = located
        if stored.version != expected_version:
            raise_version_conflict(lead.id, expected_version, stored.version)
        written = replace(
            lead,
            created_at=stored.created_at,
            updated_at=utc_now(),
            version=stored.version + 1,
        )
        self._sheet.overwrite(row_number, lead_to_row(written))
        logger.debug("Lead row %s rewritten (version %s)", row_number, written.version)
        return written


class SheetsUserRepository(UserRepository):
    def __init__(self, client: GoogleSheetsClient) -> None:
        self._sheet = _Worksheet(client, USER_SHEET, row_to_user)

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self._sheet.get(user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self._sheet.all():
            if user.email.lower() == wanted:
                return user
        return None

    def create(self, user: User) -> User:
        self._sheet.append(user_to_row(user))
        return user

    def _save(self, user: User) -> User:
        located = self._sheet.locate(user.id)
        if located is None:
            raise RuntimeError(f"User '{user.id}' disappeared from the sheet")
        self._sheet.overwrite(located[0], user_to_row(user))
        return user


__all__ = [
    "SheetsCityRepository",
    "SheetsDistrictRepository",
    "SheetsISPRepository",
    "SheetsTariffRepository",
    "SheetsLeadRepository",
    "SheetsUserRepository",
]
