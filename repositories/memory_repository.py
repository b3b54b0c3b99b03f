"""
In-memory repositories.

Development default and the test backend. Each repository owns a dict keyed
by id; writes are serialised by a per-repository `threading.Lock` so the lead
version check and the write happen atomically.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from domain.enums import LeadStatus, SortBy, SortOrder
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


class InMemoryCityRepository(CityRepository):
    def __init__(self, cities: Iterable[City] = ()) -> None:
        self._cities: Dict[str, City] = {city.id: city for city in cities}

    def find_by_id(self, city_id: str) -> Optional[City]:
        return self._cities.get(city_id)

    def find_all(self) -> List[City]:
        return list(self._cities.values())


class InMemoryDistrictRepository(DistrictRepository):
    def __init__(self, districts: Iterable[District] = ()) -> None:
        self._districts: Dict[str, District] = {district.id: district for district in districts}

    def find_by_id(self, district_id: str) -> Optional[District]:
        return self._districts.get(district_id)

    def find_all(self) -> List[District]:
        return list(self._districts.values())


class InMemoryISPRepository(ISPRepository):
    def __init__(self, isps: Iterable[ISP] = ()) -> None:
        self._isps: Dict[str, ISP] = {isp.id: isp for isp in isps}
        self._lock = threading.Lock()

    def find_by_id(self, isp_id: str) -> Optional[ISP]:
        return self._isps.get(isp_id)

    def find_all(self) -> List[ISP]:
        return list(self._isps.values())

    def create(self, isp: ISP) -> ISP:
        with self._lock:
            if isp.id in self._isps:
                raise ValueError(f"ISP '{isp.id}' already exists")
            self._isps[isp.id] = isp
        return isp

    def _save(self, isp: ISP) -> ISP:
        with self._lock:
            self._isps[isp.id] = isp
        return isp


def _presort(tariffs: List[Tariff], sort: Optional[TariffSortOptions]) -> List[Tariff]:
    # ISP priority is not known here; the ranking engine applies the final order.
    if sort is None or sort.sort_by is None or sort.sort_by is SortBy.PRIORITY:
        return tariffs
    reverse = sort.sort_order is SortOrder.DESC
    if sort.sort_by is SortBy.PRICE:
        return sorted(tariffs, key=lambda t: t.price_monthly, reverse=reverse)
    if sort.sort_by is SortBy.SPEED:
        return sorted(tariffs, key=lambda t: t.speed_mbps, reverse=reverse)
    return sorted(tariffs, key=lambda t: Decimal(t.speed_mbps) / t.price_monthly, reverse=reverse)


class InMemoryTariffRepository(TariffRepository):
    def __init__(self, tariffs: Iterable[Tariff] = ()) -> None:
        self._tariffs: Dict[str, Tariff] = {tariff.id: tariff for tariff in tariffs}
        self._lock = threading.Lock()

    def find_by_id(self, tariff_id: str) -> Optional[Tariff]:
        return self._tariffs.get(tariff_id)

    def find_by_filter(
        self,
        criteria: TariffFilterCriteria,
        sort: Optional[TariffSortOptions] = None,
    ) -> List[Tariff]:
        matching = [tariff for tariff in self._tariffs.values() if criteria.matches(tariff)]
        return _presort(matching, sort)

    def find_by_isp_id(self, isp_id: str) -> List[Tariff]:
        return [tariff for tariff in self._tariffs.values() if tariff.isp_id == isp_id]

    def create(self, tariff: Tariff) -> Tariff:
        with self._lock:
            if tariff.id in self._tariffs:
                raise ValueError(f"Tariff '{tariff.id}' already exists")
            self._tariffs[tariff.id] = tariff
        return tariff

    def _save(self, tariff: Tariff) -> Tariff:
        with self._lock:
            self._tariffs[tariff.id] = tariff
        return tariff


class InMemoryLeadRepository(LeadRepository):
    def __init__(self, leads: Iterable[Lead] = ()) -> None:
        self._leads: Dict[str, Lead] = {lead.id: lead for lead in leads}
        self._lock = threading.Lock()

    def _newest_first(self, leads: Iterable[Lead]) -> List[Lead]:
        return sorted(leads, key=lambda lead: lead.created_at, reverse=True)

    def find_by_id(self, lead_id: str) -> Optional[Lead]:
        return self._leads.get(lead_id)

    def find_all(self, limit: int = 20, offset: int = 0) -> List[Lead]:
        return self._newest_first(self._leads.values())[offset : offset + limit]

    def find_by_status(self, status: LeadStatus) -> List[Lead]:
        return self._newest_first(lead for lead in self._leads.values() if lead.status is status)

    def find_by_assigned_isp(self, isp_id: str) -> List[Lead]:
        return self._newest_first(
            lead for lead in self._leads.values() if lead.assigned_isp_id == isp_id
        )

    def count(self) -> int:
        return len(self._leads)

    def create(self, lead: Lead) -> Lead:
        with self._lock:
            if lead.id in self._leads:
                raise ValueError(f"Lead '{lead.id}' already exists")
            self._leads[lead.id] = lead
        return lead

    def _write(self, lead: Lead, expected_version: int) -> Optional[Lead]:
        with self._lock:
            stored = self._leads.get(lead.id)
            if stored is None:
                return None
            if stored.version != expected_version:
                raise_version_conflict(lead.id, expected_version, stored.version)
            written = replace(
                lead,
                created_at=stored.created_at,
                updated_at=utc_now(),
                version=stored.version + 1,
            )
            self._leads[lead.id] = written
        return written


class InMemoryUserRepository(UserRepository):
    def __init__(self, users: Iterable[User] = ()) -> None:
        self._users: Dict[str, User] = {user.id: user for user in users}
        self._lock = threading.Lock()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == wanted:
                return user
        return None

    def create(self, user: User) -> User:
        with self._lock:
            if user.id in self._users:
                raise ValueError(f"User '{user.id}' already exists")
            if self.find_by_email(user.email) is not None:
                raise ValueError(f"User with email '{user.email}' already exists")
            self._users[user.id] = user
        return user

    def _save(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user
        return user


__all__ = [
    "InMemoryCityRepository",
    "InMemoryDistrictRepository",
    "InMemoryISPRepository",
    "InMemoryTariffRepository",
    "InMemoryLeadRepository",
    "InMemoryUserRepository",
]
