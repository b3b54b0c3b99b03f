"""
Repository interfaces.

Services depend on these abstract classes only; the storage backend (memory,
Supabase, Google Sheets) is chosen once at startup by the container.

Common contract:
- `find_*` methods return domain objects (or None / empty list), never rows.
- `update` returns None when the id does not exist and never changes `id` or
  `created_at`.
- Lead writes are full-record writes guarded by `Lead.version`; a stale
  `expected_version` raises ConflictError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, List, Mapping, Optional

from domain.enums import LeadStatus
from domain.errors import ConflictError
from domain.lead import Lead
from domain.reference import City, District, ISP
from domain.tariff import Tariff, TariffFilterCriteria, TariffSortOptions
from domain.time import utc_now
from domain.user import User


_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


def _apply_changes(entity: Any, changes: Mapping[str, Any]) -> Any:
    allowed = {key: value for key, value in changes.items() if key not in _IMMUTABLE_FIELDS}
    if hasattr(entity, "updated_at"):
        allowed["updated_at"] = utc_now()
    return replace(entity, **allowed)


def raise_version_conflict(lead_id: str, expected: int, actual: int) -> None:
    raise ConflictError(
        f"Lead '{lead_id}' was modified concurrently",
        details={"leadId": lead_id, "expectedVersion": expected, "actualVersion": actual},
    )


class CityRepository(ABC):
    @abstractmethod
    def find_by_id(self, city_id: str) -> Optional[City]:
        raise NotImplementedError

    @abstractmethod
    def find_all(self) -> List[City]:
        raise NotImplementedError

    def find_active(self) -> List[City]:
        return [city for city in self.find_all() if city.is_active]


class DistrictRepository(ABC):
    @abstractmethod
    def find_by_id(self, district_id: str) -> Optional[District]:
        raise NotImplementedError

    @abstractmethod
    def find_all(self) -> List[District]:
        raise NotImplementedError

    def find_by_city_id(self, city_id: str) -> List[District]:
        return [district for district in self.find_all() if district.belongs_to(city_id)]


class ISPRepository(ABC):
    @abstractmethod
    def find_by_id(self, isp_id: str) -> Optional[ISP]:
        raise NotImplementedError

    @abstractmethod
    def find_all(self) -> List[ISP]:
        raise NotImplementedError

    def find_active(self) -> List[ISP]:
        return [isp for isp in self.find_all() if isp.is_active]

    @abstractmethod
    def create(self, isp: ISP) -> ISP:
        raise NotImplementedError

    def update(self, isp_id: str, changes: Mapping[str, Any]) -> Optional[ISP]:
        current = self.find_by_id(isp_id)
        if current is None:
            return None
        return self._save(_apply_changes(current, changes))

    @abstractmethod
    def _save(self, isp: ISP) -> ISP:
        raise NotImplementedError


class TariffRepository(ABC):
    @abstractmethod
    def find_by_id(self, tariff_id: str) -> Optional[Tariff]:
        raise NotImplementedError

    @abstractmethod
    def find_by_filter(
        self,
        criteria: TariffFilterCriteria,
        sort: Optional[TariffSortOptions] = None,
    ) -> List[Tariff]:
        """
        Return active tariffs matching `criteria`.

        Backends may only narrow what they push down; the ranking engine
        re-applies `criteria.matches` and owns the final ordering.
        """

        raise NotImplementedError

    @abstractmethod
    def find_by_isp_id(self, isp_id: str) -> List[Tariff]:
        raise NotImplementedError

    @abstractmethod
    def create(self, tariff: Tariff) -> Tariff:
        raise NotImplementedError

    def update(self, tariff_id: str, changes: Mapping[str, Any]) -> Optional[Tariff]:
        current = self.find_by_id(tariff_id)
        if current is None:
            return None
        return self._save(_apply_changes(current, changes))

    @abstractmethod
    def _save(self, tariff: Tariff) -> Tariff:
        raise NotImplementedError


class UserRepository(ABC):
    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def create(self, user: User) -> User:
        raise NotImplementedError

    def update(self, user_id: str, changes: Mapping[str, Any]) -> Optional[User]:
        current = self.find_by_id(user_id)
        if current is None:
            return None
        return self._save(_apply_changes(current, changes))

    @abstractmethod
    def _save(self, user: User) -> User:
        raise NotImplementedError


class LeadRepository(ABC):
    """
    Lead persistence.

    Status changes and assignment are implemented here once (read, apply the
    domain method, write the full record) so every backend shares the same
    semantics. Backends provide `_write`, which performs the version check,
    bumps `version` and stamps `updated_at`.
    """

    @abstractmethod
    def find_by_id(self, lead_id: str) -> Optional[Lead]:
        raise NotImplementedError

    @abstractmethod
    def find_all(self, limit: int = 20, offset: int = 0) -> List[Lead]:
        """Newest first."""

        raise NotImplementedError

    @abstractmethod
    def find_by_status(self, status: LeadStatus) -> List[Lead]:
        raise NotImplementedError

    @abstractmethod
    def find_by_assigned_isp(self, isp_id: str) -> List[Lead]:
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def create(self, lead: Lead) -> Lead:
        raise NotImplementedError

    @abstractmethod
    def _write(self, lead: Lead, expected_version: int) -> Optional[Lead]:
        """
        Persist `lead` if the stored version equals `expected_version`.

        Returns the stored lead (version + 1, fresh `updated_at`), None when
        the lead no longer exists, and raises ConflictError on a stale version.
        """

        raise NotImplementedError

    def update(
        self,
        lead_id: str,
        changes: Mapping[str, Any],
        expected_version: Optional[int] = None,
    ) -> Optional[Lead]:
        current = self.find_by_id(lead_id)
        if current is None:
            return None
        changes = {key: value for key, value in changes.items() if key != "version"}
        return self._write(
            _apply_changes(current, changes),
            self._expected(current, expected_version),
        )

    def update_status(
        self,
        lead_id: str,
        status: LeadStatus,
        notes: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Optional[Lead]:
        current = self.find_by_id(lead_id)
        if current is None:
            return None
        now = utc_now()
        updated = replace(current.with_status(status, now, notes=notes), updated_at=now)
        return self._write(updated, self._expected(current, expected_version))

    def assign_to_isp(
        self,
        lead_id: str,
        isp_id: str,
        expected_version: Optional[int] = None,
    ) -> Optional[Lead]:
        current = self.find_by_id(lead_id)
        if current is None:
            return None
        now = utc_now()
        updated = replace(current.assigned_to(isp_id, now), updated_at=now)
        return self._write(updated, self._expected(current, expected_version))

    @staticmethod
    def _expected(current: Lead, expected_version: Optional[int]) -> int:
        if expected_version is None:
            return current.version
        if expected_version != current.version:
            raise_version_conflict(current.id, expected_version, current.version)
        return expected_version


__all__ = [
    "CityRepository",
    "DistrictRepository",
    "ISPRepository",
    "TariffRepository",
    "LeadRepository",
    "UserRepository",
    "raise_version_conflict",
]
