"""
Domain: reference data (cities, districts, ISPs).

Read-mostly catalogues owned by their repositories. The lead lifecycle only
reads them; a District belongs to exactly one City.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class City:
    id: str
    name: str
    name_az: str
    name_en: str
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class District:
    id: str
    city_id: str
    name: str
    name_az: str
    name_en: str
    is_active: bool = True

    def belongs_to(self, city_id: str) -> bool:
        return self.city_id == city_id


@dataclass(frozen=True, slots=True)
class ISP:
    """
    Internet service provider.

    `priority_score` is an external ranking input: higher means more favourable
    placement in tariff search results.
    """

    id: str
    name: str
    contact_email: str
    contact_phone: str
    priority_score: int = 0
    is_active: bool = True
    logo: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)
