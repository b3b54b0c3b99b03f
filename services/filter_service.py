"""Filter options offered to the tariff search UI."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Tuple

from domain.enums import Technology
from domain.errors import NotFoundError
from domain.reference import City, District
from repositories.interfaces import CityRepository, DistrictRepository


@dataclass(frozen=True, slots=True)
class SpeedRange:
    min_mbps: int
    max_mbps: int
    label: str


@dataclass(frozen=True, slots=True)
class PriceRange:
    min_price: Decimal
    max_price: Decimal
    label: str


SPEED_RANGES: Tuple[SpeedRange, ...] = (
    SpeedRange(0, 25, "Up to 25 Mbps"),
    SpeedRange(25, 50, "25-50 Mbps"),
    SpeedRange(50, 100, "50-100 Mbps"),
    SpeedRange(100, 500, "100+ Mbps"),
)

PRICE_RANGES: Tuple[PriceRange, ...] = (
    PriceRange(Decimal("0"), Decimal("15"), "Up to 15 AZN"),
    PriceRange(Decimal("15"), Decimal("25"), "15-25 AZN"),
    PriceRange(Decimal("25"), Decimal("40"), "25-40 AZN"),
    PriceRange(Decimal("40"), Decimal("100"), "40+ AZN"),
)


@dataclass(frozen=True, slots=True)
class FilterOptions:
    cities: List[City]
    districts: List[District]
    technologies: List[Technology]
    speed_ranges: Tuple[SpeedRange, ...]
    price_ranges: Tuple[PriceRange, ...]


class FilterService:
    def __init__(self, cities: CityRepository, districts: DistrictRepository) -> None:
        self._cities = cities
        self._districts = districts

    def available_filters(self) -> FilterOptions:
        return FilterOptions(
            cities=self._cities.find_active(),
            districts=[d for d in self._districts.find_all() if d.is_active],
            technologies=list(Technology),
            speed_ranges=SPEED_RANGES,
            price_ranges=PRICE_RANGES,
        )

    def districts_for_city(self, city_id: str) -> List[District]:
        if self._cities.find_by_id(city_id) is None:
            raise NotFoundError("City", city_id)
        return [d for d in self._districts.find_by_city_id(city_id) if d.is_active]


__all__ = ["FilterService", "FilterOptions", "SpeedRange", "PriceRange", "SPEED_RANGES", "PRICE_RANGES"]
