"""
Repository container.

Built once at process start from Settings and handed to services by
constructor injection. Tests build a fresh in-memory container per test.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.config import Settings
from domain.errors import ConfigurationError
from repositories import seed
from repositories.interfaces import (
    CityRepository,
    DistrictRepository,
    ISPRepository,
    LeadRepository,
    TariffRepository,
    UserRepository,
)
from repositories.memory_repository import (
    InMemoryCityRepository,
    InMemoryDistrictRepository,
    InMemoryISPRepository,
    InMemoryLeadRepository,
    InMemoryTariffRepository,
    InMemoryUserRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepositoryContainer:
    backend: str
    cities: CityRepository
    districts: DistrictRepository
    isps: ISPRepository
    tariffs: TariffRepository
    leads: LeadRepository
    users: UserRepository


def build_memory_repositories(with_seed: bool = True) -> RepositoryContainer:
    """In-memory container, optionally loaded with the demo catalogue."""

    return RepositoryContainer(
        backend="memory",
        cities=InMemoryCityRepository(seed.seed_cities() if with_seed else ()),
        districts=InMemoryDistrictRepository(seed.seed_districts() if with_seed else ()),
        isps=InMemoryISPRepository(seed.seed_isps() if with_seed else ()),
        tariffs=InMemoryTariffRepository(seed.seed_tariffs() if with_seed else ()),
        leads=InMemoryLeadRepository(),
        users=InMemoryUserRepository(seed.seed_users() if with_seed else ()),
    )


def _build_supabase_repositories(settings: Settings) -> RepositoryContainer:
    from repositories.client import create_supabase_client
    from repositories.lead_repository import SupabaseLeadRepository
    from repositories.reference_repository import (
        SupabaseCityRepository,
        SupabaseDistrictRepository,
        SupabaseISPRepository,
    )
    from repositories.tariff_repository import SupabaseTariffRepository
    from repositories.user_repository import SupabaseUserRepository

    client = create_supabase_client(settings.supabase_url, settings.supabase_key)
    return RepositoryContainer(
        backend="supabase",
        cities=SupabaseCityRepository(client),
        districts=SupabaseDistrictRepository(client),
        isps=SupabaseISPRepository(client),
        tariffs=SupabaseTariffRepository(client),
        leads=SupabaseLeadRepository(client),
        users=SupabaseUserRepository(client),
    )


def _build_sheets_repositories(settings: Settings) -> RepositoryContainer:
    from repositories.sheets_client import GoogleSheetsClient
    from repositories.sheets_repository import (
        SheetsCityRepository,
        SheetsDistrictRepository,
        SheetsISPRepository,
        SheetsLeadRepository,
        SheetsTariffRepository,
        SheetsUserRepository,
    )

    client = GoogleSheetsClient.from_credentials(
        settings.google_sheets_id or "",
        credentials_json=settings.google_sheets_credentials,
        credentials_file=settings.google_sheets_credentials_file,
    )
    return RepositoryContainer(
        backend="sheets",
        cities=SheetsCityRepository(client),
        districts=SheetsDistrictRepository(client),
        isps=SheetsISPRepository(client),
        tariffs=SheetsTariffRepository(client),
        leads=SheetsLeadRepository(client),
        users=SheetsUserRepository(client),
    )


def build_repositories(settings: Settings) -> RepositoryContainer:
    """
    Construct the repositories selected by `settings.database_type`.

    Raises:
        ConfigurationError: unknown backend or missing backend credentials.
    """

    backend = settings.database_type
    if backend == "memory":
        container = build_memory_repositories()
    elif backend == "supabase":
        container = _build_supabase_repositories(settings)
    elif backend == "sheets":
        container = _build_sheets_repositories(settings)
    else:
        raise ConfigurationError(f"Unknown DATABASE_TYPE: {backend!r}")

    logger.info("Repositories initialized", extra={"backend": backend})
    return container


__all__ = ["RepositoryContainer", "build_repositories", "build_memory_repositories"]
