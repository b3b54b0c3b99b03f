"""
Pytest configuration.

Adds the project root to the Python path so tests can import domain,
repositories, services, auth, core and api, and provides fresh in-memory
backends per test.
"""

import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from auth.passwords import hash_password  # noqa: E402
from core.config import Settings  # noqa: E402
from domain.enums import LeadSource, UserRole  # noqa: E402
from domain.lead import Lead  # noqa: E402
from domain.user import User  # noqa: E402
from repositories import seed  # noqa: E402
from repositories.container import RepositoryContainer, build_memory_repositories  # noqa: E402
from repositories.memory_repository import InMemoryUserRepository  # noqa: E402
from services.lead_service import CreateLeadRequest, LeadService  # noqa: E402
from services.tariff_service import TariffService  # noqa: E402

TEST_JWT_SECRET = "test-secret-that-is-long-enough-for-hs256-0123456789"

ADMIN_EMAIL = "admin@nettap.az"
ADMIN_PASSWORD = "admin-pass"
AZERTELECOM_EMAIL = "azertelecom@nettap.az"
BAKTELECOM_EMAIL = "baktelecom@nettap.az"
ISP_PASSWORD = "isp-pass"
INACTIVE_EMAIL = "former@nettap.az"

FIBER_PREMIUM_ID = "880e8400-e29b-41d4-a716-446655440001"
FIBER_BASIC_ID = "880e8400-e29b-41d4-a716-446655440002"
VDSL_ID = "880e8400-e29b-41d4-a716-446655440003"
MOBILE_ID = "880e8400-e29b-41d4-a716-446655440004"


class RecordingNotifier:
    """Lead notifier that records every call; optionally fails on each one."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.events: List[Tuple] = []

    def _record(self, *event) -> None:
        self.events.append(event)
        if self.fail:
            raise RuntimeError("notification backend down")

    def notify_lead_created(self, lead: Lead) -> None:
        self._record("created", lead.id)

    def notify_lead_assigned(self, lead: Lead, isp_name: str) -> None:
        self._record("assigned", lead.id, isp_name)

    def notify_status_updated(self, lead, old_status, new_status) -> None:
        self._record("status", lead.id, old_status, new_status)

    def names(self) -> List[str]:
        return [event[0] for event in self.events]


_HASHES: Dict[str, str] = {}


def _fast_hash(password: str) -> str:
    # Low cost factor keeps the suite fast; cached across tests.
    if password not in _HASHES:
        _HASHES[password] = hash_password(password, rounds=4)
    return _HASHES[password]


def make_test_users() -> List[User]:
    admin, azertelecom, baktelecom = seed.seed_users()
    return [
        replace(admin, password_hash=_fast_hash(ADMIN_PASSWORD)),
        replace(azertelecom, password_hash=_fast_hash(ISP_PASSWORD)),
        replace(baktelecom, password_hash=_fast_hash(ISP_PASSWORD)),
        User(
            id="aa0e8400-e29b-41d4-a716-446655440099",
            email=INACTIVE_EMAIL,
            password_hash=_fast_hash(ISP_PASSWORD),
            role=UserRole.ADMIN,
            is_active=False,
        ),
    ]


def make_create_request(**overrides) -> CreateLeadRequest:
    values = dict(
        full_name="Aysel Mammadova",
        phone="0501234567",
        city_id=seed.BAKU_ID,
        district_id=seed.NASIMI_ID,
        tariff_id=FIBER_PREMIUM_ID,
        email="aysel@example.com",
        source=LeadSource.COMPARISON,
    )
    values.update(overrides)
    return CreateLeadRequest(**values)


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=TEST_JWT_SECRET, jwt_refresh_secret=TEST_JWT_SECRET + "-refresh")


@pytest.fixture
def container() -> RepositoryContainer:
    repositories = build_memory_repositories()
    return replace(repositories, users=InMemoryUserRepository(make_test_users()))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def tariff_service(container: RepositoryContainer) -> TariffService:
    return TariffService(container.tariffs, container.isps, container.districts)


@pytest.fixture
def lead_service(
    container: RepositoryContainer,
    tariff_service: TariffService,
    notifier: RecordingNotifier,
) -> LeadService:
    return LeadService(
        leads=container.leads,
        cities=container.cities,
        districts=container.districts,
        isps=container.isps,
        tariff_service=tariff_service,
        notifier=notifier,
    )


@pytest.fixture
def client(settings: Settings, container: RepositoryContainer, notifier: RecordingNotifier):
    from fastapi.testclient import TestClient

    from api.main import create_app

    app = create_app(settings, container=container, notifier=notifier)
    with TestClient(app) as test_client:
        yield test_client
