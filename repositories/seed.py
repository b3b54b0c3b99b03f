"""
Demo catalogue used by the in-memory backend and `scripts/seed_supabase.py`.

Three cities, six districts, three ISPs, four tariffs and three users.
Demo credentials: admin@nettap.az / admin123, azertelecom@nettap.az and
baktelecom@nettap.az / isp123.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from domain.enums import Technology, UserRole
from domain.reference import City, District, ISP
from domain.tariff import CampaignFlags, Tariff
from domain.user import User


SEED_TIMESTAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)

BAKU_ID = "550e8400-e29b-41d4-a716-446655440001"
GANJA_ID = "550e8400-e29b-41d4-a716-446655440002"
SUMGAYIT_ID = "550e8400-e29b-41d4-a716-446655440003"

NASIMI_ID = "660e8400-e29b-41d4-a716-446655440001"
YASAMAL_ID = "660e8400-e29b-41d4-a716-446655440002"
NARIMANOV_ID = "660e8400-e29b-41d4-a716-446655440003"
SABUNCHU_ID = "660e8400-e29b-41d4-a716-446655440004"
KAPAZ_ID = "660e8400-e29b-41d4-a716-446655440005"
NIZAMI_ID = "660e8400-e29b-41d4-a716-446655440006"

AZERTELECOM_ID = "770e8400-e29b-41d4-a716-446655440001"
BAKTELECOM_ID = "770e8400-e29b-41d4-a716-446655440002"
NAXTEL_ID = "770e8400-e29b-41d4-a716-446655440003"

_ADMIN_HASH = "$2b$10$FbBkU39xQPK3KPac1jRYbOXRcrAfD5HetLtqkHur.xW4VAz8VeTly"
_ISP_HASH = "$2b$10$CJ1rDWnT7BYpIE24Hfe5iO2pI8tv7gNDQEtQS13w8/zjzxFb/4k1q"


def seed_cities() -> List[City]:
    return [
        City(id=BAKU_ID, name="Bakı", name_az="Bakı", name_en="Baku"),
        City(id=GANJA_ID, name="Gəncə", name_az="Gəncə", name_en="Ganja"),
        City(id=SUMGAYIT_ID, name="Sumqayıt", name_az="Sumqayıt", name_en="Sumgayit"),
    ]


def seed_districts() -> List[District]:
    return [
        District(id=NASIMI_ID, city_id=BAKU_ID, name="Nəsimi", name_az="Nəsimi", name_en="Nasimi"),
        District(id=YASAMAL_ID, city_id=BAKU_ID, name="Yasamal", name_az="Yasamal", name_en="Yasamal"),
        District(
            id=NARIMANOV_ID, city_id=BAKU_ID, name="Nərimanov", name_az="Nərimanov", name_en="Narimanov"
        ),
        District(id=SABUNCHU_ID, city_id=BAKU_ID, name="Sabunçu", name_az="Sabunçu", name_en="Sabunchu"),
        District(id=KAPAZ_ID, city_id=GANJA_ID, name="Kəpəz", name_az="Kəpəz", name_en="Kapaz"),
        District(id=NIZAMI_ID, city_id=GANJA_ID, name="Nizami", name_az="Nizami", name_en="Nizami"),
    ]


def seed_isps() -> List[ISP]:
    return [
        ISP(
            id=AZERTELECOM_ID,
            name="AzerTelecom",
            logo="/logos/azertelecom.png",
            description="Leading fiber internet provider",
            contact_email="sales@azertelecom.az",
            contact_phone="+994124901000",
            website="https://azertelecom.az",
            priority_score=95,
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
        ISP(
            id=BAKTELECOM_ID,
            name="Baktelecom",
            logo="/logos/baktelecom.png",
            description="Reliable ADSL and VDSL services",
            contact_email="info@baktelecom.az",
            contact_phone="+994125980000",
            website="https://baktelecom.az",
            priority_score=90,
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
        ISP(
            id=NAXTEL_ID,
            name="Naxtel",
            logo="/logos/naxtel.png",
            description="4.5G wireless internet solutions",
            contact_email="support@naxtel.az",
            contact_phone="+994124040000",
            website="https://naxtel.az",
            priority_score=85,
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
    ]


def seed_tariffs() -> List[Tariff]:
    return [
        Tariff(
            id="880e8400-e29b-41d4-a716-446655440001",
            isp_id=AZERTELECOM_ID,
            name="Fiber Premium 100",
            description="100 Mbps fiber internet with unlimited data",
            technology=Technology.FIBER,
            speed_mbps=100,
            upload_speed_mbps=50,
            price_monthly=Decimal("25.00"),
            contract_length_months=12,
            campaigns=CampaignFlags(
                free_modem=True,
                free_installation=True,
                discount_percentage=20,
                limited_time=True,
            ),
            available_district_ids=(NASIMI_ID, YASAMAL_ID, NARIMANOV_ID),
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
        Tariff(
            id="880e8400-e29b-41d4-a716-446655440002",
            isp_id=AZERTELECOM_ID,
            name="Fiber Basic 50",
            description="50 Mbps fiber internet",
            technology=Technology.FIBER,
            speed_mbps=50,
            upload_speed_mbps=25,
            price_monthly=Decimal("15.00"),
            contract_length_months=6,
            campaigns=CampaignFlags(free_installation=True),
            available_district_ids=(NASIMI_ID, YASAMAL_ID, NARIMANOV_ID, SABUNCHU_ID),
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
        Tariff(
            id="880e8400-e29b-41d4-a716-446655440003",
            isp_id=BAKTELECOM_ID,
            name="VDSL 30",
            description="30 Mbps VDSL connection",
            technology=Technology.VDSL,
            speed_mbps=30,
            upload_speed_mbps=10,
            price_monthly=Decimal("12.00"),
            contract_length_months=12,
            campaigns=CampaignFlags(free_modem=True),
            available_district_ids=(NASIMI_ID, SABUNCHU_ID),
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
        Tariff(
            id="880e8400-e29b-41d4-a716-446655440004",
            isp_id=NAXTEL_ID,
            name="4.5G Unlimited",
            description="High-speed 4.5G internet",
            technology=Technology.MOBILE_4_5G,
            speed_mbps=40,
            upload_speed_mbps=15,
            price_monthly=Decimal("20.00"),
            contract_length_months=0,
            campaigns=CampaignFlags(free_modem=True, free_installation=True, no_contract=True),
            available_district_ids=(
                NASIMI_ID,
                YASAMAL_ID,
                NARIMANOV_ID,
                SABUNCHU_ID,
                KAPAZ_ID,
                NIZAMI_ID,
            ),
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
    ]


def seed_users() -> List[User]:
    return [
        User(
            id="aa0e8400-e29b-41d4-a716-446655440001",
            email="admin@nettap.az",
            password_hash=_ADMIN_HASH,
            role=UserRole.ADMIN,
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
        User(
            id="aa0e8400-e29b-41d4-a716-446655440002",
            email="azertelecom@nettap.az",
            password_hash=_ISP_HASH,
            role=UserRole.ISP,
            isp_id=AZERTELECOM_ID,
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
        User(
            id="aa0e8400-e29b-41d4-a716-446655440003",
            email="baktelecom@nettap.az",
            password_hash=_ISP_HASH,
            role=UserRole.ISP,
            isp_id=BAKTELECOM_ID,
            created_at=SEED_TIMESTAMP,
            updated_at=SEED_TIMESTAMP,
        ),
    ]
