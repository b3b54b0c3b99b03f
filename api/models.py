"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses. The
wire format is camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from domain.enums import LeadSource, LeadStatus, Technology, UserRole
from domain.lead import Lead, TariffSnapshot
from domain.reference import City, District, ISP
from domain.tariff import CampaignFlags
from domain.user import User
from auth.tokens import TokenPair
from services.filter_service import FilterOptions
from services.tariff_service import EnrichedTariff

T = TypeVar("T")

PHONE_PATTERN = r"^(\+994|0)(50|51|55|70|77|99)\d{7}$"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ============================================================================
# Envelope
# ============================================================================

class PageMeta(CamelModel):
    page: Optional[int] = None
    limit: Optional[int] = None
    total: int


class ApiResponse(CamelModel, Generic[T]):
    """Uniform success envelope."""
    success: bool = True
    data: T
    meta: Optional[PageMeta] = None


class ErrorBody(CamelModel):
    message: str
    code: str
    status_code: int
    details: Optional[Any] = None


class ErrorResponse(CamelModel):
    """Uniform failure envelope."""
    success: bool = False
    error: ErrorBody

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": {
                    "message": "Lead with identifier 'abc' not found",
                    "code": "NOT_FOUND",
                    "statusCode": 404,
                },
            }
        }
    )


# ============================================================================
# Reference data
# ============================================================================

class CityResponse(CamelModel):
    id: str
    name: str
    name_az: str
    name_en: str
    is_active: bool

    @classmethod
    def from_domain(cls, city: City) -> "CityResponse":
        return cls(
            id=city.id,
            name=city.name,
            name_az=city.name_az,
            name_en=city.name_en,
            is_active=city.is_active,
        )


class DistrictResponse(CamelModel):
    id: str
    city_id: str
    name: str
    name_az: str
    name_en: str
    is_active: bool

    @classmethod
    def from_domain(cls, district: District) -> "DistrictResponse":
        return cls(
            id=district.id,
            city_id=district.city_id,
            name=district.name,
            name_az=district.name_az,
            name_en=district.name_en,
            is_active=district.is_active,
        )


class IspResponse(CamelModel):
    id: str
    name: str
    logo: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    contact_email: str
    contact_phone: str
    priority_score: int

    @classmethod
    def from_domain(cls, isp: ISP) -> "IspResponse":
        return cls(
            id=isp.id,
            name=isp.name,
            logo=isp.logo,
            description=isp.description,
            website=isp.website,
            contact_email=isp.contact_email,
            contact_phone=isp.contact_phone,
            priority_score=isp.priority_score,
        )


# ============================================================================
# Tariffs
# ============================================================================

class CampaignFlagsModel(CamelModel):
    free_modem: bool = False
    free_installation: bool = False
    discount_percentage: Optional[float] = None
    gift_included: Optional[str] = None
    limited_time: bool = False
    no_contract: bool = False

    @classmethod
    def from_domain(cls, campaigns: CampaignFlags) -> "CampaignFlagsModel":
        return cls(
            free_modem=campaigns.free_modem,
            free_installation=campaigns.free_installation,
            discount_percentage=campaigns.discount_percentage,
            gift_included=campaigns.gift_included,
            limited_time=campaigns.limited_time,
            no_contract=campaigns.no_contract,
        )


class TariffResponse(CamelModel):
    """A tariff with its ISP and the ranking metrics."""
    id: str
    isp_id: str
    name: str
    description: Optional[str] = None
    technology: Technology
    speed_mbps: int
    upload_speed_mbps: Optional[int] = None
    price_monthly: Decimal
    contract_length_months: int
    data_limit_gb: Optional[int] = None
    campaigns: CampaignFlagsModel
    available_district_ids: List[str]
    is_active: bool
    isp: IspResponse
    speed_price_ratio: float
    campaign_score: float

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "880e8400-e29b-41d4-a716-446655440001",
                "ispId": "770e8400-e29b-41d4-a716-446655440001",
                "name": "Fiber Premium 100",
                "technology": "fiber",
                "speedMbps": 100,
                "priceMonthly": "25.00",
                "contractLengthMonths": 12,
                "campaigns": {"freeModem": True, "freeInstallation": True},
                "availableDistrictIds": ["660e8400-e29b-41d4-a716-446655440001"],
                "isActive": True,
                "speedPriceRatio": 4.0,
                "campaignScore": 20.0,
            }
        }
    )

    @classmethod
    def from_domain(cls, enriched: EnrichedTariff) -> "TariffResponse":
        tariff = enriched.tariff
        return cls(
            id=tariff.id,
            isp_id=tariff.isp_id,
            name=tariff.name,
            description=tariff.description,
            technology=tariff.technology,
            speed_mbps=tariff.speed_mbps,
            upload_speed_mbps=tariff.upload_speed_mbps,
            price_monthly=tariff.price_monthly,
            contract_length_months=tariff.contract_length_months,
            data_limit_gb=tariff.data_limit_gb,
            campaigns=CampaignFlagsModel.from_domain(tariff.campaigns),
            available_district_ids=list(tariff.available_district_ids),
            is_active=tariff.is_active,
            isp=IspResponse.from_domain(enriched.isp),
            speed_price_ratio=enriched.speed_price_ratio,
            campaign_score=enriched.campaign_score,
        )


class TariffListData(CamelModel):
    tariffs: List[TariffResponse]
    total: int


class TariffData(CamelModel):
    tariff: TariffResponse


# ============================================================================
# Leads
# ============================================================================

class TariffSnapshotModel(CamelModel):
    tariff_id: str
    tariff_name: str
    isp_name: str
    speed_mbps: int
    price_monthly: Decimal
    technology: Technology
    campaigns: CampaignFlagsModel

    @classmethod
    def from_domain(cls, snapshot: TariffSnapshot) -> "TariffSnapshotModel":
        return cls(
            tariff_id=snapshot.tariff_id,
            tariff_name=snapshot.tariff_name,
            isp_name=snapshot.isp_name,
            speed_mbps=snapshot.speed_mbps,
            price_monthly=snapshot.price_monthly,
            technology=snapshot.technology,
            campaigns=CampaignFlagsModel.from_domain(snapshot.campaigns),
        )


class LeadResponse(CamelModel):
    id: str
    status: LeadStatus
    source: LeadSource
    full_name: str
    phone: str
    email: Optional[str] = None
    city_id: str
    district_id: str
    address: Optional[str] = None
    tariff_snapshot: TariffSnapshotModel
    assigned_isp_id: Optional[str] = None
    assigned_at: Optional[datetime] = None
    notes: Optional[str] = None
    outcome_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    converted_at: Optional[datetime] = None
    version: int

    @classmethod
    def from_domain(cls, lead: Lead) -> "LeadResponse":
        return cls(
            id=lead.id,
            status=lead.status,
            source=lead.source,
            full_name=lead.full_name,
            phone=lead.phone,
            email=lead.email,
            city_id=lead.city_id,
            district_id=lead.district_id,
            address=lead.address,
            tariff_snapshot=TariffSnapshotModel.from_domain(lead.tariff_snapshot),
            assigned_isp_id=lead.assigned_isp_id,
            assigned_at=lead.assigned_at,
            notes=lead.notes,
            outcome_notes=lead.outcome_notes,
            created_at=lead.created_at,
            updated_at=lead.updated_at,
            converted_at=lead.converted_at,
            version=lead.version,
        )


class LeadData(CamelModel):
    lead: LeadResponse


class LeadListData(CamelModel):
    leads: List[LeadResponse]


class CreateLeadRequestModel(CamelModel):
    """Customer lead submission."""
    full_name: str = Field(..., min_length=2, max_length=100)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    email: Optional[EmailStr] = None
    city_id: str = Field(..., min_length=1)
    district_id: str = Field(..., min_length=1)
    address: Optional[str] = Field(None, max_length=500)
    tariff_id: str = Field(..., min_length=1)
    source: LeadSource = LeadSource.COMPARISON

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "fullName": "Aysel Mammadova",
                "phone": "+994501234567",
                "email": "aysel@example.com",
                "cityId": "550e8400-e29b-41d4-a716-446655440001",
                "districtId": "660e8400-e29b-41d4-a716-446655440001",
                "tariffId": "880e8400-e29b-41d4-a716-446655440001",
            }
        }
    )


class UpdateLeadStatusRequest(CamelModel):
    status: LeadStatus
    notes: Optional[str] = Field(None, max_length=1000)
    outcome_notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(
        json_schema_extra={"example": {"status": "contacted", "notes": "Called, interested"}}
    )


class AssignIspRequest(CamelModel):
    lead_id: str = Field(..., min_length=1)
    isp_id: str = Field(..., min_length=1)


# ============================================================================
# Auth
# ============================================================================

class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "admin@nettap.az", "password": "admin123"}}
    )


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """A user without the password hash."""
    id: str
    email: str
    role: UserRole
    isp_id: Optional[str] = None
    is_active: bool

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            isp_id=user.isp_id,
            is_active=user.is_active,
        )


class TokensResponse(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"

    @classmethod
    def from_domain(cls, tokens: TokenPair) -> "TokensResponse":
        return cls(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
        )


class LoginData(CamelModel):
    user: UserResponse
    tokens: TokensResponse


class TokensData(CamelModel):
    tokens: TokensResponse


# ============================================================================
# Filters
# ============================================================================

class RangeModel(CamelModel):
    min: Decimal
    max: Decimal
    label: str


class FilterOptionsData(CamelModel):
    cities: List[CityResponse]
    districts: List[DistrictResponse]
    technologies: List[Technology]
    speed_ranges: List[RangeModel]
    price_ranges: List[RangeModel]

    @classmethod
    def from_domain(cls, options: FilterOptions) -> "FilterOptionsData":
        return cls(
            cities=[CityResponse.from_domain(c) for c in options.cities],
            districts=[DistrictResponse.from_domain(d) for d in options.districts],
            technologies=list(options.technologies),
            speed_ranges=[
                RangeModel(min=Decimal(r.min_mbps), max=Decimal(r.max_mbps), label=r.label)
                for r in options.speed_ranges
            ],
            price_ranges=[
                RangeModel(min=r.min_price, max=r.max_price, label=r.label)
                for r in options.price_ranges
            ],
        )


class DistrictListData(CamelModel):
    districts: List[DistrictResponse]


# ============================================================================
# Health
# ============================================================================

class DatabaseHealth(CamelModel):
    type: str
    status: str


class ConfigHealth(CamelModel):
    valid: bool
    errors: List[str]


class HealthData(CamelModel):
    status: str
    timestamp: datetime
    version: str
    environment: str
    database: DatabaseHealth
    config: ConfigHealth
