"""
Domain enumerations.

Values are the wire/storage representation and must not change once leads
have been persisted with them.
"""

from __future__ import annotations

from enum import Enum


class Technology(str, Enum):
    FIBER = "fiber"
    ADSL = "adsl"
    VDSL = "vdsl"
    WIRELESS = "wireless"
    MOBILE_4_5G = "4.5g"


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    ASSIGNED_TO_ISP = "assigned_to_isp"
    IN_PROGRESS = "in_progress"
    CONVERTED = "converted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LeadSource(str, Enum):
    COMPARISON = "comparison"
    DIRECT = "direct"
    REFERRAL = "referral"
    CAMPAIGN = "campaign"


class UserRole(str, Enum):
    ADMIN = "admin"
    ISP = "isp"
    USER = "user"


class SortBy(str, Enum):
    PRICE = "price"
    SPEED = "speed"
    SPEED_PRICE_RATIO = "speed_price_ratio"
    PRIORITY = "priority"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
