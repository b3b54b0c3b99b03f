"""
Runtime settings.

Values come from the process environment after python-dotenv has loaded
`.env` from the project root. `load_settings()` fails fast on values that
can't be parsed; everything else that is merely incomplete (missing backend
credentials, placeholder secrets) is reported by `Settings.validation_errors()`
so the health endpoint and `scripts/validate_env.py` can describe it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from dotenv import load_dotenv

from domain.errors import ConfigurationError

_ENV_PATH = Path(__file__).parent.parent / ".env"

DEFAULT_JWT_SECRET = "change_me_jwt_secret"

DATABASE_TYPES = ("memory", "supabase", "sheets")
SMS_PROVIDERS = ("log", "twilio")
EMAIL_PROVIDERS = ("log", "smtp")
LOG_FORMATS = ("json", "text")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _as_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc


def _as_optional(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = environ.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _as_list(value: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    log_level: str = "INFO"
    log_format: str = "text"

    database_type: str = "memory"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    google_sheets_id: Optional[str] = None
    google_sheets_credentials: Optional[str] = None
    google_sheets_credentials_file: Optional[str] = None

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_refresh_secret: Optional[str] = None
    jwt_access_ttl_minutes: int = 15
    jwt_refresh_ttl_days: int = 7

    sms_provider: str = "log"
    email_provider: str = "log"
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_from: Optional[str] = None
    admin_notification_email: Optional[str] = None
    notification_workers: int = 4

    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def refresh_secret(self) -> str:
        return self.jwt_refresh_secret or self.jwt_secret

    def validation_errors(self) -> List[str]:
        """Human-readable configuration problems; empty when the settings are usable."""

        errors: List[str] = []

        if self.log_level not in LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        if self.log_format not in LOG_FORMATS:
            errors.append(f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}")

        if self.database_type not in DATABASE_TYPES:
            errors.append(f"DATABASE_TYPE must be one of {', '.join(DATABASE_TYPES)}")
        elif self.database_type == "supabase":
            if not self.supabase_url:
                errors.append("SUPABASE_URL is required when DATABASE_TYPE=supabase")
            if not self.supabase_key:
                errors.append("SUPABASE_KEY is required when DATABASE_TYPE=supabase")
        elif self.database_type == "sheets":
            if not self.google_sheets_id:
                errors.append("GOOGLE_SHEETS_ID is required when DATABASE_TYPE=sheets")
            if not (self.google_sheets_credentials or self.google_sheets_credentials_file):
                errors.append(
                    "GOOGLE_SHEETS_CREDENTIALS or GOOGLE_SHEETS_CREDENTIALS_FILE is required "
                    "when DATABASE_TYPE=sheets"
                )

        if not self.jwt_secret:
            errors.append("JWT_SECRET is required")
        elif self.is_production and self.jwt_secret == DEFAULT_JWT_SECRET:
            errors.append("JWT_SECRET must be changed from its default in production")
        elif self.is_production and len(self.jwt_secret) < 32:
            errors.append("JWT_SECRET should be at least 32 characters in production")
        if self.jwt_access_ttl_minutes < 1:
            errors.append("JWT_ACCESS_TTL_MINUTES must be >= 1")
        if self.jwt_refresh_ttl_days < 1:
            errors.append("JWT_REFRESH_TTL_DAYS must be >= 1")

        if self.sms_provider not in SMS_PROVIDERS:
            errors.append(f"SMS_PROVIDER must be one of {', '.join(SMS_PROVIDERS)}")
        elif self.sms_provider == "twilio" and not (
            self.twilio_account_sid and self.twilio_auth_token and self.twilio_phone_number
        ):
            errors.append(
                "TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER are required "
                "when SMS_PROVIDER=twilio"
            )

        if self.email_provider not in EMAIL_PROVIDERS:
            errors.append(f"EMAIL_PROVIDER must be one of {', '.join(EMAIL_PROVIDERS)}")
        elif self.email_provider == "smtp" and not (self.smtp_host and self.smtp_from):
            errors.append("SMTP_HOST and SMTP_FROM are required when EMAIL_PROVIDER=smtp")

        if self.notification_workers < 1:
            errors.append("NOTIFICATION_WORKERS must be >= 1")

        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors()


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from `environ` (defaults to os.environ after loading `.env`).

    Raises:
        ConfigurationError: a numeric value can't be parsed.
    """

    if environ is None:
        load_dotenv(dotenv_path=_ENV_PATH)
        environ = os.environ

    return Settings(
        env=(environ.get("ENV") or "development").strip().lower(),
        log_level=(environ.get("LOG_LEVEL") or "INFO").strip().upper(),
        log_format=(environ.get("LOG_FORMAT") or "text").strip().lower(),
        database_type=(environ.get("DATABASE_TYPE") or "memory").strip().lower(),
        supabase_url=_as_optional(environ, "SUPABASE_URL"),
        supabase_key=_as_optional(environ, "SUPABASE_KEY"),
        google_sheets_id=_as_optional(environ, "GOOGLE_SHEETS_ID"),
        google_sheets_credentials=_as_optional(environ, "GOOGLE_SHEETS_CREDENTIALS"),
        google_sheets_credentials_file=_as_optional(environ, "GOOGLE_SHEETS_CREDENTIALS_FILE"),
        jwt_secret=_as_optional(environ, "JWT_SECRET") or DEFAULT_JWT_SECRET,
        jwt_refresh_secret=_as_optional(environ, "JWT_REFRESH_SECRET"),
        jwt_access_ttl_minutes=_as_int(environ, "JWT_ACCESS_TTL_MINUTES", 15),
        jwt_refresh_ttl_days=_as_int(environ, "JWT_REFRESH_TTL_DAYS", 7),
        sms_provider=(environ.get("SMS_PROVIDER") or "log").strip().lower(),
        email_provider=(environ.get("EMAIL_PROVIDER") or "log").strip().lower(),
        twilio_account_sid=_as_optional(environ, "TWILIO_ACCOUNT_SID"),
        twilio_auth_token=_as_optional(environ, "TWILIO_AUTH_TOKEN"),
        twilio_phone_number=_as_optional(environ, "TWILIO_PHONE_NUMBER"),
        smtp_host=_as_optional(environ, "SMTP_HOST"),
        smtp_port=_as_int(environ, "SMTP_PORT", 587),
        smtp_user=_as_optional(environ, "SMTP_USER"),
        smtp_pass=_as_optional(environ, "SMTP_PASS"),
        smtp_from=_as_optional(environ, "SMTP_FROM"),
        admin_notification_email=_as_optional(environ, "ADMIN_NOTIFICATION_EMAIL"),
        notification_workers=_as_int(environ, "NOTIFICATION_WORKERS", 4),
        cors_origins=_as_list(environ.get("CORS_ORIGINS"), ("*",)),
    )


__all__ = ["Settings", "load_settings", "DEFAULT_JWT_SECRET", "DATABASE_TYPES"]
