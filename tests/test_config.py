"""
Tests for `core/config.py` and `core/logging_config.py`.
"""

from __future__ import annotations

import json
import logging

import pytest

from core.config import DEFAULT_JWT_SECRET, Settings, load_settings
from core.logging_config import JsonFormatter
from domain.errors import ConfigurationError


def test_defaults_from_empty_environment() -> None:
    settings = load_settings({})

    assert settings.env == "development"
    assert settings.database_type == "memory"
    assert settings.jwt_secret == DEFAULT_JWT_SECRET
    assert settings.jwt_access_ttl_minutes == 15
    assert settings.jwt_refresh_ttl_days == 7
    assert settings.smtp_port == 587
    assert settings.notification_workers == 4
    assert settings.cors_origins == ("*",)
    assert settings.is_valid


def test_values_are_normalised() -> None:
    settings = load_settings(
        {
            "ENV": " Production ",
            "LOG_LEVEL": "debug",
            "DATABASE_TYPE": "SUPABASE",
            "SUPABASE_URL": "https://x.supabase.co",
            "SUPABASE_KEY": "  ",
            "CORS_ORIGINS": "https://nettap.az, https://admin.nettap.az,",
            "JWT_ACCESS_TTL_MINUTES": " 30 ",
        }
    )

    assert settings.env == "production"
    assert settings.is_production
    assert settings.log_level == "DEBUG"
    assert settings.database_type == "supabase"
    assert settings.supabase_key is None
    assert settings.cors_origins == ("https://nettap.az", "https://admin.nettap.az")
    assert settings.jwt_access_ttl_minutes == 30


def test_malformed_integer_fails_at_load() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings({"SMTP_PORT": "not-a-port"})

    assert "SMTP_PORT" in str(exc_info.value)


def test_refresh_secret_falls_back_to_access_secret() -> None:
    assert Settings(jwt_secret="abc").refresh_secret == "abc"
    assert Settings(jwt_secret="abc", jwt_refresh_secret="def").refresh_secret == "def"


@pytest.mark.parametrize(
    "settings, fragment",
    [
        (Settings(database_type="supabase"), "SUPABASE_URL is required"),
        (Settings(database_type="sheets"), "GOOGLE_SHEETS_ID is required"),
        (Settings(database_type="mysql"), "DATABASE_TYPE must be one of"),
        (Settings(env="production"), "JWT_SECRET must be changed"),
        (Settings(env="production", jwt_secret="short"), "at least 32 characters"),
        (Settings(sms_provider="twilio"), "TWILIO_ACCOUNT_SID"),
        (Settings(email_provider="smtp"), "SMTP_HOST and SMTP_FROM"),
        (Settings(log_format="xml"), "LOG_FORMAT"),
        (Settings(notification_workers=0), "NOTIFICATION_WORKERS"),
    ],
)
def test_validation_errors(settings: Settings, fragment: str) -> None:
    errors = settings.validation_errors()

    assert any(fragment in error for error in errors), errors
    assert not settings.is_valid


def test_json_formatter_includes_extra_fields() -> None:
    logger = logging.getLogger("tests.json")
    record = logger.makeRecord(
        "tests.json", logging.WARNING, __file__, 1, "Login failed", (), None,
        extra={"email": "a@b.az"},
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "tests.json"
    assert payload["message"] == "Login failed"
    assert payload["email"] == "a@b.az"
    assert "timestamp" in payload
