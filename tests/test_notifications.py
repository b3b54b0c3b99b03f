"""
Tests for `services/notification_service.py` and the providers.

Covers:
- Phone normalisation and per-status message selection
- Which messages each lead event sends
- Background dispatch never raises to the caller and logs failures
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

import pytest

from domain.enums import LeadSource, LeadStatus, Technology
from domain.lead import Lead, TariffSnapshot
from domain.tariff import CampaignFlags
from services.notification_providers import (
    EmailMessage,
    LoggingEmailProvider,
    LoggingSmsProvider,
    NotificationResult,
    SmsMessage,
    TwilioSmsProvider,
)
from services.notification_service import (
    NotificationDispatcher,
    NotificationService,
    status_update_sms,
    to_e164,
)

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _lead(email=None) -> Lead:
    return Lead(
        id="lead-1",
        status=LeadStatus.NEW,
        source=LeadSource.COMPARISON,
        full_name="Aysel Mammadova",
        phone="0501234567",
        email=email,
        city_id="city-1",
        district_id="district-1",
        tariff_snapshot=TariffSnapshot(
            tariff_id="t-1",
            tariff_name="Fiber Premium 100",
            isp_name="AzerTelecom",
            speed_mbps=100,
            price_monthly=Decimal("25.00"),
            technology=Technology.FIBER,
            campaigns=CampaignFlags(),
        ),
        created_at=NOW,
        updated_at=NOW,
    )


class RecordingSms:
    name = "recording-sms"

    def __init__(self) -> None:
        self.sent: List[SmsMessage] = []

    def send(self, message: SmsMessage) -> NotificationResult:
        self.sent.append(message)
        return NotificationResult(success=True, message_id=str(len(self.sent)))


class RecordingEmail:
    name = "recording-email"

    def __init__(self) -> None:
        self.sent: List[EmailMessage] = []

    def send(self, message: EmailMessage) -> NotificationResult:
        self.sent.append(message)
        return NotificationResult(success=True, message_id=str(len(self.sent)))


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0501234567", "+994501234567"),
        ("+994501234567", "+994501234567"),
        (" 050 123 45 67 ", "+994501234567"),
    ],
)
def test_to_e164(raw: str, expected: str) -> None:
    assert to_e164(raw) == expected


def test_status_messages() -> None:
    lead = _lead()

    assert status_update_sms(lead, LeadStatus.NEW) is None
    assert status_update_sms(lead, LeadStatus.ASSIGNED_TO_ISP) is None
    assert "Fiber Premium 100" in status_update_sms(lead, LeadStatus.QUALIFIED)
    assert "Welcome to AzerTelecom" in status_update_sms(lead, LeadStatus.CONVERTED)
    assert status_update_sms(lead, LeadStatus.CANCELLED).endswith(" - NetTap")


def test_lead_created_sends_sms_customer_email_and_admin_email() -> None:
    sms, email = RecordingSms(), RecordingEmail()
    service = NotificationService(sms, email, admin_email="ops@nettap.az")

    service.notify_lead_created(_lead(email="aysel@example.com"))

    assert [m.to for m in sms.sent] == ["+994501234567"]
    assert [m.to for m in email.sent] == [("aysel@example.com",), ("ops@nettap.az",)]
    assert "Fiber Premium 100" in email.sent[0].body


def test_lead_created_without_email_only_sends_sms() -> None:
    sms, email = RecordingSms(), RecordingEmail()
    service = NotificationService(sms, email)

    service.notify_lead_created(_lead())

    assert len(sms.sent) == 1
    assert email.sent == []


def test_status_update_without_message_sends_nothing() -> None:
    sms, email = RecordingSms(), RecordingEmail()
    service = NotificationService(sms, email)

    service.notify_status_updated(_lead(), LeadStatus.NEW, LeadStatus.ASSIGNED_TO_ISP)
    service.notify_status_updated(_lead(), LeadStatus.NEW, LeadStatus.CONTACTED)

    assert len(sms.sent) == 1


def test_lead_assigned_sms_names_the_isp() -> None:
    sms = RecordingSms()
    service = NotificationService(sms, RecordingEmail())

    service.notify_lead_assigned(_lead(), "Baktelecom")

    assert "assigned to Baktelecom" in sms.sent[0].body


def test_logging_sms_provider_rejects_non_e164() -> None:
    provider = LoggingSmsProvider()

    assert not provider.send(SmsMessage(to="0501234567", body="hi")).success
    assert provider.send(SmsMessage(to="+994501234567", body="hi")).success


def test_logging_email_provider_rejects_bad_address() -> None:
    provider = LoggingEmailProvider()

    assert not provider.send(EmailMessage(to=("not-an-email",), subject="s", body="b")).success
    assert provider.send(EmailMessage(to=("a@example.com",), subject="s", body="b")).success


def test_twilio_provider_uses_injected_client() -> None:
    calls = []

    class Messages:
        def create(self, **kwargs):
            calls.append(kwargs)

            class Sent:
                sid = "SM123"

            return Sent()

    class FakeTwilio:
        messages = Messages()

    provider = TwilioSmsProvider("sid", "token", "+15550001111", client=FakeTwilio())

    result = provider.send(SmsMessage(to="+994501234567", body="hello"))

    assert result.success and result.message_id == "SM123"
    assert calls == [{"body": "hello", "from_": "+15550001111", "to": "+994501234567"}]


def test_raising_sms_provider_does_not_block_emails(caplog) -> None:
    class DownSms(RecordingSms):
        def send(self, message: SmsMessage) -> NotificationResult:
            raise ConnectionError("twilio down")

    email = RecordingEmail()
    service = NotificationService(DownSms(), email, admin_email="ops@nettap.az")

    with caplog.at_level(logging.ERROR, logger="services.notification_service"):
        service.notify_lead_created(_lead(email="aysel@example.com"))

    assert [m.to for m in email.sent] == [("aysel@example.com",), ("ops@nettap.az",)]
    assert any(record.getMessage() == "SMS provider raised" for record in caplog.records)


def test_raising_email_provider_does_not_block_admin_email() -> None:
    class FlakyEmail(RecordingEmail):
        def send(self, message: EmailMessage) -> NotificationResult:
            if message.to == ("aysel@example.com",):
                raise OSError("smtp refused")
            return super().send(message)

    sms, email = RecordingSms(), FlakyEmail()
    service = NotificationService(sms, email, admin_email="ops@nettap.az")

    service.notify_lead_created(_lead(email="aysel@example.com"))

    assert len(sms.sent) == 1
    assert [m.to for m in email.sent] == [("ops@nettap.az",)]


def test_dispatcher_runs_in_background_and_logs_failures(caplog) -> None:
    started = threading.Event()

    class ExplodingService(NotificationService):
        def notify_lead_created(self, lead: Lead) -> None:
            started.set()
            raise RuntimeError("template error")

    dispatcher = NotificationDispatcher(ExplodingService(RecordingSms(), RecordingEmail()), max_workers=1)

    with caplog.at_level(logging.ERROR, logger="services.notification_service"):
        dispatcher.notify_lead_created(_lead())
        dispatcher.shutdown(wait=True)

    assert started.is_set()
    assert any(record.getMessage() == "Notification failed" for record in caplog.records)


def test_dispatcher_after_shutdown_drops_quietly(caplog) -> None:
    dispatcher = NotificationDispatcher(NotificationService(RecordingSms(), RecordingEmail()))
    dispatcher.shutdown(wait=True)

    with caplog.at_level(logging.ERROR, logger="services.notification_service"):
        dispatcher.notify_lead_created(_lead())

    assert any(record.getMessage() == "Notification dropped" for record in caplog.records)
