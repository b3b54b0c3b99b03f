"""
Lead notifications.

NotificationService composes and sends the customer/admin messages for lead
events. NotificationDispatcher runs those sends on a background thread pool:
every `notify_*` call returns immediately and a failure is logged, never
raised to the caller.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from core.config import Settings
from domain.enums import LeadStatus
from domain.lead import Lead
from services.notification_providers import (
    EmailMessage,
    EmailProvider,
    LoggingEmailProvider,
    LoggingSmsProvider,
    SmsMessage,
    SmsProvider,
    SmtpEmailProvider,
    TwilioSmsProvider,
)

logger = logging.getLogger(__name__)

SIGNATURE = " - NetTap"


def to_e164(phone: str) -> str:
    """Local Azerbaijani numbers (0XXXXXXXXX) become +994XXXXXXXXX."""

    phone = phone.strip().replace(" ", "")
    if phone.startswith("0"):
        return "+994" + phone[1:]
    return phone


def lead_created_sms(lead: Lead) -> str:
    snapshot = lead.tariff_snapshot
    return (
        f"Thank you for your interest! We received your request for {snapshot.tariff_name} "
        f"({snapshot.isp_name}). We'll contact you soon.{SIGNATURE}"
    )


def lead_created_email(lead: Lead) -> EmailMessage:
    snapshot = lead.tariff_snapshot
    body = (
        f"Dear {lead.full_name},\n\n"
        "Thank you for using NetTap!\n\n"
        "We have received your request for:\n"
        f"- Tariff: {snapshot.tariff_name}\n"
        f"- Provider: {snapshot.isp_name}\n"
        f"- Speed: {snapshot.speed_mbps} Mbps\n"
        f"- Price: {snapshot.price_monthly} AZN/month\n\n"
        "Our team will contact you shortly to finalize the details.\n\n"
        "Best regards,\nNetTap Team"
    )
    return EmailMessage(
        to=(lead.email or "",),
        subject="Your Internet Tariff Request - NetTap",
        body=body,
    )


def admin_lead_created_email(lead: Lead, admin_email: str) -> EmailMessage:
    snapshot = lead.tariff_snapshot
    body = (
        "A new lead was submitted.\n\n"
        f"- Lead: {lead.id}\n"
        f"- Customer: {lead.full_name} ({lead.phone})\n"
        f"- Tariff: {snapshot.tariff_name} ({snapshot.isp_name})\n"
        f"- Source: {lead.source.value}\n"
    )
    return EmailMessage(to=(admin_email,), subject=f"New lead: {snapshot.tariff_name}", body=body)


def lead_assigned_sms(isp_name: str) -> str:
    return f"Your internet request has been assigned to {isp_name}. They will contact you soon.{SIGNATURE}"


def status_update_sms(lead: Lead, status: LeadStatus) -> Optional[str]:
    """Customer SMS for entering `status`; None for statuses that send nothing."""

    snapshot = lead.tariff_snapshot
    messages = {
        LeadStatus.CONTACTED: "We have contacted you regarding your internet request.",
        LeadStatus.QUALIFIED: (
            f"Good news! You qualify for {snapshot.tariff_name}. We'll proceed with installation."
        ),
        LeadStatus.IN_PROGRESS: (
            "Your internet installation is in progress. You'll be connected soon!"
        ),
        LeadStatus.CONVERTED: (
            f"Congratulations! Your internet service is now active. Welcome to {snapshot.isp_name}!"
        ),
        LeadStatus.REJECTED: (
            "Unfortunately, we couldn't process your request at this time. "
            "Please contact us for alternatives."
        ),
        LeadStatus.CANCELLED: (
            "Your internet request has been cancelled. Feel free to submit a new request anytime."
        ),
    }
    text = messages.get(status)
    return text + SIGNATURE if text else None


class NotificationService:
    """Synchronous composition and delivery of lead notifications."""

    def __init__(
        self,
        sms: SmsProvider,
        email: EmailProvider,
        admin_email: Optional[str] = None,
    ) -> None:
        self._sms = sms
        self._email = email
        self._admin_email = admin_email
        logger.info(
            "Notification service initialized",
            extra={"smsProvider": sms.name, "emailProvider": email.name},
        )

    # Each channel fails independently.
    def _send_sms(self, to: str, body: str) -> bool:
        try:
            result = self._sms.send(SmsMessage(to=to_e164(to), body=body))
        except Exception:
            logger.error("SMS provider raised", extra={"to": to}, exc_info=True)
            return False
        if not result.success:
            logger.warning("SMS notification failed", extra={"error": result.error, "to": to})
        return result.success

    def _send_email(self, message: EmailMessage) -> bool:
        try:
            result = self._email.send(message)
        except Exception:
            logger.error("Email provider raised", extra={"to": list(message.to)}, exc_info=True)
            return False
        if not result.success:
            logger.warning(
                "Email notification failed", extra={"error": result.error, "to": list(message.to)}
            )
        return result.success

    def notify_lead_created(self, lead: Lead) -> None:
        self._send_sms(lead.phone, lead_created_sms(lead))
        if lead.email:
            self._send_email(lead_created_email(lead))
        if self._admin_email:
            self._send_email(admin_lead_created_email(lead, self._admin_email))

    def notify_lead_assigned(self, lead: Lead, isp_name: str) -> None:
        self._send_sms(lead.phone, lead_assigned_sms(isp_name))
        logger.info(
            "ISP notification: new lead assigned",
            extra={"leadId": lead.id, "ispName": isp_name, "customerPhone": lead.phone},
        )

    def notify_status_updated(self, lead: Lead, old_status: LeadStatus, new_status: LeadStatus) -> None:
        text = status_update_sms(lead, new_status)
        if text is None:
            return
        self._send_sms(lead.phone, text)


class NotificationDispatcher:
    """
    Best-effort background dispatch.

    Each call is submitted to a ThreadPoolExecutor and returns at once; the
    outcome is only observed by a done-callback that logs failures.
    """

    def __init__(self, service: NotificationService, max_workers: int = 4) -> None:
        self._service = service
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notifications"
        )

    def _submit(self, event: str, lead_id: str, fn: Callable[..., None], *args: object) -> None:
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError:
            # Executor already shut down (application stopping).
            logger.error("Notification dropped", extra={"event": event, "leadId": lead_id}, exc_info=True)
            return

        def _log_outcome(done: Future) -> None:
            error = done.exception()
            if error is not None:
                logger.error(
                    "Notification failed",
                    extra={"event": event, "leadId": lead_id},
                    exc_info=(type(error), error, error.__traceback__),
                )

        future.add_done_callback(_log_outcome)

    def notify_lead_created(self, lead: Lead) -> None:
        self._submit("lead_created", lead.id, self._service.notify_lead_created, lead)

    def notify_lead_assigned(self, lead: Lead, isp_name: str) -> None:
        self._submit("lead_assigned", lead.id, self._service.notify_lead_assigned, lead, isp_name)

    def notify_status_updated(self, lead: Lead, old_status: LeadStatus, new_status: LeadStatus) -> None:
        self._submit(
            "status_updated",
            lead.id,
            self._service.notify_status_updated,
            lead,
            old_status,
            new_status,
        )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def build_notification_service(settings: Settings) -> NotificationService:
    if settings.sms_provider == "twilio":
        sms: SmsProvider = TwilioSmsProvider(
            settings.twilio_account_sid or "",
            settings.twilio_auth_token or "",
            settings.twilio_phone_number or "",
        )
    else:
        sms = LoggingSmsProvider()

    if settings.email_provider == "smtp":
        email: EmailProvider = SmtpEmailProvider(
            host=settings.smtp_host or "",
            port=settings.smtp_port,
            sender=settings.smtp_from or "",
            username=settings.smtp_user,
            password=settings.smtp_pass,
        )
    else:
        email = LoggingEmailProvider()

    return NotificationService(sms, email, admin_email=settings.admin_notification_email)


def build_notification_dispatcher(settings: Settings) -> NotificationDispatcher:
    return NotificationDispatcher(
        build_notification_service(settings),
        max_workers=settings.notification_workers,
    )


__all__ = [
    "NotificationService",
    "NotificationDispatcher",
    "build_notification_service",
    "build_notification_dispatcher",
    "status_update_sms",
    "to_e164",
]
