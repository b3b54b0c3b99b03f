"""
SMS and email providers.

A provider turns one message into one delivery attempt and reports the
outcome as a NotificationResult. Invalid input is a failed result, not an
exception; transport errors from the SDKs propagate to the dispatcher, which
logs them.
"""

from __future__ import annotations

import logging
import re
import smtplib
import uuid
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Optional, Protocol, Tuple

from twilio.rest import Client as TwilioClient

logger = logging.getLogger(__name__)

E164_PATTERN = re.compile(r"^\+\d{10,15}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_SMS_SENDER = "NetTap"
DEFAULT_EMAIL_SENDER = "noreply@nettap.az"


@dataclass(frozen=True, slots=True)
class SmsMessage:
    to: str  # E.164, e.g. +994501234567
    body: str
    sender: Optional[str] = None


@dataclass(frozen=True, slots=True)
class EmailMessage:
    to: Tuple[str, ...]
    subject: str
    body: str
    sender: Optional[str] = None


@dataclass(frozen=True, slots=True)
class NotificationResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class SmsProvider(Protocol):
    name: str

    def send(self, message: SmsMessage) -> NotificationResult:
        ...


class EmailProvider(Protocol):
    name: str

    def send(self, message: EmailMessage) -> NotificationResult:
        ...


def _preview(text: str, length: int = 50) -> str:
    return text if len(text) <= length else text[:length] + "..."


class LoggingSmsProvider:
    """Development provider: validates the number and logs the message."""

    name = "log-sms"

    def send(self, message: SmsMessage) -> NotificationResult:
        if not E164_PATTERN.match(message.to):
            return NotificationResult(
                success=False,
                error="Invalid phone number format. Use E.164 format (e.g., +994501234567)",
            )
        logger.info(
            "SMS sent (log provider)",
            extra={
                "provider": self.name,
                "to": message.to,
                "sender": message.sender or DEFAULT_SMS_SENDER,
                "preview": _preview(message.body),
            },
        )
        return NotificationResult(success=True, message_id=f"log_sms_{uuid.uuid4().hex[:12]}")


class LoggingEmailProvider:
    name = "log-email"

    def send(self, message: EmailMessage) -> NotificationResult:
        for address in message.to:
            if not EMAIL_PATTERN.match(address):
                return NotificationResult(success=False, error=f"Invalid email address: {address}")
        logger.info(
            "Email sent (log provider)",
            extra={
                "provider": self.name,
                "to": list(message.to),
                "sender": message.sender or DEFAULT_EMAIL_SENDER,
                "subject": message.subject,
                "preview": _preview(message.body),
            },
        )
        return NotificationResult(success=True, message_id=f"log_email_{uuid.uuid4().hex[:12]}")


class TwilioSmsProvider:
    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        client: Optional[TwilioClient] = None,
    ) -> None:
        self._from_number = from_number
        self._client = client or TwilioClient(account_sid, auth_token)

    def send(self, message: SmsMessage) -> NotificationResult:
        if not E164_PATTERN.match(message.to):
            return NotificationResult(success=False, error=f"Invalid phone number: {message.to}")
        sent = self._client.messages.create(body=message.body, from_=self._from_number, to=message.to)
        return NotificationResult(success=True, message_id=sent.sid)


class SmtpEmailProvider:
    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._timeout = timeout

    def send(self, message: EmailMessage) -> NotificationResult:
        sender = message.sender or self._sender
        mime = MIMEText(message.body, "plain", "utf-8")
        mime["Subject"] = message.subject
        mime["From"] = sender
        mime["To"] = ", ".join(message.to)

        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._port != 25:
                smtp.starttls()
            if self._username and self._password:
                smtp.login(self._username, self._password)
            smtp.sendmail(sender, list(message.to), mime.as_string())
        return NotificationResult(success=True, message_id=mime.get("Message-ID"))


__all__ = [
    "SmsMessage",
    "EmailMessage",
    "NotificationResult",
    "SmsProvider",
    "EmailProvider",
    "LoggingSmsProvider",
    "LoggingEmailProvider",
    "TwilioSmsProvider",
    "SmtpEmailProvider",
]
