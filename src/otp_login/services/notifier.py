"""Notifiers — deliver issued OTP codes to the account's email address."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from email.message import EmailMessage

import aiosmtplib

from otp_login.config import Settings
from otp_login.errors import DeliveryFailed

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your Login OTP"


def render_otp_body(code: str, expires_at: datetime) -> str:
    """Plain-text body shared by every notifier."""
    return (
        f"Your OTP for login is: {code}. "
        f"It expires at {expires_at.astimezone(UTC):%H:%M:%S} UTC."
    )


class Notifier(ABC):
    """Delivery port used by the OTP issuer.

    Implementations must raise :class:`~otp_login.errors.DeliveryFailed` when
    the code could not be handed to the transport.
    """

    @abstractmethod
    async def send(self, email: str, code: str, expires_at: datetime) -> None:
        """Deliver *code* to *email*."""


class SmtpNotifier(Notifier):
    """Sends OTP emails using the configured SMTP server."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def build_message(self, email: str, code: str, expires_at: datetime) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = OTP_SUBJECT
        msg["From"] = self._settings.email_from
        msg["To"] = email
        msg.set_content(render_otp_body(code, expires_at))
        return msg

    async def send(self, email: str, code: str, expires_at: datetime) -> None:
        msg = self.build_message(email, code, expires_at)

        logger.info("Sending OTP email to %s", email)
        try:
            await aiosmtplib.send(
                msg,
                hostname=self._settings.smtp_host,
                port=self._settings.smtp_port,
                username=self._settings.smtp_username or None,
                password=self._settings.smtp_password or None,
                start_tls=self._settings.smtp_start_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("OTP email to %s failed: %s", email, exc)
            raise DeliveryFailed() from exc

        logger.info("OTP email sent to %s", email)


class LoggingNotifier(Notifier):
    """Development notifier: logs the message instead of sending it."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def send(self, email: str, code: str, expires_at: datetime) -> None:
        logger.info(
            "📧 [preview] From: %s | To: %s | Subject: %s | %s",
            self._settings.email_from,
            email,
            OTP_SUBJECT,
            render_otp_body(code, expires_at),
        )


def build_notifier(settings: Settings) -> Notifier:
    """Pick the notifier named by ``settings.notifier_backend``."""
    if settings.notifier_backend == "log":
        return LoggingNotifier(settings)
    return SmtpNotifier(settings)
