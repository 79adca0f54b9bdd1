"""Tests for the notifiers. No real SMTP server is contacted."""

from __future__ import annotations

import logging
from datetime import timedelta, timezone
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from otp_login.config import Settings
from otp_login.errors import DeliveryFailed
from otp_login.services.notifier import (
    OTP_SUBJECT,
    LoggingNotifier,
    SmtpNotifier,
    build_notifier,
    render_otp_body,
)

from conftest import T0


@pytest.fixture
def smtp_settings() -> Settings:
    return Settings(
        _env_file=None,
        notifier_backend="smtp",
        smtp_host="smtp.test",
        smtp_port=2525,
        smtp_username="mailer",
        smtp_password="hunter2",
        email_from="App <no-reply@test>",
    )


def test_build_message(smtp_settings):
    msg = SmtpNotifier(smtp_settings).build_message("ann@x.com", "123456", T0)

    assert msg["Subject"] == OTP_SUBJECT
    assert msg["To"] == "ann@x.com"
    assert msg["From"] == "App <no-reply@test>"
    assert "123456" in msg.get_content()
    assert "12:00:00 UTC" in msg.get_content()


@pytest.mark.asyncio
async def test_smtp_send_uses_settings(smtp_settings):
    with patch("otp_login.services.notifier.aiosmtplib.send", new=AsyncMock()) as send:
        await SmtpNotifier(smtp_settings).send("ann@x.com", "123456", T0)

    send.assert_awaited_once()
    kwargs = send.await_args.kwargs
    assert kwargs["hostname"] == "smtp.test"
    assert kwargs["port"] == 2525
    assert kwargs["username"] == "mailer"
    assert kwargs["password"] == "hunter2"
    assert kwargs["start_tls"] is True


@pytest.mark.asyncio
async def test_smtp_error_becomes_delivery_failed(smtp_settings):
    failing = AsyncMock(side_effect=aiosmtplib.SMTPConnectError("connection refused"))
    with patch("otp_login.services.notifier.aiosmtplib.send", new=failing):
        with pytest.raises(DeliveryFailed):
            await SmtpNotifier(smtp_settings).send("ann@x.com", "123456", T0)


@pytest.mark.asyncio
async def test_network_error_becomes_delivery_failed(smtp_settings):
    failing = AsyncMock(side_effect=ConnectionRefusedError())
    with patch("otp_login.services.notifier.aiosmtplib.send", new=failing):
        with pytest.raises(DeliveryFailed):
            await SmtpNotifier(smtp_settings).send("ann@x.com", "123456", T0)


@pytest.mark.asyncio
async def test_logging_notifier_previews_message(caplog):
    notifier = LoggingNotifier(Settings(_env_file=None))

    with caplog.at_level(logging.INFO, logger="otp_login.services.notifier"):
        await notifier.send("ann@x.com", "654321", T0)

    assert "ann@x.com" in caplog.text
    assert "654321" in caplog.text


def test_body_expiry_is_rendered_in_utc():
    berlin = timezone(timedelta(hours=2))
    body = render_otp_body("123456", T0.astimezone(berlin))

    assert "12:00:00 UTC" in body
    assert "14:00:00" not in body


def test_build_notifier_picks_backend(smtp_settings):
    assert isinstance(build_notifier(smtp_settings), SmtpNotifier)
    assert isinstance(
        build_notifier(Settings(_env_file=None, notifier_backend="log")), LoggingNotifier
    )


def test_default_backend_sends_mail_instead_of_logging_codes():
    defaults = Settings(_env_file=None)

    assert defaults.notifier_backend == "smtp"
    assert isinstance(build_notifier(defaults), SmtpNotifier)
