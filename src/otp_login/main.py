"""Composition root: wires settings, database and notifier into the core."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from otp_login.config import Settings, settings as default_settings
from otp_login.database.engine import Database
from otp_login.models.identity import Identity
from otp_login.schemas import OtpRequestAck, Profile
from otp_login.services.clock import Clock
from otp_login.services.notifier import Notifier, build_notifier
from otp_login.services.otp_issuer import OtpIssuer
from otp_login.services.otp_verifier import OtpVerifier
from otp_login.services.registration import RegistrationService

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


class AuthService:
    """The public surface handed to the request layer.

    ``request_otp`` and ``verify_otp`` are the whole OTP login API;
    ``register`` creates the identities they operate on.
    """

    def __init__(
        self,
        database: Database,
        notifier: Notifier,
        clock: Clock | None = None,
    ) -> None:
        self.database = database
        self.notifier = notifier
        self._registration = RegistrationService(database.session_factory)
        self._issuer = OtpIssuer(database.session_factory, notifier, clock=clock)
        self._verifier = OtpVerifier(database.session_factory, clock=clock)

    async def register(
        self,
        name: str,
        email: str,
        credential_secret: str,
        external_account_ref: str | None = None,
    ) -> Identity:
        return await self._registration.register(
            name, email, credential_secret, external_account_ref
        )

    async def request_otp(self, email: str) -> OtpRequestAck:
        return await self._issuer.request_otp(email)

    async def verify_otp(self, email: str, code: str) -> Profile:
        return await self._verifier.verify_otp(email, code)


@asynccontextmanager
async def lifespan(
    settings: Settings | None = None,
    *,
    notifier: Notifier | None = None,
    clock: Clock | None = None,
) -> AsyncIterator[AuthService]:
    """Build an :class:`AuthService`, create tables, and dispose on exit."""
    settings = settings or default_settings
    logger.info("Starting %s …", settings.app_name)

    database = Database(settings.database_url, echo=settings.debug)
    await database.init()
    try:
        yield AuthService(database, notifier or build_notifier(settings), clock=clock)
    finally:
        logger.info("Shutting down %s …", settings.app_name)
        await database.dispose()
