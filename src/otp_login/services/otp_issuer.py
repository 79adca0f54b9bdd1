"""OTP issuer — generates, stores and dispatches login codes."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_login.database.repository import IdentityRepository, OtpRepository
from otp_login.errors import InternalError, NotFound
from otp_login.models.identity import normalize_email
from otp_login.schemas import OtpRequestAck
from otp_login.services.clock import Clock, SystemClock
from otp_login.services.notifier import Notifier

logger = logging.getLogger(__name__)

# OTP validity period in seconds
OTP_TTL_SECONDS = 300  # 5 minutes

OTP_MIN = 100_000
OTP_MAX = 999_999


def generate_otp_code(randbelow: Callable[[int], int] = secrets.randbelow) -> str:
    """Draw a code uniformly from 100000–999999 inclusive.

    The range alone guarantees six digits, so no padding is needed.
    *randbelow* must be a cryptographic source in production.
    """
    return str(OTP_MIN + randbelow(OTP_MAX - OTP_MIN + 1))


class OtpIssuer:
    """Issues a login code for a registered email.

    Flow
    ----
    1. The email must belong to a registered identity.
    2. A fresh code is stored with a fixed five-minute expiry and committed.
    3. The code is handed to the notifier. Delivery failure is reported to
       the caller but the stored record is kept.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Notifier,
        clock: Clock | None = None,
        randbelow: Callable[[int], int] = secrets.randbelow,
    ) -> None:
        self._session_factory = session_factory
        self._notifier = notifier
        self._clock = clock or SystemClock()
        self._randbelow = randbelow

    async def request_otp(self, email: str) -> OtpRequestAck:
        """Issue and deliver a new code for *email*.

        Raises ``NotFound``, ``DeliveryFailed`` or ``InternalError``.
        """
        email = normalize_email(email)

        try:
            async with self._session_factory() as session, session.begin():
                identity = await IdentityRepository(session).find_by_email(email)
                if identity is None:
                    logger.info("OTP requested for unknown email %s", email)
                    raise NotFound()

                code = generate_otp_code(self._randbelow)
                now = self._clock.now()
                expires_at = now + timedelta(seconds=OTP_TTL_SECONDS)
                record = await OtpRepository(session).insert(
                    email, code, expires_at, created_at=now
                )
                record_id = record.id
        except SQLAlchemyError as exc:
            logger.exception("Failed to store OTP for %s", email)
            raise InternalError("Failed to generate OTP") from exc

        logger.info("OTP %s issued for %s, expires %s", record_id, email, expires_at.isoformat())

        await self._notifier.send(email, code, expires_at)

        return OtpRequestAck(success=True, message="OTP sent to your email")
