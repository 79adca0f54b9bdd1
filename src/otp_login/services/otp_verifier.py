"""OTP verifier — consumes a submitted code and returns the login profile."""

from __future__ import annotations

import logging
import secrets

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_login.database.repository import IdentityRepository, OtpRepository
from otp_login.errors import InternalError, NotFound, Unauthorized
from otp_login.models.identity import normalize_email
from otp_login.schemas import Profile
from otp_login.services.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


def codes_match(expected: str, submitted: str) -> bool:
    """Exact, constant-time string comparison. ``"012345" != "12345"``."""
    return secrets.compare_digest(expected.encode("utf-8"), submitted.encode("utf-8"))


class OtpVerifier:
    """Verifies a submitted code against the newest active record.

    Lookup, comparison, consumption and the profile read share one
    transaction. Consumption is a conditional update, so two racing
    verifications of the same code cannot both succeed.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    async def verify_otp(self, email: str, submitted_code: str) -> Profile:
        """Return the profile for *email* if *submitted_code* is valid.

        Raises ``Unauthorized`` for a wrong, expired, consumed or missing
        code without telling those cases apart; ``NotFound`` if the identity
        disappeared; ``InternalError`` on storage failures.
        """
        email = normalize_email(email)

        try:
            async with self._session_factory() as session, session.begin():
                otps = OtpRepository(session)

                record = await otps.find_active(email, self._clock.now())
                if record is None:
                    logger.info("No active OTP for %s", email)
                    raise Unauthorized()

                if not codes_match(record.code, submitted_code):
                    logger.info("Invalid OTP submitted for %s", email)
                    raise Unauthorized()

                if not await otps.mark_consumed(record.id):
                    logger.warning("OTP %s for %s was consumed concurrently", record.id, email)
                    raise Unauthorized()

                identity = await IdentityRepository(session).find_by_email(email)
                if identity is None:
                    logger.error("OTP %s matched but no identity exists for %s", record.id, email)
                    raise NotFound()

                profile = Profile(
                    display_name=identity.name,
                    external_account_ref=identity.external_account_ref,
                )
        except SQLAlchemyError as exc:
            logger.exception("Database error while verifying OTP for %s", email)
            raise InternalError() from exc

        logger.info("OTP %s verified for %s", record.id, email)
        return profile
