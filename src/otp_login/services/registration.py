"""Creates identities that can later log in by OTP."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_login.database.repository import IdentityRepository
from otp_login.errors import InternalError
from otp_login.models.identity import Identity

logger = logging.getLogger(__name__)


class RegistrationService:
    """Thin transactional wrapper around :class:`IdentityRepository.create`."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def register(
        self,
        name: str,
        email: str,
        credential_secret: str,
        external_account_ref: str | None = None,
    ) -> Identity:
        """Create an identity. Raises ``Conflict`` if the email is taken."""
        try:
            async with self._session_factory() as session, session.begin():
                identity = await IdentityRepository(session).create(
                    name, email, credential_secret, external_account_ref
                )
        except SQLAlchemyError as exc:
            logger.exception("Error creating user %s", email)
            raise InternalError("Failed to register user") from exc

        logger.info("Registered %r", identity)
        return identity
