"""Repositories — data access layer for identities and issued OTPs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from otp_login.errors import Conflict
from otp_login.models.identity import Identity, normalize_email
from otp_login.models.otp_record import OtpRecord


class IdentityRepository:
    """Encapsulates all database queries related to registered identities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_email(self, email: str) -> Identity | None:
        """Look up an identity by email, ignoring case and surrounding blanks."""
        stmt = select(Identity).where(Identity.email == normalize_email(email))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self,
        name: str,
        email: str,
        credential_secret: str,
        external_account_ref: str | None = None,
    ) -> Identity:
        """Register a new identity.

        Raises :class:`~otp_login.errors.Conflict` if the email is taken,
        including when a concurrent registration wins the unique index.
        """
        if await self.find_by_email(email) is not None:
            raise Conflict()

        identity = Identity(
            name=name,
            email=normalize_email(email),
            credential_secret=credential_secret,
            external_account_ref=external_account_ref,
        )
        self._session.add(identity)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise Conflict() from exc
        return identity


class OtpRepository:
    """Encapsulates all database queries related to issued OTP codes."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert(
        self,
        email: str,
        code: str,
        expires_at: datetime,
        created_at: datetime | None = None,
    ) -> OtpRecord:
        """Persist a new code. Older codes for the same email are left alone."""
        record = OtpRecord(email=normalize_email(email), code=code, expires_at=expires_at)
        if created_at is not None:
            record.created_at = created_at
        self._session.add(record)
        await self._session.flush()
        return record

    async def find_active(self, email: str, now: datetime) -> OtpRecord | None:
        """Return the newest unconsumed record with ``expires_at`` after *now*."""
        stmt = (
            select(OtpRecord)
            .where(
                OtpRecord.email == normalize_email(email),
                OtpRecord.consumed.is_(False),
                OtpRecord.expires_at > now,
            )
            .order_by(OtpRecord.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_consumed(self, record_id: int) -> bool:
        """Flip ``consumed`` to true if it is still false.

        This is a single conditional UPDATE, so of two racing callers only
        one sees ``True``. Calling it again on a consumed record is a no-op
        that returns ``False``.
        """
        stmt = (
            update(OtpRecord)
            .where(OtpRecord.id == record_id, OtpRecord.consumed.is_(False))
            .values(consumed=True)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1
