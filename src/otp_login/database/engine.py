"""Database engine and async session factory."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from otp_login.models.base import Base

# Imported for their side effect of registering tables on Base.metadata
from otp_login.models import identity as _identity  # noqa: F401
from otp_login.models import otp_record as _otp_record  # noqa: F401

logger = logging.getLogger(__name__)


class Database:
    """Owns one async engine and the session factory bound to it.

    Constructed and torn down by the composing layer; nothing here is
    created lazily at import time.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    async def init(self) -> None:
        """Create all tables that don't yet exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialised (%s)", self.engine.url.render_as_string())

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database connections closed")
