"""Shared fixtures and fakes for the OTP login tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from otp_login.database.engine import Database
from otp_login.errors import DeliveryFailed
from otp_login.services.clock import Clock
from otp_login.services.notifier import Notifier

T0 = datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)


class FrozenClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class RecordingNotifier(Notifier):
    """Keeps every delivered message; optionally fails like a dead relay."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, str, datetime]] = []

    async def send(self, email: str, code: str, expires_at: datetime) -> None:
        if self.fail:
            raise DeliveryFailed()
        self.sent.append((email, code, expires_at))

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def database():
    """Fresh in-memory database per test."""
    db = Database("sqlite+aiosqlite://")
    await db.init()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def file_database(tmp_path):
    """File-backed database, so concurrent sessions get separate connections."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'otp.db'}")
    await db.init()
    yield db
    await db.dispose()
