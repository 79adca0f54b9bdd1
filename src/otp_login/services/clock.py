"""Clock abstraction so expiry can be tested without sleeping."""

from abc import ABC, abstractmethod
from datetime import UTC, datetime


class Clock(ABC):
    """Supplies the current time as an aware UTC datetime."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current instant."""


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(UTC)
