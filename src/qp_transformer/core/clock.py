"""Time abstraction for cache expiry."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Abstract millisecond clock."""

    @abstractmethod
    def now_ms(self) -> int:
        """Milliseconds since the epoch."""
        ...


class SystemClock(Clock):
    """Real wall-clock time."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class FakeClock(Clock):
    """Controllable clock for testing."""

    def __init__(self, initial_ms: int = 1_700_000_000_000) -> None:
        self._now = initial_ms

    def now_ms(self) -> int:
        return self._now

    def advance(self, seconds: float = 0, *, milliseconds: int = 0) -> None:
        """Advance time by seconds and/or milliseconds."""
        self._now += int(seconds * 1000) + milliseconds

    def set(self, now_ms: int) -> None:
        """Set clock to a specific epoch-millisecond value."""
        self._now = now_ms
