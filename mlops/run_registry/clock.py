"""Run registry - Clock.

All timestamps written by the repository come from an injected clock so
that registration dates and creation ordering are reproducible in tests.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock(ABC):
    """Source of the current instant as a timezone-aware datetime.

    The repository converts every reading to UTC before storing it.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """A controllable clock.

    Returns ``start`` until advanced. When ``step`` is given every call to
    :meth:`now` moves the clock forward by that amount after reading it.
    """

    def __init__(
        self,
        start: Optional[datetime] = None,
        step: timedelta = timedelta(0),
    ) -> None:
        start = start or datetime(2020, 1, 1, tzinfo=timezone.utc)
        if start.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware start time")
        self._current = start.astimezone(timezone.utc)
        self._step = step
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = self._current
            self._current = current + self._step
            return current

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward and return the new time."""
        with self._lock:
            self._current = self._current + delta
            return self._current

    def set(self, value: datetime) -> None:
        if value.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware time")
        with self._lock:
            self._current = value.astimezone(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a stored timestamp to aware UTC.

    Backends without timezone support (SQLite) hand back naive values; the
    repository only ever writes UTC, so naive values are UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
