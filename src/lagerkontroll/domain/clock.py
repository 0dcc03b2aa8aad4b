"""
Clock - injectable source of the current date and time.

Sessions receive a Clock so the date and week number they freeze at
construction, and the timestamps of their state transitions, are
controllable in tests.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, time
from typing import Optional


class Clock(ABC):
    """Abstract clock interface"""

    @abstractmethod
    def today(self) -> date:
        """Get the current local date"""
        ...

    @abstractmethod
    def now(self) -> datetime:
        """Get the current local date and time"""
        ...


class SystemClock(Clock):
    """Production clock backed by the system time"""

    def today(self) -> date:
        return date.today()

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock that always returns the same day; ``now()`` defaults to its midnight"""

    def __init__(self, day: date, moment: Optional[datetime] = None):
        self._day = day
        self._moment = moment or datetime.combine(day, time())

    def today(self) -> date:
        return self._day

    def now(self) -> datetime:
        return self._moment
