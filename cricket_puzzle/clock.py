"""
"Today" and "now" for the puzzle, always in one operative timezone.

The engine never calls datetime.now() itself; it gets a Clock so tests can
pin the date.
"""

from datetime import date, datetime, time
from typing import Optional

import pytz

from . import config

DATE_FORMAT = "%Y-%m-%d"


class Clock:
    """Wall clock in a fixed timezone (pytz)."""

    def __init__(self, tz_name: Optional[str] = None) -> None:
        self.tz = pytz.timezone(tz_name or config.PUZZLE_TIMEZONE)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> str:
        return self.now().strftime(DATE_FORMAT)

    def end_of_day(self, day: str) -> datetime:
        """23:59:59.999 local time on the given YYYY-MM-DD day."""
        parsed = parse_day(day)
        naive = datetime.combine(parsed, time(23, 59, 59, 999000))
        return self.tz.localize(naive)


class FixedClock(Clock):
    """Clock frozen at one instant. Handy for tests and replays."""

    def __init__(self, frozen: datetime, tz_name: Optional[str] = None) -> None:
        super().__init__(tz_name)
        if frozen.tzinfo is None:
            frozen = self.tz.localize(frozen)
        self.frozen = frozen.astimezone(self.tz)

    def now(self) -> datetime:
        return self.frozen


def parse_day(value: str) -> date:
    """Parse YYYY-MM-DD (ignores anything after the 10th character)."""
    return datetime.strptime(str(value)[:10], DATE_FORMAT).date()
