"""
Trending window: the date (or "current") a run selects candidates for
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from models.base import FetchStrategy


@dataclass(frozen=True)
class TrendingWindow:
    """A specific trending date, or None for the current chart"""

    day: Optional[date] = None

    @property
    def is_current(self) -> bool:
        return self.day is None

    @property
    def label(self) -> str:
        return self.day.isoformat() if self.day else "current"

    @classmethod
    def current(cls) -> "TrendingWindow":
        return cls()

    @classmethod
    def yesterday(cls, now: Optional[datetime] = None) -> "TrendingWindow":
        now = now or datetime.now(timezone.utc)
        return cls(day=(now.astimezone(timezone.utc) - timedelta(days=1)).date())


def default_window(strategy: FetchStrategy, now: Optional[datetime] = None) -> TrendingWindow:
    """
    The window a run uses when the caller does not pick one.

    The bulk export is published with a day of lag, so it is read for
    yesterday (UTC). The chart strategies only know the current chart.
    """
    if strategy == FetchStrategy.BULK_EXPORT:
        return TrendingWindow.yesterday(now)
    return TrendingWindow.current()
