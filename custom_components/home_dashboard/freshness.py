from __future__ import annotations

#region freshness

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from .const import PREFETCH_INTERVAL, RELEASE_HOUR, RELEASE_MINUTE
from .models import PricePoint
from .release_clock import has_release_passed, next_release


@dataclass(frozen=True, slots=True)
class FreshnessPolicy:
    """Decide how long a fetched price series stays fresh and when to poll.

    Before the daily release, and once tomorrow's prices have been seen, no
    polling runs and the cache only expires at the next release. Between the
    release and the arrival of tomorrow's prices the series is polled on a
    short fixed interval because the exact publication instant varies.
    """

    zone: tzinfo
    release_hour: int = RELEASE_HOUR
    release_minute: int = RELEASE_MINUTE
    poll_interval: timedelta = PREFETCH_INTERVAL

    def stale_deadline(self, now: datetime) -> datetime:
        return next_release(now, self.zone, self.release_hour, self.release_minute)

    def should_poll(self, now: datetime, tomorrow_available: bool) -> timedelta | None:
        if tomorrow_available:
            return None
        if has_release_passed(now, self.zone, self.release_hour, self.release_minute):
            return self.poll_interval
        return None

    @staticmethod
    def is_stale(now: datetime, deadline: datetime | None) -> bool:
        return deadline is None or now >= deadline


def has_tomorrow(series: Iterable[PricePoint], now: datetime, price_zone: tzinfo) -> bool:
    """True if any point falls on tomorrow's calendar date in the price zone."""
    tomorrow = now.astimezone(price_zone).date() + timedelta(days=1)
    return any(point.timestamp.astimezone(price_zone).date() == tomorrow for point in series)
