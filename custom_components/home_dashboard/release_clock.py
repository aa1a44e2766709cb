"""Wall-clock arithmetic for the daily price release and hour boundaries.

All helpers take the zone explicitly; the host's local zone is never used.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo

#region release


def _release_on(day: date, zone: tzinfo, release_hour: int, release_minute: int) -> datetime:
    # Built from the calendar date so the release stays on the wall clock across DST changes.
    return datetime.combine(day, time(release_hour, release_minute), tzinfo=zone)


def next_release(now: datetime, zone: tzinfo, release_hour: int, release_minute: int) -> datetime:
    """Return today's release in ``zone`` if ``now`` is before it, otherwise tomorrow's."""
    local_now = now.astimezone(zone)
    today_release = _release_on(local_now.date(), zone, release_hour, release_minute)
    if now < today_release:
        return today_release
    return _release_on(local_now.date() + timedelta(days=1), zone, release_hour, release_minute)


def has_release_passed(now: datetime, zone: tzinfo, release_hour: int, release_minute: int) -> bool:
    local_now = now.astimezone(zone)
    return (local_now.hour, local_now.minute) >= (release_hour, release_minute)


#region hours


def start_of_hour(now: datetime, zone: tzinfo) -> datetime:
    return now.astimezone(zone).replace(minute=0, second=0, microsecond=0)


def next_hour_start(now: datetime, zone: tzinfo) -> datetime:
    # Step in UTC; wall-clock addition would skip or repeat an hour on DST days.
    current = start_of_hour(now, zone).astimezone(timezone.utc)
    return (current + timedelta(hours=1)).astimezone(zone)
