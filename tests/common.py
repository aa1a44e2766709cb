from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable
from zoneinfo import ZoneInfo

HELSINKI = ZoneInfo("Europe/Helsinki")
STOCKHOLM = ZoneInfo("Europe/Stockholm")


def build_prices(base: datetime, include_tomorrow: bool, zone: ZoneInfo = STOCKHOLM) -> list[dict[str, Any]]:
    """Raw payload with today's 24 hourly prices (price = hour) and optionally tomorrow's."""
    today_start = base.astimezone(zone).replace(hour=0, minute=0, second=0, microsecond=0)
    rows = [
        {"DateTime": (today_start + timedelta(hours=hour)).isoformat(), "Price": hour}
        for hour in range(24)
    ]
    if include_tomorrow:
        tomorrow_start = today_start + timedelta(days=1)
        rows.extend(
            {"DateTime": (tomorrow_start + timedelta(hours=hour)).isoformat(), "Price": 100 + hour}
            for hour in range(24)
        )
    return rows


@dataclass
class FakeTimer:
    action: Callable[[datetime], None]
    when: datetime | None = None
    interval: timedelta | None = None
    active: bool = True

    def cancel(self) -> None:
        self.active = False

    def fire(self, now: datetime) -> None:
        if not self.active:
            return
        if self.interval is None:
            self.active = False
        self.action(now)


class FakeTimers:
    """Records timers registered through the Home Assistant event helpers."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def track_point_in_utc_time(self, hass, action, point_in_time: datetime):
        timer = FakeTimer(action=action, when=point_in_time)
        self.timers.append(timer)
        return timer.cancel

    def track_time_interval(self, hass, action, interval: timedelta):
        timer = FakeTimer(action=action, interval=interval)
        self.timers.append(timer)
        return timer.cancel

    @property
    def live(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if timer.active]

    def one_shots(self) -> list[FakeTimer]:
        return [timer for timer in self.live if timer.interval is None]

    def repeating(self) -> list[FakeTimer]:
        return [timer for timer in self.live if timer.interval is not None]
