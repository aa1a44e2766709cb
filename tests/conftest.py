from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

for entry in list(sys.path):
    if entry.startswith("__editable__.") and entry not in (str(ROOT),):
        try:
            Path(entry).resolve(strict=True)
        except (OSError, ValueError):
            sys.path.remove(entry)

from tests.common import FakeTimers  # noqa: E402


@pytest.fixture
def fake_timers(monkeypatch) -> FakeTimers:
    """Replace the window's timer helpers with recording fakes."""
    timers = FakeTimers()
    monkeypatch.setattr(
        "custom_components.home_dashboard.window.async_track_point_in_utc_time",
        timers.track_point_in_utc_time,
    )
    monkeypatch.setattr(
        "custom_components.home_dashboard.window.async_track_time_interval",
        timers.track_time_interval,
    )
    return timers
