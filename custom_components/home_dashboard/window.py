#region setup
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from enum import StrEnum

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.event import (
    async_track_point_in_utc_time,
    async_track_time_interval,
)

from .const import WINDOW_REFRESH_INTERVAL
from .release_clock import next_hour_start, start_of_hour

_LOGGER = logging.getLogger(__name__)


class WindowState(StrEnum):
    IDLE = "idle"
    WAITING_FOR_HOUR_BOUNDARY = "waiting_for_hour_boundary"
    TICKING = "ticking"
    SUSPENDED = "suspended"


#region advancer
class WindowAdvancer:
    """Keep the display window aligned to the start of the current hour.

    A one-shot timer waits for the next hour boundary, then a short repeating
    timer recomputes the start of the hour. Both are cancelled while the
    dashboard is hidden; becoming visible snaps the window forward and restarts
    the cycle. At most one pair of timers is live at any time.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        display_zone: tzinfo,
        refresh_interval: timedelta = WINDOW_REFRESH_INTERVAL,
    ) -> None:
        self.hass = hass
        self._zone = display_zone
        self._refresh_interval = refresh_interval
        self._state = WindowState.IDLE
        self._first_timestamp: datetime | None = None
        self._pending_boundary: datetime | None = None
        self._unsub_boundary: CALLBACK_TYPE | None = None
        self._unsub_tick: CALLBACK_TYPE | None = None
        self._listeners: dict[CALLBACK_TYPE, CALLBACK_TYPE] = {}

    @property
    def state(self) -> WindowState:
        return self._state

    @property
    def first_timestamp(self) -> datetime | None:
        return self._first_timestamp

    @property
    def live_timers(self) -> int:
        return sum(unsub is not None for unsub in (self._unsub_boundary, self._unsub_tick))

    @callback
    def async_add_listener(self, update_callback: CALLBACK_TYPE) -> CALLBACK_TYPE:
        @callback
        def remove_listener() -> None:
            self._listeners.pop(remove_listener, None)

        self._listeners[remove_listener] = update_callback
        return remove_listener

    #region _lifecycle
    @callback
    def start(self) -> None:
        if self._state is not WindowState.IDLE:
            return
        self._resume()

    @callback
    def stop(self) -> None:
        self._cancel_timers()
        self._state = WindowState.IDLE
        _LOGGER.debug("Display window stopped")

    @callback
    def on_visibility_change(self, visible: bool) -> None:
        if self._state is WindowState.IDLE:
            return
        if visible:
            if self._state is not WindowState.SUSPENDED:
                return
            self._resume()
            _LOGGER.debug("Dashboard visible, window snapped to %s", self._first_timestamp)
            return
        if self._state is WindowState.SUSPENDED:
            return
        self._cancel_timers()
        self._state = WindowState.SUSPENDED
        _LOGGER.debug("Dashboard hidden, window frozen at %s", self._first_timestamp)

    def _resume(self) -> None:
        self._cancel_timers()
        now = self._current_time()
        if not self._set_first_timestamp(start_of_hour(now, self._zone)):
            # Listeners hear about every resume, even within the same hour.
            self._notify_listeners()
        self._pending_boundary = next_hour_start(now, self._zone)
        self._unsub_boundary = async_track_point_in_utc_time(
            self.hass,
            self._handle_hour_boundary,
            self._pending_boundary,
        )
        self._state = WindowState.WAITING_FOR_HOUR_BOUNDARY

    def _cancel_timers(self) -> None:
        if self._unsub_boundary is not None:
            self._unsub_boundary()
            self._unsub_boundary = None
        if self._unsub_tick is not None:
            self._unsub_tick()
            self._unsub_tick = None
        self._pending_boundary = None

    #region _timers
    @callback
    def _handle_hour_boundary(self, _fired_at: datetime) -> None:
        self._unsub_boundary = None
        if self._state is not WindowState.WAITING_FOR_HOUR_BOUNDARY or self._pending_boundary is None:
            return
        self._set_first_timestamp(self._pending_boundary)
        self._pending_boundary = None
        self._unsub_tick = async_track_time_interval(
            self.hass,
            self._handle_tick,
            self._refresh_interval,
        )
        self._state = WindowState.TICKING

    @callback
    def _handle_tick(self, _fired_at: datetime) -> None:
        if self._state is not WindowState.TICKING:
            return
        self._set_first_timestamp(start_of_hour(self._current_time(), self._zone))

    def _set_first_timestamp(self, value: datetime) -> bool:
        if value == self._first_timestamp:
            return False
        self._first_timestamp = value
        _LOGGER.debug("Display window starts at %s", value.isoformat())
        self._notify_listeners()
        return True

    def _notify_listeners(self) -> None:
        for update_callback in list(self._listeners.values()):
            update_callback()

    @staticmethod
    def _current_time() -> datetime:
        return datetime.now(timezone.utc)
