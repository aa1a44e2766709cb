#region setup
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any
from urllib.parse import urlencode
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from aiohttp import ClientError, ClientResponseError
import async_timeout
import voluptuous as vol
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .const import DEFAULT_BASE_URL, FETCH_TIMEOUT_SECONDS, PRICES_PATH
from .freshness import FreshnessPolicy, has_tomorrow
from .models import PricePoint, PriceView, ViewStatus
from .projection import project, view_status

_LOGGER = logging.getLogger(__name__)


class InvalidTimeZone(ValueError):
    """Raised when a configured zone is not a known IANA identifier."""


def resolve_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise InvalidTimeZone(name) from err


#region _schema
def _iso_datetime(value: Any) -> datetime:
    if not isinstance(value, str):
        raise vol.Invalid("expected an ISO-8601 string")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as err:
        raise vol.Invalid(f"invalid ISO-8601 timestamp {value!r}") from err
    # Naive timestamps are read as UTC.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _price(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise vol.Invalid("expected a number")
    return float(value)


PRICE_SERIES_SCHEMA = vol.Schema(
    [
        vol.Schema(
            {
                vol.Required("DateTime"): _iso_datetime,
                vol.Required("Price"): _price,
            },
            extra=vol.ALLOW_EXTRA,
        )
    ]
)


def _utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def price_request_url(base_url: str, display_zone: ZoneInfo, now: datetime) -> str:
    """Price query covering yesterday 00:00 to tomorrow 23:00 in the display zone."""
    local_now = now.astimezone(display_zone)
    start = datetime.combine(local_now.date() - timedelta(days=1), time(0), tzinfo=display_zone)
    end = datetime.combine(local_now.date() + timedelta(days=1), time(23), tzinfo=display_zone)
    params = {
        "start": _utc_iso(start),
        "end": _utc_iso(end),
        "timeFormat": str(display_zone),
    }
    return f"{base_url}{PRICES_PATH}?{urlencode(params)}"


def parse_price_series(payload: Any) -> list[PricePoint]:
    """Validate a price payload and return its points sorted by timestamp.

    Raises ``vol.Invalid`` when any element does not match the point schema.
    """
    rows = PRICE_SERIES_SCHEMA(payload)
    series = [PricePoint(timestamp=row["DateTime"], price=row["Price"]) for row in rows]
    series.sort(key=lambda point: point.timestamp)
    return series


#region coordinator
class ElectricityPriceCoordinator(DataUpdateCoordinator[list[PricePoint]]):
    """Fetch the day-ahead price series and tune its own polling cadence.

    ``update_interval`` is rewritten after every fetch from the freshness
    policy: ``None`` (no polling timer) before the daily release and once
    tomorrow's prices are cached, a short interval in between. Failed fetches
    keep the previous series.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        entry_id: str,
        base_url: str,
        display_zone: ZoneInfo,
        price_zone: ZoneInfo,
        policy: FreshnessPolicy | None = None,
    ) -> None:
        super().__init__(
            hass,
            _LOGGER,
            name="Electricity prices",
            update_interval=None,
        )
        self.entry_id = entry_id
        self._base_url = base_url or DEFAULT_BASE_URL
        self._display_zone = display_zone
        self._price_zone = price_zone
        self._policy = policy or FreshnessPolicy(zone=display_zone)
        self._tomorrow_available = False
        self._stale_deadline: datetime | None = None
        self._inflight: asyncio.Task[list[PricePoint]] | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def display_zone(self) -> ZoneInfo:
        return self._display_zone

    @property
    def price_zone(self) -> ZoneInfo:
        return self._price_zone

    @property
    def policy(self) -> FreshnessPolicy:
        return self._policy

    @property
    def tomorrow_available(self) -> bool:
        return self._tomorrow_available

    @property
    def stale_deadline(self) -> datetime | None:
        return self._stale_deadline

    @property
    def current_time(self) -> datetime:
        return self._current_time()

    def build_view(self, first_timestamp: datetime) -> PriceView:
        return project(self.data or [], first_timestamp, self._price_zone)

    def view_status(self) -> ViewStatus:
        return view_status(self.data is not None, self.last_update_success)

    async def async_refresh_if_stale(self) -> bool:
        """Refresh once the cache has passed its release deadline."""
        now = self._current_time()
        if not self._policy.is_stale(now, self._stale_deadline):
            return False
        _LOGGER.debug("Price series stale since %s, refreshing", self._stale_deadline)
        await self.async_request_refresh()
        return True

    #region _update
    async def _async_update_data(self) -> list[PricePoint]:
        # Overlapping refreshes share the fetch that is already running.
        inflight = self._inflight
        if inflight is None:
            inflight = asyncio.create_task(self._async_fetch_and_evaluate())
            inflight.add_done_callback(self._clear_inflight)
            self._inflight = inflight
        return await inflight

    def _clear_inflight(self, task: asyncio.Task[list[PricePoint]]) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _async_fetch_and_evaluate(self) -> list[PricePoint]:
        session = async_get_clientsession(self.hass)
        now = self._current_time()
        series: list[PricePoint] | None = None
        try:
            series = await self._fetch_series(session, now)
            self._stale_deadline = self._policy.stale_deadline(now)
        finally:
            # A failed fetch is judged on the cached series, which may be a day old.
            evaluated_at = self._current_time()
            shown = series if series is not None else self.data or []
            self._tomorrow_available = has_tomorrow(shown, evaluated_at, self._price_zone)
            self._apply_poll_interval(evaluated_at)
        _LOGGER.debug(
            "Fetched %d prices, tomorrow available: %s, fresh until %s",
            len(series),
            self._tomorrow_available,
            self._stale_deadline,
        )
        return series

    def _apply_poll_interval(self, now: datetime) -> None:
        interval = self._policy.should_poll(now, self._tomorrow_available)
        if interval != self.update_interval:
            _LOGGER.debug("Price polling interval changed to %s", interval)
        self.update_interval = interval

    #region _fetch
    async def _fetch_series(self, session, now: datetime) -> list[PricePoint]:
        url = self._compose_url(now)
        try:
            async with async_timeout.timeout(FETCH_TIMEOUT_SECONDS):
                async with session.get(url) as response:
                    response.raise_for_status()
                    payload = await response.json(content_type=None)
        except asyncio.TimeoutError as err:
            raise UpdateFailed(f"Timeout fetching {url}") from err
        except ClientResponseError as err:
            raise UpdateFailed(f"Price request failed with status {err.status}") from err
        except ClientError as err:
            raise UpdateFailed(f"Network error fetching {url}") from err
        except ValueError as err:
            raise UpdateFailed(f"Invalid JSON from {url}") from err
        return self._series_from_payload(payload, url)

    def _compose_url(self, now: datetime) -> str:
        return price_request_url(self._base_url, self._display_zone, now)

    #region _parse
    @staticmethod
    def _series_from_payload(payload: Any, url: str) -> list[PricePoint]:
        try:
            return parse_price_series(payload)
        except vol.Invalid as err:
            raise UpdateFailed(f"Invalid price payload from {url}: {err}") from err

    #region _time
    @staticmethod
    def _current_time() -> datetime:
        return datetime.now(timezone.utc)
