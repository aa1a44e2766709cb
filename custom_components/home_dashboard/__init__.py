from __future__ import annotations

#region setup

from collections.abc import Mapping
from typing import Any, TypeAlias

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryError
from homeassistant.helpers.typing import ConfigType

from .const import (
    CONF_BASE_URL,
    CONF_DISPLAY_TIMEZONE,
    CONF_PRICE_TIMEZONE,
    DATA_COORDINATOR,
    DATA_LOG_CAPTURE,
    DATA_UNSUB_LISTENER,
    DATA_WINDOW,
    DEFAULT_BASE_URL,
    DEFAULT_DISPLAY_TIMEZONE,
    DEFAULT_PRICE_TIMEZONE,
    DOMAIN,
    PLATFORMS,
)
from .coordinator import ElectricityPriceCoordinator, InvalidTimeZone, resolve_zone
from .log_capture import LogCapture
from .window import WindowAdvancer

HomeDashboardConfigEntry: TypeAlias = ConfigEntry


#region _bootstrap
async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    _log_capture(hass)
    return True


def _log_capture(hass: HomeAssistant) -> LogCapture:
    domain_data = hass.data.setdefault(DOMAIN, {})
    capture = domain_data.get(DATA_LOG_CAPTURE)
    if capture is None:
        capture = domain_data[DATA_LOG_CAPTURE] = LogCapture()
    return capture


#region _entry_setup
async def async_setup_entry(hass: HomeAssistant, entry: HomeDashboardConfigEntry) -> bool:
    runtime_config = _runtime_entry_config(entry)

    try:
        display_zone = resolve_zone(runtime_config[CONF_DISPLAY_TIMEZONE])
        price_zone = resolve_zone(runtime_config[CONF_PRICE_TIMEZONE])
    except InvalidTimeZone as err:
        raise ConfigEntryError(f"Unknown time zone {err}") from err

    _log_capture(hass).install()

    coordinator = ElectricityPriceCoordinator(
        hass=hass,
        entry_id=entry.entry_id,
        base_url=runtime_config[CONF_BASE_URL],
        display_zone=display_zone,
        price_zone=price_zone,
    )
    window = WindowAdvancer(hass, display_zone)

    # A failing first fetch leaves the entities in their error state instead of retrying setup.
    await coordinator.async_refresh()

    @callback
    def _window_advanced() -> None:
        hass.async_create_task(coordinator.async_refresh_if_stale())

    window.start()
    unsub_window = window.async_add_listener(_window_advanced)

    unsub_options = entry.add_update_listener(async_update_entry)
    hass.data[DOMAIN][entry.entry_id] = {
        DATA_COORDINATOR: coordinator,
        DATA_WINDOW: window,
        DATA_UNSUB_LISTENER: [unsub_options, unsub_window],
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


#region _entry_unload
async def async_unload_entry(hass: HomeAssistant, entry: HomeDashboardConfigEntry) -> bool:
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        stored = hass.data[DOMAIN].pop(entry.entry_id, None)
        if stored:
            stored[DATA_WINDOW].stop()
            await stored[DATA_COORDINATOR].async_shutdown()
            for unsub in stored.get(DATA_UNSUB_LISTENER, []):
                unsub()
        if not any(key != DATA_LOG_CAPTURE for key in hass.data[DOMAIN]):
            _log_capture(hass).uninstall()
    return unload_ok


#region _options_update
async def async_update_entry(hass: HomeAssistant, entry: HomeDashboardConfigEntry) -> None:
    await hass.config_entries.async_reload(entry.entry_id)


#region _config
def _runtime_entry_config(entry: HomeDashboardConfigEntry) -> Mapping[str, Any]:
    result: dict[str, Any] = {
        CONF_BASE_URL: DEFAULT_BASE_URL,
        CONF_DISPLAY_TIMEZONE: DEFAULT_DISPLAY_TIMEZONE,
        CONF_PRICE_TIMEZONE: DEFAULT_PRICE_TIMEZONE,
    }

    def _normalize(data: Mapping[str, Any]) -> None:
        if CONF_BASE_URL in data:
            base_url = str(data[CONF_BASE_URL]).strip()
            if base_url.endswith("/"):
                base_url = base_url[:-1]
            result[CONF_BASE_URL] = base_url or DEFAULT_BASE_URL
        for key, default in (
            (CONF_DISPLAY_TIMEZONE, DEFAULT_DISPLAY_TIMEZONE),
            (CONF_PRICE_TIMEZONE, DEFAULT_PRICE_TIMEZONE),
        ):
            if key in data:
                result[key] = str(data[key]).strip() or default

    _normalize(entry.data)
    _normalize(entry.options)
    return result
