from __future__ import annotations

#region diagnostics

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DATA_COORDINATOR, DATA_LOG_CAPTURE, DATA_WINDOW, DOMAIN
from .coordinator import ElectricityPriceCoordinator
from .log_capture import LogCapture
from .window import WindowAdvancer


async def async_get_config_entry_diagnostics(hass: HomeAssistant, entry: ConfigEntry) -> dict[str, Any]:
    domain_data = hass.data[DOMAIN]
    stored = domain_data[entry.entry_id]
    coordinator: ElectricityPriceCoordinator = stored[DATA_COORDINATOR]
    window: WindowAdvancer = stored[DATA_WINDOW]
    capture: LogCapture | None = domain_data.get(DATA_LOG_CAPTURE)

    series = coordinator.data or []
    return {
        "prices": {
            "base_url": coordinator.base_url,
            "display_zone": str(coordinator.display_zone),
            "price_zone": str(coordinator.price_zone),
            "status": str(coordinator.view_status()),
            "last_update_success": coordinator.last_update_success,
            "points": len(series),
            "first": series[0].timestamp.isoformat() if series else None,
            "last": series[-1].timestamp.isoformat() if series else None,
            "tomorrow_available": coordinator.tomorrow_available,
            "stale_deadline": (
                coordinator.stale_deadline.isoformat() if coordinator.stale_deadline else None
            ),
            "update_interval": (
                coordinator.update_interval.total_seconds() if coordinator.update_interval else None
            ),
        },
        "window": {
            "state": str(window.state),
            "first_timestamp": window.first_timestamp.isoformat() if window.first_timestamp else None,
            "live_timers": window.live_timers,
        },
        "logs": capture.records() if capture else [],
    }
