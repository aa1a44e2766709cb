from __future__ import annotations

#region switch

from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DATA_COORDINATOR, DATA_WINDOW, DOMAIN
from .coordinator import ElectricityPriceCoordinator
from .window import WindowAdvancer


#region _setup
async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    stored = hass.data[DOMAIN][entry.entry_id]
    coordinator: ElectricityPriceCoordinator = stored[DATA_COORDINATOR]
    window: WindowAdvancer = stored[DATA_WINDOW]

    async_add_entities([DashboardVisibleSwitch(coordinator, window, entry)])


#region _visible
class DashboardVisibleSwitch(SwitchEntity):
    """Page-visibility signal for the dashboard.

    Turning it off freezes the display window and cancels its timers; turning
    it on snaps the window to the current hour and revalidates stale prices.
    """

    _attr_has_entity_name = True
    _attr_should_poll = False
    _attr_icon = "mdi:monitor-eye"
    _attr_translation_key = "dashboard_visible"

    def __init__(
        self,
        coordinator: ElectricityPriceCoordinator,
        window: WindowAdvancer,
        entry: ConfigEntry,
    ) -> None:
        self._coordinator = coordinator
        self._window = window
        self._entry = entry
        self._is_on = True
        self._attr_unique_id = f"{entry.entry_id}_dashboard_visible"
        self._attr_name = "Dashboard Visible"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name="Home Dashboard",
            manufacturer="Home Dashboard",
        )

    @property
    def is_on(self) -> bool:
        return self._is_on

    async def async_turn_on(self, **kwargs: Any) -> None:
        if self._is_on:
            return
        self._is_on = True
        self._window.on_visibility_change(True)
        await self._coordinator.async_refresh_if_stale()
        if self.entity_id and self.platform:
            self.async_write_ha_state()

    async def async_turn_off(self, **kwargs: Any) -> None:
        if not self._is_on:
            return
        self._is_on = False
        self._window.on_visibility_change(False)
        if self.entity_id and self.platform:
            self.async_write_ha_state()
