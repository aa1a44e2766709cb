from __future__ import annotations

#region sensor

from collections.abc import Mapping, Sequence
from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    ATTR_ALL_PRICES,
    ATTR_CURRENT_AND_FUTURE,
    ATTR_DAY_AVERAGE,
    ATTR_ERROR,
    ATTR_POLL_INTERVAL,
    ATTR_PRICE_LIST,
    ATTR_RAW_SOURCE,
    ATTR_STALE_DEADLINE,
    ATTR_STATUS,
    ATTR_TOMORROW_AVAILABLE,
    ATTR_WINDOW_START,
    DATA_COORDINATOR,
    DATA_WINDOW,
    DOMAIN,
)
from .coordinator import ElectricityPriceCoordinator
from .models import PricePoint, PriceView
from .projection import price_list_entries
from .release_clock import start_of_hour
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

    async_add_entities(
        [
            ElectricityPriceSensor(coordinator, window, entry),
            ElectricityDayAverageSensor(coordinator, window, entry),
        ]
    )


#region _base
class HomeDashboardBaseSensor(CoordinatorEntity[ElectricityPriceCoordinator], SensorEntity):
    _attr_has_entity_name = True
    _attr_should_poll = False
    _attr_native_unit_of_measurement = "c/kWh"
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(
        self,
        coordinator: ElectricityPriceCoordinator,
        window: WindowAdvancer,
        entry: ConfigEntry,
    ) -> None:
        super().__init__(coordinator)
        self._window = window
        self._entry = entry
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name="Home Dashboard",
            manufacturer="Home Dashboard",
        )

    @property
    def available(self) -> bool:
        # Cached prices stay on display after a failed refresh; status carries the error.
        return True

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(self._window.async_add_listener(self._handle_window_update))

    @callback
    def _handle_window_update(self) -> None:
        self.async_write_ha_state()

    def _view(self) -> PriceView:
        first_timestamp = self._window.first_timestamp
        if first_timestamp is None:
            first_timestamp = start_of_hour(self.coordinator.current_time, self.coordinator.display_zone)
        return self.coordinator.build_view(first_timestamp)

    def _has_data(self) -> bool:
        return self.coordinator.data is not None

    @staticmethod
    def _build_price_attributes(series: Sequence[PricePoint]) -> list[Mapping[str, Any]]:
        return [
            {
                "timestamp": point.timestamp.isoformat(),
                "price": point.price,
            }
            for point in series
        ]


#region _price
class ElectricityPriceSensor(HomeDashboardBaseSensor):
    _attr_translation_key = "electricity_price"
    _attr_icon = "mdi:chart-bar"

    def __init__(
        self,
        coordinator: ElectricityPriceCoordinator,
        window: WindowAdvancer,
        entry: ConfigEntry,
    ) -> None:
        super().__init__(coordinator, window, entry)
        self._attr_unique_id = f"{entry.entry_id}_electricity_price"
        self._attr_name = "Electricity Price"

    @property
    def native_value(self) -> float | None:
        if not self._has_data():
            return None
        view = self._view()
        if not view.current_and_future_prices:
            return None
        first = view.current_and_future_prices[0]
        if first.timestamp != self._window.first_timestamp:
            return None
        return first.price

    @property
    def extra_state_attributes(self) -> Mapping[str, Any] | None:
        coordinator = self.coordinator
        attributes: dict[str, Any] = {
            ATTR_STATUS: str(coordinator.view_status()),
            ATTR_ERROR: not coordinator.last_update_success,
            ATTR_TOMORROW_AVAILABLE: coordinator.tomorrow_available,
            ATTR_STALE_DEADLINE: (
                coordinator.stale_deadline.isoformat() if coordinator.stale_deadline else None
            ),
            ATTR_POLL_INTERVAL: (
                int(coordinator.update_interval.total_seconds() // 60)
                if coordinator.update_interval
                else None
            ),
            ATTR_WINDOW_START: (
                self._window.first_timestamp.isoformat() if self._window.first_timestamp else None
            ),
            ATTR_RAW_SOURCE: coordinator.base_url,
        }
        if not self._has_data():
            return attributes

        view = self._view()
        attributes[ATTR_ALL_PRICES] = self._build_price_attributes(view.all_prices)
        attributes[ATTR_CURRENT_AND_FUTURE] = self._build_price_attributes(view.current_and_future_prices)
        attributes[ATTR_DAY_AVERAGE] = view.day_average
        attributes[ATTR_PRICE_LIST] = [
            {"label": label, "value": value}
            for label, value in price_list_entries(view, coordinator.display_zone)
        ]
        return attributes


#region _day_average
class ElectricityDayAverageSensor(HomeDashboardBaseSensor):
    _attr_translation_key = "day_average"
    _attr_icon = "mdi:chart-line-variant"

    def __init__(
        self,
        coordinator: ElectricityPriceCoordinator,
        window: WindowAdvancer,
        entry: ConfigEntry,
    ) -> None:
        super().__init__(coordinator, window, entry)
        self._attr_unique_id = f"{entry.entry_id}_day_average"
        self._attr_name = "Day Average"

    @property
    def native_value(self) -> float | None:
        if not self._has_data():
            return None
        return round(self._view().day_average, 2)
