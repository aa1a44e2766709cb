from __future__ import annotations

import logging
from datetime import datetime

import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.home_dashboard.const import (
    DATA_COORDINATOR,
    DATA_LOG_CAPTURE,
    DATA_WINDOW,
    DOMAIN,
)
from custom_components.home_dashboard.coordinator import (
    ElectricityPriceCoordinator,
    parse_price_series,
)
from custom_components.home_dashboard.diagnostics import async_get_config_entry_diagnostics
from custom_components.home_dashboard.log_capture import LogCapture
from custom_components.home_dashboard.window import WindowAdvancer
from tests.common import HELSINKI, STOCKHOLM, build_prices

NOW = datetime(2024, 5, 10, 13, 50, tzinfo=HELSINKI)


@pytest.fixture
def capture():
    log_capture = LogCapture(logger_name="custom_components.home_dashboard", max_records=3)
    yield log_capture
    log_capture.uninstall()


def test_capture_records_only_while_installed(capture, caplog) -> None:
    logger = logging.getLogger("custom_components.home_dashboard.coordinator")
    caplog.set_level(logging.DEBUG, logger=logger.name)

    logger.debug("before install")
    capture.install()
    capture.install()
    logger.warning("fetch failed with %s", 503)
    capture.uninstall()
    logger.warning("after uninstall")

    records = capture.records()
    assert [record["message"] for record in records] == ["fetch failed with 503"]
    assert records[0]["level"] == "WARNING"
    assert records[0]["logger"] == "custom_components.home_dashboard.coordinator"
    assert capture.installed is False


def test_capture_keeps_most_recent_records(capture, caplog) -> None:
    logger = logging.getLogger("custom_components.home_dashboard.window")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    capture.install()

    for index in range(5):
        logger.info("tick %d", index)

    assert [record["message"] for record in capture.records()] == ["tick 2", "tick 3", "tick 4"]


def test_capture_ignores_other_loggers(capture) -> None:
    capture.install()

    logging.getLogger("homeassistant.core").warning("unrelated")

    assert capture.records() == []


@pytest.mark.asyncio
async def test_diagnostics(hass, enable_custom_integrations, fake_timers, capture) -> None:
    entry = MockConfigEntry(domain=DOMAIN, unique_id=DOMAIN, title="Home Dashboard", data={})
    entry.add_to_hass(hass)
    coordinator = ElectricityPriceCoordinator(
        hass=hass,
        entry_id=entry.entry_id,
        base_url="http://prices.local:6001",
        display_zone=HELSINKI,
        price_zone=STOCKHOLM,
    )
    coordinator.async_set_updated_data(parse_price_series(build_prices(NOW, include_tomorrow=False)))
    window = WindowAdvancer(hass, HELSINKI)
    window._current_time = lambda: NOW
    window.start()
    capture.install()
    logging.getLogger("custom_components.home_dashboard.coordinator").error("price request failed")
    hass.data.setdefault(DOMAIN, {}).update(
        {
            DATA_LOG_CAPTURE: capture,
            entry.entry_id: {DATA_COORDINATOR: coordinator, DATA_WINDOW: window},
        }
    )

    diagnostics = await async_get_config_entry_diagnostics(hass, entry)
    window.stop()

    prices = diagnostics["prices"]
    assert prices["display_zone"] == "Europe/Helsinki"
    assert prices["price_zone"] == "Europe/Stockholm"
    assert prices["status"] == "ready"
    assert prices["points"] == 24
    assert prices["update_interval"] is None
    assert diagnostics["window"] == {
        "state": "waiting_for_hour_boundary",
        "first_timestamp": "2024-05-10T13:00:00+03:00",
        "live_timers": 1,
    }
    assert diagnostics["logs"][-1]["message"] == "price request failed"
