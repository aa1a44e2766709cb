from datetime import timedelta

#region constants

from homeassistant.const import Platform

#region _core
DOMAIN = "home_dashboard"
PLATFORMS: list[Platform] = [Platform.SENSOR, Platform.SWITCH, Platform.BUTTON]

DEFAULT_BASE_URL = "http://localhost:6001"
PRICES_PATH = "/api/electricity/prices"
FETCH_TIMEOUT_SECONDS = 20

CONF_BASE_URL = "base_url"
CONF_DISPLAY_TIMEZONE = "display_timezone"
CONF_PRICE_TIMEZONE = "price_timezone"

DEFAULT_DISPLAY_TIMEZONE = "Europe/Helsinki"
DEFAULT_PRICE_TIMEZONE = "Europe/Stockholm"

DATA_COORDINATOR = "coordinator"
DATA_WINDOW = "window"
DATA_UNSUB_LISTENER = "unsub_listener"
DATA_LOG_CAPTURE = "log_capture"

#region _schedule
# Day-ahead prices are published once a day at this wall-clock time in the display zone.
RELEASE_HOUR = 14
RELEASE_MINUTE = 0
PREFETCH_INTERVAL = timedelta(minutes=10)
WINDOW_REFRESH_INTERVAL = timedelta(minutes=1)

#region _views
CURRENT_AND_FUTURE_LIMIT = 24
DAY_AVERAGE_START_HOUR = 8
DAY_AVERAGE_END_HOUR = 24
DAY_AVERAGE_LABEL = "Day average"

LOG_CAPTURE_MAX_RECORDS = 200

#region _attrs
ATTR_ALL_PRICES = "all_prices"
ATTR_CURRENT_AND_FUTURE = "current_and_future_prices"
ATTR_DAY_AVERAGE = "day_average"
ATTR_WINDOW_START = "window_start"
ATTR_PRICE_LIST = "price_list"
ATTR_STATUS = "status"
ATTR_ERROR = "error"
ATTR_TOMORROW_AVAILABLE = "tomorrow_available"
ATTR_STALE_DEADLINE = "stale_deadline"
ATTR_POLL_INTERVAL = "poll_interval_minutes"
ATTR_RAW_SOURCE = "raw_source"
