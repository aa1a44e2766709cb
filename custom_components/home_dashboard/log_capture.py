from __future__ import annotations

#region log_capture

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any

from .const import LOG_CAPTURE_MAX_RECORDS


class LogCapture(logging.Handler):
    """Keep the most recent log records of the integration for diagnostics.

    One instance exists per Home Assistant instance (stored under
    ``hass.data[DOMAIN]``). ``install`` attaches it to the package logger and
    is a no-op when already attached; ``uninstall`` detaches it again.
    """

    def __init__(
        self,
        logger_name: str = __package__,
        max_records: int = LOG_CAPTURE_MAX_RECORDS,
    ) -> None:
        super().__init__(level=logging.DEBUG)
        self._logger_name = logger_name
        self._records: deque[dict[str, Any]] = deque(maxlen=max_records)
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        if self._installed:
            return
        logging.getLogger(self._logger_name).addHandler(self)
        self._installed = True

    def uninstall(self) -> None:
        if not self._installed:
            return
        logging.getLogger(self._logger_name).removeHandler(self)
        self._installed = False

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            self.handleError(record)
            return
        self._records.append(
            {
                "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": message,
            }
        )

    def records(self) -> list[dict[str, Any]]:
        return list(self._records)
