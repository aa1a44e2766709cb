from __future__ import annotations

#region models

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


@dataclass(frozen=True, slots=True)
class PricePoint:
    timestamp: datetime
    price: float


@dataclass(frozen=True, slots=True)
class PriceView:
    """Derived views handed to the entities."""

    all_prices: list[PricePoint]
    current_and_future_prices: list[PricePoint]
    day_average: float


class ViewStatus(StrEnum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"
