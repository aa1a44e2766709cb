from __future__ import annotations

#region projection

from collections.abc import Sequence
from datetime import datetime, tzinfo

from .const import (
    CURRENT_AND_FUTURE_LIMIT,
    DAY_AVERAGE_END_HOUR,
    DAY_AVERAGE_LABEL,
    DAY_AVERAGE_START_HOUR,
)
from .models import PricePoint, PriceView, ViewStatus


def current_and_future(
    series: Sequence[PricePoint],
    first_timestamp: datetime,
    limit: int = CURRENT_AND_FUTURE_LIMIT,
) -> list[PricePoint]:
    """Points at or after ``first_timestamp``, oldest first, at most ``limit`` of them.

    Fewer points come back when tomorrow's prices are not published yet.
    """
    selected = [point for point in series if point.timestamp >= first_timestamp]
    return selected[:limit]


def day_average(series: Sequence[PricePoint], price_zone: tzinfo) -> float:
    """Mean price over hours 08-23 (price zone) of the whole cached series, 0 when empty."""
    daytime = [
        point.price
        for point in series
        if DAY_AVERAGE_START_HOUR <= point.timestamp.astimezone(price_zone).hour < DAY_AVERAGE_END_HOUR
    ]
    if not daytime:
        return 0
    return sum(daytime) / len(daytime)


def project(series: Sequence[PricePoint], first_timestamp: datetime, price_zone: tzinfo) -> PriceView:
    return PriceView(
        all_prices=list(series),
        current_and_future_prices=current_and_future(series, first_timestamp),
        day_average=day_average(series, price_zone),
    )


def view_status(has_data: bool, last_update_success: bool) -> ViewStatus:
    if has_data:
        return ViewStatus.READY
    if last_update_success:
        return ViewStatus.LOADING
    return ViewStatus.ERROR


#region _labels
def format_price(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def price_list_entries(view: PriceView, display_zone: tzinfo) -> list[tuple[str, str]]:
    """Label/value pairs for the dashboard price list, day average last."""
    entries = [
        (str(point.timestamp.astimezone(display_zone).hour), format_price(point.price))
        for point in view.current_and_future_prices
    ]
    entries.append((DAY_AVERAGE_LABEL, format_price(view.day_average)))
    return entries
