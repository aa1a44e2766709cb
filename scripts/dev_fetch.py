#!/usr/bin/env python3
"""Fetch the dashboard electricity price series once for quick validation."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from typing import Any
from urllib import error, request

import voluptuous as vol

from custom_components.home_dashboard.const import (
    DEFAULT_BASE_URL,
    DEFAULT_DISPLAY_TIMEZONE,
    DEFAULT_PRICE_TIMEZONE,
)
from custom_components.home_dashboard.coordinator import (
    parse_price_series,
    price_request_url,
    resolve_zone,
)
from custom_components.home_dashboard.freshness import FreshnessPolicy, has_tomorrow
from custom_components.home_dashboard.projection import price_list_entries, project
from custom_components.home_dashboard.release_clock import start_of_hour


def _load_json_from_http(url: str, timeout: float) -> Any:
    req = request.Request(url, headers={"User-Agent": "home-dashboard-dev-fetch/0.1"})
    try:
        with request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
            charset = resp.headers.get_content_charset() or "utf-8"
    except error.HTTPError as err:  # pragma: no cover - passthrough for CLI feedback
        raise RuntimeError(f"HTTP error {err.code} for {url}") from err
    except error.URLError as err:
        raise RuntimeError(f"Network error fetching {url}: {err.reason}") from err

    text = raw.decode(charset, errors="replace")
    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        snippet = text[:120].replace("\n", " ")
        raise RuntimeError(f"Non-JSON response from {url}: {err} (snippet: {snippet!r})") from err


def format_dt(value: datetime | None) -> str:
    return value.isoformat() if value else "n/a"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="Dashboard API base URL")
    parser.add_argument("--display-timezone", default=DEFAULT_DISPLAY_TIMEZONE)
    parser.add_argument("--price-timezone", default=DEFAULT_PRICE_TIMEZONE)
    parser.add_argument("--timeout", type=float, default=15.0, help="HTTP timeout in seconds")

    args = parser.parse_args(argv)

    display_zone = resolve_zone(args.display_timezone)
    price_zone = resolve_zone(args.price_timezone)
    now = datetime.now(timezone.utc)
    url = price_request_url(args.base_url.rstrip("/"), display_zone, now)

    try:
        series = parse_price_series(_load_json_from_http(url, args.timeout))
    except (RuntimeError, vol.Invalid) as err:
        print(f"✗ {url}: {err}", file=sys.stderr)
        return 1

    first = series[0].timestamp if series else None
    last = series[-1].timestamp if series else None
    print(f"✓ {len(series)} prices, range {format_dt(first)} → {format_dt(last)}")

    policy = FreshnessPolicy(zone=display_zone)
    tomorrow = has_tomorrow(series, now, price_zone)
    interval = policy.should_poll(now, tomorrow)
    print(f"  tomorrow available: {tomorrow}")
    print(f"  fresh until: {format_dt(policy.stale_deadline(now))}")
    print(f"  polling: {interval if interval else 'off'}")

    view = project(series, start_of_hour(now, display_zone), price_zone)
    for label, value in price_list_entries(view, display_zone):
        print(f"  {label:>11}  {value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
