"""Start/end timestamps for prediction windows of each scope.

All boundaries are computed as local midnight / end-of-day in the given
timezone and returned as UTC ISO strings.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Any

import pytz

from prediction_core.settings import DEFAULT_TIMEZONE

SUPPORTED_SCOPES = ("daily", "weekly", "monthly", "yearly")
END_OF_DAY = time(23, 59, 59, 999000)


def _tz(timezone_name: str | None):
    return pytz.timezone(timezone_name or DEFAULT_TIMEZONE)


def _as_local_date(value: Any, timezone_name: str | None) -> date:
    tz = _tz(timezone_name)
    if value is None:
        return datetime.now(tz).date()
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz).date()
    if isinstance(value, date):
        return value
    raise ValueError(f"Unsupported date value: {value!r}")


def _iso_utc(day: date, at: time, timezone_name: str | None) -> str:
    local = _tz(timezone_name).localize(datetime.combine(day, at))
    return local.astimezone(pytz.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _window(start_day: date, end_day: date, timezone_name: str | None) -> dict[str, str]:
    return {
        "start_at": _iso_utc(start_day, time.min, timezone_name),
        "end_at": _iso_utc(end_day, END_OF_DAY, timezone_name),
    }


def get_daily_window_dates(value: Any = None, timezone_name: str | None = None) -> dict[str, str]:
    day = _as_local_date(value, timezone_name)
    return _window(day, day, timezone_name)


def get_weekly_window_dates(value: Any = None, timezone_name: str | None = None) -> dict[str, str]:
    """Seven inclusive days starting on the given day."""
    day = _as_local_date(value, timezone_name)
    return _window(day, day + timedelta(days=6), timezone_name)


def get_monthly_window_dates(value: Any = None, timezone_name: str | None = None) -> dict[str, str]:
    day = _as_local_date(value, timezone_name)
    last_day = calendar.monthrange(day.year, day.month)[1]
    return _window(day.replace(day=1), day.replace(day=last_day), timezone_name)


def get_yearly_window_dates(value: Any = None, timezone_name: str | None = None) -> dict[str, str]:
    """Rolling year: an int starts on Jan 1, a date starts on that date.

    2025-12-22 -> 2025-12-22 .. 2026-12-21 (end of day).
    """
    if isinstance(value, int) and not isinstance(value, bool):
        start = date(value, 1, 1)
    else:
        start = _as_local_date(value, timezone_name)
    try:
        next_year = start.replace(year=start.year + 1)
    except ValueError:
        # Feb 29 start rolls to Mar 1 of the following year.
        next_year = date(start.year + 1, 3, 1)
    return _window(start, next_year - timedelta(days=1), timezone_name)


def get_window_dates_for_scope(scope: str, value: Any = None, timezone_name: str | None = None) -> dict[str, str]:
    if scope == "daily":
        return get_daily_window_dates(value, timezone_name)
    if scope == "weekly":
        return get_weekly_window_dates(value, timezone_name)
    if scope == "monthly":
        return get_monthly_window_dates(value, timezone_name)
    if scope == "yearly":
        return get_yearly_window_dates(value, timezone_name)
    raise ValueError(f"Unsupported scope: {scope}. Supported scopes: {', '.join(SUPPORTED_SCOPES)}")
