# pocketbook/periods.py
"""
Helpers for turning "now" into concrete calendar windows.

Definitions
- window: an inclusive (start, end) pair of naive datetimes
- start is always 00:00:00.000 of its first day
- end is always 23:59:59.999 of its last day (millisecond precision)

Public API:
- start_of_day(dt) / end_of_day(dt)
- naive_local(dt) -> datetime              # aware input -> naive local time
- days_in_month(dt) -> int
- shift_months(dt, n) -> datetime          # day clamped to the target month
- month_window(now) -> (start, end)
- previous_month_window(now) -> (start, end)
- year_start(now) -> datetime
- six_month_lookback(now) -> datetime
- day_window(now) / week_window(now)       # week runs Sunday..Saturday
- budget_window(period, now)               # daily / weekly / monthly
- month_label(year, month) -> "Dec"
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Tuple, Union

from pocketbook.models import BudgetPeriod

Window = Tuple[datetime, datetime]

__all__ = [
    "Window",
    "start_of_day",
    "end_of_day",
    "naive_local",
    "days_in_month",
    "shift_months",
    "month_window",
    "previous_month_window",
    "year_start",
    "six_month_lookback",
    "day_window",
    "week_window",
    "budget_window",
    "get_now",
    "month_label",
]

# 23:59:59.999 rather than .999999 so windows match millisecond-precision clocks
_END_OF_DAY = time(23, 59, 59, 999000)


# ---------- Day boundaries ----------


def start_of_day(d: Union[date, datetime]) -> datetime:
    return datetime.combine(_as_date(d), time.min)


def end_of_day(d: Union[date, datetime]) -> datetime:
    return datetime.combine(_as_date(d), _END_OF_DAY)


def _as_date(d: Union[date, datetime]) -> date:
    return d.date() if isinstance(d, datetime) else d


def naive_local(dt: datetime) -> datetime:
    """Stored datetimes are naive local time; convert aware input to that."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


# ---------- Month arithmetic ----------


def days_in_month(d: Union[date, datetime]) -> int:
    """Number of days in d's month. Example: 2024-02-10 -> 29."""
    return calendar.monthrange(d.year, d.month)[1]


def shift_months(dt: datetime, months: int) -> datetime:
    """
    Move dt by whole months, keeping the time of day.
    The day is clamped to the target month (Mar 31 - 1 month -> Feb 28/29).
    """
    index = dt.year * 12 + (dt.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


# ---------- Windows ----------


def month_window(now: datetime) -> Window:
    """[1st 00:00:00.000, last day 23:59:59.999] of now's month."""
    first = now.date().replace(day=1)
    last = first.replace(day=days_in_month(first))
    return start_of_day(first), end_of_day(last)


def previous_month_window(now: datetime) -> Window:
    first_this_month = now.date().replace(day=1)
    return month_window(start_of_day(first_this_month - timedelta(days=1)))


def year_start(now: datetime) -> datetime:
    return datetime(now.year, 1, 1)


def six_month_lookback(now: datetime) -> datetime:
    """Rolling lookback: the same instant six months earlier."""
    return shift_months(now, -6)


def day_window(now: datetime) -> Window:
    return start_of_day(now), end_of_day(now)


def week_window(now: datetime) -> Window:
    """Sunday 00:00:00.000 through the following Saturday 23:59:59.999."""
    # weekday(): Monday=0 .. Sunday=6  ->  days since Sunday
    since_sunday = (now.weekday() + 1) % 7
    sunday = now.date() - timedelta(days=since_sunday)
    return start_of_day(sunday), end_of_day(sunday + timedelta(days=6))


def budget_window(period: Union[BudgetPeriod, str], now: datetime) -> Window:
    """Resolve a budget cadence to the window containing now."""
    period = BudgetPeriod(period)
    if period == BudgetPeriod.daily:
        return day_window(now)
    if period == BudgetPeriod.weekly:
        return week_window(now)
    return month_window(now)


def get_now() -> datetime:
    """FastAPI dependency for the request clock (overridden in tests)."""
    return datetime.now()


def month_label(year: int, month: int) -> str:
    """Short month name, e.g. (2025, 12) -> 'Dec'."""
    if month < 1 or month > 12:
        raise ValueError("Month must be 1-12")
    return calendar.month_abbr[month]
