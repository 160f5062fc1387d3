"""Pure calendar calculations, no UI dependencies.

Weekdays are numbered 0 = Sunday to 6 = Saturday throughout, the way locale
tables list them.
"""

from datetime import date, datetime, time, timedelta
from typing import Any, Sequence

from dateutil.relativedelta import relativedelta

GRID_ROWS = 6
GRID_COLS = 7


def js_weekday(d: date) -> int:
    """Return the weekday with Sunday as 0."""
    return (d.weekday() + 1) % 7


def is_valid_date(value: Any) -> bool:
    return isinstance(value, datetime)


def is_valid_dates(values: Any) -> bool:
    """True for a list/tuple whose members are all valid dates."""
    return isinstance(values, (list, tuple)) and all(is_valid_date(v) for v in values)


def is_valid_range(values: Any) -> bool:
    """True for exactly two valid dates ordered start <= end."""
    return (
        isinstance(values, (list, tuple))
        and len(values) == 2
        and is_valid_dates(values)
        and values[0] <= values[1]
    )


def to_datetime(value: Any) -> datetime | None:
    """Coerce a datetime, date, timestamp (ms) or ISO string; None if impossible."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def get_valid_date(*candidates: Any) -> datetime:
    """Return the first candidate that converts to a valid date, else now."""
    for candidate in candidates:
        if candidate is None:
            continue
        d = to_datetime(candidate)
        if d is not None:
            return d
    return datetime.now()


# ------------------------------------------------------------------
# Truncation
# ------------------------------------------------------------------
def start_of_day(d: datetime) -> datetime:
    return datetime.combine(d.date(), time())


def start_of_month(d: datetime) -> datetime:
    return datetime(d.year, d.month, 1)


def start_of_year(d: datetime) -> datetime:
    return datetime(d.year, 1, 1)


# ------------------------------------------------------------------
# Shifting (day-of-month clamped to the target month's length)
# ------------------------------------------------------------------
def shift_month(d: datetime, delta: int) -> datetime:
    """Add ``delta`` months; Jan 31 + 1 month is Feb 28/29, never March."""
    return d + relativedelta(months=delta)


def shift_year(d: datetime, delta: int) -> datetime:
    """Add ``delta`` years; Feb 29 lands on Feb 28 in a non-leap year."""
    return d + relativedelta(years=delta)


def set_month(d: datetime, month: int) -> datetime:
    """Replace the month (1-12), clamping the day."""
    return d + relativedelta(month=month)


def set_year(d: datetime, year: int) -> datetime:
    """Replace the year, clamping Feb 29."""
    return d + relativedelta(year=year)


def assign_time(target: datetime, source: datetime) -> datetime:
    """Return ``target`` with the time-of-day of ``source``."""
    return target.replace(hour=source.hour, minute=source.minute,
                          second=source.second, microsecond=0)


def month_distance(a: datetime, b: datetime) -> int:
    """Signed number of calendar months from ``a`` to ``b``."""
    return (b.year - a.year) * 12 + (b.month - a.month)


# ------------------------------------------------------------------
# Grids
# ------------------------------------------------------------------
def month_grid(year: int, month: int, first_day_of_week: int = 0) -> list[datetime]:
    """Return the 42 dates shown for a month.

    The grid starts on the most recent ``first_day_of_week`` on or before the
    1st and always runs into the following month, so every month renders as
    6 rows of 7 and the panel height stays constant.
    """
    if not 0 <= first_day_of_week <= 6:
        raise ValueError(f"first_day_of_week must be 0-6, got {first_day_of_week}")
    first = datetime(year, month, 1)
    lead = (js_weekday(first) - first_day_of_week) % 7
    start = first - timedelta(days=lead)
    return [start + timedelta(days=i) for i in range(GRID_ROWS * GRID_COLS)]


def chunk(items: Sequence, size: int) -> list[list]:
    """Split ``items`` into consecutive rows of ``size``."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def month_grid_rows(year: int, month: int, first_day_of_week: int = 0) -> list[list[datetime]]:
    """Return :func:`month_grid` as 6 rows of 7."""
    return chunk(month_grid(year, month, first_day_of_week), GRID_COLS)


def week_number(d: date, first_day_of_week: int = 1,
                first_week_contains_date: int = 4) -> int:
    """Return the week-of-year number of ``d``.

    Week 1 is the week (starting on ``first_day_of_week``) that contains
    January ``first_week_contains_date``. The defaults give ISO numbering.
    """
    day = date(d.year, d.month, d.day)

    def week_start(x: date) -> date:
        return x - timedelta(days=(js_weekday(x) - first_day_of_week) % 7)

    def first_week_start(year: int) -> date:
        return week_start(date(year, 1, first_week_contains_date))

    year = day.year
    if day >= first_week_start(year + 1):
        year += 1
    elif day < first_week_start(year):
        year -= 1
    return (week_start(day) - first_week_start(year)).days // 7 + 1
