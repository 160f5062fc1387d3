"""Holiday tables for Switzerland, Germany and the United States.

Used to build ``disabled_date`` predicates and cell titles.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Iterable, NamedTuple


def _easter(year: int) -> date:
    """Compute Easter Sunday (Anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    el = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * el) // 451
    month, day = divmod(h + el - 7 * m + 114, 31)
    return date(year, month, day + 1)


# --- date generators --------------------------------------------------------

def _fixed(m: int, d: int) -> Callable[[int], list[date]]:
    return lambda year: [date(year, m, d)]


def _easter_rel(offset: int) -> Callable[[int], list[date]]:
    return lambda year: [_easter(year) + timedelta(days=offset)]


def _nth_weekday(m: int, weekday: int, n: int) -> Callable[[int], list[date]]:
    """The n-th ``weekday`` (Monday = 0) of month ``m``; n = -1 is the last."""
    def fn(year: int) -> list[date]:
        if n > 0:
            first = date(year, m, 1)
            return [first + timedelta(days=(weekday - first.weekday()) % 7 + 7 * (n - 1))]
        last = date(year + (m == 12), m % 12 + 1, 1) - timedelta(days=1)
        return [last - timedelta(days=(last.weekday() - weekday) % 7)]
    return fn


class HolidayRule(NamedTuple):
    key: str
    name: str
    country: str
    dates: Callable[[int], list[date]]


RULES: tuple[HolidayRule, ...] = (
    # Switzerland
    HolidayRule("ch_neujahr", "Neujahr", "CH", _fixed(1, 1)),
    HolidayRule("ch_berchtoldstag", "Berchtoldstag", "CH", _fixed(1, 2)),
    HolidayRule("ch_karfreitag", "Karfreitag", "CH", _easter_rel(-2)),
    HolidayRule("ch_ostermontag", "Ostermontag", "CH", _easter_rel(1)),
    HolidayRule("ch_auffahrt", "Auffahrt", "CH", _easter_rel(39)),
    HolidayRule("ch_pfingstmontag", "Pfingstmontag", "CH", _easter_rel(49)),
    HolidayRule("ch_bundesfeier", "Bundesfeier", "CH", _fixed(8, 1)),
    HolidayRule("ch_weihnachten", "Weihnachten", "CH", _fixed(12, 25)),
    # Germany
    HolidayRule("de_neujahr", "Neujahr", "DE", _fixed(1, 1)),
    HolidayRule("de_karfreitag", "Karfreitag", "DE", _easter_rel(-2)),
    HolidayRule("de_ostermontag", "Ostermontag", "DE", _easter_rel(1)),
    HolidayRule("de_tag_der_arbeit", "Tag der Arbeit", "DE", _fixed(5, 1)),
    HolidayRule("de_christi_himmelfahrt", "Christi Himmelfahrt", "DE", _easter_rel(39)),
    HolidayRule("de_pfingstmontag", "Pfingstmontag", "DE", _easter_rel(49)),
    HolidayRule("de_tag_dt_einheit", "Tag der Deutschen Einheit", "DE", _fixed(10, 3)),
    HolidayRule("de_weihnachten1", "1. Weihnachtstag", "DE", _fixed(12, 25)),
    HolidayRule("de_weihnachten2", "2. Weihnachtstag", "DE", _fixed(12, 26)),
    # United States (federal)
    HolidayRule("us_new_year", "New Year's Day", "US", _fixed(1, 1)),
    HolidayRule("us_mlk_day", "Martin Luther King Jr. Day", "US", _nth_weekday(1, 0, 3)),
    HolidayRule("us_memorial_day", "Memorial Day", "US", _nth_weekday(5, 0, -1)),
    HolidayRule("us_independence_day", "Independence Day", "US", _fixed(7, 4)),
    HolidayRule("us_labor_day", "Labor Day", "US", _nth_weekday(9, 0, 1)),
    HolidayRule("us_thanksgiving", "Thanksgiving Day", "US", _nth_weekday(11, 3, 4)),
    HolidayRule("us_christmas", "Christmas Day", "US", _fixed(12, 25)),
)

_BY_KEY = {rule.key: rule for rule in RULES}

COUNTRIES: list[tuple[str, str]] = [
    ("CH", "Switzerland"),
    ("DE", "Germany"),
    ("US", "United States"),
]


def keys_for_country(country: str) -> list[str]:
    """Return every rule key of the given country code."""
    return [rule.key for rule in RULES if rule.country == country]


def holidays_for_year(year: int, keys: Iterable[str]) -> dict[date, list[tuple[str, str]]]:
    """Return {date: [(name, country), ...]} for the enabled rules in a year.

    Unknown keys are skipped.
    """
    result: dict[date, list[tuple[str, str]]] = {}
    for key in keys:
        rule = _BY_KEY.get(key)
        if rule is None:
            continue
        for d in rule.dates(year):
            result.setdefault(d, []).append((rule.name, rule.country))
    return result


def holiday_names(d: datetime | date, keys: Iterable[str]) -> list[str]:
    """Names of the enabled holidays falling on ``d``."""
    day = date(d.year, d.month, d.day)
    return [name for name, _country in holidays_for_year(day.year, keys).get(day, [])]


def disabled_on_holidays(keys: Iterable[str],
                         weekends: bool = False) -> Callable[[datetime], bool]:
    """Build a ``disabled_date`` predicate rejecting holidays (and weekends).

    Holiday tables are computed lazily per year and memoised in the closure.
    """
    enabled = tuple(keys)
    by_year: dict[int, set[date]] = {}

    def is_disabled(d: datetime) -> bool:
        if weekends and d.weekday() >= 5:
            return True
        days = by_year.get(d.year)
        if days is None:
            days = by_year[d.year] = set(holidays_for_year(d.year, enabled))
        return date(d.year, d.month, d.day) in days

    return is_disabled
