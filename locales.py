"""Locale objects and an optional read-only registry keyed by name."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class Locale:
    """Names and conventions the grids need; formatting itself is injected."""

    weekdays_short: tuple[str, ...]  # Sunday first
    months_short: tuple[str, ...]
    first_day_of_week: int = 0  # 0 = Sunday
    first_week_contains_date: int = 1
    year_format: str = "%Y"
    month_before_year: bool = True

    def __post_init__(self) -> None:
        if len(self.weekdays_short) != 7:
            raise ValueError("weekdays_short needs 7 names")
        if len(self.months_short) != 12:
            raise ValueError("months_short needs 12 names")
        if not 0 <= self.first_day_of_week <= 6:
            raise ValueError(f"first_day_of_week must be 0-6, got {self.first_day_of_week}")

    def ordered_weekdays(self) -> tuple[str, ...]:
        """Weekday names starting at ``first_day_of_week``."""
        days = self.weekdays_short + self.weekdays_short
        return days[self.first_day_of_week:self.first_day_of_week + 7]


EN = Locale(
    weekdays_short=("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa"),
    months_short=("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                  "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
)

DE = Locale(
    weekdays_short=("So", "Mo", "Di", "Mi", "Do", "Fr", "Sa"),
    months_short=("Jan", "Feb", "Mär", "Apr", "Mai", "Jun",
                  "Jul", "Aug", "Sep", "Okt", "Nov", "Dez"),
    first_day_of_week=1,
    first_week_contains_date=4,
)

FR = Locale(
    weekdays_short=("di", "lu", "ma", "me", "je", "ve", "sa"),
    months_short=("janv.", "févr.", "mars", "avr.", "mai", "juin",
                  "juil.", "août", "sept.", "oct.", "nov.", "déc."),
    first_day_of_week=1,
    first_week_contains_date=4,
)

ZH_CN = Locale(
    weekdays_short=("日", "一", "二", "三", "四", "五", "六"),
    months_short=tuple(f"{m}月" for m in range(1, 13)),
    first_day_of_week=1,
    first_week_contains_date=4,
    year_format="%Y年",
    month_before_year=False,
)

DEFAULT_LOCALE = "en"

LOCALES: Mapping[str, Locale] = MappingProxyType({
    "en": EN,
    "de": DE,
    "fr": FR,
    "zh-cn": ZH_CN,
})


def get_locale(name: str | None = None,
               registry: Mapping[str, Locale] = LOCALES) -> Locale:
    """Return the named locale, falling back to English for unknown names."""
    if name is None:
        return registry[DEFAULT_LOCALE]
    return registry.get(name.lower(), registry[DEFAULT_LOCALE])


def register_locale(name: str, locale: Locale,
                    registry: Mapping[str, Locale] = LOCALES) -> Mapping[str, Locale]:
    """Return a new registry with ``locale`` added; the input is untouched."""
    return MappingProxyType({**registry, name.lower(): locale})


def merge_locale(base: Locale, overrides: Mapping[str, Any]) -> Locale:
    """Return ``base`` with the given fields replaced.

    Unknown keys raise ``TypeError`` so typos are not silently dropped.
    """
    fields = {f.name for f in dataclasses.fields(Locale)}
    unknown = set(overrides) - fields
    if unknown:
        raise TypeError(f"unknown locale fields: {sorted(unknown)}")
    values = {k: tuple(v) if isinstance(v, list) else v for k, v in overrides.items()}
    return dataclasses.replace(base, **values)
