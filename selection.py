"""Committed selection values and the rules for changing them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, NamedTuple, Union

from calendar_logic import is_valid_date, start_of_day, start_of_month, start_of_year
from picker_errors import DisabledSelectionRejected, InvalidRange
from picker_types import PickerType, SelectionMode

logger = logging.getLogger(__name__)

DisabledPredicate = Callable[[datetime], bool]


def never_disabled(_d: datetime) -> bool:
    return False


# ------------------------------------------------------------------
# ValueSet
# ------------------------------------------------------------------
@dataclass(frozen=True)
class Empty:
    @property
    def dates(self) -> tuple[datetime, ...]:
        return ()


@dataclass(frozen=True)
class Single:
    date: datetime

    @property
    def dates(self) -> tuple[datetime, ...]:
        return (self.date,)


@dataclass(frozen=True)
class RangePair:
    start: datetime
    end: datetime

    @property
    def dates(self) -> tuple[datetime, ...]:
        return (self.start, self.end)

    def __contains__(self, d: datetime) -> bool:
        return self.start <= d <= self.end


@dataclass(frozen=True)
class Multi:
    """Distinct dates in insertion order."""

    items: tuple[datetime, ...]

    @property
    def dates(self) -> tuple[datetime, ...]:
        return self.items


ValueSet = Union[Empty, Single, RangePair, Multi]

EMPTY = Empty()


def value_set_from_dates(mode: SelectionMode, dates: Iterable[datetime | None]) -> ValueSet:
    """Shape a plain sequence of dates into the ValueSet for ``mode``.

    Raises ``ValueError`` for invalid members or a count the mode cannot
    hold, and ``InvalidRange`` for a half-set or reversed range.
    """
    items = list(dates)
    if mode is SelectionMode.RANGE:
        if not items or all(d is None for d in items):
            return EMPTY
        if len(items) != 2 or any(d is None for d in items):
            raise InvalidRange("a range needs both a start and an end")
        return validate_range(RangePair(items[0], items[1]))
    if any(not is_valid_date(d) for d in items):
        raise ValueError(f"not a valid date in {items!r}")
    if mode is SelectionMode.MULTIPLE:
        seen: dict[datetime, None] = {}
        for d in items:
            seen.setdefault(d, None)
        return Multi(tuple(seen)) if seen else EMPTY
    if len(items) > 1:
        raise ValueError(f"single selection holds at most one date, got {len(items)}")
    return Single(items[0]) if items else EMPTY


def validate_range(value: RangePair, is_disabled: DisabledPredicate = never_disabled) -> RangePair:
    """Return ``value`` if it is a committable range, else raise."""
    if not (is_valid_date(value.start) and is_valid_date(value.end)):
        raise InvalidRange("range ends must be dates")
    if value.start > value.end:
        raise InvalidRange(f"range start {value.start:%Y-%m-%d} is after end {value.end:%Y-%m-%d}")
    for d in value.dates:
        if is_disabled(d):
            raise DisabledSelectionRejected(f"{d:%Y-%m-%d} is disabled")
    return value


def is_valid_value(value: ValueSet, is_disabled: DisabledPredicate = never_disabled) -> bool:
    """True if every member is a date, not disabled, and ranges are ordered."""
    if isinstance(value, RangePair):
        try:
            validate_range(value, is_disabled)
        except (InvalidRange, DisabledSelectionRejected):
            return False
        return True
    return all(is_valid_date(d) and not is_disabled(d) for d in value.dates)


def truncate(d: datetime, picker_type: PickerType) -> datetime:
    """Truncate ``d`` to the granularity the picker type selects."""
    if picker_type is PickerType.YEAR:
        return start_of_year(d)
    if picker_type is PickerType.MONTH:
        return start_of_month(d)
    if picker_type is PickerType.DATETIME:
        return d
    return start_of_day(d)


def normalize_value(value: ValueSet, picker_type: PickerType) -> ValueSet:
    """Truncate every member of ``value`` for comparison against grid cells."""
    if isinstance(value, Single):
        return Single(truncate(value.date, picker_type))
    if isinstance(value, RangePair):
        return RangePair(truncate(value.start, picker_type), truncate(value.end, picker_type))
    if isinstance(value, Multi):
        return value_set_from_dates(SelectionMode.MULTIPLE,
                                    (truncate(d, picker_type) for d in value.items))
    return value


# ------------------------------------------------------------------
# Pick resolution
# ------------------------------------------------------------------
def resolve_pick(
    candidate: datetime,
    mode: SelectionMode,
    value: ValueSet,
    is_disabled: DisabledPredicate = never_disabled,
    range_start: datetime | None = None,
) -> ValueSet | None:
    """Return the value after picking ``candidate``.

    Raises ``DisabledSelectionRejected`` if the predicate vetoes the
    candidate. In range mode the first end is held by the caller: with no
    ``range_start`` the result is ``None`` (range still open); with one, the
    two ends are ordered and validated.
    """
    if is_disabled(candidate):
        raise DisabledSelectionRejected(f"{candidate:%Y-%m-%d} is disabled")

    if mode is SelectionMode.SINGLE:
        return Single(candidate)

    if mode is SelectionMode.MULTIPLE:
        current = value.dates
        kept = tuple(d for d in current if d != candidate)
        if len(kept) == len(current):
            kept += (candidate,)
            logger.debug("multiple: added %s", candidate)
        else:
            logger.debug("multiple: removed %s", candidate)
        return Multi(kept) if kept else EMPTY

    if range_start is None:
        return None
    lo, hi = min(range_start, candidate), max(range_start, candidate)
    return validate_range(RangePair(lo, hi), is_disabled)


# ------------------------------------------------------------------
# Range summary
# ------------------------------------------------------------------
class RangeSummary(NamedTuple):
    days: int
    weeks: int
    rest_days: int

    def describe(self) -> str:
        parts: list[str] = []
        if self.weeks:
            parts.append(f"{self.weeks} week{'s' if self.weeks != 1 else ''}")
        if self.rest_days:
            parts.append(f"{self.rest_days} day{'s' if self.rest_days != 1 else ''}")
        return f"{self.days} day{'s' if self.days != 1 else ''} ({', '.join(parts)})"


def range_summary(value: ValueSet) -> RangeSummary | None:
    """Inclusive length of a range; None for anything else."""
    if not isinstance(value, RangePair):
        return None
    total = (start_of_day(value.end) - start_of_day(value.start)).days + 1
    weeks, rest = divmod(total, 7)
    return RangeSummary(total, weeks, rest)
