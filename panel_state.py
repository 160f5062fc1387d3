"""Active panel and navigation anchor, and how cell picks move them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from calendar_logic import (
    assign_time,
    get_valid_date,
    is_valid_date,
    set_month,
    set_year,
    shift_month,
    shift_year,
    start_of_day,
    start_of_month,
)
from picker_errors import DisabledSelectionRejected, PickerError
from picker_settings import PickerConfig
from picker_types import PanelType, PickerType
from selection import EMPTY, ValueSet, normalize_value, resolve_pick

logger = logging.getLogger(__name__)


class Navigation(Enum):
    """Header arrows: (unit, step)."""

    PREV_MONTH = ("month", -1)
    NEXT_MONTH = ("month", 1)
    PREV_YEAR = ("year", -1)
    NEXT_YEAR = ("year", 1)
    PREV_DECADE = ("year", -10)
    NEXT_DECADE = ("year", 10)


@dataclass(frozen=True)
class PanelState:
    panel: PanelType
    anchor: datetime


@dataclass(frozen=True)
class PickOutcome:
    """Result of one cell pick.

    ``value`` is the newly emitted value, or None when the pick only moved
    the panel (or was rejected, see ``error``). ``range_start`` holds the
    first end of a range that is still open.
    """

    state: PanelState
    value: ValueSet | None = None
    tag: str | None = None
    error: PickerError | None = None
    range_start: datetime | None = None

    @property
    def emitted(self) -> bool:
        return self.value is not None

    @property
    def panel(self) -> PanelType:
        return self.state.panel

    @property
    def anchor(self) -> datetime:
        return self.state.anchor


def initial_panel(picker_type: PickerType, default_panel: PanelType | None = None) -> PanelType:
    """The more zoomed-out of the type's panel and the requested one."""
    if default_panel is None:
        return picker_type.panel
    return max(picker_type.panel, default_panel)


def initial_anchor(value: ValueSet = EMPTY, calendar: datetime | None = None,
                   default_value: datetime | None = None) -> datetime:
    """Start of the month to show first.

    An explicit ``calendar`` wins, then the last selected date, then
    ``default_value``, then today.
    """
    if is_valid_date(calendar):
        return start_of_month(calendar)
    dates = value.dates
    return start_of_month(get_valid_date(dates[-1] if dates else None,
                                         default_value, start_of_day(datetime.now())))


def navigate(state: PanelState, step: Navigation) -> PanelState:
    unit, delta = step.value
    if unit == "month":
        anchor = shift_month(state.anchor, delta)
    else:
        anchor = shift_year(state.anchor, delta)
    return replace(state, anchor=start_of_month(anchor))


def transition(state: PanelState, cell_date: datetime, value: ValueSet, config: PickerConfig,
               range_start: datetime | None = None) -> PickOutcome:
    """Resolve a pick on the current panel without mutating anything."""
    current = normalize_value(value, config.picker_type)

    def emit(candidate: datetime, tag: str, next_state: PanelState) -> PickOutcome:
        try:
            result = resolve_pick(candidate, config.mode, current, config.is_disabled, range_start)
        except DisabledSelectionRejected as exc:
            logger.debug("pick of %s rejected: %s", candidate, exc.message)
            return PickOutcome(next_state, error=exc, range_start=range_start)
        if result is None:
            return PickOutcome(next_state, tag=tag, range_start=candidate)
        return PickOutcome(next_state, value=result, tag=tag)

    def partial(candidate: datetime, tag: str, next_state: PanelState) -> PickOutcome:
        if config.partial_update and len(current.dates) == 1:
            return emit(candidate, tag, next_state)
        return PickOutcome(next_state, range_start=range_start)

    if state.panel is PanelType.YEAR:
        picked = datetime(cell_date.year, 1, 1)
        if config.picker_type is PickerType.YEAR:
            return emit(picked, "year", replace(state, anchor=picked))
        next_state = PanelState(PanelType.MONTH, picked)
        logger.debug("year %d picked, switching to month panel", picked.year)
        if current.dates:
            return partial(set_year(current.dates[0], picked.year), "year", next_state)
        return PickOutcome(next_state, range_start=range_start)

    if state.panel is PanelType.MONTH:
        picked = datetime(cell_date.year, cell_date.month, 1)
        if config.picker_type is PickerType.MONTH:
            return emit(picked, "month", replace(state, anchor=picked))
        next_state = PanelState(PanelType.DAY, picked)
        logger.debug("month %s picked, switching to day panel", picked.strftime("%Y-%m"))
        if current.dates:
            derived = set_month(set_year(current.dates[0], picked.year), picked.month)
            return partial(derived, "month", next_state)
        return PickOutcome(next_state, range_start=range_start)

    picked = start_of_day(cell_date)
    if config.picker_type is PickerType.DATETIME and len(value.dates) == 1:
        picked = assign_time(picked, value.dates[0])
    tag = "week" if config.picker_type is PickerType.WEEK else "date"
    return emit(picked, tag, replace(state, anchor=start_of_month(picked)))


class PanelStateMachine:
    """Holds the panel and anchor between renders."""

    def __init__(self, config: PickerConfig, value: ValueSet = EMPTY,
                 calendar: datetime | None = None) -> None:
        self.config = config
        self.reset(value, calendar)

    def reset(self, value: ValueSet = EMPTY, calendar: datetime | None = None) -> None:
        """Back to the initial panel, anchored on ``value`` or ``calendar``."""
        current = normalize_value(value, self.config.picker_type)
        self.state = PanelState(
            initial_panel(self.config.picker_type, self.config.default_panel),
            initial_anchor(current, calendar, self.config.default_value),
        )

    @property
    def panel(self) -> PanelType:
        return self.state.panel

    @property
    def anchor(self) -> datetime:
        return self.state.anchor

    def set_panel(self, panel: PanelType) -> None:
        if panel is not self.state.panel:
            logger.debug("panel %s -> %s", self.state.panel.name, panel.name)
        self.state = replace(self.state, panel=panel)

    def set_anchor(self, d: datetime) -> None:
        self.state = replace(self.state, anchor=start_of_month(d))

    def navigate(self, step: Navigation) -> datetime:
        self.state = navigate(self.state, step)
        return self.state.anchor

    def pick(self, cell_date: datetime, value: ValueSet,
             range_start: datetime | None = None) -> PickOutcome:
        outcome = transition(self.state, cell_date, value, self.config, range_start)
        self.state = outcome.state
        return outcome
