"""Picker front: popup state, confirm staging, shortcuts and typed input.

The host owns the committed value. It pushes external values in with
:meth:`Picker.set_value` and receives new ones through ``on_change``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, NamedTuple, Sequence

from calendar_logic import to_datetime
from grid_builder import Grid, build_grid
from panel_state import Navigation, PanelStateMachine, PickOutcome
from picker_errors import ArityMismatch, DisabledSelectionRejected, InvalidDateInput, PickerError
from picker_settings import PickerConfig
from picker_types import PanelType, SelectionMode
from selection import (
    EMPTY,
    RangePair,
    RangeSummary,
    Single,
    ValueSet,
    range_summary,
    value_set_from_dates,
)
from text_codec import ParseResult

logger = logging.getLogger(__name__)


class Shortcut(NamedTuple):
    """Sidebar button; ``on_click`` returns a date, a list of dates, or None."""

    text: str
    on_click: Callable[[], date | Sequence[date] | None]


class Picker:
    """Composes grid, panel machine, resolver and codec for one input."""

    def __init__(
        self,
        config: PickerConfig | None = None,
        value: Any = None,
        on_change: Callable[[Any, str | None], None] | None = None,
        on_open: Callable[[], None] | None = None,
        on_close: Callable[[], None] | None = None,
        on_confirm: Callable[[Any], None] | None = None,
        on_input_error: Callable[[str, PickerError], None] | None = None,
    ) -> None:
        self.config = config or PickerConfig()
        self.codec = self.config.text_codec()
        self.on_change = on_change
        self.on_open = on_open
        self.on_close = on_close
        self.on_confirm = on_confirm
        self.on_input_error = on_input_error

        self._value: ValueSet = self.from_external(value)
        self._staged: ValueSet = self._value
        self._range_start: datetime | None = None
        self._open = False
        self._focused = False
        self._user_input: str | None = None
        self.panels = PanelStateMachine(self.config, self._value)

    # ------------------------------------------------------------------
    # Value boundary
    # ------------------------------------------------------------------
    def _to_date(self, raw: Any) -> datetime | None:
        value_type = self.config.value_type
        if value_type == "date":
            return to_datetime(raw) if isinstance(raw, date) else None
        if value_type == "timestamp":
            # out-of-range timestamps come back as None
            return to_datetime(raw) if isinstance(raw, (int, float)) else None
        if not isinstance(raw, str):
            return None
        pattern = self.config.format if value_type == "format" else value_type
        return self.config.formatter.parse(raw, pattern)

    def _from_date(self, d: datetime | None) -> Any:
        if d is None:
            return None
        value_type = self.config.value_type
        if value_type == "date":
            return d
        if value_type == "timestamp":
            return int(d.timestamp() * 1000)
        pattern = self.config.format if value_type == "format" else value_type
        return self.config.formatter.format(d, pattern)

    def from_external(self, raw: Any) -> ValueSet:
        """Convert a host value to a ValueSet; unusable input becomes empty."""
        mode = self.config.mode
        if mode is SelectionMode.RANGE:
            pair = [self._to_date(v) for v in raw[:2]] if isinstance(raw, (list, tuple)) else []
            if len(pair) == 2 and all(pair) and pair[0] <= pair[1]:
                return RangePair(pair[0], pair[1])
            return EMPTY
        if mode is SelectionMode.MULTIPLE:
            dates = [self._to_date(v) for v in raw] if isinstance(raw, (list, tuple)) else []
            return value_set_from_dates(mode, [d for d in dates if d is not None])
        d = self._to_date(raw)
        return Single(d) if d is not None else EMPTY

    def to_external(self, value: ValueSet) -> Any:
        """Convert a ValueSet to the host's value shape and ``value_type``."""
        mode = self.config.mode
        if mode is SelectionMode.RANGE:
            if isinstance(value, RangePair):
                return [self._from_date(value.start), self._from_date(value.end)]
            return [None, None]
        if mode is SelectionMode.MULTIPLE:
            return [self._from_date(d) for d in value.dates]
        dates = value.dates
        return self._from_date(dates[-1]) if dates else None

    @property
    def value(self) -> ValueSet:
        return self._value

    @property
    def staged(self) -> ValueSet:
        return self._staged

    def set_value(self, raw: Any) -> None:
        """Host pushes a new committed value.

        An unfocused edit in progress is dropped so the field shows the new
        value.
        """
        self._value = self.from_external(raw)
        if self._open:
            self._staged = self._value
        if not self._focused:
            self._user_input = None

    # ------------------------------------------------------------------
    # Popup
    # ------------------------------------------------------------------
    @property
    def is_open(self) -> bool:
        return self._open and not self.config.disabled

    def open(self) -> bool:
        if self.config.disabled or self._open:
            return False
        self._open = True
        self._staged = self._value
        self._range_start = None
        self.panels.reset(self._value)
        logger.debug("popup opened on %s", self.panels.anchor.strftime("%Y-%m"))
        if self.on_open:
            self.on_open()
        return True

    def close(self) -> bool:
        if not self._open:
            return False
        self._open = False
        self._range_start = None
        logger.debug("popup closed")
        if self.on_close:
            self.on_close()
        return True

    # ------------------------------------------------------------------
    # Calendar
    # ------------------------------------------------------------------
    def build_grid(self, today: datetime | None = None) -> Grid:
        return build_grid(self.panels.panel, self.panels.anchor, self._staged, self.config, today)

    def navigate(self, step: Navigation) -> datetime:
        return self.panels.navigate(step)

    def set_panel(self, panel: PanelType) -> None:
        self.panels.set_panel(panel)

    @property
    def range_start(self) -> datetime | None:
        """First end of a range pick still waiting for its second end."""
        return self._range_start

    def pick(self, cell_date: datetime) -> PickOutcome | None:
        """Handle a click on a grid cell; ignored while the picker is disabled."""
        if self.config.disabled:
            return None
        outcome = self.panels.pick(cell_date, self._staged, self._range_start)
        self._range_start = outcome.range_start
        if outcome.emitted:
            self._select(outcome.value, outcome.tag)
        return outcome

    def _select(self, value: ValueSet, tag: str | None) -> None:
        if self.config.confirm:
            self._staged = value
            return
        close = (self.config.mode is not SelectionMode.MULTIPLE
                 and tag in (self.config.picker_type.value, "time"))
        self.emit(value, tag, close)

    def emit(self, value: ValueSet, tag: str | None = None, close: bool = True) -> Any:
        """Commit ``value``, notify the host and optionally close the popup."""
        self._value = value
        self._staged = value
        external = self.to_external(value)
        logger.debug("commit %r (%s)", external, tag)
        if self.on_change:
            self.on_change(external, tag)
        if close:
            self.close()
        return external

    def confirm(self) -> Any:
        external = self.emit(self._staged)
        if self.on_confirm:
            self.on_confirm(external)
        return external

    def apply_shortcut(self, shortcut: Shortcut) -> ParseResult | None:
        """Commit what ``shortcut`` returns.

        None from the shortcut (or a disabled picker) does nothing. Unusable
        or vetoed dates commit nothing and come back in the result's
        ``error``.
        """
        if self.config.disabled:
            return None
        result = shortcut.on_click()
        if result is None:
            return None
        try:
            value = self._shortcut_value(result)
        except PickerError as exc:
            logger.info("shortcut %r rejected: %s", shortcut.text, exc.message)
            return ParseResult(None, exc)
        self.emit(value)
        return ParseResult(value)

    def _shortcut_value(self, result: Any) -> ValueSet:
        if isinstance(result, date):
            raw = [result]
        elif isinstance(result, (list, tuple)):
            raw = list(result)
        else:
            raise InvalidDateInput(f"not a date or list of dates: {result!r}")
        dates = [to_datetime(d) for d in raw]
        if any(d is None for d in dates):
            raise InvalidDateInput(f"not a date in {raw!r}")
        mode = self.config.mode
        if mode is SelectionMode.RANGE and len(dates) == 2:
            dates = [min(dates), max(dates)]
        try:
            value = value_set_from_dates(mode, dates)
        except ValueError as exc:
            raise ArityMismatch(str(exc)) from exc
        for d in value.dates:
            if self.config.is_disabled(d):
                raise DisabledSelectionRejected(f"{d:%Y-%m-%d} is disabled")
        return value

    def clear(self) -> Any:
        return self.emit(EMPTY)

    def summary(self) -> RangeSummary | None:
        return range_summary(self._staged)

    # ------------------------------------------------------------------
    # Typed input
    # ------------------------------------------------------------------
    @property
    def text(self) -> str:
        if self._user_input is not None:
            return self._user_input
        return self.codec.serialize(self._value)

    @property
    def show_clear(self) -> bool:
        return not self.config.disabled and self.config.clearable and bool(self.text)

    def focus(self) -> None:
        self._focused = True
        self.open()

    def blur(self) -> None:
        self._focused = False
        self.commit_input()
        self.close()

    def input_text(self, text: str) -> None:
        if self.config.editable and not self.config.disabled:
            self._user_input = text

    def commit_input(self) -> ParseResult | None:
        """Parse the pending edit (Enter or blur); a failure commits nothing."""
        if not self.config.editable or self._user_input is None:
            return None
        text = self._user_input
        result = self.codec.parse(text)
        if result.ok:
            self._user_input = None
            self.emit(result.value)
        elif self.on_input_error:
            self.on_input_error(text, result.error)
        return result
