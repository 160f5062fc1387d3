"""Round trip between a ValueSet and the text shown in the input field."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol

from picker_errors import (
    ArityMismatch,
    DisabledSelectionRejected,
    InvalidDateInput,
    InvalidRange,
    PickerError,
)
from picker_types import SelectionMode
from selection import (
    EMPTY,
    DisabledPredicate,
    RangePair,
    Single,
    ValueSet,
    is_valid_value,
    never_disabled,
    validate_range,
    value_set_from_dates,
)

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "%Y-%m-%d"
RANGE_SEPARATOR = " ~ "
LIST_SEPARATOR = ","


class Formatter(Protocol):
    def format(self, d: datetime, pattern: str) -> str: ...

    def parse(self, text: str, pattern: str) -> datetime | None: ...


class StrftimeFormatter:
    """Default formatter: ``strftime``/``strptime`` patterns."""

    def format(self, d: datetime, pattern: str) -> str:
        return d.strftime(pattern)

    def parse(self, text: str, pattern: str) -> datetime | None:
        try:
            return datetime.strptime(text, pattern)
        except ValueError:
            return None


class FunctionFormatter:
    """Adapt a pair of plain ``format``/``parse`` callables."""

    def __init__(self, format: Callable[[datetime, str], str],
                 parse: Callable[[str, str], datetime | None]) -> None:
        self._format = format
        self._parse = parse

    def format(self, d: datetime, pattern: str) -> str:
        return self._format(d, pattern)

    def parse(self, text: str, pattern: str) -> datetime | None:
        result = self._parse(text, pattern)
        return result if isinstance(result, datetime) else None


@dataclass(frozen=True)
class ParseResult:
    value: ValueSet | None
    error: PickerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TextCodec:
    """Serialize and parse values for one selection mode."""

    def __init__(
        self,
        mode: SelectionMode = SelectionMode.SINGLE,
        formatter: Formatter | None = None,
        pattern: str = DEFAULT_PATTERN,
        separator: str | None = None,
        is_disabled: DisabledPredicate = never_disabled,
        render_text: Callable[[ValueSet], str] | None = None,
    ) -> None:
        self.mode = mode
        self.formatter = formatter or StrftimeFormatter()
        self.pattern = pattern
        self._separator = separator
        self.is_disabled = is_disabled
        self.render_text = render_text

    @property
    def separator(self) -> str:
        if self._separator:
            return self._separator
        return RANGE_SEPARATOR if self.mode is SelectionMode.RANGE else LIST_SEPARATOR

    # ------------------------------------------------------------------
    # Serialize
    # ------------------------------------------------------------------
    def format_date(self, d: datetime) -> str:
        return self.formatter.format(d, self.pattern)

    def serialize(self, value: ValueSet) -> str:
        """Text for ``value``; empty for an empty or uncommittable value."""
        if self.render_text is not None:
            return self.render_text(value)
        if not value.dates or not is_valid_value(value, self.is_disabled):
            return ""
        return self.separator.join(self.format_date(d) for d in value.dates)

    # ------------------------------------------------------------------
    # Parse
    # ------------------------------------------------------------------
    def parse(self, text: str) -> ParseResult:
        """Parse typed text; on any failure nothing is applied."""
        try:
            return ParseResult(self.decode(text))
        except PickerError as exc:
            logger.info("rejected input %r: %s", text, exc.message)
            return ParseResult(None, exc)

    def decode(self, text: str) -> ValueSet:
        """Like :meth:`parse` but raises the ``PickerError`` instead."""
        stripped = text.strip()
        if stripped == "":
            return EMPTY
        if self.mode is SelectionMode.RANGE:
            start, end = self._split_range(stripped)
            try:
                return validate_range(RangePair(start, end), self.is_disabled)
            except InvalidRange as exc:
                raise InvalidDateInput(exc.message, text) from exc
            except DisabledSelectionRejected as exc:
                raise DisabledSelectionRejected(exc.message, text) from exc
        if self.mode is SelectionMode.MULTIPLE:
            value = value_set_from_dates(SelectionMode.MULTIPLE,
                                         [self._parse_piece(p, text) for p in self._split_list(stripped)])
        else:
            value = Single(self._parse_piece(stripped, text))
        self._check_enabled(value, text)
        return value

    def _parse_piece(self, piece: str, text: str) -> datetime:
        d = self.formatter.parse(piece.strip(), self.pattern)
        if d is None:
            raise InvalidDateInput(f"{piece.strip()!r} does not match {self.pattern!r}", text)
        return d

    def _check_enabled(self, value: ValueSet, text: str) -> None:
        for d in value.dates:
            if self.is_disabled(d):
                raise DisabledSelectionRejected(f"{self.format_date(d)} is disabled", text)

    def _split_list(self, text: str) -> list[str]:
        pieces = text.split(self.separator)
        trimmed = self.separator.strip()
        if len(pieces) == 1 and trimmed and trimmed != self.separator:
            pieces = text.split(trimmed)
        return pieces

    def _split_range(self, text: str) -> tuple[datetime, datetime]:
        """Find the two ends of a typed range.

        Tried in order: the exact separator, the separator without its
        padding, then every single punctuation character, keeping the first
        split whose halves both parse. The last step handles a date format
        that uses the separator character itself, e.g. ``2019-10-09-2020-01-02``.
        """
        sep = self.separator
        pieces = text.split(sep)
        if len(pieces) != 2:
            trimmed = sep.strip()
            if trimmed and trimmed != sep:
                pieces = text.split(trimmed)
        if len(pieces) == 2:
            return self._parse_piece(pieces[0], text), self._parse_piece(pieces[1], text)

        for i, ch in enumerate(text):
            if ch.isalnum() or ch.isspace() or i == 0 or i == len(text) - 1:
                continue
            left = self.formatter.parse(text[:i].strip(), self.pattern)
            right = self.formatter.parse(text[i + 1:].strip(), self.pattern)
            if left is not None and right is not None:
                logger.debug("range split at %d in %r", i, text)
                return left, right
        raise ArityMismatch(f"expected 2 dates separated by {sep!r}, got {len(pieces)} pieces", text)
