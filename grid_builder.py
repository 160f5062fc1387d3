"""Day, month and year grids with per-cell classification.

Grids are recomputed from scratch on every call; nothing is cached between
renders.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from calendar_logic import chunk, month_grid_rows, start_of_day, start_of_month, start_of_year, week_number
from picker_settings import PickerConfig
from picker_types import CellTag, PanelType, PickerType
from selection import RangePair, ValueSet


@dataclass(frozen=True)
class GridCell:
    date: datetime
    label: str
    tags: frozenset[str]
    title: str | None = None

    def has(self, tag: CellTag) -> bool:
        return tag.value in self.tags


@dataclass(frozen=True)
class GridRow:
    cells: tuple[GridCell, ...]
    week_number: int | None = None
    # whole-row highlight in week mode
    active: bool = False


@dataclass(frozen=True)
class Grid:
    panel: PanelType
    anchor: datetime
    labels: tuple[str, ...]
    weekdays: tuple[str, ...]
    rows: tuple[GridRow, ...]

    @property
    def cells(self) -> list[GridCell]:
        return [cell for row in self.rows for cell in row.cells]


# ------------------------------------------------------------------
# Classification
# ------------------------------------------------------------------
def _is_selected(cell: datetime, value: ValueSet, truncate) -> bool:
    if isinstance(value, RangePair):
        return truncate(value.start) <= cell <= truncate(value.end)
    return any(truncate(d) == cell for d in value.dates)


def _classify(cell: datetime, value: ValueSet, config: PickerConfig,
              truncate, tags: list[str]) -> frozenset[str]:
    """Add disabled/active, then caller classes; disabled cells are never active."""
    if config.is_disabled(cell):
        tags.append(CellTag.DISABLED.value)
    elif _is_selected(cell, value, truncate):
        tags.append(CellTag.ACTIVE.value)
    if config.get_classes is not None:
        extra = config.get_classes(cell, value.dates, frozenset(tags))
        tags.extend(t for t in extra if t not in tags)
    return frozenset(tags)


# ------------------------------------------------------------------
# Day panel
# ------------------------------------------------------------------
def build_day_rows(anchor: datetime, value: ValueSet, config: PickerConfig,
                   today: datetime | None = None) -> tuple[GridRow, ...]:
    """Six rows of seven days around ``anchor``'s month."""
    anchor = start_of_month(anchor)
    today = start_of_day(today or datetime.now())
    locale = config.locale
    selected = [start_of_day(d) for d in value.dates]

    rows: list[GridRow] = []
    for row in month_grid_rows(anchor.year, anchor.month, locale.first_day_of_week):
        cells = []
        for d in row:
            tags: list[str] = []
            if d == today:
                tags.append(CellTag.TODAY.value)
            if d.month != anchor.month:
                tags.append(CellTag.ADJACENT_MONTH.value)
            cells.append(GridCell(
                date=d,
                label=str(d.day),
                tags=_classify(d, value, config, start_of_day, tags),
                title=config.formatter.format(d, config.title_format),
            ))
        week_active = (config.picker_type is PickerType.WEEK
                       and any(row[0] <= v <= row[-1] for v in selected))
        rows.append(GridRow(
            cells=tuple(cells),
            week_number=week_number(row[0], locale.first_day_of_week,
                                    locale.first_week_contains_date),
            active=week_active,
        ))
    return tuple(rows)


# ------------------------------------------------------------------
# Month panel
# ------------------------------------------------------------------
def build_month_rows(anchor: datetime, value: ValueSet, config: PickerConfig) -> tuple[GridRow, ...]:
    """Twelve months of the anchor's year, three per row.

    Unless the picker selects months, the anchor's month only gets the
    decorative ``current`` tag: it is a navigation target, not a value.
    """
    cells = []
    for month in range(1, 13):
        d = datetime(anchor.year, month, 1)
        if config.picker_type is PickerType.MONTH:
            tags = _classify(d, value, config, start_of_month, [])
        else:
            tags = frozenset([CellTag.CURRENT.value]) if month == anchor.month else frozenset()
        cells.append(GridCell(date=d, label=config.locale.months_short[month - 1], tags=tags))
    return tuple(GridRow(cells=tuple(row)) for row in chunk(cells, 3))


# ------------------------------------------------------------------
# Year panel
# ------------------------------------------------------------------
def default_year_panel(anchor: datetime) -> list[list[int]]:
    """The decade containing ``anchor`` as two rows of five years."""
    first = anchor.year // 10 * 10
    return chunk(list(range(first, first + 10)), 5)


def year_panel(anchor: datetime, config: PickerConfig) -> list[list[int]]:
    panel = config.get_year_panel or default_year_panel
    return [list(row) for row in panel(anchor)]


def build_year_rows(anchor: datetime, value: ValueSet, config: PickerConfig) -> tuple[GridRow, ...]:
    rows = []
    for years in year_panel(anchor, config):
        cells = []
        for year in years:
            d = datetime(year, 1, 1)
            if config.picker_type is PickerType.YEAR:
                tags = _classify(d, value, config, start_of_year, [])
            else:
                tags = frozenset([CellTag.CURRENT.value]) if year == anchor.year else frozenset()
            cells.append(GridCell(date=d, label=str(year), tags=tags))
        rows.append(GridRow(cells=tuple(cells)))
    return tuple(rows)


# ------------------------------------------------------------------
# Headers
# ------------------------------------------------------------------
def weekday_headers(config: PickerConfig) -> tuple[str, ...]:
    return config.locale.ordered_weekdays()


def header_labels(panel: PanelType, anchor: datetime, config: PickerConfig) -> tuple[str, ...]:
    """Text of the header buttons for ``panel``."""
    locale = config.locale
    if panel is PanelType.YEAR:
        years = year_panel(anchor, config)
        return str(years[0][0]), str(years[-1][-1])
    year_label = config.formatter.format(anchor, locale.year_format)
    if panel is PanelType.MONTH:
        return (year_label,)
    month_label = locale.months_short[anchor.month - 1]
    if locale.month_before_year:
        return month_label, year_label
    return year_label, month_label


def build_grid(panel: PanelType, anchor: datetime, value: ValueSet, config: PickerConfig,
               today: datetime | None = None) -> Grid:
    """Build the grid for ``panel``; pure and safe to call on every render."""
    anchor = start_of_month(anchor)
    if panel is PanelType.YEAR:
        rows = build_year_rows(anchor, value, config)
        weekdays: tuple[str, ...] = ()
    elif panel is PanelType.MONTH:
        rows = build_month_rows(anchor, value, config)
        weekdays = ()
    else:
        rows = build_day_rows(anchor, value, config, today)
        weekdays = weekday_headers(config)
    return Grid(panel=panel, anchor=anchor, labels=header_labels(panel, anchor, config),
                weekdays=weekdays, rows=rows)
