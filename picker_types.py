"""Enums shared by the grid, panel and selection layers."""

from enum import Enum, IntEnum


class PanelType(IntEnum):
    """Grid views, ordered by zoom level."""

    DAY = 0
    MONTH = 1
    YEAR = 2


class PickerType(str, Enum):
    """What the picker as a whole selects."""

    DATE = "date"
    DATETIME = "datetime"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def panel(self) -> PanelType:
        """The panel this picker type commits from."""
        if self is PickerType.YEAR:
            return PanelType.YEAR
        if self is PickerType.MONTH:
            return PanelType.MONTH
        return PanelType.DAY


class SelectionMode(str, Enum):
    SINGLE = "single"
    RANGE = "range"
    MULTIPLE = "multiple"


class CellTag(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"
    TODAY = "today"
    ADJACENT_MONTH = "adjacent-month"
    # anchor month/year in a panel that is only navigated through
    CURRENT = "current"
