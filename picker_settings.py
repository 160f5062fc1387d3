"""Picker configuration and JSON-based settings persistence."""

import json
import logging
import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Iterable

from holiday_rules import disabled_on_holidays
from locales import Locale, get_locale
from picker_types import PanelType, PickerType, SelectionMode
from selection import DisabledPredicate, ValueSet, never_disabled
from text_codec import DEFAULT_PATTERN, Formatter, StrftimeFormatter, TextCodec

logger = logging.getLogger(__name__)

_SETTINGS_PATH = os.path.join(os.path.expanduser("~"), ".datepicker-settings.json")

_DEFAULTS = {
    "type": "date",
    "mode": "single",
    "lang": "en",
    "format": DEFAULT_PATTERN,
    "value_type": "date",
    "separator": None,
    "default_panel": None,
    "first_day_of_week": None,
    "partial_update": False,
    "show_week_number": None,
    "confirm": False,
    "holidays": [],
    "disable_weekends": False,
}

_BOOL_KEYS = ("partial_update", "confirm", "disable_weekends")
_STR_KEYS = ("lang", "format", "value_type")
_ENUM_KEYS = {"type": PickerType, "mode": SelectionMode}

YearPanel = Callable[[datetime], list[list[int]]]
ExtraClasses = Callable[[datetime, tuple[datetime, ...], frozenset[str]], Iterable[str]]


@dataclass(frozen=True)
class PickerConfig:
    """Everything that shapes grids, picks and text for one picker."""

    picker_type: PickerType = PickerType.DATE
    mode: SelectionMode = SelectionMode.SINGLE
    locale: Locale = field(default_factory=get_locale)
    format: str = DEFAULT_PATTERN
    value_type: str = "date"  # "date" | "timestamp" | "format" | a pattern
    separator: str | None = None
    default_panel: PanelType | None = None
    partial_update: bool = False
    show_week_number: bool | None = None
    title_format: str = DEFAULT_PATTERN
    confirm: bool = False
    editable: bool = True
    clearable: bool = True
    disabled: bool = False
    disabled_date: DisabledPredicate = never_disabled
    disabled_time: DisabledPredicate = never_disabled
    get_year_panel: YearPanel | None = None
    get_classes: ExtraClasses | None = None
    render_text: Callable[[ValueSet], str] | None = None
    formatter: Formatter = field(default_factory=StrftimeFormatter)
    default_value: datetime | None = None

    @property
    def week_numbers_shown(self) -> bool:
        if self.show_week_number is None:
            return self.picker_type is PickerType.WEEK
        return self.show_week_number

    def is_disabled(self, d: datetime) -> bool:
        return self.disabled_date(d) or self.disabled_time(d)

    def text_codec(self) -> TextCodec:
        return TextCodec(
            mode=self.mode,
            formatter=self.formatter,
            pattern=self.format,
            separator=self.separator,
            is_disabled=self.is_disabled,
            render_text=self.render_text,
        )


def load_settings(path: str | None = None) -> dict:
    """Load settings from disk, returning defaults for missing or bad keys."""
    settings = {k: list(v) if isinstance(v, list) else v for k, v in _DEFAULTS.items()}
    path = path or _SETTINGS_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except FileNotFoundError:
        return settings
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("ignoring unreadable settings file %s: %s", path, exc)
        return settings
    if not isinstance(stored, dict):
        logger.warning("ignoring settings file %s: top level is not an object", path)
        return settings

    for key in _BOOL_KEYS:
        if isinstance(stored.get(key), bool):
            settings[key] = stored[key]
    for key in _STR_KEYS:
        if isinstance(stored.get(key), str):
            settings[key] = stored[key]
    for key, enum in _ENUM_KEYS.items():
        if isinstance(stored.get(key), str) and stored[key] in {e.value for e in enum}:
            settings[key] = stored[key]
    if isinstance(stored.get("separator"), str) and stored["separator"]:
        settings["separator"] = stored["separator"]
    panel = stored.get("default_panel")
    if isinstance(panel, str) and panel in ("day", "month", "year"):
        settings["default_panel"] = panel
    fdow = stored.get("first_day_of_week")
    if isinstance(fdow, int) and not isinstance(fdow, bool) and 0 <= fdow <= 6:
        settings["first_day_of_week"] = fdow
    if isinstance(stored.get("show_week_number"), bool):
        settings["show_week_number"] = stored["show_week_number"]
    if isinstance(stored.get("holidays"), list):
        settings["holidays"] = [k for k in stored["holidays"] if isinstance(k, str)]
    return settings


def save_settings(settings: dict, path: str | None = None) -> None:
    """Persist settings to disk."""
    with open(path or _SETTINGS_PATH, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)


def config_from_settings(settings: dict, **overrides: Any) -> PickerConfig:
    """Build a :class:`PickerConfig` from a settings dict.

    Keyword overrides win over the settings (used for callables, which
    cannot live in JSON).
    """
    locale = get_locale(settings.get("lang"))
    if settings.get("first_day_of_week") is not None:
        locale = replace(locale, first_day_of_week=settings["first_day_of_week"])

    holidays = settings.get("holidays") or []
    weekends = bool(settings.get("disable_weekends"))
    disabled_date: DisabledPredicate = never_disabled
    if holidays or weekends:
        disabled_date = disabled_on_holidays(holidays, weekends=weekends)

    panel = settings.get("default_panel")
    config = PickerConfig(
        picker_type=PickerType(settings.get("type", "date")),
        mode=SelectionMode(settings.get("mode", "single")),
        locale=locale,
        format=settings.get("format") or DEFAULT_PATTERN,
        value_type=settings.get("value_type") or "date",
        separator=settings.get("separator"),
        default_panel=PanelType[panel.upper()] if panel else None,
        partial_update=bool(settings.get("partial_update")),
        show_week_number=settings.get("show_week_number"),
        confirm=bool(settings.get("confirm")),
        disabled_date=disabled_date,
    )
    return replace(config, **overrides) if overrides else config
