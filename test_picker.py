from datetime import date, datetime

import pytest

from panel_state import Navigation
from picker import Picker, Shortcut
from picker_errors import ArityMismatch, DisabledSelectionRejected, InvalidDateInput, InvalidRange
from picker_settings import PickerConfig
from picker_types import CellTag, PanelType, PickerType, SelectionMode
from selection import EMPTY, Multi, RangePair, Single


class Recorder:
    def __init__(self):
        self.changes = []
        self.events = []
        self.errors = []

    def picker(self, config=None, value=None):
        return Picker(
            config,
            value,
            on_change=lambda v, tag: self.changes.append((v, tag)),
            on_open=lambda: self.events.append("open"),
            on_close=lambda: self.events.append("close"),
            on_confirm=lambda v: self.events.append(("confirm", v)),
            on_input_error=lambda text, err: self.errors.append((text, err)),
        )


@pytest.fixture
def rec():
    return Recorder()


def test_open_close_callbacks(rec):
    p = rec.picker(value=datetime(2021, 5, 20))
    assert p.open()
    assert not p.open()
    assert p.is_open
    assert p.panels.anchor == datetime(2021, 5, 1)
    assert p.close()
    assert not p.close()
    assert rec.events == ["open", "close"]


def test_disabled_picker_never_opens(rec):
    p = rec.picker(PickerConfig(disabled=True))
    assert not p.open()
    assert not p.is_open
    p.input_text("2021-01-01")
    assert p.commit_input() is None
    assert p.pick(datetime(2021, 1, 1)) is None
    assert p.apply_shortcut(Shortcut("Today", lambda: datetime(2021, 1, 1))) is None
    assert rec.changes == []
    assert rec.events == []


def test_single_pick_commits_and_closes(rec):
    p = rec.picker(value=datetime(2021, 5, 20))
    p.open()
    p.pick(datetime(2021, 5, 3))
    assert rec.changes == [(datetime(2021, 5, 3), "date")]
    assert p.value == Single(datetime(2021, 5, 3))
    assert not p.is_open
    assert p.text == "2021-05-03"


def test_multiple_stays_open(rec):
    p = rec.picker(PickerConfig(mode=SelectionMode.MULTIPLE), value=[])
    p.open()
    p.pick(datetime(2021, 5, 3))
    p.pick(datetime(2021, 5, 9))
    assert p.is_open
    assert rec.changes[-1] == ([datetime(2021, 5, 3), datetime(2021, 5, 9)], "date")
    p.pick(datetime(2021, 5, 3))
    assert rec.changes[-1] == ([datetime(2021, 5, 9)], "date")
    assert p.text == "2021-05-09"


def test_range_needs_two_picks(rec):
    p = rec.picker(PickerConfig(mode=SelectionMode.RANGE))
    assert p.to_external(p.value) == [None, None]
    p.open()
    p.pick(datetime(2021, 5, 20))
    assert rec.changes == []
    assert p.range_start == datetime(2021, 5, 20)
    p.pick(datetime(2021, 5, 10))
    assert rec.changes == [([datetime(2021, 5, 10), datetime(2021, 5, 20)], "date")]
    assert p.range_start is None
    assert not p.is_open
    assert p.summary() is not None and p.summary().days == 11


def test_month_panel_pick_does_not_close(rec):
    p = rec.picker(PickerConfig(default_panel=PanelType.MONTH), value=datetime(2021, 5, 20))
    p.open()
    outcome = p.pick(datetime(2021, 9, 1))
    assert not outcome.emitted
    assert p.is_open
    assert p.panels.panel is PanelType.DAY


def test_partial_update_commits_without_closing(rec):
    config = PickerConfig(default_panel=PanelType.YEAR, partial_update=True)
    p = rec.picker(config, value=datetime(2021, 5, 20))
    p.open()
    p.pick(datetime(2023, 1, 1))
    assert rec.changes == [(datetime(2023, 5, 20), "year")]
    assert p.is_open


def test_month_type_closes_on_month_pick(rec):
    p = rec.picker(PickerConfig(picker_type=PickerType.MONTH))
    p.open()
    p.pick(datetime(2021, 7, 1))
    assert rec.changes == [(datetime(2021, 7, 1), "month")]
    assert not p.is_open


def test_confirm_stages_until_confirmed(rec):
    p = rec.picker(PickerConfig(confirm=True), value=datetime(2021, 5, 20))
    p.open()
    p.pick(datetime(2021, 5, 3))
    assert rec.changes == []
    assert p.staged == Single(datetime(2021, 5, 3))
    assert p.value == Single(datetime(2021, 5, 20))
    grid = p.build_grid(today=datetime(2021, 5, 1))
    active = [c.date for c in grid.cells if c.has(CellTag.ACTIVE)]
    assert active == [datetime(2021, 5, 3)]
    p.confirm()
    assert rec.changes == [(datetime(2021, 5, 3), None)]
    assert rec.events[-2:] == ["close", ("confirm", datetime(2021, 5, 3))]


def test_reopening_discards_staged_value(rec):
    p = rec.picker(PickerConfig(confirm=True), value=datetime(2021, 5, 20))
    p.open()
    p.pick(datetime(2021, 5, 3))
    p.close()
    p.open()
    assert p.staged == Single(datetime(2021, 5, 20))


def test_disabled_pick_is_ignored(rec):
    config = PickerConfig(disabled_time=lambda d: d.day == 3)
    p = rec.picker(config, value=datetime(2021, 5, 20))
    p.open()
    outcome = p.pick(datetime(2021, 5, 3))
    assert outcome.error is not None
    assert rec.changes == []
    assert p.value == Single(datetime(2021, 5, 20))
    assert p.is_open


def test_shortcut(rec):
    p = rec.picker(PickerConfig(mode=SelectionMode.RANGE))
    p.open()
    week = Shortcut("This week", lambda: [datetime(2021, 5, 17), datetime(2021, 5, 23)])
    result = p.apply_shortcut(week)
    assert result.ok
    assert result.value == RangePair(datetime(2021, 5, 17), datetime(2021, 5, 23))
    assert rec.changes == [([datetime(2021, 5, 17), datetime(2021, 5, 23)], None)]
    assert not p.is_open
    assert p.apply_shortcut(Shortcut("Nothing", lambda: None)) is None
    assert len(rec.changes) == 1


def test_shortcut_range_in_reverse_order(rec):
    p = rec.picker(PickerConfig(mode=SelectionMode.RANGE))
    result = p.apply_shortcut(Shortcut("Last week", lambda: [datetime(2021, 5, 23), datetime(2021, 5, 17)]))
    assert result.ok
    assert p.value == RangePair(datetime(2021, 5, 17), datetime(2021, 5, 23))


def test_shortcut_plain_date(rec):
    p = rec.picker()
    result = p.apply_shortcut(Shortcut("Friday", lambda: date(2021, 5, 21)))
    assert result.ok
    assert rec.changes == [(datetime(2021, 5, 21), None)]


@pytest.mark.parametrize("mode,returned,error", [
    (SelectionMode.SINGLE, [datetime(2021, 5, 1), datetime(2021, 5, 2)], ArityMismatch),
    (SelectionMode.RANGE, [datetime(2021, 5, 1)], InvalidRange),
    (SelectionMode.MULTIPLE, [datetime(2021, 5, 1), "soon"], InvalidDateInput),
    (SelectionMode.SINGLE, 42, InvalidDateInput),
])
def test_unusable_shortcut_commits_nothing(rec, mode, returned, error):
    p = rec.picker(PickerConfig(mode=mode))
    result = p.apply_shortcut(Shortcut("Odd", lambda: returned))
    assert not result.ok
    assert isinstance(result.error, error)
    assert rec.changes == []


def test_shortcut_respects_disabled_dates(rec):
    p = rec.picker(PickerConfig(disabled_date=lambda d: d.day == 21), value=datetime(2021, 5, 20))
    result = p.apply_shortcut(Shortcut("Friday", lambda: datetime(2021, 5, 21)))
    assert isinstance(result.error, DisabledSelectionRejected)
    assert rec.changes == []
    assert p.value == Single(datetime(2021, 5, 20))


def test_clear(rec):
    p = rec.picker(value=datetime(2021, 5, 20))
    assert p.show_clear
    p.clear()
    assert p.value == EMPTY
    assert rec.changes == [(None, None)]
    assert not p.show_clear


def test_typed_input_commits(rec):
    p = rec.picker(PickerConfig(mode=SelectionMode.RANGE))
    p.focus()
    p.input_text("2021-05-01 ~ 2021-05-04")
    assert p.text == "2021-05-01 ~ 2021-05-04"
    result = p.commit_input()
    assert result.ok
    assert p.value == RangePair(datetime(2021, 5, 1), datetime(2021, 5, 4))
    assert rec.changes == [([datetime(2021, 5, 1), datetime(2021, 5, 4)], None)]


def test_typed_input_error_keeps_text(rec):
    p = rec.picker(value=datetime(2021, 5, 20))
    p.focus()
    p.input_text("20/05/2021")
    p.blur()
    assert rec.changes == []
    assert rec.errors[0][0] == "20/05/2021"
    assert isinstance(rec.errors[0][1], InvalidDateInput)
    assert p.value == Single(datetime(2021, 5, 20))
    assert p.text == "20/05/2021"
    assert not p.is_open


def test_empty_text_clears_value(rec):
    p = rec.picker(value=datetime(2021, 5, 20))
    p.input_text("")
    p.commit_input()
    assert p.value == EMPTY


def test_readonly_input_is_ignored(rec):
    p = rec.picker(PickerConfig(editable=False), value=datetime(2021, 5, 20))
    p.input_text("2021-01-01")
    assert p.text == "2021-05-20"


def test_set_value_drops_unfocused_edit(rec):
    p = rec.picker(value=datetime(2021, 5, 20))
    p.input_text("garbage")
    p.set_value(datetime(2022, 1, 1))
    assert p.text == "2022-01-01"
    assert rec.changes == []


def test_set_value_keeps_focused_edit(rec):
    p = rec.picker(value=datetime(2021, 5, 20))
    p.focus()
    p.input_text("2021-0")
    p.set_value(datetime(2022, 1, 1))
    assert p.text == "2021-0"
    assert p.staged == Single(datetime(2022, 1, 1))


def test_value_type_format(rec):
    p = rec.picker(PickerConfig(value_type="format", format="%d.%m.%Y"), value="20.05.2021")
    assert p.value == Single(datetime(2021, 5, 20))
    assert p.text == "20.05.2021"
    p.open()
    p.pick(datetime(2021, 5, 3))
    assert rec.changes == [("03.05.2021", "date")]


def test_value_type_pattern(rec):
    p = rec.picker(PickerConfig(value_type="%Y/%m/%d"), value="2021/05/20")
    p.open()
    p.pick(datetime(2021, 5, 3))
    assert rec.changes == [("2021/05/03", "date")]
    assert p.text == "2021-05-03"


def test_value_type_timestamp(rec):
    ts = int(datetime(2021, 5, 20).timestamp() * 1000)
    p = rec.picker(PickerConfig(value_type="timestamp"), value=ts)
    assert p.value == Single(datetime(2021, 5, 20))
    assert p.to_external(p.value) == ts


def test_out_of_range_timestamp_is_empty(rec):
    p = rec.picker(PickerConfig(value_type="timestamp"), value=10 ** 20)
    assert p.value == EMPTY
    p.set_value(-(10 ** 20))
    assert p.value == EMPTY


def test_plain_date_value(rec):
    p = rec.picker(value=date(2021, 5, 20))
    assert p.value == Single(datetime(2021, 5, 20))


def test_unusable_values_become_empty(rec):
    assert rec.picker(value="2021-05-20").value == EMPTY
    assert rec.picker(PickerConfig(mode=SelectionMode.RANGE),
                      value=[datetime(2021, 5, 2), datetime(2021, 5, 1)]).value == EMPTY
    multi = rec.picker(PickerConfig(mode=SelectionMode.MULTIPLE),
                       value=[datetime(2021, 5, 2), None, datetime(2021, 5, 2)])
    assert multi.value == Multi((datetime(2021, 5, 2),))


def test_navigation_and_grid(rec):
    p = rec.picker(value=datetime(2021, 5, 20))
    p.open()
    p.navigate(Navigation.NEXT_MONTH)
    grid = p.build_grid(today=datetime(2021, 6, 15))
    assert grid.labels == ("Jun", "2021")
    assert any(c.has(CellTag.TODAY) for c in grid.cells)
    p.set_panel(PanelType.YEAR)
    assert p.build_grid().labels == ("2020", "2029")
