"""Tests for models.py: columns, completeness and committed values."""

import pytest

from models import Column, TimeEntry
from utils import InvalidTimeFormat


def test_column_order_and_labels():
    assert [c.label for c in Column] == ["Task Number", "Work Code", "Time Entry", "Start Time", "End Time"]
    assert Column.DESCRIPTION.field == "description"
    assert [c for c in Column if c.is_time] == [Column.START_TIME, Column.END_TIME]


def test_empty_entry():
    entry = TimeEntry()
    assert entry.is_empty()
    assert not entry.is_complete()
    assert entry.duration is None
    assert entry.format_duration() == ""


def test_complete_entry(complete_entry):
    assert complete_entry.is_complete()
    assert not complete_entry.is_empty()
    assert complete_entry.duration == 90
    assert complete_entry.format_duration() == "01:30"


def test_missing_field_is_incomplete(complete_entry):
    entry = complete_entry.with_value(Column.WORK_CODE, "")
    assert not entry.is_complete()
    assert not entry.is_empty()


def test_end_before_start_is_incomplete(complete_entry):
    entry = complete_entry.with_value(Column.END_TIME, "08:00")
    assert entry.duration is None
    assert entry.format_duration() == ""
    assert not entry.is_complete()


def test_cell_text_formats_times(complete_entry):
    assert complete_entry.cell_text(Column.TASK_NUMBER) == "PROJ-1"
    assert complete_entry.cell_text(Column.START_TIME) == "09:00"
    assert complete_entry.cell_text(Column.END_TIME) == "10:30"
    assert TimeEntry().cell_text(Column.START_TIME) == ""


def test_with_value_parses_time_columns():
    entry = TimeEntry().with_value(Column.START_TIME, "930")
    assert entry.start_time == 570
    assert entry.with_value(Column.START_TIME, "").start_time is None


def test_with_value_keeps_entry_on_invalid_time(complete_entry):
    with pytest.raises(InvalidTimeFormat):
        complete_entry.with_value(Column.START_TIME, "25:00")
    assert complete_entry.start_time == 540


def test_with_value_text_columns_store_raw_text():
    entry = TimeEntry().with_value(Column.DESCRIPTION, "  review, notes ")
    assert entry.description == "  review, notes "


def test_dict_round_trip(complete_entry):
    assert TimeEntry.from_dict(complete_entry.to_dict()) == complete_entry


def test_from_dict_fills_missing_keys():
    entry = TimeEntry.from_dict({"task_number": "T-9", "work_code": None})
    assert entry == TimeEntry(task_number="T-9")
