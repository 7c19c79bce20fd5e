"""Tests for db.py: saving and loading a day's rows."""

import datetime
import sqlite3

import pytest

import db
from models import TimeEntry

DAY = datetime.date(2024, 3, 7)


def test_load_without_saved_rows_returns_one_empty_row(db_file):
    assert db.load_entries(DAY, db_file=db_file) == [TimeEntry()]


def test_save_then_load_round_trip(db_file, complete_entry):
    rows = [complete_entry, TimeEntry(), TimeEntry(description="half done", start_time=600)]
    db.save_entries(DAY, rows, db_file=db_file)
    assert db.load_entries(DAY, db_file=db_file) == rows


def test_save_replaces_previous_rows(db_file, complete_entry):
    db.save_entries(DAY, [complete_entry, complete_entry, complete_entry], db_file=db_file)
    db.save_entries(DAY, [TimeEntry(task_number="only")], db_file=db_file)
    assert db.load_entries(DAY, db_file=db_file) == [TimeEntry(task_number="only")]


def test_rows_are_keyed_by_date(db_file, complete_entry):
    db.save_entries(DAY, [complete_entry], db_file=db_file)
    other_day = DAY + datetime.timedelta(days=1)
    assert db.load_entries(other_day, db_file=db_file) == [TimeEntry()]
    db.save_entries(other_day, [TimeEntry(task_number="next")], db_file=db_file)
    assert db.load_entries(DAY, db_file=db_file) == [complete_entry]


def test_save_creates_schema_on_fresh_database(tmp_path, complete_entry):
    path = str(tmp_path / "fresh.db")
    db.save_entries(DAY, [complete_entry], db_file=path)
    assert db.load_entries(DAY, db_file=path) == [complete_entry]


def test_save_failure_raises(tmp_path, complete_entry):
    missing_dir = tmp_path / "no" / "such" / "dir" / "data.db"
    with pytest.raises(db.PersistenceWriteFailed):
        db.save_entries(DAY, [complete_entry], db_file=str(missing_dir))


def test_load_from_unreadable_database_falls_back(tmp_path):
    path = tmp_path / "broken.db"
    path.write_bytes(b"this is not a sqlite database" * 10)
    assert db.load_entries(DAY, db_file=str(path)) == [TimeEntry()]


def test_ensure_schema_creates_table(tmp_path):
    path = str(tmp_path / "schema.db")
    assert db.ensure_schema(path)
    conn = sqlite3.connect(path)
    try:
        tables = [r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")]
    finally:
        conn.close()
    assert tables == ["entry"]
