"""Shared test fixtures for timegrid tests."""

from __future__ import annotations

from pathlib import Path

import pytest

import db
from grid import Services
from models import TimeEntry


class Recorder:
    """Stands in for the save/export capabilities and remembers every call."""

    def __init__(self, save_error: Exception | None = None, export_error: Exception | None = None):
        self.saved: list[tuple[TimeEntry, ...]] = []
        self.exported: list[tuple[TimeEntry, ...]] = []
        self.save_error = save_error
        self.export_error = export_error

    def save(self, rows) -> None:
        if self.save_error:
            raise self.save_error
        self.saved.append(tuple(rows))

    def export(self, rows) -> Path:
        if self.export_error:
            raise self.export_error
        self.exported.append(tuple(rows))
        return Path("/exports/timegrid_2024-03-07.csv")

    def services(self, auto_save: bool = True) -> Services:
        return Services(save=self.save, export=self.export, auto_save=auto_save)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def services(recorder: Recorder) -> Services:
    return recorder.services()


@pytest.fixture
def db_file(tmp_path: Path) -> str:
    path = tmp_path / "data.db"
    assert db.ensure_schema(str(path))
    return str(path)


@pytest.fixture
def complete_entry() -> TimeEntry:
    return TimeEntry(
        task_number="PROJ-1",
        work_code="DEV",
        description="Grid navigation",
        start_time=9 * 60,
        end_time=10 * 60 + 30,
    )
