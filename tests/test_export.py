"""Tests for export.py: CSV content, file naming and failures."""

import csv
import datetime
import os
import stat

import pytest

import export
from models import TimeEntry

DAY = datetime.date(2024, 3, 7)


def read_csv(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_export_filename():
    assert export.export_filename(DAY) == "timegrid_2024-03-07.csv"


def test_empty_row_is_skipped_and_duration_rendered(tmp_path):
    rows = [TimeEntry(), TimeEntry("PROJ-1", "DEV", "Standup", 540, 630)]
    path = export.export_csv(rows, tmp_path, DAY)

    assert path == tmp_path / "timegrid_2024-03-07.csv"
    assert read_csv(path) == [
        export.CSV_HEADER,
        ["1", "PROJ-1", "DEV", "Standup", "09:00", "10:30", "01:30"],
    ]


def test_partial_rows_export_with_empty_cells(tmp_path):
    rows = [
        TimeEntry(task_number="A"),
        TimeEntry(),
        TimeEntry(description="late", start_time=17 * 60, end_time=16 * 60),
    ]
    data = read_csv(export.export_csv(rows, tmp_path, DAY))[1:]
    assert data == [
        ["1", "A", "", "", "", "", ""],
        ["2", "", "", "late", "17:00", "16:00", ""],
    ]


def test_description_with_commas_and_quotes(tmp_path):
    rows = [TimeEntry(description='Fix "grid", then test')]
    path = export.export_csv(rows, tmp_path, DAY)
    assert read_csv(path)[1][3] == 'Fix "grid", then test'
    assert path.read_text(encoding="utf-8").endswith("\n")


def test_reexport_overwrites_same_file(tmp_path):
    export.export_csv([TimeEntry(task_number="first")], tmp_path, DAY)
    export.export_csv([TimeEntry(task_number="second")], tmp_path, DAY)

    files = [p.name for p in tmp_path.iterdir()]
    assert files == ["timegrid_2024-03-07.csv"]
    assert read_csv(tmp_path / files[0])[1][1] == "second"


def test_export_creates_directory(tmp_path):
    target_dir = tmp_path / "nested" / "exports"
    path = export.export_csv([TimeEntry(task_number="x")], target_dir, DAY)
    assert path.parent == target_dir
    assert path.exists()


def test_export_directory_unavailable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(export.ExportDirectoryUnavailable):
        export.export_csv([TimeEntry(task_number="x")], blocker / "exports", DAY)


def test_export_write_failure(tmp_path):
    (tmp_path / "timegrid_2024-03-07.csv").mkdir()
    with pytest.raises(export.ExportWriteFailed):
        export.export_csv([TimeEntry(task_number="x")], tmp_path, DAY)
    assert not list(tmp_path.glob(".tmp_*"))


def test_export_errors_share_base_class():
    assert issubclass(export.ExportDirectoryUnavailable, export.ExportError)
    assert issubclass(export.ExportWriteFailed, export.ExportError)


def test_export_file_gets_umask_permissions(tmp_path):
    umask = os.umask(0o022)
    try:
        path = export.export_csv([TimeEntry(task_number="x")], tmp_path, DAY)
    finally:
        os.umask(umask)
    assert stat.S_IMODE(path.stat().st_mode) == 0o644
