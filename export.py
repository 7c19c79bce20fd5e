# export.py
# Writes the day's rows to a dated CSV file

import csv
import datetime
import logging
import os
import pathlib
import tempfile
from typing import List, Sequence

from config import EXPORT_FILENAME_PREFIX
from models import Column, TimeEntry

CSV_HEADER = ["Row", "Task Number", "Work Code", "Time Entry", "Start Time", "End Time", "Task Time"]


class ExportError(Exception):
    """Base class for recoverable export failures."""


class ExportDirectoryUnavailable(ExportError):
    pass


class ExportWriteFailed(ExportError):
    pass


def _default_file_mode() -> int:
    """0o666 less the process umask, the mode open() would give a new file."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def export_filename(day: datetime.date) -> str:
    """'timegrid_2024-03-07.csv' for 7 March 2024."""
    return f"{EXPORT_FILENAME_PREFIX}_{day.isoformat()}.csv"


def csv_records(rows: Sequence[TimeEntry]) -> List[List[str]]:
    """Data records for every row holding at least one value, numbered from 1."""
    records = []
    for entry in rows:
        if entry.is_empty():
            continue
        records.append([
            str(len(records) + 1),
            entry.task_number,
            entry.work_code,
            entry.description,
            entry.cell_text(Column.START_TIME),
            entry.cell_text(Column.END_TIME),
            entry.format_duration(),
        ])
    return records


def export_csv(rows: Sequence[TimeEntry], export_dir: pathlib.Path, day: datetime.date) -> pathlib.Path:
    """Writes `rows` to <export_dir>/<export_filename(day)>, replacing any earlier export.

    Raises ExportDirectoryUnavailable or ExportWriteFailed; the caller keeps its rows either way.
    """
    export_dir = pathlib.Path(export_dir).expanduser()
    try:
        export_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportDirectoryUnavailable(f"Cannot create {export_dir}: {e.strerror or e}") from e

    target = export_dir / export_filename(day)
    records = csv_records(rows)
    temp_name = None
    try:
        fd, temp_name = tempfile.mkstemp(dir=export_dir, prefix=".tmp_", suffix=".csv")
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(CSV_HEADER)
            writer.writerows(records)
        os.chmod(temp_name, _default_file_mode())
        os.replace(temp_name, target)
    except OSError as e:
        if temp_name and os.path.exists(temp_name):
            os.unlink(temp_name)
        raise ExportWriteFailed(f"Cannot write {target}: {e.strerror or e}") from e

    logging.info(f"Exported {len(records)} row(s) to {target}")
    return target
