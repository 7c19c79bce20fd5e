# db.py
# SQLite persistence for the day's grid rows

import datetime
import logging
import sqlite3
from typing import List, Optional, Sequence

# Import configuration constants
from config import DATABASE_PATH
from models import TimeEntry

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS entry (
    entry_date  TEXT    NOT NULL,
    position    INTEGER NOT NULL,
    task_number TEXT    NOT NULL DEFAULT '',
    work_code   TEXT    NOT NULL DEFAULT '',
    description TEXT    NOT NULL DEFAULT '',
    start_time  INTEGER,
    end_time    INTEGER,
    PRIMARY KEY (entry_date, position)
);
"""


class PersistenceWriteFailed(Exception):
    """Raised when the day's rows could not be written."""


# --- Connection ---
def create_connection(db_file: str = str(DATABASE_PATH)) -> Optional[sqlite3.Connection]:
    """Creates a database connection, or returns None if the file cannot be opened."""
    try:
        conn = sqlite3.connect(db_file)
        conn.row_factory = sqlite3.Row
        return conn
    except sqlite3.Error as e:
        logging.error(f'SQLite Error connecting to database {db_file}: {e}')
        return None


def ensure_schema(db_file: str = str(DATABASE_PATH)) -> bool:
    """Creates the entry table if needed. Returns False if the database is unusable."""
    conn = create_connection(db_file)
    if not conn:
        return False
    try:
        conn.executescript(SCHEMA_SQL)
        return True
    except sqlite3.Error as e:
        logging.error(f'Failed to create schema in {db_file}: {e}')
        return False
    finally:
        conn.close()


# --- Rows ---
def save_entries(entry_date: datetime.date, rows: Sequence[TimeEntry], db_file: str = str(DATABASE_PATH)) -> None:
    """Replaces everything stored for `entry_date` with `rows`, in one transaction."""
    conn = create_connection(db_file)
    if not conn:
        raise PersistenceWriteFailed(f'Cannot open database {db_file}')
    params = [
        (entry_date.isoformat(), position, e.task_number, e.work_code, e.description, e.start_time, e.end_time)
        for position, e in enumerate(rows)
    ]
    try:
        with conn:
            conn.execute(SCHEMA_SQL)
            conn.execute('DELETE FROM entry WHERE entry_date = ?', (entry_date.isoformat(),))
            conn.executemany(
                'INSERT INTO entry (entry_date, position, task_number, work_code, description, start_time, end_time) '
                'VALUES (?, ?, ?, ?, ?, ?, ?)',
                params,
            )
    except sqlite3.Error as e:
        logging.exception(f'Failed to save {len(rows)} row(s) for {entry_date}')
        raise PersistenceWriteFailed(str(e)) from e
    finally:
        conn.close()
    logging.debug(f'Saved {len(rows)} row(s) for {entry_date}')


def load_entries(entry_date: datetime.date, db_file: str = str(DATABASE_PATH)) -> List[TimeEntry]:
    """Returns the rows saved for `entry_date`, or a single empty row if there are none."""
    query = """
        SELECT task_number, work_code, description, start_time, end_time
        FROM entry
        WHERE entry_date = ?
        ORDER BY position
    """
    conn = create_connection(db_file)
    if not conn:
        return [TimeEntry()]
    try:
        rows = [TimeEntry.from_dict(dict(row)) for row in conn.execute(query, (entry_date.isoformat(),))]
    except sqlite3.Error as e:
        logging.error(f'Failed to load rows for {entry_date}: {e}')
        rows = []
    finally:
        conn.close()
    logging.info(f'Loaded {len(rows)} row(s) for {entry_date}')
    return rows or [TimeEntry()]
