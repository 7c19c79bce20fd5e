# utils.py
# Helper functions for time-field parsing, logging setup and database backups

import datetime
from dateutil.relativedelta import relativedelta
import pathlib
import re
import shutil
import logging
from typing import List, Optional

# Import configuration constants
from config import (
    DATABASE_PATH,
    BACKUP_PATH,
    LAST_BACKUP_TIMESTAMP_FILE,
    BACKUP_INTERVAL_DAYS,
    BACKUP_KEEP,
    LOG_FILE_PATH,
)

_COLON_TIME = re.compile(r'^(\d{1,2}):(\d{2})$', re.ASCII)
_DIGIT_TIME = re.compile(r'^\d{3,4}$', re.ASCII)


# --- Logging Setup ---
def setup_logging(log_file: pathlib.Path = LOG_FILE_PATH, level: int = logging.DEBUG):
    """Configures basic file logging."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
        filename=log_file,
        filemode='a'
    )
    logging.info("--- Logging initialized ---")


# --- Time Handling ---
class InvalidTimeFormat(ValueError):
    """Raised when a time cell does not hold HH:MM or HHMM."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid time '{text}'. Use HH:MM or HHMM.")


def parse_time_field(text: str) -> int:
    """Parses 'HH:MM', 'H:MM', 'HHMM' or 'HMM' into a minute-of-day (0-1439).

    '930' is read as 09:30. Raises InvalidTimeFormat for anything else,
    including out-of-range hours or minutes.
    """
    value = text.strip() if isinstance(text, str) else ''
    match = _COLON_TIME.match(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
    elif _DIGIT_TIME.match(value):
        padded = value.zfill(4)
        hours, minutes = int(padded[:2]), int(padded[2:])
    else:
        raise InvalidTimeFormat(text)

    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidTimeFormat(text)
    return hours * 60 + minutes


def format_minutes(minutes: Optional[int]) -> str:
    """Formats a minute count as HH:MM; None becomes an empty string."""
    if minutes is None:
        return ""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def duration_minutes(start: Optional[int], end: Optional[int]) -> Optional[int]:
    """Minutes from start to end, or None if either is unset or end is before start."""
    if start is None or end is None or end < start:
        return None
    return end - start


# --- Backup Logic ---
def _read_last_backup(stamp_file: pathlib.Path) -> Optional[datetime.datetime]:
    try:
        return datetime.datetime.fromisoformat(stamp_file.read_text(encoding='utf-8').strip())
    except (OSError, ValueError):
        return None


def backup_due(now: datetime.datetime,
               stamp_file: pathlib.Path = LAST_BACKUP_TIMESTAMP_FILE,
               interval_days: int = BACKUP_INTERVAL_DAYS) -> bool:
    """True if no backup was recorded or the last one is older than the interval."""
    last = _read_last_backup(stamp_file)
    if last is None:
        return True
    return last + relativedelta(days=interval_days) <= now


def prune_backups(backup_dir: pathlib.Path, keep: int = BACKUP_KEEP) -> List[pathlib.Path]:
    """Deletes all but the newest `keep` backups. Returns the removed paths."""
    backups = sorted(backup_dir.glob('data_*.db'), key=lambda p: p.name, reverse=True)
    removed = []
    for old in backups[keep:]:
        try:
            old.unlink()
            removed.append(old)
        except OSError as e:
            logging.warning(f"Could not remove old backup {old}: {e}")
    return removed


def check_and_perform_backup(db_file: pathlib.Path = DATABASE_PATH,
                             backup_dir: pathlib.Path = BACKUP_PATH,
                             stamp_file: pathlib.Path = LAST_BACKUP_TIMESTAMP_FILE,
                             now: Optional[datetime.datetime] = None) -> Optional[pathlib.Path]:
    """Copies the database into the backup directory if a backup is due.

    Returns the path of the new backup, or None when nothing was copied.
    Failures are logged and never raised.
    """
    now = now or datetime.datetime.now()
    if not db_file.exists():
        logging.info(f"No database at {db_file}; skipping backup.")
        return None
    if not backup_due(now, stamp_file):
        logging.debug("Backup not due yet.")
        return None

    target = backup_dir / f"data_{now.strftime('%Y%m%d_%H%M%S')}.db"
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(db_file, target)
        stamp_file.parent.mkdir(parents=True, exist_ok=True)
        stamp_file.write_text(now.isoformat(timespec='seconds'), encoding='utf-8')
    except OSError as e:
        logging.error(f"Backup of {db_file} failed: {e}")
        return None

    logging.info(f"Database backed up to {target}")
    prune_backups(backup_dir)
    return target
