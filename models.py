# models.py
# Grid columns and the TimeEntry row record

import dataclasses
from enum import IntEnum
from typing import Any, Dict, Optional

from utils import duration_minutes, format_minutes, parse_time_field


class Column(IntEnum):
    """Editable grid columns, in display order."""
    TASK_NUMBER = 0
    WORK_CODE = 1
    DESCRIPTION = 2
    START_TIME = 3
    END_TIME = 4

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def field(self) -> str:
        """Name of the TimeEntry attribute backing this column."""
        return self.name.lower()

    @property
    def is_time(self) -> bool:
        return self in (Column.START_TIME, Column.END_TIME)


_LABELS = {
    Column.TASK_NUMBER: "Task Number",
    Column.WORK_CODE: "Work Code",
    Column.DESCRIPTION: "Time Entry",
    Column.START_TIME: "Start Time",
    Column.END_TIME: "End Time",
}

FIRST_COLUMN = Column.TASK_NUMBER
LAST_COLUMN = Column.END_TIME


@dataclasses.dataclass(frozen=True)
class TimeEntry:
    """One row of the grid. Times are minutes past midnight."""
    task_number: str = ""
    work_code: str = ""
    description: str = ""
    start_time: Optional[int] = None
    end_time: Optional[int] = None

    @property
    def duration(self) -> Optional[int]:
        return duration_minutes(self.start_time, self.end_time)

    def is_empty(self) -> bool:
        return not any(self.cell_text(column) for column in Column)

    def is_complete(self) -> bool:
        """All five fields are filled and the end is not before the start."""
        if not all(self.cell_text(column) for column in Column):
            return False
        return self.start_time <= self.end_time

    def format_duration(self) -> str:
        return format_minutes(self.duration)

    def cell_text(self, column: Column) -> str:
        value = getattr(self, column.field)
        if column.is_time:
            return format_minutes(value)
        return value

    def with_value(self, column: Column, text: str) -> 'TimeEntry':
        """Returns a copy with `text` committed into `column`.

        Time columns are parsed; an empty buffer clears the time. Raises
        InvalidTimeFormat without touching this entry.
        """
        if column.is_time:
            value = parse_time_field(text) if text.strip() else None
        else:
            value = text
        return dataclasses.replace(self, **{column.field: value})

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimeEntry':
        return cls(
            task_number=data.get('task_number') or "",
            work_code=data.get('work_code') or "",
            description=data.get('description') or "",
            start_time=data.get('start_time'),
            end_time=data.get('end_time'),
        )
