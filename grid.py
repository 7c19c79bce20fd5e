# grid.py
# Editable grid state machine: cursor, edit buffer, navigation and auto-row creation

import dataclasses
import logging
import pathlib
from typing import Callable, NamedTuple, Optional, Sequence, Tuple, Union

from db import PersistenceWriteFailed
from export import ExportError
from models import Column, FIRST_COLUMN, LAST_COLUMN, TimeEntry
from utils import InvalidTimeFormat


# --- Modes ---
@dataclasses.dataclass(frozen=True)
class Navigation:
    """Moving between cells."""


@dataclasses.dataclass(frozen=True)
class Editing:
    """Typing into the active cell. `caret` is an index into `buffer`."""
    buffer: str = ""
    caret: int = 0

    @classmethod
    def load(cls, text: str) -> 'Editing':
        return cls(buffer=text, caret=len(text))

    def insert(self, text: str) -> 'Editing':
        buffer = self.buffer[:self.caret] + text + self.buffer[self.caret:]
        return Editing(buffer, self.caret + len(text))

    def backspace(self) -> 'Editing':
        if self.caret == 0:
            return self
        return Editing(self.buffer[:self.caret - 1] + self.buffer[self.caret:], self.caret - 1)

    def move_caret(self, position: int) -> 'Editing':
        return Editing(self.buffer, max(0, min(position, len(self.buffer))))


Mode = Union[Navigation, Editing]


# --- State ---
@dataclasses.dataclass(frozen=True)
class GridState:
    rows: Tuple[TimeEntry, ...]
    row: int = 0
    column: Column = FIRST_COLUMN
    mode: Mode = Navigation()

    def __post_init__(self):
        if not self.rows:
            raise ValueError("A grid always holds at least one row.")
        if not 0 <= self.row < len(self.rows):
            raise ValueError(f"Row {self.row} outside 0..{len(self.rows) - 1}")

    @classmethod
    def initial(cls, rows: Optional[Sequence[TimeEntry]] = None) -> 'GridState':
        return cls(rows=tuple(rows) if rows else (TimeEntry(),))

    @property
    def cursor(self) -> Tuple[int, Column]:
        return self.row, self.column

    @property
    def current_entry(self) -> TimeEntry:
        return self.rows[self.row]

    @property
    def is_editing(self) -> bool:
        return isinstance(self.mode, Editing)

    @property
    def edit_buffer(self) -> Optional[str]:
        return self.mode.buffer if isinstance(self.mode, Editing) else None


# --- Events and results ---
class KeyPress(NamedTuple):
    """A key in Textual's naming ("tab", "shift+tab", "ctrl+s", "a", ...)."""
    key: str
    character: Optional[str] = None


class Services(NamedTuple):
    """Side effects the grid triggers; both may raise."""
    save: Callable[[Sequence[TimeEntry]], None]
    export: Callable[[Sequence[TimeEntry]], pathlib.Path]
    auto_save: bool = True


class Outcome(NamedTuple):
    state: GridState
    message: Optional[str] = None
    severity: str = "information"
    quit: bool = False
    show_help: bool = False
    clipboard: Optional[str] = None


# --- Cursor movement ---
def _advance_row(state: GridState) -> GridState:
    """Moves to column 0 of the next row, appending one empty row if at the end."""
    rows = state.rows
    if state.row == len(rows) - 1:
        rows = rows + (TimeEntry(),)
        logging.debug(f"Auto-created row {len(rows)}")
    return dataclasses.replace(state, rows=rows, row=state.row + 1, column=FIRST_COLUMN)


def _next_cell(state: GridState) -> GridState:
    if state.column < LAST_COLUMN:
        return dataclasses.replace(state, column=Column(state.column + 1))
    return _advance_row(state)


def _previous_cell(state: GridState) -> GridState:
    if state.column > FIRST_COLUMN:
        return dataclasses.replace(state, column=Column(state.column - 1))
    if state.row == 0:
        return state
    return dataclasses.replace(state, row=state.row - 1, column=LAST_COLUMN)


def _move(state: GridState, d_row: int, d_col: int) -> GridState:
    row = max(0, min(state.row + d_row, len(state.rows) - 1))
    column = Column(max(FIRST_COLUMN, min(state.column + d_col, LAST_COLUMN)))
    return dataclasses.replace(state, row=row, column=column)


def _load_cell(state: GridState) -> GridState:
    """Puts the active cell's text into a fresh edit buffer."""
    return dataclasses.replace(state, mode=Editing.load(state.current_entry.cell_text(state.column)))


# --- Persistence helpers ---
def _save(state: GridState, services: Services) -> Outcome:
    try:
        services.save(state.rows)
    except PersistenceWriteFailed as e:
        logging.error(f"Save failed: {e}")
        return Outcome(state, f"Save failed: {e}", "error")
    return Outcome(state)


def flush(state: GridState, services: Services) -> Outcome:
    """Saves the rows regardless of auto-save; used before quitting."""
    return _save(state, services)


def copy_cell(state: GridState) -> Outcome:
    """Hands the active cell's text to the UI for the clipboard."""
    text = state.current_entry.cell_text(state.column)
    if not text:
        return Outcome(state, f"{state.column.label} is empty", "warning")
    return Outcome(state, f"{state.column.label} copied to clipboard!", clipboard=text)


def clear_all(state: GridState, services: Services) -> Outcome:
    """Replaces every row with one empty row and saves."""
    cleared = GridState.initial()
    logging.info(f"Cleared {len(state.rows)} row(s).")
    outcome = _save(cleared, services)
    return outcome if outcome.message else Outcome(cleared, "All entries cleared.")


def export_rows(state: GridState, services: Services) -> Outcome:
    try:
        path = services.export(state.rows)
    except ExportError as e:
        logging.error(f"Export failed: {e}")
        return Outcome(state, f"Export failed: {e}", "error")
    saved = _save(state, services)
    if saved.message:
        return Outcome(state, f"Exported to {path}. {saved.message}", "warning")
    return Outcome(state, f"Exported to {path}")


# --- Navigation mode ---
def _handle_navigation(state: GridState, event: KeyPress, services: Services) -> Outcome:
    key = event.key
    if key == "left":
        return Outcome(_move(state, 0, -1))
    if key == "right":
        return Outcome(_move(state, 0, 1))
    if key == "up":
        return Outcome(_move(state, -1, 0))
    if key == "down":
        return Outcome(_move(state, 1, 0))
    if key == "tab":
        return Outcome(_next_cell(state))
    if key == "shift+tab":
        return Outcome(_previous_cell(state))
    if key in ("i", "enter"):
        return Outcome(_load_cell(state))
    if key == "ctrl+s":
        return export_rows(state, services)
    if key == "ctrl+x":
        return clear_all(state, services)
    if key == "question_mark" or event.character == "?":
        return Outcome(state, show_help=True)
    if key == "ctrl+y":
        return copy_cell(state)
    if key == "q":
        saved = flush(state, services)
        if saved.message:
            return saved._replace(message=f"{saved.message} (ctrl+q quits anyway)")
        return saved._replace(quit=True)
    return Outcome(state)


# --- Editing mode ---
def _commit(state: GridState, services: Services, move: Callable[[GridState], GridState]) -> Outcome:
    """Writes the buffer into the active cell, moves, and loads the next cell."""
    try:
        entry = state.current_entry.with_value(state.column, state.edit_buffer)
    except InvalidTimeFormat as e:
        logging.warning(f"Rejected {state.column.label} at row {state.row + 1}: {e.text!r}")
        return Outcome(state, str(e), "error")

    rows = state.rows[:state.row] + (entry,) + state.rows[state.row + 1:]
    committed = dataclasses.replace(state, rows=rows)
    moved = _load_cell(move(committed))
    if not services.auto_save:
        return Outcome(moved)
    return _save(moved, services)


def _handle_editing(state: GridState, event: KeyPress, services: Services) -> Outcome:
    mode = state.mode
    key = event.key
    if key == "escape":
        return Outcome(dataclasses.replace(state, mode=Navigation()))
    if key == "tab":
        return _commit(state, services, _next_cell)
    if key == "shift+tab":
        return _commit(state, services, _previous_cell)
    if key == "enter":
        return _commit(state, services, _advance_row)
    if key == "backspace":
        return Outcome(dataclasses.replace(state, mode=mode.backspace()))
    if key == "left":
        return Outcome(dataclasses.replace(state, mode=mode.move_caret(mode.caret - 1)))
    if key == "right":
        return Outcome(dataclasses.replace(state, mode=mode.move_caret(mode.caret + 1)))
    if key == "home":
        return Outcome(dataclasses.replace(state, mode=mode.move_caret(0)))
    if key == "end":
        return Outcome(dataclasses.replace(state, mode=mode.move_caret(len(mode.buffer))))
    if event.character and event.character.isprintable() and len(event.character) == 1:
        return Outcome(dataclasses.replace(state, mode=mode.insert(event.character)))
    return Outcome(state)


def handle_event(state: GridState, event: KeyPress, services: Services) -> Outcome:
    """Applies one key press and returns the new state plus any status message."""
    if isinstance(state.mode, Editing):
        return _handle_editing(state, event, services)
    return _handle_navigation(state, event, services)
