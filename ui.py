# ui.py
# Textual screens: the editable time grid, help overlay and clear-all confirmation

import logging
from typing import List, Tuple

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Label, Static

import grid
from config import Config
from grid import GridState, Outcome, Services
from models import Column

NAVIGATION_HELP: List[Tuple[str, str]] = [
    ("Arrows", "Move between cells"),
    ("Tab / Shift+Tab", "Next / previous cell (Tab past the last row adds a row)"),
    ("i / Enter", "Edit the selected cell"),
    ("Ctrl+S", "Export today's rows to CSV"),
    ("Ctrl+X", "Clear all rows"),
    ("Ctrl+Y", "Copy the selected cell"),
    ("?", "Show this help"),
    ("q", "Save and quit"),
]

EDITING_HELP: List[Tuple[str, str]] = [
    ("Tab / Shift+Tab", "Save cell, move to next / previous cell"),
    ("Enter", "Save cell, move to the next row"),
    ("Esc", "Discard changes"),
    ("Left / Right / Home / End", "Move the text cursor"),
    ("Times", "HH:MM or HHMM, e.g. 09:30 or 0930"),
]

NAVIGATION_INSTRUCTIONS = "i/Enter edit | Tab next cell | Ctrl+S export | Ctrl+Y copy | Ctrl+X clear | ? help | q quit"
EDITING_INSTRUCTIONS = "Tab next cell | Enter next row | Esc cancel | times as HH:MM or HHMM"

NAVIGATION_STYLE = "bold black on cyan"
EDITING_STYLE = "bold black on yellow"


def render_cell(state: GridState, row_index: int, column: Column) -> Text:
    """Text for one cell; the active cell is bracketed and, while editing, shows the caret."""
    entry = state.rows[row_index]
    if (row_index, column) != state.cursor:
        return Text(entry.cell_text(column))
    if isinstance(state.mode, grid.Editing):
        buffer, caret = state.mode.buffer, state.mode.caret
        return Text(f"[{buffer[:caret]}|{buffer[caret:]}]", style=EDITING_STYLE)
    return Text(f"[{entry.cell_text(column)}]", style=NAVIGATION_STYLE)


def status_line(state: GridState) -> str:
    mode = "Editing" if state.is_editing else "Navigation"
    duration = state.current_entry.format_duration() or "--:--"
    return (f"{mode} | Row {state.row + 1}/{len(state.rows)} | {state.column.label}"
            f" | Task Time {duration}")


# --- Grid Widget ---
class GridTable(DataTable, can_focus=False):
    """Read-only view of the grid; keys are handled by the screen."""


# --- Help Modal ---
class HelpModal(ModalScreen[None]):
    """Lists the key bindings. Any key closes it."""

    DEFAULT_CSS = """
    HelpModal { align: center middle; }
    #help-dialog { width: 72; height: auto; border: thick $accent; background: $panel; padding: 1 2; }
    #help-dialog .help-title { text-style: bold; margin-top: 1; }
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="help-dialog"):
            yield Label("Navigation", classes="help-title")
            for key, text in NAVIGATION_HELP:
                yield Label(f"{key:<26}{text}")
            yield Label("Editing", classes="help-title")
            for key, text in EDITING_HELP:
                yield Label(f"{key:<26}{text}")
            yield Label("Press any key to close.", classes="help-title")

    def on_key(self, event: events.Key) -> None:
        event.stop()
        self.dismiss(None)


# --- Confirmation Modal ---
class ConfirmClearModal(ModalScreen[bool]):
    """Modal to confirm clearing every row."""

    DEFAULT_CSS = """
    ConfirmClearModal { align: center middle; }
    #confirm-dialog { width: 50; height: auto; border: thick $error; background: $panel; padding: 1 2; }
    #confirm-buttons { height: auto; margin-top: 1; }
    #confirm-buttons Button { margin-right: 2; }
    """

    def __init__(self, row_count: int, name: str | None = None, id: str | None = None, classes: str | None = None):
        super().__init__(name=name, id=id, classes=classes)
        self.row_count = row_count

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(f"Clear all {self.row_count} row(s)? (y/n)", id="confirm-question")
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes", variant="error", id="confirm-yes")
                yield Button("No", variant="primary", id="confirm-no")

    def on_mount(self) -> None:
        self.query_one("#confirm-no", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm-yes")

    def on_key(self, event: events.Key) -> None:
        if event.key in ("y", "Y"):
            event.stop()
            self.dismiss(True)
        elif event.key in ("n", "N", "escape"):
            event.stop()
            self.dismiss(False)


# --- Main Grid Screen ---
class GridScreen(Screen):
    """The day's time grid. Every key press goes through grid.handle_event."""

    DEFAULT_CSS = """
    #grid-container { height: 1fr; border: round $accent; }
    #status-bar { height: 1; background: $boost; padding: 0 1; }
    #instructions { height: 1; color: $text-muted; padding: 0 1; }
    """

    def __init__(self, state: GridState, services: Services, config: Config):
        super().__init__()
        self.state = state
        self.services = services
        self.config = config

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="grid-container"):
            yield GridTable(id="grid-table", cursor_type="cell", zebra_stripes=True)
        yield Static(status_line(self.state), id="status-bar")
        if self.config.show_instructions:
            yield Static(NAVIGATION_INSTRUCTIONS, id="instructions")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#grid-table", GridTable)
        table.add_column("#", key="row-number")
        for column in Column:
            table.add_column(column.label, key=column.field)
        self.refresh_grid()

    def refresh_grid(self) -> None:
        try:
            table = self.query_one("#grid-table", GridTable)
            table.clear()
            for index in range(len(self.state.rows)):
                marker = ">>" if index == self.state.row else str(index + 1)
                table.add_row(marker, *(render_cell(self.state, index, column) for column in Column))
            table.move_cursor(row=self.state.row, column=self.state.column + 1, animate=False)

            self.query_one("#status-bar", Static).update(status_line(self.state))
            if self.config.show_instructions:
                text = EDITING_INSTRUCTIONS if self.state.is_editing else NAVIGATION_INSTRUCTIONS
                self.query_one("#instructions", Static).update(text)
        except Exception as e:
            logging.exception("Error refreshing grid")
            self.notify(f"Error drawing grid: {e}", severity="error")

    def apply(self, outcome: Outcome) -> None:
        self.state = outcome.state
        self.refresh_grid()
        if outcome.message:
            self.notify(outcome.message, severity=outcome.severity, timeout=3 if outcome.severity == "information" else 5)
        if outcome.clipboard is not None:
            self.app.copy_to_clipboard(outcome.clipboard)
        if outcome.show_help:
            self.app.push_screen(HelpModal())
        if outcome.quit:
            logging.info("Quit requested; rows saved.")
            self.app.exit()

    def flush(self) -> None:
        """Saves the rows as they stand; called by the app before exiting."""
        outcome = grid.flush(self.state, self.services)
        if outcome.message:
            logging.error(f"Exiting with unsaved rows: {outcome.message}")

    def on_key(self, event: events.Key) -> None:
        if event.key == "ctrl+q":
            return
        event.stop()
        event.prevent_default()

        if event.key == "ctrl+x" and not self.state.is_editing:
            def check_confirm(confirmed: bool):
                if confirmed:
                    self.apply(grid.clear_all(self.state, self.services))
            self.app.push_screen(ConfirmClearModal(len(self.state.rows)), check_confirm)
            return

        self.apply(grid.handle_event(self.state, grid.KeyPress(event.key, event.character), self.services))
