# main.py
# Main entry point for the timegrid Textual application

import argparse
import datetime
import logging
import pathlib
import sys
from functools import partial
from typing import List, Optional

from textual.app import App

# Import configuration, utilities, db, export and the grid screen
import config
import db
import export
import utils
from grid import GridState, Services
from ui import GridScreen


class TimegridApp(App[None]):
    """Keyboard-driven daily time grid."""

    TITLE = "Timegrid"
    SUB_TITLE = "Daily Time Entries"

    def __init__(self, app_config: config.Config, day: datetime.date, db_file: str = str(config.DATABASE_PATH)):
        super().__init__()
        self.app_config = app_config
        self.day = day
        self.db_file = db_file
        self.grid_screen: Optional[GridScreen] = None

    def on_mount(self) -> None:
        """Called when the app is mounted."""
        logging.info("Timegrid App Mounted.")
        self.sub_title = f"Daily Time Entries - {self.day.isoformat()}"
        state = GridState.initial(db.load_entries(self.day, db_file=self.db_file))
        services = build_services(self.app_config, self.day, self.db_file)
        self.grid_screen = GridScreen(state, services, self.app_config)
        self.push_screen(self.grid_screen)

    async def action_quit(self) -> None:
        """Ctrl+Q: save whatever the grid holds, then exit even if the save failed."""
        if self.grid_screen is not None:
            self.grid_screen.flush()
        self.exit()


def build_services(app_config: config.Config, day: datetime.date, db_file: str = str(config.DATABASE_PATH)) -> Services:
    """Save and export bound to the session day and configured paths."""
    return Services(
        save=partial(db.save_entries, day, db_file=db_file),
        export=partial(export.export_csv, export_dir=app_config.export_path, day=day),
        auto_save=app_config.auto_save,
    )


def check_database(db_file: pathlib.Path = config.DATABASE_PATH) -> bool:
    """Makes sure the database directory and schema exist."""
    try:
        db_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logging.error(f'Cannot create data directory {db_file.parent}: {e}')
        return False
    if not db.ensure_schema(str(db_file)):
        logging.error(f'Database at {db_file} is not usable.')
        return False
    logging.info("Database check passed.")
    return True


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="timegrid", description="Terminal grid for daily time entries.")
    parser.add_argument("--config", type=pathlib.Path, default=None,
                        help=f"Path to the config file (default: {config.CONFIG_PATH})")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    utils.setup_logging()
    logging.info("--- Application Start ---")

    app_config = config.load_config(args.config)

    if not check_database():
        logging.critical("Database check failed. Exiting.")
        print(f"Cannot open the database at {config.DATABASE_PATH}; see {config.LOG_FILE_PATH}.", file=sys.stderr)
        sys.exit(1)

    utils.check_and_perform_backup()

    app = TimegridApp(app_config, datetime.date.today())
    app.run()
    logging.info("--- Application Finish ---")


if __name__ == "__main__":
    main()
