# Configuration settings for the timegrid application

import logging
import pathlib
import tomllib
from dataclasses import dataclass
from typing import Any, Dict, Optional

# --- Storage Configuration ---
DATA_DIR = pathlib.Path.home() / '.timegrid'
DATABASE_PATH = DATA_DIR / 'data.db'
CONFIG_PATH = DATA_DIR / 'config.toml'

# --- Logging Configuration ---
LOG_FILE_PATH = DATA_DIR / 'error.log'

# --- Export Configuration ---
DEFAULT_EXPORT_PATH = '~/Documents/timegrid_exports'
EXPORT_FILENAME_PREFIX = 'timegrid'
SUPPORTED_EXPORT_FORMATS = ('csv',)

# --- Backup Configuration ---
BACKUP_PATH = DATA_DIR / 'backups'
BACKUP_INTERVAL_DAYS = 1
BACKUP_KEEP = 10
LAST_BACKUP_TIMESTAMP_FILE = BACKUP_PATH / '.last_backup'

DEFAULT_CONFIG_TOML = f"""\
# timegrid configuration

[export]
# Directory for CSV exports; "~" expands to your home directory.
path = "{DEFAULT_EXPORT_PATH}"
format = "csv"

[ui]
show_instructions = true
auto_save = true
"""


class ConfigParseFailed(ValueError):
    """Raised when the config file cannot be read or has invalid values."""


@dataclass
class Config:
    export_path: pathlib.Path = pathlib.Path(DEFAULT_EXPORT_PATH).expanduser()
    export_format: str = 'csv'
    show_instructions: bool = True
    auto_save: bool = True


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigParseFailed(f"[{name}] must be a table")
    return value


def _flag(section: Dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigParseFailed(f"{key} must be true or false, got {value!r}")
    return value


def parse_config(text: str) -> Config:
    """Builds a Config from TOML text. Missing keys keep their defaults."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseFailed(f"Invalid TOML: {e}") from e

    export = _section(data, 'export')
    ui = _section(data, 'ui')

    path = export.get('path', DEFAULT_EXPORT_PATH)
    if not isinstance(path, str) or not path.strip():
        raise ConfigParseFailed(f"export.path must be a non-empty string, got {path!r}")

    export_format = export.get('format', 'csv')
    if not isinstance(export_format, str):
        raise ConfigParseFailed(f"export.format must be a string, got {export_format!r}")
    export_format = export_format.strip().lower()
    if export_format not in SUPPORTED_EXPORT_FORMATS:
        logging.warning(f"Unsupported export format '{export_format}', using csv.")
        export_format = 'csv'

    return Config(
        export_path=pathlib.Path(path.strip()).expanduser(),
        export_format=export_format,
        show_instructions=_flag(ui, 'show_instructions', True),
        auto_save=_flag(ui, 'auto_save', True),
    )


def load_config(path: Optional[pathlib.Path] = None) -> Config:
    """Loads the config file, falling back to defaults if it is missing or broken."""
    config_path = pathlib.Path(path) if path is not None else CONFIG_PATH
    if not config_path.exists():
        logging.info(f"No config at {config_path}, writing defaults.")
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            config_path.write_text(DEFAULT_CONFIG_TOML, encoding='utf-8')
        except OSError as e:
            logging.warning(f"Could not write default config to {config_path}: {e}")
        return Config()

    try:
        try:
            text = config_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigParseFailed(f"Cannot read {config_path}: {e}") from e
        config = parse_config(text)
    except ConfigParseFailed as e:
        logging.error(f"Config error, using defaults: {e}")
        return Config()

    logging.info(f"Loaded config from {config_path} (export path: {config.export_path})")
    return config
