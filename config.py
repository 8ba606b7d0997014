"""
Configuration and constants for the travel ledger extractor.

This module provides:
- Default markers, windows and keywords used by the extraction pipeline
- Support for user-configurable settings via environment variables
- Loading overrides from YAML files
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# =============================================================================
# Date Formats
# =============================================================================

# Supported date formats in order of preference
DATE_FORMATS: List[str] = [
    "%d/%m/%Y",      # DD/MM/YYYY
    "%Y-%m-%d",      # YYYY-MM-DD (ISO format)
    "%d-%m-%Y",      # DD-MM-YYYY
    "%d/%m/%y",      # DD/MM/YY
    "%d-%m-%y",      # DD-MM-YY
    "%Y/%m/%d",      # YYYY/MM/DD
    "%d %b %Y",      # DD MMM YYYY (like "15 Jan 2025")
    "%d-%b-%Y",      # DD-MMM-YYYY (like "15-Jan-2025")
    "%d %B %Y",      # DD Month YYYY (like "15 January 2025")
    "%d.%m.%Y",      # DD.MM.YYYY
]

# =============================================================================
# Layout Detection
# =============================================================================

# Filename fragment that marks a raw ledger export
RAW_FILENAME_MARKER: str = "raw"

# Leading-cell markers written by ledger/bank exporters
RAW_LEDGER_MARKERS: List[str] = [
    "All Ledgers",
    "TRAVELS",
    "Statement Period",
]

# Both layouts start with a fixed block of title rows
HEADER_ROWS_TO_SKIP: int = 3

# Rows (after the title block) searched for an opening balance
RAW_PREAMBLE_WINDOW: int = 10
STANDARD_PREAMBLE_WINDOW: int = 5

# =============================================================================
# Row Keywords
# =============================================================================

# Either keyword marks a candidate opening-balance row
OPENING_BALANCE_KEYWORDS: List[str] = [
    "opening",
    "balance",
]

# All of these together mark a repeated column header
HEADER_ECHO_KEYWORDS: List[str] = [
    "date",
    "voucher",
    "narration",
]

# Any of these marks a summary row
SKIP_ROW_KEYWORDS: List[str] = [
    "total",
]

# A data row needs at least this many populated cells
MIN_POPULATED_CELLS: int = 4

# Marker in the overloaded 5th ledger column
SALES_MARKER: str = "SALES"

# Honorifics stripped from customer names
TITLE_PREFIXES: List[str] = ["MR", "MRS", "MISS", "MS"]

# =============================================================================
# Reader Settings
# =============================================================================

# Rows pulled from the worksheet per window
READ_CHUNK_SIZE: int = int(os.environ.get("READ_CHUNK_SIZE", "1000"))

FILE_ENCODINGS: List[str] = [
    "utf-8-sig",      # Excel CSV with BOM
    "utf-8",
    "cp1252",
    "iso-8859-1",
]

# =============================================================================
# Upload Limits
# =============================================================================

ALLOWED_EXTENSIONS: List[str] = [".csv", ".xls", ".xlsx"]

MAX_UPLOAD_BYTES: int = int(os.environ.get("MAX_FILE_SIZE", str(10 * 1024 * 1024)))

# =============================================================================
# Application Info
# =============================================================================

APP_NAME: str = "Travel Ledger Extractor"
APP_VERSION: str = "1.0.0"


# =============================================================================
# Flexible Configuration System
# =============================================================================

class Config:
    """
    Flexible configuration manager that supports:
    - Environment variables
    - Custom YAML configuration files
    - Runtime overrides
    """

    _instance: Optional["Config"] = None
    _settings: Dict[str, Any] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load_defaults()
            cls._instance._load_custom_config()
        return cls._instance

    def _load_defaults(self) -> None:
        """Load default settings."""
        self._settings = {
            # Reader settings
            "read_chunk_size": READ_CHUNK_SIZE,

            # Upload settings
            "max_upload_bytes": MAX_UPLOAD_BYTES,

            # Logging
            "log_level": os.environ.get("LOG_LEVEL", "INFO").upper(),
        }

    def _load_custom_config(self) -> None:
        """Load custom configuration from YAML file if available."""
        config_paths = [
            Path.cwd() / "config.yaml",
            Path.cwd() / "config.yml",
            Path(__file__).parent / "config.yaml",
            Path.home() / ".travel_ledger" / "config.yaml",
        ]

        for config_path in config_paths:
            if config_path.exists():
                try:
                    with open(config_path, 'r', encoding='utf-8') as f:
                        custom_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning("Could not load config from %s: %s", config_path, e)
                    continue
                self._settings.update(custom_config)
                logger.info("Loaded config from %s", config_path)
                break

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value at runtime."""
        self._settings[key] = value

    def reload(self) -> None:
        """Reload configuration from files."""
        self._load_defaults()
        self._load_custom_config()


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()


# =============================================================================
# Helper Functions
# =============================================================================

def get_chunk_size() -> int:
    """Get the worksheet read window size."""
    return int(get_config().get("read_chunk_size", READ_CHUNK_SIZE))


def get_max_upload_bytes() -> int:
    """Get the upload byte ceiling."""
    return int(get_config().get("max_upload_bytes", MAX_UPLOAD_BYTES))


def get_log_level() -> str:
    """Get the configured log level name."""
    return str(get_config().get("log_level", "INFO"))
