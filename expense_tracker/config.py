"""Configuration management for the expense tracker.

This module centralizes all configuration values including paths,
display defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in expense_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))
EXPORTS_DIR = DATA_DIR / "exports"

# Key-value database that stands in for the browser's local storage
DB_PATH = Path(
    os.getenv("EXPENSE_TRACKER_DB_PATH", DATA_DIR / "expense_tracker.db")
).resolve()

# Display currency
CURRENCY = os.getenv("EXPENSE_TRACKER_CURRENCY", "MAD")

APP_VERSION = "2.0"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, EXPORTS_DIR, DB_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)
