from __future__ import annotations

import os
import sys
from pathlib import Path

APP_NAME = "SimonKawaii"
APP_DIR_NAME = "simon-kawaii"

JSON_FILE_NAME = "simon_record.json"
DB_FILE_NAME = "record_simon.db"


def default_data_root() -> Path:
    """Return the default platform-specific root directory for user data.

    Linux: ~/.local/share/simon-kawaii (or $XDG_DATA_HOME/simon-kawaii)
    macOS: ~/Library/Application Support/SimonKawaii
    Windows: %APPDATA%\\SimonKawaii
    """
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA")
        if not base:
            base = Path.home() / "AppData" / "Roaming"
        else:
            base = Path(base)
        return base / APP_NAME
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    else:
        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg) / APP_DIR_NAME
        return Path.home() / ".local" / "share" / APP_DIR_NAME


def cache_dir() -> Path:
    return default_data_root() / "cache"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
