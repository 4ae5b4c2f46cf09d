"""
Settings Module.

Reads runtime configuration from the environment. A ``.env`` file in the
working directory is loaded first, so settings can be kept next to a
world's database instead of in the shell profile.

Environment variables:
    ALMANAC_DATABASE: Default database path for the CLI tools.
    ALMANAC_LOG_DIR: Directory for the rotating log file.
    ALMANAC_LOG_FILE: Log file name.
    ALMANAC_DEBUG: "1"/"true"/"yes" enables DEBUG logging.
"""

import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

APP_NAME = "Almanac"
DEFAULT_DB_NAME = "world.almanac"
DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "almanac.log"

_TRUTHY = {"1", "true", "yes", "on"}


def load_settings(dotenv_path: Optional[str] = None) -> bool:
    """
    Loads variables from a .env file into the process environment.

    Existing environment variables win over the file.

    Args:
        dotenv_path: Explicit .env path; searched for when omitted.

    Returns:
        bool: True if a .env file was found and loaded.
    """
    return load_dotenv(dotenv_path=dotenv_path, override=False)


def get_user_data_path(filename: str = "") -> str:
    """
    Returns the absolute path to a file in the user's application data directory.
    Creates the directory if it doesn't exist.

    Args:
        filename: Optional filename to append to the directory path.

    Returns:
        str: Absolute path to the user data directory or file.
    """
    if sys.platform == "win32":
        base_dir = Path(
            os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
        )
    elif sys.platform == "darwin":
        base_dir = Path(os.path.expanduser("~/Library/Application Support"))
    else:
        base_dir = Path(
            os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
        )

    data_dir = base_dir / APP_NAME
    data_dir.mkdir(parents=True, exist_ok=True)

    if filename:
        return str(data_dir / filename)
    return str(data_dir)


def get_database_path(override: Optional[str] = None) -> str:
    """
    Resolves the database path: explicit override, then ALMANAC_DATABASE,
    then the user data directory.
    """
    if override:
        return override
    return os.getenv("ALMANAC_DATABASE") or get_user_data_path(DEFAULT_DB_NAME)


def get_log_dir() -> str:
    return os.getenv("ALMANAC_LOG_DIR", DEFAULT_LOG_DIR)


def get_log_filename() -> str:
    return os.getenv("ALMANAC_LOG_FILE", DEFAULT_LOG_FILE)


def is_debug() -> bool:
    return os.getenv("ALMANAC_DEBUG", "").strip().lower() in _TRUTHY
