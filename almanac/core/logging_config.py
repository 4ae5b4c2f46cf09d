"""
Logging Configuration Module.

This module provides centralized logging configuration for the CLI tools,
including rotating file handlers and console output.
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

from almanac.core.settings import get_log_dir, get_log_filename

MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SafeRotatingFileHandler(RotatingFileHandler):
    """
    A RotatingFileHandler that handles Windows file locking errors gracefully.

    On Windows, log rotation can fail with PermissionError if the file is still
    in use by another process. This handler keeps writing to the current file
    in that case; on other platforms the error propagates.
    """

    def doRollover(self) -> None:
        try:
            super().doRollover()
        except PermissionError:
            if sys.platform != "win32":
                raise


def setup_logging(
    debug_mode: bool = False,
    log_to_console: bool = True,
    log_dir: Optional[str] = None,
) -> None:
    """
    Configures the root logger with a rotating file handler
    and optional console handler.

    Call once at start-up; calling again replaces the handlers.

    Args:
        debug_mode (bool): If True, sets level to DEBUG. Defaults to False (INFO).
        log_to_console (bool): If True, adds a StreamHandler. Defaults to True.
        log_dir (str): Log directory. Defaults to ALMANAC_LOG_DIR or "logs".
    """
    log_dir = log_dir or get_log_dir()
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError as e:
        print(f"Failed to create log directory: {e}. Logging to current directory.")
        log_path = get_log_filename()
    else:
        log_path = os.path.join(log_dir, get_log_filename())

    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplicates if called multiple times
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    level = logging.DEBUG if debug_mode else logging.INFO
    root_logger.setLevel(level)

    try:
        file_handler = SafeRotatingFileHandler(
            log_path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)
    except OSError as e:
        print(f"CRITICAL: Could not set up file logging: {e}")

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        # The console stays quiet unless debugging; the file gets everything.
        console_handler.setLevel(logging.DEBUG if debug_mode else logging.WARNING)
        root_logger.addHandler(console_handler)

    logging.debug(f"Almanac session started at {datetime.now().isoformat()}")

