"""
CLI Utilities Module.

Common utility functions for CLI tools.
"""

import logging
from pathlib import Path
from typing import Optional

from almanac.core.logging_config import setup_logging
from almanac.core.settings import get_database_path, is_debug, load_settings

logger = logging.getLogger(__name__)


def validate_database_path(db_path: str, allow_create: bool = False) -> bool:
    """
    Validate that a database file exists.

    Args:
        db_path: Path to the database file.
        allow_create: If True, allows non-existent databases (for create
            operations).

    Returns:
        True if valid, False otherwise.
    """
    path = Path(db_path)

    if not path.exists():
        if allow_create:
            # Database will be created automatically by DatabaseService
            logger.debug(f"Database will be created: {db_path}")
            return True
        else:
            print(f"✗ Database file not found: {db_path}")
            logger.error(f"Database file not found: {db_path}")
            return False

    return True


def init_cli(verbose: bool, database: Optional[str]) -> str:
    """
    Loads .env settings, configures logging and resolves the database path.

    Args:
        verbose: The --verbose flag; ALMANAC_DEBUG also enables debugging.
        database: The --database argument, if given.

    Returns:
        str: The database path to use.
    """
    load_settings()
    setup_logging(debug_mode=verbose or is_debug())
    return get_database_path(database)
