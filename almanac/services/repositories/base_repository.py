"""
Base Repository Module.

Shared plumbing for the almanac repositories: a transaction helper that
nests, and the column encodings used for instants and calendars.

An instant is stored as two columns, ``<prefix>_seconds`` and
``<prefix>_era``; a calendar is stored as the JSON of its ``to_dict``.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from almanac.core.calendar import CalendarDefinition
from almanac.core.errors import CalendarConfigError
from almanac.core.instant import Instant

logger = logging.getLogger(__name__)


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Runs a block inside a transaction on ``conn``.

    If a transaction is already open, the block joins it and the
    outermost block decides whether to commit or roll back. This lets the
    database service group several repository writes into one unit.

    Yields:
        The connection.
    """
    if conn.in_transaction:
        yield conn
        return

    conn.execute("BEGIN")
    try:
        yield conn
        conn.commit()
    except Exception as e:
        conn.rollback()
        logger.error(f"Transaction rolled back due to error: {e}")
        raise


class BaseRepository:
    """
    Base class for the calendar and world repositories.

    The connection is owned by DatabaseService and handed over with
    ``set_connection`` once it is open.
    """

    def __init__(self, connection: Optional[sqlite3.Connection] = None) -> None:
        self._connection = connection

    def set_connection(self, connection: Optional[sqlite3.Connection]) -> None:
        self._connection = connection

    @property
    def connection(self) -> sqlite3.Connection:
        """
        The active connection.

        Raises:
            RuntimeError: If no connection has been set.
        """
        if not self._connection:
            raise RuntimeError("Database connection not initialized")
        return self._connection

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with transaction(self.connection) as conn:
            yield conn

    @staticmethod
    def _instant_columns(
        instant: Optional[Instant],
    ) -> Tuple[Optional[int], Optional[int]]:
        """Splits an optional instant into its (seconds, era) columns."""
        if instant is None:
            return None, None
        return instant.seconds, instant.era

    @staticmethod
    def _instant_from_columns(
        seconds: Optional[int], era: Optional[int]
    ) -> Optional[Instant]:
        if seconds is None:
            return None
        return Instant(seconds=seconds, era=era)

    @staticmethod
    def _calendar_to_json(calendar: CalendarDefinition) -> str:
        return json.dumps(calendar.to_dict())

    @staticmethod
    def _calendar_from_json(config_json: str) -> CalendarDefinition:
        """
        Rebuilds a stored calendar.

        Raises:
            CalendarConfigError: If the stored JSON is unreadable or the
                definition no longer validates.
        """
        try:
            data = json.loads(config_json)
        except (json.JSONDecodeError, TypeError) as e:
            raise CalendarConfigError([f"Stored calendar is not valid JSON: {e}"]) from e
        if not isinstance(data, dict):
            raise CalendarConfigError(["Stored calendar is not a JSON object"])
        return CalendarDefinition.from_dict(data)
