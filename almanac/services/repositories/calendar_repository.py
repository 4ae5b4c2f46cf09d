"""
Calendar Repository Module.

Handles CRUD operations for calendar definitions in the database.
"""

import logging
import sqlite3
import time
from typing import List, Optional

from almanac.core.calendar import CalendarDefinition
from almanac.services.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CalendarRepository(BaseRepository):
    """
    Repository for calendar definitions.

    Definitions are stored as JSON next to a few indexed columns. At
    most one definition is flagged as active.
    """

    def insert(self, calendar: CalendarDefinition, is_active: bool = False) -> None:
        """
        Insert a new calendar definition or update an existing one.

        Updating keeps the stored active flag and creation time.

        Args:
            calendar: The calendar definition to persist.
            is_active: Active flag for newly inserted rows.

        Raises:
            sqlite3.Error: If the database operation fails.
        """
        now = time.time()
        sql = """
            INSERT INTO calendar_config
                (id, name, config_json, is_active, created_at, modified_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name=excluded.name,
                config_json=excluded.config_json,
                modified_at=excluded.modified_at;
        """
        with self.transaction() as conn:
            conn.execute(
                sql,
                (
                    calendar.id,
                    calendar.name,
                    self._calendar_to_json(calendar),
                    1 if is_active else 0,
                    now,
                    now,
                ),
            )

    def _from_row(self, row: Optional[sqlite3.Row]) -> Optional[CalendarDefinition]:
        if row is None:
            return None
        return self._calendar_from_json(row["config_json"])

    def get(self, calendar_id: str) -> Optional[CalendarDefinition]:
        """
        Retrieve a calendar definition by its UUID.

        Args:
            calendar_id: The unique identifier of the definition.

        Returns:
            The CalendarDefinition if found, else None.
        """
        cursor = self.connection.execute(
            "SELECT * FROM calendar_config WHERE id = ?", (calendar_id,)
        )
        return self._from_row(cursor.fetchone())

    def get_all(self) -> List[CalendarDefinition]:
        """
        Retrieve all calendar definitions, ordered by name.
        """
        cursor = self.connection.execute(
            "SELECT * FROM calendar_config ORDER BY name ASC"
        )
        return [self._calendar_from_json(row["config_json"]) for row in cursor]

    def get_active(self) -> Optional[CalendarDefinition]:
        cursor = self.connection.execute(
            "SELECT * FROM calendar_config WHERE is_active = 1 LIMIT 1"
        )
        return self._from_row(cursor.fetchone())

    def is_active(self, calendar_id: str) -> bool:
        cursor = self.connection.execute(
            "SELECT is_active FROM calendar_config WHERE id = ?", (calendar_id,)
        )
        row = cursor.fetchone()
        return bool(row and row["is_active"])

    def set_active(self, calendar_id: Optional[str]) -> None:
        """
        Set a calendar definition as active (deactivates all others).

        Args:
            calendar_id: The definition to activate, or None to leave no
                definition active.

        Raises:
            LookupError: If no definition has that identifier.
            sqlite3.Error: If the database operation fails.
        """
        with self.transaction() as conn:
            if calendar_id is not None:
                exists = conn.execute(
                    "SELECT 1 FROM calendar_config WHERE id = ?", (calendar_id,)
                ).fetchone()
                if not exists:
                    raise LookupError(f"Calendar not found: {calendar_id}")
            conn.execute("UPDATE calendar_config SET is_active = 0")
            if calendar_id is not None:
                conn.execute(
                    "UPDATE calendar_config SET is_active = 1 WHERE id = ?",
                    (calendar_id,),
                )

    def delete(self, calendar_id: str) -> None:
        """
        Delete a calendar definition permanently.

        Raises:
            sqlite3.IntegrityError: If a world still uses the calendar.
        """
        with self.transaction() as conn:
            conn.execute("DELETE FROM calendar_config WHERE id = ?", (calendar_id,))
