"""
World Repository Module.

Persists the world clock: the single world state row and its records.
The world's calendar lives in ``calendar_config`` and is referenced by id.
"""

import logging
import time
from typing import List, Optional

from almanac.core.instant import Instant
from almanac.core.world import Record, World
from almanac.services.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class WorldRepository(BaseRepository):
    """
    Repository for the world clock.

    A database holds exactly one world. Saving replaces the stored state
    and record list in a single transaction.
    """

    def save(self, world: World) -> None:
        """
        Insert or replace the world state and its records.

        The world's calendar must already be stored in ``calendar_config``.

        Args:
            world: The world to persist.

        Raises:
            sqlite3.IntegrityError: If the calendar is not stored.
        """
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT INTO world_state
                    (id, name, calendar_id, time_seconds, time_era,
                     canonical_seconds, canonical_era, modified_at)
                VALUES (1, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    calendar_id=excluded.calendar_id,
                    time_seconds=excluded.time_seconds,
                    time_era=excluded.time_era,
                    canonical_seconds=excluded.canonical_seconds,
                    canonical_era=excluded.canonical_era,
                    modified_at=excluded.modified_at;
                """,
                (
                    world.name,
                    world.calendar.id,
                    *self._instant_columns(world.time),
                    *self._instant_columns(world.canonical_time),
                    time.time(),
                ),
            )
            conn.execute("DELETE FROM records")
            conn.executemany(
                """
                INSERT INTO records
                    (id, note, instant_seconds, instant_era, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (r.id, r.note, *self._instant_columns(r.instant), r.created_at)
                    for r in world.records
                ],
            )
        logger.debug(f"Saved world '{world.name}' with {len(world.records)} records")

    def get(self) -> Optional[World]:
        """
        Load the world, or None if the database has no world yet.
        """
        row = self.connection.execute(
            """
            SELECT w.*, c.config_json
            FROM world_state w
            JOIN calendar_config c ON c.id = w.calendar_id
            WHERE w.id = 1
            """
        ).fetchone()
        if row is None:
            return None
        current = self._instant_from_columns(row["time_seconds"], row["time_era"])
        return World(
            name=row["name"],
            calendar=self._calendar_from_json(row["config_json"]),
            time=current or Instant(),
            canonical_time=self._instant_from_columns(
                row["canonical_seconds"], row["canonical_era"]
            ),
            records=self.get_records(),
        )

    def get_calendar_id(self) -> Optional[str]:
        """The id of the calendar the world runs on, without loading it."""
        row = self.connection.execute(
            "SELECT calendar_id FROM world_state WHERE id = 1"
        ).fetchone()
        return row["calendar_id"] if row else None

    def get_records(self) -> List[Record]:
        """All records ordered by in-world time."""
        cursor = self.connection.execute(
            "SELECT * FROM records ORDER BY instant_seconds ASC, created_at ASC"
        )
        return [
            Record(
                id=row["id"],
                note=row["note"],
                instant=Instant(seconds=row["instant_seconds"], era=row["instant_era"]),
                created_at=row["created_at"],
            )
            for row in cursor
        ]

    def delete(self) -> None:
        with self.transaction() as conn:
            conn.execute("DELETE FROM records")
            conn.execute("DELETE FROM world_state")
