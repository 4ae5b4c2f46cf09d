"""
Database Service Module.
Provides the low-level SQL interface to the SQLite database.

The service owns the connection and the schema and delegates CRUD
operations to specialized repository classes.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, List, Optional

from almanac.core.calendar import CalendarDefinition
from almanac.core.world import World
from almanac.services.repositories import CalendarRepository, WorldRepository
from almanac.services.repositories import base_repository

logger = logging.getLogger(__name__)


class DatabaseService:
    """
    Handles all raw interactions with the SQLite database.

    This service delegates CRUD operations to specialized repository
    classes while maintaining schema management and connection handling.
    """

    def __init__(self, db_path: str = ":memory:"):
        """
        Args:
            db_path: Path to the .almanac database file.
                     Defaults to :memory: for testing.
        """
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None

        # Connected once the database connection is established
        self._calendar_repo = CalendarRepository()
        self._world_repo = WorldRepository()

        logger.debug(f"DatabaseService initialized with path: {self.db_path}")

    def connect(self) -> None:
        """Establishes connection to the database."""
        try:
            self._connection = sqlite3.connect(self.db_path)
            self._connection.execute("PRAGMA foreign_keys = ON;")
            if self.db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode=WAL;")
                logger.debug("WAL mode enabled for database.")
            # Return rows as Row objects for name access
            self._connection.row_factory = sqlite3.Row
            logger.debug("Database connection established.")

            self._init_schema()

            self._calendar_repo.set_connection(self._connection)
            self._world_repo.set_connection(self._connection)

        except sqlite3.Error as e:
            logger.critical(f"Failed to connect to database: {e}")
            raise

    def close(self) -> None:
        """Closes the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            self._calendar_repo.set_connection(None)
            self._world_repo.set_connection(None)
            logger.debug("Database connection closed.")

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Groups repository writes into one transaction.

        Repository calls made inside the block join it, so either all of
        them are committed or none are.
        """
        if not self._connection:
            self.connect()
        assert self._connection is not None
        with base_repository.transaction(self._connection) as conn:
            yield conn

    def _init_schema(self) -> None:
        """Creates the tables if they don't exist."""
        schema_sql = """
        CREATE TABLE IF NOT EXISTS calendar_config (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            config_json TEXT NOT NULL,
            is_active INTEGER DEFAULT 0,
            created_at REAL,
            modified_at REAL
        );

        -- A database holds a single world clock
        CREATE TABLE IF NOT EXISTS world_state (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            name TEXT NOT NULL,
            calendar_id TEXT NOT NULL,
            time_seconds INTEGER NOT NULL,
            time_era INTEGER,
            canonical_seconds INTEGER,
            canonical_era INTEGER,
            modified_at REAL,
            FOREIGN KEY(calendar_id) REFERENCES calendar_config(id)
        );

        CREATE TABLE IF NOT EXISTS records (
            id TEXT PRIMARY KEY,
            note TEXT NOT NULL,
            instant_seconds INTEGER NOT NULL,
            instant_era INTEGER,
            created_at REAL
        );

        CREATE INDEX IF NOT EXISTS idx_records_instant ON records(instant_seconds);
        """

        try:
            assert self._connection is not None
            # executescript commits on its own
            self._connection.executescript(schema_sql)
            logger.debug("Database schema initialized.")
        except sqlite3.Error as e:
            logger.critical(f"Schema initialization failed: {e}")
            raise

    # --------------------------------------------------------------------------
    # Calendar Config Methods (Delegated to CalendarRepository)
    # --------------------------------------------------------------------------

    def insert_calendar_config(
        self, calendar: CalendarDefinition, is_active: bool = False
    ) -> None:
        self._calendar_repo.insert(calendar, is_active=is_active)

    def get_calendar_config(self, calendar_id: str) -> Optional[CalendarDefinition]:
        return self._calendar_repo.get(calendar_id)

    def get_all_calendar_configs(self) -> List[CalendarDefinition]:
        return self._calendar_repo.get_all()

    def get_active_calendar_config(self) -> Optional[CalendarDefinition]:
        return self._calendar_repo.get_active()

    def is_calendar_active(self, calendar_id: str) -> bool:
        return self._calendar_repo.is_active(calendar_id)

    def set_active_calendar_config(self, calendar_id: Optional[str]) -> None:
        self._calendar_repo.set_active(calendar_id)

    def delete_calendar_config(self, calendar_id: str) -> None:
        self._calendar_repo.delete(calendar_id)

    # --------------------------------------------------------------------------
    # World Methods (Delegated to WorldRepository)
    # --------------------------------------------------------------------------

    def save_world(self, world: World) -> None:
        """
        Persists the world together with its calendar in one transaction.

        Args:
            world: The world to save.
        """
        with self.transaction():
            self._calendar_repo.insert(world.calendar)
            self._world_repo.save(world)

    def get_world(self) -> Optional[World]:
        return self._world_repo.get()

    def get_world_calendar_id(self) -> Optional[str]:
        return self._world_repo.get_calendar_id()

    def delete_world(self) -> None:
        self._world_repo.delete()
