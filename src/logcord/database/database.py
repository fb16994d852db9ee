"""
Database lifecycle for Logcord.

The Database class opens the shared connection and brings the schema up to
date at startup, and closes the connection at shutdown. Repositories and
services use :data:`logcord.database.db_connection.db_connection` directly.
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite

from logcord.database.db_connection import ConnectionManager, db_connection
from logcord.database.db_schema import SchemaManager
from logcord.util.logger import get_logger

logger = get_logger("database")

# Default database file path, overridable from app_config.yml
DB_PATH = Path("./data/logcord.db").resolve()


class Database:
    """
    Owns the startup and shutdown of the SQLite store.

    Lifecycle:
        1. ``await initialize()`` at program startup
        2. services read and write through the connection manager
        3. ``await shutdown()`` at program end
    """

    def __init__(self, db_path: Path = DB_PATH, connection: ConnectionManager = db_connection):
        self.db_path = db_path
        self.connection = connection
        self._initialized = False

    async def initialize(self) -> bool:
        """
        Open the connection and create or migrate the schema.

        Returns:
            True if the store is usable, False if the file could not be
            opened or the base tables could not be created.
        """
        if self._initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return True

        try:
            await self.connection.open(self.db_path)
            added = await SchemaManager.initialize_schema(self.connection.connection)
        except (aiosqlite.Error, OSError) as exc:
            logger.error("[DATABASE] Database initialization failed: %s", exc)
            return False

        if added:
            logger.info("[DATABASE] Migrated columns: %s", ", ".join(added))
        self._initialized = True
        logger.info("[DATABASE] Database initialized at %s", self.db_path)
        return True

    async def shutdown(self) -> None:
        if not self._initialized:
            return
        await self.connection.close()
        self._initialized = False
        logger.info("[DATABASE] Database shutdown complete")


database = Database()