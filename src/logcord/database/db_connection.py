"""
Database connection management: one long-lived aiosqlite connection.

Concurrency model
-----------------
SQLite is single-writer. Writes are serialised at the application layer
with a semaphore so coroutines queue up instead of fighting SQLite's busy
timeout. Reads share the connection directly; WAL mode keeps them safe.

Usage
-----
    await db_connection.open(DB_PATH)

    async with db_connection.read() as conn:
        cursor = await conn.execute("SELECT ...")

    async with db_connection.transaction() as conn:
        await conn.execute("INSERT ...")
        # commits on clean exit, rolls back on exception

    await db_connection.close()
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from logcord.util.logger import get_logger

logger = get_logger("database_connection")

# Applied once when the connection is opened
_PRAGMAS = [
    "PRAGMA journal_mode = WAL",
    "PRAGMA synchronous = NORMAL",    # safe with WAL; faster than FULL
    "PRAGMA temp_store = MEMORY",
]


class ConnectionManager:
    """
    Wrapper around a single aiosqlite connection.

    * Reads  - ``async with read()``; no locking.
    * Writes - ``async with transaction()``; serialised by ``_write_sem``.
    """

    def __init__(self) -> None:
        self._conn: aiosqlite.Connection | None = None
        self._write_sem = asyncio.Semaphore(1)
        self._path: Path | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def path(self) -> Path | None:
        return self._path

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self, path: Path) -> None:
        """
        Open the database file and apply pragmas.

        Args:
            path: Path to the SQLite database file. Parent directories are
                created if needed.
        """
        if self._conn is not None:
            logger.warning("[DB CONNECTION] open() called but connection already exists - ignoring")
            return

        self._path = path
        path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(path)
        self._conn.row_factory = aiosqlite.Row

        for pragma in _PRAGMAS:
            await self._conn.execute(pragma)
        await self._conn.commit()

        logger.info("[DB CONNECTION] Opened connection to %s", path)

    async def close(self) -> None:
        """Flush the WAL and close the connection. Safe to call twice."""
        if self._conn is None:
            return

        try:
            await self._conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
            await self._conn.commit()
        except aiosqlite.Error:
            logger.exception("[DB CONNECTION] WAL checkpoint failed during close")
        finally:
            await self._conn.close()
            self._conn = None
            logger.info("[DB CONNECTION] Connection closed")

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def connection(self) -> aiosqlite.Connection:
        """
        The raw connection.

        Raises:
            RuntimeError: If the connection has not been opened yet.
        """
        if self._conn is None:
            raise RuntimeError(
                "ConnectionManager: connection is not open. "
                "Call await db_connection.open(path) at startup."
            )
        return self._conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Serialised write transaction.

        Commits on clean exit and rolls back if the body raises.

        Raises:
            RuntimeError: If the connection is not open.
        """
        conn = self.connection

        async with self._write_sem:
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    @asynccontextmanager
    async def read(self) -> AsyncIterator[aiosqlite.Connection]:
        """Symmetric counterpart of :meth:`transaction` for reads."""
        yield self.connection


# Module-level singleton
db_connection = ConnectionManager()
