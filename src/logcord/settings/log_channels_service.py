"""
LogChannelsService - the routing config store.

Responsibilities:
- Read a guild's routing row (``get_config``)
- Change one category's destination without touching the other three
  (``set_channel``), as a read-modify-write of the complete row
- Delete a guild's row when the bot leaves it

All SQL lives in :class:`LogChannelsRepository`. Storage errors are caught
here, logged, and reported as ``None`` / ``False``.

Writes for the same guild are serialised by a per-guild lock, so two
concurrent ``set_channel`` calls for different categories both survive.
Different guilds proceed concurrently.
"""

from __future__ import annotations

import asyncio
from typing import Dict, Optional

import aiosqlite

from logcord.database.db_connection import ConnectionManager, db_connection
from logcord.datatypes.discord_datatypes import ChannelID, GuildID
from logcord.datatypes.log_datatypes import CATEGORY_COLUMNS, LogCategory, LogChannels
from logcord.settings.repositories import LogChannelsRepository
from logcord.util.logger import get_logger

logger = get_logger("log_channels_service")


class LogChannelsService:
    """Per-guild routing configuration backed by SQLite."""

    def __init__(self, connection: ConnectionManager = db_connection) -> None:
        self._connection = connection
        self._repo = LogChannelsRepository()
        self._per_guild_locks: Dict[int, asyncio.Lock] = {}

    def _lock_for(self, guild_id: GuildID) -> asyncio.Lock:
        gid = guild_id.to_int()
        if gid not in self._per_guild_locks:
            self._per_guild_locks[gid] = asyncio.Lock()
        return self._per_guild_locks[gid]

    async def get_config(self, guild_id: GuildID) -> Optional[LogChannels]:
        """
        Return the guild's routing row, or None if nothing is configured or
        the store could not be read.
        """
        guild_id = GuildID(guild_id)
        try:
            async with self._connection.read() as conn:
                return await self._repo.get(conn, guild_id)
        except (aiosqlite.Error, RuntimeError):
            logger.exception(
                "[LOG CHANNELS SERVICE] Failed to read config for guild %s", guild_id
            )
            return None

    async def set_channel(
        self,
        guild_id: GuildID,
        category: LogCategory,
        channel_id: Optional[ChannelID],
    ) -> bool:
        """
        Point ``category`` at ``channel_id`` (None clears it).

        Reads the current row (or empty defaults), replaces only the field for
        ``category`` and writes the complete row back.

        Returns:
            True if the row was written, False on storage failure or when the
            category's column is missing from the table.
        """
        guild_id = GuildID(guild_id)
        category = LogCategory.parse(category)
        if channel_id is not None:
            channel_id = ChannelID(channel_id)

        async with self._lock_for(guild_id):
            try:
                async with self._connection.transaction() as conn:
                    if CATEGORY_COLUMNS[category] not in await self._repo.category_columns(conn):
                        logger.warning(
                            "[LOG CHANNELS SERVICE] Cannot set %s channel for guild %s: "
                            "column %s is missing (failed migration?)",
                            category.value, guild_id, CATEGORY_COLUMNS[category],
                        )
                        return False
                    current = await self._repo.get(conn, guild_id) or LogChannels(guild_id=guild_id)
                    await self._repo.upsert(conn, current.with_channel(category, channel_id))
            except (aiosqlite.Error, RuntimeError):
                logger.exception(
                    "[LOG CHANNELS SERVICE] Failed to set %s channel for guild %s",
                    category.value, guild_id,
                )
                return False

        logger.info(
            "[LOG CHANNELS SERVICE] Guild %s: %s logs -> %s",
            guild_id, category.value, channel_id if channel_id is not None else "disabled",
        )
        return True

    async def delete(self, guild_id: GuildID) -> bool:
        """Remove all routing for a guild."""
        guild_id = GuildID(guild_id)
        async with self._lock_for(guild_id):
            try:
                async with self._connection.transaction() as conn:
                    await self._repo.delete(conn, guild_id)
            except (aiosqlite.Error, RuntimeError):
                logger.exception(
                    "[LOG CHANNELS SERVICE] Failed to delete config for guild %s", guild_id
                )
                return False
        self._per_guild_locks.pop(guild_id.to_int(), None)
        logger.debug("[LOG CHANNELS SERVICE] Deleted config for guild %s", guild_id)
        return True


# Singleton
log_channels_service = LogChannelsService()
