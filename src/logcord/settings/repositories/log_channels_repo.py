"""
Repository for the log_channels table.

Handles only SQL for log_channels; locking and transactions belong to
the service.

Queries are built from the category columns the table actually has. A
database whose migration failed part way still serves the columns it has,
and the missing categories read as None.
"""

from __future__ import annotations

from typing import List, Optional

import aiosqlite

from logcord.datatypes.discord_datatypes import ChannelID, GuildID
from logcord.datatypes.log_datatypes import CATEGORY_COLUMNS, LogChannels
from logcord.util.logger import get_logger

logger = get_logger("log_channels_repo")


def _channel(value: Optional[int]) -> Optional[ChannelID]:
    return ChannelID.from_int(value) if value is not None else None


def _int(channel_id: Optional[ChannelID]) -> Optional[int]:
    return channel_id.to_int() if channel_id is not None else None


class LogChannelsRepository:
    """CRUD for the log_channels table."""

    async def category_columns(self, conn: aiosqlite.Connection) -> List[str]:
        """Category columns present in log_channels, in category order."""
        async with conn.execute("PRAGMA table_info(log_channels)") as cursor:
            rows = await cursor.fetchall()
        present = {row[1] for row in rows}
        return [column for column in CATEGORY_COLUMNS.values() if column in present]

    async def get(
        self, conn: aiosqlite.Connection, guild_id: GuildID
    ) -> LogChannels | None:
        """Fetch one guild's routing row, or None if it has none."""
        columns = await self.category_columns(conn)
        async with conn.execute(
            f"SELECT {', '.join(['guild_id', *columns])} FROM log_channels WHERE guild_id = ?",
            (guild_id.to_int(),),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None
        values = {column: _channel(value) for column, value in zip(columns, row[1:])}
        return LogChannels(guild_id=GuildID.from_int(row[0]), **values)

    async def upsert(
        self, conn: aiosqlite.Connection, channels: LogChannels
    ) -> None:
        """Write a complete routing row: every category column the table has."""
        columns = await self.category_columns(conn)
        if not columns:
            logger.warning("[LOG CHANNELS REPO] log_channels has no category columns; nothing written")
            return

        placeholders = ", ".join("?" for _ in range(len(columns) + 1))
        assignments = ", ".join(f"{column} = excluded.{column}" for column in columns)
        await conn.execute(
            f"""
            INSERT INTO log_channels ({', '.join(['guild_id', *columns])})
            VALUES ({placeholders})
            ON CONFLICT(guild_id) DO UPDATE SET {assignments}
            """,
            (
                channels.guild_id.to_int(),
                *(_int(getattr(channels, column)) for column in columns),
            ),
        )

    async def delete(
        self, conn: aiosqlite.Connection, guild_id: GuildID
    ) -> None:
        await conn.execute(
            "DELETE FROM log_channels WHERE guild_id = ?",
            (guild_id.to_int(),),
        )
