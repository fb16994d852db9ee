"""
Database schema initialization and additive migrations.

Migrations only ever add columns. Existing rows are never dropped or
rewritten, and a failed column add is logged without aborting startup so
columns that already exist keep working.
"""

from typing import Dict, List

import aiosqlite

from logcord.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 2

# Columns every log_channels table must have, with their SQL definitions.
# Order matters only for readability of PRAGMA table_info output.
LOG_CHANNELS_COLUMNS: Dict[str, str] = {
    "text_channel_id": "INTEGER",
    "edit_channel_id": "INTEGER",
    "voice_channel_id": "INTEGER",
    "change_channel_id": "INTEGER",
    "updated_at": "TIMESTAMP",
}


class SchemaManager:
    """Creates the schema and brings older databases up to date."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> List[str]:
        """
        Create missing tables, add missing columns and record the version.

        Args:
            db: Open database connection

        Returns:
            Names of the columns that were added by migration.
        """
        await SchemaManager._create_tables(db)
        added = await SchemaManager.migrate_log_channels(db)
        await SchemaManager._create_triggers(db)
        await SchemaManager._update_schema_version(db)
        await db.commit()
        logger.info("[SCHEMA] Database schema initialized")
        return added

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS log_channels (
                guild_id INTEGER PRIMARY KEY,
                text_channel_id INTEGER,
                edit_channel_id INTEGER,
                voice_channel_id INTEGER,
                change_channel_id INTEGER,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def existing_columns(db: aiosqlite.Connection, table: str) -> List[str]:
        async with db.execute(f"PRAGMA table_info({table})") as cursor:
            rows = await cursor.fetchall()
        return [row[1] for row in rows]

    @staticmethod
    async def migrate_log_channels(db: aiosqlite.Connection) -> List[str]:
        """Add every expected log_channels column the table lacks."""
        try:
            present = set(await SchemaManager.existing_columns(db, "log_channels"))
        except aiosqlite.Error as exc:
            logger.error("[SCHEMA] Could not inspect log_channels: %s", exc)
            return []

        added: List[str] = []
        for column, definition in LOG_CHANNELS_COLUMNS.items():
            if column in present:
                continue
            try:
                await db.execute(f"ALTER TABLE log_channels ADD COLUMN {column} {definition}")
            except aiosqlite.Error as exc:
                logger.error("[SCHEMA] Migration failed adding log_channels.%s: %s", column, exc)
                continue
            added.append(column)
            logger.info("[SCHEMA] Added %s column to log_channels", column)

        if not added:
            logger.debug("[SCHEMA] log_channels already up to date")
        return added

    @staticmethod
    async def _create_triggers(db: aiosqlite.Connection) -> None:
        if "updated_at" not in await SchemaManager.existing_columns(db, "log_channels"):
            logger.error("[SCHEMA] log_channels.updated_at missing; timestamp trigger not created")
            return
        try:
            await db.execute("""
                CREATE TRIGGER IF NOT EXISTS update_log_channels_timestamp
                AFTER UPDATE ON log_channels
                FOR EACH ROW
                WHEN NEW.updated_at IS OLD.updated_at
                BEGIN
                    UPDATE log_channels SET updated_at = CURRENT_TIMESTAMP
                    WHERE guild_id = NEW.guild_id;
                END
            """)
        except aiosqlite.Error as exc:
            logger.error("[SCHEMA] Could not create log_channels trigger: %s", exc)

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        await db.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
