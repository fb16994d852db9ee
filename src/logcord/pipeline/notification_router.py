"""
Notification router: deliver a change record to the guild's log channel.

Delivery is best-effort and at-most-once:

1. No routing row, or no channel for the record's category -> ``DROPPED``
   (expected; logged at DEBUG only).
2. Channel missing, unreachable or not text-capable -> ``DROPPED`` with a
   warning.
3. ``send`` fails -> ``FAILED`` with a warning. Never retried or queued.
"""

from __future__ import annotations

from typing import Any, Optional

from logcord.datatypes.capabilities import Sendable, ServerScoped
from logcord.datatypes.discord_datatypes import ChannelID, GuildID
from logcord.datatypes.log_datatypes import ChangeRecord, DeliveryOutcome, LogCategory
from logcord.settings.log_channels_service import LogChannelsService, log_channels_service
from logcord.ui.log_embed import record_to_embed
from logcord.util.io_guard import IOStatus, attempt
from logcord.util.logger import get_logger

logger = get_logger("notification_router")


class NotificationRouter:
    """Routes records to the per-guild, per-category destination channel."""

    def __init__(self, store: LogChannelsService = log_channels_service) -> None:
        self.store = store

    async def resolve_destination(self, guild: ServerScoped, channel_id: ChannelID) -> Optional[Sendable]:
        """Cached channel first, then an API fetch. None if unusable."""
        channel: Any = guild.get_channel(channel_id.to_int())
        if channel is None:
            result = await attempt(
                guild.fetch_channel(channel_id.to_int()),
                description=f"fetch log channel {channel_id}",
                log=logger,
            )
            if result.status is IOStatus.NOT_FOUND:
                logger.warning(
                    "[ROUTER] Log channel %s configured for guild %s no longer exists",
                    channel_id, guild.id,
                )
                return None
            if not result.ok:
                return None
            channel = result.value

        if not isinstance(channel, Sendable):
            logger.warning(
                "[ROUTER] Log channel %s in guild %s is not a text channel",
                channel_id, guild.id,
            )
            return None
        return channel

    async def route(self, guild: ServerScoped, category: LogCategory, record: ChangeRecord) -> DeliveryOutcome:
        """Deliver ``record`` to ``guild``'s channel for ``category``."""
        category = LogCategory.parse(category)
        guild_id = GuildID(guild.id)

        config = await self.store.get_config(guild_id)
        channel_id = config.channel_for(category) if config is not None else None
        if channel_id is None:
            logger.debug("[ROUTER] No %s log channel for guild %s; dropping %r", category.value, guild_id, record.title)
            return DeliveryOutcome.DROPPED

        channel = await self.resolve_destination(guild, channel_id)
        if channel is None:
            return DeliveryOutcome.DROPPED

        result = await attempt(
            channel.send(embed=record_to_embed(record)),
            description=f"send {category.value} log to channel {channel_id}",
            log=logger,
        )
        if not result.ok:
            return DeliveryOutcome.FAILED

        logger.debug("[ROUTER] Delivered %r to %s log channel of guild %s", record.title, category.value, guild_id)
        return DeliveryOutcome.DELIVERED

    async def send_text_log(self, guild: ServerScoped, record: ChangeRecord) -> DeliveryOutcome:
        return await self.route(guild, LogCategory.TEXT, record)

    async def send_edit_log(self, guild: ServerScoped, record: ChangeRecord) -> DeliveryOutcome:
        return await self.route(guild, LogCategory.EDIT, record)

    async def send_voice_log(self, guild: ServerScoped, record: ChangeRecord) -> DeliveryOutcome:
        return await self.route(guild, LogCategory.VOICE, record)

    async def send_change_log(self, guild: ServerScoped, record: ChangeRecord) -> DeliveryOutcome:
        return await self.route(guild, LogCategory.CHANGE, record)

    async def dispatch(self, guild: ServerScoped, record: Optional[ChangeRecord]) -> Optional[DeliveryOutcome]:
        """Route a record by its own category; ``None`` records are ignored."""
        if record is None:
            return None
        return await self.route(guild, record.category, record)


# Shared router
notification_router = NotificationRouter()
