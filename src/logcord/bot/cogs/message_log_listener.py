"""Message log listener Cog for Logcord.

Deleted messages go to the ``text`` log channel, edited messages to the
``edit`` log channel. Deletions are taken from the raw gateway event so they
are logged even when the message was never cached; its content is then
reported as unavailable.
"""

from typing import Optional

import discord
from discord.ext import commands

from logcord.datatypes.log_datatypes import DeliveryOutcome
from logcord.datatypes.snapshot_datatypes import EventKind
from logcord.pipeline.audit_resolver import SINGLE_LOOKBACK, UNKNOWN, audit_resolver
from logcord.pipeline.diff_engine import diff
from logcord.pipeline.normalizer import normalize
from logcord.pipeline.notification_router import notification_router
from logcord.ui.log_embed import build_message_deleted_record, build_message_edited_record
from logcord.util.io_guard import isolated_listener
from logcord.util.logger import get_logger

logger = get_logger("message_log_listener_cog")


class MessageLogListenerCog(commands.Cog):
    """Cog logging message deletions and edits."""

    def __init__(self, discord_bot_instance, router=None, resolver=None):
        """
        Initialize the message log listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        router:
            Notification router; defaults to the shared router.
        resolver:
            Audit attribution resolver; defaults to the shared resolver.
        """
        self.bot = discord_bot_instance
        self.discord_bot_instance = discord_bot_instance
        self.router = router or notification_router
        self.resolver = resolver or audit_resolver
        logger.info("[MESSAGE LOG] Message log listener cog loaded")

    @commands.Cog.listener(name='on_raw_message_delete')
    @isolated_listener
    async def on_raw_message_delete(self, payload: discord.RawMessageDeleteEvent):
        await self.log_deletion(payload)

    async def log_deletion(self, payload) -> Optional[DeliveryOutcome]:
        """Build and route the record for one deleted message."""
        if payload.guild_id is None:
            return None
        guild = self.bot.get_guild(payload.guild_id)
        if guild is None:
            logger.debug("[MESSAGE LOG] Guild %s not cached; skipping deletion log", payload.guild_id)
            return None

        message = payload.cached_message
        author = getattr(message, "author", None)
        if author is not None and author.bot:
            return None
        author_id = author.id if author is not None else None

        event = normalize(EventKind.MESSAGE_DELETED, before=message)
        changes = diff(event.before, event.after)

        # Moderator deletions are audited against the message author
        attribution = UNKNOWN
        if author_id is not None:
            attribution = await self.resolver.resolve_in_guild(
                guild, author_id, discord.AuditLogAction.message_delete, limit=SINGLE_LOOKBACK
            )

        record = build_message_deleted_record(
            guild.id,
            changes,
            author_id=author_id,
            channel_id=payload.channel_id,
            attribution=attribution,
        )
        return await self.router.dispatch(guild, record)

    @commands.Cog.listener(name='on_message_edit')
    @isolated_listener
    async def on_message_edit(self, before: discord.Message, after: discord.Message):
        await self.log_edit(before, after)

    async def log_edit(self, before, after) -> Optional[DeliveryOutcome]:
        """Build and route the record for an edited message, if its text changed."""
        if after.guild is None or after.author.bot:
            return None

        event = normalize(EventKind.MESSAGE_UPDATED, before=before, after=after)
        changes = diff(event.before, event.after)
        if not changes:
            # Embed unfurls and pins also fire edits
            return None

        record = build_message_edited_record(
            after.guild.id,
            changes,
            author_id=after.author.id,
            channel_id=after.channel.id,
            jump_url=getattr(after, "jump_url", None),
        )
        return await self.router.dispatch(after.guild, record)


def setup(discord_bot_instance):
    """Register the MessageLogListenerCog with the bot."""
    discord_bot_instance.add_cog(MessageLogListenerCog(discord_bot_instance))
