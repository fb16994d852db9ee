"""Reaction roles listener Cog for Logcord.

Grants a role when a member adds a configured reaction and revokes it when
the reaction is removed. Raw reaction events are used so reactions on
messages sent before the bot started still count; missing pieces (member,
reacted message) are fetched only when a decision needs them.
"""

from typing import Any, Dict, Optional

import discord
from discord.ext import commands

from logcord.configuration.app_configuration import app_config
from logcord.datatypes.discord_datatypes import RoleID
from logcord.roles.reaction_roles import ReactionRoleSynchronizer, SyncOutcome
from logcord.util.io_guard import attempt, isolated_listener
from logcord.util.logger import get_logger

logger = get_logger("reaction_roles_listener_cog")


class ReactionRolesListenerCog(commands.Cog):
    """Cog keeping reaction roles in sync with reactions."""

    def __init__(self, discord_bot_instance, synchronizer: Optional[ReactionRoleSynchronizer] = None):
        self.bot = discord_bot_instance
        self.discord_bot_instance = discord_bot_instance
        self.synchronizer = synchronizer or ReactionRoleSynchronizer(app_config.reaction_role_registry)
        logger.info(
            "[REACTION ROLES] Reaction roles listener cog loaded with %d rule(s)",
            len(self.synchronizer.registry),
        )

    @commands.Cog.listener(name='on_raw_reaction_add')
    @isolated_listener
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        await self.sync_reaction(payload, added=True)

    @commands.Cog.listener(name='on_raw_reaction_remove')
    @isolated_listener
    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent):
        await self.sync_reaction(payload, added=False)

    async def _embed_title(self, guild: Any, channel_id: int, message_id: int) -> Optional[str]:
        """Title of the first embed of the reacted message.

        Uses the bot's message cache; the channel and message are fetched only
        on a cache miss.
        """
        message = self.bot.get_message(message_id)
        if message is None:
            message = await self._fetch_message(guild, channel_id, message_id)

        embeds = getattr(message, "embeds", None) or []
        return embeds[0].title if embeds else None

    async def _fetch_message(self, guild: Any, channel_id: int, message_id: int) -> Any:
        channel = guild.get_channel(channel_id)
        if channel is None:
            result = await attempt(
                guild.fetch_channel(channel_id),
                description=f"fetch channel {channel_id}",
                log=logger,
            )
            if not result.ok:
                raise LookupError(f"channel {channel_id} unavailable")
            channel = result.value

        result = await attempt(
            channel.fetch_message(message_id),
            description=f"fetch message {message_id}",
            log=logger,
        )
        if not result.ok:
            raise LookupError(f"message {message_id} unavailable")
        return result.value

    async def _member(self, guild: Any, payload: Any) -> Optional[Any]:
        member = getattr(payload, "member", None) or guild.get_member(payload.user_id)
        if member is not None:
            return member
        result = await attempt(
            guild.fetch_member(payload.user_id),
            description=f"fetch member {payload.user_id}",
            log=logger,
        )
        return result.value if result.ok else None

    async def sync_reaction(self, payload: Any, *, added: bool) -> Dict[RoleID, SyncOutcome]:
        """Apply the reaction-role rules for one raw reaction event."""
        if payload.guild_id is None:
            return {}
        if self.bot.user is not None and payload.user_id == self.bot.user.id:
            return {}
        guild = self.bot.get_guild(payload.guild_id)
        if guild is None:
            return {}

        emoji = payload.emoji
        embed_title = None
        if self.synchronizer.needs_message(emoji.name):
            try:
                embed_title = await self._embed_title(guild, payload.channel_id, payload.message_id)
            except LookupError as exc:
                logger.warning("[REACTION ROLES] Cannot evaluate reaction in guild %s: %s", guild.id, exc)
                return {}

        role_ids = self.synchronizer.roles_for(emoji.id, emoji.name, embed_title)
        if not role_ids:
            return {}

        member = await self._member(guild, payload)
        if member is None:
            logger.warning(
                "[REACTION ROLES] Member %s not found in guild %s; skipping reaction", payload.user_id, guild.id
            )
            return {}
        if member.bot:
            return {}

        return await self.synchronizer.apply(member, role_ids, added=added)


def setup(discord_bot_instance):
    """Register the ReactionRolesListenerCog with the bot."""
    discord_bot_instance.add_cog(ReactionRolesListenerCog(discord_bot_instance))
