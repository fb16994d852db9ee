"""Server changes listener Cog for Logcord.

Watches role and channel create/delete/update events, diffs the two
snapshots and posts one record per effective change to the guild's
``change`` log channel. Updates that touch nothing the bot tracks (a role
moving position, a channel topic edit) produce no record.
"""

from typing import Any, List, Optional

import discord
from discord.ext import commands

from logcord.datatypes.log_datatypes import DeliveryOutcome
from logcord.datatypes.snapshot_datatypes import ChangedField, ChangeKind, EventKind
from logcord.pipeline.audit_resolver import AMBIGUOUS_LOOKBACK, audit_resolver
from logcord.pipeline.diff_engine import diff
from logcord.pipeline.normalizer import normalize
from logcord.pipeline.notification_router import notification_router
from logcord.ui.log_embed import build_change_record
from logcord.util.io_guard import isolated_listener
from logcord.util.logger import get_logger

logger = get_logger("server_changes_listener_cog")

STRUCTURE_ACTIONS = {
    EventKind.ROLE_CREATED: discord.AuditLogAction.role_create,
    EventKind.ROLE_DELETED: discord.AuditLogAction.role_delete,
    EventKind.ROLE_UPDATED: discord.AuditLogAction.role_update,
    EventKind.CHANNEL_CREATED: discord.AuditLogAction.channel_create,
    EventKind.CHANNEL_DELETED: discord.AuditLogAction.channel_delete,
    EventKind.CHANNEL_UPDATED: discord.AuditLogAction.channel_update,
}

# Overwrite edits are audited under their own actions, not channel_update
OVERWRITE_ACTIONS = {
    ChangeKind.OVERWRITE_ADDED: discord.AuditLogAction.overwrite_create,
    ChangeKind.OVERWRITE_REMOVED: discord.AuditLogAction.overwrite_delete,
    ChangeKind.ALLOW_ADDED: discord.AuditLogAction.overwrite_update,
    ChangeKind.ALLOW_REMOVED: discord.AuditLogAction.overwrite_update,
    ChangeKind.DENY_ADDED: discord.AuditLogAction.overwrite_update,
    ChangeKind.DENY_REMOVED: discord.AuditLogAction.overwrite_update,
}


def channel_update_action(changes: List[ChangedField]) -> Any:
    """Audit action explaining a channel update's changes.

    Overwrite-only updates map to their overwrite action. When one update
    mixes overwrite kinds, overwrite_update is used.
    """
    if any(change.attribute != "overwrites" for change in changes):
        return discord.AuditLogAction.channel_update
    actions = {OVERWRITE_ACTIONS.get(change.kind, discord.AuditLogAction.channel_update) for change in changes}
    if len(actions) == 1:
        return actions.pop()
    return discord.AuditLogAction.overwrite_update


class ServerChangesListenerCog(commands.Cog):
    """Logs role and channel structure changes."""

    def __init__(self, discord_bot_instance, router=None, resolver=None):
        self.bot = discord_bot_instance
        self.discord_bot_instance = discord_bot_instance
        self.router = router or notification_router
        self.resolver = resolver or audit_resolver
        logger.info("[SERVER CHANGES] Server changes listener cog loaded")

    async def _log_change(
        self,
        guild: discord.Guild,
        kind: EventKind,
        entity: Any,
        mention: str,
        before: Any = None,
        after: Any = None,
    ) -> Optional[DeliveryOutcome]:
        """Normalize, diff, attribute and route one structure event."""
        event = normalize(kind, before=before, after=after)
        changes = diff(event.before, event.after)
        if not changes:
            logger.debug("[SERVER CHANGES] %s %s: nothing tracked changed", kind.value, entity.id)
            return None

        if kind is EventKind.CHANNEL_UPDATED:
            action = channel_update_action(changes)
        else:
            action = STRUCTURE_ACTIONS[kind]

        attribution = await self.resolver.resolve_in_guild(
            guild, entity.id, action, limit=AMBIGUOUS_LOOKBACK
        )

        record = build_change_record(guild.id, kind, entity.name, changes, attribution, mention)
        return await self.router.dispatch(guild, record)

    # --------------------------
    # Roles
    # --------------------------
    @commands.Cog.listener(name='on_guild_role_create')
    @isolated_listener
    async def on_guild_role_create(self, role: discord.Role):
        await self._log_change(role.guild, EventKind.ROLE_CREATED, role, f"<@&{role.id}>", after=role)

    @commands.Cog.listener(name='on_guild_role_delete')
    @isolated_listener
    async def on_guild_role_delete(self, role: discord.Role):
        await self._log_change(role.guild, EventKind.ROLE_DELETED, role, f"<@&{role.id}>", before=role)

    @commands.Cog.listener(name='on_guild_role_update')
    @isolated_listener
    async def on_guild_role_update(self, before: discord.Role, after: discord.Role):
        await self._log_change(after.guild, EventKind.ROLE_UPDATED, after, f"<@&{after.id}>", before=before, after=after)

    # --------------------------
    # Channels
    # --------------------------
    @commands.Cog.listener(name='on_guild_channel_create')
    @isolated_listener
    async def on_guild_channel_create(self, channel: discord.abc.GuildChannel):
        await self._log_change(channel.guild, EventKind.CHANNEL_CREATED, channel, f"<#{channel.id}>", after=channel)

    @commands.Cog.listener(name='on_guild_channel_delete')
    @isolated_listener
    async def on_guild_channel_delete(self, channel: discord.abc.GuildChannel):
        await self._log_change(channel.guild, EventKind.CHANNEL_DELETED, channel, f"<#{channel.id}>", before=channel)

    @commands.Cog.listener(name='on_guild_channel_update')
    @isolated_listener
    async def on_guild_channel_update(self, before: discord.abc.GuildChannel, after: discord.abc.GuildChannel):
        await self._log_change(
            after.guild, EventKind.CHANNEL_UPDATED, after, f"<#{after.id}>", before=before, after=after
        )


def setup(discord_bot_instance):
    """Register the ServerChangesListenerCog with the bot."""
    discord_bot_instance.add_cog(ServerChangesListenerCog(discord_bot_instance))
