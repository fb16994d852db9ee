"""Voice log listener Cog for Logcord.

Reports joins, leaves and moves between voice channels together with
server mute and server deafen toggles to the ``voice`` log channel.
Self mute and self deafen are not reported.
"""

from typing import Dict, List

import discord
from discord.ext import commands

from logcord.datatypes.log_datatypes import DeliveryOutcome
from logcord.datatypes.snapshot_datatypes import EventKind
from logcord.pipeline.audit_resolver import AMBIGUOUS_LOOKBACK, Attribution, audit_resolver
from logcord.pipeline.diff_engine import diff
from logcord.pipeline.normalizer import normalize
from logcord.pipeline.notification_router import notification_router
from logcord.ui.log_embed import build_voice_records
from logcord.util.io_guard import isolated_listener
from logcord.util.logger import get_logger

logger = get_logger("voice_log_listener_cog")

# Server mute/deafen are audited as member updates carrying these keys
MODERATED_FLAGS = ("mute", "deaf")


class VoiceLogListenerCog(commands.Cog):
    """Cog logging voice state changes."""

    def __init__(self, discord_bot_instance, router=None, resolver=None):
        self.bot = discord_bot_instance
        self.discord_bot_instance = discord_bot_instance
        self.router = router or notification_router
        self.resolver = resolver or audit_resolver
        logger.info("[VOICE LOG] Voice log listener cog loaded")

    @commands.Cog.listener(name='on_voice_state_update')
    @isolated_listener
    async def on_voice_state_update(self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState):
        await self.log_voice_change(member, before, after)

    async def log_voice_change(self, member, before, after) -> List[DeliveryOutcome]:
        """Route one record per voice change; returns the delivery outcomes."""
        event = normalize(EventKind.VOICE_STATE_CHANGED, before=before, after=after)
        changes = diff(event.before, event.after)
        if not changes:
            return []

        guild = member.guild
        attributions: Dict[str, Attribution] = {}
        for change in changes:
            if change.attribute in MODERATED_FLAGS:
                attributions[change.attribute] = await self.resolver.resolve_in_guild(
                    guild,
                    member.id,
                    discord.AuditLogAction.member_update,
                    limit=AMBIGUOUS_LOOKBACK,
                    change_key=change.attribute,
                )

        outcomes = []
        for record in build_voice_records(guild.id, member.id, changes, attributions):
            outcomes.append(await self.router.send_voice_log(guild, record))
        return outcomes


def setup(discord_bot_instance):
    """Register the VoiceLogListenerCog with the bot."""
    discord_bot_instance.add_cog(VoiceLogListenerCog(discord_bot_instance))
