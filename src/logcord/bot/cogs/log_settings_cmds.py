"""
Log settings cog: choose where each category of log is posted.

This cog exposes one slash command group:
- /log set: point a category (text, edit, voice, change) at a text channel
- /log show: list the current destination of every category

Changing settings requires the Manage Server or Administrator permission.
Responses are ephemeral to avoid leaking configuration in public channels.
"""

import discord
from discord.ext import commands

from logcord.datatypes.discord_datatypes import GuildID
from logcord.datatypes.log_datatypes import CATEGORY_COLUMNS, ChangeRecord, DeliveryOutcome, LogCategory
from logcord.pipeline.notification_router import notification_router
from logcord.settings.log_channels_service import log_channels_service
from logcord.ui.log_embed import COLOR_UPDATED
from logcord.util.logger import get_logger

logger = get_logger("log_settings_cog")

CATEGORY_CHOICES = [category.value for category in LogCategory]

CATEGORY_DESCRIPTIONS = {
    LogCategory.TEXT: "Deleted messages",
    LogCategory.EDIT: "Edited messages",
    LogCategory.VOICE: "Voice activity",
    LogCategory.CHANGE: "Role and channel changes",
}


class LogSettingsCog(commands.Cog):
    """Per-guild routing of log categories to channels."""

    def __init__(self, discord_bot_instance, store=None, router=None):
        self.discord_bot_instance = discord_bot_instance
        self.store = store or log_channels_service
        self.router = router or notification_router
        logger.info("[LOG SETTINGS CMDS] Log settings cog loaded")

    async def _ensure_guild_context(self, ctx: discord.ApplicationContext) -> bool:
        if not ctx.guild_id:
            await ctx.respond("This command can only be used in a server.", ephemeral=True)
            return False
        return True

    def _has_manage_permission(self, ctx: discord.ApplicationContext) -> bool:
        permissions = getattr(ctx.user, "guild_permissions", None)
        if permissions is None:
            return False
        return bool(permissions.manage_guild or permissions.administrator)

    async def _check_permissions(self, ctx: discord.ApplicationContext) -> bool:
        """Check both guild context and manage permissions. Returns True if all checks pass."""
        if not await self._ensure_guild_context(ctx):
            return False
        if not self._has_manage_permission(ctx):
            await ctx.respond("You need the Manage Server permission.", ephemeral=True)
            return False
        return True

    log = discord.SlashCommandGroup("log", "Configure where server activity is logged")

    @log.command(name="set", description="Send one category of logs to a channel")
    async def set_log_channel(
        self,
        ctx: discord.ApplicationContext,
        category: discord.Option(str, "Which logs to route", choices=CATEGORY_CHOICES),
        channel: discord.Option(discord.TextChannel, "Destination channel"),
    ):
        if not await self._check_permissions(ctx):
            return

        log_category = LogCategory.parse(category)
        if not await self.store.set_channel(ctx.guild_id, log_category, channel.id):
            await ctx.respond("Could not save the log channel. Please try again later.", ephemeral=True)
            return

        record = ChangeRecord(
            guild_id=GuildID(ctx.guild_id),
            category=log_category,
            title="Log channel configured",
            color=COLOR_UPDATED,
            description=f"{CATEGORY_DESCRIPTIONS[log_category]} will be logged here.",
        )
        record.add_field("By", f"<@{ctx.user.id}>", inline=True)
        outcome = await self.router.route(ctx.guild, log_category, record)

        reply = f"✅ {CATEGORY_DESCRIPTIONS[log_category]} will be logged in {channel.mention}."
        if outcome is not DeliveryOutcome.DELIVERED:
            reply += " I could not post there yet; check my permissions in that channel."
        await ctx.respond(reply, ephemeral=True)

    @log.command(name="show", description="Show where each category of logs is sent")
    async def show_log_channels(self, ctx: discord.ApplicationContext):
        if not await self._check_permissions(ctx):
            return

        config = await self.store.get_config(ctx.guild_id)
        embed = discord.Embed(title="Log channels", color=COLOR_UPDATED)
        for category in CATEGORY_COLUMNS:
            channel_id = config.channel_for(category) if config is not None else None
            embed.add_field(
                name=f"{category.value} - {CATEGORY_DESCRIPTIONS[category]}",
                value=f"<#{channel_id}>" if channel_id is not None else "Not set",
                inline=False,
            )
        await ctx.respond(embed=embed, ephemeral=True)


def setup(discord_bot_instance):
    """Register the LogSettingsCog with the bot."""
    discord_bot_instance.add_cog(LogSettingsCog(discord_bot_instance))
