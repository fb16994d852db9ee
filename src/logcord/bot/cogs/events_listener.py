"""Event listener Cog for Logcord.

Handles bot lifecycle events (on_ready), application command errors and
guild removal. Logging of server activity lives in the dedicated listener
cogs.
"""

import discord
from discord.ext import commands

from logcord.settings.log_channels_service import log_channels_service
from logcord.util.io_guard import isolated_listener
from logcord.util.logger import get_logger

logger = get_logger("events_listener_cog")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle and command error handlers."""

    def __init__(self, discord_bot_instance, store=None):
        """
        Initialize the events listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        store:
            Routing config store; defaults to the shared service.
        """
        self.bot = discord_bot_instance
        self.discord_bot_instance = discord_bot_instance
        self.store = store or log_channels_service
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name='on_ready')
    @isolated_listener
    async def on_ready(self):
        """Log the connected identity and the number of guilds served."""
        if self.bot.user:
            logger.info("Bot connected as %s (ID: %s)", self.bot.user, self.bot.user.id)
        else:
            logger.warning("Bot partially connected, but user information not yet available.")
        logger.info("Serving %d guild(s)", len(getattr(self.bot, "guilds", []) or []))
        logger.info("--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--")

    @commands.Cog.listener(name='on_guild_remove')
    @isolated_listener
    async def on_guild_remove(self, guild):
        """Forget the routing configuration of a guild the bot left."""
        logger.info("Removed from guild %s (%s); deleting its log channel config", guild.name, guild.id)
        await self.store.delete(guild.id)

    @commands.Cog.listener(name='on_application_command_error')
    async def on_application_command_error(self, ctx: discord.ApplicationContext, error: Exception):
        """Log a failed command and tell the invoker, privately."""
        command_name = getattr(getattr(ctx, "command", None), "qualified_name", "unknown")
        if isinstance(error, (discord.CheckFailure, commands.CheckFailure)):
            logger.debug("Command /%s refused for user %s: %s", command_name, ctx.user.id, error)
            message = "You do not have permission to use this command."
        else:
            logger.error("Error in command /%s: %s", command_name, error, exc_info=error)
            message = "Something went wrong while running this command."

        try:
            await ctx.respond(message, ephemeral=True)
        except (discord.HTTPException, discord.InteractionResponded) as exc:
            logger.debug("Could not send command error reply: %s", exc)


def setup(discord_bot_instance):
    """
    Register the EventsListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to.
    """
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance))
