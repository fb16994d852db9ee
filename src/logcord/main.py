"""
Logcord
=======

A Discord bot that records server activity (deleted and edited messages,
voice activity, role and channel changes) into per-category log channels
and keeps reaction roles in sync.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project. Designed for compiled/bundled execution.
    Resolution order:
    1. LOGCORD_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("LOGCORD_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from logcord.configuration.app_configuration import app_config
from logcord.database.database import database
from logcord.pipeline.audit_resolver import audit_resolver
from logcord.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Returns
    -------
    str
        Discord bot token extracted from the loaded environment.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Construct the Discord intents required by the listeners.

    Returns
    -------
    discord.Intents
        Intents enabling guild, member, message, reaction and voice events.
    """
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.reactions = True
    intents.voice_states = True
    intents.members = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot) -> None:
    """Register all operational cogs with the provided Discord bot instance.

    Parameters
    ----------
    discord_bot_instance:
        Py-Cord bot object that should receive the Logcord cogs.
    """
    from logcord.bot.cogs import (
        events_listener,
        log_settings_cmds,
        message_log_listener,
        reaction_roles_listener,
        server_changes_listener,
        voice_log_listener,
    )

    events_listener.setup(discord_bot_instance)
    server_changes_listener.setup(discord_bot_instance)
    message_log_listener.setup(discord_bot_instance)
    voice_log_listener.setup(discord_bot_instance)
    reaction_roles_listener.setup(discord_bot_instance)
    log_settings_cmds.setup(discord_bot_instance)

    logger.info("All cogs loaded successfully.")


def create_bot() -> discord.Bot:
    """Instantiate the Discord bot and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    load_cogs(bot)
    return bot


async def initialize_storage() -> bool:
    """Open the routing store at the configured path and migrate it."""
    database.db_path = app_config.database_path
    database.db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Initializing database at %s…", database.db_path)
    return await database.initialize()


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and handle lifecycle logging around the connection.

    Parameters
    ----------
    bot:
        Discord client to start.
    token:
        Authentication token used to connect to Discord.
    """
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None = None) -> None:
    """Gracefully stop the Discord bot and close the database.

    Parameters
    ----------
    bot:
        Optional bot instance to close before shutting down subsystems.
    """
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    try:
        await database.shutdown()
    except Exception as exc:
        logger.exception("Error during database shutdown: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap storage and the bot, returning an exit code.

    Returns
    -------
    int
        Process exit code reflecting success or failure of initialization.
    """
    token = load_environment()

    if not await initialize_storage():
        logger.critical("Failed to initialize database; bot cannot start.")
        return 1

    audit_resolver.window_ms = app_config.attribution_window_ms
    logger.info("Audit attribution window: %d ms", audit_resolver.window_ms)

    try:
        bot = create_bot()
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        await shutdown_runtime()
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot)

    return exit_code


def main() -> int:
    """Entrypoint that orchestrates the async runtime and returns the process code.

    Returns
    -------
    int
        Exit code propagated to the operating system.
    """
    logger.info("Starting Logcord…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        if code is None:
            return 1
        try:
            return int(code)
        except (ValueError, TypeError):
            logger.warning("SystemExit.code is not an int (%r); defaulting to 1", code)
            return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    print(f"Exited with code: {main()}")
