from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from logcord.bot.cogs import events_listener
from logcord.datatypes.discord_datatypes import ChannelID, GuildID
from logcord.datatypes.log_datatypes import LogCategory


@pytest.fixture
def fake_bot():
    return SimpleNamespace(
        user=SimpleNamespace(id=999, display_name="LogcordBot"),
        guilds=[SimpleNamespace(id=1)],
    )


def test_setup_adds_cog(fake_bot):
    captured = {}
    fake_bot.add_cog = lambda cog: captured.setdefault("cog", cog)
    events_listener.setup(fake_bot)
    assert isinstance(captured["cog"], events_listener.EventsListenerCog)


@pytest.mark.asyncio
async def test_on_ready_runs_without_user(fake_bot):
    fake_bot.user = None
    cog = events_listener.EventsListenerCog(fake_bot, store=SimpleNamespace())
    await cog.on_ready()


@pytest.mark.asyncio
async def test_guild_remove_deletes_config(fake_bot, store):
    await store.set_channel(GuildID(1), LogCategory.TEXT, ChannelID(10))
    cog = events_listener.EventsListenerCog(fake_bot, store=store)

    await cog.on_guild_remove(SimpleNamespace(id=1, name="Test"))

    assert await store.get_config(GuildID(1)) is None


def _ctx():
    return SimpleNamespace(
        command=SimpleNamespace(qualified_name="log set"),
        user=SimpleNamespace(id=5),
        respond=AsyncMock(),
    )


@pytest.mark.asyncio
async def test_command_check_failure_gets_permission_reply(fake_bot):
    cog = events_listener.EventsListenerCog(fake_bot, store=SimpleNamespace())
    ctx = _ctx()

    await cog.on_application_command_error(ctx, discord.CheckFailure("nope"))

    args, kwargs = ctx.respond.await_args
    assert "permission" in args[0]
    assert kwargs["ephemeral"] is True


@pytest.mark.asyncio
async def test_command_error_reply_failure_is_tolerated(fake_bot, http_errors):
    cog = events_listener.EventsListenerCog(fake_bot, store=SimpleNamespace())
    ctx = _ctx()
    ctx.respond.side_effect = http_errors.not_found("Unknown interaction")

    await cog.on_application_command_error(ctx, RuntimeError("boom"))

    ctx.respond.assert_awaited_once()
