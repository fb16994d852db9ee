from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest
import pytest_asyncio

from logcord.bot.cogs import message_log_listener
from logcord.datatypes.discord_datatypes import ChannelID, GuildID
from logcord.datatypes.log_datatypes import DeliveryOutcome, LogCategory
from logcord.pipeline.audit_resolver import UNKNOWN, Attribution
from logcord.pipeline.notification_router import NotificationRouter


@pytest.fixture
def resolver():
    return SimpleNamespace(resolve_in_guild=AsyncMock(return_value=UNKNOWN))


@pytest_asyncio.fixture
async def cog(store, guild, text_channel, resolver):
    await store.set_channel(GuildID(guild.id), LogCategory.TEXT, ChannelID(text_channel.id))
    await store.set_channel(GuildID(guild.id), LogCategory.EDIT, ChannelID(text_channel.id))
    bot = SimpleNamespace(get_guild=lambda gid: guild if gid == guild.id else None)
    return message_log_listener.MessageLogListenerCog(
        bot, router=NotificationRouter(store=store), resolver=resolver
    )


def _message(guild, content, author_id=2, bot=False):
    return SimpleNamespace(
        id=9,
        content=content,
        guild=guild,
        author=SimpleNamespace(id=author_id, bot=bot),
        channel=SimpleNamespace(id=4),
        jump_url="https://discord.com/channels/1/4/9",
    )


def _payload(guild_id=1, cached_message=None):
    return SimpleNamespace(guild_id=guild_id, channel_id=4, message_id=9, cached_message=cached_message)


@pytest.mark.asyncio
async def test_uncached_deletion_logs_unavailable_content(cog, text_channel, resolver):
    outcome = await cog.log_deletion(_payload())

    assert outcome is DeliveryOutcome.DELIVERED
    fields = {f.name: f.value for f in text_channel.sent[0]["embed"].fields}
    assert fields["Content"] == "Content unavailable"
    assert fields["Author"] == "Unknown"
    resolver.resolve_in_guild.assert_not_called()


@pytest.mark.asyncio
async def test_cached_deletion_is_attributed_to_moderator(cog, guild, text_channel, resolver):
    resolver.resolve_in_guild.return_value = Attribution(99)

    await cog.log_deletion(_payload(cached_message=_message(guild, "hello there")))

    resolver.resolve_in_guild.assert_awaited_once_with(
        guild, 2, discord.AuditLogAction.message_delete, limit=1
    )
    fields = {f.name: f.value for f in text_channel.sent[0]["embed"].fields}
    assert fields["Content"] == "hello there"
    assert fields["Deleted by"] == "<@99>"


@pytest.mark.asyncio
async def test_bot_messages_and_direct_messages_are_ignored(cog, guild, text_channel):
    assert await cog.log_deletion(_payload(cached_message=_message(guild, "beep", bot=True))) is None
    assert await cog.log_deletion(_payload(guild_id=None)) is None
    assert await cog.log_deletion(_payload(guild_id=12345)) is None
    assert text_channel.sent == []


@pytest.mark.asyncio
async def test_edit_logs_old_and_new_content(cog, guild, text_channel):
    outcome = await cog.log_edit(_message(guild, "helo"), _message(guild, "hello"))

    assert outcome is DeliveryOutcome.DELIVERED
    embed = text_channel.sent[0]["embed"]
    fields = {f.name: f.value for f in embed.fields}
    assert embed.title == "Message edited"
    assert (fields["Old content"], fields["New content"]) == ("helo", "hello")


@pytest.mark.asyncio
async def test_edit_without_content_change_is_ignored(cog, guild, text_channel):
    assert await cog.log_edit(_message(guild, "same"), _message(guild, "same")) is None
    assert text_channel.sent == []
