from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest
import pytest_asyncio

from logcord.bot.cogs import voice_log_listener
from logcord.datatypes.discord_datatypes import ChannelID, GuildID
from logcord.datatypes.log_datatypes import DeliveryOutcome, LogCategory
from logcord.pipeline.audit_resolver import Attribution
from logcord.pipeline.notification_router import NotificationRouter


@pytest.fixture
def resolver():
    return SimpleNamespace(resolve_in_guild=AsyncMock(return_value=Attribution(8)))


@pytest_asyncio.fixture
async def cog(store, guild, text_channel, resolver):
    await store.set_channel(GuildID(guild.id), LogCategory.VOICE, ChannelID(text_channel.id))
    return voice_log_listener.VoiceLogListenerCog(
        SimpleNamespace(), router=NotificationRouter(store=store), resolver=resolver
    )


def _state(channel_id=None, mute=False, deaf=False):
    channel = SimpleNamespace(id=channel_id) if channel_id is not None else None
    return SimpleNamespace(channel=channel, mute=mute, deaf=deaf, self_mute=False, self_deaf=False)


@pytest.fixture
def member(guild):
    return SimpleNamespace(id=5, bot=False, guild=guild)


@pytest.mark.asyncio
async def test_join_is_logged_without_audit_lookup(cog, member, text_channel, resolver):
    outcomes = await cog.log_voice_change(member, _state(), _state(20))

    assert outcomes == [DeliveryOutcome.DELIVERED]
    assert text_channel.sent[0]["embed"].title == "Joined voice channel"
    resolver.resolve_in_guild.assert_not_called()


@pytest.mark.asyncio
async def test_server_mute_is_attributed(cog, member, guild, text_channel, resolver):
    await cog.log_voice_change(member, _state(20), _state(20, mute=True))

    resolver.resolve_in_guild.assert_awaited_once_with(
        guild, 5, discord.AuditLogAction.member_update, limit=5, change_key="mute"
    )
    embed = text_channel.sent[0]["embed"]
    assert embed.title == "Server muted"
    assert {f.name: f.value for f in embed.fields}["By"] == "<@8>"


@pytest.mark.asyncio
async def test_self_mute_only_is_not_logged(cog, member, text_channel):
    before = _state(20)
    after = SimpleNamespace(channel=before.channel, mute=False, deaf=False, self_mute=True, self_deaf=False)

    assert await cog.log_voice_change(member, before, after) == []
    assert text_channel.sent == []


@pytest.mark.asyncio
async def test_leave_with_unmute_posts_two_records(cog, member, text_channel):
    outcomes = await cog.log_voice_change(member, _state(20, mute=True), _state())

    assert len(outcomes) == 2
    assert [s["embed"].title for s in text_channel.sent] == ["Left voice channel", "Server unmuted"]

