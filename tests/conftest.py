"""
Pytest configuration and fixtures for Logcord tests.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
import pytest_asyncio

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from logcord.database.db_connection import ConnectionManager  # noqa: E402
from logcord.database.db_schema import SchemaManager  # noqa: E402
from logcord.settings.log_channels_service import LogChannelsService  # noqa: E402


@pytest_asyncio.fixture
async def connection(tmp_path):
    """Open connection on a fresh, migrated database file."""
    manager = ConnectionManager()
    await manager.open(tmp_path / "logcord.db")
    await SchemaManager.initialize_schema(manager.connection)
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def store(connection):
    """Routing config store on the temporary database."""
    return LogChannelsService(connection=connection)


def http_response(status, reason):
    return SimpleNamespace(status=status, reason=reason)


def not_found(message="Unknown Channel"):
    return discord.NotFound(http_response(404, "Not Found"), message)


def forbidden(message="Missing Permissions"):
    return discord.Forbidden(http_response(403, "Forbidden"), message)


class FakeTextChannel:
    """Minimal text channel: records what was sent to it."""

    def __init__(self, channel_id=500, send_error=None):
        self.id = channel_id
        self.sent = []
        self._send_error = send_error

    async def send(self, *args, **kwargs):
        if self._send_error is not None:
            raise self._send_error
        self.sent.append(kwargs)
        return SimpleNamespace(id=len(self.sent))


class FakeGuild:
    """Guild with a channel cache and an optional fetch fallback."""

    def __init__(self, guild_id=1, channels=None, fetch_channel=None):
        self.id = guild_id
        self.name = f"guild-{guild_id}"
        self._channels = {c.id: c for c in (channels or [])}
        self.fetch_channel = fetch_channel or AsyncMock(side_effect=not_found())
        self.audit_logs = MagicMock()

    def get_channel(self, channel_id):
        return self._channels.get(channel_id)


@pytest.fixture
def text_channel():
    return FakeTextChannel()


@pytest.fixture
def guild(text_channel):
    return FakeGuild(channels=[text_channel])


@pytest.fixture
def http_errors():
    """Factories for the discord HTTP errors the I/O guard classifies."""
    return SimpleNamespace(not_found=not_found, forbidden=forbidden)


@pytest.fixture
def fakes():
    """Fake discord object classes for tests that need more than one."""
    return SimpleNamespace(TextChannel=FakeTextChannel, Guild=FakeGuild)
