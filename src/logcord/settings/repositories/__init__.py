"""Repository layer for routing configuration database access."""
from logcord.settings.repositories.log_channels_repo import LogChannelsRepository

__all__ = [
    "LogChannelsRepository",
]
