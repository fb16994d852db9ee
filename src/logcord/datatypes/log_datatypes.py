"""
Data types shared by the notification pipeline and the routing config store.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

from logcord.datatypes.discord_datatypes import ChannelID, GuildID


class LogCategory(Enum):
    """Notification classes a guild can route to separate channels."""
    TEXT = "text"
    EDIT = "edit"
    VOICE = "voice"
    CHANGE = "change"

    @classmethod
    def parse(cls, value: "str | LogCategory") -> "LogCategory":
        """Parse a user supplied category name (case-insensitive).

        Raises:
            ValueError: If ``value`` is not one of text, edit, voice, change.
        """
        if isinstance(value, LogCategory):
            return value
        return cls(str(value).strip().lower())


class DeliveryOutcome(Enum):
    """What happened to a routed record."""
    DELIVERED = "delivered"
    DROPPED = "dropped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RecordField:
    """One labelled line of a change record."""
    name: str
    value: str
    inline: bool = False


@dataclass(slots=True)
class ChangeRecord:
    """A formatted notification ready for the router.

    Built per event and consumed once; never persisted.
    """

    guild_id: GuildID
    category: LogCategory
    title: str
    color: int
    description: Optional[str] = None
    fields: List[RecordField] = field(default_factory=list)
    timestamp: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    def add_field(self, name: str, value: str, inline: bool = False) -> "ChangeRecord":
        self.fields.append(RecordField(name=name, value=value, inline=inline))
        return self


# Column name in log_channels for each category
CATEGORY_COLUMNS = {
    LogCategory.TEXT: "text_channel_id",
    LogCategory.EDIT: "edit_channel_id",
    LogCategory.VOICE: "voice_channel_id",
    LogCategory.CHANGE: "change_channel_id",
}


@dataclass(frozen=True, slots=True)
class LogChannels:
    """Routing configuration of one guild: a destination per category.

    Any field may be None, meaning records of that category are dropped.
    """

    guild_id: GuildID
    text_channel_id: Optional[ChannelID] = None
    edit_channel_id: Optional[ChannelID] = None
    voice_channel_id: Optional[ChannelID] = None
    change_channel_id: Optional[ChannelID] = None

    def channel_for(self, category: LogCategory) -> Optional[ChannelID]:
        return getattr(self, CATEGORY_COLUMNS[category])

    def with_channel(self, category: LogCategory, channel_id: Optional[ChannelID]) -> "LogChannels":
        """Return a copy with only ``category`` changed."""
        return replace(self, **{CATEGORY_COLUMNS[category]: channel_id})
