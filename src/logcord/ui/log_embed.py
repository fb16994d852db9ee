"""
Rendering of diffs into change records and of change records into embeds.

The builders here return ``None`` when handed an empty diff: a record is
only ever built for an event that actually changed something.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence

import discord

from logcord.datatypes.discord_datatypes import GuildID
from logcord.datatypes.log_datatypes import ChangeRecord, LogCategory
from logcord.datatypes.snapshot_datatypes import (
    CONTENT_UNAVAILABLE,
    ChangedField,
    ChangeKind,
    EventKind,
)
from logcord.pipeline.audit_resolver import Attribution

# Embed limits enforced by Discord
MAX_FIELD_VALUE = 1024
MAX_DESCRIPTION = 4096

UNAVAILABLE_TEXT = "Content unavailable"
EMPTY_TEXT = "No content"
UNKNOWN_TEXT = "Unknown"

COLOR_CREATED = 0x2ECC71
COLOR_DELETED = 0xE74C3C
COLOR_UPDATED = 0x3498DB
COLOR_MESSAGE_DELETED = 0xFF0000
COLOR_MESSAGE_EDITED = 0xFFA500
COLOR_VOICE_JOIN = 0x00FF00
COLOR_VOICE_LEAVE = 0xFF0000
COLOR_VOICE_MOVE = 0xF1C40F

ATTRIBUTE_LABELS = {
    "name": "Name",
    "color": "Color",
    "permissions": "Permissions",
    "content": "Content",
}

ENTITY_TITLES = {
    EventKind.ROLE_CREATED: ("Role created", "Role **{name}** was created.", COLOR_CREATED),
    EventKind.ROLE_DELETED: ("Role deleted", "Role **{name}** was deleted.", COLOR_DELETED),
    EventKind.ROLE_UPDATED: ("Role updated", None, COLOR_UPDATED),
    EventKind.CHANNEL_CREATED: ("Channel created", "Channel **{name}** was created.", COLOR_CREATED),
    EventKind.CHANNEL_DELETED: ("Channel deleted", "Channel **{name}** was deleted.", COLOR_DELETED),
    EventKind.CHANNEL_UPDATED: ("Channel updated", None, COLOR_UPDATED),
}


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def format_value(value: Any) -> str:
    """Human text for a snapshot value; placeholder renders as unavailable."""
    if value is CONTENT_UNAVAILABLE:
        return UNAVAILABLE_TEXT
    if value is None:
        return "None"
    if isinstance(value, str):
        return value if value else EMPTY_TEXT
    if isinstance(value, (set, frozenset)):
        return ", ".join(sorted(value)) if value else "None"
    return str(value)


def subject_mention(change: ChangedField) -> str:
    if change.subject_type == "role":
        return f"role <@&{change.subject}>"
    return f"member <@{change.subject}>"


def _label(attribute: str) -> str:
    return ATTRIBUTE_LABELS.get(attribute, attribute.replace("_", " ").capitalize())


def describe_change(change: ChangedField) -> str:
    """One human-readable line for a changed field."""
    label = _label(change.attribute)
    entries = ", ".join(change.entries)
    kind = change.kind

    if kind is ChangeKind.CHANGED:
        return f'{label} changed from "{format_value(change.before)}" to "{format_value(change.after)}"'
    if kind is ChangeKind.ADDED:
        return f"{label}: {format_value(change.after)}"
    if kind is ChangeKind.REMOVED:
        return f"{label}: {format_value(change.before)}"
    if kind is ChangeKind.ENTRIES_ADDED:
        return f"{label} added: {entries}"
    if kind is ChangeKind.ENTRIES_REMOVED:
        return f"{label} removed: {entries}"
    if kind is ChangeKind.OVERWRITE_ADDED:
        return f"Added permission overwrite for {subject_mention(change)}"
    if kind is ChangeKind.OVERWRITE_REMOVED:
        return f"Removed permission overwrite for {subject_mention(change)}"
    if kind is ChangeKind.ALLOW_ADDED:
        return f"For {subject_mention(change)} allowed: {entries}"
    if kind is ChangeKind.ALLOW_REMOVED:
        return f"For {subject_mention(change)} no longer allowed: {entries}"
    if kind is ChangeKind.DENY_ADDED:
        return f"For {subject_mention(change)} denied: {entries}"
    if kind is ChangeKind.DENY_REMOVED:
        return f"For {subject_mention(change)} no longer denied: {entries}"
    return f"{label} changed"


def describe_changes(changes: Iterable[ChangedField]) -> List[str]:
    return [describe_change(change) for change in changes]


def build_change_record(
    guild_id: GuildID,
    kind: EventKind,
    name: str,
    changes: Sequence[ChangedField],
    attribution: Optional[Attribution] = None,
    mention: Optional[str] = None,
) -> Optional[ChangeRecord]:
    """Record for a role or channel create/delete/update.

    Returns:
        The record, or None when ``changes`` is empty.
    """
    if not changes:
        return None

    title, header, color = ENTITY_TITLES[kind]
    lines: List[str] = []
    if header:
        lines.append(header.format(name=name))
    if kind.is_create:
        lines.extend(describe_changes(c for c in changes if c.attribute != "name" and c.attribute != "overwrites"))
    elif not kind.is_delete:
        lines.extend(describe_changes(changes))

    record = ChangeRecord(
        guild_id=GuildID(guild_id),
        category=LogCategory.CHANGE,
        title=title,
        color=color,
        description=truncate("\n".join(lines), MAX_DESCRIPTION),
    )
    if mention and not kind.is_delete:
        record.add_field("Target", mention, inline=True)
    if attribution is not None and attribution.known:
        record.add_field("By", attribution.mention, inline=True)
    return record


def build_message_deleted_record(
    guild_id: GuildID,
    changes: Sequence[ChangedField],
    *,
    author_id: Optional[int],
    channel_id: int,
    attribution: Optional[Attribution] = None,
) -> Optional[ChangeRecord]:
    if not changes:
        return None
    content = next((c.before for c in changes if c.attribute == "content"), CONTENT_UNAVAILABLE)

    record = ChangeRecord(
        guild_id=GuildID(guild_id),
        category=LogCategory.TEXT,
        title="Message deleted",
        color=COLOR_MESSAGE_DELETED,
    )
    record.add_field("Author", f"<@{author_id}>" if author_id is not None else UNKNOWN_TEXT, inline=True)
    if attribution is not None and attribution.known:
        record.add_field("Deleted by", attribution.mention, inline=True)
    record.add_field("Channel", f"<#{channel_id}>", inline=True)
    record.add_field("Content", truncate(format_value(content), MAX_FIELD_VALUE))
    return record


def build_message_edited_record(
    guild_id: GuildID,
    changes: Sequence[ChangedField],
    *,
    author_id: int,
    channel_id: int,
    jump_url: Optional[str] = None,
) -> Optional[ChangeRecord]:
    content_change = next((c for c in changes if c.attribute == "content"), None)
    if content_change is None:
        return None

    record = ChangeRecord(
        guild_id=GuildID(guild_id),
        category=LogCategory.EDIT,
        title="Message edited",
        color=COLOR_MESSAGE_EDITED,
    )
    record.add_field("Author", f"<@{author_id}>", inline=True)
    record.add_field("Channel", f"<#{channel_id}>", inline=True)
    record.add_field("Old content", truncate(format_value(content_change.before), MAX_FIELD_VALUE))
    record.add_field("New content", truncate(format_value(content_change.after), MAX_FIELD_VALUE))
    if jump_url:
        record.add_field("Message", f"[Jump to message]({jump_url})")
    return record


def build_voice_records(
    guild_id: GuildID,
    member_id: int,
    changes: Sequence[ChangedField],
    attributions: Optional[dict] = None,
) -> List[ChangeRecord]:
    """Records for one voice state change.

    A single event can produce several records: a join/leave/move and,
    independently, a server mute and a server deafen toggle. ``attributions``
    maps ``"mute"`` / ``"deaf"`` to the resolved :class:`Attribution`.
    """
    attributions = attributions or {}
    guild_id = GuildID(guild_id)
    user = f"<@{member_id}>"
    records: List[ChangeRecord] = []

    for change in changes:
        if change.attribute == "channel_id":
            records.append(_presence_record(guild_id, user, change.before, change.after))
        elif change.attribute in ("mute", "deaf"):
            enabled = bool(change.after)
            if change.attribute == "mute":
                title = "Server muted" if enabled else "Server unmuted"
            else:
                title = "Server deafened" if enabled else "Server undeafened"
            attribution = attributions.get(change.attribute)
            by = attribution.mention if attribution is not None and attribution.known else UNKNOWN_TEXT
            record = ChangeRecord(
                guild_id=guild_id,
                category=LogCategory.VOICE,
                title=title,
                color=COLOR_VOICE_LEAVE if enabled else COLOR_VOICE_JOIN,
            )
            record.add_field("User", user, inline=True)
            record.add_field("By", by, inline=True)
            records.append(record)

    return records


def _presence_record(guild_id: GuildID, user: str, before: Optional[int], after: Optional[int]) -> ChangeRecord:
    if before is None:
        record = ChangeRecord(guild_id, LogCategory.VOICE, "Joined voice channel", COLOR_VOICE_JOIN)
        record.add_field("User", user, inline=True)
        record.add_field("Channel", f"<#{after}>", inline=True)
    elif after is None:
        record = ChangeRecord(guild_id, LogCategory.VOICE, "Left voice channel", COLOR_VOICE_LEAVE)
        record.add_field("User", user, inline=True)
        record.add_field("Channel", f"<#{before}>", inline=True)
    else:
        record = ChangeRecord(guild_id, LogCategory.VOICE, "Moved between voice channels", COLOR_VOICE_MOVE)
        record.add_field("User", user, inline=True)
        record.add_field("Old channel", f"<#{before}>", inline=True)
        record.add_field("New channel", f"<#{after}>", inline=True)
    return record


def record_to_embed(record: ChangeRecord) -> discord.Embed:
    """Delivery payload for a record."""
    embed = discord.Embed(
        title=record.title,
        description=record.description or None,
        color=discord.Color(record.color),
        timestamp=record.timestamp,
    )
    for field in record.fields:
        embed.add_field(name=field.name, value=truncate(field.value, MAX_FIELD_VALUE), inline=field.inline)
    return embed
