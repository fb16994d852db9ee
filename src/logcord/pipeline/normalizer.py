"""
Event normalizer: gateway objects to attribute snapshots.

Each ``snapshot_*`` function reads only the attributes the diff engine
compares, so the rest of the pipeline never touches a discord object's
internals. :func:`normalize` pairs two snapshots with their event kind;
a create event has no ``before`` and a delete event has no ``after``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, FrozenSet, Optional

import discord

from logcord.datatypes.snapshot_datatypes import (
    CONTENT_UNAVAILABLE,
    EventKind,
    NormalizedEvent,
    OverwriteSnapshot,
)


def permission_names(permissions: Any) -> FrozenSet[str]:
    """Names of the permissions set to True.

    Accepts ``discord.Permissions`` or anything iterating ``(name, value)``.
    """
    if permissions is None:
        return frozenset()
    return frozenset(name for name, value in permissions if value)


def _color_hex(role: Any) -> str:
    color = getattr(role, "color", None)
    if color is None:
        return "#000000"
    value = getattr(color, "value", color)
    return f"#{int(value):06x}"


def _subject_type(target: Any) -> str:
    if isinstance(target, discord.Role):
        return "role"
    return "member"


def overwrite_snapshot(target: Any, overwrite: discord.PermissionOverwrite) -> OverwriteSnapshot:
    allow, deny = overwrite.pair()
    return OverwriteSnapshot(
        subject_type=_subject_type(target),
        allow=permission_names(allow),
        deny=permission_names(deny),
    )


def snapshot_role(role: Any) -> Dict[str, Any]:
    return {
        "name": role.name,
        "color": _color_hex(role),
        "permissions": permission_names(role.permissions),
    }


def snapshot_channel(channel: Any) -> Dict[str, Any]:
    overwrites = getattr(channel, "overwrites", None) or {}
    return {
        "name": channel.name,
        "overwrites": {
            target.id: overwrite_snapshot(target, overwrite)
            for target, overwrite in overwrites.items()
        },
    }


def snapshot_message(message: Optional[Any]) -> Dict[str, Any]:
    """Snapshot of a message's content.

    Content that can no longer be retrieved (uncached deleted message) is
    replaced with ``CONTENT_UNAVAILABLE``.
    """
    content = getattr(message, "content", None) if message is not None else None
    if content is None:
        content = CONTENT_UNAVAILABLE
    return {"content": content}


def snapshot_voice_state(state: Optional[Any]) -> Dict[str, Any]:
    channel = getattr(state, "channel", None)
    return {
        "channel_id": channel.id if channel is not None else None,
        "mute": bool(getattr(state, "mute", False)),
        "deaf": bool(getattr(state, "deaf", False)),
    }


_SNAPSHOTTERS: Dict[EventKind, Callable[[Any], Dict[str, Any]]] = {
    EventKind.ROLE_CREATED: snapshot_role,
    EventKind.ROLE_DELETED: snapshot_role,
    EventKind.ROLE_UPDATED: snapshot_role,
    EventKind.CHANNEL_CREATED: snapshot_channel,
    EventKind.CHANNEL_DELETED: snapshot_channel,
    EventKind.CHANNEL_UPDATED: snapshot_channel,
    EventKind.MESSAGE_DELETED: snapshot_message,
    EventKind.MESSAGE_UPDATED: snapshot_message,
    EventKind.VOICE_STATE_CHANGED: snapshot_voice_state,
}


def normalize(kind: EventKind, before: Any = None, after: Any = None) -> NormalizedEvent:
    """Convert a raw before/after pair into snapshots.

    Args:
        kind: Which gateway event produced the objects.
        before: Object before the change. Ignored for create events.
        after: Object after the change. Ignored for delete events.

    For a deleted message ``before`` may be None; the snapshot then carries
    the unavailable-content placeholder. A voice state change always has
    both sides, an absent channel being ``channel_id = None``.
    """
    snap = _SNAPSHOTTERS[kind]

    if kind.is_create:
        return NormalizedEvent(kind, None, snap(after))
    if kind.is_delete:
        return NormalizedEvent(kind, snap(before), None)
    return NormalizedEvent(kind, snap(before), snap(after))
