"""
Attribute snapshots and diff results.

A snapshot is a plain mapping ``attribute name -> value`` describing one
entity at one point in time. Three kinds of values are understood by the
diff engine:

- scalars (str, int, bool, None) such as a name or a mute flag,
- flat sets (``frozenset``) such as the permissions granted to a role,
- overwrite maps (``dict`` of subject id -> :class:`OverwriteSnapshot`)
  holding a channel's per-role and per-member permission overwrites.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple


class _Unavailable:
    """Marker for a value Discord no longer lets us retrieve."""

    _instance: Optional["_Unavailable"] = None

    def __new__(cls) -> "_Unavailable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CONTENT_UNAVAILABLE"

    def __bool__(self) -> bool:
        return False


CONTENT_UNAVAILABLE = _Unavailable()

AttributeSnapshot = Mapping[str, Any]


class EventKind(Enum):
    """Gateway events understood by the normalizer."""
    ROLE_CREATED = "role_created"
    ROLE_DELETED = "role_deleted"
    ROLE_UPDATED = "role_updated"
    CHANNEL_CREATED = "channel_created"
    CHANNEL_DELETED = "channel_deleted"
    CHANNEL_UPDATED = "channel_updated"
    MESSAGE_DELETED = "message_deleted"
    MESSAGE_UPDATED = "message_updated"
    VOICE_STATE_CHANGED = "voice_state_changed"

    @property
    def is_create(self) -> bool:
        return self in (EventKind.ROLE_CREATED, EventKind.CHANNEL_CREATED)

    @property
    def is_delete(self) -> bool:
        return self in (EventKind.ROLE_DELETED, EventKind.CHANNEL_DELETED, EventKind.MESSAGE_DELETED)


@dataclass(frozen=True, slots=True)
class OverwriteSnapshot:
    """Permission overwrite of one subject (role or member) on a channel."""
    subject_type: str
    allow: FrozenSet[str] = frozenset()
    deny: FrozenSet[str] = frozenset()


@dataclass(frozen=True, slots=True)
class NormalizedEvent:
    """Canonical before/after pair for one gateway event.

    ``before`` is None for create events and ``after`` is None for delete
    events.
    """
    kind: EventKind
    before: Optional[Dict[str, Any]]
    after: Optional[Dict[str, Any]]


class ChangeKind(Enum):
    """Shape of a single detected change."""
    CHANGED = "changed"
    ADDED = "added"
    REMOVED = "removed"
    ENTRIES_ADDED = "entries_added"
    ENTRIES_REMOVED = "entries_removed"
    OVERWRITE_ADDED = "overwrite_added"
    OVERWRITE_REMOVED = "overwrite_removed"
    ALLOW_ADDED = "allow_added"
    ALLOW_REMOVED = "allow_removed"
    DENY_ADDED = "deny_added"
    DENY_REMOVED = "deny_removed"


@dataclass(frozen=True, slots=True)
class ChangedField:
    """One line of a diff.

    For scalar changes ``before``/``after`` hold the two values. For set and
    overwrite changes ``entries`` holds the sorted permission names involved
    and ``subject`` the overwrite subject id, if any.
    """
    attribute: str
    kind: ChangeKind
    before: Any = None
    after: Any = None
    subject: Optional[int] = None
    subject_type: Optional[str] = None
    entries: Tuple[str, ...] = field(default_factory=tuple)
