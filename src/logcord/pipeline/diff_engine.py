"""
Diff engine: the minimal ordered list of changes between two snapshots.

Output order is deterministic: attributes sorted by name; within an
overwrite map, subjects sorted by id; within one subject, allow-added,
allow-removed, deny-added, deny-removed. An empty list means "no change"
and callers must not build a record from it.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from logcord.datatypes.snapshot_datatypes import (
    AttributeSnapshot,
    ChangedField,
    ChangeKind,
    OverwriteSnapshot,
)

_EMPTY: Mapping[str, Any] = {}


def _is_overwrite_map(value: Any) -> bool:
    return isinstance(value, Mapping) and all(
        isinstance(v, OverwriteSnapshot) for v in value.values()
    )


def _is_set(value: Any) -> bool:
    return isinstance(value, (set, frozenset))


def _sorted(entries) -> tuple:
    return tuple(sorted(entries))


def diff_sets(attribute: str, before: Any, after: Any) -> List[ChangedField]:
    """Added and removed entries of a flat set attribute."""
    before = frozenset(before or ())
    after = frozenset(after or ())
    changes: List[ChangedField] = []
    added = after - before
    removed = before - after
    if added:
        changes.append(ChangedField(attribute, ChangeKind.ENTRIES_ADDED, entries=_sorted(added)))
    if removed:
        changes.append(ChangedField(attribute, ChangeKind.ENTRIES_REMOVED, entries=_sorted(removed)))
    return changes


def diff_overwrite(
    attribute: str,
    subject: int,
    before: Optional[OverwriteSnapshot],
    after: Optional[OverwriteSnapshot],
) -> List[ChangedField]:
    """Changes of one subject's overwrite; allow and deny are independent."""
    if before is None and after is None:
        return []
    if before is None:
        return [ChangedField(
            attribute, ChangeKind.OVERWRITE_ADDED,
            subject=subject, subject_type=after.subject_type,
            after=after,
        )]
    if after is None:
        return [ChangedField(
            attribute, ChangeKind.OVERWRITE_REMOVED,
            subject=subject, subject_type=before.subject_type,
            before=before,
        )]
    if before == after:
        return []

    subject_type = after.subject_type
    deltas = (
        (ChangeKind.ALLOW_ADDED, after.allow - before.allow),
        (ChangeKind.ALLOW_REMOVED, before.allow - after.allow),
        (ChangeKind.DENY_ADDED, after.deny - before.deny),
        (ChangeKind.DENY_REMOVED, before.deny - after.deny),
    )
    return [
        ChangedField(attribute, kind, subject=subject, subject_type=subject_type, entries=_sorted(entries))
        for kind, entries in deltas
        if entries
    ]


def diff_overwrites(attribute: str, before: Any, after: Any) -> List[ChangedField]:
    before = before or {}
    after = after or {}
    changes: List[ChangedField] = []
    for subject in sorted(set(before) | set(after)):
        changes.extend(diff_overwrite(attribute, subject, before.get(subject), after.get(subject)))
    return changes


def diff_attribute(attribute: str, before: Any, after: Any, *, present_before: bool, present_after: bool) -> List[ChangedField]:
    sample = after if present_after else before
    if _is_overwrite_map(sample) and (not present_before or _is_overwrite_map(before)):
        return diff_overwrites(attribute, before if present_before else None, after if present_after else None)
    if _is_set(sample) and (not present_before or _is_set(before)):
        return diff_sets(attribute, before if present_before else None, after if present_after else None)

    if not present_before:
        return [ChangedField(attribute, ChangeKind.ADDED, after=after)]
    if not present_after:
        return [ChangedField(attribute, ChangeKind.REMOVED, before=before)]
    if before != after:
        return [ChangedField(attribute, ChangeKind.CHANGED, before=before, after=after)]
    return []


def diff(before: Optional[AttributeSnapshot], after: Optional[AttributeSnapshot]) -> List[ChangedField]:
    """Compute the changes turning ``before`` into ``after``.

    Either side may be None (create or delete event), which is treated as an
    empty snapshot: every present attribute is then reported as added or
    removed.

    Returns:
        Ordered list of :class:`ChangedField`. Empty when nothing changed.
    """
    before = before if before is not None else _EMPTY
    after = after if after is not None else _EMPTY

    changes: List[ChangedField] = []
    for attribute in sorted(set(before) | set(after)):
        changes.extend(diff_attribute(
            attribute,
            before.get(attribute),
            after.get(attribute),
            present_before=attribute in before,
            present_after=attribute in after,
        ))
    return changes

