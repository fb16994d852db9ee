import pytest

from logcord.datatypes.snapshot_datatypes import ChangeKind, OverwriteSnapshot
from logcord.pipeline.diff_engine import diff, diff_overwrite


def _ow(subject_type="role", allow=(), deny=()):
    return OverwriteSnapshot(subject_type, frozenset(allow), frozenset(deny))


def test_identical_snapshots_have_no_changes():
    snap = {
        "name": "general",
        "permissions": frozenset({"send_messages"}),
        "overwrites": {1: _ow(allow={"view_channel"})},
    }
    assert diff(snap, dict(snap)) == []


def test_scalar_change():
    changes = diff({"name": "general"}, {"name": "general-chat"})

    assert len(changes) == 1
    assert changes[0].kind is ChangeKind.CHANGED
    assert (changes[0].before, changes[0].after) == ("general", "general-chat")


def test_create_and_delete_report_added_and_removed():
    created = diff(None, {"name": "mods", "color": "#ff0000"})
    deleted = diff({"name": "mods"}, None)

    assert [(c.attribute, c.kind) for c in created] == [
        ("color", ChangeKind.ADDED),
        ("name", ChangeKind.ADDED),
    ]
    assert [(c.attribute, c.kind, c.before) for c in deleted] == [("name", ChangeKind.REMOVED, "mods")]


def test_set_attribute_reports_sorted_entries():
    changes = diff(
        {"permissions": frozenset({"kick_members", "ban_members"})},
        {"permissions": frozenset({"ban_members", "manage_roles", "administrator"})},
    )

    assert [(c.kind, c.entries) for c in changes] == [
        (ChangeKind.ENTRIES_ADDED, ("administrator", "manage_roles")),
        (ChangeKind.ENTRIES_REMOVED, ("kick_members",)),
    ]


def test_attributes_ordered_by_name():
    changes = diff(
        {"name": "a", "color": "#000000", "permissions": frozenset()},
        {"name": "b", "color": "#ffffff", "permissions": frozenset({"speak"})},
    )
    assert [c.attribute for c in changes] == ["color", "name", "permissions"]


def test_overwrite_added_and_removed():
    changes = diff(
        {"overwrites": {10: _ow(allow={"view_channel"})}},
        {"overwrites": {20: _ow("member", deny={"send_messages"})}},
    )

    assert [(c.kind, c.subject, c.subject_type) for c in changes] == [
        (ChangeKind.OVERWRITE_REMOVED, 10, "role"),
        (ChangeKind.OVERWRITE_ADDED, 20, "member"),
    ]
    assert changes[1].after.deny == frozenset({"send_messages"})


def test_overwrite_allow_and_deny_deltas_in_fixed_order():
    before = _ow(allow={"view_channel", "connect"}, deny={"speak"})
    after = _ow(allow={"view_channel", "attach_files"}, deny={"send_messages"})

    changes = diff_overwrite("overwrites", 5, before, after)

    assert [(c.kind, c.entries) for c in changes] == [
        (ChangeKind.ALLOW_ADDED, ("attach_files",)),
        (ChangeKind.ALLOW_REMOVED, ("connect",)),
        (ChangeKind.DENY_ADDED, ("send_messages",)),
        (ChangeKind.DENY_REMOVED, ("speak",)),
    ]


def test_subjects_ordered_by_id():
    before = {"overwrites": {30: _ow(), 4: _ow()}}
    after = {"overwrites": {30: _ow(allow={"speak"}), 4: _ow(allow={"speak"})}}

    assert [c.subject for c in diff(before, after)] == [4, 30]


@pytest.mark.parametrize("before, after", [
    (_ow(allow={"a", "b"}, deny={"c"}), _ow(allow={"b", "d"}, deny={"a", "c"})),
    (_ow(), _ow(allow={"x"}, deny={"y"})),
    (_ow(allow={"x"}, deny={"y"}), _ow()),
])
def test_overwrite_deltas_rebuild_after(before, after):
    allow, deny = set(before.allow), set(before.deny)
    for change in diff_overwrite("overwrites", 1, before, after):
        if change.kind is ChangeKind.ALLOW_ADDED:
            allow |= set(change.entries)
        elif change.kind is ChangeKind.ALLOW_REMOVED:
            allow -= set(change.entries)
        elif change.kind is ChangeKind.DENY_ADDED:
            deny |= set(change.entries)
        elif change.kind is ChangeKind.DENY_REMOVED:
            deny -= set(change.entries)

    assert allow == after.allow
    assert deny == after.deny
