from logcord.datatypes.discord_datatypes import GuildID
from logcord.datatypes.log_datatypes import LogCategory
from logcord.datatypes.snapshot_datatypes import CONTENT_UNAVAILABLE, ChangedField, ChangeKind, EventKind
from logcord.pipeline.audit_resolver import UNKNOWN, Attribution
from logcord.pipeline.diff_engine import diff
from logcord.ui.log_embed import (
    MAX_FIELD_VALUE,
    build_change_record,
    build_message_deleted_record,
    build_message_edited_record,
    build_voice_records,
    describe_change,
    record_to_embed,
)


def _fields(record):
    return {f.name: f.value for f in record.fields}


def test_describe_scalar_change():
    change = ChangedField("name", ChangeKind.CHANGED, before="general", after="general-chat")
    assert describe_change(change) == 'Name changed from "general" to "general-chat"'


def test_describe_overwrite_changes():
    allowed = ChangedField("overwrites", ChangeKind.ALLOW_ADDED, subject=5, subject_type="role", entries=("speak",))
    removed = ChangedField("overwrites", ChangeKind.OVERWRITE_REMOVED, subject=6, subject_type="member")

    assert describe_change(allowed) == "For role <@&5> allowed: speak"
    assert describe_change(removed) == "Removed permission overwrite for member <@6>"


def test_empty_diff_builds_no_record():
    assert build_change_record(GuildID(1), EventKind.CHANNEL_UPDATED, "general", []) is None
    assert build_message_edited_record(GuildID(1), [], author_id=1, channel_id=2) is None


def test_update_record_lists_changes_and_attribution():
    changes = diff({"name": "general"}, {"name": "general-chat"})

    record = build_change_record(
        GuildID(1), EventKind.CHANNEL_UPDATED, "general-chat", changes, Attribution(7), "<#3>"
    )

    assert record.category is LogCategory.CHANGE
    assert record.description == 'Name changed from "general" to "general-chat"'
    assert _fields(record) == {"Target": "<#3>", "By": "<@7>"}


def test_unknown_attribution_has_no_by_field():
    changes = diff({"name": "a"}, {"name": "b"})
    record = build_change_record(GuildID(1), EventKind.ROLE_UPDATED, "b", changes, UNKNOWN, "<@&3>")
    assert "By" not in _fields(record)


def test_create_and_delete_records():
    created = build_change_record(
        GuildID(1), EventKind.ROLE_CREATED, "mods",
        diff(None, {"name": "mods", "color": "#ff0000"}),
    )
    deleted = build_change_record(
        GuildID(1), EventKind.CHANNEL_DELETED, "old", diff({"name": "old"}, None), mention="<#9>",
    )

    assert created.description.splitlines() == ["Role **mods** was created.", "Color: #ff0000"]
    assert deleted.description == "Channel **old** was deleted."
    assert "Target" not in _fields(deleted)


def test_deleted_message_with_unavailable_content():
    changes = diff({"content": CONTENT_UNAVAILABLE}, None)

    record = build_message_deleted_record(GuildID(1), changes, author_id=None, channel_id=4)

    assert record.category is LogCategory.TEXT
    assert _fields(record) == {"Author": "Unknown", "Channel": "<#4>", "Content": "Content unavailable"}


def test_deleted_message_with_moderator():
    changes = diff({"content": "hello"}, None)

    record = build_message_deleted_record(GuildID(1), changes, author_id=2, channel_id=4, attribution=Attribution(9))

    assert _fields(record)["Deleted by"] == "<@9>"
    assert _fields(record)["Content"] == "hello"


def test_edited_message_record_truncates_long_content():
    changes = diff({"content": "x"}, {"content": "y" * 5000})

    record = build_message_edited_record(GuildID(1), changes, author_id=2, channel_id=4, jump_url="https://j")

    assert record.category is LogCategory.EDIT
    assert len(_fields(record)["New content"]) == MAX_FIELD_VALUE
    assert _fields(record)["Message"] == "[Jump to message](https://j)"


def test_voice_move_and_mute_records():
    changes = diff(
        {"channel_id": 10, "mute": False, "deaf": False},
        {"channel_id": 20, "mute": True, "deaf": False},
    )

    records = build_voice_records(GuildID(1), 5, changes, {"mute": Attribution(8)})

    assert [r.title for r in records] == ["Moved between voice channels", "Server muted"]
    assert _fields(records[0]) == {"User": "<@5>", "Old channel": "<#10>", "New channel": "<#20>"}
    assert _fields(records[1])["By"] == "<@8>"
    assert all(r.category is LogCategory.VOICE for r in records)


def test_voice_join_and_unknown_deafen():
    changes = diff(
        {"channel_id": None, "mute": False, "deaf": True},
        {"channel_id": 20, "mute": False, "deaf": False},
    )

    records = build_voice_records(GuildID(1), 5, changes)

    assert [r.title for r in records] == ["Joined voice channel", "Server undeafened"]
    assert _fields(records[1])["By"] == "Unknown"


def test_record_to_embed():
    record = build_change_record(GuildID(1), EventKind.ROLE_UPDATED, "b", diff({"name": "a"}, {"name": "b"}))

    embed = record_to_embed(record)

    assert embed.title == "Role updated"
    assert embed.colour.value == record.color
    assert embed.timestamp == record.timestamp
