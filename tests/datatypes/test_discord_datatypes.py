import pytest

from logcord.datatypes.discord_datatypes import ChannelID, GuildID, RoleID, UserID
from logcord.datatypes.log_datatypes import ChangeRecord, LogCategory, LogChannels


class DummyObj:
    def __init__(self, id_val=None):
        self.id = id_val


def test_snowflake_from_int_and_str_equality_and_hash():
    g1 = GuildID(12345)
    assert g1.to_int() == 12345
    assert str(g1) == "12345"

    g2 = GuildID("12345")
    assert g1 == g2

    g3 = GuildID.from_int(67890)
    assert isinstance(g3, GuildID)

    g4 = GuildID.from_object(DummyObj(id_val=111))
    assert g4 == 111
    assert g4 == "111"

    assert len({g1, g2, g3, g4}) == 3


def test_snowflake_types_do_not_mix():
    assert GuildID(5) != ChannelID(5)
    assert RoleID(5) != UserID(5)


@pytest.mark.parametrize("bad", [[], -1, "-3", True, "abc"])
def test_snowflake_invalid(bad):
    with pytest.raises(ValueError):
        GuildID(bad)


def test_log_category_parse():
    assert LogCategory.parse(" Voice ") is LogCategory.VOICE
    assert LogCategory.parse(LogCategory.EDIT) is LogCategory.EDIT
    with pytest.raises(ValueError):
        LogCategory.parse("audit")


def test_log_channels_with_channel_only_touches_one_category():
    base = LogChannels(guild_id=GuildID(1), text_channel_id=ChannelID(10))
    updated = base.with_channel(LogCategory.CHANGE, ChannelID(40))

    assert updated.text_channel_id == ChannelID(10)
    assert updated.change_channel_id == ChannelID(40)
    assert base.change_channel_id is None
    assert updated.channel_for(LogCategory.VOICE) is None


def test_change_record_fields_keep_order():
    record = ChangeRecord(GuildID(1), LogCategory.CHANGE, "Role updated", 0x3498DB)
    record.add_field("Target", "<@&1>", inline=True).add_field("By", "<@2>")

    assert [f.name for f in record.fields] == ["Target", "By"]
    assert record.fields[0].inline is True
    assert record.timestamp.tzinfo is not None
