"""
Type-safe wrapper classes for Discord identifiers.

Discord snowflakes are 64-bit integers that are frequently passed around as
strings (slash command options, YAML keys). These wrappers give every layer
one consistent representation and keep guild, channel, role and user ids
from being mixed up.
"""

from __future__ import annotations

from typing import Union


class Snowflake:
    """
    Base wrapper for a Discord snowflake id.

    The id is stored as a string for parity with the Discord API and YAML
    configuration, and converted to ``int`` for SQLite and discord calls.

    Example:
        >>> gid = GuildID("123456789012345678")
        >>> gid.to_int()
        123456789012345678
        >>> gid == 123456789012345678
        True
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "Snowflake"]) -> None:
        """
        Args:
            value: The snowflake as a string, int, or another wrapper.

        Raises:
            ValueError: If the value is not a non-negative integer snowflake.
        """
        if isinstance(value, Snowflake):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool")
        elif isinstance(value, int):
            if value < 0:
                raise ValueError(f"Snowflake must be non-negative, got {value}")
            self._value = str(value)
        elif isinstance(value, str):
            parsed = int(value.strip())
            if parsed < 0:
                raise ValueError(f"Snowflake must be non-negative, got {value!r}")
            self._value = str(parsed)
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    @classmethod
    def from_int(cls, value: int):
        return cls(value)

    @classmethod
    def from_object(cls, obj):
        """Build the id from any discord object exposing ``.id``."""
        return cls(obj.id)

    def to_int(self) -> int:
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Snowflake):
            return type(self) is type(other) and self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


class GuildID(Snowflake):
    """Snowflake of a guild (server)."""
    __slots__ = ()


class ChannelID(Snowflake):
    """Snowflake of a guild channel or thread."""
    __slots__ = ()


class RoleID(Snowflake):
    """Snowflake of a guild role."""
    __slots__ = ()


class UserID(Snowflake):
    """Snowflake of a user or guild member."""
    __slots__ = ()
