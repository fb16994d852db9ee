"""
Structural interfaces for the Discord objects the pipeline touches.

The pipeline never needs a concrete ``discord.TextChannel`` or
``discord.Member``; it needs something it can post to, something that
belongs to a guild, or something whose roles it can change. Expressing that
as protocols keeps the snapshot, routing and role logic testable with plain
fakes.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Sendable(Protocol):
    """A destination that accepts a message payload (text-capable channel)."""

    async def send(self, *args: Any, **kwargs: Any) -> Any: ...


@runtime_checkable
class ServerScoped(Protocol):
    """A guild handle able to resolve its channels."""

    id: int

    def get_channel(self, channel_id: int, /) -> Optional[Any]: ...

    async def fetch_channel(self, channel_id: int, /) -> Any: ...


@runtime_checkable
class RoleMutable(Protocol):
    """A member whose role membership can be read and changed."""

    id: int
    roles: Sequence[Any]

    async def add_roles(self, *roles: Any, reason: Optional[str] = None, atomic: bool = True) -> None: ...

    async def remove_roles(self, *roles: Any, reason: Optional[str] = None, atomic: bool = True) -> None: ...


def has_role(member: RoleMutable, role_id: int) -> bool:
    """Return True if ``member`` currently holds ``role_id``."""
    return any(getattr(role, "id", None) == role_id for role in member.roles)
