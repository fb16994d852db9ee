"""
Audit attribution: who caused an observed change?

Discord does not tell a listener who performed an action. The audit log
does, but it is eventually consistent and not ordered relative to gateway
events. The resolver therefore trusts an audit entry only if

1. it is the first entry (most recent first) whose target is the object the
   event is about, optionally also touching a given change key, and
2. it is no older than the attribution window.

Anything else resolves to "unknown". The resolver never raises: an audit log
that cannot be read (missing View Audit Log permission, HTTP error) is the
same as no match.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, List, Optional, Protocol

import discord

from logcord.util.io_guard import attempt
from logcord.util.logger import get_logger

logger = get_logger("audit_resolver")

DEFAULT_WINDOW_MS = 5000
# Member updates and structure changes are noisy: look a few entries back.
AMBIGUOUS_LOOKBACK = 5
# Message deletions: only the newest entry can plausibly be ours.
SINGLE_LOOKBACK = 1


@dataclass(frozen=True, slots=True)
class AuditEntry:
    """One audit log entry, reduced to what attribution needs."""
    executor_id: Optional[int]
    target_id: Optional[int]
    created_at: datetime.datetime
    change_keys: FrozenSet[str] = frozenset()


@dataclass(frozen=True, slots=True)
class AuditAttributionQuery:
    target_id: int
    action: Any
    window_ms: int = DEFAULT_WINDOW_MS
    limit: int = AMBIGUOUS_LOOKBACK
    change_key: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Attribution:
    executor_id: Optional[int] = None

    @property
    def known(self) -> bool:
        return self.executor_id is not None

    @property
    def mention(self) -> Optional[str]:
        return f"<@{self.executor_id}>" if self.executor_id is not None else None


UNKNOWN = Attribution()


class AuditTrail(Protocol):
    """Source of audit entries, most recent first."""

    async def query(self, action: Any, limit: int) -> List[AuditEntry]: ...


def _change_keys(entry: Any) -> FrozenSet[str]:
    changes = getattr(entry, "changes", None)
    if changes is None:
        return frozenset()
    keys = set()
    for side in (getattr(changes, "before", None), getattr(changes, "after", None)):
        if side is None:
            continue
        keys.update(name for name, _ in side)
    return frozenset(keys)


class GuildAuditTrail:
    """Audit trail backed by ``discord.Guild.audit_logs``."""

    def __init__(self, guild: discord.Guild) -> None:
        self.guild = guild

    async def query(self, action: Any, limit: int) -> List[AuditEntry]:
        entries: List[AuditEntry] = []
        async for entry in self.guild.audit_logs(limit=limit, action=action):
            entries.append(AuditEntry(
                executor_id=getattr(entry.user, "id", None),
                target_id=getattr(entry.target, "id", None),
                created_at=entry.created_at,
                change_keys=_change_keys(entry),
            ))
        return entries


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def entry_age_ms(entry: AuditEntry, now: datetime.datetime) -> float:
    return (now - entry.created_at).total_seconds() * 1000


def select_entry(entries: List[AuditEntry], query: AuditAttributionQuery) -> Optional[AuditEntry]:
    """First entry about ``query.target_id`` (and its change key, if any)."""
    for entry in entries:
        if entry.target_id != query.target_id:
            continue
        if query.change_key is not None and query.change_key not in entry.change_keys:
            continue
        return entry
    return None


class AuditAttributionResolver:
    """Resolve the executor of an action from a guild's audit trail."""

    def __init__(
        self,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ) -> None:
        self.window_ms = window_ms
        self._clock = clock

    def query(
        self,
        target_id: int,
        action: Any,
        *,
        limit: int = AMBIGUOUS_LOOKBACK,
        change_key: Optional[str] = None,
        window_ms: Optional[int] = None,
    ) -> AuditAttributionQuery:
        return AuditAttributionQuery(
            target_id=target_id,
            action=action,
            window_ms=self.window_ms if window_ms is None else window_ms,
            limit=limit,
            change_key=change_key,
        )

    async def resolve(self, trail: AuditTrail, query: AuditAttributionQuery) -> Attribution:
        """Return the attributed executor or :data:`UNKNOWN`."""
        try:
            result = await attempt(
                trail.query(query.action, query.limit),
                description=f"audit log query {query.action}",
                log=logger,
            )
        except Exception:
            # Malformed audit payloads must not take the event handler down
            logger.exception("[AUDIT] Unexpected error reading audit log for target %s", query.target_id)
            return UNKNOWN
        if not result.ok:
            return UNKNOWN

        entry = select_entry(result.value or [], query)
        if entry is None:
            logger.debug("[AUDIT] No entry for target %s (%s)", query.target_id, query.action)
            return UNKNOWN

        age_ms = entry_age_ms(entry, self._clock())
        if age_ms > query.window_ms:
            logger.debug(
                "[AUDIT] Entry for target %s is %.0f ms old (window %d ms); not trusted",
                query.target_id, age_ms, query.window_ms,
            )
            return UNKNOWN

        return Attribution(executor_id=entry.executor_id)

    async def resolve_in_guild(
        self,
        guild: discord.Guild,
        target_id: Optional[int],
        action: Any,
        *,
        limit: int = AMBIGUOUS_LOOKBACK,
        change_key: Optional[str] = None,
    ) -> Attribution:
        """Convenience wrapper used by the listener cogs."""
        if target_id is None:
            return UNKNOWN
        query = self.query(target_id, action, limit=limit, change_key=change_key)
        return await self.resolve(GuildAuditTrail(guild), query)


# Shared resolver; main() applies the configured window
audit_resolver = AuditAttributionResolver()
