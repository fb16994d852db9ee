"""
Immutable reaction-role registry.

Built once at startup from ``app_config.yml`` and never mutated afterwards,
so every reaction event reads the same table.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple

from logcord.datatypes.discord_datatypes import RoleID
from logcord.util.logger import get_logger

logger = get_logger("reaction_roles_config")

DEFAULT_AGREEMENT_EMOJI = "\N{WHITE HEAVY CHECK MARK}"


@dataclass(frozen=True, slots=True)
class ReactionRoleRule:
    """Reacting with ``emoji_id`` grants ``role_id``."""
    emoji_id: int
    role_id: RoleID


@dataclass(frozen=True, slots=True)
class AgreementRule:
    """Reacting with ``emoji`` on the rules message grants ``role_id``.

    The rules message is recognised by the title of its first embed.
    """
    emoji: str
    role_id: RoleID
    rules_title: str

    def applies_to(self, emoji_name: Optional[str], embed_title: Optional[str]) -> bool:
        return emoji_name == self.emoji and embed_title is not None and embed_title == self.rules_title


class ReactionRoleRegistry:
    """Read-only lookup of the configured reaction-role rules."""

    __slots__ = ("_by_emoji", "_agreement")

    def __init__(self, rules: Iterable[ReactionRoleRule] = (), agreement: AgreementRule | None = None) -> None:
        self._by_emoji: Mapping[int, ReactionRoleRule] = MappingProxyType({rule.emoji_id: rule for rule in rules})
        self._agreement = agreement

    @property
    def agreement(self) -> AgreementRule | None:
        return self._agreement

    @property
    def rules(self) -> Tuple[ReactionRoleRule, ...]:
        return tuple(self._by_emoji.values())

    def role_for_emoji(self, emoji_id: Optional[int]) -> Optional[RoleID]:
        if emoji_id is None:
            return None
        rule = self._by_emoji.get(emoji_id)
        return rule.role_id if rule is not None else None

    def __len__(self) -> int:
        return len(self._by_emoji) + (1 if self._agreement else 0)

    @classmethod
    def from_mapping(cls, data: Any) -> "ReactionRoleRegistry":
        """Build the registry from the ``reaction_roles`` config section.

        Expected shape::

            reaction_roles:
              rules:
                "1350175816314650654": 1349830365761769532
              agreement:
                emoji: "✅"
                role_id: 1348705958213456004
                rules_title: "SERVER RULES"

        Malformed entries are skipped with a warning.
        """
        if not isinstance(data, dict):
            return cls()

        rules: list[ReactionRoleRule] = []
        raw_rules = data.get("rules") or {}
        if isinstance(raw_rules, dict):
            for emoji_id, role_id in raw_rules.items():
                try:
                    rules.append(ReactionRoleRule(int(emoji_id), RoleID(role_id)))
                except (TypeError, ValueError):
                    logger.warning("[REACTION ROLES] Skipping malformed rule %r -> %r", emoji_id, role_id)

        agreement = None
        raw_agreement = data.get("agreement")
        if isinstance(raw_agreement, dict) and raw_agreement.get("role_id") is not None:
            try:
                agreement = AgreementRule(
                    emoji=str(raw_agreement.get("emoji") or DEFAULT_AGREEMENT_EMOJI),
                    role_id=RoleID(raw_agreement["role_id"]),
                    rules_title=str(raw_agreement.get("rules_title") or ""),
                )
            except (TypeError, ValueError):
                logger.warning("[REACTION ROLES] Skipping malformed agreement rule %r", raw_agreement)

        return cls(rules, agreement)
