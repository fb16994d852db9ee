"""
Reaction-role synchronizer.

Keeps role membership in step with reactions: adding a configured reaction
grants its role, removing it revokes the role. Both directions are
idempotent and checked locally first, so a member who already holds the role
(or never had it) causes no API call at all.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional

import discord

from logcord.configuration.reaction_roles import ReactionRoleRegistry
from logcord.datatypes.capabilities import RoleMutable, has_role
from logcord.datatypes.discord_datatypes import RoleID
from logcord.util.io_guard import attempt
from logcord.util.logger import get_logger

logger = get_logger("reaction_roles")

GRANT_REASON = "Reaction role added"
REVOKE_REASON = "Reaction role removed"


class SyncOutcome(Enum):
    GRANTED = "granted"
    REVOKED = "revoked"
    UNCHANGED = "unchanged"
    FAILED = "failed"


class ReactionRoleSynchronizer:
    """Applies the reaction-role registry to members."""

    def __init__(self, registry: ReactionRoleRegistry) -> None:
        self.registry = registry

    def needs_message(self, emoji_name: Optional[str]) -> bool:
        """True if deciding on this emoji requires the reacted message's embed."""
        agreement = self.registry.agreement
        return agreement is not None and emoji_name == agreement.emoji

    def roles_for(
        self,
        emoji_id: Optional[int],
        emoji_name: Optional[str],
        embed_title: Optional[str] = None,
    ) -> List[RoleID]:
        """Roles a reaction maps to; empty when the reaction is not configured."""
        roles: List[RoleID] = []
        role_id = self.registry.role_for_emoji(emoji_id)
        if role_id is not None:
            roles.append(role_id)

        agreement = self.registry.agreement
        if agreement is not None and agreement.applies_to(emoji_name, embed_title):
            if agreement.role_id not in roles:
                roles.append(agreement.role_id)
        return roles

    async def grant(self, member: RoleMutable, role_id: RoleID) -> SyncOutcome:
        if has_role(member, role_id.to_int()):
            return SyncOutcome.UNCHANGED

        result = await attempt(
            member.add_roles(discord.Object(id=role_id.to_int()), reason=GRANT_REASON),
            description=f"add role {role_id} to member {member.id}",
            log=logger,
        )
        if not result.ok:
            return SyncOutcome.FAILED
        logger.info("[REACTION ROLES] Granted role %s to member %s", role_id, member.id)
        return SyncOutcome.GRANTED

    async def revoke(self, member: RoleMutable, role_id: RoleID) -> SyncOutcome:
        if not has_role(member, role_id.to_int()):
            return SyncOutcome.UNCHANGED

        result = await attempt(
            member.remove_roles(discord.Object(id=role_id.to_int()), reason=REVOKE_REASON),
            description=f"remove role {role_id} from member {member.id}",
            log=logger,
        )
        if not result.ok:
            return SyncOutcome.FAILED
        logger.info("[REACTION ROLES] Revoked role %s from member %s", role_id, member.id)
        return SyncOutcome.REVOKED

    async def apply(self, member: RoleMutable, role_ids: Iterable[RoleID], *, added: bool) -> Dict[RoleID, SyncOutcome]:
        """Grant (``added=True``) or revoke every role in ``role_ids``.

        Each role is handled on its own; a failure on one does not stop the
        others.
        """
        outcomes: Dict[RoleID, SyncOutcome] = {}
        for role_id in role_ids:
            if added:
                outcomes[role_id] = await self.grant(member, role_id)
            else:
                outcomes[role_id] = await self.revoke(member, role_id)
        return outcomes
