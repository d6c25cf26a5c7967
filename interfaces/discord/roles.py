from __future__ import annotations

import logging

import discord

from application.services import MemberContext, MemberRoles


logger = logging.getLogger(__name__)


def build_member_context(member: discord.Member, verified_role: str) -> MemberContext:
    """Create a `MemberContext` from a guild member."""

    # str(user) is "name" for migrated accounts and "name#1234" otherwise,
    # which is what players paste into their Hypixel social links.
    return MemberContext(
        user_id=str(member.id),
        handle=str(member),
        is_admin=member.guild_permissions.administrator,
        has_verified_role=any(role.name == verified_role for role in member.roles),
    )


class DiscordMemberRoles(MemberRoles):
    """
    Grants and revokes roles by name on one guild member.

    Roles are looked up in the guild's cached role list. A missing role or
    a refusal from Discord (hierarchy, permissions) is logged and ignored.
    """

    def __init__(self, member: discord.Member) -> None:
        self._member = member

    def _find(self, role_name: str):
        role = discord.utils.get(self._member.guild.roles, name=role_name)
        if role is None:
            logger.warning("Role %r does not exist in guild %s", role_name, self._member.guild.id)
        return role

    async def grant(self, role_name: str) -> None:
        role = self._find(role_name)
        if role is None:
            return
        try:
            await self._member.add_roles(role, reason="Hypixel verification")
        except discord.HTTPException as exc:
            logger.warning("Could not add %r to %s: %s", role_name, self._member.id, exc)

    async def revoke(self, role_name: str) -> None:
        role = self._find(role_name)
        if role is None or role not in self._member.roles:
            return
        try:
            await self._member.remove_roles(role, reason="Hypixel verification")
        except discord.HTTPException as exc:
            logger.warning("Could not remove %r from %s: %s", role_name, self._member.id, exc)
