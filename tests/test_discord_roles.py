import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord

from interfaces.discord.roles import DiscordMemberRoles, build_member_context


def make_member(role_names=(), guild_role_names=(), admin=False):
    guild_roles = [SimpleNamespace(name=name) for name in guild_role_names]
    member = MagicMock()
    member.id = 42
    member.__str__.return_value = "steve"
    member.guild.id = 1
    member.guild.roles = guild_roles
    member.roles = [role for role in guild_roles if role.name in role_names]
    member.guild_permissions.administrator = admin
    member.add_roles = AsyncMock()
    member.remove_roles = AsyncMock()
    return member


class BuildMemberContextTests(unittest.TestCase):
    def test_context_fields(self):
        member = make_member(role_names=["verified"], guild_role_names=["verified"], admin=True)
        ctx = build_member_context(member, "verified")
        self.assertEqual(ctx.user_id, "42")
        self.assertEqual(ctx.handle, "steve")
        self.assertTrue(ctx.is_admin)
        self.assertTrue(ctx.has_verified_role)


class DiscordMemberRolesTests(unittest.IsolatedAsyncioTestCase):
    async def test_grant_existing_role(self):
        member = make_member(guild_role_names=["verified"])
        await DiscordMemberRoles(member).grant("verified")
        member.add_roles.assert_awaited_once()
        self.assertEqual(member.add_roles.await_args.args[0].name, "verified")

    async def test_grant_missing_role_is_ignored(self):
        member = make_member()
        with self.assertLogs("interfaces.discord.roles", level="WARNING"):
            await DiscordMemberRoles(member).grant("verified")
        member.add_roles.assert_not_awaited()

    async def test_revoke_only_held_roles(self):
        member = make_member(role_names=["unverified"], guild_role_names=["unverified", "angel"])
        roles = DiscordMemberRoles(member)
        await roles.revoke("angel")
        member.remove_roles.assert_not_awaited()
        await roles.revoke("unverified")
        member.remove_roles.assert_awaited_once()

    async def test_platform_refusal_is_logged(self):
        member = make_member(guild_role_names=["verified"])
        response = MagicMock(status=403, reason="Forbidden")
        member.add_roles.side_effect = discord.Forbidden(response, "Missing Permissions")
        with self.assertLogs("interfaces.discord.roles", level="WARNING"):
            await DiscordMemberRoles(member).grant("verified")


if __name__ == "__main__":
    unittest.main()
