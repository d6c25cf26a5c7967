from __future__ import annotations

import io
import logging
from typing import Callable, Optional

import discord
from discord.ext import commands

from application.services import (
    StartAction,
    UserLocks,
    VerificationPolicy,
    VerificationResult,
    prepare_announcement,
    request_skin_render,
    start_verification,
    submit_verification,
    unverify,
)
from domain.models import PlayerIdentity, WelcomeCard
from domain.repositories import ProfileRepository, VerificationRepository
from interfaces.discord.components import (
    ConfirmUnverifyView,
    VerifyButtons,
    VerifyNameModal,
    reply_error,
)
from interfaces.discord.roles import DiscordMemberRoles, build_member_context


logger = logging.getLogger(__name__)

COOLDOWN_NOTICE_SECONDS = 10


class VerificationController:
    """
    Maps button and modal interactions onto the verification services.

    Holds no state of its own besides the per-user locks.
    """

    def __init__(
        self,
        verification_repo: VerificationRepository,
        profile_repo: ProfileRepository,
        policy: VerificationPolicy,
        welcome_channel: str,
        render_welcome: Optional[Callable[[WelcomeCard], Optional[bytes]]] = None,
    ) -> None:
        self.verification_repo = verification_repo
        self.profile_repo = profile_repo
        self.policy = policy
        self.welcome_channel = welcome_channel
        self.render_welcome = render_welcome
        self.locks = UserLocks()

    def _context(self, interaction: discord.Interaction):
        return build_member_context(interaction.user, self.policy.verified_role)

    async def on_verify(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await reply_error(interaction, "Verification only works inside the server.")
            return

        result = start_verification(self._context(interaction), self.verification_repo)

        if result.action is StartAction.SHOW_MODAL:
            await interaction.response.send_modal(VerifyNameModal(self.on_submit))
        elif result.action is StartAction.COOLDOWN:
            await interaction.response.send_message(
                f"You are already verified. You can verify again in {result.hours_remaining} hour(s).",
                ephemeral=True,
                delete_after=COOLDOWN_NOTICE_SECONDS,
            )
        else:
            await interaction.response.send_message(
                "You are already verified. Unverify first if you want to link another account.",
                view=ConfirmUnverifyView(self),
                ephemeral=True,
            )

    async def on_unverify(self, interaction: discord.Interaction) -> None:
        if interaction.guild is None:
            await reply_error(interaction, "Verification only works inside the server.")
            return

        # Role edits can wait on another click for the same member.
        await interaction.response.defer(ephemeral=True)
        await unverify(
            self._context(interaction),
            self.verification_repo,
            DiscordMemberRoles(interaction.user),
            self.policy,
            locks=self.locks,
        )
        await interaction.followup.send(
            "You have been unverified. You can verify again immediately.",
            ephemeral=True,
        )

    async def on_submit(self, interaction: discord.Interaction, minecraft_name: str) -> None:
        # Three upstream calls plus rendering easily exceed Discord's 3s window.
        await interaction.response.defer(ephemeral=True, thinking=True)

        result = await submit_verification(
            self._context(interaction),
            minecraft_name,
            self.profile_repo,
            self.verification_repo,
            DiscordMemberRoles(interaction.user),
            self.policy,
            render_welcome=self.render_welcome,
            locks=self.locks,
        )
        if not result.success:
            await interaction.followup.send(result.error_message, ephemeral=True)
            return

        await self._post_welcome(interaction.guild, result)
        await interaction.followup.send("Verification successful!", ephemeral=True)

    async def _post_welcome(self, guild: discord.Guild, result: VerificationResult) -> None:
        channel = discord.utils.get(guild.text_channels, name=self.welcome_channel)
        if channel is None:
            logger.warning("Welcome channel %r not found", self.welcome_channel)
            return

        kwargs = {}
        if result.welcome_image:
            kwargs["file"] = discord.File(io.BytesIO(result.welcome_image), filename="welcome.png")
        try:
            await channel.send(f"Welcome, **{result.player.display_name}**!", **kwargs)
        except discord.HTTPException as exc:
            logger.warning("Could not post welcome card: %s", exc)


def create_discord_bot(
    verification_repo: VerificationRepository,
    profile_repo: ProfileRepository,
    policy: VerificationPolicy,
    verify_channel: str,
    welcome_channel: str,
    staff_role: str,
    render_welcome: Optional[Callable[[WelcomeCard], Optional[bytes]]] = None,
    render_pose: Optional[Callable[[PlayerIdentity], Optional[bytes]]] = None,
) -> commands.Bot:
    """
    Configure and return the Discord bot: the verify button flow, the
    staff announcement relay and the skin render command.
    """

    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.members = True

    bot = commands.Bot(command_prefix="!", intents=intents, help_command=None)
    controller = VerificationController(
        verification_repo,
        profile_repo,
        policy,
        welcome_channel,
        render_welcome=render_welcome,
    )

    @bot.event
    async def setup_hook():
        # Buttons posted before a restart keep working.
        bot.add_view(VerifyButtons(controller))

    @bot.event
    async def on_ready():
        logger.info("Logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.command(name="verifybutton", aliases=["verify"])
    async def verify_button_cmd(ctx: commands.Context):
        if getattr(ctx.channel, "name", None) != verify_channel:
            return
        try:
            await ctx.send(view=VerifyButtons(controller))
        except discord.HTTPException as exc:
            logger.error("Failed to send verify buttons: %s", exc)

    @bot.command(name="ha")
    async def announce_cmd(ctx: commands.Context):
        if ctx.guild is None:
            return

        staff = discord.utils.get(ctx.guild.roles, name=staff_role)
        result = prepare_announcement(
            ctx.message.content,
            f"{ctx.prefix}{ctx.invoked_with}",
            staff.position if staff else None,
            [role.position for role in ctx.author.roles],
        )
        if not result.success:
            await ctx.reply(result.error_message, delete_after=COOLDOWN_NOTICE_SECONDS)
            return

        await ctx.send(result.text)
        logger.info("Relayed announcement from %s in #%s", ctx.author.id, ctx.channel)
        try:
            await ctx.message.delete()
        except discord.HTTPException as exc:
            logger.error("Failed to delete message: %s", exc)

    @bot.command(name="skin")
    async def skin_cmd(ctx: commands.Context, minecraft_name: Optional[str] = None):
        if render_pose is None:
            return
        if not minecraft_name:
            await ctx.reply("Usage: !skin <minecraft name>")
            return

        async with ctx.typing():
            result = await request_skin_render(minecraft_name, profile_repo, render_pose)
        if not result.success:
            await ctx.reply(result.error_message)
            return

        await ctx.send(
            file=discord.File(io.BytesIO(result.image), filename=f"{result.player.display_name}.png"),
        )

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, commands.CommandNotFound):
            return
        logger.error("Command %s failed", ctx.command, exc_info=error)

    return bot
