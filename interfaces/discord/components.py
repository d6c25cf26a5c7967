from __future__ import annotations

import logging
from typing import Awaitable, Callable, Protocol

import discord


logger = logging.getLogger(__name__)

VERIFY_BUTTON_ID = "verify:start"
UNVERIFY_BUTTON_ID = "verify:unverify"
CONFIRM_UNVERIFY_ID = "verify:confirm-unverify"
NAME_MODAL_ID = "verify:modal"

GENERIC_ERROR = "Something went wrong. Please try again later."


class VerificationCallbacks(Protocol):
    async def on_verify(self, interaction: discord.Interaction) -> None:
        ...

    async def on_unverify(self, interaction: discord.Interaction) -> None:
        ...

    async def on_submit(self, interaction: discord.Interaction, minecraft_name: str) -> None:
        ...


async def reply_error(interaction: discord.Interaction, text: str = GENERIC_ERROR) -> None:
    """Send an ephemeral error whether or not the interaction was answered."""

    try:
        if interaction.response.is_done():
            await interaction.followup.send(text, ephemeral=True)
        else:
            await interaction.response.send_message(text, ephemeral=True)
    except discord.HTTPException:
        logger.exception("Could not deliver error reply")


class _LoggingView(discord.ui.View):
    async def on_error(self, interaction: discord.Interaction, error: Exception, item) -> None:
        logger.error("Component %s failed", getattr(item, "custom_id", item), exc_info=error)
        await reply_error(interaction)


class VerifyButtons(_LoggingView):
    """Persistent Verify/Unverify pair posted by `!verifybutton`."""

    def __init__(self, callbacks: VerificationCallbacks) -> None:
        super().__init__(timeout=None)
        self._callbacks = callbacks

    @discord.ui.button(label="Verify", style=discord.ButtonStyle.success, custom_id=VERIFY_BUTTON_ID)
    async def verify(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self._callbacks.on_verify(interaction)

    @discord.ui.button(label="Unverify", style=discord.ButtonStyle.danger, custom_id=UNVERIFY_BUTTON_ID)
    async def unverify(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self._callbacks.on_unverify(interaction)


class ConfirmUnverifyView(_LoggingView):
    """Shown to already verified members: the only way forward is to unverify."""

    def __init__(self, callbacks: VerificationCallbacks) -> None:
        super().__init__(timeout=120)
        self._callbacks = callbacks

    @discord.ui.button(label="Unverify", style=discord.ButtonStyle.danger, custom_id=CONFIRM_UNVERIFY_ID)
    async def unverify(self, interaction: discord.Interaction, button: discord.ui.Button):
        self.stop()
        await self._callbacks.on_unverify(interaction)


class VerifyNameModal(discord.ui.Modal):
    """Single-field form asking for the Minecraft name."""

    def __init__(self, on_submit: Callable[[discord.Interaction, str], Awaitable[None]]) -> None:
        super().__init__(title="Verify Minecraft Name", custom_id=NAME_MODAL_ID)
        self._submit = on_submit
        self.minecraft_name = discord.ui.TextInput(
            label="Minecraft Name",
            placeholder="Enter your Minecraft name",
            style=discord.TextStyle.short,
            required=True,
            max_length=16,
        )
        self.add_item(self.minecraft_name)

    async def on_submit(self, interaction: discord.Interaction):
        await self._submit(interaction, self.minecraft_name.value)

    async def on_error(self, interaction: discord.Interaction, error: Exception):
        logger.error("Verification modal failed", exc_info=error)
        await reply_error(interaction)
