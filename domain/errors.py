from __future__ import annotations

from enum import Enum


class Failure(str, Enum):
    """User-facing failures, each with the message shown to the user."""

    NOT_FOUND = "not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NOT_LINKED = "not_linked"
    NOT_PERMITTED = "not_permitted"
    EMPTY_MESSAGE = "empty_message"
    MISSING_ROLE = "missing_role"
    RENDER_FAILED = "render_failed"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    Failure.NOT_FOUND: "Failed to fetch UUID from Mojang API. Please check your Minecraft name.",
    Failure.SERVICE_UNAVAILABLE: "Failed to fetch Hypixel data. Please try again later.",
    Failure.NOT_LINKED: "Please link your Discord to your Hypixel profile in social media.",
    Failure.NOT_PERMITTED: "You do not have permission to use this command.",
    Failure.EMPTY_MESSAGE: "Please provide a message to send.",
    Failure.MISSING_ROLE: "The staff role does not exist in this server.",
    Failure.RENDER_FAILED: "Could not load that skin right now. Please try again later.",
}


class AssetUnavailable(Exception):
    """A remote or local image asset could not be loaded."""


class StorageCorrupt(Exception):
    """The verification store's backing file could not be decoded."""
