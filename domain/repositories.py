from __future__ import annotations

from typing import Dict, Optional, Protocol

from .models import GuildInfo, ProfileAttributes, VerificationRecord


class VerificationRepository(Protocol):
    """
    Abstraction over verification state persistence.

    Implementations are responsible for:
    - Mapping between stored rows/documents and `VerificationRecord`.
    - Making every `put`/`delete` durable before returning, so the caller
      can acknowledge the user right after.
    """

    def get(self, user_id: str) -> Optional[VerificationRecord]:
        """Return the record for the given Discord user, or None."""

        ...

    def put(self, record: VerificationRecord) -> None:
        """Insert or replace a record."""

        ...

    def delete(self, user_id: str) -> None:
        """Drop the record for the given user; a missing record is ignored."""

        ...

    def load_all(self) -> Dict[str, VerificationRecord]:
        """Return every stored record keyed by user ID."""

        ...

    def persist_all(self) -> None:
        """Flush the full current state to the backing store."""

        ...


class ProfileRepository(Protocol):
    """
    Read-only access to Minecraft/Hypixel profiles.

    Every method performs a single lookup with no retry. Transport errors
    and non-2xx answers collapse to None; callers cannot tell "not found"
    from "service down".
    """

    def resolve_identity(self, name: str) -> Optional[str]:
        """Return the stable UUID for a display name."""

        ...

    def fetch_attributes(self, stable_id: str) -> Optional[ProfileAttributes]:
        ...

    def fetch_guild(self, stable_id: str) -> Optional[GuildInfo]:
        ...
