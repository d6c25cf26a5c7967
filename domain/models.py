from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class PlayerIdentity:
    """A Minecraft display name together with its stable Mojang UUID."""

    display_name: str
    stable_id: str


@dataclass(frozen=True)
class GuildInfo:
    name: str
    tag: str = ""


NO_GUILD = GuildInfo(name="No Guild", tag="")


@dataclass
class ProfileAttributes:
    """
    Raw Hypixel player fields consumed by the rank/level classifier.

    Instances are built fresh for every verification attempt and are never
    cached. Missing fields take the defaults Hypixel implies when it omits
    them from the payload.
    """

    network_exp: float = 0
    rank: str = "NORMAL"
    monthly_package_rank: str = "NONE"
    new_package_rank: Optional[str] = None
    rank_plus_color: Optional[str] = None
    linked_accounts: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, player: dict) -> "ProfileAttributes":
        social = player.get("socialMedia") or {}
        links = social.get("links") or {}
        return cls(
            network_exp=player.get("networkExp") or 0,
            rank=player.get("rank") or "NORMAL",
            monthly_package_rank=player.get("monthlyPackageRank") or "NONE",
            new_package_rank=player.get("newPackageRank"),
            rank_plus_color=player.get("rankPlusColor"),
            linked_accounts={str(k): str(v) for k, v in links.items()},
        )


@dataclass(frozen=True)
class RankDisplay:
    label: str
    primary_color: str
    accent_color: str


@dataclass(frozen=True)
class WelcomeCard:
    """Everything the welcome banner shows for a freshly verified player."""

    player: PlayerIdentity
    rank: RankDisplay
    level: int
    guild: GuildInfo
    discord_handle: str


@dataclass
class VerificationRecord:
    """
    Verification state of one Discord user.

    `cooldown_until` is an epoch timestamp in milliseconds. An unverified
    record never carries a cooldown.
    """

    user_id: str
    verified: bool
    cooldown_until: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.verified and self.cooldown_until is not None:
            raise ValueError("An unverified record cannot carry a cooldown.")

    def is_locked(self, now_ms: int) -> bool:
        return (
            self.verified
            and self.cooldown_until is not None
            and now_ms < self.cooldown_until
        )
