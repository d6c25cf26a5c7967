from __future__ import annotations

import asyncio
import logging
import math
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Callable, Dict, Iterable, Optional, Protocol

from domain.errors import Failure
from domain.models import (
    NO_GUILD,
    GuildInfo,
    PlayerIdentity,
    RankDisplay,
    VerificationRecord,
    WelcomeCard,
)
from domain.ranks import classify_level, classify_rank
from domain.repositories import ProfileRepository, VerificationRepository


logger = logging.getLogger(__name__)

HOUR_MS = 60 * 60 * 1000
DISCORD_LINK_KEY = "DISCORD"


@dataclass
class MemberContext:
    """
    The Discord member driving an interaction.

    The application layer never depends on concrete SDK types; it only sees
    this small context object.
    """

    user_id: str
    handle: str
    is_admin: bool = False
    has_verified_role: bool = False


class MemberRoles(Protocol):
    """
    Role mutation capability for a single member.

    Implementations log and swallow platform refusals; the caller treats
    every call as fire-and-forget.
    """

    async def grant(self, role_name: str) -> None:
        ...

    async def revoke(self, role_name: str) -> None:
        ...


@dataclass(frozen=True)
class VerificationPolicy:
    verified_role: str
    unverified_role: str
    guild_role: str
    guild_name: str
    cooldown_hours: int = 6

    @property
    def cooldown_ms(self) -> int:
        return self.cooldown_hours * HOUR_MS


class StartAction(Enum):
    SHOW_MODAL = "show_modal"
    COOLDOWN = "cooldown"
    CONFIRM_UNVERIFY = "confirm_unverify"


@dataclass
class StartResult:
    action: StartAction
    hours_remaining: Optional[int] = None


@dataclass
class OperationResult:
    """Generic result type for simple operations."""

    success: bool
    failure: Optional[Failure] = None

    @property
    def error_message(self) -> Optional[str]:
        return self.failure.message if self.failure else None


@dataclass
class VerificationResult(OperationResult):
    player: Optional[PlayerIdentity] = None
    rank: Optional[RankDisplay] = None
    level: Optional[int] = None
    guild: Optional[GuildInfo] = None
    welcome_image: Optional[bytes] = None


@dataclass
class AnnouncementResult(OperationResult):
    text: str = ""


@dataclass
class SkinRenderResult(OperationResult):
    player: Optional[PlayerIdentity] = None
    image: Optional[bytes] = None


class UserLocks:
    """
    Per-user locks serialising read-modify-write on the verification store.

    A user's lock only exists while someone holds it or waits for it.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._users[user_id] = self._users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[user_id] -= 1
            if not self._users[user_id]:
                del self._users[user_id]
                del self._locks[user_id]


def now_ms() -> int:
    return int(time.time() * 1000)


def remaining_hours(cooldown_until: int, now: int) -> int:
    return math.ceil((cooldown_until - now) / HOUR_MS)


def start_verification(
    member: MemberContext,
    verification_repo: VerificationRepository,
    now: Optional[int] = None,
) -> StartResult:
    """
    Decide what pressing "Verify" does for this member.

    - Not verified: open the name modal.
    - Verified, non-admin, cooldown still running: cooldown notice only.
    - Otherwise: confirmation prompt offering "Unverify".

    Never mutates roles or the store.
    """

    now = now_ms() if now is None else now
    record = verification_repo.get(member.user_id)
    verified = (record is not None and record.verified) or member.has_verified_role

    if not verified:
        return StartResult(StartAction.SHOW_MODAL)

    if record is not None and not member.is_admin and record.is_locked(now):
        return StartResult(
            StartAction.COOLDOWN,
            hours_remaining=remaining_hours(record.cooldown_until, now),
        )

    return StartResult(StartAction.CONFIRM_UNVERIFY)


async def submit_verification(
    member: MemberContext,
    minecraft_name: str,
    profile_repo: ProfileRepository,
    verification_repo: VerificationRepository,
    roles: MemberRoles,
    policy: VerificationPolicy,
    render_welcome: Optional[Callable[[WelcomeCard], Optional[bytes]]] = None,
    locks: Optional[UserLocks] = None,
    now: Optional[int] = None,
) -> VerificationResult:
    """
    Handle the name modal submission.

    The Hypixel profile must list the member's Discord handle exactly as
    Discord reports it; that link is the only proof of ownership. On any
    failure nothing is written and no role is touched.
    """

    name = minecraft_name.strip()

    stable_id = await asyncio.to_thread(profile_repo.resolve_identity, name)
    if not stable_id:
        return VerificationResult(success=False, failure=Failure.NOT_FOUND)

    attrs = await asyncio.to_thread(profile_repo.fetch_attributes, stable_id)
    if attrs is None:
        return VerificationResult(success=False, failure=Failure.SERVICE_UNAVAILABLE)

    if attrs.linked_accounts.get(DISCORD_LINK_KEY) != member.handle:
        return VerificationResult(success=False, failure=Failure.NOT_LINKED)

    player = PlayerIdentity(display_name=name, stable_id=stable_id)
    level = classify_level(attrs.network_exp)
    rank = classify_rank(attrs)
    guild = await asyncio.to_thread(profile_repo.fetch_guild, stable_id) or NO_GUILD

    image = None
    if render_welcome is not None:
        card = WelcomeCard(
            player=player,
            rank=rank,
            level=level,
            guild=guild,
            discord_handle=member.handle,
        )
        try:
            image = await asyncio.to_thread(render_welcome, card)
        except Exception:
            logger.exception("Welcome card rendering failed for %s", name)

    if locks is None:
        locks = UserLocks()
    async with locks.hold(member.user_id):
        await roles.grant(policy.verified_role)
        await roles.revoke(policy.unverified_role)
        if guild.name == policy.guild_name:
            await roles.grant(policy.guild_role)

        now = now_ms() if now is None else now
        cooldown_until = None if member.is_admin else now + policy.cooldown_ms
        verification_repo.put(
            VerificationRecord(
                user_id=member.user_id,
                verified=True,
                cooldown_until=cooldown_until,
            )
        )

    logger.info(
        "Verified %s as %s (%s, level %d, guild %s)",
        member.user_id,
        name,
        rank.label,
        level,
        guild.name,
    )
    return VerificationResult(
        success=True,
        player=player,
        rank=rank,
        level=level,
        guild=guild,
        welcome_image=image,
    )


async def unverify(
    member: MemberContext,
    verification_repo: VerificationRepository,
    roles: MemberRoles,
    policy: VerificationPolicy,
    locks: Optional[UserLocks] = None,
) -> OperationResult:
    """
    Drop the member's verification. Allowed at any time, cooldown or not.

    The record is deleted outright rather than kept with verified=False.
    """

    if locks is None:
        locks = UserLocks()
    async with locks.hold(member.user_id):
        verification_repo.delete(member.user_id)
        await roles.revoke(policy.verified_role)
        await roles.revoke(policy.guild_role)
        await roles.grant(policy.unverified_role)

    logger.info("Unverified %s", member.user_id)
    return OperationResult(success=True)


def prepare_announcement(
    content: str,
    prefix: str,
    staff_role_position: Optional[int],
    member_role_positions: Iterable[int],
) -> AnnouncementResult:
    """
    Validate a staff relay command.

    The author needs a role at or above the staff role in the hierarchy.
    """

    if staff_role_position is None:
        return AnnouncementResult(success=False, failure=Failure.MISSING_ROLE)

    if not any(pos >= staff_role_position for pos in member_role_positions):
        return AnnouncementResult(success=False, failure=Failure.NOT_PERMITTED)

    text = content[len(prefix):].strip() if content.startswith(prefix) else content.strip()
    if not text:
        return AnnouncementResult(success=False, failure=Failure.EMPTY_MESSAGE)

    return AnnouncementResult(success=True, text=text)


async def request_skin_render(
    minecraft_name: str,
    profile_repo: ProfileRepository,
    render_pose: Callable[[PlayerIdentity], Optional[bytes]],
) -> SkinRenderResult:
    name = minecraft_name.strip()
    stable_id = await asyncio.to_thread(profile_repo.resolve_identity, name)
    if not stable_id:
        return SkinRenderResult(success=False, failure=Failure.NOT_FOUND)

    player = PlayerIdentity(display_name=name, stable_id=stable_id)
    image = await asyncio.to_thread(render_pose, player)
    if image is None:
        return SkinRenderResult(success=False, failure=Failure.RENDER_FAILED, player=player)

    return SkinRenderResult(success=True, player=player, image=image)
