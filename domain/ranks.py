from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .models import ProfileAttributes, RankDisplay


NEUTRAL_GRAY = "#AAAAAA"
DEFAULT_PLUS_COLOR = "#FFAA00"

# Minecraft chat palette, used for Hypixel's `rankPlusColor` names.
MINECRAFT_COLORS = {
    "BLACK": "#000000",
    "DARK_BLUE": "#0000AA",
    "DARK_GREEN": "#00AA00",
    "DARK_AQUA": "#00AAAA",
    "DARK_RED": "#AA0000",
    "DARK_PURPLE": "#AA00AA",
    "GOLD": "#FFAA00",
    "GRAY": "#AAAAAA",
    "DARK_GRAY": "#555555",
    "BLUE": "#5555FF",
    "GREEN": "#55FF55",
    "AQUA": "#55FFFF",
    "RED": "#FF5555",
    "LIGHT_PURPLE": "#FF55FF",
    "YELLOW": "#FFFF55",
    "WHITE": "#FFFFFF",
}

# tag -> (label, primary color, uses the player's plus color)
RANK_TABLE = {
    "SUPERSTAR": ("MVP++", "#FFAA00", True),
    "MVP_PLUS": ("MVP+", "#00AAAA", True),
    "MVP": ("MVP", "#00AAAA", False),
    "VIP_PLUS": ("VIP+", "#00AA00", False),
    "VIP": ("VIP", "#00AA00", False),
    "YOUTUBER": ("YOUTUBER", "#FF5555", False),
    "ADMIN": ("ADMIN", "#FF5555", False),
    "MODERATOR": ("MODERATOR", "#00AAAA", False),
}

NON_RANK = RankDisplay(label="Non-Rank", primary_color=NEUTRAL_GRAY, accent_color=NEUTRAL_GRAY)


class RankKind(Enum):
    SPECIAL = "special"
    MONTHLY = "monthly"
    PURCHASED = "purchased"
    NONE = "none"


@dataclass(frozen=True)
class RankSource:
    """Which attribute decided the rank, and the tag it carried."""

    kind: RankKind
    tag: Optional[str] = None


def classify_level(network_exp: Optional[float]) -> int:
    """Hypixel network level, rounded down. Negative input is not clamped."""

    exp = network_exp or 0
    return math.floor(math.sqrt(2 * exp + 30625) / 50 - 2.5)


def resolve_rank_source(attrs: ProfileAttributes) -> RankSource:
    if attrs.rank and attrs.rank != "NORMAL":
        return RankSource(RankKind.SPECIAL, attrs.rank)
    if attrs.monthly_package_rank and attrs.monthly_package_rank != "NONE":
        # SUPERSTAR is the only monthly rank Hypixel sells; other values
        # still go through the table with the same fallback.
        return RankSource(RankKind.MONTHLY, attrs.monthly_package_rank)
    if attrs.new_package_rank:
        return RankSource(RankKind.PURCHASED, attrs.new_package_rank)
    return RankSource(RankKind.NONE)


def plus_color(attrs: ProfileAttributes) -> str:
    value = attrs.rank_plus_color
    if not value:
        return DEFAULT_PLUS_COLOR
    if value.startswith("#"):
        return value
    return MINECRAFT_COLORS.get(value.upper(), DEFAULT_PLUS_COLOR)


def classify_rank(attrs: ProfileAttributes) -> RankDisplay:
    source = resolve_rank_source(attrs)
    if source.kind is RankKind.NONE:
        return NON_RANK

    entry = RANK_TABLE.get(source.tag)
    if entry is None:
        return RankDisplay(label=source.tag, primary_color=NEUTRAL_GRAY, accent_color=NEUTRAL_GRAY)

    label, color, has_plus = entry
    accent = plus_color(attrs) if has_plus else color
    return RankDisplay(label=label, primary_color=color, accent_color=accent)
