from __future__ import annotations

import io
import logging
from typing import Dict, Optional, Tuple

from PIL import Image, ImageOps

from domain.errors import AssetUnavailable
from domain.models import PlayerIdentity
from infrastructure.http.skins import SkinFetcher


logger = logging.getLogger(__name__)

Box = Tuple[int, int, int, int]

# Front faces on the skin texture (left, top, right, bottom).
FRONT_FACES: Dict[str, Box] = {
    "head": (8, 8, 16, 16),
    "hat": (40, 8, 48, 16),
    "body": (20, 20, 28, 32),
    "right_arm": (44, 20, 48, 32),
    "right_leg": (4, 20, 8, 32),
    "left_arm": (36, 52, 40, 64),
    "left_leg": (20, 52, 24, 64),
}

# Where each part sits on the unscaled 16x32 figure, viewed from the front.
FIGURE_OFFSETS: Dict[str, Tuple[int, int]] = {
    "head": (4, 0),
    "hat": (4, 0),
    "body": (4, 8),
    "right_arm": (0, 8),
    "left_arm": (12, 8),
    "right_leg": (4, 20),
    "left_leg": (8, 20),
}

FIGURE_SIZE = (16, 32)
PADDING = 6  # unscaled pixels around the figure, room for swinging limbs

DRAW_ORDER = ("right_leg", "left_leg", "body", "right_arm", "left_arm", "head", "hat")


def cut_parts(skin: Image.Image) -> Dict[str, Image.Image]:
    """Cut the front face of every body part; 64x32 skins mirror the right limbs."""

    skin = skin.convert("RGBA")
    legacy = skin.height < 64
    parts = {}
    for name, box in FRONT_FACES.items():
        if legacy and name in ("left_arm", "left_leg"):
            continue
        parts[name] = skin.crop(box)
    if legacy:
        parts["left_arm"] = ImageOps.mirror(parts["right_arm"])
        parts["left_leg"] = ImageOps.mirror(parts["right_leg"])
    return parts


def pose_figure(skin: Image.Image, scale: int = 8, swing: float = 20.0) -> Image.Image:
    """
    Draw a walking pose: each limb is scaled, translated onto the canvas
    and rotated around its shoulder or hip.
    """

    parts = cut_parts(skin)
    width = (FIGURE_SIZE[0] + 2 * PADDING) * scale
    height = (FIGURE_SIZE[1] + 2 * PADDING) * scale
    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))

    angles = {
        "right_arm": swing,
        "left_leg": swing,
        "left_arm": -swing,
        "right_leg": -swing,
    }

    for name in DRAW_ORDER:
        part = parts[name]
        part = part.resize((part.width * scale, part.height * scale), Image.Resampling.NEAREST)
        dx, dy = FIGURE_OFFSETS[name]
        x = (dx + PADDING) * scale
        y = (dy + PADDING) * scale

        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        layer.paste(part, (x, y))

        angle = angles.get(name)
        if angle:
            pivot = (x + part.width // 2, y)
            layer = layer.rotate(angle, resample=Image.Resampling.NEAREST, center=pivot)

        canvas.alpha_composite(layer)

    return canvas


class SkinPoseRenderer:
    def __init__(self, skins: SkinFetcher, scale: int = 8, swing: float = 20.0) -> None:
        self._skins = skins
        self._scale = scale
        self._swing = swing

    def render(self, player: PlayerIdentity) -> Optional[bytes]:
        try:
            skin = self._skins.skin(player.stable_id)
        except AssetUnavailable as exc:
            logger.warning("Cannot render pose for %s: %s", player.display_name, exc)
            return None

        figure = pose_figure(skin, scale=self._scale, swing=self._swing)
        out = io.BytesIO()
        figure.save(out, format="PNG")
        return out.getvalue()

    __call__ = render
