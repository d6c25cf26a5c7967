from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps

from domain.errors import AssetUnavailable
from domain.models import WelcomeCard
from infrastructure.http.skins import SkinFetcher


logger = logging.getLogger(__name__)

CANVAS_SIZE = (600, 300)
FONT_SIZE = 25

PANEL_BOX = (20, 40, 420, 240)
PANEL_FILL = (0, 0, 0, 153)  # rgba(0, 0, 0, 0.6)

SKIN_BOX = (450, 50, 100, 200)  # x, y, width, height

NAME_COLOR = "#99bcf7"
LEVEL_COLOR = "#f4f000"
DISCORD_COLOR = "#0f3684"


def load_font(path: Optional[str], size: int = FONT_SIZE):
    if path:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            logger.warning("Font %s not found, using the default font", path)
    return ImageFont.load_default(size=size)


def draw_text(draw: ImageDraw.ImageDraw, xy: Tuple[int, int], text: str, font, fill: str) -> None:
    """Draw `text` with its baseline at `xy[1]`."""

    x, y = xy
    if isinstance(font, ImageFont.FreeTypeFont):
        draw.text((x, y), text, font=font, fill=fill, anchor="ls")
    else:
        # Bitmap fonts have no anchor support; shift up by the line height.
        draw.text((x, y - FONT_SIZE), text, font=font, fill=fill)


class WelcomeCardRenderer:
    """
    Composes the 600x300 welcome banner posted after a verification.

    Layers, bottom to top: background image, mirrored body render, dark text
    panel, text. A background or skin that cannot be loaded is left out.
    """

    def __init__(
        self,
        skins: SkinFetcher,
        background_path: Optional[str] = None,
        font_path: Optional[str] = None,
    ) -> None:
        self._skins = skins
        self._background_path = background_path
        self._font = load_font(font_path)

    def _load_background(self) -> Image.Image:
        if not self._background_path:
            raise AssetUnavailable("no background configured")
        path = Path(self._background_path)
        try:
            with Image.open(path) as img:
                return img.convert("RGBA").resize(CANVAS_SIZE)
        except OSError as exc:
            raise AssetUnavailable(f"{path}: {exc}") from exc

    def _draw_skin(self, canvas: Image.Image, stable_id: str) -> None:
        try:
            body = self._skins.body(stable_id)
        except AssetUnavailable as exc:
            logger.warning("Skipping skin layer: %s", exc)
            return

        x, y, w, h = SKIN_BOX
        body = ImageOps.mirror(body.resize((w, h)))
        canvas.alpha_composite(body, (x, y))

    def render(self, card: WelcomeCard) -> bytes:
        canvas = Image.new("RGBA", CANVAS_SIZE, (0, 0, 0, 0))

        try:
            canvas.alpha_composite(self._load_background())
        except AssetUnavailable as exc:
            logger.warning("Skipping background layer: %s", exc)

        self._draw_skin(canvas, card.player.stable_id)

        panel = Image.new("RGBA", CANVAS_SIZE, (0, 0, 0, 0))
        ImageDraw.Draw(panel).rectangle(PANEL_BOX, fill=PANEL_FILL)
        canvas.alpha_composite(panel)

        draw = ImageDraw.Draw(canvas)
        font = self._font
        draw_text(draw, (30, 80), f"[{card.rank.label}] {card.player.display_name} Joined", font, NAME_COLOR)
        draw_text(draw, (30, 120), "Guild:", font, NAME_COLOR)
        draw_text(draw, (110, 120), f"{card.guild.name} [{card.guild.tag}]", font, NAME_COLOR)
        draw_text(draw, (30, 160), "Level:", font, LEVEL_COLOR)
        draw_text(draw, (110, 160), str(card.level), font, LEVEL_COLOR)
        draw_text(draw, (30, 200), "Discord:", font, DISCORD_COLOR)
        draw_text(draw, (130, 200), card.discord_handle, font, DISCORD_COLOR)

        out = io.BytesIO()
        canvas.save(out, format="PNG")
        return out.getvalue()

    __call__ = render
