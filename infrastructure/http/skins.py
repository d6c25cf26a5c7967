from __future__ import annotations

import io
from typing import Optional

import requests
from PIL import Image

from domain.errors import AssetUnavailable


DEFAULT_SKIN_SERVICE = "https://mc-heads.net"


class SkinFetcher:
    """Loads body renders and raw skin textures from an mc-heads style service."""

    def __init__(self, base_url: str = DEFAULT_SKIN_SERVICE, timeout: Optional[float] = 10) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _load(self, kind: str, stable_id: str) -> Image.Image:
        url = f"{self._base_url}/{kind}/{stable_id}"
        try:
            r = requests.get(url, timeout=self._timeout)
            r.raise_for_status()
            return Image.open(io.BytesIO(r.content)).convert("RGBA")
        except (requests.RequestException, OSError) as exc:
            raise AssetUnavailable(f"{url}: {exc}") from exc

    def body(self, stable_id: str) -> Image.Image:
        return self._load("body", stable_id)

    def skin(self, stable_id: str) -> Image.Image:
        return self._load("skin", stable_id)
