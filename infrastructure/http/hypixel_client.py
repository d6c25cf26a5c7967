from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from domain.models import GuildInfo, ProfileAttributes
from domain.repositories import ProfileRepository


logger = logging.getLogger(__name__)

MOJANG_API = "https://api.mojang.com"
HYPIXEL_API = "https://api.hypixel.net"
USER_AGENT = "HypixelVerifyBot/1.0"


class HypixelProfileRepository(ProfileRepository):
    """
    `ProfileRepository` backed by the Mojang and Hypixel public APIs.

    One GET per call and no retry. Anything other than a 2xx answer with the
    expected JSON shape is logged and reported as None.
    """

    def __init__(
        self,
        api_key: str,
        mojang_url: str = MOJANG_API,
        hypixel_url: str = HYPIXEL_API,
        timeout: Optional[float] = 10,
    ) -> None:
        self._api_key = api_key
        self._mojang_url = mojang_url.rstrip("/")
        self._hypixel_url = hypixel_url.rstrip("/")
        self._timeout = timeout

    def _get_json(self, url: str, params: Optional[dict] = None) -> Optional[Any]:
        try:
            r = requests.get(
                url,
                params=params,
                headers={"User-Agent": USER_AGENT},
                timeout=self._timeout,
            )
            r.raise_for_status()
            return r.json()
        except (requests.RequestException, ValueError) as exc:
            # Never log the query string; it carries the API key.
            logger.warning("GET %s failed: %s", url, exc.__class__.__name__)
            return None

    def resolve_identity(self, name: str) -> Optional[str]:
        data = self._get_json(f"{self._mojang_url}/users/profiles/minecraft/{name}")
        if not isinstance(data, dict):
            return None
        return data.get("id") or None

    def fetch_attributes(self, stable_id: str) -> Optional[ProfileAttributes]:
        data = self._get_json(
            f"{self._hypixel_url}/player",
            params={"key": self._api_key, "uuid": stable_id},
        )
        if not isinstance(data, dict):
            return None
        player = data.get("player")
        if not isinstance(player, dict):
            logger.warning("Hypixel has no player record for %s", stable_id)
            return None
        return ProfileAttributes.from_payload(player)

    def fetch_guild(self, stable_id: str) -> Optional[GuildInfo]:
        data = self._get_json(
            f"{self._hypixel_url}/guild",
            params={"key": self._api_key, "player": stable_id},
        )
        if not isinstance(data, dict):
            return None
        guild = data.get("guild")
        if not isinstance(guild, dict) or not guild.get("name"):
            return None
        return GuildInfo(name=guild["name"], tag=guild.get("tag") or "")
