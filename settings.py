from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


STORAGE_BACKENDS = ("json", "sqlite", "postgres")


@dataclass(frozen=True)
class Settings:
    discord_token: str
    hypixel_api_key: str

    storage_backend: str = "json"
    storage_path: str = "verifiedUsers.json"
    db_path: str = "verification.db"
    database_url: Optional[str] = None

    verify_channel: str = "『✅』verify"
    welcome_channel: str = "『👋』welcome"
    verified_role: str = "✅• Verified"
    unverified_role: str = "❌• Unverified"
    guild_role: str = "👼 • Angel"
    guild_name: str = "Heavenly Spirits"
    staff_role: str = "👔 • Angel Staff"
    cooldown_hours: int = 6

    keepalive_port: int = 3000
    background_path: str = "Background1.png"
    font_path: str = "Minecraft.ttf"
    skin_service_url: str = "https://mc-heads.net"

    log_level: str = "INFO"
    log_dir: Optional[str] = None


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    try:
        return int(value) if value else default
    except ValueError:
        return default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build `Settings` from the environment (after loading `.env`).

    The bot token and the Hypixel key are required; anything else falls
    back to the defaults above.
    """

    if env is None:
        load_dotenv()
        env = os.environ

    token = env.get("DISCORD_BOT_TOKEN")
    if not token:
        raise RuntimeError("DISCORD_BOT_TOKEN environment variable is not set.")

    api_key = env.get("HYPIXEL_API_KEY")
    if not api_key:
        raise RuntimeError("HYPIXEL_API_KEY environment variable is not set.")

    backend = env.get("STORAGE_BACKEND", "json").lower()
    if backend not in STORAGE_BACKENDS:
        raise RuntimeError(f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}.")

    database_url = env.get("DATABASE_URL") or None
    if backend == "postgres" and not database_url:
        raise RuntimeError("DATABASE_URL is required when STORAGE_BACKEND=postgres.")

    defaults = Settings(discord_token=token, hypixel_api_key=api_key)
    return Settings(
        discord_token=token,
        hypixel_api_key=api_key,
        storage_backend=backend,
        storage_path=env.get("STORAGE_PATH", defaults.storage_path),
        db_path=env.get("DB_PATH", defaults.db_path),
        database_url=database_url,
        verify_channel=env.get("VERIFY_CHANNEL", defaults.verify_channel),
        welcome_channel=env.get("WELCOME_CHANNEL", defaults.welcome_channel),
        verified_role=env.get("VERIFIED_ROLE", defaults.verified_role),
        unverified_role=env.get("UNVERIFIED_ROLE", defaults.unverified_role),
        guild_role=env.get("GUILD_ROLE", defaults.guild_role),
        guild_name=env.get("GUILD_NAME", defaults.guild_name),
        staff_role=env.get("STAFF_ROLE", defaults.staff_role),
        cooldown_hours=_env_int(env, "COOLDOWN_HOURS", defaults.cooldown_hours),
        keepalive_port=_env_int(env, "KEEPALIVE_PORT", defaults.keepalive_port),
        background_path=env.get("BACKGROUND_PATH", defaults.background_path),
        font_path=env.get("FONT_PATH", defaults.font_path),
        skin_service_url=env.get("SKIN_SERVICE_URL", defaults.skin_service_url),
        log_level=env.get("LOG_LEVEL", defaults.log_level),
        log_dir=env.get("LOG_DIR") or None,
    )
