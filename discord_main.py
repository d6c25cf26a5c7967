import logging

from application.services import VerificationPolicy
from infrastructure.http.hypixel_client import HypixelProfileRepository
from infrastructure.http.skins import SkinFetcher
from infrastructure.log import configure_logging
from infrastructure.rendering.skin_pose import SkinPoseRenderer
from infrastructure.rendering.welcome_card import WelcomeCardRenderer
from interfaces.discord.handlers import create_discord_bot
from interfaces.web.keepalive import start_keepalive
from settings import Settings, load_settings


logger = logging.getLogger(__name__)


def build_verification_repo(settings: Settings):
    if settings.storage_backend == "sqlite":
        from infrastructure.db.verification_repository_sqlite import SqliteVerificationRepository

        return SqliteVerificationRepository(settings.db_path)

    if settings.storage_backend == "postgres":
        from infrastructure.db.verification_repository_postgres import PostgresVerificationRepository

        return PostgresVerificationRepository(settings.database_url)

    from infrastructure.db.verification_repository_json import JsonVerificationRepository

    return JsonVerificationRepository(settings.storage_path)


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_dir)

    verification_repo = build_verification_repo(settings)
    profile_repo = HypixelProfileRepository(settings.hypixel_api_key)
    skins = SkinFetcher(settings.skin_service_url)

    policy = VerificationPolicy(
        verified_role=settings.verified_role,
        unverified_role=settings.unverified_role,
        guild_role=settings.guild_role,
        guild_name=settings.guild_name,
        cooldown_hours=settings.cooldown_hours,
    )

    bot = create_discord_bot(
        verification_repo,
        profile_repo,
        policy,
        verify_channel=settings.verify_channel,
        welcome_channel=settings.welcome_channel,
        staff_role=settings.staff_role,
        render_welcome=WelcomeCardRenderer(skins, settings.background_path, settings.font_path),
        render_pose=SkinPoseRenderer(skins),
    )

    start_keepalive(settings.keepalive_port)
    logger.info("Starting bot with %s storage", settings.storage_backend)
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
