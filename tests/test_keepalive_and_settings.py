import unittest

from interfaces.web.keepalive import create_keepalive_app
from settings import load_settings


REQUIRED = {"DISCORD_BOT_TOKEN": "token", "HYPIXEL_API_KEY": "key"}


class KeepaliveTests(unittest.TestCase):
    def test_root_route(self):
        client = create_keepalive_app().test_client()
        response = client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_data(as_text=True), "Hello world!")


class LoadSettingsTests(unittest.TestCase):
    def test_defaults(self):
        settings = load_settings(dict(REQUIRED))
        self.assertEqual(settings.storage_backend, "json")
        self.assertEqual(settings.storage_path, "verifiedUsers.json")
        self.assertEqual(settings.cooldown_hours, 6)
        self.assertEqual(settings.keepalive_port, 3000)
        self.assertIsNone(settings.log_dir)

    def test_missing_token_is_fatal(self):
        with self.assertRaises(RuntimeError):
            load_settings({"HYPIXEL_API_KEY": "key"})

    def test_missing_api_key_is_fatal(self):
        with self.assertRaises(RuntimeError):
            load_settings({"DISCORD_BOT_TOKEN": "token"})

    def test_invalid_integer_falls_back(self):
        settings = load_settings({**REQUIRED, "COOLDOWN_HOURS": "soon", "KEEPALIVE_PORT": "8080"})
        self.assertEqual(settings.cooldown_hours, 6)
        self.assertEqual(settings.keepalive_port, 8080)

    def test_postgres_needs_database_url(self):
        with self.assertRaises(RuntimeError):
            load_settings({**REQUIRED, "STORAGE_BACKEND": "postgres"})

        settings = load_settings({**REQUIRED, "STORAGE_BACKEND": "Postgres", "DATABASE_URL": "postgresql://x"})
        self.assertEqual(settings.storage_backend, "postgres")

    def test_unknown_backend(self):
        with self.assertRaises(RuntimeError):
            load_settings({**REQUIRED, "STORAGE_BACKEND": "redis"})


if __name__ == "__main__":
    unittest.main()
