from __future__ import annotations

import logging
import threading

from flask import Flask


logger = logging.getLogger(__name__)


def create_keepalive_app() -> Flask:
    app = Flask(__name__)

    @app.get("/")
    def home():
        return "Hello world!"

    return app


def start_keepalive(port: int, host: str = "0.0.0.0") -> threading.Thread:
    """Serve the liveness route from a daemon thread so the bot keeps the main one."""

    app = create_keepalive_app()
    thread = threading.Thread(
        target=app.run,
        kwargs={"host": host, "port": port, "use_reloader": False},
        name="keepalive",
        daemon=True,
    )
    thread.start()
    logger.info("Project is running! Keep-alive listening on port %d", port)
    return thread
