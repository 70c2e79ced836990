"""Water Monitor application entry point and lifecycle.

Startup sequence: config → logging → SQLite → API app → uvicorn.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys

import uvicorn

from water_monitor import __version__
from water_monitor.config.manager import ConfigManager
from water_monitor.config.schema import AppConfig
from water_monitor.dashboard.app import create_app
from water_monitor.db.engine import close_db, init_db
from water_monitor.db.repository import Repository
from water_monitor.logging.structured import setup_logging

logger = logging.getLogger(__name__)


class Application:
    """Owns the database connection and the HTTP server."""

    def __init__(self, config: AppConfig, config_manager: ConfigManager) -> None:
        self.config = config
        self.config_manager = config_manager
        self._running = False
        self._server: uvicorn.Server | None = None

    async def start(self) -> None:
        """Open storage, build the app and serve until stopped."""
        logger.info("Starting Water Monitor v%s", __version__)
        self._running = True

        db = await init_db(self.config.db.path)
        repo = Repository(db)

        app = create_app(self.config, repo, config_manager=self.config_manager)

        uvi_config = uvicorn.Config(
            app,
            host=self.config.dashboard.host,
            port=self.config.dashboard.port,
            log_level="warning",
        )
        server = uvicorn.Server(uvi_config)
        # Signal handling stays in main() so Ctrl+C behaves the same everywhere.
        server.install_signal_handlers = lambda: None
        self._server = server

        logger.info(
            "API available at http://%s:%d",
            self.config.dashboard.host,
            self.config.dashboard.port,
        )
        try:
            await server.serve()
        finally:
            await close_db()

    async def stop(self) -> None:
        """Ask the server to exit; start() closes the database on the way out."""
        if not self._running:
            return
        logger.info("Shutting down Water Monitor")
        self._running = False
        if self._server is not None:
            self._server.should_exit = True


def main() -> None:
    """Entry point for the application.

    Reads ``config.defaults.yaml`` and ``config.yaml`` from the working
    directory; the billing API writes overrides back to ``config.yaml``.
    """
    config_manager = ConfigManager()
    config = config_manager.load()
    setup_logging(
        level=config.logging.level,
        fmt=config.logging.format,
        log_file=config.logging.file,
    )

    app = Application(config, config_manager)

    async def _run() -> None:
        try:
            await app.start()
        finally:
            await app.stop()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def _request_stop() -> None:
        if loop.is_closed():
            return
        loop.call_soon_threadsafe(lambda: asyncio.ensure_future(app.stop()))

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _request_stop)
    else:
        signal.signal(signal.SIGINT, lambda *_: _request_stop())

    try:
        loop.run_until_complete(_run())
    except KeyboardInterrupt:
        with contextlib.suppress(Exception):
            loop.run_until_complete(app.stop())
    finally:
        loop.close()


if __name__ == "__main__":
    main()
