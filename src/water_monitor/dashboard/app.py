"""FastAPI application factory for the Water Monitor API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from water_monitor import __version__
from water_monitor.billing.service import StatisticsService
from water_monitor.config.manager import ConfigManager
from water_monitor.config.schema import AppConfig
from water_monitor.db.repository import Repository
from water_monitor.errors import ConfigurationError
from water_monitor.logging.context import owner_context

logger = logging.getLogger(__name__)

OWNER_HEADER = "X-Owner-Id"


def create_app(
    config: AppConfig,
    repo: Repository,
    config_manager: ConfigManager,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Water Monitor",
        description="Meter readings and tiered water/sewage billing",
        version=__version__,
    )

    # Store config, repo and service in app state for access in routes
    app.state.config = config
    app.state.repo = repo
    app.state.config_manager = config_manager
    app.state.statistics = StatisticsService(repo, config.billing)

    @app.middleware("http")
    async def inject_owner_context(request: Request, call_next):
        # Identity is resolved upstream; we only read the forwarded owner id.
        owner_id = request.headers.get(OWNER_HEADER) or config.dashboard.default_owner_id
        request.state.owner_id = owner_id
        with owner_context(owner_id, path=request.url.path):
            return await call_next(request)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.warning("Rejected request with bad settings: %s", exc)
        return JSONResponse(status_code=422, content={"error": str(exc), "key": exc.key})

    from water_monitor.dashboard.routes.api import router as api_router
    from water_monitor.dashboard.routes.config import router as config_router
    from water_monitor.dashboard.routes.logs import router as logs_router

    app.include_router(api_router, prefix="/api")
    app.include_router(config_router, prefix="/api")
    app.include_router(logs_router, prefix="/api")

    return app
