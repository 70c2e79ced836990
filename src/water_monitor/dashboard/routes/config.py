"""Runtime view and update of the app-wide billing configuration."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from water_monitor.errors import ConfigurationError
from water_monitor.timezone_utils import is_known_timezone

router = APIRouter()
logger = logging.getLogger(__name__)


class BillingConfigUpdate(BaseModel):
    timezone: str | None = None
    day_overflow: Literal["roll", "clamp"] | None = None


@router.get("/config/billing")
async def get_billing_config(request: Request) -> dict:
    return request.app.state.config.billing.model_dump()


@router.put("/config/billing")
async def update_billing_config(request: Request, body: BillingConfigUpdate):
    """Write billing overrides to the user config file and apply them.

    These settings are shared by every owner: the timezone decides
    "today" and the overflow mode decides how day 31 lands in short months.
    """
    updates = body.model_dump(exclude_none=True)
    if not updates:
        return JSONResponse(status_code=400, content={"error": "No billing settings given"})
    if "timezone" in updates and not is_known_timezone(updates["timezone"]):
        raise ConfigurationError(f"Unknown timezone {updates['timezone']!r}", key="timezone")

    config = request.app.state.config_manager.save_user_config({"billing": updates})
    request.app.state.config = config
    request.app.state.statistics.reconfigure(config.billing)

    logger.info("Billing config updated: %s", ", ".join(f"{k}={v}" for k, v in updates.items()))
    return config.billing.model_dump()
