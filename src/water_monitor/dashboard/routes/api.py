"""REST API endpoints returning JSON data."""

from __future__ import annotations

import logging
from datetime import date, time

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from water_monitor.billing.readings import raw_to_kilolitres
from water_monitor.tariff.schema import TariffConfiguration
from water_monitor.tariff.tiered import tiered_cost

router = APIRouter()
logger = logging.getLogger(__name__)


# ── Request models ───────────────────────────────────

class ReadingRequest(BaseModel):
    reading_value: float | None = Field(None, ge=0)  # kL
    raw_value: int | None = Field(None, ge=0)  # meter display digits
    reading_date: date
    reading_time: time


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ── Health ───────────────────────────────────────────

@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


# ── Readings ─────────────────────────────────────────

@router.get("/readings")
async def list_readings(
    request: Request,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[dict]:
    """Owner's readings, newest first. Filters only when both dates are given."""
    repo = request.app.state.repo
    readings = await repo.get_readings(request.state.owner_id, start_date, end_date)
    return [r.to_dict() for r in readings]


@router.post("/readings")
async def add_reading(request: Request, body: ReadingRequest):
    if body.reading_value is None and body.raw_value is None:
        return _error(400, "Missing required fields: reading_value or raw_value")
    if body.reading_value is not None and body.raw_value is not None:
        return _error(400, "Send either reading_value or raw_value, not both")

    value = body.reading_value
    if value is None:
        value = raw_to_kilolitres(body.raw_value)

    repo = request.app.state.repo
    reading = await repo.add_reading(
        request.state.owner_id, value, body.reading_date, body.reading_time,
    )
    logger.info("Reading %d added: %.4fkL on %s", reading.id, value, body.reading_date)
    return reading.to_dict()


@router.delete("/readings/{reading_id}")
async def delete_reading(request: Request, reading_id: int):
    repo = request.app.state.repo
    if not await repo.delete_reading(request.state.owner_id, reading_id):
        return _error(404, "Reading not found or unauthorized")
    return {"message": "Reading deleted successfully"}


# ── Settings ─────────────────────────────────────────

@router.get("/settings")
async def get_settings(request: Request) -> dict[str, str]:
    repo = request.app.state.repo
    owner_id = request.state.owner_id
    await repo.initialize_owner_settings(owner_id)
    return await repo.get_settings(owner_id)


@router.put("/settings")
async def update_settings(request: Request, updates: dict[str, str | float | int]) -> dict:
    """Upsert settings after checking the merged result still parses.

    A ConfigurationError here becomes a 422 via the app's handler and
    nothing is written.
    """
    repo = request.app.state.repo
    owner_id = request.state.owner_id
    encoded = {key: str(value) for key, value in updates.items()}

    current = await repo.get_settings(owner_id)
    TariffConfiguration.from_settings({**current, **encoded})

    await repo.update_settings(owner_id, encoded)
    return {"message": "Settings updated successfully"}


# ── Statistics ───────────────────────────────────────

@router.get("/statistics")
async def statistics(request: Request) -> dict:
    """Usage and cost for the billing period active today."""
    service = request.app.state.statistics
    stats = await service.compute(request.state.owner_id)
    return stats.to_dict()


@router.get("/tariff/cost")
async def tariff_cost(request: Request, usage: float = Query(..., ge=0)) -> dict:
    """Cost breakdown for an arbitrary kL volume under the owner's tariff."""
    service = request.app.state.statistics
    tariff = await service.get_tariff(request.state.owner_id)
    return {"usage": f"{usage:.4f}", **tiered_cost(usage, tariff).to_dict()}
