"""Recent application log records for the requesting owner."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request

from water_monitor.dashboard.log_buffer import log_buffer

router = APIRouter()


@router.get("/logs")
async def recent_logs(
    request: Request,
    limit: int = Query(200, ge=1, le=1000),
    level: str | None = None,
) -> dict:
    """Newest-first records: the owner's own plus system records, optionally by level."""
    records = log_buffer.get_records(limit=limit, level=level, owner_id=request.state.owner_id)
    return {"records": records}
