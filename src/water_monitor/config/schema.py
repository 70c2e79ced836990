"""Pydantic configuration models for application settings.

Per-owner tariff settings live in the database, not here; see
``water_monitor.tariff.schema``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class BillingConfig(BaseModel):
    timezone: str = "Africa/Johannesburg"  # IANA tz used to decide "today"
    day_overflow: Literal["roll", "clamp"] = "roll"


class DashboardConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    default_owner_id: str = "default"  # used when no X-Owner-Id header is sent


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file: str = ""


class DBConfig(BaseModel):
    path: str = "water_monitor.db"


class AppConfig(BaseModel):
    """Root configuration model containing all system settings."""

    billing: BillingConfig = BillingConfig()
    dashboard: DashboardConfig = DashboardConfig()
    logging: LoggingConfig = LoggingConfig()
    db: DBConfig = DBConfig()
