"""Data access layer for readings and per-owner settings."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Any

import aiosqlite

from water_monitor.billing.period import BillingPeriod
from water_monitor.billing.readings import MeterReading
from water_monitor.tariff.defaults import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Repository:
    """Centralised data access for all tables. Every query is owner-scoped."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self.db = db

    # ── Readings ────────────────────────────────────────────

    async def add_reading(
        self,
        owner_id: str,
        value_kl: float,
        reading_date: date,
        reading_time: time,
    ) -> MeterReading:
        recorded_at = _now()
        async with self.db.execute(
            """INSERT INTO readings
               (owner_id, reading_value, reading_date, reading_time, recorded_at)
               VALUES (?, ?, ?, ?, ?)""",
            (
                owner_id, value_kl, reading_date.isoformat(),
                reading_time.strftime("%H:%M:%S"), recorded_at,
            ),
        ) as cursor:
            row_id = cursor.lastrowid
        await self.db.commit()
        logger.debug("Stored reading %d for %s: %.4fkL on %s", row_id, owner_id, value_kl, reading_date)
        return MeterReading(
            id=row_id,
            owner_id=owner_id,
            value=value_kl,
            reading_date=reading_date,
            reading_time=reading_time,
            recorded_at=datetime.fromisoformat(recorded_at),
        )

    async def get_readings(
        self,
        owner_id: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[MeterReading]:
        """Owner's readings newest first, optionally within [start, end]."""
        query = "SELECT * FROM readings WHERE owner_id = ?"
        params: list[Any] = [owner_id]
        if start is not None and end is not None:
            query += " AND reading_date BETWEEN ? AND ?"
            params += [start.isoformat(), end.isoformat()]
        query += " ORDER BY reading_date DESC, reading_time DESC"

        async with self.db.execute(query, params) as cursor:
            rows = await cursor.fetchall()
            return [MeterReading.from_row(dict(r)) for r in rows]

    async def get_readings_in_period(self, owner_id: str, period: BillingPeriod) -> list[MeterReading]:
        """Owner's readings within *period*, oldest first."""
        async with self.db.execute(
            """SELECT * FROM readings
               WHERE owner_id = ? AND reading_date BETWEEN ? AND ?
               ORDER BY reading_date, reading_time""",
            (owner_id, period.start.isoformat(), period.end.isoformat()),
        ) as cursor:
            rows = await cursor.fetchall()
            return [MeterReading.from_row(dict(r)) for r in rows]

    async def delete_reading(self, owner_id: str, reading_id: int) -> bool:
        """Delete a reading if *owner_id* owns it. Returns False otherwise."""
        async with self.db.execute(
            "DELETE FROM readings WHERE id = ? AND owner_id = ?",
            (reading_id, owner_id),
        ) as cursor:
            deleted = cursor.rowcount > 0
        await self.db.commit()
        return deleted

    async def clear_readings(self, owner_id: str) -> int:
        async with self.db.execute(
            "DELETE FROM readings WHERE owner_id = ?", (owner_id,),
        ) as cursor:
            count = cursor.rowcount
        await self.db.commit()
        return count

    # ── Settings ────────────────────────────────────────────

    async def get_settings(self, owner_id: str) -> dict[str, str]:
        async with self.db.execute(
            "SELECT setting_key, setting_value FROM settings WHERE owner_id = ?",
            (owner_id,),
        ) as cursor:
            rows = await cursor.fetchall()
            return {r["setting_key"]: r["setting_value"] for r in rows}

    async def update_settings(self, owner_id: str, settings: Mapping[str, str]) -> None:
        await self.db.executemany(
            """INSERT INTO settings (owner_id, setting_key, setting_value)
               VALUES (?, ?, ?)
               ON CONFLICT(owner_id, setting_key) DO UPDATE SET setting_value = excluded.setting_value""",
            [(owner_id, key, str(value)) for key, value in settings.items()],
        )
        await self.db.commit()
        logger.info("Updated %d setting(s) for %s", len(settings), owner_id)

    async def initialize_owner_settings(self, owner_id: str) -> None:
        """Seed the default tariff for *owner_id* without touching existing keys."""
        await self.db.executemany(
            """INSERT OR IGNORE INTO settings (owner_id, setting_key, setting_value)
               VALUES (?, ?, ?)""",
            [(owner_id, key, value) for key, value in DEFAULT_SETTINGS.items()],
        )
        await self.db.commit()

    # ── Owners ──────────────────────────────────────────────

    async def delete_owner(self, owner_id: str) -> None:
        """Remove every reading and setting belonging to *owner_id*."""
        await self.db.execute("DELETE FROM readings WHERE owner_id = ?", (owner_id,))
        await self.db.execute("DELETE FROM settings WHERE owner_id = ?", (owner_id,))
        await self.db.commit()
        logger.info("Deleted all data for %s", owner_id)
