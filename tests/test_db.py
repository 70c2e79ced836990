"""Tests for database engine and repository."""

from __future__ import annotations

from datetime import date, time

import pytest

from water_monitor.billing.period import BillingPeriod
from water_monitor.db.engine import init_db
from water_monitor.db.models import SCHEMA_VERSION
from water_monitor.db.repository import Repository
from water_monitor.tariff.defaults import DEFAULT_SETTINGS


@pytest.mark.asyncio
class TestRepository:
    async def test_add_and_get_readings(self, repo: Repository) -> None:
        stored = await repo.add_reading("alice", 125.7445, date(2025, 1, 12), time(17, 10))
        assert stored.id is not None and stored.id > 0

        readings = await repo.get_readings("alice")
        assert len(readings) == 1
        assert readings[0].value == 125.7445
        assert readings[0].reading_time == time(17, 10)

    async def test_readings_newest_first(self, repo: Repository) -> None:
        await repo.add_reading("alice", 1.0, date(2025, 1, 1), time(6, 0))
        await repo.add_reading("alice", 2.0, date(2025, 1, 2), time(6, 0))
        await repo.add_reading("alice", 3.0, date(2025, 1, 2), time(18, 0))

        values = [r.value for r in await repo.get_readings("alice")]
        assert values == [3.0, 2.0, 1.0]

    async def test_date_filter_is_inclusive(self, repo: Repository) -> None:
        for day in (1, 15, 31):
            await repo.add_reading("alice", float(day), date(2025, 1, day), time(6, 0))
        await repo.add_reading("alice", 40.0, date(2025, 2, 1), time(6, 0))

        readings = await repo.get_readings("alice", date(2025, 1, 1), date(2025, 1, 31))
        assert len(readings) == 3

    async def test_readings_in_period_oldest_first(self, repo: Repository) -> None:
        await repo.add_reading("alice", 2.0, date(2025, 1, 2), time(6, 0))
        await repo.add_reading("alice", 1.0, date(2025, 1, 1), time(6, 0))
        period = BillingPeriod(date(2025, 1, 1), date(2025, 1, 31))
        values = [r.value for r in await repo.get_readings_in_period("alice", period)]
        assert values == [1.0, 2.0]

    async def test_delete_reading_checks_owner(self, repo: Repository) -> None:
        stored = await repo.add_reading("alice", 1.0, date(2025, 1, 1), time(6, 0))
        assert stored.id is not None
        assert not await repo.delete_reading("bob", stored.id)
        assert await repo.delete_reading("alice", stored.id)
        assert await repo.get_readings("alice") == []

    async def test_initialize_settings_keeps_existing(self, repo: Repository) -> None:
        await repo.update_settings("alice", {"water_block_1_rate": "30.00"})
        await repo.initialize_owner_settings("alice")

        settings = await repo.get_settings("alice")
        assert settings["water_block_1_rate"] == "30.00"
        assert settings["water_block_2_rate"] == DEFAULT_SETTINGS["water_block_2_rate"]
        assert len(settings) == len(DEFAULT_SETTINGS)

    async def test_update_settings_upserts(self, repo: Repository) -> None:
        await repo.update_settings("alice", {"billing_start_day": "1"})
        await repo.update_settings("alice", {"billing_start_day": "20"})
        assert (await repo.get_settings("alice"))["billing_start_day"] == "20"

    async def test_delete_owner_cascades(self, repo: Repository) -> None:
        await repo.add_reading("alice", 1.0, date(2025, 1, 1), time(6, 0))
        await repo.initialize_owner_settings("alice")
        await repo.add_reading("bob", 1.0, date(2025, 1, 1), time(6, 0))

        await repo.delete_owner("alice")
        assert await repo.get_readings("alice") == []
        assert await repo.get_settings("alice") == {}
        assert len(await repo.get_readings("bob")) == 1


@pytest.mark.asyncio
async def test_reopen_keeps_readings(tmp_path) -> None:
    path = tmp_path / "water.db"
    db = await init_db(path)
    await Repository(db).add_reading("alice", 1.0, date(2025, 1, 1), time(6, 0))
    await db.close()

    db = await init_db(path)
    try:
        assert len(await Repository(db).get_readings("alice")) == 1
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_newer_schema_version_refused(tmp_path) -> None:
    path = tmp_path / "water.db"
    db = await init_db(path)
    await db.execute("UPDATE schema_version SET version = ? WHERE id = 1", (SCHEMA_VERSION + 1,))
    await db.commit()
    await db.close()

    with pytest.raises(RuntimeError, match="newer"):
        await init_db(path)


@pytest.mark.asyncio
async def test_in_memory_database() -> None:
    db = await init_db(":memory:")
    try:
        repo = Repository(db)
        await repo.add_reading("alice", 1.0, date(2025, 1, 1), time(6, 0))
        assert len(await repo.get_readings("alice")) == 1
    finally:
        await db.close()
