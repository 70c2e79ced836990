"""Per-owner statistics orchestration: storage in, UsageStatistics out."""

from __future__ import annotations

import logging
from datetime import date

from water_monitor.billing.engine import UsageStatistics, compute_statistics
from water_monitor.billing.period import BillingPeriod, resolve_billing_period
from water_monitor.config.schema import BillingConfig
from water_monitor.db.repository import Repository
from water_monitor.tariff.schema import TariffConfiguration
from water_monitor.timezone_utils import local_today

logger = logging.getLogger(__name__)


class StatisticsService:
    """Loads an owner's settings and readings and runs the billing engine.

    Called by the HTTP layer once per statistics request; holds no state
    between calls.
    """

    def __init__(self, repo: Repository, config: BillingConfig) -> None:
        self._repo = repo
        self._config = config

    def reconfigure(self, config: BillingConfig) -> None:
        """Apply new billing config; the next compute() picks it up."""
        self._config = config

    def today(self) -> date:
        return local_today(self._config.timezone)

    async def get_tariff(self, owner_id: str) -> TariffConfiguration:
        """Parse the owner's stored settings, seeding defaults first."""
        await self._repo.initialize_owner_settings(owner_id)
        settings = await self._repo.get_settings(owner_id)
        return TariffConfiguration.from_settings(settings)

    def resolve_period(self, tariff: TariffConfiguration, today: date) -> BillingPeriod:
        return resolve_billing_period(
            today,
            tariff.billing_start_day,
            tariff.billing_end_day,
            overflow=self._config.day_overflow,
        )

    async def compute(self, owner_id: str, today: date | None = None) -> UsageStatistics:
        """Statistics for the billing period active on *today* (default: local today)."""
        today = today or self.today()
        tariff = await self.get_tariff(owner_id)
        period = self.resolve_period(tariff, today)
        readings = await self._repo.get_readings_in_period(owner_id, period)
        logger.debug("Computing statistics for %s from %d reading(s)", owner_id, len(readings))
        return compute_statistics(readings, tariff, period)
