"""Usage statistics and cost projection for one billing period.

Turns cumulative meter readings into per-day usage, prices the usage so
far with the tiered tariff, and projects the period-end figure from the
average daily usage.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from water_monitor.billing.period import BillingPeriod
from water_monitor.billing.readings import MeterReading
from water_monitor.tariff.schema import TariffConfiguration
from water_monitor.tariff.tiered import CostBreakdown, tiered_cost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyUsage:
    """Usage attributed to the date of the later reading of a pair."""

    date: date
    usage: float  # kL, never negative


@dataclass(frozen=True)
class ReadingAnomaly:
    """A reading lower than its predecessor (meter reset or typo)."""

    reading_date: date
    previous_value: float
    value: float

    @property
    def delta(self) -> float:
        return self.value - self.previous_value

    def to_dict(self) -> dict[str, str]:
        return {
            "date": self.reading_date.isoformat(),
            "previousValue": f"{self.previous_value:.4f}",
            "value": f"{self.value:.4f}",
            "delta": f"{self.delta:.4f}",
        }


@dataclass
class UsageStatistics:
    """Usage and cost figures for a billing period, unrounded."""

    billing_period: BillingPeriod
    total_usage: float = 0.0
    average_daily_usage: float = 0.0
    projected_usage: float = 0.0
    current: CostBreakdown = field(default_factory=CostBreakdown)
    projected: CostBreakdown = field(default_factory=CostBreakdown)
    daily_usage: list[DailyUsage] = field(default_factory=list)
    anomalies: list[ReadingAnomaly] = field(default_factory=list)

    @property
    def current_cost(self) -> float:
        return self.current.total

    @property
    def projected_cost(self) -> float:
        return self.projected.total

    @property
    def days_in_period(self) -> int:
        return self.billing_period.days

    @property
    def days_with_readings(self) -> int:
        return len(self.daily_usage)

    def to_dict(self) -> dict[str, Any]:
        """Serialise with usage at 4 dp and money at 2 dp."""
        return {
            "totalUsage": f"{self.total_usage:.4f}",
            "dailyUsage": [
                {"date": d.date.isoformat(), "usage": f"{d.usage:.4f}"}
                for d in self.daily_usage
            ],
            "avgDailyUsage": f"{self.average_daily_usage:.4f}",
            "projectedUsage": f"{self.projected_usage:.4f}",
            "currentCost": f"{self.current_cost:.2f}",
            "projectedCost": f"{self.projected_cost:.2f}",
            "costBreakdown": {
                "current": self.current.to_dict(),
                "projected": self.projected.to_dict(),
            },
            "billingPeriod": self.billing_period.to_dict(),
            "daysInPeriod": self.days_in_period,
            "daysWithReadings": self.days_with_readings,
            "anomalies": [a.to_dict() for a in self.anomalies],
        }


def daily_usage_from_readings(
    readings: Sequence[MeterReading],
) -> tuple[list[DailyUsage], list[ReadingAnomaly]]:
    """Difference consecutive readings; negative deltas count as zero usage."""
    ordered = sorted(readings, key=lambda r: r.sort_key)
    daily: list[DailyUsage] = []
    anomalies: list[ReadingAnomaly] = []

    for prev, cur in zip(ordered, ordered[1:]):
        delta = cur.value - prev.value
        if delta < 0:
            anomalies.append(ReadingAnomaly(cur.reading_date, prev.value, cur.value))
            logger.warning(
                "Meter went backwards on %s (%.4f -> %.4f kL); counting zero usage",
                cur.reading_date, prev.value, cur.value,
            )
        daily.append(DailyUsage(date=cur.reading_date, usage=max(0.0, delta)))

    return daily, anomalies


def compute_statistics(
    readings: Sequence[MeterReading],
    tariff: TariffConfiguration,
    period: BillingPeriod,
) -> UsageStatistics:
    """Compute usage, cost and projected cost for *period*.

    *readings* should already be limited to the period. With fewer than
    two readings there is no usage signal and a zeroed result is returned.
    """
    if len(readings) < 2:
        logger.debug("Only %d reading(s) in %s..%s; returning zero statistics",
                     len(readings), period.start, period.end)
        return UsageStatistics(billing_period=period)

    daily, anomalies = daily_usage_from_readings(readings)
    total = sum(d.usage for d in daily)
    average = total / len(daily) if daily else 0.0
    projected_usage = average * period.days

    stats = UsageStatistics(
        billing_period=period,
        total_usage=total,
        average_daily_usage=average,
        projected_usage=projected_usage,
        current=tiered_cost(total, tariff),
        projected=tiered_cost(projected_usage, tariff),
        daily_usage=daily,
        anomalies=anomalies,
    )
    logger.info(
        "Statistics %s..%s: %.4fkL over %d intervals, projected %.4fkL (cost %.2f -> %.2f)",
        period.start, period.end, total, len(daily), projected_usage,
        stats.current_cost, stats.projected_cost,
    )
    return stats
