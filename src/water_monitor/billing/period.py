"""Billing period resolution from a recurring day-of-month range."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal

from water_monitor.errors import ConfigurationError

logger = logging.getLogger(__name__)

DayOverflow = Literal["roll", "clamp"]


@dataclass(frozen=True)
class BillingPeriod:
    """Inclusive calendar date range of one billing cycle."""

    start: date
    end: date

    @property
    def days(self) -> int:
        """Number of calendar days in the period, both ends included."""
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def month_date(year: int, month: int, day: int, overflow: DayOverflow = "roll") -> date:
    """Build a date from a possibly out-of-range month and day.

    ``month`` may be 0 or 13 (previous / next year). When ``day`` is past
    the end of the month, ``"roll"`` carries the excess into the next
    month (31 April -> 1 May) and ``"clamp"`` returns the month's last day.
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    if day <= last_day:
        return date(year, month, day)
    if overflow == "clamp":
        return date(year, month, last_day)
    return date(year, month, 1) + timedelta(days=day - 1)


def _check_day(name: str, value: int) -> None:
    if not 1 <= value <= 31:
        raise ConfigurationError(f"{name} must be within 1..31, got {value}", key=name)


def resolve_billing_period(
    today: date,
    start_day: int,
    end_day: int,
    overflow: DayOverflow = "roll",
) -> BillingPeriod:
    """Return the billing cycle that is active on *today*.

    On or after ``start_day`` the cycle began this month; before it, the
    cycle began last month and ends this month. An ``end_day`` smaller
    than ``start_day`` means the cycle ends in the following month.
    """
    _check_day("billing_start_day", start_day)
    _check_day("billing_end_day", end_day)

    year, month = today.year, today.month
    if today.day >= start_day:
        start = month_date(year, month, start_day, overflow)
        end_month = month + 1 if end_day < start_day else month
        end = month_date(year, end_month, end_day, overflow)
    else:
        start = month_date(year, month - 1, start_day, overflow)
        end = month_date(year, month, end_day, overflow)

    period = BillingPeriod(start=start, end=end)
    logger.debug(
        "Billing period for %s (days %d-%d, %s): %s to %s",
        today, start_day, end_day, overflow, start, end,
    )
    return period
