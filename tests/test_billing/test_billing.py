"""Tests for billing period resolution, usage statistics and projection."""

from __future__ import annotations

from datetime import date, time

import pytest

from water_monitor.billing.engine import compute_statistics, daily_usage_from_readings
from water_monitor.billing.period import BillingPeriod, month_date, resolve_billing_period
from water_monitor.billing.readings import MeterReading, raw_to_kilolitres
from water_monitor.errors import ConfigurationError
from water_monitor.tariff.schema import TariffConfiguration
from water_monitor.tariff.tiered import tiered_cost

JANUARY = BillingPeriod(start=date(2025, 1, 1), end=date(2025, 1, 31))


def _reading(value: float, day: int, at: time = time(6, 0)) -> MeterReading:
    return MeterReading(owner_id="alice", value=value, reading_date=date(2025, 1, day), reading_time=at)


# ── Period resolution ─────────────────────────────────────────


class TestMonthDate:
    def test_regular_day(self) -> None:
        assert month_date(2025, 4, 15) == date(2025, 4, 15)

    def test_month_zero_is_previous_december(self) -> None:
        assert month_date(2025, 0, 20) == date(2024, 12, 20)

    def test_month_thirteen_is_next_january(self) -> None:
        assert month_date(2025, 13, 19) == date(2026, 1, 19)

    def test_roll_overflows_into_next_month(self) -> None:
        assert month_date(2025, 4, 31) == date(2025, 5, 1)
        assert month_date(2025, 2, 30) == date(2025, 3, 2)

    def test_clamp_to_month_end(self) -> None:
        assert month_date(2025, 4, 31, "clamp") == date(2025, 4, 30)
        assert month_date(2024, 2, 31, "clamp") == date(2024, 2, 29)


class TestResolveBillingPeriod:
    def test_calendar_month(self) -> None:
        period = resolve_billing_period(date(2025, 1, 15), 1, 31)
        assert period == BillingPeriod(date(2025, 1, 1), date(2025, 1, 31))

    def test_before_start_day_uses_previous_month(self) -> None:
        period = resolve_billing_period(date(2025, 1, 5), 20, 19)
        assert period == BillingPeriod(date(2024, 12, 20), date(2025, 1, 19))

    def test_after_start_day_rolls_into_next_month(self) -> None:
        period = resolve_billing_period(date(2025, 1, 25), 20, 19)
        assert period == BillingPeriod(date(2025, 1, 20), date(2025, 2, 19))

    def test_on_start_day(self) -> None:
        period = resolve_billing_period(date(2025, 3, 20), 20, 19)
        assert period.start == date(2025, 3, 20)

    def test_december_rolls_into_next_year(self) -> None:
        period = resolve_billing_period(date(2025, 12, 25), 20, 19)
        assert period == BillingPeriod(date(2025, 12, 20), date(2026, 1, 19))

    def test_day_31_in_30_day_month_rolls(self) -> None:
        period = resolve_billing_period(date(2025, 4, 15), 1, 31)
        assert period.end == date(2025, 5, 1)

    def test_day_31_in_30_day_month_clamps(self) -> None:
        period = resolve_billing_period(date(2025, 4, 15), 1, 31, overflow="clamp")
        assert period.end == date(2025, 4, 30)

    def test_february_start_day_overflow(self) -> None:
        rolled = resolve_billing_period(date(2025, 3, 10), 30, 29)
        assert rolled == BillingPeriod(date(2025, 3, 2), date(2025, 3, 29))
        clamped = resolve_billing_period(date(2025, 3, 10), 30, 29, overflow="clamp")
        assert clamped == BillingPeriod(date(2025, 2, 28), date(2025, 3, 29))

    @pytest.mark.parametrize("start_day,end_day", [(0, 31), (1, 32), (-1, 5)])
    def test_out_of_range_days_rejected(self, start_day: int, end_day: int) -> None:
        with pytest.raises(ConfigurationError):
            resolve_billing_period(date(2025, 1, 15), start_day, end_day)

    def test_period_days_inclusive(self) -> None:
        assert JANUARY.days == 31
        assert BillingPeriod(date(2024, 12, 20), date(2025, 1, 19)).days == 31
        assert BillingPeriod(date(2025, 1, 1), date(2025, 1, 1)).days == 1

    def test_contains(self) -> None:
        assert JANUARY.contains(date(2025, 1, 31))
        assert not JANUARY.contains(date(2025, 2, 1))


# ── Readings ──────────────────────────────────────────────────


class TestReadings:
    def test_raw_to_kilolitres(self) -> None:
        assert raw_to_kilolitres(1287309) == pytest.approx(128.7309)
        assert raw_to_kilolitres(1257445) == pytest.approx(125.7445)

    def test_row_round_trip_fields(self) -> None:
        reading = MeterReading.from_row({
            "id": 7,
            "owner_id": "alice",
            "reading_value": 128.7309,
            "reading_date": "2025-10-12",
            "reading_time": "05:51:00",
            "recorded_at": "2025-10-12T05:52:00+00:00",
        })
        assert reading.reading_date == date(2025, 10, 12)
        assert reading.reading_time == time(5, 51)
        assert reading.to_dict()["reading_time"] == "05:51:00"


# ── Usage statistics ──────────────────────────────────────────


class TestDailyUsage:
    def test_negative_delta_floored_and_reported(self) -> None:
        daily, anomalies = daily_usage_from_readings(
            [_reading(100.0, 1), _reading(102.5, 2), _reading(101.0, 3)]
        )
        assert [d.usage for d in daily] == [pytest.approx(2.5), 0.0]
        assert [d.date for d in daily] == [date(2025, 1, 2), date(2025, 1, 3)]
        assert len(anomalies) == 1
        assert anomalies[0].delta == pytest.approx(-1.5)

    def test_unsorted_input_is_ordered_by_date_then_time(self) -> None:
        readings = [
            _reading(103.0, 2, time(18, 0)),
            _reading(100.0, 1),
            _reading(101.0, 2, time(6, 0)),
        ]
        daily, anomalies = daily_usage_from_readings(readings)
        assert [d.usage for d in daily] == [pytest.approx(1.0), pytest.approx(2.0)]
        assert anomalies == []


class TestComputeStatistics:
    def test_negative_delta_example(self, tariff: TariffConfiguration) -> None:
        stats = compute_statistics(
            [_reading(100.0, 1), _reading(102.5, 2), _reading(101.0, 3)], tariff, JANUARY,
        )
        assert [d.usage for d in stats.daily_usage] == [pytest.approx(2.5), 0.0]
        assert stats.total_usage == pytest.approx(2.5)
        assert stats.average_daily_usage == pytest.approx(1.25)
        assert stats.days_with_readings == 2
        assert stats.days_in_period == 31
        assert stats.current_cost == pytest.approx(tiered_cost(2.5, tariff).total)

    def test_projection(self, tariff: TariffConfiguration) -> None:
        stats = compute_statistics(
            [_reading(100.0, 1), _reading(102.5, 2), _reading(101.0, 3)], tariff, JANUARY,
        )
        assert stats.projected_usage == pytest.approx(38.75)
        assert stats.projected_cost == pytest.approx(tiered_cost(38.75, tariff).total)

    @pytest.mark.parametrize("count", [0, 1])
    def test_fewer_than_two_readings_is_zero(self, tariff: TariffConfiguration, count: int) -> None:
        readings = [_reading(100.0, 1)][:count]
        stats = compute_statistics(readings, tariff, JANUARY)
        assert stats.total_usage == 0
        assert stats.average_daily_usage == 0
        assert stats.current_cost == 0
        assert stats.projected_cost == 0
        assert stats.current.water_basic == 0
        assert stats.daily_usage == []
        assert stats.billing_period == JANUARY

    def test_to_dict_formatting(self, tariff: TariffConfiguration) -> None:
        stats = compute_statistics(
            [_reading(100.0, 1), _reading(102.5, 2), _reading(101.0, 3)], tariff, JANUARY,
        )
        data = stats.to_dict()
        assert data["totalUsage"] == "2.5000"
        assert data["avgDailyUsage"] == "1.2500"
        assert data["projectedUsage"] == "38.7500"
        # 91.79 + 2.5 * 29.67 + 2.5 * 22.25
        assert data["currentCost"] == "221.59"
        assert data["costBreakdown"]["current"]["total"] == "221.59"
        assert data["costBreakdown"]["projected"]["total"] == data["projectedCost"]
        assert data["billingPeriod"] == {"start": "2025-01-01", "end": "2025-01-31"}
        assert data["dailyUsage"][0] == {"date": "2025-01-02", "usage": "2.5000"}
        assert data["daysInPeriod"] == 31
        assert data["daysWithReadings"] == 2
        assert data["anomalies"] == [{
            "date": "2025-01-03",
            "previousValue": "102.5000",
            "value": "101.0000",
            "delta": "-1.5000",
        }]

    def test_zero_result_serialises(self, tariff: TariffConfiguration) -> None:
        data = compute_statistics([], tariff, JANUARY).to_dict()
        assert data["totalUsage"] == "0.0000"
        assert data["currentCost"] == "0.00"
        assert data["costBreakdown"]["projected"] == {
            "waterBasic": "0.00", "waterUsage": "0.00", "sewage": "0.00", "total": "0.00",
        }
        assert data["dailyUsage"] == []
