"""
Tests for the per-product analytics core.

Covers:
  - Grouping completeness and order
  - Totals, averages, days of stock and alert thresholds
  - Banded trend classification
  - Local fallback forecast
  - Remote forecaster wiring and fallback
  - Parallel batch analysis

No network access; remote forecasters are plain callables.
"""
import logging
from datetime import date

import pytest

from inventory_dashboard.analytics import (
    analyze_batch,
    classify_trend,
    compute_product_analytics,
    group_by_product,
    local_forecast,
    round_half_up,
)
from inventory_dashboard.exceptions import RemoteForecastError
from inventory_dashboard.schemas import Observation


def failing_forecaster(product_name, series):
    raise RemoteForecastError(product_name, "service unavailable")


# ────────────────────────────────────────────
# GROUPING
# ────────────────────────────────────────────


class TestGrouping:

    def test_empty_input(self):
        assert group_by_product([]) == {}

    def test_every_product_gets_one_group(self, make_series):
        observations = (
            make_series([1, 2], product_name="A")
            + make_series([3], product_name="B")
            + make_series([4, 5, 6], product_name="C")
        )
        grouped = group_by_product(observations)
        assert list(grouped) == ["A", "B", "C"]
        assert sum(len(series) for series in grouped.values()) == len(observations)

    def test_keeps_input_order_within_group(self):
        later = Observation(date=date(2024, 1, 5), product_name="A", inventory=1, sold=1)
        earlier = Observation(date=date(2024, 1, 1), product_name="A", inventory=2, sold=2)
        other = Observation(date=date(2024, 1, 3), product_name="B", inventory=3, sold=3)
        grouped = group_by_product([later, other, earlier])
        assert grouped["A"] == [later, earlier]

    def test_duplicates_are_kept(self, make_series):
        series = make_series([1]) * 3
        assert len(group_by_product(series)["Widget"]) == 3

    def test_regrouping_analytics_is_idempotent(self, make_series):
        observations = make_series([1] * 3, product_name="A") + make_series([2] * 5, product_name="B")
        analytics = analyze_batch(observations)
        regrouped = group_by_product(analytics)
        assert list(regrouped) == ["A", "B"]
        assert all(len(records) == 1 for records in regrouped.values())
        assert regrouped["A"][0] is analytics[0]


# ────────────────────────────────────────────
# STOCK-HEALTH METRICS
# ────────────────────────────────────────────


class TestStockHealth:

    def test_scenario_rising_sales_low_stock(self, make_series):
        series = make_series([5] * 7 + [10] * 7, inventory=20)
        result = compute_product_analytics("Widget", series)

        assert result.total_sold == 105
        assert result.avg_daily_sales == pytest.approx(7.5)
        assert result.current_inventory == 20
        assert result.days_of_stock == pytest.approx(2.6667, rel=1e-3)
        assert result.low_stock_alert is True
        assert result.over_stock_alert is False
        assert result.trend == "up"

    def test_scenario_short_history(self, make_series):
        series = make_series([3, 4], inventory=1)
        result = compute_product_analytics("Widget", series)

        assert result.trend == "stable"
        assert result.forecast == [0, 0, 0, 0, 0, 0, 0]
        assert result.forecast_source == "local-fallback"

    def test_total_sold_ignores_order(self, make_series):
        series = make_series([4, 0, 9, 2, 7])
        forward = compute_product_analytics("Widget", series)
        backward = compute_product_analytics("Widget", list(reversed(series)))
        assert forward.total_sold == backward.total_sold == 22

    def test_series_is_sorted_and_last_date_sets_inventory(self):
        newest = Observation(date=date(2024, 3, 1), product_name="A", inventory=42, sold=1)
        oldest = Observation(date=date(2024, 1, 1), product_name="A", inventory=7, sold=1)
        result = compute_product_analytics("A", [newest, oldest])
        assert [obs.date for obs in result.series] == [date(2024, 1, 1), date(2024, 3, 1)]
        assert result.current_inventory == 42

    def test_duplicate_dates_last_one_standing(self):
        first = Observation(date=date(2024, 1, 1), product_name="A", inventory=5, sold=1)
        second = Observation(date=date(2024, 1, 1), product_name="A", inventory=9, sold=1)
        assert compute_product_analytics("A", [first, second]).current_inventory == 9

    def test_empty_series(self):
        result = compute_product_analytics("Ghost", [])
        assert result.total_sold == 0
        assert result.avg_daily_sales == 0
        assert result.current_inventory == 0
        assert result.days_of_stock == 0
        assert result.low_stock_alert is True
        assert result.over_stock_alert is False

    def test_single_observation(self, make_series):
        result = compute_product_analytics("Widget", make_series([6], inventory=12))
        assert result.avg_daily_sales == 6
        assert result.days_of_stock == pytest.approx(2.0)
        assert result.trend == "stable"

    def test_zero_sales_uses_unit_divisor(self, make_series):
        result = compute_product_analytics("Widget", make_series([0] * 10, inventory=45))
        assert result.avg_daily_sales == 0
        assert result.days_of_stock == 45
        assert result.over_stock_alert is True
        assert result.forecast == [0] * 7

    @pytest.mark.parametrize(
        "inventory, low, over",
        [(0, True, False), (29, True, False), (30, False, False), (300, False, False), (301, False, True)],
    )
    def test_alert_thresholds(self, make_series, inventory, low, over):
        # avg daily sales is 10, so days of stock is inventory / 10
        result = compute_product_analytics("Widget", make_series([10] * 5, inventory=inventory))
        assert result.low_stock_alert is low
        assert result.over_stock_alert is over

    def test_alerts_never_both_true(self, make_series):
        for inventory in range(0, 400, 7):
            result = compute_product_analytics("Widget", make_series([3, 8, 1], inventory=inventory))
            assert not (result.low_stock_alert and result.over_stock_alert)
            assert result.low_stock_alert == (result.days_of_stock < 3.0)
            assert result.over_stock_alert == (result.days_of_stock > 30.0)


# ────────────────────────────────────────────
# TREND CLASSIFICATION
# ────────────────────────────────────────────


class TestTrend:

    def test_needs_fourteen_observations(self, make_series):
        assert classify_trend(make_series([0] * 6 + [100] * 7)) == "stable"

    def test_up(self, make_series):
        assert classify_trend(make_series([10] * 7 + [12] * 7)) == "up"

    def test_down(self, make_series):
        assert classify_trend(make_series([10] * 7 + [8] * 7)) == "down"

    def test_inside_band_is_stable(self, make_series):
        assert classify_trend(make_series([10] * 7 + [10, 11, 10, 11, 10, 11, 10])) == "stable"

    def test_band_edges_are_stable(self, make_series):
        # exactly +10% and -10% do not cross the band
        assert classify_trend(make_series([10] * 7 + [11] * 7)) == "stable"
        assert classify_trend(make_series([10] * 7 + [9] * 7)) == "stable"

    def test_only_last_fourteen_count(self, make_series):
        history = [1000] * 20 + [10] * 7 + [20] * 7
        assert classify_trend(make_series(history)) == "up"

    def test_zero_history_is_stable(self, make_series):
        assert classify_trend(make_series([0] * 14)) == "stable"

    def test_deterministic(self, make_series):
        sold = [3, 9, 4, 4, 1, 0, 7, 8, 2, 6, 6, 5, 3, 9, 12]
        assert classify_trend(make_series(sold)) == classify_trend(make_series(sold))


# ────────────────────────────────────────────
# LOCAL FALLBACK FORECAST
# ────────────────────────────────────────────


class TestLocalForecast:

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(10.2) == 10
        assert round_half_up(-2.5) == -2

    def test_fewer_than_seven_gives_zeros(self, make_series):
        assert local_forecast(make_series([50] * 6)) == [0] * 7

    def test_damped_trend(self, make_series):
        # avg_sales = 10, trend_delta = 2
        forecast = local_forecast(make_series([9] * 7 + [11] * 7))
        assert forecast[0] == 10
        assert forecast[1] == 10
        assert forecast[6] == 11
        assert forecast == [10, 10, 10, 11, 11, 11, 11]

    def test_partial_history_counts_missing_days_as_zero(self, make_series):
        # avg = 23 / 10, recent mean = 2, older mean = 3 / 7
        forecast = local_forecast(make_series([1] * 3 + [2] * 7))
        assert forecast == [2, 2, 3, 3, 3, 3, 3]

    def test_never_negative(self, make_series):
        forecast = local_forecast(make_series([100] * 7 + [0] * 7))
        assert forecast == [50, 40, 30, 20, 10, 0, 0]
        assert all(isinstance(value, int) and value >= 0 for value in forecast)

    def test_custom_horizon(self, make_series):
        assert len(local_forecast(make_series([5] * 14), days=3)) == 3


# ────────────────────────────────────────────
# FORECAST SOURCE
# ────────────────────────────────────────────


class TestForecastSource:

    def test_remote_values_used(self, make_series):
        calls = []

        def forecaster(product_name, series):
            calls.append((product_name, len(series)))
            return [1, 2, 3, 4, 5, 6, 7]

        result = compute_product_analytics("Widget", make_series([5] * 14), forecaster)
        assert result.forecast == [1, 2, 3, 4, 5, 6, 7]
        assert result.forecast_source == "remote"
        assert calls == [("Widget", 14)]

    def test_remote_receives_sorted_series(self):
        newest = Observation(date=date(2024, 1, 2), product_name="A", inventory=1, sold=1)
        oldest = Observation(date=date(2024, 1, 1), product_name="A", inventory=1, sold=1)
        seen = []

        def forecaster(product_name, series):
            seen.extend(obs.date for obs in series)
            return [0]

        compute_product_analytics("A", [newest, oldest], forecaster)
        assert seen == [date(2024, 1, 1), date(2024, 1, 2)]

    def test_failure_falls_back_to_local(self, make_series, caplog):
        series = make_series([9] * 7 + [11] * 7)
        with caplog.at_level(logging.WARNING, logger="inventory_dashboard.analytics"):
            result = compute_product_analytics("Widget", series, failing_forecaster)

        [record] = caplog.records
        assert record.levelno == logging.WARNING
        assert "Widget" in record.getMessage()
        assert "service unavailable" in record.getMessage()
        assert "Using local forecast" in record.getMessage()
        assert result.forecast_source == "local-fallback"
        assert result.forecast == local_forecast(series)

    def test_no_forecaster_is_local(self, make_series):
        result = compute_product_analytics("Widget", make_series([4] * 14))
        assert result.forecast_source == "local-fallback"
        assert result.forecast == [4] * 7


# ────────────────────────────────────────────
# BATCH ANALYSIS
# ────────────────────────────────────────────


class TestAnalyzeBatch:

    def test_empty_batch(self):
        assert analyze_batch([]) == []

    def test_one_record_per_product_in_first_seen_order(self, make_series):
        observations = (
            make_series([1] * 3, product_name="B")
            + make_series([2] * 3, product_name="A")
            + make_series([3] * 3, product_name="B", start=date(2024, 2, 1))
        )
        analytics = analyze_batch(observations, max_workers=4)
        assert [product.product_name for product in analytics] == ["B", "A"]
        assert analytics[0].total_sold == 12
        assert len(analytics[0].series) == 6

    def test_failures_are_isolated_per_product(self, make_series):
        def forecaster(product_name, series):
            if product_name == "Broken":
                raise RemoteForecastError(product_name, "HTTP 500")
            return [9] * 7

        observations = make_series([5] * 14, product_name="Broken") + make_series(
            [5] * 14, product_name="Healthy"
        )
        by_name = {product.product_name: product for product in analyze_batch(observations, forecaster)}
        assert by_name["Broken"].forecast_source == "local-fallback"
        assert by_name["Broken"].forecast == [5] * 7
        assert by_name["Healthy"].forecast_source == "remote"
        assert by_name["Healthy"].forecast == [9] * 7
