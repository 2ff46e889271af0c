"""
Unit tests for demand forecast calculation.
"""
import unittest
from datetime import date, timedelta

from inventory_intelligence.models import (
    AdjustmentEffectType, ConfidenceLevel, ForecastAdjustment, ReasoningItemType,
    SalesForecast, SalesHistoryEntry
)
from inventory_intelligence.core.adjustments import AdjustmentResolver
from inventory_intelligence.core.demand_forecast import (
    aggregate_daily_sales,
    backtest_forecast,
    calculate_forecast,
    calculate_forecast_accuracy,
    calculate_mape,
    calculate_trend_rate,
    calculate_weighted_daily_rate,
    classify_confidence,
    detect_seasonality,
    get_seasonal_multiplier,
    project_daily_forecast
)
from inventory_intelligence.exceptions import ForecastError
from inventory_intelligence.tests.fixtures import make_history

RUN_DATE = date(2024, 12, 10)

class TestCalculateForecast(unittest.TestCase):
    """Test cases for the forecast calculation."""

    def setUp(self):
        """Set up test fixtures."""
        self.forecast = SalesForecast('F1', 'P1', 'AMZ')
        self.history = make_history('P1', 'AMZ', RUN_DATE, 30, 10)

    def test_flat_history(self):
        calculation = calculate_forecast(self.forecast, self.history, RUN_DATE)
        self.assertAlmostEqual(calculation.base_rate, 10.0)
        self.assertAlmostEqual(calculation.effective_rate, 10.0)
        self.assertEqual(calculation.observation_count, 30)
        self.assertEqual(calculation.confidence, ConfidenceLevel.HIGH)

    def test_excluded_days_removed_from_window(self):
        """A Nov 25-29 exclusion removes 5 days from the 30-day window."""
        spiky = tuple(
            SalesHistoryEntry(e.product_id, e.location_id, e.date,
                              50 if date(2024, 11, 25) <= e.date <= date(2024, 11, 29) else 10)
            for e in self.history
        )
        black_friday = ForecastAdjustment('A1', 'Black Friday', date(2024, 11, 25), date(2024, 11, 29),
                                          AdjustmentEffectType.EXCLUDE)

        calculation = calculate_forecast(self.forecast, spiky, RUN_DATE,
                                         resolver=AdjustmentResolver([black_friday], 'P1'))

        self.assertEqual(calculation.observation_count, 25)
        self.assertEqual(calculation.excluded_days, 5)
        self.assertAlmostEqual(calculation.base_rate, 10.0)
        messages = [item.message for item in calculation.reasoning]
        self.assertIn("Excluded 5 days covered by forecast adjustments", messages)

    def test_multiply_adjustment_normalizes_history(self):
        doubled = tuple(
            SalesHistoryEntry(e.product_id, e.location_id, e.date, 20 if e.date.day <= 5 else 10)
            for e in self.history
        )
        promo = ForecastAdjustment('A1', 'Promo', date(2024, 12, 1), date(2024, 12, 5),
                                   AdjustmentEffectType.MULTIPLY, multiplier=2.0)

        calculation = calculate_forecast(self.forecast, doubled, RUN_DATE,
                                         resolver=AdjustmentResolver([promo], 'P1'))

        self.assertEqual(calculation.normalized_days, 5)
        self.assertAlmostEqual(calculation.base_rate, 10.0)
        # The promo is over by the run date
        self.assertEqual(calculation.adjustment_multiplier, 1.0)

    def test_adjustment_on_run_date_scales_rate(self):
        holiday = ForecastAdjustment('A1', 'Holiday', date(2024, 12, 10), date(2024, 12, 24),
                                     AdjustmentEffectType.MULTIPLY, multiplier=1.5)
        calculation = calculate_forecast(self.forecast, self.history, RUN_DATE,
                                         resolver=AdjustmentResolver([holiday], 'P1'))
        self.assertAlmostEqual(calculation.effective_rate, 15.0)
        self.assertEqual(calculation.adjustment_multiplier, 1.5)

    def test_manual_override_replaces_rate(self):
        forecast = SalesForecast('F1', 'P1', 'AMZ', manual_override=25.0,
                                 seasonal_multipliers=(2.0,) * 12, trend_rate=0.1)
        calculation = calculate_forecast(forecast, self.history, RUN_DATE)
        self.assertTrue(calculation.override_applied)
        self.assertAlmostEqual(calculation.effective_rate, 25.0)
        self.assertAlmostEqual(calculation.base_rate, 10.0)

    def test_zero_override_is_ignored(self):
        forecast = SalesForecast('F1', 'P1', 'AMZ', manual_override=0)
        calculation = calculate_forecast(forecast, self.history, RUN_DATE)
        self.assertFalse(calculation.override_applied)
        self.assertAlmostEqual(calculation.effective_rate, 10.0)

    def test_seasonality_and_trend(self):
        multipliers = (1.0,) * 11 + (1.5,)
        forecast = SalesForecast('F1', 'P1', 'AMZ', seasonal_multipliers=multipliers, trend_rate=0.1)
        calculation = calculate_forecast(forecast, self.history, RUN_DATE)
        self.assertAlmostEqual(calculation.seasonal_multiplier, 1.5)
        self.assertAlmostEqual(calculation.effective_rate, 10.0 * 1.5 * 1.1)

    def test_insufficient_history_is_low_confidence(self):
        history = make_history('P1', 'AMZ', RUN_DATE, 3, 10)
        calculation = calculate_forecast(self.forecast, history, RUN_DATE)
        self.assertEqual(calculation.confidence, ConfidenceLevel.LOW)
        self.assertTrue(any(item.type == ReasoningItemType.WARNING for item in calculation.reasoning))

    def test_no_history(self):
        calculation = calculate_forecast(self.forecast, (), RUN_DATE)
        self.assertEqual(calculation.base_rate, 0.0)
        self.assertEqual(calculation.effective_rate, 0.0)
        self.assertEqual(calculation.confidence, ConfidenceLevel.LOW)

    def test_history_outside_window_is_ignored(self):
        old = make_history('P1', 'AMZ', RUN_DATE - timedelta(days=60), 10, 100)
        calculation = calculate_forecast(self.forecast, self.history + old, RUN_DATE)
        self.assertAlmostEqual(calculation.base_rate, 10.0)

    def test_same_day_entries_are_summed(self):
        day = RUN_DATE - timedelta(days=1)
        entries = [SalesHistoryEntry('P1', 'AMZ', day, 4), SalesHistoryEntry('P1', 'AMZ', day, 6)]
        self.assertEqual(aggregate_daily_sales(entries), {day: 10.0})

    def test_invalid_window(self):
        with self.assertRaises(ForecastError):
            calculate_forecast(self.forecast, self.history, RUN_DATE, window_days=0)

class TestForecastHelpers(unittest.TestCase):
    """Test cases for forecast helper functions."""

    def test_classify_confidence_boundaries(self):
        self.assertEqual(classify_confidence(6), ConfidenceLevel.LOW)
        self.assertEqual(classify_confidence(7), ConfidenceLevel.MEDIUM)
        self.assertEqual(classify_confidence(21), ConfidenceLevel.MEDIUM)
        self.assertEqual(classify_confidence(22), ConfidenceLevel.HIGH)

    def test_seasonal_multiplier_requires_twelve_values(self):
        with self.assertRaises(ForecastError):
            get_seasonal_multiplier((1.0,) * 11, RUN_DATE)
        self.assertEqual(get_seasonal_multiplier(None, RUN_DATE), 1.0)

    def test_weighted_daily_rate_favours_recent(self):
        self.assertGreater(calculate_weighted_daily_rate([10, 10, 10, 40]), 17.5)
        self.assertEqual(calculate_weighted_daily_rate([]), 0.0)

    def test_detect_seasonality_needs_a_year(self):
        daily = {RUN_DATE - timedelta(days=i): 10.0 for i in range(100)}
        self.assertEqual(detect_seasonality(daily), (1.0,) * 12)

    def test_detect_seasonality(self):
        start = date(2022, 1, 1)
        daily = {}
        for offset in range(730):
            day = start + timedelta(days=offset)
            daily[day] = 20.0 if day.month == 12 else 10.0

        multipliers = detect_seasonality(daily)
        self.assertEqual(len(multipliers), 12)
        self.assertGreater(multipliers[11], 1.5)
        self.assertLess(multipliers[0], 1.0)

    def test_trend_rate_is_capped(self):
        daily = {}
        for month, rate in ((4, 10.0), (5, 15.0), (6, 22.5)):
            day = date(2024, month, 1)
            while day.month == month:
                daily[day] = rate
                day += timedelta(days=1)
        self.assertEqual(calculate_trend_rate(daily), 0.2)

    def test_trend_rate_ignores_month_in_progress(self):
        daily = {}
        day = date(2024, 3, 1)
        while day <= date(2024, 6, 10):
            daily[day] = 10.0
            day += timedelta(days=1)
        self.assertEqual(calculate_trend_rate(daily), 0.0)

    def test_trend_rate_needs_history(self):
        daily = {RUN_DATE - timedelta(days=i): 10.0 for i in range(30)}
        self.assertEqual(calculate_trend_rate(daily), 0.0)

    def test_mape_skips_zero_actuals(self):
        self.assertAlmostEqual(calculate_mape([0, 10], [5, 12]), 20.0)

    def test_accuracy_of_perfect_forecast(self):
        accuracy = calculate_forecast_accuracy([10.0] * 30, [10.0] * 30)
        self.assertEqual(accuracy.mape, 0.0)
        self.assertEqual(accuracy.accuracy, 100.0)
        self.assertEqual(accuracy.confidence, ConfidenceLevel.HIGH)

    def test_accuracy_with_small_sample_is_low(self):
        accuracy = calculate_forecast_accuracy([10.0] * 5, [10.0] * 5)
        self.assertEqual(accuracy.confidence, ConfidenceLevel.LOW)

    def test_project_daily_forecast_compounds_trend(self):
        projection = project_daily_forecast(10.0, (1.0,) * 12, 0.1, date(2024, 1, 1), 31)
        self.assertEqual(projection[0], (date(2024, 1, 1), 10.0))
        self.assertEqual(projection[30][1], 11.0)

    def test_backtest_short_history(self):
        daily = {RUN_DATE - timedelta(days=i): 10.0 for i in range(10)}
        accuracy = backtest_forecast(daily, 10.0, (1.0,) * 12, 0.0)
        self.assertEqual(accuracy.sample_size, 0)
        self.assertEqual(accuracy.confidence, ConfidenceLevel.LOW)

    def test_backtest(self):
        daily = {RUN_DATE - timedelta(days=i): 10.0 for i in range(60)}
        accuracy = backtest_forecast(daily, 10.0, (1.0,) * 12, 0.0)
        self.assertEqual(accuracy.sample_size, 30)
        self.assertEqual(accuracy.mape, 0.0)

if __name__ == '__main__':
    unittest.main()
