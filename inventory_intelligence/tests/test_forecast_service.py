"""
Unit tests for the forecast service.
"""
import unittest
from datetime import date, datetime, timedelta

from inventory_intelligence.models import IntelligenceSettings, SalesForecast, SalesHistoryEntry
from inventory_intelligence.services.forecast_service import ForecastService
from inventory_intelligence.tests.fixtures import NOW, december_peak_history, make_snapshot

def growing_history():
    """March to May 2024 at 10, 15 and 22.5 units/day."""
    entries = []
    for month, units in ((3, 10.0), (4, 15.0), (5, 22.5)):
        day = date(2024, month, 1)
        while day.month == month:
            entries.append(SalesHistoryEntry('P1', 'AMZ', day, units))
            day += timedelta(days=1)
    return tuple(entries)

class TestForecastService(unittest.TestCase):
    """Test cases for per-forecast calculation."""

    def setUp(self):
        """Set up test fixtures."""
        self.settings = IntelligenceSettings()

    def calculate(self, snapshot, now=NOW):
        service = ForecastService(snapshot, self.settings)
        return service.calculate(snapshot.forecasts[0], now)

    def test_flat_history(self):
        forecast, calculation = self.calculate(make_snapshot())
        self.assertEqual(forecast.daily_rate, 10.0)
        self.assertEqual(forecast.seasonal_multipliers, (1.0,) * 12)
        self.assertEqual(forecast.trend_rate, 0.0)
        self.assertEqual(forecast.last_calculated_at, NOW)
        self.assertEqual(calculation.effective_rate, 10.0)

    def test_seasonality_detected_from_a_year_of_history(self):
        snapshot = make_snapshot(
            sales_history=december_peak_history(NOW.date()),
            forecasts=(SalesForecast('F1', 'P1', 'AMZ', trend_rate=0.01),)
        )
        forecast, calculation = self.calculate(snapshot)

        self.assertGreater(forecast.seasonal_multipliers[11], 1.5)
        self.assertEqual(forecast.seasonal_multipliers[5], 0.92)
        self.assertEqual(forecast.trend_rate, 0.01)
        self.assertEqual(calculation.seasonal_multiplier, 0.92)
        self.assertAlmostEqual(calculation.effective_rate, 10.0 * 0.92 * 1.01, places=4)
        self.assertIsNotNone(forecast.accuracy_mape)

    def test_configured_multipliers_are_kept(self):
        configured = (1.1,) * 12
        snapshot = make_snapshot(
            sales_history=december_peak_history(NOW.date()),
            forecasts=(SalesForecast('F1', 'P1', 'AMZ', seasonal_multipliers=configured, trend_rate=0.01),)
        )
        forecast, _ = self.calculate(snapshot)
        self.assertEqual(forecast.seasonal_multipliers, configured)

    def test_short_history_keeps_neutral_seasonality(self):
        snapshot = make_snapshot(sales_history=december_peak_history(NOW.date(), days=200))
        forecast, _ = self.calculate(snapshot)
        self.assertEqual(forecast.seasonal_multipliers, (1.0,) * 12)

    def test_trend_detected_from_growing_history(self):
        snapshot = make_snapshot(sales_history=growing_history())
        forecast, calculation = self.calculate(snapshot, datetime(2024, 6, 1, 8, 0))

        self.assertEqual(forecast.trend_rate, 0.2)
        self.assertAlmostEqual(calculation.trend_multiplier, 1.2)
        self.assertEqual(forecast.seasonal_multipliers, (1.0,) * 12)

    def test_recent_momentum_is_reported(self):
        self.settings = IntelligenceSettings(history_window_days=92)
        snapshot = make_snapshot(sales_history=growing_history())
        _, calculation = self.calculate(snapshot, datetime(2024, 6, 1, 8, 0))

        self.assertGreater(calculation.weighted_rate, calculation.base_rate)
        self.assertTrue(any('trending up' in item.message for item in calculation.reasoning))

if __name__ == '__main__':
    unittest.main()
