# inventory_intelligence/services/forecast_service.py
from dataclasses import replace
from datetime import datetime
from collections import defaultdict
from typing import Dict, List, Tuple
import logging

from inventory_intelligence.models import (
    InputSnapshot, IntelligenceSettings, SalesForecast, SalesHistoryEntry
)
from inventory_intelligence.core.adjustments import AdjustmentResolver
from inventory_intelligence.core.demand_forecast import (
    DEFAULT_SEASONAL_MULTIPLIERS,
    ForecastCalculation,
    aggregate_daily_sales,
    backtest_forecast,
    calculate_forecast,
    calculate_trend_rate,
    detect_seasonality
)
from inventory_intelligence.exceptions import ForecastError

logger = logging.getLogger(__name__)

# Backtests need more observed days than the test window itself
BACKTEST_DAYS = 30
# Daily observations needed before a profile is derived from history
SEASONALITY_MIN_DAYS = 365
TREND_MIN_DAYS = 60

class ForecastService:
    """Service for calculating demand forecasts over an input snapshot."""

    def __init__(self, snapshot: InputSnapshot, settings: IntelligenceSettings):
        """Initialize the forecast service.

        Args:
            snapshot: Input snapshot of the run
            settings: Intelligence settings of the run
        """
        self.snapshot = snapshot
        self.settings = settings
        self._history: Dict[Tuple[str, str], List[SalesHistoryEntry]] = defaultdict(list)
        for entry in snapshot.sales_history:
            self._history[(entry.product_id, entry.location_id)].append(entry)
        self._resolvers: Dict[str, AdjustmentResolver] = {}
        for product_id in {forecast.product_id for forecast in snapshot.forecasts}:
            self._resolvers[product_id] = AdjustmentResolver(snapshot.adjustments, product_id)

    def history_for(self, product_id: str, location_id: str) -> List[SalesHistoryEntry]:
        return self._history.get((product_id, location_id), [])

    def resolver_for(self, product_id: str) -> AdjustmentResolver:
        if product_id not in self._resolvers:
            raise ForecastError(f"No adjustment resolver prepared for product {product_id}")
        return self._resolvers[product_id]

    def detect_profile(self, forecast: SalesForecast, daily_sales: Dict) -> SalesForecast:
        """Fill in seasonality and trend from history where the forecast leaves them neutral.

        Multipliers or a trend rate set on the forecast are kept as given.
        """
        changes = {}
        if (tuple(forecast.seasonal_multipliers) == DEFAULT_SEASONAL_MULTIPLIERS
                and len(daily_sales) >= SEASONALITY_MIN_DAYS):
            detected = tuple(round(m, 2) for m in detect_seasonality(daily_sales))
            if detected != DEFAULT_SEASONAL_MULTIPLIERS:
                changes['seasonal_multipliers'] = detected
        if forecast.trend_rate == 0 and len(daily_sales) >= TREND_MIN_DAYS:
            trend = round(calculate_trend_rate(daily_sales), 3)
            if trend:
                changes['trend_rate'] = trend

        if changes:
            logger.debug(f"Forecast {forecast.id}: detected {', '.join(sorted(changes))} from history")
            return replace(forecast, **changes)
        return forecast

    def calculate(self, forecast: SalesForecast, now: datetime) -> Tuple[SalesForecast, ForecastCalculation]:
        """Calculate one forecast.

        Disabled forecasts are calculated too so their figures stay visible
        in reporting; suggestion generation skips them.

        Args:
            forecast: Forecast to calculate
            now: Run timestamp

        Returns:
            Tuple with the updated forecast and the calculation details
        """
        history = self.history_for(forecast.product_id, forecast.location_id)
        daily_sales = aggregate_daily_sales(
            entry for entry in history if entry.date < now.date()
        )
        forecast = self.detect_profile(forecast, daily_sales)

        calculation = calculate_forecast(
            forecast,
            history,
            now.date(),
            window_days=self.settings.history_window_days,
            resolver=self.resolver_for(forecast.product_id)
        )

        accuracy_mape = forecast.accuracy_mape
        if len(daily_sales) > BACKTEST_DAYS:
            accuracy = backtest_forecast(
                daily_sales,
                calculation.base_rate,
                forecast.seasonal_multipliers,
                forecast.trend_rate,
                test_days=BACKTEST_DAYS
            )
            accuracy_mape = round(accuracy.mape, 2)

        logger.debug(
            f"Forecast {forecast.id} ({forecast.product_id}@{forecast.location_id}): "
            f"base={calculation.base_rate:.2f} effective={calculation.effective_rate:.2f} "
            f"confidence={calculation.confidence.value}"
        )

        updated = replace(
            forecast,
            daily_rate=calculation.base_rate,
            confidence=calculation.confidence,
            last_calculated_at=now,
            accuracy_mape=accuracy_mape
        )
        return updated, calculation

    def calculate_all(self, now: datetime) -> List[Tuple[SalesForecast, ForecastCalculation]]:
        """Calculate every forecast in the snapshot sequentially."""
        return [self.calculate(forecast, now) for forecast in self.snapshot.forecasts]
