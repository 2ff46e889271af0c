from .adjustments import (
    AdjustmentEffect, AdjustmentResolver, matches_date,
    applicable_adjustments, resolve_adjustment_effect
)
from .demand_forecast import (
    ForecastCalculation, ForecastAccuracy, calculate_forecast,
    aggregate_daily_sales, filter_history, calculate_base_rate,
    calculate_weighted_daily_rate, classify_confidence,
    get_seasonal_multiplier, calculate_effective_rate,
    detect_seasonality, calculate_trend_rate,
    calculate_forecast_accuracy, project_daily_forecast, backtest_forecast
)
from .safety_stock import SafetyStockThreshold, calculate_safety_stock, find_active_rule
from .lead_time import RoutePlan, select_route, plan_transfer, plan_purchase_order
from .urgency import classify_urgency, calculate_days_of_stock, calculate_stockout_date

__all__ = [
    'AdjustmentEffect',
    'AdjustmentResolver',
    'matches_date',
    'applicable_adjustments',
    'resolve_adjustment_effect',
    'ForecastCalculation',
    'ForecastAccuracy',
    'calculate_forecast',
    'aggregate_daily_sales',
    'filter_history',
    'calculate_base_rate',
    'calculate_weighted_daily_rate',
    'classify_confidence',
    'get_seasonal_multiplier',
    'calculate_effective_rate',
    'detect_seasonality',
    'calculate_trend_rate',
    'calculate_forecast_accuracy',
    'project_daily_forecast',
    'backtest_forecast',
    'SafetyStockThreshold',
    'calculate_safety_stock',
    'find_active_rule',
    'RoutePlan',
    'select_route',
    'plan_transfer',
    'plan_purchase_order',
    'classify_urgency',
    'calculate_days_of_stock',
    'calculate_stockout_date'
]
