# inventory_intelligence/core/demand_forecast.py
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..models import ConfidenceLevel, ReasoningItem, SalesForecast, SalesHistoryEntry
from ..utils.date_utils import trailing_window
from ..exceptions import ForecastError
from .adjustments import AdjustmentResolver

# Observation counts below MEDIUM are low confidence, above HIGH - 1 are high
MEDIUM_CONFIDENCE_OBSERVATIONS = 7
HIGH_CONFIDENCE_OBSERVATIONS = 22
# Recency-weighted rates further than this fraction from the base rate are reported
MOMENTUM_THRESHOLD = 0.1

DEFAULT_SEASONAL_MULTIPLIERS = (1.0,) * 12

@dataclass(frozen=True)
class ForecastCalculation:
    """Result of one forecast calculation with its derivation steps."""
    base_rate: float
    effective_rate: float
    confidence: ConfidenceLevel
    observation_count: int
    excluded_days: int
    normalized_days: int
    seasonal_multiplier: float
    trend_multiplier: float
    adjustment_multiplier: float
    override_applied: bool
    reasoning: Tuple[ReasoningItem, ...] = ()
    weighted_rate: float = 0.0

@dataclass(frozen=True)
class ForecastAccuracy:
    mape: float
    mae: float
    rmse: float
    bias: float
    accuracy: float
    confidence: ConfidenceLevel
    sample_size: int

def aggregate_daily_sales(entries: Iterable[SalesHistoryEntry]) -> Dict[date, float]:
    """Sum sales history entries into one value per date.

    Args:
        entries: Sales history entries for a single product/location

    Returns:
        Dictionary mapping date to units sold
    """
    daily: Dict[date, float] = {}
    for entry in entries:
        daily[entry.date] = daily.get(entry.date, 0.0) + float(entry.units_sold)
    return daily

def filter_history(
    daily_sales: Dict[date, float],
    window: Sequence[date],
    resolver: Optional[AdjustmentResolver] = None
) -> Tuple[List[float], int, int]:
    """Apply adjustments to the observations inside a history window.

    Excluded dates are dropped. Dates under a multiply adjustment are
    divided by the multiplier so the known effect is removed; a zero
    multiplier carries no usable signal and the date is dropped.

    Args:
        daily_sales: Units sold per date
        window: Dates making up the trailing window
        resolver: Optional adjustment resolver for the product

    Returns:
        Tuple with usable observations, excluded day count, normalized day count
    """
    observations = []
    excluded = 0
    normalized = 0

    for day in window:
        if day not in daily_sales:
            continue
        units = daily_sales[day]

        if resolver is not None:
            effect = resolver.effect_for(day)
            if effect.excluded or effect.multiplier == 0:
                excluded += 1
                continue
            if effect.multiplier != 1.0:
                units = units / effect.multiplier
                normalized += 1

        observations.append(units)

    return observations, excluded, normalized

def calculate_base_rate(observations: Sequence[float]) -> float:
    """Average daily units over the usable observations."""
    if not observations:
        return 0.0
    return float(np.mean(observations))

def calculate_weighted_daily_rate(observations: Sequence[float]) -> float:
    """Linearly weighted average where the most recent observation weighs most.

    Args:
        observations: Daily values ordered oldest first

    Returns:
        Weighted daily rate
    """
    if len(observations) == 0:
        return 0.0
    weights = np.arange(1, len(observations) + 1, dtype=float)
    return float(np.average(observations, weights=weights))

def classify_confidence(observation_count: int) -> ConfidenceLevel:
    """Map the number of usable observations to a confidence tier."""
    if observation_count < MEDIUM_CONFIDENCE_OBSERVATIONS:
        return ConfidenceLevel.LOW
    if observation_count < HIGH_CONFIDENCE_OBSERVATIONS:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH

def get_seasonal_multiplier(multipliers: Optional[Sequence[float]], target: date) -> float:
    """Get the seasonal multiplier for the month of a date.

    Args:
        multipliers: 12 monthly multipliers, January first
        target: Date to look up

    Returns:
        Multiplier value (1.0 when no multipliers are configured)
    """
    if not multipliers:
        return 1.0
    if len(multipliers) != 12:
        raise ForecastError(f"Expected 12 seasonal multipliers, got {len(multipliers)}")
    return float(multipliers[target.month - 1])

def calculate_effective_rate(
    base_rate: float,
    seasonal_multiplier: float = 1.0,
    trend_rate: float = 0.0,
    adjustment_multiplier: float = 1.0,
    manual_override: Optional[float] = None
) -> float:
    """Combine the base rate with seasonality, trend and adjustments.

    A non-zero manual override replaces the computed rate entirely.
    """
    if manual_override is not None and manual_override != 0:
        return float(manual_override)
    return base_rate * seasonal_multiplier * (1.0 + trend_rate) * adjustment_multiplier

def calculate_forecast(
    forecast: SalesForecast,
    history: Iterable[SalesHistoryEntry],
    run_date: date,
    window_days: int = 30,
    resolver: Optional[AdjustmentResolver] = None
) -> ForecastCalculation:
    """Calculate the effective daily demand rate for a forecast.

    Args:
        forecast: Forecast carrying seasonality, trend and override settings
        history: Sales history for the forecast's product/location
        run_date: Date of the calculation run; the window ends the day before
        window_days: Trailing window length in days
        resolver: Adjustment resolver for the forecast's product

    Returns:
        ForecastCalculation with the derivation reasoning
    """
    if window_days <= 0:
        raise ForecastError(f"History window must be positive, got {window_days}")

    daily_sales = aggregate_daily_sales(history)
    window = trailing_window(run_date, window_days)
    observations, excluded, normalized = filter_history(daily_sales, window, resolver)

    base_rate = calculate_base_rate(observations)
    weighted_rate = calculate_weighted_daily_rate(observations)
    confidence = classify_confidence(len(observations))

    seasonal = get_seasonal_multiplier(forecast.seasonal_multipliers, run_date)
    trend_multiplier = 1.0 + forecast.trend_rate
    # Exclusions describe history only; forward-looking scaling uses multipliers
    adjustment_multiplier = resolver.multiplier_for(run_date) if resolver is not None else 1.0

    effective_rate = calculate_effective_rate(
        base_rate, seasonal, forecast.trend_rate, adjustment_multiplier, forecast.manual_override
    )

    reasoning = [
        ReasoningItem.calculation(
            f"Base rate: {base_rate:.2f} units/day from {len(observations)} days of sales history "
            f"(last {window_days} days)",
            round(base_rate, 4)
        )
    ]
    if base_rate > 0 and abs(weighted_rate - base_rate) > MOMENTUM_THRESHOLD * base_rate:
        direction = 'up' if weighted_rate > base_rate else 'down'
        reasoning.append(ReasoningItem.info(
            f"Recent sales trending {direction}: recency-weighted rate {weighted_rate:.2f} units/day",
            round(weighted_rate, 4)
        ))
    if excluded:
        reasoning.append(ReasoningItem.info(f"Excluded {excluded} days covered by forecast adjustments", excluded))
    if normalized:
        reasoning.append(ReasoningItem.info(
            f"Normalized {normalized} days for multiply adjustments", normalized
        ))
    if confidence == ConfidenceLevel.LOW:
        reasoning.append(ReasoningItem.warning(
            f"Only {len(observations)} days of usable sales history; forecast confidence is low",
            len(observations)
        ))

    if forecast.has_override:
        reasoning.append(ReasoningItem.calculation(
            f"Manual override: {forecast.manual_override:.2f} units/day replaces the computed rate",
            forecast.manual_override
        ))
    else:
        if seasonal != 1.0:
            reasoning.append(ReasoningItem.calculation(
                f"Seasonal multiplier for {calendar.month_name[run_date.month]}: x{seasonal:.2f}", seasonal
            ))
        if forecast.trend_rate:
            reasoning.append(ReasoningItem.calculation(
                f"Trend adjustment: {forecast.trend_rate * 100:+.1f}%", forecast.trend_rate
            ))
        if adjustment_multiplier != 1.0:
            names = ', '.join(resolver.names_for(run_date))
            reasoning.append(ReasoningItem.calculation(
                f"Adjustment multiplier for {run_date.isoformat()}: x{adjustment_multiplier:.2f} ({names})",
                adjustment_multiplier
            ))

    reasoning.append(ReasoningItem.calculation(
        f"Effective daily rate: {effective_rate:.2f} units/day", round(effective_rate, 4)
    ))

    return ForecastCalculation(
        base_rate=base_rate,
        effective_rate=effective_rate,
        confidence=confidence,
        observation_count=len(observations),
        excluded_days=excluded,
        normalized_days=normalized,
        seasonal_multiplier=seasonal,
        trend_multiplier=trend_multiplier,
        adjustment_multiplier=adjustment_multiplier,
        override_applied=forecast.has_override,
        reasoning=tuple(reasoning),
        weighted_rate=weighted_rate
    )

def _daily_series(daily_sales: Dict[date, float]) -> pd.Series:
    if not daily_sales:
        return pd.Series(dtype=float)
    series = pd.Series(daily_sales, dtype=float)
    series.index = pd.to_datetime(series.index)
    return series.sort_index()

def detect_seasonality(daily_sales: Dict[date, float], min_years: int = 1) -> Tuple[float, ...]:
    """Derive 12 monthly seasonal multipliers from daily sales history.

    Args:
        daily_sales: Units sold per date
        min_years: Years of daily observations required

    Returns:
        Tuple of 12 multipliers (January first), each clamped to [0.5, 2.0]
    """
    if len(daily_sales) < min_years * 365:
        return DEFAULT_SEASONAL_MULTIPLIERS

    series = _daily_series(daily_sales)
    monthly_averages = series.groupby(series.index.month).mean().reindex(range(1, 13), fill_value=0.0)
    overall_average = monthly_averages.mean()

    if overall_average == 0:
        return DEFAULT_SEASONAL_MULTIPLIERS

    multipliers = (monthly_averages / overall_average).clip(lower=0.5, upper=2.0)
    return tuple(float(m) for m in multipliers)

def calculate_trend_rate(daily_sales: Dict[date, float], lookback_months: int = 6) -> float:
    """Average month-over-month growth rate, capped at +/-20%.

    Args:
        daily_sales: Units sold per date
        lookback_months: Number of most recent months to consider

    Returns:
        Trend rate as a fraction per month
    """
    # Need roughly two months of data
    if len(daily_sales) < 60:
        return 0.0

    series = _daily_series(daily_sales)
    # Daily averages per month, so month length does not read as growth
    monthly_rates = series.groupby(series.index.to_period('M')).mean().sort_index()
    last_day = series.index[-1]
    if last_day.day != last_day.days_in_month:
        monthly_rates = monthly_rates.iloc[:-1]
    recent = monthly_rates.iloc[-lookback_months:]
    if len(recent) < 2:
        return 0.0

    previous = recent.iloc[:-1].to_numpy()
    current = recent.iloc[1:].to_numpy()
    mask = previous > 0
    if not mask.any():
        return 0.0

    growth = (current[mask] - previous[mask]) / previous[mask]
    return float(np.clip(growth.mean(), -0.2, 0.2))

def calculate_mape(actuals: Sequence[float], forecasts: Sequence[float]) -> float:
    """Mean Absolute Percentage Error, skipping zero actuals."""
    if len(actuals) != len(forecasts) or len(actuals) == 0:
        return 0.0
    actual = np.asarray(actuals, dtype=float)
    predicted = np.asarray(forecasts, dtype=float)
    mask = actual != 0
    if not mask.any():
        return 0.0
    return float(np.mean(np.abs(actual[mask] - predicted[mask]) / np.abs(actual[mask])) * 100.0)

def calculate_mae(actuals: Sequence[float], forecasts: Sequence[float]) -> float:
    if len(actuals) != len(forecasts) or len(actuals) == 0:
        return 0.0
    return float(np.mean(np.abs(np.asarray(actuals, dtype=float) - np.asarray(forecasts, dtype=float))))

def calculate_rmse(actuals: Sequence[float], forecasts: Sequence[float]) -> float:
    if len(actuals) != len(forecasts) or len(actuals) == 0:
        return 0.0
    errors = np.asarray(actuals, dtype=float) - np.asarray(forecasts, dtype=float)
    return float(np.sqrt(np.mean(errors ** 2)))

def calculate_bias(actuals: Sequence[float], forecasts: Sequence[float]) -> float:
    """Mean forecast error; positive means over-forecasting."""
    if len(actuals) != len(forecasts) or len(actuals) == 0:
        return 0.0
    return float(np.mean(np.asarray(forecasts, dtype=float) - np.asarray(actuals, dtype=float)))

def calculate_forecast_accuracy(actuals: Sequence[float], forecasts: Sequence[float]) -> ForecastAccuracy:
    """Calculate all forecast accuracy metrics.

    Args:
        actuals: Actual daily sales
        forecasts: Forecast values for the same days

    Returns:
        ForecastAccuracy
    """
    mape = calculate_mape(actuals, forecasts)
    sample_size = len(actuals)

    if sample_size >= 30 and mape <= 20:
        confidence = ConfidenceLevel.HIGH
    elif sample_size < 14 or mape > 40:
        confidence = ConfidenceLevel.LOW
    else:
        confidence = ConfidenceLevel.MEDIUM

    return ForecastAccuracy(
        mape=mape,
        mae=calculate_mae(actuals, forecasts),
        rmse=calculate_rmse(actuals, forecasts),
        bias=calculate_bias(actuals, forecasts),
        accuracy=max(0.0, min(100.0, 100.0 - mape)),
        confidence=confidence,
        sample_size=sample_size
    )

def project_daily_forecast(
    base_rate: float,
    seasonal_multipliers: Sequence[float],
    trend_rate: float,
    start: date,
    days: int
) -> List[Tuple[date, float]]:
    """Project daily demand forward from a start date.

    The trend compounds once per 30 days elapsed.
    """
    projection = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        seasonal = get_seasonal_multiplier(seasonal_multipliers, day)
        trend = (1.0 + trend_rate) ** (offset // 30)
        projection.append((day, round(base_rate * seasonal * trend, 2)))
    return projection

def backtest_forecast(
    daily_sales: Dict[date, float],
    base_rate: float,
    seasonal_multipliers: Sequence[float],
    trend_rate: float,
    test_days: int = 30
) -> ForecastAccuracy:
    """Score a forecast model against the most recent observed days.

    Args:
        daily_sales: Units sold per date
        base_rate: Base daily rate under test
        seasonal_multipliers: Monthly multipliers under test
        trend_rate: Trend rate under test
        test_days: Number of most recent observations used as the test set

    Returns:
        ForecastAccuracy (low confidence, zero sample when history is too short)
    """
    if len(daily_sales) <= test_days:
        return ForecastAccuracy(0.0, 0.0, 0.0, 0.0, 0.0, ConfidenceLevel.LOW, 0)

    test_set = sorted(daily_sales.items())[-test_days:]
    projection = project_daily_forecast(
        base_rate, seasonal_multipliers, trend_rate, test_set[0][0], test_days
    )

    actuals = [units for _, units in test_set]
    forecasts = [value for _, value in projection]
    return calculate_forecast_accuracy(actuals, forecasts)
