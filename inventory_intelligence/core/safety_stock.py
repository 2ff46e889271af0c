# inventory_intelligence/core/safety_stock.py
from dataclasses import dataclass
from typing import Iterable, Optional

from ..models import ReasoningItem, SafetyStockRule, ThresholdType
from ..utils.math_utils import ceil_units
from ..exceptions import SafetyStockError

@dataclass(frozen=True)
class SafetyStockThreshold:
    units: int
    rule: Optional[SafetyStockRule]
    reasoning: ReasoningItem

def find_active_rule(
    rules: Iterable[SafetyStockRule],
    product_id: str,
    location_id: str
) -> Optional[SafetyStockRule]:
    """Find the active safety stock rule for a product/location pair."""
    for rule in rules:
        if rule.is_active and rule.product_id == product_id and rule.location_id == location_id:
            return rule
    return None

def calculate_safety_stock_units(safety_stock_days: float, daily_rate: float) -> int:
    """Convert safety stock days to units, rounded up.

    Args:
        safety_stock_days: Safety stock in days of cover
        daily_rate: Effective daily demand in units

    Returns:
        Safety stock in whole units
    """
    if daily_rate <= 0:
        return 0
    return ceil_units(safety_stock_days * daily_rate)

def calculate_safety_stock(
    rule: Optional[SafetyStockRule],
    daily_rate: float,
    default_safety_stock_days: float
) -> SafetyStockThreshold:
    """Calculate the minimum stock threshold in units.

    Args:
        rule: Active safety stock rule, or None to use the default policy
        daily_rate: Effective daily demand in units
        default_safety_stock_days: Days of cover used when no rule exists

    Returns:
        SafetyStockThreshold with its reasoning item
    """
    if rule is None:
        units = calculate_safety_stock_units(default_safety_stock_days, daily_rate)
        return SafetyStockThreshold(
            units=units,
            rule=None,
            reasoning=ReasoningItem.calculation(
                f"Safety stock threshold: {units:,} units "
                f"(default {default_safety_stock_days:g} days x {daily_rate:.2f} units/day)",
                units
            )
        )

    if rule.threshold_value < 0:
        raise SafetyStockError(
            f"Safety stock rule for {rule.product_id}@{rule.location_id} has a negative threshold"
        )

    if rule.threshold_type == ThresholdType.UNITS:
        units = ceil_units(rule.threshold_value)
        message = f"Safety stock threshold: {units:,} units (fixed rule)"
    elif rule.threshold_type == ThresholdType.DAYS_OF_COVER:
        units = calculate_safety_stock_units(rule.threshold_value, daily_rate)
        message = (
            f"Safety stock threshold: {units:,} units "
            f"({rule.threshold_value:g} days of cover x {daily_rate:.2f} units/day)"
        )
    else:
        raise SafetyStockError(f"Unknown threshold type: {rule.threshold_type}")

    return SafetyStockThreshold(units=units, rule=rule, reasoning=ReasoningItem.calculation(message, units))
