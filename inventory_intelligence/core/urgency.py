# inventory_intelligence/core/urgency.py
from datetime import date
from typing import Optional

from ..models import SuggestionUrgency, UrgencyThresholds
from ..utils.date_utils import add_days
from ..utils.math_utils import safe_divide

def classify_urgency(
    days_remaining: Optional[float],
    thresholds: UrgencyThresholds
) -> SuggestionUrgency:
    """Classify urgency based on days of stock remaining.

    Boundary values belong to the more urgent tier.

    Args:
        days_remaining: Days of stock remaining, None when demand is not positive
        thresholds: Urgency thresholds (validated here)

    Returns:
        Urgency tier
    """
    thresholds.validate()

    if days_remaining is None or days_remaining <= 0:
        return SuggestionUrgency.CRITICAL
    if days_remaining <= thresholds.critical_days:
        return SuggestionUrgency.CRITICAL
    if days_remaining <= thresholds.warning_days:
        return SuggestionUrgency.WARNING
    if days_remaining <= thresholds.planned_days:
        return SuggestionUrgency.PLANNED
    return SuggestionUrgency.MONITOR

def calculate_days_of_stock(
    current_stock: float,
    daily_rate: float,
    in_transit: float = 0.0,
    include_in_transit: bool = False
) -> Optional[float]:
    """Calculate days of stock remaining.

    Args:
        current_stock: Current stock at the location
        daily_rate: Effective daily demand
        in_transit: Quantity in transit to the location
        include_in_transit: Whether in-transit stock counts as cover

    Returns:
        Days of stock remaining, or None when the daily rate is not positive
    """
    covered = current_stock + in_transit if include_in_transit else current_stock
    return safe_divide(covered, daily_rate)

def calculate_stockout_date(days_remaining: Optional[float], today: date) -> Optional[date]:
    """Projected stockout date, None when no stockout is projected."""
    if days_remaining is None:
        return None
    return add_days(today, max(0.0, days_remaining))
