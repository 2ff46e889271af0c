# inventory_intelligence/core/adjustments.py
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from ..models import AdjustmentEffectType, ForecastAdjustment
from ..utils.date_utils import month_day
from ..exceptions import AdjustmentError

@dataclass(frozen=True)
class AdjustmentEffect:
    """Composite effect of every adjustment that covers one date."""
    excluded: bool = False
    multiplier: float = 1.0
    applied: Tuple[str, ...] = ()

NO_EFFECT = AdjustmentEffect()

def matches_date(adjustment: ForecastAdjustment, target: date) -> bool:
    """Check whether an adjustment covers a date.

    One-off adjustments cover start_date..end_date inclusive. Recurring
    adjustments repeat every year: only the month/day portion is compared,
    and a range whose end month/day precedes its start month/day wraps over
    the year boundary (Dec 20 - Jan 5 covers Dec 20..31 and Jan 1..5).

    Args:
        adjustment: Adjustment to test
        target: Date to test

    Returns:
        True if the adjustment applies to the date
    """
    if not adjustment.is_recurring:
        return adjustment.start_date <= target <= adjustment.end_date

    # A recurring range of a year or more covers every day
    if (adjustment.end_date - adjustment.start_date).days >= 365:
        return True

    start = month_day(adjustment.start_date)
    end = month_day(adjustment.end_date)
    current = month_day(target)

    if start <= end:
        return start <= current <= end
    return current >= start or current <= end

def applicable_adjustments(
    adjustments: Iterable[ForecastAdjustment],
    product_id: Optional[str] = None
) -> List[ForecastAdjustment]:
    """Select the adjustments in scope for a product.

    Account-wide adjustments apply to every product unless the product has
    opted out of them; product-specific adjustments apply only to their own
    product. Opt-out records never add an effect themselves.

    Args:
        adjustments: Account-wide and product-specific adjustments
        product_id: Product being forecast (None for account scope only)

    Returns:
        Adjustments to evaluate, account-wide first
    """
    account_level = []
    product_level = []
    opted_out = set()

    for adjustment in adjustments:
        if adjustment.is_account_wide:
            account_level.append(adjustment)
        elif adjustment.product_id == product_id:
            if adjustment.is_opted_out:
                if not adjustment.account_adjustment_id:
                    raise AdjustmentError(
                        f"Opt-out adjustment {adjustment.id} does not reference an account adjustment"
                    )
                opted_out.add(adjustment.account_adjustment_id)
            else:
                product_level.append(adjustment)

    return [a for a in account_level if a.id not in opted_out] + product_level

def combine_effects(adjustments: Iterable[ForecastAdjustment], target: date) -> AdjustmentEffect:
    """Fold the adjustments covering a date into one effect.

    Exclusion wins over any multiplier; multipliers compose multiplicatively.
    """
    excluded = False
    multiplier = 1.0
    applied = []

    for adjustment in adjustments:
        if not matches_date(adjustment, target):
            continue
        applied.append(adjustment.id)
        if adjustment.effect == AdjustmentEffectType.EXCLUDE:
            excluded = True
        else:
            multiplier *= adjustment.multiplier

    if not applied:
        return NO_EFFECT
    if excluded:
        return AdjustmentEffect(excluded=True, multiplier=1.0, applied=tuple(applied))
    return AdjustmentEffect(excluded=False, multiplier=multiplier, applied=tuple(applied))

def resolve_adjustment_effect(
    target: date,
    adjustments: Iterable[ForecastAdjustment],
    product_id: Optional[str] = None
) -> AdjustmentEffect:
    """Resolve the composite adjustment effect for a product on a date."""
    return combine_effects(applicable_adjustments(adjustments, product_id), target)

class AdjustmentResolver:
    """Resolves adjustment effects for one product scope, caching per date."""

    def __init__(self, adjustments: Iterable[ForecastAdjustment], product_id: Optional[str] = None):
        self.product_id = product_id
        self.adjustments = applicable_adjustments(adjustments, product_id)
        self._cache: Dict[date, AdjustmentEffect] = {}

    def effect_for(self, target: date) -> AdjustmentEffect:
        if target not in self._cache:
            self._cache[target] = combine_effects(self.adjustments, target)
        return self._cache[target]

    def is_excluded(self, target: date) -> bool:
        return self.effect_for(target).excluded

    def multiplier_for(self, target: date) -> float:
        return self.effect_for(target).multiplier

    def names_for(self, target: date) -> List[str]:
        applied = set(self.effect_for(target).applied)
        return [a.name for a in self.adjustments if a.id in applied]
