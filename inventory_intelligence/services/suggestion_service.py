# inventory_intelligence/services/suggestion_service.py
from datetime import datetime
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple
import logging
import uuid

from inventory_intelligence.models import (
    InputSnapshot, IntelligenceSettings, Location, Product, PurchaseOrderDetails,
    ReasoningItem, ReplenishmentSuggestion, SalesForecast, StockLevel, Supplier,
    SuggestionType, SuggestionUrgency, TransferDetails
)
from inventory_intelligence.core.demand_forecast import ForecastCalculation
from inventory_intelligence.core.lead_time import RoutePlan, plan_purchase_order, plan_transfer
from inventory_intelligence.core.safety_stock import calculate_safety_stock, find_active_rule
from inventory_intelligence.core.urgency import (
    calculate_days_of_stock, calculate_stockout_date, classify_urgency
)
from inventory_intelligence.utils.math_utils import ceil_units, round_to_multiple
from inventory_intelligence.exceptions import SuggestionError

logger = logging.getLogger(__name__)

SUGGESTION_NAMESPACE = uuid.UUID('5b0c54d1-8a8e-4c52-9a4c-2f8f3e6f0a11')

def allocate_suggestion_id(
    product_id: str,
    location_id: str,
    suggestion_type: SuggestionType,
    run_at: datetime
) -> str:
    """Deterministic id for a suggestion first raised in a given run."""
    name = f"{product_id}|{location_id}|{suggestion_type.value}|{run_at.isoformat()}"
    return str(uuid.uuid5(SUGGESTION_NAMESPACE, name))

def calculate_recommended_qty(
    daily_rate: float,
    target_days_of_cover: float,
    current_stock: float,
    in_transit: float = 0.0,
    order_multiple: int = 1
) -> int:
    """Calculate the recommended replenishment quantity.

    Args:
        daily_rate: Effective daily demand
        target_days_of_cover: Days of demand the replenishment should cover
        current_stock: Current stock at the destination
        in_transit: Quantity already on its way
        order_multiple: Quantity must be a multiple of this (case pack)

    Returns:
        Whole units, at least one order multiple
    """
    if order_multiple < 1:
        raise SuggestionError(f"Order multiple must be at least 1, got {order_multiple}")

    needed = target_days_of_cover * max(daily_rate, 0.0) - current_stock - in_transit
    quantity = max(1, ceil_units(needed))
    if order_multiple > 1:
        quantity = int(round_to_multiple(quantity, order_multiple))
    return quantity

def rank_suggestions(suggestions: Iterable[ReplenishmentSuggestion]) -> List[ReplenishmentSuggestion]:
    """Order suggestions for display.

    Critical first, then by days of stock remaining ascending with unknown
    (None) days ahead of everything else.
    """
    def sort_key(suggestion):
        days = suggestion.days_of_stock_remaining
        return (
            suggestion.urgency.rank,
            days is not None,
            days if days is not None else 0.0,
            suggestion.product_id,
            suggestion.destination_location_id,
            suggestion.type.value
        )

    return sorted(suggestions, key=sort_key)

class SuggestionService:
    """Service for generating replenishment suggestions from forecasts."""

    def __init__(self, snapshot: InputSnapshot, settings: IntelligenceSettings):
        """Initialize the suggestion service.

        Args:
            snapshot: Input snapshot of the run
            settings: Intelligence settings of the run
        """
        self.snapshot = snapshot
        self.settings = settings
        self.products: Dict[str, Product] = {p.id: p for p in snapshot.products}
        self.locations: Dict[str, Location] = {l.id: l for l in snapshot.locations}
        self.suppliers: Dict[str, Supplier] = {s.id: s for s in snapshot.suppliers}
        self.stock: Dict[Tuple[str, str], StockLevel] = {}
        self.stock_by_product: Dict[str, List[StockLevel]] = defaultdict(list)
        for level in snapshot.stock_levels:
            self.stock[(level.product_id, level.location_id)] = level
            self.stock_by_product[level.product_id].append(level)

    def stock_for(self, product_id: str, location_id: str) -> StockLevel:
        return self.stock.get((product_id, location_id), StockLevel(product_id, location_id))

    def find_transfer_source(
        self,
        product_id: str,
        destination_id: str,
        quantity: int,
        today
    ) -> Tuple[Optional[Tuple[StockLevel, Location, RoutePlan]], Optional[StockLevel]]:
        """Find the best source location able to ship a quantity.

        Eligible sources hold at least the quantity available, are of an
        allowed location type and are not the destination. The fastest
        planned route wins, then the largest available quantity.

        Returns:
            Tuple with the chosen (stock, location, plan) or None, and the
            largest insufficient source for reporting
        """
        eligible = []
        largest_short = None

        for level in self.stock_by_product.get(product_id, []):
            if level.location_id == destination_id:
                continue
            location = self.locations.get(level.location_id)
            if location is None or location.type not in self.settings.source_location_types:
                continue
            if level.available < quantity:
                if level.available > 0 and (largest_short is None or level.available > largest_short.available):
                    largest_short = level
                continue
            plan = plan_transfer(self.snapshot.routes, level.location_id, destination_id, today)
            eligible.append((level, location, plan))

        if not eligible:
            return None, largest_short

        eligible.sort(key=lambda item: (
            item[2].transit_days is None,
            item[2].transit_days or 0,
            -item[0].available,
            item[1].id
        ))
        return eligible[0], largest_short

    def generate_for(
        self,
        forecast: SalesForecast,
        calculation: ForecastCalculation,
        now: datetime
    ) -> Optional[ReplenishmentSuggestion]:
        """Generate the suggestion for one forecast, if one is warranted.

        Args:
            forecast: Forecast of the product/location pair
            calculation: Forecast calculation for the pair
            now: Run timestamp

        Returns:
            ReplenishmentSuggestion or None when stock is sufficient
        """
        if not forecast.is_enabled:
            return None

        product = self.products.get(forecast.product_id)
        if product is None:
            logger.warning(f"Forecast {forecast.id} references unknown product {forecast.product_id}; skipped")
            return None

        rate = calculation.effective_rate

        settings = self.settings
        thresholds = settings.urgency_thresholds
        today = now.date()
        destination_id = forecast.location_id

        stock = self.stock_for(product.id, destination_id)
        current = stock.available
        in_transit = stock.in_transit
        include_in_transit = settings.include_in_transit_in_calculations
        covered = current + in_transit if include_in_transit else current

        days = calculate_days_of_stock(current, rate, in_transit, include_in_transit)
        stockout = calculate_stockout_date(days, today)
        urgency = classify_urgency(days, thresholds)

        rule = find_active_rule(self.snapshot.safety_stock_rules, product.id, destination_id)
        safety = calculate_safety_stock(rule, rate, settings.default_safety_stock_days)

        if covered >= safety.units and urgency != SuggestionUrgency.CRITICAL:
            return None

        reasoning: List[ReasoningItem] = []
        if stock.reserved:
            reasoning.append(ReasoningItem.calculation(
                f"Current stock: {current:,.0f} units available ({stock.on_hand:,.0f} on hand, "
                f"{stock.reserved:,.0f} reserved)", current
            ))
        else:
            reasoning.append(ReasoningItem.calculation(f"Current stock: {current:,.0f} units", current))
        if in_transit > 0:
            counted = 'counted' if include_in_transit else 'not counted'
            reasoning.append(ReasoningItem.info(
                f"In transit: {in_transit:,.0f} units ({counted} towards cover)", in_transit
            ))

        reasoning.extend(calculation.reasoning)

        if days is None:
            reasoning.append(ReasoningItem.warning(
                "No positive demand forecast; days of stock cannot be calculated"
            ))
        else:
            reasoning.append(ReasoningItem.calculation(
                f"Days of stock remaining: {days:.1f} (stockout around {stockout.isoformat()})",
                round(days, 2)
            ))

        if urgency == SuggestionUrgency.CRITICAL:
            reasoning.append(ReasoningItem.warning(
                f"CRITICAL: at or below the {thresholds.critical_days:g}-day threshold"
            ))
        elif urgency == SuggestionUrgency.WARNING:
            reasoning.append(ReasoningItem.warning(
                f"WARNING: stock below {thresholds.warning_days:g}-day threshold"
            ))
        else:
            reasoning.append(ReasoningItem.info(f"Urgency: {urgency.value}"))

        reasoning.append(safety.reasoning)
        if covered < safety.units:
            reasoning.append(ReasoningItem.calculation(
                f"Stock {covered:,.0f} is below the safety threshold of {safety.units:,} units",
                safety.units - covered
            ))
        else:
            reasoning.append(ReasoningItem.warning(
                f"Stock {covered:,.0f} meets the safety threshold of {safety.units:,} units "
                f"but urgency is critical"
            ))

        quantity = calculate_recommended_qty(rate, settings.target_days_of_cover, current, in_transit)
        target_units = settings.target_days_of_cover * max(rate, 0.0)
        reasoning.append(ReasoningItem.calculation(
            f"Target stock: {settings.target_days_of_cover:g} days x {rate:.2f} units/day = "
            f"{target_units:,.1f} units", round(target_units, 2)
        ))
        reasoning.append(ReasoningItem.calculation(
            f"Recommended quantity: {target_units:,.1f} - {current:,.0f} in stock - "
            f"{in_transit:,.0f} in transit = {quantity:,} units (rounded up, minimum 1)", quantity
        ))

        source, largest_short = self.find_transfer_source(product.id, destination_id, quantity, today)

        if source is not None:
            level, location, plan = source
            details = TransferDetails(
                source_location_id=location.id,
                source_available_qty=level.available,
                route_id=plan.route.id if plan.route else None,
                route_method=plan.route.method if plan.route else None,
                transit_days=plan.transit_days,
                earliest_arrival=plan.earliest_arrival,
                latest_arrival=plan.latest_arrival
            )
            reasoning.append(ReasoningItem.info(
                f"Transfer from {location.name} ({level.available:,.0f} available)", level.available
            ))
        else:
            supplier = self.suppliers.get(product.default_supplier_id) if product.default_supplier_id else None
            if supplier is not None and supplier.order_multiple > 1:
                rounded = calculate_recommended_qty(
                    rate, settings.target_days_of_cover, current, in_transit, supplier.order_multiple
                )
                if rounded != quantity:
                    reasoning.append(ReasoningItem.calculation(
                        f"Rounded up to {supplier.name} order multiple of {supplier.order_multiple}: "
                        f"{rounded:,} units", rounded
                    ))
                quantity = rounded
            if largest_short is not None:
                short_location = self.locations[largest_short.location_id]
                reasoning.append(ReasoningItem.info(
                    f"Warehouse stock insufficient: {largest_short.available:,.0f} available at "
                    f"{short_location.name}", largest_short.available
                ))
            else:
                reasoning.append(ReasoningItem.info("No warehouse stock available - purchase order required"))

            plan = plan_purchase_order(supplier, today, settings.default_supplier_lead_time_days)
            details = PurchaseOrderDetails(
                supplier_id=supplier.id if supplier else None,
                supplier_lead_time_days=plan.transit_days
            )

        reasoning.extend(plan.reasoning)

        return ReplenishmentSuggestion(
            id=allocate_suggestion_id(product.id, destination_id, details.suggestion_type, now),
            product_id=product.id,
            sku=product.sku,
            destination_location_id=destination_id,
            current_stock=current,
            in_transit_quantity=in_transit,
            daily_sales_rate=rate,
            days_of_stock_remaining=days,
            stockout_date=stockout,
            safety_stock_threshold=safety.units,
            urgency=urgency,
            recommended_qty=quantity,
            details=details,
            estimated_arrival=plan.estimated_arrival,
            reasoning=tuple(reasoning),
            created_at=now,
            updated_at=now
        )

    def generate(
        self,
        calculations: Iterable[Tuple[SalesForecast, ForecastCalculation]],
        now: datetime
    ) -> List[ReplenishmentSuggestion]:
        """Generate ranked suggestions for every calculated forecast."""
        suggestions = []
        for forecast, calculation in calculations:
            suggestion = self.generate_for(forecast, calculation, now)
            if suggestion is not None:
                suggestions.append(suggestion)
        return rank_suggestions(suggestions)
