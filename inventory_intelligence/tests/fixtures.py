"""
Shared builders for the inventory intelligence tests.
"""
from dataclasses import replace
from datetime import datetime, timedelta

from inventory_intelligence.models import (
    InputSnapshot, Location, Product, PurchaseOrderDetails, ReplenishmentSuggestion,
    SalesForecast, SalesHistoryEntry, ShippingMethod, ShippingRoute, StockLevel,
    Supplier, SuggestionStatus, SuggestionUrgency, TransferDetails, TransitDays
)

NOW = datetime(2024, 6, 15, 8, 0)

def make_history(product_id, location_id, end_exclusive, days, units):
    """One entry per day for the days before end_exclusive."""
    return tuple(
        SalesHistoryEntry(product_id, location_id, end_exclusive - timedelta(days=offset), units)
        for offset in range(1, days + 1)
    )

def december_peak_history(end_exclusive, days=730):
    """Two years of 10 units/day at AMZ with December selling double."""
    days_back = (end_exclusive - timedelta(days=offset) for offset in range(1, days + 1))
    return tuple(
        SalesHistoryEntry('P1', 'AMZ', day, 20 if day.month == 12 else 10)
        for day in days_back
    )

def make_route(route_id, from_id, to_id, typical, is_default=False, is_active=True, method=ShippingMethod.GROUND):
    return ShippingRoute(
        id=route_id,
        name=f"Route {route_id}",
        from_location_id=from_id,
        to_location_id=to_id,
        method=method,
        transit_days=TransitDays(min=max(0, typical - 2), typical=typical, max=typical + 3),
        is_active=is_active,
        is_default=is_default
    )

def make_snapshot(**overrides):
    """One product sold at an Amazon location and stocked in a warehouse.

    Selling 10 units/day with 50 on hand gives 5 days of stock.
    """
    snapshot = InputSnapshot(
        products=(Product('P1', 'SKU-1', 'Widget', default_supplier_id='S1', unit_cost=5.0),),
        locations=(
            Location('AMZ', 'Amazon US', 'amazon'),
            Location('WH', 'Main Warehouse', 'warehouse'),
        ),
        stock_levels=(
            StockLevel('P1', 'AMZ', on_hand=50),
            StockLevel('P1', 'WH', on_hand=1000),
        ),
        sales_history=make_history('P1', 'AMZ', NOW.date(), 30, 10),
        forecasts=(SalesForecast('F1', 'P1', 'AMZ'),),
        routes=(make_route('R1', 'WH', 'AMZ', 5, is_default=True),),
        suppliers=(Supplier('S1', 'Acme Supply', lead_time_days=20),),
    )
    return replace(snapshot, **overrides)

def make_suggestion(
    suggestion_id='SUG-1',
    product_id='P1',
    location_id='AMZ',
    urgency=SuggestionUrgency.WARNING,
    days=5.0,
    transfer=True,
    status=SuggestionStatus.ACTIVE,
    created_at=NOW,
    updated_at=NOW,
    **changes
):
    if transfer:
        details = TransferDetails(source_location_id='WH', source_available_qty=1000, transit_days=5)
    else:
        details = PurchaseOrderDetails(supplier_id='S1', supplier_lead_time_days=20)
    suggestion = ReplenishmentSuggestion(
        id=suggestion_id,
        product_id=product_id,
        sku=f"SKU-{product_id}",
        destination_location_id=location_id,
        current_stock=50,
        in_transit_quantity=0,
        daily_sales_rate=10.0,
        days_of_stock_remaining=days,
        stockout_date=None,
        safety_stock_threshold=140,
        urgency=urgency,
        recommended_qty=400,
        details=details,
        estimated_arrival=None,
        reasoning=(),
        created_at=created_at,
        updated_at=updated_at,
        status=status
    )
    return replace(suggestion, **changes) if changes else suggestion
