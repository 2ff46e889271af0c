from collections import Counter
from typing import Dict, List

from inventory_intelligence.models import InputSnapshot, ShippingRoute

def validate_routes(routes: List[ShippingRoute]) -> Dict[str, str]:
    """Validate shipping routes.

    Args:
        routes: Routes to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    defaults = Counter(
        (route.from_location_id, route.to_location_id)
        for route in routes
        if route.is_active and route.is_default
    )
    for (from_id, to_id), count in defaults.items():
        if count > 1:
            errors[f'{from_id}->{to_id}'] = f'{count} default routes; at most one is allowed'

    for route in routes:
        transit = route.transit_days
        if not (0 <= transit.min <= transit.typical <= transit.max):
            errors[route.id] = 'Transit days must satisfy 0 <= min <= typical <= max'

    return errors

def validate_snapshot(snapshot: InputSnapshot) -> Dict[str, str]:
    """Validate cross references inside an input snapshot.

    Args:
        snapshot: Snapshot to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    product_ids = {product.id for product in snapshot.products}
    location_ids = {location.id for location in snapshot.locations}
    supplier_ids = {supplier.id for supplier in snapshot.suppliers}

    for forecast in snapshot.forecasts:
        if forecast.product_id not in product_ids:
            errors[f'forecast:{forecast.id}'] = f'Unknown product {forecast.product_id}'
        elif forecast.location_id not in location_ids:
            errors[f'forecast:{forecast.id}'] = f'Unknown location {forecast.location_id}'

    for product in snapshot.products:
        if product.default_supplier_id and product.default_supplier_id not in supplier_ids:
            errors[f'product:{product.id}'] = f'Unknown supplier {product.default_supplier_id}'

    errors.update(validate_routes(list(snapshot.routes)))

    return errors
