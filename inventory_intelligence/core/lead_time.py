# inventory_intelligence/core/lead_time.py
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

from ..models import ReasoningItem, ShippingRoute, Supplier
from ..utils.date_utils import add_days
from ..exceptions import RouteError

@dataclass(frozen=True)
class RoutePlan:
    """Lead time and arrival estimate for one replenishment."""
    route: Optional[ShippingRoute]
    transit_days: Optional[int]
    estimated_arrival: Optional[date]
    earliest_arrival: Optional[date] = None
    latest_arrival: Optional[date] = None
    reasoning: Tuple[ReasoningItem, ...] = ()

def candidate_routes(
    routes: Iterable[ShippingRoute],
    from_location_id: str,
    to_location_id: str
) -> List[ShippingRoute]:
    """Active routes between two locations."""
    return [
        route for route in routes
        if route.is_active
        and route.from_location_id == from_location_id
        and route.to_location_id == to_location_id
    ]

def select_route(
    routes: Iterable[ShippingRoute],
    from_location_id: str,
    to_location_id: str
) -> Optional[ShippingRoute]:
    """Select the route to use between two locations.

    The default route wins when one exists; otherwise the route with the
    lowest typical transit time (ties broken by route id).

    Args:
        routes: All known shipping routes
        from_location_id: Origin location
        to_location_id: Destination location

    Returns:
        Selected route or None when no active route exists

    Raises:
        RouteError: If more than one active default route exists for the pair
    """
    candidates = candidate_routes(routes, from_location_id, to_location_id)
    if not candidates:
        return None

    defaults = [route for route in candidates if route.is_default]
    if len(defaults) > 1:
        raise RouteError(
            f"{len(defaults)} default routes from {from_location_id} to {to_location_id}",
            details={'route_ids': [route.id for route in defaults]}
        )
    if defaults:
        return defaults[0]

    return min(candidates, key=lambda route: (route.transit_days.typical, route.id))

def plan_transfer(
    routes: Iterable[ShippingRoute],
    from_location_id: str,
    to_location_id: str,
    today: date
) -> RoutePlan:
    """Plan the lead time of a transfer between two locations.

    Args:
        routes: All known shipping routes
        from_location_id: Source location
        to_location_id: Destination location
        today: Run date

    Returns:
        RoutePlan; without a route it carries no ETA and a warning
    """
    route = select_route(routes, from_location_id, to_location_id)

    if route is None:
        return RoutePlan(
            route=None,
            transit_days=None,
            estimated_arrival=None,
            reasoning=(ReasoningItem.warning(
                f"No active shipping route from {from_location_id} to {to_location_id}; arrival date unknown"
            ),)
        )

    transit = route.transit_days
    arrival = add_days(today, transit.typical)
    choice = 'default route' if route.is_default else 'fastest route'
    return RoutePlan(
        route=route,
        transit_days=transit.typical,
        estimated_arrival=arrival,
        earliest_arrival=add_days(today, transit.min),
        latest_arrival=add_days(today, transit.max),
        reasoning=(ReasoningItem.info(
            f"Shipping via {route.name} ({route.method.value}, {choice}): "
            f"{transit.typical} days typical ({transit.min}-{transit.max}), arriving {arrival.isoformat()}",
            transit.typical
        ),)
    )

def plan_purchase_order(
    supplier: Optional[Supplier],
    today: date,
    default_lead_time_days: int
) -> RoutePlan:
    """Plan the lead time of a purchase order from the supplier record.

    Args:
        supplier: Supplier the order is placed with (None when unknown)
        today: Run date
        default_lead_time_days: Lead time used when the supplier has none

    Returns:
        RoutePlan
    """
    if supplier is None:
        return RoutePlan(
            route=None,
            transit_days=None,
            estimated_arrival=None,
            reasoning=(ReasoningItem.warning("No default supplier; arrival date unknown"),)
        )

    reasoning = []
    lead_time = supplier.lead_time_days
    if lead_time is None:
        lead_time = default_lead_time_days
        reasoning.append(ReasoningItem.warning(
            f"{supplier.name} has no lead time on record; assuming {lead_time} days", lead_time
        ))

    arrival = add_days(today, lead_time)
    reasoning.append(ReasoningItem.info(
        f"Purchase from {supplier.name} ({lead_time} day lead time), arriving {arrival.isoformat()}",
        lead_time
    ))
    return RoutePlan(
        route=None,
        transit_days=lead_time,
        estimated_arrival=arrival,
        reasoning=tuple(reasoning)
    )
