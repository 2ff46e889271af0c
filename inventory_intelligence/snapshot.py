# inventory_intelligence/snapshot.py
"""JSON reading and writing of refresh inputs and results.

Snapshot files hold one list per record kind (products, locations,
suppliers, stock_levels, sales_history, forecasts, adjustments,
safety_stock_rules, routes) with snake_case keys matching the model fields.
Dates and timestamps are ISO 8601 strings.
"""
import json
from pathlib import Path
from typing import Dict, List, Union

from inventory_intelligence.models import (
    AdjustmentEffectType, ConfidenceLevel, DashboardSummary, ForecastAdjustment,
    InputSnapshot, Location, Notification, Product, PurchaseOrderDetails,
    ReasoningItem, ReasoningItemType, RefreshResult, ReplenishmentSuggestion,
    RouteCosts, SafetyStockRule, SalesForecast, SalesHistoryEntry, SalesHistorySource,
    ShippingMethod, ShippingRoute, StockLevel, Supplier, SuggestionStatus,
    SuggestionType, SuggestionUrgency, ThresholdType, TransferDetails, TransitDays
)
from inventory_intelligence.utils.date_utils import convert_to_date, convert_to_datetime
from inventory_intelligence.exceptions import ReportingError, ValidationError

def _isoformat(value):
    return value.isoformat() if value is not None else None

def _optional_enum(enum_cls, value):
    return enum_cls.from_string(value) if value is not None else None

# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def product_from_dict(data: Dict) -> Product:
    return Product(
        id=data['id'],
        sku=data['sku'],
        name=data.get('name', ''),
        default_supplier_id=data.get('default_supplier_id'),
        unit_cost=float(data.get('unit_cost', 0.0))
    )

def location_from_dict(data: Dict) -> Location:
    return Location(id=data['id'], name=data['name'], type=data['type'])

def supplier_from_dict(data: Dict) -> Supplier:
    return Supplier(
        id=data['id'],
        name=data['name'],
        lead_time_days=data.get('lead_time_days'),
        order_multiple=int(data.get('order_multiple', 1))
    )

def stock_level_from_dict(data: Dict) -> StockLevel:
    return StockLevel(
        product_id=data['product_id'],
        location_id=data['location_id'],
        on_hand=float(data.get('on_hand', 0.0)),
        in_transit=float(data.get('in_transit', 0.0)),
        reserved=float(data.get('reserved', 0.0))
    )

def sales_entry_from_dict(data: Dict) -> SalesHistoryEntry:
    return SalesHistoryEntry(
        product_id=data['product_id'],
        location_id=data['location_id'],
        date=convert_to_date(data['date']),
        units_sold=float(data['units_sold']),
        source=SalesHistorySource.from_string(data.get('source', 'imported'))
    )

def forecast_from_dict(data: Dict) -> SalesForecast:
    multipliers = data.get('seasonal_multipliers')
    return SalesForecast(
        id=data['id'],
        product_id=data['product_id'],
        location_id=data['location_id'],
        daily_rate=float(data.get('daily_rate', 0.0)),
        confidence=ConfidenceLevel.from_string(data.get('confidence', 'low')),
        seasonal_multipliers=tuple(float(m) for m in multipliers) if multipliers is not None else (1.0,) * 12,
        trend_rate=float(data.get('trend_rate', 0.0)),
        manual_override=data.get('manual_override'),
        is_enabled=data.get('is_enabled', True),
        last_calculated_at=convert_to_datetime(data.get('last_calculated_at')),
        accuracy_mape=data.get('accuracy_mape')
    )

def adjustment_from_dict(data: Dict) -> ForecastAdjustment:
    return ForecastAdjustment(
        id=data['id'],
        name=data['name'],
        start_date=convert_to_date(data['start_date']),
        end_date=convert_to_date(data['end_date']),
        effect=AdjustmentEffectType.from_string(data['effect']),
        multiplier=data.get('multiplier'),
        is_recurring=data.get('is_recurring', False),
        notes=data.get('notes'),
        product_id=data.get('product_id'),
        account_adjustment_id=data.get('account_adjustment_id'),
        is_opted_out=data.get('is_opted_out', False)
    )

def safety_stock_rule_from_dict(data: Dict) -> SafetyStockRule:
    return SafetyStockRule(
        product_id=data['product_id'],
        location_id=data['location_id'],
        threshold_type=ThresholdType.from_string(data['threshold_type']),
        threshold_value=float(data['threshold_value']),
        is_active=data.get('is_active', True)
    )

def route_from_dict(data: Dict) -> ShippingRoute:
    transit = data['transit_days']
    return ShippingRoute(
        id=data['id'],
        name=data['name'],
        from_location_id=data['from_location_id'],
        to_location_id=data['to_location_id'],
        method=ShippingMethod.from_string(data['method']),
        transit_days=TransitDays(
            min=int(transit['min']),
            typical=int(transit['typical']),
            max=int(transit['max'])
        ),
        costs=RouteCosts(**data.get('costs', {})),
        is_active=data.get('is_active', True),
        is_default=data.get('is_default', False)
    )

_SNAPSHOT_READERS = {
    'products': product_from_dict,
    'locations': location_from_dict,
    'suppliers': supplier_from_dict,
    'stock_levels': stock_level_from_dict,
    'sales_history': sales_entry_from_dict,
    'forecasts': forecast_from_dict,
    'adjustments': adjustment_from_dict,
    'safety_stock_rules': safety_stock_rule_from_dict,
    'routes': route_from_dict,
}

def snapshot_from_dict(data: Dict) -> InputSnapshot:
    """Build an InputSnapshot from parsed JSON.

    Raises:
        ValidationError: If a record is missing a field or holds an invalid value
    """
    records = {}
    for section, reader in _SNAPSHOT_READERS.items():
        items = data.get(section, [])
        parsed = []
        for index, item in enumerate(items):
            try:
                parsed.append(reader(item))
            except KeyError as e:
                raise ValidationError(
                    f"{section}[{index}] is missing field {e.args[0]}",
                    details={'section': section, 'index': index}
                )
            except (TypeError, ValueError) as e:
                raise ValidationError(
                    f"{section}[{index}] is invalid: {str(e)}",
                    details={'section': section, 'index': index}
                )
        records[section] = tuple(parsed)
    return InputSnapshot(**records)

def reasoning_from_dict(data: Dict) -> ReasoningItem:
    return ReasoningItem(
        type=ReasoningItemType.from_string(data['type']),
        message=data['message'],
        value=data.get('value')
    )

def suggestion_from_dict(data: Dict) -> ReplenishmentSuggestion:
    """Rebuild a suggestion written by suggestion_to_dict."""
    details_data = data['details']
    if SuggestionType.from_string(data['type']) == SuggestionType.TRANSFER:
        details = TransferDetails(
            source_location_id=details_data['source_location_id'],
            source_available_qty=details_data['source_available_qty'],
            route_id=details_data.get('route_id'),
            route_method=_optional_enum(ShippingMethod, details_data.get('route_method')),
            transit_days=details_data.get('transit_days'),
            earliest_arrival=convert_to_date(details_data.get('earliest_arrival')),
            latest_arrival=convert_to_date(details_data.get('latest_arrival'))
        )
    else:
        details = PurchaseOrderDetails(
            supplier_id=details_data.get('supplier_id'),
            supplier_lead_time_days=details_data.get('supplier_lead_time_days')
        )

    return ReplenishmentSuggestion(
        id=data['id'],
        product_id=data['product_id'],
        sku=data['sku'],
        destination_location_id=data['destination_location_id'],
        current_stock=data['current_stock'],
        in_transit_quantity=data['in_transit_quantity'],
        daily_sales_rate=data['daily_sales_rate'],
        days_of_stock_remaining=data.get('days_of_stock_remaining'),
        stockout_date=convert_to_date(data.get('stockout_date')),
        safety_stock_threshold=data['safety_stock_threshold'],
        urgency=SuggestionUrgency.from_string(data['urgency']),
        recommended_qty=data['recommended_qty'],
        details=details,
        estimated_arrival=convert_to_date(data.get('estimated_arrival')),
        reasoning=tuple(reasoning_from_dict(item) for item in data.get('reasoning', [])),
        created_at=convert_to_datetime(data['created_at']),
        updated_at=convert_to_datetime(data['updated_at']),
        status=SuggestionStatus.from_string(data.get('status', 'active')),
        snooze_until=convert_to_datetime(data.get('snooze_until')),
        dismissed_reason=data.get('dismissed_reason'),
        accepted_qty=data.get('accepted_qty'),
        accepted_at=convert_to_datetime(data.get('accepted_at'))
    )

def load_snapshot(path: Union[str, Path]) -> InputSnapshot:
    """Read an input snapshot from a JSON file."""
    with open(path, 'r') as f:
        data = json.load(f)
    return snapshot_from_dict(data)

def load_suggestions(path: Union[str, Path]) -> List[ReplenishmentSuggestion]:
    """Read suggestions from a JSON file.

    Accepts either a list of suggestions or a refresh result document.
    """
    with open(path, 'r') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get('suggestions', [])
    try:
        return [suggestion_from_dict(item) for item in data]
    except KeyError as e:
        raise ValidationError(f"Suggestion is missing field {e.args[0]}")
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid suggestion: {str(e)}")

# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

def suggestion_to_dict(suggestion: ReplenishmentSuggestion) -> Dict:
    details = suggestion.details
    if isinstance(details, TransferDetails):
        details_data = {
            'source_location_id': details.source_location_id,
            'source_available_qty': details.source_available_qty,
            'route_id': details.route_id,
            'route_method': details.route_method.value if details.route_method else None,
            'transit_days': details.transit_days,
            'earliest_arrival': _isoformat(details.earliest_arrival),
            'latest_arrival': _isoformat(details.latest_arrival)
        }
    else:
        details_data = {
            'supplier_id': details.supplier_id,
            'supplier_lead_time_days': details.supplier_lead_time_days
        }

    return {
        'id': suggestion.id,
        'type': suggestion.type.value,
        'status': suggestion.status.value,
        'product_id': suggestion.product_id,
        'sku': suggestion.sku,
        'destination_location_id': suggestion.destination_location_id,
        'current_stock': suggestion.current_stock,
        'in_transit_quantity': suggestion.in_transit_quantity,
        'daily_sales_rate': suggestion.daily_sales_rate,
        'days_of_stock_remaining': suggestion.days_of_stock_remaining,
        'stockout_date': _isoformat(suggestion.stockout_date),
        'safety_stock_threshold': suggestion.safety_stock_threshold,
        'urgency': suggestion.urgency.value,
        'recommended_qty': suggestion.recommended_qty,
        'details': details_data,
        'estimated_arrival': _isoformat(suggestion.estimated_arrival),
        'reasoning': [item.to_dict() for item in suggestion.reasoning],
        'created_at': _isoformat(suggestion.created_at),
        'updated_at': _isoformat(suggestion.updated_at),
        'snooze_until': _isoformat(suggestion.snooze_until),
        'dismissed_reason': suggestion.dismissed_reason,
        'accepted_qty': suggestion.accepted_qty,
        'accepted_at': _isoformat(suggestion.accepted_at)
    }

def forecast_to_dict(forecast: SalesForecast) -> Dict:
    return {
        'id': forecast.id,
        'product_id': forecast.product_id,
        'location_id': forecast.location_id,
        'daily_rate': forecast.daily_rate,
        'confidence': forecast.confidence.value,
        'seasonal_multipliers': list(forecast.seasonal_multipliers),
        'trend_rate': forecast.trend_rate,
        'manual_override': forecast.manual_override,
        'is_enabled': forecast.is_enabled,
        'last_calculated_at': _isoformat(forecast.last_calculated_at),
        'accuracy_mape': forecast.accuracy_mape
    }

def dashboard_to_dict(dashboard: DashboardSummary) -> Dict:
    counts = dashboard.urgency_counts
    return {
        'total_active_products': dashboard.total_active_products,
        'total_suggestions': dashboard.total_suggestions,
        'urgency_counts': {
            'critical': counts.critical,
            'warning': counts.warning,
            'planned': counts.planned,
            'monitor': counts.monitor
        },
        'location_health': [
            {
                'location_id': health.location_id,
                'location_name': health.location_name,
                'location_type': health.location_type,
                'total_products': health.total_products,
                'healthy_count': health.healthy_count,
                'warning_count': health.warning_count,
                'critical_count': health.critical_count,
                'total_value': health.total_value
            }
            for health in dashboard.location_health
        ],
        'recently_dismissed': dashboard.recently_dismissed,
        'recently_snoozed': dashboard.recently_snoozed,
        'last_calculated_at': _isoformat(dashboard.last_calculated_at)
    }

def notification_to_dict(notification: Notification) -> Dict:
    return {
        'type': notification.kind.value,
        'title': notification.title,
        'message': notification.message,
        'product_id': notification.product_id,
        'location_id': notification.location_id,
        'suggestion_id': notification.suggestion_id
    }

def result_to_dict(result: RefreshResult) -> Dict:
    return {
        'run_at': _isoformat(result.run_at),
        'forecasts': [forecast_to_dict(f) for f in result.forecasts],
        'suggestions': [suggestion_to_dict(s) for s in result.suggestions],
        'retired': [suggestion_to_dict(s) for s in result.retired],
        'dashboard': dashboard_to_dict(result.dashboard),
        'notifications': [notification_to_dict(n) for n in result.notifications]
    }

def write_result(result: RefreshResult, path: Union[str, Path]) -> Path:
    """Write a refresh result as JSON.

    Raises:
        ReportingError: If the file cannot be written
    """
    path = Path(path)
    try:
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True)
        with open(path, 'w') as f:
            json.dump(result_to_dict(result), f, indent=2)
    except OSError as e:
        raise ReportingError(f"Error writing refresh result to {path}: {str(e)}")
    return path
