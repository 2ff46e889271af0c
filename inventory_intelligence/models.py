# inventory_intelligence/models.py
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union
import enum

from inventory_intelligence.exceptions import ConfigError, ValidationError


class _StrEnum(str, enum.Enum):

    def __str__(self):
        """Return the string value of the enum."""
        return self.value

    @classmethod
    def from_string(cls, value: str):
        """Create an enum member from its string value.

        Raises:
            ValueError if the string value is not valid
        """
        try:
            return cls(value)
        except ValueError:
            valid = ', '.join(member.value for member in cls)
            raise ValueError(f"Invalid {cls.__name__}: {value}. Valid values are: {valid}")


class AdjustmentEffectType(_StrEnum):
    """What a forecast adjustment does to the dates it covers.

    Values:
        EXCLUDE ('exclude'): Dates are removed from sales history entirely
        MULTIPLY ('multiply'): Demand on those dates is scaled by a multiplier
    """
    EXCLUDE = 'exclude'
    MULTIPLY = 'multiply'


class ConfidenceLevel(_StrEnum):
    HIGH = 'high'
    MEDIUM = 'medium'
    LOW = 'low'


class SalesHistorySource(_StrEnum):
    AMAZON_API = 'amazon-api'
    MANUAL = 'manual'
    IMPORTED = 'imported'


class ThresholdType(_StrEnum):
    UNITS = 'units'
    DAYS_OF_COVER = 'days-of-cover'


class ShippingMethod(_StrEnum):
    SEA = 'sea'
    AIR = 'air'
    GROUND = 'ground'
    EXPRESS = 'express'
    RAIL = 'rail'


class SuggestionType(_StrEnum):
    TRANSFER = 'transfer'
    PURCHASE_ORDER = 'purchase-order'


class SuggestionUrgency(_StrEnum):
    """Urgency tiers, most urgent first.

    The declaration order is the display rank used when sorting suggestions.
    """
    CRITICAL = 'critical'
    WARNING = 'warning'
    PLANNED = 'planned'
    MONITOR = 'monitor'

    @property
    def rank(self) -> int:
        return list(SuggestionUrgency).index(self)


class SuggestionStatus(_StrEnum):
    ACTIVE = 'active'
    SNOOZED = 'snoozed'
    DISMISSED = 'dismissed'
    ACCEPTED = 'accepted'

    @property
    def is_open(self) -> bool:
        return self in (SuggestionStatus.ACTIVE, SuggestionStatus.SNOOZED)


class ReasoningItemType(_StrEnum):
    INFO = 'info'
    WARNING = 'warning'
    CALCULATION = 'calculation'


class NotificationKind(_StrEnum):
    CRITICAL_STOCK = 'critical_stock'
    WARNING_STOCK = 'warning_stock'


# ---------------------------------------------------------------------------
# Input snapshot records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Product:
    id: str
    sku: str
    name: str = ''
    default_supplier_id: Optional[str] = None
    unit_cost: float = 0.0


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    type: str


@dataclass(frozen=True)
class Supplier:
    id: str
    name: str
    lead_time_days: Optional[int] = None
    order_multiple: int = 1


@dataclass(frozen=True)
class StockLevel:
    product_id: str
    location_id: str
    on_hand: float = 0.0
    in_transit: float = 0.0
    reserved: float = 0.0

    @property
    def available(self) -> float:
        return max(0.0, self.on_hand - self.reserved)


@dataclass(frozen=True)
class SalesHistoryEntry:
    product_id: str
    location_id: str
    date: date
    units_sold: float
    source: SalesHistorySource = SalesHistorySource.IMPORTED


@dataclass(frozen=True)
class ForecastAdjustment:
    """A named date range that excludes or scales demand.

    Account-wide adjustments have no product_id. A product-level record that
    references an account adjustment with is_opted_out=True removes that
    account adjustment for the product instead of adding an effect.
    """
    id: str
    name: str
    start_date: date
    end_date: date
    effect: AdjustmentEffectType
    multiplier: Optional[float] = None
    is_recurring: bool = False
    notes: Optional[str] = None
    product_id: Optional[str] = None
    account_adjustment_id: Optional[str] = None
    is_opted_out: bool = False

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValidationError(
                f"Adjustment '{self.name}' ends before it starts",
                details={'start_date': str(self.start_date), 'end_date': str(self.end_date)}
            )
        if self.effect == AdjustmentEffectType.MULTIPLY:
            if self.multiplier is None:
                raise ValidationError(f"Adjustment '{self.name}' requires a multiplier")
            if self.multiplier < 0:
                raise ValidationError(f"Adjustment '{self.name}' has a negative multiplier")
        elif self.multiplier is not None:
            raise ValidationError(f"Adjustment '{self.name}' excludes dates and cannot carry a multiplier")

    @property
    def is_account_wide(self) -> bool:
        return self.product_id is None


@dataclass(frozen=True)
class SalesForecast:
    id: str
    product_id: str
    location_id: str
    daily_rate: float = 0.0
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    seasonal_multipliers: Tuple[float, ...] = (1.0,) * 12
    trend_rate: float = 0.0
    manual_override: Optional[float] = None
    is_enabled: bool = True
    last_calculated_at: Optional[datetime] = None
    accuracy_mape: Optional[float] = None

    def __post_init__(self):
        if len(self.seasonal_multipliers) != 12:
            raise ValidationError(
                f"Forecast {self.id} needs 12 seasonal multipliers, got {len(self.seasonal_multipliers)}"
            )

    @property
    def has_override(self) -> bool:
        return self.manual_override is not None and self.manual_override != 0


@dataclass(frozen=True)
class SafetyStockRule:
    product_id: str
    location_id: str
    threshold_type: ThresholdType
    threshold_value: float
    is_active: bool = True


@dataclass(frozen=True)
class TransitDays:
    min: int
    typical: int
    max: int


@dataclass(frozen=True)
class RouteCosts:
    per_unit: Optional[float] = None
    per_kg: Optional[float] = None
    flat_fee: Optional[float] = None
    currency: str = 'USD'


@dataclass(frozen=True)
class ShippingRoute:
    id: str
    name: str
    from_location_id: str
    to_location_id: str
    method: ShippingMethod
    transit_days: TransitDays
    costs: RouteCosts = field(default_factory=RouteCosts)
    is_active: bool = True
    is_default: bool = False


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UrgencyThresholds:
    critical_days: float = 3
    warning_days: float = 7
    planned_days: float = 14

    def validate(self):
        """Raise ConfigError unless critical < warning < planned."""
        if not (self.critical_days < self.warning_days < self.planned_days):
            raise ConfigError(
                "Urgency thresholds must be strictly increasing (critical < warning < planned)",
                details={
                    'critical_days': self.critical_days,
                    'warning_days': self.warning_days,
                    'planned_days': self.planned_days
                }
            )


@dataclass(frozen=True)
class IntelligenceSettings:
    urgency_thresholds: UrgencyThresholds = field(default_factory=UrgencyThresholds)
    default_safety_stock_days: float = 14
    include_in_transit_in_calculations: bool = True
    target_days_of_cover: float = 45
    history_window_days: int = 30
    default_supplier_lead_time_days: int = 30
    dashboard_lookback_days: int = 7
    source_location_types: Tuple[str, ...] = ('warehouse', '3pl')
    notify_on_critical: bool = True
    notify_on_warning: bool = False
    auto_refresh_interval_minutes: int = 60

    def validate(self):
        """Reject settings that would silently misclassify or misorder."""
        self.urgency_thresholds.validate()
        for name in ('default_safety_stock_days', 'target_days_of_cover',
                     'default_supplier_lead_time_days', 'dashboard_lookback_days'):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} cannot be negative", details={name: getattr(self, name)})
        if self.history_window_days <= 0:
            raise ConfigError("history_window_days must be positive",
                              details={'history_window_days': self.history_window_days})


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReasoningItem:
    type: ReasoningItemType
    message: str
    value: Optional[Union[float, int, str]] = None

    @classmethod
    def info(cls, message, value=None):
        return cls(ReasoningItemType.INFO, message, value)

    @classmethod
    def warning(cls, message, value=None):
        return cls(ReasoningItemType.WARNING, message, value)

    @classmethod
    def calculation(cls, message, value=None):
        return cls(ReasoningItemType.CALCULATION, message, value)

    def to_dict(self) -> Dict:
        data = {'type': self.type.value, 'message': self.message}
        if self.value is not None:
            data['value'] = self.value
        return data


@dataclass(frozen=True)
class TransferDetails:
    source_location_id: str
    source_available_qty: float
    route_id: Optional[str] = None
    route_method: Optional[ShippingMethod] = None
    transit_days: Optional[int] = None
    earliest_arrival: Optional[date] = None
    latest_arrival: Optional[date] = None

    suggestion_type = SuggestionType.TRANSFER


@dataclass(frozen=True)
class PurchaseOrderDetails:
    supplier_id: Optional[str]
    supplier_lead_time_days: Optional[int] = None

    suggestion_type = SuggestionType.PURCHASE_ORDER


SuggestionDetails = Union[TransferDetails, PurchaseOrderDetails]


@dataclass(frozen=True)
class ReplenishmentSuggestion:
    id: str
    product_id: str
    sku: str
    destination_location_id: str
    current_stock: float
    in_transit_quantity: float
    daily_sales_rate: float
    days_of_stock_remaining: Optional[float]
    stockout_date: Optional[date]
    safety_stock_threshold: int
    urgency: SuggestionUrgency
    recommended_qty: int
    details: SuggestionDetails
    estimated_arrival: Optional[date]
    reasoning: Tuple[ReasoningItem, ...]
    created_at: datetime
    updated_at: datetime
    status: SuggestionStatus = SuggestionStatus.ACTIVE
    snooze_until: Optional[datetime] = None
    dismissed_reason: Optional[str] = None
    accepted_qty: Optional[int] = None
    accepted_at: Optional[datetime] = None

    @property
    def type(self) -> SuggestionType:
        return self.details.suggestion_type

    @property
    def source_location_id(self) -> Optional[str]:
        return getattr(self.details, 'source_location_id', None)

    @property
    def supplier_id(self) -> Optional[str]:
        return getattr(self.details, 'supplier_id', None)

    @property
    def key(self) -> Tuple[str, str, SuggestionType]:
        """Identity of the condition a suggestion answers."""
        return (self.product_id, self.destination_location_id, self.type)


@dataclass(frozen=True)
class UrgencyCounts:
    critical: int = 0
    warning: int = 0
    planned: int = 0
    monitor: int = 0


@dataclass(frozen=True)
class LocationHealth:
    location_id: str
    location_name: str
    location_type: str
    total_products: int
    healthy_count: int
    warning_count: int
    critical_count: int
    total_value: float


@dataclass(frozen=True)
class DashboardSummary:
    total_active_products: int
    total_suggestions: int
    urgency_counts: UrgencyCounts
    location_health: Tuple[LocationHealth, ...]
    recently_dismissed: int
    recently_snoozed: int
    last_calculated_at: datetime


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    message: str
    product_id: str
    location_id: str
    suggestion_id: str


class LifecycleAction(_StrEnum):
    ACCEPT = 'accept'
    DISMISS = 'dismiss'
    SNOOZE = 'snooze'


@dataclass(frozen=True)
class LifecycleCommand:
    action: LifecycleAction
    suggestion_id: str
    quantity: Optional[int] = None
    reason: Optional[str] = None
    until: Optional[datetime] = None

    @classmethod
    def accept(cls, suggestion_id, quantity=None):
        return cls(LifecycleAction.ACCEPT, suggestion_id, quantity=quantity)

    @classmethod
    def dismiss(cls, suggestion_id, reason=None):
        return cls(LifecycleAction.DISMISS, suggestion_id, reason=reason)

    @classmethod
    def snooze(cls, suggestion_id, until):
        return cls(LifecycleAction.SNOOZE, suggestion_id, until=until)


@dataclass(frozen=True)
class InputSnapshot:
    """Everything one refresh run reads, captured once at the start."""
    products: Tuple[Product, ...] = ()
    locations: Tuple[Location, ...] = ()
    stock_levels: Tuple[StockLevel, ...] = ()
    sales_history: Tuple[SalesHistoryEntry, ...] = ()
    forecasts: Tuple[SalesForecast, ...] = ()
    adjustments: Tuple[ForecastAdjustment, ...] = ()
    safety_stock_rules: Tuple[SafetyStockRule, ...] = ()
    routes: Tuple[ShippingRoute, ...] = ()
    suppliers: Tuple[Supplier, ...] = ()


@dataclass(frozen=True)
class RefreshResult:
    run_at: datetime
    forecasts: Tuple[SalesForecast, ...]
    suggestions: Tuple[ReplenishmentSuggestion, ...]
    retired: Tuple[ReplenishmentSuggestion, ...]
    dashboard: DashboardSummary
    notifications: Tuple[Notification, ...] = ()

    @property
    def active_suggestions(self) -> List[ReplenishmentSuggestion]:
        return [s for s in self.suggestions if s.status == SuggestionStatus.ACTIVE]
