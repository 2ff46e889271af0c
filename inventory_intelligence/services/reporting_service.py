# inventory_intelligence/services/reporting_service.py
from datetime import datetime, timedelta
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Set
import logging

from inventory_intelligence.models import (
    DashboardSummary, InputSnapshot, IntelligenceSettings, LocationHealth, Notification,
    NotificationKind, Product, ReplenishmentSuggestion, SuggestionStatus,
    SuggestionUrgency, UrgencyCounts
)

logger = logging.getLogger(__name__)

class ReportingService:
    """Service for dashboard aggregation and notifications."""

    def __init__(self, snapshot: InputSnapshot, settings: IntelligenceSettings):
        """Initialize the reporting service.

        Args:
            snapshot: Input snapshot of the run
            settings: Intelligence settings of the run
        """
        self.snapshot = snapshot
        self.settings = settings
        self.products: Dict[str, Product] = {p.id: p for p in snapshot.products}
        self.location_names = {l.id: l.name for l in snapshot.locations}

    def urgency_counts(self, suggestions: Iterable[ReplenishmentSuggestion]) -> UrgencyCounts:
        counts = Counter(
            s.urgency for s in suggestions if s.status == SuggestionStatus.ACTIVE
        )
        return UrgencyCounts(
            critical=counts[SuggestionUrgency.CRITICAL],
            warning=counts[SuggestionUrgency.WARNING],
            planned=counts[SuggestionUrgency.PLANNED],
            monitor=counts[SuggestionUrgency.MONITOR]
        )

    def location_health(self, suggestions: Sequence[ReplenishmentSuggestion]) -> List[LocationHealth]:
        """Summarize stock health per location.

        A product counts as critical or warning at a location when an active
        suggestion of that urgency targets it there; every other stocked
        product counts as healthy. Stock value is on hand quantity times
        product unit cost.

        Args:
            suggestions: Suggestions of the run

        Returns:
            List of LocationHealth in snapshot location order
        """
        products_at: Dict[str, Set[str]] = defaultdict(set)
        value_at: Dict[str, float] = defaultdict(float)
        for level in self.snapshot.stock_levels:
            products_at[level.location_id].add(level.product_id)
            product = self.products.get(level.product_id)
            if product is not None:
                value_at[level.location_id] += level.on_hand * product.unit_cost

        # Worst active urgency per (location, product)
        worst: Dict[str, Dict[str, SuggestionUrgency]] = defaultdict(dict)
        for suggestion in suggestions:
            if suggestion.status != SuggestionStatus.ACTIVE:
                continue
            location_id = suggestion.destination_location_id
            products_at[location_id].add(suggestion.product_id)
            current = worst[location_id].get(suggestion.product_id)
            if current is None or suggestion.urgency.rank < current.rank:
                worst[location_id][suggestion.product_id] = suggestion.urgency

        health = []
        for location in self.snapshot.locations:
            urgencies = list(worst[location.id].values())
            critical = urgencies.count(SuggestionUrgency.CRITICAL)
            warning = urgencies.count(SuggestionUrgency.WARNING)
            total = len(products_at[location.id])
            health.append(LocationHealth(
                location_id=location.id,
                location_name=location.name,
                location_type=location.type,
                total_products=total,
                healthy_count=total - critical - warning,
                warning_count=warning,
                critical_count=critical,
                total_value=round(value_at[location.id], 2)
            ))
        return health

    def dashboard_summary(
        self,
        suggestions: Sequence[ReplenishmentSuggestion],
        now: datetime,
        retired: Sequence[ReplenishmentSuggestion] = ()
    ) -> DashboardSummary:
        """Build the dashboard summary of a run.

        Args:
            suggestions: Suggestions of the run (all statuses)
            now: Run timestamp
            retired: Suggestions retired in this run; they still count towards
                the recently dismissed and snoozed figures

        Returns:
            DashboardSummary
        """
        since = now - timedelta(days=self.settings.dashboard_lookback_days)
        recent = list(suggestions) + list(retired)
        recently_dismissed = sum(
            1 for s in recent
            if s.status == SuggestionStatus.DISMISSED and s.updated_at >= since
        )
        recently_snoozed = sum(
            1 for s in recent
            if s.status == SuggestionStatus.SNOOZED and s.updated_at >= since
        )

        summary = DashboardSummary(
            total_active_products=len(self.products),
            total_suggestions=sum(1 for s in suggestions if s.status == SuggestionStatus.ACTIVE),
            urgency_counts=self.urgency_counts(suggestions),
            location_health=tuple(self.location_health(suggestions)),
            recently_dismissed=recently_dismissed,
            recently_snoozed=recently_snoozed,
            last_calculated_at=now
        )

        logger.info(
            f"Dashboard: {summary.total_suggestions} active suggestions "
            f"({summary.urgency_counts.critical} critical, {summary.urgency_counts.warning} warning)"
        )
        return summary

    def notification_for(self, suggestion: ReplenishmentSuggestion) -> Optional[Notification]:
        """Build the notification for a newly raised suggestion, if enabled."""
        if suggestion.urgency == SuggestionUrgency.CRITICAL and self.settings.notify_on_critical:
            kind = NotificationKind.CRITICAL_STOCK
            label = 'Critical'
        elif suggestion.urgency == SuggestionUrgency.WARNING and self.settings.notify_on_warning:
            kind = NotificationKind.WARNING_STOCK
            label = 'Warning'
        else:
            return None

        location_name = self.location_names.get(suggestion.destination_location_id, 'Unknown')
        days = suggestion.days_of_stock_remaining
        if days is None:
            outlook = 'Days of stock cannot be calculated.'
        else:
            outlook = f"Stock will run out in {days:.1f} days."

        return Notification(
            kind=kind,
            title=f"{label}: {suggestion.sku} at {location_name}",
            message=f"{outlook} Recommend {suggestion.recommended_qty:,} units.",
            product_id=suggestion.product_id,
            location_id=suggestion.destination_location_id,
            suggestion_id=suggestion.id
        )

    def build_notifications(
        self,
        suggestions: Iterable[ReplenishmentSuggestion],
        created_ids: Iterable[str]
    ) -> List[Notification]:
        """Notifications for suggestions raised for the first time in this run."""
        created = set(created_ids)
        notifications = []
        for suggestion in suggestions:
            if suggestion.id not in created or suggestion.status != SuggestionStatus.ACTIVE:
                continue
            notification = self.notification_for(suggestion)
            if notification is not None:
                notifications.append(notification)
        return notifications
