# inventory_intelligence/services/lifecycle_service.py
from dataclasses import dataclass, replace
from datetime import datetime
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from inventory_intelligence.models import (
    LifecycleAction, LifecycleCommand, ReplenishmentSuggestion, SuggestionStatus
)
from inventory_intelligence.exceptions import LifecycleError, NotFoundError

logger = logging.getLogger(__name__)

# Allowed manual transitions; snoozed -> active only happens on recomputation
ALLOWED_TRANSITIONS = {
    SuggestionStatus.ACTIVE: {SuggestionStatus.SNOOZED, SuggestionStatus.DISMISSED, SuggestionStatus.ACCEPTED},
    SuggestionStatus.SNOOZED: {SuggestionStatus.DISMISSED, SuggestionStatus.ACCEPTED},
    SuggestionStatus.DISMISSED: set(),
    SuggestionStatus.ACCEPTED: set(),
}

@dataclass(frozen=True)
class ReconcileResult:
    suggestions: Tuple[ReplenishmentSuggestion, ...]
    retired: Tuple[ReplenishmentSuggestion, ...]
    created_ids: Tuple[str, ...]
    carried_ids: Tuple[str, ...]
    reactivated_ids: Tuple[str, ...]

class SuggestionLifecycleManager:
    """Applies status transitions and carries suggestions across runs."""

    def _transition(
        self,
        suggestion: ReplenishmentSuggestion,
        target: SuggestionStatus,
        now: datetime,
        **changes
    ) -> ReplenishmentSuggestion:
        if target not in ALLOWED_TRANSITIONS[suggestion.status]:
            raise LifecycleError(
                f"Cannot move suggestion {suggestion.id} from {suggestion.status.value} to {target.value}",
                details={'suggestion_id': suggestion.id}
            )
        logger.info(f"Suggestion {suggestion.id}: {suggestion.status.value} -> {target.value}")
        return replace(suggestion, status=target, updated_at=now, **changes)

    def accept(
        self,
        suggestion: ReplenishmentSuggestion,
        now: datetime,
        quantity: Optional[int] = None
    ) -> ReplenishmentSuggestion:
        """Accept a suggestion.

        Creating the resulting transfer or purchase order is left to the
        caller.

        Args:
            suggestion: Suggestion to accept
            now: Time of the action
            quantity: Accepted quantity (defaults to the recommended quantity)

        Returns:
            Accepted suggestion
        """
        if quantity is not None and quantity <= 0:
            raise LifecycleError(f"Accepted quantity must be positive, got {quantity}")
        return self._transition(
            suggestion,
            SuggestionStatus.ACCEPTED,
            now,
            accepted_qty=quantity if quantity is not None else suggestion.recommended_qty,
            accepted_at=now,
            snooze_until=None
        )

    def dismiss(
        self,
        suggestion: ReplenishmentSuggestion,
        now: datetime,
        reason: Optional[str] = None
    ) -> ReplenishmentSuggestion:
        """Dismiss a suggestion, optionally recording why."""
        return self._transition(
            suggestion, SuggestionStatus.DISMISSED, now, dismissed_reason=reason, snooze_until=None
        )

    def snooze(
        self,
        suggestion: ReplenishmentSuggestion,
        until: datetime,
        now: datetime
    ) -> ReplenishmentSuggestion:
        """Snooze a suggestion until a later time.

        Raises:
            LifecycleError: If until is not after now
        """
        if until <= now:
            raise LifecycleError(
                f"Snooze date {until.isoformat()} must be after {now.isoformat()}",
                details={'suggestion_id': suggestion.id}
            )
        return self._transition(suggestion, SuggestionStatus.SNOOZED, now, snooze_until=until)

    def reactivate_if_due(self, suggestion: ReplenishmentSuggestion, now: datetime) -> ReplenishmentSuggestion:
        """Return a snoozed suggestion to active once its snooze has passed."""
        if suggestion.status != SuggestionStatus.SNOOZED:
            return suggestion
        if suggestion.snooze_until is not None and suggestion.snooze_until > now:
            return suggestion
        logger.info(f"Suggestion {suggestion.id}: snooze expired, reactivating")
        return replace(suggestion, status=SuggestionStatus.ACTIVE, snooze_until=None, updated_at=now)

    def apply_command(self, suggestion: ReplenishmentSuggestion, command: LifecycleCommand, now: datetime):
        if command.action == LifecycleAction.ACCEPT:
            return self.accept(suggestion, now, command.quantity)
        if command.action == LifecycleAction.DISMISS:
            return self.dismiss(suggestion, now, command.reason)
        if command.action == LifecycleAction.SNOOZE:
            if command.until is None:
                raise LifecycleError(f"Snooze of {command.suggestion_id} has no until date")
            return self.snooze(suggestion, command.until, now)
        raise LifecycleError(f"Unknown lifecycle action: {command.action}")

    def apply_commands(
        self,
        suggestions: Iterable[ReplenishmentSuggestion],
        commands: Iterable[LifecycleCommand],
        now: datetime
    ) -> List[ReplenishmentSuggestion]:
        """Apply lifecycle commands in order.

        Args:
            suggestions: Current suggestions
            commands: Commands to apply
            now: Time of the actions

        Returns:
            Suggestions in their original order with commands applied

        Raises:
            NotFoundError: If a command references an unknown suggestion
        """
        by_id: Dict[str, ReplenishmentSuggestion] = {}
        order = []
        for suggestion in suggestions:
            by_id[suggestion.id] = suggestion
            order.append(suggestion.id)

        for command in commands:
            if command.suggestion_id not in by_id:
                raise NotFoundError(f"Suggestion {command.suggestion_id} not found")
            by_id[command.suggestion_id] = self.apply_command(by_id[command.suggestion_id], command, now)

        return [by_id[suggestion_id] for suggestion_id in order]

    def reconcile(
        self,
        previous: Iterable[ReplenishmentSuggestion],
        candidates: Iterable[ReplenishmentSuggestion],
        now: datetime
    ) -> ReconcileResult:
        """Merge a run's candidates with the previous run's suggestions.

        Matching is by (product, destination, type). An open previous
        suggestion is carried forward with its id, status and creation time
        and the candidate's fresh figures. A dismissed or accepted previous
        suggestion blocks a duplicate while its condition persists. Previous
        suggestions whose condition no longer holds are retired untouched,
        so the next occurrence starts a new suggestion.

        When a pair switches between transfer and purchase order while its
        previous suggestion is snoozed, the new suggestion inherits the
        snooze so it stays hidden until the same time.

        Args:
            previous: Suggestions returned by the previous run
            candidates: Suggestions generated in this run
            now: Run timestamp

        Returns:
            ReconcileResult
        """
        previous = list(previous)
        candidates = list(candidates)
        previous_by_key: Dict[tuple, List[ReplenishmentSuggestion]] = defaultdict(list)
        for suggestion in previous:
            previous_by_key[suggestion.key].append(suggestion)

        candidate_keys = {candidate.key for candidate in candidates}
        snoozed_by_pair: Dict[tuple, ReplenishmentSuggestion] = {}
        for suggestion in previous:
            if (suggestion.status == SuggestionStatus.SNOOZED
                    and suggestion.key not in candidate_keys
                    and suggestion.snooze_until is not None
                    and suggestion.snooze_until > now):
                snoozed_by_pair[suggestion.key[:2]] = suggestion

        kept = []
        created = []
        carried = []
        reactivated = []
        matched_keys = set()

        for candidate in candidates:
            key = candidate.key
            if key in matched_keys:
                raise LifecycleError(f"Duplicate candidate for {key}")
            matched_keys.add(key)

            earlier = previous_by_key.get(key, [])
            open_earlier = [s for s in earlier if s.status.is_open]
            if len(open_earlier) > 1:
                raise LifecycleError(
                    f"{len(open_earlier)} open suggestions for {key}",
                    details={'suggestion_ids': [s.id for s in open_earlier]}
                )

            if open_earlier:
                existing = open_earlier[0]
                merged = replace(
                    candidate,
                    id=existing.id,
                    status=existing.status,
                    snooze_until=existing.snooze_until,
                    created_at=existing.created_at,
                    updated_at=now
                )
                refreshed = self.reactivate_if_due(merged, now)
                if refreshed.status != merged.status:
                    reactivated.append(refreshed.id)
                kept.append(refreshed)
                carried.append(refreshed.id)
                kept.extend(s for s in earlier if not s.status.is_open)
            elif earlier:
                kept.extend(earlier)
            else:
                snoozed = snoozed_by_pair.get(key[:2])
                if snoozed is not None:
                    candidate = replace(
                        candidate,
                        status=SuggestionStatus.SNOOZED,
                        snooze_until=snoozed.snooze_until
                    )
                    logger.debug(
                        f"Suggestion {candidate.id} inherits the snooze of {snoozed.id} until "
                        f"{snoozed.snooze_until.isoformat()}"
                    )
                kept.append(candidate)
                created.append(candidate.id)

        retired = [
            suggestion
            for key, suggestions in previous_by_key.items()
            if key not in matched_keys
            for suggestion in suggestions
        ]

        logger.info(
            f"Reconciled suggestions: {len(created)} new, {len(carried)} carried forward, "
            f"{len(reactivated)} reactivated, {len(retired)} retired"
        )

        return ReconcileResult(
            suggestions=tuple(kept),
            retired=tuple(retired),
            created_ids=tuple(created),
            carried_ids=tuple(carried),
            reactivated_ids=tuple(reactivated)
        )
