# inventory_intelligence/batch/refresh_job.py
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence

from inventory_intelligence.config import config
from inventory_intelligence.models import (
    InputSnapshot, IntelligenceSettings, LifecycleCommand, RefreshResult,
    ReplenishmentSuggestion
)
from inventory_intelligence.services.forecast_service import ForecastService
from inventory_intelligence.services.suggestion_service import SuggestionService, rank_suggestions
from inventory_intelligence.services.lifecycle_service import SuggestionLifecycleManager
from inventory_intelligence.services.reporting_service import ReportingService
from inventory_intelligence.utils.validation import validate_snapshot
from inventory_intelligence.exceptions import BatchProcessError, IntelligenceError
from inventory_intelligence.logging_setup import get_logger, logger as log_manager

# Initialize logger
logger = get_logger('refresh_job')
logger.setLevel(logging.INFO)

def _map(func: Callable, items: Sequence, max_workers: int) -> List:
    """Apply func to every item, in parallel when more than one worker is allowed.

    Results keep the order of items. The first exception raised by a worker
    propagates to the caller.
    """
    if max_workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(func, items))

def run_refresh(
    snapshot: InputSnapshot,
    settings: IntelligenceSettings,
    now: datetime,
    previous: Iterable[ReplenishmentSuggestion] = (),
    commands: Iterable[LifecycleCommand] = (),
    max_workers: Optional[int] = None
) -> RefreshResult:
    """Run one inventory intelligence refresh.

    Args:
        snapshot: Input snapshot captured at the start of the run
        settings: Intelligence settings of the run
        now: Run timestamp; the only clock the run reads
        previous: Suggestions returned by the previous run
        commands: Lifecycle commands to apply to previous suggestions first
        max_workers: Worker threads for the per-pair stages (defaults to the
            BATCH_PROCESS section of the configuration)

    Returns:
        RefreshResult

    Raises:
        ConfigError: If the settings are invalid; nothing is computed
        IntelligenceError: For domain errors raised during the run
        BatchProcessError: For any other failure; no partial result is returned
    """
    settings.validate()

    if max_workers is None:
        max_workers = config.batch_config['max_workers']

    run_log = log_manager.batch_start_log('refresh', {
        'run_at': now.isoformat(),
        'products': len(snapshot.products),
        'forecasts': len(snapshot.forecasts),
        'max_workers': max_workers
    })

    try:
        for key, error in validate_snapshot(snapshot).items():
            logger.warning(f"Snapshot validation: {key}: {error}")

        # Step 1: Apply lifecycle commands to the previous suggestions
        lifecycle = SuggestionLifecycleManager()
        previous = lifecycle.apply_commands(previous, commands, now)

        # Step 2: Calculate forecasts
        forecast_service = ForecastService(snapshot, settings)
        calculations = _map(
            lambda forecast: forecast_service.calculate(forecast, now),
            list(snapshot.forecasts),
            max_workers
        )
        logger.info(f"Calculated {len(calculations)} forecasts")

        # Step 3: Generate candidate suggestions
        suggestion_service = SuggestionService(snapshot, settings)
        candidates = _map(
            lambda pair: suggestion_service.generate_for(pair[0], pair[1], now),
            calculations,
            max_workers
        )
        candidates = rank_suggestions(c for c in candidates if c is not None)
        logger.info(f"Generated {len(candidates)} candidate suggestions")

        # Step 4: Reconcile with the previous run
        reconciled = lifecycle.reconcile(previous, candidates, now)
        suggestions = tuple(rank_suggestions(reconciled.suggestions))

        # Step 5: Dashboard and notifications
        reporting = ReportingService(snapshot, settings)
        dashboard = reporting.dashboard_summary(suggestions, now, retired=reconciled.retired)
        notifications = reporting.build_notifications(suggestions, reconciled.created_ids)

        result = RefreshResult(
            run_at=now,
            forecasts=tuple(forecast for forecast, _ in calculations),
            suggestions=suggestions,
            retired=reconciled.retired,
            dashboard=dashboard,
            notifications=tuple(notifications)
        )

    except IntelligenceError as e:
        log_manager.batch_end_log(run_log, success=False, result_info={'error': e.to_dict()})
        raise
    except Exception as e:
        log_manager.log_exception('refresh_job', e, "Error during refresh")
        log_manager.batch_end_log(run_log, success=False, result_info={'error': str(e)})
        raise BatchProcessError(f"Refresh failed: {str(e)}") from e

    log_manager.batch_end_log(run_log, success=True, result_info={
        'suggestions': len(result.suggestions),
        'active': len(result.active_suggestions),
        'retired': len(result.retired),
        'notifications': len(result.notifications)
    })
    return result
