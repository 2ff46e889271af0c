from .forecast_service import ForecastService
from .suggestion_service import SuggestionService, rank_suggestions, calculate_recommended_qty
from .lifecycle_service import SuggestionLifecycleManager, ReconcileResult
from .reporting_service import ReportingService

__all__ = [
    'ForecastService',
    'SuggestionService',
    'rank_suggestions',
    'calculate_recommended_qty',
    'SuggestionLifecycleManager',
    'ReconcileResult',
    'ReportingService'
]
