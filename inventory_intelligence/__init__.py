from .config import config
from .logging_setup import logger, get_logger
from .exceptions import (
    IntelligenceError, ConfigError, ValidationError, ForecastError, AdjustmentError,
    SafetyStockError, RouteError, SuggestionError, LifecycleError, NotFoundError,
    BatchProcessError, ReportingError
)
from .batch.refresh_job import run_refresh

__all__ = [
    'config',
    'logger',
    'get_logger',
    'run_refresh',
    'IntelligenceError',
    'ConfigError',
    'ValidationError',
    'ForecastError',
    'AdjustmentError',
    'SafetyStockError',
    'RouteError',
    'SuggestionError',
    'LifecycleError',
    'NotFoundError',
    'BatchProcessError',
    'ReportingError'
]
