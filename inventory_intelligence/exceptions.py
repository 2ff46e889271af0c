class IntelligenceError(Exception):
    """Base exception for inventory intelligence errors.

    Subclasses set ``default_message`` and ``default_code``; both can be
    overridden per instance.
    """

    default_message = "An error occurred in the inventory intelligence engine"
    default_code = "INTELLIGENCE_ERROR"

    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.

        Args:
            message: Error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        return f"[{self.code}] {self.message}"

    def to_dict(self):
        """Convert the exception to a dictionary."""
        error_dict = {
            'error': self.__class__.__name__,
            'code': self.code,
            'message': self.message,
        }
        if self.details:
            error_dict['details'] = self.details
        return error_dict


class ConfigError(IntelligenceError):
    """Invalid or inconsistent configuration."""
    default_message = "Configuration error"
    default_code = "CONFIG_INVALID"


class ValidationError(IntelligenceError):
    """Input record that breaks a data invariant."""
    default_message = "Validation error"
    default_code = "VALIDATION_FAILED"


class ForecastError(IntelligenceError):
    default_message = "Forecasting error"
    default_code = "FORECAST_FAILED"


class AdjustmentError(IntelligenceError):
    """Forecast adjustment that cannot be resolved."""
    default_message = "Forecast adjustment error"
    default_code = "ADJUSTMENT_INVALID"


class SafetyStockError(IntelligenceError):
    default_message = "Safety stock calculation error"
    default_code = "SAFETY_STOCK_FAILED"


class RouteError(IntelligenceError):
    """Shipping route data that breaks route selection."""
    default_message = "Shipping route error"
    default_code = "ROUTE_INVALID"


class SuggestionError(IntelligenceError):
    default_message = "Suggestion generation error"
    default_code = "SUGGESTION_FAILED"


class LifecycleError(IntelligenceError):
    """Disallowed suggestion status transition."""
    default_message = "Suggestion lifecycle error"
    default_code = "LIFECYCLE_INVALID"


class NotFoundError(IntelligenceError):
    default_message = "Resource not found"
    default_code = "NOT_FOUND"


class BatchProcessError(IntelligenceError):
    """Unexpected failure inside a batch run."""
    default_message = "Batch process error"
    default_code = "BATCH_FAILED"


class ReportingError(IntelligenceError):
    default_message = "Reporting error"
    default_code = "REPORTING_FAILED"
