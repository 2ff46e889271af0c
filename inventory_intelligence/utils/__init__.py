from .date_utils import convert_to_date, convert_to_datetime, utc_now, month_day, add_days, trailing_window
from .math_utils import round_to_multiple, ceil_units, safe_divide
from .validation import validate_routes, validate_snapshot

__all__ = [
    'convert_to_date',
    'convert_to_datetime',
    'utc_now',
    'month_day',
    'add_days',
    'trailing_window',
    'round_to_multiple',
    'ceil_units',
    'safe_divide',
    'validate_routes',
    'validate_snapshot'
]
