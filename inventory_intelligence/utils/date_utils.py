# inventory_intelligence/utils/date_utils.py
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union

def convert_to_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    """Convert a date-like value to a date.
    
    Args:
        value: date, datetime or ISO formatted string (YYYY-MM-DD or full timestamp)
        
    Returns:
        date or None when value is None
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Cannot convert {value!r} to a date")

def convert_to_datetime(value: Union[datetime, date, str, None]) -> Optional[datetime]:
    """Convert a datetime-like value to a naive UTC datetime.
    
    Plain dates are interpreted as midnight. Offset-aware values are shifted
    to UTC and their offset dropped; naive values are taken as UTC already.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise ValueError(f"Cannot convert {value!r} to a datetime")

def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def month_day(value: date) -> Tuple[int, int]:
    """Month/day portion of a date, comparable across years."""
    return (value.month, value.day)

def add_days(start: date, days: Union[int, float]) -> date:
    """Add a (possibly fractional) number of whole days to a date."""
    return start + timedelta(days=int(days))

def trailing_window(end_exclusive: date, days: int) -> List[date]:
    """Get the calendar days of a trailing window.
    
    Args:
        end_exclusive: First day after the window (usually the run date)
        days: Window length in days
        
    Returns:
        Dates in ascending order, oldest first
    """
    return [end_exclusive - timedelta(days=offset) for offset in range(days, 0, -1)]
