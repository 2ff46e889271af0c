# inventory_intelligence/utils/math_utils.py
import math
from typing import Union

def round_to_multiple(value: float, multiple: float) -> float:
    """Round a value up to the nearest multiple.
    
    Args:
        value: Value to round
        multiple: Multiple to round to
        
    Returns:
        Rounded value
    """
    if multiple <= 0:
        return value
    
    return math.ceil(value / multiple) * multiple

def ceil_units(value: float) -> int:
    """Round a unit quantity up to a whole unit.

    Tolerates float noise such as 120.00000000000001 from rate arithmetic.
    """
    return int(math.ceil(round(value, 9)))

def safe_divide(numerator: float, denominator: float) -> Union[float, None]:
    """Divide, returning None when the denominator is not positive."""
    if denominator is None or denominator <= 0:
        return None
    return numerator / denominator
