"""
Mathematical utility functions.
Uses numpy so that NaN propagates through clamping instead of being masked.
"""

from typing import Optional
import math
import numpy as np


def clamp(value: float, min_val: Optional[float], max_val: Optional[float]) -> float:
    """Clamp a value between minimum and maximum bounds."""
    if min_val is None and max_val is None:
        return value
    return float(np.clip(value, min_val, max_val))


def all_finite(*values: float) -> bool:
    """True when every value is a finite number."""
    return all(math.isfinite(v) for v in values)
