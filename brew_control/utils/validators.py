"""
Validation utilities and the error taxonomy for the simulation core.
Configuration is rejected at the boundary with clear messages; runtime faults
get their own exception types.
"""

from typing import Optional
import math
import numbers


class InvalidConfiguration(ValueError):
    """Raised when a configuration value is outside its accepted domain."""
    pass


class InvalidArgument(ValueError):
    """Raised when an operation receives an argument it cannot work with."""
    pass


class NumericDivergence(ArithmeticError):
    """Raised when the simulated state stops being finite."""
    pass


def validate_real(value: float, name: str) -> float:
    """
    Validate that a value is a finite real number.
    
    Args:
        value: The value to validate
        name: Parameter name for error messages
        
    Returns:
        The validated value as float
        
    Raises:
        InvalidConfiguration: If value is not a finite real
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfiguration(
            f"{name} must be a real number, got {type(value).__name__}"
        )
    value = float(value)
    if not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be finite, got {value}")
    return value


def validate_positive(value: float, name: str) -> float:
    """
    Validate that a value is strictly positive.
    
    Raises:
        InvalidConfiguration: If value is not positive
    """
    value = validate_real(value, name)
    if value <= 0:
        raise InvalidConfiguration(f"{name} must be positive, got {value}")
    return value


def validate_non_negative(value: float, name: str) -> float:
    """
    Validate that a value is non-negative (>= 0).
    
    Raises:
        InvalidConfiguration: If value is negative
    """
    value = validate_real(value, name)
    if value < 0:
        raise InvalidConfiguration(f"{name} must be non-negative, got {value}")
    return value


def validate_range(
    value: float,
    name: str,
    min_val: Optional[float] = None,
    max_val: Optional[float] = None,
    inclusive: bool = True
) -> float:
    """
    Validate that a value falls within a specified range.
    
    Args:
        value: The value to validate
        name: Parameter name for error messages
        min_val: Minimum allowed value (None for no lower bound)
        max_val: Maximum allowed value (None for no upper bound)
        inclusive: Whether bounds are inclusive
        
    Returns:
        The validated value
        
    Raises:
        InvalidConfiguration: If value is outside the range
    """
    value = validate_real(value, name)
    
    if min_val is not None:
        if inclusive and value < min_val:
            raise InvalidConfiguration(f"{name} must be >= {min_val}, got {value}")
        elif not inclusive and value <= min_val:
            raise InvalidConfiguration(f"{name} must be > {min_val}, got {value}")
    
    if max_val is not None:
        if inclusive and value > max_val:
            raise InvalidConfiguration(f"{name} must be <= {max_val}, got {value}")
        elif not inclusive and value >= max_val:
            raise InvalidConfiguration(f"{name} must be < {max_val}, got {value}")
    
    return value


def validate_time_step(dt: float, name: str = "dt") -> float:
    """
    Validate a per-call integration step.
    
    Unlike configuration checks this guards an operation, so it raises
    InvalidArgument.
    """
    if isinstance(dt, bool) or not isinstance(dt, numbers.Real):
        raise InvalidArgument(f"{name} must be a real number, got {type(dt).__name__}")
    if not dt > 0:
        raise InvalidArgument(f"{name} must be positive, got {dt}")
    return float(dt)
