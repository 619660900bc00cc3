"""Utility functions and helpers."""

from brew_control.utils.validators import (
    InvalidConfiguration,
    InvalidArgument,
    NumericDivergence,
    validate_real,
    validate_positive,
    validate_non_negative,
    validate_range,
    validate_time_step,
)
from brew_control.utils.math_utils import clamp, all_finite

__all__ = [
    "InvalidConfiguration",
    "InvalidArgument",
    "NumericDivergence",
    "validate_real",
    "validate_positive",
    "validate_non_negative",
    "validate_range",
    "validate_time_step",
    "clamp",
    "all_finite",
]
