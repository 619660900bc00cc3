"""Process models for the simulation core."""

from brew_control.plants.base_plant import BasePlant
from brew_control.plants.thermal_process import (
    ThermalProcessModel,
    ProcessParameters,
    ProcessPresets,
)

__all__ = [
    "BasePlant",
    "ThermalProcessModel",
    "ProcessParameters",
    "ProcessPresets",
]
