"""Core PID controller components."""

from brew_control.core.pid_controller import PIDController, ControllerState, PIDState
from brew_control.core.pid_params import PIDParams, PIDPresets, AntiWindupMethod

__all__ = [
    "PIDController",
    "ControllerState",
    "PIDState",
    "PIDParams",
    "PIDPresets",
    "AntiWindupMethod",
]
