"""
Brewing Temperature Control Simulator
=====================================

The simulation core behind the control-theory lessons:
- Discrete-time PID controller with headroom anti-windup
- Nonlinear steam-heated vessel model
- Multi-rate sub-stepping for fast-forward without losing accuracy
- Bounded history window with diff-stable CSV export
- Session state machine for interactive and batch use
"""

from brew_control.core.pid_controller import PIDController
from brew_control.core.pid_params import PIDParams, PIDPresets, AntiWindupMethod
from brew_control.plants.thermal_process import (
    ThermalProcessModel,
    ProcessParameters,
    ProcessPresets,
)
from brew_control.history.buffer import HistoryBuffer, HistoryRecord
from brew_control.simulation.clock import SimulationClock, SimulationConfig
from brew_control.simulation.session import SimulationSession, SessionState
from brew_control.simulation.manual import ManualSession
from brew_control.simulation.simulator import Simulator
from brew_control.utils.validators import (
    InvalidConfiguration,
    InvalidArgument,
    NumericDivergence,
)

__version__ = "1.0.0"
__all__ = [
    "PIDController",
    "PIDParams",
    "PIDPresets",
    "AntiWindupMethod",
    "ThermalProcessModel",
    "ProcessParameters",
    "ProcessPresets",
    "HistoryBuffer",
    "HistoryRecord",
    "SimulationClock",
    "SimulationConfig",
    "SimulationSession",
    "SessionState",
    "ManualSession",
    "Simulator",
    "InvalidConfiguration",
    "InvalidArgument",
    "NumericDivergence",
]
