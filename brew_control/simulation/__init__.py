"""Simulation clock, sessions and batch runs."""

from brew_control.simulation.clock import SimulationClock, SimulationConfig, TickPlan, plan_tick
from brew_control.simulation.session import (
    BaseSession,
    SimulationSession,
    SessionState,
    TickSnapshot,
)
from brew_control.simulation.manual import ManualSession
from brew_control.simulation.scenarios import SimulationScenario, ScenarioLibrary, SetpointType
from brew_control.simulation.simulator import Simulator, SimulationResult

__all__ = [
    "SimulationClock",
    "SimulationConfig",
    "TickPlan",
    "plan_tick",
    "BaseSession",
    "SimulationSession",
    "SessionState",
    "TickSnapshot",
    "ManualSession",
    "SimulationScenario",
    "ScenarioLibrary",
    "SetpointType",
    "Simulator",
    "SimulationResult",
]
