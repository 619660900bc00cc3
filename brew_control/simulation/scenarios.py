"""
Scripted operator behaviour for batch runs.
A scenario says how long to run, how fast, and what the operator asks for.
"""

from typing import Callable, Optional, List, Tuple
from dataclasses import dataclass
from enum import Enum

from brew_control.utils.validators import InvalidConfiguration, validate_positive


class SetpointType(Enum):
    """Types of setpoint profiles."""
    STEP = "step"
    STAIRCASE = "staircase"
    CUSTOM = "custom"


@dataclass
class SimulationScenario:
    """
    Defines a complete batch run.
    
    The setpoint is evaluated at the start of every tick, which is when an
    operator's change would be applied in an interactive session.
    """
    
    name: str
    duration: float
    speed_multiplier: float = 1.0
    
    # Setpoint configuration
    setpoint_type: SetpointType = SetpointType.STEP
    setpoint_initial: float = 72.0
    setpoint_final: float = 72.0
    setpoint_time: float = 0.0  # Time of the step change
    setpoint_steps: Optional[List[Tuple[float, float]]] = None  # (time, value) pairs
    setpoint_function: Optional[Callable[[float], float]] = None
    
    def __post_init__(self):
        validate_positive(self.duration, "duration")
        validate_positive(self.speed_multiplier, "speed_multiplier")
        if self.setpoint_type == SetpointType.STAIRCASE and not self.setpoint_steps:
            raise InvalidConfiguration("staircase scenario needs setpoint_steps")
        if self.setpoint_type == SetpointType.CUSTOM and self.setpoint_function is None:
            raise InvalidConfiguration("custom scenario needs setpoint_function")
    
    def get_setpoint(self, t: float) -> float:
        """
        Get setpoint value at time t.
        
        Args:
            t: Simulated time in seconds
            
        Returns:
            Setpoint in degC
        """
        if self.setpoint_type == SetpointType.CUSTOM:
            return self.setpoint_function(t)
        
        if self.setpoint_type == SetpointType.STAIRCASE:
            value = self.setpoint_initial
            for change_time, level in sorted(self.setpoint_steps):
                if t >= change_time:
                    value = level
            return value
        
        if t < self.setpoint_time:
            return self.setpoint_initial
        return self.setpoint_final


class ScenarioLibrary:
    """Scenarios used in the brewing lessons."""
    
    @staticmethod
    def brewing_step(
        setpoint: float = 72.0,
        duration: float = 60.0,
        speed_multiplier: float = 1.0
    ) -> SimulationScenario:
        """Cold vessel asked to reach brewing temperature."""
        return SimulationScenario(
            name=f"Heat to {setpoint:g} degC",
            duration=duration,
            speed_multiplier=speed_multiplier,
            setpoint_initial=setpoint,
            setpoint_final=setpoint,
        )
    
    @staticmethod
    def operator_change(
        initial: float = 72.0,
        final: float = 60.0,
        change_time: float = 1800.0,
        duration: float = 3600.0,
        speed_multiplier: float = 30.0
    ) -> SimulationScenario:
        """Operator lowers the target while the vessel is holding."""
        return SimulationScenario(
            name=f"Setpoint {initial:g} -> {final:g} degC at {change_time:g}s",
            duration=duration,
            speed_multiplier=speed_multiplier,
            setpoint_initial=initial,
            setpoint_final=final,
            setpoint_time=change_time,
        )
    
    @staticmethod
    def staged_infusion(
        stages: Optional[List[Tuple[float, float]]] = None,
        duration: float = 5400.0,
        speed_multiplier: float = 30.0
    ) -> SimulationScenario:
        """Several holding temperatures in sequence."""
        stages = stages or [(0.0, 50.0), (1800.0, 65.0), (3600.0, 75.0)]
        return SimulationScenario(
            name="Staged infusion",
            duration=duration,
            speed_multiplier=speed_multiplier,
            setpoint_type=SetpointType.STAIRCASE,
            setpoint_initial=stages[0][1],
            setpoint_steps=stages,
        )
