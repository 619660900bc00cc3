"""
Simulation timing: configuration and the multi-rate sub-stepping policy.

Each display tick advances `base_time_step * speed_multiplier` seconds of
simulated time. Instead of one large Euler step, the tick is split into
`max(1, floor(speed_multiplier + 0.5))` sub-steps so every physics step stays close
to the base step and accuracy degrades gracefully with speed.
"""

from dataclasses import dataclass, asdict, replace
from typing import Dict, Any
import json
import math

from brew_control.utils.validators import (
    InvalidConfiguration,
    validate_positive,
    validate_range,
)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Timing and operating-range configuration of a session.
    
    Attributes:
        base_time_step: Physics step at 1x speed, seconds
        speed_multiplier: Simulated seconds per base step of wall time
        display_interval: Wall-clock seconds between ticks when paced
        history_capacity: Records kept in the in-memory window
        min_speed, max_speed: Accepted speed multiplier range
        min_setpoint, max_setpoint: Accepted setpoint range, degC
    """
    base_time_step: float = 0.1
    speed_multiplier: float = 1.0
    display_interval: float = 0.05
    history_capacity: int = 600
    min_speed: float = 0.1
    max_speed: float = 30.0
    min_setpoint: float = 25.0
    max_setpoint: float = 80.0
    
    def __post_init__(self):
        self._validate()
    
    def _validate(self) -> None:
        validate_positive(self.base_time_step, "base_time_step")
        validate_positive(self.display_interval, "display_interval")
        validate_positive(self.min_speed, "min_speed")
        if self.min_speed > self.max_speed:
            raise InvalidConfiguration("min_speed must not exceed max_speed")
        if self.min_setpoint > self.max_setpoint:
            raise InvalidConfiguration("min_setpoint must not exceed max_setpoint")
        self.validate_speed(self.speed_multiplier)
        if (isinstance(self.history_capacity, bool)
                or not isinstance(self.history_capacity, int)
                or self.history_capacity < 1):
            raise InvalidConfiguration(
                f"history_capacity must be a positive integer, got {self.history_capacity!r}"
            )
    
    def validate_speed(self, value: float) -> float:
        """Check a speed multiplier against this configuration's bounds."""
        validate_positive(value, "speed_multiplier")
        return validate_range(value, "speed_multiplier", self.min_speed, self.max_speed)
    
    def validate_setpoint(self, value: float) -> float:
        """Check a setpoint against this configuration's bounds."""
        return validate_range(value, "setpoint", self.min_setpoint, self.max_setpoint)
    
    def copy(self, **changes) -> 'SimulationConfig':
        return replace(self, **changes)
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise InvalidConfiguration(
                f"Unknown simulation settings: {', '.join(sorted(unknown))}"
            )
        return cls(**data)
    
    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
    
    @classmethod
    def from_json(cls, json_str: str) -> 'SimulationConfig':
        return cls.from_dict(json.loads(json_str))


@dataclass(frozen=True)
class TickPlan:
    """How one display tick is integrated."""
    num_sub_steps: int
    sub_step_dt: float
    
    @property
    def duration(self) -> float:
        """Simulated seconds covered by the tick."""
        return self.num_sub_steps * self.sub_step_dt


def plan_tick(base_time_step: float, speed_multiplier: float) -> TickPlan:
    """
    Sub-stepping policy for one display tick.
    
    Args:
        base_time_step: Physics step at 1x speed
        speed_multiplier: Requested speed
        
    Returns:
        TickPlan with max(1, floor(speed + 0.5)) sub-steps sharing the tick's
        simulated time equally
    """
    total = base_time_step * speed_multiplier
    # halves round up: 2.5x runs 3 sub-steps
    num_sub_steps = max(1, math.floor(speed_multiplier + 0.5))
    return TickPlan(num_sub_steps=num_sub_steps, sub_step_dt=total / num_sub_steps)


class SimulationClock:
    """
    Simulated-time bookkeeping for a session.
    
    The clock does not sleep or schedule anything; the session asks it for a
    plan, runs the sub-steps and reports the elapsed time back.
    """
    
    def __init__(self, base_time_step: float = 0.1, speed_multiplier: float = 1.0):
        self._base_time_step = validate_positive(base_time_step, "base_time_step")
        self._speed = validate_positive(speed_multiplier, "speed_multiplier")
        self._time = 0.0
        self._ticks = 0
    
    @property
    def time(self) -> float:
        """Simulated seconds since the last reset."""
        return self._time
    
    @property
    def ticks(self) -> int:
        """Display ticks completed since the last reset."""
        return self._ticks
    
    @property
    def base_time_step(self) -> float:
        return self._base_time_step
    
    @property
    def speed_multiplier(self) -> float:
        return self._speed
    
    @speed_multiplier.setter
    def speed_multiplier(self, value: float) -> None:
        self._speed = validate_positive(value, "speed_multiplier")
    
    def plan(self) -> TickPlan:
        """Plan for the next tick at the current speed."""
        return plan_tick(self._base_time_step, self._speed)
    
    def commit(self, new_time: float) -> None:
        """Record a completed tick that ended at `new_time`."""
        self._time = new_time
        self._ticks += 1
    
    def reset(self) -> None:
        self._time = 0.0
        self._ticks = 0
