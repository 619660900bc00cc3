"""
PID Controller Parameters Configuration.
Encapsulates the tunable gains and output range in a validated structure.
"""

from dataclasses import dataclass
from typing import Dict, Any
from enum import Enum
import json

from brew_control.utils.validators import (
    InvalidConfiguration,
    validate_non_negative,
    validate_real,
)


class AntiWindupMethod(Enum):
    """Anti-windup methods for the integral term."""
    NONE = "none"
    HEADROOM = "headroom"  # Integral limited to the range left over by P and D
    CONDITIONAL = "conditional"  # Integrate only while the output is unsaturated


@dataclass
class PIDParams:
    """
    PID Controller Parameters.
    
    Gains are configuration, not state: they survive a session reset and can
    be changed between ticks. The output range is the valve travel in percent.
    """
    
    # Core gains
    kp: float = 2.0  # Proportional gain
    ki: float = 0.15  # Integral gain
    kd: float = 0.05  # Derivative gain
    
    # Output limits (valve position, %)
    output_min: float = 0.0
    output_max: float = 100.0
    
    anti_windup: AntiWindupMethod = AntiWindupMethod.HEADROOM
    
    def __post_init__(self):
        """Validate parameters after initialization."""
        self._validate()
    
    def _validate(self) -> None:
        """Validate all parameters."""
        self.kp = validate_non_negative(self.kp, "kp")
        self.ki = validate_non_negative(self.ki, "ki")
        self.kd = validate_non_negative(self.kd, "kd")
        
        self.output_min = validate_real(self.output_min, "output_min")
        self.output_max = validate_real(self.output_max, "output_max")
        if self.output_min >= self.output_max:
            raise InvalidConfiguration("output_min must be less than output_max")
        
        if not isinstance(self.anti_windup, AntiWindupMethod):
            raise InvalidConfiguration(
                f"anti_windup must be an AntiWindupMethod, got {self.anti_windup!r}"
            )
    
    def copy(self, **changes) -> 'PIDParams':
        """
        Create a copy with optional parameter changes.
        
        Args:
            **changes: Parameters to override
            
        Returns:
            New PIDParams instance
        """
        params = {
            'kp': self.kp,
            'ki': self.ki,
            'kd': self.kd,
            'output_min': self.output_min,
            'output_max': self.output_max,
            'anti_windup': self.anti_windup,
        }
        params.update(changes)
        return PIDParams(**params)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'kp': self.kp,
            'ki': self.ki,
            'kd': self.kd,
            'output_min': self.output_min,
            'output_max': self.output_max,
            'anti_windup': self.anti_windup.value,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PIDParams':
        """Create from dictionary, accepting enum values as strings."""
        data = data.copy()
        if 'anti_windup' in data and isinstance(data['anti_windup'], str):
            try:
                data['anti_windup'] = AntiWindupMethod(data['anti_windup'])
            except ValueError:
                raise InvalidConfiguration(
                    f"Unknown anti_windup method: {data['anti_windup']!r}"
                )
        return cls(**data)
    
    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)
    
    @classmethod
    def from_json(cls, json_str: str) -> 'PIDParams':
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))
    
    def __str__(self) -> str:
        return (
            f"PIDParams(Kp={self.kp:.4f}, Ki={self.ki:.4f}, Kd={self.kd:.4f}, "
            f"limits=[{self.output_min}, {self.output_max}], "
            f"anti_windup={self.anti_windup.value})"
        )


# Preset configurations
class PIDPresets:
    """Gain sets used by the brewing lessons."""
    
    @staticmethod
    def brewing() -> PIDParams:
        """Default tuning for the 100 kg brewing vessel."""
        return PIDParams(kp=2.0, ki=0.15, kd=0.05)
    
    @staticmethod
    def classic() -> PIDParams:
        """Gentler tuning from the first version of the lesson."""
        return PIDParams(kp=1.0, ki=0.1, kd=0.05)
    
    @staticmethod
    def p_only() -> PIDParams:
        """Proportional only, shows the steady-state offset."""
        return PIDParams(kp=2.0, ki=0.0, kd=0.0)
    
    @staticmethod
    def unprotected() -> PIDParams:
        """Brewing gains without anti-windup, for the windup demonstration."""
        return PIDParams(kp=2.0, ki=0.15, kd=0.05, anti_windup=AntiWindupMethod.NONE)
