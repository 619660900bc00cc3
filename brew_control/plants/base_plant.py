"""
Base plant model abstract class.
Defines the interface for all process models driven by the session.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any

from brew_control.utils.validators import validate_time_step


class BasePlant(ABC):
    """
    Abstract base class for process models.
    
    Plants are pure: they hold only immutable parameters and map
    (value, control input, dt) to the next value. The session owns the
    process state.
    """
    
    @abstractmethod
    def rate(self, value: float, control_input: float) -> float:
        """
        Time derivative of the process variable.
        
        Args:
            value: Current process variable
            control_input: Actuator command
            
        Returns:
            d(value)/dt
        """
        pass
    
    @property
    @abstractmethod
    def initial_value(self) -> float:
        """Process variable a freshly reset session starts from."""
        pass
    
    def advance(self, value: float, control_input: float, dt: float) -> float:
        """
        Advance the process variable by one explicit Euler step.
        
        Args:
            value: Current process variable
            control_input: Actuator command held over the step
            dt: Step length in seconds
            
        Returns:
            Process variable after dt
        """
        return value + self.rate(value, control_input) * dt
    
    def simulate(self, value: float, control_input: float, dt: float, steps: int) -> float:
        """Run `steps` Euler steps with a constant control input."""
        dt = validate_time_step(dt)
        for _ in range(steps):
            value = self.advance(value, control_input, dt)
        return value
    
    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        """Get plant information/parameters."""
        pass
