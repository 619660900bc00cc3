"""
Discrete-time PID controller for the steam valve.

Features:
- Proportional, Integral, Derivative control on the error signal
- Headroom-based anti-windup (integral only fills what P and D leave over)
- Legacy conditional-integration anti-windup for comparison
- Hard output clamp to the valve range
- Per-step diagnostics of every term
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass, asdict

from brew_control.core.pid_params import PIDParams, AntiWindupMethod
from brew_control.utils.math_utils import clamp
from brew_control.utils.validators import validate_time_step


@dataclass
class ControllerState:
    """Mutable controller memory carried from one sub-step to the next."""
    integral_accumulator: float = 0.0
    last_error: float = 0.0
    
    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class PIDState:
    """Diagnostics of the most recent controller step."""
    setpoint: float = 0.0
    measurement: float = 0.0
    error: float = 0.0
    
    # Component outputs
    p_term: float = 0.0
    i_term: float = 0.0
    d_term: float = 0.0
    
    # Pre/post saturation output
    output_unsat: float = 0.0
    output: float = 0.0
    
    anti_windup_active: bool = False
    saturated: bool = False
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary."""
        return asdict(self)


class PIDController:
    """
    PID controller producing a valve command in [output_min, output_max].
    
    The controller has no state machine: it is an accumulator updated once
    per sub-step through compute_command().
    
    Example:
        >>> pid = PIDController(PIDParams(kp=2.0, ki=0.15, kd=0.05))
        >>> valve = pid.compute_command(setpoint=72.0, measurement=25.0, dt=0.1)
    """
    
    def __init__(
        self,
        params: Optional[PIDParams] = None,
        state: Optional[ControllerState] = None
    ):
        """
        Initialize PID controller.
        
        Args:
            params: PID parameters (uses defaults if None)
            state: Initial controller memory (zeroed if None)
        """
        self._params = params if params is not None else PIDParams()
        self._state = state if state is not None else ControllerState()
        self._last = PIDState()
    
    @property
    def params(self) -> PIDParams:
        """Get current parameters."""
        return self._params
    
    @property
    def state(self) -> ControllerState:
        """Get controller memory."""
        return self._state
    
    @property
    def last_step(self) -> PIDState:
        """Diagnostics of the most recent step."""
        return self._last
    
    @property
    def output(self) -> float:
        """Most recent command."""
        return self._last.output
    
    @property
    def integral(self) -> float:
        """Current integral accumulator."""
        return self._state.integral_accumulator
    
    def compute_command(self, setpoint: float, measurement: float, dt: float) -> float:
        """
        Compute the actuator command for one sub-step.
        
        Args:
            setpoint: Desired temperature
            measurement: Measured temperature
            dt: Sub-step length in seconds, must be positive
            
        Returns:
            Command clamped to the output range
            
        Raises:
            InvalidArgument: If dt is not positive
        """
        dt = validate_time_step(dt)
        p = self._params
        lo, hi = p.output_min, p.output_max
        
        error = setpoint - measurement
        p_term = p.kp * error
        d_term = p.kd * (error - self._state.last_error) / dt
        
        integral = self._state.integral_accumulator
        candidate = integral + p.ki * error * dt
        
        if p.anti_windup == AntiWindupMethod.HEADROOM:
            integral = clamp(candidate, lo - (p_term + d_term), hi - (p_term + d_term))
            i_term = integral
        elif p.anti_windup == AntiWindupMethod.CONDITIONAL:
            # The output always uses the candidate; it is only committed
            # while the previous integral kept the output inside the range.
            prelim = p_term + integral + d_term
            if lo < prelim < hi:
                integral = candidate
            i_term = candidate
        else:
            integral = candidate
            i_term = integral
        
        output_unsat = p_term + i_term + d_term
        output = clamp(output_unsat, lo, hi)
        
        self._state.integral_accumulator = integral
        self._state.last_error = error
        self._last = PIDState(
            setpoint=setpoint,
            measurement=measurement,
            error=error,
            p_term=p_term,
            i_term=i_term,
            d_term=d_term,
            output_unsat=output_unsat,
            output=output,
            anti_windup_active=(
                p.anti_windup != AntiWindupMethod.NONE and candidate != integral
            ),
            saturated=output != output_unsat,
        )
        return output
    
    def set_params(self, params: PIDParams) -> None:
        """Replace the parameters; controller memory is kept."""
        self._params = params
    
    def set_gains(
        self,
        kp: Optional[float] = None,
        ki: Optional[float] = None,
        kd: Optional[float] = None
    ) -> None:
        """
        Update individual gains.
        
        Args:
            kp: New proportional gain (None to keep current)
            ki: New integral gain (None to keep current)
            kd: New derivative gain (None to keep current)
        """
        self._params = self._params.copy(
            kp=kp if kp is not None else self._params.kp,
            ki=ki if ki is not None else self._params.ki,
            kd=kd if kd is not None else self._params.kd
        )
    
    def snapshot_state(self) -> ControllerState:
        """Copy of the controller memory."""
        return ControllerState(**self._state.to_dict())

    def restore_state(self, state: ControllerState, last_step: Optional[PIDState] = None) -> None:
        """
        Roll the controller memory back to an earlier snapshot.
        
        Args:
            state: Memory from snapshot_state()
            last_step: Diagnostics taken with the snapshot; when given,
                last_step and output report that step again
        """
        self._state = ControllerState(**state.to_dict())
        if last_step is not None:
            self._last = last_step

    def reset(self) -> None:
        """Zero the integral accumulator and last error."""
        self._state = ControllerState()
        self._last = PIDState()
    
    def __repr__(self) -> str:
        return f"PIDController({self._params})"
