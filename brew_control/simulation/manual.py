"""
Manual valve operation.

The operator drives the steam valve directly and is scored on how well the
kettle is held at the target: the score starts at 100 and drains while the
temperature is away from the target.
"""

from typing import Optional

from brew_control.history.buffer import HistoryRecord
from brew_control.plants.thermal_process import ProcessPresets, ThermalProcessModel
from brew_control.simulation.clock import SimulationConfig, TickPlan
from brew_control.simulation.session import BaseSession
from brew_control.utils.validators import validate_range

FAR_BAND = 5.0  # degC
NEAR_BAND = 2.0  # degC
FAR_PENALTY = 0.1
NEAR_PENALTY = 0.05
MAX_SCORE = 100.0

FEEDBACK_FAR = "Temperature is far from target - adjust the valve!"
FEEDBACK_NEAR = "Getting closer, but needs fine-tuning"
FEEDBACK_GOOD = "Good control! Maintaining temperature well"


def manual_config() -> SimulationConfig:
    """Timing of the hands-on exercise: 10 Hz ticks, 30 s window."""
    return SimulationConfig(display_interval=0.1, history_capacity=300)


class ManualSession(BaseSession):
    """
    Open-loop session where configure(valve=...) sets the actuator.
    
    Example:
        >>> session = ManualSession()
        >>> session.configure(valve=40.0)
        >>> session.step(50)
        >>> session.score, session.feedback
    """
    
    # The target stays where the session was created
    OPTIONS = {
        'speed_multiplier': BaseSession.OPTIONS['speed_multiplier'],
        'valve': '_check_valve',
    }
    
    def __init__(
        self,
        model: Optional[ThermalProcessModel] = None,
        config: Optional[SimulationConfig] = None,
        setpoint: float = 72.0,
        valve: float = 0.0,
        log_path: Optional[str] = None
    ):
        super().__init__(
            model=model if model is not None else ThermalProcessModel(ProcessPresets.manual_kettle()),
            config=config if config is not None else manual_config(),
            setpoint=setpoint,
            log_path=log_path,
        )
        self._valve = self._check_valve(valve, 'valve')
        self._score = MAX_SCORE
        self._feedback = ''
    
    @property
    def valve(self) -> float:
        return self._valve
    
    @property
    def score(self) -> float:
        return self._score
    
    @property
    def feedback(self) -> str:
        return self._feedback
    
    def _check_valve(self, value: float, name: str) -> float:
        return validate_range(value, name, 0.0, 100.0)
    
    def _command(self, setpoint: float, temperature: float, dt: float) -> float:
        return self._valve
    
    def _apply_actuator_option(self, name: str, value: float) -> None:
        self._valve = value
    
    def _save_actuator(self):
        return (self._score, self._feedback)
    
    def _restore_actuator(self, saved) -> None:
        self._score, self._feedback = saved
    
    def _reset_actuator(self) -> None:
        self._score = MAX_SCORE
        self._feedback = ''
    
    def _after_tick(self, record: HistoryRecord, plan: TickPlan) -> None:
        error = abs(record.setpoint - record.temperature)
        if error > FAR_BAND:
            self._score = max(0.0, self._score - FAR_PENALTY)
            self._feedback = FEEDBACK_FAR
        elif error > NEAR_BAND:
            self._score = max(0.0, self._score - NEAR_PENALTY)
            self._feedback = FEEDBACK_NEAR
        else:
            self._feedback = FEEDBACK_GOOD
    
    def __repr__(self) -> str:
        return (
            f"ManualSession(state={self._state.value}, t={self.time:.2f}, "
            f"T={self._temperature:.2f}, valve={self._valve:.1f}, score={self._score:.2f})"
        )
