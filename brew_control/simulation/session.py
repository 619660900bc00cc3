"""
Closed-loop simulation session.

A session owns the process state, the controller memory, the clock and the
history window, and drives them one display tick at a time:

    IDLE --start--> RUNNING --stop/pause--> PAUSED --start--> RUNNING
    any  --reset--> IDLE
    RUNNING --non-finite state--> FAULTED

Within a tick every sub-step runs synchronously on local copies; the new
state is published only after the whole tick succeeded, so observers never
see a partially stepped session.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum
import logging
import time

from brew_control.core.pid_controller import PIDController
from brew_control.core.pid_params import PIDParams
from brew_control.history.buffer import HistoryBuffer, HistoryRecord
from brew_control.history.csv_logger import CSVLogger
from brew_control.plants.thermal_process import ThermalProcessModel
from brew_control.simulation.clock import SimulationClock, SimulationConfig, TickPlan
from brew_control.utils.math_utils import all_finite
from brew_control.utils.validators import (
    InvalidConfiguration,
    NumericDivergence,
    validate_non_negative,
)

_LOGGER = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states of a session."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FAULTED = "faulted"


@dataclass(frozen=True)
class TickSnapshot:
    """What observers see after a tick: latest values plus the history window."""
    time: float
    setpoint: float
    temperature: float
    command: float
    state: SessionState
    history: Tuple[HistoryRecord, ...] = ()
    
    def as_tuple(self) -> Tuple[float, float, float, float]:
        """(time, setpoint, temperature, command)"""
        return (self.time, self.setpoint, self.temperature, self.command)


Observer = Callable[[TickSnapshot], Any]


class BaseSession:
    """
    Shared orchestration for closed-loop and manual sessions.
    
    Subclasses decide where the actuator command comes from by implementing
    _command(), and which options configure() accepts.
    """
    
    #: Options accepted by configure(), mapped to their validator method names.
    OPTIONS: Dict[str, str] = {
        'setpoint': '_check_setpoint',
        'speed_multiplier': '_check_speed',
    }
    
    def __init__(
        self,
        model: Optional[ThermalProcessModel] = None,
        config: Optional[SimulationConfig] = None,
        setpoint: float = 72.0,
        log_path: Optional[str] = None
    ):
        """
        Initialize session.
        
        Args:
            model: Process model (brewing vessel if None)
            config: Timing and range configuration
            setpoint: Initial target temperature
            log_path: Optional CSV file receiving every tick record
        """
        self._model = model if model is not None else ThermalProcessModel()
        self._config = config if config is not None else SimulationConfig()
        self._setpoint = self._config.validate_setpoint(setpoint)
        
        self._clock = SimulationClock(
            self._config.base_time_step, self._config.speed_multiplier
        )
        self._history = HistoryBuffer(self._config.history_capacity)
        self._logger: Optional[CSVLogger] = CSVLogger(log_path) if log_path else None
        
        self._state = SessionState.IDLE
        self._temperature = self._model.initial_value
        self._command_value = 0.0
        self._pending: Dict[str, float] = {}
        self._observers: List[Observer] = []
        self._fault: Optional[str] = None
    
    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    
    @property
    def state(self) -> SessionState:
        return self._state
    
    @property
    def is_running(self) -> bool:
        return self._state == SessionState.RUNNING
    
    @property
    def model(self) -> ThermalProcessModel:
        return self._model
    
    @property
    def config(self) -> SimulationConfig:
        return self._config
    
    @property
    def clock(self) -> SimulationClock:
        return self._clock
    
    @property
    def history(self) -> HistoryBuffer:
        return self._history
    
    @property
    def temperature(self) -> float:
        return self._temperature
    
    @property
    def time(self) -> float:
        return self._clock.time
    
    @property
    def setpoint(self) -> float:
        return self._setpoint
    
    @property
    def speed_multiplier(self) -> float:
        return self._clock.speed_multiplier
    
    @property
    def command(self) -> float:
        """Actuator command applied during the last tick."""
        return self._command_value
    
    @property
    def pending(self) -> Dict[str, float]:
        """Configuration queued for the next tick."""
        return dict(self._pending)
    
    @property
    def fault(self) -> Optional[str]:
        """Diagnostic of the divergence that faulted the session, if any."""
        return self._fault
    
    def snapshot(self) -> TickSnapshot:
        """Consistent view of the session between ticks."""
        return TickSnapshot(
            time=self._clock.time,
            setpoint=self._setpoint,
            temperature=self._temperature,
            command=self._command_value,
            state=self._state,
            history=self._history.export(),
        )
    
    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    
    def add_observer(self, callback: Observer) -> None:
        """Register a callback receiving a TickSnapshot after each tick."""
        if not callable(callback):
            raise InvalidConfiguration("observer must be callable")
        self._observers.append(callback)
    
    def remove_observer(self, callback: Observer) -> None:
        self._observers.remove(callback)
    
    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    
    def start(self) -> None:
        """Begin (or resume) stepping. No-op when already running."""
        if self._state == SessionState.RUNNING:
            return
        if self._state == SessionState.FAULTED:
            raise NumericDivergence(f"session faulted, reset first: {self._fault}")
        _LOGGER.debug("Session %s -> running at t=%.2f", self._state.value, self.time)
        self._state = SessionState.RUNNING
    
    def stop(self) -> None:
        """Stop stepping; all state is preserved."""
        if self._state != SessionState.RUNNING:
            return
        self._apply_options(self._pending)
        self._pending = {}
        self._state = SessionState.PAUSED
        _LOGGER.debug("Session paused at t=%.2f", self.time)
    
    def pause(self) -> None:
        """Alias of stop()."""
        self.stop()
    
    def reset(self) -> None:
        """
        Return to IDLE with the process at ambient, the controller zeroed,
        the history empty and the time at 0. Configuration survives.
        
        An open CSV log is truncated so the file only ever holds one
        time-ordered run.
        """
        self._apply_options(self._pending)
        self._pending = {}
        self._state = SessionState.IDLE
        self._temperature = self._model.initial_value
        self._command_value = 0.0
        self._fault = None
        self._clock.reset()
        self._history.clear()
        self._reset_actuator()
        if self._logger is not None and not self._logger.closed:
            path = self._logger.file_path
            self._logger.close()
            self._logger = CSVLogger(path)
            _LOGGER.debug("Restarted tick log %s", path)
        _LOGGER.debug("Session reset to %.2f degC", self._temperature)
    
    def close(self) -> None:
        """Stop and release the CSV log, if any."""
        self.stop()
        if self._logger is not None:
            self._logger.close()
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
    
    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    
    def configure(self, **options: float) -> None:
        """
        Change configuration in any state.
        
        Every option is validated before anything is applied; a rejected
        call leaves the session unchanged. While running, the change is
        queued and takes effect before the first sub-step of the next tick.
        
        Raises:
            InvalidConfiguration: Unknown option or value out of range
        """
        unknown = set(options) - set(self.OPTIONS)
        if unknown:
            raise InvalidConfiguration(
                f"Unknown option(s) {', '.join(sorted(unknown))}; "
                f"expected {', '.join(sorted(self.OPTIONS))}"
            )
        validated = {
            name: getattr(self, self.OPTIONS[name])(value, name)
            for name, value in options.items()
        }
        if self._state == SessionState.RUNNING:
            self._pending.update(validated)
        else:
            self._apply_options(validated)
    
    def _check_setpoint(self, value: float, name: str) -> float:
        return self._config.validate_setpoint(value)
    
    def _check_speed(self, value: float, name: str) -> float:
        return self._config.validate_speed(value)
    
    def _apply_options(self, options: Dict[str, float]) -> None:
        for name, value in options.items():
            if name == 'setpoint':
                self._setpoint = value
            elif name == 'speed_multiplier':
                self._clock.speed_multiplier = value
                self._config = self._config.copy(speed_multiplier=value)
            else:
                self._apply_actuator_option(name, value)
    
    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    
    def tick(self) -> Optional[TickSnapshot]:
        """
        Advance one display tick.
        
        Returns:
            The published snapshot, or None when the session is not running
            
        Raises:
            NumericDivergence: If the tick produced a non-finite state; the
                session is FAULTED and nothing from the tick is kept
        """
        if self._state != SessionState.RUNNING:
            return None
        
        if self._pending:
            self._apply_options(self._pending)
            self._pending = {}
        
        plan = self._clock.plan()
        rollback = self._save_actuator()
        
        temperature = self._temperature
        command = self._command_value
        t = self._clock.time
        setpoint = self._setpoint
        for _ in range(plan.num_sub_steps):
            command = self._command(setpoint, temperature, plan.sub_step_dt)
            temperature = self._model.advance(temperature, command, plan.sub_step_dt)
            t += plan.sub_step_dt
        
        if not all_finite(temperature, command, t):
            self._restore_actuator(rollback)
            self._fault = (
                f"non-finite state at t={t}: temperature={temperature}, "
                f"command={command} (speed {plan.num_sub_steps} x {plan.sub_step_dt}s)"
            )
            self._state = SessionState.FAULTED
            _LOGGER.error("Simulation diverged: %s", self._fault)
            raise NumericDivergence(self._fault)
        
        self._temperature = temperature
        self._command_value = command
        self._clock.commit(t)
        record = HistoryRecord(
            time=t, setpoint=setpoint, temperature=temperature, actuator=command
        )
        self._history.append(record)
        if self._logger is not None:
            self._logger.log(record)
        self._after_tick(record, plan)
        
        snapshot = self.snapshot()
        for observer in list(self._observers):
            observer(snapshot)
        return snapshot
    
    def step(self, ticks: int = 1) -> TickSnapshot:
        """
        Start if needed and run `ticks` ticks synchronously.
        
        Stops early if an observer stops the session.
        """
        if ticks < 1:
            raise InvalidConfiguration(f"ticks must be at least 1, got {ticks}")
        self.start()
        for _ in range(ticks):
            if self.tick() is None:
                break
        return self.snapshot()
    
    def run(
        self,
        duration: Optional[float] = None,
        max_ticks: Optional[int] = None,
        realtime: bool = False,
        sleep: Optional[Callable[[float], Any]] = None
    ) -> int:
        """
        Repeating-timer loop.
        
        Ticks until `duration` simulated seconds have elapsed, `max_ticks`
        ticks have run, or the session is stopped (for example by an
        observer). With `realtime` each tick is paced to the display
        interval, sleeping with `sleep` (time.sleep when omitted).
        
        Returns:
            Number of ticks run
        """
        if duration is None and max_ticks is None:
            raise InvalidConfiguration("run() needs a duration or max_ticks")
        if sleep is None:
            sleep = time.sleep
        end_time = None
        if duration is not None:
            end_time = self.time + validate_non_negative(duration, "duration")
        
        self.start()
        count = 0
        next_due = time.monotonic()
        while self._state == SessionState.RUNNING:
            if end_time is not None and self.time >= end_time - 1e-9:
                break
            if max_ticks is not None and count >= max_ticks:
                break
            self.tick()
            count += 1
            if realtime:
                next_due += self._config.display_interval
                delay = next_due - time.monotonic()
                if delay > 0:
                    sleep(delay)
        return count
    
    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------
    
    def _command(self, setpoint: float, temperature: float, dt: float) -> float:
        raise NotImplementedError
    
    def _save_actuator(self) -> Any:
        return None
    
    def _restore_actuator(self, saved: Any) -> None:
        pass
    
    def _reset_actuator(self) -> None:
        pass
    
    def _apply_actuator_option(self, name: str, value: float) -> None:
        raise InvalidConfiguration(f"Unknown option {name}")
    
    def _after_tick(self, record: HistoryRecord, plan: TickPlan) -> None:
        pass


class SimulationSession(BaseSession):
    """
    PID-controlled brewing session.
    
    Example:
        >>> session = SimulationSession(params=PIDParams(kp=2.0, ki=0.15, kd=0.05))
        >>> session.configure(setpoint=72.0)
        >>> session.step(600)
        >>> session.history.write_csv("exports/")
    """
    
    OPTIONS = dict(
        BaseSession.OPTIONS,
        kp='_check_gain',
        ki='_check_gain',
        kd='_check_gain',
    )
    
    def __init__(
        self,
        params: Optional[PIDParams] = None,
        model: Optional[ThermalProcessModel] = None,
        config: Optional[SimulationConfig] = None,
        setpoint: float = 72.0,
        log_path: Optional[str] = None
    ):
        super().__init__(model=model, config=config, setpoint=setpoint, log_path=log_path)
        self._controller = PIDController(params)
    
    @property
    def controller(self) -> PIDController:
        return self._controller
    
    @property
    def params(self) -> PIDParams:
        return self._controller.params
    
    @property
    def integral(self) -> float:
        return self._controller.integral
    
    def _check_gain(self, value: float, name: str) -> float:
        return validate_non_negative(value, name)
    
    def _command(self, setpoint: float, temperature: float, dt: float) -> float:
        return self._controller.compute_command(setpoint, temperature, dt)
    
    def _save_actuator(self):
        return (self._controller.snapshot_state(), self._controller.last_step)
    
    def _restore_actuator(self, saved) -> None:
        state, last_step = saved
        self._controller.restore_state(state, last_step)
    
    def _reset_actuator(self) -> None:
        self._controller.reset()
    
    def _apply_actuator_option(self, name: str, value: float) -> None:
        self._controller.set_gains(**{name: value})
    
    def __repr__(self) -> str:
        return (
            f"SimulationSession(state={self._state.value}, t={self.time:.2f}, "
            f"T={self._temperature:.2f}, {self._controller.params})"
        )
