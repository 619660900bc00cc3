"""
Headless batch simulation.
Runs a session through a scenario and keeps every tick, not just the
history window, for analysis and comparison of tunings.
"""

from typing import Dict, Any, List, Optional
from dataclasses import dataclass
import logging
import time

import numpy as np

from brew_control.core.pid_params import PIDParams
from brew_control.plants.thermal_process import ThermalProcessModel
from brew_control.simulation.clock import SimulationConfig
from brew_control.simulation.scenarios import SimulationScenario
from brew_control.simulation.session import SimulationSession
from brew_control.analyzer.metrics import PerformanceMetrics

_LOGGER = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """Container for simulation results, one entry per tick."""
    timestamps: np.ndarray
    setpoints: np.ndarray
    temperatures: np.ndarray
    commands: np.ndarray
    errors: np.ndarray
    p_terms: np.ndarray
    i_terms: np.ndarray
    d_terms: np.ndarray
    
    # Metadata
    scenario_name: str = ""
    controller_params: Optional[Dict[str, Any]] = None
    plant_info: Optional[Dict[str, Any]] = None
    execution_time: float = 0.0
    
    def to_dict(self) -> Dict[str, np.ndarray]:
        """Convert to dictionary format."""
        return {
            'time': self.timestamps,
            'setpoint': self.setpoints,
            'temperature': self.temperatures,
            'actuator': self.commands,
            'error': self.errors,
            'p_term': self.p_terms,
            'i_term': self.i_terms,
            'd_term': self.d_terms,
        }
    
    def __len__(self) -> int:
        return len(self.timestamps)


class Simulator:
    """
    Batch simulation engine.
    
    Example:
        >>> sim = Simulator(PIDParams(kp=2.0, ki=0.15, kd=0.05))
        >>> result = sim.run(ScenarioLibrary.brewing_step(duration=600.0, speed_multiplier=10))
        >>> sim.analyze(result)['step_response']['overshoot_percent']
    """
    
    def __init__(
        self,
        pid_params: Optional[PIDParams] = None,
        model: Optional[ThermalProcessModel] = None,
        config: Optional[SimulationConfig] = None
    ):
        self._params = pid_params or PIDParams()
        self._model = model or ThermalProcessModel()
        self._config = config or SimulationConfig()
        self._results: List[SimulationResult] = []
    
    def run(self, scenario: SimulationScenario) -> SimulationResult:
        """
        Run a scenario from a cold (ambient) vessel.
        
        Args:
            scenario: Simulation scenario to run
            
        Returns:
            SimulationResult containing every tick
        """
        start_time = time.perf_counter()
        config = self._config.copy(speed_multiplier=scenario.speed_multiplier)
        session = SimulationSession(
            params=self._params,
            model=self._model,
            config=config,
            setpoint=scenario.get_setpoint(0.0),
        )
        
        rows = []
        session.start()
        while session.time < scenario.duration - 1e-9:
            session.configure(setpoint=scenario.get_setpoint(session.time))
            snap = session.tick()
            terms = session.controller.last_step
            rows.append((
                snap.time, snap.setpoint, snap.temperature, snap.command,
                terms.error, terms.p_term, terms.i_term, terms.d_term,
            ))
        session.stop()
        
        data = np.array(rows, dtype=float).reshape(-1, 8)
        result = SimulationResult(
            timestamps=data[:, 0],
            setpoints=data[:, 1],
            temperatures=data[:, 2],
            commands=data[:, 3],
            errors=data[:, 4],
            p_terms=data[:, 5],
            i_terms=data[:, 6],
            d_terms=data[:, 7],
            scenario_name=scenario.name,
            controller_params=self._params.to_dict(),
            plant_info=self._model.get_info(),
            execution_time=time.perf_counter() - start_time,
        )
        _LOGGER.info(
            "Scenario %r: %d ticks in %.3fs", scenario.name, len(result), result.execution_time
        )
        self._results.append(result)
        return result
    
    def run_comparison(
        self,
        scenario: SimulationScenario,
        param_sets: Dict[str, PIDParams]
    ) -> Dict[str, SimulationResult]:
        """
        Run the same scenario with several tunings.
        
        Args:
            scenario: Simulation scenario
            param_sets: Dictionary mapping names to parameter sets
            
        Returns:
            Dictionary mapping names to results
        """
        original = self._params
        results = {}
        try:
            for name, params in param_sets.items():
                self._params = params
                result = self.run(scenario)
                result.scenario_name = f"{scenario.name} - {name}"
                results[name] = result
        finally:
            self._params = original
        return results
    
    def analyze(self, result: SimulationResult) -> Dict[str, Any]:
        """Performance metrics of a result."""
        return PerformanceMetrics().calculate_all_metrics(
            result.timestamps,
            result.setpoints,
            result.temperatures,
            result.commands,
            output_limits=(self._params.output_min, self._params.output_max),
        )
    
    def set_params(self, params: PIDParams) -> None:
        self._params = params
    
    @property
    def results(self) -> List[SimulationResult]:
        return self._results
    
    @property
    def last_result(self) -> Optional[SimulationResult]:
        return self._results[-1] if self._results else None
    
    def clear_results(self) -> None:
        self._results.clear()
