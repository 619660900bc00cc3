"""
Performance metrics of a temperature response.
Uses numpy for vectorized calculations over history columns.
"""

from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass, asdict
import numpy as np


@dataclass
class StepResponseMetrics:
    """Metrics from step response analysis."""
    rise_time: float
    settling_time_2pct: float
    settling_time_5pct: float
    overshoot_percent: float
    overshoot: float  # degC above the final setpoint
    peak_time: float
    peak_value: float
    steady_state_value: float
    steady_state_error: float
    
    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class ErrorMetrics:
    """Error-based performance metrics."""
    iae: float
    ise: float
    itae: float
    mae: float
    rmse: float
    max_error: float
    
    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class ControlEffortMetrics:
    """Metrics related to valve usage."""
    total_variation: float
    mean_absolute: float
    max_absolute: float
    saturation_fraction: float  # share of ticks at a valve limit
    
    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class PerformanceMetrics:
    """Performance metrics calculator over time-ordered columns."""
    
    def calculate_step_response_metrics(
        self,
        timestamps: np.ndarray,
        setpoints: np.ndarray,
        measurements: np.ndarray,
        initial_value: Optional[float] = None
    ) -> StepResponseMetrics:
        """Calculate step response metrics against the final setpoint."""
        timestamps = np.asarray(timestamps, dtype=float)
        setpoints = np.asarray(setpoints, dtype=float)
        measurements = np.asarray(measurements, dtype=float)
        if len(timestamps) < 2:
            raise ValueError("Need at least 2 data points")
        
        final_setpoint = float(setpoints[-1])
        y0 = initial_value if initial_value is not None else float(measurements[0])
        delta = final_setpoint - y0
        
        if abs(delta) < 1e-10:
            last = float(measurements[-1])
            return StepResponseMetrics(
                rise_time=0.0, settling_time_2pct=0.0, settling_time_5pct=0.0,
                overshoot_percent=0.0, overshoot=0.0, peak_time=float(timestamps[-1]),
                peak_value=last, steady_state_value=last,
                steady_state_error=final_setpoint - last
            )
        
        y_norm = (measurements - y0) / delta
        reached_10 = np.nonzero(y_norm >= 0.1)[0]
        reached_90 = np.nonzero(y_norm >= 0.9)[0]
        t_10 = timestamps[reached_10[0]] if len(reached_10) else timestamps[0]
        t_90 = timestamps[reached_90[0]] if len(reached_90) else timestamps[-1]
        rise_time = max(0.0, float(t_90 - t_10))
        
        settling_2pct = self._find_settling_time(timestamps, measurements, final_setpoint, 0.02, delta)
        settling_5pct = self._find_settling_time(timestamps, measurements, final_setpoint, 0.05, delta)
        
        if delta > 0:
            peak_idx = int(np.argmax(measurements))
            overshoot = max(0.0, float(measurements[peak_idx] - final_setpoint))
        else:
            peak_idx = int(np.argmin(measurements))
            overshoot = max(0.0, float(final_setpoint - measurements[peak_idx]))
        
        n_ss = max(1, len(measurements) // 10)
        steady_state_value = float(np.mean(measurements[-n_ss:]))
        
        return StepResponseMetrics(
            rise_time=rise_time,
            settling_time_2pct=settling_2pct,
            settling_time_5pct=settling_5pct,
            overshoot_percent=overshoot / abs(delta) * 100,
            overshoot=overshoot,
            peak_time=float(timestamps[peak_idx]),
            peak_value=float(measurements[peak_idx]),
            steady_state_value=steady_state_value,
            steady_state_error=final_setpoint - steady_state_value
        )
    
    def _find_settling_time(self, timestamps: np.ndarray, measurements: np.ndarray,
                            final_value: float, tolerance: float, delta: float) -> float:
        """First time after which the response stays within tolerance*|step|."""
        band = tolerance * abs(delta)
        outside = np.nonzero(np.abs(measurements - final_value) > band)[0]
        if len(outside) == 0:
            return float(timestamps[0])
        last_outside = outside[-1]
        if last_outside == len(timestamps) - 1:
            return float('inf')
        return float(timestamps[last_outside + 1])
    
    def calculate_error_metrics(self, timestamps: np.ndarray, setpoints: np.ndarray,
                                measurements: np.ndarray) -> ErrorMetrics:
        """Calculate error integrals and statistics."""
        timestamps = np.asarray(timestamps, dtype=float)
        if len(timestamps) < 2:
            raise ValueError("Need at least 2 data points")
        
        errors = np.asarray(setpoints, dtype=float) - np.asarray(measurements, dtype=float)
        abs_errors = np.abs(errors)
        
        return ErrorMetrics(
            iae=float(np.trapezoid(abs_errors, timestamps)),
            ise=float(np.trapezoid(errors ** 2, timestamps)),
            itae=float(np.trapezoid(timestamps * abs_errors, timestamps)),
            mae=float(np.mean(abs_errors)),
            rmse=float(np.sqrt(np.mean(errors ** 2))),
            max_error=float(np.max(abs_errors))
        )
    
    def calculate_control_effort_metrics(self, outputs: np.ndarray,
                                         output_limits: Optional[Tuple[float, float]] = None) -> ControlEffortMetrics:
        """Calculate valve usage metrics."""
        outputs = np.asarray(outputs, dtype=float)
        if len(outputs) < 2:
            raise ValueError("Need at least 2 data points")
        
        saturation = 0.0
        if output_limits is not None:
            at_limits = (outputs <= output_limits[0] + 1e-10) | (outputs >= output_limits[1] - 1e-10)
            saturation = float(np.mean(at_limits))
        
        return ControlEffortMetrics(
            total_variation=float(np.sum(np.abs(np.diff(outputs)))),
            mean_absolute=float(np.mean(np.abs(outputs))),
            max_absolute=float(np.max(np.abs(outputs))),
            saturation_fraction=saturation
        )
    
    def calculate_all_metrics(self, timestamps: np.ndarray, setpoints: np.ndarray,
                              measurements: np.ndarray, outputs: np.ndarray,
                              output_limits: Optional[Tuple[float, float]] = (0.0, 100.0)) -> Dict[str, Any]:
        """Calculate all available metrics."""
        return {
            'step_response': self.calculate_step_response_metrics(timestamps, setpoints, measurements).to_dict(),
            'error': self.calculate_error_metrics(timestamps, setpoints, measurements).to_dict(),
            'control_effort': self.calculate_control_effort_metrics(outputs, output_limits).to_dict(),
        }
    
    def from_history(self, arrays: Dict[str, np.ndarray]) -> Dict[str, Any]:
        """All metrics from HistoryBuffer.to_arrays() style columns."""
        return self.calculate_all_metrics(
            arrays['time'], arrays['setpoint'], arrays['temperature'], arrays['actuator']
        )
