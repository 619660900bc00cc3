"""
Tests for response metrics.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from brew_control.analyzer.metrics import PerformanceMetrics
from brew_control.history.buffer import HistoryRecord, records_to_arrays


class TestStepResponseMetrics:
    """Step response analysis on known signals."""
    
    def setup_method(self):
        self.metrics = PerformanceMetrics()
        self.t = np.linspace(0.0, 100.0, 10001)
        self.sp = np.full_like(self.t, 72.0)
    
    def test_first_order_response(self):
        """y = 72 - 47 exp(-t/10): no overshoot, textbook rise and settling."""
        y = 72.0 - 47.0 * np.exp(-self.t / 10.0)
        result = self.metrics.calculate_step_response_metrics(self.t, self.sp, y)
        
        assert result.overshoot == 0.0
        assert result.overshoot_percent == 0.0
        assert result.rise_time == pytest.approx(10.0 * np.log(9.0), abs=0.02)
        assert result.settling_time_2pct == pytest.approx(10.0 * np.log(50.0), abs=0.02)
        assert result.settling_time_5pct == pytest.approx(10.0 * np.log(20.0), abs=0.02)
        assert abs(result.steady_state_error) < 0.01
    
    def test_overshoot(self):
        t = np.arange(6.0)
        y = np.array([25.0, 50.0, 75.0, 74.0, 72.0, 72.0])
        result = self.metrics.calculate_step_response_metrics(t, np.full(6, 72.0), y)
        
        assert result.overshoot == pytest.approx(3.0)
        assert result.overshoot_percent == pytest.approx(3.0 / 47.0 * 100)
        assert result.peak_time == 2.0
        assert result.peak_value == 75.0
    
    def test_not_settled(self):
        t = np.arange(3.0)
        y = np.array([25.0, 30.0, 40.0])
        result = self.metrics.calculate_step_response_metrics(t, np.full(3, 72.0), y)
        assert result.settling_time_2pct == float('inf')
    
    def test_needs_two_points(self):
        with pytest.raises(ValueError):
            self.metrics.calculate_step_response_metrics([0.0], [72.0], [25.0])


class TestErrorAndEffortMetrics:
    """Error integrals and valve usage."""
    
    def test_constant_error(self):
        t = np.linspace(0.0, 10.0, 101)
        result = PerformanceMetrics().calculate_error_metrics(
            t, np.full_like(t, 72.0), np.full_like(t, 70.0)
        )
        assert result.iae == pytest.approx(20.0)
        assert result.ise == pytest.approx(40.0)
        assert result.itae == pytest.approx(100.0)
        assert result.mae == pytest.approx(2.0)
        assert result.rmse == pytest.approx(2.0)
        assert result.max_error == pytest.approx(2.0)
    
    def test_control_effort(self):
        result = PerformanceMetrics().calculate_control_effort_metrics(
            np.array([0.0, 100.0, 100.0, 50.0]), output_limits=(0.0, 100.0)
        )
        assert result.total_variation == 150.0
        assert result.mean_absolute == 62.5
        assert result.max_absolute == 100.0
        assert result.saturation_fraction == 0.75
    
    def test_from_history(self):
        records = [
            HistoryRecord(0.1 * i, 72.0, 25.0 + i, 100.0)
            for i in range(1, 21)
        ]
        metrics = PerformanceMetrics().from_history(records_to_arrays(records))
        assert set(metrics) == {'step_response', 'error', 'control_effort'}
        assert metrics['control_effort']['saturation_fraction'] == 1.0
        assert metrics['step_response']['overshoot'] == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
