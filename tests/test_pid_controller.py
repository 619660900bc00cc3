"""
Unit tests for PID Controller.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from brew_control.core.pid_controller import PIDController
from brew_control.core.pid_params import PIDParams, PIDPresets, AntiWindupMethod
from brew_control.utils.validators import InvalidArgument, InvalidConfiguration


class TestPIDController:
    """Test suite for PIDController class."""
    
    def test_initialization_default(self):
        """Test default initialization uses the brewing tuning."""
        pid = PIDController()
        assert pid.params.kp == 2.0
        assert pid.params.ki == 0.15
        assert pid.params.kd == 0.05
        assert pid.integral == 0.0
        assert pid.state.last_error == 0.0
    
    def test_proportional_only(self):
        """Test P-only controller."""
        pid = PIDController(PIDParams(kp=2.0, ki=0.0, kd=0.0))
        
        # error = 20, P term = 40
        output = pid.compute_command(setpoint=72.0, measurement=52.0, dt=0.1)
        assert output == pytest.approx(40.0)
    
    @pytest.mark.parametrize("kp", [1.0, 10.0, 1000.0, 1e9])
    def test_output_clamped_high(self, kp):
        """Command never exceeds 100 regardless of gain."""
        pid = PIDController(PIDParams(kp=kp, ki=0.5, kd=0.5))
        output = pid.compute_command(setpoint=75.0, measurement=25.0, dt=0.1)
        assert output == pytest.approx(100.0)
    
    def test_output_clamped_low(self):
        """Negative demand gives a closed valve, not a negative one."""
        pid = PIDController(PIDParams(kp=1000.0, ki=0.0, kd=0.0))
        output = pid.compute_command(setpoint=25.0, measurement=75.0, dt=0.1)
        assert output == 0.0
    
    def test_output_always_in_range(self):
        """Sweep errors and gains; every command stays in [0, 100]."""
        for kp in (0.0, 0.5, 5.0, 500.0):
            pid = PIDController(PIDParams(kp=kp, ki=1.0, kd=1.0))
            for measurement in range(-50, 200, 7):
                output = pid.compute_command(72.0, float(measurement), 0.05)
                assert 0.0 <= output <= 100.0
    
    def test_integral_accumulation(self):
        """Integral accumulates ki * error * dt while unsaturated."""
        pid = PIDController(PIDParams(kp=0.0, ki=1.0, kd=0.0))
        
        for _ in range(10):
            output = pid.compute_command(setpoint=10.0, measurement=0.0, dt=0.1)
        
        # Each step adds 1.0 (1.0 * 10 * 0.1)
        assert pid.integral == pytest.approx(10.0)
        assert output == pytest.approx(10.0)
    
    def test_derivative_kick_on_first_step(self):
        """last_error starts at 0, so the first step sees the full error change."""
        pid = PIDController(PIDParams(kp=0.0, ki=0.0, kd=0.05))
        pid.compute_command(setpoint=72.0, measurement=62.0, dt=0.1)
        # D = 0.05 * (10 - 0) / 0.1 = 5
        assert pid.last_step.d_term == pytest.approx(5.0)
        
        pid.compute_command(setpoint=72.0, measurement=62.0, dt=0.1)
        assert pid.last_step.d_term == pytest.approx(0.0)
    
    @pytest.mark.parametrize("dt", [0.0, -0.1])
    def test_non_positive_dt_rejected(self, dt):
        """dt <= 0 is an invalid argument, not silently handled."""
        pid = PIDController()
        with pytest.raises(InvalidArgument):
            pid.compute_command(72.0, 25.0, dt)
        assert pid.integral == 0.0
    
    def test_last_error_updated(self):
        """last_error holds the error of the previous step."""
        pid = PIDController()
        pid.compute_command(72.0, 60.0, 0.1)
        assert pid.state.last_error == pytest.approx(12.0)
    
    def test_reset(self):
        """Test controller reset."""
        pid = PIDController(PIDParams(kp=0.0, ki=1.0, kd=0.0))
        for _ in range(10):
            pid.compute_command(setpoint=50.0, measurement=40.0, dt=0.1)
        assert pid.integral > 0
        
        pid.reset()
        
        assert pid.integral == 0.0
        assert pid.state.last_error == 0.0
        assert pid.output == 0.0
    
    def test_set_gains_keeps_memory(self):
        """Retuning changes gains but not the accumulated integral."""
        pid = PIDController(PIDParams(kp=0.0, ki=1.0, kd=0.0))
        for _ in range(5):
            pid.compute_command(50.0, 40.0, 0.1)
        integral = pid.integral
        
        pid.set_gains(kp=3.0)
        
        assert pid.params.kp == 3.0
        assert pid.params.ki == 1.0
        assert pid.integral == integral
    
    def test_snapshot_and_restore(self):
        """Controller memory can be rolled back."""
        pid = PIDController()
        pid.compute_command(72.0, 30.0, 0.1)
        saved = pid.snapshot_state()
        pid.compute_command(72.0, 31.0, 0.1)
        assert pid.state != saved
        
        pid.restore_state(saved)
        assert pid.state == saved
        # The snapshot is a copy, not an alias
        pid.compute_command(72.0, 32.0, 0.1)
        assert saved.last_error == pytest.approx(42.0)
    
    def test_restore_with_diagnostics(self):
        """Rolling back with the saved step also rolls back output and last_step."""
        pid = PIDController()
        pid.compute_command(72.0, 30.0, 0.1)
        saved_state, saved_step = pid.snapshot_state(), pid.last_step
        pid.compute_command(72.0, float("nan"), 0.1)
        
        pid.restore_state(saved_state, saved_step)
        
        assert pid.last_step is saved_step
        assert pid.output == saved_step.output
        assert pid.state == saved_state


class TestAntiWindup:
    """Anti-windup behaviour under saturation."""
    
    def test_headroom_bound_holds_every_step(self):
        """Integral never exceeds 100 - P - D while saturated."""
        pid = PIDController(PIDParams(kp=1.0, ki=1.0, kd=0.1))
        for _ in range(200):
            pid.compute_command(setpoint=150.0, measurement=0.0, dt=0.1)
            step = pid.last_step
            assert pid.integral <= 100.0 - (step.p_term + step.d_term) + 1e-9
            assert pid.integral >= 0.0 - (step.p_term + step.d_term) - 1e-9
    
    def test_headroom_integral_does_not_grow(self):
        """Without anti-windup the integral would reach 1500 here."""
        pid = PIDController(PIDParams(kp=1.0, ki=1.0, kd=0.0))
        for _ in range(100):
            pid.compute_command(setpoint=150.0, measurement=0.0, dt=0.1)
        
        # P = 150 fills the range, so the integral is pushed to 100 - 150
        assert pid.integral == pytest.approx(-50.0)
    
    def test_headroom_unwinds_in_one_step(self):
        """When the error reverses the command drops immediately."""
        pid = PIDController(PIDParams(kp=1.0, ki=1.0, kd=0.0))
        for _ in range(50):
            assert pid.compute_command(150.0, 0.0, 0.1) == 100.0
        
        output = pid.compute_command(setpoint=50.0, measurement=60.0, dt=0.1)
        assert output < 100.0
        assert output == pytest.approx(0.0)
    
    def test_no_anti_windup_keeps_valve_open(self):
        """The unprotected controller stays saturated after the reversal."""
        pid = PIDController(PIDParams(
            kp=1.0, ki=1.0, kd=0.0, anti_windup=AntiWindupMethod.NONE
        ))
        for _ in range(50):
            pid.compute_command(150.0, 0.0, 0.1)
        assert pid.integral == pytest.approx(750.0)
        
        assert pid.compute_command(50.0, 60.0, 0.1) == 100.0
    
    def test_conditional_integration_freezes_when_saturated(self):
        """Legacy variant: no integration while P + I + D is outside (0, 100)."""
        pid = PIDController(PIDParams(
            kp=1.0, ki=1.0, kd=0.0, anti_windup=AntiWindupMethod.CONDITIONAL
        ))
        for _ in range(20):
            pid.compute_command(150.0, 0.0, 0.1)
        assert pid.integral == 0.0
        
        # Inside the range it integrates normally
        pid.compute_command(60.0, 0.0, 0.1)
        assert pid.integral == pytest.approx(6.0)
    
    def test_anti_windup_flag(self):
        """Diagnostics report when the integral was clamped."""
        pid = PIDController(PIDParams(kp=1.0, ki=1.0, kd=0.0))
        pid.compute_command(150.0, 0.0, 0.1)
        assert pid.last_step.anti_windup_active
        # The clamped integral keeps P + I + D inside the range
        assert not pid.last_step.saturated
        
        unprotected = PIDController(PIDPresets.unprotected())
        unprotected.compute_command(150.0, 0.0, 0.1)
        assert unprotected.last_step.saturated
        assert not unprotected.last_step.anti_windup_active
        
        pid.reset()
        pid.compute_command(30.0, 0.0, 0.1)
        assert not pid.last_step.anti_windup_active
        assert not pid.last_step.saturated


class TestPIDParams:
    """Test suite for PIDParams class."""
    
    def test_default_values(self):
        """Test default parameter values."""
        params = PIDParams()
        assert params.output_min == 0.0
        assert params.output_max == 100.0
        assert params.anti_windup == AntiWindupMethod.HEADROOM
    
    @pytest.mark.parametrize("gain", ["kp", "ki", "kd"])
    def test_validation_negative_gain(self, gain):
        """Test validation rejects negative gains."""
        with pytest.raises(InvalidConfiguration):
            PIDParams(**{gain: -1.0})
    
    def test_validation_is_value_error(self):
        """InvalidConfiguration is a ValueError."""
        with pytest.raises(ValueError):
            PIDParams(kp=float('nan'))
    
    def test_validation_invalid_output_limits(self):
        """Test validation of output limits."""
        with pytest.raises(InvalidConfiguration):
            PIDParams(output_min=100.0, output_max=0.0)
    
    def test_copy(self):
        """Test parameter copying."""
        params1 = PIDParams(kp=1.0, ki=0.5)
        params2 = params1.copy(kp=2.0)
        
        assert params1.kp == 1.0
        assert params2.kp == 2.0
        assert params2.ki == 0.5
    
    def test_from_dict(self):
        """Test creation from dictionary with a string enum."""
        params = PIDParams.from_dict({'kp': 3.0, 'ki': 1.0, 'kd': 0.5, 'anti_windup': 'conditional'})
        
        assert params.kp == 3.0
        assert params.anti_windup == AntiWindupMethod.CONDITIONAL
    
    def test_from_dict_unknown_method(self):
        """Unknown anti-windup names are configuration errors."""
        with pytest.raises(InvalidConfiguration):
            PIDParams.from_dict({'anti_windup': 'magic'})
    
    def test_json_serialization(self):
        """Test JSON serialization roundtrip."""
        params1 = PIDParams(kp=2.0, ki=0.5, kd=0.1, anti_windup=AntiWindupMethod.NONE)
        params2 = PIDParams.from_json(params1.to_json())
        
        assert params1 == params2
    
    def test_presets(self):
        """Presets are valid and distinct."""
        assert PIDPresets.brewing() == PIDParams(kp=2.0, ki=0.15, kd=0.05)
        assert PIDPresets.classic().kp == 1.0
        assert PIDPresets.p_only().ki == 0.0
        assert PIDPresets.unprotected().anti_windup == AntiWindupMethod.NONE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
