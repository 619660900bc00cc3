#!/usr/bin/env python3
"""
Anti-Windup Demo

Runs the same setpoint change with headroom anti-windup, the legacy
conditional integration and no protection at all, and compares overshoot.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from brew_control.core.pid_params import PIDParams, AntiWindupMethod
from brew_control.plants.thermal_process import ProcessPresets, ThermalProcessModel
from brew_control.simulation.scenarios import ScenarioLibrary
from brew_control.simulation.simulator import Simulator


def main():
    print("=" * 60)
    print("Anti-Windup Comparison")
    print("=" * 60)
    
    model = ThermalProcessModel(ProcessPresets.pilot_vessel())
    scenario = ScenarioLibrary.operator_change(initial=72.0, final=50.0)
    
    param_sets = {
        method.value: PIDParams(kp=2.0, ki=0.15, kd=0.05, anti_windup=method)
        for method in AntiWindupMethod
    }
    
    sim = Simulator(model=model)
    results = sim.run_comparison(scenario, param_sets)
    
    for name, result in results.items():
        metrics = sim.analyze(result)
        print(f"\n{name}:")
        print(f"  Peak: {metrics['step_response']['peak_value']:.2f} degC")
        print(f"  IAE: {metrics['error']['iae']:.1f}")
        print(f"  Saturated: {metrics['control_effort']['saturation_fraction'] * 100:.0f}% of ticks")


if __name__ == "__main__":
    main()
