#!/usr/bin/env python3
"""
Brewing Vessel Demo

Demonstrates:
- Heating a cold vessel to brewing temperature with the default tuning
- Fast-forward with sub-stepping
- Response metrics
- CSV export of the history window and a chart of it
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from brew_control.core.pid_params import PIDPresets
from brew_control.simulation.clock import SimulationConfig
from brew_control.simulation.session import SimulationSession
from brew_control.analyzer.metrics import PerformanceMetrics
from brew_control.analyzer.plots import HistoryPlotter


def main():
    print("=" * 60)
    print("Brewing Vessel Demo")
    print("=" * 60)
    
    params = PIDPresets.brewing()
    config = SimulationConfig(speed_multiplier=30.0, history_capacity=2000)
    session = SimulationSession(params=params, config=config, setpoint=72.0)
    
    print(f"\nPlant: {session.model.get_info()}")
    print(f"Controller: {params}")
    
    # 1200 ticks x 3 s = one simulated hour
    session.step(1200)
    print(f"\nAfter {session.time:.0f}s: {session.temperature:.2f} degC, "
          f"valve {session.command:.1f}%")
    
    metrics = PerformanceMetrics().from_history(session.history.to_arrays())
    step = metrics['step_response']
    print(f"  Rise Time: {step['rise_time']:.0f}s")
    print(f"  Settling Time (2%): {step['settling_time_2pct']:.0f}s")
    print(f"  Overshoot: {step['overshoot']:.2f} degC")
    print(f"  Steady-State Error: {step['steady_state_error']:.3f} degC")
    
    path = session.history.write_csv(Path("output"))
    print(f"\nExported {len(session.history)} rows to {path}")
    
    plotter = HistoryPlotter()
    plotter.plot_history(session.history.export(), title=f"Heat to 72 degC ({params})")
    HistoryPlotter.show()


if __name__ == "__main__":
    Path("output").mkdir(exist_ok=True)
    main()
