"""
Integration accuracy checks for the sub-stepped Euler scheme.
The reference trajectory comes from scipy's adaptive RK45 with tight
tolerances, so the difference is essentially the Euler error.
"""

from typing import Dict
import numpy as np
from scipy.integrate import solve_ivp

from brew_control.plants.base_plant import BasePlant
from brew_control.simulation.clock import plan_tick
from brew_control.utils.validators import validate_positive


def reference_trajectory(
    plant: BasePlant,
    initial_value: float,
    control_input: float,
    duration: float,
    num_points: int = 101
) -> Dict[str, np.ndarray]:
    """
    Accurate solution of the plant ODE with a constant control input.
    
    Returns:
        Dict with 'time' and 'value' arrays
    """
    duration = validate_positive(duration, "duration")
    t_eval = np.linspace(0.0, duration, num_points)
    sol = solve_ivp(
        lambda t, y: [plant.rate(y[0], control_input)],
        (0.0, duration),
        [initial_value],
        method='RK45',
        t_eval=t_eval,
        rtol=1e-10,
        atol=1e-10,
    )
    if not sol.success:
        raise RuntimeError(f"Reference integration failed: {sol.message}")
    return {'time': sol.t, 'value': sol.y[0]}


def substep_error(
    plant: BasePlant,
    initial_value: float,
    control_input: float,
    base_time_step: float,
    speed_multiplier: float,
    ticks: int
) -> float:
    """
    Absolute error of the sub-stepped Euler result after `ticks` display
    ticks, compared with the reference solution.
    """
    plan = plan_tick(base_time_step, speed_multiplier)
    value = plant.simulate(initial_value, control_input, plan.sub_step_dt, plan.num_sub_steps * ticks)
    reference = reference_trajectory(
        plant, initial_value, control_input, plan.duration * ticks, num_points=2
    )
    return abs(value - float(reference['value'][-1]))
