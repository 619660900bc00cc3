"""
Linear analysis of the brewing loop using the python-control library.

Around an operating point the vessel behaves like a first-order lag
G(s) = K / (tau*s + 1) from valve percent to temperature, which lets the
lessons show poles, DC gain and margins for a chosen tuning.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass
import numpy as np
import control as ct

from brew_control.core.pid_params import PIDParams
from brew_control.plants.thermal_process import ThermalProcessModel


@dataclass(frozen=True)
class FirstOrderApproximation:
    """Small-signal model of the vessel at an operating point."""
    gain: float  # degC per valve percent
    time_constant: float  # seconds
    operating_temperature: float
    operating_valve: float
    
    def transfer_function(self) -> ct.TransferFunction:
        return ct.tf([self.gain], [self.time_constant, 1.0])


def linearize(
    model: ThermalProcessModel,
    temperature: float,
    valve: Optional[float] = None
) -> FirstOrderApproximation:
    """
    Linearize the energy balance around (temperature, valve).
    
    Args:
        model: Process model
        temperature: Operating temperature, degC
        valve: Operating valve position; the holding valve for
            `temperature` when omitted
    """
    p = model.params
    if valve is None:
        valve = model.holding_valve(temperature)
    flow = model.steam_flow(valve)
    # partial derivatives of the heat balance, kW/degC and kW/%
    d_dtemp = flow * p.steam_specific_heat + p.heat_loss_coefficient
    d_dvalve = p.max_steam_flow / 100.0 * (
        p.steam_latent_heat + p.steam_specific_heat * (p.steam_temperature - temperature)
    )
    return FirstOrderApproximation(
        gain=d_dvalve / d_dtemp,
        time_constant=p.thermal_mass / d_dtemp,
        operating_temperature=temperature,
        operating_valve=valve,
    )


def pid_transfer_function(params: PIDParams, filter_coeff: float = 100.0) -> ct.TransferFunction:
    """
    C(s) = Kp + Ki/s + Kd*s/(1 + s/N)
    """
    s = ct.tf([1, 0], [1])
    controller = ct.tf([params.kp], [1])
    if params.ki != 0:
        controller = controller + params.ki / s
    if params.kd != 0:
        controller = controller + params.kd * s / (1 + s / filter_coeff)
    return controller


def closed_loop_analysis(
    model: ThermalProcessModel,
    params: PIDParams,
    setpoint: float
) -> Dict[str, Any]:
    """Closed-loop poles, stability, DC gain and margins at a setpoint."""
    approx = linearize(model, setpoint)
    plant = approx.transfer_function()
    controller = pid_transfer_function(params)
    loop = controller * plant
    closed = ct.feedback(loop, 1)
    poles = ct.poles(closed)
    gm, pm, wg, wp = ct.margin(loop)
    return {
        'linearization': approx,
        'closed_loop_tf': closed,
        'poles': poles,
        'is_stable': bool(np.all(np.real(poles) < 0)),
        'dc_gain': float(np.real(ct.dcgain(closed))),
        'gain_margin': gm,
        'phase_margin_deg': pm,
    }
