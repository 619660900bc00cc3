"""
Steam-heated brewing vessel.

Lumped-capacitance energy balance: condensing steam delivers its latent heat
plus the sensible heat released while cooling to the water temperature, and
the vessel loses heat to ambient by Newton's law of cooling.

    dT/dt = (q_steam - q_loss) / (m * c)
    q_steam = (u / 100) * F_max * (L + c_steam * (T_steam - T))
    q_loss = h * (T - T_ambient)

Heat flows are in kW (kJ/s), so temperatures move in degC per second.
"""

from dataclasses import dataclass, asdict, replace
from typing import Dict, Any
import json

from brew_control.plants.base_plant import BasePlant
from brew_control.utils.validators import InvalidConfiguration, validate_positive


@dataclass(frozen=True)
class ProcessParameters:
    """Physical constants of the vessel, fixed at construction."""
    
    water_mass: float = 100.0  # kg
    water_specific_heat: float = 4.186  # kJ/kg.degC
    steam_temperature: float = 80.0  # degC
    ambient_temperature: float = 25.0  # degC
    max_steam_flow: float = 0.02  # kg/s at 100 % valve
    heat_loss_coefficient: float = 0.05  # kW/degC
    steam_latent_heat: float = 2257.0  # kJ/kg
    steam_specific_heat: float = 2.08  # kJ/kg.degC
    
    def __post_init__(self):
        for name, value in asdict(self).items():
            # frozen: bypass __setattr__ to store the normalised float
            object.__setattr__(self, name, validate_positive(value, name))
    
    @property
    def thermal_mass(self) -> float:
        """Heat capacity of the water, kJ/degC."""
        return self.water_mass * self.water_specific_heat
    
    def copy(self, **changes) -> 'ProcessParameters':
        """Create a copy with optional parameter changes."""
        return replace(self, **changes)
    
    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProcessParameters':
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise InvalidConfiguration(
                f"Unknown process parameters: {', '.join(sorted(unknown))}"
            )
        return cls(**data)
    
    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
    
    @classmethod
    def from_json(cls, json_str: str) -> 'ProcessParameters':
        return cls.from_dict(json.loads(json_str))


class ProcessPresets:
    """Named constant sets for the vessels used in the lessons."""
    
    @staticmethod
    def brewing_vessel() -> ProcessParameters:
        """100 kg tea brewing vessel used by the PID lesson."""
        return ProcessParameters()
    
    @staticmethod
    def pilot_vessel() -> ProcessParameters:
        """Smaller 60 kg vessel from the first version of the lesson."""
        return ProcessParameters(water_mass=60.0)
    
    @staticmethod
    def manual_kettle() -> ProcessParameters:
        """1 kg kettle with a large valve, fast enough to control by hand."""
        return ProcessParameters(
            water_mass=1.0,
            max_steam_flow=0.2,
            heat_loss_coefficient=0.8,
        )
    
    @staticmethod
    def names() -> list:
        return ['brewing_vessel', 'pilot_vessel', 'manual_kettle']
    
    @classmethod
    def get(cls, name: str) -> ProcessParameters:
        """Look up a preset by name."""
        if name not in cls.names():
            raise InvalidConfiguration(
                f"Unknown process preset {name!r}, expected one of {cls.names()}"
            )
        return getattr(cls, name)()


class ThermalProcessModel(BasePlant):
    """
    Nonlinear thermal process of the brewing vessel.
    
    The actuator is the steam valve position in percent. advance() is a pure
    function; it never clamps the temperature, so a too-large dt can overshoot
    past physically reachable values.
    
    Example:
        >>> model = ThermalProcessModel(ProcessPresets.brewing_vessel())
        >>> model.advance(25.0, 100.0, 0.1)
        25.0113...
    """
    
    def __init__(self, params: ProcessParameters = None):
        self._params = params if params is not None else ProcessParameters()
    
    @property
    def params(self) -> ProcessParameters:
        return self._params
    
    @property
    def initial_value(self) -> float:
        return self._params.ambient_temperature
    
    def steam_flow(self, valve_percent: float) -> float:
        """Steam mass flow in kg/s for a valve position."""
        return valve_percent / 100.0 * self._params.max_steam_flow
    
    def heat_input(self, temperature: float, valve_percent: float) -> float:
        """Heat delivered by condensing steam, kW."""
        p = self._params
        return self.steam_flow(valve_percent) * (
            p.steam_latent_heat
            + p.steam_specific_heat * (p.steam_temperature - temperature)
        )
    
    def heat_loss(self, temperature: float) -> float:
        """Heat lost to the surroundings, kW."""
        p = self._params
        return p.heat_loss_coefficient * (temperature - p.ambient_temperature)
    
    def rate(self, value: float, control_input: float) -> float:
        net = self.heat_input(value, control_input) - self.heat_loss(value)
        return net / self._params.thermal_mass
    
    def temperature_rate(self, temperature: float, valve_percent: float) -> float:
        """Temperature change in degC/s."""
        return self.rate(temperature, valve_percent)
    
    def steady_state_temperature(self, valve_percent: float) -> float:
        """Equilibrium temperature for a valve held constant."""
        p = self._params
        flow = self.steam_flow(valve_percent)
        gain_in = flow * (p.steam_latent_heat + p.steam_specific_heat * p.steam_temperature)
        return (gain_in + p.heat_loss_coefficient * p.ambient_temperature) / (
            p.heat_loss_coefficient + flow * p.steam_specific_heat
        )
    
    def holding_valve(self, temperature: float) -> float:
        """
        Valve position that holds `temperature` at equilibrium.
        
        The result is not clamped; values above 100 mean the vessel cannot
        reach the temperature, negative values mean it must cool on its own.
        """
        p = self._params
        per_kg = p.steam_latent_heat + p.steam_specific_heat * (p.steam_temperature - temperature)
        return 100.0 * self.heat_loss(temperature) / (p.max_steam_flow * per_kg)
    
    def get_info(self) -> Dict[str, Any]:
        info = {'type': 'ThermalProcessModel'}
        info.update(self._params.to_dict())
        return info
    
    def __repr__(self) -> str:
        return f"ThermalProcessModel({self._params})"
