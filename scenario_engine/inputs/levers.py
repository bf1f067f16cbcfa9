"""Strategy lever state."""

import math
import numbers
from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping, Tuple

from scenario_engine.errors import InvalidLevers
from scenario_engine.utils.math import clamp

LEVER_MIN = 0.0
LEVER_MAX = 100.0
LEVER_NEUTRAL = 50.0
# Largest up/down move a sensitivity perturbation may apply
MAX_PERTURBATION_DELTA = LEVER_MAX - LEVER_NEUTRAL

LEVER_IDS: Tuple[str, ...] = (
    "demand_strength",
    "pricing_power",
    "expansion_velocity",
    "cost_discipline",
    "hiring_intensity",
    "operating_drag",
    "market_volatility",
    "execution_risk",
    "funding_pressure",
)

LEVER_LABELS: Dict[str, str] = {
    "demand_strength": "Demand Strength",
    "pricing_power": "Pricing Power",
    "expansion_velocity": "Expansion Velocity",
    "cost_discipline": "Cost Discipline",
    "hiring_intensity": "Hiring Intensity",
    "operating_drag": "Operating Drag",
    "market_volatility": "Market Volatility",
    "execution_risk": "Execution Risk",
    "funding_pressure": "Funding Pressure",
}

# +1: raising the lever is favourable, -1: raising it is adverse
LEVER_POLARITY: Dict[str, int] = {
    "demand_strength": 1,
    "pricing_power": 1,
    "expansion_velocity": 1,
    "cost_discipline": 1,
    "hiring_intensity": -1,
    "operating_drag": -1,
    "market_volatility": -1,
    "execution_risk": -1,
    "funding_pressure": -1,
}

# Key spelling used by the lever store
_CAMEL_CASE_KEYS: Dict[str, str] = {
    "demandStrength": "demand_strength",
    "pricingPower": "pricing_power",
    "expansionVelocity": "expansion_velocity",
    "costDiscipline": "cost_discipline",
    "hiringIntensity": "hiring_intensity",
    "operatingDrag": "operating_drag",
    "marketVolatility": "market_volatility",
    "executionRisk": "execution_risk",
    "fundingPressure": "funding_pressure",
}


def _coerce_lever(lever_id: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidLevers(f"Lever {lever_id!r} must be a number, got {value!r}")
    value = float(value)
    if math.isnan(value):
        raise InvalidLevers(f"Lever {lever_id!r} is NaN")
    return clamp(value, LEVER_MIN, LEVER_MAX)


@dataclass(frozen=True)
class LeverState:
    """
    Nine strategy dials on a 0-100 scale.
    
    Values are clamped on construction; omitted levers sit at the
    neutral 50.
    """
    
    demand_strength: float = LEVER_NEUTRAL
    pricing_power: float = LEVER_NEUTRAL
    expansion_velocity: float = LEVER_NEUTRAL
    cost_discipline: float = LEVER_NEUTRAL
    hiring_intensity: float = LEVER_NEUTRAL
    operating_drag: float = LEVER_NEUTRAL
    market_volatility: float = LEVER_NEUTRAL
    execution_risk: float = LEVER_NEUTRAL
    funding_pressure: float = LEVER_NEUTRAL
    
    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, _coerce_lever(f.name, getattr(self, f.name)))
    
    @classmethod
    def from_mapping(cls, values: Mapping[str, float]) -> "LeverState":
        """
        Build a lever state from a key/value mapping.
        
        Accepts snake_case or camelCase keys. Missing levers default to
        neutral.
        
        Raises:
            InvalidLevers: For unknown keys or non-numeric values
        """
        normalized = {}
        for key, value in values.items():
            lever_id = _CAMEL_CASE_KEYS.get(key, key)
            if lever_id not in LEVER_IDS:
                raise InvalidLevers(f"Unknown lever: {key!r}")
            normalized[lever_id] = value
        return cls(**normalized)
    
    def get(self, lever_id: str) -> float:
        """Value of a lever by id."""
        if lever_id not in LEVER_IDS:
            raise InvalidLevers(f"Unknown lever: {lever_id!r}")
        return getattr(self, lever_id)
    
    def with_lever(self, lever_id: str, value: float) -> "LeverState":
        """Copy with one lever replaced (and clamped)."""
        if lever_id not in LEVER_IDS:
            raise InvalidLevers(f"Unknown lever: {lever_id!r}")
        return replace(self, **{lever_id: value})
    
    def shifted(self, points: float) -> "LeverState":
        """
        Copy with every lever moved `points` in its adverse direction.
        
        Favourable levers move down, adverse levers move up.
        """
        return replace(self, **{
            lever_id: getattr(self, lever_id) - LEVER_POLARITY[lever_id] * points
            for lever_id in LEVER_IDS
        })
    
    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {lever_id: getattr(self, lever_id) for lever_id in LEVER_IDS}
