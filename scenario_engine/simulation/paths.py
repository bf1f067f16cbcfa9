"""Lever-driven trajectory generation for Monte Carlo simulation."""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from scenario_engine.inputs.baseline import SimulationConfig
from scenario_engine.inputs.levers import LeverState, LEVER_NEUTRAL
from scenario_engine.utils.jit_functions import step_trajectories

# Monthly ARR growth with every lever at neutral
BASE_MONTHLY_GROWTH = 0.03
UPSIDE_SIGMA = 0.05
# Cash share of the starting position below which funding pressure bites
FUNDING_SQUEEZE_THRESHOLD = 0.30
# A path "achieves target" when ARR at least doubles
TARGET_ARR_MULTIPLE = 2.0


def _centered(value: float) -> float:
    """Lever value on [-1, 1] around neutral."""
    return (value - LEVER_NEUTRAL) / LEVER_NEUTRAL


def _unit(value: float) -> float:
    """Lever value on [0, 1]."""
    return value / 100.0


@dataclass(frozen=True)
class TrajectoryParams:
    """Deterministic dynamics derived from one lever state."""
    
    monthly_drift: float
    sigma_up: float
    sigma_down: float
    execution_probability: float
    funding_squeeze: float
    cost_multiplier: float
    
    @classmethod
    def from_levers(cls, levers: LeverState) -> "TrajectoryParams":
        """
        Map levers to growth, shock and cost parameters.
        
        Every term moves outcomes in one direction only, so for a fixed
        set of random draws a more adverse lever can never improve a path.
        """
        drift = (
            BASE_MONTHLY_GROWTH
            + 0.02 * _centered(levers.demand_strength)
            + 0.01 * _centered(levers.expansion_velocity)
            + 0.008 * _centered(levers.pricing_power)
        )
        
        cost_multiplier = (
            1.0
            + 0.15 * _centered(levers.hiring_intensity)
            + 0.10 * _centered(levers.operating_drag)
            + 0.05 * _centered(levers.expansion_velocity)
            - 0.12 * _centered(levers.cost_discipline)
        )
        
        return cls(
            monthly_drift=drift,
            sigma_up=UPSIDE_SIGMA,
            sigma_down=0.02 + 0.08 * _unit(levers.market_volatility),
            execution_probability=0.15 * _unit(levers.execution_risk),
            funding_squeeze=0.03 * _unit(levers.funding_pressure),
            cost_multiplier=max(0.5, cost_multiplier),
        )


def _read_only(values: np.ndarray) -> np.ndarray:
    values = np.array(values, dtype=np.float64)
    values.setflags(write=False)
    return values


@dataclass(frozen=True, eq=False)
class SimulationPath:
    """One stochastic trajectory; month arrays stop at the failure month."""
    
    path_id: int
    arr: np.ndarray
    cash: np.ndarray
    burn: np.ndarray
    runway: np.ndarray
    growth_rate: np.ndarray
    survived: bool
    survival_months: int
    final_arr: float
    final_cash: float
    final_runway: float
    peak_arr: float
    lowest_cash: float
    achieved_target: bool
    
    def __len__(self) -> int:
        """Number of simulated months."""
        return len(self.arr)
    
    def __eq__(self, other) -> bool:
        if not isinstance(other, SimulationPath):
            return NotImplemented
        return (
            self.path_id == other.path_id
            and self.survived == other.survived
            and self.survival_months == other.survival_months
            and np.array_equal(self.arr, other.arr)
            and np.array_equal(self.cash, other.cash)
            and np.array_equal(self.burn, other.burn)
            and np.array_equal(self.runway, other.runway)
            and np.array_equal(self.growth_rate, other.growth_rate)
        )
    
    def __hash__(self) -> int:
        return hash((self.path_id, self.survived, self.survival_months, self.final_arr, self.final_cash))
    
    def to_dict(self, include_months: bool = False) -> Dict:
        """Convert to dictionary."""
        result = {
            "path_id": self.path_id,
            "survived": self.survived,
            "survival_months": self.survival_months,
            "final_arr": self.final_arr,
            "final_cash": self.final_cash,
            "final_runway": self.final_runway,
            "peak_arr": self.peak_arr,
            "lowest_cash": self.lowest_cash,
            "achieved_target": self.achieved_target,
        }
        if include_months:
            result["months"] = [
                {
                    "month": t + 1,
                    "arr": float(self.arr[t]),
                    "cash": float(self.cash[t]),
                    "burn": float(self.burn[t]),
                    "runway": float(self.runway[t]),
                    "growth_rate": float(self.growth_rate[t]),
                }
                for t in range(len(self))
            ]
        return result


class PathGenerator:
    """
    Monte Carlo trajectory generator for one lever state and config.
    
    Each block draws its own normals/uniforms from the seed sequence it
    is handed, in a fixed order, so a block's paths depend only on that
    seed and never on which worker ran it.
    """
    
    def __init__(
        self,
        levers: LeverState,
        config: SimulationConfig,
        runway_cap_months: float = 120.0
    ):
        """
        Initialize path generator.
        
        Args:
            levers: Strategy levers driving the dynamics
            config: Horizon and starting position
            runway_cap_months: Runway reported when a month is cash-flow positive
        """
        self.levers = levers
        self.config = config
        self.runway_cap_months = runway_cap_months
        self.params = TrajectoryParams.from_levers(levers)
        self.monthly_cost = config.gross_monthly_cost * self.params.cost_multiplier
    
    def generate_block(
        self,
        seed: np.random.SeedSequence,
        n_paths: int,
        first_path_id: int = 0
    ) -> List[SimulationPath]:
        """
        Generate a block of paths.
        
        Args:
            seed: Seed sequence owned by this block
            n_paths: Number of paths in the block
            first_path_id: Id assigned to the first path
        
        Returns:
            List of SimulationPath in id order
        """
        n_months = self.config.time_horizon_months
        rng = np.random.default_rng(seed)
        
        market_normals = rng.standard_normal((n_paths, n_months))
        execution_uniforms = rng.random((n_paths, n_months))
        execution_severity = rng.random((n_paths, n_months))
        
        params = self.params
        arr, cash, burn, runway, growth, survival_months = step_trajectories(
            float(self.config.starting_cash),
            float(self.config.starting_arr),
            float(self.monthly_cost),
            params.monthly_drift,
            params.sigma_up,
            params.sigma_down,
            params.execution_probability,
            params.funding_squeeze,
            FUNDING_SQUEEZE_THRESHOLD * float(self.config.starting_cash),
            float(self.runway_cap_months),
            market_normals,
            execution_uniforms,
            execution_severity,
        )
        
        return [
            self._build_path(first_path_id + i, arr[i], cash[i], burn[i], runway[i],
                             growth[i], int(survival_months[i]))
            for i in range(n_paths)
        ]
    
    def _build_path(
        self,
        path_id: int,
        arr: np.ndarray,
        cash: np.ndarray,
        burn: np.ndarray,
        runway: np.ndarray,
        growth: np.ndarray,
        months: int
    ) -> SimulationPath:
        """Trim month arrays at failure and derive path summaries."""
        arr = _read_only(arr[:months])
        cash = _read_only(cash[:months])
        final_cash = float(cash[-1])
        survived = final_cash >= 0.0
        final_arr = float(arr[-1])
        target = self.config.starting_arr * TARGET_ARR_MULTIPLE
        
        return SimulationPath(
            path_id=path_id,
            arr=arr,
            cash=cash,
            burn=_read_only(burn[:months]),
            runway=_read_only(runway[:months]),
            growth_rate=_read_only(growth[:months]),
            survived=survived,
            survival_months=months,
            final_arr=final_arr,
            final_cash=final_cash,
            final_runway=float(runway[months - 1]),
            peak_arr=max(float(self.config.starting_arr), float(np.max(arr))),
            lowest_cash=min(float(self.config.starting_cash), float(np.min(cash))),
            achieved_target=survived and final_arr >= target,
        )
