"""Simulation config and baseline/strategy inputs."""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Mapping, Optional, Tuple

from scenario_engine.errors import InvalidConfig
from scenario_engine.inputs.levers import LeverState
from scenario_engine.utils.math import clamp01, finite_or


def _require_positive_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfig(f"{name} must be a positive integer, got {value!r}")


def _require_non_negative(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfig(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise InvalidConfig(f"{name} must be a finite non-negative number, got {value!r}")


@dataclass(frozen=True)
class SimulationConfig:
    """Batch size, horizon and starting financial position."""
    
    iterations: int
    time_horizon_months: int
    starting_cash: float
    starting_arr: float
    monthly_burn: float  # Net burn at month 0
    
    def __post_init__(self):
        _require_positive_int("iterations", self.iterations)
        _require_positive_int("time_horizon_months", self.time_horizon_months)
        _require_non_negative("starting_cash", self.starting_cash)
        _require_non_negative("starting_arr", self.starting_arr)
        _require_non_negative("monthly_burn", self.monthly_burn)
    
    @property
    def gross_monthly_cost(self) -> float:
        """Operating cost implied by month-0 revenue plus net burn."""
        return self.starting_arr / 12.0 + self.monthly_burn
    
    def with_iterations(self, iterations: int) -> "SimulationConfig":
        """Copy with a different batch size."""
        return replace(self, iterations=iterations)


@dataclass(frozen=True)
class BaselineInputs:
    """Financial facts from the baseline provider."""
    
    arr: float
    monthly_burn: float
    cash_on_hand: float
    gross_margin_pct: float = 0.0
    input_completeness_score: float = 0.5  # 0-1
    
    def __post_init__(self):
        object.__setattr__(self, "input_completeness_score", clamp01(finite_or(self.input_completeness_score)))
    
    def to_simulation_config(self, horizon_months: int, iterations: int) -> SimulationConfig:
        """Simulation config starting from this baseline."""
        return SimulationConfig(
            iterations=iterations,
            time_horizon_months=horizon_months,
            starting_cash=self.cash_on_hand,
            starting_arr=self.arr,
            monthly_burn=self.monthly_burn,
        )


@dataclass(frozen=True)
class StrategyInputs:
    """Lever snapshot from the strategy store."""
    
    levers: LeverState = field(default_factory=LeverState)
    horizon_months: int = 36


# ---------------------------------------------------------------------------
# Baseline completeness
# ---------------------------------------------------------------------------

def _is_positive(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v) and v > 0


def _is_non_negative(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v) and v >= 0


def _is_pct(v: Any) -> bool:
    return _is_non_negative(v) and v <= 200


REQUIRED_BASELINE_FIELDS: Tuple[Tuple[str, str, Callable[[Any], bool]], ...] = (
    # Financial
    ("arr", "ARR", _is_positive),
    ("monthly_burn", "Monthly Burn", _is_positive),
    ("cash_on_hand", "Cash on Hand", _is_non_negative),
    ("growth_rate_pct", "Growth Rate %", _is_pct),
    ("gross_margin_pct", "Gross Margin %", _is_pct),
    ("nrr_pct", "NRR %", _is_pct),
    ("headcount", "Headcount", _is_positive),
    ("avg_fully_loaded_cost", "Avg Fully-Loaded Cost", _is_positive),
    ("sales_marketing_spend", "S&M Spend", _is_non_negative),
    ("rd_spend", "R&D Spend", _is_non_negative),
    ("ga_spend", "G&A Spend", _is_non_negative),
    # Capital
    ("total_debt", "Total Debt", _is_non_negative),
    ("interest_rate_pct", "Interest Rate %", _is_non_negative),
    # Operating
    ("churn_pct", "Churn %", _is_pct),
    ("active_customers", "Active Customers", _is_positive),
    # Customer engine
    ("cac", "CAC", _is_positive),
    ("ltv", "LTV", _is_positive),
)


@dataclass(frozen=True)
class BaselineCompleteness:
    """Fraction of required baseline fields that are present and valid."""
    
    completeness: float
    filled_count: int
    total_required: int
    missing: Tuple[str, ...]


def compute_baseline_completeness(values: Optional[Mapping[str, Any]]) -> BaselineCompleteness:
    """
    Score how much of the baseline the provider actually filled in.
    
    Args:
        values: Flat mapping of baseline field -> value, or None
    
    Returns:
        BaselineCompleteness with the labels of missing fields
    """
    total = len(REQUIRED_BASELINE_FIELDS)
    if not values:
        return BaselineCompleteness(
            completeness=0.0,
            filled_count=0,
            total_required=total,
            missing=tuple(label for _, label, _ in REQUIRED_BASELINE_FIELDS),
        )
    
    missing: List[str] = []
    for key, label, is_valid in REQUIRED_BASELINE_FIELDS:
        if not is_valid(values.get(key)):
            missing.append(label)
    
    filled = total - len(missing)
    return BaselineCompleteness(
        completeness=filled / total,
        filled_count=filled,
        total_required=total,
        missing=tuple(missing),
    )
