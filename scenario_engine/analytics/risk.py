"""Survival risk classification from Monte Carlo results."""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Dict, Optional, Union

import numpy as np

from scenario_engine.analytics.status import NotComputed
from scenario_engine.errors import InvalidConfig
from scenario_engine.simulation.results import MonteCarloResult
from scenario_engine.utils.math import normalize_linear, percentile_from_sorted, safe_ratio

logger = logging.getLogger(__name__)

DEFAULT_EV_MULTIPLE = 3.5

# Runway (months) under which a path counts as burn-fragile
FRAGILE_RUNWAY_MONTHS = 6.0
# Burn ratio reported when a path ends with no revenue
MAX_BURN_RATIO = 5.0


@total_ordering
class RiskClassification(Enum):
    """Risk bands, ordered from least to most severe."""
    STABLE = "stable"
    WATCH = "watch"
    ELEVATED = "elevated"
    CRITICAL = "critical"
    
    @property
    def severity(self) -> int:
        return _SEVERITY[self]
    
    def __lt__(self, other):
        if not isinstance(other, RiskClassification):
            return NotImplemented
        return self.severity < other.severity


_SEVERITY = {
    RiskClassification.STABLE: 0,
    RiskClassification.WATCH: 1,
    RiskClassification.ELEVATED: 2,
    RiskClassification.CRITICAL: 3,
}

# Lower bound of survival probability for each band; anything below the
# last bound is critical
SURVIVAL_THRESHOLDS = (
    (0.85, RiskClassification.STABLE),
    (0.70, RiskClassification.WATCH),
    (0.50, RiskClassification.ELEVATED),
)


def classify_survival(survival_probability: float) -> RiskClassification:
    """Map a survival probability onto its risk band."""
    for lower_bound, classification in SURVIVAL_THRESHOLDS:
        if survival_probability >= lower_bound:
            return classification
    return RiskClassification.CRITICAL


@dataclass(frozen=True)
class RiskPressures:
    """Raw driver pressures, each normalized to [0, 100] (higher = riskier)."""
    
    market: float
    execution: float
    financial: float
    competitive: float
    
    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            "market": self.market,
            "execution": self.execution,
            "financial": self.financial,
            "competitive": self.competitive,
        }


@dataclass(frozen=True)
class RiskDrivers:
    """Share of overall risk attributed to each driver; sums to 1.0."""
    
    market: float
    execution: float
    financial: float
    competitive: float
    
    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            "market": self.market,
            "execution": self.execution,
            "financial": self.financial,
            "competitive": self.competitive,
        }


# Blend weights applied to the pressures before normalizing to shares
DRIVER_WEIGHTS = RiskDrivers(market=0.30, execution=0.20, financial=0.35, competitive=0.15)


@dataclass(frozen=True)
class RiskProfile:
    """Risk profile derived from one simulation batch."""
    
    survival_probability: float
    failure_probability: float
    classification: RiskClassification
    drivers: RiskDrivers
    pressures: RiskPressures
    value_at_risk_95: float  # P5 enterprise value
    tail_risk_score: float  # 1 - mean(worst 5% EV) / median EV
    volatility_index: float  # Coefficient of variation of final ARR
    burn_fragility_index: float  # P(final runway < 6 months)
    iteration_count: int
    ev_multiple: float
    computed: bool = field(default=True, init=False)
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "computed": True,
            "survival_probability": self.survival_probability,
            "failure_probability": self.failure_probability,
            "classification": self.classification.value,
            "drivers": self.drivers.to_dict(),
            "pressures": self.pressures.to_dict(),
            "value_at_risk_95": self.value_at_risk_95,
            "tail_risk_score": self.tail_risk_score,
            "volatility_index": self.volatility_index,
            "burn_fragility_index": self.burn_fragility_index,
            "iteration_count": self.iteration_count,
            "ev_multiple": self.ev_multiple,
        }


RiskResult = Union[RiskProfile, NotComputed]


def compute_risk_pressures(monte_carlo_result: MonteCarloResult) -> RiskPressures:
    """
    Score four structural metrics of the final states onto [0, 100].
    
    - market: coefficient of variation of final ARR (0.1 good, 0.8 bad)
    - execution: median final operating margin (0.3 good, -1.0 bad)
    - financial: median final burn ratio, monthly cost / monthly revenue
      (0.6 good, 2.2 bad)
    - competitive: share of total final ARR held by the top decile of
      paths (0.10 good, 0.40 bad)
    """
    sims = monte_carlo_result.all_simulations
    final_arr = np.array([p.final_arr for p in sims])
    revenue = final_arr / 12.0
    final_burn = np.array([p.burn[-1] for p in sims])
    
    dist = monte_carlo_result.arr_distribution
    volatility = safe_ratio(dist.std_dev, dist.mean, default=1.0) if dist.mean > 0 else 1.0
    
    with np.errstate(divide="ignore", invalid="ignore"):
        margins = np.where(revenue > 0, (revenue - final_burn) / revenue, -1.0)
        burn_ratios = np.where(revenue > 0, final_burn / revenue, MAX_BURN_RATIO)
    margin = float(np.median(margins))
    burn_ratio = float(min(np.median(burn_ratios), MAX_BURN_RATIO))
    
    total_arr = float(np.sum(final_arr))
    top_n = max(1, len(final_arr) // 10)
    top_share = float(np.sum(np.sort(final_arr)[-top_n:])) / total_arr if total_arr > 0 else 1.0
    
    return RiskPressures(
        market=100.0 * normalize_linear(volatility, 0.1, 0.8),
        execution=100.0 * normalize_linear(margin, -1.0, 0.3, invert=True),
        financial=100.0 * normalize_linear(burn_ratio, 0.6, 2.2),
        competitive=100.0 * normalize_linear(top_share, 0.10, 0.40),
    )


def compute_risk_drivers(pressures: RiskPressures) -> RiskDrivers:
    """Blend weighted pressures into shares that sum to 1.0."""
    weighted = {
        name: getattr(DRIVER_WEIGHTS, name) * getattr(pressures, name)
        for name in ("market", "execution", "financial", "competitive")
    }
    total = sum(weighted.values())
    if total <= 0:
        return DRIVER_WEIGHTS
    return RiskDrivers(**{name: value / total for name, value in weighted.items()})


def compute_risk_profile(
    monte_carlo_result: Optional[MonteCarloResult],
    ev_multiple: float = DEFAULT_EV_MULTIPLE
) -> RiskResult:
    """
    Classify survival/failure risk from a simulation batch.
    
    Args:
        monte_carlo_result: Kernel output, or None if nothing has run yet
        ev_multiple: ARR multiple used to express enterprise value
    
    Returns:
        RiskProfile, or NotComputed when there is nothing to analyse
    
    Raises:
        InvalidConfig: If ev_multiple is not a positive finite number
    """
    if not (isinstance(ev_multiple, (int, float)) and math.isfinite(ev_multiple) and ev_multiple > 0):
        raise InvalidConfig(f"ev_multiple must be a positive number, got {ev_multiple!r}")
    
    if monte_carlo_result is None:
        logger.warning("No simulation results available; risk profile not computed")
        return NotComputed("Simulation results are not available. Run a Monte Carlo simulation first.")
    
    sims = monte_carlo_result.all_simulations
    if not sims:
        logger.warning("Simulation result has no paths; risk profile not computed")
        return NotComputed("No simulation paths were found in the simulation results.")
    
    n = len(sims)
    survivors = sum(1 for p in sims if p.survived)
    survival_probability = survivors / n
    
    # Enterprise value tail
    ev_values = np.sort(np.array([p.final_arr for p in sims]) * ev_multiple)
    value_at_risk_95 = percentile_from_sorted(ev_values, 5)
    worst = ev_values[:max(1, math.ceil(n * 0.05))]
    median_ev = percentile_from_sorted(ev_values, 50)
    if median_ev > 0:
        tail_risk_score = max(0.0, 1.0 - float(np.mean(worst)) / median_ev)
    else:
        tail_risk_score = 1.0
    
    dist = monte_carlo_result.arr_distribution
    volatility_index = safe_ratio(dist.std_dev, dist.mean, default=1.0) if dist.mean > 0 else 1.0
    
    fragile = sum(1 for p in sims if p.final_runway < FRAGILE_RUNWAY_MONTHS)
    
    pressures = compute_risk_pressures(monte_carlo_result)
    
    return RiskProfile(
        survival_probability=survival_probability,
        failure_probability=1.0 - survival_probability,
        classification=classify_survival(survival_probability),
        drivers=compute_risk_drivers(pressures),
        pressures=pressures,
        value_at_risk_95=value_at_risk_95,
        tail_risk_score=tail_risk_score,
        volatility_index=volatility_index,
        burn_fragility_index=fragile / n,
        iteration_count=n,
        ev_multiple=float(ev_multiple),
    )


def format_percent(value: float) -> str:
    """Format a 0-1 fraction as a percentage, e.g. 0.123 -> '12.3%'."""
    return f"{value * 100:.1f}%"


def format_currency(value: float) -> str:
    """Format a dollar amount compactly, e.g. 1_250_000 -> '$1.2M'."""
    if value >= 1_000_000_000:
        return f"${value / 1_000_000_000:.1f}B"
    if value >= 1_000_000:
        return f"${value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"${value / 1_000:.0f}K"
    return f"${value:.0f}"
