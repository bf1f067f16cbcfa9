"""Enterprise-value distribution summaries."""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import norm

from scenario_engine.simulation.results import MonteCarloResult
from scenario_engine.utils.math import percentile_from_sorted

MIN_SAMPLES = 10
# p75 - p25 of a normal distribution is about 1.35 sigma
IQR_TO_SIGMA = 1.35
DEFAULT_UNCERTAINTY = 0.20


@dataclass(frozen=True)
class ProbabilityThreshold:
    """P(EV >= value) or P(EV <= value)."""
    
    label: str
    value: float
    probability: float  # 0-1
    direction: str  # "ge" or "le"
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "label": self.label,
            "value": self.value,
            "probability": self.probability,
            "direction": self.direction,
        }


@dataclass(frozen=True)
class ValuationDistributionSummary:
    """Percentile summary of an enterprise-value distribution."""
    
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    winsor_low: float
    winsor_high: float
    probabilities: Tuple[ProbabilityThreshold, ...] = ()
    sample_count: int = 0
    is_from_real_distribution: bool = False
    winsorisation_applied: bool = False
    display_unit: str = field(default="USD")
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "p10": self.p10,
            "p25": self.p25,
            "p50": self.p50,
            "p75": self.p75,
            "p90": self.p90,
            "winsor_low": self.winsor_low,
            "winsor_high": self.winsor_high,
            "probabilities": [p.to_dict() for p in self.probabilities],
            "sample_count": self.sample_count,
            "is_from_real_distribution": self.is_from_real_distribution,
            "winsorisation_applied": self.winsorisation_applied,
            "display_unit": self.display_unit,
        }


def format_compact(value: float) -> str:
    """Compact dollar label, e.g. 25_000_000 -> '$25M'."""
    if value >= 1_000_000_000:
        return f"${value / 1_000_000_000:.1f}B"
    if value >= 1_000_000:
        return f"${value / 1_000_000:.0f}M"
    if value >= 1_000:
        return f"${value / 1_000:.0f}K"
    return f"${value:.0f}"


def auto_thresholds(median: float, direction: str) -> List[float]:
    """Round thresholds near the median to one significant figure of its magnitude."""
    magnitude = 10.0 ** math.floor(math.log10(max(median, 1.0)))
    
    def _round(v: float) -> float:
        return round(v / magnitude) * magnitude
    
    factors = (0.8, 1.0, 1.3) if direction == "ge" else (0.6, 0.4)
    return [t for t in (_round(median * f) for f in factors) if t > 0]


def _label(value: float, direction: str) -> str:
    symbol = "≥" if direction == "ge" else "≤"
    return f"EV {symbol} {format_compact(value)}"


def _empirical_probabilities(
    sorted_samples: np.ndarray,
    ge_thresholds: Sequence[float],
    le_thresholds: Sequence[float]
) -> Tuple[ProbabilityThreshold, ...]:
    n = len(sorted_samples)
    probs = []
    for t in ge_thresholds:
        count = n - int(np.searchsorted(sorted_samples, t, side="left"))
        probs.append(ProbabilityThreshold(_label(t, "ge"), float(t), count / n, "ge"))
    for t in le_thresholds:
        count = int(np.searchsorted(sorted_samples, t, side="right"))
        probs.append(ProbabilityThreshold(_label(t, "le"), float(t), count / n, "le"))
    return tuple(probs)


def _clamped_normal_probabilities(
    mu: float,
    sigma: float,
    low: float,
    high: float,
    ge_thresholds: Sequence[float],
    le_thresholds: Sequence[float]
) -> Tuple[ProbabilityThreshold, ...]:
    """Probabilities under N(mu, sigma) with its tails clamped onto [low, high]."""
    
    def p_ge(t: float) -> float:
        if t > high:
            return 0.0
        if t <= low:
            return 1.0
        if sigma <= 0:
            return 1.0 if mu >= t else 0.0
        return float(norm.sf(t, loc=mu, scale=sigma))
    
    def p_le(t: float) -> float:
        if t < low:
            return 0.0
        if t >= high:
            return 1.0
        if sigma <= 0:
            return 1.0 if mu <= t else 0.0
        return float(norm.cdf(t, loc=mu, scale=sigma))
    
    probs = [ProbabilityThreshold(_label(t, "ge"), float(t), p_ge(t), "ge") for t in ge_thresholds]
    probs += [ProbabilityThreshold(_label(t, "le"), float(t), p_le(t), "le") for t in le_thresholds]
    return tuple(probs)


def summarize_from_samples(
    samples: Sequence[float],
    ge_thresholds: Optional[Sequence[float]] = None,
    le_thresholds: Optional[Sequence[float]] = None
) -> ValuationDistributionSummary:
    """
    Summarise raw EV samples, winsorised at P5/P95.
    
    Args:
        samples: Enterprise value samples (any order)
        ge_thresholds: Values for P(EV >= value); defaults near the median
        le_thresholds: Values for P(EV <= value); defaults near the median
    
    Returns:
        ValuationDistributionSummary (zeroed when fewer than 10 samples)
    """
    values = np.asarray(samples, dtype=np.float64)
    if values.size < MIN_SAMPLES:
        return ValuationDistributionSummary(
            p10=0.0, p25=0.0, p50=0.0, p75=0.0, p90=0.0,
            winsor_low=0.0, winsor_high=0.0,
            sample_count=int(values.size),
        )
    
    sorted_values = np.sort(values)
    winsor_low = percentile_from_sorted(sorted_values, 5)
    winsor_high = percentile_from_sorted(sorted_values, 95)
    winsorised = np.clip(sorted_values, winsor_low, winsor_high)
    
    p50 = percentile_from_sorted(winsorised, 50)
    if ge_thresholds is None:
        ge_thresholds = auto_thresholds(p50, "ge")
    if le_thresholds is None:
        le_thresholds = auto_thresholds(p50, "le")
    
    return ValuationDistributionSummary(
        p10=percentile_from_sorted(winsorised, 10),
        p25=percentile_from_sorted(winsorised, 25),
        p50=p50,
        p75=percentile_from_sorted(winsorised, 75),
        p90=percentile_from_sorted(winsorised, 90),
        winsor_low=winsor_low,
        winsor_high=winsor_high,
        probabilities=_empirical_probabilities(sorted_values, ge_thresholds, le_thresholds),
        sample_count=int(values.size),
        is_from_real_distribution=True,
        winsorisation_applied=True,
    )


def summarize_from_percentiles(percentiles: Dict[str, float]) -> ValuationDistributionSummary:
    """
    Summarise a pre-computed percentile set.
    
    Probabilities use a normal approximation with sigma = IQR / 1.35
    (20% of the median when the IQR is empty), clamped to the winsor bounds.
    
    Args:
        percentiles: Mapping with p10, p25, p50, p75, p90 and optionally p5, p95
    
    Returns:
        ValuationDistributionSummary
    """
    p10, p25, p50, p75, p90 = (float(percentiles[k]) for k in ("p10", "p25", "p50", "p75", "p90"))
    
    iqr = p75 - p25
    sigma = iqr / IQR_TO_SIGMA if iqr > 0 else abs(p50) * 0.2
    mu = p50
    
    winsor_low = float(percentiles["p5"]) if percentiles.get("p5") is not None else mu - 2.5 * sigma
    winsor_high = float(percentiles["p95"]) if percentiles.get("p95") is not None else mu + 2.5 * sigma
    
    return ValuationDistributionSummary(
        p10=p10,
        p25=p25,
        p50=p50,
        p75=p75,
        p90=p90,
        winsor_low=winsor_low,
        winsor_high=winsor_high,
        probabilities=_clamped_normal_probabilities(
            mu, sigma, winsor_low, winsor_high,
            auto_thresholds(mu, "ge"), auto_thresholds(mu, "le")
        ),
        sample_count=0,
        is_from_real_distribution=False,
        winsorisation_applied=True,
    )


def summarize_from_single_ev(ev: float, uncertainty: float = DEFAULT_UNCERTAINTY) -> ValuationDistributionSummary:
    """
    Synthetic summary around a single EV estimate.
    
    Args:
        ev: Enterprise value estimate
        uncertainty: Fractional spread of p25/p75 around ev (0.2 = +/-20%)
    
    Returns:
        ValuationDistributionSummary
    """
    return summarize_from_percentiles({
        "p5": ev * (1 - uncertainty * 2.5),
        "p10": ev * (1 - uncertainty * 2.0),
        "p25": ev * (1 - uncertainty),
        "p50": ev,
        "p75": ev * (1 + uncertainty),
        "p90": ev * (1 + uncertainty * 2.0),
        "p95": ev * (1 + uncertainty * 2.5),
    })


def summarize_monte_carlo(result: MonteCarloResult, ev_multiple: float) -> ValuationDistributionSummary:
    """Summarise final ARR x ev_multiple over every path of a batch."""
    return summarize_from_samples(result.arr_samples * ev_multiple)
