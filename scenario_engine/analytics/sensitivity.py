"""Lever sensitivity: elasticities, tornado ranking and shock propagation."""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from scenario_engine.analytics.risk import (
    DEFAULT_EV_MULTIPLE,
    RiskClassification,
    compute_risk_profile,
)
from scenario_engine.analytics.status import NotComputed
from scenario_engine.errors import InvalidConfig, SimulationCancelled
from scenario_engine.inputs.baseline import SimulationConfig
from scenario_engine.inputs.levers import (
    LEVER_IDS,
    LEVER_LABELS,
    LEVER_MAX,
    LEVER_MIN,
    MAX_PERTURBATION_DELTA,
    LeverState,
)
from scenario_engine.simulation.kernel import MonteCarloKernel
from scenario_engine.simulation.results import MonteCarloResult
from scenario_engine.utils.math import clamp

logger = logging.getLogger(__name__)

DEFAULT_RUNS_PER_LEVER = 200
DEFAULT_PERTURBATION_DELTA = 10.0
TORNADO_SIZE = 5
# Lever points every lever moves at 100% shock intensity
SHOCK_POINTS_AT_FULL_INTENSITY = 25.0


@dataclass(frozen=True)
class ElasticityResult:
    """Response of survival (and EV/runway) to one lever."""
    
    lever_id: str
    label: str
    elasticity_score: float  # Survival change per lever point
    direction: str  # "positive" or "negative"
    low_value: float
    high_value: float
    low_survival: float
    high_survival: float
    delta_survival: float
    delta_ev: float
    delta_runway: float
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "lever_id": self.lever_id,
            "label": self.label,
            "elasticity_score": self.elasticity_score,
            "direction": self.direction,
            "low_value": self.low_value,
            "high_value": self.high_value,
            "low_survival": self.low_survival,
            "high_survival": self.high_survival,
            "delta_survival": self.delta_survival,
            "delta_ev": self.delta_ev,
            "delta_runway": self.delta_runway,
        }


@dataclass(frozen=True)
class TornadoBar:
    """One bar of the tornado chart: survival at the low and high lever value."""
    
    lever_id: str
    label: str
    low_survival: float
    high_survival: float
    low_ev: float
    high_ev: float
    spread: float
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "lever_id": self.lever_id,
            "label": self.label,
            "low_survival": self.low_survival,
            "high_survival": self.high_survival,
            "low_ev": self.low_ev,
            "high_ev": self.high_ev,
            "spread": self.spread,
        }


@dataclass(frozen=True)
class SensitivityProfile:
    """Ranked elasticities plus the top tornado bars."""
    
    elasticities: Tuple[ElasticityResult, ...]
    tornado: Tuple[TornadoBar, ...]
    runs_per_lever: int
    delta: float
    seed: int
    computed: bool = field(default=True, init=False)
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "computed": True,
            "elasticities": [e.to_dict() for e in self.elasticities],
            "tornado": [b.to_dict() for b in self.tornado],
            "runs_per_lever": self.runs_per_lever,
            "delta": self.delta,
            "seed": self.seed,
        }


@dataclass(frozen=True)
class ShockResult:
    """Risk state after shifting every lever in its adverse direction."""
    
    shock_intensity_pct: float
    survival_probability: float
    failure_probability: float
    median_ev: float
    median_runway: float
    classification: RiskClassification
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "shock_intensity_pct": self.shock_intensity_pct,
            "survival_probability": self.survival_probability,
            "failure_probability": self.failure_probability,
            "median_ev": self.median_ev,
            "median_runway": self.median_runway,
            "classification": self.classification.value,
        }


@dataclass(frozen=True)
class _BatchOutcome:
    survival: float
    median_ev: float
    median_runway: float
    
    @classmethod
    def from_result(cls, result: MonteCarloResult, ev_multiple: float) -> "_BatchOutcome":
        return cls(
            survival=result.survival_rate,
            median_ev=result.arr_percentiles.p50 * ev_multiple,
            median_runway=result.runway_percentiles.p50,
        )


def resolve_seed(seed: Optional[int]) -> int:
    """Return seed, or draw fresh OS entropy once when it is None."""
    if seed is not None:
        return seed
    return int(np.random.SeedSequence().entropy)


def _require_positive_runs(runs: int) -> None:
    if isinstance(runs, bool) or not isinstance(runs, int) or runs <= 0:
        raise InvalidConfig(f"runs must be a positive integer, got {runs!r}")


def _require_ev_multiple(ev_multiple: float) -> None:
    if not (isinstance(ev_multiple, (int, float)) and math.isfinite(ev_multiple) and ev_multiple > 0):
        raise InvalidConfig(f"ev_multiple must be a positive number, got {ev_multiple!r}")


def compute_sensitivity_profile(
    levers: Optional[LeverState],
    config: Optional[SimulationConfig],
    runs_per_lever: int = DEFAULT_RUNS_PER_LEVER,
    delta: float = DEFAULT_PERTURBATION_DELTA,
    ev_multiple: float = DEFAULT_EV_MULTIPLE,
    seed: Optional[int] = None,
    kernel: Optional[MonteCarloKernel] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None
) -> Union[SensitivityProfile, NotComputed]:
    """
    Perturb each lever down and up by `delta` and measure the response.
    
    All 2 x 9 batches run with the same seed, so differences between them
    come from the lever change alone. Batches run concurrently on a thread
    pool; each batch is itself run by `kernel`.
    
    Args:
        levers: Base lever state
        config: Base simulation config (its iteration count is replaced)
        runs_per_lever: Iterations per perturbation batch
        delta: Lever points moved in each direction (clamped to [0, 100])
        ev_multiple: ARR multiple used to express enterprise value
        seed: Shared batch seed (drawn once when None)
        kernel: Kernel for the inner batches (default: sequential kernel)
        max_workers: Number of batches run at once
        cancel_event: Abandons the analysis when set
    
    Returns:
        SensitivityProfile, or NotComputed if levers or config is missing
    """
    if levers is None or config is None:
        return NotComputed("Sensitivity needs both a lever state and a baseline configuration.")
    _require_positive_runs(runs_per_lever)
    _require_ev_multiple(ev_multiple)
    if not (isinstance(delta, (int, float)) and 0 < delta <= MAX_PERTURBATION_DELTA):
        raise InvalidConfig(f"delta must be in (0, {MAX_PERTURBATION_DELTA:g}], got {delta!r}")
    
    seed = resolve_seed(seed)
    kernel = kernel or MonteCarloKernel(max_workers=1)
    batch_config = config.with_iterations(runs_per_lever)
    
    # (lever_id, side) -> perturbed lever value
    perturbations: Dict[Tuple[str, str], float] = {}
    for lever_id in LEVER_IDS:
        base = levers.get(lever_id)
        perturbations[(lever_id, "low")] = clamp(base - delta, LEVER_MIN, LEVER_MAX)
        perturbations[(lever_id, "high")] = clamp(base + delta, LEVER_MIN, LEVER_MAX)
    
    logger.debug(
        "Running sensitivity: %d batches x %d runs (seed=%d)",
        len(perturbations), runs_per_lever, seed
    )
    
    outcomes: Dict[Tuple[str, str], _BatchOutcome] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_key = {
            executor.submit(
                kernel.simulate,
                levers.with_lever(key[0], value),
                batch_config,
                seed,
                cancel_event,
            ): key
            for key, value in perturbations.items()
        }
        try:
            for future in as_completed(future_to_key):
                key = future_to_key[future]
                outcomes[key] = _BatchOutcome.from_result(future.result(), ev_multiple)
        except SimulationCancelled:
            for future in future_to_key:
                future.cancel()
            raise
    
    elasticities: List[ElasticityResult] = []
    bars: List[TornadoBar] = []
    for lever_id in LEVER_IDS:
        low_value = perturbations[(lever_id, "low")]
        high_value = perturbations[(lever_id, "high")]
        low = outcomes[(lever_id, "low")]
        high = outcomes[(lever_id, "high")]
        
        span = high_value - low_value
        score = (high.survival - low.survival) / span if span > 0 else 0.0
        
        elasticities.append(ElasticityResult(
            lever_id=lever_id,
            label=LEVER_LABELS[lever_id],
            elasticity_score=score,
            direction="positive" if score >= 0 else "negative",
            low_value=low_value,
            high_value=high_value,
            low_survival=low.survival,
            high_survival=high.survival,
            delta_survival=high.survival - low.survival,
            delta_ev=high.median_ev - low.median_ev,
            delta_runway=high.median_runway - low.median_runway,
        ))
        bars.append(TornadoBar(
            lever_id=lever_id,
            label=LEVER_LABELS[lever_id],
            low_survival=low.survival,
            high_survival=high.survival,
            low_ev=low.median_ev,
            high_ev=high.median_ev,
            spread=abs(high.survival - low.survival),
        ))
    
    # Stable sorts: ties keep lever order
    elasticities.sort(key=lambda e: abs(e.elasticity_score), reverse=True)
    bars.sort(key=lambda b: b.spread, reverse=True)
    
    return SensitivityProfile(
        elasticities=tuple(elasticities),
        tornado=tuple(bars[:TORNADO_SIZE]),
        runs_per_lever=runs_per_lever,
        delta=float(delta),
        seed=seed,
    )


def shock_levers(levers: LeverState, shock_intensity_pct: float) -> LeverState:
    """Shift every lever adversely by intensity% of the full-intensity move."""
    if not isinstance(shock_intensity_pct, (int, float)) or not math.isfinite(shock_intensity_pct):
        raise InvalidConfig(f"shock intensity must be a finite number, got {shock_intensity_pct!r}")
    if shock_intensity_pct < 0:
        raise InvalidConfig(f"shock intensity must be non-negative, got {shock_intensity_pct!r}")
    return levers.shifted(SHOCK_POINTS_AT_FULL_INTENSITY * shock_intensity_pct / 100.0)


def compute_shock_propagation(
    base_levers: LeverState,
    config: SimulationConfig,
    shock_intensity_pct: float,
    runs: int = DEFAULT_RUNS_PER_LEVER,
    ev_multiple: float = DEFAULT_EV_MULTIPLE,
    seed: Optional[int] = None,
    kernel: Optional[MonteCarloKernel] = None,
    cancel_event: Optional[threading.Event] = None
) -> ShockResult:
    """
    Re-simulate with all levers shocked adversely and re-classify risk.
    
    At 0% intensity the levers are unchanged, so the result matches
    compute_risk_profile on a plain batch with the same runs and seed.
    
    Args:
        base_levers: Lever state before the shock
        config: Base simulation config (its iteration count is replaced)
        shock_intensity_pct: Shock intensity, >= 0 (100 = full intensity)
        runs: Iterations of the shocked batch
        ev_multiple: ARR multiple used to express enterprise value
        seed: Batch seed (drawn once when None)
        kernel: Kernel for the batch (default: executor-default workers)
        cancel_event: Abandons the batch when set
    
    Returns:
        ShockResult
    
    Raises:
        InvalidConfig: If the intensity is negative or runs is not positive
    """
    shocked = shock_levers(base_levers, shock_intensity_pct)
    _require_positive_runs(runs)
    _require_ev_multiple(ev_multiple)
    
    kernel = kernel or MonteCarloKernel()
    result = kernel.simulate(shocked, config.with_iterations(runs), resolve_seed(seed), cancel_event)
    profile = compute_risk_profile(result, ev_multiple)
    
    return ShockResult(
        shock_intensity_pct=float(shock_intensity_pct),
        survival_probability=profile.survival_probability,
        failure_probability=profile.failure_probability,
        median_ev=result.arr_percentiles.p50 * ev_multiple,
        median_runway=result.runway_percentiles.p50,
        classification=profile.classification,
    )
