"""System analysis orchestrator.

Composes the risk, sensitivity, shock and confidence engines over a
completed primary simulation into a single immutable snapshot. Nothing here
reads settings, touches the filesystem or caches across calls.
"""

import logging
import secrets
import threading
import time
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from scenario_engine.analytics.confidence import ConfidenceInputs, calculate_model_confidence
from scenario_engine.analytics.risk import DEFAULT_EV_MULTIPLE, compute_risk_profile
from scenario_engine.analytics.sensitivity import (
    DEFAULT_RUNS_PER_LEVER,
    ShockResult,
    compute_sensitivity_profile,
    compute_shock_propagation,
    resolve_seed,
)
from scenario_engine.analytics.status import NotComputed
from scenario_engine.analytics.valuation import ValuationDistributionSummary
from scenario_engine.errors import InvalidConfig
from scenario_engine.inputs.baseline import BaselineInputs, StrategyInputs
from scenario_engine.inputs.levers import LeverState
from scenario_engine.simulation.kernel import MonteCarloKernel
from scenario_engine.simulation.results import MonteCarloResult
from scenario_engine.system.snapshot import MethodConfig, SimulationSummary, SystemAnalysisSnapshot
from scenario_engine.utils.math import finite_or

logger = logging.getLogger(__name__)

DEFAULT_INPUT_COMPLETENESS = 0.5

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_run_id(timestamp_ms: Optional[int] = None) -> str:
    """Run identifier of the form sa-<base36 timestamp>-<4 random base36 chars>."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    suffix = _to_base36(secrets.randbelow(36 ** 4)).rjust(4, "0")
    return f"sa-{_to_base36(timestamp_ms)}-{suffix}"


def _resolve_method_config(method_config: Union[MethodConfig, Mapping[str, Any], None]) -> MethodConfig:
    if method_config is None:
        return MethodConfig()
    if isinstance(method_config, MethodConfig):
        return method_config
    try:
        return MethodConfig.model_validate(dict(method_config))
    except ValidationError as e:
        raise InvalidConfig(f"Invalid method config: {e}") from e


def run_system_analysis(
    monte_carlo_result: Optional[MonteCarloResult],
    baseline_inputs: Optional[BaselineInputs],
    strategy_inputs: Optional[StrategyInputs],
    valuation_distribution: Optional[ValuationDistributionSummary],
    method_config: Union[MethodConfig, Mapping[str, Any], None] = None,
    run_id: Optional[str] = None,
    kernel: Optional[MonteCarloKernel] = None,
    cancel_event: Optional[threading.Event] = None
) -> Union[SystemAnalysisSnapshot, NotComputed]:
    """
    Run the full analysis over a completed primary simulation.
    
    Sequence: guard on the simulation, risk profile, simulation summary,
    sensitivity and tornado (only when both baseline and strategy inputs
    are present), shock state, confidence, snapshot.
    
    Args:
        monte_carlo_result: Primary batch, or None if none has run yet
        baseline_inputs: Baseline financials (None skips sensitivity)
        strategy_inputs: Levers and horizon (None skips sensitivity)
        valuation_distribution: Passed through into the snapshot unchanged
        method_config: MethodConfig, or a mapping of its fields
        run_id: Caller-supplied identifier; generated when None
        kernel: Kernel for the shock batch (sensitivity batches run
            sequentially inside and concurrently across batches)
        cancel_event: Abandons the extra batches when set
    
    Returns:
        SystemAnalysisSnapshot, or NotComputed naming the missing prerequisite
    
    Raises:
        InvalidConfig: If method_config or the baseline amounts are invalid
    """
    method = _resolve_method_config(method_config)
    
    if monte_carlo_result is None:
        logger.warning("System analysis requested before any simulation ran")
        return NotComputed("Simulation results not available. Run a Monte Carlo simulation first.")
    if not monte_carlo_result.all_simulations:
        logger.warning("System analysis requested on a simulation with no paths")
        return NotComputed("No simulation paths found in results.")
    
    # 1. Risk profile
    risk = compute_risk_profile(monte_carlo_result, method.ev_multiple)
    if isinstance(risk, NotComputed):
        return NotComputed(risk.reason)
    
    # 2. Simulation summary
    summary = SimulationSummary.from_result(monte_carlo_result)
    
    # 3. Sensitivity and tornado
    sensitivity_map = ()
    tornado_ranking = ()
    config = None
    seed = resolve_seed(method.seed)
    if strategy_inputs is not None and baseline_inputs is not None:
        config = baseline_inputs.to_simulation_config(
            strategy_inputs.horizon_months, method.sensitivity_runs
        )
        sensitivity = compute_sensitivity_profile(
            strategy_inputs.levers,
            config,
            runs_per_lever=method.sensitivity_runs,
            delta=method.perturbation_delta,
            ev_multiple=method.ev_multiple,
            seed=seed,
            max_workers=method.max_workers,
            cancel_event=cancel_event,
        )
        if not isinstance(sensitivity, NotComputed):
            sensitivity_map = sensitivity.elasticities
            tornado_ranking = sensitivity.tornado
    else:
        logger.info("Baseline or strategy inputs missing; sensitivity skipped")
    
    # 4. Shock state, unshocked unless a baseline intensity is configured
    shock_state = ShockResult(
        shock_intensity_pct=0.0,
        survival_probability=risk.survival_probability,
        failure_probability=risk.failure_probability,
        median_ev=finite_or(monte_carlo_result.arr_percentiles.p50 * method.ev_multiple),
        median_runway=finite_or(monte_carlo_result.runway_percentiles.p50),
        classification=risk.classification,
    )
    if config is not None and method.shock_baseline_intensity > 0:
        shock_state = compute_shock_propagation(
            strategy_inputs.levers,
            config,
            method.shock_baseline_intensity,
            runs=method.sensitivity_runs,
            ev_multiple=method.ev_multiple,
            seed=seed,
            kernel=kernel,
            cancel_event=cancel_event,
        )
    
    # 5. Confidence
    completeness = (
        baseline_inputs.input_completeness_score
        if baseline_inputs is not None else DEFAULT_INPUT_COMPLETENESS
    )
    confidence = calculate_model_confidence(ConfidenceInputs(
        sample_size=monte_carlo_result.iterations,
        distribution_std_dev=monte_carlo_result.arr_distribution.std_dev,
        distribution_mean=monte_carlo_result.arr_distribution.mean,
        input_completeness_score=completeness,
        parameter_stability_score=method.parameter_stability_score,
        method_consistency_score=method.method_consistency_score,
    ))
    
    # 6. Snapshot
    timestamp = int(time.time() * 1000)
    return SystemAnalysisSnapshot(
        run_id=run_id if run_id is not None else generate_run_id(timestamp),
        timestamp=timestamp,
        simulation_summary=summary,
        risk_profile=risk,
        sensitivity_map=tuple(sensitivity_map),
        tornado_ranking=tuple(tornado_ranking),
        shock_state=shock_state,
        valuation_summary=valuation_distribution,
        confidence_score=confidence,
    )


def recompute_shock(
    levers: LeverState,
    baseline_inputs: BaselineInputs,
    horizon_months: int,
    shock_intensity_pct: float,
    runs: int = DEFAULT_RUNS_PER_LEVER,
    ev_multiple: float = DEFAULT_EV_MULTIPLE,
    seed: Optional[int] = None,
    kernel: Optional[MonteCarloKernel] = None,
    cancel_event: Optional[threading.Event] = None
) -> ShockResult:
    """
    Shock propagation for one slider position, outside a full analysis.
    
    Args:
        levers: Current lever state
        baseline_inputs: Baseline financials
        horizon_months: Simulation horizon
        shock_intensity_pct: Shock intensity, >= 0
        runs: Iterations of the shocked batch
        ev_multiple: ARR multiple used to express enterprise value
        seed: Batch seed (fresh entropy when None)
        kernel: Kernel for the batch
        cancel_event: Abandons the batch when set
    
    Returns:
        ShockResult
    """
    config = baseline_inputs.to_simulation_config(horizon_months, runs)
    return compute_shock_propagation(
        levers,
        config,
        shock_intensity_pct,
        runs=runs,
        ev_multiple=ev_multiple,
        seed=seed,
        kernel=kernel,
        cancel_event=cancel_event,
    )
