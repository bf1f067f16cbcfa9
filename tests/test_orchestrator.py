"""Tests for the system analysis orchestrator."""
import math
from dataclasses import FrozenInstanceError, replace

import pytest

from scenario_engine.analytics import NotComputed, compute_risk_profile, summarize_from_single_ev
from scenario_engine.errors import InvalidConfig
from scenario_engine.system import (
    MethodConfig,
    SystemAnalysisSnapshot,
    generate_run_id,
    recompute_shock,
    run_system_analysis,
)


def _iter_numbers(value):
    if isinstance(value, dict):
        for v in value.values():
            yield from _iter_numbers(v)
    elif isinstance(value, list):
        for v in value:
            yield from _iter_numbers(v)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        yield value


def _fast_method(**overrides) -> MethodConfig:
    defaults = dict(sensitivity_runs=60, seed=3)
    defaults.update(overrides)
    return MethodConfig(**defaults)


# --- Guards ---


def test_missing_simulation_is_not_computed():
    result = run_system_analysis(None, None, None, None)
    assert isinstance(result, NotComputed)
    assert result.computed is False
    assert result.reason == "Simulation results not available. Run a Monte Carlo simulation first."


def test_simulation_without_paths_is_not_computed(small_result):
    result = run_system_analysis(replace(small_result, all_simulations=()), None, None, None)
    assert isinstance(result, NotComputed)
    assert result.reason == "No simulation paths found in results."


# --- Snapshot ---


def test_snapshot_without_strategy_skips_sensitivity(small_result, baseline_inputs):
    snapshot = run_system_analysis(small_result, baseline_inputs, None, None)
    assert isinstance(snapshot, SystemAnalysisSnapshot)
    assert snapshot.sensitivity_map == ()
    assert snapshot.tornado_ranking == ()
    assert snapshot.shock_state.shock_intensity_pct == 0.0


def test_full_snapshot(small_result, baseline_inputs, strategy_inputs):
    valuation = summarize_from_single_ev(12_000_000)
    snapshot = run_system_analysis(
        small_result, baseline_inputs, strategy_inputs, valuation, method_config=_fast_method()
    )
    
    assert snapshot.computed is True
    assert len(snapshot.sensitivity_map) == 9
    assert len(snapshot.tornado_ranking) == 5
    assert snapshot.valuation_summary is valuation
    assert snapshot.simulation_summary.iterations == small_result.iterations
    assert snapshot.simulation_summary.survival_rate == small_result.survival_rate
    assert snapshot.risk_profile == compute_risk_profile(small_result)
    assert snapshot.confidence_score.input_completeness_score == baseline_inputs.input_completeness_score
    assert snapshot.run_id.startswith("sa-")


def test_unshocked_state_mirrors_risk_profile(small_result, baseline_inputs, strategy_inputs):
    snapshot = run_system_analysis(small_result, baseline_inputs, strategy_inputs, None, method_config=_fast_method())
    assert snapshot.shock_state.survival_probability == snapshot.risk_profile.survival_probability
    assert snapshot.shock_state.classification is snapshot.risk_profile.classification
    assert snapshot.shock_state.median_ev == pytest.approx(small_result.arr_percentiles.p50 * 3.5)


def test_baseline_shock_intensity_runs_shock(small_result, baseline_inputs, strategy_inputs):
    snapshot = run_system_analysis(
        small_result, baseline_inputs, strategy_inputs, None,
        method_config=_fast_method(shock_baseline_intensity=40),
    )
    assert snapshot.shock_state.shock_intensity_pct == 40.0


def test_snapshot_numbers_are_finite(small_result, baseline_inputs, strategy_inputs):
    snapshot = run_system_analysis(small_result, baseline_inputs, strategy_inputs, None, method_config=_fast_method())
    numbers = list(_iter_numbers(snapshot.to_dict()))
    assert numbers
    assert all(math.isfinite(n) for n in numbers)


def test_run_id_is_passed_through(small_result):
    snapshot = run_system_analysis(small_result, None, None, None, run_id="run-abc")
    assert snapshot.run_id == "run-abc"


def test_snapshot_is_immutable(small_result):
    snapshot = run_system_analysis(small_result, None, None, None)
    with pytest.raises(FrozenInstanceError):
        snapshot.run_id = "changed"


def test_missing_baseline_uses_default_completeness(small_result):
    snapshot = run_system_analysis(small_result, None, None, None)
    assert snapshot.confidence_score.input_completeness_score == 0.5


def test_method_config_accepts_mapping(small_result):
    snapshot = run_system_analysis(small_result, None, None, None, method_config={"ev_multiple": 5.0})
    assert snapshot.risk_profile.ev_multiple == 5.0


def test_invalid_method_config_raises(small_result):
    with pytest.raises(InvalidConfig):
        run_system_analysis(small_result, None, None, None, method_config={"sensitivity_runs": 0})


# --- Helpers ---


def test_generated_run_ids_are_unique():
    ids = {generate_run_id() for _ in range(50)}
    assert len(ids) > 1
    assert all(i.startswith("sa-") and len(i.split("-")[2]) == 4 for i in ids)


def test_recompute_shock(baseline_inputs, neutral_levers):
    calm = recompute_shock(neutral_levers, baseline_inputs, 24, 0, runs=200, seed=8)
    stressed = recompute_shock(neutral_levers, baseline_inputs, 24, 100, runs=200, seed=8)
    assert stressed.shock_intensity_pct == 100.0
    assert stressed.survival_probability <= calm.survival_probability


def test_recompute_shock_rejects_negative_intensity(baseline_inputs, neutral_levers):
    with pytest.raises(InvalidConfig):
        recompute_shock(neutral_levers, baseline_inputs, 24, -1)
