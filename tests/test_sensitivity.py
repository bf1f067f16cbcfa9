"""Tests for elasticities, tornado ranking and shock propagation."""
import logging

import pytest

from scenario_engine.analytics import (
    NotComputed,
    compute_risk_profile,
    compute_sensitivity_profile,
    compute_shock_propagation,
)
from scenario_engine.analytics.sensitivity import shock_levers
from scenario_engine.errors import InvalidConfig
from scenario_engine.inputs import LEVER_IDS, LeverState
from scenario_engine.simulation import MonteCarloKernel, simulate


@pytest.fixture
def sensitivity(neutral_levers, small_config):
    return compute_sensitivity_profile(neutral_levers, small_config, runs_per_lever=150, seed=21, max_workers=4)


def test_every_lever_has_an_elasticity(sensitivity):
    assert sorted(e.lever_id for e in sensitivity.elasticities) == sorted(LEVER_IDS)


def test_elasticities_are_ranked_by_magnitude(sensitivity):
    scores = [abs(e.elasticity_score) for e in sensitivity.elasticities]
    assert scores == sorted(scores, reverse=True)


def test_elasticity_is_survival_change_per_point(sensitivity):
    for e in sensitivity.elasticities:
        assert e.high_value - e.low_value == pytest.approx(20.0)
        assert e.elasticity_score == pytest.approx((e.high_survival - e.low_survival) / 20.0)
        assert e.direction == ("positive" if e.elasticity_score >= 0 else "negative")


def test_elasticity_signs_follow_lever_polarity(sensitivity):
    by_id = {e.lever_id: e for e in sensitivity.elasticities}
    assert by_id["execution_risk"].elasticity_score <= 0
    assert by_id["market_volatility"].elasticity_score <= 0
    assert by_id["demand_strength"].elasticity_score >= 0


def test_tornado_is_top_five_by_spread(sensitivity):
    spreads = [bar.spread for bar in sensitivity.tornado]
    assert len(sensitivity.tornado) == 5
    assert spreads == sorted(spreads, reverse=True)
    all_spreads = sorted((abs(e.high_survival - e.low_survival) for e in sensitivity.elasticities), reverse=True)
    assert spreads == pytest.approx(all_spreads[:5])


def test_perturbation_is_clamped_at_edges(small_config):
    levers = LeverState(demand_strength=95, execution_risk=3)
    profile = compute_sensitivity_profile(levers, small_config, runs_per_lever=50, seed=1)
    by_id = {e.lever_id: e for e in profile.elasticities}
    assert by_id["demand_strength"].high_value == 100.0
    assert by_id["execution_risk"].low_value == 0.0
    assert by_id["execution_risk"].high_value == 13.0


def test_sensitivity_is_reproducible_across_workers(neutral_levers, small_config):
    a = compute_sensitivity_profile(neutral_levers, small_config, runs_per_lever=60, seed=5, max_workers=1)
    b = compute_sensitivity_profile(neutral_levers, small_config, runs_per_lever=60, seed=5, max_workers=6)
    assert a == b


def test_sensitivity_without_inputs_is_not_computed(small_config):
    assert isinstance(compute_sensitivity_profile(None, small_config), NotComputed)
    assert isinstance(compute_sensitivity_profile(LeverState(), None), NotComputed)


@pytest.mark.parametrize("kwargs", [dict(runs_per_lever=0), dict(delta=0), dict(delta=60), dict(delta=150)])
def test_sensitivity_rejects_bad_parameters(neutral_levers, small_config, kwargs):
    with pytest.raises(InvalidConfig):
        compute_sensitivity_profile(neutral_levers, small_config, **kwargs)


def test_sensitivity_accepts_largest_delta(neutral_levers, small_config):
    profile = compute_sensitivity_profile(neutral_levers, small_config, runs_per_lever=20, delta=50, seed=4)
    assert len(profile.elasticities) == len(LEVER_IDS)


def test_sensitivity_batch_plan_is_logged_at_debug(neutral_levers, small_config, caplog):
    caplog.set_level(logging.DEBUG, logger="scenario_engine.analytics.sensitivity")
    compute_sensitivity_profile(neutral_levers, small_config, runs_per_lever=20, seed=6, max_workers=1)
    records = [r for r in caplog.records if r.getMessage().startswith("Running sensitivity")]
    assert len(records) == 1
    assert records[0].levelno == logging.DEBUG
    assert records[0].getMessage() == "Running sensitivity: 18 batches x 20 runs (seed=6)"
    assert records[0].args == (18, 20, 6)


# --- Shock propagation ---


def test_zero_shock_equals_unshocked_risk_state(neutral_levers, small_config):
    runs, seed = 400, 99
    shock = compute_shock_propagation(
        neutral_levers, small_config, 0, runs=runs, seed=seed, kernel=MonteCarloKernel(max_workers=1)
    )
    baseline = simulate(neutral_levers, small_config.with_iterations(runs), seed=seed)
    profile = compute_risk_profile(baseline)
    
    assert shock.survival_probability == profile.survival_probability
    assert shock.failure_probability == profile.failure_probability
    assert shock.classification is profile.classification
    assert shock.median_ev == pytest.approx(baseline.arr_percentiles.p50 * 3.5)
    assert shock.median_runway == baseline.runway_percentiles.p50


def test_shock_never_improves_survival(neutral_levers, small_config):
    survival = [
        compute_shock_propagation(neutral_levers, small_config, pct, runs=300, seed=4).survival_probability
        for pct in (0, 50, 100)
    ]
    assert survival[0] >= survival[1] >= survival[2]


def test_negative_shock_raises(neutral_levers, small_config):
    with pytest.raises(InvalidConfig):
        compute_shock_propagation(neutral_levers, small_config, -5)


def test_full_shock_moves_levers_25_points():
    shocked = shock_levers(LeverState(), 100)
    assert shocked.demand_strength == 25.0
    assert shocked.funding_pressure == 75.0
