"""Tests for lever state, simulation config and baseline completeness."""
import math

import numpy as np
import pytest

from scenario_engine.errors import InvalidConfig, InvalidLevers
from scenario_engine.inputs import (
    LEVER_IDS,
    BaselineInputs,
    LeverState,
    SimulationConfig,
    compute_baseline_completeness,
)


def _make_config(**overrides) -> SimulationConfig:
    defaults = dict(
        iterations=100,
        time_horizon_months=12,
        starting_cash=1_000_000,
        starting_arr=1_200_000,
        monthly_burn=50_000,
    )
    defaults.update(overrides)
    return SimulationConfig(**defaults)


# --- Lever state ---


def test_levers_default_to_neutral():
    levers = LeverState()
    assert all(levers.get(lever_id) == 50.0 for lever_id in LEVER_IDS)


def test_levers_are_clamped():
    levers = LeverState(demand_strength=140, execution_risk=-20)
    assert levers.demand_strength == 100.0
    assert levers.execution_risk == 0.0


def test_levers_accept_numpy_scalars():
    levers = LeverState(pricing_power=np.float64(61.5))
    assert levers.pricing_power == 61.5


@pytest.mark.parametrize("bad", ["high", None, True, float("nan")])
def test_levers_reject_non_numeric(bad):
    with pytest.raises(InvalidLevers):
        LeverState(demand_strength=bad)


def test_from_mapping_accepts_camel_and_snake_case():
    levers = LeverState.from_mapping({"demandStrength": 70, "execution_risk": 20})
    assert levers.demand_strength == 70.0
    assert levers.execution_risk == 20.0
    assert levers.pricing_power == 50.0


def test_from_mapping_rejects_unknown_lever():
    with pytest.raises(InvalidLevers):
        LeverState.from_mapping({"burnMultiple": 10})


def test_invalid_levers_is_an_invalid_config():
    assert issubclass(InvalidLevers, InvalidConfig)


def test_with_lever_clamps_and_keeps_others():
    base = LeverState(cost_discipline=80)
    moved = base.with_lever("demand_strength", 105)
    assert moved.demand_strength == 100.0
    assert moved.cost_discipline == 80.0
    assert base.demand_strength == 50.0


def test_shifted_moves_levers_adversely():
    shocked = LeverState().shifted(10)
    assert shocked.demand_strength == 40.0
    assert shocked.cost_discipline == 40.0
    assert shocked.execution_risk == 60.0
    assert shocked.market_volatility == 60.0


def test_shifted_by_zero_is_identity():
    levers = LeverState(demand_strength=73, funding_pressure=12)
    assert levers.shifted(0) == levers


def test_to_dict_has_all_levers():
    assert list(LeverState().to_dict()) == list(LEVER_IDS)


# --- Simulation config ---


@pytest.mark.parametrize("field,value", [
    ("iterations", 0),
    ("iterations", -5),
    ("iterations", 2.5),
    ("time_horizon_months", 0),
    ("starting_cash", -1.0),
    ("starting_arr", float("inf")),
    ("monthly_burn", -100.0),
])
def test_config_rejects_invalid_values(field, value):
    with pytest.raises(InvalidConfig):
        _make_config(**{field: value})


def test_gross_monthly_cost_adds_revenue_and_burn():
    config = _make_config(starting_arr=1_200_000, monthly_burn=50_000)
    assert config.gross_monthly_cost == pytest.approx(150_000)


def test_with_iterations_keeps_position():
    config = _make_config().with_iterations(7)
    assert config.iterations == 7
    assert config.starting_cash == 1_000_000


def test_baseline_to_simulation_config():
    baseline = BaselineInputs(arr=2_000_000, monthly_burn=90_000, cash_on_hand=1_500_000)
    config = baseline.to_simulation_config(horizon_months=18, iterations=250)
    assert config.iterations == 250
    assert config.time_horizon_months == 18
    assert config.starting_arr == 2_000_000
    assert config.starting_cash == 1_500_000


def test_baseline_completeness_score_is_clamped():
    assert BaselineInputs(arr=1, monthly_burn=1, cash_on_hand=1, input_completeness_score=1.7).input_completeness_score == 1.0


@pytest.mark.parametrize("score", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_completeness_score_is_zero(score):
    baseline = BaselineInputs(arr=1, monthly_burn=1, cash_on_hand=1, input_completeness_score=score)
    assert baseline.input_completeness_score == 0.0


# --- Baseline completeness ---


def test_completeness_of_empty_baseline_is_zero():
    result = compute_baseline_completeness(None)
    assert result.completeness == 0.0
    assert result.filled_count == 0
    assert len(result.missing) == result.total_required


def test_completeness_counts_valid_fields_only():
    result = compute_baseline_completeness({
        "arr": 1_000_000,
        "monthly_burn": 80_000,
        "cash_on_hand": 0,
        "gross_margin_pct": 500,  # Out of range
        "headcount": math.nan,
    })
    assert result.filled_count == 3
    assert "Gross Margin %" in result.missing
    assert "Headcount" in result.missing
    assert result.completeness == pytest.approx(3 / result.total_required)
