import pytest

from scenario_engine.inputs import BaselineInputs, LeverState, SimulationConfig, StrategyInputs
from scenario_engine.simulation import simulate


@pytest.fixture
def neutral_levers() -> LeverState:
    return LeverState()


@pytest.fixture
def example_config() -> SimulationConfig:
    return SimulationConfig(
        iterations=2000,
        time_horizon_months=36,
        starting_cash=2_800_000,
        starting_arr=3_200_000,
        monthly_burn=180_000,
    )


@pytest.fixture
def small_config(example_config) -> SimulationConfig:
    return example_config.with_iterations(300)


@pytest.fixture
def baseline_inputs() -> BaselineInputs:
    return BaselineInputs(
        arr=3_200_000,
        monthly_burn=180_000,
        cash_on_hand=2_800_000,
        gross_margin_pct=72.0,
        input_completeness_score=0.8,
    )


@pytest.fixture
def strategy_inputs(neutral_levers) -> StrategyInputs:
    return StrategyInputs(levers=neutral_levers, horizon_months=24)


@pytest.fixture
def small_result(neutral_levers, small_config):
    return simulate(neutral_levers, small_config, seed=11, max_workers=1)
