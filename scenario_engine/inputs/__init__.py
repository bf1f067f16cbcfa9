"""Lever, config and baseline inputs."""

from scenario_engine.inputs.levers import (
    LEVER_IDS,
    LEVER_LABELS,
    LEVER_POLARITY,
    LEVER_NEUTRAL,
    LeverState,
)
from scenario_engine.inputs.baseline import (
    SimulationConfig,
    BaselineInputs,
    StrategyInputs,
    BaselineCompleteness,
    compute_baseline_completeness,
)

__all__ = [
    "LEVER_IDS",
    "LEVER_LABELS",
    "LEVER_POLARITY",
    "LEVER_NEUTRAL",
    "LeverState",
    "SimulationConfig",
    "BaselineInputs",
    "StrategyInputs",
    "BaselineCompleteness",
    "compute_baseline_completeness",
]
