"""Simulation package."""

from scenario_engine.simulation.paths import PathGenerator, SimulationPath, TrajectoryParams
from scenario_engine.simulation.results import (
    ConfidenceBand,
    DistributionStats,
    HistogramBucket,
    MonteCarloResult,
    PercentileSet,
    aggregate_paths,
)
from scenario_engine.simulation.kernel import MonteCarloKernel, simulate

__all__ = [
    "PathGenerator",
    "SimulationPath",
    "TrajectoryParams",
    "ConfidenceBand",
    "DistributionStats",
    "HistogramBucket",
    "MonteCarloResult",
    "PercentileSet",
    "aggregate_paths",
    "MonteCarloKernel",
    "simulate",
]
