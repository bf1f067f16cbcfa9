"""Aggregate statistics over a batch of simulation paths."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from scenario_engine.inputs.baseline import SimulationConfig
from scenario_engine.simulation.paths import SimulationPath
from scenario_engine.utils.math import (
    calculate_distribution_stats,
    calculate_histogram,
    calculate_percentiles,
    percentile_from_sorted,
    percentile_index,
)


@dataclass(frozen=True)
class PercentileSet:
    """Nearest-rank percentiles of a sample; p10 <= p50 <= p90 by construction."""
    
    p5: float
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    p95: float
    
    @classmethod
    def from_values(cls, values: Sequence[float]) -> "PercentileSet":
        """Sort values and index each rank."""
        pct = calculate_percentiles(values)
        return cls(
            p5=pct[5], p10=pct[10], p25=pct[25], p50=pct[50],
            p75=pct[75], p90=pct[90], p95=pct[95],
        )
    
    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            "p5": self.p5, "p10": self.p10, "p25": self.p25, "p50": self.p50,
            "p75": self.p75, "p90": self.p90, "p95": self.p95,
        }


@dataclass(frozen=True)
class DistributionStats:
    """Moments and range of a sample."""
    
    mean: float
    median: float
    std_dev: float
    min: float
    max: float
    skewness: float
    
    @classmethod
    def from_values(cls, values: Sequence[float]) -> "DistributionStats":
        return cls(**calculate_distribution_stats(values))
    
    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            "mean": self.mean, "median": self.median, "std_dev": self.std_dev,
            "min": self.min, "max": self.max, "skewness": self.skewness,
        }


@dataclass(frozen=True)
class ConfidenceBand:
    """ARR percentiles across paths still alive at a month."""
    
    month: int
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float


@dataclass(frozen=True)
class HistogramBucket:
    """One bucket of the final-ARR histogram."""
    
    min: float
    max: float
    count: int
    frequency: float


@dataclass(frozen=True)
class MonteCarloResult:
    """
    Aggregate over every path of one kernel batch.
    
    Equality ignores `execution_time_ms`, so two runs with the same
    levers, config and seed compare equal.
    """
    
    iterations: int
    time_horizon_months: int
    
    # Survival
    survival_rate: float
    survival_by_month: Tuple[float, ...]
    median_survival_months: float
    
    # Final-state distributions
    arr_distribution: DistributionStats
    arr_percentiles: PercentileSet
    arr_histogram: Tuple[HistogramBucket, ...]
    arr_confidence_bands: Tuple[ConfidenceBand, ...]
    cash_distribution: DistributionStats
    cash_percentiles: PercentileSet
    runway_distribution: DistributionStats
    runway_percentiles: PercentileSet
    
    # Representative paths (P95 / P50 / P5 by final ARR)
    best_case: SimulationPath
    median_case: SimulationPath
    worst_case: SimulationPath
    
    all_simulations: Tuple[SimulationPath, ...]
    seed: Optional[int] = None
    execution_time_ms: float = field(default=0.0, compare=False)
    
    @property
    def arr_samples(self) -> np.ndarray:
        """Final ARR of every path, in path order."""
        return np.array([p.final_arr for p in self.all_simulations], dtype=np.float64)
    
    def summary(self) -> Dict:
        """Headline statistics without the per-path payload."""
        return {
            "iterations": self.iterations,
            "time_horizon_months": self.time_horizon_months,
            "execution_time_ms": self.execution_time_ms,
            "survival_rate": self.survival_rate,
            "median_survival_months": self.median_survival_months,
            "arr_distribution": self.arr_distribution.to_dict(),
            "arr_percentiles": self.arr_percentiles.to_dict(),
            "cash_percentiles": self.cash_percentiles.to_dict(),
            "runway_percentiles": self.runway_percentiles.to_dict(),
            "seed": self.seed,
        }


def _confidence_bands(paths: Sequence[SimulationPath], n_months: int) -> Tuple[ConfidenceBand, ...]:
    """Per-month ARR bands over the paths that reached each month."""
    matrix = np.full((len(paths), n_months), np.nan)
    for i, path in enumerate(paths):
        matrix[i, :len(path)] = path.arr
    
    bands = []
    for month in range(n_months):
        column = matrix[:, month]
        alive = np.sort(column[~np.isnan(column)])
        if alive.size == 0:
            continue
        bands.append(ConfidenceBand(
            month=month + 1,
            p10=percentile_from_sorted(alive, 10),
            p25=percentile_from_sorted(alive, 25),
            p50=percentile_from_sorted(alive, 50),
            p75=percentile_from_sorted(alive, 75),
            p90=percentile_from_sorted(alive, 90),
        ))
    return tuple(bands)


def aggregate_paths(
    paths: Sequence[SimulationPath],
    config: SimulationConfig,
    seed: Optional[int] = None,
    execution_time_ms: float = 0.0
) -> MonteCarloResult:
    """
    Build a MonteCarloResult from the full, concatenated path set.
    
    Every statistic sorts or reduces the complete sample, so the result
    does not depend on the order in which blocks finished.
    
    Args:
        paths: All paths of the batch, in path-id order
        config: Config the batch ran with
        seed: Entropy of the batch's root seed sequence
        execution_time_ms: Wall-clock time of the batch
    
    Returns:
        MonteCarloResult
    """
    if len(paths) == 0:
        raise ValueError("Cannot aggregate an empty batch")
    
    n = len(paths)
    n_months = config.time_horizon_months
    
    final_arr = np.array([p.final_arr for p in paths])
    final_cash = np.array([p.final_cash for p in paths])
    final_runway = np.array([p.final_runway for p in paths])
    survival_months = np.array([p.survival_months for p in paths])
    
    survived = np.array([p.survived for p in paths], dtype=bool)
    survivors = int(np.count_nonzero(survived))
    # A path that fails in month m is no longer alive at month m
    survival_by_month = tuple(
        float(np.count_nonzero(survived | (survival_months > month))) / n
        for month in range(1, n_months + 1)
    )
    
    histogram = tuple(
        HistogramBucket(min=lo, max=hi, count=count, frequency=count / n)
        for lo, hi, count in calculate_histogram(final_arr, 25)
    )
    
    # Stable sort keeps path-id order among equal final ARRs
    by_arr = sorted(paths, key=lambda p: p.final_arr)
    
    return MonteCarloResult(
        iterations=n,
        time_horizon_months=n_months,
        survival_rate=survivors / n,
        survival_by_month=survival_by_month,
        median_survival_months=calculate_percentiles(survival_months, (50,))[50],
        arr_distribution=DistributionStats.from_values(final_arr),
        arr_percentiles=PercentileSet.from_values(final_arr),
        arr_histogram=histogram,
        arr_confidence_bands=_confidence_bands(paths, n_months),
        cash_distribution=DistributionStats.from_values(final_cash),
        cash_percentiles=PercentileSet.from_values(final_cash),
        runway_distribution=DistributionStats.from_values(final_runway),
        runway_percentiles=PercentileSet.from_values(final_runway),
        best_case=by_arr[percentile_index(95, n)],
        median_case=by_arr[percentile_index(50, n)],
        worst_case=by_arr[percentile_index(5, n)],
        all_simulations=tuple(paths),
        seed=seed,
        execution_time_ms=execution_time_ms,
    )
