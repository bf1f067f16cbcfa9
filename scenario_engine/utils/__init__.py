"""Utility modules."""

from scenario_engine.utils.math import (
    PERCENTILE_RANKS,
    clamp,
    clamp01,
    finite_or,
    safe_ratio,
    normalize_linear,
    percentile_index,
    percentile_from_sorted,
    calculate_percentiles,
    calculate_distribution_stats,
    calculate_histogram,
)
from scenario_engine.utils.logging import setup_logger

__all__ = [
    "PERCENTILE_RANKS",
    "clamp",
    "clamp01",
    "finite_or",
    "safe_ratio",
    "normalize_linear",
    "percentile_index",
    "percentile_from_sorted",
    "calculate_percentiles",
    "calculate_distribution_stats",
    "calculate_histogram",
    "setup_logger",
]
