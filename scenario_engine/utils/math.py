"""Mathematical utilities for the scenario engine."""

import math
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

# Percentile ranks reported for every final-state distribution
PERCENTILE_RANKS: Tuple[int, ...] = (5, 10, 25, 50, 75, 90, 95)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


def clamp01(value: float) -> float:
    """Clamp value into [0, 1]."""
    return clamp(value, 0.0, 1.0)


def finite_or(value: float, default: float = 0.0) -> float:
    """Return value as a float, or default when it is NaN or infinite."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default for a zero or non-finite denominator."""
    if denominator == 0 or not math.isfinite(denominator):
        return default
    return finite_or(numerator / denominator, default)


def normalize_linear(value: float, low: float, high: float, invert: bool = False) -> float:
    """
    Map value onto [0, 1] across a fixed range.
    
    Args:
        value: Raw metric
        low: Value mapped to 0
        high: Value mapped to 1
        invert: If True, higher raw values score lower
    
    Returns:
        Normalized score in [0, 1]; non-finite input scores 0
    """
    if not math.isfinite(value) or high == low:
        return 0.0
    t = clamp01((value - low) / (high - low))
    return 1.0 - t if invert else t


def percentile_index(rank: int, n: int) -> int:
    """
    Nearest-rank (floor) index of a percentile in a sorted sample.
    
    Integer arithmetic keeps the index stable, e.g. rank 10 of 2000
    always lands on element 200.
    """
    if n <= 0:
        raise ValueError("Cannot index a percentile of an empty sample")
    return min((rank * n) // 100, n - 1)


def percentile_from_sorted(sorted_values: Sequence[float], rank: int) -> float:
    """Percentile of an already-sorted sample (0.0 for an empty sample)."""
    n = len(sorted_values)
    if n == 0:
        return 0.0
    return float(sorted_values[percentile_index(rank, n)])


def calculate_percentiles(
    values: Iterable[float],
    ranks: Sequence[int] = PERCENTILE_RANKS
) -> Dict[int, float]:
    """
    Sort values and read each percentile rank by nearest-rank indexing.
    
    Args:
        values: Sample values (any order)
        ranks: Integer percentile ranks in [0, 100]
    
    Returns:
        Dictionary of rank -> value
    """
    sorted_values = np.sort(np.asarray(list(values), dtype=np.float64))
    return {rank: percentile_from_sorted(sorted_values, rank) for rank in ranks}


def calculate_distribution_stats(values: Iterable[float]) -> Dict[str, float]:
    """
    Mean, median, population standard deviation, range and skewness.
    
    Args:
        values: Sample values
    
    Returns:
        Dictionary with mean, median, std_dev, min, max, skewness
        (all zero for an empty sample)
    """
    arr = np.asarray(list(values), dtype=np.float64)
    if arr.size == 0:
        return dict(mean=0.0, median=0.0, std_dev=0.0, min=0.0, max=0.0, skewness=0.0)
    
    mean = float(np.mean(arr))
    std_dev = float(np.std(arr))
    skewness = float(np.mean(((arr - mean) / std_dev) ** 3)) if std_dev > 0 else 0.0
    
    return dict(
        mean=mean,
        median=float(np.median(arr)),
        std_dev=std_dev,
        min=float(np.min(arr)),
        max=float(np.max(arr)),
        skewness=skewness,
    )


def calculate_histogram(values: Iterable[float], bucket_count: int = 25) -> List[Tuple[float, float, int]]:
    """
    Equal-width histogram over the sample range.
    
    Args:
        values: Sample values
        bucket_count: Number of buckets
    
    Returns:
        List of (bucket_min, bucket_max, count); the last bucket is closed
    """
    arr = np.asarray(list(values), dtype=np.float64)
    if arr.size == 0:
        return []
    
    lo, hi = float(np.min(arr)), float(np.max(arr))
    if hi == lo:
        return [(lo, hi, int(arr.size))]
    
    counts, edges = np.histogram(arr, bins=bucket_count, range=(lo, hi))
    return [
        (float(edges[i]), float(edges[i + 1]), int(counts[i]))
        for i in range(bucket_count)
    ]
