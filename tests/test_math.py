"""Tests for numeric helpers."""
import math

import pytest

from scenario_engine.utils.math import (
    calculate_distribution_stats,
    calculate_histogram,
    calculate_percentiles,
    finite_or,
    normalize_linear,
    percentile_index,
    safe_ratio,
)


def test_percentile_index_is_nearest_rank_floor():
    assert percentile_index(10, 2000) == 200
    assert percentile_index(50, 7) == 3
    assert percentile_index(100, 10) == 9


def test_percentile_index_rejects_empty_sample():
    with pytest.raises(ValueError):
        percentile_index(50, 0)


def test_percentiles_are_ordered_and_order_independent():
    values = [9.0, 1.0, 5.0, 3.0, 7.0, 2.0, 8.0, 4.0, 6.0, 10.0]
    pct = calculate_percentiles(values)
    assert pct == calculate_percentiles(sorted(values))
    assert pct[10] <= pct[50] <= pct[90]
    assert pct[50] == 6.0


def test_distribution_stats_of_empty_sample_are_zero():
    stats = calculate_distribution_stats([])
    assert all(v == 0.0 for v in stats.values())


def test_distribution_stats_population_std():
    stats = calculate_distribution_stats([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
    assert stats["mean"] == pytest.approx(5.0)
    assert stats["std_dev"] == pytest.approx(2.0)


def test_histogram_counts_every_value():
    buckets = calculate_histogram(range(100), bucket_count=10)
    assert len(buckets) == 10
    assert sum(count for _, _, count in buckets) == 100


def test_histogram_of_constant_sample_has_one_bucket():
    assert calculate_histogram([3.0, 3.0, 3.0]) == [(3.0, 3.0, 3)]


def test_normalize_linear_and_invert():
    assert normalize_linear(0.5, 0.0, 1.0) == pytest.approx(0.5)
    assert normalize_linear(5.0, 0.0, 1.0) == 1.0
    assert normalize_linear(0.25, 0.0, 1.0, invert=True) == pytest.approx(0.75)
    assert normalize_linear(math.nan, 0.0, 1.0) == 0.0


def test_finite_or_and_safe_ratio():
    assert finite_or(math.inf, 1.5) == 1.5
    assert finite_or("x") == 0.0
    assert safe_ratio(1.0, 0.0, default=-1.0) == -1.0
    assert safe_ratio(3.0, 2.0) == 1.5
