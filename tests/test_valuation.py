"""Tests for the valuation distribution summariser."""
import numpy as np
import pytest

from scenario_engine.analytics import (
    summarize_from_percentiles,
    summarize_from_samples,
    summarize_from_single_ev,
    summarize_monte_carlo,
)
from scenario_engine.analytics.valuation import auto_thresholds, format_compact


def test_too_few_samples_gives_zeroed_summary():
    summary = summarize_from_samples([1.0, 2.0, 3.0])
    assert summary.p50 == 0.0
    assert summary.sample_count == 3
    assert summary.probabilities == ()
    assert not summary.is_from_real_distribution


def test_samples_are_winsorised():
    samples = list(range(1, 101)) + [10_000_000]
    summary = summarize_from_samples(samples)
    assert summary.winsorisation_applied
    assert summary.p10 <= summary.p50 <= summary.p90 <= summary.winsor_high
    assert summary.winsor_high < 10_000_000
    assert summary.sample_count == 101


def test_sample_probabilities_are_empirical():
    samples = np.arange(1, 101, dtype=float) * 1_000_000
    summary = summarize_from_samples(samples, ge_thresholds=[50_000_000], le_thresholds=[20_000_000])
    ge, le = summary.probabilities
    assert ge.direction == "ge" and ge.probability == pytest.approx(0.51)
    assert le.direction == "le" and le.probability == pytest.approx(0.20)
    assert ge.label == "EV ≥ $50M"


def test_percentile_summary_uses_normal_approximation():
    summary = summarize_from_percentiles({"p10": 6e6, "p25": 8e6, "p50": 10e6, "p75": 12e6, "p90": 14e6})
    assert not summary.is_from_real_distribution
    assert summary.winsor_low < summary.p10
    at_median = [p for p in summary.probabilities if p.direction == "ge" and p.value == 10e6]
    assert at_median and at_median[0].probability == pytest.approx(0.5)
    assert all(0.0 <= p.probability <= 1.0 for p in summary.probabilities)


def test_single_ev_is_centered():
    summary = summarize_from_single_ev(20_000_000, uncertainty=0.1)
    assert summary.p50 == 20_000_000
    assert summary.p25 == pytest.approx(18_000_000)
    assert summary.winsor_high == pytest.approx(25_000_000)
    assert summary.sample_count == 0


def test_auto_thresholds_are_rounded_near_median():
    assert auto_thresholds(23_000_000, "ge") == [20_000_000, 20_000_000, 30_000_000]
    assert auto_thresholds(23_000_000, "le") == [10_000_000, 10_000_000]


def test_format_compact():
    assert format_compact(25_000_000) == "$25M"
    assert format_compact(1_500_000_000) == "$1.5B"


def test_summarize_monte_carlo(small_result):
    summary = summarize_monte_carlo(small_result, ev_multiple=3.5)
    assert summary.sample_count == small_result.iterations
    assert summary.is_from_real_distribution
