"""Tests for model confidence scoring."""
import math

import pytest

from scenario_engine.analytics import ConfidenceLevel, ConfidenceInputs, calculate_model_confidence
from scenario_engine.analytics.confidence import confidence_band, distribution_stability, sample_adequacy


def _make_inputs(**overrides) -> ConfidenceInputs:
    defaults = dict(
        sample_size=10_000,
        distribution_std_dev=1_000_000.0,
        distribution_mean=4_000_000.0,
        input_completeness_score=0.8,
        parameter_stability_score=0.75,
        method_consistency_score=0.80,
    )
    defaults.update(overrides)
    return ConfidenceInputs(**defaults)


def test_score_is_bounded():
    result = calculate_model_confidence(_make_inputs())
    assert 0.0 <= result.score <= 100.0
    assert result.reasons


def test_perfect_inputs_score_near_maximum():
    result = calculate_model_confidence(_make_inputs(
        sample_size=1_000_000,
        distribution_std_dev=0.0,
        input_completeness_score=1.0,
        parameter_stability_score=1.0,
        method_consistency_score=1.0,
    ))
    assert result.score == pytest.approx(100.0)
    assert result.band is ConfidenceLevel.VERY_HIGH


@pytest.mark.parametrize("mean", [0.0, -5.0, math.nan])
def test_non_positive_mean_gives_minimum_stability(mean):
    result = calculate_model_confidence(_make_inputs(distribution_mean=mean))
    assert result.components.distribution_stability == 0.0
    assert math.isfinite(result.score)
    assert math.isfinite(result.distribution_mean)


def test_non_finite_inputs_never_propagate():
    result = calculate_model_confidence(_make_inputs(
        distribution_std_dev=math.inf,
        input_completeness_score=math.nan,
    ))
    assert all(math.isfinite(v) for v in result.components.to_dict().values())
    assert math.isfinite(result.score)


def test_more_samples_more_confidence():
    low = calculate_model_confidence(_make_inputs(sample_size=200)).score
    high = calculate_model_confidence(_make_inputs(sample_size=5_000)).score
    assert high > low


def test_sample_adequacy_saturates():
    assert sample_adequacy(0) == 0.0
    assert sample_adequacy(20_000) - sample_adequacy(10_000) < 0.01
    assert sample_adequacy(500) < sample_adequacy(2_000) < 1.0


def test_stability_is_inverse_cv():
    assert distribution_stability(1.0, 1.0) == pytest.approx(0.5)
    assert distribution_stability(0.0, 3.0) == pytest.approx(1.0)


@pytest.mark.parametrize("score,band", [
    (90, ConfidenceLevel.VERY_HIGH),
    (70, ConfidenceLevel.HIGH),
    (55, ConfidenceLevel.MEDIUM),
    (30, ConfidenceLevel.LOW),
    (10, ConfidenceLevel.VERY_LOW),
])
def test_confidence_bands(score, band):
    assert confidence_band(score) is band


def test_inputs_are_clamped_in_result():
    result = calculate_model_confidence(_make_inputs(parameter_stability_score=3.0, sample_size=-10))
    assert result.parameter_stability_score == 1.0
    assert result.sample_size == 0


def test_levels_are_ordered():
    assert ConfidenceLevel.VERY_LOW < ConfidenceLevel.LOW < ConfidenceLevel.MEDIUM < ConfidenceLevel.HIGH < ConfidenceLevel.VERY_HIGH
