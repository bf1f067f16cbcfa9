"""Model confidence scoring."""

import math
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Dict, Tuple

from scenario_engine.utils.math import clamp, clamp01, finite_or

# Sample size at which adequacy reaches 1 - 1/e
SAMPLE_SCALE = 1500.0

COMPONENT_WEIGHTS: Dict[str, float] = {
    "sample_adequacy": 0.25,
    "distribution_stability": 0.25,
    "input_completeness": 0.25,
    "parameter_stability": 0.15,
    "method_consistency": 0.10,
}


@total_ordering
class ConfidenceLevel(Enum):
    """Confidence levels, from least to most confident."""
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"
    
    def __lt__(self, other):
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        members = list(ConfidenceLevel)
        return members.index(self) < members.index(other)


BAND_THRESHOLDS = (
    (85.0, ConfidenceLevel.VERY_HIGH),
    (70.0, ConfidenceLevel.HIGH),
    (50.0, ConfidenceLevel.MEDIUM),
    (30.0, ConfidenceLevel.LOW),
)


@dataclass(frozen=True)
class ConfidenceInputs:
    """Everything the confidence score is computed from."""
    
    sample_size: int
    distribution_std_dev: float
    distribution_mean: float
    input_completeness_score: float = 0.5  # 0-1
    parameter_stability_score: float = 0.75  # 0-1
    method_consistency_score: float = 0.80  # 0-1


@dataclass(frozen=True)
class ConfidenceComponents:
    """Sub-scores, each in [0, 1]."""
    
    sample_adequacy: float
    distribution_stability: float
    input_completeness: float
    parameter_stability: float
    method_consistency: float
    
    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            "sample_adequacy": self.sample_adequacy,
            "distribution_stability": self.distribution_stability,
            "input_completeness": self.input_completeness,
            "parameter_stability": self.parameter_stability,
            "method_consistency": self.method_consistency,
        }


@dataclass(frozen=True)
class ModelConfidenceResult:
    """Confidence score with its band, reasons and the inputs it used."""
    
    score: float  # 0-100
    band: ConfidenceLevel
    reasons: Tuple[str, ...]
    components: ConfidenceComponents
    sample_size: int
    distribution_std_dev: float
    distribution_mean: float
    input_completeness_score: float
    parameter_stability_score: float
    method_consistency_score: float
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "band": self.band.value,
            "reasons": list(self.reasons),
            "components": self.components.to_dict(),
            "sample_size": self.sample_size,
            "distribution_std_dev": self.distribution_std_dev,
            "distribution_mean": self.distribution_mean,
            "input_completeness_score": self.input_completeness_score,
            "parameter_stability_score": self.parameter_stability_score,
            "method_consistency_score": self.method_consistency_score,
        }


def sample_adequacy(sample_size: int) -> float:
    """Saturating score: grows quickly at first, flattens past a few thousand runs."""
    if sample_size <= 0:
        return 0.0
    return 1.0 - math.exp(-sample_size / SAMPLE_SCALE)


def distribution_stability(std_dev: float, mean: float) -> float:
    """1 / (1 + CV); a non-positive mean gives the minimum score."""
    if not (math.isfinite(std_dev) and math.isfinite(mean)) or mean <= 0:
        return 0.0
    return 1.0 / (1.0 + abs(std_dev) / mean)


def confidence_band(score: float) -> ConfidenceLevel:
    """Map a 0-100 score onto its band."""
    for lower_bound, band in BAND_THRESHOLDS:
        if score >= lower_bound:
            return band
    return ConfidenceLevel.VERY_LOW


def _reasons(components: ConfidenceComponents, sample_size: int) -> Tuple[str, ...]:
    reasons = []
    if components.sample_adequacy >= 0.95:
        reasons.append(f"Large simulation sample ({sample_size:,} runs).")
    elif components.sample_adequacy < 0.5:
        reasons.append(f"Small simulation sample ({sample_size:,} runs); results may be noisy.")
    
    if components.distribution_stability >= 0.75:
        reasons.append("Outcome distribution is tightly clustered.")
    elif components.distribution_stability < 0.5:
        reasons.append("Outcome distribution is widely dispersed.")
    
    if components.input_completeness < 0.5:
        reasons.append("Baseline inputs are incomplete.")
    elif components.input_completeness >= 0.9:
        reasons.append("Baseline inputs are complete.")
    
    if components.parameter_stability < 0.5:
        reasons.append("Model parameters are unstable.")
    if components.method_consistency < 0.5:
        reasons.append("Valuation methods disagree.")
    
    if not reasons:
        reasons.append("No single factor dominates the confidence score.")
    return tuple(reasons)


def calculate_model_confidence(inputs: ConfidenceInputs) -> ModelConfidenceResult:
    """
    Score model confidence on [0, 100].
    
    Five sub-scores in [0, 1] are blended with fixed weights: sample
    adequacy, distribution stability, input completeness, parameter
    stability and method consistency. Non-finite inputs are treated as 0
    and never propagate into the result.
    
    Args:
        inputs: ConfidenceInputs
    
    Returns:
        ModelConfidenceResult
    """
    sample_size = max(0, int(finite_or(inputs.sample_size)))
    std_dev = finite_or(inputs.distribution_std_dev)
    mean = finite_or(inputs.distribution_mean)
    completeness = clamp01(finite_or(inputs.input_completeness_score))
    parameter = clamp01(finite_or(inputs.parameter_stability_score))
    method = clamp01(finite_or(inputs.method_consistency_score))
    
    components = ConfidenceComponents(
        sample_adequacy=sample_adequacy(sample_size),
        distribution_stability=distribution_stability(std_dev, mean),
        input_completeness=completeness,
        parameter_stability=parameter,
        method_consistency=method,
    )
    
    weighted = sum(
        weight * getattr(components, name)
        for name, weight in COMPONENT_WEIGHTS.items()
    )
    score = clamp(100.0 * weighted, 0.0, 100.0)
    
    return ModelConfidenceResult(
        score=score,
        band=confidence_band(score),
        reasons=_reasons(components, sample_size),
        components=components,
        sample_size=sample_size,
        distribution_std_dev=std_dev,
        distribution_mean=mean,
        input_completeness_score=completeness,
        parameter_stability_score=parameter,
        method_consistency_score=method,
    )
