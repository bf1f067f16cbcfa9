"""Risk, sensitivity, confidence and valuation analytics."""

from scenario_engine.analytics.status import NotComputed
from scenario_engine.analytics.risk import (
    RiskClassification,
    RiskDrivers,
    RiskPressures,
    RiskProfile,
    classify_survival,
    compute_risk_profile,
    format_currency,
    format_percent,
)
from scenario_engine.analytics.sensitivity import (
    ElasticityResult,
    SensitivityProfile,
    ShockResult,
    TornadoBar,
    compute_sensitivity_profile,
    compute_shock_propagation,
)
from scenario_engine.analytics.confidence import (
    ConfidenceLevel,
    ConfidenceInputs,
    ModelConfidenceResult,
    calculate_model_confidence,
)
from scenario_engine.analytics.valuation import (
    ProbabilityThreshold,
    ValuationDistributionSummary,
    summarize_from_percentiles,
    summarize_from_samples,
    summarize_from_single_ev,
    summarize_monte_carlo,
)

__all__ = [
    "NotComputed",
    "RiskClassification",
    "RiskDrivers",
    "RiskPressures",
    "RiskProfile",
    "classify_survival",
    "compute_risk_profile",
    "format_currency",
    "format_percent",
    "ElasticityResult",
    "SensitivityProfile",
    "ShockResult",
    "TornadoBar",
    "compute_sensitivity_profile",
    "compute_shock_propagation",
    "ConfidenceLevel",
    "ConfidenceInputs",
    "ModelConfidenceResult",
    "calculate_model_confidence",
    "ProbabilityThreshold",
    "ValuationDistributionSummary",
    "summarize_from_percentiles",
    "summarize_from_samples",
    "summarize_from_single_ev",
    "summarize_monte_carlo",
]
