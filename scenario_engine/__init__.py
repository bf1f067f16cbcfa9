"""Quantitative engine for strategic scenario analysis.

Monte Carlo simulation of ARR and cash trajectories driven by nine strategy
levers, with risk classification, lever sensitivity, shock propagation and
model confidence composed into a single analysis snapshot.
"""

__version__ = "0.1.0"

from scenario_engine.errors import EngineError, InvalidConfig, InvalidLevers, SimulationCancelled
from scenario_engine.inputs import BaselineInputs, LeverState, SimulationConfig, StrategyInputs
from scenario_engine.simulation import MonteCarloKernel, MonteCarloResult, SimulationPath, simulate
from scenario_engine.analytics import (
    NotComputed,
    RiskProfile,
    SensitivityProfile,
    ShockResult,
    compute_risk_profile,
    compute_sensitivity_profile,
    compute_shock_propagation,
    calculate_model_confidence,
)
from scenario_engine.system import MethodConfig, SystemAnalysisSnapshot, recompute_shock, run_system_analysis

__all__ = [
    "EngineError",
    "InvalidConfig",
    "InvalidLevers",
    "SimulationCancelled",
    "BaselineInputs",
    "LeverState",
    "SimulationConfig",
    "StrategyInputs",
    "MonteCarloKernel",
    "MonteCarloResult",
    "SimulationPath",
    "simulate",
    "NotComputed",
    "RiskProfile",
    "SensitivityProfile",
    "ShockResult",
    "compute_risk_profile",
    "compute_sensitivity_profile",
    "compute_shock_propagation",
    "calculate_model_confidence",
    "MethodConfig",
    "SystemAnalysisSnapshot",
    "recompute_shock",
    "run_system_analysis",
]
