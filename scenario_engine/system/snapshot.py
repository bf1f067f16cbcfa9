"""Snapshot and method configuration types for system analysis."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from scenario_engine.analytics.confidence import ModelConfidenceResult
from scenario_engine.analytics.risk import DEFAULT_EV_MULTIPLE, RiskProfile
from scenario_engine.analytics.sensitivity import (
    DEFAULT_PERTURBATION_DELTA,
    DEFAULT_RUNS_PER_LEVER,
    ElasticityResult,
    ShockResult,
    TornadoBar,
)
from scenario_engine.analytics.valuation import ValuationDistributionSummary
from scenario_engine.config.settings import EngineSettings
from scenario_engine.inputs.levers import MAX_PERTURBATION_DELTA
from scenario_engine.simulation.results import MonteCarloResult, PercentileSet
from scenario_engine.utils.math import finite_or


class MethodConfig(BaseModel):
    """Method parameters for one system analysis."""
    model_config = ConfigDict(frozen=True, extra="forbid")
    
    ev_multiple: float = Field(default=DEFAULT_EV_MULTIPLE, gt=0)
    sensitivity_runs: int = Field(default=DEFAULT_RUNS_PER_LEVER, gt=0)
    perturbation_delta: float = Field(default=DEFAULT_PERTURBATION_DELTA, gt=0, le=MAX_PERTURBATION_DELTA)
    shock_baseline_intensity: float = Field(default=0.0, ge=0)
    parameter_stability_score: float = Field(default=0.75, ge=0, le=1)
    method_consistency_score: float = Field(default=0.80, ge=0, le=1)
    seed: Optional[int] = None  # Shared by the sensitivity and shock batches
    max_workers: Optional[int] = Field(default=None, gt=0)
    
    @classmethod
    def from_settings(cls, settings: EngineSettings, **overrides) -> "MethodConfig":
        """Build from engine settings, with explicit overrides applied on top."""
        values = dict(
            ev_multiple=settings.ev_multiple,
            sensitivity_runs=settings.sensitivity_runs,
            perturbation_delta=settings.perturbation_delta,
            parameter_stability_score=settings.parameter_stability_score,
            method_consistency_score=settings.method_consistency_score,
            seed=settings.random_seed,
            max_workers=settings.max_workers,
        )
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class PercentileTriple:
    """p10 / p50 / p90 of one final-state distribution."""
    
    p10: float
    p50: float
    p90: float
    
    @classmethod
    def from_percentile_set(cls, percentiles: PercentileSet) -> "PercentileTriple":
        return cls(
            p10=finite_or(percentiles.p10),
            p50=finite_or(percentiles.p50),
            p90=finite_or(percentiles.p90),
        )
    
    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {"p10": self.p10, "p50": self.p50, "p90": self.p90}


@dataclass(frozen=True)
class SimulationSummary:
    """Headline figures of the primary simulation batch."""
    
    survival_rate: float
    arr_percentiles: PercentileTriple
    runway_percentiles: PercentileTriple
    cash_percentiles: PercentileTriple
    iterations: int
    time_horizon_months: int
    execution_time_ms: float
    
    @classmethod
    def from_result(cls, result: MonteCarloResult) -> "SimulationSummary":
        return cls(
            survival_rate=finite_or(result.survival_rate),
            arr_percentiles=PercentileTriple.from_percentile_set(result.arr_percentiles),
            runway_percentiles=PercentileTriple.from_percentile_set(result.runway_percentiles),
            cash_percentiles=PercentileTriple.from_percentile_set(result.cash_percentiles),
            iterations=result.iterations,
            time_horizon_months=result.time_horizon_months,
            execution_time_ms=finite_or(result.execution_time_ms),
        )
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "survival_rate": self.survival_rate,
            "arr_percentiles": self.arr_percentiles.to_dict(),
            "runway_percentiles": self.runway_percentiles.to_dict(),
            "cash_percentiles": self.cash_percentiles.to_dict(),
            "iterations": self.iterations,
            "time_horizon_months": self.time_horizon_months,
            "execution_time_ms": self.execution_time_ms,
        }


@dataclass(frozen=True)
class SystemAnalysisSnapshot:
    """
    Everything the dashboard shows for one analysis run.
    
    Created once per run_system_analysis call and never modified; a new
    call produces a new snapshot.
    """
    
    run_id: str
    timestamp: int  # Unix epoch milliseconds
    simulation_summary: SimulationSummary
    risk_profile: RiskProfile
    sensitivity_map: Tuple[ElasticityResult, ...]
    tornado_ranking: Tuple[TornadoBar, ...]
    shock_state: ShockResult
    valuation_summary: Optional[ValuationDistributionSummary]
    confidence_score: ModelConfidenceResult
    computed: bool = field(default=True, init=False)
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "computed": True,
            "simulation_summary": self.simulation_summary.to_dict(),
            "risk_profile": self.risk_profile.to_dict(),
            "sensitivity_map": [e.to_dict() for e in self.sensitivity_map],
            "tornado_ranking": [b.to_dict() for b in self.tornado_ranking],
            "shock_state": self.shock_state.to_dict(),
            "valuation_summary": self.valuation_summary.to_dict() if self.valuation_summary else None,
            "confidence_score": self.confidence_score.to_dict(),
        }
