"""Configuration management using Pydantic settings."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from scenario_engine.inputs.levers import MAX_PERTURBATION_DELTA


class EngineSettings(BaseSettings):
    """Engine defaults, overridable through SCENARIO_ENGINE_* variables."""
    
    # General
    log_level: str = Field(default="INFO", description="Logging level")
    
    # Simulation
    random_seed: Optional[int] = Field(default=42, description="Random seed for reproducibility")
    n_iterations: int = Field(default=10000, gt=0, description="Iterations in the primary batch")
    time_horizon_months: int = Field(default=36, gt=0, description="Simulation horizon in months")
    chunk_size: int = Field(default=250, gt=0, description="Iterations per RNG block")
    max_workers: Optional[int] = Field(default=None, description="Thread pool size (None = executor default)")
    runway_cap_months: float = Field(default=120.0, gt=0, description="Runway reported for cash-flow positive months")
    
    # Sensitivity
    sensitivity_runs: int = Field(default=200, gt=0, description="Iterations per perturbation batch")
    perturbation_delta: float = Field(default=10.0, gt=0, le=MAX_PERTURBATION_DELTA, description="Lever points moved up and down")
    
    # Valuation / risk
    ev_multiple: float = Field(default=3.5, gt=0, description="ARR multiple used to express EV")
    
    # Confidence
    parameter_stability_score: float = Field(default=0.75, ge=0, le=1, description="Upstream parameter agreement")
    method_consistency_score: float = Field(default=0.80, ge=0, le=1, description="Upstream method agreement")
    
    model_config = SettingsConfigDict(
        env_prefix="SCENARIO_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
