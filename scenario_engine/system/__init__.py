"""System analysis orchestration."""

from scenario_engine.system.snapshot import (
    MethodConfig,
    PercentileTriple,
    SimulationSummary,
    SystemAnalysisSnapshot,
)
from scenario_engine.system.orchestrator import (
    generate_run_id,
    recompute_shock,
    run_system_analysis,
)

__all__ = [
    "MethodConfig",
    "PercentileTriple",
    "SimulationSummary",
    "SystemAnalysisSnapshot",
    "generate_run_id",
    "recompute_shock",
    "run_system_analysis",
]
