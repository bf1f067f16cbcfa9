"""Command-line entry point: simulate a scenario and print its analysis as JSON."""

import argparse
import json
import sys
from typing import Dict, List, Optional

from scenario_engine.analytics.status import NotComputed
from scenario_engine.analytics.valuation import summarize_monte_carlo
from scenario_engine.config.settings import EngineSettings
from scenario_engine.errors import EngineError, InvalidConfig, InvalidLevers
from scenario_engine.inputs.baseline import BaselineInputs, StrategyInputs
from scenario_engine.inputs.levers import LeverState
from scenario_engine.simulation.kernel import MonteCarloKernel
from scenario_engine.system.orchestrator import run_system_analysis
from scenario_engine.system.snapshot import MethodConfig
from scenario_engine.utils.logging import setup_logger


def _parse_levers(pairs: List[str]) -> Dict[str, float]:
    values = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep:
            raise InvalidLevers(f"Lever override must look like name=value, got {pair!r}")
        try:
            values[name.strip()] = float(raw)
        except ValueError:
            raise InvalidLevers(f"Lever {name!r} needs a numeric value, got {raw!r}")
    return values


def build_parser(settings: EngineSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scenario-engine",
        description="Run a Monte Carlo scenario and print the system analysis snapshot.",
    )
    parser.add_argument("--arr", type=float, required=True, help="Starting ARR")
    parser.add_argument("--burn", type=float, required=True, help="Monthly net burn at month 0")
    parser.add_argument("--cash", type=float, required=True, help="Cash on hand")
    parser.add_argument("--gross-margin", type=float, default=0.0, help="Gross margin percent")
    parser.add_argument("--completeness", type=float, default=0.5, help="Input completeness score (0-1)")
    parser.add_argument(
        "--lever", action="append", default=[], metavar="NAME=VALUE",
        help="Lever override, e.g. demand_strength=70 (repeatable)"
    )
    parser.add_argument("--horizon", type=int, default=settings.time_horizon_months, help="Horizon in months")
    parser.add_argument("--iterations", type=int, default=settings.n_iterations, help="Primary batch size")
    parser.add_argument("--seed", type=int, default=settings.random_seed, help="Random seed")
    parser.add_argument("--shock", type=float, default=0.0, help="Baseline shock intensity percent")
    parser.add_argument("--runs", type=int, default=settings.sensitivity_runs, help="Runs per sensitivity batch")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    settings = EngineSettings()
    args = build_parser(settings).parse_args(argv)
    try:
        logger = setup_logger("scenario_engine", args.log_level)
    except InvalidConfig as e:
        sys.stderr.write(f"{e}\n")
        return 2

    try:
        levers = LeverState.from_mapping(_parse_levers(args.lever))
        baseline = BaselineInputs(
            arr=args.arr,
            monthly_burn=args.burn,
            cash_on_hand=args.cash,
            gross_margin_pct=args.gross_margin,
            input_completeness_score=args.completeness,
        )
        strategy = StrategyInputs(levers=levers, horizon_months=args.horizon)
        method = MethodConfig.from_settings(
            settings,
            sensitivity_runs=args.runs,
            shock_baseline_intensity=args.shock,
            seed=args.seed,
        )
        
        kernel = MonteCarloKernel(
            chunk_size=settings.chunk_size,
            max_workers=settings.max_workers,
            runway_cap_months=settings.runway_cap_months,
        )
        logger.info("Simulating %d iterations over %d months", args.iterations, args.horizon)
        result = kernel.simulate(levers, baseline.to_simulation_config(args.horizon, args.iterations), seed=args.seed)
        logger.info("Primary batch: survival=%.3f in %.0f ms", result.survival_rate, result.execution_time_ms)
        
        snapshot = run_system_analysis(
            result,
            baseline,
            strategy,
            summarize_monte_carlo(result, method.ev_multiple),
            method_config=method,
            kernel=kernel,
        )
    except InvalidConfig as e:
        logger.error(str(e))
        return 2
    except EngineError as e:
        logger.error(str(e))
        return 1
    
    if isinstance(snapshot, NotComputed):
        logger.warning(snapshot.reason)
    json.dump(snapshot.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
