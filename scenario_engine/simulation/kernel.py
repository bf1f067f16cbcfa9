"""Monte Carlo simulation kernel."""

import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional

import numpy as np

from scenario_engine.errors import InvalidConfig, InvalidLevers, SimulationCancelled
from scenario_engine.inputs.baseline import SimulationConfig
from scenario_engine.inputs.levers import LeverState
from scenario_engine.simulation.paths import PathGenerator, SimulationPath
from scenario_engine.simulation.results import MonteCarloResult, aggregate_paths

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 250
DEFAULT_RUNWAY_CAP_MONTHS = 120.0


class MonteCarloKernel:
    """
    Runs batches of independent trajectories and aggregates them.
    
    Iterations are cut into fixed-size blocks. Block k always draws from
    the k-th child of the batch seed sequence, so the same seed gives the
    same paths whatever the worker count or completion order.
    """
    
    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_workers: Optional[int] = None,
        runway_cap_months: float = DEFAULT_RUNWAY_CAP_MONTHS
    ):
        """
        Initialize kernel.
        
        Args:
            chunk_size: Iterations per RNG block
            max_workers: Thread pool size (None = executor default, 1 = sequential)
            runway_cap_months: Runway reported for cash-flow positive months
        """
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise InvalidConfig(f"chunk_size must be a positive integer, got {chunk_size!r}")
        if max_workers is not None and max_workers <= 0:
            raise InvalidConfig(f"max_workers must be positive, got {max_workers!r}")
        if not runway_cap_months > 0:
            raise InvalidConfig(f"runway_cap_months must be positive, got {runway_cap_months!r}")
        
        self.chunk_size = chunk_size
        self.max_workers = max_workers
        self.runway_cap_months = runway_cap_months
    
    def simulate(
        self,
        levers: LeverState,
        config: SimulationConfig,
        seed: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> MonteCarloResult:
        """
        Run `config.iterations` trajectories and aggregate them.
        
        Args:
            levers: Strategy levers
            config: Batch size, horizon and starting position
            seed: Root seed; None draws fresh entropy (recorded on the result)
            cancel_event: Checked between blocks; when set the batch is abandoned
            progress_callback: Optional callback(completed_blocks, total_blocks)
        
        Returns:
            MonteCarloResult
        
        Raises:
            InvalidConfig: If config is not a valid SimulationConfig
            InvalidLevers: If levers is not a LeverState
            SimulationCancelled: If cancel_event fires before the batch completes
        """
        if not isinstance(levers, LeverState):
            raise InvalidLevers(f"levers must be a LeverState, got {type(levers).__name__}")
        if not isinstance(config, SimulationConfig):
            raise InvalidConfig(f"config must be a SimulationConfig, got {type(config).__name__}")
        
        start_time = time.perf_counter()
        
        root = np.random.SeedSequence(seed)
        n_blocks = math.ceil(config.iterations / self.chunk_size)
        block_seeds = root.spawn(n_blocks)
        generator = PathGenerator(levers, config, self.runway_cap_months)
        
        logger.debug(
            "Simulating %d iterations x %d months in %d blocks",
            config.iterations, config.time_horizon_months, n_blocks
        )
        
        if self.max_workers == 1 or n_blocks == 1:
            blocks = self._run_sequential(generator, block_seeds, config, cancel_event, progress_callback)
        else:
            blocks = self._run_parallel(generator, block_seeds, config, cancel_event, progress_callback)
        
        # Concatenate in block order before any statistics are taken
        paths: List[SimulationPath] = []
        for k in range(n_blocks):
            paths.extend(blocks[k])
        
        _check_cancelled(cancel_event)
        
        execution_time_ms = (time.perf_counter() - start_time) * 1000.0
        result = aggregate_paths(paths, config, seed=root.entropy, execution_time_ms=execution_time_ms)
        
        logger.debug(
            "Batch complete: survival=%.4f, %.1f ms",
            result.survival_rate, execution_time_ms
        )
        return result
    
    def _block_bounds(self, k: int, config: SimulationConfig) -> tuple:
        first = k * self.chunk_size
        return first, min(self.chunk_size, config.iterations - first)
    
    def _run_block(
        self,
        generator: PathGenerator,
        block_seed: np.random.SeedSequence,
        k: int,
        config: SimulationConfig,
        cancel_event: Optional[threading.Event]
    ) -> List[SimulationPath]:
        """Worker function for one block."""
        _check_cancelled(cancel_event)
        first, size = self._block_bounds(k, config)
        return generator.generate_block(block_seed, size, first_path_id=first)
    
    def _run_sequential(
        self,
        generator: PathGenerator,
        block_seeds: List[np.random.SeedSequence],
        config: SimulationConfig,
        cancel_event: Optional[threading.Event],
        progress_callback: Optional[Callable[[int, int], None]]
    ) -> Dict[int, List[SimulationPath]]:
        blocks = {}
        total = len(block_seeds)
        for k, block_seed in enumerate(block_seeds):
            blocks[k] = self._run_block(generator, block_seed, k, config, cancel_event)
            if progress_callback:
                progress_callback(k + 1, total)
        return blocks
    
    def _run_parallel(
        self,
        generator: PathGenerator,
        block_seeds: List[np.random.SeedSequence],
        config: SimulationConfig,
        cancel_event: Optional[threading.Event],
        progress_callback: Optional[Callable[[int, int], None]]
    ) -> Dict[int, List[SimulationPath]]:
        blocks = {}
        completed = 0
        total = len(block_seeds)
        
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_idx = {
                executor.submit(self._run_block, generator, block_seed, k, config, cancel_event): k
                for k, block_seed in enumerate(block_seeds)
            }
            
            try:
                for future in as_completed(future_to_idx):
                    blocks[future_to_idx[future]] = future.result()
                    completed += 1
                    
                    if progress_callback:
                        progress_callback(completed, total)
            except SimulationCancelled:
                for future in future_to_idx:
                    future.cancel()
                raise
        
        return blocks


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SimulationCancelled("Simulation batch was cancelled before completion")


def simulate(
    levers: LeverState,
    config: SimulationConfig,
    seed: Optional[int] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    runway_cap_months: float = DEFAULT_RUNWAY_CAP_MONTHS
) -> MonteCarloResult:
    """
    Run one Monte Carlo batch.
    
    Pure function of (levers, config, seed): the same seed yields an
    equal MonteCarloResult for any max_workers.
    
    Args:
        levers: Strategy levers
        config: Batch size, horizon and starting position
        seed: Root seed (None = fresh entropy)
        max_workers: Thread pool size (1 = sequential)
        cancel_event: Cooperative cancellation flag
        chunk_size: Iterations per RNG block
        runway_cap_months: Runway reported for cash-flow positive months
    
    Returns:
        MonteCarloResult
    """
    kernel = MonteCarloKernel(
        chunk_size=chunk_size,
        max_workers=max_workers,
        runway_cap_months=runway_cap_months
    )
    return kernel.simulate(levers, config, seed=seed, cancel_event=cancel_event)
