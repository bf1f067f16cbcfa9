"""Optimized trajectory stepping with (Numba) JIT"""

import numpy as np
from numba import jit


@jit(nopython=True, nogil=True)
def step_trajectories(
    starting_cash: float,
    starting_arr: float,
    monthly_cost: float,
    monthly_drift: float,
    sigma_up: float,
    sigma_down: float,
    execution_probability: float,
    funding_squeeze: float,
    squeeze_threshold: float,
    runway_cap: float,
    market_normals: np.ndarray,
    execution_uniforms: np.ndarray,
    execution_severity: np.ndarray
) -> tuple:
    """
    JIT-compiled month-by-month ARR/cash evolution for a block of paths.
    
    Runs without the GIL so several blocks can step concurrently on a
    thread pool. Months after a path fails are left at zero.
    
    Args:
        starting_cash: Cash at month 0
        starting_arr: ARR at month 0
        monthly_cost: Gross operating cost per month
        monthly_drift: Deterministic monthly ARR growth
        sigma_up: Scale applied to positive market draws
        sigma_down: Scale applied to negative market draws
        execution_probability: Monthly probability of an execution miss
        funding_squeeze: Growth penalty while cash is below the threshold
        squeeze_threshold: Cash level that triggers the funding squeeze
        runway_cap: Runway reported for cash-flow positive months
        market_normals: Standard normal draws (n_paths, n_months)
        execution_uniforms: U[0,1) event draws (n_paths, n_months)
        execution_severity: U[0,1) severity draws (n_paths, n_months)
    
    Returns:
        Tuple of (arr, cash, burn, runway, growth, survival_months);
        the first five are (n_paths, n_months), the last is (n_paths,)
    """
    n_paths, n_months = market_normals.shape
    arr = np.zeros((n_paths, n_months))
    cash = np.zeros((n_paths, n_months))
    burn = np.zeros((n_paths, n_months))
    runway = np.zeros((n_paths, n_months))
    growth = np.zeros((n_paths, n_months))
    survival_months = np.full(n_paths, n_months, dtype=np.int64)
    
    for i in range(n_paths):
        current_arr = starting_arr
        current_cash = starting_cash
        
        for t in range(n_months):
            z = market_normals[i, t]
            if z >= 0.0:
                g = monthly_drift + sigma_up * z
            else:
                g = monthly_drift + sigma_down * z
            
            if execution_uniforms[i, t] < execution_probability:
                g -= 0.04 + 0.06 * execution_severity[i, t]
            
            if current_cash < squeeze_threshold:
                g -= funding_squeeze
            
            current_arr = max(0.0, current_arr * (1.0 + g))
            revenue = current_arr / 12.0
            current_cash += revenue - monthly_cost
            
            net_burn = monthly_cost - revenue
            if net_burn > 0.0:
                months_left = max(0.0, current_cash) / net_burn
                months_left = min(months_left, runway_cap)
            else:
                months_left = runway_cap
            
            arr[i, t] = current_arr
            cash[i, t] = current_cash
            burn[i, t] = monthly_cost
            runway[i, t] = months_left
            growth[i, t] = g
            
            # Failure is terminal
            if current_cash < 0.0:
                survival_months[i] = t + 1
                break
    
    return arr, cash, burn, runway, growth, survival_months
