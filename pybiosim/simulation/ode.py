"""
Deterministic reaction-rate equations.

Integrates dx/dt = V a(x) with SciPy, using the same mass-action
propensities as the stochastic simulators on a continuous state. For large
copy numbers the ensemble mean approaches this solution.
"""

from typing import Any, Dict, Optional, Tuple

import numpy as np
from scipy.integrate import solve_ivp


def simulate_ode(network, t_span: Tuple[float, float], t_eval: Optional[np.ndarray] = None,
                 method: str = 'LSODA', **kwargs) -> Dict[str, Any]:
    """
    Integrate the reaction-rate equations of a Network.

    Args:
        network: The Network to integrate
        t_span (Tuple[float, float]): Time span as (t_start, t_end)
        t_eval (np.ndarray, optional): Specific time points to evaluate.
            If None, uses 1000 evenly spaced points.
        method (str): Integration method for solve_ivp. Default is 'LSODA'.
        **kwargs: Additional keyword arguments passed to solve_ivp

    Returns:
        Dict[str, Any]: Dictionary containing:
            - 'solution': The scipy.integrate.OdeResult object
            - 'sim_data': The lambdified ODE data from the network
            - 'success': Boolean indicating if integration was successful
    """
    sim_data = network.lambdify_odes()

    if t_eval is None:
        t_eval = np.linspace(t_span[0], t_span[1], 1000)

    solution = solve_ivp(
        fun=sim_data['func'],
        t_span=t_span,
        y0=sim_data['y0'],
        args=sim_data['params'],
        t_eval=t_eval,
        method=method,
        **kwargs
    )

    return {
        'solution': solution,
        'sim_data': sim_data,
        'success': solution.success
    }
