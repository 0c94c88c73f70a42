"""
Visualization module.

Contains plotting utilities for simulation results:
- Sample path and ensemble trajectories
- Distributions at a time point and phase portraits
- Stochastic vs deterministic comparisons
"""

from .plotting import (
    plot_sample_path,
    plot_ensemble,
    plot_mean,
    plot_histogram,
    plot_phase_portrait,
    plot_ode_solution,
    compare_ode_ensemble,
    plot_simulation_results,
)

__all__ = [
    "plot_sample_path",
    "plot_ensemble",
    "plot_mean",
    "plot_histogram",
    "plot_phase_portrait",
    "plot_ode_solution",
    "compare_ode_ensemble",
    "plot_simulation_results",
]
