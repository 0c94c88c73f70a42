"""
PyBioSim: Stochastic simulation of biochemical reaction networks.

This library provides tools for:
- Defining species and mass-action reactions in a network
- Sampling trajectories with exact and approximate stochastic simulation algorithms
- Indexing, summarizing and exporting sample paths and ensembles
- Visualizing simulation results

Main classes:
    Species: A named population with an initial copy count
    Reaction: A reaction channel with a rate constant and stoichiometry
    Network: Container for a complete reaction network

Simulators:
    simulate: Dispatch to Direct, FirstReaction, NextReaction, SortingDirect,
        RejectionSSA or TauLeaping
    simulate_ode: Deterministic reaction-rate equations

Output:
    SamplePath: One realization
    Ensemble: Independent realizations with Monte Carlo summaries
"""

from .core.models import Species, Parameter, Network
from .core.reactions import Reaction
from .core.compiled import ReactionModel
from .config import SimulationConfig
from .output import SamplePath, Ensemble
from .simulation import (
    Direct,
    FirstReaction,
    NextReaction,
    SortingDirect,
    RejectionSSA,
    TauLeaping,
    simulate,
    run_simulation,
    simulate_ode,
)
from .visualization.plotting import (
    plot_sample_path,
    plot_ensemble,
    plot_mean,
    plot_histogram,
    plot_phase_portrait,
    plot_simulation_results,
)

__version__ = "0.1.0"

__all__ = [
    # Model builder
    "Species",
    "Parameter",
    "Reaction",
    "Network",
    "ReactionModel",

    # Simulation
    "SimulationConfig",
    "simulate",
    "run_simulation",
    "simulate_ode",
    "Direct",
    "FirstReaction",
    "NextReaction",
    "SortingDirect",
    "RejectionSSA",
    "TauLeaping",

    # Output
    "SamplePath",
    "Ensemble",

    # Visualization
    "plot_sample_path",
    "plot_ensemble",
    "plot_mean",
    "plot_histogram",
    "plot_phase_portrait",
    "plot_simulation_results",
]
