"""
Contains simulation engines for reaction networks:
- Exact SSAs: direct, first reaction, next reaction, sorting direct, rejection
- Approximate: explicit tau-leaping
- ODE: Deterministic reaction-rate equations for comparison
"""

from .base import SimulationAlgorithm
from .gillespie import Direct, FirstReaction, SortingDirect
from .next_reaction import NextReaction
from .rejection import RejectionSSA
from .tau_leaping import TauLeaping
from .driver import ALGORITHMS, get_algorithm, simulate, run_simulation
from .ode import simulate_ode

__all__ = [
    "SimulationAlgorithm",
    "Direct",
    "FirstReaction",
    "SortingDirect",
    "NextReaction",
    "RejectionSSA",
    "TauLeaping",
    "ALGORITHMS",
    "get_algorithm",
    "simulate",
    "run_simulation",
    "simulate_ode",
]
