"""
Simulation output.

Contains containers for simulation results:
- SamplePath: one realization, indexable by time point and species
- Ensemble: independent realizations with Monte Carlo summaries
"""

from .sample_path import SamplePath
from .ensemble import Ensemble

__all__ = [
    "SamplePath",
    "Ensemble",
]
