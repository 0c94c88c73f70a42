"""Run configuration for stochastic simulations.

Collects the arguments of `pybiosim.simulate` in one validated, immutable
object, for runs that are repeated with small variations.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

import numpy as np

RATES_CACHES = ("rates", "sums")


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration parameters for a stochastic simulation run."""
    tfinal: float
    algorithm: Any = "direct"
    save_points: Optional[Sequence[float]] = None
    rates_cache: str = "rates"
    ntrials: int = 1
    seed: Optional[int] = None
    use_numba: bool = False
    max_events: Optional[int] = None

    def __post_init__(self) -> None:
        if not np.isfinite(self.tfinal) or self.tfinal <= 0:
            raise ValueError("tfinal must be positive and finite")
        if self.rates_cache not in RATES_CACHES:
            raise ValueError(f"rates_cache must be one of {RATES_CACHES}")
        if int(self.ntrials) != self.ntrials or self.ntrials < 1:
            raise ValueError("ntrials must be a positive integer")
        object.__setattr__(self, "ntrials", int(self.ntrials))
        if self.max_events is not None and self.max_events <= 0:
            raise ValueError("max_events must be positive")
        if self.max_events is not None:
            if int(self.max_events) != self.max_events:
                raise ValueError("max_events must be an integer")
            object.__setattr__(self, "max_events", int(self.max_events))
        if self.seed is not None and self.seed < 0:
            raise ValueError("seed must be non-negative")
        if not isinstance(self.use_numba, bool):
            raise ValueError("use_numba must be boolean")
        if self.save_points is not None:
            points = np.asarray(self.save_points, dtype=float)
            if points.ndim != 1 or points.size == 0:
                raise ValueError("save_points must be a non-empty 1D sequence")
            if not np.all(np.isfinite(points)):
                raise ValueError("save_points must be finite")
            if np.any(np.diff(points) < 0):
                raise ValueError("save_points must be sorted")
            if points[0] < 0 or points[-1] > self.tfinal:
                raise ValueError("save_points must lie within [0, tfinal]")
            object.__setattr__(self, "save_points", tuple(points.tolist()))

    def replace(self, **changes) -> "SimulationConfig":
        """Return a validated copy with some fields changed."""
        return replace(self, **changes)

    def save_point_array(self) -> Optional[np.ndarray]:
        return None if self.save_points is None else np.asarray(self.save_points, dtype=float)
