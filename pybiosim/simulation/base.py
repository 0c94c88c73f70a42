"""
Shared machinery for the stochastic simulation algorithms.

Every algorithm works in two steps per state change. `next_time` proposes
when the next change happens, given the current state. `fire` then applies
that change in place. The driver places `PathRecorder` calls between the
two, so that save points crossed by a jump see the pre-jump state.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from ..core.compiled import ReactionModel
from .kernels import Kernels, get_kernels


class SimulationAlgorithm(ABC):
    """
    Base class for all simulation algorithms.

    Subclasses implement `next_time` and `fire`; they may override `setup`
    to build their caches once the model and the initial state are known.
    """

    name = "base"

    def __init__(self):
        self.model: Optional[ReactionModel] = None
        self.kernels: Kernels = get_kernels(False)
        self.rng: Optional[np.random.Generator] = None
        self.tfinal = np.inf

    def initialize(self, model: ReactionModel, x: np.ndarray, rng: np.random.Generator,
                   tfinal: float = np.inf, use_numba: bool = False):
        """Bind the algorithm to a model, a starting state and a random stream."""
        self.model = model
        self.rng = rng
        self.tfinal = tfinal
        self.kernels = get_kernels(use_numba)
        self.reactants = model.reactants
        self.rates = model.rates
        self.updates = model.updates
        self.setup(x)

    def setup(self, x: np.ndarray):
        """Hook called once per trial after `initialize`."""

    @abstractmethod
    def next_time(self, t: float, x: np.ndarray) -> float:
        """
        Time of the next state change, or ``np.inf`` if the state is absorbing.
        """

    @abstractmethod
    def fire(self, x: np.ndarray, t_next: float) -> int:
        """
        Apply the change proposed by the last `next_time` call to `x` in place.

        Returns:
            int: Number of reaction events applied
        """

    def compute_propensities(self, x: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        if out is None:
            out = np.empty(self.model.num_reactions)
        return self.kernels.propensities(x, self.reactants, self.rates, out)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PathRecorder:
    """
    Collects (time, state) pairs during one trial.

    With no save points every jump is recorded, along with the initial state
    and the state at the final time. With save points only those times are
    recorded. A save point that coincides with a jump sees the post-jump state.
    """

    def __init__(self, x0: np.ndarray, save_points: Optional[np.ndarray] = None, t0: float = 0.0):
        self.save_points = save_points
        self.times: List[float] = []
        self.states: List[np.ndarray] = []
        self._next = 0
        self.num_species = len(x0)
        if save_points is None:
            self._record(t0, x0)

    def _record(self, t: float, x: np.ndarray):
        self.times.append(t)
        self.states.append(x.copy())

    def advance(self, t_next: float, x: np.ndarray):
        """Record save points falling strictly before a jump at `t_next`."""
        if self.save_points is None:
            return
        points = self.save_points
        while self._next < len(points) and points[self._next] < t_next:
            self._record(points[self._next], x)
            self._next += 1

    def jump(self, t: float, x: np.ndarray):
        """Record the post-jump state when every jump is kept."""
        if self.save_points is None:
            self._record(t, x)

    def finish(self, t_end: float, x: np.ndarray):
        """Close the path at `t_end` with the current state."""
        if self.save_points is None:
            if self.times[-1] < t_end:
                self._record(t_end, x)
            return
        points = self.save_points
        while self._next < len(points) and points[self._next] <= t_end:
            self._record(points[self._next], x)
            self._next += 1

    def arrays(self):
        states = np.asarray(self.states, dtype=np.int64).reshape(-1, self.num_species)
        return np.asarray(self.times, dtype=float), states
