"""
Sample paths.

A SamplePath is the recorded sequence of (time, state) pairs of one
realization. States are right-continuous: the state saved at a jump time is
the state just after the jump.
"""

from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..core.compiled import lookup_index


class SamplePath:
    """
    One realization of the jump process.

    Args:
        t (np.ndarray): Save times, non-decreasing, shape (n,)
        u (np.ndarray): Copy counts at those times, shape (n, num_species)
        species_names (Sequence[str]): Column labels of `u`
        algorithm (str, optional): Name of the algorithm that produced the path
        reaction_count (int): Number of reaction events fired
        steps (int): Number of state changes (jumps or leaps)

    Indexing follows numpy on `u`, with species given by name or position::

        path[0]             # initial state
        path[-1, "P2"]      # final P2 count
        path[:, "mRNA"]     # mRNA series
        path[10:20, 1:3]    # sub-array
    """

    def __init__(self, t, u, species_names: Sequence[str], algorithm: Optional[str] = None,
                 reaction_count: int = 0, steps: int = 0):
        self.t = np.asarray(t, dtype=float)
        self.u = np.asarray(u, dtype=np.int64)
        if self.u.ndim != 2 or self.u.shape[0] != self.t.shape[0]:
            raise ValueError(f"State array of shape {self.u.shape} does not match {len(self.t)} save times")
        if self.u.shape[1] != len(species_names):
            raise ValueError(f"Got {len(species_names)} species names for {self.u.shape[1]} columns")
        self.species_names = tuple(species_names)
        self.algorithm = algorithm
        self.reaction_count = reaction_count
        self.steps = steps

    def _columns(self, key):
        if isinstance(key, slice):
            return key
        if isinstance(key, (list, tuple, np.ndarray)):
            return [lookup_index(k, self.species_names, "species") for k in key]
        return lookup_index(key, self.species_names, "species")

    def __getitem__(self, key):
        if isinstance(key, tuple):
            if len(key) != 2:
                raise IndexError("SamplePath takes at most two indices: time point and species")
            rows, cols = key
            return self.u[rows, self._columns(cols)]
        return self.u[key]

    def __len__(self) -> int:
        return len(self.t)

    def __iter__(self) -> Iterator[Tuple[float, np.ndarray]]:
        return zip(self.t, self.u)

    @property
    def tfinal(self) -> float:
        return float(self.t[-1]) if len(self.t) else 0.0

    @property
    def final_state(self) -> np.ndarray:
        return self.u[-1]

    def series(self, species) -> np.ndarray:
        """Saved counts of one species."""
        return self.u[:, self._columns(species)]

    def at(self, times):
        """
        Evaluate the path as a right-continuous step function.

        Args:
            times (float | array-like): Query time(s) within the saved range

        Returns:
            np.ndarray: State (num_species,) for a scalar, (len(times), num_species) otherwise
        """
        query = np.asarray(times, dtype=float)
        if len(self.t) == 0:
            raise ValueError("Cannot evaluate an empty sample path")
        if np.any(query < self.t[0]) or np.any(query > self.t[-1]):
            raise ValueError(f"Times must lie within [{self.t[0]}, {self.t[-1]}]")
        idx = np.searchsorted(self.t, query, side="right") - 1
        return self.u[idx]

    def time_average(self) -> pd.DataFrame:
        """
        Time-weighted mean and variance of every species.

        Each saved state is weighted by how long it is held until the next
        save time. This is exact when every jump is saved and a step
        approximation otherwise.

        Returns:
            pd.DataFrame: Columns 'Species', 'Mean', 'Variance'
        """
        if len(self.t) == 0:
            raise RuntimeError("Sample path is empty.")
        holding = np.diff(self.t)
        total_time = holding.sum()
        if total_time <= 0:
            means = self.u[0].astype(float)
            variances = np.zeros(len(self.species_names))
        else:
            states = self.u[:-1]
            means = (states * holding[:, np.newaxis]).sum(axis=0) / total_time
            residuals = states - means
            variances = (holding[:, np.newaxis] * residuals ** 2).sum(axis=0) / total_time

        return pd.DataFrame({
            "Species": list(self.species_names),
            "Mean": means,
            "Variance": variances,
        })

    def to_dataframe(self) -> pd.DataFrame:
        """Wide table with a 'time' column and one column per species."""
        frame = pd.DataFrame(self.u, columns=list(self.species_names))
        frame.insert(0, "time", self.t)
        return frame

    def __repr__(self) -> str:
        return (f"SamplePath(points={len(self)}, species={list(self.species_names)}, "
                f"tfinal={self.tfinal:g}, algorithm={self.algorithm!r})")


def stack_states(paths: List[SamplePath]) -> np.ndarray:
    """Stack the states of paths that share save times, (trials, times, species)."""
    return np.stack([p.u for p in paths])
