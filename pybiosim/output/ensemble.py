"""
Ensembles of independent sample paths.

Monte Carlo summaries are computed across trials: mean trajectories,
distributions at a fixed time, extinction probabilities and phase
portraits.
"""

from collections.abc import Sequence
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from ..core.compiled import lookup_index
from .sample_path import SamplePath, stack_states


class Ensemble(Sequence):
    """
    A collection of sample paths of the same network.

    Args:
        paths (Iterable[SamplePath]): The trials, at least one
    """

    def __init__(self, paths: Iterable[SamplePath]):
        self.paths = list(paths)
        if not self.paths:
            raise ValueError("An ensemble needs at least one sample path")
        names = self.paths[0].species_names
        if any(p.species_names != names for p in self.paths):
            raise ValueError("All sample paths in an ensemble must share the same species")
        self.species_names = names

    def __len__(self) -> int:
        return len(self.paths)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Ensemble(self.paths[index])
        return self.paths[index]

    def _name(self, species) -> str:
        return self.species_names[lookup_index(species, self.species_names, "species")]

    def shares_save_points(self) -> bool:
        first = self.paths[0].t
        return all(p.t.shape == first.shape and np.array_equal(p.t, first) for p in self.paths)

    def at(self, times) -> np.ndarray:
        """States of every trial at the given times, shape (trials, times, species)."""
        query = np.atleast_1d(np.asarray(times, dtype=float))
        return np.stack([p.at(query) for p in self.paths])

    def _grid(self, times=None):
        if times is None:
            if not self.shares_save_points():
                raise ValueError("Sample paths do not share save points; pass explicit times")
            return self.paths[0].t, stack_states(self.paths)
        grid = np.atleast_1d(np.asarray(times, dtype=float))
        return grid, self.at(grid)

    def _std(self, values: np.ndarray) -> np.ndarray:
        if len(self) == 1:
            return np.zeros(values.shape[1:])
        return values.std(axis=0, ddof=1)

    def mean(self, times=None) -> pd.DataFrame:
        """Mean trajectory, indexed by time with one column per species."""
        grid, values = self._grid(times)
        return pd.DataFrame(values.mean(axis=0), index=pd.Index(grid, name="time"),
                            columns=list(self.species_names))

    def std(self, times=None) -> pd.DataFrame:
        """Sample standard deviation across trials (zero for a single trial)."""
        grid, values = self._grid(times)
        return pd.DataFrame(self._std(values), index=pd.Index(grid, name="time"),
                            columns=list(self.species_names))

    def summarize(self, times=None) -> pd.DataFrame:
        """Long table of per-time, per-species mean, std, min and max."""
        grid, values = self._grid(times)
        n_times, n_species = values.shape[1], values.shape[2]
        return pd.DataFrame({
            "time": np.repeat(grid, n_species),
            "species": np.tile(list(self.species_names), n_times),
            "mean": values.mean(axis=0).ravel(),
            "std": self._std(values).ravel(),
            "min": values.min(axis=0).ravel(),
            "max": values.max(axis=0).ravel(),
        })

    def snapshot(self, time: float) -> pd.DataFrame:
        """States of all trials at one time, one row per trial."""
        states = self.at([time])[:, 0, :]
        return pd.DataFrame(states, columns=list(self.species_names),
                            index=pd.RangeIndex(len(self), name="trial"))

    def histogram(self, species, time: float, bins=None, density: bool = False):
        """
        Distribution of one species at one time.

        By default there is one bin per integer count between the smallest
        and the largest observed value.

        Returns:
            Tuple[np.ndarray, np.ndarray]: Counts (or densities) and bin edges
        """
        values = self.snapshot(time)[self._name(species)].to_numpy()
        if bins is None:
            bins = np.arange(values.min(), values.max() + 2) - 0.5
        return np.histogram(values, bins=bins, density=density)

    def extinction_probability(self, species, time: float) -> float:
        """Fraction of trials in which `species` has zero copies at `time`."""
        values = self.snapshot(time)[self._name(species)].to_numpy()
        return float(np.mean(values == 0))

    def phase_portrait(self, x, y, trial: Optional[int] = None):
        """
        Coordinates of a phase portrait of species `x` against species `y`.

        With a trial index the saved states of that trial are used. Without
        one, the ensemble mean over the common save points is used.
        """
        if trial is not None:
            path = self.paths[trial]
            return path.series(x), path.series(y)
        mean = self.mean()
        return mean[self._name(x)].to_numpy(), mean[self._name(y)].to_numpy()

    def to_dataframe(self) -> pd.DataFrame:
        """Long table with 'trial', 'time' and one column per species."""
        frames = []
        for trial, path in enumerate(self.paths):
            frame = path.to_dataframe()
            frame.insert(0, "trial", trial)
            frames.append(frame)
        return pd.concat(frames, ignore_index=True)

    def __repr__(self) -> str:
        return f"Ensemble(trials={len(self)}, species={list(self.species_names)})"
