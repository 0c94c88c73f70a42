"""
Gillespie-type exact simulation algorithms.

This module implements the direct method, the first reaction method and
the sorting direct method. All three sample exact trajectories of the
chemical master equation. They differ in how the firing reaction is
searched for.
"""

import numpy as np

from ..config import RATES_CACHES
from .base import SimulationAlgorithm


class Direct(SimulationAlgorithm):
    """
    Gillespie's direct method (1977).

    The waiting time is exponential with rate a0 = sum(a). Reaction j is
    chosen with probability a_j / a0. After a firing only the propensities
    of dependent reactions are recomputed.

    Args:
        rates_cache (str): How propensities are cached between events.
            ``"rates"`` keeps individual rates and searches them linearly.
            ``"sums"`` keeps running cumulative sums, refreshed from the lowest
            changed reaction onward, and searches them by bisection.
    """

    name = "direct"

    def __init__(self, rates_cache: str = "rates"):
        super().__init__()
        if rates_cache not in RATES_CACHES:
            raise ValueError(f"rates_cache must be one of {RATES_CACHES}, got {rates_cache!r}")
        self.rates_cache = rates_cache

    def setup(self, x):
        self.propensities = self.compute_propensities(x)
        if self.rates_cache == "sums":
            self.cumulative = np.cumsum(self.propensities)
            self.total = float(self.cumulative[-1]) if len(self.cumulative) else 0.0
        else:
            self.total = float(self.propensities.sum())

    def next_time(self, t, x):
        if self.total <= 0.0:
            return np.inf
        return t + self.rng.exponential(1.0 / self.total)

    def select(self) -> int:
        target = self.rng.random() * self.total
        if self.rates_cache == "rates":
            return self.kernels.linear_search(self.propensities, target)

        j = int(np.searchsorted(self.cumulative, target, side="right"))
        if j >= len(self.cumulative) or self.propensities[j] == 0.0:
            # Rounding at the top end; fall back to the last reaction that can fire
            j = int(np.flatnonzero(self.propensities)[-1])
        return j

    def fire(self, x, t_next):
        j = self.select()
        x += self.updates[j]
        self.refresh(x, j)
        return 1

    def refresh(self, x, j):
        deps = self.model.dependents[j]
        if len(deps) == 0:
            return
        self.kernels.update_propensities(x, self.reactants, self.rates, self.propensities, deps)
        if self.rates_cache == "sums":
            lo = deps[0]
            offset = self.cumulative[lo - 1] if lo > 0 else 0.0
            self.cumulative[lo:] = offset + np.cumsum(self.propensities[lo:])
            self.total = float(self.cumulative[-1])
        else:
            self.total = float(self.propensities.sum())

    def __repr__(self) -> str:
        return f"Direct(rates_cache={self.rates_cache!r})"


class FirstReaction(SimulationAlgorithm):
    """
    Gillespie's first reaction method (1976).

    Draws a putative waiting time for every reaction and fires the earliest.
    """

    name = "first_reaction"

    def setup(self, x):
        self.propensities = self.compute_propensities(x)
        self._selected = -1

    def next_time(self, t, x):
        if len(self.propensities) == 0:
            return np.inf
        draws = self.rng.exponential(size=len(self.propensities))
        with np.errstate(divide="ignore"):
            taus = np.where(self.propensities > 0.0, draws / self.propensities, np.inf)
        self._selected = int(np.argmin(taus))
        return t + taus[self._selected]

    def fire(self, x, t_next):
        j = self._selected
        x += self.updates[j]
        self.kernels.update_propensities(x, self.reactants, self.rates, self.propensities,
                                         self.model.dependents[j])
        return 1


class SortingDirect(SimulationAlgorithm):
    """
    Sorting direct method (McCollum et al., 2006).

    A direct method whose linear search runs over a reaction order that
    adapts on the fly. Each time a reaction fires it swaps one place toward
    the front, so frequent reactions are found after few comparisons.
    """

    name = "sorting_direct"

    def setup(self, x):
        self.propensities = self.compute_propensities(x)
        self.total = float(self.propensities.sum())
        self.search_order = np.arange(self.model.num_reactions)

    def next_time(self, t, x):
        if self.total <= 0.0:
            return np.inf
        return t + self.rng.exponential(1.0 / self.total)

    def fire(self, x, t_next):
        target = self.rng.random() * self.total
        position = self.kernels.linear_search(self.propensities[self.search_order], target)
        j = int(self.search_order[position])
        if position > 0:
            order = self.search_order
            order[position], order[position - 1] = order[position - 1], order[position]

        x += self.updates[j]
        self.kernels.update_propensities(x, self.reactants, self.rates, self.propensities,
                                         self.model.dependents[j])
        self.total = float(self.propensities.sum())
        return 1
