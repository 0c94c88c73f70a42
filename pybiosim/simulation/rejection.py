"""
Rejection-based stochastic simulation algorithm (Thanh et al., 2014).
"""

import logging

import numpy as np

from .base import SimulationAlgorithm

logger = logging.getLogger(__name__)


class RejectionSSA(SimulationAlgorithm):
    """
    Rejection-based SSA (RSSA).

    Every species is kept inside a fluctuation interval
    ``[x * (1 - delta), x * (1 + delta)]``. Since mass-action propensities grow
    with the copy counts, the interval gives a lower and an upper bound on
    each propensity. A candidate reaction is drawn from the upper bounds and
    accepted at once if ``u * a_hi <= a_lo``. Otherwise its exact propensity is
    evaluated and it is accepted if ``u * a_hi <= a``. Every trial, rejected
    or not, advances time by an exponential with rate ``sum(a_hi)``. Bounds
    are only rebuilt for species that leave their interval.

    Args:
        delta (float): Relative half-width of the fluctuation interval, in (0, 1)
    """

    name = "rejection"

    def __init__(self, delta: float = 0.1):
        super().__init__()
        if not 0.0 < delta < 1.0:
            raise ValueError(f"delta must lie in (0, 1), got {delta!r}")
        self.delta = delta

    def setup(self, x):
        num_species = self.model.num_species
        self.lower_x = np.empty(num_species, dtype=np.int64)
        self.upper_x = np.empty(num_species, dtype=np.int64)
        for i in range(num_species):
            self._set_interval(i, x[i])

        self.lower_a = self.compute_propensities(self.lower_x)
        self.upper_a = self.compute_propensities(self.upper_x)
        self.upper_total = float(self.upper_a.sum())
        self.max_rejections = max(100, 10 * self.model.num_reactions)
        self.rejections = 0
        self._selected = -1

    def _set_interval(self, i, xi):
        self.lower_x[i] = int(np.floor(xi * (1.0 - self.delta)))
        self.upper_x[i] = int(np.ceil(xi * (1.0 + self.delta)))

    def _absorbing(self, x) -> bool:
        return float(self.compute_propensities(x).sum()) == 0.0

    def next_time(self, t, x):
        if self.upper_total <= 0.0:
            return np.inf

        kernels = self.kernels
        misses = 0
        while True:
            t += self.rng.exponential(1.0 / self.upper_total)
            j = kernels.linear_search(self.upper_a, self.rng.random() * self.upper_total)
            threshold = self.rng.random() * self.upper_a[j]

            if threshold <= self.lower_a[j] or \
                    threshold <= kernels.propensity(x, self.reactants, self.rates, j):
                self._selected = j
                return t

            self.rejections += 1
            misses += 1
            if t > self.tfinal:
                return t
            if misses == self.max_rejections and self._absorbing(x):
                # Bounds allow firings that the exact state never does
                return np.inf

    def fire(self, x, t_next):
        j = self._selected
        x += self.updates[j]

        stale = [i for i in np.flatnonzero(self.updates[j])
                 if not self.lower_x[i] <= x[i] <= self.upper_x[i]]
        if stale:
            for i in stale:
                self._set_interval(i, x[i])
            touched = np.unique(np.concatenate([self.model.affected_by_species[i] for i in stale]))
            if len(touched):
                self.kernels.update_propensities(self.lower_x, self.reactants, self.rates,
                                                 self.lower_a, touched)
                self.kernels.update_propensities(self.upper_x, self.reactants, self.rates,
                                                 self.upper_a, touched)
                self.upper_total = float(self.upper_a.sum())
            logger.debug("Rebuilt bounds for %d species, %d reactions", len(stale), len(touched))
        return 1
