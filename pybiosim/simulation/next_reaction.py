"""
Next reaction method (Gibson & Bruck, 2000).
"""

import numpy as np

from .base import SimulationAlgorithm


class NextReaction(SimulationAlgorithm):
    """
    Gibson-Bruck next reaction method.

    Each reaction carries an absolute putative firing time. After reaction j
    fires at time t, only its dependents are touched: a reaction whose
    propensity changed from a_old to a_new has its time rescaled as
    ``t + (a_old / a_new) * (t_i - t)``, which reuses the random number already
    drawn for it. The fired reaction, and reactions that could not fire
    before, draw a fresh exponential time.
    """

    name = "next_reaction"

    def setup(self, x):
        self.propensities = self.compute_propensities(x)
        self.putative = np.full(self.model.num_reactions, np.inf)
        for i, a in enumerate(self.propensities):
            if a > 0.0:
                self.putative[i] = self.rng.exponential(1.0 / a)
        self._selected = -1

    def next_time(self, t, x):
        if self.model.num_reactions == 0:
            return np.inf
        self._selected = int(np.argmin(self.putative))
        return float(self.putative[self._selected])

    def _fresh(self, t, a):
        return t + self.rng.exponential(1.0 / a) if a > 0.0 else np.inf

    def fire(self, x, t_next):
        j = self._selected
        x += self.updates[j]

        deps = self.model.dependents[j]
        previous = self.propensities[deps].copy()
        self.kernels.update_propensities(x, self.reactants, self.rates, self.propensities, deps)

        for i, a_old in zip(deps, previous):
            a_new = self.propensities[i]
            if i == j or a_old == 0.0:
                self.putative[i] = self._fresh(t_next, a_new)
            elif a_new > 0.0:
                self.putative[i] = t_next + (a_old / a_new) * (self.putative[i] - t_next)
            else:
                self.putative[i] = np.inf

        if j not in deps:
            self.putative[j] = self._fresh(t_next, self.propensities[j])
        return 1
