"""
Explicit tau-leaping.

Approximate simulation that fires many reactions per step. Step sizes follow
Cao, Gillespie & Petzold, "Efficient step size selection for the tau-leaping
simulation method" (J. Chem. Phys. 124, 044109, 2006).
"""

import logging

import numpy as np

from .base import SimulationAlgorithm

logger = logging.getLogger(__name__)

_NO_LIMIT = np.iinfo(np.int64).max


class TauLeaping(SimulationAlgorithm):
    """
    Explicit tau-leaping with critical reactions.

    A reaction that is fewer than `n_critical` firings away from exhausting
    one of its reactants is critical. Critical reactions fire at most once
    per leap. The other reactions fire Poisson(a_j * tau) times. The leap
    length bounds the expected relative change of every reactant by
    `epsilon`. When that leap is shorter than ``ssa_threshold / a0``, leaping
    does not pay off and the next `ssa_steps` steps are exact direct-method
    steps. A leap that would make a population negative is discarded and
    retried with half the step.

    Args:
        epsilon (float): Relative change bound, in (0, 1)
        n_critical (int): Critical reaction threshold
        ssa_threshold (float): Multiple of 1/a0 below which exact steps are used
        ssa_steps (int): Number of exact steps taken when falling back
    """

    name = "tau_leaping"

    def __init__(self, epsilon: float = 0.03, n_critical: int = 10,
                 ssa_threshold: float = 10.0, ssa_steps: int = 100):
        super().__init__()
        if not 0.0 < epsilon < 1.0:
            raise ValueError(f"epsilon must lie in (0, 1), got {epsilon!r}")
        if n_critical < 0:
            raise ValueError("n_critical must be non-negative")
        if ssa_steps < 1:
            raise ValueError("ssa_steps must be at least 1")
        self.epsilon = epsilon
        self.n_critical = n_critical
        self.ssa_threshold = ssa_threshold
        self.ssa_steps = ssa_steps

    def setup(self, x):
        model = self.model
        self.propensities = np.empty(model.num_reactions)
        self.consumption = np.maximum(-self.updates, 0)
        self.reactant_species = self.reactants.sum(axis=0) > 0

        # Highest order of any reaction a species takes part in, and its
        # largest coefficient among reactions of that order
        order = self.reactants.sum(axis=1)
        self.highest_order = np.zeros(model.num_species, dtype=np.int64)
        self.highest_coeff = np.zeros(model.num_species, dtype=np.int64)
        for j in range(model.num_reactions):
            for i in np.flatnonzero(self.reactants[j]):
                if order[j] > self.highest_order[i]:
                    self.highest_order[i] = order[j]
                    self.highest_coeff[i] = self.reactants[j, i]
                elif order[j] == self.highest_order[i]:
                    self.highest_coeff[i] = max(self.highest_coeff[i], self.reactants[j, i])

        self._delta = np.zeros(model.num_species, dtype=np.int64)
        self._events = 0
        self._ssa_remaining = 0
        self.leaps = 0
        self.exact_steps = 0
        self.rejected_leaps = 0

    def _g(self, x):
        g = np.maximum(self.highest_order, 1).astype(float)
        for i in np.flatnonzero(self.highest_order >= 2):
            hor, coeff, xi = self.highest_order[i], self.highest_coeff[i], x[i]
            if hor == 2 and coeff == 2 and xi > 1:
                g[i] = 2.0 + 1.0 / (xi - 1)
            elif hor == 3 and coeff == 2 and xi > 1:
                g[i] = 1.5 * (2.0 + 1.0 / (xi - 1))
            elif hor == 3 and coeff == 3 and xi > 2:
                g[i] = 3.0 + 1.0 / (xi - 1) + 2.0 / (xi - 2)
        return g

    def critical_reactions(self, x, a):
        """Mask of reactions within `n_critical` firings of exhausting a reactant."""
        cons = self.consumption
        limits = np.where(cons > 0, x[np.newaxis, :] // np.maximum(cons, 1), _NO_LIMIT).min(axis=1, initial=_NO_LIMIT)
        return (a > 0.0) & (limits < self.n_critical)

    def noncritical_step(self, x, a, critical):
        """Largest leap keeping the relative change of every reactant below epsilon."""
        active = (~critical) & (a > 0.0)
        if not active.any() or not self.reactant_species.any():
            return np.inf

        V = self.model.stoichiometry[:, active]
        mu = V @ a[active]
        sigma2 = (V ** 2) @ a[active]
        bound = np.maximum(self.epsilon * x / self._g(x), 1.0)

        with np.errstate(divide="ignore", invalid="ignore"):
            by_mean = np.where(mu != 0.0, bound / np.abs(mu), np.inf)
            by_variance = np.where(sigma2 > 0.0, bound ** 2 / sigma2, np.inf)
        rs = self.reactant_species
        return float(min(by_mean[rs].min(), by_variance[rs].min()))

    def _exact_step(self, t, a, a0):
        j = self.kernels.linear_search(a, self.rng.random() * a0)
        self._delta = self.updates[j].copy()
        self._events = 1
        self.exact_steps += 1
        return t + self.rng.exponential(1.0 / a0)

    def next_time(self, t, x):
        a = self.compute_propensities(x, self.propensities)
        a0 = float(a.sum())
        if a0 <= 0.0:
            return np.inf

        if self._ssa_remaining > 0:
            self._ssa_remaining -= 1
            return self._exact_step(t, a, a0)

        critical = self.critical_reactions(x, a)
        tau1 = self.noncritical_step(x, a, critical)
        if tau1 < self.ssa_threshold / a0:
            self._ssa_remaining = self.ssa_steps - 1
            return self._exact_step(t, a, a0)

        noncritical = (~critical) & (a > 0.0)
        a0_critical = float(a[critical].sum())
        remaining = self.tfinal - t
        while True:
            tau2 = self.rng.exponential(1.0 / a0_critical) if a0_critical > 0.0 else np.inf
            tau = min(tau1, tau2, remaining)

            counts = np.zeros(len(a), dtype=np.int64)
            counts[noncritical] = self.rng.poisson(a[noncritical] * tau)
            if tau2 <= tau1 and tau2 <= remaining:
                weights = np.where(critical, a, 0.0)
                counts[self.kernels.linear_search(weights, self.rng.random() * a0_critical)] += 1

            delta = counts @ self.updates
            if np.all(x + delta >= 0):
                self._delta = delta
                self._events = int(counts.sum())
                self.leaps += 1
                # t + (tfinal - t) can round past tfinal
                return self.tfinal if tau == remaining else t + tau

            self.rejected_leaps += 1
            tau1 /= 2.0
            logger.debug("Leap at t=%.6g would go negative; retrying with tau=%.3g", t, tau1)

    def fire(self, x, t_next):
        x += self._delta
        return self._events

    def __repr__(self) -> str:
        return (f"TauLeaping(epsilon={self.epsilon}, n_critical={self.n_critical}, "
                f"ssa_threshold={self.ssa_threshold}, ssa_steps={self.ssa_steps})")
