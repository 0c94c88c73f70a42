"""
Mass-action propensity kernels.

Every kernel exists twice: a pure Python/NumPy version and the same code
compiled with Numba. The kernels avoid calling each other so that the
jitted versions stay self-contained.
"""

from typing import Callable, NamedTuple

import numpy as np
from numba import njit


def propensity(x, reactants, rates, j):
    """
    Propensity of reaction j in state x.

    Args:
        x (np.ndarray): Copy counts (num_species,)
        reactants (np.ndarray): Reactant coefficients (num_reactions, num_species)
        rates (np.ndarray): Rate constants (num_reactions,)
        j (int): Reaction index

    Returns:
        float: k_j * prod_i binom(x_i, r_ji)
    """
    a = rates[j]
    for i in range(reactants.shape[1]):
        r = reactants[j, i]
        if r == 0:
            continue
        xi = x[i]
        if xi < r:
            return 0.0
        for m in range(r):
            a *= (xi - m) / (m + 1.0)
    return a


def propensities(x, reactants, rates, out):
    """Fill `out` with the propensity of every reaction and return it."""
    for j in range(rates.shape[0]):
        a = rates[j]
        for i in range(reactants.shape[1]):
            r = reactants[j, i]
            if r == 0:
                continue
            xi = x[i]
            if xi < r:
                a = 0.0
                break
            for m in range(r):
                a *= (xi - m) / (m + 1.0)
        out[j] = a
    return out


def update_propensities(x, reactants, rates, out, indices):
    """Recompute the propensities of the reactions listed in `indices` only."""
    for n in range(indices.shape[0]):
        j = indices[n]
        a = rates[j]
        for i in range(reactants.shape[1]):
            r = reactants[j, i]
            if r == 0:
                continue
            xi = x[i]
            if xi < r:
                a = 0.0
                break
            for m in range(r):
                a *= (xi - m) / (m + 1.0)
        out[j] = a
    return out


def linear_search(values, target):
    """
    Index of the first entry whose running sum exceeds `target`.

    Zero entries are never selected. If rounding pushes `target` past the
    total, the last positive entry is returned.
    """
    cumulative = 0.0
    last = -1
    for j in range(values.shape[0]):
        if values[j] > 0.0:
            cumulative += values[j]
            last = j
            if cumulative > target:
                return j
    return last


class Kernels(NamedTuple):
    propensity: Callable
    propensities: Callable
    update_propensities: Callable
    linear_search: Callable


PYTHON_KERNELS = Kernels(propensity, propensities, update_propensities, linear_search)

NUMBA_KERNELS = Kernels(
    njit(fastmath=True, cache=True)(propensity),
    njit(fastmath=True, cache=True)(propensities),
    njit(fastmath=True, cache=True)(update_propensities),
    njit(cache=True)(linear_search),
)


def get_kernels(use_numba: bool = False) -> Kernels:
    """Select the jitted or the pure-Python kernel set."""
    return NUMBA_KERNELS if use_numba else PYTHON_KERNELS
