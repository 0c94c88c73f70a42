"""
Reaction channels with stochastic mass-action kinetics.

A reaction is given either as a formula string::

    Reaction("dimerization", 1.0, "P + P --> P2")
    Reaction("immigration", 0.5, "0 --> X")

or with explicit stoichiometry mappings::

    Reaction("dimerization", 1.0, reactants={"P": 2}, products={"P2": 1})
"""

import re
from collections import Counter
from math import factorial
from numbers import Real
from typing import Dict, Mapping, Optional, Union

import sympy as sp

from .models import Parameter, SpeciesLike, species_name

ARROW = re.compile(r"\s*(?:-->|->|→)\s*")
TERM = re.compile(r"^(\d*)\s*([A-Za-z_][A-Za-z0-9_]*)$")
EMPTY = {"", "0", "∅"}


def parse_side(side: str) -> Dict[str, int]:
    """
    Parse one side of a reaction formula into a stoichiometry mapping.

    Repeated species accumulate, so ``P + P`` and ``2P`` are the same.
    """
    side = side.strip()
    if side in EMPTY:
        return {}

    counts: Counter = Counter()
    for raw in side.split("+"):
        term = raw.strip()
        match = TERM.match(term)
        if match is None:
            raise ValueError(f"Cannot parse reaction term '{term}' in '{side}'")
        coeff = int(match.group(1)) if match.group(1) else 1
        if coeff <= 0:
            raise ValueError(f"Stoichiometric coefficient must be positive in '{term}'")
        counts[match.group(2)] += coeff
    return dict(counts)


def parse_formula(formula: str):
    """Split ``'A + B --> C'`` into reactant and product mappings."""
    sides = ARROW.split(formula)
    if len(sides) != 2:
        raise ValueError(f"Reaction formula must contain exactly one arrow: '{formula}'")
    return parse_side(sides[0]), parse_side(sides[1])


def _normalize(stoichiometry: Optional[Mapping[SpeciesLike, int]]) -> Dict[str, int]:
    result: Dict[str, int] = {}
    for key, coeff in (stoichiometry or {}).items():
        if int(coeff) != coeff or coeff <= 0:
            raise ValueError(f"Stoichiometric coefficient for '{species_name(key)}' must be a positive integer")
        name = species_name(key)
        result[name] = result.get(name, 0) + int(coeff)
    return result


def _format_side(stoichiometry: Dict[str, int]) -> str:
    if not stoichiometry:
        return "0"
    return " + ".join(f"{c}{n}" if c > 1 else n for n, c in stoichiometry.items())


class Reaction:
    """
    A reaction channel with stochastic mass-action kinetics.

    The propensity of a reaction with rate constant k and reactant
    coefficients r_i is ``k * prod_i binom(x_i, r_i)``, the number of distinct
    reactant combinations in state x times k.

    Args:
        name (str): Unique reaction name
        rate (float | Parameter): Rate constant
        formula (str, optional): Reaction formula, e.g. ``"gene + P2 --> P2_gene"``
        reactants (Mapping, optional): Species (or names) to coefficients consumed
        products (Mapping, optional): Species (or names) to coefficients produced
    """

    def __init__(self, name: str, rate: Union[float, Parameter], formula: Optional[str] = None,
                 reactants: Optional[Mapping[SpeciesLike, int]] = None,
                 products: Optional[Mapping[SpeciesLike, int]] = None):
        if formula is not None and (reactants is not None or products is not None):
            raise ValueError(f"Reaction '{name}': give either a formula or reactants/products, not both")
        if formula is None and reactants is None and products is None:
            raise ValueError(f"Reaction '{name}' needs a formula or reactants/products")
        if not isinstance(rate, Parameter):
            if not isinstance(rate, Real) or rate < 0:
                raise ValueError(f"Reaction '{name}' must have a non-negative rate, got {rate!r}")
            rate = float(rate)

        self.name = name
        self.rate = rate
        if formula is not None:
            self.reactants, self.products = parse_formula(formula)
        else:
            self.reactants = _normalize(reactants)
            self.products = _normalize(products)

    @property
    def rate_value(self) -> float:
        return self.rate.value if isinstance(self.rate, Parameter) else self.rate

    @property
    def order(self) -> int:
        """Total molecularity of the reactant side."""
        return sum(self.reactants.values())

    @property
    def rate_law(self) -> sp.Expr:
        """Symbolic propensity, ``k * prod x(x-1)...(x-r+1) / r!``."""
        k = self.rate.symbol if isinstance(self.rate, Parameter) else sp.Float(self.rate)
        expr = k
        for name, coeff in self.reactants.items():
            x = sp.Symbol(name, integer=True, nonnegative=True)
            falling = sp.Mul(*[x - m for m in range(coeff)])
            expr = expr * falling / factorial(coeff)
        return expr

    def species_names(self):
        return set(self.reactants) | set(self.products)

    def net_change(self) -> Dict[str, int]:
        """Non-zero change in each species when the reaction fires once."""
        change = Counter(self.products)
        change.subtract(self.reactants)
        return {name: int(c) for name, c in change.items() if c != 0}

    def formula(self) -> str:
        return f"{_format_side(self.reactants)} --> {_format_side(self.products)}"

    def __repr__(self) -> str:
        return f"Reaction('{self.name}', {self.rate_value}, '{self.formula()}')"
