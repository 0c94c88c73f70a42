"""
Tests for reaction channels.

This module tests:
- Formula parsing
- Explicit stoichiometry
- Mass-action rate laws
"""

import pytest
import sympy as sp
from pybiosim.core.models import Species, Parameter
from pybiosim.core.reactions import Reaction, parse_formula


class TestFormulaParsing:
    """Test cases for reaction formula strings."""

    def test_simple_formula(self):
        assert parse_formula("gene + P2 --> P2_gene") == ({'gene': 1, 'P2': 1}, {'P2_gene': 1})

    def test_coefficients(self):
        assert parse_formula("2P --> P2") == ({'P': 2}, {'P2': 1})
        assert parse_formula("2 P -> P2") == ({'P': 2}, {'P2': 1})

    def test_repeated_species_accumulate(self):
        reactants, products = parse_formula("P + P --> P2")
        assert reactants == {'P': 2}

    def test_empty_sides(self):
        assert parse_formula("0 --> X") == ({}, {'X': 1})
        assert parse_formula("X --> ∅") == ({'X': 1}, {})
        assert parse_formula("X → 0") == ({'X': 1}, {})

    def test_malformed_formulas(self):
        with pytest.raises(ValueError, match="exactly one arrow"):
            parse_formula("A + B")
        with pytest.raises(ValueError, match="exactly one arrow"):
            parse_formula("A --> B --> C")
        with pytest.raises(ValueError, match="Cannot parse"):
            parse_formula("A + --> B")
        with pytest.raises(ValueError, match="must be positive"):
            parse_formula("0A --> B")


class TestReaction:
    """Test cases for the Reaction class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.species_a = Species('A', 100)
        self.species_b = Species('B', 50)
        self.param_k = Parameter('k', 0.1)

    def test_formula_reaction(self):
        reaction = Reaction('conversion', 0.5, 'A --> B')
        assert reaction.name == 'conversion'
        assert reaction.reactants == {'A': 1}
        assert reaction.products == {'B': 1}
        assert reaction.rate_value == 0.5
        assert reaction.order == 1

    def test_explicit_stoichiometry(self):
        """Species objects and names are both accepted as keys."""
        reaction = Reaction('combination', self.param_k,
                            reactants={self.species_a: 1, 'B': 1}, products={'C': 1})
        assert reaction.reactants == {'A': 1, 'B': 1}
        assert reaction.products == {'C': 1}
        assert reaction.rate_value == 0.1
        assert reaction.order == 2

    def test_needs_stoichiometry(self):
        with pytest.raises(ValueError, match="needs a formula"):
            Reaction('empty', 1.0)

    def test_formula_and_mappings_exclusive(self):
        with pytest.raises(ValueError, match="not both"):
            Reaction('both', 1.0, 'A --> B', reactants={'A': 1})

    def test_invalid_rate(self):
        with pytest.raises(ValueError, match="non-negative rate"):
            Reaction('bad', -1.0, 'A --> B')
        with pytest.raises(ValueError, match="non-negative rate"):
            Reaction('bad', 'fast', 'A --> B')

    def test_invalid_coefficient(self):
        with pytest.raises(ValueError, match="positive integer"):
            Reaction('bad', 1.0, reactants={'A': 0}, products={})

    def test_net_change(self):
        """Catalysts cancel out of the net change."""
        reaction = Reaction('catalysis', 1.0, 'E + S --> E + P')
        assert reaction.net_change() == {'S': -1, 'P': 1}
        assert reaction.species_names() == {'E', 'S', 'P'}

    def test_unimolecular_rate_law(self):
        reaction = Reaction('decay', self.param_k, 'A --> 0')
        assert reaction.rate_law.equals(self.param_k.symbol * self.species_a.symbol)

    def test_bimolecular_rate_law(self):
        reaction = Reaction('combination', self.param_k, 'A + B --> C')
        expected = self.param_k.symbol * self.species_a.symbol * self.species_b.symbol
        assert reaction.rate_law.equals(expected)

    def test_homodimerization_rate_law(self):
        """2A counts unordered pairs: k * A * (A - 1) / 2."""
        reaction = Reaction('dimerization', self.param_k, '2A --> B')
        A = self.species_a.symbol
        assert sp.simplify(reaction.rate_law - self.param_k.symbol * A * (A - 1) / 2) == 0
        assert reaction.rate_law.subs({A: 1, self.param_k.symbol: 1}) == 0

    def test_trimolecular_rate_law(self):
        reaction = Reaction('trimer', 1.0, '3A --> B')
        A = self.species_a.symbol
        assert float(reaction.rate_law.subs(A, 5)) == pytest.approx(10.0)

    def test_zero_order_rate_law(self):
        reaction = Reaction('immigration', self.param_k, '0 --> A')
        assert reaction.rate_law == self.param_k.symbol
        assert reaction.order == 0

    def test_formula_round_trip(self):
        reaction = Reaction('r', 1.0, reactants={'A': 2, 'B': 1}, products={})
        assert reaction.formula() == '2A + B --> 0'

    def test_reaction_repr(self):
        repr_str = repr(Reaction('test_reaction', 2.0, '2A + B --> C'))
        assert 'test_reaction' in repr_str
        assert '2A + B --> C' in repr_str
