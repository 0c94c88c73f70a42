"""
Tests for core model classes.

This module tests the fundamental building blocks:
- Species
- Parameter
- Network
"""

import pytest
import networkx as nx
import numpy as np
import sympy as sp
from pybiosim.core.models import Species, Parameter, Network
from pybiosim.core.reactions import Reaction
from pybiosim.models import autoregulation


class TestSpecies:
    """Test cases for the Species class."""

    def test_species_creation(self):
        """Test basic species creation."""
        species = Species('mRNA', 10)
        assert species.name == 'mRNA'
        assert species.population == 10
        assert isinstance(species.symbol, sp.Symbol)

    def test_species_default_population(self):
        assert Species('P').population == 0

    def test_integral_float_population(self):
        """Floats holding whole numbers are accepted as counts."""
        assert Species('P', 3.0).population == 3

    def test_invalid_population(self):
        with pytest.raises(ValueError, match="negative population"):
            Species('P', -1)
        with pytest.raises(ValueError, match="integer population"):
            Species('P', 2.5)

    def test_species_equality(self):
        """Test species equality comparison."""
        species1 = Species('same_name', 10)
        species2 = Species('same_name', 20)
        species3 = Species('different_name', 10)

        assert species1 == species2
        assert species1 != species3

    def test_species_hash(self):
        """Test that species can be used as dictionary keys."""
        test_dict = {Species('hashable', 1): 'value1'}
        test_dict[Species('hashable', 2)] = 'value2'

        assert len(test_dict) == 1
        assert test_dict[Species('hashable')] == 'value2'


class TestParameter:
    """Test cases for the Parameter class."""

    def test_parameter_creation(self):
        param = Parameter('k', 0.5)
        assert param.name == 'k'
        assert param.value == 0.5
        assert isinstance(param.get_symbol(), sp.Symbol)

    def test_negative_parameter(self):
        with pytest.raises(ValueError, match="non-negative"):
            Parameter('k', -1.0)


class TestNetwork:
    """Test cases for the Network class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.network = Network("Test Network")
        self.species_a = Species('A', 100)
        self.species_b = Species('B', 50)

    def test_network_creation(self):
        assert self.network.name == "Test Network"
        assert len(self.network.species) == 0
        assert len(self.network.reactions) == 0
        assert len(self.network.parameters) == 0

    def test_add_species(self):
        """Test adding species and method chaining."""
        result = self.network.add_species(self.species_a)
        assert result is self.network
        self.network.add_species(self.species_b)
        assert self.network.species_names() == ['A', 'B']
        assert self.network.graph.number_of_nodes() == 2

    def test_le_shorthand(self):
        """network <= item adds species, reactions and parameters."""
        k = Parameter('k', 0.1)
        self.network <= self.species_a
        self.network <= self.species_b
        self.network <= k
        self.network <= Reaction('conversion', k, 'A --> B')
        assert len(self.network.species) == 2
        assert 'conversion' in self.network.reactions
        assert self.network.parameters['k'] is k

    def test_duplicate_species_error(self):
        self.network.add_species(self.species_a)
        with pytest.raises(ValueError, match="Species 'A' already exists"):
            self.network.add_species(Species('A', 200))

    def test_duplicate_reaction_error(self):
        self.network.add_species(self.species_a)
        self.network.add_reaction(Reaction('decay', 1.0, 'A --> 0'))
        with pytest.raises(ValueError, match="Reaction 'decay' already exists"):
            self.network.add_reaction(Reaction('decay', 2.0, 'A --> 0'))

    def test_undeclared_species_error(self):
        self.network.add_species(self.species_a)
        with pytest.raises(ValueError, match="undeclared species: C"):
            self.network.add_reaction(Reaction('bad', 1.0, 'A --> C'))

    def test_parameter_registered_by_reaction(self):
        k = Parameter('k', 0.1)
        self.network.add_species(self.species_a)
        self.network.add_reaction(Reaction('decay', k, 'A --> 0'))
        assert self.network.parameters == {'k': k}

    def test_conflicting_parameter_error(self):
        self.network.add_species(self.species_a).add_parameter(Parameter('k', 1.0))
        with pytest.raises(ValueError, match="Parameter 'k' already exists"):
            self.network.add_reaction(Reaction('decay', Parameter('k', 2.0), 'A --> 0'))

    def test_species_graph(self):
        """Edges run from reactants to products and carry reaction names."""
        self.network.add_species(self.species_a).add_species(self.species_b)
        self.network.add_reaction(Reaction('r1', 1.0, 'A --> B'))
        self.network.add_reaction(Reaction('r2', 1.0, 'A --> 2B'))
        assert self.network.graph.edges['A', 'B']['reactions'] == ['r1', 'r2']

    def test_stoichiometric_matrix(self):
        self.network.add_species(self.species_a).add_species(self.species_b)
        self.network.add_reaction(Reaction('dimerization', 1.0, '2A --> B'))
        self.network.add_reaction(Reaction('catalysis', 1.0, 'A + B --> 2B'))

        V = self.network.generate_stoichiometric_matrix()
        assert V.shape == (2, 2)
        np.testing.assert_array_equal(V, [[-2, -1], [1, 1]])

        R = self.network.generate_reactant_matrix()
        np.testing.assert_array_equal(R, [[2, 0], [1, 1]])

    def test_propensity_vector(self):
        self.network.add_species(self.species_a)
        self.network.add_reaction(Reaction('decay', Parameter('k', 0.1), 'A --> 0'))
        a = self.network.generate_propensity_vector()
        assert a.shape == (1, 1)
        assert a[0] == sp.Symbol('k', nonnegative=True) * self.species_a.symbol

    def test_dependency_graph(self):
        """Firing a reaction invalidates every reaction consuming a changed species."""
        graph = autoregulation().dependency_graph()
        assert isinstance(graph, nx.DiGraph)
        assert set(graph.successors('transcription')) == {'translation', 'mRNA degradation'}
        assert set(graph.successors('translation')) == {'dimerization', 'protein degradation'}
        assert 'repression binding' in set(graph.successors('repression binding'))
        assert set(graph.successors('dimerization')) == {
            'dimerization', 'protein degradation', 'dissociation', 'repression binding'
        }

    def test_catalyst_does_not_depend_on_itself(self):
        """A reaction that leaves its reactants unchanged has no self-edge."""
        self.network.add_species(self.species_a).add_species(self.species_b)
        self.network.add_reaction(Reaction('production', 1.0, 'A --> A + B'))
        assert not self.network.dependency_graph().has_edge('production', 'production')

    def test_lambdify_odes(self):
        self.network.add_species(self.species_a).add_species(self.species_b)
        self.network.add_reaction(Reaction('conversion', Parameter('k', 0.1), 'A --> B'))
        sim_data = self.network.lambdify_odes()

        assert callable(sim_data['func'])
        np.testing.assert_array_equal(sim_data['y0'], [100.0, 50.0])
        assert sim_data['params'] == (0.1,)
        assert sim_data['species_names'] == ['A', 'B']
        assert sim_data['param_names'] == ['k']

        dydt = sim_data['func'](0, sim_data['y0'], *sim_data['params'])
        np.testing.assert_allclose(dydt, [-10.0, 10.0])

    def test_odes_use_combinatorial_propensity(self):
        """2P --> P2 consumes two monomers at rate k * P(P-1)/2."""
        network = Network("dimers")
        network.add_species(Species('P', 300)).add_species(Species('P2', 0))
        network.add_reaction(Reaction('dimerization', 0.00166, '2P --> P2'))
        sim_data = network.lambdify_odes()

        dydt = sim_data['func'](0, sim_data['y0'])
        propensity = 0.00166 * 300 * 299 / 2
        np.testing.assert_allclose(dydt, [-2 * propensity, propensity])

    def test_odes_without_reactions(self):
        self.network.add_species(self.species_a)
        sim_data = self.network.lambdify_odes()
        np.testing.assert_array_equal(sim_data['func'](0, sim_data['y0']), [0.0])

    def test_latex_odes(self):
        self.network.add_species(self.species_a)
        self.network.add_reaction(Reaction('decay', Parameter('k', 0.1), 'A --> 0'))
        latex = self.network.latex_odes()
        assert latex.startswith(r"\begin{aligned}")
        assert "&=" in latex
        assert "0.1" in self.network.latex_odes(with_values=True)

    def test_compile(self):
        model = autoregulation().compile()
        assert model.species_names == ('gene', 'P2_gene', 'mRNA', 'P', 'P2')
        assert model.num_reactions == 8

    def test_summary_and_repr(self):
        self.network.add_species(self.species_a)
        self.network.add_reaction(Reaction('decay', 0.5, 'A --> 0'))
        assert "decay: A --> 0  (k=0.5)" in self.network.summary()
        repr_str = repr(self.network)
        assert "Test Network" in repr_str
        assert "species=1" in repr_str
        assert "reactions=1" in repr_str
