"""
Tests for the bundled example networks.
"""

import numpy as np

from pybiosim.core import Species
from pybiosim.models import autoregulation, dimerization, kendall, toggle_switch


class TestLibrary:

    def test_kendall(self):
        network = kendall()
        assert network.species_names() == ['X']
        assert network.reaction_names() == ['birth', 'death', 'immigration']
        np.testing.assert_array_equal(network.generate_stoichiometric_matrix(), [[1, -1, 1]])
        assert network.compile().x0.tolist() == [5]

    def test_autoregulation(self):
        network = autoregulation(gene=3)
        model = network.compile()
        assert model.species_names == ('gene', 'P2_gene', 'mRNA', 'P', 'P2')
        assert model.num_reactions == 8
        assert model.x0.tolist() == [3, 0, 0, 0, 0]
        # Binding conserves the total number of gene copies
        totals = model.stoichiometry[0] + model.stoichiometry[1]
        assert not totals.any()

    def test_dimerization(self):
        model = dimerization(monomers=100).compile()
        assert model.reactants.tolist() == [[2, 0], [0, 1]]
        assert model.updates.tolist() == [[-2, 1], [2, -1]]

    def test_toggle_switch(self):
        network = toggle_switch()
        assert set(network.species_names()) == {'geneA', 'geneA_B', 'A', 'geneB', 'geneB_A', 'B'}
        assert len(network.reactions) == 8
        assert network.reactions['repression of A'].formula() == "geneA + B --> geneA_B"

    def test_fresh_networks(self):
        assert kendall() is not kendall()
        first = kendall()
        first.add_species(Species('Y', 1))
        assert 'Y' not in kendall().species
