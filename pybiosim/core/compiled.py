"""
Array representation of a reaction network.

Simulation algorithms never touch Species or Reaction objects; they work on
a ReactionModel, which holds the stoichiometry, rate constants and the
reaction dependency structure as numpy arrays.
"""

import logging
from dataclasses import dataclass, replace
from typing import Mapping, Tuple, Union

import networkx as nx
import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ReactionModel:
    """
    Pre-parsed, immutable view of a Network.

    Attributes:
        name (str): Network name
        species_names (Tuple[str, ...]): Species order used by every array
        reaction_names (Tuple[str, ...]): Reaction order used by every array
        x0 (np.ndarray): Initial copy counts, int64 of shape (num_species,)
        rates (np.ndarray): Rate constants, float64 of shape (num_reactions,)
        reactants (np.ndarray): Reactant coefficients, (num_reactions, num_species)
        stoichiometry (np.ndarray): Net changes, (num_species, num_reactions)
        dependents (Tuple[np.ndarray, ...]): Reactions to refresh after each reaction fires
        affected_by_species (Tuple[np.ndarray, ...]): Reactions with each species as reactant
    """

    name: str
    species_names: Tuple[str, ...]
    reaction_names: Tuple[str, ...]
    x0: np.ndarray
    rates: np.ndarray
    reactants: np.ndarray
    stoichiometry: np.ndarray
    dependents: Tuple[np.ndarray, ...]
    affected_by_species: Tuple[np.ndarray, ...]

    @classmethod
    def from_network(cls, network) -> "ReactionModel":
        species_names = tuple(network.species)
        reaction_names = tuple(network.reactions)
        reactants = network.generate_reactant_matrix()
        stoichiometry = network.generate_stoichiometric_matrix()

        position = {name: j for j, name in enumerate(reaction_names)}
        graph = network.dependency_graph()
        dependents = tuple(
            np.array(sorted(position[n] for n in graph.successors(name)), dtype=np.int64)
            for name in reaction_names
        )
        affected = tuple(
            np.flatnonzero(reactants[:, i]).astype(np.int64) for i in range(len(species_names))
        )

        model = cls(
            name=network.name,
            species_names=species_names,
            reaction_names=reaction_names,
            x0=np.array([s.population for s in network.species.values()], dtype=np.int64),
            rates=np.array([r.rate_value for r in network.reactions.values()], dtype=np.float64),
            reactants=reactants,
            stoichiometry=stoichiometry,
            dependents=dependents,
            affected_by_species=affected,
        )
        logger.debug("Compiled network '%s': %d species, %d reactions, %d dependency edges",
                     network.name, model.num_species, model.num_reactions, graph.number_of_edges())
        return model

    @property
    def num_species(self) -> int:
        return len(self.species_names)

    @property
    def num_reactions(self) -> int:
        return len(self.reaction_names)

    @property
    def updates(self) -> np.ndarray:
        """Net change per reaction as rows, shape (num_reactions, num_species)."""
        return np.ascontiguousarray(self.stoichiometry.T)

    @property
    def order(self) -> np.ndarray:
        """Reactant molecularity of each reaction."""
        return self.reactants.sum(axis=1)

    def species_index(self, key: Union[str, int]) -> int:
        return lookup_index(key, self.species_names, "species")

    def reaction_index(self, key: Union[str, int]) -> int:
        return lookup_index(key, self.reaction_names, "reaction")

    def with_initial_state(self, state: Mapping[str, int]) -> "ReactionModel":
        """Copy of the model starting from different copy counts."""
        x0 = self.x0.copy()
        for key, value in state.items():
            if value < 0 or int(value) != value:
                raise ValueError(f"Initial count for '{key}' must be a non-negative integer, got {value!r}")
            x0[self.species_index(key)] = int(value)
        return replace(self, x0=x0)

    def with_rates(self, rates: Mapping[str, float]) -> "ReactionModel":
        """Copy of the model with some rate constants changed."""
        values = self.rates.copy()
        for key, value in rates.items():
            if value < 0:
                raise ValueError(f"Rate constant for '{key}' must be non-negative, got {value!r}")
            values[self.reaction_index(key)] = float(value)
        return replace(self, rates=values)

    def dependency_graph(self) -> nx.DiGraph:
        """Rebuild the reaction dependency graph from the stored arrays."""
        graph = nx.DiGraph()
        graph.add_nodes_from(self.reaction_names)
        for j, deps in enumerate(self.dependents):
            graph.add_edges_from((self.reaction_names[j], self.reaction_names[i]) for i in deps)
        return graph

    def __repr__(self) -> str:
        return (f"ReactionModel(name='{self.name}', "
                f"species={self.num_species}, reactions={self.num_reactions})")


def lookup_index(key, names: Tuple[str, ...], kind: str) -> int:
    """Position of a name (or Species) in names; integer keys may be negative."""
    key = getattr(key, "name", key)
    if isinstance(key, (int, np.integer)) and not isinstance(key, bool):
        if not -len(names) <= key < len(names):
            raise KeyError(f"{kind.capitalize()} index {key} out of range for {len(names)} {kind}")
        return int(key) % len(names)
    try:
        return names.index(key)
    except ValueError:
        raise KeyError(f"Unknown {kind} '{key}'") from None


def as_model(model) -> ReactionModel:
    """Accept either a Network or an already compiled ReactionModel."""
    if isinstance(model, ReactionModel):
        return model
    if hasattr(model, "compile"):
        return model.compile()
    raise TypeError(f"Cannot simulate object of type {type(model).__name__}")
