"""
Core model classes

This module contains the building blocks of a reaction network:
- Species: A named population with an integer copy count
- Parameter: A named rate constant with a symbolic representation
- Network: Container class that assembles species and reactions
"""

import logging
from numbers import Integral, Real
from typing import Dict, List, Union

import networkx as nx
import numpy as np
import sympy as sp
from sympy import lambdify
from sympy.core.symbol import Symbol

logger = logging.getLogger(__name__)

# Define global time symbol
t = sp.Symbol('t', nonnegative=True)


class Parameter:
    """
    A named rate constant. Reactions that use a Parameter instead of a plain
    number keep the symbol in their rate law.
    """

    def __init__(self, name: str, value: float):
        """
        Initialize a Parameter.

        Args:
            name (str): The parameter name
            value (float): Non-negative numerical value
        """
        if not isinstance(value, Real) or value < 0:
            raise ValueError(f"Parameter '{name}' must have a non-negative value, got {value!r}")
        self.name = name
        self.symbol = sp.Symbol(name, nonnegative=True)
        self.value = float(value)

    def get_symbol(self) -> Symbol:
        """Get the symbolic representation of the parameter."""
        return self.symbol

    def __repr__(self) -> str:
        return f"Parameter('{self.name}', value={self.value})"


class Species:
    """
    Represents a species in a network, holding its symbolic representation
    and its initial copy count.
    """

    def __init__(self, name: str, population: int = 0):
        """
        Initialize a Species.

        Args:
            name (str): The name of the species (e.g., 'mRNA', 'P2_gene')
            population (int, optional): Initial copy count. Defaults to 0
        """
        if isinstance(population, float) and population.is_integer():
            population = int(population)
        if not isinstance(population, Integral) or isinstance(population, bool):
            raise ValueError(f"Species '{name}' needs an integer population, got {population!r}")
        if population < 0:
            raise ValueError(f"Species '{name}' cannot have a negative population ({population})")
        self.name = name
        self.symbol = sp.Symbol(name, integer=True, nonnegative=True)
        self.population = int(population)

    def __repr__(self) -> str:
        return f"Species('{self.name}', population={self.population})"

    # --- Methods for NetworkX compatibility ---

    def __hash__(self):
        return hash(self.name)

    def __eq__(self, other):
        if not isinstance(other, Species):
            return NotImplemented
        return self.name == other.name


class Network:
    """
    A named collection of species and reactions defining a continuous-time
    Markov jump process.

    Species and reactions are kept in insertion order; that order fixes the
    rows and columns of every matrix generated from the network. A species
    influence graph is maintained alongside, with an edge u -> v for every
    reaction that consumes u and produces v.
    """

    def __init__(self, name: str):
        """
        Initialize a Network.

        Args:
            name (str): Name of the reaction network
        """
        self.name = name
        self.graph = nx.DiGraph()
        self.species: Dict[str, Species] = {}
        self.parameters: Dict[str, Parameter] = {}
        self.reactions: Dict[str, "Reaction"] = {}

    def add_species(self, species: Species):
        """
        Add a species to the network, creating a node in the graph.

        Args:
            species (Species): The species to add

        Returns:
            Network: Self for method chaining
        """
        if species.name in self.species:
            raise ValueError(f"Species '{species.name}' already exists in the network.")
        self.species[species.name] = species
        self.graph.add_node(species.name, population=species.population)
        return self

    def add_parameter(self, parameter: Parameter):
        """
        Add a parameter to the network.

        Args:
            parameter (Parameter): The parameter to add

        Returns:
            Network: Self for method chaining
        """
        if parameter.name in self.parameters:
            raise ValueError(f"Parameter '{parameter.name}' already exists in the network.")
        self.parameters[parameter.name] = parameter
        return self

    def add_reaction(self, reaction):
        """
        Add a reaction to the network, creating edges in the graph.

        Every species the reaction names must already be in the network. A
        Parameter used as the reaction rate is registered on the fly.

        Args:
            reaction (Reaction): The reaction to add

        Returns:
            Network: Self for method chaining
        """
        if reaction.name in self.reactions:
            raise ValueError(f"Reaction '{reaction.name}' already exists in the network.")
        unknown = [name for name in reaction.species_names() if name not in self.species]
        if unknown:
            raise ValueError(
                f"Reaction '{reaction.name}' uses undeclared species: {', '.join(sorted(unknown))}"
            )
        if isinstance(reaction.rate, Parameter):
            known = self.parameters.get(reaction.rate.name)
            if known is None:
                self.add_parameter(reaction.rate)
            elif known is not reaction.rate:
                raise ValueError(f"Parameter '{reaction.rate.name}' already exists in the network.")

        self.reactions[reaction.name] = reaction
        for reactant in reaction.reactants:
            for product in reaction.products:
                if self.graph.has_edge(reactant, product):
                    self.graph.edges[reactant, product]['reactions'].append(reaction.name)
                else:
                    self.graph.add_edge(reactant, product, reactions=[reaction.name])
        logger.debug("Added reaction %s: %s", reaction.name, reaction.formula())
        return self

    def __le__(self, item):
        """Shorthand for adding a species, reaction or parameter: ``network <= item``."""
        from .reactions import Reaction

        if isinstance(item, Species):
            return self.add_species(item)
        if isinstance(item, Reaction):
            return self.add_reaction(item)
        if isinstance(item, Parameter):
            return self.add_parameter(item)
        return NotImplemented

    def species_names(self) -> List[str]:
        return list(self.species)

    def reaction_names(self) -> List[str]:
        return list(self.reactions)

    def generate_stoichiometric_matrix(self) -> np.ndarray:
        """
        Generate the stoichiometric matrix V where V[i,j] is the change in
        species i due to reaction j.

        Returns:
            np.ndarray: Matrix of shape (num_species, num_reactions)
        """
        index = {name: i for i, name in enumerate(self.species)}
        V = np.zeros((len(self.species), len(self.reactions)), dtype=np.int64)

        for j, reaction in enumerate(self.reactions.values()):
            for name, coeff in reaction.reactants.items():
                V[index[name], j] -= coeff
            for name, coeff in reaction.products.items():
                V[index[name], j] += coeff

        return V

    def generate_reactant_matrix(self) -> np.ndarray:
        """
        Generate the reactant matrix R where R[j,i] is the number of
        molecules of species i consumed by one firing of reaction j.

        Returns:
            np.ndarray: Matrix of shape (num_reactions, num_species)
        """
        index = {name: i for i, name in enumerate(self.species)}
        R = np.zeros((len(self.reactions), len(self.species)), dtype=np.int64)
        for j, reaction in enumerate(self.reactions.values()):
            for name, coeff in reaction.reactants.items():
                R[j, index[name]] = coeff
        return R

    def generate_propensity_vector(self) -> sp.Matrix:
        """
        Generate the symbolic propensity vector where each element is the
        mass-action rate law of one reaction.

        Returns:
            sp.Matrix: Column of symbolic propensity expressions
        """
        return sp.Matrix([rxn.rate_law for rxn in self.reactions.values()])

    def dependency_graph(self) -> nx.DiGraph:
        """
        Build the reaction dependency graph.

        There is an edge j -> i when firing reaction j changes the count of
        a species that is a reactant of reaction i, so that the propensity of
        i must be recomputed after j fires.

        Returns:
            nx.DiGraph: Graph over reaction names
        """
        graph = nx.DiGraph()
        graph.add_nodes_from(self.reactions)

        consumers: Dict[str, List[str]] = {name: [] for name in self.species}
        for rxn in self.reactions.values():
            for name in rxn.reactants:
                consumers[name].append(rxn.name)

        for rxn in self.reactions.values():
            for name in rxn.net_change():
                for target in consumers[name]:
                    graph.add_edge(rxn.name, target)
        return graph

    def generate_odes(self) -> Dict[Symbol, sp.Expr]:
        """
        Generate the deterministic reaction-rate equations dx/dt = V a(x),
        in copy-number units, using the stochastic propensities on a
        continuous state.

        Returns:
            Dict[Symbol, sp.Expr]: Mapping from species symbols to right-hand sides
        """
        if len(self.reactions) == 0:
            dxdt_vector = sp.zeros(len(self.species), 1)
        else:
            V = sp.Matrix(self.generate_stoichiometric_matrix())
            dxdt_vector = V * self.generate_propensity_vector()

        ordered_symbols = [s.symbol for s in self.species.values()]
        return {symbol: expr for symbol, expr in zip(ordered_symbols, dxdt_vector)}

    def lambdify_odes(self) -> Dict:
        """
        Convert the symbolic reaction-rate equations into a numerical function
        and return everything needed for integration in a dictionary.

        Returns:
            Dict: A dictionary containing:
            - 'func' (Callable): The numerical function f(t, y, *params).
            - 'y0' (np.ndarray): The array of initial copy counts.
            - 'params' (Tuple): Rate constant values, one per parameter symbol.
            - 'species_names' (List[str]): Ordered list of species names.
            - 'param_names' (List[str]): Ordered list of parameter names.
        """
        ordered_species = list(self.species.values())
        ordered_params = list(self.parameters.values())

        species_symbols = [s.symbol for s in ordered_species]
        param_symbols = [p.symbol for p in ordered_params]

        symbolic_odes = self.generate_odes()
        ode_expressions = [symbolic_odes[s] for s in species_symbols]

        lambda_func = lambdify(species_symbols + param_symbols, ode_expressions, 'numpy')

        # Constant right-hand sides come back as scalars; broadcast them to the state shape
        def ode_function(t, y, *p):
            values = lambda_func(*y, *p)
            return np.array([np.broadcast_to(v, np.shape(y[0])) for v in values], dtype=float)

        return {
            'func': ode_function,
            'y0': np.array([s.population for s in ordered_species], dtype=float),
            'params': tuple(p.value for p in ordered_params),
            'species_names': [s.name for s in ordered_species],
            'param_names': [p.name for p in ordered_params],
        }

    def latex_odes(self, with_values: bool = False) -> str:
        """
        Render the reaction-rate equations as an aligned LaTeX block.

        Args:
            with_values (bool): Substitute parameter symbols by their values
        """
        odes = self.generate_odes()
        substitutions = {p.symbol: p.value for p in self.parameters.values()} if with_values else {}

        equations = [
            sp.Eq(sp.Derivative(sp.Function(s.name)(t), t), e.subs(substitutions))
            for s, e in odes.items()
        ]
        # Align all equations at the equals sign
        return r"\begin{aligned}" + r" \\ ".join(
            [sp.latex(eq).replace("=", " &= ", 1) for eq in equations]
        ) + r"\end{aligned}"

    def display_latex_odes(self, with_values: bool = False) -> None:
        """
        Display the reaction-rate equations as rendered LaTeX.

        Note: This method requires an IPython/Jupyter environment for display.
        """
        try:
            from IPython.display import display, Latex
        except ImportError:
            print("IPython not available. LaTeX display requires a Jupyter environment.")
            return
        display(Latex(f"$${self.latex_odes(with_values)}$$"))

    def compile(self):
        """Parse the network into the array representation used by the simulators."""
        from .compiled import ReactionModel

        return ReactionModel.from_network(self)

    def summary(self) -> str:
        """One line per reaction: name, formula and rate constant."""
        lines = [f"Network '{self.name}' with {len(self.species)} species, {len(self.reactions)} reactions"]
        for rxn in self.reactions.values():
            lines.append(f"  {rxn.name}: {rxn.formula()}  (k={rxn.rate_value})")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (f"Network(name='{self.name}', "
                f"species={len(self.species)}, "
                f"reactions={len(self.reactions)}, "
                f"parameters={len(self.parameters)})")


SpeciesLike = Union[str, Species]


def species_name(item: SpeciesLike) -> str:
    """Accept a Species or its name wherever a species is referenced."""
    if isinstance(item, Species):
        return item.name
    if isinstance(item, str):
        return item
    raise TypeError(f"Expected a species name or Species, got {type(item).__name__}")
