"""
Example reaction networks.

Ready-made networks used in the tutorials and tests. Every builder returns
a fresh Network, so callers may modify it freely.
"""

from ..core.models import Network, Species
from ..core.reactions import Reaction


def kendall(birth: float = 2.0, death: float = 1.0, immigration: float = 0.5,
            population: int = 5) -> Network:
    """Kendall's birth-death-immigration process for a single population X."""
    network = Network("Kendall's process")
    network <= Species("X", population)
    network <= Reaction("birth", birth, "X --> X + X")
    network <= Reaction("death", death, "X --> 0")
    network <= Reaction("immigration", immigration, "0 --> X")
    return network


def autoregulation(gene: int = 10, repression_binding: float = 1.0,
                   reverse_repression_binding: float = 10.0, transcription: float = 0.01,
                   translation: float = 10.0, dimerization: float = 1.0,
                   dissociation: float = 1.0, mrna_degradation: float = 0.1,
                   protein_degradation: float = 0.01) -> Network:
    """
    Prokaryotic auto-regulatory gene network.

    Protein P dimerizes to P2, and P2 represses its own gene by binding to
    it. The gene copies split between the free (`gene`) and the repressed
    (`P2_gene`) form, so ``gene + P2_gene`` stays constant.
    """
    network = Network("auto-regulation")

    network <= Species("gene", gene)
    network <= Species("P2_gene", 0)
    network <= Species("mRNA", 0)
    network <= Species("P", 0)
    network <= Species("P2", 0)

    network <= Reaction("repression binding", repression_binding, "gene + P2 --> P2_gene")
    network <= Reaction("reverse repression binding", reverse_repression_binding, "P2_gene --> gene + P2")
    network <= Reaction("transcription", transcription, "gene --> gene + mRNA")
    network <= Reaction("translation", translation, "mRNA --> mRNA + P")
    network <= Reaction("dimerization", dimerization, "P + P --> P2")
    network <= Reaction("dissociation", dissociation, "P2 --> P + P")
    network <= Reaction("mRNA degradation", mrna_degradation, "mRNA --> 0")
    network <= Reaction("protein degradation", protein_degradation, "P --> 0")
    return network


def dimerization(monomers: int = 300, forward: float = 0.00166, backward: float = 0.2) -> Network:
    """Reversible dimerization 2P <--> P2."""
    network = Network("dimerization")
    network <= Species("P", monomers)
    network <= Species("P2", 0)
    network <= Reaction("dimerization", forward, "2P --> P2")
    network <= Reaction("dissociation", backward, "P2 --> 2P")
    return network


def toggle_switch(expression: float = 50.0, degradation: float = 1.0,
                  binding: float = 0.1, unbinding: float = 1.0) -> Network:
    """
    Genetic toggle switch: two genes whose proteins repress each other.

    Each gene is a single copy that is either free or bound by the other
    gene's protein; only the free form expresses.
    """
    network = Network("toggle switch")

    for gene, repressor in (("A", "B"), ("B", "A")):
        network <= Species(f"gene{gene}", 1)
        network <= Species(f"gene{gene}_{repressor}", 0)
        network <= Species(gene, 0)

    for gene, repressor in (("A", "B"), ("B", "A")):
        network <= Reaction(f"expression {gene}", expression, f"gene{gene} --> gene{gene} + {gene}")
        network <= Reaction(f"degradation {gene}", degradation, f"{gene} --> 0")
        network <= Reaction(f"repression of {gene}", binding,
                            f"gene{gene} + {repressor} --> gene{gene}_{repressor}")
        network <= Reaction(f"derepression of {gene}", unbinding,
                            f"gene{gene}_{repressor} --> gene{gene} + {repressor}")
    return network
