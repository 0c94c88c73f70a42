from .models import Species, Parameter, Network
from .reactions import Reaction, parse_formula
from .compiled import ReactionModel, as_model

__all__ = [
    "Species",
    "Parameter",
    "Network",
    "Reaction",
    "parse_formula",
    "ReactionModel",
    "as_model",
]
