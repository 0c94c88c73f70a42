from .library import kendall, autoregulation, dimerization, toggle_switch

__all__ = [
    "kendall",
    "autoregulation",
    "dimerization",
    "toggle_switch",
]
