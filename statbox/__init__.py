"""
statbox: a statistics toolbox for Python.

Submodules:
    anova: Multi-way analysis of variance (anovan)
    distributions: Probability distribution objects and fitdist
    descriptive: Array reductions (median)
"""

__version__ = "0.1.0"

from statbox import anova
from statbox import descriptive
from statbox import distributions

__all__ = [
    "__version__",
    "anova",
    "descriptive",
    "distributions",
]
