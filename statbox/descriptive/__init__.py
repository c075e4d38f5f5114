"""
Descriptive statistics module.

Public API:
    median(x, axis=None, *, all=False, omitnan=False, outtype='default')
"""

from statbox.descriptive.solvers import median

__all__ = [
    "median",
]
