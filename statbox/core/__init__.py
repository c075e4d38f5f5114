"""
Core infrastructure for statbox.

This module provides shared abstractions used by all domain-specific
submodules (anova, distributions, descriptive).

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
"""

from statbox.core.result import Result
from statbox.core.exceptions import (
    StatboxError,
    ValidationError,
    DimensionError,
    CapacityError,
    NumericalError,
    DegenerateDesignError,
    ConvergenceError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "StatboxError",
    "ValidationError",
    "DimensionError",
    "CapacityError",
    "NumericalError",
    "DegenerateDesignError",
    "ConvergenceError",
]
