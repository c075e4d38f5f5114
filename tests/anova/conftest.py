"""
Shared fixtures for n-way ANOVA tests.

Provides the classic textbook reference datasets plus generated balanced
and unbalanced factorial designs.
"""

import numpy as np
import pytest


# =====================================================================
# Reference datasets
# =====================================================================


@pytest.fixture
def oneway_reference():
    """
    3 groups of 3 with equal between- and within-group mean squares.

    SSB = 38/9, SSW = 38/3, DF = (2, 6), F = 1, p = 27/64.
    """
    y = np.array([7, 9, 9, 8, 12, 10, 9, 8, 10], dtype=float)
    groups = np.array([1, 1, 1, 2, 2, 2, 3, 3, 3])
    return y, groups


@pytest.fixture
def twoway_replicated():
    """3 x 3 factorial with 2 replicates per cell (18 observations)."""
    y = np.array([
        7, 9, 9, 8, 12, 10,
        9, 8, 10, 11, 13, 13,
        9, 10, 10, 12, 10, 12,
    ], dtype=float)
    groups = np.array([
        [1, 1], [1, 1], [1, 2], [1, 2], [1, 3], [1, 3],
        [2, 1], [2, 1], [2, 2], [2, 2], [2, 3], [2, 3],
        [3, 1], [3, 1], [3, 2], [3, 2], [3, 3], [3, 3],
    ])
    return y, groups


@pytest.fixture
def twoway_disjoint_labels():
    """3 x 4 factorial, 2 replicates, second factor labeled 4..7."""
    y = np.array([
        7, 9, 9, 8, 12, 10, 9, 8,
        9, 8, 10, 11, 13, 13, 10, 11,
        9, 10, 10, 12, 10, 12, 10, 12,
    ], dtype=float)
    a = np.repeat([1, 2, 3], 8)
    b = np.tile(np.repeat([4, 5, 6, 7], 2), 3)
    return y, np.column_stack([a, b])


@pytest.fixture
def twoway_unreplicated():
    """5 x 3 factorial with one observation per cell."""
    y = np.array([
        7.56, 9.68, 11.65,
        9.98, 9.69, 10.69,
        7.23, 10.49, 11.77,
        8.22, 8.55, 10.72,
        7.59, 8.30, 12.36,
    ])
    a = np.repeat([1, 2, 3, 4, 5], 3)
    b = np.tile([1, 2, 3], 5)
    return y, np.column_stack([a, b])


# =====================================================================
# Generated designs
# =====================================================================


@pytest.fixture
def threeway_balanced():
    """2 x 3 x 2 full factorial, 4 replicates per cell, real main effects."""
    rng = np.random.default_rng(7)
    levels = np.array(
        [(a, b, c) for c in range(2) for b in range(3) for a in range(2)]
    )
    groups = np.repeat(levels, 4, axis=0)
    y = (
        10.0
        + 2.0 * groups[:, 0]
        - 1.5 * groups[:, 1]
        + rng.normal(0.0, 1.0, len(groups))
    )
    return y, groups


@pytest.fixture
def twoway_unbalanced():
    """2 x 3 factorial with unequal cell sizes (one cell has 1 observation)."""
    rng = np.random.default_rng(123)
    sizes = {(0, 0): 5, (0, 1): 3, (0, 2): 4, (1, 0): 1, (1, 1): 6, (1, 2): 2}
    rows = [cell for cell, k in sizes.items() for _ in range(k)]
    groups = np.array(rows)
    y = 5.0 + groups[:, 0] + rng.normal(0.0, 1.0, len(groups))
    return y, groups
