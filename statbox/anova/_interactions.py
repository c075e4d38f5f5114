"""
Interaction term enumeration.

A term is a boolean mask over the factors: (True, False, True) is the
A x C interaction. Terms are listed main effects first, then pairwise
interactions, then higher orders; within one order, by factor index.

Cells of the contingency table are addressed with a mixed-radix integer:
factor j contributes code_j * place_values[j], where
place_values[j] = prod_{i < j} (n_levels[i] + 1). The "+1" leaves room for
code 0, the marginal (summed-over) position.
"""

from dataclasses import dataclass
from itertools import combinations
from math import prod
from numbers import Integral

from statbox.core.exceptions import ValidationError


@dataclass(frozen=True)
class InteractionTerm:
    """Immutable set of participating factors, stored as a mask."""
    mask: tuple[bool, ...]

    @property
    def factors(self) -> tuple[int, ...]:
        return tuple(j for j, m in enumerate(self.mask) if m)

    @property
    def order(self) -> int:
        return sum(self.mask)

    def label(self, names: tuple[str, ...]) -> str:
        """Human-readable name such as 'A x C'."""
        return " x ".join(names[j] for j in self.factors)

    @staticmethod
    def from_factors(factors, n_factors: int) -> 'InteractionTerm':
        chosen = set(factors)
        return InteractionTerm(mask=tuple(j in chosen for j in range(n_factors)))


@dataclass(frozen=True)
class InteractionTable:
    """All tested terms together with the cell addressing scheme."""
    terms: tuple[InteractionTerm, ...]
    n_levels: tuple[int, ...]
    place_values: tuple[int, ...]
    max_order: int

    @property
    def n_factors(self) -> int:
        return len(self.n_levels)

    @property
    def n_cells(self) -> int:
        """Size of each flat cell-sum array, (G_1 + 1) * ... * (G_w + 1)."""
        return prod(g + 1 for g in self.n_levels)

    @property
    def weights(self) -> tuple[tuple[int, ...], ...]:
        """Mixed-radix weight vector of every term (0 for absent factors)."""
        return tuple(self.term_weights(t) for t in self.terms)

    def term_weights(self, term: InteractionTerm) -> tuple[int, ...]:
        return tuple(
            pv if m else 0 for pv, m in zip(self.place_values, term.mask)
        )

    @property
    def omitted_terms(self) -> tuple[InteractionTerm, ...]:
        """Terms above max_order; their variation is pooled into error."""
        return enumerate_terms(self.n_factors)[len(self.terms):]


def place_values(n_levels: tuple[int, ...]) -> tuple[int, ...]:
    """Mixed-radix place value of each factor position."""
    values = []
    current = 1
    for g in n_levels:
        values.append(current)
        current *= g + 1
    return tuple(values)


def enumerate_terms(
    n_factors: int,
    max_order: int | None = None,
) -> tuple[InteractionTerm, ...]:
    """
    List every nonempty factor combination up to max_order factors.

    Args:
        n_factors: Number of factors W
        max_order: Highest interaction order to include (default W)

    Returns:
        Terms ordered by order, then by factor index. There are
        2**W - 1 of them when uncapped.
    """
    if max_order is None:
        max_order = n_factors
    max_order = _check_max_order(max_order, n_factors)

    terms = []
    for order in range(1, max_order + 1):
        for factors in combinations(range(n_factors), order):
            terms.append(InteractionTerm.from_factors(factors, n_factors))
    return tuple(terms)


def build_interaction_table(
    n_levels: tuple[int, ...],
    max_order: int | None = None,
) -> InteractionTable:
    """Enumerate terms and attach the cell addressing scheme."""
    n_factors = len(n_levels)
    terms = enumerate_terms(n_factors, max_order)
    return InteractionTable(
        terms=terms,
        n_levels=tuple(int(g) for g in n_levels),
        place_values=place_values(n_levels),
        max_order=max(t.order for t in terms),
    )


def _check_max_order(max_order, n_factors: int) -> int:
    if isinstance(max_order, bool) or not isinstance(max_order, Integral):
        raise ValidationError(
            f"max_order: expected an integer, got {type(max_order).__name__}"
        )
    if not 1 <= max_order <= n_factors:
        raise ValidationError(
            f"max_order: must be between 1 and {n_factors}, got {max_order}"
        )
    return int(max_order)
