"""
Name-keyed registry of distribution classes.

Lookup is case-insensitive. New distributions become available to
fitdist() once registered.
"""

from statbox.core.exceptions import ValidationError
from statbox.distributions.base import ProbabilityDistribution
from statbox.distributions.exponential import ExponentialDistribution
from statbox.distributions.lognormal import LognormalDistribution
from statbox.distributions.normal import NormalDistribution
from statbox.distributions.rician import RicianDistribution

_DISTRIBUTION_CLASSES: dict[str, tuple[str, type[ProbabilityDistribution]]] = {}


def register_distribution(name: str, cls: type[ProbabilityDistribution]) -> None:
    """
    Make a distribution class available under a name.

    Raises:
        TypeError: If cls is not a ProbabilityDistribution subclass
        ValueError: If the name is already taken by another class
    """
    if not (isinstance(cls, type) and issubclass(cls, ProbabilityDistribution)):
        raise TypeError(
            f"register_distribution: expected a ProbabilityDistribution "
            f"subclass, got {cls!r}"
        )
    key = name.lower()
    existing = _DISTRIBUTION_CLASSES.get(key)
    if existing is not None and existing[1] is not cls:
        raise ValueError(
            f"register_distribution: {name!r} is already registered "
            f"to {existing[1].__name__}"
        )
    _DISTRIBUTION_CLASSES[key] = (name, cls)


def get_distribution(name: str) -> type[ProbabilityDistribution]:
    """Resolve a distribution name to its class."""
    if not isinstance(name, str):
        raise ValidationError(
            f"distname: expected a string, got {type(name).__name__}"
        )
    entry = _DISTRIBUTION_CLASSES.get(name.lower())
    if entry is None:
        raise ValidationError(
            f"Unknown distribution: {name!r}. "
            f"Valid distributions: {', '.join(distribution_names())}"
        )
    return entry[1]


def canonical_name(name: str) -> str:
    """Registered spelling of a distribution name."""
    get_distribution(name)
    return _DISTRIBUTION_CLASSES[name.lower()][0]


def distribution_names() -> tuple[str, ...]:
    """Registered distribution names, sorted."""
    return tuple(sorted(name for name, _ in _DISTRIBUTION_CLASSES.values()))


register_distribution("Exponential", ExponentialDistribution)
register_distribution("Lognormal", LognormalDistribution)
register_distribution("Normal", NormalDistribution)
register_distribution("Rician", RicianDistribution)
