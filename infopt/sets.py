"""
InfOpt Sets - Parameter Domains and Constraint Membership Sets
==============================================================

Infinite sets characterize infinite parameters:

- ``IntervalSet``: closed interval ``[lower_bound, upper_bound]``
- ``UniDistributionSet``: a frozen univariate ``scipy.stats`` distribution
- ``MultiDistributionSet``: a frozen multivariate ``scipy.stats`` distribution
- ``CollectionSet``: one scalar set per parameter of a dependent group

Constraint sets describe what a constraint function must satisfy
(``EqualTo``, ``GreaterThan``, ``LessThan``, ``Interval``, ``ZeroOne``,
``Integer``).
"""

import math
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

import numpy as np

from .errors import DimensionMismatchError, InvalidBoundsError

# ============================================================================
# INFINITE SETS
# ============================================================================


class InfiniteSet:
    """Base class of sets characterizing infinite parameters."""

    pass


class InfiniteScalarSet(InfiniteSet):
    """One-dimensional infinite set."""

    def bounds(self) -> Tuple[float, float]:
        """Return ``(lower, upper)``; infinite ends are ``-inf``/``inf``."""
        raise NotImplementedError

    def contains(self, value: float) -> bool:
        lower, upper = self.bounds()
        return lower <= value <= upper


@dataclass(frozen=True)
class IntervalSet(InfiniteScalarSet):
    """
    Closed interval of a continuous parameter.

    Raises:
        InvalidBoundsError: If ``lower_bound > upper_bound`` or a bound is NaN
    """

    lower_bound: float
    upper_bound: float

    def __post_init__(self):
        lower = float(self.lower_bound)
        upper = float(self.upper_bound)
        if math.isnan(lower) or math.isnan(upper):
            raise InvalidBoundsError("Interval bounds cannot be NaN")
        if lower > upper:
            raise InvalidBoundsError(
                f"Invalid interval set bounds, lower bound {lower:g} is greater "
                f"than upper bound {upper:g}"
            )
        object.__setattr__(self, "lower_bound", lower)
        object.__setattr__(self, "upper_bound", upper)

    def bounds(self) -> Tuple[float, float]:
        return self.lower_bound, self.upper_bound

    def intersect(self, other: "IntervalSet") -> "IntervalSet":
        """Return the tighter interval, raising ``InvalidBoundsError`` if empty."""
        return IntervalSet(
            max(self.lower_bound, other.lower_bound),
            min(self.upper_bound, other.upper_bound),
        )

    def is_subset(self, other: "IntervalSet") -> bool:
        return (
            other.lower_bound <= self.lower_bound
            and self.upper_bound <= other.upper_bound
        )

    def __repr__(self) -> str:
        return f"[{self.lower_bound:g}, {self.upper_bound:g}]"


@dataclass(frozen=True)
class UniDistributionSet(InfiniteScalarSet):
    """Random parameter following a frozen univariate scipy distribution."""

    distribution: Any

    def __post_init__(self):
        if not hasattr(self.distribution, "support") or not hasattr(
            self.distribution, "rvs"
        ):
            raise TypeError(
                "UniDistributionSet expects a frozen scipy.stats univariate "
                f"distribution, got {type(self.distribution).__name__}"
            )

    def bounds(self) -> Tuple[float, float]:
        lower, upper = self.distribution.support()
        return float(lower), float(upper)


class InfiniteArraySet(InfiniteSet):
    """Multi-dimensional infinite set for dependent parameter groups."""

    def dimension(self) -> int:
        raise NotImplementedError

    def contains(self, values: Sequence[float]) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class MultiDistributionSet(InfiniteArraySet):
    """Random parameter group following a frozen multivariate scipy distribution."""

    distribution: Any

    def __post_init__(self):
        if not hasattr(self.distribution, "rvs"):
            raise TypeError(
                "MultiDistributionSet expects a frozen scipy.stats multivariate "
                f"distribution, got {type(self.distribution).__name__}"
            )

    def dimension(self) -> int:
        mean = getattr(self.distribution, "mean", None)
        if mean is None or callable(mean):
            return int(np.size(self.distribution.rvs()))
        return int(np.size(mean))

    def contains(self, values: Sequence[float]) -> bool:
        # Multivariate scipy distributions do not expose a support box
        return len(values) == self.dimension()


@dataclass(frozen=True)
class CollectionSet(InfiniteArraySet):
    """Parallel array of scalar sets, one per parameter of a dependent group."""

    sets: Tuple[InfiniteScalarSet, ...]

    def __post_init__(self):
        sets = tuple(self.sets)
        if not sets:
            raise DimensionMismatchError("CollectionSet needs at least one scalar set")
        for item in sets:
            if not isinstance(item, InfiniteScalarSet):
                raise TypeError(
                    "CollectionSet members must be scalar sets, "
                    f"got {type(item).__name__}"
                )
        object.__setattr__(self, "sets", sets)

    def dimension(self) -> int:
        return len(self.sets)

    def contains(self, values: Sequence[float]) -> bool:
        return len(values) == len(self.sets) and all(
            scalar_set.contains(value) for scalar_set, value in zip(self.sets, values)
        )


# ============================================================================
# CONSTRAINT SETS
# ============================================================================


class ConstraintSet:
    """Base class of constraint membership sets."""

    pass


@dataclass(frozen=True)
class EqualTo(ConstraintSet):
    value: float


@dataclass(frozen=True)
class GreaterThan(ConstraintSet):
    lower: float


@dataclass(frozen=True)
class LessThan(ConstraintSet):
    upper: float


@dataclass(frozen=True)
class Interval(ConstraintSet):
    lower: float
    upper: float

    def __post_init__(self):
        if self.lower > self.upper:
            raise InvalidBoundsError(
                f"Interval lower bound {self.lower:g} "
                f"exceeds upper bound {self.upper:g}"
            )


@dataclass(frozen=True)
class ZeroOne(ConstraintSet):
    pass


@dataclass(frozen=True)
class Integer(ConstraintSet):
    pass
