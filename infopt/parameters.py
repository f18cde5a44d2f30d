"""
InfOpt Parameters - Infinite/Finite Parameters and Their Supports
=================================================================

A support is a concrete point used to discretize a parameter's domain. Every
support carries a set of provenance labels telling why it exists (entered by the
user, generated by a grid, sampled, requested by a measure, ...).

- ``SupportMap``: sorted mapping ``coordinate -> label set`` of a scalar parameter
- ``IndependentParameter``: scalar infinite parameter with its own supports
- ``DependentParameters``: group of parameters sharing one support set, stored
  as a 2-D numpy array (rows are parameters, columns are supports) plus one label
  set per column
- ``FiniteParameter``: a constant substituted verbatim at transcription

Invariants:
- scalar support coordinates are unique and kept sorted
- a dependent group has exactly one label set per column and no duplicate column
- support counts are stored, never recomputed by scanning
"""

import bisect
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

import numpy as np
from scipy import stats

from .errors import DimensionMismatchError, OutOfDomainError
from .sets import (
    CollectionSet,
    InfiniteArraySet,
    InfiniteScalarSet,
    IntervalSet,
    MultiDistributionSet,
    UniDistributionSet,
)

# ============================================================================
# SUPPORT LABELS
# ============================================================================

USER_DEFINED = "user_defined"
UNIFORM_GRID = "uniform_grid"
MC_SAMPLE = "mc_sample"
WEIGHTED_SAMPLE = "weighted_sample"
MEASURE_BOUND = "measure_bound"
MIXTURE = "mixture"

# Matches every support when used as a label filter
ALL = "all"

LabelFilter = Optional[Union[str, Iterable[str]]]


def _label_set(labels: LabelFilter) -> Optional[Set[str]]:
    if labels is None or labels == ALL:
        return None
    if isinstance(labels, str):
        return {labels}
    return set(labels)


def _support_labels(labels: Union[str, Iterable[str]]) -> Set[str]:
    """Labels stored on a support. ``ALL`` and ``None`` only work as filters."""
    found = _label_set(labels)
    if not found or ALL in found:
        raise ValueError(
            f"A support needs at least one label other than {ALL!r}, got {labels!r}"
        )
    return found


# ============================================================================
# SCALAR SUPPORTS
# ============================================================================


class SupportMap:
    """
    Sorted support storage of a scalar parameter.

    Keeps a sorted coordinate list for ordered iteration next to a dict for
    O(1) membership and label lookup.
    """

    def __init__(self, supports: Optional[Dict[float, Iterable[str]]] = None):
        self._coords: List[float] = []
        self._labels: Dict[float, Set[str]] = {}
        for value, labels in (supports or {}).items():
            self.add(value, labels)

    def add(self, value: float, labels: Union[str, Iterable[str]]) -> bool:
        """
        Insert a coordinate or union labels into an existing one.

        Returns:
            True if a new coordinate was created
        """
        value = float(value)
        new_labels = _support_labels(labels)
        existing = self._labels.get(value)
        if existing is not None:
            existing |= new_labels
            return False
        bisect.insort(self._coords, value)
        self._labels[value] = set(new_labels)
        return True

    def remove(self, value: float) -> None:
        value = float(value)
        del self._labels[value]
        self._coords.pop(bisect.bisect_left(self._coords, value))

    def clear(self) -> None:
        self._coords.clear()
        self._labels.clear()

    def labels(self, value: float) -> Set[str]:
        return set(self._labels[float(value)])

    def all_labels(self) -> Set[str]:
        result: Set[str] = set()
        for labels in self._labels.values():
            result |= labels
        return result

    def items(self) -> Iterator[Tuple[float, Set[str]]]:
        for value in list(self._coords):
            yield value, self._labels[value]

    def __iter__(self) -> Iterator[float]:
        return iter(list(self._coords))

    def __contains__(self, value: float) -> bool:
        return float(value) in self._labels

    def __len__(self) -> int:
        return len(self._coords)

    def __repr__(self) -> str:
        return f"SupportMap({dict((v, sorted(l)) for v, l in self.items())})"


class SupportView:
    """
    Lazy, restartable view over supports matching a label filter.

    Each iteration re-reads the live parameter, so the view reflects supports
    added after it was created.
    """

    def __init__(self, source, labels: LabelFilter = None):
        self._source = source
        self._labels = _label_set(labels)

    def __iter__(self):
        for value, labels in self._source():
            if self._labels is None or labels & self._labels:
                yield value

    def __repr__(self) -> str:
        return f"SupportView({list(self)!r})"


# ============================================================================
# PARAMETERS
# ============================================================================


def _check_scalar_domain(
    infinite_set: InfiniteScalarSet, value: float, what: str
) -> None:
    if math.isnan(value) or not infinite_set.contains(value):
        lower, upper = infinite_set.bounds()
        raise OutOfDomainError(
            f"Support {value:g} of {what} lies outside its domain "
            f"[{lower:g}, {upper:g}]"
        )


@dataclass
class IndependentParameter:
    """
    Scalar infinite parameter.

    Attributes:
        set: ``IntervalSet`` or ``UniDistributionSet`` characterizing the parameter
        supports: Sorted support coordinates with their labels
    """

    set: InfiniteScalarSet
    supports: SupportMap = field(default_factory=SupportMap)

    def __post_init__(self):
        if not isinstance(self.set, InfiniteScalarSet):
            raise TypeError(
                "An independent parameter needs a scalar set, "
                f"got {type(self.set).__name__}"
            )
        if not isinstance(self.supports, SupportMap):
            self.supports = SupportMap(self.supports)
        for value in self.supports:
            _check_scalar_domain(self.set, value, "independent parameter")

    def check_supports(self, values: Union[float, Iterable[float]]) -> List[float]:
        """Convert ``values`` to floats, raising ``OutOfDomainError`` on a bad one."""
        array = np.atleast_1d(np.asarray(values, dtype=float)).reshape(-1)
        values = [float(v) for v in array]
        for value in values:
            _check_scalar_domain(self.set, value, "independent parameter")
        return values

    def add_supports(
        self, values: Union[float, Iterable[float]], label: str = USER_DEFINED
    ) -> int:
        """
        Validate and insert supports.

        All values are validated before any is stored.

        Returns:
            Number of new coordinates

        Raises:
            OutOfDomainError: If a value lies outside the parameter's set
            ValueError: If ``label`` is a filter token rather than a label
        """
        _support_labels(label)
        values = self.check_supports(values)
        return sum(self.supports.add(value, label) for value in values)

    def num_supports(self, label: LabelFilter = None) -> int:
        if label is None:
            return len(self.supports)
        return sum(1 for _ in self.support_view(label))

    def support_view(self, label: LabelFilter = None) -> SupportView:
        return SupportView(self.supports.items, label)

    def delete_supports(self, label: LabelFilter = None) -> int:
        """Delete all supports, or those carrying one of ``label``. Returns a count."""
        if _label_set(label) is None:
            count = len(self.supports)
            self.supports.clear()
            return count
        doomed = list(self.support_view(label))
        for value in doomed:
            self.supports.remove(value)
        return len(doomed)


@dataclass
class FiniteParameter:
    """A constant parameter replaced by its value at transcription."""

    value: float

    def __post_init__(self):
        self.value = float(self.value)


@dataclass
class DependentParameters:
    """
    Group of infinite parameters sharing one support set.

    Attributes:
        set: ``MultiDistributionSet`` or ``CollectionSet``
        supports: Array of shape ``(num_parameters, num_supports)``
        labels: One label set per support column
    """

    set: InfiniteArraySet
    supports: np.ndarray = None
    labels: List[Set[str]] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.set, InfiniteArraySet):
            raise TypeError(
                "Dependent parameters need a multi-dimensional set, "
                f"got {type(self.set).__name__}"
            )
        dim = self.set.dimension()
        if self.supports is None:
            self.supports = np.zeros((dim, 0))
        self.supports = np.array(self.supports, dtype=float, ndmin=2)
        if self.supports.shape[0] != dim:
            raise DimensionMismatchError(
                f"Support array has {self.supports.shape[0]} rows for {dim} parameters"
            )
        if len(self.labels) != self.supports.shape[1]:
            raise DimensionMismatchError(
                f"{len(self.labels)} label sets given "
                f"for {self.supports.shape[1]} supports"
            )
        self.labels = [_support_labels(labels) for labels in self.labels]

    @property
    def num_parameters(self) -> int:
        return self.supports.shape[0]

    def _as_columns(self, values) -> np.ndarray:
        array = np.asarray(values, dtype=float)
        if array.ndim == 0:
            array = array.reshape(1, 1)
        elif array.ndim == 1:
            # A flat list is one column, except for a group of one parameter
            # where it lists one coordinate per support
            array = array.reshape((1, -1) if self.num_parameters == 1 else (-1, 1))
        if array.ndim != 2 or array.shape[0] != self.num_parameters:
            given = array.shape[0] if array.ndim >= 1 else 0
            raise DimensionMismatchError(
                f"Expected {self.num_parameters} coordinates per support for the "
                f"dependent parameter group, got {given}"
            )
        return array

    def _check_column(self, column: np.ndarray) -> None:
        if np.isnan(column).any():
            raise OutOfDomainError("Dependent parameter supports cannot be NaN")
        if isinstance(self.set, CollectionSet):
            for row, (scalar_set, value) in enumerate(zip(self.set.sets, column)):
                _check_scalar_domain(
                    scalar_set, float(value), f"dependent parameter {row}"
                )

    def _find_column(self, column: np.ndarray) -> int:
        if self.supports.shape[1] == 0:
            return -1
        matches = np.nonzero(np.all(self.supports == column[:, None], axis=0))[0]
        return int(matches[0]) if matches.size else -1

    def check_supports(self, values) -> np.ndarray:
        """Shape ``values`` as support columns and validate every coordinate."""
        columns = self._as_columns(values)
        for j in range(columns.shape[1]):
            self._check_column(columns[:, j])
        return columns

    def add_supports(self, values, label: str = USER_DEFINED) -> int:
        """
        Validate and append support columns.

        Args:
            values: One column (length ``num_parameters``) or a 2-D array with
                one row per parameter and one column per support. A group of
                one parameter also takes a flat list of supports.
            label: Label applied to every given column

        Returns:
            Number of new columns

        Raises:
            DimensionMismatchError: If the row count differs from the group size
            OutOfDomainError: If a coordinate lies outside its scalar set
            ValueError: If ``label`` is a filter token rather than a label
        """
        _support_labels(label)
        columns = self.check_supports(values)
        added = 0
        for j in range(columns.shape[1]):
            column = columns[:, j]
            position = self._find_column(column)
            if position >= 0:
                self.labels[position].add(label)
                continue
            self.supports = np.concatenate([self.supports, column[:, None]], axis=1)
            self.labels.append({label})
            added += 1
        return added

    def num_supports(self, label: LabelFilter = None) -> int:
        wanted = _label_set(label)
        if wanted is None:
            return self.supports.shape[1]
        return sum(1 for labels in self.labels if labels & wanted)

    def row_view(self, row: int, label: LabelFilter = None) -> SupportView:
        """Supports of one parameter of the group, in column order."""
        return SupportView(
            lambda: (
                (float(self.supports[row, j]), labels)
                for j, labels in enumerate(self.labels)
            ),
            label,
        )

    def column_view(self, label: LabelFilter = None) -> SupportView:
        """Whole support columns (1-D arrays), in column order."""
        return SupportView(
            lambda: (
                (self.supports[:, j].copy(), labels)
                for j, labels in enumerate(self.labels)
            ),
            label,
        )

    def delete_supports(self, label: LabelFilter = None) -> int:
        wanted = _label_set(label)
        if wanted is None:
            keep = []
        else:
            keep = [j for j, labels in enumerate(self.labels) if not labels & wanted]
        removed = len(self.labels) - len(keep)
        self.supports = self.supports[:, keep]
        self.labels = [self.labels[j] for j in keep]
        return removed


# ============================================================================
# SUPPORT GENERATION
# ============================================================================


def generate_scalar_supports(
    infinite_set: InfiniteScalarSet, num_supports: int, method: Optional[str] = None
) -> Tuple[np.ndarray, str]:
    """
    Generate supports for a scalar set.

    Intervals default to a uniform grid (``UNIFORM_GRID``) including both ends;
    distributions and ``method=MC_SAMPLE`` draw Monte Carlo samples.

    Returns:
        ``(values, label)``
    """
    if num_supports < 1:
        raise ValueError(f"num_supports must be positive, got {num_supports}")
    if isinstance(infinite_set, IntervalSet):
        lower, upper = infinite_set.bounds()
        if method in (None, UNIFORM_GRID):
            return np.linspace(lower, upper, num_supports), UNIFORM_GRID
        if method == MC_SAMPLE:
            if not (np.isfinite(lower) and np.isfinite(upper)):
                raise OutOfDomainError(
                    "Cannot sample uniformly from an unbounded interval"
                )
            sampler = stats.uniform(loc=lower, scale=upper - lower)
            return np.sort(np.atleast_1d(sampler.rvs(size=num_supports))), MC_SAMPLE
    elif isinstance(infinite_set, UniDistributionSet) and method in (None, MC_SAMPLE):
        samples = infinite_set.distribution.rvs(size=num_supports)
        return np.sort(np.atleast_1d(np.asarray(samples, dtype=float))), MC_SAMPLE
    raise ValueError(
        f"Support generation method {method!r} is not available "
        f"for {type(infinite_set).__name__}"
    )


def generate_collection_supports(
    infinite_set: InfiniteArraySet, num_supports: int, method: Optional[str] = None
) -> Tuple[np.ndarray, str]:
    """Generate support columns for a dependent group. Returns ``(array, label)``."""
    if isinstance(infinite_set, MultiDistributionSet) and method in (None, MC_SAMPLE):
        samples = infinite_set.distribution.rvs(size=num_supports)
        samples = np.asarray(samples, dtype=float).reshape(num_supports, -1)
        return samples.T, MC_SAMPLE
    if isinstance(infinite_set, CollectionSet):
        rows = []
        labels = set()
        for scalar_set in infinite_set.sets:
            values, label = generate_scalar_supports(scalar_set, num_supports, method)
            rows.append(values)
            labels.add(label)
        # Independent grids are zipped column-wise, not combined as a product
        return np.vstack(rows), labels.pop() if len(labels) == 1 else MIXTURE
    raise ValueError(
        f"Support generation method {method!r} is not available "
        f"for {type(infinite_set).__name__}"
    )
