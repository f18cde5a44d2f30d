"""
InfOpt Parameter Bounds - Sub-Domain Restrictions
=================================================

``ParameterBounds`` restricts hold variables and constraints to a rectangle of
parameter space: a mapping from infinite parameter reference to ``IntervalSet``.

Vector keys (a tuple or list of references, e.g. every parameter of a dependent
group) are expanded to one entry per parameter when the bounds are built:

    bounds = ParameterBounds({t: IntervalSet(0, 1), (x1, x2): IntervalSet(-1, 1)})
    len(bounds)  # 3

Merging keeps the tighter interval per shared key:

    left = ParameterBounds({t: IntervalSet(0, 1)})
    left.merge(ParameterBounds({t: IntervalSet(0.5, 2)}))  # {t: [0.5, 1]}
"""

from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from .errors import EmptyIntersectionError, InvalidBoundsError
from .indices import ObjectKind
from .references import DispatchVariableRef
from .sets import IntervalSet

BOUNDABLE_KINDS = (ObjectKind.INDEPENDENT_PARAMETER, ObjectKind.DEPENDENT_PARAMETER)


def _as_key(ref: Any) -> Any:
    # Concrete references and general references to one parameter share a key
    if isinstance(ref, DispatchVariableRef):
        return ref.general_ref()
    return ref


def _as_interval(value: Any) -> IntervalSet:
    if isinstance(value, IntervalSet):
        return value
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return IntervalSet(value[0], value[1])
    raise InvalidBoundsError(
        f"Parameter bounds must be IntervalSet or (lower, upper) pairs, got {value!r}"
    )


class ParameterBounds:
    """
    Mapping from infinite parameter reference to its restricting interval.

    Raises:
        InvalidBoundsError: If a key is not an infinite parameter reference or an
            interval is malformed
    """

    def __init__(self, intervals: Optional[Mapping[Any, Any]] = None):
        self.intervals: Dict[Any, IntervalSet] = {}
        for key, value in (intervals or {}).items():
            interval = _as_interval(value)
            refs = key if isinstance(key, (tuple, list)) else (key,)
            for ref in refs:
                self._check_key(ref)
                self.intervals[_as_key(ref)] = interval

    @staticmethod
    def _check_key(ref: Any) -> None:
        if getattr(ref, "kind", None) not in BOUNDABLE_KINDS:
            raise InvalidBoundsError(
                f"Parameter bounds can only restrict infinite parameters, got {ref!r}"
            )

    def merge(self, other: "ParameterBounds") -> "ParameterBounds":
        """
        Intersect two bounds into a new instance.

        Keys present on one side only pass through unchanged.

        Raises:
            EmptyIntersectionError: If a shared key ends up with lower > upper
        """
        result = self.copy()
        for ref, interval in other.items():
            current = result.intervals.get(ref)
            if current is None:
                result.intervals[ref] = interval
                continue
            try:
                result.intervals[ref] = current.intersect(interval)
            except InvalidBoundsError:
                raise EmptyIntersectionError(
                    f"Bounds {current!r} and {interval!r} on {ref!r} do not intersect"
                ) from None
        return result

    def copy(self) -> "ParameterBounds":
        result = ParameterBounds()
        result.intervals = dict(self.intervals)
        return result

    def refs(self) -> Iterator[Any]:
        return iter(list(self.intervals))

    def items(self) -> Iterator[Tuple[Any, IntervalSet]]:
        return iter(list(self.intervals.items()))

    def get(
        self, ref: Any, default: Optional[IntervalSet] = None
    ) -> Optional[IntervalSet]:
        return self.intervals.get(_as_key(ref), default)

    def without(self, ref: Any) -> "ParameterBounds":
        """Copy with ``ref`` removed (no error if it is absent)."""
        result = self.copy()
        result.intervals.pop(_as_key(ref), None)
        return result

    def __getitem__(self, ref: Any) -> IntervalSet:
        return self.intervals[_as_key(ref)]

    def __contains__(self, ref: Any) -> bool:
        return _as_key(ref) in self.intervals

    def __len__(self) -> int:
        return len(self.intervals)

    def __bool__(self) -> bool:
        return bool(self.intervals)

    def __eq__(self, other) -> bool:
        if isinstance(other, ParameterBounds):
            return self.intervals == other.intervals
        if isinstance(other, Mapping):
            return self == ParameterBounds(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        inner = ", ".join(
            f"{ref!r} ∈ {interval!r}" for ref, interval in self.intervals.items()
        )
        return f"ParameterBounds({inner})"
