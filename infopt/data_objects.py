"""
InfOpt Data Objects - Stored Wrappers Around Raw Objects
========================================================

Every arena slot holds a data object: the raw mathematical object plus the
bookkeeping the model needs to keep references consistent.

- a display name (``""`` until set)
- the dependents: for each dependent kind, an ordered set of the indices of the
  objects whose expressions or bounds mention this one
- ``in_objective``: whether the objective mentions this object

Variable data additionally records the info constraints it owns (bounds, fix,
binary, integer). A dependent parameter group keeps a name and dependents per
parameter since each parameter of the group is referenced on its own.

Invariants:
- a dependent set never holds the same index twice
- removing an absent dependent is a no-op
"""

from typing import Any, Dict, FrozenSet, Iterator, List, Optional

from .errors import DimensionMismatchError
from .indices import ObjectIndex, ObjectKind

# ============================================================================
# DEPENDENT SETS
# ============================================================================


class DependentSet:
    """Insertion ordered set of indices (dict backed, O(1) add/remove/contains)."""

    def __init__(self, indices=()):
        self._items: Dict[ObjectIndex, None] = dict.fromkeys(indices)

    def add(self, index: ObjectIndex) -> bool:
        if index in self._items:
            return False
        self._items[index] = None
        return True

    def discard(self, index: ObjectIndex) -> bool:
        if index not in self._items:
            return False
        del self._items[index]
        return True

    def __contains__(self, index: Any) -> bool:
        return index in self._items

    def __iter__(self) -> Iterator[ObjectIndex]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"DependentSet({list(self._items)!r})"


class Dependents:
    """Dependent sets partitioned by dependent kind."""

    def __init__(self, kinds: FrozenSet[ObjectKind]):
        # Kinds in declaration order so all() is stable across runs
        self._sets: Dict[ObjectKind, DependentSet] = {
            kind: DependentSet() for kind in ObjectKind if kind in kinds
        }

    def add(self, index: ObjectIndex) -> bool:
        assert (
            index.kind in self._sets
        ), f"{index.kind.label} cannot depend on this object"
        return self._sets[index.kind].add(index)

    def discard(self, index: ObjectIndex) -> bool:
        dependents = self._sets.get(index.kind)
        return dependents.discard(index) if dependents is not None else False

    def of(self, kind: ObjectKind) -> List[ObjectIndex]:
        dependents = self._sets.get(kind)
        return list(dependents) if dependents is not None else []

    def all(self) -> List[ObjectIndex]:
        return [index for dependents in self._sets.values() for index in dependents]

    def counts(self) -> Dict[ObjectKind, int]:
        return {kind: len(s) for kind, s in self._sets.items() if len(s)}

    def __contains__(self, index: Any) -> bool:
        dependents = self._sets.get(getattr(index, "kind", None))
        return dependents is not None and index in dependents

    def __len__(self) -> int:
        return sum(len(s) for s in self._sets.values())


# Which kinds may record themselves as dependents of which stored kinds
PARAMETER_DEPENDENT_KINDS = frozenset(
    {
        ObjectKind.INFINITE_VARIABLE,
        ObjectKind.HOLD_VARIABLE,
        ObjectKind.MEASURE,
        ObjectKind.CONSTRAINT,
    }
)
VARIABLE_DEPENDENT_KINDS = frozenset({ObjectKind.MEASURE, ObjectKind.CONSTRAINT})
INFINITE_VARIABLE_DEPENDENT_KINDS = VARIABLE_DEPENDENT_KINDS | {
    ObjectKind.POINT_VARIABLE,
    ObjectKind.REDUCED_VARIABLE,
}
MEASURE_DEPENDENT_KINDS = frozenset({ObjectKind.MEASURE, ObjectKind.CONSTRAINT})

# ============================================================================
# DATA OBJECTS
# ============================================================================


class DataObject:
    """
    Base wrapper stored in an arena.

    Attributes:
        name: Display name
        dependents: Dependent indices by kind
        in_objective: Whether the objective mentions the object
    """

    dependent_kinds: FrozenSet[ObjectKind] = frozenset()

    def __init__(self, name: str = ""):
        self.name = name
        self.dependents = Dependents(self.dependent_kinds)
        self.in_objective = False

    @property
    def raw(self) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.raw!r})"


class ScalarParameterData(DataObject):
    """Independent or finite parameter."""

    dependent_kinds = PARAMETER_DEPENDENT_KINDS

    def __init__(self, parameter: Any, name: str = ""):
        super().__init__(name)
        self.parameter = parameter

    @property
    def raw(self) -> Any:
        return self.parameter


class MultiParameterData(DataObject):
    """
    Dependent parameter group.

    The group itself is never referenced directly: ``names`` and
    ``param_dependents`` hold the per-parameter name and dependents.
    """

    dependent_kinds = frozenset()

    def __init__(self, parameters: Any, names: Optional[List[str]] = None):
        super().__init__("")
        self.parameters = parameters
        count = parameters.num_parameters
        self.names = list(names) if names is not None else [""] * count
        if len(self.names) != count:
            raise DimensionMismatchError(
                f"{len(self.names)} names given for {count} dependent parameters"
            )
        self.param_dependents = [
            Dependents(PARAMETER_DEPENDENT_KINDS) for _ in range(count)
        ]

    @property
    def raw(self) -> Any:
        return self.parameters

    def num_dependents(self) -> Dict[ObjectKind, int]:
        totals: Dict[ObjectKind, int] = {}
        for dependents in self.param_dependents:
            for kind, count in dependents.counts().items():
                totals[kind] = totals.get(kind, 0) + count
        return totals


class VariableData(DataObject):
    """
    Stored variable of any kind.

    Attributes:
        lower_bound_index: Owned ``GreaterThan`` info constraint, if any
        upper_bound_index: Owned ``LessThan`` info constraint, if any
        fix_index: Owned ``EqualTo`` info constraint, if any
        zero_one_index: Owned ``ZeroOne`` info constraint, if any
        integrality_index: Owned ``Integer`` info constraint, if any
    """

    INFO_SLOTS = (
        "lower_bound_index",
        "upper_bound_index",
        "fix_index",
        "zero_one_index",
        "integrality_index",
    )

    def __init__(self, variable: Any, name: str = "", infinite: bool = False):
        self.dependent_kinds = (
            INFINITE_VARIABLE_DEPENDENT_KINDS if infinite else VARIABLE_DEPENDENT_KINDS
        )
        super().__init__(name)
        self.variable = variable
        self.lower_bound_index: Optional[ObjectIndex] = None
        self.upper_bound_index: Optional[ObjectIndex] = None
        self.fix_index: Optional[ObjectIndex] = None
        self.zero_one_index: Optional[ObjectIndex] = None
        self.integrality_index: Optional[ObjectIndex] = None

    @property
    def raw(self) -> Any:
        return self.variable

    def info_constraints(self) -> List[ObjectIndex]:
        indices = (getattr(self, slot) for slot in self.INFO_SLOTS)
        return [index for index in indices if index is not None]

    @property
    def point_var_indices(self) -> List[ObjectIndex]:
        return self.dependents.of(ObjectKind.POINT_VARIABLE)

    @property
    def reduced_var_indices(self) -> List[ObjectIndex]:
        return self.dependents.of(ObjectKind.REDUCED_VARIABLE)


class MeasureData(DataObject):
    dependent_kinds = MEASURE_DEPENDENT_KINDS

    def __init__(self, measure: Any, name: str = ""):
        super().__init__(name)
        self.measure = measure

    @property
    def raw(self) -> Any:
        return self.measure


class ConstraintData(DataObject):
    """Constraint wrapper. Info constraints are owned by a variable."""

    def __init__(
        self, constraint: Any, name: str = "", is_info_constraint: bool = False
    ):
        super().__init__(name)
        self.constraint = constraint
        self.is_info_constraint = is_info_constraint

    @property
    def raw(self) -> Any:
        return self.constraint
