"""
InfOpt Indices - Stable Identities of Stored Objects
====================================================

An index names one slot of one arena. Indices are small immutable values: they
are used as dictionary keys inside the arenas, stored in dependency lists and
carried by references. Indices of the same kind compare by value, so sorting a
list of same-kind indices gives insertion order.

The set of kinds is closed. Every dispatch table in the package is keyed by
``ObjectKind`` and has to list all members.
"""

from dataclasses import dataclass
from enum import Enum


class ObjectKind(Enum):
    """Categories of objects stored in an ``InfiniteModel``."""

    INDEPENDENT_PARAMETER = "independent_parameter"
    DEPENDENT_PARAMETERS = "dependent_parameters"
    DEPENDENT_PARAMETER = "dependent_parameter"
    FINITE_PARAMETER = "finite_parameter"
    INFINITE_VARIABLE = "infinite_variable"
    REDUCED_VARIABLE = "reduced_variable"
    POINT_VARIABLE = "point_variable"
    HOLD_VARIABLE = "hold_variable"
    MEASURE = "measure"
    CONSTRAINT = "constraint"

    def __repr__(self) -> str:
        return f"ObjectKind.{self.name}"

    @property
    def label(self) -> str:
        """Human readable name used in error messages."""
        return self.value.replace("_", " ")


# Kinds whose objects are infinite dimensional (carry parameter dependence)
INFINITE_KINDS = frozenset(
    {
        ObjectKind.INDEPENDENT_PARAMETER,
        ObjectKind.DEPENDENT_PARAMETER,
        ObjectKind.INFINITE_VARIABLE,
        ObjectKind.REDUCED_VARIABLE,
    }
)

PARAMETER_KINDS = frozenset(
    {
        ObjectKind.INDEPENDENT_PARAMETER,
        ObjectKind.DEPENDENT_PARAMETER,
        ObjectKind.FINITE_PARAMETER,
    }
)

VARIABLE_KINDS = frozenset(
    {
        ObjectKind.INFINITE_VARIABLE,
        ObjectKind.REDUCED_VARIABLE,
        ObjectKind.POINT_VARIABLE,
        ObjectKind.HOLD_VARIABLE,
    }
)


@dataclass(frozen=True, order=True)
class ObjectIndex:
    """
    Index of an object kept in an ``ObjectArena``.

    Attributes:
        kind: Arena the index belongs to
        value: Integer slot, assigned monotonically and never reused
    """

    kind: ObjectKind
    value: int

    def __repr__(self) -> str:
        return f"{self.kind.name}[{self.value}]"


@dataclass(frozen=True, order=True)
class DependentParameterIndex:
    """
    Index of one parameter inside a dependent parameter collection.

    Attributes:
        object_index: Index of the collection (``DEPENDENT_PARAMETERS`` kind)
        param_index: Offset of the parameter inside the collection
    """

    object_index: ObjectIndex
    param_index: int

    def __post_init__(self):
        assert self.object_index.kind is ObjectKind.DEPENDENT_PARAMETERS

    @property
    def kind(self) -> ObjectKind:
        return ObjectKind.DEPENDENT_PARAMETER

    @property
    def value(self) -> int:
        return self.object_index.value

    def __repr__(self) -> str:
        return f"DEPENDENT_PARAMETER[{self.object_index.value}, {self.param_index}]"
