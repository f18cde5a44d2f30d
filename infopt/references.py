"""
InfOpt References - General Handles and Kind-Specific Dispatch
==============================================================

``GeneralVariableRef`` is the only handle that may appear inside expressions. It
erases the object kind so expressions hold parameters, variables and measures
uniformly, and resolves on demand to a concrete reference exposing the
capabilities of its kind:

    x = model.add_variable(infinite=(t,), name="x")   # GeneralVariableRef
    model.resolve(x)                                    # InfiniteVariableRef
    x.name()                                            # "x"

Concrete references only carry ``(model, index)``. They all expose ``name``,
``set_name``, ``delete``, ``is_valid``, ``raw``, ``dependents_of`` and
``used_by_objective``; parameter, variable and measure references add the
operations of their kind.

Dispatch is one table keyed by ``ObjectKind`` that lists every kind. Kinds that
no general reference can denote (dependent parameter groups, constraints) map to
``None`` and fail with ``InvalidReferenceKindError``.
"""

from typing import Any, Dict, List, Optional, Tuple, Type

from .errors import InvalidReferenceKindError, OwningModelMismatchError
from .expressions import AbstractVariableRef
from .indices import DependentParameterIndex, ObjectIndex, ObjectKind

# ============================================================================
# GENERAL REFERENCE
# ============================================================================


class GeneralVariableRef(AbstractVariableRef):
    """
    Kind-erased handle to a parameter, variable or measure.

    Two references are equal iff they belong to the same model object (identity,
    not equality) and carry the same kind, raw index and parameter index.

    Attributes:
        model: Owning ``InfiniteModel``
        raw_index: Slot value inside the arena of ``kind``
        kind: ``ObjectKind`` tag
        param_index: Offset inside a dependent group, ``-1`` otherwise
    """

    __slots__ = ("model", "raw_index", "kind", "param_index")

    def __init__(
        self, model: Any, raw_index: int, kind: ObjectKind, param_index: int = -1
    ):
        self.model = model
        self.raw_index = raw_index
        self.kind = kind
        self.param_index = param_index

    @property
    def index(self):
        """The ``ObjectIndex`` or ``DependentParameterIndex`` this reference denotes."""
        if self.kind is ObjectKind.DEPENDENT_PARAMETER:
            group = ObjectIndex(ObjectKind.DEPENDENT_PARAMETERS, self.raw_index)
            return DependentParameterIndex(group, self.param_index)
        return ObjectIndex(self.kind, self.raw_index)

    def dispatch(self) -> "DispatchVariableRef":
        return self.model.resolve(self)

    # Convenience pass-throughs to the concrete reference

    def name(self) -> str:
        return self.dispatch().name()

    def set_name(self, name: str) -> None:
        self.dispatch().set_name(name)

    def delete(self) -> None:
        self.dispatch().delete()

    def is_valid(self) -> bool:
        return self.model.is_valid(self)

    def used_by_objective(self) -> bool:
        return self.dispatch().used_by_objective()

    def __eq__(self, other) -> bool:
        if not isinstance(other, GeneralVariableRef):
            return NotImplemented
        return (
            self.model is other.model
            and self.kind is other.kind
            and self.raw_index == other.raw_index
            and self.param_index == other.param_index
        )

    def __ne__(self, other) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self) -> int:
        return hash((id(self.model), self.kind, self.raw_index, self.param_index))

    def __repr__(self) -> str:
        name = ""
        if self.model.is_valid(self):
            name = self.model.name(self)
        return name or f"noname<{self.index!r}>"


# ============================================================================
# DISPATCH REFERENCES
# ============================================================================


class DispatchVariableRef:
    """
    Base of the concrete references.

    Attributes:
        model: Owning ``InfiniteModel``
        index: ``ObjectIndex`` of the denoted object
    """

    kind: ObjectKind = None

    def __init__(self, model: Any, index: Any):
        self.model = model
        self.index = index

    def general_ref(self) -> GeneralVariableRef:
        return GeneralVariableRef(self.model, self.index.value, self.kind)

    def raw(self):
        """The stored data object."""
        return self.model.data_object(self.index)

    def core_object(self):
        """The raw mathematical object."""
        return self.raw().raw

    def name(self) -> str:
        return self.raw().name

    def set_name(self, name: str) -> None:
        self.model.set_name(self.general_ref(), name)

    def delete(self) -> None:
        self.model.delete(self.general_ref())

    def is_valid(self) -> bool:
        return self.model.is_valid(self.general_ref())

    def dependents_of(self, kind: ObjectKind) -> List[ObjectIndex]:
        return self.raw().dependents.of(kind)

    def used_by_objective(self) -> bool:
        return self.raw().in_objective

    def __eq__(self, other) -> bool:
        return (
            type(self) is type(other)
            and self.model is other.model
            and self.index == other.index
        )

    def __hash__(self) -> int:
        return hash((id(self.model), self.index))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.index!r})"


class IndependentParameterRef(DispatchVariableRef):
    kind = ObjectKind.INDEPENDENT_PARAMETER

    def parameter_set(self):
        return self.core_object().set

    def supports(self, label=None):
        return self.model.supports(self.general_ref(), label)

    def num_supports(self, label=None) -> int:
        return self.model.num_supports(self.general_ref(), label)

    def add_supports(self, values, label=None) -> int:
        return self.model.add_supports(self.general_ref(), values, label)

    def infinite_variable_indices(self) -> List[ObjectIndex]:
        return self.dependents_of(ObjectKind.INFINITE_VARIABLE)


class DependentParameterRef(DispatchVariableRef):
    """One parameter of a dependent group, indexed by ``DependentParameterIndex``."""

    kind = ObjectKind.DEPENDENT_PARAMETER

    def general_ref(self) -> GeneralVariableRef:
        return GeneralVariableRef(
            self.model, self.index.value, self.kind, self.index.param_index
        )

    def raw(self):
        return self.model.data_object(self.index.object_index)

    def name(self) -> str:
        return self.raw().names[self.index.param_index]

    def dependents_of(self, kind: ObjectKind) -> List[ObjectIndex]:
        return self.raw().param_dependents[self.index.param_index].of(kind)

    def used_by_objective(self) -> bool:
        return False

    def parameter_set(self):
        return self.model.parameter_set(self.general_ref())

    def supports(self, label=None):
        return self.model.supports(self.general_ref(), label)

    def num_supports(self, label=None) -> int:
        return self.model.num_supports(self.general_ref(), label)

    def group_refs(self) -> Tuple[GeneralVariableRef, ...]:
        """References to every parameter of the group, in order."""
        count = self.raw().parameters.num_parameters
        return tuple(
            GeneralVariableRef(self.model, self.index.value, self.kind, i)
            for i in range(count)
        )


class FiniteParameterRef(DispatchVariableRef):
    kind = ObjectKind.FINITE_PARAMETER

    def value(self) -> float:
        return self.core_object().value


class VariableDispatchRef(DispatchVariableRef):
    """Shared accessors of the variable kinds."""

    def info(self):
        return self.core_object().info

    def info_constraints(self) -> List[ObjectIndex]:
        return self.raw().info_constraints()


class InfiniteVariableRef(VariableDispatchRef):
    kind = ObjectKind.INFINITE_VARIABLE

    def parameter_refs(self) -> Tuple[Any, ...]:
        return self.core_object().parameter_refs

    def point_variable_indices(self) -> List[ObjectIndex]:
        return self.dependents_of(ObjectKind.POINT_VARIABLE)

    def reduced_variable_indices(self) -> List[ObjectIndex]:
        return self.dependents_of(ObjectKind.REDUCED_VARIABLE)


class ReducedInfiniteVariableRef(VariableDispatchRef):
    kind = ObjectKind.REDUCED_VARIABLE

    def info(self):
        return self.model.resolve(self.core_object().infinite_variable_ref).info()

    def infinite_variable_ref(self) -> GeneralVariableRef:
        return self.core_object().infinite_variable_ref

    def eval_supports(self) -> Dict[int, float]:
        return dict(self.core_object().eval_supports)

    def parameter_refs(self) -> Tuple[Any, ...]:
        return self.model.parameter_refs(self.general_ref())


class PointVariableRef(VariableDispatchRef):
    kind = ObjectKind.POINT_VARIABLE

    def infinite_variable_ref(self) -> GeneralVariableRef:
        return self.core_object().infinite_variable_ref

    def parameter_values(self) -> Tuple[Any, ...]:
        return self.core_object().parameter_values


class HoldVariableRef(VariableDispatchRef):
    kind = ObjectKind.HOLD_VARIABLE

    def parameter_bounds(self):
        return self.core_object().parameter_bounds

    def has_parameter_bounds(self) -> bool:
        return bool(self.core_object().parameter_bounds)


class MeasureRef(DispatchVariableRef):
    kind = ObjectKind.MEASURE

    def measure_function(self):
        return self.core_object().func

    def measure_data(self):
        return self.core_object().data


# Every kind is listed; None marks kinds no general reference denotes
DISPATCH_TABLE: Dict[ObjectKind, Optional[Type[DispatchVariableRef]]] = {
    ObjectKind.INDEPENDENT_PARAMETER: IndependentParameterRef,
    ObjectKind.DEPENDENT_PARAMETERS: None,
    ObjectKind.DEPENDENT_PARAMETER: DependentParameterRef,
    ObjectKind.FINITE_PARAMETER: FiniteParameterRef,
    ObjectKind.INFINITE_VARIABLE: InfiniteVariableRef,
    ObjectKind.REDUCED_VARIABLE: ReducedInfiniteVariableRef,
    ObjectKind.POINT_VARIABLE: PointVariableRef,
    ObjectKind.HOLD_VARIABLE: HoldVariableRef,
    ObjectKind.MEASURE: MeasureRef,
    ObjectKind.CONSTRAINT: None,
}
assert set(DISPATCH_TABLE) == set(ObjectKind)


def dispatch_variable_ref(ref: GeneralVariableRef) -> DispatchVariableRef:
    """
    Build the concrete reference for ``ref`` without checking liveness.

    Raises:
        InvalidReferenceKindError: If the kind tag has no concrete reference
    """
    ref_type = None
    if isinstance(ref.kind, ObjectKind):
        ref_type = DISPATCH_TABLE.get(ref.kind)
    if ref_type is None:
        raise InvalidReferenceKindError(
            f"Reference kind {ref.kind!r} does not denote "
            "a parameter, variable or measure"
        )
    return ref_type(ref.model, ref.index)


def check_owner(model: Any, ref: Any) -> None:
    """Raise ``OwningModelMismatchError`` if ``ref`` belongs to another model."""
    if ref.model is not model:
        raise OwningModelMismatchError(
            f"Reference {ref.index!r} belongs to a different model"
        )


# ============================================================================
# CONSTRAINT REFERENCES
# ============================================================================


class ConstraintRef:
    """Handle to a stored constraint."""

    def __init__(self, model: Any, index: ObjectIndex):
        assert index.kind is ObjectKind.CONSTRAINT
        self.model = model
        self.index = index

    def raw(self):
        return self.model.data_object(self.index)

    def constraint_object(self):
        return self.raw().constraint

    def name(self) -> str:
        return self.raw().name

    def set_name(self, name: str) -> None:
        self.model.set_name(self, name)

    def delete(self) -> None:
        self.model.delete(self)

    def is_valid(self) -> bool:
        return self.model.is_valid(self)

    def is_info_constraint(self) -> bool:
        return self.raw().is_info_constraint

    def parameter_bounds(self):
        return self.model.parameter_bounds(self)

    def has_parameter_bounds(self) -> bool:
        return self.model.has_parameter_bounds(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConstraintRef):
            return NotImplemented
        return self.model is other.model and self.index == other.index

    def __hash__(self) -> int:
        return hash((id(self.model), self.index))

    def __repr__(self) -> str:
        name = self.model.name(self) if self.model.is_valid(self) else ""
        return name or f"noname<{self.index!r}>"


class InfiniteConstraintRef(ConstraintRef):
    """Constraint whose expression depends on infinite parameters."""

    pass


class FiniteConstraintRef(ConstraintRef):
    """Constraint that involves only finite quantities."""

    pass
