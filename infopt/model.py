"""
InfOpt Model - The Infinite Model Store
=======================================

``InfiniteModel`` owns one ``ObjectArena`` per object kind and keeps every
cross-object link consistent while the model is edited.

Dependency protocol:
- embedding a reference to X in the expression (or parameter bounds) of Y adds
  Y's index to X's dependents for Y's kind
- replacing Y's expression or deleting Y removes Y from every X it referenced
- deleting X with recorded dependents raises ``ObjectInUseError`` under the
  default ``DeletionPolicy.BLOCK``; ``DeletionPolicy.CASCADE`` deletes the
  dependents first, in a deterministic order
- objective usage is a flag on the data object and never blocks a deletion:
  deleting an object the objective mentions drops its terms from the objective
- info constraints (bounds, fix, binary, integer) belong to their variable and
  are deleted with it

Every fallible check of an operation runs before the first mutation, so a failed
call leaves the model untouched. Every successful mutation clears
``optimizer_model_ready``.

Usage:
    model = InfiniteModel()
    t = model.add_parameter(IntervalSet(0, 1), supports=[0, 1], name="t")
    x = model.add_variable((t,), name="x")
    x0 = model.add_point_variable(x, (0.5,))
    model.set_objective(ObjectiveSense.MIN, x0)
    model.delete(t)  # ObjectInUseError: x depends on t
"""

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from numbers import Real
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .bounds import ParameterBounds
from .constraints import BoundedScalarConstraint, ScalarConstraint
from .data_objects import (
    ConstraintData,
    DataObject,
    Dependents,
    MeasureData,
    MultiParameterData,
    ScalarParameterData,
    VariableData,
)
from .errors import (
    AmbiguousNameError,
    DimensionMismatchError,
    NotFiniteError,
    ObjectInUseError,
    ObjectNotFoundError,
    OutOfDomainError,
)
from .expressions import (
    AffExpr,
    collect_refs,
    convert_expression,
    flatten,
    remove_ref,
)
from .indices import (
    VARIABLE_KINDS,
    DependentParameterIndex,
    ObjectIndex,
    ObjectKind,
)
from .measures import (
    AbstractMeasureData,
    DiscreteMeasureData,
    Measure,
    MultiDiscreteMeasureData,
    default_weight,
)
from .parameters import (
    ALL,
    USER_DEFINED,
    DependentParameters,
    FiniteParameter,
    IndependentParameter,
    SupportView,
    generate_collection_supports,
    generate_scalar_supports,
)
from .references import (
    ConstraintRef,
    DispatchVariableRef,
    FiniteConstraintRef,
    GeneralVariableRef,
    InfiniteConstraintRef,
    check_owner,
    dispatch_variable_ref,
)
from .sets import (
    CollectionSet,
    ConstraintSet,
    EqualTo,
    GreaterThan,
    InfiniteArraySet,
    InfiniteScalarSet,
    Integer,
    IntervalSet,
    LessThan,
    MultiDistributionSet,
    UniDistributionSet,
    ZeroOne,
)
from .util import DeletionPlan, ObjectArena
from .variables import (
    HoldVariable,
    InfiniteVariable,
    PointVariable,
    ReducedInfiniteVariable,
    VariableInfo,
)

# ============================================================================
# CONFIGURATION
# ============================================================================


class DeletionPolicy(Enum):
    """What ``delete`` does with an object that still has dependents."""

    BLOCK = "block"
    CASCADE = "cascade"


class ObjectiveSense(Enum):
    MIN = "min"
    MAX = "max"
    FEASIBILITY = "feasibility"


@dataclass
class IntegralDefaults:
    """
    Default settings handed to integral builders.

    Attributes:
        eval_method: Name of the evaluation scheme
        num_supports: Number of supports to generate
        weight_func: Weight function applied to every support
        name: Display name of generated measures
        use_existing_supports: Reuse the parameter's supports instead of
            generating new ones
    """

    eval_method: str = "automatic"
    num_supports: int = 10
    weight_func: Callable[[Any], float] = default_weight
    name: str = "integral"
    use_existing_supports: bool = False


# Tie-break order for cascading deletions
_KIND_ORDER = {kind: position for position, kind in enumerate(ObjectKind)}

# Variable info slot -> (info field, value it takes once the constraint is gone)
_INFO_SLOTS = {
    "lower_bound_index": ("lower_bound", None),
    "upper_bound_index": ("upper_bound", None),
    "fix_index": ("fix_value", None),
    "zero_one_index": ("binary", False),
    "integrality_index": ("integer", False),
}

_NAME_CACHE_FOR_KIND = {
    ObjectKind.INDEPENDENT_PARAMETER: "parameter",
    ObjectKind.DEPENDENT_PARAMETERS: "parameter",
    ObjectKind.DEPENDENT_PARAMETER: "parameter",
    ObjectKind.FINITE_PARAMETER: "parameter",
    ObjectKind.INFINITE_VARIABLE: "variable",
    ObjectKind.REDUCED_VARIABLE: "variable",
    ObjectKind.POINT_VARIABLE: "variable",
    ObjectKind.HOLD_VARIABLE: "variable",
    ObjectKind.MEASURE: None,
    ObjectKind.CONSTRAINT: "constraint",
}

RefLike = Union[GeneralVariableRef, DispatchVariableRef, ConstraintRef]


def _deletion_sort_key(index: ObjectIndex):
    return (_KIND_ORDER[index.kind], index.value)


def _bounds_of(constraint: ScalarConstraint) -> Tuple[ParameterBounds, ParameterBounds]:
    """Effective and author-given bounds of a constraint (empty when unbounded)."""
    if isinstance(constraint, BoundedScalarConstraint):
        return constraint.bounds, constraint.orig_bounds
    return ParameterBounds(), ParameterBounds()


# ============================================================================
# MODEL
# ============================================================================


class InfiniteModel:
    """
    Mutable store of parameters, variables, measures, constraints and the
    objective of an infinite-dimensional optimization problem.

    Attributes:
        has_hold_bounds: Whether any hold variable carries parameter bounds
        obj_dict: User registry of named objects (``model["x"]``)
        ext: Free-form data of extensions
        integral_defaults: ``IntegralDefaults`` used by integral builders
        optimizer_constructor: Opaque factory of the solver backend
        optimizer_model: Opaque transcription target, never touched here
        optimizer_model_ready: False whenever the model changed since the last
            transcription
        deletion_policy: ``DeletionPolicy`` applied by ``delete``
    """

    def __init__(
        self,
        optimizer_constructor: Any = None,
        *,
        seed: bool = False,
        deletion_policy: DeletionPolicy = DeletionPolicy.BLOCK,
        **integral_defaults,
    ):
        """
        Initialize an empty model.

        Args:
            optimizer_constructor: Factory of the solver backend (stored only)
            seed: Seed numpy's global random generator with 0 so sampled
                supports are reproducible
            deletion_policy: Behaviour of ``delete`` when dependents exist
            **integral_defaults: Overrides of ``IntegralDefaults`` fields
        """
        if seed:
            np.random.seed(0)

        # Storage: one arena per stored kind (single dependent parameters live
        # inside their group)
        self._arenas = {
            kind: ObjectArena(kind)
            for kind in ObjectKind
            if kind is not ObjectKind.DEPENDENT_PARAMETER
        }
        self._name_caches: Dict[str, Optional[Dict[str, List[Any]]]] = {
            "parameter": None,
            "variable": None,
            "constraint": None,
        }
        self.has_hold_bounds = False

        # Objective
        self._objective_sense = ObjectiveSense.FEASIBILITY
        self._objective_function: Any = AffExpr()

        # Configuration and extension data
        self.obj_dict: Dict[str, Any] = {}
        self.ext: Dict[str, Any] = {}
        self.integral_defaults = IntegralDefaults(**integral_defaults)
        self.deletion_policy = DeletionPolicy(deletion_policy)

        # Transcription target
        self.optimizer_constructor = optimizer_constructor
        self.optimizer_model: Any = None
        self.optimizer_model_ready = False

        # Thread safety
        self._lock = threading.RLock()

    # ------------------------------------------------------------------------
    # Internal bookkeeping
    # ------------------------------------------------------------------------

    def _mark_dirty(self) -> None:
        self.optimizer_model_ready = False

    def _invalidate_names(self, kind: ObjectKind) -> None:
        cache = _NAME_CACHE_FOR_KIND[kind]
        if cache is not None:
            self._name_caches[cache] = None

    def _ref(self, index: Any) -> GeneralVariableRef:
        if isinstance(index, DependentParameterIndex):
            return GeneralVariableRef(
                self, index.value, ObjectKind.DEPENDENT_PARAMETER, index.param_index
            )
        return GeneralVariableRef(self, index.value, index.kind)

    def data_object(self, index: Any) -> DataObject:
        """
        Return the data object stored at ``index``.

        Raises:
            ObjectNotFoundError: If the object was deleted or never existed
        """
        if isinstance(index, DependentParameterIndex):
            data = self._arenas[ObjectKind.DEPENDENT_PARAMETERS].get(index.object_index)
            if not 0 <= index.param_index < len(data.names):
                raise ObjectNotFoundError(
                    f"Dependent parameter group {index.object_index!r} has no "
                    f"parameter {index.param_index}"
                )
            return data
        return self._arenas[index.kind].get(index)

    def _dependents(self, ref: GeneralVariableRef) -> Dependents:
        if ref.kind is ObjectKind.DEPENDENT_PARAMETER:
            return self.data_object(ref.index).param_dependents[ref.param_index]
        return self.data_object(ref.index).dependents

    def _register(self, index: ObjectIndex, refs) -> None:
        for ref in refs:
            self._dependents(ref).add(index)

    def _unregister(self, index: ObjectIndex, refs) -> None:
        for ref in refs:
            if self.is_valid(ref):
                self._dependents(ref).discard(index)

    def _dependencies(
        self, index: ObjectIndex, data: DataObject
    ) -> List[GeneralVariableRef]:
        """References whose dependents list ``index``."""
        kind = index.kind
        if kind is ObjectKind.INFINITE_VARIABLE:
            return list(data.variable.flat_parameter_refs)
        if kind in (ObjectKind.REDUCED_VARIABLE, ObjectKind.POINT_VARIABLE):
            return [data.variable.infinite_variable_ref]
        if kind is ObjectKind.HOLD_VARIABLE:
            return list(data.variable.parameter_bounds.refs())
        if kind is ObjectKind.MEASURE:
            return data.measure.refs()
        if kind is ObjectKind.CONSTRAINT:
            if data.is_info_constraint:
                return []
            return self._constraint_refs(data.constraint)
        return []

    @staticmethod
    def _constraint_refs(constraint: ScalarConstraint) -> List[GeneralVariableRef]:
        refs = list(collect_refs(constraint.func))
        if isinstance(constraint, BoundedScalarConstraint):
            refs += [ref for ref in constraint.bounds.refs() if ref not in refs]
        return refs

    def _general(self, ref: RefLike) -> GeneralVariableRef:
        if isinstance(ref, DispatchVariableRef):
            return ref.general_ref()
        if not isinstance(ref, GeneralVariableRef):
            raise TypeError(f"Expected a variable reference, got {type(ref).__name__}")
        return ref

    def _index_of(self, ref: RefLike):
        """Validate a reference of any type and return its index."""
        if isinstance(ref, ConstraintRef):
            check_owner(self, ref)
            self.data_object(ref.index)
            return ref.index
        return self.resolve(self._general(ref)).index

    def _check_expression(self, func: Any) -> List[GeneralVariableRef]:
        refs = list(collect_refs(func))
        for ref in refs:
            self.resolve(self._general(ref))
        return refs

    # ------------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------------

    def resolve(
        self, ref: Union[GeneralVariableRef, DispatchVariableRef]
    ) -> DispatchVariableRef:
        """
        Resolve a general reference to its concrete reference.

        Raises:
            OwningModelMismatchError: If ``ref`` belongs to another model
            InvalidReferenceKindError: If the kind tag has no concrete reference
            ObjectNotFoundError: If the object was deleted
        """
        ref = self._general(ref)
        check_owner(self, ref)
        dispatch_ref = dispatch_variable_ref(ref)
        self.data_object(dispatch_ref.index)
        return dispatch_ref

    def is_valid(self, ref: RefLike) -> bool:
        """Whether ``ref`` belongs to this model and denotes a live object."""
        if getattr(ref, "model", None) is not self:
            return False
        if isinstance(ref, DispatchVariableRef):
            ref = ref.general_ref()
        index = ref.index
        if isinstance(index, DependentParameterIndex):
            group = self._arenas[ObjectKind.DEPENDENT_PARAMETERS]
            if index.object_index not in group:
                return False
            return 0 <= index.param_index < len(group[index.object_index].names)
        arena = self._arenas.get(index.kind) if isinstance(index, ObjectIndex) else None
        return arena is not None and index in arena

    def _constraint_ref(self, index: ObjectIndex) -> ConstraintRef:
        data = self.data_object(index)
        refs = collect_refs(data.constraint.func)
        if any(self._parameter_dependence(ref) for ref in refs):
            return InfiniteConstraintRef(self, index)
        return FiniteConstraintRef(self, index)

    # ------------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------------

    def insert_parameter(
        self,
        parameter: Union[IndependentParameter, FiniteParameter, DependentParameters],
        name: Union[str, Sequence[str]] = "",
    ):
        """
        Store a raw parameter.

        Args:
            parameter: ``IndependentParameter``, ``FiniteParameter`` or
                ``DependentParameters``
            name: Display name, or one name per parameter for a dependent group

        Returns:
            A ``GeneralVariableRef``, or a tuple of them for a dependent group
        """
        with self._lock:
            if isinstance(parameter, IndependentParameter):
                kind = ObjectKind.INDEPENDENT_PARAMETER
                data = ScalarParameterData(parameter, name)
            elif isinstance(parameter, FiniteParameter):
                kind = ObjectKind.FINITE_PARAMETER
                data = ScalarParameterData(parameter, name)
            elif isinstance(parameter, DependentParameters):
                if isinstance(name, str):
                    names = [name] * parameter.num_parameters
                else:
                    names = name
                data = MultiParameterData(parameter, names)
                index = self._arenas[ObjectKind.DEPENDENT_PARAMETERS].insert(data)
                self._invalidate_names(ObjectKind.DEPENDENT_PARAMETERS)
                self._mark_dirty()
                return tuple(
                    self._ref(DependentParameterIndex(index, i))
                    for i in range(parameter.num_parameters)
                )
            else:
                raise TypeError(
                    f"Cannot store {type(parameter).__name__} as a parameter"
                )

            index = self._arenas[kind].insert(data)
            self._invalidate_names(kind)
            self._mark_dirty()
            return self._ref(index)

    def add_parameter(
        self,
        domain: Any,
        supports: Any = None,
        *,
        name: str = "",
        num_supports: int = 0,
        label: str = USER_DEFINED,
    ) -> GeneralVariableRef:
        """
        Add an independent infinite parameter.

        Args:
            domain: ``IntervalSet``, ``UniDistributionSet``, a ``(lower, upper)``
                pair or a frozen scipy distribution
            supports: Initial supports
            name: Display name
            num_supports: Number of supports to generate when ``supports`` is None
            label: Label of the given supports

        Raises:
            OutOfDomainError: If a support lies outside ``domain``
        """
        if isinstance(domain, (tuple, list)):
            domain = IntervalSet(*domain)
        elif not isinstance(domain, InfiniteScalarSet):
            domain = UniDistributionSet(domain)
        parameter = IndependentParameter(domain)
        if supports is not None:
            parameter.add_supports(supports, label)
        elif num_supports:
            values, generated = generate_scalar_supports(domain, num_supports)
            parameter.add_supports(values, generated)
        return self.insert_parameter(parameter, name)

    def add_parameters(
        self,
        domain: Any,
        supports: Any = None,
        *,
        names: Union[str, Sequence[str]] = "",
        num_supports: int = 0,
        label: str = USER_DEFINED,
    ) -> Tuple[GeneralVariableRef, ...]:
        """
        Add a dependent parameter group.

        Args:
            domain: ``MultiDistributionSet``, ``CollectionSet``, a sequence of
                scalar sets or a frozen multivariate scipy distribution
            supports: Initial support columns (rows are parameters)
            names: One name per parameter, or a base name suffixed with the
                parameter position
        """
        if isinstance(domain, (tuple, list)):
            domain = CollectionSet(domain)
        elif not isinstance(domain, InfiniteArraySet):
            domain = MultiDistributionSet(domain)
        parameters = DependentParameters(domain)
        if supports is not None:
            parameters.add_supports(supports, label)
        elif num_supports:
            values, generated = generate_collection_supports(domain, num_supports)
            parameters.add_supports(values, generated)
        if isinstance(names, str) and names:
            names = [f"{names}[{i + 1}]" for i in range(parameters.num_parameters)]
        return self.insert_parameter(parameters, names)

    def add_finite_parameter(self, value: float, name: str = "") -> GeneralVariableRef:
        return self.insert_parameter(FiniteParameter(value), name)

    def _parameter(self, ref: GeneralVariableRef):
        """Return ``(raw parameter, row)`` of an infinite parameter reference."""
        self.resolve(ref)
        if ref.kind is ObjectKind.INDEPENDENT_PARAMETER:
            return self.data_object(ref.index).parameter, None
        if ref.kind is ObjectKind.DEPENDENT_PARAMETER:
            return self.data_object(ref.index).parameters, ref.param_index
        raise TypeError(f"{ref!r} is a {ref.kind.label}, not an infinite parameter")

    def parameter_set(self, ref: RefLike):
        """
        Characterizing set of an infinite parameter.

        For a parameter of a ``CollectionSet`` group this is its own scalar set;
        for a jointly distributed group it is the group's set.
        """
        parameter, row = self._parameter(self._general(ref))
        if row is not None and isinstance(parameter.set, CollectionSet):
            return parameter.set.sets[row]
        return parameter.set

    def _check_in_domain(self, ref: GeneralVariableRef, value: float) -> None:
        domain = self.parameter_set(ref)
        if isinstance(domain, InfiniteScalarSet) and not domain.contains(value):
            raise OutOfDomainError(
                f"Value {value:g} lies outside the domain {domain!r} of {ref!r}"
            )

    def parameter_value(self, ref: RefLike) -> float:
        ref = self._general(ref)
        self.resolve(ref)
        if ref.kind is not ObjectKind.FINITE_PARAMETER:
            raise TypeError(f"{ref!r} is not a finite parameter")
        return self.data_object(ref.index).parameter.value

    def set_parameter_value(self, ref: RefLike, value: float) -> None:
        with self._lock:
            value = float(value)
            self.parameter_value(ref)
            self.data_object(self._general(ref).index).parameter.value = value
            self._mark_dirty()

    # ------------------------------------------------------------------------
    # Supports
    # ------------------------------------------------------------------------

    def add_supports(
        self, ref: RefLike, values: Any, label: Optional[str] = None
    ) -> int:
        """
        Add supports to an infinite parameter.

        For a dependent parameter the whole group receives support columns.

        Returns:
            Number of new supports

        Raises:
            OutOfDomainError: If a value lies outside the domain
            DimensionMismatchError: If a column does not match the group size
            ValueError: If ``label`` is ``ALL``, which only filters supports
        """
        with self._lock:
            parameter, _ = self._parameter(self._general(ref))
            added = parameter.add_supports(values, label or USER_DEFINED)
            self._mark_dirty()
            logging.debug(f"Added {added} supports to {ref!r}")
            return added

    def fill_supports(
        self,
        ref: RefLike,
        num_supports: Optional[int] = None,
        method: Optional[str] = None,
    ) -> int:
        """Generate supports with a uniform grid or Monte Carlo sampling."""
        with self._lock:
            parameter, _ = self._parameter(self._general(ref))
            count = num_supports or self.integral_defaults.num_supports
            if isinstance(parameter, DependentParameters):
                values, label = generate_collection_supports(
                    parameter.set, count, method
                )
            else:
                values, label = generate_scalar_supports(parameter.set, count, method)
            added = parameter.add_supports(values, label)
            self._mark_dirty()
            return added

    def delete_supports(self, ref: RefLike, label: Any = None) -> int:
        """
        Delete all supports of a parameter (or those carrying ``label``).

        Raises:
            ObjectInUseError: If all supports would go while measures depend on
                the parameter
        """
        with self._lock:
            ref = self._general(ref)
            parameter, _ = self._parameter(ref)
            if label is None or label == ALL:
                if ref.kind is ObjectKind.DEPENDENT_PARAMETER:
                    group = self.data_object(ref.index)
                    measures = sum(
                        len(d.of(ObjectKind.MEASURE)) for d in group.param_dependents
                    )
                else:
                    measures = len(self._dependents(ref).of(ObjectKind.MEASURE))
                if measures:
                    raise ObjectInUseError(
                        f"Cannot delete the supports of {ref!r}, "
                        f"{measures} measure(s) use it",
                        {ObjectKind.MEASURE: measures},
                    )
            removed = parameter.delete_supports(label)
            self._mark_dirty()
            return removed

    def supports(self, ref: RefLike, label: Any = None) -> SupportView:
        """Lazy view of the supports: ascending for scalars, column order for groups."""
        parameter, row = self._parameter(self._general(ref))
        if row is None:
            return parameter.support_view(label)
        return parameter.row_view(row, label)

    def collection_supports(self, ref: RefLike, label: Any = None) -> SupportView:
        """Whole support columns of the group ``ref`` belongs to."""
        parameter, row = self._parameter(self._general(ref))
        if row is None:
            raise TypeError(f"{ref!r} does not belong to a dependent parameter group")
        return parameter.column_view(label)

    def num_supports(self, ref: RefLike, label: Any = None) -> int:
        parameter, _ = self._parameter(self._general(ref))
        return parameter.num_supports(label)

    def has_supports(self, ref: RefLike) -> bool:
        return self.num_supports(ref) > 0

    def support_labels(self, ref: RefLike) -> set:
        """Union of the labels of every support."""
        parameter, _ = self._parameter(self._general(ref))
        if isinstance(parameter, DependentParameters):
            return set().union(*parameter.labels)
        return parameter.supports.all_labels()

    # ------------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------------

    def _check_parameter_refs(self, parameter_refs: Tuple[Any, ...]) -> None:
        seen = set()
        groups = set()
        for item in parameter_refs:
            refs = item if isinstance(item, tuple) else (item,)
            item_groups = set()
            for ref in refs:
                self.resolve(ref)
                if ref.kind is ObjectKind.DEPENDENT_PARAMETER:
                    item_groups.add(ref.raw_index)
                elif (
                    ref.kind is not ObjectKind.INDEPENDENT_PARAMETER
                    or isinstance(item, tuple)
                ):
                    raise TypeError(
                        f"{ref!r} cannot be used here: parameter tuple elements are "
                        "independent parameters or dependent parameters of one group"
                    )
                if ref in seen:
                    raise ValueError(f"Parameter {ref!r} appears more than once")
                seen.add(ref)
            if len(item_groups) > 1:
                raise ValueError(
                    "A parameter tuple element cannot mix dependent groups"
                )
            if item_groups & groups:
                raise ValueError(
                    "Parameters of one dependent group must be given "
                    "in a single element"
                )
            groups |= item_groups

    def _check_parameter_values(self, parameter_refs, parameter_values) -> None:
        if len(parameter_values) != len(parameter_refs):
            raise DimensionMismatchError(
                f"Expected {len(parameter_refs)} parameter values, "
                f"got {len(parameter_values)}"
            )
        for refs, values in zip(parameter_refs, parameter_values):
            if isinstance(refs, tuple) != isinstance(values, tuple) or (
                isinstance(refs, tuple) and len(refs) != len(values)
            ):
                raise DimensionMismatchError(
                    f"Parameter values {values!r} do not match "
                    f"the structure of {refs!r}"
                )
        for ref, value in zip(flatten(parameter_refs), flatten(parameter_values)):
            self._check_in_domain(ref, value)

    def _check_parameter_bounds(self, bounds: ParameterBounds) -> None:
        for ref, interval in bounds.items():
            self.resolve(ref)
            domain = self.parameter_set(ref)
            if isinstance(domain, IntervalSet) and not interval.is_subset(domain):
                raise OutOfDomainError(
                    f"Bounds {interval!r} on {ref!r} exceed its domain {domain!r}"
                )

    @staticmethod
    def _info_constraints(info: VariableInfo):
        if info.lower_bound is not None:
            yield "lower_bound_index", GreaterThan(info.lower_bound)
        if info.upper_bound is not None:
            yield "upper_bound_index", LessThan(info.upper_bound)
        if info.fix_value is not None:
            yield "fix_index", EqualTo(info.fix_value)
        if info.binary:
            yield "zero_one_index", ZeroOne()
        if info.integer:
            yield "integrality_index", Integer()

    def _add_info_constraint(
        self,
        ref: GeneralVariableRef,
        data: VariableData,
        slot: str,
        set_: ConstraintSet,
    ) -> None:
        constraint = ConstraintData(
            ScalarConstraint(ref, set_), is_info_constraint=True
        )
        setattr(data, slot, self._arenas[ObjectKind.CONSTRAINT].insert(constraint))

    def insert_variable(self, variable: Any, name: str = "") -> GeneralVariableRef:
        """
        Store a raw variable after validating every reference it holds.

        Info constraints are created from the variable's ``VariableInfo``.

        Raises:
            ObjectNotFoundError: If a referenced object is not live
            DimensionMismatchError: If point values do not match the parameters
            OutOfDomainError: If a value or bound lies outside a parameter domain
        """
        with self._lock:
            if isinstance(variable, InfiniteVariable):
                kind = ObjectKind.INFINITE_VARIABLE
                self._check_parameter_refs(variable.parameter_refs)
            elif isinstance(variable, ReducedInfiniteVariable):
                kind = ObjectKind.REDUCED_VARIABLE
                infinite = self._infinite_variable(variable.infinite_variable_ref)
                infinite_refs = infinite.parameter_refs
                flat_refs = flatten(infinite_refs)
                for position, value in variable.eval_supports.items():
                    if not 0 <= position < len(flat_refs):
                        raise DimensionMismatchError(
                            f"Position {position} is out of range "
                            f"for {len(flat_refs)} parameters"
                        )
                    self._check_in_domain(flat_refs[position], value)
                if len(variable.eval_supports) == len(flat_refs):
                    raise ValueError(
                        "Fixing every parameter gives a point variable, "
                        "not a reduced one"
                    )
            elif isinstance(variable, PointVariable):
                kind = ObjectKind.POINT_VARIABLE
                infinite = self._infinite_variable(variable.infinite_variable_ref)
                self._check_parameter_values(
                    infinite.parameter_refs, variable.parameter_values
                )
            elif isinstance(variable, HoldVariable):
                kind = ObjectKind.HOLD_VARIABLE
                self._check_parameter_bounds(variable.parameter_bounds)
            else:
                raise TypeError(
                    f"Cannot store {type(variable).__name__} as a variable"
                )

            data = VariableData(
                variable, name, infinite=kind is ObjectKind.INFINITE_VARIABLE
            )
            index = self._arenas[kind].insert(data)
            ref = self._ref(index)
            self._register(index, self._dependencies(index, data))
            if kind is not ObjectKind.REDUCED_VARIABLE:
                for slot, set_ in self._info_constraints(variable.info):
                    self._add_info_constraint(ref, data, slot, set_)
            if kind is ObjectKind.HOLD_VARIABLE and variable.parameter_bounds:
                self.has_hold_bounds = True
            self._invalidate_names(kind)
            self._invalidate_names(ObjectKind.CONSTRAINT)
            self._mark_dirty()
            return ref

    def _infinite_variable(self, ref: Any) -> InfiniteVariable:
        ref = self._general(ref)
        self.resolve(ref)
        if ref.kind is not ObjectKind.INFINITE_VARIABLE:
            raise TypeError(f"{ref!r} is a {ref.kind.label}, not an infinite variable")
        return self.data_object(ref.index).variable

    def add_variable(
        self,
        parameter_refs: Any = None,
        *,
        name: str = "",
        lower_bound: Optional[float] = None,
        upper_bound: Optional[float] = None,
        fix: Optional[float] = None,
        start: Optional[float] = None,
        binary: bool = False,
        integer: bool = False,
        parameter_bounds: Any = None,
    ) -> GeneralVariableRef:
        """
        Add an infinite variable (when ``parameter_refs`` is given) or a hold
        variable (otherwise).

        Args:
            parameter_refs: Parameters the variable depends on; a dependent group
                is given as one tuple element
            parameter_bounds: Sub-domain of a hold variable
        """
        info = VariableInfo(lower_bound, upper_bound, fix, start, binary, integer)
        if parameter_refs is not None:
            if isinstance(parameter_refs, GeneralVariableRef):
                parameter_refs = (parameter_refs,)
            if parameter_bounds is not None:
                raise ValueError("Parameter bounds can only be given to hold variables")
            return self.insert_variable(
                InfiniteVariable(info, tuple(parameter_refs)), name
            )
        if not isinstance(parameter_bounds, ParameterBounds):
            parameter_bounds = ParameterBounds(parameter_bounds)
        return self.insert_variable(HoldVariable(info, parameter_bounds), name)

    def add_point_variable(
        self,
        infinite_variable_ref: GeneralVariableRef,
        parameter_values: Sequence[Any],
        *,
        name: str = "",
        **info,
    ) -> GeneralVariableRef:
        """
        Evaluate an infinite variable at a point.

        The point variable inherits the infinite variable's info, overridden by
        ``info`` keyword arguments. Without a name it is displayed as
        ``x(0.5, 1)``.
        """
        base = self._infinite_variable(infinite_variable_ref)
        variable = PointVariable(
            base.info.updated(**info), infinite_variable_ref, tuple(parameter_values)
        )
        if not name and self.name(infinite_variable_ref):
            values = ", ".join(
                _format_value(value) for value in variable.parameter_values
            )
            name = f"{self.name(infinite_variable_ref)}({values})"
        return self.insert_variable(variable, name)

    def add_reduced_variable(
        self,
        infinite_variable_ref: GeneralVariableRef,
        eval_supports: Dict[int, float],
        *,
        name: str = "",
    ) -> GeneralVariableRef:
        """Fix some flattened parameter positions of an infinite variable."""
        variable = ReducedInfiniteVariable(infinite_variable_ref, eval_supports)
        base = self._infinite_variable(infinite_variable_ref)
        if not name and self.name(infinite_variable_ref):
            args = [
                _format_value(variable.eval_supports[i])
                if i in variable.eval_supports
                else self.name(ref)
                for i, ref in enumerate(base.flat_parameter_refs)
            ]
            name = f"{self.name(infinite_variable_ref)}({', '.join(args)})"
        return self.insert_variable(variable, name)

    def parameter_refs(self, ref: RefLike) -> Tuple[Any, ...]:
        """Parameter tuple of an infinite or reduced infinite variable."""
        ref = self._general(ref)
        self.resolve(ref)
        if ref.kind is ObjectKind.INFINITE_VARIABLE:
            return self.data_object(ref.index).variable.parameter_refs
        if ref.kind is not ObjectKind.REDUCED_VARIABLE:
            raise TypeError(f"{ref!r} is a {ref.kind.label}, not an infinite variable")
        reduced = self.data_object(ref.index).variable
        position = 0
        result = []
        infinite = self._infinite_variable(reduced.infinite_variable_ref)
        for item in infinite.parameter_refs:
            refs = item if isinstance(item, tuple) else (item,)
            kept = []
            for param in refs:
                if position not in reduced.eval_supports:
                    kept.append(param)
                position += 1
            if kept:
                result.append(tuple(kept) if isinstance(item, tuple) else kept[0])
        return tuple(result)

    def _variable_data(self, ref: RefLike) -> Tuple[GeneralVariableRef, VariableData]:
        ref = self._general(ref)
        self.resolve(ref)
        if ref.kind not in VARIABLE_KINDS:
            raise TypeError(f"{ref!r} is a {ref.kind.label}, not a variable")
        if ref.kind is ObjectKind.REDUCED_VARIABLE:
            raise TypeError(
                "Reduced variables take their info from their infinite variable"
            )
        return ref, self.data_object(ref.index)

    def _set_info_constraint(
        self, ref: RefLike, slot: str, set_: ConstraintSet, **info
    ) -> None:
        with self._lock:
            ref, data = self._variable_data(ref)
            new_info = data.variable.info.updated(**info)
            index = getattr(data, slot)
            if index is None:
                self._add_info_constraint(ref, data, slot, set_)
                self._invalidate_names(ObjectKind.CONSTRAINT)
            else:
                self.data_object(index).constraint.set = set_
            data.variable.info = new_info
            self._mark_dirty()

    def _delete_info_constraint(self, ref: RefLike, slot: str) -> None:
        with self._lock:
            ref, data = self._variable_data(ref)
            index = getattr(data, slot)
            if index is None:
                field, _ = _INFO_SLOTS[slot]
                raise ObjectNotFoundError(
                    f"{ref!r} has no {field.replace('_', ' ')} to delete"
                )
            self._arenas[ObjectKind.CONSTRAINT].delete(index)
            self._clear_info_slot(data, slot)
            self._invalidate_names(ObjectKind.CONSTRAINT)
            self._mark_dirty()

    @staticmethod
    def _clear_info_slot(data: VariableData, slot: str) -> None:
        field, cleared = _INFO_SLOTS[slot]
        setattr(data, slot, None)
        data.variable.info = data.variable.info.updated(**{field: cleared})

    def set_lower_bound(self, ref: RefLike, value: float) -> None:
        _, data = self._variable_data(ref)
        if data.fix_index is not None:
            raise ValueError(f"Cannot set a lower bound on fixed variable {ref!r}")
        value = float(value)
        self._set_info_constraint(
            ref, "lower_bound_index", GreaterThan(value), lower_bound=value
        )

    def delete_lower_bound(self, ref: RefLike) -> None:
        self._delete_info_constraint(ref, "lower_bound_index")

    def set_upper_bound(self, ref: RefLike, value: float) -> None:
        _, data = self._variable_data(ref)
        if data.fix_index is not None:
            raise ValueError(f"Cannot set an upper bound on fixed variable {ref!r}")
        value = float(value)
        self._set_info_constraint(
            ref, "upper_bound_index", LessThan(value), upper_bound=value
        )

    def delete_upper_bound(self, ref: RefLike) -> None:
        self._delete_info_constraint(ref, "upper_bound_index")

    def fix(self, ref: RefLike, value: float, force: bool = False) -> None:
        """
        Fix a variable to ``value``.

        Raises:
            ValueError: If the variable has bounds and ``force`` is False
        """
        with self._lock:
            _, data = self._variable_data(ref)
            bounded = [
                slot
                for slot in ("lower_bound_index", "upper_bound_index")
                if getattr(data, slot) is not None
            ]
            if bounded and not force:
                raise ValueError(
                    f"Variable {ref!r} has bounds, use force=True to fix it"
                )
            for slot in bounded:
                self._delete_info_constraint(ref, slot)
            value = float(value)
            self._set_info_constraint(
                ref, "fix_index", EqualTo(value), fix_value=value
            )

    def unfix(self, ref: RefLike) -> None:
        self._delete_info_constraint(ref, "fix_index")

    def set_binary(self, ref: RefLike) -> None:
        _, data = self._variable_data(ref)
        if data.integrality_index is not None:
            raise ValueError(f"Variable {ref!r} is integer, it cannot also be binary")
        self._set_info_constraint(ref, "zero_one_index", ZeroOne(), binary=True)

    def unset_binary(self, ref: RefLike) -> None:
        self._delete_info_constraint(ref, "zero_one_index")

    def set_integer(self, ref: RefLike) -> None:
        _, data = self._variable_data(ref)
        if data.zero_one_index is not None:
            raise ValueError(f"Variable {ref!r} is binary, it cannot also be integer")
        self._set_info_constraint(ref, "integrality_index", Integer(), integer=True)

    def unset_integer(self, ref: RefLike) -> None:
        self._delete_info_constraint(ref, "integrality_index")

    def set_start_value(self, ref: RefLike, value: Optional[float]) -> None:
        with self._lock:
            _, data = self._variable_data(ref)
            data.variable.info = data.variable.info.updated(start=value)
            self._mark_dirty()

    def variable_info(self, ref: RefLike) -> VariableInfo:
        ref = self._general(ref)
        return self.resolve(ref).info()

    # ------------------------------------------------------------------------
    # Measures
    # ------------------------------------------------------------------------

    def insert_measure(
        self, measure: Measure, name: Optional[str] = None
    ) -> GeneralVariableRef:
        """
        Store a measure.

        Supports carried by the measure data are added to the integrated
        parameters under the data's label.

        Raises:
            TypeError: If an integrated reference is not an infinite parameter
            DimensionMismatchError: If supports and coefficients disagree
        """
        with self._lock:
            data = measure.data
            if not isinstance(data, AbstractMeasureData):
                raise TypeError(f"Unsupported measure data {type(data).__name__}")
            self._check_expression(measure.func)
            integrated = list(data.integrated_refs())
            for ref in integrated:
                self._parameter(ref)
            pending = self._measure_supports(data, integrated)

            for parameter, values in pending:
                parameter.add_supports(values, data.label)
            stored = MeasureData(measure, data.name if name is None else name)
            index = self._arenas[ObjectKind.MEASURE].insert(stored)
            self._register(index, measure.refs())
            self._mark_dirty()
            return self._ref(index)

    def _measure_supports(
        self, data: AbstractMeasureData, integrated: List[GeneralVariableRef]
    ):
        """Validated ``(parameter, values)`` pairs the measure data brings along."""
        if data.supports is None:
            return []
        num_coefficients = len(data.coefficients)
        if isinstance(data, DiscreteMeasureData):
            if len(data.supports) != num_coefficients:
                raise DimensionMismatchError(
                    f"{len(data.supports)} supports given "
                    f"for {num_coefficients} coefficients"
                )
            parameter, row = self._parameter(data.parameter_ref)
            if row is not None:
                raise TypeError(
                    "Use MultiDiscreteMeasureData to integrate dependent parameters"
                )
            return [(parameter, parameter.check_supports(data.supports))]

        supports = data.supports
        if supports.shape != (len(integrated), num_coefficients):
            raise DimensionMismatchError(
                f"Supports of shape {supports.shape} do not match {len(integrated)} "
                f"parameters and {num_coefficients} coefficients"
            )
        pending = []
        rows = {}
        for row, ref in enumerate(integrated):
            parameter, param_row = self._parameter(ref)
            if param_row is None:
                pending.append((parameter, parameter.check_supports(supports[row])))
            else:
                rows.setdefault(ref.raw_index, (parameter, {}))[1][param_row] = row
        for parameter, row_map in rows.values():
            if sorted(row_map) != list(range(parameter.num_parameters)):
                raise DimensionMismatchError(
                    "Measure supports must cover every parameter of a dependent group"
                )
            columns = supports[[row_map[i] for i in range(parameter.num_parameters)], :]
            pending.append((parameter, parameter.check_supports(columns)))
        return pending

    def add_measure(
        self, func: Any, data: AbstractMeasureData, name: Optional[str] = None
    ) -> GeneralVariableRef:
        return self.insert_measure(Measure(func, data), name)

    def support_sum(
        self,
        func: Any,
        parameter_refs: Any,
        label: str = ALL,
        name: str = "support_sum",
    ) -> GeneralVariableRef:
        """
        Measure summing ``func`` over the existing supports of the parameters.

        Args:
            parameter_refs: One parameter or all parameters of a dependent group
        """
        if isinstance(parameter_refs, GeneralVariableRef):
            count = self.num_supports(parameter_refs, label)
            data = DiscreteMeasureData(
                parameter_refs, np.ones(count), label=label, name=name
            )
        else:
            refs = tuple(parameter_refs)
            count = self.num_supports(refs[0], label)
            data = MultiDiscreteMeasureData(
                refs, np.ones(count), label=label, name=name
            )
        return self.add_measure(func, data)

    def set_integral_defaults(self, **kwargs) -> None:
        """Update ``integral_defaults`` fields (unknown fields raise TypeError)."""
        with self._lock:
            self.integral_defaults = replace(self.integral_defaults, **kwargs)

    def _parameter_dependence(
        self, ref: GeneralVariableRef
    ) -> List[GeneralVariableRef]:
        """Infinite parameters an object still varies over."""
        kind = ref.kind
        if kind in (ObjectKind.INDEPENDENT_PARAMETER, ObjectKind.DEPENDENT_PARAMETER):
            return [ref]
        if kind in (ObjectKind.INFINITE_VARIABLE, ObjectKind.REDUCED_VARIABLE):
            return flatten(self.parameter_refs(ref))
        if kind is ObjectKind.MEASURE:
            measure = self.data_object(ref.index).measure
            integrated = set(measure.data.integrated_refs())
            result = []
            for inner in collect_refs(measure.func):
                for param in self._parameter_dependence(inner):
                    if param not in integrated and param not in result:
                        result.append(param)
            return result
        return []

    def is_finite(self, ref: RefLike) -> bool:
        """Whether the object does not vary over any infinite parameter."""
        ref = self._general(ref)
        self.resolve(ref)
        return not self._parameter_dependence(ref)

    # ------------------------------------------------------------------------
    # Constraints
    # ------------------------------------------------------------------------

    def _effective_bounds(self, func: Any, bounds: ParameterBounds) -> ParameterBounds:
        effective = bounds.copy()
        for ref in collect_refs(func):
            if ref.kind is ObjectKind.HOLD_VARIABLE:
                hold = self.data_object(ref.index).variable
                effective = effective.merge(hold.parameter_bounds)
        return effective

    def insert_constraint(
        self, constraint: ScalarConstraint, name: str = ""
    ) -> ConstraintRef:
        """
        Store a constraint.

        The effective bounds merge the constraint's own bounds with those of
        the hold variables it uses; the author's bounds stay in ``orig_bounds``.

        Raises:
            EmptyIntersectionError: If the bounds merge to an empty interval
        """
        with self._lock:
            if not isinstance(constraint, ScalarConstraint):
                raise TypeError(
                    f"Cannot store {type(constraint).__name__} as a constraint"
                )
            self._check_expression(constraint.func)
            orig = (
                constraint.orig_bounds
                if isinstance(constraint, BoundedScalarConstraint)
                else ParameterBounds()
            )
            self._check_parameter_bounds(orig)
            effective = self._effective_bounds(constraint.func, orig)
            if effective:
                constraint = BoundedScalarConstraint(
                    constraint.func, constraint.set, effective, orig
                )

            data = ConstraintData(constraint, name)
            index = self._arenas[ObjectKind.CONSTRAINT].insert(data)
            self._register(index, self._dependencies(index, data))
            self._invalidate_names(ObjectKind.CONSTRAINT)
            self._mark_dirty()
            return self._constraint_ref(index)

    def add_constraint(
        self,
        func: Any,
        set_: ConstraintSet,
        *,
        name: str = "",
        parameter_bounds: Any = None,
    ) -> ConstraintRef:
        if parameter_bounds is None:
            return self.insert_constraint(ScalarConstraint(func, set_), name)
        if not isinstance(parameter_bounds, ParameterBounds):
            parameter_bounds = ParameterBounds(parameter_bounds)
        return self.insert_constraint(
            BoundedScalarConstraint(
                func, set_, parameter_bounds, parameter_bounds.copy()
            ),
            name,
        )

    def constraint_by_index(self, index: ObjectIndex) -> ConstraintRef:
        return self._constraint_ref(index)

    def set_constraint_function(self, ref: ConstraintRef, func: Any) -> None:
        """
        Replace a constraint's expression, moving its dependency registrations.

        Raises:
            EmptyIntersectionError: If new hold variables make the bounds empty
        """
        with self._lock:
            index = self._index_of(ref)
            data = self.data_object(index)
            if data.is_info_constraint:
                raise ValueError(
                    "Info constraints follow their variable and cannot be edited"
                )
            self._check_expression(func)
            old = data.constraint
            _, orig = _bounds_of(old)
            effective = self._effective_bounds(func, orig)

            self._unregister(index, self._dependencies(index, data))
            if effective:
                data.constraint = BoundedScalarConstraint(
                    func, old.set, effective, orig
                )
            else:
                data.constraint = ScalarConstraint(func, old.set)
            self._register(index, self._dependencies(index, data))
            self._mark_dirty()

    # ------------------------------------------------------------------------
    # Parameter bounds
    # ------------------------------------------------------------------------

    def parameter_bounds(self, ref: RefLike) -> ParameterBounds:
        """Effective bounds of a hold variable or constraint (empty if none)."""
        index = self._index_of(ref)
        if index.kind is ObjectKind.HOLD_VARIABLE:
            return self.data_object(index).variable.parameter_bounds
        if index.kind is ObjectKind.CONSTRAINT:
            constraint = self.data_object(index).constraint
            if isinstance(constraint, BoundedScalarConstraint):
                return constraint.bounds
            return ParameterBounds()
        raise TypeError(f"{ref!r} cannot carry parameter bounds")

    def has_parameter_bounds(self, ref: RefLike) -> bool:
        return bool(self.parameter_bounds(ref))

    def original_parameter_bounds(self, ref: ConstraintRef) -> ParameterBounds:
        constraint = self.data_object(self._index_of(ref)).constraint
        if isinstance(constraint, BoundedScalarConstraint):
            return constraint.orig_bounds
        return ParameterBounds()

    def merge_bounds(self, ref: RefLike, bounds: Any) -> ParameterBounds:
        """
        Tighten the parameter bounds of a hold variable or a constraint.

        Bounds added to a hold variable also tighten the effective bounds of
        every constraint that uses it.

        Returns:
            The new effective bounds of ``ref``

        Raises:
            EmptyIntersectionError: If some interval becomes empty
            OutOfDomainError: If a bound exceeds an interval domain
        """
        with self._lock:
            if not isinstance(bounds, ParameterBounds):
                bounds = ParameterBounds(bounds)
            index = self._index_of(ref)
            self._check_parameter_bounds(bounds)

            if index.kind is ObjectKind.HOLD_VARIABLE:
                data = self.data_object(index)
                merged = data.variable.parameter_bounds.merge(bounds)
                updates = []
                for cindex in data.dependents.of(ObjectKind.CONSTRAINT):
                    cdata = self.data_object(cindex)
                    effective, _ = _bounds_of(cdata.constraint)
                    updates.append((cindex, cdata, effective.merge(bounds)))

                data.variable.parameter_bounds = merged
                self._register(index, merged.refs())
                for cindex, cdata, effective in updates:
                    old = cdata.constraint
                    _, orig = _bounds_of(old)
                    cdata.constraint = BoundedScalarConstraint(
                        old.func, old.set, effective, orig
                    )
                    self._register(cindex, effective.refs())
                if merged:
                    self.has_hold_bounds = True
            elif index.kind is ObjectKind.CONSTRAINT:
                data = self.data_object(index)
                if data.is_info_constraint:
                    raise ValueError("Info constraints cannot carry parameter bounds")
                old = data.constraint
                effective, orig = (current.merge(bounds) for current in _bounds_of(old))
                data.constraint = BoundedScalarConstraint(
                    old.func, old.set, effective, orig
                )
                self._register(index, effective.refs())
                merged = effective
            else:
                raise TypeError(f"{ref!r} cannot carry parameter bounds")
            self._mark_dirty()
            return merged

    # ------------------------------------------------------------------------
    # Objective
    # ------------------------------------------------------------------------

    def set_objective(self, sense: Union[ObjectiveSense, str], func: Any) -> None:
        """
        Set the objective sense and function.

        Raises:
            NotFiniteError: If ``func`` varies over an infinite parameter
        """
        with self._lock:
            sense = ObjectiveSense(sense)
            refs = self._check_expression(func)
            for ref in refs:
                if self._parameter_dependence(ref):
                    raise NotFiniteError(
                        f"The objective must be finite, {ref!r} ({ref.kind.label}) "
                        "depends on infinite parameters"
                    )

            for ref in collect_refs(self._objective_function):
                if self.is_valid(ref):
                    self.data_object(ref.index).in_objective = False
            for ref in refs:
                self.data_object(ref.index).in_objective = True
            self._objective_sense = sense
            self._objective_function = float(func) if isinstance(func, Real) else func
            self._mark_dirty()

    def set_objective_function(self, func: Any) -> None:
        self.set_objective(self._objective_sense, func)

    def set_objective_sense(self, sense: Union[ObjectiveSense, str]) -> None:
        with self._lock:
            self._objective_sense = ObjectiveSense(sense)
            self._mark_dirty()

    def objective_sense(self) -> ObjectiveSense:
        return self._objective_sense

    def objective_function(self, target: Optional[type] = None) -> Any:
        """
        Return the objective, optionally viewed as ``target`` type.

        Raises:
            TypeMismatchError: If ``target`` is narrower than the stored function
        """
        if target is None:
            return self._objective_function
        return convert_expression(self._objective_function, target)

    def objective_function_type(self) -> type:
        return type(self._objective_function)

    def used_by_objective(self, ref: RefLike) -> bool:
        ref = self._general(ref)
        self.resolve(ref)
        if ref.kind is ObjectKind.DEPENDENT_PARAMETER:
            return False
        return self.data_object(ref.index).in_objective

    # ------------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------------

    def name(self, ref: RefLike) -> str:
        index = self._index_of(ref)
        data = self.data_object(index)
        if isinstance(index, DependentParameterIndex):
            return data.names[index.param_index]
        return data.name

    def set_name(self, ref: RefLike, name: str) -> None:
        with self._lock:
            if not isinstance(name, str):
                raise TypeError(f"Names must be strings, got {type(name).__name__}")
            index = self._index_of(ref)
            data = self.data_object(index)
            if isinstance(index, DependentParameterIndex):
                data.names[index.param_index] = name
            else:
                data.name = name
            self._invalidate_names(index.kind)
            self._mark_dirty()

    def _named_refs(self, cache: str):
        if cache == "parameter":
            for index, data in self._arenas[ObjectKind.INDEPENDENT_PARAMETER].items():
                yield data.name, self._ref(index)
            for index, data in self._arenas[ObjectKind.FINITE_PARAMETER].items():
                yield data.name, self._ref(index)
            for index, data in self._arenas[ObjectKind.DEPENDENT_PARAMETERS].items():
                for i, name in enumerate(data.names):
                    yield name, self._ref(DependentParameterIndex(index, i))
        elif cache == "variable":
            for kind in (
                ObjectKind.INFINITE_VARIABLE,
                ObjectKind.REDUCED_VARIABLE,
                ObjectKind.POINT_VARIABLE,
                ObjectKind.HOLD_VARIABLE,
            ):
                for index, data in self._arenas[kind].items():
                    yield data.name, self._ref(index)
        else:
            for index, data in self._arenas[ObjectKind.CONSTRAINT].items():
                yield data.name, index

    def _by_name(self, cache: str, name: str):
        with self._lock:
            lookup = self._name_caches[cache]
            if lookup is None:
                lookup = {}
                for obj_name, obj in self._named_refs(cache):
                    if obj_name:
                        lookup.setdefault(obj_name, []).append(obj)
                self._name_caches[cache] = lookup
                logging.debug(f"Rebuilt {cache} name cache ({len(lookup)} names)")
            matches = lookup.get(name, [])
        if not matches:
            raise ObjectNotFoundError(f"No {cache} named {name!r}")
        if len(matches) > 1:
            raise AmbiguousNameError(f"{len(matches)} {cache}s are named {name!r}")
        return matches[0]

    def parameter_by_name(self, name: str) -> GeneralVariableRef:
        return self._by_name("parameter", name)

    def variable_by_name(self, name: str) -> GeneralVariableRef:
        return self._by_name("variable", name)

    def constraint_by_name(self, name: str) -> ConstraintRef:
        return self._constraint_ref(self._by_name("constraint", name))

    # ------------------------------------------------------------------------
    # Dependency queries
    # ------------------------------------------------------------------------

    def dependents_of(
        self, ref: RefLike, kind: Optional[ObjectKind] = None
    ) -> List[ObjectIndex]:
        """Indices of the objects that depend on ``ref`` (optionally one kind)."""
        index = self._index_of(ref)
        if index.kind is ObjectKind.CONSTRAINT:
            return []
        dependents = self._dependents(self._ref(index))
        return dependents.of(kind) if kind is not None else dependents.all()

    def used_by_constraint(self, ref: RefLike) -> bool:
        return bool(self.dependents_of(ref, ObjectKind.CONSTRAINT))

    def used_by_measure(self, ref: RefLike) -> bool:
        return bool(self.dependents_of(ref, ObjectKind.MEASURE))

    def is_used(self, ref: RefLike) -> bool:
        return bool(self.dependents_of(ref)) or self.used_by_objective(ref)

    # ------------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------------

    def _direct_dependents(self, index: ObjectIndex) -> List[ObjectIndex]:
        data = self.data_object(index)
        if index.kind is ObjectKind.DEPENDENT_PARAMETERS:
            result = []
            for dependents in data.param_dependents:
                result += [i for i in dependents.all() if i not in result]
            return result
        return data.dependents.all()

    def _blockers(self, index: ObjectIndex) -> Dict[ObjectKind, int]:
        counts: Dict[ObjectKind, int] = {}
        for dependent in self._direct_dependents(index):
            counts[dependent.kind] = counts.get(dependent.kind, 0) + 1
        return counts

    def _cascade_order(self, root: ObjectIndex) -> List[ObjectIndex]:
        plan = DeletionPlan(root)
        stack = [root]
        visited = {root}
        while stack:
            current = stack.pop()
            for dependent in self._direct_dependents(current):
                plan.add_dependent(current, dependent)
                if dependent not in visited:
                    visited.add(dependent)
                    stack.append(dependent)
        order = plan.order(_deletion_sort_key)
        logging.debug(f"Cascade plan for {root!r}: {order!r}")
        return order

    def delete(self, ref: RefLike) -> None:
        """
        Delete an object.

        Deleting a dependent parameter deletes its whole group. Terms of the
        object are removed from the objective; owned info constraints go with
        their variable.

        Raises:
            ObjectNotFoundError: If the object is already gone
            ObjectInUseError: If dependents exist and the policy is BLOCK
        """
        with self._lock:
            index = self._index_of(ref)
            if isinstance(index, DependentParameterIndex):
                index = index.object_index
            data = self.data_object(index)
            if index.kind is ObjectKind.CONSTRAINT and data.is_info_constraint:
                self._delete_owned_info_constraint(index, data)
                return

            if self.deletion_policy is DeletionPolicy.CASCADE:
                order = self._cascade_order(index)
            else:
                blockers = self._blockers(index)
                if blockers:
                    summary = ", ".join(
                        f"{count} {kind.label}(s)" for kind, count in blockers.items()
                    )
                    raise ObjectInUseError(
                        f"Cannot delete {self._ref_for(index)!r}, "
                        f"it is used by {summary}",
                        blockers,
                    )
                order = [index]

            for doomed in order:
                self._delete_one(doomed)
            self._mark_dirty()

    def _ref_for(self, index: ObjectIndex):
        if index.kind is ObjectKind.CONSTRAINT:
            return ConstraintRef(self, index)
        if index.kind is ObjectKind.DEPENDENT_PARAMETERS:
            return self._ref(DependentParameterIndex(index, 0))
        return self._ref(index)

    def _delete_owned_info_constraint(
        self, index: ObjectIndex, data: ConstraintData
    ) -> None:
        owner = data.constraint.func
        owner_data = self.data_object(owner.index)
        for slot in _INFO_SLOTS:
            if getattr(owner_data, slot) == index:
                self._delete_info_constraint(owner, slot)
                return
        raise AssertionError(f"Info constraint {index!r} is not owned by {owner!r}")

    def _delete_one(self, index: ObjectIndex) -> None:
        data = self.data_object(index)
        self._unregister(index, self._dependencies(index, data))

        if data.in_objective:
            ref = self._ref(index)
            logging.warning(f"Deleting {ref!r} removes its terms from the objective")
            self._objective_function = remove_ref(self._objective_function, ref)

        if isinstance(data, VariableData):
            for info_index in data.info_constraints():
                self._arenas[ObjectKind.CONSTRAINT].delete(info_index)
            self._invalidate_names(ObjectKind.CONSTRAINT)

        self._arenas[index.kind].delete(index)
        self._invalidate_names(index.kind)
        if index.kind is ObjectKind.HOLD_VARIABLE and data.variable.parameter_bounds:
            self.has_hold_bounds = any(
                hold.variable.parameter_bounds
                for hold in self._arenas[ObjectKind.HOLD_VARIABLE].values()
            )
        logging.debug(f"Deleted {index!r}")

    # ------------------------------------------------------------------------
    # Counting and listing
    # ------------------------------------------------------------------------

    def num_parameters(self) -> int:
        groups = self._arenas[ObjectKind.DEPENDENT_PARAMETERS].values()
        return (
            len(self._arenas[ObjectKind.INDEPENDENT_PARAMETER])
            + len(self._arenas[ObjectKind.FINITE_PARAMETER])
            + sum(len(group.names) for group in groups)
        )

    def num_variables(self) -> int:
        return sum(len(self._arenas[kind]) for kind in VARIABLE_KINDS)

    def num_measures(self) -> int:
        return len(self._arenas[ObjectKind.MEASURE])

    def num_constraints(self) -> int:
        return len(self._arenas[ObjectKind.CONSTRAINT])

    def all_parameters(self) -> List[GeneralVariableRef]:
        return [ref for _, ref in self._named_refs("parameter")]

    def all_variables(self) -> List[GeneralVariableRef]:
        return [ref for _, ref in self._named_refs("variable")]

    def all_measures(self) -> List[GeneralVariableRef]:
        return [self._ref(index) for index in self._arenas[ObjectKind.MEASURE]]

    def all_constraints(self) -> List[ConstraintRef]:
        return [
            self._constraint_ref(index)
            for index in self._arenas[ObjectKind.CONSTRAINT]
        ]

    # ------------------------------------------------------------------------
    # Transcription hand-off
    # ------------------------------------------------------------------------

    def set_optimizer_model_ready(self, ready: bool) -> None:
        self.optimizer_model_ready = bool(ready)

    def set_optimizer(self, optimizer_constructor: Any) -> None:
        with self._lock:
            self.optimizer_constructor = optimizer_constructor
            self._mark_dirty()

    # ------------------------------------------------------------------------
    # Object dictionary
    # ------------------------------------------------------------------------

    def __getitem__(self, name: str) -> Any:
        try:
            return self.obj_dict[name]
        except KeyError:
            raise ObjectNotFoundError(f"No object registered under {name!r}") from None

    def __setitem__(self, name: str, obj: Any) -> None:
        if name in self.obj_dict:
            raise ValueError(f"An object is already registered under {name!r}")
        self.obj_dict[name] = obj

    def __contains__(self, name: str) -> bool:
        return name in self.obj_dict

    def __repr__(self) -> str:
        return (
            f"InfiniteModel(parameters={self.num_parameters()}, "
            f"variables={self.num_variables()}, "
            f"measures={self.num_measures()}, "
            f"constraints={self.num_constraints()})"
        )


def _format_value(value: Any) -> str:
    if isinstance(value, tuple):
        return "[" + ", ".join(f"{v:g}" for v in value) + "]"
    return f"{value:g}"


def create_model(
    optimizer_constructor: Any = None,
    seed: bool = False,
    deletion_policy: DeletionPolicy = DeletionPolicy.BLOCK,
    **integral_defaults,
) -> InfiniteModel:
    """
    Create an infinite model with specified settings.

    Args:
        optimizer_constructor: Factory of the solver backend
        seed: Seed numpy's global random generator with 0
        deletion_policy: Behaviour of ``delete`` when dependents exist
        **integral_defaults: Overrides of ``IntegralDefaults`` fields

    Returns:
        Configured InfiniteModel instance
    """
    return InfiniteModel(
        optimizer_constructor,
        seed=seed,
        deletion_policy=deletion_policy,
        **integral_defaults,
    )
