"""
InfOpt - Infinite-Dimensional Optimization Model Store

An in-memory store for infinite-dimensional optimization models: parameters
with their supports, variables, measures, constraints and the objective, kept
referentially consistent under insertion, renaming and deletion.
"""

__version__ = "0.1.0"

# Storage identities
from .indices import DependentParameterIndex, ObjectIndex, ObjectKind

# Errors
from .errors import (
    AmbiguousNameError,
    DimensionMismatchError,
    EmptyIntersectionError,
    InfOptError,
    InvalidBoundsError,
    InvalidReferenceKindError,
    NotFiniteError,
    ObjectInUseError,
    ObjectNotFoundError,
    OutOfDomainError,
    OwningModelMismatchError,
    TypeMismatchError,
)

# Expressions
from .expressions import AffExpr, QuadExpr, convert_expression

# Sets, parameters and supports
from .sets import (
    CollectionSet,
    EqualTo,
    GreaterThan,
    Integer,
    Interval,
    IntervalSet,
    LessThan,
    MultiDistributionSet,
    UniDistributionSet,
    ZeroOne,
)
from .parameters import (
    ALL,
    MC_SAMPLE,
    MEASURE_BOUND,
    MIXTURE,
    UNIFORM_GRID,
    USER_DEFINED,
    WEIGHTED_SAMPLE,
    DependentParameters,
    FiniteParameter,
    IndependentParameter,
    SupportMap,
    SupportView,
)

# Raw objects
from .bounds import ParameterBounds
from .constraints import BoundedScalarConstraint, ScalarConstraint
from .measures import DiscreteMeasureData, Measure, MultiDiscreteMeasureData
from .variables import (
    HoldVariable,
    InfiniteVariable,
    PointVariable,
    ReducedInfiniteVariable,
    VariableInfo,
)

# References and the model
from .references import (
    DependentParameterRef,
    FiniteConstraintRef,
    FiniteParameterRef,
    GeneralVariableRef,
    HoldVariableRef,
    IndependentParameterRef,
    InfiniteConstraintRef,
    InfiniteVariableRef,
    MeasureRef,
    PointVariableRef,
    ReducedInfiniteVariableRef,
    dispatch_variable_ref,
)
from .model import (
    DeletionPolicy,
    InfiniteModel,
    IntegralDefaults,
    ObjectiveSense,
    create_model,
)

__all__ = [
    # Model
    "InfiniteModel",
    "create_model",
    "DeletionPolicy",
    "ObjectiveSense",
    "IntegralDefaults",
    # Indices and references
    "ObjectKind",
    "ObjectIndex",
    "DependentParameterIndex",
    "GeneralVariableRef",
    "IndependentParameterRef",
    "DependentParameterRef",
    "FiniteParameterRef",
    "InfiniteVariableRef",
    "ReducedInfiniteVariableRef",
    "PointVariableRef",
    "HoldVariableRef",
    "MeasureRef",
    "InfiniteConstraintRef",
    "FiniteConstraintRef",
    "dispatch_variable_ref",
    # Sets
    "IntervalSet",
    "UniDistributionSet",
    "MultiDistributionSet",
    "CollectionSet",
    "EqualTo",
    "GreaterThan",
    "LessThan",
    "Interval",
    "ZeroOne",
    "Integer",
    # Parameters and supports
    "IndependentParameter",
    "DependentParameters",
    "FiniteParameter",
    "SupportMap",
    "SupportView",
    "ALL",
    "USER_DEFINED",
    "UNIFORM_GRID",
    "MC_SAMPLE",
    "WEIGHTED_SAMPLE",
    "MEASURE_BOUND",
    "MIXTURE",
    # Raw objects
    "VariableInfo",
    "InfiniteVariable",
    "ReducedInfiniteVariable",
    "PointVariable",
    "HoldVariable",
    "ParameterBounds",
    "Measure",
    "DiscreteMeasureData",
    "MultiDiscreteMeasureData",
    "ScalarConstraint",
    "BoundedScalarConstraint",
    # Expressions
    "AffExpr",
    "QuadExpr",
    "convert_expression",
    # Errors
    "InfOptError",
    "ObjectNotFoundError",
    "OwningModelMismatchError",
    "InvalidReferenceKindError",
    "ObjectInUseError",
    "OutOfDomainError",
    "DimensionMismatchError",
    "EmptyIntersectionError",
    "InvalidBoundsError",
    "TypeMismatchError",
    "NotFiniteError",
    "AmbiguousNameError",
]
