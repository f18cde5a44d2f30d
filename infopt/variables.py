"""
InfOpt Variables - Raw Variable Objects
=======================================

Raw value objects for the four variable kinds. They hold references, never the
referenced objects: validating that a reference is live and of the right kind is
done by the model when the variable is inserted.

- ``InfiniteVariable``: decision function of one or more infinite parameters
- ``ReducedInfiniteVariable``: infinite variable with some parameters fixed
- ``PointVariable``: infinite variable evaluated at a full parameter point
- ``HoldVariable``: finite variable, optionally held over a parameter sub-domain
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from .bounds import ParameterBounds
from .errors import InvalidBoundsError
from .expressions import flatten


@dataclass
class VariableInfo:
    """
    Standard optimization variable metadata.

    ``None`` means the attribute is not set. Binary and integer are exclusive.
    """

    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None
    fix_value: Optional[float] = None
    start: Optional[float] = None
    binary: bool = False
    integer: bool = False

    def __post_init__(self):
        if self.binary and self.integer:
            raise ValueError("A variable cannot be both binary and integer")
        if (
            self.lower_bound is not None
            and self.upper_bound is not None
            and self.lower_bound > self.upper_bound
        ):
            raise InvalidBoundsError(
                f"Variable lower bound {self.lower_bound:g} exceeds upper bound "
                f"{self.upper_bound:g}"
            )

    @property
    def is_fixed(self) -> bool:
        return self.fix_value is not None

    def updated(self, **changes) -> "VariableInfo":
        return replace(self, **changes)


@dataclass
class InfiniteVariable:
    """
    Attributes:
        info: Variable metadata
        parameter_refs: One element per parameter argument: an independent
            parameter reference, or a tuple of references from one dependent group
    """

    info: VariableInfo
    parameter_refs: Tuple[Any, ...]

    def __post_init__(self):
        self.parameter_refs = tuple(
            tuple(item) if isinstance(item, (tuple, list)) else item
            for item in self.parameter_refs
        )

    @property
    def flat_parameter_refs(self) -> Tuple[Any, ...]:
        return tuple(flatten(self.parameter_refs))


@dataclass
class ReducedInfiniteVariable:
    """
    Attributes:
        infinite_variable_ref: The variable being reduced
        eval_supports: Flattened parameter position -> fixed value
    """

    infinite_variable_ref: Any
    eval_supports: Dict[int, float] = field(default_factory=dict)

    def __post_init__(self):
        self.eval_supports = {int(k): float(v) for k, v in self.eval_supports.items()}


@dataclass
class PointVariable:
    """
    Attributes:
        info: Variable metadata (defaults to the infinite variable's)
        infinite_variable_ref: The evaluated variable
        parameter_values: Values matching the structure of ``parameter_refs``
    """

    info: VariableInfo
    infinite_variable_ref: Any
    parameter_values: Tuple[Any, ...]

    def __post_init__(self):
        self.parameter_values = tuple(
            tuple(float(v) for v in item)
            if isinstance(item, (tuple, list))
            else float(item)
            for item in self.parameter_values
        )


@dataclass
class HoldVariable:
    info: VariableInfo
    parameter_bounds: ParameterBounds = field(default_factory=ParameterBounds)
