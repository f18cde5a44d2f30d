"""
InfOpt Constraints - Raw Constraint Objects
===========================================

``ScalarConstraint`` pairs an expression with a membership set.
``BoundedScalarConstraint`` restricts it to a parameter sub-domain and keeps
two bounds: ``bounds`` is the effective restriction after merging in the bounds
of hold variables the expression uses, ``orig_bounds`` is what the author gave.
"""

from dataclasses import dataclass, field
from typing import Any

from .bounds import ParameterBounds
from .sets import ConstraintSet


@dataclass
class ScalarConstraint:
    func: Any
    set: ConstraintSet


@dataclass
class BoundedScalarConstraint(ScalarConstraint):
    bounds: ParameterBounds = field(default_factory=ParameterBounds)
    orig_bounds: ParameterBounds = None

    def __post_init__(self):
        if self.orig_bounds is None:
            self.orig_bounds = self.bounds.copy()
