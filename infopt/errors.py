"""
InfOpt Errors - Typed Failures of the Model Store
=================================================

Every failure that a modeling call can detect locally is surfaced as one of the
classes below. They are raised synchronously at the offending call and are never
retried: they signal programming or model-consistency mistakes, not transient
faults.

Value-style failures also derive from the matching builtin (``KeyError``,
``ValueError``, ``TypeError``) so callers that only know the builtin still catch
them.
"""

from typing import Dict, Optional


class InfOptError(Exception):
    """Base class of all model store errors."""

    pass


class ObjectNotFoundError(InfOptError, KeyError):
    """Raised when an index or name does not map to a live object."""

    def __str__(self) -> str:
        # KeyError quotes its argument, keep messages readable
        return str(self.args[0]) if self.args else ""


class OwningModelMismatchError(InfOptError, ValueError):
    """Raised when a reference from one model is used with another model."""

    pass


class InvalidReferenceKindError(InfOptError, TypeError):
    """Raised when a reference carries a kind tag no dispatcher knows."""

    pass


class ObjectInUseError(InfOptError):
    """
    Raised when deleting an object that still has recorded dependents.

    Attributes:
        blockers: Number of blocking dependents per dependent kind
    """

    def __init__(self, message: str, blockers: Optional[Dict] = None):
        super().__init__(message)
        self.blockers = dict(blockers or {})


class OutOfDomainError(InfOptError, ValueError):
    """Raised when a value lies outside a parameter's characterizing set."""

    pass


class DimensionMismatchError(InfOptError, ValueError):
    """Raised when the arity of values does not match the object they describe."""

    pass


class EmptyIntersectionError(InfOptError, ValueError):
    """Raised when merging parameter bounds leaves an empty interval."""

    pass


class InvalidBoundsError(InfOptError, ValueError):
    """Raised for intervals with lower > upper or bounds on non-infinite parameters."""

    pass


class TypeMismatchError(InfOptError, TypeError):
    """Raised when the objective is requested as a narrower expression type."""

    pass


class NotFiniteError(InfOptError, ValueError):
    """Raised when an infinite quantity is used where a finite one is required."""

    pass


class AmbiguousNameError(InfOptError, ValueError):
    """Raised when a name lookup matches more than one object."""

    pass
