"""
InfOpt Expressions - Minimal Algebraic Containers
=================================================

The model store only needs to know which references an expression mentions and
how wide its type is. This module provides the small containers the rest of the
package builds and inspects:

- ``AbstractVariableRef``: base class of reference types (gains arithmetic)
- ``AffExpr``: constant + sum of coefficient * reference
- ``QuadExpr``: ``AffExpr`` + sum of coefficient * reference * reference

Expression widths are ordered ``Number < reference < AffExpr < QuadExpr``.
Widening is always allowed; narrowing only succeeds when no information is lost.

Example:
    expr = 2 * x + y - 3      # AffExpr
    quad = x * y + expr       # QuadExpr
    list(collect_refs(quad))  # [x, y]
"""

from numbers import Real
from typing import Any, Dict, Iterator, List, Tuple

from .errors import TypeMismatchError


class ExpressionArithmetic:
    """Operator overloads shared by references and expressions."""

    def __add__(self, other):
        return add(self, other)

    def __radd__(self, other):
        return add(other, self)

    def __sub__(self, other):
        return add(self, multiply(-1.0, other))

    def __rsub__(self, other):
        return add(other, multiply(-1.0, self))

    def __neg__(self):
        return multiply(-1.0, self)

    def __pos__(self):
        return self

    def __mul__(self, other):
        return multiply(self, other)

    def __rmul__(self, other):
        return multiply(other, self)

    def __truediv__(self, other):
        if not isinstance(other, Real):
            return NotImplemented
        return multiply(1.0 / other, self)


class AbstractVariableRef(ExpressionArithmetic):
    """Base class of every reference that may appear as an expression term."""

    pass


class AffExpr(ExpressionArithmetic):
    """
    Affine expression ``constant + sum(coef * ref)``.

    Zero coefficients are kept until ``drop_zeros`` is called, equality ignores
    them.
    """

    def __init__(self, constant: float = 0.0, terms: Dict[Any, float] = None):
        self.constant = float(constant)
        self.terms: Dict[Any, float] = {}
        for ref, coef in (terms or {}).items():
            self.add_term(ref, coef)

    def add_term(self, ref: Any, coef: float) -> None:
        self.terms[ref] = self.terms.get(ref, 0.0) + float(coef)

    def copy(self) -> "AffExpr":
        return AffExpr(self.constant, self.terms)

    def drop_zeros(self) -> "AffExpr":
        self.terms = {ref: coef for ref, coef in self.terms.items() if coef != 0}
        return self

    def refs(self) -> Iterator[Any]:
        yield from self.terms

    def __eq__(self, other) -> bool:
        if isinstance(other, QuadExpr):
            return other == self
        if isinstance(other, (Real, AbstractVariableRef)) and not isinstance(
            other, AffExpr
        ):
            other = to_affine(other)
        if not isinstance(other, AffExpr):
            return NotImplemented
        return self.constant == other.constant and _nonzero(self.terms) == _nonzero(
            other.terms
        )

    __hash__ = None

    def __repr__(self) -> str:
        parts = [f"{coef:g} {ref!r}" for ref, coef in self.terms.items()]
        if self.constant or not parts:
            parts.append(f"{self.constant:g}")
        return " + ".join(parts)


class QuadExpr(ExpressionArithmetic):
    """Quadratic expression ``aff + sum(coef * ref1 * ref2)``."""

    def __init__(self, aff: AffExpr = None, terms: Dict[Tuple[Any, Any], float] = None):
        self.aff = aff.copy() if aff is not None else AffExpr()
        self.terms: Dict[Tuple[Any, Any], float] = {}
        for (ref1, ref2), coef in (terms or {}).items():
            self.add_term(ref1, ref2, coef)

    def add_term(self, ref1: Any, ref2: Any, coef: float) -> None:
        key = (ref1, ref2)
        if key not in self.terms and (ref2, ref1) in self.terms:
            key = (ref2, ref1)
        self.terms[key] = self.terms.get(key, 0.0) + float(coef)

    def copy(self) -> "QuadExpr":
        return QuadExpr(self.aff, self.terms)

    def refs(self) -> Iterator[Any]:
        yield from self.aff.refs()
        for ref1, ref2 in self.terms:
            yield ref1
            yield ref2

    def __eq__(self, other) -> bool:
        if not isinstance(other, QuadExpr):
            if isinstance(other, (Real, AbstractVariableRef)):
                other = QuadExpr(to_affine(other))
            else:
                return NotImplemented
        return self.aff == other.aff and _nonzero(self.terms) == _nonzero(other.terms)

    __hash__ = None

    def __repr__(self) -> str:
        parts = [f"{coef:g} {r1!r}*{r2!r}" for (r1, r2), coef in self.terms.items()]
        return " + ".join(parts + [repr(self.aff)])


def _nonzero(terms: Dict) -> Dict:
    return {key: coef for key, coef in terms.items() if coef != 0}


# ============================================================================
# ARITHMETIC
# ============================================================================


def to_affine(value: Any) -> AffExpr:
    """Widen a number, reference or affine expression to a fresh ``AffExpr``."""
    if isinstance(value, AffExpr):
        return value.copy()
    if isinstance(value, Real):
        return AffExpr(float(value))
    if isinstance(value, AbstractVariableRef) and not isinstance(value, QuadExpr):
        return AffExpr(0.0, {value: 1.0})
    raise TypeError(f"Cannot use {type(value).__name__} as an affine expression")


def to_quadratic(value: Any) -> QuadExpr:
    """Widen any supported expression to a fresh ``QuadExpr``."""
    if isinstance(value, QuadExpr):
        return value.copy()
    return QuadExpr(to_affine(value))


def add(lhs: Any, rhs: Any):
    if isinstance(lhs, Real) and isinstance(rhs, Real):
        return lhs + rhs
    if isinstance(lhs, QuadExpr) or isinstance(rhs, QuadExpr):
        result = to_quadratic(lhs)
        other = to_quadratic(rhs)
        result.aff = add(result.aff, other.aff)
        for (ref1, ref2), coef in other.terms.items():
            result.add_term(ref1, ref2, coef)
        return result
    result = to_affine(lhs)
    other = to_affine(rhs)
    result.constant += other.constant
    for ref, coef in other.terms.items():
        result.add_term(ref, coef)
    return result


def multiply(lhs: Any, rhs: Any):
    if isinstance(lhs, Real) and isinstance(rhs, Real):
        return lhs * rhs
    if isinstance(rhs, Real):
        lhs, rhs = rhs, lhs
    if isinstance(lhs, Real):
        if isinstance(rhs, QuadExpr):
            result = QuadExpr(multiply(lhs, rhs.aff))
            for (ref1, ref2), coef in rhs.terms.items():
                result.add_term(ref1, ref2, lhs * coef)
            return result
        aff = to_affine(rhs)
        return AffExpr(
            lhs * aff.constant, {ref: lhs * coef for ref, coef in aff.terms.items()}
        )
    if isinstance(lhs, QuadExpr) or isinstance(rhs, QuadExpr):
        raise TypeError("Products of degree higher than two are not supported")
    left = to_affine(lhs)
    right = to_affine(rhs)
    aff = AffExpr(left.constant * right.constant)
    if left.constant:
        aff = add(aff, multiply(left.constant, AffExpr(0.0, right.terms)))
    if right.constant:
        aff = add(aff, multiply(right.constant, AffExpr(0.0, left.terms)))
    result = QuadExpr(aff)
    for ref1, coef1 in left.terms.items():
        for ref2, coef2 in right.terms.items():
            result.add_term(ref1, ref2, coef1 * coef2)
    return result


# ============================================================================
# INSPECTION
# ============================================================================


def collect_refs(expr: Any) -> Iterator[Any]:
    """Yield each reference mentioned by ``expr`` once, in order of appearance."""
    if isinstance(expr, Real):
        return
    if isinstance(expr, (AffExpr, QuadExpr)):
        seen = set()
        for ref in expr.refs():
            if ref not in seen:
                seen.add(ref)
                yield ref
        return
    if isinstance(expr, AbstractVariableRef):
        yield expr
        return
    raise TypeError(f"Unsupported expression type {type(expr).__name__}")


def remove_ref(expr: Any, ref: Any):
    """Return a copy of ``expr`` with every term that mentions ``ref`` dropped."""
    if isinstance(expr, Real):
        return expr
    if isinstance(expr, QuadExpr):
        result = QuadExpr(remove_ref(expr.aff, ref))
        for (ref1, ref2), coef in expr.terms.items():
            if ref1 != ref and ref2 != ref:
                result.add_term(ref1, ref2, coef)
        return result
    if isinstance(expr, AffExpr):
        return AffExpr(
            expr.constant, {r: coef for r, coef in expr.terms.items() if r != ref}
        )
    return AffExpr() if expr == ref else expr


def expression_rank(value: Any) -> int:
    """Width of an expression or expression type (0 number ... 3 quadratic)."""
    kind = value if isinstance(value, type) else type(value)
    if issubclass(kind, QuadExpr):
        return 3
    if issubclass(kind, AffExpr):
        return 2
    if issubclass(kind, AbstractVariableRef):
        return 1
    if issubclass(kind, Real):
        return 0
    raise TypeError(f"Unsupported expression type {kind.__name__}")


def convert_expression(expr: Any, target: type):
    """
    View ``expr`` as ``target`` type.

    Widening always succeeds. Narrowing succeeds only when exact: a quadratic
    without quadratic terms, an affine with only a constant, or an affine made
    of a single unit term.

    Raises:
        TypeMismatchError: If the conversion would drop information
    """
    if isinstance(expr, target):
        return expr
    target_rank = expression_rank(target)
    if expression_rank(expr) <= target_rank:
        if target_rank == 3:
            return to_quadratic(expr)
        if target_rank == 2:
            return to_affine(expr)
        if target_rank == 0:
            return float(expr)

    narrowed = expr
    if isinstance(narrowed, QuadExpr) and not _nonzero(narrowed.terms):
        narrowed = narrowed.aff.copy()
    if isinstance(narrowed, AffExpr) and target_rank < 2:
        terms = _nonzero(narrowed.terms)
        if not terms and target_rank == 0:
            narrowed = narrowed.constant
        elif len(terms) == 1 and narrowed.constant == 0 and target_rank == 1:
            (ref, coef), = terms.items()
            if coef == 1:
                narrowed = ref
    if isinstance(narrowed, target):
        return narrowed
    raise TypeMismatchError(
        f"Cannot view an expression of type {type(expr).__name__} as "
        f"{target.__name__} without losing information"
    )


def flatten(values: Any) -> List[Any]:
    """Flatten one level of tuple/list nesting (vector-tuple layout)."""
    result = []
    for item in values:
        if isinstance(item, (tuple, list)):
            result.extend(item)
        else:
            result.append(item)
    return result
