"""
InfOpt Measures - Discrete Approximations of Integrals
======================================================

A measure approximates

    integral over T of f(tau) w(tau) dtau  ~  sum_i alpha_i f(tau_i) w(tau_i)

The coefficients ``alpha_i``, the support label that picks the ``tau_i`` and the
weight function ``w`` are stored as given and consumed by transcription. Once
built, measure data is read-only: the coefficient vector is a non-writeable
numpy array.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

import numpy as np

from .expressions import collect_refs
from .parameters import USER_DEFINED


def default_weight(_support) -> float:
    """Unit weight."""
    return 1.0


def _frozen_coefficients(coefficients: Sequence[float]) -> np.ndarray:
    array = np.array(coefficients, dtype=float).reshape(-1)
    array.setflags(write=False)
    return array


class AbstractMeasureData:
    """Base class of measure approximation data."""

    def integrated_refs(self) -> Tuple[Any, ...]:
        raise NotImplementedError


@dataclass(frozen=True, eq=False)
class DiscreteMeasureData(AbstractMeasureData):
    """
    One-dimensional measure data.

    Attributes:
        parameter_ref: The infinite parameter integrated over
        coefficients: Read-only vector ``alpha``
        label: Support label selecting the ``tau_i``
        name: Name given to measures built from this data
        weight_function: Maps a support value to a scalar multiplier
        supports: Optional ``tau_i`` to register on the parameter with ``label``
    """

    parameter_ref: Any
    coefficients: np.ndarray
    label: str = USER_DEFINED
    name: str = "measure"
    weight_function: Callable[[Any], float] = default_weight
    supports: Optional[np.ndarray] = None

    def __post_init__(self):
        coefficients = _frozen_coefficients(self.coefficients)
        object.__setattr__(self, "coefficients", coefficients)
        if self.supports is not None:
            object.__setattr__(self, "supports", _frozen_coefficients(self.supports))

    def integrated_refs(self) -> Tuple[Any, ...]:
        return (self.parameter_ref,)


@dataclass(frozen=True, eq=False)
class MultiDiscreteMeasureData(AbstractMeasureData):
    """
    Multi-dimensional measure data over several parameters (typically one
    dependent group). ``supports`` has one row per parameter.
    """

    parameter_refs: Tuple[Any, ...]
    coefficients: np.ndarray
    label: str = USER_DEFINED
    name: str = "measure"
    weight_function: Callable[[Any], float] = default_weight
    supports: Optional[np.ndarray] = None

    def __post_init__(self):
        coefficients = _frozen_coefficients(self.coefficients)
        object.__setattr__(self, "parameter_refs", tuple(self.parameter_refs))
        object.__setattr__(self, "coefficients", coefficients)
        if self.supports is not None:
            supports = np.array(self.supports, dtype=float, ndmin=2)
            supports.setflags(write=False)
            object.__setattr__(self, "supports", supports)

    def integrated_refs(self) -> Tuple[Any, ...]:
        return self.parameter_refs


@dataclass(frozen=True, eq=False)
class Measure:
    """A measure of ``func`` over the parameters named by ``data``."""

    func: Any
    data: AbstractMeasureData

    def refs(self):
        """References the measure depends on: its expression and its parameters."""
        seen = []
        for ref in list(collect_refs(self.func)) + list(self.data.integrated_refs()):
            if ref not in seen:
                seen.append(ref)
        return seen
