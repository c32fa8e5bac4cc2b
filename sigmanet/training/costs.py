"""Cost functions paired with their output-layer error signal.

Each pairing couples the cost reported during evaluation with the delta used
to seed back-propagation, so the gradient that training follows is the
gradient of the cost that is reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np

from ..core.activations import sigmoid_prime
from ..core.errors import DimensionError
from ..core.matrix import Matrix, hadamard_product, subtract

EPSILON = 1e-12

CostFn = Callable[[Matrix, Matrix], float]
DeltaFn = Callable[[Matrix, Matrix, Matrix], Matrix]


def mean_square_error(y_hat: Matrix, y: Matrix) -> float:
    """Return ``0.5 * sum((y_hat - y) ** 2)``."""

    error = subtract(y_hat, y).to_numpy()
    return float(0.5 * np.sum(error * error))


def cross_entropy_cost(y_hat: Matrix, y: Matrix) -> float:
    """Binary cross-entropy summed over every output.

    Activations are clamped to ``[EPSILON, 1 - EPSILON]`` so a saturated
    output yields a large finite cost instead of ``inf``/``nan``.
    """

    if y_hat.shape != y.shape:
        raise DimensionError(
            f"Prediction shape {y_hat.shape} does not match label shape {y.shape}"
        )
    p = np.clip(y_hat.to_numpy(), EPSILON, 1.0 - EPSILON)
    t = y.to_numpy()
    return float(-np.sum(t * np.log(p) + (1.0 - t) * np.log(1.0 - p)))


def _quadratic_delta(activation: Matrix, z: Matrix, y: Matrix) -> Matrix:
    return hadamard_product(subtract(activation, y), sigmoid_prime(z))


def _cross_entropy_delta(activation: Matrix, z: Matrix, y: Matrix) -> Matrix:
    # sigma'(z) cancels against the cross-entropy derivative
    return subtract(activation, y)


@dataclass(frozen=True)
class CostPairing:
    """A cost together with the output delta ``dC/dz`` it implies."""

    name: str
    cost: CostFn
    delta: DeltaFn


PAIRINGS: Dict[str, CostPairing] = {
    "cross_entropy": CostPairing("cross_entropy", cross_entropy_cost, _cross_entropy_delta),
    "quadratic": CostPairing("quadratic", mean_square_error, _quadratic_delta),
}


def get_pairing(name: str) -> CostPairing:
    try:
        return PAIRINGS[name]
    except KeyError as exc:
        available = ", ".join(sorted(PAIRINGS))
        raise ValueError(f"Unknown cost {name!r}. Available costs: {available}") from exc


__all__ = [
    "EPSILON",
    "PAIRINGS",
    "CostPairing",
    "cross_entropy_cost",
    "get_pairing",
    "mean_square_error",
]
