"""Activation utilities for SigmaNet."""

from __future__ import annotations

import numpy as np

from .matrix import Matrix


def _sigmoid(x: np.ndarray) -> np.ndarray:
    # exp(-logaddexp(0, -x)) == 1 / (1 + exp(-x)) without overflow for large |x|
    return np.exp(-np.logaddexp(0.0, -x))


def sigmoid(z: Matrix) -> Matrix:
    """Return the elementwise logistic sigmoid of ``z``."""

    return Matrix(_sigmoid(z.to_numpy()))


def sigmoid_prime(z: Matrix) -> Matrix:
    """Return the derivative of the sigmoid evaluated at ``z``."""

    s = _sigmoid(z.to_numpy())
    return Matrix(s * (1.0 - s))


def sigmoid_scalar(x: float) -> float:
    """Scalar sigmoid usable with :func:`~sigmanet.core.matrix.map_elements`."""

    return float(_sigmoid(np.float64(x)))


__all__ = ["sigmoid", "sigmoid_prime", "sigmoid_scalar"]
