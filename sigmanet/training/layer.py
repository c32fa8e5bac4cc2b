"""A single fully connected sigmoid layer."""

from __future__ import annotations

import numpy as np

from ..core.errors import TopologyError
from ..core.matrix import Matrix
from ..utils import SeedLike, as_generator


def scaled_gaussian(rows: int, cols: int, rng: np.random.Generator) -> Matrix:
    """Gaussian values with mean 0 and standard deviation ``1 / sqrt(cols)``."""

    return Matrix(rng.standard_normal((rows, cols)) / np.sqrt(cols))


class Layer:
    """Weights ``(outputs x inputs)`` and bias ``(outputs x 1)`` of one layer."""

    def __init__(self, weights: Matrix, bias: Matrix) -> None:
        self._check(weights, bias)
        self._weights = weights
        self._bias = bias

    @classmethod
    def initialise(cls, inputs: int, outputs: int, rng: SeedLike = None) -> "Layer":
        if inputs < 1 or outputs < 1:
            raise TopologyError("There must be at least one node in each layer")
        rng = as_generator(rng)
        weights = scaled_gaussian(outputs, inputs, rng)
        bias = scaled_gaussian(outputs, 1, rng)
        return cls(weights, bias)

    @staticmethod
    def _check(weights: Matrix, bias: Matrix) -> None:
        if weights.rows < 1 or weights.cols < 1:
            raise TopologyError(f"Layer weights must be non-empty, got {weights.shape}")
        if bias.shape != (weights.rows, 1):
            raise TopologyError(
                f"Bias shape {bias.shape} does not match weights {weights.shape}"
            )

    @property
    def weights(self) -> Matrix:
        return self._weights

    @property
    def bias(self) -> Matrix:
        return self._bias

    @property
    def inputs(self) -> int:
        return self._weights.cols

    @property
    def outputs(self) -> int:
        return self._weights.rows

    def update(self, weights: Matrix, bias: Matrix) -> None:
        """Replace both parameters with freshly computed values."""

        self._check(weights, bias)
        if weights.shape != self._weights.shape:
            raise TopologyError(
                f"Cannot change layer shape from {self._weights.shape} to {weights.shape}"
            )
        self._weights = weights
        self._bias = bias

    def parameter_count(self) -> int:
        return self._weights.size + self._bias.size

    def __repr__(self) -> str:
        return f"Layer(inputs={self.inputs}, outputs={self.outputs})"


__all__ = ["Layer", "scaled_gaussian"]
