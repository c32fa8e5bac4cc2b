"""Core numerical primitives for SigmaNet."""

from . import activations, errors, matrix, types

__all__ = ["activations", "errors", "matrix", "types"]
