"""SigmaNet public API."""

from .core import activations, errors, matrix, types  # noqa: F401
from .core.errors import DimensionError, ModelLoadError, TopologyError
from .core.matrix import Matrix
from .core.types import Annotation, EpochRecord, Prediction
from .training.layer import Layer
from .training.network import Network
from .training.pipelines import load_preset, presets, run_pipeline

__all__ = [
    "Annotation",
    "DimensionError",
    "EpochRecord",
    "Layer",
    "Matrix",
    "ModelLoadError",
    "Network",
    "Prediction",
    "TopologyError",
    "activations",
    "errors",
    "load_preset",
    "matrix",
    "presets",
    "run_pipeline",
    "types",
]
