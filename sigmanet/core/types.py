"""Core typing contracts for SigmaNet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple

from .matrix import Matrix


class Annotation(NamedTuple):
    """One training example: a feature column and its one-hot label column."""

    features: Matrix
    label: Matrix


Dataset = Sequence[Annotation | Tuple[Matrix, Matrix]]


class Prediction(NamedTuple):
    """True class index paired with the predicted class index."""

    label: int
    predicted: int


class LayerGradient(NamedTuple):
    """Gradient of the cost with respect to one layer's parameters."""

    weights: Matrix
    bias: Matrix


@dataclass(frozen=True)
class ForwardContext:
    """Values captured during one forward pass.

    ``activations[0]`` is the network input and ``activations[l + 1]`` the
    output of layer ``l``; ``pre_activations[l]`` is that layer's ``z``.
    """

    pre_activations: Tuple[Matrix, ...]
    activations: Tuple[Matrix, ...]

    @property
    def output(self) -> Matrix:
        return self.activations[-1]


@dataclass(frozen=True)
class EpochRecord:
    """Per-epoch cost and accuracy on the training and validation sets."""

    epoch: int
    training_cost: float
    validation_cost: float
    training_accuracy: float
    validation_accuracy: float

    def as_metrics(self) -> dict[str, float]:
        return {
            "train_cost": self.training_cost,
            "val_cost": self.validation_cost,
            "train_accuracy": self.training_accuracy,
            "val_accuracy": self.validation_accuracy,
        }


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`sigmanet.training.pipelines.run_pipeline`."""

    epochs: int
    metrics_path: str
    manifest_path: str
    model_path: str
    summary_path: str = ""
    test_accuracy: float = float("nan")


__all__ = [
    "Annotation",
    "Dataset",
    "EpochRecord",
    "ForwardContext",
    "LayerGradient",
    "Prediction",
    "RunResult",
]
