"""Sigmoid feed-forward network trained with mini-batch gradient descent."""

from __future__ import annotations

import zipfile
import zlib
from pathlib import Path
from typing import List, Mapping, Sequence, Tuple

import numpy as np

from ..core.activations import sigmoid, sigmoid_prime
from ..core.errors import DimensionError, ModelLoadError, TopologyError
from ..core.matrix import (
    Matrix,
    add,
    arg_max_row,
    dot_product,
    hadamard_product,
    multiply,
    subtract,
    transpose,
)
from ..core.types import (
    Dataset,
    EpochRecord,
    ForwardContext,
    LayerGradient,
    Prediction,
)
from ..utils import SeedLike, as_generator
from .costs import CostPairing, get_pairing
from .layer import Layer


class Network:
    """An ordered stack of sigmoid layers.

    The input layer is implicit and carries no parameters, so a network built
    with ``Network(3, [6, 2])`` has two :class:`Layer` objects and a layer
    count of three.
    """

    def __init__(
        self,
        inputs: int,
        layer_sizes: Sequence[int],
        *,
        cost: str = "cross_entropy",
        rng: SeedLike = None,
    ) -> None:
        sizes = [int(size) for size in layer_sizes]
        if not sizes:
            raise TopologyError("A network needs at least one layer")
        if inputs < 1 or any(size < 1 for size in sizes):
            raise TopologyError("There must be at least one node in each layer")
        rng = as_generator(rng)
        fan_in = [int(inputs)] + sizes[:-1]
        layers = [Layer.initialise(i, o, rng) for i, o in zip(fan_in, sizes)]
        self._init_from(layers, cost)

    @classmethod
    def from_layers(cls, layers: Sequence[Layer], *, cost: str = "cross_entropy") -> "Network":
        """Build a network around existing layers, checking that their shapes chain."""

        layers = list(layers)
        if not layers:
            raise TopologyError("A network needs at least one layer")
        for prev, nxt in zip(layers[:-1], layers[1:]):
            if nxt.inputs != prev.outputs:
                raise TopologyError(
                    f"Layer expecting {nxt.inputs} inputs follows a layer "
                    f"with {prev.outputs} outputs"
                )
        net = cls.__new__(cls)
        net._init_from(layers, cost)
        return net

    def _init_from(self, layers: List[Layer], cost: str) -> None:
        self._pairing: CostPairing = get_pairing(cost)
        self._layers: Tuple[Layer, ...] = tuple(layers)

    # ------------------------------------------------------------------
    # Topology

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return self._layers

    @property
    def input_nodes(self) -> int:
        return self._layers[0].inputs

    @property
    def output_nodes(self) -> int:
        return self._layers[-1].outputs

    @property
    def layer_count(self) -> int:
        return len(self._layers) + 1

    @property
    def cost(self) -> str:
        return self._pairing.name

    def describe(self) -> List[int]:
        return [self.input_nodes] + [layer.outputs for layer in self._layers]

    def parameter_count(self) -> int:
        return int(sum(layer.parameter_count() for layer in self._layers))

    def __repr__(self) -> str:
        return f"Network(dims={self.describe()}, cost={self.cost!r})"

    # ------------------------------------------------------------------
    # Propagation

    def forward(self, inputs: Matrix) -> tuple[Matrix, ForwardContext]:
        """Run a forward pass and return the output with its context."""

        if inputs.shape != (self.input_nodes, 1):
            raise DimensionError(
                f"Expected input of shape ({self.input_nodes}, 1), got {inputs.shape}"
            )
        pre_activations: list[Matrix] = []
        activations: list[Matrix] = [inputs]
        activation = inputs
        for layer in self._layers:
            z = add(dot_product(layer.weights, activation), layer.bias)
            activation = sigmoid(z)
            pre_activations.append(z)
            activations.append(activation)
        context = ForwardContext(
            pre_activations=tuple(pre_activations),
            activations=tuple(activations),
        )
        return activation, context

    def forward_prop(self, inputs: Matrix) -> Matrix:
        return self.forward(inputs)[0]

    def back_prop(self, context: ForwardContext, label: Matrix) -> List[LayerGradient]:
        """Return per-layer gradients for the pass captured in ``context``."""

        if len(context.pre_activations) != len(self._layers):
            raise ValueError("Forward context was produced by a different network")
        zs = context.pre_activations
        activations = context.activations
        last = len(self._layers) - 1

        grads: list[LayerGradient | None] = [None] * len(self._layers)
        delta = self._pairing.delta(activations[-1], zs[last], label)
        grads[last] = LayerGradient(
            weights=dot_product(delta, transpose(activations[last])),
            bias=delta,
        )
        for idx in reversed(range(last)):
            error = dot_product(transpose(self._layers[idx + 1].weights), delta)
            delta = hadamard_product(error, sigmoid_prime(zs[idx]))
            grads[idx] = LayerGradient(
                weights=dot_product(delta, transpose(activations[idx])),
                bias=delta,
            )
        return grads  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Training

    def update_with_batch(
        self, batch: Dataset, alpha: float, lam: float, n: int
    ) -> None:
        """Apply one regularised gradient step accumulated over ``batch``.

        ``n`` is the size of the full training set and scales the L2 decay.
        """

        if n < 1:
            raise ValueError("n must be at least 1")
        weight_sums = [Matrix.zeros(*layer.weights.shape) for layer in self._layers]
        bias_sums = [Matrix.zeros(*layer.bias.shape) for layer in self._layers]
        for features, label in batch:
            _, context = self.forward(features)
            for idx, grad in enumerate(self.back_prop(context, label)):
                weight_sums[idx] = add(weight_sums[idx], grad.weights)
                bias_sums[idx] = add(bias_sums[idx], grad.bias)

        decay = 1.0 - (alpha * lam) / n
        for layer, grad_w, grad_b in zip(self._layers, weight_sums, bias_sums):
            layer.update(
                weights=subtract(multiply(layer.weights, decay), multiply(grad_w, alpha)),
                bias=subtract(layer.bias, multiply(grad_b, alpha)),
            )

    def train(
        self,
        training_set: Dataset,
        epochs: int,
        batch_size: int,
        alpha: float,
        lam: float,
        validation_set: Dataset | None = None,
        *,
        rng: SeedLike = None,
        callbacks: Sequence[object] = (),
        drop_remainder: bool = True,
    ) -> List[EpochRecord]:
        """Run mini-batch gradient descent for ``epochs`` epochs.

        Each epoch reshuffles a copy of ``training_set`` and slices it into
        ``len(training_set) // batch_size`` contiguous batches. The trailing
        ``len(training_set) % batch_size`` examples are skipped for that epoch
        unless ``drop_remainder`` is False, in which case they form one final
        short batch.
        """

        if epochs < 0:
            raise ValueError("epochs must be non-negative")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        examples = list(training_set)
        if not examples:
            raise ValueError("training_set must not be empty")
        rng = as_generator(rng)
        n = len(examples)

        history: List[EpochRecord] = []
        for epoch in range(epochs):
            order = rng.permutation(n)
            shuffled = [examples[i] for i in order]
            for batch in self._batches(shuffled, batch_size, drop_remainder):
                self.update_with_batch(batch, alpha, lam, n)

            record = EpochRecord(
                epoch=epoch,
                training_cost=self.evaluate_cost(examples, lam),
                validation_cost=(
                    self.evaluate_cost(validation_set, lam) if validation_set else float("nan")
                ),
                training_accuracy=self.evaluate_accuracy(examples),
                validation_accuracy=(
                    self.evaluate_accuracy(validation_set) if validation_set else float("nan")
                ),
            )
            history.append(record)
            self._emit_epoch(epoch, record, callbacks)
        return history

    @staticmethod
    def _batches(examples: list, batch_size: int, drop_remainder: bool):
        full = len(examples) // batch_size
        for idx in range(full):
            start = idx * batch_size
            yield examples[start : start + batch_size]
        if not drop_remainder and len(examples) % batch_size:
            yield examples[full * batch_size :]

    @staticmethod
    def _emit_epoch(epoch: int, record: EpochRecord, callbacks: Sequence[object]) -> None:
        metrics = record.as_metrics()
        for callback in callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)

    # ------------------------------------------------------------------
    # Evaluation

    def evaluate_cost(self, dataset: Dataset, lam: float) -> float:
        """Mean cost over ``dataset`` plus ``(lam / 2n) * sum(W ** 2)``."""

        examples = _non_empty(dataset)
        n = len(examples)
        cost = 0.0
        for features, label in examples:
            cost += self._pairing.cost(self.forward_prop(features), label) / n
        squared = sum(
            float(np.sum(layer.weights.to_numpy() ** 2)) for layer in self._layers
        )
        return cost + 0.5 * (lam / n) * squared

    def evaluate_accuracy(self, dataset: Dataset) -> float:
        examples = _non_empty(dataset)
        correct = sum(
            1
            for features, label in examples
            if arg_max_row(self.forward_prop(features)) == arg_max_row(label)
        )
        return correct / len(examples)

    def predict(self, dataset: Dataset) -> List[Prediction]:
        return [
            Prediction(
                label=arg_max_row(label),
                predicted=arg_max_row(self.forward_prop(features)),
            )
            for features, label in dataset
        ]

    # ------------------------------------------------------------------
    # Persistence

    def state_dict(self) -> Mapping[str, np.ndarray]:
        state: dict[str, np.ndarray] = {
            "layer_count": np.array(len(self._layers)),
            "cost": np.array(self.cost),
        }
        for idx, layer in enumerate(self._layers):
            state[f"W{idx}"] = layer.weights.to_numpy()
            state[f"b{idx}"] = layer.bias.to_numpy()
        return state

    @classmethod
    def from_state_dict(cls, state: Mapping[str, np.ndarray]) -> "Network":
        """Rebuild a network purely from the parameter shapes in ``state``."""

        if "layer_count" not in state:
            raise KeyError("Missing layer_count in state dict")
        count_field = np.asarray(state["layer_count"])
        if count_field.ndim != 0 or count_field.dtype.kind not in "iu":
            raise ValueError(f"layer_count must be a single integer, got {count_field!r}")
        count = int(count_field)
        cost = str(state["cost"]) if "cost" in state else "cross_entropy"
        layers = []
        for idx in range(count):
            for key in (f"W{idx}", f"b{idx}"):
                if key not in state:
                    raise KeyError(f"Missing parameter {key} in state dict")
            layers.append(Layer(Matrix(state[f"W{idx}"]), Matrix(state[f"b{idx}"])))
        return cls.from_layers(layers, cost=cost)

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as handle:
            np.savez_compressed(handle, **self.state_dict())
        return path

    @classmethod
    def load(cls, path: str | Path) -> "Network":
        path = Path(path)
        if not path.is_file():
            raise ModelLoadError(f"Model file not found: {path}")
        try:
            with np.load(path, allow_pickle=False) as archive:
                state = {key: archive[key] for key in archive.files}
            return cls.from_state_dict(state)
        except (
            zipfile.BadZipFile,
            zlib.error,
            EOFError,
            KeyError,
            NotImplementedError,
            TypeError,
            ValueError,
            OSError,
        ) as exc:
            raise ModelLoadError(f"Could not load model from {path}: {exc}") from exc


def _non_empty(dataset: Dataset | None) -> list:
    examples = list(dataset or [])
    if not examples:
        raise ValueError("Cannot evaluate an empty dataset")
    return examples


__all__ = ["Network"]
