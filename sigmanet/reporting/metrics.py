"""Epoch metric sinks passed to :meth:`Network.train` as callbacks."""

from __future__ import annotations

import csv
import json
import math
import sys
from pathlib import Path
from typing import Mapping, TextIO


def _numeric(metrics: Mapping[str, float]) -> dict[str, float | None]:
    # json has no nan literal; missing validation metrics become null
    out: dict[str, float | None] = {}
    for key, value in metrics.items():
        if isinstance(value, (int, float)):
            value = float(value)
            out[key] = None if math.isnan(value) else value
    return out


class JsonlSink:
    """Append-only JSONL writer for epoch metrics."""

    def __init__(self, path: str | Path, *, seed: int | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.seed = seed

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record: dict[str, object] = {"epoch": int(epoch), "seed": self.seed}
        record.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Write epoch metrics to CSV with a stable schema."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        row: dict[str, object] = {"epoch": int(epoch)}
        row.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=["epoch", *sorted(row.keys() - {"epoch"})])
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)

    __call__ = on_epoch


class ConsoleSink:
    """Print one progress line per epoch."""

    def __init__(self, epochs: int, examples: int, stream: TextIO | None = None) -> None:
        self.epochs = epochs
        self.examples = examples
        self.stream = stream

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        stream = self.stream or sys.stdout
        stream.write(
            f"Epoch {epoch + 1}/{self.epochs} - {self.examples} examples"
            f" - training: cost {metrics.get('train_cost', math.nan):.5f}"
            f" acc {metrics.get('train_accuracy', math.nan):.5f}"
            f" - validation: cost {metrics.get('val_cost', math.nan):.5f}"
            f" acc {metrics.get('val_accuracy', math.nan):.5f}\n"
        )

    __call__ = on_epoch


class MetricsCapture:
    """Keep every emitted epoch in memory."""

    def __init__(self) -> None:
        self.history: list[tuple[int, Mapping[str, float]]] = []

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self.history.append((int(epoch), {k: float(v) for k, v in metrics.items()}))

    @property
    def last(self) -> Mapping[str, float]:
        return self.history[-1][1] if self.history else {}


__all__ = ["ConsoleSink", "CsvSink", "JsonlSink", "MetricsCapture"]
