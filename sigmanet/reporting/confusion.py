"""Confusion matrix and per-class precision/recall for test predictions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..core.types import Prediction


@dataclass(frozen=True)
class ClassificationReport:
    precision: List[float]
    recall: List[float]
    accuracy: float

    def as_dict(self) -> dict:
        return {
            "precision": list(self.precision),
            "recall": list(self.recall),
            "accuracy": self.accuracy,
        }


def model_accuracy(predictions: Sequence[Prediction]) -> float:
    """Fraction of predictions whose class matches the label."""

    if not predictions:
        raise ValueError("No predictions to score")
    return sum(1 for p in predictions if p.label == p.predicted) / len(predictions)


def confusion_matrix(
    predictions: Sequence[Prediction], num_classes: int | None = None
) -> np.ndarray:
    """Counts indexed ``[true label, predicted label]``."""

    if num_classes is None:
        seen = [max(p.label, p.predicted) for p in predictions]
        num_classes = (max(seen) + 1) if seen else 0
    confusion = np.zeros((num_classes, num_classes), dtype=np.int64)
    for label, predicted in predictions:
        confusion[label, predicted] += 1
    return confusion


def classification_report(confusion: np.ndarray) -> ClassificationReport:
    """Per-class precision and recall; undefined ratios are reported as 0.0."""

    confusion = np.asarray(confusion, dtype=np.float64)
    tp = np.diag(confusion)
    predicted = confusion.sum(axis=0)
    actual = confusion.sum(axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        precision = np.where(predicted > 0, tp / predicted, 0.0)
        recall = np.where(actual > 0, tp / actual, 0.0)
    count = confusion.sum()
    accuracy = float(tp.sum() / count) if count else 0.0
    return ClassificationReport(
        precision=[float(v) for v in precision],
        recall=[float(v) for v in recall],
        accuracy=accuracy,
    )


def format_report(confusion: np.ndarray, report: ClassificationReport) -> str:
    lines = [str(np.asarray(confusion)), "============Report============"]
    lines.append(f"{'Precision':>18}{'Recall':>10}")
    for idx, (p, r) in enumerate(zip(report.precision, report.recall)):
        lines.append(f"class {idx}  {p:9.4f} {r:9.4f}")
    lines.append("")
    lines.append(f"Model accuracy: {report.accuracy:.4f}")
    lines.append("==============================")
    return "\n".join(lines)


__all__ = [
    "ClassificationReport",
    "classification_report",
    "confusion_matrix",
    "format_report",
    "model_accuracy",
]
