"""Deterministic summaries of per-epoch metric logs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping

import numpy as np


def _extract_numeric(records: Iterable[Mapping[str, object]]) -> Mapping[str, list[float]]:
    metrics: dict[str, list[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in {"epoch", "seed"}:
                continue
            if isinstance(value, (int, float)):
                metrics.setdefault(key, []).append(float(value))
    return metrics


def summarise(records: list[Mapping[str, object]]) -> Mapping[str, object]:
    summary_metrics: dict[str, Mapping[str, float]] = {}
    for name, values in _extract_numeric(records).items():
        arr = np.asarray(values, dtype=np.float64)
        summary_metrics[name] = {
            "min": float(np.min(arr)),
            "max": float(np.max(arr)),
            "mean": float(np.mean(arr)),
            "first": float(arr[0]),
            "last": float(arr[-1]),
            "best_epoch": int(np.argmin(arr) if name.endswith("cost") else np.argmax(arr)),
        }
    return {"version": 1, "epochs": len(records), "metrics": summary_metrics}


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path) -> str:
    """Write a summary of ``metrics_jsonl`` to ``out_summary_json``."""

    metrics_path = Path(metrics_jsonl)
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    records: list[Mapping[str, object]] = []
    if metrics_path.exists():
        for line in metrics_path.read_text().splitlines():
            line = line.strip()
            if line:
                records.append(json.loads(line))

    out_path.write_text(json.dumps(summarise(records), sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["summarise", "write_summary"]
