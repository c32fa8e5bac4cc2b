"""Pipeline assembly: dataset, network, training, evaluation and artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

from ..core.types import Annotation, RunResult
from ..data.synthetic import make_blobs
from ..data.utils import deterministic_split
from ..data.vectorize import load_samples, vectorize
from ..reporting.artifacts import write_manifest
from ..reporting.confusion import classification_report, confusion_matrix
from ..reporting.metrics import ConsoleSink, CsvSink, JsonlSink, MetricsCapture
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .network import Network

_PRESETS: Dict[str, Mapping[str, object]] = {
    "blobs-small": {
        "data": {
            "name": "blobs",
            "options": {"n_samples": 240, "n_features": 2, "n_classes": 3, "seed": 0},
            "val_split": 0.15,
            "test_split": 0.15,
        },
        "model": {"hidden": [8], "cost": "cross_entropy"},
        "train": {
            "epochs": 30,
            "batch_size": 10,
            "lr": 0.5,
            "lambda": 0.005,
            "seed": 7,
            "run_dir": "runs/blobs-small",
            "enable_plots": False,
        },
    },
    "blobs-deep": {
        "data": {
            "name": "blobs",
            "options": {"n_samples": 600, "n_features": 4, "n_classes": 5, "seed": 1},
            "val_split": 0.1,
            "test_split": 0.2,
        },
        "model": {"hidden": [16, 12], "cost": "cross_entropy"},
        "train": {
            "epochs": 40,
            "batch_size": 16,
            "lr": 0.3,
            "lambda": 0.005,
            "seed": 11,
            "run_dir": "runs/blobs-deep",
            "enable_plots": False,
        },
    },
    "quickdraw": {
        "data": {
            "name": "samples",
            "options": {"path": "data/setB/samples.npy", "num_classes": 5},
            "val_split": 0.1,
            "test_split": 0.1,
        },
        "model": {"hidden": [90], "cost": "cross_entropy"},
        "train": {
            "epochs": 50,
            "batch_size": 32,
            "lr": 0.01,
            "lambda": 0.005,
            "seed": 0,
            "run_dir": "runs/quickdraw",
            "enable_plots": True,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    raise KeyError(
                        f"Preset {file.name} is missing required sections: "
                        f"{', '.join(sorted(missing))}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def _load_rows(data_cfg: Mapping[str, object]) -> Tuple[np.ndarray, int, Mapping[str, object]]:
    name = str(data_cfg.get("name", "blobs"))
    options = dict(data_cfg.get("options", {}))  # type: ignore[arg-type]
    if name == "blobs":
        rows = make_blobs(**options)
        num_classes = int(options.get("n_classes", 3))
        return rows, num_classes, {"type": "blobs", **options}
    if name == "samples":
        if "path" not in options:
            raise KeyError("The 'samples' dataset requires a `path` option")
        rows = load_samples(options["path"])
        labels = rows[:, -1].astype(int)
        num_classes = int(options.get("num_classes", labels.max() + 1))
        return rows, num_classes, {"type": "samples", "path": str(options["path"])}
    raise ValueError(f"Unknown dataset: {name}")


def _annotations(rows: np.ndarray, indices: np.ndarray, outputs: int) -> List[Annotation]:
    return vectorize(rows[np.sort(indices)], outputs)


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config.get("model", {}))  # type: ignore[arg-type]
    train_cfg = dict(config.get("train", {}))  # type: ignore[arg-type]

    seed = int(train_cfg.get("seed", 0))
    rows, num_classes, provenance = _load_rows(data_cfg)
    splits = deterministic_split(
        rows.shape[0],
        val_split=float(data_cfg.get("val_split", 0.1)),
        test_split=float(data_cfg.get("test_split", 0.2)),
        seed=seed,
    )
    training = _annotations(rows, splits.train, num_classes)
    validation = _annotations(rows, splits.val, num_classes)
    testing = _annotations(rows, splits.test, num_classes)

    hidden = [int(h) for h in model_cfg.get("hidden", [])]  # type: ignore[union-attr]
    rng = np.random.default_rng(seed)
    network = Network(
        rows.shape[1] - 1,
        hidden + [num_classes],
        cost=str(model_cfg.get("cost", "cross_entropy")),
        rng=rng,
    )

    run_dir = _resolve_run_dir(train_cfg, str(data_cfg.get("name", "blobs")))
    run_dir.mkdir(parents=True, exist_ok=True)
    epochs = int(train_cfg.get("epochs", 10))
    _print_startup_summary(
        dataset_name=str(data_cfg.get("name")),
        dims=network.describe(),
        cost=network.cost,
        splits=splits.sizes,
        param_count=network.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    capture = MetricsCapture()
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    callbacks: List[object] = [jsonl, csv_sink, capture, plots]
    if train_cfg.get("verbose", True):
        callbacks.append(ConsoleSink(epochs, len(training)))

    network.train(
        training,
        epochs=epochs,
        batch_size=int(train_cfg.get("batch_size", 32)),
        alpha=float(train_cfg.get("lr", 0.1)),
        lam=float(train_cfg.get("lambda", 0.0)),
        validation_set=validation,
        rng=rng,
        callbacks=callbacks,
        drop_remainder=bool(train_cfg.get("drop_remainder", True)),
    )
    plots.close()

    model_path = network.save(run_dir / "model.npz")
    predictions = network.predict(testing)
    confusion = confusion_matrix(predictions, num_classes)
    report = classification_report(confusion)
    (run_dir / "confusion.json").write_text(
        json.dumps({"confusion": confusion.tolist(), **report.as_dict()}, indent=2)
    )

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=provenance,
        network=network,
        splits=splits.sizes,
        model_path=model_path,
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json")
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        epochs=len(capture.history),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        model_path=str(model_path),
        summary_path=summary_path,
        test_accuracy=report.accuracy,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    dims: Sequence[int],
    cost: str,
    splits: Mapping[str, int],
    param_count: int,
) -> None:
    print("=== SigmaNet run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Dimensions    : {list(dims)}")
    print(f"Cost          : {cost}")
    print(f"Splits        : {dict(splits)}")
    print(f"Parameters    : {param_count}")
    print("====================")


__all__ = ["load_preset", "presets", "run_pipeline"]
