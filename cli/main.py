"""Command line entry point for SigmaNet training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from sigmanet.core.errors import ModelLoadError
from sigmanet.data.vectorize import load_samples, vectorize
from sigmanet.reporting.confusion import classification_report, confusion_matrix, format_report
from sigmanet.training import pipelines
from sigmanet.training.network import Network


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "model": result.model_path,
        "test_accuracy": result.test_accuracy,
    }
    if result.summary_path:
        payload["summary"] = result.summary_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="blobs-small",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--enable-plots", action="store_true", help="Write training curves")
    parser.add_argument("--seed", type=int, help="Seed used for splits, init and shuffling")
    parser.add_argument("--epochs", type=int, help="Override the number of epochs")
    parser.add_argument("--run-dir", type=Path, help="Directory for run artifacts")
    parser.add_argument(
        "--quiet", action="store_true", help="Suppress the per-epoch progress line"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument(
        "--evaluate",
        type=Path,
        metavar="MODEL",
        help="Evaluate a saved model on --data instead of training",
    )
    parser.add_argument("--data", type=Path, help="Packed sample rows (.npy) for --evaluate")
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        import yaml

        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _evaluate(model_path: Path, data_path: Path | None) -> None:
    if data_path is None:
        raise SystemExit("--evaluate requires --data")
    try:
        network = Network.load(model_path)
        rows = load_samples(data_path)
    except (ModelLoadError, FileNotFoundError) as exc:
        raise SystemExit(str(exc)) from None
    testing = vectorize(rows, network.output_nodes)
    confusion = confusion_matrix(network.predict(testing), network.output_nodes)
    print(format_report(confusion, classification_report(confusion)))


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.evaluate:
        _evaluate(args.evaluate, args.data)
        return

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))
    if args.config:
        override = _load_override(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    train_cfg = config.setdefault("train", {})
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.epochs is not None:
        train_cfg["epochs"] = int(args.epochs)
    if args.run_dir is not None:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.quiet:
        train_cfg["verbose"] = False

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    print(_format_result(pipelines.run_pipeline(config)))


if __name__ == "__main__":
    main()
