from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from sigmanet.training import pipelines
from sigmanet.training.network import Network


def _small_config(run_dir: Path) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset("blobs-small")))
    config["data"]["options"]["n_samples"] = 90
    config["train"]["epochs"] = 4
    config["train"]["run_dir"] = str(run_dir)
    config["train"]["verbose"] = False
    return config


def test_presets_are_complete():
    available = pipelines.presets()
    assert {"blobs-small", "blobs-deep", "quickdraw"} <= set(available)
    for config in available.values():
        assert {"data", "model", "train"} <= set(config)
    with pytest.raises(KeyError):
        pipelines.load_preset("no-such-preset")


def test_load_preset_returns_independent_copies():
    first = pipelines.load_preset("blobs-small")
    first["train"]["epochs"] = 999
    assert pipelines.load_preset("blobs-small")["train"]["epochs"] != 999


def test_pipeline_smoke_blobs(tmp_path):
    config = _small_config(tmp_path / "run")
    result = pipelines.run_pipeline(config)

    assert result.epochs == 4
    run_dir = tmp_path / "run"
    for name in (
        "metrics.jsonl",
        "metrics.csv",
        "manifest.json",
        "summary.json",
        "config.json",
        "confusion.json",
        "model.npz",
    ):
        assert (run_dir / name).exists(), name
    assert 0.0 <= result.test_accuracy <= 1.0

    lines = Path(result.metrics_path).read_text().splitlines()
    assert len(lines) == 4
    assert json.loads(lines[0])["seed"] == config["train"]["seed"]

    confusion = json.loads((run_dir / "confusion.json").read_text())
    assert len(confusion["confusion"]) == 3
    assert confusion["accuracy"] == pytest.approx(result.test_accuracy)

    model = Network.load(result.model_path)
    assert model.describe() == [2, 8, 3]

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["model"]["dims"] == [2, 8, 3]
    assert manifest["model"]["cost"] == "cross_entropy"
    assert manifest["model"]["parameters"] == model.parameter_count()
    assert sum(manifest["dataset"]["splits"].values()) == 90


def test_pipeline_prints_startup_summary(tmp_path, capsys):
    pipelines.run_pipeline(_small_config(tmp_path / "run"))
    out = capsys.readouterr().out
    assert "=== SigmaNet run ===" in out
    assert "Dimensions    : [2, 8, 3]" in out
    assert "Epoch 1/" not in out


def test_pipeline_on_packed_samples(tmp_path):
    from sigmanet.data.synthetic import make_blobs
    from sigmanet.data.vectorize import save_samples

    path = save_samples(tmp_path / "samples.npy", make_blobs(60, 3, 2, seed=4))
    config = {
        "data": {"name": "samples", "options": {"path": str(path)}, "val_split": 0.1, "test_split": 0.1},
        "model": {"hidden": [4], "cost": "quadratic"},
        "train": {
            "epochs": 2,
            "batch_size": 8,
            "lr": 0.5,
            "lambda": 0.0,
            "seed": 3,
            "run_dir": str(tmp_path / "run"),
            "verbose": False,
        },
    }
    result = pipelines.run_pipeline(config)
    model = Network.load(result.model_path)
    assert model.describe() == [3, 4, 2]
    assert model.cost == "quadratic"


def test_unknown_dataset_is_rejected(tmp_path):
    config = _small_config(tmp_path / "run")
    config["data"]["name"] = "imagenet"
    with pytest.raises(ValueError):
        pipelines.run_pipeline(config)


def test_metrics_determinism(tmp_path):
    config = _small_config(tmp_path / "a")
    first = pipelines.run_pipeline(config)
    config["train"]["run_dir"] = str(tmp_path / "b")
    second = pipelines.run_pipeline(config)

    values_first = [json.loads(line)["train_cost"] for line in Path(first.metrics_path).read_text().splitlines()]
    values_second = [json.loads(line)["train_cost"] for line in Path(second.metrics_path).read_text().splitlines()]
    assert np.allclose(values_first, values_second, atol=1e-12)
    assert first.test_accuracy == second.test_accuracy


def test_file_presets_are_discovered():
    config = pipelines.load_preset("blobs-wide")
    assert config["model"]["hidden"] == [32]
    assert config["data"]["options"]["n_classes"] == 5
    assert "blobs-wide" in pipelines.presets()
