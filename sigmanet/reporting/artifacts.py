"""Run manifest: what was trained, on which data, from which code."""

from __future__ import annotations

import hashlib
import json
import platform
import subprocess
import time
from pathlib import Path
from typing import Mapping

import numpy as np


def _git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):  # pragma: no cover - git may be unavailable
        return "unknown"
    return out.decode().strip()


def file_sha256(path: str | Path) -> str:
    digest = hashlib.sha256()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


def describe_network(network) -> dict[str, object]:
    """Topology, cost pairing and parameter count of a trained network."""

    return {
        "dims": list(network.describe()),
        "layer_count": int(network.layer_count),
        "cost": str(network.cost),
        "parameters": int(network.parameter_count()),
    }


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    network=None,
    splits: Mapping[str, int] | None = None,
    model_path: str | Path | None = None,
) -> str:
    """Write ``manifest.json`` for one training run.

    ``model`` is filled from ``network`` when given; ``model_path`` adds the
    checksum of the saved archive so a manifest can be matched to its model.
    """

    model: dict[str, object] = describe_network(network) if network is not None else {}
    if model_path is not None:
        model["file"] = Path(model_path).name
        model["sha256"] = file_sha256(model_path)

    manifest = {
        "git_sha": _git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "dataset": {**dataset_provenance, "splits": dict(splits or {})},
        "model": model,
        "environment": {
            "python": platform.python_version(),
            "numpy": np.__version__,
        },
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


__all__ = ["describe_network", "file_sha256", "write_manifest"]
