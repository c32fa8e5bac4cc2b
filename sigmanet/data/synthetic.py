"""Pure in-memory synthetic classification data."""

from __future__ import annotations

import numpy as np


def make_blobs(
    n_samples: int = 300,
    n_features: int = 2,
    n_classes: int = 3,
    *,
    spread: float = 0.4,
    seed: int = 0,
) -> np.ndarray:
    """Return packed rows drawn from one Gaussian cluster per class.

    Cluster centres are spaced evenly along the first feature and drawn
    uniformly from ``[0, 1]`` on the others. The last column is the class
    label.
    """

    if n_samples < n_classes or n_classes < 1 or n_features < 1:
        raise ValueError("Need at least one sample per class and one feature")
    rng = np.random.default_rng(seed)
    centres = rng.uniform(0.0, 1.0, size=(n_classes, n_features))
    centres[:, 0] = np.linspace(0.0, 1.0, n_classes)

    labels = np.arange(n_samples) % n_classes
    noise = spread / max(n_classes, 1) * rng.standard_normal((n_samples, n_features))
    features = centres[labels] + noise
    rows = np.hstack([features, labels.reshape(-1, 1).astype(np.float64)])
    return rows[rng.permutation(n_samples)]


__all__ = ["make_blobs"]
