"""Seeded train/validation/test partitioning of packed rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import numpy as np

from ..utils import SeedLike, as_generator


@dataclass(frozen=True)
class SplitIndices:
    """Row indices of each partition."""

    train: np.ndarray
    val: np.ndarray
    test: np.ndarray

    @property
    def sizes(self) -> Mapping[str, int]:
        return {name: int(getattr(self, name).size) for name in ("train", "val", "test")}


def _portion(n_samples: int, fraction: float, available: int) -> int:
    # a non-zero fraction always gets at least one row
    if fraction == 0:
        return 0
    return min(max(int(round(n_samples * fraction)), 1), available)


def deterministic_split(
    n_samples: int,
    *,
    val_split: float = 0.1,
    test_split: float = 0.2,
    seed: SeedLike = 0,
) -> SplitIndices:
    """Permute ``range(n_samples)`` with ``seed`` and cut it into three parts.

    The test rows come first in the permutation, then the validation rows;
    whatever remains is training data and must not be empty.
    """

    for name, fraction in (("val_split", val_split), ("test_split", test_split)):
        if not 0 <= fraction < 1:
            raise ValueError(f"{name} must be in [0, 1)")
    if val_split + test_split >= 1:
        raise ValueError("val_split + test_split must be < 1")

    test_size = _portion(n_samples, test_split, n_samples)
    val_size = _portion(n_samples, val_split, n_samples - test_size)
    if n_samples - test_size - val_size < 1:
        raise ValueError("Not enough samples for the requested splits")

    order = as_generator(seed).permutation(n_samples)
    test, val, train = np.split(order, [test_size, test_size + val_size])
    return SplitIndices(train=train, val=val, test=test)


__all__ = ["SplitIndices", "deterministic_split"]
