"""Random-state helpers."""

from __future__ import annotations

import numpy as np

SeedLike = int | np.random.Generator | None


def as_generator(seed: SeedLike = None) -> np.random.Generator:
    """Return ``seed`` as a numpy ``Generator``.

    Generators are passed through untouched so callers can share one stream
    between weight initialisation and per-epoch shuffling.
    """

    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


__all__ = ["SeedLike", "as_generator"]
