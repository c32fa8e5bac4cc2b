"""Dataset preparation for SigmaNet."""

from .synthetic import make_blobs
from .utils import SplitIndices, deterministic_split
from .vectorize import (
    load_samples,
    one_hot_encode,
    pack_samples,
    save_samples,
    split_folds,
    vectorize,
)

__all__ = [
    "SplitIndices",
    "deterministic_split",
    "load_samples",
    "make_blobs",
    "one_hot_encode",
    "pack_samples",
    "save_samples",
    "split_folds",
    "vectorize",
]
