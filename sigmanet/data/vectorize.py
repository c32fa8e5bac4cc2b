"""Turn packed sample rows into ``(features, one-hot label)`` annotations.

A packed row holds the feature values followed by the integer class label in
the last column. Raw bitmap files (one ``.npy`` array of ``uint8`` pixels per
class) can be packed into that layout with :func:`pack_samples`.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import numpy as np

from ..core.matrix import Matrix
from ..core.types import Annotation

PIXELS = 784


def one_hot_encode(label: float, outputs: int) -> Matrix:
    """Return an ``(outputs, 1)`` column with a single 1 at ``label``."""

    if not float(label).is_integer():
        raise ValueError(f"label must be a whole number, got {label}")
    if label < 0:
        raise ValueError("label cannot be a negative number")
    if int(label) >= outputs:
        raise ValueError(
            f"numerical label {label} cannot be larger than the provided outputs ({outputs})"
        )
    column = np.zeros((outputs, 1))
    column[int(label), 0] = 1.0
    return Matrix(column)


def vectorize(rows: np.ndarray, outputs: int) -> List[Annotation]:
    """Split packed rows into feature columns and one-hot label columns."""

    rows = np.asarray(rows, dtype=np.float64)
    if rows.ndim != 2 or rows.shape[1] < 2:
        raise ValueError("Packed rows must be 2-D with at least one feature and a label")
    return [
        Annotation(
            features=Matrix.column(row[:-1]),
            label=one_hot_encode(row[-1], outputs),
        )
        for row in rows
    ]


def _raw_files(raw_dir: Path) -> List[Path]:
    if not raw_dir.is_dir():
        raise FileNotFoundError(f"Raw sample directory not found: {raw_dir}")
    return sorted(path for path in raw_dir.iterdir() if path.suffix == ".npy")


def pack_samples(
    raw_dir: str | Path,
    sample_size: int,
    sample_start: int = 0,
    *,
    pixels: int = PIXELS,
) -> np.ndarray:
    """Pack ``sample_size`` bitmaps per class file into labelled rows.

    Files are labelled by their position in sorted order. Pixel values are
    scaled from ``0..255`` into ``[0, 1]``.
    """

    if sample_size < 0 or sample_start < 0:
        raise ValueError("sample_size and sample_start must be non-negative")
    files = _raw_files(Path(raw_dir))
    packed = []
    for label, path in enumerate(files):
        raw = np.load(path, mmap_mode="r", allow_pickle=False)
        raw = raw.reshape(raw.shape[0], -1)
        if raw.shape[1] != pixels:
            raise ValueError(f"{path.name}: expected {pixels} pixels per sample, got {raw.shape[1]}")
        end = sample_start + sample_size
        if end > raw.shape[0]:
            raise ValueError(
                f"{path.name}: sample size incompatible with the provided data "
                f"({raw.shape[0]} samples available)"
            )
        block = np.asarray(raw[sample_start:end], dtype=np.float64) / 255.0
        labels = np.full((sample_size, 1), float(label))
        packed.append(np.hstack([block, labels]))
    if not packed:
        return np.zeros((0, pixels + 1))
    return np.vstack(packed)


def save_samples(path: str | Path, rows: np.ndarray) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.save(path, np.asarray(rows, dtype=np.float64), allow_pickle=False)
    return path


def load_samples(path: str | Path) -> np.ndarray:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Sample file not found: {path}")
    return np.load(path, allow_pickle=False)


def split_folds(rows: np.ndarray, k: int) -> List[np.ndarray]:
    """Cut ``rows`` into ``k`` equal contiguous folds."""

    if k < 1 or len(rows) % k != 0:
        raise ValueError("Data must be divisible by fold size")
    size = len(rows) // k
    return [np.asarray(rows[i * size : (i + 1) * size]) for i in range(k)]


def shuffle_rows(rows: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Return a shuffled copy of ``rows``."""

    return np.asarray(rows)[rng.permutation(len(rows))]


def append_rows(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.concatenate([np.asarray(a), np.asarray(b)], axis=0)


__all__ = [
    "PIXELS",
    "append_rows",
    "load_samples",
    "one_hot_encode",
    "pack_samples",
    "save_samples",
    "shuffle_rows",
    "split_folds",
    "vectorize",
]
