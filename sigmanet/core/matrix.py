"""Immutable dense 2-D matrices backed by read-only numpy arrays.

Every operation returns a fresh :class:`Matrix`; the backing array is never
handed out, so gradients accumulated from several examples can never alias
one another.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Sequence, Tuple

import numpy as np

from .errors import DimensionError

TOLERANCE = 1e-11

Number = float | int


def _check_dims(rows: int, cols: int) -> None:
    if rows < 0 or cols < 0:
        raise DimensionError("A matrix cannot have negative dimensions")


def _freeze(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


class Matrix:
    """A fixed-shape grid of ``float64`` values."""

    __slots__ = ("_data",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, values: Sequence[Sequence[Number]] | Sequence[Number] | np.ndarray):
        if isinstance(values, Matrix):
            self._data = values._data
            return
        if isinstance(values, np.ndarray):
            if values.ndim == 1:
                values = values.reshape(1, -1)
            if values.ndim != 2:
                raise DimensionError(f"Expected a 1-D or 2-D array, got {values.ndim}-D")
            self._data = _freeze(np.array(values, dtype=np.float64, copy=True))
            return

        rows = list(values)
        if rows and all(isinstance(row, (Sequence, np.ndarray)) for row in rows):
            width = len(rows[0])
            for row in rows:
                if len(row) != width:
                    raise DimensionError("Input data is malformed: rows differ in length")
            grid = np.array(rows, dtype=np.float64).reshape(len(rows), width)
        elif any(isinstance(row, (Sequence, np.ndarray)) for row in rows):
            raise DimensionError("Input data mixes scalars and rows")
        else:
            grid = np.array(rows, dtype=np.float64).reshape(1, len(rows))
        self._data = _freeze(grid)

    # ------------------------------------------------------------------
    # Construction helpers

    @classmethod
    def _wrap(cls, array: np.ndarray) -> "Matrix":
        out = cls.__new__(cls)
        out._data = _freeze(np.ascontiguousarray(array, dtype=np.float64))
        return out

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "Matrix":
        """Return a ``rows x cols`` matrix filled with zeros."""

        _check_dims(rows, cols)
        return cls._wrap(np.zeros((rows, cols)))

    @classmethod
    def column(cls, values: Iterable[Number]) -> "Matrix":
        """Return ``values`` as an ``(n, 1)`` column vector."""

        flat = np.asarray(list(values), dtype=np.float64)
        return cls._wrap(flat.reshape(-1, 1))

    # ------------------------------------------------------------------
    # Accessors

    @property
    def rows(self) -> int:
        return int(self._data.shape[0])

    @property
    def cols(self) -> int:
        return int(self._data.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def __getitem__(self, index: Tuple[int, int]) -> float:
        row, col = index
        return float(self._data[row, col])

    def to_list(self) -> List[List[float]]:
        return self._data.tolist()

    def to_numpy(self) -> np.ndarray:
        """Return a writable copy of the values."""

        return self._data.copy()

    def __len__(self) -> int:
        return self.rows

    # ------------------------------------------------------------------
    # Operators

    def __add__(self, other: "Matrix | Number") -> "Matrix":
        return add(self, other)

    def __sub__(self, other: "Matrix | Number") -> "Matrix":
        return subtract(self, other)

    def __mul__(self, other: Number) -> "Matrix":
        return multiply(self, other)

    __rmul__ = __mul__

    def __matmul__(self, other: "Matrix") -> "Matrix":
        return dot_product(self, other)

    def __neg__(self) -> "Matrix":
        return multiply(self, -1.0)

    @property
    def T(self) -> "Matrix":
        return transpose(self)

    def map(self, fn: Callable[[float], float]) -> "Matrix":
        return map_elements(fn, self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return equals(self, other)

    def __repr__(self) -> str:
        return f"Matrix({self.to_list()!r})"

    def __str__(self) -> str:
        lines = ["\t ".join(str(value) for value in row) for row in self.to_list()]
        return "[" + "\n ".join(f"[{line}]" for line in lines) + "]"


def randomize(rows: int, cols: int, rng: np.random.Generator | None = None) -> Matrix:
    """Return a matrix of uniform values in ``[-1, 1)``."""

    _check_dims(rows, cols)
    rng = rng or np.random.default_rng()
    return Matrix._wrap(rng.uniform(-1.0, 1.0, size=(rows, cols)))


def reshape(a: Matrix, rows: int, cols: int) -> Matrix:
    """Repack ``a`` into ``rows x cols`` in row-major order."""

    _check_dims(rows, cols)
    if rows * cols != a.size:
        raise DimensionError(
            f"Cannot reshape {a.rows}x{a.cols} matrix into {rows}x{cols}"
        )
    return Matrix._wrap(a._data.reshape(rows, cols))


def _same_shape(a: Matrix, b: Matrix, op: str) -> None:
    if a.shape != b.shape:
        raise DimensionError(
            f"Matrices do not have corresponding dimensions for {op}: "
            f"{a.shape} vs {b.shape}"
        )


def add(a: Matrix, b: Matrix | Number) -> Matrix:
    if isinstance(b, Matrix):
        _same_shape(a, b, "add")
        return Matrix._wrap(a._data + b._data)
    return Matrix._wrap(a._data + float(b))


def subtract(a: Matrix, b: Matrix | Number) -> Matrix:
    if isinstance(b, Matrix):
        _same_shape(a, b, "subtract")
        return Matrix._wrap(a._data - b._data)
    return Matrix._wrap(a._data - float(b))


def dot_product(a: Matrix, b: Matrix) -> Matrix:
    """True matrix multiplication; ``a.cols`` must equal ``b.rows``."""

    if a.cols != b.rows:
        raise DimensionError(
            f"Cannot multiply {a.rows}x{a.cols} by {b.rows}x{b.cols}"
        )
    return Matrix._wrap(a._data @ b._data)


def hadamard_product(a: Matrix, b: Matrix) -> Matrix:
    _same_shape(a, b, "hadamard product")
    return Matrix._wrap(a._data * b._data)


def multiply(a: Matrix, scalar: Number) -> Matrix:
    return Matrix._wrap(a._data * float(scalar))


def transpose(a: Matrix) -> Matrix:
    return Matrix._wrap(a._data.T)


def arg_max_row(a: Matrix) -> int:
    """Row index of the largest element; ties keep the first in row-major order."""

    if a.size == 0:
        raise DimensionError("arg_max_row of an empty matrix is undefined")
    return int(np.argmax(a._data)) // a.cols


def total(a: Matrix) -> float:
    """Sum of every element."""

    return float(np.sum(a._data))


def map_elements(fn: Callable[[float], float], a: Matrix) -> Matrix:
    """Apply ``fn`` to every element of ``a``."""

    if isinstance(fn, np.ufunc):
        return Matrix._wrap(fn(a._data))
    if a.size == 0:
        return Matrix.zeros(a.rows, a.cols)
    return Matrix._wrap(np.vectorize(fn, otypes=[np.float64])(a._data))


def equals(a: Matrix, b: Matrix) -> bool:
    """True when shapes match and all cells differ by less than ``TOLERANCE``."""

    if a.shape != b.shape:
        return False
    return bool(np.all(np.abs(a._data - b._data) < TOLERANCE))


__all__ = [
    "TOLERANCE",
    "Matrix",
    "add",
    "arg_max_row",
    "dot_product",
    "equals",
    "hadamard_product",
    "map_elements",
    "multiply",
    "randomize",
    "reshape",
    "subtract",
    "total",
    "transpose",
]
