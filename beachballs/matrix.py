"""
matrix.py
*********

Dense M x N matrices stored as flat, row-major data, and the Jacobi
eigenvalue algorithm for symmetric matrices.

The module level functions operate on ``(data, m, n)`` triples and return
NumPy arrays. :class:`Matrix` is the immutable value type built on top of
them; every operation returns a new matrix.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import ConvergenceError, ShapeError
from .vector import Vector

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROTATIONS = 100

ArrayLike = Union[np.ndarray, Iterable[float]]


def _flat(data: ArrayLike, m: int, n: int) -> np.ndarray:
    arr = np.asarray(data, dtype=float).ravel()
    if arr.size != m * n:
        raise ShapeError(f"expected {m}x{n}={m * n} elements, got {arr.size}")
    return arr


def index(m: int, n: int, row: int, col: int) -> int:
    """Index of element (row, col) in flat row-major data."""
    return n * row + col


def _check_row(m: int, row: int) -> None:
    if row < 0 or row >= m:
        raise ShapeError(f"row {row} out of range [0,{m})")


def _check_col(n: int, col: int) -> None:
    if col < 0 or col >= n:
        raise ShapeError(f"column {col} out of range [0,{n})")


def get(data: ArrayLike, m: int, n: int, row: int, col: int) -> float:
    _check_row(m, row)
    _check_col(n, col)
    return float(_flat(data, m, n)[index(m, n, row, col)])


def row(data: ArrayLike, m: int, n: int, row: int) -> np.ndarray:
    _check_row(m, row)
    return _flat(data, m, n).reshape(m, n)[row, :].copy()


def col(data: ArrayLike, m: int, n: int, col: int) -> np.ndarray:
    _check_col(n, col)
    return _flat(data, m, n).reshape(m, n)[:, col].copy()


def diagonal(data: ArrayLike, m: int, n: int) -> np.ndarray:
    """Elements on the main diagonal, ``min(m, n)`` of them."""
    return np.diagonal(_flat(data, m, n).reshape(m, n)).copy()


def identity(n: int) -> np.ndarray:
    """Flat data of the n x n identity matrix."""
    return np.eye(n, dtype=float).ravel()


def multiply(
    data1: ArrayLike, m1: int, n1: int,
    data2: ArrayLike, m2: int, n2: int,
) -> np.ndarray:
    """
    Matrix product of an m1 x n1 and an m2 x n2 matrix.

    Returns
    -------
    np.ndarray
        Flat data of the m1 x n2 result.
    """
    if n1 != m2:
        raise ShapeError(f"cannot multiply {m1}x{n1} by {m2}x{n2} matrix")
    a = _flat(data1, m1, n1).reshape(m1, n1)
    b = _flat(data2, m2, n2).reshape(m2, n2)
    return (a @ b).ravel()


def transpose(data: ArrayLike, m: int, n: int) -> np.ndarray:
    """Flat data of the n x m transpose."""
    return _flat(data, m, n).reshape(m, n).T.ravel()


def stringify(data: ArrayLike, m: int, n: int) -> str:
    values = _flat(data, m, n).reshape(m, n)
    rows = [", ".join(str(float(v)) for v in r) for r in values]
    return "[" + ",\n ".join(rows) + "]"


def _negligible(apq: float, app: float, aqq: float) -> bool:
    # off-diagonal element too small to change either diagonal element
    small = 100.0 * abs(apq)
    return apq == 0 or (abs(app) + small == abs(app) and abs(aqq) + small == abs(aqq))


def jacobi(
    data: ArrayLike,
    m: int,
    n: int,
    max_rotations: Optional[int] = DEFAULT_MAX_ROTATIONS,
) -> List["Eigenvector"]:
    """
    Eigenvectors of a symmetric matrix by the cyclic Jacobi rotation method.

    Each sweep visits every upper-triangle pair (p, q) in index order and
    applies the plane rotation with angle
    ``phi = 0.5 * atan2(2 a[p,q], a[q,q] - a[p,p])``, which zeroes a[p,q],
    accumulating the rotations into an eigenvector matrix that starts as
    the identity. Sweeps repeat until one leaves every diagonal element
    unchanged. Off-diagonal elements too small to affect the diagonal are
    zeroed without a rotation.

    Only the upper triangle of ``data`` is read; symmetry is not checked.

    Parameters
    ----------
    data : array-like
        Flat, row-major matrix data.
    m, n : int
        Number of rows and columns; must be equal.
    max_rotations : int, default 100
        Rotation budget, checked after each sweep. ``None`` selects the
        default.

    Returns
    -------
    list of Eigenvector
        ``n`` eigenvectors, the columns of the accumulated rotation matrix,
        each tagged with the matching final diagonal element. They are not
        sorted.

    Raises
    ------
    ShapeError
        If the matrix is not square.
    ConvergenceError
        If the last sweep still changed the matrix when the budget ran out.
    """
    if m != n:
        raise ShapeError(
            f"Jacobi only works on symmetric, square matrices, got {m}x{n}"
        )
    if max_rotations is None:
        max_rotations = DEFAULT_MAX_ROTATIONS
    if max_rotations < 0:
        raise ValueError(f"max_rotations must be >= 0, got {max_rotations}")

    a = _flat(data, m, n).tolist()
    e = [a[index(m, n, i, i)] for i in range(n)]
    v = identity(n).tolist()
    rotations = 0

    while True:
        changed = False

        for p in range(n):
            for q in range(p + 1, n):
                app = e[p]
                aqq = e[q]
                apq = a[n * p + q]
                if _negligible(apq, app, aqq):
                    a[n * p + q] = 0.0
                    continue

                phi = 0.5 * math.atan2(2 * apq, aqq - app)
                c = math.cos(phi)
                s = math.sin(phi)
                app1 = c * c * app - 2 * s * c * apq + s * s * aqq
                aqq1 = s * s * app + 2 * s * c * apq + c * c * aqq
                if app1 == app and aqq1 == aqq:
                    continue

                changed = True
                rotations += 1
                e[p] = app1
                e[q] = aqq1
                a[n * p + q] = 0.0

                for i in range(p):
                    ip, iq = n * i + p, n * i + q
                    aip, aiq = a[ip], a[iq]
                    a[ip] = c * aip - s * aiq
                    a[iq] = c * aiq + s * aip
                for i in range(p + 1, q):
                    pi, iq = n * p + i, n * i + q
                    api, aiq = a[pi], a[iq]
                    a[pi] = c * api - s * aiq
                    a[iq] = c * aiq + s * api
                for i in range(q + 1, n):
                    pi, qi = n * p + i, n * q + i
                    api, aqi = a[pi], a[qi]
                    a[pi] = c * api - s * aqi
                    a[qi] = c * aqi + s * api
                for i in range(n):
                    ip, iq = n * i + p, n * i + q
                    vip, viq = v[ip], v[iq]
                    v[ip] = c * vip - s * viq
                    v[iq] = c * viq + s * vip

        if not changed or rotations >= max_rotations:
            break

    if changed:
        raise ConvergenceError(
            f"Jacobi failed to converge within {max_rotations} rotations",
            rotations=rotations,
            max_rotations=max_rotations,
        )

    logger.debug(f"Jacobi converged after {rotations} rotations ({n}x{n})")

    # i-th eigenvector is the i-th column
    return [Eigenvector(col(v, n, n, i), eigenvalue=e[i]) for i in range(n)]


@dataclass(frozen=True)
class Eigenvector(Vector):
    """
    A :class:`Vector` annotated with its eigenvalue.
    """

    eigenvalue: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "eigenvalue", float(self.eigenvalue))


@dataclass(frozen=True)
class Matrix:
    """
    Immutable M x N matrix.

    Prefer the explicit constructors :meth:`from_flat`, :meth:`square`,
    :meth:`with_rows`, :meth:`with_cols`, :meth:`identity` and
    :meth:`from_array`; they validate that the data fits the requested
    shape and raise :class:`~beachballs.errors.ShapeError` otherwise.

    Attributes
    ----------
    data : tuple of float
        Row-major elements.
    m, n : int
        Number of rows and columns.
    """

    data: Tuple[float, ...] = field(repr=False)
    m: int
    n: int

    def __post_init__(self):
        if int(self.m) != self.m or int(self.n) != self.n or self.m < 1 or self.n < 1:
            raise ShapeError(f"matrix dimensions must be positive integers, got {self.m}x{self.n}")
        object.__setattr__(self, "m", int(self.m))
        object.__setattr__(self, "n", int(self.n))
        values = _flat(self.data, self.m, self.n)
        object.__setattr__(self, "data", tuple(float(x) for x in values))

    # ------------------------------------------------------------------
    # constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_flat(cls, data: ArrayLike, rows: int, cols: int) -> "Matrix":
        return cls(tuple(np.asarray(data, dtype=float).ravel()), rows, cols)

    @classmethod
    def square(cls, data: ArrayLike) -> "Matrix":
        """Square matrix, size inferred from the number of elements."""
        values = np.asarray(data, dtype=float).ravel()
        side = math.isqrt(values.size)
        if values.size == 0 or side * side != values.size:
            raise ShapeError(
                f"matrix size unspecified, and {values.size} elements do not form a square"
            )
        return cls(tuple(values), side, side)

    @classmethod
    def with_rows(cls, data: ArrayLike, rows: int) -> "Matrix":
        """Matrix with ``rows`` rows; the column count is inferred."""
        values = np.asarray(data, dtype=float).ravel()
        if rows < 1 or values.size % rows != 0:
            raise ShapeError(f"wrong number of data elements ({values.size}) for {rows} rows")
        return cls(tuple(values), rows, values.size // rows)

    @classmethod
    def with_cols(cls, data: ArrayLike, cols: int) -> "Matrix":
        """Matrix with ``cols`` columns; the row count is inferred."""
        values = np.asarray(data, dtype=float).ravel()
        if cols < 1 or values.size % cols != 0:
            raise ShapeError(f"wrong number of data elements ({values.size}) for {cols} columns")
        return cls(tuple(values), values.size // cols, cols)

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        return cls(tuple(identity(n)), n, n)

    @classmethod
    def from_array(cls, array: Sequence[Sequence[float]]) -> "Matrix":
        values = np.asarray(array, dtype=float)
        if values.ndim != 2:
            raise ShapeError(f"expected a 2D array, got shape {values.shape}")
        return cls(tuple(values.ravel()), values.shape[0], values.shape[1])

    # ------------------------------------------------------------------
    # access
    # ------------------------------------------------------------------

    @property
    def array(self) -> np.ndarray:
        return np.array(self.data, dtype=float).reshape(self.m, self.n)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.m, self.n)

    def get(self, row: int, col: int) -> float:
        return get(self.data, self.m, self.n, row, col)

    def set(self, row: int, col: int, value: float) -> "Matrix":
        """Copy of this matrix with element (row, col) replaced."""
        _check_row(self.m, row)
        _check_col(self.n, col)
        values = list(self.data)
        values[index(self.m, self.n, row, col)] = float(value)
        return Matrix(tuple(values), self.m, self.n)

    def row(self, i: int) -> np.ndarray:
        return row(self.data, self.m, self.n, i)

    def col(self, j: int) -> np.ndarray:
        return col(self.data, self.m, self.n, j)

    def diagonal(self) -> np.ndarray:
        return diagonal(self.data, self.m, self.n)

    def trace(self) -> float:
        return float(np.sum(self.diagonal()))

    def __str__(self) -> str:
        return stringify(self.data, self.m, self.n)

    # ------------------------------------------------------------------
    # algebra
    # ------------------------------------------------------------------

    def _check_same_size(self, that: "Matrix", operation: str) -> None:
        if self.shape != that.shape:
            raise ShapeError(
                f"{operation}: matrices must be same size, got {self.m}x{self.n} "
                f"and {that.m}x{that.n}"
            )

    def add(self, that: "Matrix") -> "Matrix":
        self._check_same_size(that, "add")
        return Matrix(tuple(np.add(self.data, that.data)), self.m, self.n)

    def subtract(self, that: "Matrix") -> "Matrix":
        self._check_same_size(that, "subtract")
        return Matrix(tuple(np.subtract(self.data, that.data)), self.m, self.n)

    def multiply(self, that: "Matrix") -> "Matrix":
        values = multiply(self.data, self.m, self.n, that.data, that.m, that.n)
        return Matrix(tuple(values), self.m, that.n)

    def negative(self) -> "Matrix":
        return Matrix(tuple(-np.asarray(self.data)), self.m, self.n)

    def transpose(self) -> "Matrix":
        return Matrix(tuple(transpose(self.data, self.m, self.n)), self.n, self.m)

    def jacobi(self, max_rotations: Optional[int] = DEFAULT_MAX_ROTATIONS) -> List[Eigenvector]:
        """Eigenvectors of this (symmetric) matrix, see :func:`jacobi`."""
        return jacobi(self.data, self.m, self.n, max_rotations)
