"""
vector.py
*********

Vector algebra on plain numeric arrays.

The module level functions take array-likes (lists, tuples, NumPy arrays or
:class:`Vector` objects) and return NumPy arrays or floats; they never modify
their inputs. :class:`Vector` is an immutable wrapper exposing the same
operations as methods.

Angles are in radians. The package works in the North (X), East (Y),
Down (Z) system, so :func:`plunge` is positive for vectors pointing down.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional, Tuple, Union

import numpy as np

from .errors import DegenerateVectorError, ShapeError

ArrayLike = Union[np.ndarray, Iterable[float], "Vector"]


def _as_array(v: ArrayLike) -> np.ndarray:
    """
    Convert input to a 1D float array.
    """
    if isinstance(v, Vector):
        return v.array
    arr = np.asarray(v, dtype=float)
    if arr.ndim != 1:
        raise ShapeError(f"vector must be 1D, got shape {arr.shape}")
    return arr


def _same_length(v1: ArrayLike, v2: ArrayLike, operation: str) -> Tuple[np.ndarray, np.ndarray]:
    a = _as_array(v1)
    b = _as_array(v2)
    if a.size != b.size:
        raise ShapeError(
            f"{operation}: vectors must be same length, got {a.size} and {b.size}"
        )
    return a, b


def add(v1: ArrayLike, v2: ArrayLike) -> np.ndarray:
    """Element-wise sum of two vectors of equal length."""
    a, b = _same_length(v1, v2, "add")
    return a + b


def subtract(v1: ArrayLike, v2: ArrayLike) -> np.ndarray:
    """Element-wise difference ``v1 - v2`` of two vectors of equal length."""
    a, b = _same_length(v1, v2, "subtract")
    return a - b


def dot(v1: ArrayLike, v2: ArrayLike) -> float:
    a, b = _same_length(v1, v2, "dot")
    return float(np.dot(a, b))


def cross(v1: ArrayLike, v2: ArrayLike) -> np.ndarray:
    """
    Cross product of two 3 dimensional vectors.

    The result follows the right-hand rule: with the fingers of the right
    hand pointing along ``v1`` and curling towards ``v2``, the thumb points
    along the result.
    """
    a, b = _same_length(v1, v2, "cross")
    if a.size < 3:
        raise ShapeError(f"cross product requires 3 dimensions, got {a.size}")
    return np.array(
        [
            a[1] * b[2] - b[1] * a[2],
            a[2] * b[0] - b[2] * a[0],
            a[0] * b[1] - b[0] * a[1],
        ],
        dtype=float,
    )


def magnitude(v: ArrayLike) -> float:
    """Euclidean length of ``v``."""
    a = _as_array(v)
    return float(np.sqrt(np.sum(a * a)))


def multiply(v: ArrayLike, n: float) -> np.ndarray:
    return _as_array(v) * float(n)


def negative(v: ArrayLike) -> np.ndarray:
    return multiply(v, -1.0)


def unit(v: ArrayLike) -> np.ndarray:
    """
    Scale ``v`` to length 1.

    Raises
    ------
    DegenerateVectorError
        If ``v`` has zero magnitude.
    """
    mag = magnitude(v)
    if mag == 0:
        raise DegenerateVectorError("cannot convert zero vector to unit vector")
    return multiply(v, 1.0 / mag)


def angle(v1: ArrayLike, v2: ArrayLike) -> float:
    """
    Angle between two vectors, in radians in the range [0, pi].
    """
    a, b = _same_length(v1, v2, "angle")
    den = magnitude(a) * magnitude(b)
    if den == 0:
        raise DegenerateVectorError("angle is undefined for a zero vector")
    # rounding can push the cosine just outside [-1, 1] for parallel vectors
    cosang = float(np.clip(np.dot(a, b) / den, -1.0, 1.0))
    return math.acos(cosang)


def azimuth(v: ArrayLike) -> float:
    """
    Azimuth of a vector, ``pi/2 - atan2(v[1], v[0])``.

    A vector whose first two components are both zero (the zero vector or a
    vertical vector) has azimuth 0.
    """
    a = _as_array(v)
    if a.size < 2:
        raise ShapeError(f"azimuth requires at least 2 dimensions, got {a.size}")
    if a[0] == 0 and a[1] == 0:
        return 0.0
    return (math.pi / 2.0) - math.atan2(a[1], a[0])


def plunge(v: ArrayLike) -> float:
    """
    Angle from the plane z=0 to the vector, in radians.

    Positive when z > 0 (down), negative when z < 0.
    """
    a = _as_array(v)
    if a.size < 3:
        raise ShapeError(f"plunge requires at least 3 dimensions, got {a.size}")
    mag = magnitude(a)
    if mag == 0:
        raise DegenerateVectorError("plunge is undefined for a zero vector")
    return math.asin(float(np.clip(a[2] / mag, -1.0, 1.0)))


def rotate(
    v: ArrayLike,
    axis: ArrayLike,
    theta: float,
    origin: Optional[ArrayLike] = None,
) -> np.ndarray:
    """
    Rotate the point ``v`` by ``theta`` radians around an arbitrary line.

    The line passes through ``origin`` (default [0, 0, 0]) with direction
    ``axis``. Uses the closed form of the normalised matrix for rotation
    about an arbitrary line (G. Murray, "Rotation About an Arbitrary Axis
    in 3 Dimensions", section 6.2); ``axis`` is expected to be a unit
    vector.
    """
    point = _as_array(v)
    direction = _as_array(axis)
    centre = np.zeros(3) if origin is None else _as_array(origin)
    for name, arr in (("point", point), ("axis", direction), ("origin", centre)):
        if arr.size != 3:
            raise ShapeError(f"rotate: {name} must have 3 components, got {arr.size}")

    a, b, c = centre
    u, v_, w = direction
    x, y, z = point

    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    # u.p, the projection of the point onto the axis direction
    up = u * x + v_ * y + w * z

    return np.array(
        [
            (a * (v_ * v_ + w * w) - u * (b * v_ + c * w - up)) * (1 - cos_t)
            + x * cos_t + (-c * v_ + b * w - w * y + v_ * z) * sin_t,
            (b * (u * u + w * w) - v_ * (a * u + c * w - up)) * (1 - cos_t)
            + y * cos_t + (c * u - a * w + w * x - u * z) * sin_t,
            (c * (u * u + v_ * v_) - w * (a * u + b * v_ - up)) * (1 - cos_t)
            + z * cos_t + (-b * u + a * v_ - v_ * x + u * y) * sin_t,
        ],
        dtype=float,
    )


def equals(v1: ArrayLike, v2: ArrayLike) -> bool:
    """True if both vectors have the same length and identical components."""
    a = _as_array(v1)
    b = _as_array(v2)
    return a.size == b.size and bool(np.all(a == b))


def x(v: ArrayLike) -> float:
    return float(_as_array(v)[0])


def y(v: ArrayLike) -> float:
    return float(_as_array(v)[1])


def z(v: ArrayLike) -> float:
    return float(_as_array(v)[2])


@dataclass(frozen=True)
class Vector:
    """
    Immutable vector value.

    Every operation returns a new object. Components are changed with the
    :meth:`with_x`, :meth:`with_y` and :meth:`with_z` builders.

    Parameters
    ----------
    data : iterable of float
        Components of the vector. Another ``Vector`` is copied.
    """

    data: Tuple[float, ...]

    def __post_init__(self):
        source = self.data.data if isinstance(self.data, Vector) else self.data
        if not isinstance(source, np.ndarray):
            source = list(source)
        values = np.asarray(source, dtype=float)
        if values.ndim != 1:
            raise ShapeError(f"vector must be 1D, got shape {values.shape}")
        object.__setattr__(self, "data", tuple(float(c) for c in values))

    @property
    def array(self) -> np.ndarray:
        return np.array(self.data, dtype=float)

    def __array__(self, dtype=None, copy=None):
        return np.asarray(self.data, dtype=dtype)

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[float]:
        return iter(self.data)

    def __getitem__(self, index):
        return self.data[index]

    def __str__(self) -> str:
        return ",".join(str(c) for c in self.data)

    @property
    def x(self) -> float:
        return self.data[0]

    @property
    def y(self) -> float:
        return self.data[1]

    @property
    def z(self) -> float:
        return self.data[2]

    def _with_component(self, index: int, value: float) -> "Vector":
        if index >= len(self.data):
            raise ShapeError(
                f"vector has {len(self.data)} components, cannot set component {index}"
            )
        values = list(self.data)
        values[index] = float(value)
        return replace(self, data=tuple(values))

    def with_x(self, value: float) -> "Vector":
        return self._with_component(0, value)

    def with_y(self, value: float) -> "Vector":
        return self._with_component(1, value)

    def with_z(self, value: float) -> "Vector":
        return self._with_component(2, value)

    def add(self, that: ArrayLike) -> "Vector":
        return Vector(add(self.data, that))

    def subtract(self, that: ArrayLike) -> "Vector":
        return Vector(subtract(self.data, that))

    def dot(self, that: ArrayLike) -> float:
        return dot(self.data, that)

    def cross(self, that: ArrayLike) -> "Vector":
        return Vector(cross(self.data, that))

    def magnitude(self) -> float:
        return magnitude(self.data)

    def multiply(self, n: float) -> "Vector":
        return Vector(multiply(self.data, n))

    def negative(self) -> "Vector":
        # keeps the concrete type, a negated eigenvector keeps its eigenvalue
        return replace(self, data=tuple(negative(self.data)))

    def unit(self) -> "Vector":
        return Vector(unit(self.data))

    def angle(self, that: ArrayLike) -> float:
        return angle(self.data, that)

    def azimuth(self) -> float:
        return azimuth(self.data)

    def plunge(self) -> float:
        return plunge(self.data)

    def rotate(self, axis: ArrayLike, theta: float,
               origin: Optional[ArrayLike] = None) -> "Vector":
        return Vector(rotate(self.data, axis, theta, origin))

    def equals(self, that: ArrayLike) -> bool:
        return equals(self.data, that)
