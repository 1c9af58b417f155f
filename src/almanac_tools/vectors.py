"""Immutable 3-vectors and 3x3 matrices backed by numpy arrays.

Every operation returns a new object; nothing is modified in place, so
vectors and matrices may be shared freely between callers.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np

X_AXIS = 0
Y_AXIS = 1
Z_AXIS = 2


def _frozen(values: Iterable[float] | np.ndarray, shape: tuple[int, ...]) -> np.ndarray:
    """Copy values into a read-only float64 array of the given shape."""
    arr = np.array(values, dtype=np.float64).reshape(shape)
    arr.flags.writeable = False
    return arr


class Vector:
    """Cartesian 3-vector."""

    __slots__ = ('_v',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> None:
        self._v = _frozen((x, y, z), (3,))

    @classmethod
    def from_array(cls, values: Iterable[float] | np.ndarray) -> Vector:
        """Build a vector from any length-3 sequence or array."""
        arr = np.asarray(values, dtype=np.float64)
        if arr.shape != (3,):
            raise ValueError(f'Vector needs 3 components, got shape {arr.shape}')
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    @classmethod
    def linear_combination(cls, a: Vector, xa: float, b: Vector, xb: float) -> Vector:
        """Return ``xa * a + xb * b``."""
        return cls.from_array(xa * a._v + xb * b._v)

    @property
    def x(self) -> float:
        return float(self._v[0])

    @property
    def y(self) -> float:
        return float(self._v[1])

    @property
    def z(self) -> float:
        return float(self._v[2])

    def to_array(self) -> np.ndarray:
        """Return a writable copy of the components."""
        return self._v.copy()

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def __add__(self, other: Vector) -> Vector:
        return Vector.from_array(self._v + other._v)

    def __sub__(self, other: Vector) -> Vector:
        return Vector.from_array(self._v - other._v)

    def __neg__(self) -> Vector:
        return Vector.from_array(-self._v)

    def __mul__(self, factor: float) -> Vector:
        return Vector.from_array(self._v * factor)

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return bool(np.array_equal(self._v, other._v))

    def __hash__(self) -> int:
        return hash(tuple(self._v))

    def __repr__(self) -> str:
        return f'Vector({self.x!r}, {self.y!r}, {self.z!r})'

    def scale(self, factor: float) -> Vector:
        return self * factor

    def dot(self, other: Vector) -> float:
        """Scalar product."""
        return float(np.dot(self._v, other._v))

    def cross(self, other: Vector) -> Vector:
        """Vector product ``self x other``."""
        return Vector.from_array(np.cross(self._v, other._v))

    def magnitude(self) -> float:
        v = self._v
        return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])

    def normalize(self) -> Vector:
        """Unit vector in the same direction; the zero vector is returned unchanged."""
        r = self.magnitude()
        if r == 0.0:
            return self
        return Vector.from_array(self._v / r)

    def transform(self, matrix: Matrix) -> Vector:
        """Apply a 3x3 transform: returns ``M . v``."""
        return Vector.from_array(matrix.to_array() @ self._v)


class Matrix:
    """3x3 matrix with explicit left/right multiplication order."""

    __slots__ = ('_m',)

    def __init__(self, values: Iterable[Iterable[float]] | np.ndarray | None = None) -> None:
        if values is None:
            values = np.zeros((3, 3))
        self._m = _frozen(values, (3, 3))

    @classmethod
    def identity(cls) -> Matrix:
        return cls(np.eye(3))

    @classmethod
    def rotation(cls, axis: int, angle: float) -> Matrix:
        """Right-handed rotation by ``angle`` radians about X_AXIS, Y_AXIS or Z_AXIS.

        Raises:
            IndexError: If axis is not 0, 1 or 2.
        """
        c = math.cos(angle)
        s = math.sin(angle)
        if axis == X_AXIS:
            return cls(((1.0, 0.0, 0.0), (0.0, c, -s), (0.0, s, c)))
        if axis == Y_AXIS:
            return cls(((c, 0.0, s), (0.0, 1.0, 0.0), (-s, 0.0, c)))
        if axis == Z_AXIS:
            return cls(((c, -s, 0.0), (s, c, 0.0), (0.0, 0.0, 1.0)))
        raise IndexError(f'rotation axis must be 0, 1 or 2, got {axis}')

    def component(self, i: int, j: int) -> float:
        return float(self._m[i, j])

    def to_array(self) -> np.ndarray:
        """Return a writable copy of the components."""
        return self._m.copy()

    def determinant(self) -> float:
        m = self._m
        return float(
            m[0, 0] * (m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1])
            + m[0, 1] * (m[1, 2] * m[2, 0] - m[1, 0] * m[2, 2])
            + m[0, 2] * (m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0])
        )

    def transpose(self) -> Matrix:
        return Matrix(self._m.T)

    def right_multiply(self, other: Matrix) -> Matrix:
        """Return ``self . other``."""
        return Matrix(self._m @ other._m)

    def left_multiply(self, other: Matrix) -> Matrix:
        """Return ``other . self``."""
        return Matrix(other._m @ self._m)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    def __hash__(self) -> int:
        return hash(tuple(self._m.ravel()))

    def __repr__(self) -> str:
        rows = ', '.join('[' + ', '.join(repr(float(x)) for x in row) + ']' for row in self._m)
        return f'Matrix([{rows}])'
