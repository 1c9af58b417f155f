"""Tests for immutable Vector and Matrix."""

from __future__ import annotations

import math

import numpy as np
import pytest

from almanac_tools.vectors import X_AXIS, Y_AXIS, Z_AXIS, Matrix, Vector


def test_vector_arithmetic_returns_new_vectors() -> None:
    """Addition, subtraction and scaling never modify their operands."""
    a = Vector(1.0, 2.0, 3.0)
    b = Vector(-1.0, 0.5, 2.0)
    assert a + b == Vector(0.0, 2.5, 5.0)
    assert a - b == Vector(2.0, 1.5, 1.0)
    assert -a == Vector(-1.0, -2.0, -3.0)
    assert a * 2.0 == Vector(2.0, 4.0, 6.0)
    assert 2.0 * a == a.scale(2.0)
    assert a == Vector(1.0, 2.0, 3.0)


def test_vector_components_are_read_only() -> None:
    v = Vector(1.0, 2.0, 3.0)
    arr = v.to_array()
    arr[0] = 99.0
    assert v.x == 1.0
    with pytest.raises(ValueError):
        v._v[0] = 5.0


def test_dot_cross_magnitude() -> None:
    a = Vector(1.0, 0.0, 0.0)
    b = Vector(0.0, 1.0, 0.0)
    assert a.dot(b) == 0.0
    assert a.cross(b) == Vector(0.0, 0.0, 1.0)
    assert Vector(3.0, 4.0, 12.0).magnitude() == 13.0


def test_normalize_zero_vector_is_unchanged() -> None:
    """Normalizing the zero vector gives the zero vector, not NaNs."""
    zero = Vector()
    assert zero.normalize() == zero
    unit = Vector(0.0, 3.0, 4.0).normalize()
    assert unit.magnitude() == pytest.approx(1.0)
    assert tuple(unit) == pytest.approx((0.0, 0.6, 0.8))


def test_linear_combination() -> None:
    a = Vector(1.0, 2.0, 3.0)
    b = Vector(0.0, 1.0, -1.0)
    assert Vector.linear_combination(a, 2.0, b, -3.0) == Vector(2.0, 1.0, 9.0)


def test_from_array_rejects_wrong_shape() -> None:
    with pytest.raises(ValueError):
        Vector.from_array([1.0, 2.0])


def test_rotation_about_z_is_right_handed() -> None:
    """A +90 degree rotation about Z takes X to Y."""
    r = Matrix.rotation(Z_AXIS, math.pi / 2.0)
    v = Vector(1.0, 0.0, 0.0).transform(r)
    assert tuple(v) == pytest.approx((0.0, 1.0, 0.0), abs=1e-15)


@pytest.mark.parametrize('axis', [X_AXIS, Y_AXIS, Z_AXIS])
def test_rotation_is_orthonormal(axis: int) -> None:
    r = Matrix.rotation(axis, 0.7)
    assert r.determinant() == pytest.approx(1.0)
    product = r.right_multiply(r.transpose())
    np.testing.assert_allclose(product.to_array(), np.eye(3), atol=1e-15)


def test_rotation_bad_axis_raises_index_error() -> None:
    with pytest.raises(IndexError):
        Matrix.rotation(3, 0.1)


def test_multiplication_order() -> None:
    """right_multiply is self . other; left_multiply is other . self."""
    a = Matrix.rotation(X_AXIS, 0.3)
    b = Matrix.rotation(Z_AXIS, 1.1)
    ab = a.to_array() @ b.to_array()
    np.testing.assert_allclose(a.right_multiply(b).to_array(), ab)
    np.testing.assert_allclose(b.left_multiply(a).to_array(), ab)
    v = Vector(0.2, -0.4, 0.9)
    via_product = v.transform(a.right_multiply(b))
    stepwise = v.transform(b).transform(a)
    assert tuple(via_product) == pytest.approx(tuple(stepwise))


def test_matrix_identity_and_component() -> None:
    m = Matrix.identity()
    assert m.component(0, 0) == 1.0
    assert m.component(0, 1) == 0.0
    assert Matrix() == Matrix(np.zeros((3, 3)))
    assert m.determinant() == 1.0
