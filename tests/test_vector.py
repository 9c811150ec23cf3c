"""Tests for beachballs.vector."""
import dataclasses
import math

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from beachballs import vector
from beachballs.errors import DegenerateVectorError, ShapeError
from beachballs.vector import Vector


# ---------------------------------------------------------------------------
# Free functions
# ---------------------------------------------------------------------------

class TestArithmetic:

    def test_add_subtract(self):
        np.testing.assert_allclose(vector.add([1, 2, 3], [4, 5, 6]), [5, 7, 9])
        np.testing.assert_allclose(vector.subtract([1, 2, 3], [4, 5, 6]), [-3, -3, -3])

    @pytest.mark.parametrize("op", [vector.add, vector.subtract, vector.dot, vector.angle])
    def test_length_mismatch(self, op):
        with pytest.raises(ShapeError):
            op([1, 2, 3], [1, 2])

    def test_does_not_mutate_inputs(self):
        a = [1.0, 2.0, 3.0]
        b = np.array([4.0, 5.0, 6.0])
        vector.add(a, b)
        vector.unit(a)
        vector.rotate(a, [0, 0, 1], 1.0)
        assert a == [1.0, 2.0, 3.0]
        np.testing.assert_array_equal(b, [4.0, 5.0, 6.0])

    def test_dot(self):
        assert vector.dot([1, 2, 3], [4, 5, 6]) == 32.0

    def test_cross_right_hand_rule(self):
        np.testing.assert_allclose(vector.cross([1, 0, 0], [0, 1, 0]), [0, 0, 1])
        np.testing.assert_allclose(vector.cross([0, 1, 0], [1, 0, 0]), [0, 0, -1])

    def test_cross_requires_three_dimensions(self):
        with pytest.raises(ShapeError):
            vector.cross([1, 0], [0, 1])

    def test_magnitude_and_multiply(self):
        assert vector.magnitude([3, 4]) == 5.0
        np.testing.assert_allclose(vector.multiply([1, -2], 3), [3, -6])
        np.testing.assert_allclose(vector.negative([1, -2]), [-1, 2])

    def test_unit(self):
        np.testing.assert_allclose(vector.unit([3, 4]), [0.6, 0.8])

    def test_unit_zero_vector_fails(self):
        with pytest.raises(DegenerateVectorError):
            vector.unit([0, 0, 0])

    def test_equals(self):
        assert vector.equals([1, 2, 3], (1.0, 2.0, 3.0))
        assert not vector.equals([1, 2, 3], [1, 2])
        assert not vector.equals([1, 2, 3], [1, 2, 4])

    def test_components(self):
        assert (vector.x([1, 2, 3]), vector.y([1, 2, 3]), vector.z([1, 2, 3])) == (1, 2, 3)


class TestAngles:

    def test_angle(self):
        assert vector.angle([1, 0, 0], [0, 1, 0]) == pytest.approx(math.pi / 2)
        assert vector.angle([1, 1, 0], [2, 2, 0]) == pytest.approx(0.0, abs=1e-7)
        assert vector.angle([1, 0, 0], [-1, 0, 0]) == pytest.approx(math.pi)

    def test_angle_zero_vector_fails(self):
        with pytest.raises(DegenerateVectorError):
            vector.angle([0, 0, 0], [1, 0, 0])

    def test_azimuth(self):
        assert vector.azimuth([0, 1]) == pytest.approx(0.0)
        assert vector.azimuth([1, 0]) == pytest.approx(math.pi / 2)
        assert vector.azimuth([0, -1, 5]) == pytest.approx(math.pi)

    @pytest.mark.parametrize("z", [-3.0, 0.0, 2.5])
    def test_azimuth_of_vertical_vector_is_zero(self, z):
        assert vector.azimuth([0, 0, z]) == 0

    def test_azimuth_requires_two_dimensions(self):
        with pytest.raises(ShapeError):
            vector.azimuth([1])

    def test_plunge(self):
        assert vector.plunge([1, 0, 1]) == pytest.approx(math.pi / 4)
        assert vector.plunge([1, 0, -1]) == pytest.approx(-math.pi / 4)
        assert vector.plunge([0, 0, 2]) == pytest.approx(math.pi / 2)

    def test_plunge_errors(self):
        with pytest.raises(ShapeError):
            vector.plunge([1, 0])
        with pytest.raises(DegenerateVectorError):
            vector.plunge([0, 0, 0])


class TestRotate:

    def test_axis_aligned(self):
        np.testing.assert_allclose(
            vector.rotate([1, 0, 0], [0, 0, 1], math.pi / 2), [0, 1, 0], atol=1e-12
        )
        np.testing.assert_allclose(
            vector.rotate([0, 1, 0], [1, 0, 0], math.pi / 2), [0, 0, 1], atol=1e-12
        )

    def test_about_offset_line(self):
        result = vector.rotate([2, 0, 0], [0, 0, 1], math.pi, origin=[1, 0, 0])
        np.testing.assert_allclose(result, [0, 0, 0], atol=1e-12)

    def test_point_on_axis_is_fixed(self):
        result = vector.rotate([1, 2, 3], vector.unit([1, 1, 1]), 0.7, origin=[0, 1, 2])
        np.testing.assert_allclose(result, [1, 2, 3], atol=1e-12)

    def test_matches_scipy_rotation(self):
        rng = np.random.default_rng(42)
        for _ in range(10):
            axis = vector.unit(rng.normal(size=3))
            theta = rng.uniform(-math.pi, math.pi)
            point = rng.normal(size=3)
            expected = Rotation.from_rotvec(axis * theta).apply(point)
            np.testing.assert_allclose(vector.rotate(point, axis, theta), expected, atol=1e-12)

    def test_requires_three_components(self):
        with pytest.raises(ShapeError):
            vector.rotate([1, 0], [0, 0, 1], 1.0)


# ---------------------------------------------------------------------------
# Vector value type
# ---------------------------------------------------------------------------

class TestVector:

    def test_is_immutable(self):
        v = Vector([1, 2, 3])
        with pytest.raises(dataclasses.FrozenInstanceError):
            v.data = (0.0,)

    def test_builders_return_new_vector(self):
        v = Vector([1, 2, 3])
        w = v.with_x(7).with_y(8).with_z(9)
        assert w.data == (7.0, 8.0, 9.0)
        assert v.data == (1.0, 2.0, 3.0)

    def test_builder_out_of_range(self):
        with pytest.raises(ShapeError):
            Vector([1, 2]).with_z(3)

    def test_copy_and_sequence_protocol(self):
        v = Vector(Vector((1, 2, 3)))
        assert len(v) == 3
        assert list(v) == [1.0, 2.0, 3.0]
        assert v[1] == 2.0
        assert (v.x, v.y, v.z) == (1.0, 2.0, 3.0)
        assert str(v) == "1.0,2.0,3.0"
        np.testing.assert_array_equal(np.asarray(v), [1.0, 2.0, 3.0])

    def test_methods_return_vectors(self):
        v = Vector([3, 0, 4])
        assert isinstance(v.add([1, 1, 1]), Vector)
        assert v.add([1, 1, 1]).data == (4.0, 1.0, 5.0)
        assert v.subtract(Vector([3, 0, 4])).data == (0.0, 0.0, 0.0)
        assert v.multiply(2).data == (6.0, 0.0, 8.0)
        assert v.negative().data == (-3.0, -0.0, -4.0)
        assert v.magnitude() == 5.0
        assert v.unit().data == pytest.approx((0.6, 0.0, 0.8))
        assert v.cross([0, 1, 0]).data == pytest.approx((-4.0, 0.0, 3.0))
        assert v.dot([1, 1, 1]) == 7.0
        assert v.equals([3, 0, 4])
        assert v.plunge() == pytest.approx(math.asin(0.8))
        assert v.azimuth() == pytest.approx(math.pi / 2)
        assert v.angle([3, 0, 4]) == pytest.approx(0.0, abs=1e-7)
        assert v.rotate([0, 0, 1], math.pi).data == pytest.approx((-3.0, 0.0, 4.0), abs=1e-12)

    def test_rejects_nested_data(self):
        with pytest.raises(ShapeError):
            Vector([[1, 2], [3, 4]])
