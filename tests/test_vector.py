import math

import pytest

from py_ballistictk import Vector


class TestVector:

    def test_magnitude(self):
        assert Vector(1, 0, 0).magnitude() == 1
        assert Vector(3, 4, 12).magnitude() == pytest.approx(13.0)

    def test_mul_by_constant(self):
        vector = Vector(-1, -2, -3)
        assert vector.mul_by_const(2) == Vector(-2, -4, -6)
        assert vector * 2 == Vector(-2, -4, -6)
        assert 2 * vector == Vector(-2, -4, -6)

    def test_dot(self):
        vector = Vector(-1, -2, -3)
        assert vector.mul_by_vector(Vector(4, 5, 6)) == -32
        assert vector.dot(Vector(4, 5, 6)) == -32
        assert vector * Vector(4, 5, 6) == -32

    def test_cross_is_right_handed(self):
        x = Vector(1.0, 0.0, 0.0)
        y = Vector(0.0, 1.0, 0.0)
        z = Vector(0.0, 0.0, 1.0)
        assert x.cross(y) == z
        assert z.cross(x) == y
        assert y.cross(x) == -z

    def test_add_subtract_negate(self):
        vector = Vector(-1, -2, -3)
        assert vector + Vector(4, 6, 8) == Vector(3, 4, 5)
        assert vector - Vector(4, 5, 6) == Vector(-5, -7, -9)
        assert -vector == Vector(1, 2, 3)

    def test_division(self):
        assert Vector(2.0, 4.0, 6.0) / 2 == Vector(1.0, 2.0, 3.0)

    def test_normalize(self):
        normalized = Vector(-3, -3, -3).normalize()
        expected = -1 / math.sqrt(3)
        assert normalized.x == pytest.approx(expected)
        assert normalized.y == pytest.approx(expected)
        assert normalized.z == pytest.approx(expected)
        zero_vector = Vector(0, 0, 0)
        assert zero_vector.normalize() == zero_vector

    def test_lerp(self):
        a = Vector(0.0, 0.0, 0.0)
        b = Vector(10.0, -2.0, 4.0)
        assert a.lerp(b, 0.0) == a
        assert a.lerp(b, 1.0) == b
        assert a.lerp(b, 0.25) == Vector(2.5, -0.5, 1.0)

    def test_mul_type_error(self):
        with pytest.raises(TypeError):
            _ = Vector(1.0, 2.0, 3.0) * "x"  # type: ignore[operator]
