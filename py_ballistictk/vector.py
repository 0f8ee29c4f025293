"""Immutable 3-D vectors for positions, velocities, accelerations and winds.

Vector is a NamedTuple, so a Vector held by a trajectory sample can never change after
the simulator moves on, and vectors compare and hash by value.

Frame: x downrange, y crossrange (positive = right of the line of fire), z up.

Examples:
    ```python
    from py_ballistictk import Vector

    velocity = Vector(800.0, 0.0, 0.0)             # m/s
    crosswind = Vector(0.0, -4.4704, 0.0)          # 10 mph blowing from the right
    air_velocity = velocity - crosswind
    position = Vector(100.0, 0.0, 1.5) + velocity * 0.001
    right = Vector(0.0, 0.0, 1.0).cross(velocity.normalize())   # Vector(0.0, 1.0, 0.0)
    ```
"""
from __future__ import annotations

import math
from typing import NamedTuple, Union

__all__ = ('Vector', 'ZERO_VECTOR')


class Vector(NamedTuple):
    """Immutable 3-D vector.

    `*` is scaling for a number and the dot product for another Vector.
    """

    x: float
    y: float
    z: float

    def magnitude(self) -> float:
        """Euclidean length."""
        return math.hypot(self.x, self.y, self.z)

    def __add__(self, other: Vector) -> Vector:  # type: ignore[override]
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vector:
        return Vector(-self.x, -self.y, -self.z)

    def scale(self, factor: float) -> Vector:
        return Vector(factor * self.x, factor * self.y, factor * self.z)

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector) -> Vector:
        """Right-handed cross product self × other."""
        return Vector(self.y * other.z - self.z * other.y,
                      self.z * other.x - self.x * other.z,
                      self.x * other.y - self.y * other.x)

    def normalize(self) -> Vector:
        """Unit vector with the same direction; a vector shorter than 1e-10 is returned unchanged."""
        length = self.magnitude()
        return self if length < 1e-10 else self.scale(1.0 / length)

    def lerp(self, other: Vector, t: float) -> Vector:
        """Point at fraction t of the way from self (t = 0) to other (t = 1)."""
        return Vector(self.x + t * (other.x - self.x),
                      self.y + t * (other.y - self.y),
                      self.z + t * (other.z - self.z))

    def __mul__(self, other: Union[float, Vector]) -> Union[float, Vector]:  # type: ignore[override]
        if isinstance(other, Vector):
            return self.dot(other)
        if isinstance(other, (int, float)):
            return self.scale(other)
        raise TypeError(f"Cannot multiply Vector by {type(other).__name__}")

    __rmul__ = __mul__  # type: ignore[assignment]

    def __truediv__(self, divisor: float) -> Vector:
        return self.scale(1.0 / divisor)

    # Named forms of the operators
    add = __add__
    subtract = __sub__
    negate = __neg__
    mul_by_const = scale
    mul_by_vector = dot


ZERO_VECTOR: Vector = Vector(0.0, 0.0, 0.0)
