"""Projectile properties and in-flight state.

Projectile holds the static physical properties of a bullet. ProjectileState pairs a
Projectile with a complete flight snapshot: position, velocity, spin and the two
equilibrium lateral angles that anchor the lagged yaw-of-repose response.
Both are frozen: the simulator replaces states, it never mutates one that a
trajectory sample may already reference.

Examples:
    ```python
    from py_ballistictk import DragFunction, Projectile, Vector

    bullet = Projectile(mass=0.0113, diameter=0.00782, length=0.0325, bc=0.243,
                        drag_function=DragFunction.G7)
    spin = Projectile.compute_spin_rate_from_twist(800.0, 0.254)  # 1:10" RH twist
    state = bullet.in_flight(velocity=Vector(800.0, 0.0, 0.0), spin_rate=spin)
    ```
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from py_ballistictk.constants import cSpinRadiusOfGyrationFactor
from py_ballistictk.drag_model import DragFunction
from py_ballistictk.vector import Vector, ZERO_VECTOR

__all__ = ('Projectile', 'ProjectileState')


@dataclass(frozen=True)
class Projectile:
    """Static physical properties of a projectile.

    Attributes:
        mass: Mass (kg)
        diameter: Diameter (m)
        length: Length (m)
        bc: Ballistic coefficient (lb/in²) relative to `drag_function`
        drag_function: Reference drag curve the BC refers to

    Raises:
        ValueError: If any dimension, the mass or the BC is not positive.
    """

    mass: float
    diameter: float
    length: float
    bc: float
    drag_function: DragFunction = DragFunction.G7

    def __post_init__(self) -> None:
        if self.bc <= 0:
            raise ValueError('Ballistic coefficient must be positive')
        if self.mass <= 0 or self.diameter <= 0 or self.length <= 0:
            raise ValueError('Projectile mass, diameter and length must be positive')
        object.__setattr__(self, 'drag_function', DragFunction.parse(self.drag_function))

    @property
    def sectional_density(self) -> float:
        """Sectional density m/d² (kg/m²)."""
        return self.mass / (self.diameter * self.diameter)

    @property
    def reference_area(self) -> float:
        """Frontal area π/4·d² (m²)."""
        return math.pi / 4.0 * self.diameter * self.diameter

    @property
    def reference_length(self) -> float:
        """Characteristic length for aerodynamic moments (m)."""
        return max(self.diameter, self.length)

    @property
    def spin_moment_of_inertia(self) -> float:
        """Axial moment of inertia estimate m·(0.30·d)² (kg·m²)."""
        r_eff = cSpinRadiusOfGyrationFactor * self.diameter
        return self.mass * r_eff * r_eff

    @staticmethod
    def compute_spin_rate_from_twist(speed: float, twist: float) -> float:
        """Spin rate imparted by rifling.

        Args:
            speed: Muzzle speed (m/s)
            twist: Signed rifling pitch (m/turn), right-hand > 0, left-hand < 0

        Returns:
            Spin rate (rad/s), signed by twist handedness; 0 for a smooth bore (twist 0).
        """
        if twist == 0.0:
            return 0.0
        omega = 2.0 * math.pi * speed / math.fabs(twist)
        return omega if twist > 0.0 else -omega

    def in_flight(self,
                  velocity: Vector,
                  spin_rate: float = 0.0,
                  position: Vector = ZERO_VECTOR) -> ProjectileState:
        """Create a flight snapshot of this projectile."""
        return ProjectileState(self, position, velocity, spin_rate)


@dataclass(frozen=True)
class ProjectileState:
    """Projectile plus a complete flight snapshot.

    Attributes:
        projectile: Static projectile properties
        position: Position (m), x downrange, y crossrange (right), z up
        velocity: Velocity (m/s)
        spin_rate: Spin about the velocity axis (rad/s), signed by twist handedness
        beta_eq_right: Equilibrium lateral angle, right component (rad)
        beta_eq_up: Equilibrium lateral angle, up component (rad)
    """

    projectile: Projectile
    position: Vector
    velocity: Vector
    spin_rate: float = 0.0
    beta_eq_right: float = 0.0
    beta_eq_up: float = 0.0

    @property
    def speed(self) -> float:
        return self.velocity.magnitude()

    @property
    def elevation_angle(self) -> float:
        """Angle of the velocity above the horizontal plane (rad)."""
        return math.atan2(self.velocity.z, self.velocity.x)

    @property
    def azimuth_angle(self) -> float:
        """Horizontal angle of the velocity from the downrange axis (rad), positive to the right."""
        return math.atan2(self.velocity.y, self.velocity.x)

    @property
    def kinetic_energy(self) -> float:
        """0.5·m·|v|² (J)."""
        return 0.5 * self.projectile.mass * self.velocity.mul_by_vector(self.velocity)

    def evolve(self, **changes) -> ProjectileState:
        """Return a copy of this state with the given fields replaced."""
        return replace(self, **changes)
