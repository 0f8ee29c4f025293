"""Flight-dynamics integrator.

The Simulator owns two projectile states: the remembered *initial* state and the
*current* working state. It advances the current state with a second-order midpoint
(RK2) scheme under a reduced-order force model:

    - drag opposing the air-relative velocity, Cd looked up on the G1/G7 curve by Mach number
    - constant gravity
    - spin drift: a steady yaw of repose driven by gravity's component normal to the flight path
    - crosswind jump: a lateral force from the high-passed sideslip angle, whose low-passed
      equilibrium (beta_eq_right, beta_eq_up) is carried in the projectile state

Spin decay and any coupling between yaw and drag are not modelled.

Frame: x downrange, y crossrange (positive right), z up. Wind vectors give the
velocity of the air, so wind blowing from the right is Vector(0, -speed, 0).

Examples:
    ```python
    from py_ballistictk import Atmosphere, DragFunction, Projectile, Simulator, Vector

    bullet = Projectile(mass=0.0113, diameter=0.00782, length=0.0325, bc=0.243,
                        drag_function=DragFunction.G7)
    simulator = Simulator()
    simulator.set_atmosphere(Atmosphere.standard())
    simulator.set_initial_bullet(bullet.in_flight(Vector(800.0, 0.0, 0.0)))
    spin = bullet.compute_spin_rate_from_twist(800.0, 0.254)
    simulator.compute_zero(800.0, Vector(100.0, 0.0, 0.05), spin_rate=spin).check()
    simulator.set_wind(Vector(0.0, -4.4704, 0.0))  # 10 mph from the right
    trajectory = simulator.simulate(max_range=300.0)
    ```
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from typing_extensions import Callable, NamedTuple, Optional, Tuple, Union

from py_ballistictk.atmosphere import Atmosphere
from py_ballistictk.config import SimulatorConfig, SimulatorConfigDict, create_simulator_config
from py_ballistictk.drag_model import drag_coefficient, drag_retardation
from py_ballistictk.exceptions import ConfigurationError, ZeroFindingError
from py_ballistictk.logger import logger
from py_ballistictk.projectile import Projectile, ProjectileState
from py_ballistictk.trajectory import Trajectory
from py_ballistictk.vector import Vector, ZERO_VECTOR

__all__ = (
    'AeroCoefficients',
    'DEFAULT_AERO_COEFFICIENTS',
    'ZeroResult',
    'WindField',
    'Simulator',
)

WindField = Callable[[Vector], Vector]
"""Position-dependent wind: maps a projectile position (m) to the air velocity there (m/s)."""

_WORLD_UP = Vector(0.0, 0.0, 1.0)
_WORLD_RIGHT = Vector(0.0, 1.0, 0.0)

cMinAirSpeed: float = 1e-3  # m/s, below this no spin/wind forces are applied
cMinAlignRate: float = 1e-6  # 1/s, below this the yaw of repose is taken as zero


class AeroCoefficients(NamedTuple):
    """Tunable coefficients of the spin drift / crosswind jump model.

    Attributes:
        lift_slope: Lift-force slope per radian of yaw
        restoring_moment_slope: Restoring (overturning) moment slope per radian, negative
        yaw_of_repose_scale: Scale of the yaw-of-repose and jump angles
        beta_lag_scale: Relative rate at which the equilibrium sideslip follows the flow
    """

    lift_slope: float
    restoring_moment_slope: float
    yaw_of_repose_scale: float
    beta_lag_scale: float


DEFAULT_AERO_COEFFICIENTS = AeroCoefficients(
    lift_slope=1.27169,
    restoring_moment_slope=-0.124862,
    yaw_of_repose_scale=0.426516,
    beta_lag_scale=0.670554,
)


@dataclass(frozen=True)
class ZeroResult:
    """Outcome of Simulator.compute_zero.

    Attributes:
        converged: True if the miss distance fell below tolerance
        iterations: Number of trial trajectories flown
        elevation: Barrel elevation of the last trial (rad)
        azimuth: Barrel azimuth of the last trial (rad), positive to the right
        miss_distance: Combined crossrange/vertical miss of the last trial at the target plane (m),
            inf if the last trial never reached the target plane
        state: Launch state of the last trial
    """

    converged: bool
    iterations: int
    elevation: float
    azimuth: float
    miss_distance: float
    state: ProjectileState

    def check(self) -> ZeroResult:
        """Return self, or raise ZeroFindingError if the search did not converge."""
        if not self.converged:
            raise ZeroFindingError(self.miss_distance, self.iterations, self.elevation)
        return self


def _safe_normalize(v: Vector, fallback: Vector) -> Vector:
    m = v.magnitude()
    return v / m if m > 1e-9 else fallback


def _launch_velocity(speed: float, elevation: float, azimuth: float) -> Vector:
    cos_el = math.cos(elevation)
    return Vector(speed * cos_el * math.cos(azimuth),
                  speed * cos_el * math.sin(azimuth),
                  speed * math.sin(elevation))


class Simulator:
    """Point-mass trajectory integrator with a lagged yaw-of-repose model.

    A Simulator is unconfigured until both an initial bullet and an atmosphere are set;
    until then `simulate`, `time_step`, `reset_to_initial` and `compute_zero` raise
    ConfigurationError. Instances hold mutable state and must not be shared between threads.
    """

    def __init__(self,
                 config: Union[SimulatorConfig, SimulatorConfigDict, None] = None,
                 coefficients: AeroCoefficients = DEFAULT_AERO_COEFFICIENTS) -> None:
        self._config: SimulatorConfig = (
            config if isinstance(config, SimulatorConfig) else create_simulator_config(config)
        )
        self._gravity = Vector(0.0, 0.0, -self._config.cGravityConstant)
        self._coefficients: AeroCoefficients = coefficients
        self._initial: Optional[ProjectileState] = None
        self._current: Optional[ProjectileState] = None
        self._atmosphere: Optional[Atmosphere] = None
        self._density: float = 0.0
        self._speed_of_sound: float = 0.0
        self._wind: Vector = ZERO_VECTOR
        self._time: float = 0.0
        self._trajectory: Trajectory = Trajectory()

    # region Configuration

    @property
    def config(self) -> SimulatorConfig:
        return self._config

    @property
    def is_configured(self) -> bool:
        return self._initial is not None and self._atmosphere is not None

    def _require_configured(self) -> None:
        if self._initial is None:
            raise ConfigurationError("Simulator has no initial bullet; call set_initial_bullet() first")
        if self._atmosphere is None:
            raise ConfigurationError("Simulator has no atmosphere; call set_atmosphere() first")

    def set_initial_bullet(self, bullet: Union[ProjectileState, Projectile]) -> None:
        """Remember `bullet` as the initial state and reset the working state to it.

        A bare Projectile is placed at the origin at rest.
        """
        if isinstance(bullet, Projectile):
            bullet = bullet.in_flight(ZERO_VECTOR)
        self._initial = bullet
        self._reset()

    def set_atmosphere(self, atmosphere: Atmosphere) -> None:
        self._atmosphere = atmosphere
        self._density = atmosphere.density()
        self._speed_of_sound = atmosphere.speed_of_sound()

    def set_wind(self, wind: Vector) -> None:
        """Set the ambient wind (velocity of the air, m/s)."""
        self._wind = wind

    @property
    def initial_state(self) -> Optional[ProjectileState]:
        return self._initial

    @property
    def current_state(self) -> Optional[ProjectileState]:
        return self._current

    @property
    def atmosphere(self) -> Optional[Atmosphere]:
        return self._atmosphere

    @property
    def wind(self) -> Vector:
        return self._wind

    @property
    def current_time(self) -> float:
        return self._time

    @property
    def current_distance(self) -> float:
        """Downrange coordinate of the working state (m)."""
        return self._current.position.x if self._current is not None else 0.0

    @property
    def trajectory(self) -> Trajectory:
        """Samples of the last simulate() run, plus any time_step() calls since."""
        return self._trajectory

    @property
    def coefficients(self) -> AeroCoefficients:
        return self._coefficients

    @coefficients.setter
    def coefficients(self, value: AeroCoefficients) -> None:
        self._coefficients = AeroCoefficients(*value)

    def set_lift_slope_per_rad(self, value: float) -> None:
        self._coefficients = self._coefficients._replace(lift_slope=value)

    def set_restoring_moment_slope_per_rad(self, value: float) -> None:
        self._coefficients = self._coefficients._replace(restoring_moment_slope=value)

    def set_yaw_of_repose_scale(self, value: float) -> None:
        self._coefficients = self._coefficients._replace(yaw_of_repose_scale=value)

    def set_beta_lag_scale(self, value: float) -> None:
        self._coefficients = self._coefficients._replace(beta_lag_scale=value)

    # endregion Configuration

    def reset_to_initial(self) -> None:
        """Return the working state to the remembered initial state at time 0."""
        self._require_configured()
        self._reset()

    def _reset(self) -> None:
        self._current = self._initial
        self._time = 0.0
        self._trajectory = Trajectory()

    # region Force model

    def _spin_wind_acceleration(self, state: ProjectileState, air_velocity: Vector, air_speed: float,
                                dt: float) -> Tuple[Vector, float, float]:
        """Spin drift and crosswind jump accelerations.

        Returns:
            Extra acceleration (m/s²) and the updated equilibrium sideslip (right, up).
        """
        if air_speed < cMinAirSpeed:
            return ZERO_VECTOR, state.beta_eq_right, state.beta_eq_up

        lift, restoring, yaw_scale, beta_lag = self._coefficients
        bullet = state.projectile
        v = state.velocity
        ground_speed = v.magnitude()
        t_hat = v / ground_speed if ground_speed > 1e-6 else air_velocity / air_speed

        # Basis of the plane normal to the flight path
        right = _safe_normalize(_WORLD_UP.cross(t_hat), _WORLD_RIGHT)
        up_in_plane = _safe_normalize(t_hat.cross(right), _WORLD_UP)

        q_dyn = 0.5 * self._density * air_speed * air_speed
        s_ref = bullet.reference_area

        # How fast the nose trims into the flow
        align_rate = (q_dyn * s_ref * bullet.reference_length * math.fabs(restoring)) / (
            bullet.spin_moment_of_inertia * math.fabs(state.spin_rate) + 1e-12)
        a_lp = 1.0 - math.exp(-beta_lag * align_rate * dt)

        hand = 1.0 if state.spin_rate >= 0.0 else -1.0

        # Spin drift: steady yaw of repose from gravity normal to the path
        g_perp = self._gravity - t_hat * self._gravity.dot(t_hat)
        drift_dir = t_hat.cross(g_perp)
        yor = yaw_scale * drift_dir.magnitude() / (air_speed * align_rate) if align_rate > cMinAlignRate else 0.0
        yor_right = hand * _safe_normalize(drift_dir, right).dot(right) * yor

        # Crosswind jump: high-pass of the sideslip beta = u_perp / V
        u_perp = air_velocity - t_hat * air_velocity.dot(t_hat)
        beta_right = u_perp.dot(right) / (air_speed + 1e-12)
        beta_up = u_perp.dot(up_in_plane) / (air_speed + 1e-12)
        beta_eq_right = state.beta_eq_right + a_lp * (beta_right - state.beta_eq_right)
        beta_eq_up = state.beta_eq_up + a_lp * (beta_up - state.beta_eq_up)
        jump_right = yaw_scale * hand * -(beta_up - beta_eq_up)
        jump_up = yaw_scale * hand * -(beta_right - beta_eq_right)

        gain = q_dyn * s_ref * lift / bullet.mass
        extra = right * (gain * (yor_right + jump_right)) + up_in_plane * (gain * jump_up)
        return extra, beta_eq_right, beta_eq_up

    def _acceleration(self, state: ProjectileState, wind: Vector, dt: float) -> Tuple[Vector, float, float]:
        """Total acceleration on `state` and its updated equilibrium sideslip."""
        air_velocity = state.velocity - wind
        air_speed = air_velocity.magnitude()
        if air_speed <= 0.0:
            return self._gravity, state.beta_eq_right, state.beta_eq_up

        bullet = state.projectile
        cd = drag_coefficient(air_speed / self._speed_of_sound, bullet.drag_function)
        retardation = drag_retardation(self._density, air_speed, cd, bullet.bc)
        drag = air_velocity * (-retardation / air_speed)

        extra, beta_eq_right, beta_eq_up = self._spin_wind_acceleration(state, air_velocity, air_speed, dt)
        return drag + self._gravity + extra, beta_eq_right, beta_eq_up

    def _step(self, s0: ProjectileState, wind: Vector, dt: float) -> ProjectileState:
        """One RK2 midpoint step; returns a new state."""
        a0, br, bu = self._acceleration(s0, wind, dt)
        v_half = s0.velocity + a0 * (0.5 * dt)
        x_half = s0.position + v_half * (0.5 * dt)
        s_half = ProjectileState(s0.projectile, x_half, v_half, s0.spin_rate, br, bu)
        a_half, br, bu = self._acceleration(s_half, wind, dt)
        return ProjectileState(s0.projectile,
                               s0.position + v_half * dt,
                               s0.velocity + a_half * dt,
                               s0.spin_rate, br, bu)

    # endregion Force model

    # region Integration

    def time_step(self, dt: Optional[float] = None) -> ProjectileState:
        """Advance the working state by one step and record it in `trajectory`."""
        self._require_configured()
        if dt is None:
            dt = self._config.cTimeStep
        self._current = self._step(self._current, self._wind, dt)  # type: ignore[arg-type]
        self._time += dt
        self._trajectory.append(self._time, self._current, self._wind)
        return self._current

    def simulate(self,
                 max_range: float,
                 time_step: Optional[float] = None,
                 max_time: Optional[float] = None,
                 wind_field: Optional[WindField] = None) -> Trajectory:
        """Integrate from the working state until `max_range` is passed or `max_time` elapses.

        Args:
            max_range: Stop after the first sample beyond this downrange distance (m)
            time_step: Integration step (s), default `cTimeStep`
            max_time: Ceiling on simulated time for this call (s), default `cMaxTime`
            wind_field: Optional position-dependent wind, sampled before each step;
                replaces the ambient wind set by set_wind()

        Returns:
            A new Trajectory holding the starting sample and one sample per step.
        """
        self._require_configured()
        dt = self._config.cTimeStep if time_step is None else time_step
        if dt <= 0.0:
            raise ValueError(f"Time step must be positive, got {dt}")
        time_limit = self._time + (self._config.cMaxTime if max_time is None else max_time)

        self._trajectory = Trajectory()
        if wind_field is not None:
            self._wind = wind_field(self._current.position)  # type: ignore[union-attr]
        self._trajectory.append(self._time, self._current, self._wind)  # type: ignore[arg-type]

        while self._time < time_limit:
            if wind_field is not None:
                self._wind = wind_field(self._current.position)  # type: ignore[union-attr]
            self.time_step(dt)
            if self._current.position.x > max_range:  # type: ignore[union-attr]
                break
        logger.debug(f"Simulated {len(self._trajectory) - 1} steps to "
                     f"{self.current_distance:.3f} m in {self._time:.4f} s")
        return self._trajectory

    def _fly(self, state: ProjectileState, max_range: float, dt: float, max_time: float) -> Trajectory:
        """Fly `state` from time 0 under zero wind without touching the working state."""
        trajectory = Trajectory()
        time = 0.0
        trajectory.append(time, state)
        while time < max_time:
            state = self._step(state, ZERO_VECTOR, dt)
            time += dt
            trajectory.append(time, state)
            if state.position.x > max_range:
                break
        return trajectory

    # endregion Integration

    def compute_zero(self,
                     muzzle_velocity: float,
                     target_position: Vector,
                     time_step: Optional[float] = None,
                     max_iterations: Optional[int] = None,
                     tolerance: Optional[float] = None,
                     spin_rate: float = 0.0,
                     damping: Optional[float] = None) -> ZeroResult:
        """Find the launch elevation and azimuth that put the zero-wind trajectory through a point.

        Fixed-point iteration: each trial is flown from the origin, and the launch angles are
        corrected by the angular miss at the target plane scaled by `damping`.
        On convergence the zeroed launch state becomes the remembered initial state and the
        working state is reset to it. On failure the initial state is left unchanged;
        the returned result says so, and its `check()` raises ZeroFindingError.

        Args:
            muzzle_velocity: Launch speed (m/s)
            target_position: Point the trajectory must pass through (m), target_position.x > 0
            time_step: Integration step (s), default `cTimeStep`
            max_iterations: Iteration budget, default `cZeroMaxIterations`
            tolerance: Allowed miss distance in the target plane (m), default `cZeroTolerance`
            spin_rate: Spin of the launched projectile (rad/s)
            damping: Fraction of the angular error applied per iteration, default `cZeroDamping`
        """
        self._require_configured()
        config = self._config
        dt = config.cTimeStep if time_step is None else time_step
        max_iterations = config.cZeroMaxIterations if max_iterations is None else max_iterations
        tolerance = config.cZeroTolerance if tolerance is None else tolerance
        damping = config.cZeroDamping if damping is None else damping
        target_range = target_position.x
        if target_range <= 0.0:
            raise ValueError(f"Zero target must be downrange, got x={target_range}")

        bullet = self._initial.projectile  # type: ignore[union-attr]
        elevation = config.cZeroInitialElevation
        azimuth = 0.0
        miss = math.inf
        iterations = 0
        converged = False
        state = bullet.in_flight(_launch_velocity(muzzle_velocity, elevation, azimuth), spin_rate)

        while iterations < max_iterations:
            iterations += 1
            state = bullet.in_flight(_launch_velocity(muzzle_velocity, elevation, azimuth), spin_rate)
            trajectory = self._fly(state, target_range * config.cZeroRangeOvershoot, dt, config.cZeroMaxTime)
            point = trajectory.at_distance(target_range)
            if point is None:
                miss = math.inf
                logger.debug(f"Zero iteration {iterations}: trajectory ended at "
                             f"{trajectory.total_distance:.3f} m, short of {target_range:.3f} m")
                break
            lateral_error = point.position.y - target_position.y
            vertical_error = point.position.z - target_position.z
            miss = math.hypot(lateral_error, vertical_error)
            logger.debug(f"Zero iteration {iterations}: elevation={elevation:.8f} rad, "
                         f"azimuth={azimuth:.8f} rad, miss={miss:.3e} m")
            if miss < tolerance:
                converged = True
                break
            elevation -= damping * math.atan2(vertical_error, target_range)
            azimuth -= damping * math.atan2(lateral_error, target_range)

        result = ZeroResult(converged, iterations, elevation, azimuth, miss, state)
        if converged:
            self._initial = state
            self._reset()
        else:
            logger.warning(f"Zero search failed after {iterations} iterations, miss {miss:.6f} m")
        return result

    # camelCase aliases
    setInitialBullet = set_initial_bullet
    setAtmosphere = set_atmosphere
    setWind = set_wind
    setLiftSlopePerRad = set_lift_slope_per_rad
    setRestoringMomentSlopePerRad = set_restoring_moment_slope_per_rad
    setYawOfReposeScale = set_yaw_of_repose_scale
    setBetaLagScale = set_beta_lag_scale
    resetToInitial = reset_to_initial
    computeZero = compute_zero
    timeStep = time_step
