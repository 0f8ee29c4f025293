"""Trajectory data structure.

A Trajectory is an append-only, time-ordered sequence of TrajectoryPoint samples,
each holding elapsed time, a ProjectileState snapshot and the ambient wind active
at that sample. Queries by distance or time locate the bracketing pair of samples by
bisection and interpolate linearly between them; queries outside the recorded range
return None rather than extrapolating.

Examples:
    ```python
    trajectory = simulator.simulate(max_range=300.0, time_step=0.001)
    point = trajectory.at_distance(100.0)
    if point is not None:
        print(point.time, point.position.z, point.kinetic_energy)
    print(trajectory.total_time, trajectory.impact_velocity)
    ```
"""

from __future__ import annotations

import math
from bisect import bisect_right

from typing_extensions import TYPE_CHECKING, Iterator, List, NamedTuple, Optional, Sequence

from py_ballistictk.interpolation import interpolate_2_pt
from py_ballistictk.projectile import ProjectileState
from py_ballistictk.vector import Vector, ZERO_VECTOR

if TYPE_CHECKING:
    from matplotlib.axes import Axes  # type: ignore[import-untyped]
    from pandas import DataFrame  # type: ignore[import-untyped]

__all__ = ('TrajectoryPoint', 'Trajectory')


class TrajectoryPoint(NamedTuple):
    """One trajectory sample.

    Attributes:
        time: Elapsed flight time (s)
        state: Projectile flight snapshot
        wind: Ambient wind vector active at this sample (m/s)
    """

    time: float
    state: ProjectileState
    wind: Vector = ZERO_VECTOR

    @property
    def distance(self) -> float:
        """Downrange coordinate (m)."""
        return self.state.position.x

    @property
    def position(self) -> Vector:
        return self.state.position

    @property
    def velocity(self) -> Vector:
        return self.state.velocity

    @property
    def speed(self) -> float:
        return self.state.speed

    @property
    def kinetic_energy(self) -> float:
        """Kinetic energy (J)."""
        return self.state.kinetic_energy


def _interpolate_point(p0: TrajectoryPoint, p1: TrajectoryPoint, t: float) -> TrajectoryPoint:
    """Point at fraction t of the way from p0 to p1."""
    s0, s1 = p0.state, p1.state
    state = s0.evolve(
        position=s0.position.lerp(s1.position, t),
        velocity=s0.velocity.lerp(s1.velocity, t),
        spin_rate=s0.spin_rate + t * (s1.spin_rate - s0.spin_rate),
        beta_eq_right=s0.beta_eq_right + t * (s1.beta_eq_right - s0.beta_eq_right),
        beta_eq_up=s0.beta_eq_up + t * (s1.beta_eq_up - s0.beta_eq_up),
    )
    return TrajectoryPoint(p0.time + t * (p1.time - p0.time), state, p0.wind.lerp(p1.wind, t))


class Trajectory:
    """Append-only sequence of trajectory samples with query and interpolation.

    Sample times must be non-decreasing in append order. Distance queries assume the
    projectile keeps moving downrange, which holds for every flat-fire trajectory.
    """

    __slots__ = ('_points', '_times', '_distances')

    def __init__(self, points: Optional[Sequence[TrajectoryPoint]] = None) -> None:
        self._points: List[TrajectoryPoint] = []
        self._times: List[float] = []
        self._distances: List[float] = []
        for p in points or ():
            self.append(p.time, p.state, p.wind)

    def append(self, time: float, state: ProjectileState, wind: Vector = ZERO_VECTOR) -> TrajectoryPoint:
        """Append a sample.

        Raises:
            ValueError: If `time` precedes the time of the last sample.
        """
        if self._times and time < self._times[-1]:
            raise ValueError(f"Trajectory times must be non-decreasing: {time} < {self._times[-1]}")
        point = TrajectoryPoint(time, state, wind)
        self._points.append(point)
        self._times.append(time)
        self._distances.append(state.position.x)
        return point

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[TrajectoryPoint]:
        yield from self._points

    def __getitem__(self, item):
        return self._points[item]

    @property
    def point_count(self) -> int:
        return len(self._points)

    @property
    def points(self) -> Sequence[TrajectoryPoint]:
        return tuple(self._points)

    def get_point(self, index: int) -> TrajectoryPoint:
        """Sample by index.

        Raises:
            IndexError: If `index` is out of range.
        """
        if not 0 <= index < len(self._points):
            raise IndexError(f"Trajectory point index {index} out of range")
        return self._points[index]

    @staticmethod
    def _bracket(keys: List[float], value: float) -> Optional[int]:
        """Index i with keys[i] <= value <= keys[i+1], or None if value is outside keys."""
        if not keys or value < keys[0] or value > keys[-1]:
            return None
        return min(bisect_right(keys, value) - 1, len(keys) - 2)

    def _at(self, keys: List[float], value: float) -> Optional[TrajectoryPoint]:
        if len(self._points) == 1:
            return self._points[0] if value == keys[0] else None
        i = self._bracket(keys, value)
        if i is None:
            return None
        k0, k1 = keys[i], keys[i + 1]
        t = 0.0 if k1 == k0 else interpolate_2_pt(value, k0, 0.0, k1, 1.0)
        return _interpolate_point(self._points[i], self._points[i + 1], t)

    def at_distance(self, distance: float) -> Optional[TrajectoryPoint]:
        """Sample interpolated at a downrange distance (m), or None outside the recorded range."""
        return self._at(self._distances, distance)

    def at_time(self, time: float) -> Optional[TrajectoryPoint]:
        """Sample interpolated at a flight time (s), or None outside the recorded range."""
        return self._at(self._times, time)

    def position_at_time(self, time: float) -> Optional[Vector]:
        point = self.at_time(time)
        return point.position if point is not None else None

    def position_at_distance(self, distance: float) -> Optional[Vector]:
        point = self.at_distance(distance)
        return point.position if point is not None else None

    def wind_at_time(self, time: float) -> Optional[Vector]:
        point = self.at_time(time)
        return point.wind if point is not None else None

    def wind_at_distance(self, distance: float) -> Optional[Vector]:
        point = self.at_distance(distance)
        return point.wind if point is not None else None

    @property
    def total_distance(self) -> float:
        """Downrange coordinate of the last sample (m)."""
        return self._distances[-1] if self._points else 0.0

    @property
    def total_time(self) -> float:
        """Time of the last sample (s)."""
        return self._times[-1] if self._points else 0.0

    @property
    def maximum_height(self) -> float:
        """Highest vertical coordinate over all samples (m)."""
        return max((p.position.z for p in self._points), default=0.0)

    @property
    def impact_velocity(self) -> float:
        """Speed at the last sample (m/s)."""
        return self._points[-1].speed if self._points else 0.0

    @property
    def impact_angle(self) -> float:
        """Angle of descent below horizontal at the last sample (rad), positive when falling."""
        if not self._points:
            return 0.0
        v = self._points[-1].velocity
        return math.atan2(-v.z, v.x)

    def dataframe(self) -> DataFrame:
        """Return the trajectory samples as a DataFrame.

        Raises:
            ImportError: If pandas is not installed.
        """
        try:
            from py_ballistictk.visualize.dataframe import trajectory_as_dataframe
            return trajectory_as_dataframe(self)
        except ImportError as err:
            raise ImportError(
                "Use `pip install py_ballistictk[charts]` to get trajectory as pandas.DataFrame"
            ) from err

    def plot(self) -> Axes:
        """Return a graph of drop and drift against distance.

        Raises:
            ImportError: If plotting dependencies are not installed.
        """
        try:
            from py_ballistictk.visualize.plot import trajectory_as_plot
            return trajectory_as_plot(self)
        except ImportError as err:
            raise ImportError(
                "Use `pip install py_ballistictk[charts]` to get results as a plot"
            ) from err
