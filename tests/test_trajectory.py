import math

import pytest

from py_ballistictk import Projectile, Trajectory, TrajectoryPoint, Vector


def _state(bullet, x, z=0.0, vx=800.0, vz=0.0, spin=0.0):
    return bullet.in_flight(Vector(vx, 0.0, vz), spin, Vector(x, 0.0, z))


@pytest.fixture
def trajectory(bullet) -> Trajectory:
    """Three samples 0.1 s apart rising then falling."""
    trajectory = Trajectory()
    trajectory.append(0.0, _state(bullet, 0.0, 0.0, 800.0, 5.0, 1000.0))
    trajectory.append(0.1, _state(bullet, 80.0, 0.2, 780.0, 1.0, 1000.0), Vector(0.0, -2.0, 0.0))
    trajectory.append(0.2, _state(bullet, 158.0, 0.1, 760.0, -3.0, 1000.0), Vector(0.0, -4.0, 0.0))
    return trajectory


class TestTrajectory:

    def test_append_and_access(self, trajectory):
        assert len(trajectory) == trajectory.point_count == 3
        assert isinstance(trajectory[0], TrajectoryPoint)
        assert trajectory.get_point(2).distance == 158.0
        assert [p.time for p in trajectory] == [0.0, 0.1, 0.2]
        assert trajectory.points[1].wind == Vector(0.0, -2.0, 0.0)

    def test_get_point_out_of_range(self, trajectory):
        with pytest.raises(IndexError):
            trajectory.get_point(3)
        with pytest.raises(IndexError):
            trajectory.get_point(-1)

    def test_append_rejects_earlier_time(self, trajectory, bullet):
        with pytest.raises(ValueError):
            trajectory.append(0.15, _state(bullet, 200.0))
        assert len(trajectory) == 3

    def test_at_distance_interpolates(self, trajectory):
        point = trajectory.at_distance(40.0)
        assert point.time == pytest.approx(0.05)
        assert point.position.z == pytest.approx(0.1)
        assert point.velocity.x == pytest.approx(790.0)
        assert point.wind == Vector(0.0, -1.0, 0.0)
        assert point.state.spin_rate == pytest.approx(1000.0)

    def test_at_distance_second_interval(self, trajectory):
        point = trajectory.at_distance(119.0)
        assert point.time == pytest.approx(0.15)
        assert point.position.z == pytest.approx(0.15)

    def test_at_time(self, trajectory):
        point = trajectory.at_time(0.15)
        assert point.distance == pytest.approx(119.0)
        assert trajectory.position_at_time(0.15).x == pytest.approx(119.0)
        assert trajectory.wind_at_time(0.15).y == pytest.approx(-3.0)

    def test_endpoints_are_inclusive(self, trajectory):
        assert trajectory.at_distance(0.0).time == 0.0
        assert trajectory.at_distance(158.0).time == pytest.approx(0.2)
        assert trajectory.at_time(0.2).distance == pytest.approx(158.0)

    @pytest.mark.parametrize("distance", [-1.0, 158.5])
    def test_outside_range_is_none(self, trajectory, distance):
        assert trajectory.at_distance(distance) is None
        assert trajectory.position_at_distance(distance) is None
        assert trajectory.wind_at_distance(distance) is None

    def test_time_outside_range_is_none(self, trajectory):
        assert trajectory.at_time(0.3) is None
        assert trajectory.position_at_time(-0.1) is None

    def test_single_point(self, bullet):
        trajectory = Trajectory()
        trajectory.append(0.0, _state(bullet, 0.0))
        assert trajectory.at_distance(0.0) is trajectory[0]
        assert trajectory.at_distance(1.0) is None

    def test_empty(self):
        trajectory = Trajectory()
        assert trajectory.at_distance(0.0) is None
        assert trajectory.total_distance == 0.0
        assert trajectory.total_time == 0.0
        assert trajectory.maximum_height == 0.0
        assert trajectory.impact_velocity == 0.0
        assert trajectory.impact_angle == 0.0

    def test_derived_scalars(self, trajectory):
        assert trajectory.total_distance == 158.0
        assert trajectory.total_time == pytest.approx(0.2)
        assert trajectory.maximum_height == pytest.approx(0.2)
        assert trajectory.impact_velocity == pytest.approx(math.hypot(760.0, 3.0))
        assert trajectory.impact_angle == pytest.approx(math.atan2(3.0, 760.0))
        assert trajectory.impact_angle > 0

    def test_energy(self, trajectory, bullet):
        point = trajectory[0]
        assert point.kinetic_energy == pytest.approx(0.5 * bullet.mass * (800.0 ** 2 + 5.0 ** 2))

    def test_copy_from_points(self, trajectory):
        copy = Trajectory(trajectory.points)
        assert len(copy) == 3
        assert copy.at_time(0.1) == trajectory.at_time(0.1)


def test_missing_chart_dependencies_hint(trajectory, monkeypatch):
    import sys
    monkeypatch.setitem(sys.modules, 'pandas', None)
    monkeypatch.delitem(sys.modules, 'py_ballistictk.visualize.dataframe', raising=False)
    monkeypatch.delitem(sys.modules, 'py_ballistictk.visualize', raising=False)
    with pytest.warns(UserWarning):
        with pytest.raises(ImportError, match=r"py_ballistictk\[charts\]"):
            trajectory.dataframe()
