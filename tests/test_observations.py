from dataclasses import replace

import pytest

from py_ballistictk import Calibrator, DragFunction, Observation, ObservationError, expand_observations, load_observations
from py_ballistictk.observations import CROSSWIND_SPEEDS_MPH, parse_observations

HEADER = ("bullet,caliber,length_in,bc_g7,twist_in,mv_fps,range_yd,wind_0,vert_0,wind_5,vert_5,"
          "wind_10,vert_10,wind_neg5,vert_neg5,wind_neg10,vert_neg10")
ROW = "Test,308,1.2,0.243,10,2800,300,0.1,0.0,0.2,0.01,0.3,0.02,0.05,-0.01,0.0,-0.02"


class TestObservation:

    def test_from_row(self, observation):
        assert observation.bullet_name == "Test"
        assert observation.caliber_in == pytest.approx(0.308)
        assert observation.length_in == 1.2
        assert observation.twist_in == 10.0
        assert observation.range_yd == 300.0
        assert observation.vert_neg10 == -0.02

    def test_derived_quantities(self, observation):
        assert observation.mass_grains == pytest.approx(0.308 ** 2 * 1.2 * 1000.0)
        assert observation.muzzle_velocity == pytest.approx(853.44)
        assert observation.range_m == pytest.approx(274.32)
        assert observation.twist_m == pytest.approx(0.254)
        bullet = observation.projectile()
        assert bullet.drag_function is DragFunction.G7
        assert bullet.bc == 0.243
        assert bullet.diameter == pytest.approx(0.0078232)

    def test_vertical_reading(self, observation):
        assert observation.vertical_reading(0.0) == 0.0
        assert observation.vertical_reading(-5.0) == -0.01
        assert observation.vertical_reading(10.0) == 0.02

    def test_valid(self, observation):
        assert observation.validate() is observation

    @pytest.mark.parametrize("changes, message", [
        (dict(vert_5=0.0), "vertical ordering"),
        (dict(vert_10=0.005), "vertical ordering"),
        (dict(vert_neg10=-0.005), "vertical ordering"),
        (dict(wind_5=0.1), "positive wind ordering"),
        (dict(wind_10=0.15), "positive wind ordering"),
        (dict(wind_neg5=0.1), "negative wind ordering"),
        (dict(wind_neg10=0.06), "negative wind ordering"),
    ])
    def test_invalid_ordering(self, observation, changes, message):
        with pytest.raises(ObservationError, match=message) as excinfo:
            replace(observation, **changes).validate()
        assert excinfo.value.bullet_name == "Test"
        assert excinfo.value.range_yd == 300.0
        assert str(excinfo.value).startswith("Test @ 300 yards: ")

    def test_wrong_field_count(self):
        with pytest.raises(ObservationError, match="Expected 17 fields"):
            Observation.from_row(ROW.split(',')[:-1])

    def test_non_numeric_field(self):
        row = ROW.replace("2800", "fast").split(',')
        with pytest.raises(ObservationError, match="mv_fps") as excinfo:
            Observation.from_row(row)
        assert excinfo.value.bullet_name == "Test"

    def test_calibrator_rejects_before_fitting(self, observation):
        bad = replace(observation, vert_5=observation.vert_0)
        with pytest.raises(ObservationError):
            Calibrator([observation, bad])


class TestExpansion:

    def test_five_targets_per_observation(self, observation):
        other = replace(observation, bullet_name="Other", range_yd=500.0)
        expanded = expand_observations([observation, other])
        assert len(expanded) == 10
        assert [f.is_drift for f in expanded[:5]] == [True, False, False, False, False]
        assert [f.wind_mph for f in expanded[1:5]] == list(CROSSWIND_SPEEDS_MPH)
        assert expanded[5].bullet_name == "Other"
        assert expanded[5].range_yd == 500.0

    def test_targets(self, observation):
        drift, jump5, jump10, jump_neg5, jump_neg10 = expand_observations([observation])
        assert drift.observed == observation.wind_0
        assert drift.kind == 'Drift'
        assert jump5.kind == 'Jump'
        assert jump5.observed == pytest.approx(0.01)
        assert jump10.observed == pytest.approx(0.02)
        assert jump_neg5.observed == pytest.approx(-0.01)
        assert jump_neg10.observed == pytest.approx(-0.02)
        assert jump5.source is observation


class TestParsing:

    def test_parse(self):
        observations = parse_observations([HEADER, ROW, "", ROW.replace("Test", "Second")])
        assert [o.bullet_name for o in observations] == ["Test", "Second"]

    def test_error_reports_line(self):
        bad = ROW.replace(",0.01,", ",-0.01,", 1)
        with pytest.raises(ObservationError, match=r"^Line 3: Test @ 300 yards: ") as excinfo:
            parse_observations([HEADER, ROW, bad])
        assert excinfo.value.bullet_name == "Test"
        assert excinfo.value.range_yd == 300.0

    def test_empty(self):
        with pytest.raises(ObservationError, match="empty"):
            parse_observations([])

    def test_header_only(self):
        with pytest.raises(ObservationError, match="header"):
            parse_observations([HEADER])

    def test_load(self, tmp_path):
        path = tmp_path / "observations.csv"
        path.write_text("\n".join([HEADER, ROW, ROW.replace("300", "600", 1)]) + "\n")
        observations = load_observations(str(path))
        assert len(observations) == 2
        assert observations[1].range_yd == 600.0

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_observations(str(tmp_path / "missing.csv"))
