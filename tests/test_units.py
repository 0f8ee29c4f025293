import pytest

from py_ballistictk.units import (celsius_to_kelvin, fahrenheit_to_kelvin, fps_to_mps, grains_to_kg,
                                  inches_to_meters, meters_to_inches, meters_to_yards, mph_to_mps,
                                  mps_to_fps, offset_to_mrad, yards_to_meters)


@pytest.mark.parametrize("convert, value, expected", [
    (inches_to_meters, 1.0, 0.0254),
    (meters_to_inches, 0.0508, 2.0),
    (yards_to_meters, 100.0, 91.44),
    (meters_to_yards, 91.44, 100.0),
    (grains_to_kg, 7000.0, 0.45359237),
    (fps_to_mps, 2800.0, 853.44),
    (mps_to_fps, 853.44, 2800.0),
    (mph_to_mps, 10.0, 4.4704),
    (fahrenheit_to_kelvin, 59.0, 288.15),
    (fahrenheit_to_kelvin, -40.0, 233.15),
    (celsius_to_kelvin, 15.0, 288.15),
])
def test_conversions(convert, value, expected):
    assert convert(value) == pytest.approx(expected)


def test_offset_to_mrad():
    assert offset_to_mrad(0.1, 100.0) == pytest.approx(1.0)
    assert offset_to_mrad(-0.0274, 274.32) == pytest.approx(-0.0999, abs=1e-4)
