"""Unit conversion helpers.

The simulation core works exclusively in SI units. These helpers convert the
imperial quantities that range-test records are written in (inches, grains,
yards, fps, mph, °F) and the angular corrections (milliradians) that results
are reported in.

Examples:
    >>> inches_to_meters(2.0)
    0.0508
    >>> round(fps_to_mps(2800.0), 2)
    853.44
"""

from py_ballistictk.constants import (
    cDegreesCtoK,
    cKilogramsPerGrain,
    cMetersPerFoot,
    cMetersPerInch,
    cMetersPerMile,
    cMetersPerYard,
)

__all__ = (
    'inches_to_meters',
    'meters_to_inches',
    'yards_to_meters',
    'meters_to_yards',
    'grains_to_kg',
    'fps_to_mps',
    'mps_to_fps',
    'mph_to_mps',
    'fahrenheit_to_kelvin',
    'celsius_to_kelvin',
    'offset_to_mrad',
)


def inches_to_meters(value: float) -> float:
    return value * cMetersPerInch


def meters_to_inches(value: float) -> float:
    return value / cMetersPerInch


def yards_to_meters(value: float) -> float:
    return value * cMetersPerYard


def meters_to_yards(value: float) -> float:
    return value / cMetersPerYard


def grains_to_kg(value: float) -> float:
    return value * cKilogramsPerGrain


def fps_to_mps(value: float) -> float:
    return value * cMetersPerFoot


def mps_to_fps(value: float) -> float:
    return value / cMetersPerFoot


def mph_to_mps(value: float) -> float:
    return value * cMetersPerMile / 3600.0


def fahrenheit_to_kelvin(value: float) -> float:
    return (value - 32.0) * 5.0 / 9.0 + cDegreesCtoK


def celsius_to_kelvin(value: float) -> float:
    return value + cDegreesCtoK


def offset_to_mrad(offset: float, distance: float) -> float:
    """Convert a linear offset at a distance into a small angle.

    Args:
        offset: Linear offset (m).
        distance: Distance at which the offset is measured (m).

    Returns:
        Angle subtended by the offset, in milliradians (small-angle approximation).
    """
    return offset / distance * 1000.0
