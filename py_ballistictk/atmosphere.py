"""Atmospheric conditions.

Atmosphere is an immutable value object. Air density accounts for humidity through
the partial pressure of water vapor, estimated from a Magnus-type saturation
vapor-pressure approximation. Speed of sound follows c = sqrt(γ·R·T).

Examples:
    ```python
    from py_ballistictk import Atmosphere

    sea_level = Atmosphere.standard()
    rho = sea_level.density()            # ~1.22 kg/m³
    mountain = Atmosphere.at_altitude(1500.0)
    c = mountain.speed_of_sound()        # m/s
    ```
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from typing_extensions import Optional

from py_ballistictk.constants import (
    cDegreesCtoK,
    cGasConstantDryAir,
    cHeatCapacityRatioAir,
    cLapseRate,
    cPressureScaleHeight,
    cSaturationVaporPressureA,
    cSaturationVaporPressureB,
    cSaturationVaporPressureC,
    cStandardHumidity,
    cStandardPressurePa,
    cStandardTemperatureK,
    cVaporPressureCorrection,
)
from py_ballistictk.exceptions import AtmosphereError

__all__ = ('Atmosphere', 'standard_pressure')


def standard_pressure(altitude: float) -> float:
    """Barometric pressure at altitude: P = P0·exp(-h/H) (Pa)."""
    return cStandardPressurePa * math.exp(-altitude / cPressureScaleHeight)


@dataclass(frozen=True)
class Atmosphere:
    """Atmospheric conditions at the firing site.

    Attributes:
        temperature: Air temperature (K)
        altitude: Altitude above sea level (m)
        humidity: Relative humidity, fraction in [0, 1]
        pressure: Static pressure (Pa). When omitted (None or non-positive) the
            standard barometric pressure at `altitude` is used.

    Raises:
        AtmosphereError: If humidity is outside [0, 1] or temperature is not positive.
    """

    temperature: float = cStandardTemperatureK
    altitude: float = 0.0
    humidity: float = cStandardHumidity
    pressure: Optional[float] = field(default=None)

    def __post_init__(self) -> None:
        if not 0.0 <= self.humidity <= 1.0:
            raise AtmosphereError(f"Humidity must be between 0.0 and 1.0, got {self.humidity}")
        if self.temperature <= 0.0:
            raise AtmosphereError(f"Temperature must be positive in Kelvin, got {self.temperature}")
        if self.pressure is None or self.pressure <= 0.0:
            object.__setattr__(self, 'pressure', standard_pressure(self.altitude))

    @property
    def vapor_pressure(self) -> float:
        """Partial pressure of water vapor (Pa)."""
        t_c = self.temperature - cDegreesCtoK
        e_sat = cSaturationVaporPressureA * math.exp(
            cSaturationVaporPressureB * t_c / (t_c + cSaturationVaporPressureC))
        return self.humidity * e_sat

    def density(self) -> float:
        """Air density (kg/m³): ρ = (P - 0.378·e) / (R·T)."""
        return (self.pressure - cVaporPressureCorrection * self.vapor_pressure) / (
            cGasConstantDryAir * self.temperature)

    def speed_of_sound(self) -> float:
        """Speed of sound (m/s)."""
        return math.sqrt(cHeatCapacityRatioAir * cGasConstantDryAir * self.temperature)

    @staticmethod
    def standard() -> Atmosphere:
        """Standard sea-level atmosphere: 15 °C, 101325 Pa, 50% humidity."""
        return Atmosphere()

    @staticmethod
    def at_altitude(altitude: float) -> Atmosphere:
        """Standard atmosphere at altitude, temperature following the tropospheric lapse rate."""
        return Atmosphere(temperature=cStandardTemperatureK + cLapseRate * altitude,
                          altitude=altitude,
                          humidity=cStandardHumidity)
