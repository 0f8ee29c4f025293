"""Global physical and atmospheric constants for ballistic calculations.

All values are SI unless the name says otherwise.

Constant Categories:
    - Physical constants: Gravity and gas properties of dry air
    - Standard atmosphere constants: Sea-level reference conditions and lapse rate
    - Aerodynamic constants: Ballistic-coefficient scaling and moment-of-inertia estimate
    - Conversion factors: Unit conversion constants
"""

# Third-party imports
from typing_extensions import Final

# =============================================================================
# Physical Constants
# =============================================================================

cGravityConstant: Final[float] = 9.80665  # m/s^2
"""Standard gravitational acceleration at sea level (m/s²)"""

cGasConstantUniversal: Final[float] = 8.314  # J/(mol*K)
"""Universal gas constant (J/(mol·K))"""

cMolarMassDryAir: Final[float] = 0.02897  # kg/mol
"""Molar mass of dry air (kg/mol)"""

cGasConstantDryAir: Final[float] = cGasConstantUniversal / cMolarMassDryAir  # J/(kg*K)
"""Specific gas constant of dry air (J/(kg·K))"""

cHeatCapacityRatioAir: Final[float] = 1.4
"""Heat capacity ratio γ of air (dimensionless)"""

cVaporPressureCorrection: Final[float] = 0.378
"""Weight of water-vapor partial pressure in the humid-air density formula (dimensionless)"""

# Magnus-type saturation vapor pressure: e_sat = A * exp(B * t / (t + C)), t in °C
cSaturationVaporPressureA: Final[float] = 611.2  # Pa
cSaturationVaporPressureB: Final[float] = 17.67
cSaturationVaporPressureC: Final[float] = 243.5  # °C

# =============================================================================
# Standard Atmosphere Constants
# =============================================================================

cStandardTemperatureK: Final[float] = 288.15  # K
"""Standard temperature at sea level (K), 15 °C / 59 °F"""

cStandardPressurePa: Final[float] = 101325.0  # Pa
"""Standard atmospheric pressure at sea level (Pa)"""

cStandardDensity: Final[float] = 1.225  # kg/m^3
"""Standard air density at sea level (kg/m³)"""

cStandardHumidity: Final[float] = 0.5
"""Default relative humidity (fraction)"""

cLapseRate: Final[float] = -0.0065  # K/m
"""Temperature lapse rate in the troposphere (K/m)"""

cPressureScaleHeight: Final[float] = 8400.0  # m
"""Scale height of the exponential barometric model (m)"""

# =============================================================================
# Aerodynamic Constants
# =============================================================================

cBCToKgPerM2: Final[float] = 703.0696
"""Ballistic coefficient conversion from lb/in² to kg/m²"""

cSpinRadiusOfGyrationFactor: Final[float] = 0.30
"""Axial radius of gyration as a fraction of bullet diameter (dimensionless)"""

# =============================================================================
# Conversion Factors
# =============================================================================

cDegreesCtoK: Final[float] = 273.15  # K = °C + 273.15
"""Celsius to Kelvin conversion constant (K)"""

cMetersPerInch: Final[float] = 0.0254
"""Inch to meter conversion factor (m/in)"""

cMetersPerYard: Final[float] = 0.9144
"""Yard to meter conversion factor (m/yd)"""

cMetersPerFoot: Final[float] = 0.3048
"""Foot to meter conversion factor (m/ft)"""

cMetersPerMile: Final[float] = 1609.344
"""Mile to meter conversion factor (m/mi)"""

cKilogramsPerGrain: Final[float] = 6.479891e-05
"""Grain to kilogram conversion factor (kg/gr)"""

__all__ = (
    # Physical constants
    'cGravityConstant',
    'cGasConstantUniversal',
    'cMolarMassDryAir',
    'cGasConstantDryAir',
    'cHeatCapacityRatioAir',
    'cVaporPressureCorrection',
    'cSaturationVaporPressureA',
    'cSaturationVaporPressureB',
    'cSaturationVaporPressureC',
    # Standard atmosphere constants
    'cStandardTemperatureK',
    'cStandardPressurePa',
    'cStandardDensity',
    'cStandardHumidity',
    'cLapseRate',
    'cPressureScaleHeight',
    # Aerodynamic constants
    'cBCToKgPerM2',
    'cSpinRadiusOfGyrationFactor',
    # Conversion factors
    'cDegreesCtoK',
    'cMetersPerInch',
    'cMetersPerYard',
    'cMetersPerFoot',
    'cMetersPerMile',
    'cKilogramsPerGrain',
)
