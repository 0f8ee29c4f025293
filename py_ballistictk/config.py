"""Simulator and calibration configuration.

Each configuration is a dataclass of `c`-prefixed constants whose defaults are the
module-level values below, plus a `TypedDict(total=False)` that allows partial
overrides from a plain dict (for example a `[btk.simulator]` TOML table).
`create_simulator_config` / `create_calibration_config` merge such overrides over the
current defaults.

Examples:
    ```python
    from py_ballistictk import create_simulator_config, Simulator

    config = create_simulator_config({'cZeroTolerance': 0.0001, 'cZeroMaxIterations': 40})
    simulator = Simulator(config)
    ```
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields

from typing_extensions import Optional, Tuple, TypedDict

from py_ballistictk.constants import cGravityConstant, cStandardHumidity
from py_ballistictk.logger import logger

__all__ = (
    'SimulatorConfig',
    'SimulatorConfigDict',
    'DEFAULT_SIMULATOR_CONFIG',
    'create_simulator_config',
    'CalibrationConfig',
    'CalibrationConfigDict',
    'DEFAULT_CALIBRATION_CONFIG',
    'create_calibration_config',
    'set_default_simulator_config',
    'set_default_calibration_config',
)

cTimeStep: float = 0.001  # s, integration step
cMaxTime: float = 60.0  # s, safety ceiling on simulated flight time
cZeroMaxIterations: int = 20  # maximum number of zero-search iterations
cZeroTolerance: float = 0.001  # m, allowed miss distance at the target plane
cZeroDamping: float = 0.5  # fraction of the angular error applied per zero iteration
cZeroInitialElevation: float = 0.01  # rad, first guess of barrel elevation
cZeroRangeOvershoot: float = 1.1  # zero runs simulate to this multiple of the target range
cZeroMaxTime: float = 5.0  # s, time ceiling of each zero-search run


@dataclass
class SimulatorConfig:
    """Configuration of a Simulator.

    Attributes:
        cGravityConstant: Gravitational acceleration (m/s²).
        cTimeStep: Default integration step (s).
        cMaxTime: Default safety ceiling on simulated flight time (s).
        cZeroMaxIterations: Default iteration budget of the zero search.
        cZeroTolerance: Default allowed miss distance at the zero target (m).
        cZeroDamping: Fraction of the angular error applied per zero iteration.
        cZeroInitialElevation: First guess of the barrel elevation (rad).
        cZeroRangeOvershoot: Zero-search runs simulate to this multiple of the target range,
            so the target plane is always bracketed by recorded samples.
        cZeroMaxTime: Time ceiling of each zero-search run (s).
    """

    cGravityConstant: float = cGravityConstant
    cTimeStep: float = cTimeStep
    cMaxTime: float = cMaxTime
    cZeroMaxIterations: int = cZeroMaxIterations
    cZeroTolerance: float = cZeroTolerance
    cZeroDamping: float = cZeroDamping
    cZeroInitialElevation: float = cZeroInitialElevation
    cZeroRangeOvershoot: float = cZeroRangeOvershoot
    cZeroMaxTime: float = cZeroMaxTime


class SimulatorConfigDict(TypedDict, total=False):
    """Partial SimulatorConfig overrides; omitted keys keep their defaults."""

    cGravityConstant: float
    cTimeStep: float
    cMaxTime: float
    cZeroMaxIterations: int
    cZeroTolerance: float
    cZeroDamping: float
    cZeroInitialElevation: float
    cZeroRangeOvershoot: float
    cZeroMaxTime: float


DEFAULT_SIMULATOR_CONFIG: SimulatorConfig = SimulatorConfig()


@dataclass
class CalibrationConfig:
    """Configuration of a calibration run.

    Annealing:
        cInitialTemperature, cCoolingRate, cTrialsPerTemperature, cMinTemperature
        and the per-coefficient perturbation sigmas at the initial temperature
        (cLiftSigma, cRestoringSigma, cYawSigma, cBetaLagSigma), scaled by T/T0.

    Coefficient bounds and starting point:
        cLiftBounds, cRestoringBounds, cYawBounds, cBetaLagBounds as (low, high);
        cInitialLift, cInitialRestoring, cInitialYaw, cInitialBetaLag.

    Levenberg-Marquardt:
        cLambdaInitial, cLambdaUp, cLambdaDown, cLambdaMax, cMaxIterations,
        cStepTolerance (on the parameter-step norm) and cJacobianStep (relative
        forward-difference step). A final Jacobian whose min_normalized_pivot is below
        cConditionTolerance marks the fit as ill-conditioned.

    Range-test setup:
        cZeroRangeYards, cScopeHeightInches, cTimeStep, cTemperatureF, cAltitude,
        cHumidity, cZeroTolerance, cZeroDamping, cZeroMaxIterations.

    cSeed seeds the annealing random generator; None draws a fresh seed.
    """

    cInitialTemperature: float = 1.0
    cCoolingRate: float = 0.8
    cTrialsPerTemperature: int = 50
    cMinTemperature: float = 1e-6
    cLiftSigma: float = 0.3
    cRestoringSigma: float = 0.02
    cYawSigma: float = 0.05
    cBetaLagSigma: float = 0.1

    cLiftBounds: Tuple[float, float] = (0.5, 3.0)
    cRestoringBounds: Tuple[float, float] = (-0.15, -0.01)
    cYawBounds: Tuple[float, float] = (0.05, 0.5)
    cBetaLagBounds: Tuple[float, float] = (0.1, 1.0)
    cInitialLift: float = 1.5
    cInitialRestoring: float = -0.07
    cInitialYaw: float = 0.2
    cInitialBetaLag: float = 0.5

    cLambdaInitial: float = 1e-3
    cLambdaUp: float = 10.0
    cLambdaDown: float = 0.1
    cLambdaMax: float = 1e6
    cMaxIterations: int = 100
    cStepTolerance: float = 1e-6
    cJacobianStep: float = 1e-4
    cConditionTolerance: float = 1e-6

    cZeroRangeYards: float = 100.0
    cScopeHeightInches: float = 2.0
    cTimeStep: float = 0.001
    cTemperatureF: float = 59.0
    cAltitude: float = 0.0
    cHumidity: float = cStandardHumidity
    cZeroTolerance: float = 1e-7
    cZeroDamping: float = 1.0
    cZeroMaxIterations: int = 50

    cSeed: Optional[int] = None


class CalibrationConfigDict(TypedDict, total=False):
    """Partial CalibrationConfig overrides; omitted keys keep their defaults."""

    cInitialTemperature: float
    cCoolingRate: float
    cTrialsPerTemperature: int
    cMinTemperature: float
    cLiftSigma: float
    cRestoringSigma: float
    cYawSigma: float
    cBetaLagSigma: float
    cLiftBounds: Tuple[float, float]
    cRestoringBounds: Tuple[float, float]
    cYawBounds: Tuple[float, float]
    cBetaLagBounds: Tuple[float, float]
    cInitialLift: float
    cInitialRestoring: float
    cInitialYaw: float
    cInitialBetaLag: float
    cLambdaInitial: float
    cLambdaUp: float
    cLambdaDown: float
    cLambdaMax: float
    cMaxIterations: int
    cStepTolerance: float
    cJacobianStep: float
    cConditionTolerance: float
    cZeroRangeYards: float
    cScopeHeightInches: float
    cTimeStep: float
    cTemperatureF: float
    cAltitude: float
    cHumidity: float
    cZeroTolerance: float
    cZeroDamping: float
    cZeroMaxIterations: int
    cSeed: Optional[int]


DEFAULT_CALIBRATION_CONFIG: CalibrationConfig = CalibrationConfig()

_BOUNDS_FIELDS = ('cLiftBounds', 'cRestoringBounds', 'cYawBounds', 'cBetaLagBounds')


def _checked_overrides(cls: type, overrides: Optional[dict]) -> dict:
    if overrides is None or not isinstance(overrides, dict):
        return {}
    known = {f.name for f in fields(cls)}
    unknown = set(overrides) - known
    if unknown:
        raise KeyError(f"Unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return dict(overrides)


def create_simulator_config(interface_config: Optional[SimulatorConfigDict] = None) -> SimulatorConfig:
    """Create SimulatorConfig from optional dictionary overrides.

    Raises:
        KeyError: If the dictionary holds a key that is not a SimulatorConfig field.
    """
    config = asdict(DEFAULT_SIMULATOR_CONFIG)
    config.update(_checked_overrides(SimulatorConfig, interface_config))  # type: ignore[arg-type]
    return SimulatorConfig(**config)


def create_calibration_config(interface_config: Optional[CalibrationConfigDict] = None) -> CalibrationConfig:
    """Create CalibrationConfig from optional dictionary overrides.

    Bounds given as lists (as TOML arrays are) are converted to tuples.

    Raises:
        KeyError: If the dictionary holds a key that is not a CalibrationConfig field.
        ValueError: If a bounds pair is not (low, high) with low < high.
    """
    config = asdict(DEFAULT_CALIBRATION_CONFIG)
    config.update(_checked_overrides(CalibrationConfig, interface_config))  # type: ignore[arg-type]
    for name in _BOUNDS_FIELDS:
        low, high = config[name]
        if not low < high:
            raise ValueError(f"{name} must be (low, high) with low < high, got {config[name]!r}")
        config[name] = (float(low), float(high))
    return CalibrationConfig(**config)


def set_default_simulator_config(interface_config: Optional[SimulatorConfigDict] = None) -> None:
    """Replace the library-wide simulator defaults with built-in defaults plus overrides."""
    global DEFAULT_SIMULATOR_CONFIG
    DEFAULT_SIMULATOR_CONFIG = SimulatorConfig()
    DEFAULT_SIMULATOR_CONFIG = create_simulator_config(interface_config)
    logger.debug(f"Default simulator config: {DEFAULT_SIMULATOR_CONFIG}")


def set_default_calibration_config(interface_config: Optional[CalibrationConfigDict] = None) -> None:
    """Replace the library-wide calibration defaults with built-in defaults plus overrides."""
    global DEFAULT_CALIBRATION_CONFIG
    DEFAULT_CALIBRATION_CONFIG = CalibrationConfig()
    DEFAULT_CALIBRATION_CONFIG = create_calibration_config(interface_config)
    logger.debug(f"Default calibration config: {DEFAULT_CALIBRATION_CONFIG}")
