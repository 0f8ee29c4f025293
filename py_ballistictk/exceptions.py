"""py_ballistictk exception types.

Exception Hierarchy
-------------------

Exception (built-in Python)
├── ValueError
│   ├── AtmosphereError
│   └── ObservationError
└── RuntimeError
    ├── ConfigurationError
    └── SolverRuntimeError
        ├── ZeroFindingError
        └── CalibrationError
            ├── SingularMatrixError
            └── CalibrationCancelledError

Exception Types
---------------

- AtmosphereError: Raised when an Atmosphere is constructed from invalid inputs
  (relative humidity outside [0, 1], non-positive absolute temperature).

- ObservationError: Raised for malformed range-test observations: unparseable fields,
  or readings that violate the required monotonic ordering. Contains:
  - bullet_name: Name of the offending record
  - range_yd: Range of the offending record (yards)

- ConfigurationError: Raised when a Simulator is used before its projectile and
  atmosphere are configured. This is a programming error of the caller.

- SolverRuntimeError: Base class for numerical solver failures.

- ZeroFindingError: Raised by ZeroResult.check() when the zero search did not converge. Contains:
  - zero_finding_error: Miss distance at the target plane (m)
  - iterations_count: Number of iterations performed
  - last_barrel_elevation: Last computed barrel elevation (rad)

- CalibrationError: Base class for coefficient-fitting failures.

- SingularMatrixError: Raised when the Levenberg-Marquardt normal equations are singular,
  which means at least one free coefficient has no observable effect on any residual.

- CalibrationCancelledError: Raised when the cancellation callback of a calibration run fires.
"""
from __future__ import annotations

from typing import Optional

__all__ = (
    'AtmosphereError',
    'ObservationError',
    'ConfigurationError',
    'SolverRuntimeError',
    'ZeroFindingError',
    'CalibrationError',
    'SingularMatrixError',
    'CalibrationCancelledError',
)


class AtmosphereError(ValueError):
    """Invalid atmospheric conditions."""


class ObservationError(ValueError):
    """Malformed range-test observation.

    Contains:
    - Name of the bullet of the offending record
    - Range of the offending record
    """

    def __init__(self, message: str, bullet_name: Optional[str] = None, range_yd: Optional[float] = None):
        self.bullet_name: Optional[str] = bullet_name
        self.range_yd: Optional[float] = range_yd
        if bullet_name is not None and range_yd is not None:
            message = f"{bullet_name} @ {range_yd:g} yards: {message}"
        elif bullet_name is not None:
            message = f"{bullet_name}: {message}"
        super().__init__(message)


class ConfigurationError(RuntimeError):
    """Simulator used before it was configured."""


class SolverRuntimeError(RuntimeError):
    """Solver error."""


class ZeroFindingError(SolverRuntimeError):
    """Exception for zero-finding issues.

    Contains:
    - Zero finding error magnitude
    - Iteration count
    - Last barrel elevation
    """

    def __init__(self,
                 zero_finding_error: float,
                 iterations_count: int,
                 last_barrel_elevation: float):
        """
        Parameters:
        - zero_finding_error: Miss distance at the target plane in meters
        - iterations_count: The number of iterations performed
        - last_barrel_elevation: The last computed barrel elevation in radians
        """
        self.zero_finding_error: float = zero_finding_error
        self.iterations_count: int = iterations_count
        self.last_barrel_elevation: float = last_barrel_elevation
        super().__init__(f'Miss distance {zero_finding_error:.6f} m '
                         f'with {last_barrel_elevation:.6f} rad elevation, '
                         f'after {iterations_count} iterations.')


class CalibrationError(SolverRuntimeError):
    """Coefficient fitting error."""


class SingularMatrixError(CalibrationError):
    """Singular normal-equations matrix.

    Contains:
    - Index of the pivot column that failed
    - Absolute value of the pivot
    """

    def __init__(self, column: int, pivot: float):
        self.column: int = column
        self.pivot: float = pivot
        super().__init__(f"Singular matrix in linear system solver (column {column}, |pivot|={pivot:.3e})")


class CalibrationCancelledError(CalibrationError):
    """Calibration run cancelled by the caller."""
