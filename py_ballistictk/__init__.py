"""Spin-stabilized projectile flight simulation and aerodynamic coefficient calibration."""

import importlib.metadata

__version__ = importlib.metadata.version("py_ballistictk")

# Standard library imports
import os
import sys

# Third-party imports
from typing_extensions import Optional

# Local imports
from .logger import logger as log
from .config import set_default_simulator_config, set_default_calibration_config

if sys.version_info[:2] < (3, 11):
    import tomli as tomllib
else:
    import tomllib


def _load_config(filepath: Optional[str] = None, suppress_warnings: bool = False) -> None:
    """Load library defaults from a .btk.toml file.

    Args:
        filepath: Path to configuration file. If None, searches for .btk.toml or btk.toml
        suppress_warnings: If True, suppress warning messages
    """
    def find_btk_toml(start_dir: str = os.getcwd()) -> Optional[str]:
        """Search for .btk.toml or btk.toml from start_dir upward to the filesystem root."""
        current_dir = os.path.abspath(start_dir)
        while True:
            btk_paths = [
                os.path.join(current_dir, '.btk.toml'),
                os.path.join(current_dir, 'btk.toml'),
            ]
            for btk_path in btk_paths:
                if os.path.exists(btk_path):
                    return os.path.abspath(btk_path)

            parent_dir = os.path.dirname(current_dir)
            if parent_dir == current_dir:
                return None
            current_dir = parent_dir

    if filepath is None:
        if (filepath := find_btk_toml()) is None:
            filepath = find_btk_toml(os.path.dirname(__file__))

    if filepath is not None:
        log.debug(f"Found {os.path.basename(filepath)} at {os.path.dirname(filepath)}")

        with open(filepath, "rb") as fp:
            _config = tomllib.load(fp)

        if _btk := _config.get('btk'):
            if (simulator := _btk.get('simulator')) is not None:
                set_default_simulator_config(simulator)
            elif not suppress_warnings:
                log.warning("Config has no `btk.simulator` section")
            if (calibration := _btk.get('calibration')) is not None:
                set_default_calibration_config(calibration)
            elif not suppress_warnings:
                log.warning("Config has no `btk.calibration` section")
        elif not suppress_warnings:
            log.warning("Config has no `btk` section")

    log.debug("Simulator and calibration defaults load success")


def _basic_config(filename: Optional[str] = None, suppress_warnings: bool = False) -> None:
    """Load library defaults from a config file, or from the nearest .btk.toml / btk.toml."""
    _load_config(filename, suppress_warnings)


basicConfig = _basic_config

basicConfig()


from .atmosphere import Atmosphere
from .calibration import (Calibrator, CalibrationReport, CalibrationResult, ResidualModel,
                          min_normalized_pivot, solve_linear_system, synthetic_observation)
from .config import (SimulatorConfig, SimulatorConfigDict, create_simulator_config,
                     CalibrationConfig, CalibrationConfigDict, create_calibration_config)
from .drag_model import DragFunction, drag_coefficient
from .drag_tables import TableG1, TableG7, get_drag_tables_names
from .exceptions import (AtmosphereError, ObservationError, ConfigurationError, SolverRuntimeError,
                         ZeroFindingError, CalibrationError, SingularMatrixError, CalibrationCancelledError)
from .logger import logger, enable_file_logging, disable_file_logging
from .observations import Observation, FitObservation, expand_observations, load_observations
from .projectile import Projectile, ProjectileState
from .simulator import AeroCoefficients, DEFAULT_AERO_COEFFICIENTS, Simulator, ZeroResult
from .trajectory import Trajectory, TrajectoryPoint
from .vector import Vector

# DRY: build __all__ from global symbols
_SKIP_GLOBALS = {
    # Skip Python builtins
    "__name__", "__doc__", "__package__", "__loader__", "__spec__",
    "__file__", "__cached__", "__builtins__",
    # Skip imported modules
    "tomllib", "sys", "os", "importlib",
    # Skip private/internal symbols
    "_load_config", "_basic_config", "Optional", "log",
    "set_default_simulator_config", "set_default_calibration_config",
}
__all__ = [
    name for name in globals()
    if not name.startswith("_") and name not in _SKIP_GLOBALS
]
