"""Trajectory export to pandas DataFrame.

Used by Trajectory.dataframe().

Typical Usage:
    ```python
    trajectory = simulator.simulate(max_range=500.0)
    df = trajectory.dataframe()
    print(df[df['x'] > 300.0][['time', 'z', 'y', 'speed']])
    df.to_csv('trajectory.csv')
    ```

Dependencies:
    This module requires pandas as an optional dependency. Install via:
    pip install py_ballistictk[charts]
"""

# pylint: skip-file
# Standard library imports
import warnings

# Local imports
from py_ballistictk.trajectory import Trajectory

# Handle optional pandas dependency with graceful degradation
try:
    from pandas import DataFrame
except ImportError as error:
    warnings.warn("Install pandas to convert trajectory to pandas.DataFrame", UserWarning)
    raise error

__all__ = (
    'TRAJECTORY_COLUMNS',
    'trajectory_as_dataframe',
)

TRAJECTORY_COLUMNS = (
    'time', 'x', 'y', 'z', 'vx', 'vy', 'vz', 'speed', 'spin_rate',
    'beta_eq_right', 'beta_eq_up', 'wind_x', 'wind_y', 'wind_z', 'energy',
)


def trajectory_as_dataframe(trajectory: Trajectory) -> DataFrame:
    """One row per trajectory sample, SI units, columns TRAJECTORY_COLUMNS."""
    rows = [
        (p.time, *p.position, *p.velocity, p.speed, p.state.spin_rate,
         p.state.beta_eq_right, p.state.beta_eq_up, *p.wind, p.kinetic_energy)
        for p in trajectory
    ]
    return DataFrame(rows, columns=list(TRAJECTORY_COLUMNS))
