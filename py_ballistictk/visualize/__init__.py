# pylint: skip-file

from .plot import (
    show_trajectory_plot,
    trajectory_as_plot,
)
from .dataframe import (
    TRAJECTORY_COLUMNS,
    trajectory_as_dataframe,
)

__all__ = (
    'show_trajectory_plot',
    'trajectory_as_plot',
    'TRAJECTORY_COLUMNS',
    'trajectory_as_dataframe',
)
