"""Trajectory charts.

Used by Trajectory.plot(): height and crossrange drift against downrange distance,
with speed on a secondary axis.

Dependencies:
    This module requires matplotlib and pandas as optional dependencies. Install via:
    `pip install py_ballistictk[charts]`
"""
# pylint: skip-file
from __future__ import annotations
# Standard library imports
import warnings

# Third-party imports
from typing_extensions import Dict, Tuple

# Local imports
from py_ballistictk.trajectory import Trajectory

# Handle optional matplotlib dependency with graceful degradation
try:
    import matplotlib
    from matplotlib.axes import Axes
    from matplotlib import pyplot

    assert matplotlib
except (ImportError, AssertionError) as error:
    warnings.warn("Install matplotlib to get results as a plot", UserWarning)
    raise error

__all__ = (
    'show_trajectory_plot',
    'trajectory_as_plot',
)

PLOT_COLORS: Dict[str, Tuple[float, float, float, float]] = {
    "height": (130 / 255, 179 / 255, 102 / 255, 1.0),
    "drift": (215 / 255, 155 / 255, .0, 1.0),
    "speed": (108 / 255, 142 / 255, 191 / 255, 1.0),
    "frame": (.0, .0, .0, 1.0),
}


def show_trajectory_plot() -> None:
    """Display the current matplotlib figure using the configured backend."""
    pyplot.show()


def trajectory_as_plot(trajectory: Trajectory, show_speed: bool = True) -> Axes:
    """Plot height and drift (m) against distance (m), optionally speed (m/s) on a secondary axis."""
    df = trajectory.dataframe()
    fig, ax = pyplot.subplots()
    fig.patch.set_alpha(0.0)
    ax.patch.set_alpha(0.0)

    ax = df.plot(x='x', y=['z', 'y'], xlabel='m', ylabel='m', linewidth=2,
                 color=[PLOT_COLORS['height'], PLOT_COLORS['drift']], ax=ax)
    ax.legend(['height', 'drift'])

    if show_speed:
        df.plot(x='x', y=['speed'], ylabel='m/s', secondary_y=True,
                color=PLOT_COLORS['speed'], ylim=[0, df['speed'].max()], ax=ax)
        ax.set_zorder(1)

    for spine in ax.spines.values():
        spine.set_edgecolor(PLOT_COLORS['frame'])
    return ax
