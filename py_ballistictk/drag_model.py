"""Drag-function selection and drag-coefficient lookup.

A projectile carries exactly one drag-function/BC pair. The drag function is a
closed two-variant tag (G1 | G7) that selects a reference table; adding a third
reference curve means adding a table and an enum member, nothing else.

Key Components:
    - DragFunction: Reference drag curve selector
    - DragDataPoint: Individual drag coefficient at a specific Mach number
    - drag_coefficient: Cd(Mach) lookup on the selected reference curve
    - drag_retardation: Drag deceleration magnitude for a given BC, Cd and air state

Examples:
    >>> round(drag_coefficient(1.0, DragFunction.G7), 4)
    0.3803
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum

from typing_extensions import Dict, List, Sequence, Union

from py_ballistictk.constants import cBCToKgPerM2
from py_ballistictk.drag_tables import DragTablePointDictType, TableG1, TableG7
from py_ballistictk.interpolation import PchipPrepared, pchip_eval, pchip_prepare

__all__ = (
    'DragFunction',
    'DragDataPoint',
    'make_data_points',
    'drag_coefficient',
    'drag_retardation',
)


class DragFunction(IntEnum):
    """Standard reference drag curve.

    - G1: flat-base reference projectile, favors blunter bullets.
    - G7: long boat-tail reference projectile, favors modern long-range bullets.
    """

    G1 = 0
    G7 = 1

    @classmethod
    def parse(cls, value: Union[str, int, DragFunction]) -> DragFunction:
        """Accept an enum member, its integer value or its name (case-insensitive)."""
        if isinstance(value, DragFunction):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError as exc:
                raise ValueError(f"Unknown drag function: {value!r}") from exc
        return cls(value)


@dataclass(frozen=True)
class DragDataPoint:
    """Drag coefficient at a specific Mach number.

    Attributes:
        Mach: Velocity in Mach units
        CD: Drag coefficient
    """

    Mach: float
    CD: float


def make_data_points(drag_table: Sequence[Union[DragDataPoint, DragTablePointDictType]]) -> List[DragDataPoint]:
    """Convert drag table from list of dictionaries to list of DragDataPoints.

    Raises:
        TypeError: If drag_table items are not DragDataPoint objects or valid
                   dictionaries with required keys
    """
    try:
        return [
            point if isinstance(point, DragDataPoint) else DragDataPoint(point['Mach'], point['CD'])
            for point in drag_table
        ]
    except (KeyError, TypeError) as exc:
        raise TypeError(
            "All items in drag_table must be of type DragDataPoint or dict with 'Mach' and 'CD' keys"
        ) from exc


def _prepare(table: Sequence[DragTablePointDictType]) -> PchipPrepared:
    points = make_data_points(table)
    return pchip_prepare([p.Mach for p in points], [p.CD for p in points])


_PREPARED: Dict[DragFunction, PchipPrepared] = {
    DragFunction.G1: _prepare(TableG1),
    DragFunction.G7: _prepare(TableG7),
}


def drag_coefficient(mach: float, drag_function: DragFunction) -> float:
    """Drag coefficient of the reference projectile at a Mach number.

    Mach numbers outside the tabulated range are clamped to the end points.
    """
    return pchip_eval(_PREPARED[drag_function], mach, clamp=True)


def drag_retardation(density: float, speed: float, cd: float, bc: float) -> float:
    """Magnitude of drag deceleration (m/s²).

    a = ρ·V²·(π/4)·Cd / (2·BC·703.0696)

    Args:
        density: Air density (kg/m³)
        speed: Speed relative to the air (m/s)
        cd: Drag coefficient of the reference projectile
        bc: Ballistic coefficient (lb/in²)
    """
    return density * speed * speed * (math.pi / 4.0) * cd / (2.0 * bc * cBCToKgPerM2)
