"""Range-test observations used for coefficient calibration.

One Observation describes one bullet / rifle / range combination and carries the
scope corrections (mrad, positive = right / up) measured with no wind and with
5 and 10 mph crosswinds from either side. Positive crosswind speeds blow from the right.

CSV format (one header row, then one record per line):

    bullet,caliber,length_in,bc_g7,twist_in,mv_fps,range_yd,
    wind_0,vert_0,wind_5,vert_5,wind_10,vert_10,wind_neg5,vert_neg5,wind_neg10,vert_neg10

`caliber` is given in thousandths of an inch (308 for .308). A record whose readings are
not monotonic in crosswind is rejected as corrupt measurement; nothing is averaged
away or repaired.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, fields

from typing_extensions import Iterable, List, NamedTuple, Sequence, Tuple

from py_ballistictk.drag_model import DragFunction
from py_ballistictk.exceptions import ObservationError
from py_ballistictk.logger import logger
from py_ballistictk.projectile import Projectile
from py_ballistictk.units import fps_to_mps, grains_to_kg, inches_to_meters, yards_to_meters

__all__ = (
    'CROSSWIND_SPEEDS_MPH',
    'Observation',
    'FitObservation',
    'expand_observations',
    'load_observations',
    'parse_observations',
)

CROSSWIND_SPEEDS_MPH: Tuple[float, ...] = (5.0, 10.0, -5.0, -10.0)
"""Crosswind speeds of the jump readings, in the order they are expanded for fitting."""


@dataclass(frozen=True)
class Observation:
    """Measured spin drift and crosswind jump for one bullet at one range.

    Dimensions are in the units of the range-test records: inches, fps, yards;
    readings are scope corrections in mrad.
    """

    bullet_name: str
    caliber_in: float
    length_in: float
    bc_g7: float
    twist_in: float
    mv_fps: float
    range_yd: float
    wind_0: float
    vert_0: float
    wind_5: float
    vert_5: float
    wind_10: float
    vert_10: float
    wind_neg5: float
    vert_neg5: float
    wind_neg10: float
    vert_neg10: float

    @classmethod
    def from_row(cls, row: Sequence[str]) -> Observation:
        """Parse one CSV record.

        Raises:
            ObservationError: If the record has the wrong number of fields or a field is not a number.
        """
        names = [f.name for f in fields(cls)]
        if len(row) != len(names):
            raise ObservationError(f"Expected {len(names)} fields, got {len(row)}: {','.join(row)}")
        bullet_name = row[0].strip()
        values = []
        for name, token in zip(names[1:], row[1:]):
            try:
                values.append(float(token))
            except ValueError as exc:
                raise ObservationError(f"Field '{name}' is not a number: {token!r}", bullet_name) from exc
        caliber_in = values[0] / 1000.0
        return cls(bullet_name, caliber_in, *values[1:])

    def validate(self) -> Observation:
        """Check the readings are strictly monotonic in crosswind.

        Raises:
            ObservationError: On the first violated ordering.
        """
        if not self.vert_10 > self.vert_5 > self.vert_0 > self.vert_neg5 > self.vert_neg10:
            raise ObservationError(
                "Invalid vertical ordering, expected vert_10 > vert_5 > vert_0 > vert_neg5 > vert_neg10, got "
                f"{self.vert_10} > {self.vert_5} > {self.vert_0} > {self.vert_neg5} > {self.vert_neg10}",
                self.bullet_name, self.range_yd)
        if not self.wind_0 < self.wind_5 < self.wind_10:
            raise ObservationError(
                "Invalid positive wind ordering, expected wind_0 < wind_5 < wind_10, got "
                f"{self.wind_0} < {self.wind_5} < {self.wind_10}",
                self.bullet_name, self.range_yd)
        if not self.wind_neg10 < self.wind_neg5 < self.wind_0:
            raise ObservationError(
                "Invalid negative wind ordering, expected wind_neg10 < wind_neg5 < wind_0, got "
                f"{self.wind_neg10} < {self.wind_neg5} < {self.wind_0}",
                self.bullet_name, self.range_yd)
        return self

    def vertical_reading(self, wind_mph: float) -> float:
        """Vertical correction (mrad) measured at a crosswind speed."""
        return {
            0.0: self.vert_0,
            5.0: self.vert_5,
            10.0: self.vert_10,
            -5.0: self.vert_neg5,
            -10.0: self.vert_neg10,
        }[wind_mph]

    @property
    def mass_grains(self) -> float:
        """Bullet weight estimated from caliber and length."""
        return self.caliber_in * self.caliber_in * self.length_in * 1000.0

    def projectile(self) -> Projectile:
        return Projectile(mass=grains_to_kg(self.mass_grains),
                          diameter=inches_to_meters(self.caliber_in),
                          length=inches_to_meters(self.length_in),
                          bc=self.bc_g7,
                          drag_function=DragFunction.G7)

    @property
    def muzzle_velocity(self) -> float:
        """m/s"""
        return fps_to_mps(self.mv_fps)

    @property
    def twist_m(self) -> float:
        """Signed rifling pitch (m/turn)."""
        return inches_to_meters(self.twist_in)

    @property
    def range_m(self) -> float:
        """m"""
        return yards_to_meters(self.range_yd)


class FitObservation(NamedTuple):
    """One residual target of the fit.

    Attributes:
        source: Observation the target was expanded from
        wind_mph: Crosswind speed, 0 for the spin-drift target
        is_drift: True for the zero-wind windage (spin drift) target,
            False for a crosswind-jump target
        observed: Windage correction for drift; change of vertical correction
            from the zero-wind reading for jump (mrad)
    """

    source: Observation
    wind_mph: float
    is_drift: bool
    observed: float

    @property
    def bullet_name(self) -> str:
        return self.source.bullet_name

    @property
    def range_yd(self) -> float:
        return self.source.range_yd

    @property
    def kind(self) -> str:
        return 'Drift' if self.is_drift else 'Jump'


def expand_observations(observations: Iterable[Observation]) -> List[FitObservation]:
    """Expand each observation into one drift target and four crosswind-jump targets."""
    expanded: List[FitObservation] = []
    for obs in observations:
        expanded.append(FitObservation(obs, 0.0, True, obs.wind_0))
        for wind_mph in CROSSWIND_SPEEDS_MPH:
            expanded.append(FitObservation(obs, wind_mph, False, obs.vertical_reading(wind_mph) - obs.vert_0))
    return expanded


def parse_observations(lines: Iterable[str]) -> List[Observation]:
    """Parse and validate CSV lines; the first row is a header.

    Raises:
        ObservationError: On the first malformed or non-monotonic record, or if there are no records.
    """
    reader = csv.reader(lines)
    header = next(reader, None)
    if header is None:
        raise ObservationError("No observations: input is empty")
    observations = []
    for row in reader:
        if not row or not any(cell.strip() for cell in row):
            continue
        try:
            observations.append(Observation.from_row(row).validate())
        except ObservationError as exc:
            error = ObservationError(f"Line {reader.line_num}: {exc}")
            error.bullet_name, error.range_yd = exc.bullet_name, exc.range_yd
            raise error from exc
    if not observations:
        raise ObservationError("No observations: input holds only a header")
    return observations


def load_observations(filename: str) -> List[Observation]:
    """Load and validate observations from a CSV file."""
    with open(filename, newline='', encoding='utf-8') as fp:
        observations = parse_observations(fp)
    logger.info(f"Loaded {len(observations)} observations from {filename}")
    return observations
