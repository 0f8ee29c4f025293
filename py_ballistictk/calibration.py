"""Aerodynamic coefficient calibration against range-test observations.

The four coefficients of the spin drift / crosswind jump model (AeroCoefficients) are fitted
to measured scope corrections in two phases:

    1. Simulated annealing: a derivative-free global search from the configured starting
       coefficients. Gaussian perturbations shrink with a geometrically cooling temperature,
       worse moves are accepted with Metropolis probability exp(-Δsse/T) and the best
       coefficients seen are kept independently of the accepted walk.
    2. Levenberg-Marquardt: local refinement from the annealing result, with a forward-difference
       Jacobian and a damped normal-equations step solved by Gaussian elimination.

Each Observation is expanded into five residual targets (one spin drift, four crosswind jumps)
before fitting. For one coefficient set, each source observation costs one zero search and five
trajectories, shared by its five targets.

Predicted readings follow the range-test procedure: zero at `cZeroRangeYards` with the sight
`cScopeHeightInches` above the bore under no wind, then fly to the observation range with
0, ±5 and ±10 mph crosswind. Corrections are -offset/range in mrad (positive = right / up).

Examples:
    ```python
    from py_ballistictk import Calibrator, load_observations

    calibrator = Calibrator(load_observations('spin_fit.csv'), {'cSeed': 1})
    result = calibrator.run()
    print(result.report.format())
    ```
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, replace

from typing_extensions import Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

from py_ballistictk.atmosphere import Atmosphere
from py_ballistictk.config import CalibrationConfig, CalibrationConfigDict, create_calibration_config
from py_ballistictk.exceptions import CalibrationCancelledError, CalibrationError, SingularMatrixError
from py_ballistictk.logger import logger
from py_ballistictk.observations import CROSSWIND_SPEEDS_MPH, FitObservation, Observation, expand_observations
from py_ballistictk.projectile import Projectile
from py_ballistictk.simulator import AeroCoefficients, Simulator
from py_ballistictk.units import (
    fahrenheit_to_kelvin,
    inches_to_meters,
    mph_to_mps,
    offset_to_mrad,
    yards_to_meters,
)
from py_ballistictk.vector import Vector

__all__ = (
    'COEFFICIENT_NAMES',
    'Readings',
    'ResidualModel',
    'AnnealingResult',
    'LevenbergMarquardtResult',
    'ReportRow',
    'CalibrationReport',
    'CalibrationResult',
    'Calibrator',
    'solve_linear_system',
    'min_normalized_pivot',
    'synthetic_observation',
    'sum_of_squares',
    'rmse',
)

COEFFICIENT_NAMES: Tuple[str, ...] = AeroCoefficients._fields

cSingularPivot: float = 1e-12  # |pivot| below this is treated as singular

Readings = Dict[float, Tuple[float, float]]
"""Predicted (windage, vertical) corrections in mrad, keyed by crosswind speed in mph."""


def sum_of_squares(residuals: Sequence[float]) -> float:
    return math.fsum(r * r for r in residuals)


def rmse(residuals: Sequence[float]) -> float:
    return math.sqrt(sum_of_squares(residuals) / len(residuals)) if residuals else 0.0


def solve_linear_system(augmented: Sequence[Sequence[float]]) -> List[float]:
    """Solve A·x = b by Gaussian elimination with partial pivoting.

    Args:
        augmented: n rows of n+1 values, the matrix [A | b]. Not modified.

    Returns:
        Solution vector x.

    Raises:
        SingularMatrixError: If a pivot is numerically zero.
    """
    a = [list(map(float, row)) for row in augmented]
    n = len(a)
    for k in range(n):
        pivot = max(range(k, n), key=lambda i: abs(a[i][k]))
        if pivot != k:
            a[k], a[pivot] = a[pivot], a[k]
        if abs(a[k][k]) < cSingularPivot:
            raise SingularMatrixError(k, abs(a[k][k]))
        for i in range(k + 1, n):
            factor = a[i][k] / a[k][k]
            for j in range(k, n + 1):
                a[i][j] -= factor * a[k][j]

    x = [0.0] * n
    for i in range(n - 1, -1, -1):
        s = a[i][n]
        for j in range(i + 1, n):
            s -= a[i][j] * x[j]
        x[i] = s / a[i][i]
    return x


def min_normalized_pivot(columns: Sequence[Sequence[float]]) -> float:
    """Smallest elimination pivot of JᵗJ after scaling every Jacobian column to unit length.

    1.0 for orthogonal columns, 0.0 for a zero column or linearly dependent columns; a value
    near zero means the data cannot tell the corresponding coefficients apart.
    """
    k = len(columns)
    norms = [math.sqrt(math.fsum(v * v for v in col)) for col in columns]
    if any(n == 0.0 for n in norms):
        return 0.0
    unit = [[v / n for v in col] for col, n in zip(columns, norms)]
    a = [[math.fsum(u * w for u, w in zip(unit[p], unit[q])) for q in range(k)] for p in range(k)]
    smallest = 1.0
    for c in range(k):
        pivot = max(range(c, k), key=lambda i: abs(a[i][c]))
        a[c], a[pivot] = a[pivot], a[c]
        smallest = min(smallest, abs(a[c][c]))
        if a[c][c] == 0.0:
            break
        for i in range(c + 1, k):
            factor = a[i][c] / a[c][c]
            for j in range(c, k):
                a[i][j] -= factor * a[c][j]
    return smallest


class ResidualModel:
    """Predicts range-test readings for coefficient sets and compares them with observations."""

    def __init__(self, fit_observations: Sequence[FitObservation], config: CalibrationConfig) -> None:
        self.fit_observations = list(fit_observations)
        self.config = config
        self.atmosphere = Atmosphere(temperature=fahrenheit_to_kelvin(config.cTemperatureF),
                                     altitude=config.cAltitude,
                                     humidity=config.cHumidity)
        self.zero_range = yards_to_meters(config.cZeroRangeYards)
        self.scope_height = inches_to_meters(config.cScopeHeightInches)
        self._sources: List[Observation] = []
        self._source_index: List[int] = []
        for fit in self.fit_observations:
            for i, source in enumerate(self._sources):
                if source is fit.source:
                    break
            else:
                i = len(self._sources)
                self._sources.append(fit.source)
            self._source_index.append(i)
        self.evaluations = 0

    def predict_readings(self, observation: Observation, coefficients: AeroCoefficients) -> Readings:
        """Zero the rifle, then fly the observation range with each crosswind speed.

        Raises:
            ZeroFindingError: If the zero search does not converge.
            CalibrationError: If a trajectory ends short of the observation range.
        """
        config = self.config
        dt = config.cTimeStep
        simulator = Simulator({'cTimeStep': dt}, coefficients)
        simulator.set_atmosphere(self.atmosphere)
        bullet: Projectile = observation.projectile()
        mv = observation.muzzle_velocity
        spin = Projectile.compute_spin_rate_from_twist(mv, observation.twist_m)
        simulator.set_initial_bullet(bullet.in_flight(Vector(mv, 0.0, 0.0), spin))
        simulator.compute_zero(mv, Vector(self.zero_range, 0.0, self.scope_height),
                               time_step=dt,
                               max_iterations=config.cZeroMaxIterations,
                               tolerance=config.cZeroTolerance,
                               spin_rate=spin,
                               damping=config.cZeroDamping).check()

        target_range = observation.range_m
        readings: Readings = {}
        for wind_mph in (0.0,) + CROSSWIND_SPEEDS_MPH:
            simulator.reset_to_initial()
            simulator.set_wind(Vector(0.0, -mph_to_mps(wind_mph), 0.0))
            point = simulator.simulate(target_range, dt).at_distance(target_range)
            if point is None:
                raise CalibrationError(f"{observation.bullet_name}: trajectory ended short of "
                                       f"{observation.range_yd:g} yards with {wind_mph:g} mph wind")
            readings[wind_mph] = (-offset_to_mrad(point.position.y, target_range),
                                  -offset_to_mrad(point.position.z - self.scope_height, target_range))
        return readings

    def predictions(self, coefficients: AeroCoefficients) -> List[float]:
        """Predicted value of every fit target, in fit-target order."""
        self.evaluations += 1
        readings = [self.predict_readings(source, coefficients) for source in self._sources]
        predicted = []
        for fit, i in zip(self.fit_observations, self._source_index):
            r = readings[i]
            if fit.is_drift:
                predicted.append(r[0.0][0])
            else:
                predicted.append(r[fit.wind_mph][1] - r[0.0][1])
        return predicted

    def residuals(self, coefficients: AeroCoefficients) -> List[float]:
        """Predicted minus observed, in fit-target order."""
        return [p - fit.observed for p, fit in zip(self.predictions(coefficients), self.fit_observations)]


class AnnealingResult(NamedTuple):
    coefficients: AeroCoefficients
    sse: float
    trials: int
    accepted: int


class LevenbergMarquardtResult(NamedTuple):
    coefficients: AeroCoefficients
    sse: float
    residuals: List[float]
    iterations: int
    reason: str
    conditioning: float


class ReportRow(NamedTuple):
    bullet_name: str
    range_yd: float
    wind_mph: float
    kind: str
    observed: float
    initial_prediction: float
    final_prediction: float
    final_error: float


@dataclass(frozen=True)
class CalibrationReport:
    """Before/after residuals, worst final error first.

    Attributes:
        rows: One row per fit target, sorted by descending |final_error|
        initial_rmse: RMSE at the coefficients the refinement starts from (mrad)
        final_rmse: RMSE at the fitted coefficients (mrad)
        improvement: Relative RMSE reduction (%)
        coefficients: Fitted coefficients
        warnings: Caveats about the fit, printed after the coefficients
    """

    rows: Tuple[ReportRow, ...]
    initial_rmse: float
    final_rmse: float
    improvement: float
    coefficients: AeroCoefficients
    warnings: Tuple[str, ...] = ()

    @classmethod
    def build(cls,
              fit_observations: Sequence[FitObservation],
              initial_residuals: Sequence[float],
              final_residuals: Sequence[float],
              coefficients: AeroCoefficients,
              warnings: Iterable[str] = ()) -> CalibrationReport:
        rows = [
            ReportRow(fit.bullet_name, fit.range_yd, fit.wind_mph, fit.kind, fit.observed,
                      fit.observed + r0, fit.observed + r1, r1)
            for fit, r0, r1 in zip(fit_observations, initial_residuals, final_residuals)
        ]
        rows.sort(key=lambda row: abs(row.final_error), reverse=True)
        initial = rmse(initial_residuals)
        final = rmse(final_residuals)
        improvement = 100.0 * (initial - final) / initial if initial > 0.0 else 0.0
        return cls(tuple(rows), initial, final, improvement, coefficients, tuple(warnings))

    def format(self) -> str:
        rule = '-' * 83
        lines = [
            'Residual report (sorted by error, worst first)',
            rule,
            f"{'Bullet':>15}{'Range':>8}{'Wind':>8}{'Type':>8}{'Obs':>10}"
            f"{'Init Pred':>12}{'Final Pred':>12}{'Final Err':>12}",
            rule,
        ]
        for row in self.rows:
            lines.append(f"{row.bullet_name:>15}{row.range_yd:>8.0f}{row.wind_mph:>8.1f}{row.kind:>8}"
                         f"{row.observed:>10.3f}{row.initial_prediction:>12.3f}"
                         f"{row.final_prediction:>12.3f}{row.final_error:>12.3f}")
        lines += [
            rule,
            f"Initial RMSE: {self.initial_rmse:.4f} mrad",
            f"Final RMSE:   {self.final_rmse:.4f} mrad",
            f"Improvement:  {self.improvement:.1f}%",
            '',
            'Fitted coefficients:',
        ]
        lines += [f"  {name} = {value:.6g}" for name, value in zip(COEFFICIENT_NAMES, self.coefficients)]
        lines += [f"Warning: {warning}" for warning in self.warnings]
        return '\n'.join(lines)

    def __str__(self) -> str:
        return self.format()


class CalibrationResult(NamedTuple):
    coefficients: AeroCoefficients
    annealing: AnnealingResult
    levenberg_marquardt: LevenbergMarquardtResult
    report: CalibrationReport


class Calibrator:
    """Fits AeroCoefficients to a set of range-test observations.

    Args:
        observations: Range-test records; each is validated before anything is simulated
        config: CalibrationConfig, or a dict of overrides of the default one
        fixed: Names of coefficients held at their starting values
        should_cancel: Polled between annealing temperature levels and LM iterations;
            returning True aborts the run with CalibrationCancelledError

    Raises:
        ObservationError: If an observation is malformed.
        ValueError: If there are no observations, a fixed name is unknown or every coefficient is fixed.
    """

    def __init__(self,
                 observations: Iterable[Observation],
                 config: Union[CalibrationConfig, CalibrationConfigDict, None] = None,
                 fixed: Iterable[str] = (),
                 should_cancel: Optional[Callable[[], bool]] = None) -> None:
        self.observations = [obs.validate() for obs in observations]
        if not self.observations:
            raise ValueError("At least one observation is required")
        self.config: CalibrationConfig = (
            config if isinstance(config, CalibrationConfig) else create_calibration_config(config)
        )
        fixed = set(fixed)
        unknown = fixed.difference(COEFFICIENT_NAMES)
        if unknown:
            raise ValueError(f"Unknown coefficient names: {', '.join(sorted(unknown))}")
        self.free = [i for i, name in enumerate(COEFFICIENT_NAMES) if name not in fixed]
        if not self.free:
            raise ValueError("Every coefficient is fixed; nothing to fit")
        self.should_cancel = should_cancel
        self.fit_observations = expand_observations(self.observations)
        self.model = ResidualModel(self.fit_observations, self.config)
        c = self.config
        self.bounds: Tuple[Tuple[float, float], ...] = (c.cLiftBounds, c.cRestoringBounds,
                                                        c.cYawBounds, c.cBetaLagBounds)
        self.sigmas: Tuple[float, ...] = (c.cLiftSigma, c.cRestoringSigma, c.cYawSigma, c.cBetaLagSigma)

    @property
    def initial_coefficients(self) -> AeroCoefficients:
        c = self.config
        return AeroCoefficients(c.cInitialLift, c.cInitialRestoring, c.cInitialYaw, c.cInitialBetaLag)

    def residuals(self, coefficients: AeroCoefficients) -> List[float]:
        return self.model.residuals(coefficients)

    def _check_cancelled(self, phase: str) -> None:
        if self.should_cancel is not None and self.should_cancel():
            logger.info(f"Calibration cancelled during {phase}")
            raise CalibrationCancelledError(f"Calibration cancelled during {phase}")

    def simulated_annealing(self, start: Optional[AeroCoefficients] = None) -> AnnealingResult:
        """Global derivative-free search; returns the best coefficients seen."""
        c = self.config
        rng = random.Random(c.cSeed)
        current = start if start is not None else self.initial_coefficients
        current_sse = sum_of_squares(self.residuals(current))
        best, best_sse = current, current_sse
        temperature = c.cInitialTemperature
        trials = accepted = levels = 0
        logger.info(f"Starting simulated annealing, initial SSE {current_sse:.6g}")

        while temperature > c.cMinTemperature:
            self._check_cancelled('simulated annealing')
            step_scale = temperature / c.cInitialTemperature
            for _ in range(c.cTrialsPerTemperature):
                values = list(current)
                for i in self.free:
                    low, high = self.bounds[i]
                    values[i] = min(max(values[i] + rng.gauss(0.0, self.sigmas[i] * step_scale), low), high)
                neighbor = AeroCoefficients(*values)
                neighbor_sse = sum_of_squares(self.residuals(neighbor))
                delta = neighbor_sse - current_sse
                trials += 1
                if delta < 0.0 or rng.random() < math.exp(-delta / temperature):
                    current, current_sse = neighbor, neighbor_sse
                    accepted += 1
                    if current_sse < best_sse:
                        best, best_sse = current, current_sse
            temperature *= c.cCoolingRate
            levels += 1
            if levels % 10 == 0:
                logger.info(f"Annealing trial {trials}: best SSE {best_sse:.6g} (T = {temperature:.3g})")
            else:
                logger.debug(f"Annealing level {levels}: best SSE {best_sse:.6g} (T = {temperature:.3g})")

        logger.info(f"Simulated annealing complete after {trials} trials ({accepted} accepted), "
                    f"best SSE {best_sse:.6g}")
        return AnnealingResult(best, best_sse, trials, accepted)

    def _jacobian(self, params: List[float], residuals: List[float]) -> List[List[float]]:
        """Forward-difference Jacobian columns for the free coefficients."""
        columns = []
        for i in self.free:
            h = self.config.cJacobianStep * max(1.0, abs(params[i]))
            shifted = list(params)
            shifted[i] += h
            r_shifted = self.residuals(AeroCoefficients(*shifted))
            columns.append([(rs - r) / h for rs, r in zip(r_shifted, residuals)])
        return columns

    def levenberg_marquardt(self, start: AeroCoefficients) -> LevenbergMarquardtResult:
        """Local refinement; stops on a small step, on the λ ceiling or on the iteration cap.

        Raises:
            SingularMatrixError: If the damped normal equations are singular.
        """
        c = self.config
        params = list(start)
        residuals = self.residuals(start)
        sse = sum_of_squares(residuals)
        lam = c.cLambdaInitial
        reason = 'iteration limit'
        iterations = 0
        k = len(self.free)
        logger.info(f"Starting Levenberg-Marquardt, SSE {sse:.6g}")

        while iterations < c.cMaxIterations:
            if sse == 0.0:
                reason = 'zero residual'
                break
            self._check_cancelled('Levenberg-Marquardt')
            iterations += 1
            columns = self._jacobian(params, residuals)
            jtj = [[math.fsum(a * b for a, b in zip(columns[p], columns[q])) for q in range(k)] for p in range(k)]
            jtr = [math.fsum(a * r for a, r in zip(columns[p], residuals)) for p in range(k)]
            for p in range(k):
                jtj[p][p] *= 1.0 + lam
            delta = solve_linear_system([jtj[p] + [-jtr[p]] for p in range(k)])

            trial = list(params)
            for p, i in enumerate(self.free):
                trial[i] += delta[p]
            trial_residuals = self.residuals(AeroCoefficients(*trial))
            trial_sse = sum_of_squares(trial_residuals)

            if trial_sse < sse:
                params, residuals, sse = trial, trial_residuals, trial_sse
                lam *= c.cLambdaDown
                if iterations % 10 == 0:
                    logger.info(f"LM iteration {iterations}: SSE {sse:.6g} (lambda = {lam:.3g})")
                if math.sqrt(math.fsum(d * d for d in delta)) < c.cStepTolerance:
                    reason = 'step tolerance'
                    break
            else:
                lam *= c.cLambdaUp
                if lam > c.cLambdaMax:
                    reason = 'lambda ceiling'
                    break

        conditioning = min_normalized_pivot(self._jacobian(params, residuals))
        logger.info(f"Levenberg-Marquardt stopped ({reason}) after {iterations} iterations, SSE {sse:.6g}")
        return LevenbergMarquardtResult(AeroCoefficients(*params), sse, residuals, iterations, reason,
                                        conditioning)

    def conditioning(self, coefficients: AeroCoefficients) -> float:
        """min_normalized_pivot of the Jacobian of the free coefficients at `coefficients`."""
        return min_normalized_pivot(self._jacobian(list(coefficients), self.residuals(coefficients)))

    def run(self) -> CalibrationResult:
        """Annealing then Levenberg-Marquardt.

        The report compares the annealing result, where the refinement starts, with the final
        coefficients. It carries a warning when the final Jacobian is ill-conditioned: a low
        residual then does not pin down the free coefficients.
        """
        logger.info(f"Fitting {len(self.fit_observations)} targets from {len(self.observations)} observations "
                    f"(free: {', '.join(COEFFICIENT_NAMES[i] for i in self.free)})")
        annealing = self.simulated_annealing(self.initial_coefficients)
        initial_residuals = self.residuals(annealing.coefficients)
        lm = self.levenberg_marquardt(annealing.coefficients)
        warnings = []
        if lm.conditioning < self.config.cConditionTolerance:
            warning = (f"ill-conditioned fit (normalized pivot {lm.conditioning:.2e}): the data do not determine "
                       f"{', '.join(COEFFICIENT_NAMES[i] for i in self.free)} independently; "
                       f"hold some of them fixed")
            logger.warning(warning)
            warnings.append(warning)
        report = CalibrationReport.build(self.fit_observations, initial_residuals, lm.residuals, lm.coefficients,
                                         warnings)
        logger.info(f"Calibration finished after {self.model.evaluations} model evaluations, "
                    f"RMSE {report.initial_rmse:.4f} -> {report.final_rmse:.4f} mrad")
        return CalibrationResult(lm.coefficients, annealing, lm, report)


def synthetic_observation(template: Observation,
                          coefficients: AeroCoefficients,
                          config: Union[CalibrationConfig, CalibrationConfigDict, None] = None) -> Observation:
    """Observation whose readings are exactly what the model predicts for `coefficients`.

    Bullet, rifle and range come from `template`; its readings are replaced.
    """
    if not isinstance(config, CalibrationConfig):
        config = create_calibration_config(config)
    model = ResidualModel([], config)
    readings = model.predict_readings(template, coefficients)
    return replace(template,
                   wind_0=readings[0.0][0], vert_0=readings[0.0][1],
                   wind_5=readings[5.0][0], vert_5=readings[5.0][1],
                   wind_10=readings[10.0][0], vert_10=readings[10.0][1],
                   wind_neg5=readings[-5.0][0], vert_neg5=readings[-5.0][1],
                   wind_neg10=readings[-10.0][0], vert_neg10=readings[-10.0][1])
