"""Interpolation utilities.

Trajectory queries interpolate linearly between two bracketing samples (interpolate_2_pt).
Drag-table lookups use a monotone piecewise-cubic Hermite spline (PCHIP): the knot slopes
are limited with the Fritsch–Carlson rules so the interpolant never overshoots the tabulated
drag curve, and the per-segment cubics are precomputed once per table (pchip_prepare) so a
lookup (pchip_eval) is a bisection plus one Horner evaluation.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing_extensions import List, Sequence, Tuple

__all__ = [
    "interpolate_2_pt",
    "PchipPrepared",
    "pchip_prepare",
    "pchip_eval",
]

Segment = Tuple[float, float, float, float]


def interpolate_2_pt(x: float, x0: float, y0: float, x1: float, y1: float) -> float:
    """Value at x of the straight line through (x0, y0) and (x1, y1).

    Raises:
        ZeroDivisionError: If x0 == x1.
    """
    if x0 == x1:
        raise ZeroDivisionError("Cannot interpolate between two points with the same x")
    return y0 + (y1 - y0) * (x - x0) / (x1 - x0)


@dataclass
class PchipPrepared:
    """Monotone cubic spline ready for evaluation.

    Attributes:
        knots: Strictly increasing knot positions
        segments: For each knot interval, (a, b, c, d) such that on [knots[i], knots[i+1]]
            y = a + b·dx + c·dx² + d·dx³ with dx = x - knots[i]
    """

    knots: List[float]
    segments: List[Segment]


def _same_sign(p: float, q: float) -> bool:
    return (p > 0.0 and q > 0.0) or (p < 0.0 and q < 0.0)


def _interior_slope(h_left: float, h_right: float, s_left: float, s_right: float) -> float:
    """Weighted harmonic mean of the neighbouring secants; flat at a local extremum."""
    if not _same_sign(s_left, s_right):
        return 0.0
    w_left = 2.0 * h_right + h_left
    w_right = h_right + 2.0 * h_left
    return (w_left + w_right) / (w_left / s_left + w_right / s_right)


def _end_slope(h_near: float, h_far: float, s_near: float, s_far: float) -> float:
    """One-sided three-point slope, limited to keep the end segment monotone."""
    slope = ((2.0 * h_near + h_far) * s_near - h_near * s_far) / (h_near + h_far)
    if not _same_sign(slope, s_near):
        return 0.0
    if abs(slope) > 3.0 * abs(s_near):
        return 3.0 * s_near
    return slope


def _hermite_segment(y0: float, y1: float, m0: float, m1: float, h: float) -> Segment:
    secant = (y1 - y0) / h
    c = (3.0 * secant - 2.0 * m0 - m1) / h
    d = (m0 + m1 - 2.0 * secant) / (h * h)
    return y0, m0, c, d


def pchip_prepare(xs: Sequence[float], ys: Sequence[float]) -> PchipPrepared:
    """Build the monotone cubic spline through (xs, ys).

    Raises:
        ValueError: If the sequences differ in length, hold fewer than two points,
            or xs is not strictly increasing.
    """
    if len(xs) != len(ys):
        raise ValueError(f"Got {len(xs)} x values and {len(ys)} y values")
    if len(xs) < 2:
        raise ValueError("PCHIP needs at least two points")
    widths = [x1 - x0 for x0, x1 in zip(xs, xs[1:])]
    if any(w <= 0.0 for w in widths):
        raise ValueError("PCHIP knots must be strictly increasing")
    secants = [(y1 - y0) / w for y0, y1, w in zip(ys, ys[1:], widths)]

    if len(xs) == 2:
        slopes = [secants[0], secants[0]]
    else:
        slopes = [_end_slope(widths[0], widths[1], secants[0], secants[1])]
        slopes += [_interior_slope(widths[i - 1], widths[i], secants[i - 1], secants[i])
                   for i in range(1, len(xs) - 1)]
        slopes.append(_end_slope(widths[-1], widths[-2], secants[-1], secants[-2]))

    segments = [_hermite_segment(ys[i], ys[i + 1], slopes[i], slopes[i + 1], widths[i])
                for i in range(len(widths))]
    return PchipPrepared(list(xs), segments)


def pchip_eval(prep: PchipPrepared, x: float, clamp: bool = False) -> float:
    """Evaluate a prepared spline at x.

    Args:
        prep: Prepared spline
        x: Evaluation point
        clamp: Clamp x to the knot range, so the end values are returned instead of
            extrapolating the end cubics
    """
    knots = prep.knots
    if clamp:
        x = min(max(x, knots[0]), knots[-1])
    i = min(max(bisect_right(knots, x) - 1, 0), len(knots) - 2)
    a, b, c, d = prep.segments[i]
    dx = x - knots[i]
    return a + dx * (b + dx * (c + dx * d))
