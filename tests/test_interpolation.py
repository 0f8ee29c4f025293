import math

import pytest

from py_ballistictk.interpolation import interpolate_2_pt, pchip_eval, pchip_prepare


class TestInterpolation:

    def test_linear_agrees_with_exact_line(self):
        x0, x1 = 10.0, 20.0
        y0, y1 = 30.0, 50.0
        for x in [10.0, 12.5, 15.0, 17.5, 20.0]:
            y = interpolate_2_pt(x, x0, y0, x1, y1)
            assert math.isclose(y, y0 + (y1 - y0) * (x - x0) / (x1 - x0), rel_tol=0, abs_tol=1e-12)

    def test_linear_duplicate_x(self):
        with pytest.raises(ZeroDivisionError):
            interpolate_2_pt(1.0, 2.0, 0.0, 2.0, 1.0)

    def test_pchip_passes_through_knots(self):
        xs = [0.0, 1.0, 2.0, 3.0]
        ys = [0.0, 1.0, 1.5, 1.6]
        prep = pchip_prepare(xs, ys)
        for x, y in zip(xs, ys):
            assert pchip_eval(prep, x) == pytest.approx(y, abs=1e-12)

    def test_pchip_preserves_monotonicity(self):
        prep = pchip_prepare([0.0, 1.0, 2.0, 3.0], [0.0, 1.0, 1.5, 1.6])
        last = -math.inf
        for i in range(31):
            y = pchip_eval(prep, i * 0.1)
            assert y >= last - 1e-12
            last = y

    def test_pchip_no_overshoot_on_plateau(self):
        prep = pchip_prepare([0.0, 1.0, 2.0, 3.0], [0.0, 1.0, 1.0, 2.0])
        for i in range(11):
            assert pchip_eval(prep, 1.0 + i * 0.1) == pytest.approx(1.0, abs=1e-12)

    def test_pchip_clamp(self):
        prep = pchip_prepare([0.0, 1.0, 2.0], [1.0, 2.0, 4.0])
        assert pchip_eval(prep, -5.0, clamp=True) == pytest.approx(1.0)
        assert pchip_eval(prep, 5.0, clamp=True) == pytest.approx(4.0)

    def test_pchip_two_points_is_linear(self):
        prep = pchip_prepare([0.0, 2.0], [1.0, 3.0])
        assert pchip_eval(prep, 0.5) == pytest.approx(1.5)

    @pytest.mark.parametrize("xs, ys", [
        ([0.0, 1.0], [0.0]),
        ([0.0], [0.0]),
        ([0.0, 1.0, 1.0], [0.0, 1.0, 2.0]),
    ])
    def test_pchip_invalid_input(self, xs, ys):
        with pytest.raises(ValueError):
            pchip_prepare(xs, ys)
