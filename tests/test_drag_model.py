import math

import pytest

from py_ballistictk import DragFunction, TableG1, TableG7, drag_coefficient, get_drag_tables_names
from py_ballistictk.drag_model import DragDataPoint, drag_retardation, make_data_points


class TestDragFunction:

    @pytest.mark.parametrize("value, expected", [
        (DragFunction.G1, DragFunction.G1),
        (1, DragFunction.G7),
        ("g1", DragFunction.G1),
        (" G7 ", DragFunction.G7),
    ])
    def test_parse(self, value, expected):
        assert DragFunction.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            DragFunction.parse("G8")


class TestDragCoefficient:

    @pytest.mark.parametrize("drag_function, mach, cd", [
        (DragFunction.G1, 1.0, 0.3537),
        (DragFunction.G7, 1.0, 0.3803),
        (DragFunction.G1, 0.0, 0.2629),
        (DragFunction.G7, 5.0, 0.1618),
    ])
    def test_table_knots(self, drag_function, mach, cd):
        assert drag_coefficient(mach, drag_function) == pytest.approx(cd, abs=1e-12)

    @pytest.mark.parametrize("table, drag_function", [(TableG1, DragFunction.G1), (TableG7, DragFunction.G7)])
    def test_clamped_outside_table(self, table, drag_function):
        assert drag_coefficient(-1.0, drag_function) == pytest.approx(table[0]['CD'])
        assert drag_coefficient(12.0, drag_function) == pytest.approx(table[-1]['CD'])

    def test_between_knots_stays_within_neighbours(self):
        # G7 rises through the transonic region
        cd = drag_coefficient(0.9625, DragFunction.G7)
        lo = drag_coefficient(0.95, DragFunction.G7)
        hi = drag_coefficient(0.975, DragFunction.G7)
        assert lo <= cd <= hi

    def test_tables_registered(self):
        assert get_drag_tables_names() == ['TableG1', 'TableG7']


def test_make_data_points():
    points = make_data_points([{'Mach': 0.5, 'CD': 0.2}, DragDataPoint(1.0, 0.4)])
    assert points == [DragDataPoint(0.5, 0.2), DragDataPoint(1.0, 0.4)]
    with pytest.raises(TypeError):
        make_data_points([{'Mach': 0.5}])  # type: ignore[list-item]


def test_drag_retardation():
    # a = ρ·V²·(π/4)·Cd / (2·BC·703.0696)
    expected = 1.2 * 800.0 ** 2 * math.pi / 4 * 0.4 / (2 * 0.25 * 703.0696)
    assert drag_retardation(1.2, 800.0, 0.4, 0.25) == pytest.approx(expected)
    assert drag_retardation(1.2, 800.0, 0.4, 0.5) == pytest.approx(expected / 2)
