from __future__ import annotations

import numpy as np
import pytest

from erosion.heightfield import HeightField, Point2D


def _ramp(width: int = 8, height: int = 8) -> HeightField:
    yy, xx = np.mgrid[0:height, 0:width]
    return HeightField.from_array(2.0 * xx + 3.0 * yy)


def test_accessors_and_bounds() -> None:
    field = HeightField.zeros(5, 3)

    assert (field.width, field.height) == (5, 3)
    field.set(4, 2, 7.0)
    field.add_at(4, 2, 1.5)
    assert field.get(4, 2) == 8.5
    assert field.data[2, 4] == 8.5

    for x, y in ((5, 0), (0, 3), (-1, 0)):
        with pytest.raises(IndexError):
            field.get(x, y)
    with pytest.raises(ValueError):
        HeightField.zeros(0, 4)


def test_gradient_matches_bilinear_forward_difference() -> None:
    field = _ramp()

    gradient = field.gradient_at(Point2D(3.2, 4.7))

    assert gradient.x == pytest.approx(2.0)
    assert gradient.y == pytest.approx(3.0)


def test_gradient_uses_cell_corners_not_central_difference() -> None:
    field = HeightField.zeros(6, 6)
    field.set(3, 2, 4.0)

    # Cell (2, 2) sees (3, 2) only through its top-right forward difference.
    gradient = field.gradient_at(Point2D(2.9, 2.1))

    assert gradient.x == pytest.approx(2.0)
    assert gradient.y == pytest.approx(-2.0)


def test_gradient_is_flat_on_border_ring() -> None:
    field = _ramp()

    for pos in (Point2D(0.5, 3.5), Point2D(7.2, 3.5), Point2D(3.5, 0.1), Point2D(3.5, 7.9)):
        gradient = field.gradient_at(pos)
        assert (gradient.x, gradient.y) == (0.0, 0.0)


def test_deposit_on_grid_point_hits_single_cell() -> None:
    field = HeightField.zeros(8, 8)

    dropped = field.deposit(Point2D(3.0, 4.0), 2.0)

    assert dropped == 2.0
    assert field.get(3, 4) == 2.0
    assert field.total() == 2.0


def test_deposit_conserves_mass() -> None:
    field = HeightField.zeros(8, 8)

    dropped = field.deposit(Point2D(2.3, 5.6), 1.75)

    assert dropped == pytest.approx(1.75)
    assert field.total() == pytest.approx(1.75)
    assert np.count_nonzero(field.data) == 4
    assert field.get(2, 5) == pytest.approx(1.75 * 0.7 * 0.4)


def test_deposit_clamps_to_last_column_and_row() -> None:
    field = HeightField.zeros(8, 8)

    dropped = field.deposit(Point2D(7.5, 7.25), 1.0)

    assert dropped == pytest.approx(1.0)
    assert field.get(7, 7) == pytest.approx(1.0)
    assert field.total() == pytest.approx(1.0)


def test_deposit_of_nothing_changes_nothing() -> None:
    field = _ramp()
    before = field.to_array()

    assert field.deposit(Point2D(3.5, 3.5), 0.0) == 0.0
    assert np.array_equal(field.data, before)


def test_interior_check() -> None:
    field = HeightField.zeros(8, 6)

    assert field.in_interior(Point2D(1.0, 1.0))
    assert field.in_interior(Point2D(6.99, 4.99))
    assert not field.in_interior(Point2D(0.99, 3.0))
    assert not field.in_interior(Point2D(7.0, 3.0))
    assert not field.in_interior(Point2D(3.0, 5.0))
    assert not field.in_interior(Point2D(-0.5, 3.0))


def test_integer_input_is_stored_as_float() -> None:
    field = HeightField(np.zeros((4, 4), dtype=np.int64))

    field.deposit(Point2D(1.0, 1.0), 0.25)

    assert field.data.dtype == np.float64
    assert field.get(1, 1) == 0.25


def test_float_input_is_adopted_without_copy() -> None:
    values = np.zeros((3, 3))
    field = HeightField(values)

    field.set(1, 1, 2.0)

    assert values[1, 1] == 2.0
