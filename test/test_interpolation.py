#!/usr/bin/env python3
"""
Tests for null window interpolation.
"""

import pytest

from relprofile.core.interpolation import interpolate_matrix, interpolate_row
from relprofile.models.matrix import ValueMatrix


def test_interior_run_is_filled():
    assert interpolate_row([1.0, None, None, 4.0]) == pytest.approx([1.0, 2.0, 3.0, 4.0])


def test_edges_are_never_filled():
    assert interpolate_row([None, None, 3.0, None]) == [None, None, 3.0, None]


def test_trailing_run_is_left_alone():
    assert interpolate_row([1.0, None, None]) == [1.0, None, None]
    assert interpolate_row([1.0, None, 3.0, None, None]) == [1.0, 2.0, 3.0, None, None]


def test_several_runs():
    row = interpolate_row([0.0, None, 2.0, 5.0, None, None, 8.0])
    assert row == pytest.approx([0.0, 1.0, 2.0, 5.0, 6.0, 7.0, 8.0])


def test_decimal_format_applies_to_filled_values():
    assert interpolate_row([0.0, None, None, 1.0], decimal_format=2) == [0.0, 0.33, 0.67, 1.0]


def test_short_rows_unchanged():
    assert interpolate_row([]) == []
    assert interpolate_row([None, 1.0]) == [None, 1.0]


def test_interpolate_matrix_counts_filled_cells():
    matrix = ValueMatrix(2, 4)
    matrix.set_row(0, [1.0, None, None, 4.0])
    matrix.set_row(1, [None, 5.0, None, 7.0])

    assert interpolate_matrix(matrix) == 3
    assert matrix.row(0) == pytest.approx([1.0, 2.0, 3.0, 4.0])
    assert matrix.row(1)[0] is None
    assert matrix.row(1)[1:] == pytest.approx([5.0, 6.0, 7.0])
    assert matrix.null_count() == 1


def test_interpolating_twice_changes_nothing():
    once = interpolate_row([1.0, None, 3.0, None, None, 9.0, None])
    assert interpolate_row(once) == once

    matrix = ValueMatrix(1, 4)
    matrix.set_row(0, [1.0, None, None, 4.0])
    interpolate_matrix(matrix)
    assert interpolate_matrix(matrix) == 0
