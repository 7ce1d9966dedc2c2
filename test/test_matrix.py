#!/usr/bin/env python3
"""
Tests for the value matrix.
"""

import numpy as np
import pytest

from relprofile.exceptions import MatrixWriteError
from relprofile.models.matrix import ValueMatrix


def test_new_matrix_is_unwritten():
    matrix = ValueMatrix(2, 3)
    assert matrix.shape == (2, 3)
    assert not matrix.is_complete()
    assert matrix.null_count() == 6
    assert matrix.row_ids == [0, 1]


def test_cells_are_written_once():
    matrix = ValueMatrix(1, 2)
    matrix.set(0, 0, 1.5)
    matrix.set(0, 1, None)

    assert matrix.get(0, 0) == 1.5
    assert matrix.is_null(0, 1)
    assert matrix.is_complete()
    with pytest.raises(MatrixWriteError):
        matrix.set(0, 0, 2.0)
    with pytest.raises(MatrixWriteError):
        matrix.set(0, 1, 2.0)


def test_set_row_length_must_match():
    matrix = ValueMatrix(1, 3)
    with pytest.raises(MatrixWriteError):
        matrix.set_row(0, [1.0, 2.0])


def test_fill_null_refuses_values():
    matrix = ValueMatrix(1, 2)
    matrix.set_row(0, [1.0, None])
    matrix.fill_null(0, 1, 3.0)
    assert matrix.row(0) == [1.0, 3.0]
    with pytest.raises(MatrixWriteError):
        matrix.fill_null(0, 0, 9.0)


def test_values_is_a_copy():
    matrix = ValueMatrix(1, 1)
    matrix.set(0, 0, 1.0)
    values = matrix.values
    values[0, 0] = 99.0
    assert matrix.get(0, 0) == 1.0


def test_row_ids_must_match_rows():
    with pytest.raises(ValueError):
        ValueMatrix(2, 1, row_ids=[0])


def test_merge_restores_original_order():
    late = ValueMatrix(2, 2, row_ids=[2, 3])
    late.set_row(0, [5.0, 6.0])
    late.set_row(1, [7.0, None])
    early = ValueMatrix(2, 2, row_ids=[0, 1])
    early.set_row(0, [1.0, 2.0])
    early.set_row(1, [3.0, 4.0])

    merged = ValueMatrix.merge([late, early], 4)

    assert merged.row_ids == [0, 1, 2, 3]
    assert merged.row(0) == [1.0, 2.0]
    assert merged.row(3) == [7.0, None]
    assert merged.is_complete()


def test_merge_rejects_duplicate_and_missing_rows():
    first = ValueMatrix(1, 1, row_ids=[0])
    second = ValueMatrix(1, 1, row_ids=[0])
    with pytest.raises(MatrixWriteError):
        ValueMatrix.merge([first, second], 1)
    with pytest.raises(MatrixWriteError):
        ValueMatrix.merge([first], 2)


def test_merge_rejects_column_mismatch():
    with pytest.raises(MatrixWriteError):
        ValueMatrix.merge([ValueMatrix(1, 2, [0]), ValueMatrix(1, 3, [1])], 2)


def test_equals_treats_nulls_as_equal():
    a = ValueMatrix(1, 2)
    b = ValueMatrix(1, 2)
    a.set_row(0, [1.0, None])
    b.set_row(0, [1.0, None])
    assert a.equals(b)
    assert not a.equals(ValueMatrix(1, 2, row_ids=[5]))


def test_to_frame():
    matrix = ValueMatrix(2, 2)
    matrix.set_row(0, [1.0, 2.0])
    matrix.set_row(1, [None, 4.0])
    frame = matrix.to_frame(["data:-10", "data:1"], index=["a", "b"])

    assert list(frame.columns) == ["data:-10", "data:1"]
    assert frame.loc["b", "data:1"] == 4.0
    assert np.isnan(frame.loc["b", "data:-10"])
