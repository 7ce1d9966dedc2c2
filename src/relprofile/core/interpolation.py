"""
Linear interpolation of null windows within a feature's row.
"""

from typing import List, Optional, Sequence

from ..models.matrix import ValueMatrix
from .aggregation import format_value


def interpolate_row(
    values: Sequence[Optional[float]],
    decimal_format: Optional[int] = None,
) -> List[Optional[float]]:
    """
    Fill nulls lying between two valued windows of one row.

    The first and last windows are never filled. A run of nulls is only
    filled when a valued window follows it; a run reaching the end of the
    row is left alone.
    """
    row = list(values)
    last = len(row) - 1
    col = 1
    while col < last:
        if row[col] is None and row[col - 1] is not None:
            next_i = next((i for i in range(col + 1, last + 1) if row[i] is not None), None)
            if next_i is None:
                col += 1
                continue

            initial = row[col - 1]
            distance = next_i - col + 1
            for n in range(col, next_i):
                k = n - col + 1
                row[n] = format_value(initial + (row[next_i] - initial) * k / distance, decimal_format)

            col = next_i
        col += 1
    return row


def interpolate_matrix(matrix: ValueMatrix, decimal_format: Optional[int] = None) -> int:
    """Interpolate every row in place, returning the number of cells filled."""
    filled = 0
    for r in range(matrix.n_rows):
        original = matrix.row(r)
        if None not in original:
            continue
        for c, (before, after) in enumerate(zip(original, interpolate_row(original, decimal_format))):
            if before is None and after is not None:
                matrix.fill_null(r, c, after)
                filled += 1
    return filled
