"""
Value matrix holding one aggregated value per feature and window.
"""

from typing import Iterable, List, Optional, Sequence

import math

import numpy as np
import pandas as pd

from ..exceptions import MatrixWriteError


class ValueMatrix:
    """
    Rows are features in input order, columns are windows of one dataset.

    Cells hold a float or an explicit null (stored as NaN). A written cell is
    never overwritten; only ``fill_null`` may replace a null, and only the
    interpolation pass uses it.
    """

    def __init__(self, n_rows: int, n_columns: int, row_ids: Optional[Iterable[int]] = None):
        self._values = np.full((n_rows, n_columns), np.nan, dtype=float)
        self._written = np.zeros((n_rows, n_columns), dtype=bool)
        self.row_ids: List[int] = list(row_ids) if row_ids is not None else list(range(n_rows))
        if len(self.row_ids) != n_rows:
            raise ValueError("row_ids must have one entry per row")

    @property
    def shape(self):
        return self._values.shape

    @property
    def n_rows(self) -> int:
        return self._values.shape[0]

    @property
    def n_columns(self) -> int:
        return self._values.shape[1]

    @property
    def values(self) -> np.ndarray:
        """A copy of the underlying array, nulls as NaN."""
        return self._values.copy()

    def set(self, row: int, column: int, value: Optional[float]) -> None:
        """Write a cell once; ``None`` records an explicit null."""
        if self._written[row, column]:
            raise MatrixWriteError(f"Cell ({row}, {column}) has already been written")
        self._values[row, column] = np.nan if value is None else float(value)
        self._written[row, column] = True

    def set_row(self, row: int, values: Sequence[Optional[float]]) -> None:
        if len(values) != self.n_columns:
            raise MatrixWriteError(
                f"Row {row} has {len(values)} values for {self.n_columns} columns"
            )
        for column, value in enumerate(values):
            self.set(row, column, value)

    def fill_null(self, row: int, column: int, value: float) -> None:
        """Replace a null cell; non-null cells are refused."""
        if not math.isnan(self._values[row, column]):
            raise MatrixWriteError(f"Cell ({row}, {column}) is not null")
        self._values[row, column] = float(value)
        self._written[row, column] = True

    def get(self, row: int, column: int) -> Optional[float]:
        value = self._values[row, column]
        return None if math.isnan(value) else float(value)

    def is_null(self, row: int, column: int) -> bool:
        return bool(math.isnan(self._values[row, column]))

    def row(self, row: int) -> List[Optional[float]]:
        return [self.get(row, column) for column in range(self.n_columns)]

    def null_count(self) -> int:
        return int(np.isnan(self._values).sum())

    def is_complete(self) -> bool:
        """True once every cell has been written (nulls included)."""
        return bool(self._written.all())

    def equals(self, other: "ValueMatrix") -> bool:
        return (
            self.shape == other.shape
            and self.row_ids == other.row_ids
            and bool(np.array_equal(self._values, other._values, equal_nan=True))
        )

    @classmethod
    def merge(cls, partials: Sequence["ValueMatrix"], n_rows: int) -> "ValueMatrix":
        """
        Reassemble shard matrices into one matrix in original row order.

        Each partial carries the original row index of each of its rows in
        ``row_ids``; together they must cover ``0 .. n_rows - 1`` exactly once.
        """
        n_columns = partials[0].n_columns if partials else 0
        merged = cls(n_rows, n_columns)
        seen = np.zeros(n_rows, dtype=bool)
        for partial in partials:
            if partial.n_columns != n_columns:
                raise MatrixWriteError(
                    f"Partial matrix has {partial.n_columns} columns, expected {n_columns}"
                )
            for local, original in enumerate(partial.row_ids):
                if seen[original]:
                    raise MatrixWriteError(f"Row {original} appears in more than one shard")
                merged._values[original] = partial._values[local]
                merged._written[original] = partial._written[local]
                seen[original] = True
        if not seen.all():
            missing = np.flatnonzero(~seen)
            raise MatrixWriteError(f"{len(missing)} rows missing after merge, first is {missing[0]}")
        return merged

    def to_frame(self, columns: Sequence[str], index: Optional[Sequence[str]] = None) -> pd.DataFrame:
        return pd.DataFrame(self._values.copy(), columns=list(columns), index=index)

    def __repr__(self):
        return f"ValueMatrix(rows={self.n_rows}, columns={self.n_columns}, nulls={self.null_count()})"
