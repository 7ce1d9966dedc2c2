"""
Result containers handed back to the caller.
"""

from typing import Dict, List

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field

from ..utils.naming import simplify_dataset_name
from .features import WindowSpec
from .matrix import ValueMatrix


class CollectionStats(BaseModel):
    """Counters reported alongside a value matrix."""

    features: int = Field(default=0, description="Features processed")
    cells: int = Field(default=0, description="Cells written")
    null_cells: int = Field(default=0, description="Cells left without a value")
    empty_features: int = Field(
        default=0,
        description="Features for which the source returned no data at all"
    )
    avoided_windows: int = Field(
        default=0,
        description="Windows nulled because they overlap a neighboring feature"
    )
    interpolated_cells: int = Field(default=0, description="Nulls filled by interpolation")

    def merge(self, other: "CollectionStats") -> "CollectionStats":
        return CollectionStats(**{
            name: getattr(self, name) + getattr(other, name)
            for name in type(self).model_fields
        })

    @property
    def null_fraction(self) -> float:
        return self.null_cells / self.cells if self.cells else 0.0


class DatasetResult(BaseModel):
    """The windows and value matrix collected for one dataset."""

    dataset: str
    strategy: str
    windows: List[WindowSpec]
    matrix: ValueMatrix
    stats: CollectionStats = Field(default_factory=CollectionStats)

    model_config = {"arbitrary_types_allowed": True}

    @property
    def column_names(self) -> List[str]:
        return [w.name for w in self.windows]


class RelativeDataResult(BaseModel):
    """Everything collected for one request, in feature input order."""

    feature_names: List[str]
    datasets: List[DatasetResult] = Field(default_factory=list)
    workers: int = Field(default=1, description="Shards actually used")

    model_config = {"arbitrary_types_allowed": True}

    @property
    def stats(self) -> CollectionStats:
        total = CollectionStats()
        for result in self.datasets:
            total = total.merge(result.stats)
        return total

    def to_frame(self) -> pd.DataFrame:
        """One row per feature, one column per window of every dataset."""
        frames = [
            result.matrix.to_frame(result.column_names, index=self.feature_names)
            for result in self.datasets
        ]
        if not frames:
            return pd.DataFrame(index=self.feature_names)
        return pd.concat(frames, axis=1)

    def summary_profile(self) -> pd.DataFrame:
        """
        Average each window across all features, nulls counted as zero.

        Suitable for plotting a meta-profile. Every dataset must share the
        same window layout.
        """
        summary: Dict[str, list] = {}
        reference = None
        for result in self.datasets:
            midpoints = [w.midpoint for w in result.windows]
            if reference is None:
                reference = midpoints
                summary["Window"] = result.column_names
                summary["Midpoint"] = midpoints
            elif midpoints != reference:
                raise ValueError(
                    "unable to summarize multiple datasets with nonequal columns of data"
                )
            values = np.nan_to_num(result.matrix.values, nan=0.0)
            if values.shape[0]:
                means = values.mean(axis=0)
            else:
                means = np.full(values.shape[1], np.nan)
            summary[simplify_dataset_name(result.dataset)] = list(means)
        return pd.DataFrame(summary)

    def column_groups(self) -> pd.DataFrame:
        """Map every window column to the dataset it belongs to."""
        rows = [
            {"Name": name, "Dataset": simplify_dataset_name(result.dataset)}
            for result in self.datasets
            for name in result.column_names
        ]
        return pd.DataFrame(rows, columns=["Name", "Dataset"])
