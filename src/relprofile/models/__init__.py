"""
Data models for relative profile collection.
"""

from .features import (
    AggregationMethod,
    Feature,
    PositionMode,
    ScoredInterval,
    ScoredRegionQuery,
    Strand,
    StrandSense,
    WindowSpec,
)
from .matrix import ValueMatrix
from .result import CollectionStats, DatasetResult, RelativeDataResult

__all__ = [
    "AggregationMethod",
    "Feature",
    "PositionMode",
    "ScoredInterval",
    "ScoredRegionQuery",
    "Strand",
    "StrandSense",
    "WindowSpec",
    "ValueMatrix",
    "CollectionStats",
    "DatasetResult",
    "RelativeDataResult",
]
