"""
File input and output for the command line.
"""

from .tables import (
    feature_frame,
    features_from_table,
    is_enumerable_table,
    read_feature_table,
    read_features,
    read_scores,
    write_table,
)

__all__ = [
    "feature_frame",
    "features_from_table",
    "is_enumerable_table",
    "read_feature_table",
    "read_features",
    "read_scores",
    "write_table",
]
