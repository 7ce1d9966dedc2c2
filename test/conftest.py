"""
Shared fixtures for the relprofile tests.
"""

import sys
from functools import partial
from pathlib import Path

import pandas as pd
import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from relprofile.core.sources import DatasetSpec, TableScoreSource
from relprofile.models.features import Feature


def position_table(chromosome: str = "chr1", length: int = 1000) -> pd.DataFrame:
    """Single base entries whose score is their own position."""
    positions = range(1, length + 1)
    return pd.DataFrame({
        "chromosome": chromosome,
        "start": list(positions),
        "end": list(positions),
        "score": [float(p) for p in positions],
    })


@pytest.fixture
def score_table():
    """One thousand single base scores on chr1, score equal to position."""
    return position_table()


@pytest.fixture
def score_source(score_table):
    return TableScoreSource(score_table)


@pytest.fixture
def score_dataset(score_table):
    return DatasetSpec(name="/data/scores.bedgraph", factory=partial(TableScoreSource, score_table))


@pytest.fixture
def forward_feature():
    return Feature(name="geneA", chromosome="chr1", start=401, end=600, strand="+", feature_type="gene")


@pytest.fixture
def reverse_feature():
    return Feature(name="geneB", chromosome="chr1", start=401, end=600, strand="-", feature_type="gene")


@pytest.fixture
def many_features():
    """Three hundred small features spread along chr1."""
    return [
        Feature(
            name=f"site{i}",
            chromosome="chr1",
            start=30 + 3 * i,
            end=40 + 3 * i,
            strand="-" if i % 2 else "+",
        )
        for i in range(300)
    ]
