"""
Scored-region sources: the collaborators that hold the signal.

A source answers two kinds of request. Batch collection asks for every raw
entry in a feature's full span keyed by absolute position; per-window
collection asks for one reduced score per window. Both report whether the
queried span overlaps a neighboring feature when avoidance is requested.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field

from ..models.features import (
    AggregationMethod,
    Feature,
    ScoredInterval,
    ScoredRegionQuery,
    Strand,
    StrandSense,
)
from .aggregation import reduce_scores
from .reference import midpoint


class RegionScores(NamedTuple):
    """Raw entries keyed by absolute position, plus avoided neighbor spans."""

    positions: Dict[int, List[ScoredInterval]]
    neighbors: List[Tuple[int, int]]

    @property
    def empty(self) -> bool:
        return not self.positions


class WindowScore(NamedTuple):
    """A reduced score for one window and whether it overlaps a neighbor."""

    value: Optional[float]
    overlaps: bool = False
    empty: bool = False


def strand_allows(entry_strand: int, feature_strand: int, sense: StrandSense) -> bool:
    """
    Whether an entry passes the stranded collection filter.

    Unstranded entries always pass. Unstranded features are oriented as
    forward, the same way the reference point is resolved for them.
    """
    if sense is StrandSense.ALL or entry_strand == 0:
        return True
    reference = Strand.REVERSE if feature_strand < 0 else Strand.FORWARD
    if sense is StrandSense.SENSE:
        return entry_strand == reference
    return entry_strand == -reference


class ScoredRegionSource(ABC):
    """Base class for anything that can be queried for scored entries."""

    # count-like data (alignments, sites) rather than a continuous signal
    enumerable: bool = False

    @abstractmethod
    def fetch(self, query: ScoredRegionQuery) -> List[ScoredInterval]:
        """Return every raw entry overlapping the query span."""

    def neighbors(self, query: ScoredRegionQuery) -> List[Tuple[int, int]]:
        """Spans of avoidable features overlapping the query, excluding its own."""
        return []

    def stranded_entries(self, query: ScoredRegionQuery) -> List[ScoredInterval]:
        return [
            entry for entry in self.fetch(query)
            if strand_allows(entry.strand, query.strand, query.strand_sense)
        ]

    def position_scores(self, query: ScoredRegionQuery) -> RegionScores:
        """
        Raw entries keyed by absolute position over the query span.

        Continuous entries are spread over every base they cover; enumerable
        entries are keyed once, at their midpoint, so each is counted once.
        """
        positions: Dict[int, List[ScoredInterval]] = {}
        for entry in self.stranded_entries(query):
            if self.enumerable:
                positions.setdefault(midpoint(entry.start, entry.end), []).append(entry)
                continue
            for position in range(max(entry.start, query.start), min(entry.end, query.stop) + 1):
                positions.setdefault(position, []).append(entry)
        neighbors = self.neighbors(query) if query.avoid else []
        return RegionScores(positions, neighbors)

    def window_score(
        self,
        query: ScoredRegionQuery,
        method: AggregationMethod,
        enumerable: Optional[bool] = None,
    ) -> WindowScore:
        """Reduce the entries of exactly one window."""
        if query.avoid and self.neighbors(query):
            return WindowScore(None, overlaps=True)
        entries = self.stranded_entries(query)
        value = reduce_scores(
            entries,
            method,
            enumerable=self.enumerable if enumerable is None else enumerable,
            window=(query.start, query.stop),
        )
        return WindowScore(value, overlaps=False, empty=not entries)

    def close(self) -> None:
        """Release any handle held by the source."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class DatasetSpec(BaseModel):
    """A named dataset and the factory that opens a fresh source for it."""

    name: str = Field(description="Dataset identifier used for column labels")
    factory: Callable[[], ScoredRegionSource] = Field(
        description="Zero-argument callable returning a new source; must be picklable for process workers"
    )
    enumerable: bool = Field(
        default=False,
        description="Whether the dataset holds count-like entries, so empty sums are 0",
    )

    def open(self) -> ScoredRegionSource:
        return self.factory()


class _ChromosomeIndex(NamedTuple):
    starts: np.ndarray
    ends: np.ndarray
    scores: np.ndarray
    names: np.ndarray
    strands: np.ndarray
    max_length: int


class _NeighborIndex(NamedTuple):
    starts: np.ndarray
    ends: np.ndarray
    types: np.ndarray
    names: np.ndarray


class TableScoreSource(ScoredRegionSource):
    """
    In-memory source over a table of scored intervals.

    The table needs ``chromosome``, ``start`` and ``end`` columns (1-based,
    inclusive) and may carry ``score``, ``name`` and ``strand``. Entries are
    indexed per chromosome and looked up by binary search on the start.
    ``neighbors`` supplies the features checked when avoidance is requested.
    """

    def __init__(
        self,
        table: pd.DataFrame,
        neighbors: Optional[Iterable[Feature]] = None,
        enumerable: bool = False,
    ):
        missing = {"chromosome", "start", "end"} - set(table.columns)
        if missing:
            raise ValueError(f"Score table is missing columns: {', '.join(sorted(missing))}")
        self.enumerable = enumerable
        self._index = self._build_index(table)
        self._neighbors = self._build_neighbors(neighbors or [])

    @staticmethod
    def _build_index(table: pd.DataFrame) -> Dict[str, _ChromosomeIndex]:
        index = {}
        if table.empty:
            return index
        table = table.sort_values(["chromosome", "start"], kind="mergesort")
        for chromosome, group in table.groupby("chromosome", sort=False):
            starts = group["start"].to_numpy(dtype=np.int64)
            ends = group["end"].to_numpy(dtype=np.int64)
            if "score" in group:
                scores = pd.to_numeric(group["score"], errors="coerce").to_numpy(dtype=float)
            else:
                scores = np.full(len(group), np.nan)
            if "name" in group:
                names = group["name"].to_numpy(dtype=object)
            else:
                names = np.full(len(group), None, dtype=object)
            if "strand" in group:
                strands = np.array([int(Strand.parse(s)) for s in group["strand"]], dtype=np.int8)
            else:
                strands = np.zeros(len(group), dtype=np.int8)
            index[str(chromosome)] = _ChromosomeIndex(
                starts, ends, scores, names, strands,
                int((ends - starts).max()) + 1,
            )
        return index

    @staticmethod
    def _build_neighbors(features: Iterable[Feature]) -> Dict[str, _NeighborIndex]:
        by_chromosome: Dict[str, List[Feature]] = {}
        for feature in features:
            by_chromosome.setdefault(feature.chromosome, []).append(feature)
        return {
            chromosome: _NeighborIndex(
                np.array([f.start for f in group], dtype=np.int64),
                np.array([f.end for f in group], dtype=np.int64),
                np.array([f.feature_type for f in group], dtype=object),
                np.array([f.name for f in group], dtype=object),
            )
            for chromosome, group in by_chromosome.items()
        }

    def fetch(self, query: ScoredRegionQuery) -> List[ScoredInterval]:
        index = self._index.get(query.chromosome)
        if index is None:
            return []
        lo = np.searchsorted(index.starts, query.start - index.max_length + 1, side="left")
        hi = np.searchsorted(index.starts, query.stop, side="right")
        entries = []
        for i in range(lo, hi):
            if index.ends[i] < query.start:
                continue
            score = index.scores[i]
            entries.append(ScoredInterval(
                int(index.starts[i]),
                int(index.ends[i]),
                None if np.isnan(score) else float(score),
                index.names[i],
                int(index.strands[i]),
            ))
        return entries

    def neighbors(self, query: ScoredRegionQuery) -> List[Tuple[int, int]]:
        index = self._neighbors.get(query.chromosome)
        if index is None:
            return []
        found = []
        mask = (index.starts <= query.stop) & (index.ends >= query.start)
        for i in np.flatnonzero(mask):
            if query.exclude is not None and index.names[i] == query.exclude:
                continue
            if query.avoid_types and index.types[i] not in query.avoid_types:
                continue
            found.append((int(index.starts[i]), int(index.ends[i])))
        return found
