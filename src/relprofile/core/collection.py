"""
Collection strategies filling value matrix rows from a scored-region source.
"""

from bisect import bisect_left, bisect_right
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import structlog

from ..config.settings import CollectionConfig
from ..models.features import Feature, ScoredRegionQuery, Strand, WindowSpec
from ..models.matrix import ValueMatrix
from ..models.result import CollectionStats
from .aggregation import format_value, reduce_scores
from .interpolation import interpolate_matrix
from .reference import effective_strand, resolve_reference
from .sources import ScoredRegionSource
from .windows import plan_bounds, window_span


class CollectionStrategy(str, Enum):
    """How scores are fetched for each feature."""

    BATCH = "batch"
    PER_WINDOW = "per_window"


def select_strategy(
    windows: Sequence[WindowSpec],
    threshold: int,
    force_long: bool = False,
) -> CollectionStrategy:
    """
    Choose per-window collection for long spans or when forced.

    Batch collection fetches a feature's whole span once and slices it, which
    is cheap for dense point data but grows with the span and counts long
    entries in every window they reach.
    """
    if force_long or window_span(windows) > threshold:
        return CollectionStrategy.PER_WINDOW
    return CollectionStrategy.BATCH


def absolute_window(reference: int, start: int, stop: int, strand: Strand) -> Tuple[int, int]:
    """Genomic (low, high) coordinates of a relative window."""
    if strand.is_reverse:
        return reference - stop, reference - start
    return reference + start, reference + stop


def avoid_types_for(feature: Feature, config: CollectionConfig) -> Tuple[str, ...]:
    """Feature types to avoid for one feature; its own type by default."""
    if config.avoid_types:
        return tuple(config.avoid_types)
    if feature.feature_type:
        return (feature.feature_type,)
    return ()


def _overlaps_any(low: int, high: int, spans: Sequence[Tuple[int, int]]) -> bool:
    return any(start <= high and end >= low for start, end in spans)


class DatasetCollector:
    """Fills one dataset's matrix rows for a list of features."""

    def __init__(
        self,
        windows: Sequence[WindowSpec],
        source: ScoredRegionSource,
        config: CollectionConfig,
        strategy: CollectionStrategy,
        logger: Optional[structlog.BoundLogger] = None,
    ):
        self.windows = list(windows)
        self.source = source
        self.config = config
        self.strategy = strategy
        self.logger = logger or structlog.get_logger("relprofile")
        self.stats = CollectionStats()

    def collect(self, features: Sequence[Feature], row_ids: Optional[Sequence[int]] = None) -> ValueMatrix:
        """Collect every feature into a new matrix, interpolating if configured."""
        matrix = ValueMatrix(len(features), len(self.windows), row_ids)
        collect_row = (
            self.collect_batch if self.strategy is CollectionStrategy.BATCH
            else self.collect_per_window
        )
        for row, feature in enumerate(features):
            matrix.set_row(row, collect_row(feature))

        self.stats.features += len(features)
        self.stats.cells += matrix.n_rows * matrix.n_columns
        if self.config.interpolate and matrix.n_columns > 2:
            filled = interpolate_matrix(matrix, self.config.decimal_format)
            self.stats.interpolated_cells += filled
            self.logger.debug("Interpolated missing values", cells=filled)
        self.stats.null_cells += matrix.null_count()
        return matrix

    def _query(self, feature: Feature, strand: Strand, low: int, high: int) -> ScoredRegionQuery:
        return ScoredRegionQuery(
            chromosome=feature.chromosome,
            start=max(low, 1),
            stop=high,
            strand=strand,
            strand_sense=self.config.strand_sense,
            avoid=self.config.avoid,
            avoid_types=avoid_types_for(feature, self.config) if self.config.avoid else (),
            exclude=feature.name,
        )

    def collect_batch(self, feature: Feature) -> List[Optional[float]]:
        """One query over the feature's full span, then sliced into windows."""
        strand = effective_strand(feature, self.config.force_strand)
        reference = resolve_reference(feature, self.config.position, strand)
        low, high = absolute_window(reference, *plan_bounds(self.windows), strand)
        if high < 1:
            self.stats.empty_features += 1
            return [None] * len(self.windows)

        region = self.source.position_scores(self._query(feature, strand, low, high))
        if region.empty:
            self.stats.empty_features += 1
            return [None] * len(self.windows)

        # relative offsets, downstream positive in the feature's orientation
        if strand.is_reverse:
            relative = sorted((reference - p, entries) for p, entries in region.positions.items())
        else:
            relative = sorted((p - reference, entries) for p, entries in region.positions.items())
        offsets = [offset for offset, _ in relative]

        values = []
        for window in self.windows:
            window_low, window_high = absolute_window(reference, window.start, window.stop, strand)
            if region.neighbors and _overlaps_any(window_low, window_high, region.neighbors):
                self.stats.avoided_windows += 1
                values.append(None)
                continue
            lo = bisect_left(offsets, window.start)
            hi = bisect_right(offsets, window.stop)
            scores = [entry for _, entries in relative[lo:hi] for entry in entries]
            if window.method.is_count:
                # an entry spread over several bases is still one entry
                scores = list({id(entry): entry for entry in scores}.values())
            value = reduce_scores(
                scores,
                window.method,
                enumerable=window.enumerable,
                window=(window_low, window_high),
            )
            values.append(format_value(value, window.decimal_format))
        return values

    def collect_per_window(self, feature: Feature) -> List[Optional[float]]:
        """One query per window."""
        strand = effective_strand(feature, self.config.force_strand)
        reference = resolve_reference(feature, self.config.position, strand)

        values = []
        empty = True
        for window in self.windows:
            low, high = absolute_window(reference, window.start, window.stop, strand)
            if high < 1:
                values.append(None)
                continue
            score = self.source.window_score(
                self._query(feature, strand, low, high),
                window.method,
                enumerable=window.enumerable,
            )
            if score.overlaps:
                self.stats.avoided_windows += 1
                values.append(None)
                continue
            empty = empty and score.empty
            values.append(format_value(score.value, window.decimal_format))
        if empty:
            self.stats.empty_features += 1
        return values
