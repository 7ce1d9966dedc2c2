"""
Reference point resolution for features.
"""

from typing import Optional

from ..exceptions import ConfigurationError
from ..models.features import Feature, PositionMode, Strand


def effective_strand(feature: Feature, force_strand: bool = False) -> Strand:
    """The strand to orient a feature by, honoring a caller supplied override."""
    if force_strand and feature.forced_strand is not None:
        return feature.forced_strand
    return feature.strand


def midpoint(start: int, end: int) -> int:
    """Midpoint of an interval, halves rounded up."""
    return (start + end + 1) // 2


def resolve_reference(
    feature: Feature,
    position: PositionMode,
    strand: Optional[Strand] = None,
) -> int:
    """
    Absolute coordinate the windows of a feature are anchored to.

    Forward and unstranded features use the start as 5' end and the end as
    3' end; reverse features swap them. ``strand`` overrides the feature's
    own strand when given.

    Raises:
        ConfigurationError: peak summit requested for a feature without one
    """
    strand = feature.strand if strand is None else strand
    if position is PositionMode.FIVE_PRIME:
        return feature.end if strand.is_reverse else feature.start
    if position is PositionMode.THREE_PRIME:
        return feature.start if strand.is_reverse else feature.end
    if position is PositionMode.MIDPOINT:
        return midpoint(feature.start, feature.end)
    if position is PositionMode.PEAK_SUMMIT:
        if feature.summit is None:
            raise ConfigurationError(
                f"Peak summit requested but feature '{feature.name}' has no summit"
            )
        return feature.summit
    raise ConfigurationError(f"Unknown position mode: {position!r}")


def has_summits(features) -> bool:
    """True when every feature carries a peak summit."""
    return all(f.peak is not None for f in features)
