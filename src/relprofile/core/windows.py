"""
Window plan construction around a reference point.
"""

from typing import List, Optional, Sequence, Tuple

from ..config.settings import CollectionConfig
from ..exceptions import ConfigurationError
from ..models.features import AggregationMethod, PositionMode, StrandSense, WindowSpec


def skip_zero(start: int, stop: int) -> Tuple[int, int]:
    """
    Adjust a relative window so that it never covers offset 0.

    Coordinates are 1-based, so there is no base between -1 and +1. A window
    starting at 0 moves one base downstream as a whole; a window ending at
    0 or straddling it gains one base at its stop. Plans laid out by
    ``build_window_plan`` start every window on a multiple of the window
    size, so only the first case arises there.
    """
    if not start <= 0 <= stop:
        return start, stop
    if start == 0:
        return start + 1, stop + 1
    return start, stop + 1


def build_window_plan(
    window_size: int,
    up_number: int,
    down_number: int,
    dataset: str,
    method: AggregationMethod = AggregationMethod.MEAN,
    position: PositionMode = PositionMode.FIVE_PRIME,
    strand_sense: StrandSense = StrandSense.ALL,
    strand_implied: bool = False,
    avoid: Sequence[str] = (),
    enumerable: bool = False,
    decimal_format: Optional[int] = None,
) -> List[WindowSpec]:
    """
    Lay out windows from the most upstream to the most downstream.

    Windows step by ``window_size`` from ``-window_size * up_number`` to
    ``window_size * down_number``. When a window is shifted past offset 0
    the following windows continue from the shifted start, so they stay
    contiguous.

    Raises:
        ConfigurationError: if the size is not positive, a count is
            negative, or no window would be produced
    """
    if window_size <= 0:
        raise ConfigurationError(f"Window size must be positive, got {window_size}")
    if up_number < 0 or down_number < 0:
        raise ConfigurationError("Window counts must not be negative")
    if up_number + down_number == 0:
        raise ConfigurationError("At least one upstream or downstream window is required")

    starting_point = 0 - window_size * up_number
    ending_point = window_size * down_number

    windows = []
    start = starting_point
    while start < ending_point:
        start, stop = skip_zero(start, start + window_size - 1)
        windows.append(WindowSpec(
            index=len(windows),
            start=start,
            stop=stop,
            window=window_size,
            dataset=dataset,
            method=method,
            position=position,
            strand_sense=strand_sense,
            strand_implied=strand_implied,
            avoid=tuple(avoid),
            enumerable=enumerable,
            decimal_format=decimal_format,
        ))
        start += window_size
    return windows


def plan_from_config(config: CollectionConfig, dataset: str, enumerable: bool = False) -> List[WindowSpec]:
    """Build the window plan for one dataset; ``enumerable`` marks count-like datasets."""
    up_number, down_number = config.window_counts
    return build_window_plan(
        window_size=config.window_size,
        up_number=up_number,
        down_number=down_number,
        dataset=dataset,
        method=config.method,
        position=config.position,
        strand_sense=config.strand_sense,
        strand_implied=config.force_strand,
        avoid=tuple(config.avoid_types) if config.avoid else (),
        enumerable=config.is_enumerable() or enumerable,
        decimal_format=config.decimal_format,
    )


def window_span(windows: Sequence[WindowSpec]) -> int:
    """Total span of a plan, ending offset minus starting offset."""
    if not windows:
        return 0
    return windows[0].window * len(windows)


def plan_bounds(windows: Sequence[WindowSpec]) -> Tuple[int, int]:
    """Smallest relative start and largest relative stop of a plan."""
    return windows[0].start, windows[-1].stop
