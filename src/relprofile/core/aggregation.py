"""
Score reducers applied to the raw entries falling in one window.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import math

import numpy as np

from ..exceptions import ConfigurationError
from ..models.features import AggregationMethod, ScoredInterval


def _as_number(value: Any) -> Optional[float]:
    """Numeric value of a raw score, or None for placeholders."""
    if isinstance(value, ScoredInterval):
        value = value.score
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def numeric_scores(values: Iterable[Any]) -> List[float]:
    """Keep only usable numbers, silently dropping placeholders like '.'."""
    numbers = []
    for value in values:
        number = _as_number(value)
        if number is not None:
            numbers.append(number)
    return numbers


def _names(value: Any) -> List[Any]:
    if isinstance(value, ScoredInterval):
        if value.name is None:
            # unnamed entries are told apart by their own extent
            return [(value.start, value.end, value.strand)]
        value = value.name
    if value is None or value == ".":
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [v for v in value if v is not None and v != "."]
    return [value]


def _mean(numbers: List[float]) -> float:
    return float(np.mean(numbers))


def _median(numbers: List[float]) -> float:
    return float(np.median(numbers))


def _sum(numbers: List[float]) -> float:
    return float(np.sum(numbers))


def _min(numbers: List[float]) -> float:
    return float(np.min(numbers))


def _max(numbers: List[float]) -> float:
    return float(np.max(numbers))


def _stddev(numbers: List[float]) -> float:
    # population standard deviation, these are all the scores there are
    return float(np.std(numbers, ddof=0))


NUMERIC_REDUCERS: Dict[AggregationMethod, Callable[[List[float]], float]] = {
    AggregationMethod.MEAN: _mean,
    AggregationMethod.MEDIAN: _median,
    AggregationMethod.SUM: _sum,
    AggregationMethod.MIN: _min,
    AggregationMethod.MAX: _max,
    AggregationMethod.STDDEV: _stddev,
}


def count_entries(values: Iterable[Any]) -> int:
    """Number of entries overlapping the window, partial or not."""
    return sum(1 for _ in values)


def precise_count(values: Iterable[Any], window: Optional[Tuple[int, int]] = None) -> int:
    """
    Number of entries lying entirely inside ``window`` (absolute, inclusive).

    Plain values carry no extent and are counted as they come.
    """
    total = 0
    for value in values:
        if window is None or not isinstance(value, ScoredInterval):
            total += 1
        elif value.start >= window[0] and value.end <= window[1]:
            total += 1
    return total


def name_count(values: Iterable[Any]) -> int:
    """Number of distinct names, so multi-segment entries count once."""
    names = set()
    for value in values:
        names.update(_names(value))
    return len(names)


def reduce_scores(
    values: Iterable[Any],
    method: AggregationMethod,
    enumerable: bool = False,
    window: Optional[Tuple[int, int]] = None,
) -> Optional[float]:
    """
    Reduce the raw scores of one window to a single value.

    Args:
        values: Raw scores, names or ``ScoredInterval`` entries
        method: Reducer to apply
        enumerable: Whether the dataset is count-like; an empty sum is then
            0 rather than null
        window: Absolute window bounds, used by the precise count

    Returns:
        The reduced value, or None when there is nothing to reduce
    """
    values = list(values)
    if method is AggregationMethod.COUNT:
        return count_entries(values)
    if method is AggregationMethod.PRECISE_COUNT:
        return precise_count(values, window)
    if method is AggregationMethod.NAME_COUNT:
        return name_count(values)

    reducer = NUMERIC_REDUCERS.get(method)
    if reducer is None:
        raise ConfigurationError(f"Unknown aggregation method: {method!r}")
    numbers = numeric_scores(values)
    if not numbers:
        if method is AggregationMethod.SUM and enumerable:
            return 0
        return None
    return reducer(numbers)


def format_value(value: Optional[float], decimal_format: Optional[int]) -> Optional[float]:
    """Round a value to the requested number of decimal places."""
    if value is None or decimal_format is None:
        return value
    return round(float(value), decimal_format)
