#!/usr/bin/env python3
"""
Tests for window score reducers.
"""

import math

import pytest

from relprofile.core.aggregation import (
    format_value,
    name_count,
    numeric_scores,
    precise_count,
    reduce_scores,
)
from relprofile.models.features import AggregationMethod, ScoredInterval


@pytest.mark.parametrize("method,expected", [
    (AggregationMethod.MEAN, 2.5),
    (AggregationMethod.MEDIAN, 2.5),
    (AggregationMethod.SUM, 10.0),
    (AggregationMethod.MIN, 1.0),
    (AggregationMethod.MAX, 4.0),
    (AggregationMethod.STDDEV, math.sqrt(1.25)),
    (AggregationMethod.COUNT, 4),
])
def test_reducers(method, expected):
    assert reduce_scores([1, 2, 3, 4], method) == pytest.approx(expected)


def test_stddev_is_population():
    assert reduce_scores([2, 4, 4, 4, 5, 5, 7, 9], AggregationMethod.STDDEV) == pytest.approx(2.0)


def test_empty_window():
    assert reduce_scores([], AggregationMethod.MEAN) is None
    assert reduce_scores([], AggregationMethod.SUM) is None
    assert reduce_scores([], AggregationMethod.SUM, enumerable=True) == 0
    assert reduce_scores([], AggregationMethod.MEAN, enumerable=True) is None
    assert reduce_scores([], AggregationMethod.COUNT) == 0


def test_placeholders_are_ignored():
    assert numeric_scores([".", 1, None, "3", float("nan"), True]) == [1.0, 3.0]
    assert reduce_scores([".", 1, None, 3], AggregationMethod.MEAN) == pytest.approx(2.0)
    assert reduce_scores([".", None], AggregationMethod.MAX) is None


def test_scored_intervals_reduce_by_score():
    entries = [ScoredInterval(1, 5, 2.0), ScoredInterval(6, 9, 6.0), ScoredInterval(7, 7, None)]
    assert reduce_scores(entries, AggregationMethod.MEAN) == pytest.approx(4.0)
    assert reduce_scores(entries, AggregationMethod.COUNT) == 3


def test_precise_count_requires_entry_inside_window():
    entries = [
        ScoredInterval(10, 15),
        ScoredInterval(15, 25),
        ScoredInterval(12, 20),
        ScoredInterval(5, 9),
    ]
    assert precise_count(entries, (10, 20)) == 2
    assert reduce_scores(entries, AggregationMethod.PRECISE_COUNT, window=(10, 20)) == 2
    assert precise_count([1.0, 2.0], (10, 20)) == 2


def test_name_count_counts_distinct_names():
    entries = [
        ScoredInterval(1, 5, name="read1"),
        ScoredInterval(20, 25, name="read1"),
        ScoredInterval(8, 12, name="read2"),
    ]
    assert name_count(entries) == 2
    assert name_count(["a", ["b", "c"], "a", "."]) == 3
    assert reduce_scores(entries, AggregationMethod.NAME_COUNT) == 2


def test_name_count_unnamed_entries_with_equal_scores():
    entries = [
        ScoredInterval(101, 101, 1.0),
        ScoredInterval(103, 103, 1.0),
        ScoredInterval(103, 103, 1.0),
    ]
    assert name_count(entries) == 2
    assert reduce_scores(entries, AggregationMethod.NAME_COUNT) == 2


def test_format_value():
    assert format_value(2.34567, 2) == pytest.approx(2.35)
    assert format_value(2.34567, None) == 2.34567
    assert format_value(None, 2) is None
