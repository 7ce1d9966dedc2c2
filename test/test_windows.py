#!/usr/bin/env python3
"""
Tests for window plan construction.
"""

import pytest

from relprofile.config.settings import CollectionConfig
from relprofile.core.windows import (
    build_window_plan,
    plan_bounds,
    plan_from_config,
    skip_zero,
    window_span,
)
from relprofile.exceptions import ConfigurationError
from relprofile.models.features import AggregationMethod, PositionMode


def test_default_plan_layout():
    """Twenty 50 bp windows on each side of the reference point."""
    windows = build_window_plan(50, 20, 20, "/data/chip.rep1.bw")

    assert len(windows) == 40
    assert (windows[0].start, windows[0].stop) == (-1000, -951)
    assert (windows[19].start, windows[19].stop) == (-50, -1)
    assert (windows[20].start, windows[20].stop) == (1, 50)
    assert (windows[-1].start, windows[-1].stop) == (951, 1000)
    assert [w.index for w in windows] == list(range(40))


def test_no_window_covers_offset_zero():
    for up, down in [(20, 20), (3, 0), (0, 3), (1, 7)]:
        windows = build_window_plan(10, up, down, "data")
        assert not any(w.contains(0) for w in windows)


def test_windows_are_contiguous_across_zero():
    windows = build_window_plan(25, 4, 4, "data")
    for before, after in zip(windows, windows[1:]):
        if before.stop == -1:
            assert after.start == 1
        else:
            assert after.start == before.stop + 1


def test_upstream_only_plan():
    windows = build_window_plan(10, 2, 0, "data")
    assert [(w.start, w.stop) for w in windows] == [(-20, -11), (-10, -1)]


def test_downstream_only_plan():
    windows = build_window_plan(10, 0, 2, "data")
    assert [(w.start, w.stop) for w in windows] == [(1, 10), (11, 20)]


def test_window_names_use_simplified_dataset():
    windows = build_window_plan(50, 1, 1, "file:///data/chip.rep1.bw")
    assert [w.name for w in windows] == ["chip:-50", "chip:1"]


def test_window_metadata_is_carried():
    windows = build_window_plan(
        10, 1, 1, "data",
        method=AggregationMethod.SUM,
        position=PositionMode.MIDPOINT,
        avoid=["gene"],
        enumerable=True,
    )
    for window in windows:
        assert window.method is AggregationMethod.SUM
        assert window.position is PositionMode.MIDPOINT
        assert window.avoid == ("gene",)
        assert window.enumerable
        assert window.window == 10


def test_window_midpoint_truncates():
    windows = build_window_plan(50, 1, 1, "data")
    assert windows[0].midpoint == -25
    assert windows[1].midpoint == 25


@pytest.mark.parametrize("size,up,down", [(0, 1, 1), (-5, 1, 1), (10, -1, 1), (10, 0, 0)])
def test_invalid_plans_raise(size, up, down):
    with pytest.raises(ConfigurationError):
        build_window_plan(size, up, down, "data")


def test_skip_zero():
    assert skip_zero(0, 9) == (1, 10)
    assert skip_zero(-9, 0) == (-9, 1)
    assert skip_zero(-5, 4) == (-5, 5)
    assert skip_zero(1, 10) == (1, 10)
    assert skip_zero(-10, -1) == (-10, -1)


def test_plan_from_config():
    config = CollectionConfig(window_size=10, up_number=3)
    windows = plan_from_config(config, "data")

    assert len(windows) == 3
    assert plan_bounds(windows) == (-30, -1)
    assert window_span(windows) == 30


def test_plan_from_config_avoid_types_only_when_avoiding():
    config = CollectionConfig(window_number=1, avoid_types="gene,mRNA")
    assert plan_from_config(config, "data")[0].avoid == ()

    config = CollectionConfig(window_number=1, avoid=True, avoid_types="gene,mRNA")
    assert plan_from_config(config, "data")[0].avoid == ("gene", "mRNA")


def test_count_method_makes_plan_enumerable():
    config = CollectionConfig(window_number=1, method="count")
    assert all(w.enumerable for w in plan_from_config(config, "data"))


def test_enumerable_dataset_makes_plan_enumerable():
    config = CollectionConfig(window_number=1, method="sum")
    assert not any(w.enumerable for w in plan_from_config(config, "data"))
    assert all(w.enumerable for w in plan_from_config(config, "data", enumerable=True))


def test_window_span_of_empty_plan():
    assert window_span([]) == 0
