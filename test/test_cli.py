#!/usr/bin/env python3
"""
Tests for the command-line interface.
"""

import pandas as pd
import pytest
from click.testing import CliRunner

from relprofile.cli.main import build_config, cli
from relprofile.exceptions import ConfigurationError
from relprofile.models.features import AggregationMethod, PositionMode, StrandSense


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def inputs(tmp_path):
    features = tmp_path / "genes.bed"
    features.write_text(
        "chr1\t400\t600\tgeneA\t0\t+\n"
        "chr1\t400\t600\tgeneB\t0\t-\n"
    )
    scores = tmp_path / "scores.bedgraph"
    scores.write_text("".join(f"chr1\t{p - 1}\t{p}\t{p}\n" for p in range(1, 1001)))
    return features, scores


def test_plan(runner):
    result = runner.invoke(cli, ["plan", "--window", "10", "--number", "2"])
    assert result.exit_code == 0, result.output
    assert "data:-20" in result.output
    assert "data:11" in result.output


def test_plan_rejects_bad_window(runner):
    result = runner.invoke(cli, ["plan", "--window", "0"])
    assert result.exit_code == 1
    assert "Error loading configuration" in result.output


def test_collect(runner, inputs, tmp_path):
    features, scores = inputs
    out = tmp_path / "profile.txt"
    result = runner.invoke(cli, [
        "collect", "--in", str(features), "--data", str(scores), "--out", str(out),
        "--window", "10", "--number", "2", "--groups", "--log-file", str(tmp_path / "run.log"),
    ])
    assert result.exit_code == 0, result.output

    table = pd.read_csv(out, sep="\t")
    assert list(table.columns) == [
        "Name", "Chromosome", "Start", "End", "Strand",
        "scores:-20", "scores:-10", "scores:1", "scores:11",
    ]
    assert list(table.loc[0, "scores:-20":"scores:11"]) == [385.5, 395.5, 406.5, 416.5]
    assert list(table.loc[1, "scores:-20":"scores:11"]) == [615.5, 605.5, 594.5, 584.5]

    summary = pd.read_csv(tmp_path / "profile_summary.txt", sep="\t")
    assert list(summary.columns) == ["Window", "Midpoint", "scores"]
    assert summary.loc[0, "scores"] == pytest.approx((385.5 + 615.5) / 2)

    groups = pd.read_csv(tmp_path / "profile.col_groups.txt", sep="\t")
    assert set(groups["Dataset"]) == {"scores"}


def test_collect_without_summary_compressed(runner, inputs, tmp_path):
    features, scores = inputs
    out = tmp_path / "profile.txt"
    result = runner.invoke(cli, [
        "collect", "--in", str(features), "--data", str(scores), "--out", str(out),
        "--nosum", "--gz", "--log-file", str(tmp_path / "run.log"),
    ])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "profile.txt.gz").exists()
    assert not (tmp_path / "profile_summary.txt").exists()


def test_collect_missing_summits(runner, inputs, tmp_path):
    features, scores = inputs
    result = runner.invoke(cli, [
        "collect", "--in", str(features), "--data", str(scores), "--position", "p",
        "--log-file", str(tmp_path / "run.log"),
    ])
    assert result.exit_code == 1
    assert "Collection failed" in result.output


def test_collect_bed_reads_sum_empty_windows_to_zero(runner, inputs, tmp_path):
    features, _ = inputs
    reads = tmp_path / "reads.bed"
    reads.write_text("chr1\t404\t405\tread1\t1\t+\n")
    out = tmp_path / "profile.txt"
    result = runner.invoke(cli, [
        "collect", "--in", str(features), "--data", str(reads), "--out", str(out),
        "--method", "sum", "--up", "0", "--down", "2", "--log-file", str(tmp_path / "run.log"),
    ])
    assert result.exit_code == 0, result.output

    table = pd.read_csv(out, sep="\t")
    assert list(table.loc[0, "reads:1":"reads:51"]) == [1.0, 0.0]


def test_collect_unusable_score_table(runner, inputs, tmp_path):
    features, _ = inputs
    scores = tmp_path / "scores.txt"
    scores.write_text("a\tb\n1\t2\n")
    result = runner.invoke(cli, [
        "collect", "--in", str(features), "--data", str(scores),
        "--log-file", str(tmp_path / "run.log"),
    ])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    output = " ".join(result.output.split())
    assert "Collection failed" in output
    assert "missing columns" in output


def test_build_config_from_options():
    config = build_config(
        window_size=10, window_number=None, position="4", method="sum",
        strand="sense", avtype="gene,mRNA", long_data=False, avoid=None,
    )
    assert config.window_size == 10
    assert config.position is PositionMode.MIDPOINT
    assert config.method is AggregationMethod.SUM
    assert config.strand_sense is StrandSense.SENSE
    assert config.avoid_types == ["gene", "mRNA"]
    assert not config.long_data


def test_build_config_from_file(tmp_path):
    ini = tmp_path / "relprofile.ini"
    ini.write_text("[Collection]\nwindow_size = 25\nmethod = median\nlong_data = true\n")

    config = build_config(ini, window_number=3)
    assert config.window_size == 25
    assert config.method is AggregationMethod.MEDIAN
    assert config.long_data
    assert config.window_counts == (3, 3)

    assert build_config(ini, window_size=5).window_size == 5


def test_build_config_rejects_invalid_values():
    with pytest.raises(ConfigurationError, match="Window size must be positive"):
        build_config(window_size=0)
    with pytest.raises(ConfigurationError):
        build_config(method="mode")
