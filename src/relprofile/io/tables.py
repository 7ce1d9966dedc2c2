"""
Table readers and writers used by the command line.

The collection core never touches files; these helpers turn BED, narrowPeak,
bedGraph and tab-delimited tables into features and score tables, and write
result tables back out.
"""

import gzip
from pathlib import Path
from typing import List, Optional

import pandas as pd

from ..models.features import Feature, Strand

BED_COLUMNS = ["chromosome", "start", "end", "name", "score", "strand"]
NARROWPEAK_COLUMNS = BED_COLUMNS + ["signal", "p_value", "q_value", "peak"]
BEDGRAPH_COLUMNS = ["chromosome", "start", "end", "score"]

_COLUMN_ALIASES = {
    "chromosome": ("chromosome", "chromo", "chrom", "chr", "seq_id", "seqid"),
    "start": ("start", "chromstart"),
    "end": ("end", "stop", "chromend"),
    "name": ("name", "id", "primary_id", "display_name", "gene"),
    "strand": ("strand",),
    "feature_type": ("type", "feature_type", "primary_tag"),
    "peak": ("peak", "summit"),
}


def _suffix(path: Path) -> str:
    """Lower-case extension, ignoring a trailing .gz."""
    suffixes = [s.lower() for s in path.suffixes]
    if suffixes and suffixes[-1] == ".gz":
        suffixes = suffixes[:-1]
    return suffixes[-1] if suffixes else ""


def _leading_lines(path: Path) -> int:
    """Number of track, browser and comment lines before the data."""
    opener = gzip.open if path.suffix == ".gz" else open
    skip = 0
    with opener(path, "rt") as handle:
        for line in handle:
            if not line.startswith(("track", "browser", "#")):
                break
            skip += 1
    return skip


def _read_headerless(path: Path, columns: List[str]) -> pd.DataFrame:
    frame = pd.read_csv(
        path, sep="\t", header=None, comment="#", dtype={0: str},
        skiprows=_leading_lines(path),
    )
    frame = frame.iloc[:, :len(columns)]
    frame.columns = columns[:frame.shape[1]]
    return frame


def _standardize_columns(frame: pd.DataFrame) -> pd.DataFrame:
    lookup = {c.lower(): c for c in frame.columns}
    renamed = {}
    for target, aliases in _COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lookup:
                renamed[lookup[alias]] = target
                break
    frame = frame.rename(columns=renamed)
    if "chromosome" in frame.columns:
        frame["chromosome"] = frame["chromosome"].astype(str)
    return frame


def read_feature_table(path: Path) -> pd.DataFrame:
    """
    Load a feature list as a table with 1-based coordinates.

    BED and narrowPeak files are converted from 0-based starts; any other
    file is read as a tab-delimited table with a header row and 1-based
    coordinates.
    """
    path = Path(path)
    suffix = _suffix(path)
    if suffix == ".narrowpeak":
        frame = _read_headerless(path, NARROWPEAK_COLUMNS)
        frame["start"] = frame["start"].astype(int) + 1
    elif suffix == ".bed":
        frame = _read_headerless(path, BED_COLUMNS)
        frame["start"] = frame["start"].astype(int) + 1
    else:
        frame = _standardize_columns(pd.read_csv(path, sep="\t", comment="#"))
    missing = {"chromosome", "start", "end"} - set(frame.columns)
    if missing:
        raise ValueError(f"Feature table {path} is missing columns: {', '.join(sorted(missing))}")
    return frame.reset_index(drop=True)


def features_from_table(frame: pd.DataFrame, feature_type: Optional[str] = None) -> List[Feature]:
    """Build features from a standardized table, one per row."""
    features = []
    for row in frame.to_dict("records"):
        name = row.get("name")
        if name is None or pd.isna(name) or str(name) == ".":
            name = f"{row['chromosome']}:{int(row['start'])}-{int(row['end'])}"
        strand = row.get("strand")
        strand = None if strand is None or pd.isna(strand) else Strand.parse(strand)
        peak = row.get("peak")
        row_type = row.get("feature_type")
        features.append(Feature(
            name=str(name),
            chromosome=str(row["chromosome"]),
            start=int(row["start"]),
            end=int(row["end"]),
            strand=Strand.NONE if strand is None else strand,
            forced_strand=strand,
            feature_type=feature_type if row_type is None or pd.isna(row_type) else str(row_type),
            peak=None if peak is None or pd.isna(peak) or int(peak) < 0 else int(peak),
        ))
    return features


def read_features(path: Path, feature_type: Optional[str] = None) -> List[Feature]:
    """Load features from a BED, narrowPeak or tab-delimited file."""
    return features_from_table(read_feature_table(path), feature_type)


def read_scores(path: Path) -> pd.DataFrame:
    """
    Load a score table with 1-based inclusive coordinates.

    bedGraph and wig-like four column files give a continuous signal; BED
    files give named, stranded entries such as alignments or sites.
    """
    path = Path(path)
    suffix = _suffix(path)
    if suffix in (".bedgraph", ".bg"):
        frame = _read_headerless(path, BEDGRAPH_COLUMNS)
    elif suffix == ".bed":
        frame = _read_headerless(path, BED_COLUMNS)
    else:
        frame = _standardize_columns(pd.read_csv(path, sep="\t", comment="#"))
        if "score" not in frame.columns and "value" in frame.columns:
            frame = frame.rename(columns={"value": "score"})
        return frame.reset_index(drop=True)
    frame["start"] = frame["start"].astype(int) + 1
    frame["end"] = frame["end"].astype(int)
    return frame.reset_index(drop=True)


def is_enumerable_table(path: Path) -> bool:
    """BED entries are counted; bedGraph signal is continuous."""
    return _suffix(Path(path)) == ".bed"


def feature_frame(features: List[Feature]) -> pd.DataFrame:
    """Identifying columns written in front of the collected values."""
    return pd.DataFrame({
        "Name": [f.name for f in features],
        "Chromosome": [f.chromosome for f in features],
        "Start": [f.start for f in features],
        "End": [f.end for f in features],
        "Strand": [int(f.strand) for f in features],
    })


def write_table(frame: pd.DataFrame, path: Path, gz: bool = False) -> Path:
    """Write a tab-delimited table, optionally gzip compressed."""
    path = Path(path)
    if gz and path.suffix != ".gz":
        path = path.with_name(path.name + ".gz")
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, sep="\t", index=False, na_rep=".", compression="gzip" if gz else None)
    return path
