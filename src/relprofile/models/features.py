"""
Data models for features, windows and score queries.
"""

from enum import Enum, IntEnum
from typing import Any, NamedTuple, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from ..utils.naming import simplify_dataset_name


class Strand(IntEnum):
    """Feature or entry orientation."""

    REVERSE = -1
    NONE = 0
    FORWARD = 1

    @classmethod
    def parse(cls, value: Any) -> "Strand":
        """Interpret the usual strand spellings (+, -, ., 1, -1, 0, words)."""
        if isinstance(value, Strand):
            return value
        if value is None:
            return cls.NONE
        if isinstance(value, (int, float)):
            return cls(int((value > 0) - (value < 0)))
        text = str(value).strip().lower()
        if text in ("+", "1", "+1", "forward", "plus", "watson", "w", "f"):
            return cls.FORWARD
        if text in ("-", "-1", "reverse", "minus", "crick", "c", "r"):
            return cls.REVERSE
        if text in ("", ".", "0", "none", "unstranded"):
            return cls.NONE
        raise ValueError(f"Unrecognized strand value: {value!r}")

    @property
    def is_reverse(self) -> bool:
        return self is Strand.REVERSE


class PositionMode(str, Enum):
    """Reference point of a feature around which windows are laid out."""

    FIVE_PRIME = "5"
    THREE_PRIME = "3"
    MIDPOINT = "m"
    PEAK_SUMMIT = "p"

    @property
    def label(self) -> str:
        return {
            PositionMode.FIVE_PRIME: "5prime_end",
            PositionMode.THREE_PRIME: "3prime_end",
            PositionMode.MIDPOINT: "center",
            PositionMode.PEAK_SUMMIT: "peak_summit",
        }[self]

    @property
    def description(self) -> str:
        return {
            PositionMode.FIVE_PRIME: "5' end",
            PositionMode.THREE_PRIME: "3' end",
            PositionMode.MIDPOINT: "midpoint",
            PositionMode.PEAK_SUMMIT: "peak summit",
        }[self]


class StrandSense(str, Enum):
    """Which scored entries to keep relative to the feature strand."""

    ALL = "all"
    SENSE = "sense"
    ANTISENSE = "antisense"


class AggregationMethod(str, Enum):
    """Reducer applied to the raw scores falling in one window."""

    MEAN = "mean"
    MEDIAN = "median"
    SUM = "sum"
    MIN = "min"
    MAX = "max"
    STDDEV = "stddev"
    COUNT = "count"
    PRECISE_COUNT = "pcount"
    NAME_COUNT = "ncount"

    @property
    def is_count(self) -> bool:
        return self in (
            AggregationMethod.COUNT,
            AggregationMethod.PRECISE_COUNT,
            AggregationMethod.NAME_COUNT,
        )


class Feature(BaseModel):
    """A genomic interval with identity and strand, 1-based inclusive."""

    name: str = Field(description="Feature name or identifier")
    chromosome: str = Field(description="Sequence or chromosome identifier")
    start: int = Field(description="Start position (1-based)")
    end: int = Field(description="End position (1-based, inclusive)")
    strand: Strand = Field(default=Strand.NONE, description="Native strand")
    forced_strand: Optional[Strand] = Field(
        default=None,
        description="Caller supplied strand used instead of the native one when forced"
    )
    feature_type: Optional[str] = Field(default=None, description="Feature type, e.g. gene")
    peak: Optional[int] = Field(
        default=None,
        description="Summit offset from the start, for narrowPeak style inputs"
    )

    model_config = {"frozen": True}

    @field_validator("strand", "forced_strand", mode="before")
    @classmethod
    def parse_strand(cls, v):
        """Accept the usual strand spellings."""
        if v is None:
            return v
        return Strand.parse(v)

    @field_validator("start")
    @classmethod
    def validate_start(cls, v):
        """Validate that the start is a 1-based coordinate."""
        if v < 1:
            raise ValueError("Feature start must be a 1-based coordinate (>= 1)")
        return v

    @model_validator(mode="after")
    def validate_end_after_start(self):
        """Validate that the end is not before the start."""
        if self.end < self.start:
            raise ValueError("Feature end must not be before its start")
        return self

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def summit(self) -> Optional[int]:
        if self.peak is None:
            return None
        return self.start + self.peak


class WindowSpec(BaseModel):
    """One window of a dataset run, offsets relative to the reference point."""

    index: int = Field(description="Column index within the dataset run")
    start: int = Field(description="Relative start offset")
    stop: int = Field(description="Relative stop offset")
    window: int = Field(description="Window size in bp")
    dataset: str = Field(description="Dataset identifier")
    method: AggregationMethod = Field(default=AggregationMethod.MEAN)
    position: PositionMode = Field(default=PositionMode.FIVE_PRIME)
    strand_sense: StrandSense = Field(default=StrandSense.ALL)
    strand_implied: bool = Field(default=False, description="Forced strand in use")
    avoid: Tuple[str, ...] = Field(default=(), description="Feature types avoided")
    enumerable: bool = Field(
        default=False,
        description="Empty windows reduce to 0 instead of null for sum"
    )
    decimal_format: Optional[int] = Field(default=None, description="Decimal places")

    model_config = {"frozen": True}

    @property
    def name(self) -> str:
        return f"{simplify_dataset_name(self.dataset)}:{self.start}"

    @property
    def width(self) -> int:
        return self.stop - self.start + 1

    @property
    def midpoint(self) -> int:
        # truncates toward zero like the profile tables always have
        return int((self.start + self.stop) / 2)

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.stop


class ScoredRegionQuery(BaseModel):
    """A single request to a scored-region source."""

    chromosome: str
    start: int = Field(description="Absolute start (1-based)")
    stop: int = Field(description="Absolute stop (inclusive)")
    strand: Strand = Field(default=Strand.NONE, description="Feature strand")
    strand_sense: StrandSense = Field(default=StrandSense.ALL)
    avoid: bool = Field(default=False, description="Report neighboring features")
    avoid_types: Tuple[str, ...] = Field(
        default=(),
        description="Feature types to avoid, empty for any type"
    )
    exclude: Optional[str] = Field(
        default=None,
        description="Name of the query feature, never reported as its own neighbor"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_bounds(self):
        """Validate the query interval."""
        if self.stop < self.start:
            raise ValueError("Query stop must not be before its start")
        return self

    def overlaps(self, start: int, end: int) -> bool:
        return start <= self.stop and end >= self.start


class ScoredInterval(NamedTuple):
    """A raw scored entry reported by a source (1-based, inclusive)."""

    start: int
    end: int
    score: Any = None
    name: Optional[str] = None
    strand: int = 0
