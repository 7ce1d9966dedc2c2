"""
Configuration settings for relative profile collection.
"""

from pathlib import Path
from typing import List, Literal, Optional, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from ..models.features import AggregationMethod, PositionMode, StrandSense

DEFAULT_WINDOW_SIZE = 50
DEFAULT_WINDOW_NUMBER = 20
# above this many bp of total window span, windows are queried one at a time
DATASET_HASH_LIMIT = 4999
MIN_ROWS_PER_WORKER = 100


class CollectionConfig(BaseSettings):
    """Configuration for one relative data collection request."""

    # Window plan
    window_size: int = Field(default=DEFAULT_WINDOW_SIZE, description="Window size in bp")
    window_number: Optional[int] = Field(
        default=None,
        description="Number of windows on each side of the reference point"
    )
    up_number: Optional[int] = Field(default=None, description="Number of upstream windows")
    down_number: Optional[int] = Field(default=None, description="Number of downstream windows")
    position: PositionMode = Field(
        default=PositionMode.FIVE_PRIME,
        description="Reference point: 5' end, 3' end, midpoint or peak summit"
    )
    summit_fallback: bool = Field(
        default=False,
        description="Use the midpoint when peak summits are requested but unavailable"
    )

    # Scoring
    method: AggregationMethod = Field(default=AggregationMethod.MEAN, description="Reducer")
    enumerable: bool = Field(
        default=False,
        description="Dataset holds countable entries, empty sum windows report 0"
    )
    decimal_format: Optional[int] = Field(default=None, description="Decimal places to keep")

    # Strand and neighbors
    strand_sense: StrandSense = Field(default=StrandSense.ALL, description="Stranded collection")
    force_strand: bool = Field(default=False, description="Use the caller supplied feature strand")
    avoid: bool = Field(default=False, description="Null windows overlapping neighboring features")
    avoid_types: List[str] = Field(
        default_factory=list,
        description="Feature types to avoid; empty means the query feature's own type"
    )

    # Collection strategy
    long_data: bool = Field(default=False, description="Force one source query per window")
    hash_limit: int = Field(
        default=DATASET_HASH_LIMIT,
        description="Total window span above which windows are queried individually"
    )

    # Post-processing
    interpolate: bool = Field(default=False, description="Interpolate null windows")

    # Performance
    workers: int = Field(default=1, description="Number of parallel workers")
    min_rows_per_worker: int = Field(
        default=MIN_ROWS_PER_WORKER,
        description="Fewest features worth giving to one worker"
    )
    parallel_backend: Literal["process", "thread"] = Field(
        default="process",
        description="Worker kind used when more than one worker runs"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Log file path")

    model_config = {
        "env_prefix": "RELPROFILE_",
        "case_sensitive": False,
        "env_file": ".env",
        "frozen": True,
    }

    @field_validator("window_size")
    @classmethod
    def validate_window_size(cls, v):
        """Validate window size is positive."""
        if v <= 0:
            raise ValueError("Window size must be positive")
        return v

    @field_validator("window_number", "up_number", "down_number")
    @classmethod
    def validate_window_counts(cls, v):
        """Validate window counts are not negative."""
        if v is not None and v < 0:
            raise ValueError("Window counts must not be negative")
        return v

    @field_validator("workers", "min_rows_per_worker", "hash_limit")
    @classmethod
    def validate_positive(cls, v):
        """Validate worker settings and limits are positive."""
        if v <= 0:
            raise ValueError("Workers, rows per worker and hash limit must be positive")
        return v

    @field_validator("decimal_format")
    @classmethod
    def validate_decimal_format(cls, v):
        """Validate decimal places are not negative."""
        if v is not None and v < 0:
            raise ValueError("Decimal format must not be negative")
        return v

    @field_validator("avoid_types", mode="before")
    @classmethod
    def split_avoid_types(cls, v):
        """Accept a comma delimited list of feature types."""
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate the logging level name."""
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()

    @model_validator(mode="after")
    def validate_window_plan(self):
        """Validate that at least one window will be produced."""
        up, down = self.window_counts
        if up + down == 0:
            raise ValueError("At least one upstream or downstream window is required")
        return self

    @property
    def window_counts(self) -> Tuple[int, int]:
        """Resolve (upstream, downstream) window counts."""
        if self.up_number is not None or self.down_number is not None:
            return self.up_number or 0, self.down_number or 0
        if self.window_number is not None:
            return self.window_number, self.window_number
        return DEFAULT_WINDOW_NUMBER, DEFAULT_WINDOW_NUMBER

    @property
    def starting_point(self) -> int:
        return 0 - self.window_size * self.window_counts[0]

    @property
    def ending_point(self) -> int:
        return self.window_size * self.window_counts[1]

    def is_enumerable(self) -> bool:
        """Count methods always produce countable values."""
        return self.enumerable or self.method.is_count

    def summary(self) -> dict:
        """Get a summary of the configuration for logging."""
        up, down = self.window_counts
        return {
            "window_size": self.window_size,
            "up_number": up,
            "down_number": down,
            "position": self.position.label,
            "method": self.method.value,
            "strand_sense": self.strand_sense.value,
            "avoid": self.avoid,
            "long_data": self.long_data,
            "workers": self.workers,
            "interpolate": self.interpolate,
        }
