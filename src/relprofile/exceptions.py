"""
Error types raised by the relative data collection core.
"""

from typing import Iterable


class RelativeDataError(Exception):
    """Base class for all collection errors."""


class ConfigurationError(RelativeDataError, ValueError):
    """Invalid request detected before any feature is processed."""


class WorkerFailureError(RelativeDataError, RuntimeError):
    """One or more shards failed or did not hand back a result."""

    def __init__(self, message: str, shards: Iterable[int] = ()):
        self.shards = sorted(shards)
        if self.shards:
            message = f"{message} (shards: {', '.join(str(s) for s in self.shards)})"
        super().__init__(message)


class MatrixWriteError(RelativeDataError, ValueError):
    """A value matrix cell was written in a way its contract forbids."""
