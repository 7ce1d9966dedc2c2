"""
Utility modules for relative profile collection.
"""

from .logging import (
    setup_logging,
    OperationLogger,
    log_error,
)
from .naming import simplify_dataset_name

__all__ = [
    "setup_logging",
    "OperationLogger",
    "log_error",
    "simplify_dataset_name",
]
