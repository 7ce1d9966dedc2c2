"""
Core modules for relative profile collection.
"""

from .collector import RelativeDataCollector

# Import submodules
from . import windows
from . import reference
from . import aggregation
from . import sources
from . import collection
from . import parallel
from . import interpolation

__all__ = [
    "RelativeDataCollector",
    "windows",
    "reference",
    "aggregation",
    "sources",
    "collection",
    "parallel",
    "interpolation",
]
