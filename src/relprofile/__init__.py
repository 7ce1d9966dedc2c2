"""
Relative Profile

Windowed signal aggregation around a reference point of genomic features.
"""

__version__ = "1.0.0"
__author__ = "Bioinformatics Team"
__email__ = "team@example.com"

# Lazy imports to avoid dependency issues
def get_collector():
    """Get the RelativeDataCollector class."""
    from .core.collector import RelativeDataCollector
    return RelativeDataCollector

def get_collection_config():
    """Get the CollectionConfig class."""
    from .config.settings import CollectionConfig
    return CollectionConfig

def get_feature():
    """Get the Feature class."""
    from .models.features import Feature
    return Feature

__all__ = ["get_collector", "get_collection_config", "get_feature"]
