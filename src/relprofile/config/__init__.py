"""
Configuration management for relative profile collection.
"""

# Lazy import to avoid dependency issues
def get_collection_config():
    """Get the CollectionConfig class."""
    from .settings import CollectionConfig
    return CollectionConfig

__all__ = ["get_collection_config"]
