"""
Command-line interface for relative profile collection.
"""

from .main import cli, main

__all__ = ["cli", "main"]
