"""
Crimeingest: ingestion and validation of tabular crime-incident files.

This package reconciles inconsistent column headers, coerces loosely typed
cells into strongly typed records, and accounts for every row that failed
conversion.
"""

from importlib.metadata import version

__version__ = version("crimeingest")

__all__ = ["__version__"]
