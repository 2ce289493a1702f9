"""
Configuration management with typed Pydantic models.

Provides the ingestion limits and policies with YAML loading and
environment variable interpolation.
"""

from crimeingest.config.loader import load_config
from crimeingest.config.settings import IngestConfig

__all__ = [
    "IngestConfig",
    "load_config",
]
