"""
Detection source module.

Provides the sources that feed raw per-frame detections to the engine.

To add a new source:
1. Create a new file in this directory
2. Implement a class inheriting from BaseDetectionSource
3. Register it in SOURCES dict below
"""

from .base import BaseDetectionSource
from .detection_log import DetectionLog

# Registry of available sources
SOURCES = {
    "log": DetectionLog,
}


def get_source(name: str, **kwargs) -> BaseDetectionSource:
    """Get a source instance by name.

    Args:
        name: Source type name (e.g., "log")
        **kwargs: Passed to the source constructor

    Returns:
        Source instance (not yet started)

    Raises:
        ValueError: If source name is not registered
    """
    if name not in SOURCES:
        available = ", ".join(SOURCES.keys())
        raise ValueError(f"Unknown source '{name}'. Available: {available}")

    return SOURCES[name](**kwargs)


def list_sources() -> list:
    """List available source names."""
    return list(SOURCES.keys())


__all__ = ['BaseDetectionSource', 'DetectionLog', 'get_source', 'list_sources']
