"""
Base class for detection sources.

A detection source is whatever sits between the vision model and the
engine: it hands over one frame of raw boxes, labels and scores at a
time.

To add a new source:
1. Create a new file in the capture/ directory
2. Inherit from BaseDetectionSource
3. Implement all abstract methods
4. Register in capture/__init__.py SOURCES dict
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from frame_recognition.core.contracts import FrameDetections


class BaseDetectionSource(ABC):
    """Abstract base class for per-frame detection sources."""

    @abstractmethod
    def start(self) -> bool:
        """Prepare the source.

        Returns:
            True if started successfully, False otherwise
        """

    @abstractmethod
    def stop(self) -> None:
        """Release any resources held by the source."""

    @abstractmethod
    def get_frame(self) -> Optional[FrameDetections]:
        """Next frame of detections, or None when the source is exhausted."""

    @property
    def is_running(self) -> bool:
        return False
