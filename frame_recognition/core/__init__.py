"""
Core data contracts for frame recognition.

Every stage exchanges these types:
- BoundingBox for raw and smoothed boxes
- TrackedObject for the engine's per-identity state
- ConfidentObject for read-only snapshots handed to the UI
"""

from .contracts import (
    BoundingBox,
    TrackedObject,
    ConfidentObject,
    FrameDetections,
    FrameResult,
    FrameRecognitionError,
    ConfigurationError,
    FrameDataError,
)
