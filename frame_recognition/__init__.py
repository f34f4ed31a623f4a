"""
Frame Recognition - temporal smoothing for real-time object detection.

Takes one frame of raw detections at a time (boxes, labels, scores) and
keeps a small table of tracked objects, so a consuming UI sees stable
results instead of frame-to-frame jitter.

Processing order per frame (NEVER REORDER):
1. Drop detections below the score threshold
2. Correct vertical coordinates for the device aspect ratio
3. Associate each detection with an existing track (greedy, first match)
4. Update matched tracks, create tracks for unmatched detections
5. Penalize unseen tracks and evict stale ones
6. Invalidate the confident-object memo
"""

from .core.contracts import (
    BoundingBox,
    TrackedObject,
    ConfidentObject,
    FrameDetections,
    FrameResult,
    FrameRecognitionError,
    ConfigurationError,
    FrameDataError,
)
from .config import RecognitionConfig, load_config
from .tracking import FrameRecognition, FrameUpdate, ConfidentObjectCache

__version__ = "0.1.0"
__author__ = "Frame Recognition Team"
