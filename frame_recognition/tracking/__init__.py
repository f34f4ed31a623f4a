"""
Object Tracking Module.

Responsibilities:
- Engine-local track id assignment
- Greedy per-coordinate association of detections to tracks
- Running-average smoothing of boxes and scores
- Missed-frame decay and eviction
- Memoized confident-object selection
"""

from .frame_recognition import FrameRecognition, FrameUpdate
from .confidence_cache import ConfidentObjectCache
