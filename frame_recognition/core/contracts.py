"""
Core data contracts for frame recognition.

All components must adhere to these contracts for:
- Deterministic behavior
- Bounded memory (history windows are hard-capped)
- Read-only results handed to the UI layer
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field, replace
from typing import Optional, List, Mapping, Sequence, Union, Iterable
import numpy as np
from numpy.typing import NDArray


# ============================================================
# ERRORS
# ============================================================

class FrameRecognitionError(Exception):
    """Base class for all frame recognition errors."""


class ConfigurationError(FrameRecognitionError, ValueError):
    """Invalid engine configuration (e.g. non-positive frame size)."""


class FrameDataError(FrameRecognitionError, ValueError):
    """Box, label and score arrays of a frame are not index-aligned."""


# ============================================================
# CORE DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class BoundingBox:
    """
    Bounding box in normalized device-relative coordinates.

    No ordering is assumed between top and bottom; all arithmetic is
    componentwise.
    """
    top: float
    left: float
    bottom: float
    right: float

    @classmethod
    def from_detection(cls, left: float, top: float, right: float, bottom: float) -> BoundingBox:
        """Build a box from the detector's left/top/right/bottom order."""
        return cls(top=float(top), left=float(left), bottom=float(bottom), right=float(right))

    @classmethod
    def from_array(cls, arr: NDArray[np.float64]) -> BoundingBox:
        """Convert [top, left, bottom, right] array to BoundingBox."""
        return cls(top=float(arr[0]), left=float(arr[1]), bottom=float(arr[2]), right=float(arr[3]))

    def as_array(self) -> NDArray[np.float64]:
        """Convert to [top, left, bottom, right] array."""
        return np.array([self.top, self.left, self.bottom, self.right], dtype=np.float64)

    def remap_vertical(self, width: float, height: float) -> BoundingBox:
        """
        Correct vertical coordinates for a non-square sensor.

        top' = 0.5 - (0.5 - top) * width / height, same for bottom.
        left/right are unaffected.
        """
        return replace(
            self,
            top=0.5 - (0.5 - self.top) * width / height,
            bottom=0.5 - (0.5 - self.bottom) * width / height,
        )

    def is_close(self, other: BoundingBox, threshold: float) -> bool:
        """True if every coordinate differs by at most threshold."""
        return (
            abs(self.top - other.top) <= threshold
            and abs(self.bottom - other.bottom) <= threshold
            and abs(self.left - other.left) <= threshold
            and abs(self.right - other.right) <= threshold
        )

    @staticmethod
    def mean(boxes: Iterable[BoundingBox]) -> BoundingBox:
        """Componentwise arithmetic mean of a non-empty set of boxes."""
        stacked = np.array([box.as_array() for box in boxes], dtype=np.float64)
        if stacked.size == 0:
            raise ValueError("Cannot average an empty set of boxes")
        return BoundingBox.from_array(stacked.mean(axis=0))


@dataclass
class TrackedObject:
    """
    Engine-side state for one tracked identity.

    bounding_box and score are always the arithmetic mean of their
    history windows, recomputed on every observation.
    """
    label: int
    bounding_box: BoundingBox
    score: float
    max_history: int = 50

    # Recent raw values, oldest first
    bounding_box_history: deque = field(default_factory=deque)
    score_history: deque = field(default_factory=deque)

    # Tracking state
    recognition_count: int = 1
    missed_count: int = 0

    def __post_init__(self):
        if self.max_history < 1:
            raise ValueError(f"max_history must be >= 1, got {self.max_history}")
        # Seed history with the creating detection
        if not self.bounding_box_history:
            self.bounding_box_history = deque([self.bounding_box], maxlen=self.max_history)
            self.score_history = deque([float(self.score)], maxlen=self.max_history)
        else:
            self.bounding_box_history = deque(self.bounding_box_history, maxlen=self.max_history)
            self.score_history = deque(self.score_history, maxlen=self.max_history)
            self._recompute()

    def observe(self, box: BoundingBox, score: float):
        """Record a matched detection."""
        # deque(maxlen) drops the oldest entry once the cap is reached
        self.bounding_box_history.append(box)
        self.score_history.append(float(score))
        self._recompute()

        self.recognition_count += 1
        self.missed_count = 0

    def miss(self) -> int:
        """Record a frame without a match. Returns the new missed count."""
        self.missed_count += 1
        return self.missed_count

    def _recompute(self):
        self.bounding_box = BoundingBox.mean(self.bounding_box_history)
        self.score = float(np.mean(self.score_history))

    @property
    def history_length(self) -> int:
        return len(self.score_history)

    def snapshot(self, track_id: int) -> ConfidentObject:
        """Read-only view of the current smoothed state."""
        return ConfidentObject(
            track_id=track_id,
            label=self.label,
            bounding_box=self.bounding_box,
            score=self.score,
            recognition_count=self.recognition_count,
            missed_count=self.missed_count,
        )


@dataclass(frozen=True)
class ConfidentObject:
    """
    Snapshot of a tracked object handed to the UI layer.

    Never aliases engine state; later frames do not change it.
    """
    track_id: int
    label: int
    bounding_box: BoundingBox
    score: float
    recognition_count: int
    missed_count: int


# ============================================================
# FRAME I/O
# ============================================================

LabelInput = Union[Mapping[Union[int, str], int], Sequence[int], NDArray]


@dataclass
class FrameDetections:
    """
    One frame of raw detector output.

    boxes holds four values per detection (left, top, right, bottom);
    labels maps detection index to class id; scores is index-aligned.
    """
    boxes: Union[Sequence[float], NDArray[np.float64]]
    labels: LabelInput
    scores: Union[Sequence[float], NDArray[np.float64]]

    frame_id: int = 0
    timestamp_ms: float = 0.0

    @property
    def detection_count(self) -> int:
        return len(self.scores)


@dataclass
class FrameResult:
    """Result of pushing one frame through the pipeline."""
    frame_id: int
    timestamp_ms: float
    confident_object: Optional[ConfidentObject]
    active_track_count: int

    new_track_ids: List[int] = field(default_factory=list)
    evicted_track_ids: List[int] = field(default_factory=list)

    # Performance
    latency_ms: float = 0.0
