"""
Frame Recognition Engine.

Tracks detections "through time" as frame data is fed from the frame
processor, and exposes the single most confident stable object.

Guarantees:
- Track ids are never reused within a session
- Smoothed box and score are exact means of a bounded history
- A track is evicted in the same frame its missed count hits the limit
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Callable, Dict, List, Optional, Tuple
import numpy as np
from numpy.typing import NDArray
from loguru import logger

from frame_recognition.config import RecognitionConfig
from frame_recognition.core.contracts import (
    BoundingBox,
    ConfidentObject,
    FrameDataError,
    LabelInput,
    TrackedObject,
)
from .confidence_cache import ConfidentObjectCache


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def _as_integer(value) -> int:
    """int(value) without truncation; numeric strings like "3" are allowed."""
    if isinstance(value, str):
        return int(value)
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"{value!r} is not an integer")
    return int(number)


@dataclass
class FrameUpdate:
    """What a single add_frame_data call did to the track table."""
    new_track_ids: List[int] = field(default_factory=list)
    matched_track_ids: List[int] = field(default_factory=list)
    evicted_track_ids: List[int] = field(default_factory=list)
    dropped_detections: int = 0


class FrameRecognition:
    """
    Temporal smoothing engine for per-frame detector output.

    Association is greedy: each detection goes to the first same-label
    track whose smoothed box is within tracking_threshold on all four
    coordinates. No global assignment is attempted.

    Not thread-safe. Use one instance per capture pipeline.
    """

    MAX_HISTORY_SIZE = 50
    MAX_MISSED_COUNT = 30

    def __init__(
        self,
        height: float,
        width: float,
        recognition_count: int = 20,
        score_threshold: float = 0.25,
        check_count: float = 50,
        tracking_threshold: float = 0.03,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the engine.

        Args:
            height: Device/frame height
            width: Device/frame width
            recognition_count: Recognitions needed before a track can be confident
            score_threshold: Minimum raw score a detection needs to be considered
            check_count: Confident-object cache window in milliseconds
            tracking_threshold: Max per-coordinate delta for a match
            clock: Returns the current time in milliseconds

        Raises:
            ConfigurationError: If height/width or thresholds are invalid
        """
        self.config = RecognitionConfig(
            height=height,
            width=width,
            recognition_count=recognition_count,
            score_threshold=score_threshold,
            check_count=check_count,
            tracking_threshold=tracking_threshold,
        )
        self._clock = clock or _monotonic_ms

        # Active tracks (engine-local id -> TrackedObject)
        self._tracks: Dict[int, TrackedObject] = {}

        # Last issued id; incremented before use so the first id is 1
        self._recognized_objects_count: int = 0

        self._cache = ConfidentObjectCache()

    @classmethod
    def from_config(
        cls,
        config: RecognitionConfig,
        clock: Optional[Callable[[], float]] = None,
    ) -> FrameRecognition:
        return cls(
            height=config.height,
            width=config.width,
            recognition_count=config.recognition_count,
            score_threshold=config.score_threshold,
            check_count=config.check_count,
            tracking_threshold=config.tracking_threshold,
            clock=clock,
        )

    # ------------------------------------------------------------
    # Frame ingestion
    # ------------------------------------------------------------

    def add_frame_data(
        self,
        boxes,
        labels: LabelInput,
        scores,
    ) -> FrameUpdate:
        """
        Ingest one frame of detector output.

        Args:
            boxes: Flat sequence (or N x 4 array) of left, top, right, bottom
            labels: Detection index -> class id, as a mapping or a sequence
            scores: Raw score per detection

        Returns:
            FrameUpdate describing created, matched and evicted tracks

        Raises:
            FrameDataError: If the arrays are not index-aligned. No state
                is modified in that case.
        """
        box_arr, label_list, score_arr = self._validate_frame(boxes, labels, scores)

        update = FrameUpdate()
        missed_ids = set(self._tracks.keys())

        for i, label in enumerate(label_list):
            score = float(score_arr[i])
            if score < self.config.score_threshold:
                update.dropped_detections += 1
                continue

            box = BoundingBox.from_detection(*box_arr[i * 4:i * 4 + 4]).remap_vertical(
                self.config.width, self.config.height
            )

            track_id = self._find_track_id(box, label)
            if track_id is None:
                update.new_track_ids.append(self._add_track(box, label, score))
            else:
                self._tracks[track_id].observe(box, score)
                missed_ids.discard(track_id)
                update.matched_track_ids.append(track_id)

        # Penalize in table order so eviction order is deterministic
        for track_id in [tid for tid in self._tracks if tid in missed_ids]:
            if self._tracks[track_id].miss() >= self.MAX_MISSED_COUNT:
                del self._tracks[track_id]
                update.evicted_track_ids.append(track_id)
                logger.debug(f"Track evicted: {track_id} (missed {self.MAX_MISSED_COUNT} frames)")

        self._cache.invalidate()
        return update

    def _validate_frame(
        self,
        boxes,
        labels: LabelInput,
        scores,
    ) -> Tuple[NDArray[np.float64], List[int], NDArray[np.float64]]:
        """Check the 4N / N / N shape contract and coerce to plain arrays."""
        try:
            score_arr = np.asarray(scores, dtype=np.float64).reshape(-1)
            box_arr = np.asarray(boxes, dtype=np.float64).reshape(-1)
        except (TypeError, ValueError) as e:
            raise FrameDataError(f"Boxes and scores must be numeric: {e}") from e

        count = score_arr.shape[0]
        if box_arr.shape[0] != 4 * count:
            raise FrameDataError(
                f"Expected {4 * count} box values for {count} scores, got {box_arr.shape[0]}"
            )
        if not (np.all(np.isfinite(score_arr)) and np.all(np.isfinite(box_arr))):
            raise FrameDataError("Boxes and scores must be finite")

        return box_arr, self._normalize_labels(labels, count), score_arr

    @staticmethod
    def _normalize_labels(labels: LabelInput, count: int) -> List[int]:
        try:
            if isinstance(labels, Mapping):
                given = len(labels)
                by_index = {_as_integer(k): _as_integer(v) for k, v in labels.items()}
            else:
                values = np.asarray(labels).reshape(-1)
                given = values.shape[0]
                by_index = {i: _as_integer(v) for i, v in enumerate(values)}
        except (TypeError, ValueError) as e:
            raise FrameDataError(f"Labels must be integer class ids keyed by index: {e}") from e

        # Duplicate keys such as 0 and "0" collapse, so compare sizes too
        if len(by_index) != given or set(by_index) != set(range(count)):
            raise FrameDataError(
                f"Expected labels for detection indices 0..{count - 1}, got {given} labels"
            )
        return [by_index[i] for i in range(count)]

    def _find_track_id(self, box: BoundingBox, label: int) -> Optional[int]:
        """First same-label track whose smoothed box is close to box."""
        threshold = self.config.tracking_threshold
        for track_id, tracked in self._tracks.items():
            if tracked.label != label:
                continue
            if box.is_close(tracked.bounding_box, threshold):
                return track_id
        return None

    def _add_track(self, box: BoundingBox, label: int, score: float) -> int:
        self._recognized_objects_count += 1
        track_id = self._recognized_objects_count
        self._tracks[track_id] = TrackedObject(
            label=label,
            bounding_box=box,
            score=score,
            max_history=self.MAX_HISTORY_SIZE,
        )
        logger.debug(f"New track created: {track_id} (label={label}, score={score:.3f})")
        return track_id

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def get_confident_object(self) -> Optional[ConfidentObject]:
        """
        The object we are most confident about.

        Among tracks with at least recognition_count recognitions, picks
        the highest smoothed score, then the higher recognition count.
        Results are memoized for check_count milliseconds or until the
        next frame is ingested.
        """
        now = self._clock()
        if self._cache.is_valid(now, self.config.check_count):
            return self._cache.get()

        top_id: Optional[int] = None
        top: Optional[TrackedObject] = None

        for track_id, tracked in self._tracks.items():
            if tracked.recognition_count < self.config.recognition_count:
                continue

            if (
                top is None
                or tracked.score > top.score
                or (
                    tracked.score == top.score
                    and tracked.recognition_count > top.recognition_count
                )
            ):
                top_id, top = track_id, tracked

        result = top.snapshot(top_id) if top is not None else None
        self._cache.store(result, now)
        return result

    def get_object_by_id(self, track_id: int) -> Optional[ConfidentObject]:
        """Current state of a track, or None if it does not exist."""
        tracked = self._tracks.get(track_id)
        if tracked is not None:
            return tracked.snapshot(track_id)
        return None

    def get_all_active_objects(self) -> List[ConfidentObject]:
        """Snapshots of every live track, in creation order."""
        return [tracked.snapshot(track_id) for track_id, tracked in self._tracks.items()]

    def get_objects_by_label(self, label: int) -> List[ConfidentObject]:
        return [
            tracked.snapshot(track_id)
            for track_id, tracked in self._tracks.items()
            if tracked.label == label
        ]

    def reset(self):
        """
        Drop every track and the memo.

        The id counter is not rewound, so ids issued after a reset never
        collide with ids a consumer may still hold from before it.
        """
        self._tracks.clear()
        self._cache.invalidate()
        logger.info("Frame recognition reset")

    @property
    def active_track_count(self) -> int:
        """Number of currently active tracks."""
        return len(self._tracks)
