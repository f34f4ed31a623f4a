"""
Detection Log for Recording and Playback.

Stores raw detector output as JSON Lines, one frame per line:

    {"boxes": [l, t, r, b, ...], "labels": {"0": 3}, "scores": [0.8], "timestamp_ms": 33.3}

Supports:
- Replaying a recording into the engine
- Recording live detector output for later replay
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, List, Union, Dict, Any
import numpy as np
from loguru import logger

from frame_recognition.core.contracts import FrameDetections, FrameDataError
from .base import BaseDetectionSource


class DetectionLog(BaseDetectionSource):
    """
    Replays (and records) per-frame detections.

    Frames come either from a JSON Lines file, loaded on start(), or from
    frames passed in directly.
    """

    REQUIRED_KEYS = ("boxes", "labels", "scores")

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        frames: Optional[List[FrameDetections]] = None,
    ):
        """
        Initialize detection log.

        Args:
            path: JSON Lines recording to replay
            frames: In-memory frames to replay (used when path is None)
        """
        self.path = Path(path) if path is not None else None
        self._frames: List[FrameDetections] = list(frames or [])

        # Playback state
        self._playback_index: int = 0
        self._is_playing = False

    def start(self) -> bool:
        """
        Load the recording (if any) and rewind playback.

        Raises:
            FrameDataError: If a line of the recording is malformed
            OSError: If the recording cannot be read
        """
        if self.path is not None:
            self._frames = self.load(self.path)
        self._playback_index = 0
        self._is_playing = True
        logger.info(f"Detection playback started: {len(self._frames)} frames")
        return True

    def stop(self) -> None:
        self._is_playing = False
        logger.info("Detection playback stopped")

    def get_frame(self) -> Optional[FrameDetections]:
        """Get next frame during playback."""
        if not self._is_playing or self._playback_index >= len(self._frames):
            self._is_playing = False
            return None

        frame = self._frames[self._playback_index]
        self._playback_index += 1
        return frame

    def record(self, frame: FrameDetections):
        """Append a frame to the in-memory recording."""
        self._frames.append(frame)

    def save(self, path: Union[str, Path]) -> Path:
        """Write the in-memory recording as JSON Lines."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            for frame in self._frames:
                f.write(json.dumps(self._frame_to_dict(frame)) + "\n")
        logger.info(f"Saved {len(self._frames)} frames to {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> List[FrameDetections]:
        """Parse a JSON Lines recording. Blank lines are skipped."""
        frames: List[FrameDetections] = []
        with open(path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError as e:
                    raise FrameDataError(f"{path}:{line_no}: invalid JSON: {e}") from e
                frames.append(cls._frame_from_dict(record, len(frames), f"{path}:{line_no}"))
        return frames

    @classmethod
    def _frame_from_dict(cls, record: Any, frame_id: int, where: str) -> FrameDetections:
        if not isinstance(record, dict):
            raise FrameDataError(f"{where}: frame must be a JSON object")
        missing = [key for key in cls.REQUIRED_KEYS if key not in record]
        if missing:
            raise FrameDataError(f"{where}: missing {', '.join(missing)}")

        try:
            frame_id = int(record.get("frame_id", frame_id))
            timestamp_ms = float(record.get("timestamp_ms", 0.0))
        except (TypeError, ValueError) as e:
            raise FrameDataError(f"{where}: bad frame_id/timestamp_ms: {e}") from e

        return FrameDetections(
            boxes=record["boxes"],
            labels=record["labels"],
            scores=record["scores"],
            frame_id=frame_id,
            timestamp_ms=timestamp_ms,
        )

    @staticmethod
    def _frame_to_dict(frame: FrameDetections) -> Dict[str, Any]:
        labels = frame.labels
        if hasattr(labels, "items"):
            labels = {str(k): int(v) for k, v in labels.items()}
        else:
            labels = [int(v) for v in labels]

        return {
            "frame_id": frame.frame_id,
            "timestamp_ms": frame.timestamp_ms,
            "boxes": np.asarray(frame.boxes, dtype=np.float64).reshape(-1).tolist(),
            "labels": labels,
            "scores": np.asarray(frame.scores, dtype=np.float64).reshape(-1).tolist(),
        }

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def is_running(self) -> bool:
        return self._is_playing
