"""
Pipeline Orchestrator.

Feeds frames from a detection source into the engine in strict order:

1. Acquire one frame of raw detections
2. Ingest it into the tracking engine
3. Query the confident object
4. Report latency and track changes
"""

from __future__ import annotations

import time
from typing import Optional, List, Iterator
from loguru import logger

from frame_recognition.core.contracts import FrameResult
from frame_recognition.capture.base import BaseDetectionSource
from frame_recognition.tracking.frame_recognition import FrameRecognition


class RecognitionPipeline:
    """
    Drives a FrameRecognition engine from a detection source.

    Single-threaded: call process_frame() from one loop only.
    """

    def __init__(
        self,
        source: BaseDetectionSource,
        engine: FrameRecognition,
        max_latency_ms: float = 5.0,
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            source: Where raw detections come from
            engine: Tracking engine to feed
            max_latency_ms: Per-frame budget; overruns are logged
        """
        self.source = source
        self.engine = engine
        self.max_latency_ms = max_latency_ms

        self._frame_latencies: List[float] = []
        self._frames_processed: int = 0

    def start(self) -> bool:
        if not self.source.start():
            logger.error("Failed to start detection source")
            return False
        logger.info("Pipeline started")
        return True

    def stop(self):
        self.source.stop()
        logger.info(f"Pipeline stopped after {self._frames_processed} frames")

    def process_frame(self) -> Optional[FrameResult]:
        """
        Push the next frame through the engine.

        Returns:
            FrameResult, or None when the source has no more frames

        Raises:
            FrameDataError: If the frame's arrays are not index-aligned
        """
        pipeline_start = time.perf_counter()

        # ============================================================
        # STEP 1: Acquire detections
        # ============================================================
        frame = self.source.get_frame()
        if frame is None:
            return None

        # ============================================================
        # STEP 2: Ingest into the tracking engine
        # ============================================================
        update = self.engine.add_frame_data(frame.boxes, frame.labels, frame.scores)

        # ============================================================
        # STEP 3: Query the confident object
        # ============================================================
        confident = self.engine.get_confident_object()

        # ============================================================
        # STEP 4: Report
        # ============================================================
        total_latency = (time.perf_counter() - pipeline_start) * 1000

        self._frame_latencies.append(total_latency)
        if len(self._frame_latencies) > 100:
            self._frame_latencies.pop(0)

        if total_latency > self.max_latency_ms:
            logger.warning(
                f"Latency budget exceeded: {total_latency:.2f}ms > {self.max_latency_ms}ms"
            )

        self._frames_processed += 1

        return FrameResult(
            frame_id=frame.frame_id,
            timestamp_ms=frame.timestamp_ms,
            confident_object=confident,
            active_track_count=self.engine.active_track_count,
            new_track_ids=update.new_track_ids,
            evicted_track_ids=update.evicted_track_ids,
            latency_ms=total_latency,
        )

    def run(self) -> Iterator[FrameResult]:
        """Process frames until the source is exhausted."""
        while True:
            result = self.process_frame()
            if result is None:
                return
            yield result

    def reset(self):
        self.engine.reset()
        self._frame_latencies.clear()
        self._frames_processed = 0

    @property
    def frames_processed(self) -> int:
        return self._frames_processed

    @property
    def average_latency_ms(self) -> float:
        """Mean latency over the last 100 frames."""
        if not self._frame_latencies:
            return 0.0
        return sum(self._frame_latencies) / len(self._frame_latencies)
