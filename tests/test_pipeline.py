import pytest

from frame_recognition.capture import DetectionLog
from frame_recognition.core.contracts import FrameDataError, FrameDetections
from frame_recognition.pipeline import RecognitionPipeline

from conftest import box


def _frame(frame_id, *detections):
    boxes, labels, scores = [], {}, []
    for i, (b, label, score) in enumerate(detections):
        boxes.extend(b)
        labels[i] = label
        scores.append(score)
    return FrameDetections(boxes=boxes, labels=labels, scores=scores, frame_id=frame_id)


def test_confident_object_appears_after_enough_frames(make_engine):
    frames = [_frame(i, (box(0.25), 1, 0.5)) for i in range(3)]
    pipeline = RecognitionPipeline(DetectionLog(frames=frames), make_engine(recognition_count=2))
    assert pipeline.start()

    results = list(pipeline.run())
    pipeline.stop()

    assert [r.frame_id for r in results] == [0, 1, 2]
    assert results[0].confident_object is None
    assert results[0].new_track_ids == [1]
    assert results[1].confident_object.track_id == 1
    assert results[2].confident_object.recognition_count == 3
    assert all(r.active_track_count == 1 for r in results)
    assert pipeline.frames_processed == 3
    assert pipeline.average_latency_ms >= 0.0


def test_evictions_are_reported(make_engine):
    frames = [_frame(0, (box(0.25), 1, 0.5))] + [_frame(i) for i in range(1, 31)]
    pipeline = RecognitionPipeline(DetectionLog(frames=frames), make_engine())
    pipeline.start()

    results = list(pipeline.run())
    assert results[-1].evicted_track_ids == [1]
    assert results[-1].active_track_count == 0
    assert all(r.evicted_track_ids == [] for r in results[:-1])


def test_bad_frame_raises(make_engine):
    frames = [FrameDetections(boxes=[0.1], labels={0: 1}, scores=[0.5])]
    pipeline = RecognitionPipeline(DetectionLog(frames=frames), make_engine())
    pipeline.start()

    with pytest.raises(FrameDataError):
        pipeline.process_frame()


def test_reset_clears_engine(make_engine):
    engine = make_engine(recognition_count=1)
    pipeline = RecognitionPipeline(DetectionLog(frames=[_frame(0, (box(0.25), 1, 0.5))]), engine)
    pipeline.start()
    assert pipeline.process_frame().confident_object is not None

    pipeline.reset()
    assert engine.active_track_count == 0
    assert pipeline.frames_processed == 0
    assert pipeline.process_frame() is None
