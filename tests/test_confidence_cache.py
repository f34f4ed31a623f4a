from frame_recognition.core.contracts import BoundingBox, ConfidentObject
from frame_recognition.tracking import ConfidentObjectCache


def _snapshot():
    return ConfidentObject(
        track_id=1,
        label=2,
        bounding_box=BoundingBox(0.0, 0.0, 0.5, 0.5),
        score=0.5,
        recognition_count=20,
        missed_count=0,
    )


def test_empty_cache_is_invalid():
    cache = ConfidentObjectCache()
    assert not cache.has_result
    assert not cache.is_valid(0.0, 50)
    assert cache.get() is None


def test_valid_inside_window_only():
    cache = ConfidentObjectCache()
    snap = _snapshot()
    cache.store(snap, 100.0)

    assert cache.is_valid(149.0, 50)
    assert not cache.is_valid(150.0, 50)
    assert cache.get() is snap


def test_result_from_the_future_is_invalid():
    cache = ConfidentObjectCache()
    cache.store(_snapshot(), 100.0)
    assert not cache.is_valid(99.0, 50)
    assert not cache.is_valid(-900.0, 50)


def test_none_is_a_cacheable_result():
    cache = ConfidentObjectCache()
    cache.store(None, 100.0)
    assert cache.has_result
    assert cache.is_valid(120.0, 50)


def test_invalidate_drops_result():
    cache = ConfidentObjectCache()
    cache.store(_snapshot(), 100.0)
    cache.invalidate()

    assert not cache.is_valid(100.0, 50)
    assert cache.get() is None


def test_zero_window_never_valid():
    cache = ConfidentObjectCache()
    cache.store(_snapshot(), 100.0)
    assert not cache.is_valid(100.0, 0)
