import pytest

from frame_recognition.tracking import FrameRecognition


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


def box(value: float, size: float = 0.25):
    """Detector-order box (left, top, right, bottom) with all edges offset by value."""
    return [value, value, value + size, value + size]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_engine(clock):
    def _make(**kwargs):
        kwargs.setdefault("height", 100)
        kwargs.setdefault("width", 100)
        return FrameRecognition(clock=clock, **kwargs)

    return _make
