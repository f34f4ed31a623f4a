"""
Confident-object memo.

Holds the last computed result with the time it was computed. It is a
performance shortcut only; the track table stays the source of truth.
"""

from __future__ import annotations

from typing import Optional

from frame_recognition.core.contracts import ConfidentObject


class ConfidentObjectCache:
    """Optional snapshot plus a validity predicate."""

    def __init__(self):
        self._result: Optional[ConfidentObject] = None
        self._computed_at_ms: Optional[float] = None

    def store(self, result: Optional[ConfidentObject], now_ms: float):
        """Remember a freshly computed result (None is a valid result)."""
        self._result = result
        self._computed_at_ms = now_ms

    def invalidate(self):
        """Drop the memo. Called whenever the track table changes."""
        self._result = None
        self._computed_at_ms = None

    def is_valid(self, now_ms: float, window_ms: float) -> bool:
        """True if a result was stored less than window_ms ago, and not in the future."""
        if self._computed_at_ms is None:
            return False
        return 0 <= now_ms - self._computed_at_ms < window_ms

    def get(self) -> Optional[ConfidentObject]:
        return self._result

    @property
    def has_result(self) -> bool:
        return self._computed_at_ms is not None
