"""
Hidden logo gesture that opens the demo entry path.

Tapping the logo five times, with no gap longer than three seconds,
fires once and starts counting again from zero. This is a debug
affordance; the web layer only honours it when demo access is enabled.
"""

import time
from typing import Callable, Optional


class LogoGesture:
    def __init__(
        self,
        threshold: int = 5,
        window_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be positive")
        self._threshold = threshold
        self._window = window_seconds
        self._clock = clock
        self._count = 0
        self._last_tap: Optional[float] = None

    @property
    def count(self) -> int:
        """Taps in the current run; zero once the idle window has passed."""
        if self._last_tap is not None and self._clock() - self._last_tap > self._window:
            return 0
        return self._count

    def tap(self) -> bool:
        """Register one activation. True when this tap completes the gesture."""
        now = self._clock()
        if self._last_tap is not None and now - self._last_tap > self._window:
            self._count = 0
        self._last_tap = now
        self._count += 1

        if self._count >= self._threshold:
            self._count = 0
            self._last_tap = None
            return True
        return False
