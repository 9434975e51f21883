"""Detection cycle throughput tracking."""

import math
import time
from contextlib import contextmanager
from typing import Iterator


class FrameRateTracker:
    """Holds the frame rate of the most recently completed cycle."""

    def __init__(self):
        self._fps = 0

    @property
    def fps(self) -> int:
        """Latest frames-per-second value (0 before the first cycle)."""
        return self._fps

    def update(self, elapsed_ms: float) -> int:
        """Record a completed cycle that took ``elapsed_ms`` milliseconds.

        A zero or negative duration leaves the previous value in place.

        Returns:
            The current fps value.
        """
        if elapsed_ms > 0:
            # halves round up
            self._fps = int(math.floor(1000 / elapsed_ms + 0.5))
        return self._fps

    @contextmanager
    def measure(self) -> Iterator["FrameRateTracker"]:
        """Time the enclosed cycle; the value only changes if it completes."""
        start = time.perf_counter()
        yield self
        self.update((time.perf_counter() - start) * 1000.0)

    def reset(self) -> None:
        """Reset tracker state."""
        self._fps = 0
