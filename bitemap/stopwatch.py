"""Accumulating wall-clock stopwatch."""

from __future__ import annotations

import time
from typing import Callable


class Stopwatch:
    """Measures total time across repeated start/stop intervals, in seconds."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._elapsed = 0.0
        self._started_at = 0.0
        self._running = False

    def start(self) -> None:
        self._running = True
        self._started_at = self._clock()

    def stop(self) -> None:
        self._running = False
        self._elapsed += self._clock() - self._started_at

    def reset(self) -> None:
        self._running = False
        self._elapsed = 0.0

    def elapsed(self) -> float:
        if not self._running:
            return self._elapsed
        return self._elapsed + (self._clock() - self._started_at)

    @property
    def running(self) -> bool:
        return self._running

    def __enter__(self) -> "Stopwatch":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()