"""Frame scheduling for the renderer's animation loop."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict

FrameCallback = Callable[[float], None]


class FrameScheduler(ABC):
    """Requests callbacks for the next display frame."""

    @abstractmethod
    def request(self, callback: FrameCallback) -> int:
        """Queue ``callback`` for the next frame and return a cancel handle."""

    @abstractmethod
    def cancel(self, handle: int) -> None:
        """Drop a queued callback; unknown handles are ignored."""


class ManualFrameScheduler(FrameScheduler):
    """Deterministic scheduler driven by explicit ``tick`` calls.

    Callbacks requested while a tick is running are deferred to the next tick,
    the same way a browser defers ``requestAnimationFrame`` calls made inside
    a frame callback.
    """

    def __init__(self) -> None:
        self._queue: Dict[int, FrameCallback] = {}
        self._next_handle = 1

    def request(self, callback: FrameCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._queue[handle] = callback
        return handle

    def cancel(self, handle: int) -> None:
        self._queue.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def tick(self, timestamp_ms: float) -> int:
        """Run every callback queued before this tick; returns how many ran."""
        ran = 0
        for handle in list(self._queue):
            callback = self._queue.pop(handle, None)
            if callback is None:
                # cancelled by an earlier callback in this tick
                continue
            callback(timestamp_ms)
            ran += 1
        return ran

    def run(self, frames: int, fps: float = 60.0, start_ms: float = 0.0) -> float:
        """Tick ``frames`` times at ``fps``; returns the last timestamp."""
        interval = 1000.0 / fps if fps > 0 else 0.0
        timestamp = start_ms
        for i in range(frames):
            timestamp = start_ms + i * interval
            self.tick(timestamp)
        return timestamp
