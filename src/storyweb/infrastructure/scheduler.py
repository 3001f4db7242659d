"""FrameScheduler: cooperative, single-threaded frame callbacks.

The equivalent of a display-refresh callback queue: a callback requested
while a frame runs is deferred to the next frame, so a self-rescheduling
step runs exactly once per frame.  The host decides when frames happen by
calling :meth:`FrameScheduler.run_frame` (once per display refresh in the
viewer, explicitly in tests and headless runs).
"""

from __future__ import annotations

from collections.abc import Callable

type FrameCallback = Callable[[float], None]

DEFAULT_FRAME_MS = 1000.0 / 60.0


class FrameScheduler:
    """Queue of one-shot frame callbacks keyed by integer handles."""

    def __init__(self) -> None:
        self._pending: dict[int, FrameCallback] = {}
        self._due: dict[int, FrameCallback] = {}
        self._next_handle = 1
        self._now = 0.0

    @property
    def now(self) -> float:
        """Timestamp (ms) of the most recent frame."""
        return self._now

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request(self, callback: FrameCallback) -> int:
        """Schedule *callback* for the next frame and return its handle."""
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: int | None) -> None:
        """Drop a scheduled callback.  Unknown or spent handles are ignored."""
        if handle is None:
            return
        self._pending.pop(handle, None)
        self._due.pop(handle, None)

    def run_frame(self, now: float | None = None) -> int:
        """Run every callback that was pending when the frame started.

        Returns:
            Number of callbacks invoked.
        """
        if now is not None:
            self._now = now
        self._due, self._pending = self._pending, {}
        ran = 0
        while self._due:
            handle = next(iter(self._due))
            callback = self._due.pop(handle)
            callback(self._now)
            ran += 1
        return ran

    def run_until_idle(
        self,
        *,
        frame_ms: float = DEFAULT_FRAME_MS,
        max_frames: int = 10_000,
    ) -> int:
        """Advance time frame by frame until nothing is pending.

        Returns:
            Number of frames run (bounded by *max_frames*).
        """
        frames = 0
        while self._pending and frames < max_frames:
            self.run_frame(self._now + frame_ms)
            frames += 1
        return frames
