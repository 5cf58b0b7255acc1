"""
Mesh Overlay — Frame Scheduling
The mesh never owns an event loop. It registers one callback per frame with a
scheduler supplied by the host and receives a monotonically increasing
timestamp (milliseconds) on each invocation.

Schedulers:
    - ManualFrameScheduler: host-free, driven by explicit ticks (tests, export)
    - TkFrameScheduler: driven by a Tk widget's ``after`` loop (preview window)
"""

import time
import logging
import itertools
from typing import Callable, Dict

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameScheduler:
    """Scheduling contract: request one callback for the next frame, or cancel it."""

    def request_frame(self, callback: FrameCallback):
        raise NotImplementedError

    def cancel_frame(self, handle) -> None:
        raise NotImplementedError


class ManualFrameScheduler(FrameScheduler):
    """
    Runs queued callbacks when ``tick`` is called.

    Callbacks requested while a tick is running are deferred to the next tick,
    like a browser's animation-frame queue.
    """

    def __init__(self):
        self._pending: Dict[int, FrameCallback] = {}
        self._ids = itertools.count(1)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle) -> None:
        self._pending.pop(handle, None)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def tick(self, timestamp_ms: float) -> int:
        """Run every callback queued before this tick. Returns how many ran."""
        queued = list(self._pending.items())
        self._pending.clear()
        for _handle, callback in queued:
            callback(timestamp_ms)
        return len(queued)


class TkFrameScheduler(FrameScheduler):
    """
    Schedules frames through a Tk widget's ``after``/``after_cancel``.

    Timestamps are milliseconds since the scheduler was created.
    """

    def __init__(self, widget, fps: int = 60, clock: Callable[[], float] = time.perf_counter):
        self._widget = widget
        self._interval_ms = max(1, int(1000 / fps))
        self._clock = clock
        self._origin = clock()

    def now_ms(self) -> float:
        return (self._clock() - self._origin) * 1000.0

    def request_frame(self, callback: FrameCallback):
        return self._widget.after(self._interval_ms, lambda: callback(self.now_ms()))

    def cancel_frame(self, handle) -> None:
        try:
            self._widget.after_cancel(handle)
        except Exception as e:
            # Widget already destroyed
            logger.debug("after_cancel failed: %s", e)


class FrameLoop:
    """
    Invokes ``callback`` once per frame until cancelled.

    Cancelling only stops the next frame from being scheduled; a frame that
    is already running always completes.
    """

    def __init__(self, scheduler: FrameScheduler, callback: FrameCallback):
        self._scheduler = scheduler
        self._callback = callback
        self._handle = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self):
        if self._running:
            return
        self._running = True
        self._handle = self._scheduler.request_frame(self._animate)

    def cancel(self):
        self._running = False
        if self._handle is not None:
            self._scheduler.cancel_frame(self._handle)
            self._handle = None

    def _animate(self, timestamp_ms: float):
        self._handle = None
        self._callback(timestamp_ms)
        if self._running:
            self._handle = self._scheduler.request_frame(self._animate)
