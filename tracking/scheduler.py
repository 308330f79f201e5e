"""
Purpose: Cancellable periodic task that drives display animation frames.
What it does:
- runs callback(now_ms) on a daemon thread every 1/rate_hz seconds
- stop() sets the cancellation event and joins the thread

Rule: The callback only interpolates; it must not make routing decisions.
"""

import logging
import threading
import time
from threading import Event, Thread
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class FrameScheduler:
    """
    Usage:
        frames = FrameScheduler(tracker.on_animation_tick, rate_hz=60)
        frames.start()
        ...
        frames.stop()
    """

    def __init__(self, callback: Callable[[float], object], rate_hz: float = 60.0, clock: Callable[[], float] = monotonic_ms):
        if rate_hz <= 0:
            raise ValueError("rate_hz must be > 0")
        self.callback = callback
        self.interval_s = 1.0 / rate_hz
        self.clock = clock
        self.stop_event = Event()
        self._thread: Optional[Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self.stop_event.clear()
        self._thread = Thread(target=self._run, name="frame-scheduler", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self.stop_event.is_set():
            try:
                self.callback(self.clock())
            except Exception as e:
                logger.error(f"Frame callback failed: {e}")
            self.stop_event.wait(self.interval_s)

    def stop(self, timeout: float = 1.0) -> None:
        self.stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._thread = None
