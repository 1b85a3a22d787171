"""Cancellable repeating task that drives per-frame processing."""

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 1 / 60


class TaskHandle:
    """A repeating invocation of ``tick_fn`` that can be cancelled once."""

    def __init__(self, tick_fn: Callable[[], object], name: str = "tick"):
        self.tick_fn = tick_fn
        self.name = name
        self.cancelled = threading.Event()
        self.lock = threading.RLock()
        self.thread: Optional[threading.Thread] = None
        self.invocations = 0

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()

    def run_once(self) -> bool:
        """Invoke tick_fn unless cancelled. Returns False once cancelled."""
        with self.lock:
            if self.cancelled.is_set():
                return False
            self.tick_fn()
            self.invocations += 1
            return True

    def cancel(self, timeout: float = 2.0) -> None:
        """Prevent every later invocation and wait for one in flight to finish."""
        self.cancelled.set()
        # Waits out an in-flight tick; re-entrant when called from inside it.
        with self.lock:
            pass
        thread = self.thread
        if thread and thread is not threading.current_thread() and thread.is_alive():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning(f"Tick thread '{self.name}' did not stop cleanly")


class TickLoop:
    """Runs each started task on its own daemon thread at a fixed interval."""

    def __init__(self, interval: float = DEFAULT_TICK_INTERVAL, name: str = "TickLoop"):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.name = name

    def start(self, tick_fn: Callable[[], object]) -> TaskHandle:
        handle = TaskHandle(tick_fn, name=self.name)
        thread = threading.Thread(target=self._run, args=(handle,), daemon=True)
        thread.name = f"{self.name}Thread"
        handle.thread = thread
        thread.start()
        logger.debug(f"{self.name} started at {1 / self.interval:.0f} ticks/s")
        return handle

    def cancel(self, handle: TaskHandle) -> None:
        handle.cancel()

    def _run(self, handle: TaskHandle) -> None:
        """Internal method: tick loop in background thread."""
        while not handle.is_cancelled:
            started = time.monotonic()
            try:
                if not handle.run_once():
                    break
            except Exception:
                logger.exception(f"Unhandled error in {self.name}, stopping loop")
                handle.cancelled.set()
                break
            remaining = self.interval - (time.monotonic() - started)
            handle.cancelled.wait(max(0.0, remaining))
        logger.debug(f"{self.name} exited after {handle.invocations} ticks")
