"""Debounced callbacks

A Debouncer delays its callback until no new trigger has arrived for `delay`
seconds. Each trigger invalidates the previously scheduled call, so only the
most recent one can fire.
"""
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ScheduledCall(ABC):
    """Handle for a scheduled callback"""

    @abstractmethod
    def cancel(self) -> None:
        pass


class Scheduler(ABC):
    """Runs a callback after a delay"""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Schedule callback to run once after delay seconds"""
        pass


class _TimerCall(ScheduledCall):
    def __init__(self, timer: threading.Timer):
        self.timer = timer

    def cancel(self) -> None:
        self.timer.cancel()


class ThreadingScheduler(Scheduler):
    """Scheduler backed by daemon threading.Timer instances"""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return _TimerCall(timer)


class Debouncer:
    """Fire a callback once input has paused for a fixed delay"""

    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        scheduler: Optional[Scheduler] = None
    ):
        self.delay = delay
        self.callback = callback
        self.scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: Optional[ScheduledCall] = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def trigger(self) -> None:
        """(Re)arm the timer, invalidating any earlier pending call"""
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._pending is not None:
                self._pending.cancel()
            self._pending = self.scheduler.schedule(
                self.delay, lambda: self._fire(generation)
            )

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A timer that lost the race with cancel() must not fire
            if generation != self._generation or self._pending is None:
                logger.debug("Skipping superseded debounced call")
                return
            self._pending = None
        self.callback()

    def flush(self) -> bool:
        """Run a pending call now

        Returns:
            bool: True if a call was pending and has run
        """
        with self._lock:
            if self._pending is None:
                return False
            self._pending.cancel()
            self._pending = None
            self._generation += 1
        self.callback()
        return True

    def cancel(self) -> None:
        """Drop any pending call"""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._generation += 1
