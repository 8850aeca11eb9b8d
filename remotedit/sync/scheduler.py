"""Periodic auto-sync."""

import logging
import threading
from typing import Callable, Optional

from .state import EngineState

logger = logging.getLogger(__name__)

# Seconds to wait for the tick of a cancelled timer to finish
CANCEL_JOIN_TIMEOUT = 5.0


class RecurringTimer:
    """Runs a callback now and then every ``interval`` seconds until cancelled."""

    def __init__(
        self, interval: float, callback: Callable[[], object], immediate: bool = True
    ):
        self.interval = interval
        self.callback = callback
        self.immediate = immediate
        self._cancelled = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="remotedit-autosync", daemon=True
        )

    @property
    def active(self) -> bool:
        return not self._cancelled.is_set()

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for a running tick to finish. No-op from the timer's own thread."""
        if self._thread is threading.current_thread() or not self._thread.is_alive():
            return
        self._thread.join(timeout)

    def _run(self) -> None:
        if not self.immediate and self._cancelled.wait(self.interval):
            return
        while not self._cancelled.is_set():
            try:
                self.callback()
            except Exception as e:
                logger.warning(f"Auto-sync tick failed: {e}")
            if self._cancelled.wait(self.interval):
                return


class AutoSyncScheduler:
    """Keeps exactly one auto-sync timer in ``state.timer``.

    The tick callback is expected to skip its run when a mirror is already in
    flight; ticks are never queued.
    """

    def __init__(self, state: EngineState, tick: Callable[[], object]):
        """Initialize the scheduler.

        Args:
            state: Engine state holding the active timer
            tick: Called on every period
        """
        self.state = state
        self.tick = tick
        self._lock = threading.Lock()

    def arm(self, interval_seconds: float, immediate: bool = True) -> None:
        """Replace the current timer.

        Args:
            interval_seconds: Period in seconds; 0 or less only cancels
            immediate: Run the first tick now instead of after one period
        """
        with self._lock:
            self._cancel_locked()
            if interval_seconds <= 0:
                logger.debug("Auto-sync disabled")
                return
            timer = RecurringTimer(interval_seconds, self.tick, immediate=immediate)
            self.state.timer = timer
            timer.start()
            logger.debug(f"Auto-sync every {interval_seconds}s")

    def _cancel_locked(self) -> None:
        timer = self.state.timer
        if timer is not None:
            timer.cancel()
            timer.join(CANCEL_JOIN_TIMEOUT)
            self.state.timer = None

    def cancel(self) -> None:
        with self._lock:
            self._cancel_locked()

    @property
    def active(self) -> bool:
        timer = self.state.timer
        return timer is not None and timer.active
