"""Periodic scheduler - Imperative Shell.

Runs a callback on a fixed interval in a background thread. Stopping is
synchronous: once stop() returns, the callback will not run again.
"""

import logging
import threading
from typing import Callable


logger = logging.getLogger(__name__)


class Ticker:
    """Cancellable fixed-interval ticker.

    The first tick fires one interval after start(), not immediately.
    A callback that raises is logged and the ticker keeps going.
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], None],
        name: str = "ticker",
    ) -> None:
        """Initialize ticker.

        Args:
            interval_seconds: Time between ticks
            callback: Function to call on each tick
            name: Thread name, used in logs
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        self.interval_seconds = interval_seconds
        self.callback = callback
        self.name = name
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Returns True between start() and stop()."""
        with self._lock:
            return self._thread is not None

    def start(self) -> bool:
        """Start ticking.

        Returns:
            True if started, False if already running
        """
        with self._lock:
            if self._thread is not None:
                return False

            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=self.name,
                daemon=True,
            )
            self._thread.start()

        logger.info("Ticker %s started (interval=%ss)", self.name, self.interval_seconds)
        return True

    def stop(self) -> bool:
        """Stop ticking and wait for an in-flight tick to finish.

        When called from inside the callback the thread cannot be joined;
        the flag is set and the loop exits as soon as the callback returns.

        Returns:
            True if stopped, False if it was not running
        """
        with self._lock:
            thread = self._thread
            if thread is None:
                return False
            self._stop_event.set()
            self._thread = None

        if thread is not threading.current_thread():
            thread.join()

        logger.info("Ticker %s stopped", self.name)
        return True

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_seconds):
            try:
                self.callback()
            except Exception:
                logger.exception("Ticker %s callback failed", self.name)
