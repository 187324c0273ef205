"""Publication layer - Imperative Shell.

Fans out published values to subscribers. Each Topic keeps its latest
value so late subscribers start from the current state, and delivery is
serialized so every subscriber sees values in publication order.
"""

import logging
import threading
from typing import Callable, Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class Topic(Generic[T]):
    """A single stream of snapshots.

    Callbacks run synchronously on the publishing thread. A callback that
    raises is logged and skipped; other subscribers still get the value.

    Two locks: ``_lock`` guards the stored state and is never held while a
    callback runs, ``_delivery_lock`` serializes delivery so values arrive
    in publication order. Callbacks may therefore read any topic.
    """

    def __init__(self, name: str, initial: T | None = None) -> None:
        self.name = name
        self._lock = threading.RLock()
        self._delivery_lock = threading.RLock()
        self._subscribers: dict[int, Callable[[T], None]] = {}
        self._next_token = 0
        self._latest = initial
        self._version = 0 if initial is None else 1

    @property
    def latest(self) -> T | None:
        """Most recently published value."""
        with self._lock:
            return self._latest

    @property
    def version(self) -> int:
        """Number of values published so far (including the initial one)."""
        with self._lock:
            return self._version

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(
        self,
        callback: Callable[[T], None],
        replay: bool = True,
    ) -> Callable[[], None]:
        """Register a callback.

        Args:
            callback: Called with each published value
            replay: Deliver the current value immediately, if there is one

        Returns:
            Function that removes the subscription
        """
        with self._delivery_lock:
            with self._lock:
                token = self._next_token
                self._next_token += 1
                self._subscribers[token] = callback
                has_value = self._version > 0
                latest = self._latest

            if replay and has_value:
                self._deliver(callback, latest)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self, value: T) -> None:
        """Store value as latest and deliver it to every subscriber."""
        with self._delivery_lock:
            with self._lock:
                self._latest = value
                self._version += 1
                version = self._version
                subscribers = list(self._subscribers.values())

            logger.debug(
                "Publishing %s v%d to %d subscriber(s)",
                self.name, version, len(subscribers),
            )
            for callback in subscribers:
                self._deliver(callback, value)

    def _deliver(self, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception("Subscriber to %s failed", self.name)


class Streams:
    """The four published streams of a control panel session.

    Attributes:
        entities: Fleet snapshots (tuple of TrackedEntity)
        tracks: Track snapshots (tuple of Track)
        alerts: Alert lists, newest first
        alert_stats: AlertStats, republished on every alert list change
    """

    def __init__(self) -> None:
        self.entities: Topic = Topic("entities")
        self.tracks: Topic = Topic("tracks")
        self.alerts: Topic = Topic("alerts")
        self.alert_stats: Topic = Topic("alert_stats")
