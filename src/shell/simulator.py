"""Telemetry simulator - Imperative Shell.

Owns the fleet of tracked entities and their tracks, advances them on a
fixed tick and publishes snapshots. The per-tick math lives in
src/core/telemetry.py; this class adds state, locking and scheduling.
"""

import logging
import random
import threading
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import Any, Callable

from src.core.entity import Track, TrackedEntity, build_entity, clamp_battery
from src.core.telemetry import advance_fleet, append_track_point, make_track_point
from src.core.config import SimulationSettings
from src.shell.publisher import Topic
from src.shell.ticker import Ticker


logger = logging.getLogger(__name__)


# Fields update_entity may change; id and last_seen are managed here
UPDATABLE_FIELDS = frozenset(
    f.name for f in fields(TrackedEntity) if f.name not in ("id", "last_seen")
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TelemetrySimulator:
    """Simulated GPS collar fleet.

    Every mutation (tick, add, scenario update) builds a new immutable
    fleet under the state lock, so readers never see a partially updated
    entity. Snapshots are delivered after the state lock is released,
    under a separate publish lock that keeps them in order; subscribers
    are free to read other components.
    """

    def __init__(
        self,
        settings: SimulationSettings | None = None,
        animals: list[dict[str, Any]] | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
        entities_topic: Topic | None = None,
        tracks_topic: Topic | None = None,
    ) -> None:
        """Initialize simulator with its starting fleet.

        Args:
            settings: Simulation settings (defaults if not provided)
            animals: Initial fleet as partial entity dicts
            rng: Random source (seeded from settings if not provided)
            clock: Returns the current time
            entities_topic: Where fleet snapshots are published
            tracks_topic: Where track snapshots are published
        """
        self.settings = settings or SimulationSettings()
        self.rng = rng or random.Random(self.settings.seed)
        self.clock = clock
        self.entities_topic = entities_topic or Topic("entities")
        self.tracks_topic = tracks_topic or Topic("tracks")

        # Lock order: _publish_lock, then _lock. Never the reverse.
        self._publish_lock = threading.RLock()
        self._lock = threading.RLock()
        self._entities: tuple[TrackedEntity, ...] = ()
        self._tracks: dict[str, Track] = {}
        self._custom_counter = 0
        self._tick_count = 0
        self._ticker = Ticker(
            self.settings.tick_interval_seconds,
            self.tick,
            name="telemetry-simulator",
        )

        for partial in animals or []:
            self.add_entity(partial)

    # ----- Commands -----

    def start(self) -> bool:
        """Start periodic ticks. No-op if already running."""
        started = self._ticker.start()
        if started:
            # Re-announce the fleet so new observers get a fresh snapshot
            with self._publish_lock:
                with self._lock:
                    snapshot = self._snapshot_pair()
                self._publish(*snapshot)
        return started

    def stop(self) -> bool:
        """Stop periodic ticks. No tick fires after this returns."""
        return self._ticker.stop()

    def is_running(self) -> bool:
        return self._ticker.is_running

    def tick(self, now: datetime | None = None) -> tuple[TrackedEntity, ...]:
        """Advance every active entity by one step and publish.

        Args:
            now: Tick time (defaults to the clock)

        Returns:
            The new fleet snapshot
        """
        with self._publish_lock:
            with self._lock:
                now = now or self.clock()
                self._entities, self._tracks = advance_fleet(
                    self._entities,
                    self._tracks,
                    now,
                    self.rng,
                    max_step_deg=self.settings.max_step_deg,
                    max_track_points=self.settings.max_track_points,
                )
                self._tick_count += 1
                tick_count = self._tick_count
                snapshot = self._snapshot_pair()

            self._publish(*snapshot)

        logger.debug(
            "Tick %d: advanced %d entities",
            tick_count, len(snapshot[0]),
        )
        return snapshot[0]

    def add_entity(self, partial: dict[str, Any] | None = None) -> TrackedEntity:
        """Insert a new entity with defaults for missing fields.

        Never fails. A missing or already-used ID is replaced with a
        generated one. The entity starts with a single-point track.

        Args:
            partial: Field values keyed by TrackedEntity attribute names

        Returns:
            The created entity
        """
        partial = dict(partial or {})

        with self._publish_lock:
            with self._lock:
                now = self.clock()
                requested_id = partial.get("id")
                existing_ids = {e.id for e in self._entities}

                if requested_id is not None and str(requested_id) in existing_ids:
                    logger.warning(
                        "Entity id %s already in use, generating a new one",
                        requested_id,
                    )
                    partial.pop("id")

                fallback_id = "" if partial.get("id") else self._next_custom_id(existing_ids)
                entity = build_entity(partial, now, fallback_id)

                self._entities = self._entities + (entity,)
                self._tracks[entity.id] = Track(
                    animal_id=entity.id,
                    positions=(make_track_point(entity, now, self.rng),),
                )
                snapshot = self._snapshot_pair()

            self._publish(*snapshot)

        logger.info("Added entity %s (%s, %s)", entity.id, entity.name, entity.species)
        return entity

    def update_entity(self, entity_id: str, **changes: Any) -> TrackedEntity | None:
        """Replace fields of one entity and publish.

        Used by scenarios to move animals or change health and battery.
        A moved entity also gets a new track point. ``last_seen`` is always
        set to the current time.

        Returns:
            The updated entity, or None if the ID is unknown

        Raises:
            ValueError: If changes name a field that cannot be updated
        """
        changes.pop("last_seen", None)
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update entity fields: {', '.join(sorted(unknown))}")

        with self._publish_lock:
            with self._lock:
                for index, entity in enumerate(self._entities):
                    if entity.id == entity_id:
                        break
                else:
                    logger.warning("update_entity: unknown entity %s", entity_id)
                    return None

                if "battery_level" in changes:
                    changes["battery_level"] = clamp_battery(changes["battery_level"])

                now = self.clock()
                updated = replace(entity, last_seen=now, **changes)
                entities = list(self._entities)
                entities[index] = updated
                self._entities = tuple(entities)

                if "position" in changes:
                    track = self._tracks.get(entity_id, Track(animal_id=entity_id))
                    self._tracks[entity_id] = append_track_point(
                        track,
                        make_track_point(updated, now, self.rng),
                        self.settings.max_track_points,
                    )
                snapshot = self._snapshot_pair()

            self._publish(*snapshot)
        return updated

    # ----- Queries -----

    def snapshot(self) -> tuple[TrackedEntity, ...]:
        """Current immutable view of all entities."""
        with self._lock:
            return self._entities

    def tracks_snapshot(self) -> tuple[Track, ...]:
        """Current tracks, in fleet order."""
        with self._lock:
            return self._tracks_in_order()

    def get_entity(self, entity_id: str) -> TrackedEntity | None:
        with self._lock:
            for entity in self._entities:
                if entity.id == entity_id:
                    return entity
            return None

    def get_track(self, entity_id: str) -> Track | None:
        with self._lock:
            return self._tracks.get(entity_id)

    @property
    def tick_count(self) -> int:
        with self._lock:
            return self._tick_count

    # ----- Internals -----

    def _tracks_in_order(self) -> tuple[Track, ...]:
        return tuple(
            self._tracks[e.id] for e in self._entities if e.id in self._tracks
        )

    def _next_custom_id(self, existing_ids: set[str]) -> str:
        while True:
            self._custom_counter += 1
            candidate = f"custom-{self._custom_counter:03d}"
            if candidate not in existing_ids:
                return candidate

    def _snapshot_pair(self) -> tuple[tuple[TrackedEntity, ...], tuple[Track, ...]]:
        # Caller holds self._lock
        return self._entities, self._tracks_in_order()

    def _publish(
        self,
        entities: tuple[TrackedEntity, ...],
        tracks: tuple[Track, ...],
    ) -> None:
        # Caller holds self._publish_lock but not self._lock
        self.entities_topic.publish(entities)
        self.tracks_topic.publish(tracks)
