"""Telemetry simulation step - Pure functions.

This module computes the next state of a tracked entity for one
simulator tick and maintains bounded position tracks. Randomness is
passed in as a ``random.Random`` so results are reproducible.
"""

import random
from dataclasses import replace
from datetime import datetime

from src.core.entity import Position, Track, TrackPoint, TrackedEntity


# Max per-axis movement per tick, in degrees (~100 m)
DEFAULT_MAX_STEP_DEG = 0.001

MAX_TRACK_POINTS = 100

MIN_SPEED_KMH = 1.0
SPEED_RANGE_KMH = 20.0
MAX_BATTERY_DRAIN = 2.0

# GPS fix accuracy window, in meters
MIN_ACCURACY_M = 5.0
ACCURACY_RANGE_M = 10.0


def advance_entity(
    entity: TrackedEntity,
    now: datetime,
    rng: random.Random,
    max_step_deg: float = DEFAULT_MAX_STEP_DEG,
) -> TrackedEntity:
    """Compute an entity's state after one tick.

    Bounded random walk: each axis moves by a uniform amount in
    [-max_step_deg, +max_step_deg]. Speed and heading are resampled, the
    battery drains by up to MAX_BATTERY_DRAIN and never goes below zero
    or back up.

    Args:
        entity: Current state
        now: Tick time
        rng: Random source
        max_step_deg: Per-axis movement bound in degrees

    Returns:
        New entity state
    """
    lat_change = (rng.random() * 2 - 1) * max_step_deg
    lon_change = (rng.random() * 2 - 1) * max_step_deg

    speed = rng.random() * SPEED_RANGE_KMH + MIN_SPEED_KMH
    heading = rng.random() * 360

    battery = entity.battery_level
    if battery is not None and battery > 0:
        battery = max(0.0, battery - rng.random() * MAX_BATTERY_DRAIN)

    return replace(
        entity,
        position=Position(
            latitude=entity.position.latitude + lat_change,
            longitude=entity.position.longitude + lon_change,
        ),
        last_seen=now,
        speed_kmh=speed,
        heading_deg=heading,
        battery_level=battery,
    )


def make_track_point(
    entity: TrackedEntity,
    now: datetime,
    rng: random.Random,
) -> TrackPoint:
    """Sample the entity's current position as a track point."""
    return TrackPoint(
        latitude=entity.position.latitude,
        longitude=entity.position.longitude,
        timestamp=now,
        accuracy_m=rng.random() * ACCURACY_RANGE_M + MIN_ACCURACY_M,
    )


def append_track_point(
    track: Track,
    point: TrackPoint,
    max_points: int = MAX_TRACK_POINTS,
) -> Track:
    """Append a sample, keeping only the newest max_points.

    Pure function. Oldest samples are evicted first.

    Args:
        track: Current track
        point: Sample to append
        max_points: Track length cap

    Returns:
        New Track
    """
    positions = (track.positions + (point,))[-max_points:]
    return Track(animal_id=track.animal_id, positions=positions)


def advance_fleet(
    entities: tuple[TrackedEntity, ...],
    tracks: dict[str, Track],
    now: datetime,
    rng: random.Random,
    max_step_deg: float = DEFAULT_MAX_STEP_DEG,
    max_track_points: int = MAX_TRACK_POINTS,
) -> tuple[tuple[TrackedEntity, ...], dict[str, Track]]:
    """Advance every active entity by one tick.

    Inactive entities are carried over unchanged. Fleet order is preserved.

    Returns:
        (new entities, new tracks keyed by entity ID)
    """
    new_entities = []
    new_tracks = dict(tracks)

    for entity in entities:
        if not entity.is_active:
            new_entities.append(entity)
            continue

        moved = advance_entity(entity, now, rng, max_step_deg)
        new_entities.append(moved)

        track = new_tracks.get(entity.id, Track(animal_id=entity.id))
        new_tracks[entity.id] = append_track_point(
            track,
            make_track_point(moved, now, rng),
            max_track_points,
        )

    return tuple(new_entities), new_tracks
