"""Geographic calculations - Pure functions.

This module provides distance and zone proximity calculations for
tracked entities. All functions are pure with no side effects.

Proximity is measured to a zone's centroid, the arithmetic mean of its
boundary vertices. This is not a true polygon centroid and ignores the
zone's edges; irregular zones are approximated by that single point.
"""

import math
import random
from typing import Iterable, TYPE_CHECKING

from src.core.entity import Position, TrackedEntity

if TYPE_CHECKING:
    from src.core.zones import Zone


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    # Convert to radians
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    # Haversine formula
    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def calculate_centroid(boundaries: Iterable[Position]) -> Position:
    """Arithmetic mean of a polygon's vertices.

    Pure function.

    Args:
        boundaries: Polygon vertices (at least one)

    Returns:
        Mean position

    Raises:
        ValueError: If boundaries is empty
    """
    points = list(boundaries)
    if not points:
        raise ValueError("Cannot compute centroid of an empty boundary")

    return Position(
        latitude=sum(p.latitude for p in points) / len(points),
        longitude=sum(p.longitude for p in points) / len(points),
    )


def distance_to_zone(position: Position, zone: "Zone") -> float:
    """Distance from a position to a zone's centroid.

    Pure function.

    Returns:
        Distance in kilometers
    """
    center = zone.centroid
    return calculate_distance(
        position.latitude,
        position.longitude,
        center.latitude,
        center.longitude,
    )


def is_near_zone(
    entity: TrackedEntity,
    zone: "Zone",
    radius_km: float = 1.0,
) -> bool:
    """Check if an entity is within radius_km of a zone's centroid.

    Pure function.

    Args:
        entity: Entity to check
        zone: Zone to check against
        radius_km: Radius in kilometers (inclusive)

    Returns:
        True if the entity is within the radius
    """
    return distance_to_zone(entity.position, zone) <= radius_km


def jitter_position(
    latitude: float,
    longitude: float,
    spread_deg: float,
    rng: random.Random,
) -> Position:
    """Offset a point by a uniform random amount on each axis.

    Each axis moves by ``(rng.random() - 0.5) * spread_deg``, so the
    offset lies within ``±spread_deg / 2``.

    Args:
        latitude: Base latitude
        longitude: Base longitude
        spread_deg: Full width of the jitter window in degrees
        rng: Random source

    Returns:
        Jittered position
    """
    return Position(
        latitude=latitude + (rng.random() - 0.5) * spread_deg,
        longitude=longitude + (rng.random() - 0.5) * spread_deg,
    )


def move_toward(origin: Position, target: Position, fraction: float) -> Position:
    """Move a fraction of the way from origin to target.

    Pure function. Linear in degrees, which is fine over the few
    kilometers a reserve spans.

    Args:
        origin: Starting position
        target: Destination
        fraction: 0 keeps origin, 1 lands on target

    Returns:
        Interpolated position
    """
    fraction = min(1.0, max(0.0, fraction))
    return Position(
        latitude=origin.latitude + (target.latitude - origin.latitude) * fraction,
        longitude=origin.longitude + (target.longitude - origin.longitude) * fraction,
    )
