"""Tracked entity data models and construction - Pure functions.

This module defines the animal/collar telemetry records and builds
complete entities from partial user input. All functions are pure with
no side effects.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


HEALTH_STATES = ("healthy", "injured", "sick", "unknown")
GENDERS = ("male", "female", "unknown")
CONSERVATION_STATUSES = ("endangered", "vulnerable", "stable", "unknown")

# Nairobi National Park area, used when no position is supplied
DEFAULT_LATITUDE = -1.2921
DEFAULT_LONGITUDE = 36.8219


@dataclass(frozen=True)
class Position:
    """A WGS84 coordinate pair in decimal degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class TrackedEntity:
    """Immutable snapshot of a collared animal.

    Attributes:
        id: Unique, stable identifier
        name: Given name (e.g., "Tembo")
        species: Species label
        position: Last reported position
        last_seen: Time of last report
        collar_id: GPS collar identifier (optional)
        is_active: Whether the entity takes part in ticks and rules
        battery_level: Collar battery percentage in [0, 100] (optional)
        speed_kmh: Last reported speed (optional)
        heading_deg: Last reported heading in [0, 360) (optional)
        health: One of HEALTH_STATES
        age_years: Age in years (optional)
        gender: One of GENDERS (optional)
        conservation_status: One of CONSERVATION_STATUSES (optional)
    """
    id: str
    name: str
    species: str
    position: Position
    last_seen: datetime
    collar_id: str | None = None
    is_active: bool = True
    battery_level: float | None = None
    speed_kmh: float | None = None
    heading_deg: float | None = None
    health: str = "unknown"
    age_years: int | None = None
    gender: str | None = None
    conservation_status: str | None = None

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.position.latitude, self.position.longitude)


@dataclass(frozen=True)
class TrackPoint:
    """A single position sample in an entity's track."""
    latitude: float
    longitude: float
    timestamp: datetime
    accuracy_m: float | None = None


@dataclass(frozen=True)
class Track:
    """Ordered position history for one entity, oldest first.

    Attributes:
        animal_id: ID of the owning TrackedEntity
        positions: Samples, oldest first
    """
    animal_id: str
    positions: tuple[TrackPoint, ...] = ()

    @property
    def latest(self) -> TrackPoint | None:
        """Most recent sample, or None for an empty track."""
        return self.positions[-1] if self.positions else None


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    """Check that a coordinate pair lies in WGS84 range.

    Pure function.
    """
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def parse_position(data: Any) -> Position | None:
    """Parse a position from a dict, tuple or Position.

    Pure function. Accepts ``{"latitude", "longitude"}``, ``{"lat", "lon"}``
    or a ``(lat, lon)`` pair.

    Returns:
        Position, or None if the data is missing or invalid
    """
    if isinstance(data, Position):
        latitude, longitude = data.latitude, data.longitude
    else:
        try:
            if isinstance(data, dict):
                latitude = float(data.get("latitude", data.get("lat")))
                longitude = float(data.get("longitude", data.get("lon")))
            else:
                latitude, longitude = (float(v) for v in data)
        except (TypeError, ValueError):
            return None

    if not is_valid_coordinate(latitude, longitude):
        return None
    return Position(latitude=latitude, longitude=longitude)


def _choice(value: Any, allowed: tuple[str, ...], default: str) -> str:
    """Return value if it is one of the allowed strings, else default."""
    return value if value in allowed else default


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def clamp_battery(level: float | None) -> float | None:
    """Clamp a battery level into [0, 100].

    Pure function.
    """
    if level is None:
        return None
    return min(100.0, max(0.0, level))


def normalize_heading(heading: float | None) -> float | None:
    """Wrap a heading into [0, 360).

    Pure function.
    """
    if heading is None:
        return None
    return heading % 360.0


def build_entity(
    partial: dict[str, Any],
    now: datetime,
    fallback_id: str,
) -> TrackedEntity:
    """Build a complete TrackedEntity from partial input.

    Pure function. Never fails: missing fields get defaults and invalid
    values are coerced (battery clamped, heading wrapped, unknown enum
    values replaced with "unknown", bad positions replaced with the
    default position).

    Args:
        partial: Field values, keyed by TrackedEntity attribute names
        now: Creation time, used as last_seen
        fallback_id: ID to use when partial has none

    Returns:
        A new TrackedEntity
    """
    position = parse_position(partial.get("position")) or Position(
        latitude=DEFAULT_LATITUDE,
        longitude=DEFAULT_LONGITUDE,
    )

    battery = partial.get("battery_level", 100)
    speed = partial.get("speed_kmh")
    heading = partial.get("heading_deg")
    age = partial.get("age_years")

    try:
        age_years = int(age) if age is not None else None
    except (TypeError, ValueError):
        age_years = None

    # Explicit None means no reading; anything unparseable means full
    battery_level = _optional_float(battery)
    if battery_level is None and battery is not None:
        battery_level = 100.0

    is_active = partial.get("is_active")

    return TrackedEntity(
        id=str(partial.get("id") or fallback_id),
        name=str(partial.get("name") or "Unknown"),
        species=str(partial.get("species") or "Unknown Species"),
        position=position,
        last_seen=now,
        collar_id=partial.get("collar_id"),
        is_active=True if is_active is None else bool(is_active),
        battery_level=clamp_battery(battery_level),
        speed_kmh=_optional_float(speed) if speed is not None else 0.0,
        heading_deg=normalize_heading(_optional_float(heading)) if heading is not None else 0.0,
        health=_choice(partial.get("health"), HEALTH_STATES, "unknown"),
        age_years=age_years,
        gender=_choice(partial.get("gender"), GENDERS, "unknown"),
        conservation_status=_choice(
            partial.get("conservation_status"), CONSERVATION_STATUSES, "unknown"
        ),
    )


def entity_to_dict(entity: TrackedEntity) -> dict[str, Any]:
    """Convert a TrackedEntity to a JSON-friendly dict.

    Pure function.
    """
    return {
        "id": entity.id,
        "name": entity.name,
        "species": entity.species,
        "position": {
            "latitude": entity.position.latitude,
            "longitude": entity.position.longitude,
        },
        "last_seen": entity.last_seen.isoformat(),
        "collar_id": entity.collar_id,
        "is_active": entity.is_active,
        "battery_level": entity.battery_level,
        "speed_kmh": entity.speed_kmh,
        "heading_deg": entity.heading_deg,
        "health": entity.health,
        "age_years": entity.age_years,
        "gender": entity.gender,
        "conservation_status": entity.conservation_status,
    }


def track_to_dict(track: Track) -> dict[str, Any]:
    """Convert a Track to a JSON-friendly dict.

    Pure function.
    """
    return {
        "animal_id": track.animal_id,
        "positions": [
            {
                "latitude": p.latitude,
                "longitude": p.longitude,
                "timestamp": p.timestamp.isoformat(),
                "accuracy_m": p.accuracy_m,
            }
            for p in track.positions
        ],
    }
