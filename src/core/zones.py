"""Zone models and registry - Pure data structures.

Zones are the geofenced areas (villages, protected areas, corridors) that
proximity rules are evaluated against. They are static for a session.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from src.core.entity import Position, TrackedEntity, parse_position
from src.core.geo import calculate_centroid, is_near_zone


ZONE_TYPES = (
    "village",
    "protected_area",
    "buffer_zone",
    "danger_zone",
    "wildlife_corridor",
)

RISK_LEVELS = ("low", "medium", "high", "critical")


@dataclass(frozen=True)
class Zone:
    """A geofenced area.

    Attributes:
        id: Unique zone identifier
        name: Human-readable name
        type: One of ZONE_TYPES
        boundaries: Polygon vertices (at least 3)
        risk_level: One of RISK_LEVELS
        population: Number of residents, for villages (optional)
        alert_radius_m: Advisory alert radius in meters (optional)
        is_active: Whether the zone is in use
        description: Free text (optional)
    """
    id: str
    name: str
    type: str
    boundaries: tuple[Position, ...]
    risk_level: str
    population: int | None = None
    alert_radius_m: float | None = None
    is_active: bool = True
    description: str | None = None

    @cached_property
    def centroid(self) -> Position:
        """Arithmetic mean of the boundary vertices."""
        return calculate_centroid(self.boundaries)


@dataclass(frozen=True)
class ZoneStats:
    """Aggregate counts over a set of zones.

    Attributes:
        total_zones: Number of zones
        active_zones: Number of active zones
        by_type: Count per zone type (only observed types)
        by_risk_level: Count per risk level (all levels present)
        total_population: Sum of known populations
    """
    total_zones: int
    active_zones: int
    by_type: dict[str, int] = field(default_factory=dict)
    by_risk_level: dict[str, int] = field(default_factory=dict)
    total_population: int = 0


class ZoneRegistry:
    """Read-only, queryable set of zones."""

    def __init__(self, zones: list[Zone] | tuple[Zone, ...]) -> None:
        self._zones = tuple(zones)
        self._by_id = {z.id: z for z in self._zones}

    def zones(self) -> tuple[Zone, ...]:
        """Return the immutable zone list."""
        return self._zones

    def get(self, zone_id: str) -> Zone | None:
        """Look up a zone by ID."""
        return self._by_id.get(zone_id)

    def by_type(self, zone_type: str) -> tuple[Zone, ...]:
        """Return all zones of the given type."""
        return tuple(z for z in self._zones if z.type == zone_type)

    def is_near(self, entity: TrackedEntity, zone: Zone, radius_km: float) -> bool:
        """Check if entity is within radius_km of the zone's centroid."""
        return is_near_zone(entity, zone, radius_km)

    def __len__(self) -> int:
        return len(self._zones)

    def __iter__(self):
        return iter(self._zones)


def parse_zone(data: dict[str, Any]) -> Zone:
    """Parse a zone from config data.

    Pure function.

    Raises:
        KeyError: If a required field is missing
        ValueError: If a boundary vertex is invalid
    """
    boundaries = []
    for vertex in data["boundaries"]:
        position = parse_position(vertex)
        if position is None:
            raise ValueError(f"Invalid boundary vertex in zone {data['id']}: {vertex!r}")
        boundaries.append(position)

    population = data.get("population")
    alert_radius = data.get("alert_radius_m")

    return Zone(
        id=str(data["id"]),
        name=str(data["name"]),
        type=data.get("type", "protected_area"),
        boundaries=tuple(boundaries),
        risk_level=data.get("risk_level", "low"),
        population=int(population) if population is not None else None,
        alert_radius_m=float(alert_radius) if alert_radius is not None else None,
        is_active=bool(data.get("is_active", True)),
        description=data.get("description"),
    )


def compute_zone_stats(zones: tuple[Zone, ...] | list[Zone]) -> ZoneStats:
    """Compute aggregate counts for a set of zones.

    Pure function.
    """
    by_type: dict[str, int] = {}
    by_risk = {level: 0 for level in RISK_LEVELS}

    for zone in zones:
        by_type[zone.type] = by_type.get(zone.type, 0) + 1
        if zone.risk_level in by_risk:
            by_risk[zone.risk_level] += 1

    return ZoneStats(
        total_zones=len(zones),
        active_zones=sum(1 for z in zones if z.is_active),
        by_type=by_type,
        by_risk_level=by_risk,
        total_population=sum(z.population or 0 for z in zones),
    )


def zone_to_dict(zone: Zone) -> dict[str, Any]:
    """Convert a Zone to a JSON-friendly dict.

    Pure function.
    """
    return {
        "id": zone.id,
        "name": zone.name,
        "type": zone.type,
        "boundaries": [
            {"latitude": p.latitude, "longitude": p.longitude}
            for p in zone.boundaries
        ],
        "centroid": {
            "latitude": zone.centroid.latitude,
            "longitude": zone.centroid.longitude,
        },
        "risk_level": zone.risk_level,
        "population": zone.population,
        "alert_radius_m": zone.alert_radius_m,
        "is_active": zone.is_active,
        "description": zone.description,
    }
