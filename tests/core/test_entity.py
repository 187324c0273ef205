"""Unit tests for entity construction.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timezone

import pytest

from src.core.entity import (
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    Position,
    Track,
    TrackPoint,
    build_entity,
    clamp_battery,
    entity_to_dict,
    normalize_heading,
    parse_position,
    track_to_dict,
)


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestParsePosition:
    """Tests for parse_position() function."""

    def test_latitude_longitude_dict(self):
        assert parse_position({"latitude": -1.29, "longitude": 36.82}) == Position(-1.29, 36.82)

    def test_lat_lon_dict(self):
        assert parse_position({"lat": -1.29, "lon": 36.82}) == Position(-1.29, 36.82)

    def test_tuple(self):
        assert parse_position((-1.29, 36.82)) == Position(-1.29, 36.82)

    def test_position_passthrough(self):
        p = Position(-1.29, 36.82)
        assert parse_position(p) == p

    def test_out_of_range(self):
        """Coordinates outside WGS84 range are rejected."""
        assert parse_position({"latitude": 91, "longitude": 0}) is None
        assert parse_position({"latitude": 0, "longitude": -181}) is None

    def test_garbage(self):
        """Missing or non-numeric input returns None rather than raising."""
        assert parse_position(None) is None
        assert parse_position({"latitude": "north"}) is None
        assert parse_position("somewhere") is None


class TestClampBattery:
    """Tests for clamp_battery() function."""

    @pytest.mark.parametrize("level,expected", [
        (-5, 0.0),
        (0, 0.0),
        (55.5, 55.5),
        (100, 100.0),
        (140, 100.0),
    ])
    def test_clamps(self, level, expected):
        assert clamp_battery(level) == expected

    def test_none(self):
        assert clamp_battery(None) is None


class TestNormalizeHeading:
    """Tests for normalize_heading() function."""

    def test_wraps(self):
        assert normalize_heading(370) == 10
        assert normalize_heading(-90) == 270
        assert normalize_heading(360) == 0

    def test_none(self):
        assert normalize_heading(None) is None


class TestBuildEntity:
    """Tests for build_entity() function."""

    def test_empty_input_gets_defaults(self):
        """An empty dict still yields a complete entity."""
        entity = build_entity({}, NOW, "custom-001")

        assert entity.id == "custom-001"
        assert entity.name == "Unknown"
        assert entity.species == "Unknown Species"
        assert entity.position == Position(DEFAULT_LATITUDE, DEFAULT_LONGITUDE)
        assert entity.last_seen == NOW
        assert entity.is_active is True
        assert entity.battery_level == 100
        assert entity.speed_kmh == 0
        assert entity.heading_deg == 0
        assert entity.health == "unknown"
        assert entity.gender == "unknown"
        assert entity.conservation_status == "unknown"

    def test_supplied_fields_kept(self):
        entity = build_entity(
            {
                "id": "rhino-001",
                "name": "Kifaru",
                "species": "Black Rhinoceros",
                "position": {"latitude": -1.2756, "longitude": 36.8089},
                "battery_level": 91,
                "health": "healthy",
                "gender": "female",
                "conservation_status": "endangered",
                "age_years": 15,
            },
            NOW,
            "custom-001",
        )

        assert entity.id == "rhino-001"
        assert entity.name == "Kifaru"
        assert entity.position == Position(-1.2756, 36.8089)
        assert entity.battery_level == 91
        assert entity.health == "healthy"
        assert entity.gender == "female"
        assert entity.age_years == 15

    def test_invalid_values_coerced(self):
        """Bad values are fixed up, never rejected."""
        entity = build_entity(
            {
                "position": {"latitude": 200, "longitude": 0},
                "battery_level": 150,
                "heading_deg": 450,
                "health": "grumpy",
                "age_years": "old",
            },
            NOW,
            "custom-002",
        )

        assert entity.position == Position(DEFAULT_LATITUDE, DEFAULT_LONGITUDE)
        assert entity.battery_level == 100
        assert entity.heading_deg == 90
        assert entity.health == "unknown"
        assert entity.age_years is None

    @pytest.mark.parametrize("battery", ["flat", "", [50], {"level": 5}])
    def test_unparseable_battery_defaults_to_full(self, battery):
        entity = build_entity({"battery_level": battery}, NOW, "custom-003")
        assert entity.battery_level == 100

    def test_explicit_none_battery_kept(self):
        assert build_entity({"battery_level": None}, NOW, "custom-004").battery_level is None

    def test_inactive(self):
        entity = build_entity({"is_active": False}, NOW, "custom-003")
        assert entity.is_active is False

    def test_coordinates(self):
        entity = build_entity({"position": (-1.0, 36.0)}, NOW, "x")
        assert entity.coordinates == (-1.0, 36.0)


class TestSerialization:
    """Tests for entity_to_dict() and track_to_dict()."""

    def test_entity_to_dict(self):
        entity = build_entity({"id": "lion-001", "name": "Simba"}, NOW, "x")
        data = entity_to_dict(entity)

        assert data["id"] == "lion-001"
        assert data["position"] == {
            "latitude": DEFAULT_LATITUDE,
            "longitude": DEFAULT_LONGITUDE,
        }
        assert data["last_seen"] == "2024-06-01T12:00:00+00:00"

    def test_track_to_dict(self):
        track = Track(
            animal_id="lion-001",
            positions=(TrackPoint(-1.28, 36.81, NOW, 7.5),),
        )
        data = track_to_dict(track)

        assert data["animal_id"] == "lion-001"
        assert data["positions"][0]["accuracy_m"] == 7.5
        assert track.latest.latitude == -1.28

    def test_empty_track_latest(self):
        assert Track(animal_id="x").latest is None
