"""Unit tests for geo calculations.

Pure function tests - no mocks needed.
"""

import random
from datetime import datetime, timezone

import pytest

from src.core.entity import Position, TrackedEntity
from src.core.geo import (
    calculate_centroid,
    calculate_distance,
    distance_to_zone,
    is_near_zone,
    jitter_position,
    move_toward,
)
from src.core.zones import Zone


@pytest.fixture
def village():
    """Village A, centroid (-1.2925, 36.8225)."""
    return Zone(
        id="village-001",
        name="Village A",
        type="village",
        boundaries=(
            Position(-1.2900, 36.8200),
            Position(-1.2950, 36.8200),
            Position(-1.2950, 36.8250),
            Position(-1.2900, 36.8250),
        ),
        risk_level="high",
        population=1200,
    )


def make_entity(latitude: float, longitude: float) -> TrackedEntity:
    return TrackedEntity(
        id="elephant-001",
        name="Tembo",
        species="African Elephant",
        position=Position(latitude, longitude),
        last_seen=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestCalculateDistance:
    """Tests for calculate_distance() function."""

    def test_same_point(self):
        """Distance from a point to itself should be zero."""
        assert calculate_distance(-1.2921, 36.8219, -1.2921, 36.8219) == 0

    def test_one_thousandth_degree_latitude(self):
        """0.001 degrees of latitude is about 111 meters."""
        distance = calculate_distance(-1.2921, 36.8219, -1.2911, 36.8219)
        assert 0.10 < distance < 0.12

    def test_known_distance(self):
        """Nairobi to Mombasa is about 440 km."""
        distance = calculate_distance(-1.2921, 36.8219, -4.0435, 39.6682)
        assert 430 < distance < 450

    def test_symmetric(self):
        """Distance A->B should equal B->A."""
        d1 = calculate_distance(-1.29, 36.82, -1.27, 36.81)
        d2 = calculate_distance(-1.27, 36.81, -1.29, 36.82)
        assert d1 == pytest.approx(d2)


class TestCalculateCentroid:
    """Tests for calculate_centroid() function."""

    def test_square(self, village):
        """Centroid of a square is its center."""
        center = calculate_centroid(village.boundaries)
        assert center.latitude == pytest.approx(-1.2925)
        assert center.longitude == pytest.approx(36.8225)

    def test_single_point(self):
        """Centroid of one point is that point."""
        center = calculate_centroid([Position(1.0, 2.0)])
        assert center == Position(1.0, 2.0)

    def test_empty_raises(self):
        """Empty boundary has no centroid."""
        with pytest.raises(ValueError):
            calculate_centroid([])


class TestZoneProximity:
    """Tests for distance_to_zone() and is_near_zone()."""

    def test_distance_uses_centroid(self, village):
        """Distance is measured to the centroid, not the polygon edge."""
        distance = distance_to_zone(Position(-1.2925, 36.8225), village)
        assert distance == pytest.approx(0.0, abs=1e-9)

    def test_entity_inside_village_is_near(self, village):
        """Entity a few dozen meters from the centroid is near."""
        assert is_near_zone(make_entity(-1.2921, 36.8219), village)

    def test_entity_far_away_is_not_near(self, village):
        """Entity ~2.8 km away is not near with 1 km radius."""
        assert not is_near_zone(make_entity(-1.2675, 36.8125), village)

    def test_custom_radius(self, village):
        """Larger radius includes more distant entities."""
        entity = make_entity(-1.2675, 36.8125)
        assert is_near_zone(entity, village, radius_km=5.0)

    def test_radius_is_inclusive(self, village):
        """Entity exactly at the radius counts as near."""
        entity = make_entity(-1.2915, 36.8225)
        distance = distance_to_zone(entity.position, village)
        assert is_near_zone(entity, village, radius_km=distance)


class TestJitterPosition:
    """Tests for jitter_position() function."""

    def test_stays_within_half_spread(self):
        """Each axis moves by at most half the spread."""
        rng = random.Random(7)
        for _ in range(200):
            p = jitter_position(-1.29, 36.82, 0.01, rng)
            assert abs(p.latitude + 1.29) <= 0.005
            assert abs(p.longitude - 36.82) <= 0.005

    def test_deterministic_with_seed(self):
        """Same seed gives the same jitter."""
        p1 = jitter_position(0.0, 0.0, 0.01, random.Random(42))
        p2 = jitter_position(0.0, 0.0, 0.01, random.Random(42))
        assert p1 == p2


class TestMoveToward:
    """Tests for move_toward() function."""

    def test_halfway(self):
        """Fraction 0.5 lands on the midpoint."""
        result = move_toward(Position(0.0, 0.0), Position(1.0, 2.0), 0.5)
        assert result == Position(0.5, 1.0)

    def test_full_fraction_reaches_target(self):
        """Fraction 1 lands on the target."""
        result = move_toward(Position(-1.28, 36.81), Position(-1.2925, 36.8225), 1.0)
        assert result.latitude == pytest.approx(-1.2925)
        assert result.longitude == pytest.approx(36.8225)

    def test_fraction_clamped(self):
        """Fractions outside [0, 1] are clamped."""
        origin = Position(0.0, 0.0)
        target = Position(1.0, 1.0)
        assert move_toward(origin, target, -1.0) == origin
        assert move_toward(origin, target, 3.0) == target
