"""Unit tests for message formatting.

Pure function tests - no mocks needed.
"""

import json
from datetime import datetime, timezone

import pytest

from src.core.alert import Alert, AlertLocation
from src.core.entity import Position, TrackedEntity
from src.core.formatter import (
    INCIDENT_MESSAGES,
    INCIDENT_TITLES,
    format_alert_summary,
    format_battery,
    format_battery_message,
    format_battery_title,
    format_incident_message,
    format_incident_title,
    format_near_village_message,
    format_near_village_title,
    format_slack_alert,
    get_nearby_zones,
    get_priority_emoji,
)
from src.core.samples import SAMPLE_ZONES
from src.core.zones import parse_zone


@pytest.fixture
def zones():
    return [parse_zone(z) for z in SAMPLE_ZONES]


@pytest.fixture
def elephant():
    return TrackedEntity(
        id="elephant-001",
        name="Tembo",
        species="African Elephant",
        position=Position(-1.2921, 36.8219),
        last_seen=datetime(2024, 6, 1, tzinfo=timezone.utc),
        battery_level=8.4,
    )


@pytest.fixture
def sample_alert():
    """Create a sample alert for testing."""
    return Alert(
        id=12,
        type="animal_near_village",
        priority="high",
        title="African Elephant near Village A",
        message="Tembo (African Elephant) has been detected within 1km of Village A.",
        timestamp=datetime(2024, 6, 1, 12, 30, tzinfo=timezone.utc),
        location=AlertLocation(-1.2921, 36.8219, "Village A"),
        source="gps_collar",
        animal_id="elephant-001",
        zone_id="village-001",
        metadata={"battery_level": 85},
    )


class TestGetPriorityEmoji:
    """Tests for get_priority_emoji() function."""

    def test_distinct_per_priority(self):
        emojis = {get_priority_emoji(p) for p in ("low", "medium", "high", "critical")}
        assert len(emojis) == 4

    def test_critical(self):
        assert get_priority_emoji("critical") == "🚨"


class TestEntityMessages:
    """Tests for near-village and battery texts."""

    def test_battery_rounds(self):
        assert format_battery(8.4) == "8%"
        assert format_battery(None) == "unknown"

    def test_near_village(self, elephant, zones):
        village = zones[0]
        assert format_near_village_title(elephant, village) == "African Elephant near Village A"

        message = format_near_village_message(elephant, village, 0.08)
        assert "Tembo" in message
        assert "1200" in message
        assert "0.08km" in message

    def test_near_village_unknown_population(self, elephant, zones):
        reserve = zones[2]
        assert "unknown" in format_near_village_message(elephant, reserve, 0.5)

    def test_battery_critical(self, elephant):
        assert format_battery_title(True) == "Collar Battery Critical"
        assert "critical battery level: 8%" in format_battery_message(elephant, True)

    def test_battery_low(self, elephant):
        assert format_battery_title(False) == "Collar Battery Low"
        assert "low battery: 8%" in format_battery_message(elephant, False)


class TestIncidentMessages:
    """Tests for incident titles and messages."""

    def test_every_type_has_text(self):
        assert set(INCIDENT_TITLES) == set(INCIDENT_MESSAGES)

    def test_message_names_zone(self):
        message = format_incident_message("fence_breach", "National Reserve")
        assert "National Reserve" in message

    def test_unknown_type(self):
        assert format_incident_title("alien_landing") == "Alert"
        assert format_incident_message("alien_landing", "Z") == "Alert generated"


class TestFormatAlertSummary:
    """Tests for format_alert_summary() function."""

    def test_includes_id_priority_and_place(self, sample_alert):
        summary = format_alert_summary(sample_alert)
        assert "#12" in summary
        assert "[HIGH]" in summary
        assert "Village A" in summary

    def test_falls_back_to_coordinates(self, sample_alert):
        alert = Alert(**{**sample_alert.__dict__, "location": AlertLocation(-1.5, 36.5)})
        assert "-1.5000, 36.5000" in format_alert_summary(alert)


class TestFormatSlackAlert:
    """Tests for format_slack_alert() function."""

    def test_returns_dict_with_text(self, sample_alert):
        payload = format_slack_alert(sample_alert)
        assert "text" in payload
        assert "African Elephant near Village A" in payload["text"]

    def test_returns_blocks(self, sample_alert):
        payload = format_slack_alert(sample_alert)
        assert payload["blocks"][0]["type"] == "header"
        assert payload["blocks"][-1]["type"] == "divider"

    def test_includes_map_link(self, sample_alert):
        payload_str = json.dumps(format_slack_alert(sample_alert))
        assert "google.com/maps?q=-1.2921,36.8219" in payload_str

    def test_includes_battery_when_present(self, sample_alert):
        payload_str = json.dumps(format_slack_alert(sample_alert), ensure_ascii=False)
        assert "Battery: 85%" in payload_str

    def test_includes_channel_name(self, sample_alert):
        payload_str = json.dumps(format_slack_alert(sample_alert, channel_name="rangers"))
        assert "rangers" in payload_str

    def test_includes_nearby_zones(self, sample_alert, zones):
        nearby = [(zones[0], 0.1)]
        payload_str = json.dumps(format_slack_alert(sample_alert, nearby_zones=nearby))
        assert "Nearby Zones" in payload_str
        assert "0.1 km" in payload_str

    def test_serializable(self, sample_alert):
        json.dumps(format_slack_alert(sample_alert))


class TestGetNearbyZones:
    """Tests for get_nearby_zones() function."""

    def test_sorted_by_distance(self, zones):
        nearby = get_nearby_zones(-1.2921, 36.8219, zones)
        assert [z.id for z, _ in nearby][0] == "village-001"
        distances = [d for _, d in nearby]
        assert distances == sorted(distances)

    def test_max_distance(self, zones):
        nearby = get_nearby_zones(-1.2921, 36.8219, zones, max_distance_km=1.0)
        assert [z.id for z, _ in nearby] == ["village-001"]

    def test_none_nearby(self, zones):
        assert get_nearby_zones(0.0, 0.0, zones) == []
