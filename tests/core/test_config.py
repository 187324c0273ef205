"""Unit tests for configuration models and validation.

Pure function tests - no mocks needed.
"""

from dataclasses import replace
from datetime import timedelta

import pytest

from src.core.config import (
    Config,
    MonitoringSettings,
    SimulationSettings,
    validate_animal,
    validate_config,
    validate_coordinates,
    validate_zone,
)
from src.core.entity import Position
from src.core.rules import RuleSettings
from src.core.zones import Zone


@pytest.fixture
def triangle():
    return Zone(
        id="z1",
        name="Triangle",
        type="village",
        boundaries=(Position(0, 0), Position(0, 1), Position(1, 1)),
        risk_level="medium",
    )


class TestDefaults:
    """Tests for default configuration."""

    def test_default_config_is_valid(self):
        result = validate_config(Config())
        assert result.valid
        assert result.errors == []

    def test_default_data(self):
        config = Config()
        assert len(config.zones) == 3
        assert len(config.animals) == 5
        assert config.simulation.tick_interval_seconds == 30
        assert config.monitoring.evaluation_interval_seconds == 60
        assert config.monitoring.max_alerts == 100

    def test_default_animals_are_copies(self):
        """Mutating one config's fleet must not leak into another."""
        a = Config()
        a.animals[0]["name"] = "Changed"
        assert Config().animals[0]["name"] == "Tembo"


class TestValidateCoordinates:
    """Tests for validate_coordinates() function."""

    def test_valid(self):
        assert validate_coordinates(-1.29, 36.82, "f") == []

    def test_invalid_latitude(self):
        errors = validate_coordinates(-91, 0, "f")
        assert len(errors) == 1
        assert "Latitude" in errors[0].message

    def test_both_invalid(self):
        assert len(validate_coordinates(100, 200, "f")) == 2


class TestValidateZone:
    """Tests for validate_zone() function."""

    def test_valid(self, triangle):
        assert validate_zone(triangle, "zones[0]") == []

    def test_too_few_vertices(self, triangle):
        zone = replace(triangle, boundaries=(Position(0, 0),))
        errors = validate_zone(zone, "zones[0]")
        assert [e.field for e in errors] == ["zones[0].boundaries"]

    def test_unknown_type_and_risk(self, triangle):
        zone = replace(triangle, type="castle", risk_level="extreme")
        fields = {e.field for e in validate_zone(zone, "zones[0]")}
        assert fields == {"zones[0].type", "zones[0].risk_level"}


class TestValidateAnimal:
    """Tests for validate_animal() function."""

    def test_problems_are_warnings(self):
        errors = validate_animal({"battery_level": 120, "health": "grumpy"}, "animals[0]")
        assert len(errors) == 2
        assert all(e.severity == "warning" for e in errors)

    def test_valid(self):
        assert validate_animal({"battery_level": 50, "health": "healthy"}, "animals[0]") == []


class TestValidateConfig:
    """Tests for validate_config() function."""

    def test_nonpositive_intervals(self):
        config = Config(
            simulation=SimulationSettings(tick_interval_seconds=0),
            monitoring=MonitoringSettings(evaluation_interval_seconds=-1),
        )
        result = validate_config(config)

        assert not result.valid
        fields = {e.field for e in result.critical_errors}
        assert "simulation.tick_interval_seconds" in fields
        assert "monitoring.evaluation_interval_seconds" in fields

    def test_thresholds_out_of_order(self):
        rules = RuleSettings(critical_battery_threshold=30, low_battery_threshold=20)
        result = validate_config(Config(monitoring=MonitoringSettings(rules=rules)))
        assert not result.valid

    def test_bad_probability(self):
        rules = RuleSettings(incident_probability=1.5)
        result = validate_config(Config(monitoring=MonitoringSettings(rules=rules)))
        assert not result.valid

    def test_zero_window(self):
        rules = RuleSettings(near_village_window=timedelta(0))
        result = validate_config(Config(monitoring=MonitoringSettings(rules=rules)))
        assert [e.field for e in result.critical_errors] == ["monitoring.rules.near_village_window"]

    def test_duplicate_zone_ids(self, triangle):
        result = validate_config(Config(zones=[triangle, triangle]))
        assert not result.valid
        assert any("Duplicate zone" in e.message for e in result.errors)

    def test_no_villages_is_warning(self, triangle):
        zone = replace(triangle, type="protected_area")
        result = validate_config(Config(zones=[zone]))

        assert result.valid
        assert len(result.warnings) == 1

    def test_duplicate_animal_ids_warn(self):
        animals = [{"id": "a"}, {"id": "a"}]
        result = validate_config(Config(animals=animals))

        assert result.valid
        assert any("Duplicate animal" in w.message for w in result.warnings)
