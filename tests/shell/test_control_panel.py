"""Tests for the ControlPanel wiring.

Background tickers are only started in the lifecycle tests; everything
else drives the simulator and engine by hand.
"""

import random
import threading
from unittest.mock import MagicMock

import pytest

from src.control_panel import ControlPanel
from src.core.config import Config, MonitoringSettings, NotificationSettings
from src.core.entity import Position
from src.core.rules import RuleSettings
from src.shell.slack_client import SlackClient, SlackResponse


def quiet_config(**overrides):
    """Default zones and animals, no random incidents, no sample alerts."""
    monitoring = MonitoringSettings(rules=RuleSettings(incident_probability=0))
    notifications = NotificationSettings(sound_asset_path=None)
    return Config(
        monitoring=overrides.pop("monitoring", monitoring),
        notifications=overrides.pop("notifications", notifications),
        **overrides,
    )


@pytest.fixture
def panel(clock):
    with ControlPanel(quiet_config(), rng=random.Random(11), clock=clock) as panel:
        yield panel


class TestWiring:
    """Tests that components share one set of streams."""

    def test_initial_snapshots_published(self, panel):
        assert panel.streams.entities.latest == panel.entities()
        assert panel.streams.tracks.latest == panel.tracks()
        assert panel.streams.alerts.latest == ()
        assert panel.streams.alert_stats.latest.total == 0

    def test_tick_publishes_to_streams(self, panel, clock):
        seen = []
        panel.streams.entities.subscribe(seen.append, replay=False)

        clock.advance(seconds=30)
        panel.simulator.tick()

        assert seen == [panel.entities()]

    def test_engine_reads_simulator_fleet(self, panel):
        panel.simulator.update_entity("rhino-001", battery_level=5)

        created = panel.engine.evaluate()

        assert any(
            a.type == "collar_malfunction" and a.animal_id == "rhino-001"
            for a in created
        )
        assert panel.streams.alerts.latest == panel.alerts()

    def test_zone_stats(self, panel):
        stats = panel.zone_stats()
        assert stats.total_zones == 3
        assert stats.by_type == {"village": 2, "protected_area": 1}
        assert stats.total_population == 2000

    def test_add_entity(self, panel):
        entity = panel.add_entity({"name": "Kiboko", "position": Position(-1.27, 36.81)})

        assert panel.get_entity(entity.id) == entity
        assert len(panel.get_track(entity.id).positions) == 1

    def test_engine_randomness_independent_of_ticks(self, clock):
        """Incidents depend on the seed, not on how often the fleet moved."""
        config = quiet_config(monitoring=MonitoringSettings(
            rules=RuleSettings(incident_probability=1),
        ))

        def incident_after(ticks):
            with ControlPanel(config, rng=random.Random(21), clock=clock) as panel:
                for _ in range(ticks):
                    panel.simulator.tick()
                created = panel.engine.evaluate()
            return [(a.type, a.zone_id, a.priority, a.location) for a in created if a.source == "sensor"]

        first = incident_after(0)
        assert len(first) == 1
        assert incident_after(3) == first


class TestCrossReadingSubscribers:
    """Subscribers may query the panel while other components publish."""

    def test_tick_and_alert_creation_do_not_block(self, panel):
        both_delivering = threading.Barrier(2, timeout=2)
        seen = {}

        def on_entities(entities):
            both_delivering.wait()
            seen["alerts"] = panel.alerts()

        def on_alerts(alerts):
            both_delivering.wait()
            seen["entities"] = panel.entities()

        panel.streams.entities.subscribe(on_entities, replay=False)
        panel.streams.alerts.subscribe(on_alerts, replay=False)

        threads = [
            threading.Thread(target=panel.simulator.tick),
            threading.Thread(target=panel.trigger_incident, args=("fence_breach",)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(3)

        assert not any(t.is_alive() for t in threads)
        assert len(seen["entities"]) == 5
        assert len(seen["alerts"]) == 1
        assert panel.alerts()[0].type == "fence_breach"


class TestSampleAlerts:
    """Tests for seeding the demonstration alerts."""

    def test_seeded_when_configured(self, clock):
        config = quiet_config(monitoring=MonitoringSettings(
            rules=RuleSettings(incident_probability=0),
            seed_sample_alerts=True,
        ))
        with ControlPanel(config, clock=clock) as panel:
            assert len(panel.alerts()) == 6
            assert panel.alert_stats().total == 6


class TestNotifiers:
    """Tests for the high-priority side channel."""

    def test_sound_played_for_critical_alert(self, tmp_path, clock):
        asset = tmp_path / "general-alert.mp3"
        asset.write_bytes(b"ID3")
        player = MagicMock()
        config = quiet_config(notifications=NotificationSettings(sound_asset_path=str(asset)))

        with ControlPanel(config, clock=clock, sound_player=player) as panel:
            panel.trigger_incident("poacher_detected", "protected-001", "critical")
            panel.trigger_incident("fence_breach", "protected-001", "low")

        player.assert_called_once_with(asset)

    def test_webhook_receives_high_priority_alerts(self, clock):
        client = MagicMock(spec=SlackClient)
        client.send_alert.return_value = SlackResponse(success=True, status_code=200)

        with ControlPanel(quiet_config(), clock=clock, slack_client=client) as panel:
            alert = panel.trigger_incident("emergency", "village-001", "high")
            panel.trigger_incident("emergency", "village-001", "medium")

        client.send_alert.assert_called_once()
        assert client.send_alert.call_args.args[0] == alert
        assert panel.webhook_notifier.sent == 1

    def test_no_webhook_without_url(self, panel):
        assert panel.webhook_notifier is None

    def test_webhook_failure_does_not_block_alert(self, clock):
        client = MagicMock(spec=SlackClient)
        client.send_alert.side_effect = RuntimeError("network down")

        with ControlPanel(quiet_config(), clock=clock, slack_client=client) as panel:
            alert = panel.trigger_incident("emergency", "village-001", "critical")

        assert panel.alerts() == (alert,)


class TestCommands:
    """Tests for idempotent commands and status."""

    def test_alert_commands(self, panel):
        alert = panel.trigger_incident("fence_breach", "protected-001", "medium")

        assert panel.mark_as_read(alert.id) is True
        assert panel.mark_as_read(alert.id) is False
        assert panel.dismiss(alert.id) is True
        assert panel.mark_all_as_read() is False

    def test_unknown_scenario(self, panel):
        assert panel.start_scenario("nope") is False
        assert panel.stop_scenario() is False

    def test_status(self, panel):
        panel.trigger_incident("fence_breach", "protected-001", "high")

        status = panel.status()

        assert status["simulation_running"] is False
        assert status["monitoring_running"] is False
        assert status["animals"] == 5
        assert status["active_animals"] == 5
        assert status["zones"] == 3
        assert status["alerts"] == 1
        assert status["active_alerts"] == 1
        assert status["unread_alerts"] == 1
        assert status["scenario"] == {"running": False}


class TestLifecycle:
    """Tests for start/stop and shutdown."""

    def test_start_stop_idempotent(self, panel):
        assert panel.start_simulation() is True
        assert panel.start_simulation() is False
        assert panel.start_monitoring() is True
        assert panel.start_monitoring() is False

        assert panel.stop_simulation() is True
        assert panel.stop_simulation() is False
        assert panel.stop_monitoring() is True
        assert panel.stop_monitoring() is False

    def test_shutdown_stops_everything(self, clock):
        panel = ControlPanel(quiet_config(), clock=clock)
        panel.start_simulation()
        panel.start_monitoring()
        panel.start_scenario("training_basic")

        panel.shutdown()
        panel.shutdown()

        status = panel.status()
        assert status["simulation_running"] is False
        assert status["monitoring_running"] is False
        assert status["scenario"] == {"running": False}
