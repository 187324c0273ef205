"""Control Panel - Wires Functional Core and Imperative Shell.

This module owns one monitoring session: the zone registry, the
telemetry simulator, the alert engine, the scenario runner and the
high-priority notifiers, all connected through a shared set of streams.
It's the "glue" that makes the application work; entry points (CLI,
HTTP API) only talk to this class.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Any, Callable

from src.core.alert import Alert
from src.core.config import Config
from src.core.entity import Track, TrackedEntity
from src.core.stats import AlertStats
from src.core.zones import Zone, ZoneRegistry, ZoneStats, compute_zone_stats
from src.shell.alert_engine import AlertEngine
from src.shell.notifiers import SoundNotifier, WebhookNotifier
from src.shell.publisher import Streams
from src.shell.scenario_runner import ScenarioRunner
from src.shell.simulator import TelemetrySimulator
from src.shell.slack_client import SlackClient


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ControlPanel:
    """Coordinates simulation, monitoring and notification.

    This class wires together:
    - Zone registry (static geofences)
    - Telemetry simulator (fleet and tracks)
    - Alert engine (rules, alert list, stats)
    - Scenario runner (scripted training events)
    - Sound and webhook notifiers (high-priority side channel)

    Every command is synchronous and idempotent; starting something that
    is running or stopping something that is stopped is a no-op.
    """

    def __init__(
        self,
        config: Config | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        slack_client: SlackClient | None = None,
        sound_player: Callable[[Any], None] | None = None,
    ) -> None:
        """Initialize the session from configuration.

        Args:
            config: Application configuration (defaults if not provided)
            rng: Random source for the simulator; the engine draws from its
                own source seeded from this one
            clock: Returns the current time
            slack_client: Webhook client (created from config if not provided)
            sound_player: Callable that plays the alert sound asset
        """
        self.config = config or Config()
        self.rng = rng or random.Random(self.config.simulation.seed)
        # Each ticker thread owns its random source
        self.engine_rng = random.Random(self.rng.getrandbits(64))
        self.clock = clock or utc_now

        self.streams = Streams()
        self.registry = ZoneRegistry(self.config.zones)

        self.simulator = TelemetrySimulator(
            settings=self.config.simulation,
            animals=self.config.animals,
            rng=self.rng,
            clock=self.clock,
            entities_topic=self.streams.entities,
            tracks_topic=self.streams.tracks,
        )
        self.engine = AlertEngine(
            registry=self.registry,
            snapshot_source=self.simulator.snapshot,
            settings=self.config.monitoring,
            rng=self.engine_rng,
            clock=self.clock,
            alerts_topic=self.streams.alerts,
            stats_topic=self.streams.alert_stats,
        )
        self.scenarios = ScenarioRunner(
            simulator=self.simulator,
            engine=self.engine,
            registry=self.registry,
            clock=self.clock,
        )

        notifications = self.config.notifications
        self.sound_notifier = SoundNotifier(notifications.sound_asset_path, player=sound_player)
        self.engine.add_high_priority_listener(self.sound_notifier.on_high_priority_alert)

        self.webhook_notifier: WebhookNotifier | None = None
        if slack_client is None and notifications.webhook_url:
            slack_client = SlackClient(notifications.webhook_url)
        if slack_client is not None:
            self.webhook_notifier = WebhookNotifier(
                slack_client,
                zones=self.registry.zones(),
                channel_name=notifications.webhook_channel_name,
            )
            self.engine.add_high_priority_listener(self.webhook_notifier.on_high_priority_alert)

        if self.config.monitoring.seed_sample_alerts:
            self.engine.seed_sample_alerts()

        logger.info(
            "Control panel ready: %d animals, %d zones",
            len(self.simulator.snapshot()),
            len(self.registry),
        )

    # ----- Streams and snapshots -----

    def entities(self) -> tuple[TrackedEntity, ...]:
        return self.simulator.snapshot()

    def get_entity(self, entity_id: str) -> TrackedEntity | None:
        return self.simulator.get_entity(entity_id)

    def tracks(self) -> tuple[Track, ...]:
        return self.simulator.tracks_snapshot()

    def get_track(self, entity_id: str) -> Track | None:
        return self.simulator.get_track(entity_id)

    def alerts(self) -> tuple[Alert, ...]:
        return self.engine.alerts()

    def alert_stats(self) -> AlertStats:
        return self.engine.stats()

    def zones(self) -> tuple[Zone, ...]:
        return self.registry.zones()

    def zone_stats(self) -> ZoneStats:
        return compute_zone_stats(self.registry.zones())

    # ----- Commands -----

    def start_simulation(self) -> bool:
        return self.simulator.start()

    def stop_simulation(self) -> bool:
        return self.simulator.stop()

    def start_monitoring(self) -> bool:
        return self.engine.start()

    def stop_monitoring(self) -> bool:
        return self.engine.stop()

    def add_entity(self, partial: dict[str, Any] | None = None) -> TrackedEntity:
        return self.simulator.add_entity(partial)

    def mark_as_read(self, alert_id: int) -> bool:
        return self.engine.mark_as_read(alert_id)

    def mark_all_as_read(self) -> bool:
        return self.engine.mark_all_as_read()

    def dismiss(self, alert_id: int) -> bool:
        return self.engine.dismiss(alert_id)

    def trigger_incident(
        self,
        alert_type: str | None = None,
        zone_id: str | None = None,
        priority: str | None = None,
    ) -> Alert | None:
        return self.engine.trigger_incident(alert_type, zone_id, priority)

    def start_scenario(self, scenario_id: str, speed: float = 1.0) -> bool:
        return self.scenarios.start(scenario_id, speed)

    def stop_scenario(self) -> bool:
        return self.scenarios.stop()

    def status(self) -> dict[str, Any]:
        """Summary of what is running and how much state there is."""
        entities = self.simulator.snapshot()
        stats = self.engine.stats()
        return {
            "simulation_running": self.simulator.is_running(),
            "monitoring_running": self.engine.is_running(),
            "tick_count": self.simulator.tick_count,
            "animals": len(entities),
            "active_animals": sum(1 for e in entities if e.is_active),
            "zones": len(self.registry),
            "alerts": len(self.engine.alerts()),
            "active_alerts": stats.total,
            "unread_alerts": stats.unread,
            "scenario": self.scenarios.status(),
        }

    def shutdown(self) -> None:
        """Stop every background activity. Safe to call more than once."""
        self.scenarios.stop()
        self.engine.stop()
        self.simulator.stop()
        logger.info("Control panel shut down")

    def __enter__(self) -> "ControlPanel":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()
