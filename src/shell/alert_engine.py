"""Alert rule engine - Imperative Shell.

Owns the canonical alert list. On each evaluation pass it reads the
simulator's fleet snapshot, runs the pure rules from src/core/rules.py,
materializes new alerts, republishes the list and its statistics, and
notifies high-priority listeners.
"""

import logging
import random
import threading
from datetime import datetime, timezone, tzinfo
from typing import Callable

from src.core.alert import (
    Alert,
    AlertDraft,
    dismiss,
    find_alert,
    insert_alert,
    mark_all_read,
    mark_read,
    materialize_alert,
)
from src.core.config import MonitoringSettings
from src.core.entity import TrackedEntity
from src.core.rules import INCIDENT_TYPES, build_incident, evaluate_entity, maybe_random_incident
from src.core.samples import sample_alert_drafts
from src.core.stats import AlertStats, compute_alert_stats
from src.core.zones import ZoneRegistry
from src.shell.publisher import Topic
from src.shell.ticker import Ticker


logger = logging.getLogger(__name__)


AlertListener = Callable[[Alert], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AlertEngine:
    """Evaluates alert rules and maintains the alert list.

    All list mutations happen under the state lock, which also computes
    the stats for the new list. The pair is delivered after the state
    lock is released, under a separate publish lock, so observers always
    receive a list and the stats computed from exactly that list, in
    order, and may read other components while handling them.
    High-priority listeners are called after both locks are released.
    """

    def __init__(
        self,
        registry: ZoneRegistry,
        snapshot_source: Callable[[], tuple[TrackedEntity, ...]],
        settings: MonitoringSettings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
        alerts_topic: Topic | None = None,
        stats_topic: Topic | None = None,
        stats_tz: tzinfo | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            registry: Zones the rules evaluate against
            snapshot_source: Returns the current fleet snapshot
            settings: Monitoring settings (defaults if not provided)
            rng: Random source for incident injection
            clock: Returns the current time
            alerts_topic: Where alert lists are published
            stats_topic: Where alert stats are published
            stats_tz: Time zone for the "today" count (None for local)
        """
        self.registry = registry
        self.snapshot_source = snapshot_source
        self.settings = settings or MonitoringSettings()
        self.rng = rng or random.Random()
        self.clock = clock
        self.alerts_topic = alerts_topic or Topic("alerts")
        self.stats_topic = stats_topic or Topic("alert_stats")
        self.stats_tz = stats_tz

        # Lock order: _publish_lock, then _lock. Never the reverse.
        self._publish_lock = threading.RLock()
        self._lock = threading.RLock()
        self._alerts: tuple[Alert, ...] = ()
        self._next_id = 1
        self._stats = compute_alert_stats((), clock(), stats_tz)
        self._listeners: list[AlertListener] = []
        self._ticker = Ticker(
            self.settings.evaluation_interval_seconds,
            self.evaluate,
            name="alert-engine",
        )

        with self._publish_lock:
            self._publish(self._alerts, self._stats)

    # ----- Side channel -----

    def add_high_priority_listener(self, listener: AlertListener) -> None:
        """Register a callback for every created high/critical alert."""
        self._listeners.append(listener)

    def _notify(self, alerts: list[Alert]) -> None:
        for alert in alerts:
            if not alert.is_high_priority:
                continue
            for listener in list(self._listeners):
                try:
                    listener(alert)
                except Exception:
                    logger.exception(
                        "High-priority listener failed for alert %d", alert.id
                    )

    # ----- Monitoring lifecycle -----

    def start(self) -> bool:
        """Start periodic evaluation. No-op if already running."""
        return self._ticker.start()

    def stop(self) -> bool:
        """Stop periodic evaluation. No pass starts after this returns."""
        return self._ticker.stop()

    def is_running(self) -> bool:
        return self._ticker.is_running

    # ----- Evaluation -----

    def evaluate(self, now: datetime | None = None) -> list[Alert]:
        """Run one evaluation pass over the current fleet snapshot.

        Per active entity: near-village, critical battery, low battery,
        each deduplicated against the list including alerts created
        earlier in this pass. Then at most one random incident.

        Args:
            now: Evaluation time (defaults to the clock)

        Returns:
            Alerts created by this pass, in creation order
        """
        entities = self.snapshot_source()
        zones = self.registry.zones()
        rules = self.settings.rules

        with self._publish_lock:
            with self._lock:
                now = now or self.clock()
                created: list[Alert] = []

                for entity in entities:
                    for draft in evaluate_entity(entity, zones, self._alerts, now, rules):
                        created.append(self._append(draft, now))

                incident = maybe_random_incident(zones, self.rng, rules)
                if incident is not None:
                    created.append(self._append(incident, now))

                snapshot = self._refresh_stats(now) if created else None

            if snapshot is not None:
                self._publish(*snapshot)

        if created:
            logger.info(
                "Evaluation created %d alert(s) for %d entities",
                len(created), len(entities),
            )
        else:
            logger.debug("Evaluation created no alerts for %d entities", len(entities))

        self._notify(created)
        return created

    def create_alert(self, draft: AlertDraft, now: datetime | None = None) -> Alert:
        """Materialize a single alert outside the rule pass.

        Used for manual triggers, scenarios and seeding.
        """
        with self._publish_lock:
            with self._lock:
                now = now or self.clock()
                alert = self._append(draft, now)
                snapshot = self._refresh_stats(now)
            self._publish(*snapshot)

        self._notify([alert])
        return alert

    def trigger_incident(
        self,
        alert_type: str | None = None,
        zone_id: str | None = None,
        priority: str | None = None,
    ) -> Alert | None:
        """Create an incident alert on demand.

        Unknown types or zones are drawn at random instead; returns None
        only when no zones are configured.
        """
        zones = self.registry.zones()
        if not zones:
            logger.warning("trigger_incident: no zones configured")
            return None

        with self._lock:
            if alert_type not in INCIDENT_TYPES:
                if alert_type is not None:
                    logger.warning("Unknown incident type %s, picking one at random", alert_type)
                alert_type = self.rng.choice(INCIDENT_TYPES)

            zone = self.registry.get(zone_id) if zone_id else None
            if zone is None:
                if zone_id is not None:
                    logger.warning("Unknown zone %s, picking one at random", zone_id)
                zone = self.rng.choice(list(zones))

            draft = build_incident(alert_type, zone, self.rng, self.settings.rules, priority)

        return self.create_alert(draft)

    def seed_sample_alerts(self) -> list[Alert]:
        """Load the demonstration alerts with backdated timestamps.

        Seeded alerts do not trigger high-priority listeners.
        """
        with self._publish_lock:
            with self._lock:
                now = self.clock()
                created = [
                    self._append(draft, timestamp)
                    for draft, timestamp in sample_alert_drafts(now)
                ]
                snapshot = self._refresh_stats(now)
            self._publish(*snapshot)

        logger.info("Seeded %d sample alerts", len(created))
        return created

    # ----- Commands -----

    def mark_as_read(self, alert_id: int) -> bool:
        """Mark one alert read. Unknown IDs are ignored.

        Returns:
            True if the list changed
        """
        return self._apply(lambda alerts: mark_read(alerts, alert_id))

    def mark_all_as_read(self) -> bool:
        """Mark every alert read.

        Returns:
            True if the list changed
        """
        return self._apply(mark_all_read)

    def dismiss(self, alert_id: int) -> bool:
        """Deactivate an alert. Unknown IDs are ignored.

        Dismissed alerts stop suppressing new ones and leave the stats,
        but stay in the list until the cap evicts them.

        Returns:
            True if the list changed
        """
        return self._apply(lambda alerts: dismiss(alerts, alert_id))

    # ----- Queries -----

    def alerts(self) -> tuple[Alert, ...]:
        """Current alert list, newest first."""
        with self._lock:
            return self._alerts

    def stats(self) -> AlertStats:
        """Stats for the current alert list."""
        with self._lock:
            return self._stats

    def get_alert(self, alert_id: int) -> Alert | None:
        with self._lock:
            return find_alert(self._alerts, alert_id)

    # ----- Internals -----

    def _append(self, draft: AlertDraft, now: datetime) -> Alert:
        # Caller holds self._lock
        alert = materialize_alert(draft, self._next_id, now)
        self._next_id += 1
        self._alerts = insert_alert(self._alerts, alert, self.settings.max_alerts)
        logger.info(
            "Alert #%d [%s] %s (%s)",
            alert.id, alert.priority, alert.title, alert.type,
        )
        return alert

    def _apply(
        self,
        operation: Callable[[tuple[Alert, ...]], tuple[tuple[Alert, ...], bool]],
    ) -> bool:
        with self._publish_lock:
            with self._lock:
                alerts, changed = operation(self._alerts)
                if not changed:
                    return False
                self._alerts = alerts
                snapshot = self._refresh_stats(self.clock())
            self._publish(*snapshot)
        return True

    def _refresh_stats(self, now: datetime) -> tuple[tuple[Alert, ...], AlertStats]:
        # Caller holds self._lock
        self._stats = compute_alert_stats(self._alerts, now, self.stats_tz)
        return self._alerts, self._stats

    def _publish(self, alerts: tuple[Alert, ...], stats: AlertStats) -> None:
        # Caller holds self._publish_lock but not self._lock
        self.alerts_topic.publish(alerts)
        self.stats_topic.publish(stats)
