"""Training scenario runner - Imperative Shell.

Plays a scripted scenario on top of the running simulation: on each
advance it works out which events are due (src/core/scenarios.py) and
applies them to the simulator and the alert engine.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable

from src.core.entity import HEALTH_STATES, Position, TrackedEntity
from src.core.geo import move_toward
from src.core.scenarios import (
    BUILTIN_SCENARIOS,
    ScenarioEvent,
    SimulationScenario,
    due_events,
    format_elapsed,
    get_scenario,
    next_event,
    scenario_progress,
)
from src.core.zones import ZoneRegistry
from src.shell.alert_engine import AlertEngine
from src.shell.simulator import TelemetrySimulator
from src.shell.ticker import Ticker


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ScenarioRunner:
    """Runs at most one scenario at a time.

    Scenario time is wall time since start() multiplied by the speed
    factor, so a 15 minute scenario at speed 5 finishes in 3 minutes.
    The scenario stops itself once its duration has elapsed.
    """

    def __init__(
        self,
        simulator: TelemetrySimulator,
        engine: AlertEngine,
        registry: ZoneRegistry,
        clock: Callable[[], datetime] = utc_now,
        interval_seconds: float = 5.0,
        scenarios: tuple[SimulationScenario, ...] = BUILTIN_SCENARIOS,
    ) -> None:
        self.simulator = simulator
        self.engine = engine
        self.registry = registry
        self.clock = clock
        self.scenarios = scenarios

        self._lock = threading.RLock()
        self._scenario: SimulationScenario | None = None
        self._speed = 1.0
        self._started_at: datetime | None = None
        self._fired: set[str] = set()
        self._ticker = Ticker(interval_seconds, self.advance, name="scenario-runner")

    @property
    def current(self) -> SimulationScenario | None:
        with self._lock:
            return self._scenario

    def is_running(self) -> bool:
        with self._lock:
            return self._scenario is not None

    def list_scenarios(self) -> tuple[SimulationScenario, ...]:
        return self.scenarios

    def start(self, scenario_id: str, speed: float = 1.0, background: bool = True) -> bool:
        """Start a scenario, replacing any scenario already running.

        Args:
            scenario_id: ID of a known scenario
            speed: Scenario time multiplier (must be positive)
            background: Advance automatically on a ticker

        Returns:
            True if started, False for an unknown scenario or bad speed
        """
        scenario = self._find(scenario_id)
        if scenario is None:
            logger.warning("Unknown scenario %s", scenario_id)
            return False

        if speed <= 0:
            logger.warning("Scenario speed must be positive, got %s", speed)
            return False

        self.stop()

        with self._lock:
            self._scenario = scenario
            self._speed = speed
            self._started_at = self.clock()
            self._fired = set()

        logger.info("Scenario %s started at speed %sx", scenario.id, speed)

        if background:
            self._ticker.start()
        return True

    def stop(self) -> bool:
        """Stop the running scenario.

        Returns:
            True if a scenario was running
        """
        self._ticker.stop()

        with self._lock:
            scenario = self._scenario
            if scenario is None:
                return False
            self._scenario = None
            self._started_at = None
            self._fired = set()

        logger.info("Scenario %s stopped", scenario.id)
        return True

    def elapsed_minutes(self, now: datetime | None = None) -> float:
        """Speed-adjusted scenario time, 0 when idle."""
        with self._lock:
            if self._started_at is None:
                return 0.0
            now = now or self.clock()
            seconds = max(0.0, (now - self._started_at).total_seconds())
            return seconds * self._speed / 60

    def advance(self, now: datetime | None = None) -> list[ScenarioEvent]:
        """Fire every event that has become due.

        Args:
            now: Current time (defaults to the clock)

        Returns:
            Events fired by this call, in trigger order
        """
        with self._lock:
            scenario = self._scenario
            if scenario is None:
                return []

            now = now or self.clock()
            elapsed = self.elapsed_minutes(now)
            events = due_events(scenario, elapsed, self._fired)
            for event in events:
                self._fired.add(event.id)

        for event in events:
            logger.info(
                "Scenario %s: firing %s (%s) at %s",
                scenario.id, event.id, event.type, format_elapsed(elapsed * 60),
            )
            self._apply(event)

        if elapsed >= scenario.duration_minutes:
            logger.info("Scenario %s completed", scenario.id)
            self.stop()

        return events

    def status(self, now: datetime | None = None) -> dict[str, Any]:
        """Describe the running scenario for display."""
        with self._lock:
            scenario = self._scenario
            if scenario is None:
                return {"running": False}

            elapsed = self.elapsed_minutes(now)
            upcoming = next_event(scenario, elapsed)
            return {
                "running": True,
                "scenario_id": scenario.id,
                "name": scenario.name,
                "speed": self._speed,
                "elapsed": format_elapsed(elapsed * 60),
                "progress": round(scenario_progress(scenario, elapsed), 1),
                "events_fired": len(self._fired),
                "events_total": len(scenario.events),
                "next_event": upcoming.description if upcoming else None,
            }

    # ----- Event handlers -----

    def _find(self, scenario_id: str) -> SimulationScenario | None:
        for scenario in self.scenarios:
            if scenario.id == scenario_id:
                return scenario
        return get_scenario(scenario_id)

    def _apply(self, event: ScenarioEvent) -> None:
        handlers = {
            "animal_movement": self._apply_movement,
            "battery_drain": self._apply_battery_drain,
            "health_change": self._apply_health_change,
            "alert_trigger": self._apply_alert_trigger,
        }
        handler = handlers.get(event.type)
        if handler is None:
            logger.warning("Skipping event %s with unknown type %s", event.id, event.type)
            return
        handler(event.parameters)

    def _entity(self, entity_id: str | None) -> TrackedEntity | None:
        entity = self.simulator.get_entity(entity_id) if entity_id else None
        if entity is None:
            logger.warning("Scenario event references unknown animal %s", entity_id)
        return entity

    def _apply_movement(self, params: dict[str, Any]) -> None:
        fraction = params.get("fraction", 0.5)

        if "flee_from_zone" in params:
            zone = self.registry.get(params["flee_from_zone"])
            if zone is None:
                logger.warning("Scenario event references unknown zone %s", params["flee_from_zone"])
                return
            center = zone.centroid
            for entity in self.simulator.snapshot():
                if not entity.is_active:
                    continue
                # Mirror the zone centroid through the entity to get a point away from it
                away = Position(
                    latitude=2 * entity.position.latitude - center.latitude,
                    longitude=2 * entity.position.longitude - center.longitude,
                )
                self.simulator.update_entity(
                    entity.id, position=move_toward(entity.position, away, fraction)
                )
            return

        entity = self._entity(params.get("animal_id"))
        zone = self.registry.get(params.get("target_zone", ""))
        if entity is None:
            return
        if zone is None:
            logger.warning("Scenario event references unknown zone %s", params.get("target_zone"))
            return

        self.simulator.update_entity(
            entity.id, position=move_toward(entity.position, zone.centroid, fraction)
        )

    def _apply_battery_drain(self, params: dict[str, Any]) -> None:
        if "animal_id" in params:
            entity = self._entity(params["animal_id"])
            if entity is None:
                return
            if "battery_level" in params:
                level = params["battery_level"]
            else:
                level = (entity.battery_level or 0) - params.get("drain", 0)
            self.simulator.update_entity(entity.id, battery_level=level)
            return

        drain = params.get("drain", 0)
        for entity in self.simulator.snapshot():
            if entity.battery_level is None:
                continue
            self.simulator.update_entity(
                entity.id, battery_level=entity.battery_level - drain
            )

    def _apply_health_change(self, params: dict[str, Any]) -> None:
        entity = self._entity(params.get("animal_id"))
        health = params.get("health")
        if entity is None:
            return
        if health not in HEALTH_STATES:
            logger.warning("Skipping health change to unknown state %s", health)
            return
        self.simulator.update_entity(entity.id, health=health)

    def _apply_alert_trigger(self, params: dict[str, Any]) -> None:
        self.engine.trigger_incident(
            alert_type=params.get("alert_type"),
            zone_id=params.get("zone_id"),
            priority=params.get("priority"),
        )
