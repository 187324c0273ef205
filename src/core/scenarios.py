"""Training scenarios - Pure data and scheduling functions.

A scenario is a timed script of events (animal movements, battery
drains, health changes, injected alerts) layered on top of the running
simulation. This module only decides *which* events are due; applying
them is the scenario runner's job.
"""

from dataclasses import dataclass, field
from typing import Any


EVENT_TYPES = (
    "animal_movement",
    "alert_trigger",
    "battery_drain",
    "health_change",
)


@dataclass(frozen=True)
class ScenarioEvent:
    """A scripted event.

    Attributes:
        id: Unique within the scenario
        type: One of EVENT_TYPES
        trigger_minute: Minutes after scenario start
        description: Human-readable description
        parameters: Event-specific parameters
    """
    id: str
    type: str
    trigger_minute: float
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SimulationScenario:
    """A named training script.

    Attributes:
        id: Scenario identifier
        name: Display name
        description: What the scenario trains
        duration_minutes: Nominal length
        events: Scripted events
    """
    id: str
    name: str
    description: str
    duration_minutes: float
    events: tuple[ScenarioEvent, ...] = ()


BUILTIN_SCENARIOS = (
    SimulationScenario(
        id="training_basic",
        name="Basic Training Scenario",
        description="Introduction to the system with normal animal movements and occasional alerts",
        duration_minutes=15,
        events=(
            ScenarioEvent(
                id="e1",
                type="animal_movement",
                trigger_minute=2,
                description="Elephant herd moves towards village boundary",
                parameters={"animal_id": "elephant-001", "target_zone": "village-001", "fraction": 0.5},
            ),
            ScenarioEvent(
                id="e2",
                type="battery_drain",
                trigger_minute=5,
                description="Low battery alert for rhino collar",
                parameters={"animal_id": "rhino-001", "battery_level": 15},
            ),
        ),
    ),
    SimulationScenario(
        id="emergency_drill",
        name="Emergency Response Drill",
        description="High-stress scenario with multiple critical alerts and poaching activity",
        duration_minutes=30,
        events=(
            ScenarioEvent(
                id="e3",
                type="alert_trigger",
                trigger_minute=3,
                description="Suspected poacher activity detected",
                parameters={"alert_type": "poacher_detected", "zone_id": "protected-001", "priority": "critical"},
            ),
            ScenarioEvent(
                id="e4",
                type="animal_movement",
                trigger_minute=5,
                description="Multiple animals flee from poacher area",
                parameters={"flee_from_zone": "protected-001", "fraction": 0.3},
            ),
            ScenarioEvent(
                id="e5",
                type="health_change",
                trigger_minute=8,
                description="Critical alert: Animal in distress",
                parameters={"animal_id": "leopard-001", "health": "injured"},
            ),
        ),
    ),
    SimulationScenario(
        id="wildlife_conflict",
        name="Human-Wildlife Conflict Scenario",
        description="Animals approaching villages, crop damage, and community response",
        duration_minutes=20,
        events=(
            ScenarioEvent(
                id="e6",
                type="animal_movement",
                trigger_minute=1,
                description="Elephant herd approaches Village A",
                parameters={"animal_id": "elephant-001", "target_zone": "village-001", "fraction": 1.0},
            ),
            ScenarioEvent(
                id="e7",
                type="alert_trigger",
                trigger_minute=4,
                description="Villagers report crop damage",
                parameters={"alert_type": "wildlife_conflict", "zone_id": "village-001"},
            ),
        ),
    ),
    SimulationScenario(
        id="night_patrol",
        name="Night Patrol Training",
        description="Nighttime monitoring with reduced visibility and increased poaching risk",
        duration_minutes=25,
        events=(
            ScenarioEvent(
                id="e8",
                type="alert_trigger",
                trigger_minute=5,
                description="Motion sensors detect suspicious activity",
                parameters={"alert_type": "poacher_detected"},
            ),
            ScenarioEvent(
                id="e9",
                type="battery_drain",
                trigger_minute=10,
                description="Multiple collar batteries drain faster due to cold weather",
                parameters={"drain": 10},
            ),
        ),
    ),
)


def get_scenario(scenario_id: str) -> SimulationScenario | None:
    """Look up a built-in scenario by ID."""
    for scenario in BUILTIN_SCENARIOS:
        if scenario.id == scenario_id:
            return scenario
    return None


def due_events(
    scenario: SimulationScenario,
    elapsed_minutes: float,
    fired_ids: frozenset[str] | set[str],
) -> list[ScenarioEvent]:
    """Events whose trigger time has passed and that have not fired yet.

    Pure function.

    Args:
        scenario: Running scenario
        elapsed_minutes: Scenario time elapsed (already speed-adjusted)
        fired_ids: IDs of events that already fired

    Returns:
        Due events, ordered by trigger time
    """
    due = [
        e for e in scenario.events
        if e.trigger_minute <= elapsed_minutes and e.id not in fired_ids
    ]
    return sorted(due, key=lambda e: e.trigger_minute)


def next_event(
    scenario: SimulationScenario,
    elapsed_minutes: float,
) -> ScenarioEvent | None:
    """The first event scheduled after elapsed_minutes, if any.

    Pure function.
    """
    upcoming = [e for e in scenario.events if e.trigger_minute > elapsed_minutes]
    if not upcoming:
        return None
    return min(upcoming, key=lambda e: e.trigger_minute)


def scenario_progress(
    scenario: SimulationScenario,
    elapsed_minutes: float,
) -> float:
    """Percentage of the scenario's duration elapsed, capped at 100.

    Pure function.
    """
    if scenario.duration_minutes <= 0:
        return 100.0
    return min(100.0, max(0.0, elapsed_minutes / scenario.duration_minutes * 100))


def format_elapsed(elapsed_seconds: float) -> str:
    """Format elapsed time as MM:SS."""
    total = int(elapsed_seconds)
    return f"{total // 60:02d}:{total % 60:02d}"
