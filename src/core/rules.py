"""Alert rule evaluation - Pure functions.

This module evaluates which conditions should raise alerts for the
current fleet snapshot. Rules return AlertDraft candidates; the engine
assigns IDs and timestamps. Deduplication against the existing alert
list happens here, so rules see alerts created earlier in the same pass
when the caller threads the growing list through.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.core.alert import Alert, AlertDraft, AlertLocation
from src.core.dedup import has_recent_alert
from src.core.entity import TrackedEntity
from src.core.formatter import (
    format_battery_message,
    format_battery_title,
    format_incident_message,
    format_incident_title,
    format_near_village_message,
    format_near_village_title,
)
from src.core.geo import distance_to_zone, is_near_zone, jitter_position
from src.core.zones import Zone


INCIDENT_TYPES = (
    "poacher_detected",
    "fence_breach",
    "wildlife_conflict",
    "emergency",
)


@dataclass(frozen=True)
class RuleSettings:
    """Thresholds and dedup windows for the alert rules.

    Attributes:
        near_village_radius_km: Proximity radius for village alerts
        near_village_window: Dedup window per (animal, village) pair
        critical_battery_threshold: Battery below this is critical
        critical_battery_window: Dedup window for critical battery alerts
        low_battery_threshold: Battery below this (and not critical) is low
        low_battery_window: Dedup window for low battery alerts
        incident_probability: Chance per pass of a random incident (0 disables)
        incident_jitter_deg: Full width of the incident position jitter
        incident_high_priority_chance: Chance an incident is high priority
    """
    near_village_radius_km: float = 1.0
    near_village_window: timedelta = timedelta(minutes=30)
    critical_battery_threshold: float = 10.0
    critical_battery_window: timedelta = timedelta(minutes=60)
    low_battery_threshold: float = 20.0
    low_battery_window: timedelta = timedelta(minutes=120)
    incident_probability: float = 0.1
    incident_jitter_deg: float = 0.01
    incident_high_priority_chance: float = 0.3


def check_near_village(
    entity: TrackedEntity,
    zones: tuple[Zone, ...] | list[Zone],
    alerts: tuple[Alert, ...],
    now: datetime,
    settings: RuleSettings,
) -> list[AlertDraft]:
    """Raise an alert for each village the entity is close to.

    Pure function. One candidate per village within the radius, unless an
    active animal_near_village alert for the same (animal, village) pair
    is younger than the window.

    Args:
        entity: Entity to check
        zones: All zones; only villages are considered
        alerts: Existing alerts, for deduplication
        now: Evaluation time
        settings: Rule settings

    Returns:
        Alert candidates (possibly empty)
    """
    drafts = []

    for village in zones:
        if village.type != "village":
            continue

        if not is_near_zone(entity, village, settings.near_village_radius_km):
            continue

        if has_recent_alert(
            alerts,
            "animal_near_village",
            now,
            settings.near_village_window,
            animal_id=entity.id,
            zone_id=village.id,
        ):
            continue

        distance = distance_to_zone(entity.position, village)
        drafts.append(AlertDraft(
            type="animal_near_village",
            priority="high" if village.risk_level == "high" else "medium",
            title=format_near_village_title(entity, village),
            message=format_near_village_message(
                entity, village, distance, settings.near_village_radius_km
            ),
            location=AlertLocation(
                latitude=entity.position.latitude,
                longitude=entity.position.longitude,
                name=village.name,
            ),
            source="gps_collar",
            animal_id=entity.id,
            zone_id=village.id,
            metadata={
                "distance_km": round(distance, 3),
                "animal_speed_kmh": entity.speed_kmh,
                "village_population": village.population,
            },
        ))

    return drafts


def _battery_draft(entity: TrackedEntity, critical: bool) -> AlertDraft:
    return AlertDraft(
        type="collar_malfunction",
        priority="high" if critical else "medium",
        title=format_battery_title(critical),
        message=format_battery_message(entity, critical),
        location=AlertLocation(
            latitude=entity.position.latitude,
            longitude=entity.position.longitude,
        ),
        source="gps_collar",
        animal_id=entity.id,
        metadata={
            "battery_level": entity.battery_level,
            "collar_id": entity.collar_id,
        },
    )


def check_critical_battery(
    entity: TrackedEntity,
    alerts: tuple[Alert, ...],
    now: datetime,
    settings: RuleSettings,
) -> AlertDraft | None:
    """Raise a high-priority collar alert when battery is critical.

    Pure function. Fires for battery below critical_battery_threshold
    unless an active collar_malfunction alert for the entity is younger
    than critical_battery_window.
    """
    battery = entity.battery_level
    if battery is None or battery >= settings.critical_battery_threshold:
        return None

    if has_recent_alert(
        alerts,
        "collar_malfunction",
        now,
        settings.critical_battery_window,
        animal_id=entity.id,
    ):
        return None

    return _battery_draft(entity, critical=True)


def check_low_battery(
    entity: TrackedEntity,
    alerts: tuple[Alert, ...],
    now: datetime,
    settings: RuleSettings,
) -> AlertDraft | None:
    """Raise a medium-priority collar alert when battery is low.

    Pure function. Fires for battery in [critical, low) thresholds unless
    an active collar_malfunction alert for the entity is younger than
    low_battery_window. Shares the alert type with check_critical_battery
    but covers a disjoint range with its own window.
    """
    battery = entity.battery_level
    if battery is None:
        return None
    if not settings.critical_battery_threshold <= battery < settings.low_battery_threshold:
        return None

    if has_recent_alert(
        alerts,
        "collar_malfunction",
        now,
        settings.low_battery_window,
        animal_id=entity.id,
    ):
        return None

    return _battery_draft(entity, critical=False)


def build_incident(
    alert_type: str,
    zone: Zone,
    rng: random.Random,
    settings: RuleSettings,
    priority: str | None = None,
) -> AlertDraft:
    """Build an incident alert attached to a zone.

    The position is jittered around the zone's first boundary vertex.
    Priority is drawn (high with incident_high_priority_chance, else
    medium) unless given.

    Args:
        alert_type: One of INCIDENT_TYPES
        zone: Zone the incident is reported in
        rng: Random source
        settings: Rule settings
        priority: Fixed priority, or None to draw one

    Returns:
        Alert candidate
    """
    anchor = zone.boundaries[0]
    position = jitter_position(
        anchor.latitude,
        anchor.longitude,
        settings.incident_jitter_deg,
        rng,
    )

    if priority is None:
        is_high = rng.random() < settings.incident_high_priority_chance
        priority = "high" if is_high else "medium"

    return AlertDraft(
        type=alert_type,
        priority=priority,
        title=format_incident_title(alert_type),
        message=format_incident_message(alert_type, zone.name),
        location=AlertLocation(
            latitude=position.latitude,
            longitude=position.longitude,
            name=zone.name,
        ),
        source="sensor",
        zone_id=zone.id,
        metadata={
            "zone_type": zone.type,
            "generated": True,
        },
    )


def maybe_random_incident(
    zones: tuple[Zone, ...] | list[Zone],
    rng: random.Random,
    settings: RuleSettings,
) -> AlertDraft | None:
    """Inject a random incident with incident_probability.

    Independent of entity state and never deduplicated. Type and zone
    are drawn uniformly.

    Returns:
        Alert candidate, or None when the draw does not fire
    """
    if not zones or settings.incident_probability <= 0:
        return None

    if rng.random() >= settings.incident_probability:
        return None

    alert_type = rng.choice(INCIDENT_TYPES)
    zone = rng.choice(list(zones))
    return build_incident(alert_type, zone, rng, settings)


def evaluate_entity(
    entity: TrackedEntity,
    zones: tuple[Zone, ...] | list[Zone],
    alerts: tuple[Alert, ...],
    now: datetime,
    settings: RuleSettings,
) -> list[AlertDraft]:
    """Evaluate the per-entity rules in order.

    Pure function. Order: near-village, critical battery, low battery.
    Inactive entities produce no candidates.

    Returns:
        Alert candidates in creation order
    """
    if not entity.is_active:
        return []

    drafts = check_near_village(entity, zones, alerts, now, settings)

    critical = check_critical_battery(entity, alerts, now, settings)
    if critical is not None:
        drafts.append(critical)

    low = check_low_battery(entity, alerts, now, settings)
    if low is not None:
        drafts.append(low)

    return drafts
