"""Alert data models and list operations - Pure functions.

This module defines the Alert record and the operations that produce new
alert lists (insert with cap, mark read, dismiss). The canonical list is
ordered newest-first by creation. All functions are pure with no side
effects: they return new tuples instead of mutating their input.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any


ALERT_TYPES = (
    "animal_near_village",
    "poacher_detected",
    "fence_breach",
    "collar_malfunction",
    "emergency",
    "wildlife_conflict",
)

PRIORITIES = ("low", "medium", "high", "critical")

SOURCES = (
    "gps_collar",
    "camera_trap",
    "ranger_report",
    "villager_report",
    "sensor",
    "system",
)

# Priorities that trigger the audible-alert side channel
HIGH_PRIORITIES = frozenset({"high", "critical"})

MAX_ALERTS = 100


@dataclass(frozen=True)
class AlertLocation:
    """Where an alert happened.

    Attributes:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        name: Human-readable place name (optional)
    """
    latitude: float
    longitude: float
    name: str | None = None


@dataclass(frozen=True)
class AlertDraft:
    """An alert candidate produced by a rule, before it is materialized.

    Has everything an Alert has except the engine-assigned fields
    (id, timestamp, is_read, is_active).
    """
    type: str
    priority: str
    title: str
    message: str
    location: AlertLocation
    source: str
    animal_id: str | None = None
    zone_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Alert:
    """Immutable alert record.

    Attributes:
        id: Sequential ID, strictly increasing in creation order
        type: One of ALERT_TYPES
        priority: One of PRIORITIES
        title: Short headline
        message: Full description
        timestamp: Creation time (informational; ordering uses id)
        location: Where the alert applies
        animal_id: Subject entity (optional)
        zone_id: Subject zone (optional)
        is_read: Operator has seen the alert
        is_active: False once dismissed
        source: One of SOURCES
        metadata: Extra scalar details
    """
    id: int
    type: str
    priority: str
    title: str
    message: str
    timestamp: datetime
    location: AlertLocation
    source: str
    animal_id: str | None = None
    zone_id: str | None = None
    is_read: bool = False
    is_active: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_high_priority(self) -> bool:
        """Returns True for high and critical alerts."""
        return self.priority in HIGH_PRIORITIES


def materialize_alert(draft: AlertDraft, alert_id: int, now: datetime) -> Alert:
    """Turn a draft into an unread, active Alert.

    Pure function.

    Args:
        draft: Rule output
        alert_id: Next sequential ID
        now: Creation timestamp

    Returns:
        New Alert
    """
    return Alert(
        id=alert_id,
        type=draft.type,
        priority=draft.priority,
        title=draft.title,
        message=draft.message,
        timestamp=now,
        location=draft.location,
        source=draft.source,
        animal_id=draft.animal_id,
        zone_id=draft.zone_id,
        is_read=False,
        is_active=True,
        metadata=dict(draft.metadata),
    )


def insert_alert(
    alerts: tuple[Alert, ...],
    alert: Alert,
    max_alerts: int = MAX_ALERTS,
) -> tuple[Alert, ...]:
    """Prepend an alert and truncate to the newest max_alerts.

    Pure function.

    Args:
        alerts: Current list, newest first
        alert: Alert to add
        max_alerts: Cap on list length

    Returns:
        New list, newest first
    """
    return ((alert,) + tuple(alerts))[:max_alerts]


def mark_read(
    alerts: tuple[Alert, ...],
    alert_id: int,
) -> tuple[tuple[Alert, ...], bool]:
    """Mark a single alert as read.

    Pure function. Unknown or already-read IDs leave the list unchanged.

    Returns:
        (new list, whether anything changed)
    """
    changed = False
    result = []
    for alert in alerts:
        if alert.id == alert_id and not alert.is_read:
            alert = replace(alert, is_read=True)
            changed = True
        result.append(alert)
    return tuple(result), changed


def mark_all_read(alerts: tuple[Alert, ...]) -> tuple[tuple[Alert, ...], bool]:
    """Mark every alert as read.

    Pure function.

    Returns:
        (new list, whether anything changed)
    """
    if all(a.is_read for a in alerts):
        return tuple(alerts), False
    return tuple(replace(a, is_read=True) for a in alerts), True


def dismiss(
    alerts: tuple[Alert, ...],
    alert_id: int,
) -> tuple[tuple[Alert, ...], bool]:
    """Deactivate an alert. It stays in the list until the cap evicts it.

    Pure function. Unknown or already-dismissed IDs leave the list unchanged.

    Returns:
        (new list, whether anything changed)
    """
    changed = False
    result = []
    for alert in alerts:
        if alert.id == alert_id and alert.is_active:
            alert = replace(alert, is_active=False)
            changed = True
        result.append(alert)
    return tuple(result), changed


def find_alert(alerts: tuple[Alert, ...], alert_id: int) -> Alert | None:
    """Find an alert by ID."""
    for alert in alerts:
        if alert.id == alert_id:
            return alert
    return None


def alert_to_dict(alert: Alert) -> dict[str, Any]:
    """Convert an Alert to a JSON-friendly dict.

    Pure function.
    """
    return {
        "id": alert.id,
        "type": alert.type,
        "priority": alert.priority,
        "title": alert.title,
        "message": alert.message,
        "timestamp": alert.timestamp.isoformat(),
        "location": {
            "latitude": alert.location.latitude,
            "longitude": alert.location.longitude,
            "name": alert.location.name,
        },
        "animal_id": alert.animal_id,
        "zone_id": alert.zone_id,
        "is_read": alert.is_read,
        "is_active": alert.is_active,
        "source": alert.source,
        "metadata": dict(alert.metadata),
    }
