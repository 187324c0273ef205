"""Deduplication logic - Pure functions.

This module decides whether a repeated alert condition should be
suppressed. A candidate is a duplicate when an active alert of the same
type and subject was created within the rule's time window. All
functions are pure with no side effects.
"""

from datetime import datetime, timedelta
from typing import Iterable

from src.core.alert import Alert


def matches_subject(
    alert: Alert,
    animal_id: str | None,
    zone_id: str | None = None,
) -> bool:
    """Check if an alert concerns the given animal (and zone, if given).

    Pure function. A zone_id of None means the zone is not part of the
    subject, so any zone matches.
    """
    if alert.animal_id != animal_id:
        return False
    if zone_id is not None and alert.zone_id != zone_id:
        return False
    return True


def is_within_window(alert: Alert, now: datetime, window: timedelta) -> bool:
    """Check if an alert was created less than window ago.

    Pure function.
    """
    return now - alert.timestamp < window


def find_recent_alert(
    alerts: Iterable[Alert],
    alert_type: str,
    now: datetime,
    window: timedelta,
    animal_id: str | None,
    zone_id: str | None = None,
) -> Alert | None:
    """Find an active alert that suppresses a new candidate.

    Pure function.

    Args:
        alerts: Current alert list
        alert_type: Candidate's alert type
        now: Evaluation time
        window: Dedup window for the rule
        animal_id: Candidate's subject entity
        zone_id: Candidate's subject zone, if part of the subject

    Returns:
        The first suppressing alert, or None
    """
    for alert in alerts:
        if (
            alert.is_active
            and alert.type == alert_type
            and matches_subject(alert, animal_id, zone_id)
            and is_within_window(alert, now, window)
        ):
            return alert
    return None


def has_recent_alert(
    alerts: Iterable[Alert],
    alert_type: str,
    now: datetime,
    window: timedelta,
    animal_id: str | None,
    zone_id: str | None = None,
) -> bool:
    """Returns True if a new candidate would be a duplicate.

    Pure function. See find_recent_alert().
    """
    return find_recent_alert(
        alerts, alert_type, now, window, animal_id, zone_id
    ) is not None
