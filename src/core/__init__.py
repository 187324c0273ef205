"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Tracked entity and zone models
- Geo/distance calculations
- Telemetry random walk
- Alert rule evaluation and deduplication
- Alert statistics
- Message formatting

All functions here are deterministic (given a seeded random source) and
have no I/O.
"""

from src.core.alert import Alert, AlertDraft, insert_alert, materialize_alert
from src.core.entity import Position, Track, TrackedEntity, build_entity
from src.core.geo import calculate_distance, distance_to_zone, is_near_zone
from src.core.rules import RuleSettings, evaluate_entity, maybe_random_incident
from src.core.stats import AlertStats, compute_alert_stats
from src.core.telemetry import advance_fleet
from src.core.zones import Zone, ZoneRegistry
from src.core.dedup import has_recent_alert

__all__ = [
    # Entities
    "Position",
    "Track",
    "TrackedEntity",
    "build_entity",
    # Zones
    "Zone",
    "ZoneRegistry",
    # Geo
    "calculate_distance",
    "distance_to_zone",
    "is_near_zone",
    # Telemetry
    "advance_fleet",
    # Alerts
    "Alert",
    "AlertDraft",
    "insert_alert",
    "materialize_alert",
    # Rules
    "RuleSettings",
    "evaluate_entity",
    "maybe_random_incident",
    # Dedup
    "has_recent_alert",
    # Stats
    "AlertStats",
    "compute_alert_stats",
]
