"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from src.core.entity import CONSERVATION_STATUSES, GENDERS, HEALTH_STATES
from src.core.rules import RuleSettings
from src.core.samples import SAMPLE_ANIMALS, SAMPLE_ZONES
from src.core.telemetry import DEFAULT_MAX_STEP_DEG, MAX_TRACK_POINTS
from src.core.zones import RISK_LEVELS, ZONE_TYPES, Zone, parse_zone


@dataclass
class SimulationSettings:
    """Telemetry simulator configuration.

    Attributes:
        tick_interval_seconds: Time between simulator ticks
        max_step_deg: Per-axis random walk bound per tick
        max_track_points: Track length cap per entity
        seed: Random seed (None for nondeterministic)
    """
    tick_interval_seconds: float = 30.0
    max_step_deg: float = DEFAULT_MAX_STEP_DEG
    max_track_points: int = MAX_TRACK_POINTS
    seed: int | None = None


@dataclass
class MonitoringSettings:
    """Alert rule engine configuration.

    Attributes:
        evaluation_interval_seconds: Time between rule evaluation passes
        max_alerts: Alert list cap
        rules: Rule thresholds and dedup windows
        seed_sample_alerts: Start the session with demonstration alerts
    """
    evaluation_interval_seconds: float = 60.0
    max_alerts: int = 100
    rules: RuleSettings = field(default_factory=RuleSettings)
    seed_sample_alerts: bool = False


@dataclass
class NotificationSettings:
    """High-priority alert side channel configuration.

    Attributes:
        sound_asset_path: Sound file the audible notifier plays
        webhook_url: Slack-compatible webhook for high/critical alerts
        webhook_channel_name: Label shown in webhook messages
    """
    sound_asset_path: str | None = "assets/sounds/general-alert.mp3"
    webhook_url: str | None = None
    webhook_channel_name: str | None = None


def _default_zones() -> list[Zone]:
    return [parse_zone(z) for z in SAMPLE_ZONES]


def _default_animals() -> list[dict[str, Any]]:
    return [dict(a) for a in SAMPLE_ANIMALS]


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        simulation: Simulator settings
        monitoring: Rule engine settings
        notifications: Side channel settings
        zones: Geofenced zones
        animals: Initial fleet, as partial entity dicts
    """
    simulation: SimulationSettings = field(default_factory=SimulationSettings)
    monitoring: MonitoringSettings = field(default_factory=MonitoringSettings)
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    zones: list[Zone] = field(default_factory=_default_zones)
    animals: list[dict[str, Any]] = field(default_factory=_default_animals)


class ConfigError(Exception):
    """Raised when configuration is invalid and strict loading is requested."""


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def validate_zone(zone: Zone, field_name: str) -> list[ValidationError]:
    """Validate a zone's polygon and metadata.

    Pure function.
    """
    errors = []

    if len(zone.boundaries) < 3:
        errors.append(ValidationError(
            field=f"{field_name}.boundaries",
            message=f"Zone '{zone.id}' needs at least 3 vertices, got {len(zone.boundaries)}",
        ))

    for j, vertex in enumerate(zone.boundaries):
        errors.extend(validate_coordinates(
            vertex.latitude, vertex.longitude,
            f"{field_name}.boundaries[{j}]",
        ))

    if zone.type not in ZONE_TYPES:
        errors.append(ValidationError(
            field=f"{field_name}.type",
            message=f"Unknown zone type '{zone.type}'",
        ))

    if zone.risk_level not in RISK_LEVELS:
        errors.append(ValidationError(
            field=f"{field_name}.risk_level",
            message=f"Unknown risk level '{zone.risk_level}'",
        ))

    if zone.population is not None and zone.population < 0:
        errors.append(ValidationError(
            field=f"{field_name}.population",
            message=f"Population must not be negative, got {zone.population}",
        ))

    return errors


def validate_animal(data: dict[str, Any], field_name: str) -> list[ValidationError]:
    """Validate a partial entity dict.

    Pure function. Entity construction coerces bad values, so problems
    here are warnings, not errors.
    """
    errors = []

    battery = data.get("battery_level")
    if isinstance(battery, (int, float)) and not 0 <= battery <= 100:
        errors.append(ValidationError(
            field=f"{field_name}.battery_level",
            message=f"Battery level {battery} out of range [0, 100], will be clamped",
            severity="warning",
        ))

    for key, allowed in (
        ("health", HEALTH_STATES),
        ("gender", GENDERS),
        ("conservation_status", CONSERVATION_STATUSES),
    ):
        value = data.get(key)
        if value is not None and value not in allowed:
            errors.append(ValidationError(
                field=f"{field_name}.{key}",
                message=f"Unknown {key} '{value}', will be set to 'unknown'",
                severity="warning",
            ))

    return errors


def _validate_window(window: timedelta, field_name: str) -> list[ValidationError]:
    if window.total_seconds() <= 0:
        return [ValidationError(
            field=field_name,
            message=f"Dedup window must be positive, got {window}",
        )]
    return []


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    # Validate intervals
    if config.simulation.tick_interval_seconds <= 0:
        errors.append(ValidationError(
            field="simulation.tick_interval_seconds",
            message=f"Tick interval must be positive, got {config.simulation.tick_interval_seconds}",
        ))

    if config.monitoring.evaluation_interval_seconds <= 0:
        errors.append(ValidationError(
            field="monitoring.evaluation_interval_seconds",
            message=f"Evaluation interval must be positive, got {config.monitoring.evaluation_interval_seconds}",
        ))

    if config.simulation.max_track_points < 1:
        errors.append(ValidationError(
            field="simulation.max_track_points",
            message=f"Track cap must be at least 1, got {config.simulation.max_track_points}",
        ))

    if config.monitoring.max_alerts < 1:
        errors.append(ValidationError(
            field="monitoring.max_alerts",
            message=f"Alert cap must be at least 1, got {config.monitoring.max_alerts}",
        ))

    # Validate rule settings
    rules = config.monitoring.rules
    if not 0 <= rules.incident_probability <= 1:
        errors.append(ValidationError(
            field="monitoring.rules.incident_probability",
            message=f"Probability must be in [0, 1], got {rules.incident_probability}",
        ))

    if rules.critical_battery_threshold > rules.low_battery_threshold:
        errors.append(ValidationError(
            field="monitoring.rules",
            message=(
                f"critical_battery_threshold ({rules.critical_battery_threshold}) > "
                f"low_battery_threshold ({rules.low_battery_threshold})"
            ),
        ))

    if rules.near_village_radius_km <= 0:
        errors.append(ValidationError(
            field="monitoring.rules.near_village_radius_km",
            message=f"Radius must be positive, got {rules.near_village_radius_km}",
        ))

    errors.extend(_validate_window(rules.near_village_window, "monitoring.rules.near_village_window"))
    errors.extend(_validate_window(rules.critical_battery_window, "monitoring.rules.critical_battery_window"))
    errors.extend(_validate_window(rules.low_battery_window, "monitoring.rules.low_battery_window"))

    # Validate zones
    seen_zone_ids: set[str] = set()
    for i, zone in enumerate(config.zones):
        errors.extend(validate_zone(zone, f"zones[{i}]"))
        if zone.id in seen_zone_ids:
            errors.append(ValidationError(
                field=f"zones[{i}].id",
                message=f"Duplicate zone id '{zone.id}'",
            ))
        seen_zone_ids.add(zone.id)

    if not any(z.type == "village" for z in config.zones):
        errors.append(ValidationError(
            field="zones",
            message="No village zones configured, near-village rule will never fire",
            severity="warning",
        ))

    # Validate animals
    seen_animal_ids: set[str] = set()
    for i, animal in enumerate(config.animals):
        errors.extend(validate_animal(animal, f"animals[{i}]"))
        animal_id = animal.get("id")
        if animal_id is not None and animal_id in seen_animal_ids:
            errors.append(ValidationError(
                field=f"animals[{i}].id",
                message=f"Duplicate animal id '{animal_id}', a new id will be generated",
                severity="warning",
            ))
        seen_animal_ids.add(animal_id)

    if config.notifications.webhook_url and config.notifications.webhook_url.startswith("${"):
        errors.append(ValidationError(
            field="notifications.webhook_url",
            message="Webhook URL not resolved (still contains placeholder)",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
