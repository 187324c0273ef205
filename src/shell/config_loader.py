"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, SimulationSettings, ...) are defined in src/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from dataclasses import replace
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

from src.core.config import (
    Config,
    ConfigError,
    MonitoringSettings,
    NotificationSettings,
    SimulationSettings,
    validate_config,
)
from src.core.rules import RuleSettings
from src.core.zones import parse_zone


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"


def _resolve_value(value: Any) -> Any:
    """Resolve a ``${VAR}`` environment placeholder.

    Unset variables leave the placeholder in place (validation reports it).

    Args:
        value: Value to resolve

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _minutes(data: dict[str, Any], key: str, default: timedelta) -> timedelta:
    if key not in data:
        return default
    return timedelta(minutes=float(data[key]))


def _parse_rules(data: dict[str, Any]) -> RuleSettings:
    """Parse rule thresholds; windows are given in minutes."""
    defaults = RuleSettings()
    return RuleSettings(
        near_village_radius_km=float(data.get("near_village_radius_km", defaults.near_village_radius_km)),
        near_village_window=_minutes(data, "near_village_window_minutes", defaults.near_village_window),
        critical_battery_threshold=float(data.get("critical_battery_threshold", defaults.critical_battery_threshold)),
        critical_battery_window=_minutes(data, "critical_battery_window_minutes", defaults.critical_battery_window),
        low_battery_threshold=float(data.get("low_battery_threshold", defaults.low_battery_threshold)),
        low_battery_window=_minutes(data, "low_battery_window_minutes", defaults.low_battery_window),
        incident_probability=float(data.get("incident_probability", defaults.incident_probability)),
        incident_jitter_deg=float(data.get("incident_jitter_deg", defaults.incident_jitter_deg)),
        incident_high_priority_chance=float(
            data.get("incident_high_priority_chance", defaults.incident_high_priority_chance)
        ),
    )


def _parse_simulation(data: dict[str, Any]) -> SimulationSettings:
    defaults = SimulationSettings()
    seed = data.get("seed")
    return SimulationSettings(
        tick_interval_seconds=float(data.get("tick_interval_seconds", defaults.tick_interval_seconds)),
        max_step_deg=float(data.get("max_step_deg", defaults.max_step_deg)),
        max_track_points=int(data.get("max_track_points", defaults.max_track_points)),
        seed=int(seed) if seed is not None else None,
    )


def _parse_monitoring(data: dict[str, Any]) -> MonitoringSettings:
    defaults = MonitoringSettings()
    return MonitoringSettings(
        evaluation_interval_seconds=float(
            data.get("evaluation_interval_seconds", defaults.evaluation_interval_seconds)
        ),
        max_alerts=int(data.get("max_alerts", defaults.max_alerts)),
        rules=_parse_rules(data.get("rules") or {}),
        seed_sample_alerts=bool(data.get("seed_sample_alerts", defaults.seed_sample_alerts)),
    )


def _parse_notifications(data: dict[str, Any]) -> NotificationSettings:
    defaults = NotificationSettings()
    webhook_url = _resolve_value(data.get("webhook_url"))
    if isinstance(webhook_url, str) and webhook_url.startswith("${"):
        # Unresolved placeholder, run without the webhook
        webhook_url = None
    return NotificationSettings(
        sound_asset_path=data.get("sound_asset_path", defaults.sound_asset_path),
        webhook_url=webhook_url or None,
        webhook_channel_name=data.get("webhook_channel_name"),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).
    Sections that are absent fall back to defaults; an explicit empty
    ``zones`` or ``animals`` list means none.

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    config = Config(
        simulation=_parse_simulation(data.get("simulation") or {}),
        monitoring=_parse_monitoring(data.get("monitoring") or {}),
        notifications=_parse_notifications(data.get("notifications") or {}),
    )

    if "zones" in data:
        config.zones = [parse_zone(z) for z in data["zones"] or []]

    if "animals" in data:
        config.animals = [dict(a) for a in data["animals"] or []]

    return config


def _check(config: Config, strict: bool) -> Config:
    result = validate_config(config)

    for warning in result.warnings:
        logger.warning("Config warning: %s: %s", warning.field, warning.message)

    for error in result.critical_errors:
        logger.error("Config error: %s: %s", error.field, error.message)

    if strict and not result.valid:
        raise ConfigError(
            "; ".join(f"{e.field}: {e.message}" for e in result.critical_errors)
        )

    return config


def load_config(config_path: str | Path | None = None, strict: bool = False) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.
        strict: Raise ConfigError when validation finds errors

    Returns:
        Parsed Config object

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        ConfigError: If strict and the configuration is invalid
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        if explicit:
            raise FileNotFoundError(f"Config file not found: {path}")
        logger.warning("Config file not found: %s, using defaults", path)
        return _check(Config(), strict)

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return _check(Config(), strict)

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: %d zones, %d animals",
        len(config.zones),
        len(config.animals),
    )

    return _check(config, strict)


def load_config_from_env(base: Config | None = None) -> Config:
    """Apply environment variable overrides to a configuration.

    Useful for container deployments that only tweak a few settings.

    Environment variables:
        TICK_INTERVAL_SECONDS: Simulator tick interval
        MONITORING_INTERVAL_SECONDS: Rule evaluation interval
        INCIDENT_PROBABILITY: Random incident chance per pass
        ALERT_WEBHOOK_URL: Webhook for high-priority alerts
        SOUND_ASSET_PATH: Alert sound file

    Args:
        base: Configuration to override (defaults if not provided)

    Returns:
        Config object with overrides applied
    """
    config = base or Config()

    tick = os.environ.get("TICK_INTERVAL_SECONDS")
    if tick:
        config.simulation.tick_interval_seconds = float(tick)

    interval = os.environ.get("MONITORING_INTERVAL_SECONDS")
    if interval:
        config.monitoring.evaluation_interval_seconds = float(interval)

    probability = os.environ.get("INCIDENT_PROBABILITY")
    if probability:
        config.monitoring.rules = replace(
            config.monitoring.rules, incident_probability=float(probability)
        )

    webhook_url = os.environ.get("ALERT_WEBHOOK_URL")
    if webhook_url:
        config.notifications.webhook_url = webhook_url

    sound = os.environ.get("SOUND_ASSET_PATH")
    if sound:
        config.notifications.sound_asset_path = sound

    return config
