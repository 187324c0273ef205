"""Message formatting - Pure functions.

This module formats alert titles, messages and notification payloads.
All functions are pure with no side effects.
"""

from typing import Any

from src.core.alert import Alert
from src.core.entity import Position, TrackedEntity
from src.core.geo import distance_to_zone
from src.core.zones import Zone


INCIDENT_TITLES = {
    "poacher_detected": "Suspicious Activity Detected",
    "fence_breach": "Perimeter Breach Alert",
    "wildlife_conflict": "Human-Wildlife Conflict",
    "emergency": "Emergency Situation",
}

INCIDENT_MESSAGES = {
    "poacher_detected": (
        "Camera trap detected suspicious human activity near {zone}. "
        "Possible poaching attempt."
    ),
    "fence_breach": (
        "Perimeter fence breach detected in {zone} area. "
        "Wildlife may have crossed into restricted zone."
    ),
    "wildlife_conflict": (
        "Human-wildlife conflict reported near {zone}. "
        "Rangers dispatched to investigate."
    ),
    "emergency": (
        "Emergency situation reported in {zone} area. "
        "Immediate response required."
    ),
}


def get_priority_emoji(priority: str) -> str:
    """Get an emoji representing alert priority.

    Pure function.
    """
    if priority == "critical":
        return "🚨"
    elif priority == "high":
        return "⚠️"
    elif priority == "medium":
        return "🔶"
    else:
        return "🔹"


def format_battery(level: float | None) -> str:
    """Format a battery level as a whole percentage."""
    if level is None:
        return "unknown"
    return f"{level:.0f}%"


def format_near_village_title(entity: TrackedEntity, zone: Zone) -> str:
    """Title for an animal-near-village alert."""
    return f"{entity.species} near {zone.name}"


def format_near_village_message(
    entity: TrackedEntity,
    zone: Zone,
    distance_km: float,
    radius_km: float = 1.0,
) -> str:
    """Message for an animal-near-village alert.

    Pure function. Embeds the village population and centroid distance.
    """
    population = zone.population if zone.population is not None else "unknown"
    return (
        f"{entity.name} ({entity.species}) has been detected within "
        f"{radius_km:g}km of {zone.name} ({distance_km:.2f}km from its center). "
        f"Population at risk: {population} people."
    )


def format_battery_title(critical: bool) -> str:
    """Title for a collar battery alert."""
    return "Collar Battery Critical" if critical else "Collar Battery Low"


def format_battery_message(entity: TrackedEntity, critical: bool) -> str:
    """Message for a collar battery alert."""
    level = format_battery(entity.battery_level)
    if critical:
        return (
            f"GPS collar for {entity.name} ({entity.species}) has critical "
            f"battery level: {level}"
        )
    return (
        f"GPS collar for {entity.name} ({entity.species}) has low "
        f"battery: {level}"
    )


def format_incident_title(alert_type: str) -> str:
    """Title for an injected incident alert."""
    return INCIDENT_TITLES.get(alert_type, "Alert")


def format_incident_message(alert_type: str, zone_name: str) -> str:
    """Message for an injected incident alert."""
    template = INCIDENT_MESSAGES.get(alert_type)
    if template is None:
        return "Alert generated"
    return template.format(zone=zone_name)


def format_alert_summary(alert: Alert) -> str:
    """Format a one-line summary of an alert.

    Pure function.

    Args:
        alert: Alert to summarize

    Returns:
        One-line summary string
    """
    time_str = alert.timestamp.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    place = alert.location.name or (
        f"{alert.location.latitude:.4f}, {alert.location.longitude:.4f}"
    )
    return (
        f"#{alert.id} [{alert.priority.upper()}] {alert.title} - "
        f"{place} ({time_str})"
    )


def format_slack_alert(
    alert: Alert,
    channel_name: str | None = None,
    nearby_zones: list[tuple[Zone, float]] | None = None,
) -> dict[str, Any]:
    """Format an alert as a Slack message payload.

    Pure function.

    Args:
        alert: Alert to format
        channel_name: Optional channel name for context
        nearby_zones: Optional list of (Zone, distance_km) tuples

    Returns:
        Slack message payload dict
    """
    emoji = get_priority_emoji(alert.priority)
    lat, lon = alert.location.latitude, alert.location.longitude

    # Google Maps link for the location
    maps_url = f"https://www.google.com/maps?q={lat},{lon}"
    place = alert.location.name or f"{lat:.4f}, {lon:.4f}"

    text = f"{emoji} *{alert.title}* - {place}"

    blocks: list[dict[str, Any]] = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": f"{emoji} {alert.title}",
            },
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"{alert.message}\n<{maps_url}|{place}>",
            },
        },
    ]

    details = [
        f"*Priority:* {alert.priority.upper()}",
        f"*Source:* {alert.source.replace('_', ' ')}",
    ]
    if alert.animal_id:
        details.append(f"*Animal:* {alert.animal_id}")
    if "battery_level" in alert.metadata:
        details.append(f"🔋 Battery: {format_battery(alert.metadata['battery_level'])}")

    blocks.append({
        "type": "section",
        "text": {
            "type": "mrkdwn",
            "text": "\n".join(details),
        },
    })

    # Add nearby zones if provided
    if nearby_zones:
        zone_lines = []
        for zone, distance in nearby_zones:
            zone_lines.append(f"• {zone.name}: {distance:.1f} km away")

        blocks.append({
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*Nearby Zones:*\n" + "\n".join(zone_lines),
            },
        })

    footer = f"Alert #{alert.id}"
    if channel_name:
        footer = f"{footer} • {channel_name}"
    blocks.append({
        "type": "context",
        "elements": [{"type": "mrkdwn", "text": footer}],
    })

    blocks.append({"type": "divider"})

    return {
        "text": text,
        "blocks": blocks,
    }


def get_nearby_zones(
    latitude: float,
    longitude: float,
    zones: list[Zone] | tuple[Zone, ...],
    max_distance_km: float = 5.0,
) -> list[tuple[Zone, float]]:
    """Get zones whose centroid is near a point, sorted by distance.

    Pure function.

    Args:
        latitude: Point latitude
        longitude: Point longitude
        zones: Zones to consider
        max_distance_km: Maximum distance to include

    Returns:
        List of (Zone, distance) tuples, sorted by distance
    """
    nearby = []
    for zone in zones:
        distance = distance_to_zone(Position(latitude, longitude), zone)
        if distance <= max_distance_km:
            nearby.append((zone, distance))

    return sorted(nearby, key=lambda x: x[1])
