"""Built-in demo data - Pure data.

The default fleet and zones around Nairobi National Park, plus the
demonstration alerts a fresh training session can be seeded with. These
are plain dicts in config format so they go through the same parsing as
YAML-loaded data.
"""

from datetime import datetime, timedelta

from src.core.alert import AlertDraft, AlertLocation


SAMPLE_ANIMALS = [
    {
        "id": "elephant-001",
        "name": "Tembo",
        "species": "African Elephant",
        "position": {"latitude": -1.2921, "longitude": 36.8219},
        "collar_id": "COL-001",
        "battery_level": 85,
        "speed_kmh": 5.2,
        "heading_deg": 180,
        "health": "healthy",
        "age_years": 25,
        "gender": "male",
        "conservation_status": "endangered",
    },
    {
        "id": "lion-001",
        "name": "Simba",
        "species": "African Lion",
        "position": {"latitude": -1.2845, "longitude": 36.8156},
        "collar_id": "COL-002",
        "battery_level": 72,
        "speed_kmh": 8.5,
        "heading_deg": 45,
        "health": "healthy",
        "age_years": 8,
        "gender": "male",
        "conservation_status": "vulnerable",
    },
    {
        "id": "rhino-001",
        "name": "Kifaru",
        "species": "Black Rhinoceros",
        "position": {"latitude": -1.2756, "longitude": 36.8089},
        "collar_id": "COL-003",
        "battery_level": 91,
        "speed_kmh": 3.1,
        "heading_deg": 270,
        "health": "healthy",
        "age_years": 15,
        "gender": "female",
        "conservation_status": "endangered",
    },
    {
        "id": "giraffe-001",
        "name": "Twiga",
        "species": "Masai Giraffe",
        "position": {"latitude": -1.2689, "longitude": 36.8203},
        "collar_id": "COL-004",
        "battery_level": 68,
        "speed_kmh": 12.3,
        "heading_deg": 90,
        "health": "healthy",
        "age_years": 12,
        "gender": "female",
        "conservation_status": "vulnerable",
    },
    {
        "id": "leopard-001",
        "name": "Chui",
        "species": "African Leopard",
        "position": {"latitude": -1.2634, "longitude": 36.8267},
        "collar_id": "COL-005",
        "battery_level": 45,
        "speed_kmh": 15.7,
        "heading_deg": 135,
        "health": "healthy",
        "age_years": 6,
        "gender": "female",
        "conservation_status": "vulnerable",
    },
]


SAMPLE_ZONES = [
    {
        "id": "village-001",
        "name": "Village A",
        "type": "village",
        "boundaries": [
            {"latitude": -1.2900, "longitude": 36.8200},
            {"latitude": -1.2950, "longitude": 36.8200},
            {"latitude": -1.2950, "longitude": 36.8250},
            {"latitude": -1.2900, "longitude": 36.8250},
        ],
        "description": "Local farming community",
        "alert_radius_m": 500,
        "risk_level": "high",
        "population": 1200,
    },
    {
        "id": "village-002",
        "name": "Village B",
        "type": "village",
        "boundaries": [
            {"latitude": -1.2650, "longitude": 36.8100},
            {"latitude": -1.2700, "longitude": 36.8100},
            {"latitude": -1.2700, "longitude": 36.8150},
            {"latitude": -1.2650, "longitude": 36.8150},
        ],
        "description": "Pastoral community",
        "alert_radius_m": 700,
        "risk_level": "medium",
        "population": 800,
    },
    {
        "id": "protected-001",
        "name": "National Reserve",
        "type": "protected_area",
        "boundaries": [
            {"latitude": -1.2800, "longitude": 36.8000},
            {"latitude": -1.2600, "longitude": 36.8000},
            {"latitude": -1.2600, "longitude": 36.8300},
            {"latitude": -1.2800, "longitude": 36.8300},
        ],
        "description": "Protected wildlife area",
        "alert_radius_m": 1000,
        "risk_level": "low",
    },
]


def sample_alert_drafts(now: datetime) -> list[tuple[AlertDraft, datetime]]:
    """Demonstration alerts with their backdated creation times.

    Returned oldest first, so inserting them in order leaves the list
    newest-first.

    Args:
        now: Reference time the ages are measured from

    Returns:
        List of (draft, timestamp) pairs
    """
    samples = [
        (
            AlertDraft(
                type="animal_near_village",
                priority="medium",
                title="Lion pride spotted near Village C",
                message="A pride of 4 lions has been seen 2km from Village C. Monitoring situation.",
                location=AlertLocation(-1.2650, 36.8050, "Village C"),
                source="ranger_report",
                metadata={"animal_type": "lion", "pride_size": 4, "distance": "2km"},
            ),
            timedelta(hours=1),
        ),
        (
            AlertDraft(
                type="collar_malfunction",
                priority="medium",
                title="GPS collar battery low",
                message="Collar COL-003 (Kifaru - Black Rhinoceros) battery at 15%. Maintenance required.",
                location=AlertLocation(-1.2756, 36.8089, "Reserve Zone B"),
                source="gps_collar",
                metadata={"animal_type": "rhino", "battery_level": 15, "collar_id": "COL-003"},
            ),
            timedelta(minutes=30),
        ),
        (
            AlertDraft(
                type="poacher_detected",
                priority="critical",
                title="Suspicious activity detected",
                message="Camera trap captured images of armed individuals in protected area. Rangers notified.",
                location=AlertLocation(-1.2720, 36.8150, "National Reserve"),
                source="camera_trap",
                metadata={"threat_level": "high", "rangers_notified": True},
            ),
            timedelta(minutes=15),
        ),
        (
            AlertDraft(
                type="fence_breach",
                priority="high",
                title="Perimeter fence damaged",
                message="Section 12-B of perimeter fence has been damaged, possibly by elephants. Immediate repair needed.",
                location=AlertLocation(-1.2800, 36.8100, "Fence Section 12-B"),
                source="sensor",
                metadata={"section_id": "12-B", "damage_level": "major"},
            ),
            timedelta(minutes=10),
        ),
        (
            AlertDraft(
                type="animal_near_village",
                priority="high",
                title="Elephant herd approaching Village A",
                message="A herd of 6 elephants has been detected 800m from Village A. Estimated arrival in 20 minutes.",
                location=AlertLocation(-1.2890, 36.8210, "Village A"),
                source="gps_collar",
                metadata={"animal_type": "elephant", "herd_size": 6},
            ),
            timedelta(minutes=5),
        ),
        (
            AlertDraft(
                type="wildlife_conflict",
                priority="critical",
                title="Human-wildlife conflict reported",
                message="Farmers report crop damage by buffalo herd. Rangers dispatched to resolve conflict.",
                location=AlertLocation(-1.2950, 36.8300, "Farming Area C"),
                source="villager_report",
                metadata={"conflict_type": "crop_damage", "animal_type": "buffalo"},
            ),
            timedelta(0),
        ),
    ]

    return [(draft, now - age) for draft, age in samples]
