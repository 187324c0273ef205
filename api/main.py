"""Wildlife Control Panel API - FastAPI service.

HTTP surface over a single ControlPanel session: read the fleet, tracks,
zones and alerts, and issue the operator commands. The session is built
when the app is, so run with ``uvicorn --factory api.main:create_app``.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from src.control_panel import ControlPanel
from src.core.alert import PRIORITIES, alert_to_dict
from src.core.entity import entity_to_dict, track_to_dict
from src.core.rules import INCIDENT_TYPES
from src.core.scenarios import SimulationScenario
from src.core.stats import stats_to_dict
from src.core.zones import zone_to_dict
from src.shell.config_loader import load_config, load_config_from_env


log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ===== Request Models =====

class PositionIn(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class AnimalCreate(BaseModel):
    id: str | None = None
    name: str | None = None
    species: str | None = None
    position: PositionIn | None = None
    collar_id: str | None = None
    is_active: bool | None = None
    battery_level: float | None = None
    speed_kmh: float | None = None
    heading_deg: float | None = None
    health: str | None = None
    age_years: int | None = None
    gender: str | None = None
    conservation_status: str | None = None


class AlertTrigger(BaseModel):
    type: str | None = None
    zone_id: str | None = None
    priority: str | None = None


class ScenarioStart(BaseModel):
    speed: float = Field(default=1.0, gt=0)


def _scenario_to_dict(scenario: SimulationScenario) -> dict[str, Any]:
    return {
        "id": scenario.id,
        "name": scenario.name,
        "description": scenario.description,
        "duration_minutes": scenario.duration_minutes,
        "events": [
            {
                "id": e.id,
                "type": e.type,
                "trigger_minute": e.trigger_minute,
                "description": e.description,
            }
            for e in scenario.events
        ],
    }


def _panel_from_environment() -> ControlPanel:
    config = load_config_from_env(load_config())
    return ControlPanel(config)


def create_app(panel: ControlPanel | None = None) -> FastAPI:
    """Build the API around a control panel session.

    Args:
        panel: Session to serve (built from CONFIG_PATH and env if not provided)

    Returns:
        FastAPI application
    """
    panel = panel or _panel_from_environment()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        panel.shutdown()

    app = FastAPI(
        title="Wildlife Control Panel API",
        description="Simulated collar telemetry, geofenced zones and alerts",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.panel = panel

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:4200",
            "http://localhost:3000",
        ],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # ----- Health and status -----

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/api/status")
    async def get_status():
        return panel.status()

    # ----- Animals and tracks -----

    @app.get("/api/animals")
    async def list_animals():
        return [entity_to_dict(e) for e in panel.entities()]

    @app.get("/api/animals/{animal_id}")
    async def get_animal(animal_id: str):
        entity = panel.get_entity(animal_id)
        if entity is None:
            raise HTTPException(status_code=404, detail=f"Animal '{animal_id}' not found")
        return entity_to_dict(entity)

    @app.post("/api/animals", status_code=201)
    async def create_animal(animal: AnimalCreate):
        partial = animal.model_dump(exclude_none=True)
        entity = panel.add_entity(partial)
        return entity_to_dict(entity)

    @app.get("/api/tracks")
    async def list_tracks():
        return [track_to_dict(t) for t in panel.tracks()]

    @app.get("/api/tracks/{animal_id}")
    async def get_track(animal_id: str):
        track = panel.get_track(animal_id)
        if track is None:
            raise HTTPException(status_code=404, detail=f"No track for animal '{animal_id}'")
        return track_to_dict(track)

    # ----- Zones -----

    @app.get("/api/zones")
    async def list_zones():
        return [zone_to_dict(z) for z in panel.zones()]

    @app.get("/api/zones/stats")
    async def get_zone_stats():
        stats = panel.zone_stats()
        return {
            "total_zones": stats.total_zones,
            "active_zones": stats.active_zones,
            "by_type": stats.by_type,
            "by_risk_level": stats.by_risk_level,
            "total_population": stats.total_population,
        }

    # ----- Alerts -----

    @app.get("/api/alerts")
    async def list_alerts(active_only: bool = False):
        alerts = panel.alerts()
        if active_only:
            alerts = tuple(a for a in alerts if a.is_active)
        return [alert_to_dict(a) for a in alerts]

    @app.get("/api/alerts/stats")
    async def get_alert_stats():
        return stats_to_dict(panel.alert_stats())

    @app.post("/api/alerts/read-all")
    async def mark_all_alerts_read():
        return {"changed": panel.mark_all_as_read()}

    @app.post("/api/alerts/trigger", status_code=201)
    async def trigger_alert(request: AlertTrigger):
        if request.type is not None and request.type not in INCIDENT_TYPES:
            raise HTTPException(status_code=422, detail=f"Unknown incident type '{request.type}'")
        if request.priority is not None and request.priority not in PRIORITIES:
            raise HTTPException(status_code=422, detail=f"Unknown priority '{request.priority}'")
        if request.zone_id is not None and panel.registry.get(request.zone_id) is None:
            raise HTTPException(status_code=404, detail=f"Zone '{request.zone_id}' not found")

        alert = panel.trigger_incident(request.type, request.zone_id, request.priority)
        if alert is None:
            raise HTTPException(status_code=409, detail="No zones configured")
        return alert_to_dict(alert)

    @app.post("/api/alerts/{alert_id}/read")
    async def mark_alert_read(alert_id: int):
        return {"changed": panel.mark_as_read(alert_id)}

    @app.post("/api/alerts/{alert_id}/dismiss")
    async def dismiss_alert(alert_id: int):
        return {"changed": panel.dismiss(alert_id)}

    # ----- Simulation and monitoring -----

    @app.post("/api/simulation/start")
    async def start_simulation():
        return {"changed": panel.start_simulation(), "running": True}

    @app.post("/api/simulation/stop")
    async def stop_simulation():
        return {"changed": panel.stop_simulation(), "running": False}

    @app.post("/api/monitoring/start")
    async def start_monitoring():
        return {"changed": panel.start_monitoring(), "running": True}

    @app.post("/api/monitoring/stop")
    async def stop_monitoring():
        return {"changed": panel.stop_monitoring(), "running": False}

    # ----- Scenarios -----

    @app.get("/api/scenarios")
    async def list_scenarios():
        return [_scenario_to_dict(s) for s in panel.scenarios.list_scenarios()]

    @app.post("/api/scenarios/stop")
    async def stop_scenario():
        return {"changed": panel.stop_scenario()}

    @app.post("/api/scenarios/{scenario_id}/start")
    async def start_scenario(scenario_id: str, request: ScenarioStart | None = None):
        speed = request.speed if request else 1.0
        if not panel.start_scenario(scenario_id, speed):
            raise HTTPException(status_code=404, detail=f"Scenario '{scenario_id}' not found")
        return panel.scenarios.status()

    return app
