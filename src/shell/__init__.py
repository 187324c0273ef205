"""Imperative Shell - State, threads and side effects.

This module contains all code with state or I/O:
- Telemetry simulator (fleet state, tick thread)
- Alert engine (alert list, evaluation thread)
- Publication streams
- Slack webhook client (HTTP)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from src.shell.alert_engine import AlertEngine
from src.shell.config_loader import load_config
from src.shell.publisher import Streams, Topic
from src.shell.simulator import TelemetrySimulator
from src.shell.slack_client import SlackClient

__all__ = [
    "AlertEngine",
    "TelemetrySimulator",
    "Streams",
    "Topic",
    "SlackClient",
    "load_config",
]
