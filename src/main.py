"""Command-line entry point.

Runs a control panel session in the foreground: loads configuration,
starts the simulation and monitoring tickers and logs alerts as they are
created, until interrupted or the requested duration elapses. With
--serve it runs the HTTP API instead.
"""

import argparse
import logging
import os
import signal
import threading
from typing import Any

from src.control_panel import ControlPanel
from src.core.formatter import format_alert_summary
from src.shell.config_loader import load_config, load_config_from_env


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _get_config(config_path: str | None, strict: bool):
    """Load configuration from file, then apply environment overrides."""
    return load_config_from_env(load_config(config_path, strict=strict))


def _log_new_alerts(panel: ControlPanel) -> None:
    seen = {a.id for a in panel.alerts()}

    def on_alerts(alerts: Any) -> None:
        for alert in reversed(alerts):
            if alert.id not in seen:
                seen.add(alert.id)
                logger.info("New alert: %s", format_alert_summary(alert))

    panel.streams.alerts.subscribe(on_alerts, replay=False)


def run(args: argparse.Namespace) -> int:
    """Run a session until stopped.

    Returns:
        Process exit code
    """
    config = _get_config(args.config, args.strict)
    if args.seed is not None:
        config.simulation.seed = args.seed
    if args.sample_alerts:
        config.monitoring.seed_sample_alerts = True

    stop_event = threading.Event()

    def handle_signal(signum: int, frame: Any) -> None:
        logger.info("Received signal %d, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    with ControlPanel(config) as panel:
        _log_new_alerts(panel)
        panel.start_simulation()
        panel.start_monitoring()

        if args.scenario and not panel.start_scenario(args.scenario, args.speed):
            logger.error("Unknown scenario: %s", args.scenario)
            return 2

        stop_event.wait(args.duration or None)

        status = panel.status()
        logger.info(
            "Completed: %d ticks, %d alerts (%d unread)",
            status["tick_count"],
            status["alerts"],
            status["unread_alerts"],
        )

    return 0


def serve(args: argparse.Namespace) -> int:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("api.main:create_app", factory=True, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Wildlife monitoring control panel",
    )
    parser.add_argument(
        "--config",
        help="Path to YAML config (default: CONFIG_PATH or config/config.yaml)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error if the configuration is invalid",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0,
        help="Seconds to run (0 = until interrupted)",
    )
    parser.add_argument("--seed", type=int, help="Random seed for a reproducible run")
    parser.add_argument(
        "--sample-alerts",
        action="store_true",
        help="Start with the demonstration alerts",
    )
    parser.add_argument("--scenario", help="Training scenario to play")
    parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Scenario speed multiplier",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API instead of a foreground session",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.serve:
        return serve(args)
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
