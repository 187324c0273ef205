#!/usr/bin/env python3
"""Send a test alert to the configured webhook.

⚠️  WARNING: Without --dry-run this posts to the real webhook channel!

Builds a synthetic incident in one of the configured zones and sends it
with the same formatting as production high-priority alerts.

Usage:
    # Dry run (print the payload, no send)
    python scripts/send_test_alert.py --dry-run

    # Send a poacher alert for Village A
    python scripts/send_test_alert.py --type poacher_detected --zone village-001

    # Override the webhook
    python scripts/send_test_alert.py --webhook-url https://hooks.slack.com/...

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    ALERT_WEBHOOK_URL: Webhook URL (overrides the config file)
"""

import argparse
import json
import logging
import os
import random
import sys
from datetime import datetime, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.alert import materialize_alert
from src.core.formatter import format_slack_alert, get_nearby_zones
from src.core.rules import INCIDENT_TYPES, build_incident
from src.core.zones import ZoneRegistry
from src.shell.config_loader import load_config, load_config_from_env
from src.shell.slack_client import SlackClient

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Send a test alert to the webhook")
    parser.add_argument("--type", choices=INCIDENT_TYPES, default="emergency")
    parser.add_argument("--zone", help="Zone ID (default: first configured zone)")
    parser.add_argument("--priority", default="high", choices=("high", "critical"))
    parser.add_argument("--webhook-url", help="Webhook URL (default: from config)")
    parser.add_argument("--dry-run", action="store_true", help="Print payload, do not send")
    args = parser.parse_args()

    config = load_config_from_env(load_config())
    registry = ZoneRegistry(config.zones)

    if not len(registry):
        logger.error("No zones configured")
        return 1

    zone = registry.get(args.zone) if args.zone else registry.zones()[0]
    if zone is None:
        logger.error("Unknown zone: %s", args.zone)
        return 1

    draft = build_incident(
        args.type,
        zone,
        random.Random(),
        config.monitoring.rules,
        priority=args.priority,
    )
    alert = materialize_alert(draft, 0, datetime.now(timezone.utc))

    channel_name = config.notifications.webhook_channel_name
    if args.dry_run:
        nearby = get_nearby_zones(alert.location.latitude, alert.location.longitude, registry.zones())
        payload = format_slack_alert(alert, channel_name=channel_name, nearby_zones=nearby)
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    webhook_url = args.webhook_url or config.notifications.webhook_url
    if not webhook_url:
        logger.error("No webhook URL configured (set ALERT_WEBHOOK_URL or --webhook-url)")
        return 1

    response = SlackClient(webhook_url).send_alert(
        alert, zones=registry.zones(), channel_name=channel_name
    )
    if response.success:
        logger.info("  ✓ Test alert sent successfully")
        return 0

    logger.error("  ✗ Failed to send test alert: %s", response.error)
    return 1


if __name__ == "__main__":
    sys.exit(main())
