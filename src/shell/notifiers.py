"""High-priority alert notifiers - Imperative Shell.

Listeners registered with AlertEngine.add_high_priority_listener. They
run after the engine has released its lock; whatever they do, failures
stay here and never reach the alert path.
"""

import logging
from pathlib import Path
from typing import Callable, Sequence

from src.core.alert import Alert
from src.core.formatter import format_alert_summary
from src.core.zones import Zone
from src.shell.slack_client import SlackClient, SlackResponse


logger = logging.getLogger(__name__)


class SoundNotifier:
    """Audible cue for high-priority alerts.

    There is no audio device on a server, so "playing" means handing the
    asset to an optional player callable. A missing asset is reported
    once and the notifier keeps logging alerts.
    """

    def __init__(
        self,
        asset_path: str | Path | None,
        player: Callable[[Path], None] | None = None,
    ) -> None:
        self.asset_path = Path(asset_path) if asset_path else None
        self.player = player
        self.played = 0
        self._missing_reported = False

    def on_high_priority_alert(self, alert: Alert) -> None:
        logger.warning("HIGH PRIORITY %s", format_alert_summary(alert))

        if self.asset_path is None or not self.asset_path.exists():
            if not self._missing_reported:
                logger.warning(
                    "Alert sound %s not available, continuing without sound",
                    self.asset_path,
                )
                self._missing_reported = True
            return

        if self.player is None:
            return

        try:
            self.player(self.asset_path)
            self.played += 1
        except Exception:
            logger.exception("Failed to play alert sound %s", self.asset_path)


class WebhookNotifier:
    """Forwards high-priority alerts to a Slack-compatible webhook."""

    def __init__(
        self,
        client: SlackClient,
        zones: Sequence[Zone] = (),
        channel_name: str | None = None,
    ) -> None:
        """Initialize notifier.

        Args:
            client: Webhook client to post with
            zones: Known zones, listed in messages when near the alert
            channel_name: Label shown in webhook messages
        """
        self.client = client
        self.zones = tuple(zones)
        self.channel_name = channel_name
        self.sent = 0
        self.failed = 0

    @classmethod
    def from_url(
        cls,
        webhook_url: str,
        zones: Sequence[Zone] = (),
        channel_name: str | None = None,
    ) -> "WebhookNotifier":
        return cls(SlackClient(webhook_url), zones=zones, channel_name=channel_name)

    def on_high_priority_alert(self, alert: Alert) -> SlackResponse:
        response = self.client.send_alert(
            alert,
            zones=self.zones,
            channel_name=self.channel_name,
        )

        if response.success:
            self.sent += 1
        else:
            self.failed += 1
            logger.warning(
                "Failed to deliver alert #%d to webhook: %s",
                alert.id, response.error,
            )
        return response
