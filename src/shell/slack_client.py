"""Slack-compatible webhook client - Imperative Shell.

Posts alert payloads to an incoming webhook. All HTTP I/O for the
notification side channel is contained here; the payload itself is built
by format_slack_alert in src/core/formatter.py.
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence

import requests

from src.core.alert import Alert
from src.core.formatter import format_slack_alert, get_nearby_zones
from src.core.zones import Zone


logger = logging.getLogger(__name__)


# Default timeout for webhook requests (seconds)
DEFAULT_TIMEOUT = 10


@dataclass
class SlackResponse:
    """Outcome of a webhook post.

    Attributes:
        success: Whether the webhook accepted the message
        status_code: HTTP status code (0 when no response was received)
        error: Error message if failed
        retry_after: Seconds to wait, when the webhook rate-limited us
    """
    success: bool
    status_code: int
    error: str | None = None
    retry_after: float | None = None


class SlackClient:
    """Client for a single incoming webhook.

    Never raises for transport problems; every failure comes back as an
    unsuccessful SlackResponse so callers on the alert path stay simple.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize webhook client.

        Args:
            webhook_url: Incoming webhook URL
            timeout: Request timeout in seconds
            session: Optional shared requests session
        """
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def post(self, payload: dict[str, Any]) -> SlackResponse:
        """Send a raw payload.

        Args:
            payload: Message payload (blocks plus fallback text)

        Returns:
            SlackResponse indicating success or failure
        """
        try:
            response = self.session.post(
                self.webhook_url,
                json=payload,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )
        except requests.Timeout:
            logger.error("Webhook request timed out")
            return SlackResponse(success=False, status_code=0, error="Request timed out")
        except requests.RequestException as e:
            logger.error("Webhook request failed: %s", str(e))
            return SlackResponse(success=False, status_code=0, error=str(e))

        if response.status_code == 200:
            return SlackResponse(success=True, status_code=200)

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            logger.warning("Webhook rate limited, retry after %ss", retry_after)
            return SlackResponse(
                success=False,
                status_code=429,
                error="Rate limited",
                retry_after=retry_after,
            )

        logger.warning(
            "Webhook returned non-200: %d - %s",
            response.status_code,
            response.text,
        )
        return SlackResponse(
            success=False,
            status_code=response.status_code,
            error=response.text,
        )

    def send_alert(
        self,
        alert: Alert,
        zones: Sequence[Zone] = (),
        channel_name: str | None = None,
    ) -> SlackResponse:
        """Format and send one alert.

        Args:
            alert: Alert to send
            zones: Known zones, used to list those near the alert
            channel_name: Label shown in the message context

        Returns:
            SlackResponse indicating success or failure
        """
        nearby = None
        if zones:
            nearby = get_nearby_zones(
                alert.location.latitude,
                alert.location.longitude,
                zones,
            )

        payload = format_slack_alert(alert, channel_name=channel_name, nearby_zones=nearby)
        logger.info("Sending alert #%d to webhook", alert.id)
        return self.post(payload)


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
