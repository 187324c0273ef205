"""Alert statistics - Pure functions.

Derives aggregate counts from the canonical alert list. Stats are always
recomputed wholesale over active alerts; there is no incremental state.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Any, Iterable

from src.core.alert import PRIORITIES, Alert


@dataclass(frozen=True)
class AlertStats:
    """Aggregate counts over active alerts.

    Attributes:
        total: Number of active alerts
        unread: Active alerts not yet read
        by_priority: Count per priority, all four priorities present
        by_type: Count per alert type, only observed types present
        today_count: Active alerts created on the current calendar day
        week_count: Active alerts created in the last 7 days
    """
    total: int = 0
    unread: int = 0
    by_priority: dict[str, int] = field(
        default_factory=lambda: {p: 0 for p in PRIORITIES}
    )
    by_type: dict[str, int] = field(default_factory=dict)
    today_count: int = 0
    week_count: int = 0


def empty_stats() -> AlertStats:
    """Stats for an empty alert list."""
    return AlertStats()


def is_same_day(timestamp: datetime, now: datetime, tz: tzinfo | None = None) -> bool:
    """Check if two instants fall on the same calendar day in tz.

    Pure function. With tz=None the local time zone is used, so the day
    boundary is local midnight.
    """
    return timestamp.astimezone(tz).date() == now.astimezone(tz).date()


def compute_alert_stats(
    alerts: Iterable[Alert],
    now: datetime,
    tz: tzinfo | None = None,
) -> AlertStats:
    """Compute statistics for the active alerts in a list.

    Pure function.

    Args:
        alerts: Current alert list
        now: Evaluation time
        tz: Time zone for the "today" boundary (None for local)

    Returns:
        AlertStats over alerts with is_active=True
    """
    active = [a for a in alerts if a.is_active]
    week_ago = now - timedelta(days=7)

    by_priority = {p: 0 for p in PRIORITIES}
    by_type: dict[str, int] = {}

    for alert in active:
        by_priority[alert.priority] = by_priority.get(alert.priority, 0) + 1
        by_type[alert.type] = by_type.get(alert.type, 0) + 1

    return AlertStats(
        total=len(active),
        unread=sum(1 for a in active if not a.is_read),
        by_priority=by_priority,
        by_type=by_type,
        today_count=sum(1 for a in active if is_same_day(a.timestamp, now, tz)),
        week_count=sum(1 for a in active if a.timestamp >= week_ago),
    )


def stats_to_dict(stats: AlertStats) -> dict[str, Any]:
    """Convert AlertStats to a JSON-friendly dict."""
    return {
        "total": stats.total,
        "unread": stats.unread,
        "by_priority": dict(stats.by_priority),
        "by_type": dict(stats.by_type),
        "today_count": stats.today_count,
        "week_count": stats.week_count,
    }
