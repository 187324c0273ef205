"""Unit tests for alert list operations.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.core.alert import (
    AlertDraft,
    AlertLocation,
    MAX_ALERTS,
    alert_to_dict,
    dismiss,
    find_alert,
    insert_alert,
    mark_all_read,
    mark_read,
    materialize_alert,
)


T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def draft():
    return AlertDraft(
        type="collar_malfunction",
        priority="high",
        title="Collar Battery Critical",
        message="GPS collar for Tembo (African Elephant) has critical battery level: 8%",
        location=AlertLocation(-1.2921, 36.8219),
        source="gps_collar",
        animal_id="elephant-001",
        metadata={"battery_level": 8},
    )


@pytest.fixture
def alerts(draft):
    """Three alerts, newest first (ids 3, 2, 1)."""
    result = ()
    for i in range(1, 4):
        result = insert_alert(result, materialize_alert(draft, i, T0 + timedelta(minutes=i)))
    return result


class TestMaterializeAlert:
    """Tests for materialize_alert() function."""

    def test_new_alert_is_unread_and_active(self, draft):
        alert = materialize_alert(draft, 7, T0)

        assert alert.id == 7
        assert alert.timestamp == T0
        assert alert.is_read is False
        assert alert.is_active is True
        assert alert.type == draft.type
        assert alert.animal_id == "elephant-001"

    def test_metadata_copied(self, draft):
        alert = materialize_alert(draft, 1, T0)
        assert alert.metadata == draft.metadata
        assert alert.metadata is not draft.metadata

    @pytest.mark.parametrize("priority,expected", [
        ("low", False),
        ("medium", False),
        ("high", True),
        ("critical", True),
    ])
    def test_is_high_priority(self, draft, priority, expected):
        alert = materialize_alert(AlertDraft(**{**draft.__dict__, "priority": priority}), 1, T0)
        assert alert.is_high_priority is expected


class TestInsertAlert:
    """Tests for insert_alert() function."""

    def test_newest_first(self, alerts):
        assert [a.id for a in alerts] == [3, 2, 1]

    def test_cap_keeps_newest(self, draft):
        """150 inserts leave the 100 newest, newest first."""
        result = ()
        for i in range(1, 151):
            result = insert_alert(result, materialize_alert(draft, i, T0))

        assert len(result) == MAX_ALERTS
        assert result[0].id == 150
        assert result[-1].id == 51
        assert [a.id for a in result] == list(range(150, 50, -1))

    def test_custom_cap(self, alerts, draft):
        result = insert_alert(alerts, materialize_alert(draft, 4, T0), max_alerts=2)
        assert [a.id for a in result] == [4, 3]


class TestMarkRead:
    """Tests for mark_read() and mark_all_read()."""

    def test_marks_one(self, alerts):
        result, changed = mark_read(alerts, 2)

        assert changed is True
        assert find_alert(result, 2).is_read is True
        assert find_alert(result, 1).is_read is False

    def test_idempotent(self, alerts):
        once, _ = mark_read(alerts, 2)
        twice, changed = mark_read(once, 2)

        assert changed is False
        assert twice == once

    def test_unknown_id(self, alerts):
        result, changed = mark_read(alerts, 99)
        assert changed is False
        assert result == alerts

    def test_mark_all(self, alerts):
        result, changed = mark_all_read(alerts)

        assert changed is True
        assert all(a.is_read for a in result)

        _, changed_again = mark_all_read(result)
        assert changed_again is False

    def test_mark_all_empty(self):
        assert mark_all_read(()) == ((), False)


class TestDismiss:
    """Tests for dismiss() function."""

    def test_deactivates_but_keeps(self, alerts):
        result, changed = dismiss(alerts, 1)

        assert changed is True
        assert len(result) == 3
        assert find_alert(result, 1).is_active is False

    def test_idempotent(self, alerts):
        once, _ = dismiss(alerts, 1)
        twice, changed = dismiss(once, 1)
        assert changed is False
        assert twice == once

    def test_unknown_id(self, alerts):
        assert dismiss(alerts, 42) == (alerts, False)


class TestAlertToDict:
    """Tests for alert_to_dict() function."""

    def test_fields(self, draft):
        data = alert_to_dict(materialize_alert(draft, 5, T0))

        assert data["id"] == 5
        assert data["timestamp"] == "2024-06-01T12:00:00+00:00"
        assert data["location"] == {
            "latitude": -1.2921,
            "longitude": 36.8219,
            "name": None,
        }
        assert data["metadata"] == {"battery_level": 8}
