from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from EduPlatformApp.core.choices import DeadlineTier
from EduPlatformApp.domain.deadlines import classify_deadline, days_remaining, is_past_due

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc)


@pytest.mark.parametrize("delta, tier, days", [
    (timedelta(days=2), DeadlineTier.URGENT, 2),
    (timedelta(days=5), DeadlineTier.WARNING, 5),
    (timedelta(days=10), DeadlineTier.NORMAL, 10),
    (timedelta(days=-1), DeadlineTier.OVERDUE, -1),
])
def test_classify_examples(delta, tier, days):
    status = classify_deadline(NOW + delta, NOW)
    assert status.tier == tier
    assert status.days_remaining == days


def test_partial_day_rounds_up():
    assert days_remaining(NOW + timedelta(hours=1), NOW) == 1
    assert classify_deadline(NOW + timedelta(hours=1), NOW).tier == DeadlineTier.URGENT


def test_boundaries_are_inclusive():
    assert classify_deadline(NOW, NOW).tier == DeadlineTier.OVERDUE
    assert classify_deadline(NOW + timedelta(days=3), NOW).tier == DeadlineTier.URGENT
    assert classify_deadline(NOW + timedelta(days=7), NOW).tier == DeadlineTier.WARNING
    assert classify_deadline(NOW + timedelta(days=8), NOW).tier == DeadlineTier.NORMAL


def test_thresholds_follow_settings(settings):
    settings.WORK_LIFECYCLE = {**settings.WORK_LIFECYCLE, "URGENT_DAYS": 1, "WARNING_DAYS": 2}
    assert classify_deadline(NOW + timedelta(days=2), NOW).tier == DeadlineTier.WARNING
    assert classify_deadline(NOW + timedelta(days=3), NOW).tier == DeadlineTier.NORMAL


def test_as_dict_and_past_due():
    status = classify_deadline(NOW - timedelta(days=1), NOW)
    assert status.as_dict() == {"days_remaining": -1, "tier": "overdue"}
    assert status.is_overdue
    assert is_past_due(NOW - timedelta(seconds=1), NOW)
    assert not is_past_due(NOW, NOW)
