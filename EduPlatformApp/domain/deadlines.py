"""Deadline classification.

Listings and submission forms both call ``classify_deadline`` so they never
disagree about how urgent a piece of work is.
"""

import math
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from EduPlatformApp.core.choices import DeadlineTier
from EduPlatformApp.core.conf import lifecycle_settings

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class DeadlineStatus:
    days_remaining: int
    tier: DeadlineTier

    @property
    def is_overdue(self) -> bool:
        return self.tier == DeadlineTier.OVERDUE

    def as_dict(self) -> dict:
        return {"days_remaining": self.days_remaining, "tier": self.tier.value}


def days_remaining(due_at: datetime, now: datetime | None = None) -> int:
    """Whole days left until ``due_at``, rounded up; zero or negative once due."""
    now = now or timezone.now()
    return math.ceil((due_at - now).total_seconds() / SECONDS_PER_DAY)


def classify_deadline(
    due_at: datetime,
    now: datetime | None = None,
    urgent_days: int | None = None,
    warning_days: int | None = None,
) -> DeadlineStatus:
    if urgent_days is None or warning_days is None:
        policy = lifecycle_settings()
        urgent_days = policy.urgent_days if urgent_days is None else urgent_days
        warning_days = policy.warning_days if warning_days is None else warning_days

    days = days_remaining(due_at, now)
    if days <= 0:
        tier = DeadlineTier.OVERDUE
    elif days <= urgent_days:
        tier = DeadlineTier.URGENT
    elif days <= warning_days:
        tier = DeadlineTier.WARNING
    else:
        tier = DeadlineTier.NORMAL
    return DeadlineStatus(days_remaining=days, tier=tier)


def is_past_due(due_at: datetime, at: datetime | None = None) -> bool:
    return (at or timezone.now()) > due_at
