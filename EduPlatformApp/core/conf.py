"""Accessor for the WORK_LIFECYCLE policy settings."""

from dataclasses import dataclass, field

from django.conf import settings

DEFAULT_BANDS: tuple[tuple[float, float], ...] = ((0, 12), (12, 14), (14, 16), (16, 20))


@dataclass(frozen=True)
class LifecycleSettings:
    allow_late_submission: bool = True
    urgent_days: int = 3
    warning_days: int = 7
    pass_mark: float = 10
    distribution_bands: tuple[tuple[float, float], ...] = field(default=DEFAULT_BANDS)
    max_upload_mb: int = 50
    submit_rate: str = "30/hour"


def lifecycle_settings() -> LifecycleSettings:
    """Build the policy from ``settings.WORK_LIFECYCLE``, read on every call so overrides apply."""
    raw = getattr(settings, "WORK_LIFECYCLE", {})
    bands = raw.get("DISTRIBUTION_BANDS")
    return LifecycleSettings(
        allow_late_submission=raw.get("ALLOW_LATE_SUBMISSION", True),
        urgent_days=raw.get("URGENT_DAYS", 3),
        warning_days=raw.get("WARNING_DAYS", 7),
        pass_mark=raw.get("PASS_MARK", 10),
        distribution_bands=tuple(tuple(b) for b in bands) if bands else DEFAULT_BANDS,
        max_upload_mb=raw.get("MAX_UPLOAD_MB", 50),
        submit_rate=raw.get("SUBMIT_RATE", "30/hour"),
    )
