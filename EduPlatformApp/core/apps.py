"""Core app configuration and startup checks (libmagic, lifecycle policy)."""

import magic
from django.apps import AppConfig
from django.core.checks import register, Error


def check_libmagic(app_configs, **kwargs):
    try:
        magic.from_buffer(b"%PDF-1.4\n")
    except Exception as exc:
        return [Error(f"libmagic not available: {exc}", id="core.E001")]
    return []


def check_lifecycle_policy(app_configs, **kwargs):
    """Deadline thresholds must be ordered and grade bands must tile [0, 20]."""
    from EduPlatformApp.core.conf import lifecycle_settings
    from EduPlatformApp.domain.grading import GRADE_MAX

    policy = lifecycle_settings()
    errors = []
    if not 0 < policy.urgent_days < policy.warning_days:
        errors.append(Error("WORK_LIFECYCLE requires 0 < URGENT_DAYS < WARNING_DAYS.", id="core.E002"))
    bands = policy.distribution_bands
    contiguous = all(bands[i][1] == bands[i + 1][0] for i in range(len(bands) - 1))
    if not bands or bands[0][0] != 0 or bands[-1][1] != GRADE_MAX or not contiguous:
        errors.append(Error("DISTRIBUTION_BANDS must cover 0..20 without gaps.", id="core.E003"))
    return errors


class CoreConfig(AppConfig):
    """AppConfig registering system checks for the platform core."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "EduPlatformApp.core"

    def ready(self):
        register(check_libmagic)
        register(check_lifecycle_policy)
