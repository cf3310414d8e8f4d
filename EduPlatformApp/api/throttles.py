"""API throttling classes."""

from rest_framework.throttling import UserRateThrottle

from EduPlatformApp.core.conf import lifecycle_settings


class SubmissionRateThrottle(UserRateThrottle):
    """Per-user limit on submit calls, shared by assignment and group targets."""
    scope = "lifecycle_submit"

    def get_rate(self) -> str:
        return lifecycle_settings().submit_rate
