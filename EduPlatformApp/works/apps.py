"""Works app configuration (registers lifecycle signal handlers)."""

from django.apps import AppConfig

class WorksConfig(AppConfig):
    """AppConfig for the work lifecycle (works, groups, assignments, submissions, evaluations)."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "EduPlatformApp.works"
    label = "works"

    def ready(self):
        """Import signal handlers to connect lifecycle signals."""
        from EduPlatformApp.works import signals  # noqa: F401
