"""Courses app configuration (course-spaces and enrollment)."""

from django.apps import AppConfig

class CoursesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "EduPlatformApp.courses"
    label = "courses"
