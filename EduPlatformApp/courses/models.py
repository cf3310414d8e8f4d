"""Course-spaces and their rosters, the enrollment facts the work lifecycle reads."""

from django.db import models
from django.conf import settings

from simple_history.models import HistoricalRecords

from EduPlatformApp.core.choices import MemberRole
from EduPlatformApp.courses.querysets import CourseQuerySet


User = settings.AUTH_USER_MODEL

class Course(models.Model):
    """Course-space that owns works and supplies the enrollment roster.

    ``title`` is the subject label that per-course statistics are keyed by;
    ``owner`` is the trainer accountable for every work published in it.
    """
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(User, on_delete=models.PROTECT, related_name="owned_courses")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = CourseQuerySet.as_manager()

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk})"

class CourseMembership(models.Model):
    """Roster row: a STUDENT row makes the user eligible for the course works,
    a TRAINER row lets the user publish, assign and evaluate them.

    One row per (course, user), enforced by ``uq_course_user``.
    """
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="memberships")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="course_memberships")
    role = models.CharField(max_length=16, choices=MemberRole.choices)
    added_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="members_added")
    created_at = models.DateTimeField(auto_now_add=True)
    history = HistoricalRecords()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["course", "user"], name="uq_course_user"),
        ]

    def __str__(self) -> str:
        return f"{self.user} -> {self.course} ({self.role})"
