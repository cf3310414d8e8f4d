"""Typed enumerations (TextChoices) for roles, work kinds, group modes and lifecycle states."""
from django.db import models

class UserRole(models.TextChoices):
    """System-level role assigned to a user account."""
    DIRECTOR = "DIRECTOR", "Director"
    TRAINER = "TRAINER", "Trainer"
    STUDENT = "STUDENT", "Student"

class MemberRole(models.TextChoices):
    """Role of a user within a specific course-space."""
    TRAINER = "TRAINER", "Trainer"
    STUDENT = "STUDENT", "Student"

class WorkKind(models.TextChoices):
    INDIVIDUAL = "INDIVIDUAL", "Individual"
    COLLECTIVE = "COLLECTIVE", "Collective"

class GroupMode(models.TextChoices):
    """Who forms the groups of a collective work."""
    STAFF_DEFINED = "STAFF_DEFINED", "Formed by staff"
    STUDENT_DEFINED = "STUDENT_DEFINED", "Formed by students"
    NOT_APPLICABLE = "NOT_APPLICABLE", "Not applicable"

class SubmissionState(models.TextChoices):
    """Logical lifecycle state of an assignment or group."""
    PENDING = "PENDING", "Pending"
    SUBMITTED = "SUBMITTED", "Submitted"
    EVALUATED = "EVALUATED", "Evaluated"

class DeadlineTier(models.TextChoices):
    OVERDUE = "overdue", "Overdue"
    URGENT = "urgent", "Urgent"
    WARNING = "warning", "Warning"
    NORMAL = "normal", "Normal"

class GradeBand(models.TextChoices):
    EXCELLENT = "EXCELLENT", "Excellent"
    GOOD = "GOOD", "Good"
    PASSABLE = "PASSABLE", "Passable"
    INSUFFICIENT = "INSUFFICIENT", "Insufficient"

STAFF_ROLES = (UserRole.TRAINER, UserRole.DIRECTOR)
