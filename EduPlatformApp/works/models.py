"""Work lifecycle models: Work, Group, GroupMembership, Assignment, Submission, Evaluation."""

from django.db import models
from django.db.models import F, Q
from django.conf import settings
from django.utils import timezone

from simple_history.models import HistoricalRecords

from EduPlatformApp.courses.models import Course
from EduPlatformApp.core.choices import WorkKind, GroupMode, SubmissionState
from EduPlatformApp.core.validators import validate_grade
from EduPlatformApp.courses.querysets import WorkQuerySet, SubmissionQuerySet, EvaluationQuerySet
from EduPlatformApp.domain.grading import GRADE_MIN, GRADE_MAX
from EduPlatformApp.domain.targets import IndividualTarget, GroupTarget, SubmissionTarget

User = settings.AUTH_USER_MODEL


class Work(models.Model):
    """A gradable unit of work defined by staff for a course-space.

    `kind` and `group_mode` are fixed at creation; the schedule and course are
    frozen once the first submission arrives.
    """
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name="works")
    created_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="created_works")
    title = models.CharField(max_length=255)
    instructions = models.TextField(blank=True)
    instruction_file = models.CharField(max_length=255, blank=True)
    kind = models.CharField(max_length=16, choices=WorkKind.choices)
    group_mode = models.CharField(max_length=16, choices=GroupMode.choices, default=GroupMode.NOT_APPLICABLE)
    starts_at = models.DateTimeField()
    due_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = WorkQuerySet.as_manager()

    class Meta:
        constraints = [
            models.CheckConstraint(condition=Q(due_at__gte=F("starts_at")), name="ck_work_due_after_start"),
            models.CheckConstraint(
                condition=(
                    Q(kind=WorkKind.INDIVIDUAL, group_mode=GroupMode.NOT_APPLICABLE)
                    | Q(kind=WorkKind.COLLECTIVE,
                        group_mode__in=[GroupMode.STAFF_DEFINED, GroupMode.STUDENT_DEFINED])
                ),
                name="ck_work_group_mode_matches_kind",
            ),
        ]

    @property
    def is_collective(self) -> bool:
        return self.kind == WorkKind.COLLECTIVE

    def submissions(self):
        return Submission.objects.for_work(self)

    def has_submissions(self) -> bool:
        return self.submissions().exists()

    def distributed_count(self) -> int:
        if self.is_collective:
            return self.groups.count()
        return self.assignments.count()

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk})"


class Group(models.Model):
    """A named set of students delivering one collective work together."""
    work = models.ForeignKey(Work, on_delete=models.CASCADE, related_name="groups")
    name = models.CharField(max_length=120)
    formation_mode = models.CharField(max_length=16, choices=GroupMode.choices)
    created_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="created_groups")
    created_at = models.DateTimeField(auto_now_add=True)
    history = HistoricalRecords()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["work", "name"], name="uq_group_name_per_work"),
        ]

    @property
    def members(self) -> list:
        return [m.student for m in self.memberships.select_related("student").order_by("position", "id")]

    @property
    def member_ids(self) -> list[int]:
        return list(self.memberships.order_by("position", "id").values_list("student_id", flat=True))

    def __str__(self) -> str:
        return f"{self.name} ({self.work})"


class GroupMembership(models.Model):
    """Ordered membership of a student in a group.

    `work` duplicates `group.work` so the database can guarantee a student
    sits in at most one group per work.
    """
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name="memberships")
    work = models.ForeignKey(Work, on_delete=models.CASCADE, related_name="group_memberships")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="group_memberships")
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["work", "student"], name="uq_one_group_per_work"),
        ]
        ordering = ["position", "id"]


class Assignment(models.Model):
    """Binding of an individual work to one student."""
    work = models.ForeignKey(Work, on_delete=models.CASCADE, related_name="assignments")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="assignments")
    assigned_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="assignments_made")
    created_at = models.DateTimeField(auto_now_add=True)
    history = HistoricalRecords()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["work", "student"], name="uq_assignment_work_student"),
        ]

    def __str__(self) -> str:
        return f"{self.work} -> {self.student}"


class Submission(models.Model):
    """What a student (assignment) or a group delivered; one row per target, updated on resubmission."""
    assignment = models.OneToOneField(
        Assignment, on_delete=models.PROTECT, null=True, blank=True, related_name="submission"
    )
    group = models.OneToOneField(
        Group, on_delete=models.PROTECT, null=True, blank=True, related_name="submission"
    )
    content_text = models.TextField(blank=True)
    file_ref = models.CharField(max_length=255, blank=True)
    submitted_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="submissions_made")
    submitted_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    is_late = models.BooleanField(default=False)
    history = HistoricalRecords()

    objects = SubmissionQuerySet.as_manager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(assignment__isnull=False, group__isnull=True)
                    | Q(assignment__isnull=True, group__isnull=False)
                ),
                name="ck_submission_single_target",
            ),
            models.CheckConstraint(
                condition=~Q(content_text="") | ~Q(file_ref=""),
                name="ck_submission_not_empty",
            ),
        ]

    @property
    def target(self) -> SubmissionTarget:
        if self.assignment_id is not None:
            return IndividualTarget(self.assignment)
        return GroupTarget(self.group)

    @property
    def work(self) -> Work:
        return self.target.work

    @property
    def is_evaluated(self) -> bool:
        return Evaluation.objects.filter(submission_id=self.pk).exists()

    @property
    def state(self) -> str:
        return SubmissionState.EVALUATED if self.is_evaluated else SubmissionState.SUBMITTED

    def __str__(self) -> str:
        return f"Submission #{self.pk} for {self.target}"


class Evaluation(models.Model):
    """Grade and comment of a submission, with a single director correction slot.

    `evaluator` and `evaluated_at` always describe the first evaluation;
    `grade` and `comment` hold the current values. Every prior version stays
    available through `history`.
    """
    submission = models.OneToOneField(Submission, on_delete=models.PROTECT, related_name="evaluation")
    grade = models.DecimalField(max_digits=4, decimal_places=2, validators=[validate_grade])
    comment = models.TextField()
    evaluator = models.ForeignKey(User, on_delete=models.PROTECT, related_name="evaluations_given")
    evaluated_at = models.DateTimeField(default=timezone.now)
    corrected_by = models.ForeignKey(
        User, on_delete=models.PROTECT, null=True, blank=True, related_name="evaluations_corrected"
    )
    correction_reason = models.TextField(blank=True)
    corrected_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = EvaluationQuerySet.as_manager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(grade__gte=GRADE_MIN, grade__lte=GRADE_MAX),
                name="ck_evaluation_grade_range",
            ),
            models.CheckConstraint(
                condition=(
                    Q(corrected_by__isnull=True, corrected_at__isnull=True, correction_reason="")
                    | (Q(corrected_by__isnull=False, corrected_at__isnull=False) & ~Q(correction_reason=""))
                ),
                name="ck_evaluation_correction_complete",
            ),
        ]

    @property
    def is_corrected(self) -> bool:
        return self.corrected_by_id is not None

    def __str__(self) -> str:
        return f"Evaluation #{self.pk}: {self.grade}/{GRADE_MAX}"
