"""Domain service functions for delivering work.

State per assignment or group:
    PENDING -> SUBMITTED (first submit) -> SUBMITTED (resubmit) -> EVALUATED.
Only the evaluation service moves a submission to EVALUATED; after that any
submit is rejected with ``AlreadyEvaluated``. A target has at most one
submission row: resubmitting replaces its content, file and timestamp.

Late delivery is accepted and flagged unless ``ALLOW_LATE_SUBMISSION`` is off.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import IntegrityError, transaction
from django.utils import timezone

from EduPlatformApp.core.access import ensure_can_submit, ensure_course_staff
from EduPlatformApp.core.choices import SubmissionState, WorkKind
from EduPlatformApp.core.conf import lifecycle_settings
from EduPlatformApp.core.errors import EmptySubmission, AlreadyEvaluated, DeadlinePassedPolicy
from EduPlatformApp.domain.deadlines import classify_deadline, is_past_due, DeadlineStatus
from EduPlatformApp.domain.targets import as_target, IndividualTarget, GroupTarget, SubmissionTarget
from EduPlatformApp.works.models import Work, Assignment, Group, Submission, Evaluation
from EduPlatformApp.works.signals import submission_received

logger = logging.getLogger(__name__)


def _lock_target(target: SubmissionTarget) -> None:
    """Serialize submits per target by locking the assignment or group row."""
    if isinstance(target, IndividualTarget):
        Assignment.objects.select_for_update().filter(pk=target.assignment.pk).first()
    else:
        Group.objects.select_for_update().filter(pk=target.group.pk).first()


def _notify(submission: Submission, created: bool) -> None:
    transaction.on_commit(
        lambda: submission_received.send(sender=Submission, submission=submission, created=created)
    )


@transaction.atomic
def submit(
    actor,
    target,
    content_text: str = "",
    file_ref: str = "",
    now: datetime | None = None,
) -> Submission:
    """Create the target's submission, or replace it if not yet evaluated.

    Raises:
        NotAuthorized: actor is neither the assigned student nor a group member.
        EmptySubmission: no text and no file.
        AlreadyEvaluated: the existing submission has been graded.
        DeadlinePassedPolicy: late and the platform forbids late delivery.
    """
    target = as_target(target)
    ensure_can_submit(actor, target)
    content_text = content_text or ""
    file_ref = file_ref or ""
    if not content_text.strip() and not file_ref:
        raise EmptySubmission()

    _lock_target(target)
    existing = Submission.objects.select_for_update().filter(**target.submission_filter()).first()
    if existing is not None and Evaluation.objects.filter(submission=existing).exists():
        raise AlreadyEvaluated("This submission has already been evaluated; resubmission is closed.")

    now = now or timezone.now()
    work = target.work
    late = is_past_due(work.due_at, now)
    if late and not lifecycle_settings().allow_late_submission:
        raise DeadlinePassedPolicy(f"The due date {work.due_at:%Y-%m-%d %H:%M} has passed.")
    if late:
        logger.warning("Late submission for %s on work #%s", target, work.pk)

    fields = {
        "content_text": content_text,
        "file_ref": file_ref,
        "submitted_by": actor,
        "submitted_at": now,
        "is_late": late,
    }
    if existing is None:
        try:
            with transaction.atomic():
                submission = Submission.objects.create(**target.submission_filter(), **fields)
            _notify(submission, created=True)
            return submission
        except IntegrityError:
            existing = Submission.objects.select_for_update().get(**target.submission_filter())
            if Evaluation.objects.filter(submission=existing).exists():
                raise AlreadyEvaluated("This submission has already been evaluated; resubmission is closed.")

    for field, value in fields.items():
        setattr(existing, field, value)
    existing.save(update_fields=[*fields, "updated_at"])
    _notify(existing, created=False)
    return existing


def state_of(target) -> SubmissionState:
    target = as_target(target)
    submission = Submission.objects.filter(**target.submission_filter()).first()
    if submission is None:
        return SubmissionState.PENDING
    return submission.state


@dataclass(frozen=True)
class TargetStatus:
    """One line of a work's delivery board."""
    target: SubmissionTarget
    submission: Submission | None
    state: SubmissionState

    @property
    def is_late(self) -> bool:
        return bool(self.submission and self.submission.is_late)


def _status(target: SubmissionTarget, submission: Submission | None) -> TargetStatus:
    if submission is None:
        state = SubmissionState.PENDING
    elif hasattr(submission, "evaluation"):
        state = SubmissionState.EVALUATED
    else:
        state = SubmissionState.SUBMITTED
    return TargetStatus(target=target, submission=submission, state=state)


def submissions_for_work(actor, work: Work) -> list[TargetStatus]:
    """Every distributed target of the work with its current state (staff only)."""
    ensure_course_staff(actor, work.course)
    subs = Submission.objects.for_work(work).select_related("evaluation", "assignment", "group")
    by_assignment = {s.assignment_id: s for s in subs if s.assignment_id}
    by_group = {s.group_id: s for s in subs if s.group_id}
    if work.kind == WorkKind.INDIVIDUAL:
        return [
            _status(IndividualTarget(a), by_assignment.get(a.pk))
            for a in work.assignments.select_related("student").order_by("id")
        ]
    return [
        _status(GroupTarget(g), by_group.get(g.pk))
        for g in work.groups.order_by("name")
    ]


@dataclass(frozen=True)
class StudentWorkItem:
    work: Work
    target: SubmissionTarget
    deadline: DeadlineStatus
    state: SubmissionState
    submission: Submission | None


def works_for_student(student, now: datetime | None = None) -> list[StudentWorkItem]:
    """The student's individual and group work, soonest deadline first."""
    now = now or timezone.now()
    targets: list[SubmissionTarget] = [
        IndividualTarget(a)
        for a in Assignment.objects.filter(student=student).select_related("work__course")
    ]
    targets += [
        GroupTarget(g)
        for g in Group.objects.filter(memberships__student=student).select_related("work__course")
    ]
    items = []
    for target in targets:
        status = _status(target, Submission.objects.filter(**target.submission_filter())
                         .select_related("evaluation").first())
        items.append(StudentWorkItem(
            work=target.work,
            target=target,
            deadline=classify_deadline(target.work.due_at, now),
            state=status.state,
            submission=status.submission,
        ))
    return sorted(items, key=lambda item: (item.work.due_at, item.work.pk))


def recompute_lateness(submission: Submission) -> bool:
    """Re-derive ``is_late`` from the work's due date; return True if it changed."""
    should = submission.submitted_at > submission.work.due_at
    if submission.is_late != should:
        submission.is_late = should
        submission.save(update_fields=["is_late"])
        return True
    return False
