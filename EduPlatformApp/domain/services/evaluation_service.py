"""Domain service functions for grading submissions.

- ``evaluate`` creates the single evaluation of a submission (course staff
  only). A second call fails with ``AlreadyEvaluated``; changes go through
  ``correct``.
- ``correct`` is reserved to directors and requires a justification. It
  overwrites grade and comment in place, fills the correction slot
  (corrected_by / correction_reason / corrected_at) and leaves the original
  evaluator and timestamp untouched. Each correction replaces the previous
  slot; the full version trail stays in ``Evaluation.history``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from EduPlatformApp.core.access import ensure_course_staff, ensure_director
from EduPlatformApp.core.choices import GradeBand
from EduPlatformApp.core.errors import AlreadyEvaluated, EmptyComment, MissingReason, NotAuthorized
from EduPlatformApp.domain.grading import ensure_grade, grade_band, is_success
from EduPlatformApp.works.models import Submission, Evaluation, Work
from EduPlatformApp.works.signals import evaluation_created, evaluation_corrected

logger = logging.getLogger(__name__)


@transaction.atomic
def evaluate(actor, submission: Submission, grade, comment: str) -> Evaluation:
    """Grade a submission for the first time.

    Raises:
        NotAuthorized: actor is not staff of the work's course.
        OutOfRange: grade outside [0, 20].
        AlreadyEvaluated: an evaluation already exists.
        EmptyComment: comment is blank.
    """
    ensure_course_staff(actor, submission.work.course)
    value = ensure_grade(grade)
    submission = Submission.objects.select_for_update().get(pk=submission.pk)
    if Evaluation.objects.filter(submission=submission).exists():
        raise AlreadyEvaluated("This submission is already evaluated; use a correction to change it.")
    comment = (comment or "").strip()
    if not comment:
        raise EmptyComment()

    try:
        with transaction.atomic():
            evaluation = Evaluation.objects.create(
                submission=submission,
                grade=value,
                comment=comment,
                evaluator=actor,
                evaluated_at=timezone.now(),
            )
    except IntegrityError:
        raise AlreadyEvaluated("This submission is already evaluated; use a correction to change it.")
    transaction.on_commit(lambda: evaluation_created.send(sender=Evaluation, evaluation=evaluation))
    return evaluation


@transaction.atomic
def correct(actor, evaluation: Evaluation, new_grade, new_comment: str, reason: str) -> Evaluation:
    """Overwrite an evaluation's grade and comment with a director's justified correction.

    Raises:
        NotAuthorized: actor is not a director.
        OutOfRange: new grade outside [0, 20].
        MissingReason: reason is blank.
        EmptyComment: new comment is blank.
    """
    try:
        ensure_director(actor)
    except NotAuthorized:
        logger.warning("Correction of evaluation #%s refused for user %s", evaluation.pk, getattr(actor, "pk", None))
        raise
    value = ensure_grade(new_grade)
    reason = (reason or "").strip()
    if not reason:
        raise MissingReason()
    new_comment = (new_comment or "").strip()
    if not new_comment:
        raise EmptyComment()

    evaluation = Evaluation.objects.select_for_update().get(pk=evaluation.pk)
    previous_grade, previous_comment = evaluation.grade, evaluation.comment
    evaluation.grade = value
    evaluation.comment = new_comment
    evaluation.corrected_by = actor
    evaluation.correction_reason = reason
    evaluation.corrected_at = timezone.now()
    evaluation.save(update_fields=[
        "grade", "comment", "corrected_by", "correction_reason", "corrected_at", "updated_at",
    ])
    transaction.on_commit(lambda: evaluation_corrected.send(
        sender=Evaluation,
        evaluation=evaluation,
        previous_grade=previous_grade,
        previous_comment=previous_comment,
    ))
    return evaluation


def correction_trail(evaluation: Evaluation) -> list[dict]:
    """Every stored version of the evaluation, oldest first."""
    return [
        {
            "grade": h.grade,
            "comment": h.comment,
            "evaluator_id": h.evaluator_id,
            "corrected_by_id": h.corrected_by_id,
            "correction_reason": h.correction_reason,
            "recorded_at": h.history_date,
        }
        for h in evaluation.history.order_by("history_date", "history_id")
    ]


@dataclass(frozen=True)
class GradeLine:
    evaluation: Evaluation
    work: Work
    course_title: str
    band: GradeBand
    passed: bool

    @property
    def grade(self) -> Decimal:
        return self.evaluation.grade


def grades_for_student(student) -> list[GradeLine]:
    """Every evaluation reaching the student through an assignment or a group, newest first."""
    lines = []
    for evaluation in Evaluation.objects.for_student(student).with_course().order_by("-evaluated_at", "-id"):
        work = evaluation.submission.work
        lines.append(GradeLine(
            evaluation=evaluation,
            work=work,
            course_title=work.course.title,
            band=grade_band(evaluation.grade),
            passed=is_success(evaluation.grade),
        ))
    return lines


def evaluations_for_staff(actor, since: datetime | None = None):
    qs = Evaluation.objects.with_course().filter(submission__in=Submission.objects.for_staff(actor))
    if since:
        qs = qs.filter(evaluated_at__gte=since)
    return qs.order_by("-evaluated_at")
