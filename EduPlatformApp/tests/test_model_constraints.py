import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from EduPlatformApp.domain.services import assignment_service, group_service, submission_service, evaluation_service
from EduPlatformApp.works.models import Evaluation, Submission

pytestmark = pytest.mark.django_db


@pytest.fixture
def assignment(trainer, students, individual_work):
    return assignment_service.assign_individual(trainer, individual_work, [students[0].id])[0]


@pytest.fixture
def group(trainer, students, collective_work):
    return group_service.create_group(trainer, collective_work, "Alpha", [students[0].id, students[1].id])


def test_submission_with_both_targets_rejected(students, assignment, group):
    with pytest.raises(IntegrityError), transaction.atomic():
        Submission.objects.create(assignment=assignment, group=group, content_text="x", submitted_by=students[0])


def test_submission_without_target_rejected(students):
    with pytest.raises(IntegrityError), transaction.atomic():
        Submission.objects.create(content_text="x", submitted_by=students[0])


def test_partial_correction_rejected(trainer, director, students, assignment):
    submission = submission_service.submit(students[0], assignment, content_text="answer")
    evaluation = evaluation_service.evaluate(trainer, submission, 12, "Ok")
    evaluation.corrected_by = director
    with pytest.raises(IntegrityError), transaction.atomic():
        evaluation.save(update_fields=["corrected_by"])

    evaluation.refresh_from_db()
    evaluation.correction_reason = "Grading error"
    evaluation.corrected_at = timezone.now()
    with pytest.raises(IntegrityError), transaction.atomic():
        evaluation.save(update_fields=["correction_reason", "corrected_at"])


@pytest.mark.parametrize("grade", [21, -1])
def test_grade_outside_scale_rejected_by_database(trainer, students, assignment, grade):
    submission = submission_service.submit(students[0], assignment, content_text="answer")
    with pytest.raises(IntegrityError), transaction.atomic():
        Evaluation.objects.create(submission=submission, grade=grade, comment="x", evaluator=trainer)


def test_resubmits_never_exceed_distributed_targets(trainer, students, individual_work, collective_work, group):
    assignments = assignment_service.assign_individual(trainer, individual_work, [students[1].id, students[2].id])
    for version in range(3):
        for target in assignments:
            submission_service.submit(target.student, target, content_text=f"v{version}")
        submission_service.submit(students[0], group, content_text=f"report v{version}")

    assert individual_work.submissions().count() == individual_work.distributed_count() == 2
    assert collective_work.submissions().count() <= collective_work.distributed_count()
    assert collective_work.submissions().count() == 1
