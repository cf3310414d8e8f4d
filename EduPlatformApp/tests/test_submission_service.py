import logging
from datetime import timedelta

import pytest
from django.utils import timezone

from EduPlatformApp.core.choices import SubmissionState, DeadlineTier
from EduPlatformApp.core.errors import EmptySubmission, AlreadyEvaluated, DeadlinePassedPolicy, NotAuthorized
from EduPlatformApp.domain.services import (
    assignment_service, group_service, submission_service, evaluation_service,
)
from EduPlatformApp.domain.targets import IndividualTarget, GroupTarget, as_target
from EduPlatformApp.works.models import Submission

pytestmark = pytest.mark.django_db


@pytest.fixture
def assignment(trainer, students, individual_work):
    return assignment_service.assign_individual(trainer, individual_work, [students[0].id])[0]


@pytest.fixture
def group(trainer, students, collective_work):
    return group_service.create_group(trainer, collective_work, "Alpha", [students[0].id, students[1].id])


def test_first_submit_then_resubmit_replaces(students, assignment):
    assert submission_service.state_of(assignment) == SubmissionState.PENDING
    first = submission_service.submit(students[0], assignment, content_text="v1")
    assert submission_service.state_of(assignment) == SubmissionState.SUBMITTED
    second = submission_service.submit(students[0], assignment, content_text="v2", file_ref="submissions/a.pdf")
    assert second.pk == first.pk
    assert Submission.objects.count() == 1
    second.refresh_from_db()
    assert second.content_text == "v2"
    assert second.file_ref == "submissions/a.pdf"
    assert second.submitted_at >= first.submitted_at


def test_empty_submission_rejected(students, assignment):
    with pytest.raises(EmptySubmission):
        submission_service.submit(students[0], assignment, content_text="   ")
    assert not Submission.objects.exists()


def test_file_only_submission_accepted(students, assignment):
    sub = submission_service.submit(students[0], assignment, file_ref="submissions/x.zip")
    assert sub.content_text == ""


def test_only_assignee_may_submit(students, assignment, trainer):
    for actor in (students[1], trainer):
        with pytest.raises(NotAuthorized):
            submission_service.submit(actor, assignment, content_text="x")


def test_group_submission_by_any_member(students, group):
    sub = submission_service.submit(students[1], group, content_text="team")
    assert sub.group == group and sub.assignment is None
    assert sub.submitted_by == students[1]
    assert isinstance(sub.target, GroupTarget)
    with pytest.raises(NotAuthorized):
        submission_service.submit(students[2], group, content_text="intruder")


def test_resubmission_closed_after_evaluation(trainer, students, assignment):
    sub = submission_service.submit(students[0], assignment, content_text="v1")
    evaluation_service.evaluate(trainer, sub, 14, "Solid")
    assert submission_service.state_of(assignment) == SubmissionState.EVALUATED
    with pytest.raises(AlreadyEvaluated):
        submission_service.submit(students[0], assignment, content_text="v2")
    sub.refresh_from_db()
    assert sub.content_text == "v1"


def test_late_submission_flagged(caplog, students, assignment):
    late = assignment.work.due_at + timedelta(hours=1)
    with caplog.at_level(logging.WARNING):
        sub = submission_service.submit(students[0], assignment, content_text="x", now=late)
    assert sub.is_late
    assert "Late submission" in caplog.text


def test_late_submission_forbidden_by_policy(settings, students, assignment):
    settings.WORK_LIFECYCLE = {**settings.WORK_LIFECYCLE, "ALLOW_LATE_SUBMISSION": False}
    late = assignment.work.due_at + timedelta(hours=1)
    with pytest.raises(DeadlinePassedPolicy):
        submission_service.submit(students[0], assignment, content_text="x", now=late)


def test_as_target_rejects_other_objects(individual_work):
    with pytest.raises(TypeError):
        as_target(individual_work)


def test_delivery_board_lists_every_target(trainer, students, individual_work):
    a1, a2 = assignment_service.assign_individual(trainer, individual_work, [students[0].id, students[1].id])
    submission_service.submit(students[1], a2, content_text="done")
    board = submission_service.submissions_for_work(trainer, individual_work)
    assert [(s.target.assignment.pk, s.state) for s in board] == [
        (a1.pk, SubmissionState.PENDING),
        (a2.pk, SubmissionState.SUBMITTED),
    ]
    with pytest.raises(NotAuthorized):
        submission_service.submissions_for_work(students[0], individual_work)


def test_works_for_student_sorted_by_due_date(trainer, students, individual_work, collective_work):
    from EduPlatformApp.domain.services import work_service

    work_service.update_work(trainer, individual_work, due_at=timezone.now() + timedelta(days=2))
    assignment_service.assign_individual(trainer, individual_work, [students[0].id])
    group_service.create_group(trainer, collective_work, "A", [students[0].id])
    items = submission_service.works_for_student(students[0])
    assert [i.work.pk for i in items] == [individual_work.pk, collective_work.pk]
    assert isinstance(items[0].target, IndividualTarget)
    assert items[0].deadline.tier == DeadlineTier.URGENT
    assert items[1].deadline.tier == DeadlineTier.NORMAL
    assert all(i.state == SubmissionState.PENDING for i in items)


def test_recompute_lateness(trainer, students, assignment):
    sub = submission_service.submit(students[0], assignment, content_text="x")
    assert not sub.is_late
    Submission.objects.filter(pk=sub.pk).update(submitted_at=assignment.work.due_at + timedelta(minutes=5))
    sub.refresh_from_db()
    assert submission_service.recompute_lateness(sub) is True
    assert Submission.objects.get(pk=sub.pk).is_late
    assert submission_service.recompute_lateness(sub) is False
