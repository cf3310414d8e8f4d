import pytest
from model_bakery import baker

from EduPlatformApp.core.choices import UserRole
from EduPlatformApp.core.errors import (
    WorkKindMismatch, MembershipEligibility, AssignmentHasSubmission, GroupWorkMismatch, NotAuthorized,
)
from EduPlatformApp.domain.services import assignment_service, group_service, submission_service
from EduPlatformApp.works.models import Assignment

pytestmark = pytest.mark.django_db


def test_assign_individual_is_idempotent(trainer, students, individual_work):
    ids = [students[1].id, students[0].id]
    first = assignment_service.assign_individual(trainer, individual_work, ids)
    again = assignment_service.assign_individual(trainer, individual_work, ids + [students[2].id])
    assert [a.student_id for a in first] == ids
    assert [a.pk for a in again[:2]] == [a.pk for a in first]
    assert Assignment.objects.filter(work=individual_work).count() == 3


def test_assign_collective_work_rejected(trainer, students, collective_work):
    with pytest.raises(WorkKindMismatch):
        assignment_service.assign_individual(trainer, collective_work, [students[0].id])
    assert not Assignment.objects.exists()


def test_attach_groups_to_individual_work_rejected(trainer, individual_work):
    with pytest.raises(WorkKindMismatch):
        assignment_service.attach_groups(trainer, individual_work, [1])


def test_attach_groups_checks_ownership(trainer, students, collective_work, open_collective_work):
    group = group_service.create_group(trainer, collective_work, "A", [students[0].id])
    assert assignment_service.attach_groups(trainer, collective_work, [group.id]) == [group]
    with pytest.raises(GroupWorkMismatch):
        assignment_service.attach_groups(trainer, open_collective_work, [group.id])
    with pytest.raises(GroupWorkMismatch):
        assignment_service.attach_groups(trainer, collective_work, [999999])


def test_only_enrolled_students(trainer, individual_work):
    stranger = baker.make("users.User", role=UserRole.STUDENT)
    with pytest.raises(MembershipEligibility):
        assignment_service.assign_individual(trainer, individual_work, [stranger.id])


def test_students_cannot_distribute(students, individual_work):
    with pytest.raises(NotAuthorized):
        assignment_service.assign_individual(students[0], individual_work, [students[0].id])


def test_remove_assignment(trainer, students, individual_work):
    a1, a2 = assignment_service.assign_individual(trainer, individual_work, [students[0].id, students[1].id])
    submission_service.submit(students[0], a1, content_text="x")
    with pytest.raises(AssignmentHasSubmission):
        assignment_service.remove_assignment(trainer, a1)
    assignment_service.remove_assignment(trainer, a2)
    assert list(assignment_service.assignments_for_work(individual_work)) == [a1]
