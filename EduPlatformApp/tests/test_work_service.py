from datetime import timedelta

import pytest
from django.utils import timezone

from EduPlatformApp.core.choices import WorkKind, GroupMode
from EduPlatformApp.core.errors import (
    InvalidGroupMode, InvalidSchedule, MissingTitle, FrozenField, WorkLocked, NotAuthorized,
)
from EduPlatformApp.domain.services import work_service, assignment_service, submission_service
from EduPlatformApp.works.models import Work

pytestmark = pytest.mark.django_db


def test_individual_work_defaults_to_not_applicable(individual_work):
    assert individual_work.group_mode == GroupMode.NOT_APPLICABLE
    assert individual_work.starts_at <= individual_work.due_at


def test_collective_work_needs_formation_mode(trainer, course):
    with pytest.raises(InvalidGroupMode):
        work_service.create_work(trainer, course, "T", WorkKind.COLLECTIVE, due_at=timezone.now() + timedelta(days=1))
    with pytest.raises(InvalidGroupMode):
        work_service.create_work(
            trainer, course, "T", WorkKind.INDIVIDUAL,
            due_at=timezone.now() + timedelta(days=1), group_mode=GroupMode.STAFF_DEFINED,
        )


def test_due_before_start_rejected(trainer, course):
    now = timezone.now()
    with pytest.raises(InvalidSchedule):
        work_service.create_work(trainer, course, "T", WorkKind.INDIVIDUAL, due_at=now, starts_at=now + timedelta(hours=1))


def test_blank_title_rejected(trainer, course):
    with pytest.raises(MissingTitle):
        work_service.create_work(trainer, course, "   ", WorkKind.INDIVIDUAL, due_at=timezone.now())


def test_students_and_foreign_trainers_cannot_create(course, students, outsider_trainer):
    for actor in (students[0], outsider_trainer):
        with pytest.raises(NotAuthorized):
            work_service.create_work(actor, course, "T", WorkKind.INDIVIDUAL, due_at=timezone.now())
    assert not Work.objects.exists()


def test_director_may_create_in_any_course(director, course):
    work = work_service.create_work(
        director, course, "Audit", WorkKind.INDIVIDUAL, due_at=timezone.now() + timedelta(days=1)
    )
    assert work.created_by == director


def test_kind_is_frozen(trainer, individual_work):
    with pytest.raises(FrozenField):
        work_service.update_work(trainer, individual_work, kind=WorkKind.COLLECTIVE)


def test_schedule_locked_after_submission(trainer, students, individual_work):
    work_service.update_work(trainer, individual_work, due_at=individual_work.due_at + timedelta(days=1))
    [assignment] = assignment_service.assign_individual(trainer, individual_work, [students[0].id])
    submission_service.submit(students[0], assignment, content_text="done")

    updated = work_service.update_work(trainer, individual_work, title="Renamed")
    assert updated.title == "Renamed"
    with pytest.raises(WorkLocked):
        work_service.update_work(trainer, individual_work, due_at=individual_work.due_at + timedelta(days=2))
    with pytest.raises(WorkLocked):
        work_service.delete_work(trainer, individual_work)


def test_delete_without_submissions(trainer, individual_work):
    work_service.delete_work(trainer, individual_work)
    assert not Work.objects.filter(pk=individual_work.pk).exists()
