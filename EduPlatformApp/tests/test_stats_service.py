from datetime import timedelta

import pytest
from django.utils import timezone

from EduPlatformApp.domain.services import (
    assignment_service, course_service, evaluation_service, group_service, stats_service,
    submission_service, work_service,
)
from EduPlatformApp.core.choices import WorkKind

pytestmark = pytest.mark.django_db


def grade_individual(trainer, work, student, grade):
    [assignment] = assignment_service.assign_individual(trainer, work, [student.id])
    sub = submission_service.submit(student, assignment, content_text="answer")
    return evaluation_service.evaluate(trainer, sub, grade, "comment")


def test_course_stats_reference_numbers(trainer, students, individual_work):
    for student, grade in zip(students, [18, 15, 9, 20]):
        grade_individual(trainer, individual_work, student, grade)
    stats = stats_service.course_stats(individual_work.course)
    assert stats["count"] == 4
    assert stats["average"] == 15.5
    assert stats["success_rate"] == 75.0
    assert [b["count"] for b in stats["distribution"]] == [1, 0, 1, 2]


def test_student_stats_mix_individual_and_group(trainer, students, individual_work, collective_work):
    grade_individual(trainer, individual_work, students[0], 12)
    group = group_service.create_group(trainer, collective_work, "A", [students[0].id, students[1].id])
    sub = submission_service.submit(students[1], group, content_text="team")
    evaluation_service.evaluate(trainer, sub, 16, "Good teamwork")

    s0 = stats_service.student_stats(students[0])
    assert s0["count"] == 2
    assert s0["average"] == 14.0
    assert s0["subjects"] == [{"course": "Algorithms", "average": 14.0, "count": 2}]
    assert stats_service.student_stats(students[1])["count"] == 1
    assert stats_service.group_stats(group)["average"] == 16.0


def test_global_stats_per_subject(trainer, students, individual_work):
    grade_individual(trainer, individual_work, students[0], 10)
    physics = course_service.create_course(trainer, {"title": "Physics", "description": ""})
    course_service.enroll_student(trainer, physics, students[0])
    lab = work_service.create_work(
        trainer, physics, "Lab", WorkKind.INDIVIDUAL, due_at=timezone.now() + timedelta(days=1)
    )
    grade_individual(trainer, lab, students[0], 20)

    stats = stats_service.global_stats()
    assert [s["course"] for s in stats["subjects"]] == ["Algorithms", "Physics"]
    assert stats["average"] == 15.0
    assert stats_service.global_stats(physics)["count"] == 1


def test_pass_mark_from_settings(settings, trainer, students, individual_work):
    settings.WORK_LIFECYCLE = {**settings.WORK_LIFECYCLE, "PASS_MARK": 12}
    grade_individual(trainer, individual_work, students[0], 11)
    assert stats_service.course_stats(individual_work.course)["success_rate"] == 0.0


def test_empty_stats(course):
    stats = stats_service.course_stats(course)
    assert stats["count"] == 0
    assert stats["average"] == 0.0
