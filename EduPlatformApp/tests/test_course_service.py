import pytest

from EduPlatformApp.core.choices import MemberRole
from EduPlatformApp.core.errors import NotAuthorized
from EduPlatformApp.domain.services import course_service

pytestmark = pytest.mark.django_db


def test_role_properties(director, trainer, students):
    assert director.is_director and director.is_platform_staff and not director.is_student
    assert trainer.is_platform_staff and not trainer.is_director
    assert students[0].is_student and not students[0].is_platform_staff


def test_students_cannot_create_course(students):
    with pytest.raises(NotAuthorized):
        course_service.create_course(students[0], {"title": "Chess", "description": ""})


def test_enrollment_is_idempotent_and_staff_only(trainer, outsider_trainer, students, course):
    first = course_service.enroll_student(trainer, course, students[0])
    assert course_service.enroll_student(trainer, course, students[0]).pk == first.pk
    assert first.role == MemberRole.STUDENT
    with pytest.raises(NotAuthorized):
        course_service.enroll_student(outsider_trainer, course, students[1])
