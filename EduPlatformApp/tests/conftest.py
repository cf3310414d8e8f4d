from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from model_bakery import baker

from EduPlatformApp.core.choices import UserRole, WorkKind, GroupMode
from EduPlatformApp.domain.services import course_service, work_service

PASSWORD = "pass1234"


def make_user(email, role):
    u = baker.make("users.User", email=email, role=role)
    u.set_password(PASSWORD); u.save()
    return u


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def director():
    return make_user("director@example.com", UserRole.DIRECTOR)


@pytest.fixture
def trainer():
    return make_user("trainer@example.com", UserRole.TRAINER)


@pytest.fixture
def outsider_trainer():
    return make_user("other.trainer@example.com", UserRole.TRAINER)


@pytest.fixture
def students():
    return [make_user(f"s{i}@example.com", UserRole.STUDENT) for i in range(1, 5)]


@pytest.fixture
def course(trainer, students):
    c = course_service.create_course(trainer, {"title": "Algorithms", "description": ""})
    for s in students:
        course_service.enroll_student(trainer, c, s)
    return c


@pytest.fixture
def individual_work(trainer, course):
    return work_service.create_work(
        trainer, course, "Sorting report", WorkKind.INDIVIDUAL,
        due_at=timezone.now() + timedelta(days=10),
    )


@pytest.fixture
def collective_work(trainer, course):
    return work_service.create_work(
        trainer, course, "Team project", WorkKind.COLLECTIVE,
        due_at=timezone.now() + timedelta(days=10),
        group_mode=GroupMode.STAFF_DEFINED,
    )


@pytest.fixture
def open_collective_work(trainer, course):
    return work_service.create_work(
        trainer, course, "Free teams", WorkKind.COLLECTIVE,
        due_at=timezone.now() + timedelta(days=10),
        group_mode=GroupMode.STUDENT_DEFINED,
    )
