"""Domain service functions for course-spaces and enrollment.

Course-spaces are owned by a trainer. Enrollment (``CourseMembership`` with
role STUDENT) is what the lifecycle services consult for eligibility.
"""
from typing import Any
from django.db import transaction

from EduPlatformApp.courses.models import Course, CourseMembership
from EduPlatformApp.core.access import ensure_course_staff
from EduPlatformApp.core.choices import MemberRole
from EduPlatformApp.core.errors import NotAuthorized

@transaction.atomic
def create_course(owner, data: dict[str, Any]) -> Course:
    """Create a course-space and enroll the owner as its trainer.

    Args:
        owner: Trainer or director creating (and owning) the course.
        data: Validated payload for the Course model (title, description).

    Returns:
        The newly created Course instance.
    """
    if owner.is_student:
        raise NotAuthorized("Students cannot create course-spaces.")
    course = Course.objects.create(owner=owner, **data)
    CourseMembership.objects.create(course=course, user=owner, role=MemberRole.TRAINER, added_by=owner)
    return course

@transaction.atomic
def enroll_student(actor, course: Course, student_user) -> CourseMembership:
    """Enroll a student in the course (idempotent)."""
    ensure_course_staff(actor, course)
    membership, _ = CourseMembership.objects.get_or_create(
        course=course,
        user=student_user,
        defaults={"role": MemberRole.STUDENT, "added_by": actor},
    )
    return membership

