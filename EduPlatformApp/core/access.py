"""Role & object access helpers.

The engine trusts the role carried by the actor and the enrollment facts
stored in ``CourseMembership``; every check raises ``NotAuthorized``.
"""

from typing import Any

from EduPlatformApp.courses.models import Course, CourseMembership
from EduPlatformApp.core.choices import MemberRole, GroupMode
from EduPlatformApp.core.errors import NotAuthorized


def course_from(obj: Any) -> Course | None:
    from EduPlatformApp.works.models import Work, Group, Assignment, Submission, Evaluation

    if obj is None:
        return None
    if isinstance(obj, Course):
        return obj
    if isinstance(obj, Work):
        return obj.course
    if isinstance(obj, (Group, Assignment)):
        return obj.work.course
    if isinstance(obj, Submission):
        return obj.work.course
    if isinstance(obj, Evaluation):
        return obj.submission.work.course
    return getattr(obj, "course", None)


def is_director(user) -> bool:
    return bool(user and user.is_authenticated and user.is_director)


def is_owner(user, course: Course | None) -> bool:
    return bool(user and course and course.owner_id == user.id)


def is_trainer(user, course: Course | None) -> bool:
    if not (user and course):
        return False
    return CourseMembership.objects.filter(
        course=course, user=user, role=MemberRole.TRAINER
    ).exists()


def is_course_staff(user, course: Course | None) -> bool:
    """Director, course owner, or trainer member of the course."""
    if not (user and user.is_authenticated and course):
        return False
    if user.is_student:
        return False
    return is_director(user) or is_owner(user, course) or is_trainer(user, course)


def is_enrolled_student(user_id: int, course: Course | None) -> bool:
    if not course:
        return False
    return CourseMembership.objects.filter(
        course=course, user_id=user_id, role=MemberRole.STUDENT
    ).exists()


def ensure_course_staff(actor, course: Course | None) -> None:
    if not is_course_staff(actor, course):
        raise NotAuthorized("Only staff of this course may perform this action.")


def ensure_director(actor) -> None:
    if not is_director(actor):
        raise NotAuthorized("Only a director may correct an evaluation.")


def ensure_can_form_group(actor, work, member_ids) -> None:
    """Staff form groups for STAFF_DEFINED work; enrolled students form their own for STUDENT_DEFINED work."""
    if work.group_mode == GroupMode.STUDENT_DEFINED:
        if not (actor and actor.is_student):
            raise NotAuthorized("Groups for this work are formed by students.")
        if not is_enrolled_student(actor.id, work.course):
            raise NotAuthorized("Only students enrolled in this course may form a group.")
        if actor.id not in set(member_ids):
            raise NotAuthorized("Students may only form a group they belong to.")
        return
    if not is_course_staff(actor, work.course):
        raise NotAuthorized("Groups for this work are formed by staff.")


def ensure_can_submit(actor, target) -> None:
    if not (actor and target.includes(actor)):
        raise NotAuthorized(f"You are not the owner of {target}.")


def can_view_submission(user, submission) -> bool:
    return submission.target.includes(user) or is_course_staff(user, submission.work.course)
