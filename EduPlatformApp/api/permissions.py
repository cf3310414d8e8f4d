"""DRF permission classes for the work lifecycle API.

These are coarse gates on role; course-level authorization is enforced by the
domain services, which raise ``NotAuthorized``.
"""

from typing import Any

from rest_framework.permissions import BasePermission, SAFE_METHODS
from rest_framework.request import Request

from EduPlatformApp.core.access import can_view_submission, is_course_staff, course_from


def _user(request: Request):
    user = request.user
    return user if user and user.is_authenticated else None


class IsPlatformStaff(BasePermission):
    """Trainers and directors."""
    message = "Staff role required."

    def has_permission(self, request: Request, view: Any) -> bool:
        user = _user(request)
        return bool(user and user.is_platform_staff)


class IsDirector(BasePermission):
    message = "Director role required."

    def has_permission(self, request: Request, view: Any) -> bool:
        user = _user(request)
        return bool(user and user.is_director)


class IsStaffOrReadOnly(BasePermission):
    """Any authenticated user may read; writes need a staff role."""

    def has_permission(self, request: Request, view: Any) -> bool:
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        user = _user(request)
        return bool(user and user.is_platform_staff)


class SubmissionParticipant(BasePermission):
    """The submitting student or group member, or staff of the course."""

    def has_object_permission(self, request: Request, view: Any, obj: Any) -> bool:
        return can_view_submission(request.user, obj)


class EvaluationParticipant(BasePermission):
    """Students see their own evaluations; staff of the course see all of them."""

    def has_object_permission(self, request: Request, view: Any, obj: Any) -> bool:
        if obj.submission.target.includes(request.user):
            return True
        return is_course_staff(request.user, course_from(obj))
