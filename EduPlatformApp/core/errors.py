"""Typed lifecycle failures.

Every rejection raised by the domain services is a ``LifecycleError``: a DRF
``APIException`` carrying a stable ``kind`` and a message naming the rule that
was violated. Views let them propagate so DRF renders
``{"kind": ..., "detail": ...}`` with the matching status code.
"""

from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied


class LifecycleError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "LifecycleError"
    default_detail = "Lifecycle rule violated."

    def __init__(self, message: str | None = None):
        self.message = message or str(self.default_detail)
        super().__init__({"kind": self.kind, "detail": self.message}, code=self.kind)

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class ConflictError(LifecycleError):
    status_code = status.HTTP_409_CONFLICT


class InvalidWorkKind(LifecycleError):
    kind = "InvalidWorkKind"
    default_detail = "Groups can only be created for collective work."


class WorkKindMismatch(LifecycleError):
    kind = "WorkKindMismatch"
    default_detail = "Operation does not match the kind of this work."


class InvalidGroupMode(LifecycleError):
    kind = "InvalidGroupMode"
    default_detail = "Individual work requires group mode NOT_APPLICABLE; collective work requires a formation mode."


class InvalidSchedule(LifecycleError):
    kind = "InvalidSchedule"
    default_detail = "Due date must not be earlier than the start date."


class MissingTitle(LifecycleError):
    kind = "MissingTitle"
    default_detail = "Work title must not be blank."


class MissingName(LifecycleError):
    kind = "MissingName"
    default_detail = "Group name must not be blank."


class GroupWorkMismatch(LifecycleError):
    kind = "GroupWorkMismatch"
    default_detail = "Group does not belong to this work."


class FrozenField(LifecycleError):
    kind = "FrozenField"
    default_detail = "Work kind and group mode cannot change after creation."


class WorkLocked(ConflictError):
    kind = "WorkLocked"
    default_detail = "Work already has submissions; only title and instructions may change."


class DuplicateGroupName(ConflictError):
    kind = "DuplicateGroupName"
    default_detail = "A group with this name already exists for this work."


class EmptyGroup(LifecycleError):
    kind = "EmptyGroup"
    default_detail = "A group needs at least one member."


class StudentAlreadyGrouped(ConflictError):
    kind = "StudentAlreadyGrouped"
    default_detail = "A student can belong to only one group per work."


class MembershipEligibility(LifecycleError):
    kind = "MembershipEligibility"
    default_detail = "Student is not enrolled in the course of this work."


class GroupHasSubmission(ConflictError):
    kind = "GroupHasSubmission"
    default_detail = "Group already has a submission and can no longer change."


class AssignmentHasSubmission(ConflictError):
    kind = "AssignmentHasSubmission"
    default_detail = "Assignment already has a submission and cannot be removed."


class EmptySubmission(LifecycleError):
    kind = "EmptySubmission"
    default_detail = "A submission needs text content or a file."


class DeadlinePassedPolicy(LifecycleError):
    kind = "DeadlinePassedPolicy"
    default_detail = "The due date has passed and late submissions are not accepted."


class AlreadyEvaluated(ConflictError):
    kind = "AlreadyEvaluated"
    default_detail = "This submission has already been evaluated."


class OutOfRange(LifecycleError):
    kind = "OutOfRange"
    default_detail = "Grade must be between 0 and 20."


class EmptyComment(LifecycleError):
    kind = "EmptyComment"
    default_detail = "Evaluation comment must not be blank."


class MissingReason(LifecycleError):
    kind = "MissingReason"
    default_detail = "A correction requires a justification."


class NotAuthorized(LifecycleError, PermissionDenied):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "NotAuthorized"
    default_detail = "You are not allowed to perform this action."
