"""Submission targets: a submission belongs to exactly one assignment or one group."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from EduPlatformApp.works.models import Assignment, Group, Work


@dataclass(frozen=True)
class IndividualTarget:
    assignment: Assignment

    @property
    def work(self) -> Work:
        return self.assignment.work

    def submission_filter(self) -> dict:
        return {"assignment": self.assignment}

    def includes(self, user) -> bool:
        return self.assignment.student_id == user.id

    def __str__(self) -> str:
        return f"assignment #{self.assignment.pk}"


@dataclass(frozen=True)
class GroupTarget:
    group: Group

    @property
    def work(self) -> Work:
        return self.group.work

    def submission_filter(self) -> dict:
        return {"group": self.group}

    def includes(self, user) -> bool:
        return self.group.memberships.filter(student_id=user.id).exists()

    def __str__(self) -> str:
        return f"group #{self.group.pk} ({self.group.name})"


SubmissionTarget = Union[IndividualTarget, GroupTarget]


def as_target(obj) -> SubmissionTarget:
    """Wrap an Assignment or Group (or pass through an existing target)."""
    from EduPlatformApp.works.models import Assignment, Group

    if isinstance(obj, (IndividualTarget, GroupTarget)):
        return obj
    if isinstance(obj, Assignment):
        return IndividualTarget(obj)
    if isinstance(obj, Group):
        return GroupTarget(obj)
    raise TypeError(f"Cannot submit against {type(obj).__name__}")
