"""Domain service functions distributing work to students.

Individual work is bound to students through one Assignment each; collective
work is bound through its groups. Calling the wrong distributor for a work's
kind fails with ``WorkKindMismatch`` before anything is written.
"""

import logging
from collections.abc import Iterable

from django.db import IntegrityError, transaction

from EduPlatformApp.core.access import ensure_course_staff, is_enrolled_student
from EduPlatformApp.core.choices import WorkKind
from EduPlatformApp.core.errors import (
    WorkKindMismatch, MembershipEligibility, AssignmentHasSubmission, GroupWorkMismatch,
)
from EduPlatformApp.works.models import Work, Assignment, Group, Submission

logger = logging.getLogger(__name__)


def _require_kind(work: Work, kind: str) -> None:
    if work.kind != kind:
        raise WorkKindMismatch(
            f"Work #{work.pk} is {work.kind.lower()}; this operation requires {kind.lower()} work."
        )


@transaction.atomic
def assign_individual(actor, work: Work, student_ids: Iterable[int]) -> list[Assignment]:
    """Create one assignment per student; students already assigned are kept as is.

    Returns the assignments for every requested student, in request order.
    """
    ensure_course_staff(actor, work.course)
    _require_kind(work, WorkKind.INDIVIDUAL)
    ids = list(dict.fromkeys(int(s) for s in student_ids))
    ineligible = [sid for sid in ids if not is_enrolled_student(sid, work.course)]
    if ineligible:
        raise MembershipEligibility(
            f"Students {', '.join(map(str, ineligible))} are not enrolled in course '{work.course.title}'."
        )

    result = []
    created_count = 0
    for sid in ids:
        try:
            with transaction.atomic():
                assignment, created = Assignment.objects.get_or_create(
                    work=work, student_id=sid, defaults={"assigned_by": actor}
                )
        except IntegrityError:
            assignment, created = Assignment.objects.get(work=work, student_id=sid), False
        created_count += int(created)
        result.append(assignment)
    logger.info("Work #%s assigned to %d students (%d new)", work.pk, len(result), created_count)
    return result


@transaction.atomic
def attach_groups(actor, work: Work, group_ids: Iterable[int]) -> list[Group]:
    """Confirm that every group belongs to the collective work; attachment is the group's work reference."""
    ensure_course_staff(actor, work.course)
    _require_kind(work, WorkKind.COLLECTIVE)
    ids = list(dict.fromkeys(int(g) for g in group_ids))
    groups = {g.pk: g for g in Group.objects.filter(pk__in=ids)}
    missing = [gid for gid in ids if gid not in groups]
    if missing:
        raise GroupWorkMismatch(f"Unknown groups: {', '.join(map(str, missing))}.")
    foreign = [gid for gid in ids if groups[gid].work_id != work.pk]
    if foreign:
        raise GroupWorkMismatch(
            f"Groups {', '.join(map(str, foreign))} belong to another work."
        )
    return [groups[gid] for gid in ids]


@transaction.atomic
def remove_assignment(actor, assignment: Assignment) -> None:
    ensure_course_staff(actor, assignment.work.course)
    if Submission.objects.filter(assignment=assignment).exists():
        raise AssignmentHasSubmission()
    logger.info("Assignment #%s removed by %s", assignment.pk, actor.pk)
    assignment.delete()


def assignments_for_work(work: Work):
    return work.assignments.select_related("student").order_by("student__last_name", "student__id")
