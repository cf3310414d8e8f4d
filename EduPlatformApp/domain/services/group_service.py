"""Domain service functions for forming groups on collective work.

Who may form groups depends on the work's group mode and is checked first
(``ensure_can_form_group``). Structural rules hold regardless of caller:
- only collective work has groups;
- group names are unique within a work;
- a group has at least one member, in the order given, without duplicates;
- a student belongs to at most one group per work (enforced by the
  ``uq_one_group_per_work`` constraint at insert time);
- members must be enrolled in the work's course;
- a group that has submitted can no longer change.
"""

import logging
from collections.abc import Iterable

from django.db import IntegrityError, transaction

from EduPlatformApp.core.access import ensure_can_form_group, is_course_staff, is_enrolled_student
from EduPlatformApp.core.choices import GroupMode
from EduPlatformApp.core.errors import (
    InvalidWorkKind, DuplicateGroupName, EmptyGroup, StudentAlreadyGrouped,
    MembershipEligibility, GroupHasSubmission, MissingName, NotAuthorized,
)
from EduPlatformApp.works.models import Work, Group, GroupMembership, Submission

logger = logging.getLogger(__name__)


def _ordered_ids(member_ids: Iterable[int]) -> list[int]:
    seen: dict[int, None] = {}
    for member_id in member_ids:
        seen.setdefault(int(member_id), None)
    return list(seen)


def _check_not_grouped(work: Work, member_ids: list[int], exclude_group: Group | None = None) -> None:
    taken = GroupMembership.objects.filter(work=work, student_id__in=member_ids)
    if exclude_group is not None:
        taken = taken.exclude(group=exclude_group)
    taken_ids = sorted(taken.values_list("student_id", flat=True))
    if taken_ids:
        raise StudentAlreadyGrouped(
            f"Students {', '.join(map(str, taken_ids))} already belong to another group of this work."
        )


def _check_eligible(work: Work, member_ids: list[int]) -> None:
    ineligible = [sid for sid in member_ids if not is_enrolled_student(sid, work.course)]
    if ineligible:
        raise MembershipEligibility(
            f"Students {', '.join(map(str, ineligible))} are not enrolled in course '{work.course.title}'."
        )


def _ensure_group_editor(actor, group: Group) -> None:
    """Staff of the course, or a member when students form their own groups."""
    if is_course_staff(actor, group.work.course):
        return
    if group.formation_mode == GroupMode.STUDENT_DEFINED and actor.id in group.member_ids:
        return
    raise NotAuthorized("Only staff or members of a student-formed group may change it.")


def _ensure_no_submission(group: Group) -> None:
    if Submission.objects.filter(group=group).exists():
        raise GroupHasSubmission()


@transaction.atomic
def create_group(actor, work: Work, name: str, member_ids: Iterable[int]) -> Group:
    """Create a group with the given members, formation mode copied from the work."""
    member_ids = _ordered_ids(member_ids)
    ensure_can_form_group(actor, work, member_ids)

    if not work.is_collective:
        raise InvalidWorkKind()
    name = (name or "").strip()
    if not name:
        raise MissingName()
    if Group.objects.filter(work=work, name=name).exists():
        raise DuplicateGroupName(f"A group named '{name}' already exists for this work.")
    if not member_ids:
        raise EmptyGroup()
    _check_not_grouped(work, member_ids)
    _check_eligible(work, member_ids)

    try:
        with transaction.atomic():
            group = Group.objects.create(
                work=work, name=name, formation_mode=work.group_mode, created_by=actor
            )
            GroupMembership.objects.bulk_create([
                GroupMembership(group=group, work=work, student_id=sid, position=i)
                for i, sid in enumerate(member_ids)
            ])
    except IntegrityError:
        # Lost a race against a concurrent insert; report whichever rule now fails.
        if Group.objects.filter(work=work, name=name).exists():
            raise DuplicateGroupName(f"A group named '{name}' already exists for this work.")
        _check_not_grouped(work, member_ids)
        raise
    logger.info("Group #%s '%s' created for work #%s with %d members", group.pk, name, work.pk, len(member_ids))
    return group


@transaction.atomic
def delete_group(actor, group: Group) -> None:
    _ensure_group_editor(actor, group)
    _ensure_no_submission(group)
    logger.info("Group #%s deleted by %s", group.pk, actor.pk)
    group.delete()


@transaction.atomic
def add_member(actor, group: Group, student_id: int) -> Group:
    _ensure_group_editor(actor, group)
    group = Group.objects.select_for_update().select_related("work__course").get(pk=group.pk)
    _ensure_no_submission(group)
    student_id = int(student_id)
    if student_id in group.member_ids:
        return group
    _check_not_grouped(group.work, [student_id])
    _check_eligible(group.work, [student_id])
    position = group.memberships.count()
    try:
        with transaction.atomic():
            GroupMembership.objects.create(group=group, work=group.work, student_id=student_id, position=position)
    except IntegrityError:
        _check_not_grouped(group.work, [student_id], exclude_group=group)
        raise
    return group


@transaction.atomic
def remove_member(actor, group: Group, student_id: int) -> Group:
    _ensure_group_editor(actor, group)
    group = Group.objects.select_for_update().select_related("work__course").get(pk=group.pk)
    _ensure_no_submission(group)
    memberships = group.memberships.all()
    if not memberships.filter(student_id=student_id).exists():
        return group
    if memberships.count() == 1:
        raise EmptyGroup("Cannot remove the last member; delete the group instead.")
    memberships.filter(student_id=student_id).delete()
    return group


def groups_for_work(work: Work):
    return work.groups.prefetch_related("memberships__student").order_by("name")
