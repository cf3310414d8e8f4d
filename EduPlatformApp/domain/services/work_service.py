"""Domain service functions for defining works.

Rules:
- Only staff of the owning course create, edit or delete a work.
- Individual work has group mode NOT_APPLICABLE; collective work has
  STAFF_DEFINED or STUDENT_DEFINED. Neither field changes after creation.
- Due date is never earlier than start date.
- Once a submission exists only title, instructions and the instruction file
  may change, and the work can no longer be deleted.
"""

import logging
from datetime import datetime
from typing import Any

from django.db import transaction
from django.utils import timezone

from EduPlatformApp.core.access import ensure_course_staff
from EduPlatformApp.core.choices import WorkKind, GroupMode
from EduPlatformApp.core.errors import (
    InvalidGroupMode, InvalidSchedule, MissingTitle, FrozenField, WorkLocked,
)
from EduPlatformApp.courses.models import Course
from EduPlatformApp.domain.deadlines import classify_deadline, DeadlineStatus
from EduPlatformApp.works.models import Work

logger = logging.getLogger(__name__)

FROZEN_FIELDS = frozenset({"kind", "group_mode", "course"})
TEXT_FIELDS = frozenset({"title", "instructions", "instruction_file"})
SCHEDULE_FIELDS = frozenset({"starts_at", "due_at"})


def _check_group_mode(kind: str, group_mode: str | None) -> str:
    if kind not in WorkKind.values:
        raise InvalidGroupMode(f"Unknown work kind: {kind}.")
    if kind == WorkKind.INDIVIDUAL:
        if group_mode not in (None, GroupMode.NOT_APPLICABLE):
            raise InvalidGroupMode("Individual work must use group mode NOT_APPLICABLE.")
        return GroupMode.NOT_APPLICABLE
    if group_mode not in (GroupMode.STAFF_DEFINED, GroupMode.STUDENT_DEFINED):
        raise InvalidGroupMode("Collective work must be STAFF_DEFINED or STUDENT_DEFINED.")
    return group_mode


def _check_schedule(starts_at: datetime, due_at: datetime | None) -> None:
    if due_at is None:
        raise InvalidSchedule("A due date is required.")
    if due_at < starts_at:
        raise InvalidSchedule("Due date must not be earlier than the start date.")


def _check_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise MissingTitle()
    return title


@transaction.atomic
def create_work(
    actor,
    course: Course,
    title: str,
    kind: str,
    due_at: datetime,
    instructions: str = "",
    group_mode: str | None = None,
    starts_at: datetime | None = None,
    instruction_file: str = "",
) -> Work:
    """Create a work for a course-space (staff only)."""
    ensure_course_staff(actor, course)
    title = _check_title(title)
    group_mode = _check_group_mode(kind, group_mode)
    starts_at = starts_at or timezone.now()
    _check_schedule(starts_at, due_at)
    work = Work.objects.create(
        course=course,
        created_by=actor,
        title=title,
        instructions=instructions or "",
        instruction_file=instruction_file or "",
        kind=kind,
        group_mode=group_mode,
        starts_at=starts_at,
        due_at=due_at,
    )
    logger.info("Work #%s (%s, %s) created in course #%s", work.pk, kind, group_mode, course.pk)
    return work


@transaction.atomic
def update_work(actor, work: Work, **changes: Any) -> Work:
    """Apply field changes to a work, respecting frozen and locked fields."""
    ensure_course_staff(actor, work.course)
    unknown = set(changes) - FROZEN_FIELDS - TEXT_FIELDS - SCHEDULE_FIELDS
    if unknown:
        raise ValueError(f"Unknown work fields: {', '.join(sorted(unknown))}")

    work = Work.objects.select_for_update().get(pk=work.pk)
    frozen = sorted(f for f in FROZEN_FIELDS & set(changes) if changes[f] != getattr(work, f))
    if frozen:
        raise FrozenField(f"Cannot change {', '.join(frozen)} after the work is created.")

    schedule = {f: changes[f] for f in SCHEDULE_FIELDS & set(changes) if changes[f] != getattr(work, f)}
    if schedule and work.has_submissions():
        raise WorkLocked("Work already has submissions; its schedule can no longer change.")

    if "title" in changes:
        changes["title"] = _check_title(changes["title"])
    _check_schedule(schedule.get("starts_at", work.starts_at), schedule.get("due_at", work.due_at))

    updated = []
    for field in (TEXT_FIELDS | SCHEDULE_FIELDS) & set(changes):
        value = changes[field]
        if field in TEXT_FIELDS and value is None:
            value = ""
        setattr(work, field, value)
        updated.append(field)
    if updated:
        work.save(update_fields=[*updated, "updated_at"])
    return work


@transaction.atomic
def delete_work(actor, work: Work) -> None:
    ensure_course_staff(actor, work.course)
    if work.has_submissions():
        raise WorkLocked("Work already has submissions and cannot be deleted.")
    logger.info("Work #%s deleted by %s", work.pk, actor.pk)
    work.delete()


def deadline_for(work: Work, now: datetime | None = None) -> DeadlineStatus:
    return classify_deadline(work.due_at, now)
