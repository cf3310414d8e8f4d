"""Read-side statistics over stored evaluations.

Nothing here is cached: each call reloads the evaluations and hands them to
the pure functions in ``domain.aggregation``.
"""

from EduPlatformApp.core.conf import lifecycle_settings
from EduPlatformApp.courses.models import Course
from EduPlatformApp.domain import aggregation
from EduPlatformApp.works.models import Evaluation, Group


def course_title_of(evaluation: Evaluation) -> str:
    return evaluation.submission.work.course.title


def _summary(evaluations) -> dict:
    policy = lifecycle_settings()
    return aggregation.summarize(
        evaluations, pass_mark=policy.pass_mark, buckets=policy.distribution_bands
    )


def _subjects(evaluations) -> list[dict]:
    return [
        {"course": s.course, "average": round(s.average, 2), "count": s.count}
        for s in aggregation.per_subject_averages(evaluations, course_title_of)
    ]


def course_stats(course: Course) -> dict:
    evaluations = list(Evaluation.objects.for_course(course).with_course())
    return {"course": course.title, **_summary(evaluations)}


def student_stats(student) -> dict:
    evaluations = list(Evaluation.objects.for_student(student).with_course())
    return {
        "student": student.pk,
        **_summary(evaluations),
        "subjects": _subjects(evaluations),
    }


def group_stats(group: Group) -> dict:
    evaluations = list(Evaluation.objects.filter(submission__group=group).with_course())
    return {"group": group.name, "members": len(group.member_ids), **_summary(evaluations)}


def global_stats(course: Course | None = None) -> dict:
    qs = Evaluation.objects.with_course()
    if course is not None:
        qs = qs.for_course(course)
    evaluations = list(qs)
    return {**_summary(evaluations), "subjects": _subjects(evaluations)}
