"""Grade statistics derived from evaluations.

Every function here is pure: inputs are never mutated and results are
recomputed from the evaluations passed in. Inputs may mix Evaluation rows from
individual and group submissions, mappings with a ``"grade"`` key, or bare
numbers; they are flattened to one grade stream first.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from EduPlatformApp.core.conf import DEFAULT_BANDS
from EduPlatformApp.domain.grading import GRADE_MAX

PASS_MARK = 10


@dataclass(frozen=True)
class BandCount:
    low: float
    high: float
    count: int

    @property
    def label(self) -> str:
        closing = "]" if self.high >= GRADE_MAX else ")"
        return f"[{self.low:g}, {self.high:g}{closing}"


@dataclass(frozen=True)
class SubjectAverage:
    course: str
    average: float
    count: int


def _grade_of(item: Any) -> float:
    if isinstance(item, Mapping):
        return float(item["grade"])
    grade = getattr(item, "grade", item)
    return float(grade)


def grades(evaluations: Iterable[Any]) -> list[float]:
    """Flatten evaluations of any supported shape into a list of float grades."""
    return [_grade_of(e) for e in evaluations]


def course_average(evaluations: Iterable[Any]) -> float:
    values = grades(evaluations)
    if not values:
        return 0.0
    return sum(values) / len(values)


def success_rate(evaluations: Iterable[Any], pass_mark: float = PASS_MARK) -> float:
    """Percentage (0-100) of grades at or above the pass mark."""
    values = grades(evaluations)
    if not values:
        return 0.0
    passed = sum(1 for g in values if g >= pass_mark)
    return passed * 100 / len(values)


def distribution(
    evaluations: Iterable[Any],
    buckets: Iterable[tuple[float, float]] = DEFAULT_BANDS,
) -> list[BandCount]:
    """Count grades per half-open band; the band ending at the top of the scale is closed."""
    values = grades(evaluations)
    result = []
    for low, high in buckets:
        if high >= GRADE_MAX:
            count = sum(1 for g in values if low <= g <= high)
        else:
            count = sum(1 for g in values if low <= g < high)
        result.append(BandCount(low=low, high=high, count=count))
    return result


def per_subject_averages(
    evaluations: Iterable[Any],
    group_by_course: Callable[[Any], str],
) -> list[SubjectAverage]:
    """One average and count per course, sorted by course name."""
    buckets: dict[str, list[float]] = {}
    for evaluation in evaluations:
        buckets.setdefault(group_by_course(evaluation), []).append(_grade_of(evaluation))
    return [
        SubjectAverage(course=name, average=sum(vals) / len(vals), count=len(vals))
        for name, vals in sorted(buckets.items(), key=lambda kv: kv[0])
    ]


def summarize(evaluations: Iterable[Any], pass_mark: float = PASS_MARK,
              buckets: Iterable[tuple[float, float]] = DEFAULT_BANDS) -> dict:
    values = grades(evaluations)
    return {
        "count": len(values),
        "average": round(course_average(values), 2),
        "success_rate": round(success_rate(values, pass_mark), 2),
        "min": min(values) if values else None,
        "max": max(values) if values else None,
        "distribution": [
            {"band": b.label, "count": b.count} for b in distribution(values, buckets)
        ],
    }
