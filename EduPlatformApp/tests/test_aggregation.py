from decimal import Decimal
from types import SimpleNamespace

import pytest

from EduPlatformApp.core.choices import GradeBand
from EduPlatformApp.core.errors import OutOfRange
from EduPlatformApp.domain import aggregation
from EduPlatformApp.domain.grading import ensure_grade, grade_band, is_success


def ev(grade, course="Algorithms"):
    return SimpleNamespace(grade=Decimal(str(grade)), course=course)


def test_reference_example():
    evals = [ev(18), ev(15), ev(9), ev(20)]
    assert aggregation.course_average(evals) == 15.5
    assert aggregation.success_rate(evals) == 75.0
    counts = [b.count for b in aggregation.distribution(evals)]
    assert counts == [1, 0, 1, 2]


def test_empty_inputs_yield_zero():
    assert aggregation.course_average([]) == 0.0
    assert aggregation.success_rate([]) == 0.0
    assert [b.count for b in aggregation.distribution([])] == [0, 0, 0, 0]
    summary = aggregation.summarize([])
    assert summary["count"] == 0
    assert summary["min"] is None


def test_band_edges_are_half_open_except_the_top():
    counts = [b.count for b in aggregation.distribution([12, 14, 16, 20, 11.99])]
    assert counts == [1, 1, 1, 2]
    labels = [b.label for b in aggregation.distribution([])]
    assert labels == ["[0, 12)", "[12, 14)", "[14, 16)", "[16, 20]"]


def test_mixed_shapes_are_flattened():
    assert aggregation.grades([ev(10), {"grade": 12}, 14]) == [10.0, 12.0, 14.0]


def test_per_subject_averages_sorted_by_course():
    evals = [ev(10, "Physics"), ev(16, "Algorithms"), ev(14, "Physics")]
    result = aggregation.per_subject_averages(evals, lambda e: e.course)
    assert [(s.course, s.average, s.count) for s in result] == [
        ("Algorithms", 16.0, 1),
        ("Physics", 12.0, 2),
    ]


def test_inputs_are_not_mutated():
    evals = [ev(18), ev(9)]
    snapshot = [e.grade for e in evals]
    aggregation.summarize(evals)
    assert [e.grade for e in evals] == snapshot


def test_grade_bands_and_pass_mark():
    assert grade_band(Decimal("16")) == GradeBand.EXCELLENT
    assert grade_band(Decimal("15.99")) == GradeBand.GOOD
    assert grade_band(Decimal("12")) == GradeBand.PASSABLE
    assert grade_band(Decimal("11.5")) == GradeBand.INSUFFICIENT
    assert is_success(Decimal("10"))
    assert not is_success(Decimal("9.99"))


def test_grades_rounded_to_hundredths_before_range_check():
    assert ensure_grade("19.996") == Decimal("20.00")
    assert ensure_grade(" 12.345 ") == Decimal("12.35")
    assert ensure_grade(7) == Decimal("7.00")
    with pytest.raises(OutOfRange):
        ensure_grade("20.005")
    with pytest.raises(OutOfRange):
        ensure_grade(True)
