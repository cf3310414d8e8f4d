"""Grade scale, presentation bands and the pass mark."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from EduPlatformApp.core.choices import GradeBand
from EduPlatformApp.core.errors import OutOfRange

GRADE_MIN = 0
GRADE_MAX = 20
# Matches Evaluation.grade (decimal_places=2).
GRADE_STEP = Decimal("0.01")

# Lower bounds, checked from the top.
BAND_THRESHOLDS: tuple[tuple[float, GradeBand], ...] = (
    (16, GradeBand.EXCELLENT),
    (14, GradeBand.GOOD),
    (12, GradeBand.PASSABLE),
)


def ensure_grade(value) -> Decimal:
    """Coerce a grade to a Decimal rounded to hundredths, raising OutOfRange unless it lies in [0, 20].

    Rounding happens before the range check so the value returned is exactly
    the value stored.
    """
    if isinstance(value, bool):
        raise OutOfRange(f"Grade must be a number between {GRADE_MIN} and {GRADE_MAX}.")
    try:
        grade = Decimal(str(value).strip())
        if grade.is_finite():
            grade = grade.quantize(GRADE_STEP, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise OutOfRange(f"Grade must be a number between {GRADE_MIN} and {GRADE_MAX}.")
    if not grade.is_finite() or not (GRADE_MIN <= grade <= GRADE_MAX):
        raise OutOfRange(f"Grade must be between {GRADE_MIN} and {GRADE_MAX} (got {value}).")
    return grade


def grade_band(grade) -> GradeBand:
    value = float(grade)
    for threshold, band in BAND_THRESHOLDS:
        if value >= threshold:
            return band
    return GradeBand.INSUFFICIENT


def is_success(grade, pass_mark: float | None = None) -> bool:
    if pass_mark is None:
        from EduPlatformApp.core.conf import lifecycle_settings
        pass_mark = lifecycle_settings().pass_mark
    return float(grade) >= pass_mark
