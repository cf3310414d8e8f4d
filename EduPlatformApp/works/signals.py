"""Lifecycle signals for notification and reporting consumers.

Services send these after the surrounding transaction commits, so receivers
only ever see persisted state. The works app logs each one.
"""

import logging
from typing import Any

from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)

# sender=Submission, submission=..., created=bool
submission_received = Signal()
# sender=Evaluation, evaluation=...
evaluation_created = Signal()
# sender=Evaluation, evaluation=..., previous_grade=Decimal, previous_comment=str
evaluation_corrected = Signal()


@receiver(submission_received)
def log_submission(sender: type, submission: Any, created: bool, **kwargs: Any) -> None:
    logger.info(
        "Submission #%s %s for %s%s",
        submission.pk,
        "received" if created else "replaced",
        submission.target,
        " (late)" if submission.is_late else "",
    )


@receiver(evaluation_created)
def log_evaluation(sender: type, evaluation: Any, **kwargs: Any) -> None:
    logger.info(
        "Submission #%s evaluated %s by %s",
        evaluation.submission_id, evaluation.grade, evaluation.evaluator_id,
    )


@receiver(evaluation_corrected)
def log_correction(sender: type, evaluation: Any, previous_grade: Any, **kwargs: Any) -> None:
    logger.info(
        "Evaluation #%s corrected %s -> %s by %s: %s",
        evaluation.pk, previous_grade, evaluation.grade,
        evaluation.corrected_by_id, evaluation.correction_reason,
    )
