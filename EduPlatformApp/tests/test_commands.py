from datetime import timedelta

import pytest
from django.core.management import call_command

from EduPlatformApp.domain.services import assignment_service, submission_service
from EduPlatformApp.works.models import Submission

pytestmark = pytest.mark.django_db


def test_recalculate_lateness_after_due_date_change(capsys, trainer, students, individual_work):
    [assignment] = assignment_service.assign_individual(trainer, individual_work, [students[0].id])
    sub = submission_service.submit(students[0], assignment, content_text="x")
    # Simulate an administrative move of the due date behind the submission.
    type(individual_work).objects.filter(pk=individual_work.pk).update(
        due_at=sub.submitted_at - timedelta(hours=1),
        starts_at=sub.submitted_at - timedelta(days=1),
    )
    call_command("recalculate_lateness")
    assert "Updated 1 submissions" in capsys.readouterr().out
    assert Submission.objects.get(pk=sub.pk).is_late
