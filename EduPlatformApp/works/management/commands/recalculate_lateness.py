from django.core.management.base import BaseCommand

from EduPlatformApp.domain.services.submission_service import recompute_lateness
from EduPlatformApp.works.models import Submission

class Command(BaseCommand):
    help = "Recompute is_late flags for all submissions against their work's due date."

    def handle(self, *args, **options):
        updated = 0
        subs = Submission.objects.select_related("assignment__work", "group__work")
        for sub in subs.iterator():
            if recompute_lateness(sub):
                updated += 1
        self.stdout.write(self.style.SUCCESS(f"Updated {updated} submissions"))
