from django.db.models import QuerySet, Q

from EduPlatformApp.core.choices import MemberRole

class CourseQuerySet(QuerySet):
    def visible_to(self, user):
        """Directors see every course; others see the ones they own or are enrolled in."""
        if not user or not user.is_authenticated:
            return self.none()
        if user.is_director:
            return self.all()
        return self.filter(Q(owner=user) | Q(memberships__user=user)).distinct()


class WorkQuerySet(QuerySet):
    def for_course(self, course):
        return self.filter(course=course)

    def visible_to(self, user):
        """
        Works visible to a user:
          - Director: all works
          - Trainer: works of courses they own or teach
          - Student: works of courses they are enrolled in
        """
        if not user or not user.is_authenticated:
            return self.none()
        if user.is_director:
            return self.all()
        return self.filter(
            Q(course__owner=user) |
            Q(course__memberships__user=user,
              course__memberships__role=MemberRole.TRAINER) |
            Q(course__memberships__user=user,
              course__memberships__role=MemberRole.STUDENT)
        ).distinct()


class SubmissionQuerySet(QuerySet):
    def for_work(self, work):
        return self.filter(Q(assignment__work=work) | Q(group__work=work))

    def for_student(self, user):
        return self.filter(
            Q(assignment__student=user) | Q(group__memberships__student=user)
        ).distinct()

    def for_staff(self, user):
        if user.is_director:
            return self.all()
        return self.filter(
            Q(assignment__work__course__owner=user) |
            Q(group__work__course__owner=user) |
            Q(assignment__work__course__memberships__user=user,
              assignment__work__course__memberships__role=MemberRole.TRAINER) |
            Q(group__work__course__memberships__user=user,
              group__work__course__memberships__role=MemberRole.TRAINER)
        ).distinct()


class EvaluationQuerySet(QuerySet):
    def for_student(self, user):
        return self.filter(
            Q(submission__assignment__student=user) |
            Q(submission__group__memberships__student=user)
        ).distinct()

    def for_course(self, course):
        return self.filter(
            Q(submission__assignment__work__course=course) |
            Q(submission__group__work__course=course)
        )

    def with_course(self):
        return self.select_related(
            "submission__assignment__work__course",
            "submission__group__work__course",
            "evaluator",
            "corrected_by",
        )
