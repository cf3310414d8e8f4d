"""REST API views for works, groups, assignments, submissions, evaluations and statistics.

Views stay thin: they validate payload shape, resolve objects the caller can
see, and delegate every rule to ``EduPlatformApp.domain.services``.
"""

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404

from rest_framework import status, mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.request import Request

from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiResponse,
    OpenApiParameter,
)

from EduPlatformApp.api.mixins import PaginationMixin
from EduPlatformApp.api.permissions import (
    IsPlatformStaff,
    IsDirector,
    IsStaffOrReadOnly,
    SubmissionParticipant,
    EvaluationParticipant,
)
from EduPlatformApp.api.serializers import (
    DeadlineSerializer,
    WorkWriteSerializer,
    WorkUpdateSerializer,
    WorkReadSerializer,
    StudentIdsSerializer,
    GroupIdsSerializer,
    AssignmentSerializer,
    GroupWriteSerializer,
    GroupMemberSerializer,
    GroupReadSerializer,
    SubmissionWriteSerializer,
    SubmissionReadSerializer,
    EvaluationWriteSerializer,
    CorrectionSerializer,
    EvaluationReadSerializer,
    TargetStatusSerializer,
    StudentWorkItemSerializer,
    GradeLineSerializer,
    StatsFilterSerializer,
)
from EduPlatformApp.api.throttles import SubmissionRateThrottle
from EduPlatformApp.core.access import ensure_course_staff, is_course_staff, is_director
from EduPlatformApp.core.errors import LifecycleError, NotAuthorized
from EduPlatformApp.core.storage import store_instruction_file, store_submission_file, discard
from EduPlatformApp.courses.models import Course
from EduPlatformApp.domain.deadlines import classify_deadline
from EduPlatformApp.domain.services import (
    work_service,
    group_service,
    assignment_service,
    submission_service,
    evaluation_service,
    stats_service,
)
from EduPlatformApp.works.models import Work, Group, Assignment, Submission, Evaluation

AUTH_RESPONSES = {
    401: OpenApiResponse(description="Authentication required."),
    403: OpenApiResponse(description="Forbidden (kind NotAuthorized)."),
    404: OpenApiResponse(description="Not Found"),
}

RULE_RESPONSES = {
    400: OpenApiResponse(description="Lifecycle rule violated: {kind, detail}."),
    409: OpenApiResponse(description="State conflict: {kind, detail}."),
}

User = get_user_model()


def _submit(request: Request, target) -> Response:
    """Store the optional file, submit, and drop the file again if the submit is rejected."""
    ser = SubmissionWriteSerializer(data=request.data)
    ser.is_valid(raise_exception=True)
    attachment = ser.validated_data.get("attachment")
    file_ref = store_submission_file(attachment) if attachment else ""
    try:
        submission = submission_service.submit(
            request.user,
            target,
            content_text=ser.validated_data.get("content_text", ""),
            file_ref=file_ref,
        )
    except LifecycleError:
        discard(file_ref)
        raise
    return Response(SubmissionReadSerializer(submission).data, status=status.HTTP_201_CREATED)


SUBMIT_SCHEMA = extend_schema(
    tags=["Submissions"],
    request=SubmissionWriteSerializer,
    description=(
        "Submit or resubmit. The first call creates the submission, later calls before "
        "evaluation replace its content and timestamp; after evaluation the call fails with "
        "`AlreadyEvaluated`. Rate-limited per user."
    ),
    responses={
        201: SubmissionReadSerializer,
        429: OpenApiResponse(description="Too many requests / throttled."),
        **AUTH_RESPONSES,
        **RULE_RESPONSES,
    },
    extensions={"x-permissions": {"required_roles": ["student"], "ownership": "assignee-or-member"}},
)


# ---------- Works ----------
@extend_schema_view(
    list=extend_schema(tags=["Works"], responses={200: WorkReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Works"], responses={200: WorkReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Works"],
        request=WorkWriteSerializer,
        responses={201: WorkReadSerializer, **AUTH_RESPONSES, **RULE_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["trainer", "director"]}},
    ),
    partial_update=extend_schema(
        tags=["Works"],
        request=WorkUpdateSerializer,
        description="Kind and group mode are frozen; schedule is frozen once a submission exists.",
        responses={200: WorkReadSerializer, **AUTH_RESPONSES, **RULE_RESPONSES},
    ),
    update=extend_schema(
        tags=["Works"],
        request=WorkUpdateSerializer,
        responses={200: WorkReadSerializer, **AUTH_RESPONSES, **RULE_RESPONSES},
    ),
    destroy=extend_schema(
        tags=["Works"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES, **RULE_RESPONSES},
    ),
)
class WorkViewSet(PaginationMixin, viewsets.ModelViewSet):
    """Work definitions, distribution and delivery boards."""
    permission_classes = [IsAuthenticated, IsStaffOrReadOnly]

    def get_queryset(self):
        """Return works visible to the requesting user, soonest deadline first."""
        return (
            Work.objects.visible_to(self.request.user)
            .select_related("course", "created_by")
            .order_by("due_at", "id")
        )

    def get_serializer_class(self):
        if self.action == "create":
            return WorkWriteSerializer
        if self.action in ("update", "partial_update"):
            return WorkUpdateSerializer
        return WorkReadSerializer

    def create(self, request: Request, *args, **kwargs) -> Response:
        """Create a work via the domain service."""
        ser = WorkWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        course = get_object_or_404(Course.objects.visible_to(request.user), pk=data["course"])
        upload = data.get("instruction_upload")
        instruction_file = store_instruction_file(upload) if upload else ""
        try:
            work = work_service.create_work(
                request.user,
                course,
                title=data["title"],
                kind=data["kind"],
                due_at=data["due_at"],
                instructions=data.get("instructions", ""),
                group_mode=data.get("group_mode"),
                starts_at=data.get("starts_at"),
                instruction_file=instruction_file,
            )
        except LifecycleError:
            discard(instruction_file)
            raise
        return Response(WorkReadSerializer(work).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, *args, **kwargs) -> Response:
        work = self.get_object()
        ser = WorkUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        changes = dict(ser.validated_data)
        upload = changes.pop("instruction_upload", None)
        if upload:
            changes["instruction_file"] = store_instruction_file(upload)
        try:
            work = work_service.update_work(request.user, work, **changes)
        except LifecycleError:
            discard(changes.get("instruction_file", ""))
            raise
        return Response(WorkReadSerializer(work).data)

    def update(self, request: Request, *args, **kwargs) -> Response:
        """Alias to partial_update: every field is optional."""
        return self.partial_update(request, *args, **kwargs)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        work_service.delete_work(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Distribution"],
        request=StudentIdsSerializer,
        responses={200: AssignmentSerializer(many=True), **AUTH_RESPONSES, **RULE_RESPONSES},
    )
    @action(detail=True, methods=["post"], url_path="assign-individual")
    def assign_individual(self, request: Request, pk: int | None = None) -> Response:
        """Assign an individual work to students (idempotent)."""
        work = self.get_object()
        ser = StudentIdsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        assignments = assignment_service.assign_individual(request.user, work, ser.validated_data["student_ids"])
        return Response(AssignmentSerializer(assignments, many=True).data)

    @extend_schema(
        tags=["Distribution"],
        request=GroupIdsSerializer,
        responses={200: GroupReadSerializer(many=True), **AUTH_RESPONSES, **RULE_RESPONSES},
    )
    @action(detail=True, methods=["post"], url_path="attach-groups")
    def attach_groups(self, request: Request, pk: int | None = None) -> Response:
        """Confirm groups for a collective work."""
        work = self.get_object()
        ser = GroupIdsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        groups = assignment_service.attach_groups(request.user, work, ser.validated_data["group_ids"])
        return Response(GroupReadSerializer(groups, many=True).data)

    @extend_schema(tags=["Distribution"], responses={200: AssignmentSerializer(many=True), **AUTH_RESPONSES})
    @action(detail=True, methods=["get"], permission_classes=[IsAuthenticated, IsPlatformStaff])
    def assignments(self, request: Request, pk: int | None = None) -> Response:
        work = self.get_object()
        ensure_course_staff(request.user, work.course)
        return self.paginate_and_respond(assignment_service.assignments_for_work(work), AssignmentSerializer)

    @extend_schema(tags=["Submissions"], responses={200: TargetStatusSerializer(many=True), **AUTH_RESPONSES})
    @action(detail=True, methods=["get"], permission_classes=[IsAuthenticated, IsPlatformStaff])
    def submissions(self, request: Request, pk: int | None = None) -> Response:
        """Delivery board: every assignment or group with its state."""
        work = self.get_object()
        board = submission_service.submissions_for_work(request.user, work)
        return self.paginate_and_respond(board, TargetStatusSerializer)

    @extend_schema(tags=["Works"], responses={200: DeadlineSerializer, **AUTH_RESPONSES})
    @action(detail=True, methods=["get"])
    def deadline(self, request: Request, pk: int | None = None) -> Response:
        work = self.get_object()
        return Response(classify_deadline(work.due_at).as_dict())

    @extend_schema(tags=["Works"], responses={200: StudentWorkItemSerializer(many=True), **AUTH_RESPONSES})
    @action(detail=False, methods=["get"], permission_classes=[IsAuthenticated])
    def mine(self, request: Request) -> Response:
        """The requesting student's works with urgency and delivery state."""
        items = submission_service.works_for_student(request.user)
        return self.paginate_and_respond(items, StudentWorkItemSerializer)


# ---------- Groups ----------
@extend_schema_view(
    list=extend_schema(tags=["Groups"], responses={200: GroupReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Groups"], responses={200: GroupReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Groups"],
        request=GroupWriteSerializer,
        description="Staff form groups for STAFF_DEFINED work, enrolled students for STUDENT_DEFINED work.",
        responses={201: GroupReadSerializer, **AUTH_RESPONSES, **RULE_RESPONSES},
    ),
    destroy=extend_schema(
        tags=["Groups"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES, **RULE_RESPONSES},
    ),
)
@extend_schema(parameters=[OpenApiParameter("work_pk", int, OpenApiParameter.PATH)])
class GroupViewSet(
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Groups of a collective work."""
    permission_classes = [IsAuthenticated]
    serializer_class = GroupReadSerializer

    def get_throttles(self):
        """Apply rate throttle only on submit."""
        if self.action == "submit":
            self.throttle_classes = [SubmissionRateThrottle]
        return super().get_throttles()

    def _work(self) -> Work:
        if not hasattr(self, "_resolved_work"):
            self._resolved_work = get_object_or_404(
                Work.objects.visible_to(self.request.user).select_related("course"),
                pk=self.kwargs["work_pk"],
            )
        return self._resolved_work

    def get_queryset(self):
        return group_service.groups_for_work(self._work())

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = GroupWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        group = group_service.create_group(
            request.user, self._work(), ser.validated_data["name"], ser.validated_data["member_ids"]
        )
        return Response(GroupReadSerializer(group).data, status=status.HTTP_201_CREATED)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        group_service.delete_group(request.user, self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Groups"],
        request=GroupMemberSerializer,
        responses={200: GroupReadSerializer, **AUTH_RESPONSES, **RULE_RESPONSES},
    )
    @action(detail=True, methods=["post"], url_path="members")
    def add_member(self, request: Request, *args, **kwargs) -> Response:
        ser = GroupMemberSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        group = group_service.add_member(request.user, self.get_object(), ser.validated_data["student_id"])
        return Response(GroupReadSerializer(group).data)

    @extend_schema(
        tags=["Groups"],
        parameters=[OpenApiParameter("student_id", int, OpenApiParameter.PATH)],
        responses={200: GroupReadSerializer, **AUTH_RESPONSES, **RULE_RESPONSES},
    )
    @action(detail=True, methods=["delete"], url_path=r"members/(?P<student_id>\d+)")
    def remove_member(self, request: Request, student_id: str | None = None, *args, **kwargs) -> Response:
        group = group_service.remove_member(request.user, self.get_object(), int(student_id))
        return Response(GroupReadSerializer(group).data)

    @SUBMIT_SCHEMA
    @action(detail=True, methods=["post"])
    def submit(self, request: Request, *args, **kwargs) -> Response:
        return _submit(request, self.get_object())


# ---------- Assignments ----------
@extend_schema_view(
    list=extend_schema(tags=["Distribution"], responses={200: AssignmentSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Distribution"], responses={200: AssignmentSerializer, **AUTH_RESPONSES}),
    destroy=extend_schema(
        tags=["Distribution"],
        responses={204: OpenApiResponse(description="Removed"), **AUTH_RESPONSES, **RULE_RESPONSES},
    ),
)
class AssignmentViewSet(
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Individual assignments; students see only their own."""
    permission_classes = [IsAuthenticated]
    serializer_class = AssignmentSerializer

    def get_throttles(self):
        if self.action == "submit":
            self.throttle_classes = [SubmissionRateThrottle]
        return super().get_throttles()

    def get_queryset(self):
        user = self.request.user
        qs = Assignment.objects.select_related("work__course", "student").order_by("id")
        if user.is_student:
            return qs.filter(student=user)
        return qs.filter(work__in=Work.objects.visible_to(user))

    def perform_destroy(self, instance: Assignment) -> None:
        assignment_service.remove_assignment(self.request.user, instance)

    @SUBMIT_SCHEMA
    @action(detail=True, methods=["post"])
    def submit(self, request: Request, pk: int | None = None) -> Response:
        return _submit(request, self.get_object())


# ---------- Submissions ----------
@extend_schema_view(
    list=extend_schema(tags=["Submissions"], responses={200: SubmissionReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Submissions"], responses={200: SubmissionReadSerializer, **AUTH_RESPONSES}),
)
class SubmissionViewSet(PaginationMixin, viewsets.ReadOnlyModelViewSet):
    """Read access to submissions for their authors and course staff."""
    permission_classes = [IsAuthenticated, SubmissionParticipant]
    serializer_class = SubmissionReadSerializer

    def get_queryset(self):
        user = self.request.user
        qs = Submission.objects.select_related("assignment__work__course", "group__work__course")
        if user.is_student:
            qs = qs.for_student(user)
        else:
            qs = qs.for_staff(user)
        return qs.order_by("-submitted_at", "-id")


# ---------- Evaluations ----------
@extend_schema_view(
    list=extend_schema(tags=["Evaluations"], responses={200: EvaluationReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Evaluations"], responses={200: EvaluationReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Evaluations"],
        request=EvaluationWriteSerializer,
        description="First evaluation of a submission; a second one fails with `AlreadyEvaluated`.",
        responses={201: EvaluationReadSerializer, **AUTH_RESPONSES, **RULE_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["trainer", "director"]}},
    ),
)
class EvaluationViewSet(
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Evaluation, director correction and grade history."""
    serializer_class = EvaluationReadSerializer

    def get_permissions(self) -> list:
        if self.action == "create":
            return [IsAuthenticated(), IsPlatformStaff()]
        if self.action == "correct":
            return [IsAuthenticated(), IsDirector()]
        if self.action == "retrieve":
            return [IsAuthenticated(), EvaluationParticipant()]
        return [IsAuthenticated()]

    def get_queryset(self):
        user = self.request.user
        if user.is_student:
            return Evaluation.objects.for_student(user).with_course().order_by("-evaluated_at", "-id")
        return evaluation_service.evaluations_for_staff(user)

    def get_object(self):
        obj = get_object_or_404(Evaluation.objects.with_course(), pk=self.kwargs["pk"])
        self.check_object_permissions(self.request, obj)
        return obj

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = EvaluationWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        submission = get_object_or_404(Submission, pk=ser.validated_data["submission"])
        evaluation = evaluation_service.evaluate(
            request.user, submission, ser.validated_data["grade"], ser.validated_data["comment"]
        )
        return Response(EvaluationReadSerializer(evaluation).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Evaluations"],
        request=CorrectionSerializer,
        description="Director-only correction with mandatory reason; the original evaluator is preserved.",
        responses={200: EvaluationReadSerializer, **AUTH_RESPONSES, **RULE_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["director"]}},
    )
    @action(detail=True, methods=["post"])
    def correct(self, request: Request, pk: int | None = None) -> Response:
        evaluation = self.get_object()
        ser = CorrectionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        evaluation = evaluation_service.correct(
            request.user,
            evaluation,
            ser.validated_data["grade"],
            ser.validated_data["comment"],
            ser.validated_data["reason"],
        )
        return Response(EvaluationReadSerializer(evaluation).data)

    @extend_schema(tags=["Evaluations"], responses={200: GradeLineSerializer(many=True), **AUTH_RESPONSES})
    @action(detail=False, methods=["get"])
    def mine(self, request: Request) -> Response:
        """The requesting student's grades with band and pass flag."""
        return self.paginate_and_respond(evaluation_service.grades_for_student(request.user), GradeLineSerializer)

    @extend_schema(tags=["Evaluations"], responses={200: OpenApiResponse(description="Stored versions, oldest first.")})
    @action(detail=True, methods=["get"], permission_classes=[IsAuthenticated, IsPlatformStaff])
    def trail(self, request: Request, pk: int | None = None) -> Response:
        evaluation = self.get_object()
        ensure_course_staff(request.user, evaluation.submission.work.course)
        return Response(evaluation_service.correction_trail(evaluation))


# ---------- Statistics ----------
@extend_schema(tags=["Statistics"], responses={200: OpenApiResponse(description="Aggregated grade statistics.")})
class StatsViewSet(viewsets.ViewSet):
    """Averages, success rate, distribution and per-subject averages."""
    permission_classes = [IsAuthenticated]

    @extend_schema(parameters=[StatsFilterSerializer])
    def list(self, request: Request) -> Response:
        """Global statistics (directors), optionally narrowed to one course."""
        if not is_director(request.user):
            raise NotAuthorized("Global statistics are reserved to directors.")
        params = StatsFilterSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        course_id = params.validated_data.get("course")
        course = get_object_or_404(Course, pk=course_id) if course_id else None
        return Response(stats_service.global_stats(course))

    @action(detail=False, methods=["get"], url_path=r"course/(?P<course_id>\d+)")
    def course(self, request: Request, course_id: str | None = None) -> Response:
        course = get_object_or_404(Course, pk=course_id)
        ensure_course_staff(request.user, course)
        return Response(stats_service.course_stats(course))

    @action(detail=False, methods=["get"], url_path=r"student/(?P<student_id>\d+)")
    def student(self, request: Request, student_id: str | None = None) -> Response:
        student = get_object_or_404(User, pk=student_id)
        if student.pk != request.user.pk and request.user.is_student:
            raise NotAuthorized("Students may only view their own statistics.")
        return Response(stats_service.student_stats(student))

    @action(detail=False, methods=["get"], url_path=r"group/(?P<group_id>\d+)")
    def group(self, request: Request, group_id: str | None = None) -> Response:
        group = get_object_or_404(Group.objects.select_related("work__course"), pk=group_id)
        if request.user.pk not in group.member_ids and not is_course_staff(request.user, group.work.course):
            raise NotAuthorized("Only group members and course staff may view group statistics.")
        return Response(stats_service.group_stats(group))

    @action(detail=False, methods=["get"])
    def me(self, request: Request) -> Response:
        return Response(stats_service.student_stats(request.user))
