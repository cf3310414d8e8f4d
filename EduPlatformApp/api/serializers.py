"""Serializers for works, groups, assignments, submissions, evaluations and statistics.

Lifecycle rules (emptiness, grade range, comment, reason) are not duplicated
here: payloads are passed to the domain services, which raise the typed
``LifecycleError`` naming the violated rule.
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field

from EduPlatformApp.core.choices import WorkKind, GroupMode
from EduPlatformApp.core.storage import file_url
from EduPlatformApp.core.validators import validate_file_size, validate_attachment_mime, validate_instruction_mime
from EduPlatformApp.domain.deadlines import classify_deadline
from EduPlatformApp.domain.grading import grade_band, is_success
from EduPlatformApp.domain.targets import IndividualTarget
from EduPlatformApp.works.models import Work, Group, Assignment, Submission, Evaluation

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public, safe representation of a user."""

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "role"]


class DeadlineSerializer(serializers.Serializer):
    days_remaining = serializers.IntegerField()
    tier = serializers.CharField()


class WorkWriteSerializer(serializers.Serializer):
    """Payload for creating a work."""
    course = serializers.IntegerField(help_text="Course-space id.")
    title = serializers.CharField(allow_blank=True)
    instructions = serializers.CharField(required=False, allow_blank=True, default="")
    instruction_upload = serializers.FileField(
        required=False, allow_null=True, write_only=True,
        help_text="Optional instruction document (pdf, doc, docx, txt, zip)."
    )
    kind = serializers.ChoiceField(choices=WorkKind.choices)
    group_mode = serializers.ChoiceField(choices=GroupMode.choices, required=False, allow_null=True)
    starts_at = serializers.DateTimeField(required=False, allow_null=True)
    due_at = serializers.DateTimeField()

    def validate_instruction_upload(self, upload):
        if upload:
            validate_file_size(upload)
            validate_instruction_mime(upload)
        return upload


class WorkUpdateSerializer(serializers.Serializer):
    """Partial changes to a work; kind and group mode are accepted only to be rejected as frozen.

    A new ``instruction_upload`` replaces the instruction file, which stays
    editable after submissions arrive.
    """
    title = serializers.CharField(required=False, allow_blank=True)
    instructions = serializers.CharField(required=False, allow_blank=True)
    instruction_upload = serializers.FileField(required=False, write_only=True)
    kind = serializers.ChoiceField(choices=WorkKind.choices, required=False)
    group_mode = serializers.ChoiceField(choices=GroupMode.choices, required=False)
    starts_at = serializers.DateTimeField(required=False)
    due_at = serializers.DateTimeField(required=False)

    def validate_instruction_upload(self, upload):
        validate_file_size(upload)
        validate_instruction_mime(upload)
        return upload


class WorkReadSerializer(serializers.ModelSerializer):
    created_by = UserSerializer(read_only=True)
    deadline = serializers.SerializerMethodField()
    instruction_url = serializers.SerializerMethodField()

    class Meta:
        model = Work
        fields = [
            "id", "course", "title", "instructions", "instruction_file", "instruction_url",
            "kind", "group_mode", "starts_at", "due_at", "deadline",
            "created_by", "created_at", "updated_at",
        ]

    def get_deadline(self, obj: Work) -> dict:
        return classify_deadline(obj.due_at).as_dict()

    def get_instruction_url(self, obj: Work) -> str | None:
        return file_url(obj.instruction_file)


class StudentIdsSerializer(serializers.Serializer):
    student_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class GroupIdsSerializer(serializers.Serializer):
    group_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class AssignmentSerializer(serializers.ModelSerializer):
    student = UserSerializer(read_only=True)

    class Meta:
        model = Assignment
        fields = ["id", "work", "student", "assigned_by", "created_at"]


class GroupWriteSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True)
    member_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)


class GroupMemberSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()


class GroupReadSerializer(serializers.ModelSerializer):
    members = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = ["id", "work", "name", "formation_mode", "members", "created_by", "created_at"]

    def get_members(self, obj: Group) -> list[dict]:
        return UserSerializer(obj.members, many=True).data


class SubmissionWriteSerializer(serializers.Serializer):
    """Text and/or file delivered for an assignment or a group."""

    content_text = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        help_text="Textual answer (optional if attachment provided)."
    )
    attachment = serializers.FileField(
        required=False,
        allow_null=True,
        help_text="Optional file attachment; size/type validated."
    )

    def validate_attachment(self, attachment: object | None) -> object | None:
        """Validate attachment size and MIME if provided."""
        if attachment:
            validate_file_size(attachment)
            validate_attachment_mime(attachment)
        return attachment


class EvaluationMiniSerializer(serializers.ModelSerializer):
    class Meta:
        model = Evaluation
        fields = ["id", "grade", "comment"]


class SubmissionReadSerializer(serializers.ModelSerializer):
    """Detailed submission view including evaluation and state."""
    target_kind = serializers.SerializerMethodField()
    file_url = serializers.SerializerMethodField()
    state = serializers.CharField(read_only=True)
    evaluation = serializers.SerializerMethodField()

    class Meta:
        model = Submission
        fields = [
            "id", "target_kind", "assignment", "group", "content_text", "file_ref", "file_url",
            "submitted_by", "submitted_at", "updated_at", "is_late", "state", "evaluation",
        ]

    def get_target_kind(self, obj: Submission) -> str:
        return "individual" if obj.assignment_id else "group"

    def get_file_url(self, obj: Submission) -> str | None:
        return file_url(obj.file_ref)

    def get_evaluation(self, obj: Submission) -> dict | None:
        evaluation = Evaluation.objects.filter(submission=obj).first()
        return EvaluationMiniSerializer(evaluation).data if evaluation else None


@extend_schema_field(OpenApiTypes.NUMBER)
class GradeField(serializers.Field):
    """Grade as sent by the client; format and range are checked by ``ensure_grade``."""

    def to_internal_value(self, data):
        return data

    def to_representation(self, value):
        return str(value)


class EvaluationWriteSerializer(serializers.Serializer):
    submission = serializers.IntegerField()
    grade = GradeField()
    comment = serializers.CharField(allow_blank=True)


class CorrectionSerializer(serializers.Serializer):
    grade = GradeField()
    comment = serializers.CharField(allow_blank=True)
    reason = serializers.CharField(allow_blank=True)


class EvaluationReadSerializer(serializers.ModelSerializer):
    evaluator = UserSerializer(read_only=True)
    corrected_by = UserSerializer(read_only=True)
    band = serializers.SerializerMethodField()
    passed = serializers.SerializerMethodField()

    class Meta:
        model = Evaluation
        fields = [
            "id", "submission", "grade", "band", "passed", "comment",
            "evaluator", "evaluated_at",
            "corrected_by", "correction_reason", "corrected_at",
        ]

    def get_band(self, obj: Evaluation) -> str:
        return grade_band(obj.grade).label

    def get_passed(self, obj: Evaluation) -> bool:
        return is_success(obj.grade)


def target_ref(target) -> tuple[str, int, str]:
    """(kind, id, label) of a submission target."""
    if isinstance(target, IndividualTarget):
        return "individual", target.assignment.pk, str(target.assignment.student)
    return "group", target.group.pk, target.group.name


class TargetStatusSerializer(serializers.Serializer):
    target_kind = serializers.SerializerMethodField()
    target_id = serializers.SerializerMethodField()
    label = serializers.SerializerMethodField()
    state = serializers.CharField()
    is_late = serializers.BooleanField()
    submission = serializers.SerializerMethodField()

    def get_target_kind(self, obj) -> str:
        return target_ref(obj.target)[0]

    def get_target_id(self, obj) -> int:
        return target_ref(obj.target)[1]

    def get_label(self, obj) -> str:
        return target_ref(obj.target)[2]

    def get_submission(self, obj) -> int | None:
        return obj.submission.pk if obj.submission else None


class StudentWorkItemSerializer(serializers.Serializer):
    work = WorkReadSerializer()
    deadline = serializers.SerializerMethodField()
    state = serializers.CharField()
    submission = serializers.SerializerMethodField()
    target_kind = serializers.SerializerMethodField()
    target_id = serializers.SerializerMethodField()

    def get_deadline(self, obj) -> dict:
        return obj.deadline.as_dict()

    def get_submission(self, obj) -> int | None:
        return obj.submission.pk if obj.submission else None

    def get_target_kind(self, obj) -> str:
        return target_ref(obj.target)[0]

    def get_target_id(self, obj) -> int:
        return target_ref(obj.target)[1]


class GradeLineSerializer(serializers.Serializer):
    evaluation = EvaluationReadSerializer()
    work = serializers.SerializerMethodField()
    course = serializers.CharField(source="course_title")
    band = serializers.SerializerMethodField()
    passed = serializers.BooleanField()

    def get_work(self, obj) -> dict:
        return {"id": obj.work.pk, "title": obj.work.title}

    def get_band(self, obj) -> str:
        return obj.band.label


class StatsFilterSerializer(serializers.Serializer):
    """Query parameters of the global statistics endpoint."""
    course = serializers.IntegerField(required=False, min_value=1)
