from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import (
    Approval,
    AssignmentHistory,
    Correction,
    DepartmentHistory,
    Project,
    QABug,
    QATestingRound,
)

User = get_user_model()


class UserSlimSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "username", "email")
        read_only_fields = fields


# ===============================================================
# Projects
# ===============================================================

WORKFLOW_CONTROLLED = (
    "current_department",
    "project_code",
    "status",
    "owner",
    "project_coordinator",
    "pc_team_lead",
)


class ProjectSerializer(serializers.ModelSerializer):
    """
    Workflow-controlled fields are read-only; they change only through the
    workflow endpoints.
    """

    owner = UserSlimSerializer(read_only=True)

    class Meta:
        model = Project
        fields = (
            "id",
            "name",
            "category",
            "client_name",
            "current_department",
            "next_department",
            "status",
            "project_code",
            "owner",
            "project_coordinator",
            "pc_team_lead",
            "start_date",
            "target_date",
            "observations",
            "created_at",
            "updated_at",
        )
        read_only_fields = WORKFLOW_CONTROLLED + ("next_department", "created_at", "updated_at")


class ProjectCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=100)
    initial_department = serializers.CharField(required=False, default="PMO")
    next_department = serializers.CharField(required=False, allow_null=True, default=None)
    client_name = serializers.CharField(required=False, allow_blank=True, default="")
    project_coordinator = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), required=False, allow_null=True, default=None
    )
    pc_team_lead = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), required=False, allow_null=True, default=None
    )
    start_date = serializers.DateField(required=False, allow_null=True, default=None)
    target_date = serializers.DateField(required=False, allow_null=True, default=None)
    observations = serializers.CharField(required=False, allow_blank=True, default="")


# ===============================================================
# History and review records
# ===============================================================

class DepartmentHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = DepartmentHistory
        fields = (
            "id",
            "project",
            "from_department",
            "to_department",
            "work_status",
            "estimated_days",
            "actual_days",
            "work_start_date",
            "work_end_date",
            "corrections_count",
            "moved_by",
            "permission_granted_by",
            "notes",
            "created_at",
        )
        read_only_fields = fields


class CorrectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Correction
        fields = (
            "id",
            "history_entry",
            "correction_type",
            "description",
            "priority",
            "status",
            "requested_by",
            "assigned_to",
            "estimated_hours",
            "actual_hours",
            "resolution_notes",
            "resolved_at",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class ApprovalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Approval
        fields = (
            "id",
            "history_entry",
            "approval_type",
            "status",
            "requested_by",
            "reviewed_by",
            "comments",
            "rejection_reason",
            "attachments",
            "requested_at",
            "reviewed_at",
        )
        read_only_fields = fields


class QATestingRoundSerializer(serializers.ModelSerializer):
    class Meta:
        model = QATestingRound
        fields = (
            "id",
            "history_entry",
            "round_number",
            "qa_type",
            "status",
            "tester",
            "bugs_count",
            "critical_bugs_count",
            "test_results",
            "rejection_reason",
            "started_at",
            "completed_at",
        )
        read_only_fields = fields


class QABugSerializer(serializers.ModelSerializer):
    class Meta:
        model = QABug
        fields = (
            "id",
            "qa_round",
            "title",
            "description",
            "severity",
            "status",
            "assigned_to",
            "assigned_department",
            "steps_to_reproduce",
            "screenshot_url",
            "discovered_at",
            "fixed_at",
        )
        read_only_fields = fields


class AssignmentHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = AssignmentHistory
        fields = (
            "id",
            "project",
            "assignment_type",
            "previous_user",
            "new_user",
            "assigned_by",
            "reason",
            "created_at",
        )
        read_only_fields = fields
