# flow_core/serializers_workflow.py
"""
Request payloads for workflow actions.

These only check shape and types. Enum values are parsed, and every
workflow rule is enforced, by the services they feed.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class MoveDepartmentSerializer(serializers.Serializer):
    target_department = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    estimated_days = serializers.IntegerField(required=False, allow_null=True, min_value=0, default=None)


class WorkStatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()
    work_start_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    work_end_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    estimated_days = serializers.IntegerField(required=False, allow_null=True, min_value=0, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        start, end = attrs.get("work_start_date"), attrs.get("work_end_date")
        if start and end and end < start:
            raise serializers.ValidationError({"work_end_date": "Must not be before work_start_date."})
        return attrs


class CorrectionCreateSerializer(serializers.Serializer):
    correction_type = serializers.CharField(max_length=100)
    description = serializers.CharField()
    priority = serializers.CharField(required=False, default="MEDIUM")
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), required=False, allow_null=True, default=None
    )
    estimated_hours = serializers.DecimalField(
        max_digits=6, decimal_places=2, required=False, allow_null=True, default=None
    )


class CorrectionUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_null=True, default=None)
    resolution_notes = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    actual_hours = serializers.DecimalField(
        max_digits=6, decimal_places=2, required=False, allow_null=True, default=None
    )


class ApprovalRequestSerializer(serializers.Serializer):
    approval_type = serializers.CharField()
    comments = serializers.CharField(required=False, allow_blank=True, default="")
    attachments = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class ApprovalSubmitSerializer(serializers.Serializer):
    status = serializers.CharField()
    comments = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


class QAStartSerializer(serializers.Serializer):
    qa_type = serializers.CharField()
    tester = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), required=False, allow_null=True, default=None
    )


class QACompleteSerializer(serializers.Serializer):
    status = serializers.CharField()
    bugs_count = serializers.IntegerField(required=False, min_value=0, default=0)
    critical_bugs_count = serializers.IntegerField(required=False, min_value=0, default=0)
    test_results = serializers.CharField(required=False, allow_blank=True, default="")
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


class QABugCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    severity = serializers.CharField(required=False, default="MEDIUM")
    steps_to_reproduce = serializers.CharField(required=False, allow_blank=True, default="")
    screenshot_url = serializers.CharField(required=False, allow_blank=True, default="")
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), required=False, allow_null=True, default=None
    )


class ManagerReviewRequestSerializer(serializers.Serializer):
    comments = serializers.CharField(required=False, allow_blank=True, default="")


class ManagerReviewSubmitSerializer(serializers.Serializer):
    decision = serializers.CharField()
    comments = serializers.CharField(required=False, allow_blank=True, default="")


class ReassignSerializer(serializers.Serializer):
    assignment_type = serializers.CharField()
    new_user_id = serializers.IntegerField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ProjectStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    reason = serializers.CharField()
