from django.conf import settings
from django.db import models
from django.utils import timezone

from flow_core.workflows.enums import (
    ApprovalStatus,
    ApprovalType,
    BugSeverity,
    BugStatus,
    CorrectionStatus,
    Department,
    Priority,
    QAStatus,
    QAType,
)

from .core import DepartmentHistory, TimeStampedModel


class Correction(TimeStampedModel):
    """
    Rework request raised against one department occupancy.
    """

    history_entry = models.ForeignKey(
        DepartmentHistory,
        on_delete=models.CASCADE,
        related_name="corrections",
    )
    correction_type = models.CharField(max_length=100)
    description = models.TextField()
    priority = models.CharField(
        max_length=16,
        choices=Priority.choices,
        default=Priority.MEDIUM,
    )
    status = models.CharField(
        max_length=16,
        choices=CorrectionStatus.choices,
        default=CorrectionStatus.OPEN,
    )
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="corrections_requested",
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="corrections_assigned",
    )
    estimated_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    actual_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    resolution_notes = models.TextField(blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.correction_type} [{self.status}]"


class Approval(models.Model):
    history_entry = models.ForeignKey(
        DepartmentHistory,
        on_delete=models.CASCADE,
        related_name="approvals",
    )
    approval_type = models.CharField(max_length=32, choices=ApprovalType.choices)
    status = models.CharField(
        max_length=16,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
    )
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approvals_requested",
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approvals_reviewed",
    )
    comments = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)
    requested_at = models.DateTimeField(default=timezone.now)
    reviewed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-requested_at", "-id"]

    def __str__(self):
        return f"{self.approval_type} [{self.status}]"


class QATestingRound(models.Model):
    history_entry = models.ForeignKey(
        DepartmentHistory,
        on_delete=models.CASCADE,
        related_name="qa_rounds",
    )
    round_number = models.PositiveIntegerField()
    qa_type = models.CharField(max_length=32, choices=QAType.choices)
    status = models.CharField(
        max_length=16,
        choices=QAStatus.choices,
        default=QAStatus.IN_PROGRESS,
    )
    tester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="qa_rounds",
    )
    bugs_count = models.PositiveIntegerField(default=0)
    critical_bugs_count = models.PositiveIntegerField(default=0)
    test_results = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)
    started_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["history_entry_id", "round_number"]
        unique_together = ("history_entry", "round_number")

    def __str__(self):
        return f"Round {self.round_number} ({self.qa_type}) [{self.status}]"


class QABug(models.Model):
    qa_round = models.ForeignKey(
        QATestingRound,
        on_delete=models.CASCADE,
        related_name="bugs",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    severity = models.CharField(
        max_length=16,
        choices=BugSeverity.choices,
        default=BugSeverity.MEDIUM,
    )
    status = models.CharField(
        max_length=16,
        choices=BugStatus.choices,
        default=BugStatus.OPEN,
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="qa_bugs_assigned",
    )
    assigned_department = models.CharField(max_length=16, choices=Department.choices)
    steps_to_reproduce = models.TextField(blank=True)
    screenshot_url = models.CharField(max_length=500, blank=True)
    discovered_at = models.DateTimeField(default=timezone.now)
    fixed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-discovered_at", "-id"]

    def __str__(self):
        return f"{self.title} [{self.severity}]"
